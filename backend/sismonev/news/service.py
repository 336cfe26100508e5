"""News service: visibility rules, publish gate and counters."""

import logging

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from sismonev.core.config import get_settings
from sismonev.core.errors import Forbidden, NotFound
from sismonev.core.models import ELEVATED_ROLES, NewsArticle, NewsStatus, User, UserRole
from sismonev.core.pagination import page_offset
from sismonev.news.images import normalize_image_input, to_full_image_url
from sismonev.news.schemas import NewsCreate, NewsUpdate
from sismonev.workflow.transitions import NewsTransition, apply_news_transition

logger = logging.getLogger(__name__)
settings = get_settings()


def _image_url(raw) -> str | None:
    return to_full_image_url(settings.BASE_URL, normalize_image_input(raw))


def _is_owner(article: NewsArticle, user: User) -> bool:
    return article.author_id is not None and article.author_id == user.id


def can_view(article: NewsArticle, user: User | None) -> bool:
    """Published and active articles are public; others only for elevated roles or the author."""
    if article.status == NewsStatus.publish and article.is_active:
        return True
    if user is None:
        return False
    return user.role in ELEVATED_ROLES or _is_owner(article, user)


def _filtered(q, search: str | None, category: str | None):
    if search:
        pattern = f"%{search}%"
        q = q.where(
            or_(
                NewsArticle.title.ilike(pattern),
                NewsArticle.content.ilike(pattern),
                NewsArticle.category.ilike(pattern),
            )
        )
    if category and category != "all":
        q = q.where(NewsArticle.category == category)
    return q


async def _page(db: AsyncSession, q, page: int, limit: int) -> tuple[list[NewsArticle], int]:
    total = (await db.execute(select(func.count()).select_from(q.subquery()))).scalar_one()
    result = await db.execute(
        q.order_by(NewsArticle.created_at.desc(), NewsArticle.id.desc())
        .offset(page_offset(page, limit))
        .limit(limit)
    )
    return list(result.unique().scalars().all()), total


async def list_news(
    db: AsyncSession,
    user: User | None,
    status: NewsStatus | None = None,
    search: str | None = None,
    category: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[NewsArticle], int]:
    """Anonymous: published only. Elevated: any status. ORG_ADMIN: published plus own."""
    q = select(NewsArticle).where(NewsArticle.is_active == True)  # noqa: E712
    if user is None:
        q = q.where(NewsArticle.status == NewsStatus.publish)
    else:
        if user.role not in ELEVATED_ROLES:
            q = q.where(
                or_(NewsArticle.status == NewsStatus.publish, NewsArticle.author_id == user.id)
            )
        if status is not None:
            q = q.where(NewsArticle.status == status)
    return await _page(db, _filtered(q, search, category), page, limit)


async def list_admin_news(
    db: AsyncSession,
    status: NewsStatus | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[NewsArticle], int, dict[str, int]]:
    """Every status plus per-status counts of active articles."""
    q = select(NewsArticle).where(NewsArticle.is_active == True)  # noqa: E712
    if status is not None:
        q = q.where(NewsArticle.status == status)
    items, total = await _page(db, _filtered(q, search, None), page, limit)
    counts = await db.execute(
        select(NewsArticle.status, func.count())
        .where(NewsArticle.is_active == True)  # noqa: E712
        .group_by(NewsArticle.status)
    )
    status_counts = {s.value: 0 for s in NewsStatus}
    for st, n in counts.all():
        status_counts[st.value] = n
    return items, total, status_counts


async def get_article(db: AsyncSession, article_id: int) -> NewsArticle:
    result = await db.execute(select(NewsArticle).where(NewsArticle.id == article_id))
    article = result.unique().scalar_one_or_none()
    if not article:
        raise NotFound("News article not found")
    return article


async def get_visible_article(db: AsyncSession, article_id: int, user: User | None) -> NewsArticle:
    """Load an article the caller may see; hidden ones are reported as NotFound."""
    article = await get_article(db, article_id)
    if not can_view(article, user):
        raise NotFound("News article not found")
    return article


async def create_article(db: AsyncSession, user: User, data: NewsCreate) -> NewsArticle:
    """Create as draft. Requested ``publish`` goes through the publish transition."""
    wants_publish = data.status == NewsStatus.publish
    if wants_publish and user.role != UserRole.SUPER_ADMIN:
        raise Forbidden("Only a super admin can publish news")
    article = NewsArticle(
        title=data.title.strip(),
        content=data.content,
        excerpt=data.excerpt or "",
        image=_image_url(data.image),
        author_id=user.id,
        status=NewsStatus.draft,
        source=user.organization_name if user.role == UserRole.ORG_ADMIN else None,
        category=data.category,
        is_active=True,
    )
    db.add(article)
    await db.flush()
    logger.info("News article id=%s created by user id=%s", article.id, user.id)
    if wants_publish:
        apply_news_transition(article, NewsTransition.publish, user)
        await db.flush()
    return article


def ensure_owner_or_super_admin(article: NewsArticle, user: User) -> None:
    if user.role != UserRole.SUPER_ADMIN and not _is_owner(article, user):
        raise Forbidden("Only the author or a super admin can modify this article")


async def update_article(
    db: AsyncSession, article: NewsArticle, user: User, data: NewsUpdate
) -> NewsArticle:
    """Apply an update; a status change is routed through the state machine."""
    ensure_owner_or_super_admin(article, user)
    if data.status == NewsStatus.publish and user.role != UserRole.SUPER_ADMIN:
        logger.warning(
            "Publish via update rejected: article id=%s user id=%s", article.id, user.id
        )
        raise Forbidden("Only a super admin can publish news")
    if data.status is not None and data.status != article.status:
        transition = (
            NewsTransition.publish if data.status == NewsStatus.publish
            else NewsTransition.return_draft
        )
        apply_news_transition(article, transition, user)

    fields = data.model_dump(exclude_unset=True, exclude={"status", "image"})
    for key, value in fields.items():
        if value is None:
            continue
        setattr(article, key, value.strip() if key == "title" else value)
    if "image" in data.model_fields_set:
        article.image = _image_url(data.image)
    await db.flush()
    logger.info("News article id=%s updated by user id=%s", article.id, user.id)
    return article


async def delete_article(db: AsyncSession, article: NewsArticle, user: User) -> None:
    ensure_owner_or_super_admin(article, user)
    article_id = article.id
    await db.delete(article)
    await db.flush()
    logger.info("News article id=%s deleted by user id=%s", article_id, user.id)


async def increment_counter(db: AsyncSession, article_id: int, column: str) -> None:
    """Atomic ``column = column + 1`` at the database."""
    col = getattr(NewsArticle, column)
    await db.execute(
        update(NewsArticle)
        .where(NewsArticle.id == article_id)
        .values({column: col + 1})
        .execution_options(synchronize_session=False)
    )
