"""News API routes."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sismonev.auth.dependencies import (
    get_current_user_optional,
    require_permission,
    require_super_admin,
)
from sismonev.auth.permissions import Action, Module
from sismonev.core.database import get_db
from sismonev.core.errors import ValidationError
from sismonev.core.models import NewsStatus, User
from sismonev.core.pagination import clamp_limit, page_count
from sismonev.news.schemas import (
    LikeResponse,
    NewsAdminList,
    NewsCreate,
    NewsList,
    NewsResponse,
    NewsUpdate,
)
from sismonev.news.service import (
    create_article,
    delete_article,
    get_article,
    get_visible_article,
    increment_counter,
    list_admin_news,
    list_news,
    update_article,
)
from sismonev.workflow.transitions import NewsTransition, apply_news_transition

router = APIRouter(prefix="/news", tags=["news"])


def _parse_status(value: str | None) -> NewsStatus | None:
    if not value or value == "all":
        return None
    try:
        return NewsStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid status: {value}") from None


@router.get("/admin", response_model=NewsAdminList)
async def admin_list(
    status_filter: str | None = Query(None, alias="status"),
    search: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_super_admin),
):
    """All statuses with per-status counts (super admin)."""
    limit = clamp_limit(limit)
    items, total, counts = await list_admin_news(db, _parse_status(status_filter), search, page, limit)
    return NewsAdminList(
        items=[NewsResponse.model_validate(a) for a in items],
        total=total,
        page=page,
        limit=limit,
        pages=page_count(total, limit),
        status_counts=counts,
    )


@router.get("", response_model=NewsList)
async def list_all(
    status_filter: str | None = Query(None, alias="status"),
    search: str | None = Query(None),
    category: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: User | None = Depends(get_current_user_optional),
):
    """Published news for everyone; drafts only for elevated roles and their authors."""
    limit = clamp_limit(limit)
    items, total = await list_news(db, current_user, _parse_status(status_filter), search, category, page, limit)
    return NewsList(
        items=[NewsResponse.model_validate(a) for a in items],
        total=total,
        page=page,
        limit=limit,
        pages=page_count(total, limit),
    )


@router.post("", response_model=NewsResponse, status_code=status.HTTP_201_CREATED)
async def create(
    body: NewsCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Module.news, Action.create)),
):
    """Create a news article (draft unless a super admin publishes it)."""
    article = await create_article(db, current_user, body)
    await db.commit()
    await db.refresh(article)
    return article


@router.get("/{article_id}", response_model=NewsResponse)
async def get_one(
    article_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User | None = Depends(get_current_user_optional),
):
    """Read one article and count the view."""
    article = await get_visible_article(db, article_id, current_user)
    await increment_counter(db, article.id, "views")
    await db.commit()
    await db.refresh(article)
    return article


@router.post("/{article_id}/like", response_model=LikeResponse)
async def like(
    article_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User | None = Depends(get_current_user_optional),
):
    article = await get_visible_article(db, article_id, current_user)
    await increment_counter(db, article.id, "likes")
    await db.commit()
    await db.refresh(article)
    return LikeResponse(id=article.id, likes=article.likes)


@router.put("/{article_id}", response_model=NewsResponse)
async def update(
    article_id: int,
    body: NewsUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Module.news, Action.update)),
):
    """Update (author or super admin). Only a super admin may set status to publish."""
    article = await get_article(db, article_id)
    article = await update_article(db, article, current_user, body)
    await db.commit()
    await db.refresh(article)
    return article


@router.delete("/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete(
    article_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Module.news, Action.delete)),
):
    article = await get_article(db, article_id)
    await delete_article(db, article, current_user)
    await db.commit()


@router.post("/{article_id}/publish", response_model=NewsResponse)
async def publish(
    article_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_super_admin),
):
    article = await get_article(db, article_id)
    apply_news_transition(article, NewsTransition.publish, current_user)
    await db.commit()
    await db.refresh(article)
    return article


@router.post("/{article_id}/return-draft", response_model=NewsResponse)
async def return_draft(
    article_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_super_admin),
):
    article = await get_article(db, article_id)
    apply_news_transition(article, NewsTransition.return_draft, current_user)
    await db.commit()
    await db.refresh(article)
    return article
