"""FAQ CRUD and ordering."""

import logging

from sqlalchemy import String, cast, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from sismonev.core.errors import NotFound
from sismonev.core.models import FAQ, User
from sismonev.faqs.schemas import FAQCreate, FAQUpdate

logger = logging.getLogger(__name__)


async def list_faqs(
    db: AsyncSession,
    category: str | None = None,
    search: str | None = None,
    is_active: bool | None = True,
) -> list[FAQ]:
    """FAQs ordered for display; ``is_active=None`` returns every FAQ."""
    q = select(FAQ)
    if is_active is not None:
        q = q.where(FAQ.is_active == is_active)
    if category and category != "all":
        q = q.where(FAQ.category == category)
    if search:
        pattern = f"%{search}%"
        q = q.where(
            or_(
                FAQ.question.ilike(pattern),
                FAQ.answer.ilike(pattern),
                cast(FAQ.tags, String).ilike(pattern),
            )
        )
    result = await db.execute(q.order_by(FAQ.sort_order.asc(), FAQ.created_at.desc()))
    return list(result.scalars().all())


async def get_faq(db: AsyncSession, faq_id: int, active_only: bool = False) -> FAQ:
    q = select(FAQ).where(FAQ.id == faq_id)
    if active_only:
        q = q.where(FAQ.is_active == True)  # noqa: E712
    faq = (await db.execute(q)).scalar_one_or_none()
    if not faq:
        raise NotFound("FAQ not found")
    return faq


async def create_faq(db: AsyncSession, user: User, data: FAQCreate) -> FAQ:
    faq = FAQ(**data.model_dump(), created_by_id=user.id)
    db.add(faq)
    await db.flush()
    logger.info("FAQ id=%s created by user id=%s", faq.id, user.id)
    return faq


async def update_faq(db: AsyncSession, faq: FAQ, user: User, data: FAQUpdate) -> FAQ:
    for key, value in data.model_dump(exclude_unset=True).items():
        if value is None and key != "tags":
            continue
        setattr(faq, key, value)
    await db.flush()
    logger.info("FAQ id=%s updated by user id=%s", faq.id, user.id)
    return faq


async def delete_faq(db: AsyncSession, faq: FAQ, user: User) -> None:
    faq_id = faq.id
    await db.delete(faq)
    await db.flush()
    logger.info("FAQ id=%s deleted by user id=%s", faq_id, user.id)


async def toggle_faq(db: AsyncSession, faq: FAQ) -> FAQ:
    faq.is_active = not faq.is_active
    await db.flush()
    return faq


async def reorder_faqs(db: AsyncSession, ids: list[int]) -> int:
    """Assign sort_order 1..n following ``ids``. Unknown ids raise NotFound."""
    ordered = list(dict.fromkeys(ids))
    result = await db.execute(select(FAQ).where(FAQ.id.in_(ordered)))
    by_id = {f.id: f for f in result.scalars().all()}
    missing = [i for i in ordered if i not in by_id]
    if missing:
        raise NotFound(f"FAQ not found: {', '.join(str(i) for i in missing)}")
    for position, faq_id in enumerate(ordered, start=1):
        by_id[faq_id].sort_order = position
    await db.flush()
    return len(ordered)
