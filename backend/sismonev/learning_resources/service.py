"""Learning resource library: CRUD with organization scope, bulk actions and counters."""

import logging

from sqlalchemy import String, cast, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from sismonev.auth.scope import (
    EntityType,
    check_record_access,
    load_bulk_records,
    resolve_write_organization,
)
from sismonev.core.errors import AppError, NotFound
from sismonev.core.models import ELEVATED_ROLES, LearningResource, ResourceType, User
from sismonev.core.pagination import page_offset
from sismonev.learning_resources.schemas import LearningResourceBase, LearningResourceUpdate

logger = logging.getLogger(__name__)

STAT_COLUMNS = {"view": "views", "download": "downloads", "like": "likes"}

_CONTENT_FIELDS = (
    "title", "description", "resource_type", "category", "author", "age_group",
    "aspect", "tags", "stakeholder", "thumbnail", "pages", "pdf_url", "youtube_id",
    "duration", "format", "features", "usage",
)


def _apply_content(resource: LearningResource, data: LearningResourceBase) -> None:
    for field in _CONTENT_FIELDS:
        setattr(resource, field, getattr(data, field))
    # Type-specific fields of other types are cleared
    if resource.resource_type != ResourceType.guide:
        resource.pages = None
        resource.pdf_url = None
    if resource.resource_type != ResourceType.video:
        resource.youtube_id = None
        resource.duration = None
    if resource.resource_type != ResourceType.tool:
        resource.format = None
        resource.features = None
        resource.usage = None


async def list_resources(
    db: AsyncSession,
    resource_type: ResourceType | None = None,
    category: str | None = None,
    aspect: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[LearningResource], int]:
    """Active resources, newest first."""
    q = select(LearningResource).where(LearningResource.is_active == True)  # noqa: E712
    if resource_type is not None:
        q = q.where(LearningResource.resource_type == resource_type)
    if category:
        q = q.where(LearningResource.category.ilike(f"%{category}%"))
    if aspect:
        q = q.where(LearningResource.aspect == aspect)
    if search:
        pattern = f"%{search}%"
        q = q.where(
            or_(
                LearningResource.title.ilike(pattern),
                LearningResource.description.ilike(pattern),
                cast(LearningResource.tags, String).ilike(pattern),
            )
        )
    total = (await db.execute(select(func.count()).select_from(q.subquery()))).scalar_one()
    result = await db.execute(
        q.order_by(LearningResource.created_at.desc(), LearningResource.id.desc())
        .offset(page_offset(page, limit))
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def list_popular(
    db: AsyncSession, resource_type: ResourceType | None = None, limit: int = 10
) -> list[LearningResource]:
    q = select(LearningResource).where(LearningResource.is_active == True)  # noqa: E712
    if resource_type is not None:
        q = q.where(LearningResource.resource_type == resource_type)
    result = await db.execute(
        q.order_by(
            LearningResource.views.desc(),
            LearningResource.downloads.desc(),
            LearningResource.likes.desc(),
        ).limit(limit)
    )
    return list(result.scalars().all())


async def get_resource(db: AsyncSession, resource_id: int) -> LearningResource:
    result = await db.execute(select(LearningResource).where(LearningResource.id == resource_id))
    resource = result.scalar_one_or_none()
    if not resource:
        raise NotFound("Learning resource not found")
    return resource


async def get_visible_resource(
    db: AsyncSession, resource_id: int, user: User | None
) -> LearningResource:
    """Active resources are public; inactive ones only within the caller's scope."""
    resource = await get_resource(db, resource_id)
    if resource.is_active:
        return resource
    if user is None:
        raise NotFound("Learning resource not found")
    if user.role not in ELEVATED_ROLES:
        try:
            check_record_access(user, resource)
        except AppError:
            raise NotFound("Learning resource not found") from None
    return resource


async def create_resource(
    db: AsyncSession, user: User, data: LearningResourceBase
) -> LearningResource:
    org_id, org_name = resolve_write_organization(user, data.organization_id, data.organization_name)
    resource = LearningResource(
        organization_id=org_id,
        organization_name=org_name,
        is_active=True,
        created_by_id=user.id,
        updated_by_id=user.id,
    )
    _apply_content(resource, data)
    db.add(resource)
    await db.flush()
    logger.info(
        "Learning resource id=%s created by user id=%s (org=%s)", resource.id, user.id, org_id
    )
    return resource


async def update_resource(
    db: AsyncSession, resource: LearningResource, user: User, data: LearningResourceUpdate
) -> LearningResource:
    # an elevated edit that names no organization keeps the current owner
    if data.organization_id or user.role not in ELEVATED_ROLES:
        resource.organization_id, resource.organization_name = resolve_write_organization(
            user, data.organization_id, data.organization_name
        )
    _apply_content(resource, data)
    if data.is_active is not None:
        resource.is_active = data.is_active
    resource.updated_by_id = user.id
    await db.flush()
    logger.info("Learning resource id=%s updated by user id=%s", resource.id, user.id)
    return resource


async def delete_resource(db: AsyncSession, resource: LearningResource, user: User) -> None:
    resource_id = resource.id
    await db.delete(resource)
    await db.flush()
    logger.info("Learning resource id=%s deleted by user id=%s", resource_id, user.id)


async def toggle_resource(db: AsyncSession, resource: LearningResource, user: User) -> LearningResource:
    resource.is_active = not resource.is_active
    resource.updated_by_id = user.id
    await db.flush()
    logger.info(
        "Learning resource id=%s %s by user id=%s",
        resource.id, "activated" if resource.is_active else "deactivated", user.id,
    )
    return resource


async def bulk_operation(db: AsyncSession, user: User, operation: str, ids: list[int]) -> int:
    """Delete, activate or deactivate a batch after whole-batch ownership validation."""
    records = await load_bulk_records(db, EntityType.learning_resource, ids, user)
    for record in records:
        if operation == "delete":
            await db.delete(record)
        else:
            record.is_active = operation == "activate"
            record.updated_by_id = user.id
    await db.flush()
    logger.info(
        "Bulk %s on %d learning resources by user id=%s (org=%s)",
        operation, len(records), user.id, user.organization_id,
    )
    return len(records)


async def increment_stat(db: AsyncSession, resource_id: int, stat: str) -> None:
    """Atomic counter increment on an active resource."""
    column = STAT_COLUMNS[stat]
    col = getattr(LearningResource, column)
    result = await db.execute(
        update(LearningResource)
        .where(LearningResource.id == resource_id, LearningResource.is_active == True)  # noqa: E712
        .values({column: col + 1})
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFound("Learning resource not found")
