"""Learning resource API routes."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sismonev.auth.dependencies import get_current_user_optional, require_permission
from sismonev.auth.permissions import Action, Module, authorize_permission
from sismonev.auth.scope import EntityType, load_scoped_record
from sismonev.core.database import get_db
from sismonev.core.models import ResourceType, User
from sismonev.core.pagination import clamp_limit, page_count
from sismonev.learning_resources.schemas import (
    BulkRequest,
    BulkResult,
    LearningResourceCreate,
    LearningResourceList,
    LearningResourceResponse,
    LearningResourceUpdate,
    StatsRequest,
    StatsResponse,
)
from sismonev.learning_resources.service import (
    bulk_operation,
    create_resource,
    delete_resource,
    get_resource,
    get_visible_resource,
    increment_stat,
    list_popular,
    list_resources,
    toggle_resource,
    update_resource,
)

router = APIRouter(prefix="/learning-resources", tags=["learning-resources"])

can_create = require_permission(Module.learningResources, Action.create)
can_update = require_permission(Module.learningResources, Action.update)
can_delete = require_permission(Module.learningResources, Action.delete)


@router.get("", response_model=LearningResourceList)
async def list_all(
    resource_type: ResourceType | None = Query(None, alias="type"),
    category: str | None = Query(None),
    aspect: str | None = Query(None),
    search: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
):
    """Active resources (public)."""
    limit = clamp_limit(limit)
    items, total = await list_resources(db, resource_type, category, aspect, search, page, limit)
    return LearningResourceList(
        items=[LearningResourceResponse.model_validate(r) for r in items],
        total=total,
        page=page,
        limit=limit,
        pages=page_count(total, limit),
    )


@router.get("/popular", response_model=list[LearningResourceResponse])
async def popular(
    resource_type: ResourceType | None = Query(None, alias="type"),
    limit: int | None = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
):
    """Most viewed, downloaded and liked active resources."""
    return await list_popular(db, resource_type, clamp_limit(limit))


@router.post("", response_model=LearningResourceResponse, status_code=status.HTTP_201_CREATED)
async def create(
    body: LearningResourceCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_create),
):
    resource = await create_resource(db, current_user, body)
    await db.commit()
    await db.refresh(resource)
    return resource


@router.post("/bulk", response_model=BulkResult)
async def bulk(
    body: BulkRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_update),
):
    """Bulk delete/activate/deactivate; deletion also needs the delete grant."""
    if body.operation == "delete":
        authorize_permission(current_user, Module.learningResources, Action.delete)
    affected = await bulk_operation(db, current_user, body.operation, body.ids)
    await db.commit()
    return BulkResult(operation=body.operation, affected=affected)


@router.get("/{resource_id}", response_model=LearningResourceResponse)
async def get_one(
    resource_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User | None = Depends(get_current_user_optional),
):
    return await get_visible_resource(db, resource_id, current_user)


@router.put("/{resource_id}", response_model=LearningResourceResponse)
async def update(
    resource_id: int,
    body: LearningResourceUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_update),
):
    resource = await load_scoped_record(db, EntityType.learning_resource, resource_id, current_user)
    resource = await update_resource(db, resource, current_user, body)
    await db.commit()
    await db.refresh(resource)
    return resource


@router.delete("/{resource_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete(
    resource_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_delete),
):
    resource = await load_scoped_record(db, EntityType.learning_resource, resource_id, current_user)
    await delete_resource(db, resource, current_user)
    await db.commit()


@router.patch("/{resource_id}/toggle", response_model=LearningResourceResponse)
async def toggle(
    resource_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_update),
):
    """Flip the active flag."""
    resource = await load_scoped_record(db, EntityType.learning_resource, resource_id, current_user)
    resource = await toggle_resource(db, resource, current_user)
    await db.commit()
    await db.refresh(resource)
    return resource


@router.post("/{resource_id}/stats", response_model=StatsResponse)
async def stats(
    resource_id: int,
    body: StatsRequest,
    db: AsyncSession = Depends(get_db),
):
    """Count a view, download or like."""
    await increment_stat(db, resource_id, body.type)
    await db.commit()
    resource = await get_resource(db, resource_id)
    await db.refresh(resource)
    return resource
