"""FAQ API routes."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sismonev.auth.dependencies import get_current_user_optional, require_permission
from sismonev.auth.permissions import Action, Module, has_permission
from sismonev.core.database import get_db
from sismonev.core.models import User
from sismonev.faqs.schemas import FAQCreate, FAQResponse, FAQUpdate, ReorderRequest, ReorderResult
from sismonev.faqs.service import (
    create_faq,
    delete_faq,
    get_faq,
    list_faqs,
    reorder_faqs,
    toggle_faq,
    update_faq,
)

router = APIRouter(prefix="/faqs", tags=["faqs"])


@router.get("", response_model=list[FAQResponse])
async def list_active(
    category: str | None = Query(None),
    search: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Active FAQs (public)."""
    return await list_faqs(db, category, search, is_active=True)


@router.get("/all", response_model=list[FAQResponse])
async def list_every(
    category: str | None = Query(None),
    search: str | None = Query(None),
    is_active: bool | None = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Module.faq, Action.read)),
):
    """All FAQs including inactive ones."""
    return await list_faqs(db, category, search, is_active=is_active)


@router.put("/reorder", response_model=ReorderResult)
async def reorder(
    body: ReorderRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Module.faq, Action.update)),
):
    updated = await reorder_faqs(db, body.ids)
    await db.commit()
    return ReorderResult(updated=updated)


@router.post("", response_model=FAQResponse, status_code=status.HTTP_201_CREATED)
async def create(
    body: FAQCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Module.faq, Action.create)),
):
    faq = await create_faq(db, current_user, body)
    await db.commit()
    await db.refresh(faq)
    return faq


@router.get("/{faq_id}", response_model=FAQResponse)
async def get_one(
    faq_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User | None = Depends(get_current_user_optional),
):
    """Inactive FAQs are only visible with faq:read."""
    active_only = not has_permission(current_user, Module.faq, Action.read)
    return await get_faq(db, faq_id, active_only=active_only)


@router.put("/{faq_id}", response_model=FAQResponse)
async def update(
    faq_id: int,
    body: FAQUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Module.faq, Action.update)),
):
    faq = await update_faq(db, await get_faq(db, faq_id), current_user, body)
    await db.commit()
    await db.refresh(faq)
    return faq


@router.delete("/{faq_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete(
    faq_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Module.faq, Action.delete)),
):
    await delete_faq(db, await get_faq(db, faq_id), current_user)
    await db.commit()


@router.patch("/{faq_id}/toggle", response_model=FAQResponse)
async def toggle(
    faq_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Module.faq, Action.update)),
):
    faq = await toggle_faq(db, await get_faq(db, faq_id))
    await db.commit()
    await db.refresh(faq)
    return faq
