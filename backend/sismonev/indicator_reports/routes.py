"""Indicator report API routes."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sismonev.auth.dependencies import get_current_user, get_current_user_optional, require_elevated
from sismonev.auth.scope import EntityType, validate_data_access
from sismonev.core.database import get_db
from sismonev.core.errors import NotFound
from sismonev.core.models import IndicatorReport, User
from sismonev.core.pagination import clamp_limit, page_count
from sismonev.indicator_reports.schemas import (
    BulkRequest,
    BulkResult,
    BulkStatusRequest,
    BulkStatusResult,
    IndicatorReportCreate,
    IndicatorReportList,
    IndicatorReportResponse,
    IndicatorReportUpdate,
    RejectRequest,
    StatusChangeRequest,
    YearsResponse,
)
from sismonev.indicator_reports.service import (
    bulk_change_status,
    bulk_operation,
    change_status,
    create_report,
    delete_report,
    get_public_report,
    get_report,
    list_pending,
    list_public_reports,
    list_public_years,
    list_reports,
    update_report,
)
from sismonev.workflow.transitions import ReportTransition, apply_report_transition

router = APIRouter(prefix="/indicator-reports", tags=["indicator-reports"])

scoped_report = validate_data_access(EntityType.indicator_report)


def _page(items, total: int, page: int, limit: int) -> IndicatorReportList:
    return IndicatorReportList(
        items=[IndicatorReportResponse.model_validate(r) for r in items],
        total=total,
        page=page,
        limit=limit,
        pages=page_count(total, limit),
    )


async def _load_or_404(db: AsyncSession, record_id: int) -> IndicatorReport:
    report = await get_report(db, record_id)
    if not report:
        raise NotFound("Indicator report not found")
    return report


@router.get("/public", response_model=IndicatorReportList)
async def list_public(
    search: str | None = Query(None),
    status_filter: str | None = Query(None, alias="status"),
    organization_id: str | None = Query(None),
    year: int | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: User | None = Depends(get_current_user_optional),
):
    """Approved reports; elevated callers may see and filter every status."""
    limit = clamp_limit(limit)
    items, total = await list_public_reports(
        db, current_user, search, status_filter, organization_id, year, page, limit
    )
    return _page(items, total, page, limit)


@router.get("/public/{record_id}", response_model=IndicatorReportResponse)
async def get_public(record_id: int, db: AsyncSession = Depends(get_db)):
    return await get_public_report(db, record_id)


@router.get("/years/public", response_model=YearsResponse)
async def public_years(db: AsyncSession = Depends(get_db)):
    """Years present in approved reports, newest first."""
    return YearsResponse(years=await list_public_years(db))


@router.get("/pending", response_model=IndicatorReportList)
async def pending(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_elevated),
):
    """Reports awaiting approval."""
    limit = clamp_limit(limit)
    items, total = await list_pending(db, page, limit)
    return _page(items, total, page, limit)


@router.post("/bulk", response_model=BulkResult)
async def bulk(
    body: BulkRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Bulk delete/update. A single foreign-organization id rejects the whole batch."""
    affected = await bulk_operation(db, current_user, body)
    await db.commit()
    return BulkResult(operation=body.operation, affected=affected)


@router.patch("/bulk-status", response_model=BulkStatusResult)
async def bulk_status(
    body: BulkStatusRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_elevated),
):
    """Best-effort status change over many reports."""
    result = await bulk_change_status(db, current_user, body.ids, body.status, body.reason)
    await db.commit()
    return result


@router.get("", response_model=IndicatorReportList)
async def list_all(
    search: str | None = Query(None),
    status_filter: str | None = Query(None, alias="status"),
    organization_id: str | None = Query(None),
    year: int | None = Query(None),
    include_inactive: bool = Query(False),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List reports; org admins only ever see their own organization."""
    limit = clamp_limit(limit)
    items, total = await list_reports(
        db, current_user, search, status_filter, organization_id, year,
        include_inactive, page, limit,
    )
    return _page(items, total, page, limit)


@router.post("", response_model=IndicatorReportResponse, status_code=status.HTTP_201_CREATED)
async def create(
    body: IndicatorReportCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a report (always draft)."""
    report = await create_report(db, current_user, body)
    await db.commit()
    await db.refresh(report)
    return report


@router.get("/{record_id}", response_model=IndicatorReportResponse)
async def get_one(report: IndicatorReport = Depends(scoped_report)):
    return report


@router.put("/{record_id}", response_model=IndicatorReportResponse)
async def update(
    body: IndicatorReportUpdate,
    report: IndicatorReport = Depends(scoped_report),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Replace program and indicators. Status is changed only through transitions."""
    report = await update_report(db, report, current_user, body)
    await db.commit()
    await db.refresh(report)
    return report


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete(
    report: IndicatorReport = Depends(scoped_report),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await delete_report(db, report, current_user)
    await db.commit()


@router.post("/{record_id}/submit", response_model=IndicatorReportResponse)
async def submit(
    report: IndicatorReport = Depends(scoped_report),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Submit for approval (creator or elevated role)."""
    apply_report_transition(report, ReportTransition.submit, current_user)
    await db.commit()
    await db.refresh(report)
    return report


@router.post("/{record_id}/approve", response_model=IndicatorReportResponse)
async def approve(
    record_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_elevated),
):
    report = await _load_or_404(db, record_id)
    apply_report_transition(report, ReportTransition.approve, current_user)
    await db.commit()
    await db.refresh(report)
    return report


@router.post("/{record_id}/reject", response_model=IndicatorReportResponse)
async def reject(
    record_id: int,
    body: RejectRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_elevated),
):
    report = await _load_or_404(db, record_id)
    apply_report_transition(report, ReportTransition.reject, current_user, body.reason)
    await db.commit()
    await db.refresh(report)
    return report


@router.post("/{record_id}/return-draft", response_model=IndicatorReportResponse)
async def return_draft(
    record_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_elevated),
):
    report = await _load_or_404(db, record_id)
    apply_report_transition(report, ReportTransition.return_draft, current_user)
    await db.commit()
    await db.refresh(report)
    return report


@router.patch("/{record_id}/status", response_model=IndicatorReportResponse)
async def patch_status(
    record_id: int,
    body: StatusChangeRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_elevated),
):
    """Move a report to the requested status through the matching transition."""
    report = await _load_or_404(db, record_id)
    change_status(report, current_user, body.status, body.reason)
    await db.commit()
    await db.refresh(report)
    return report
