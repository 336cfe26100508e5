"""Indicator report CRUD, bulk operations and workflow transitions with organization scope."""

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from sismonev.auth.scope import (
    EntityType,
    apply_scope,
    load_bulk_records,
    resolve_write_organization,
    restrict_to_own_organization,
)
from sismonev.core.errors import AppError, NotFound, ValidationError
from sismonev.core.models import (
    ELEVATED_ROLES,
    Indicator,
    IndicatorReport,
    ReportStatus,
    User,
    YearRecord,
)
from sismonev.core.pagination import page_offset
from sismonev.indicator_reports.calculations import (
    derive_year_values,
    normalize_target_unit,
    to_resource_count,
    total_resource_count,
)
from sismonev.indicator_reports.schemas import (
    BulkFailure,
    BulkRequest,
    BulkStatusResult,
    IndicatorIn,
    IndicatorReportCreate,
)
from sismonev.workflow.transitions import (
    REPORT_TRANSITION_FOR_STATUS,
    apply_report_transition,
)

logger = logging.getLogger(__name__)


def parse_status(value: str) -> ReportStatus:
    """Parse a status filter or target; ``submitted`` means ``pending``."""
    try:
        return ReportStatus.parse(value)
    except ValueError:
        raise ValidationError(f"Invalid status: {value}") from None


def _build_indicators(items: list[IndicatorIn]) -> list[Indicator]:
    if not items:
        raise ValidationError("At least one indicator is required")
    indicators = []
    for i, item in enumerate(items):
        name = (item.name or "").strip()
        if not name:
            raise ValidationError(f"Indicator #{i + 1}: indicator name is required")
        indicator = Indicator(
            name=name,
            target_unit=normalize_target_unit(item.target_unit),
            resource_count=to_resource_count(item.resource_count),
            sort_order=i,
        )
        for j, yr in enumerate(item.year_records):
            target, actual, percentage, category = derive_year_values(yr.target, yr.actual)
            indicator.year_records.append(
                YearRecord(
                    year=yr.year,
                    target=target,
                    actual=actual,
                    percentage=percentage,
                    category=category,
                    note=yr.note,
                    sort_order=j,
                )
            )
        indicators.append(indicator)
    return indicators


def _resolve_payload(user: User, data: IndicatorReportCreate) -> tuple[str, str, str, list[Indicator]]:
    org_id, org_name = resolve_write_organization(user, data.organization_id, data.organization_name)
    program = (data.program or "").strip()
    if not org_id or not program:
        raise ValidationError("Organization and program are required")
    return org_id, org_name, program, _build_indicators(data.indicators)


async def list_reports(
    db: AsyncSession,
    user: User,
    search: str | None = None,
    status: str | None = None,
    organization_id: str | None = None,
    year: int | None = None,
    include_inactive: bool = False,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[IndicatorReport], int]:
    """Scope-filtered list with search, status, organization and year filters."""
    if organization_id:
        # naming another organization is Forbidden for an org admin
        organization_id = restrict_to_own_organization(user, organization_id)
    q = apply_scope(select(IndicatorReport), IndicatorReport, user)
    return await _paginate(
        db, q, search, status, organization_id, year, include_inactive, page, limit
    )


async def list_public_reports(
    db: AsyncSession,
    user: User | None,
    search: str | None = None,
    status: str | None = None,
    organization_id: str | None = None,
    year: int | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[IndicatorReport], int]:
    """Approved reports only, unless the caller is authenticated with an elevated role."""
    if user is None or user.role not in ELEVATED_ROLES:
        status = ReportStatus.approved.value
    q = select(IndicatorReport)
    return await _paginate(db, q, search, status, organization_id, year, False, page, limit)


async def _paginate(db, q, search, status, organization_id, year, include_inactive, page, limit):
    if not include_inactive:
        q = q.where(IndicatorReport.is_active == True)  # noqa: E712
    if search:
        pattern = f"%{search}%"
        q = q.where(
            or_(
                IndicatorReport.program.ilike(pattern),
                IndicatorReport.organization_name.ilike(pattern),
            )
        )
    if status and status != "all":
        q = q.where(IndicatorReport.status == parse_status(status))
    if organization_id:
        q = q.where(IndicatorReport.organization_id == organization_id)
    if year is not None:
        q = q.where(
            IndicatorReport.id.in_(
                select(Indicator.report_id)
                .join(YearRecord, YearRecord.indicator_id == Indicator.id)
                .where(YearRecord.year == year)
            )
        )
    total = (await db.execute(select(func.count()).select_from(q.subquery()))).scalar_one()
    result = await db.execute(
        q.order_by(IndicatorReport.created_at.desc(), IndicatorReport.id.desc())
        .offset(page_offset(page, limit))
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def get_report(db: AsyncSession, report_id: int) -> IndicatorReport | None:
    result = await db.execute(select(IndicatorReport).where(IndicatorReport.id == report_id))
    return result.scalar_one_or_none()


async def get_public_report(db: AsyncSession, report_id: int) -> IndicatorReport:
    """Approved and active report by id; NotFound otherwise."""
    result = await db.execute(
        select(IndicatorReport).where(
            IndicatorReport.id == report_id,
            IndicatorReport.status == ReportStatus.approved,
            IndicatorReport.is_active == True,  # noqa: E712
        )
    )
    report = result.scalar_one_or_none()
    if not report:
        raise NotFound("Indicator report not found")
    return report


async def list_public_years(db: AsyncSession) -> list[int]:
    """Distinct years present in approved reports, newest first."""
    result = await db.execute(
        select(YearRecord.year)
        .join(Indicator, YearRecord.indicator_id == Indicator.id)
        .join(IndicatorReport, Indicator.report_id == IndicatorReport.id)
        .where(
            IndicatorReport.status == ReportStatus.approved,
            IndicatorReport.is_active == True,  # noqa: E712
        )
        .distinct()
        .order_by(YearRecord.year.desc())
    )
    return [row[0] for row in result.all()]


async def create_report(db: AsyncSession, user: User, data: IndicatorReportCreate) -> IndicatorReport:
    """Create a report in ``draft``; org_admin writes are attributed to their own organization."""
    org_id, org_name, program, indicators = _resolve_payload(user, data)
    report = IndicatorReport(
        organization_id=org_id,
        organization_name=org_name,
        program=program,
        status=ReportStatus.draft,
        is_active=True,
        created_by_id=user.id,
        updated_by_id=user.id,
    )
    report.indicators = indicators
    report.total_resource_count = total_resource_count(i.resource_count for i in indicators)
    db.add(report)
    await db.flush()
    logger.info(
        "Indicator report id=%s created by user id=%s (org=%s)", report.id, user.id, org_id
    )
    return report


async def update_report(
    db: AsyncSession, report: IndicatorReport, user: User, data: IndicatorReportCreate
) -> IndicatorReport:
    """Replace the editable content; status and approval fields are left alone."""
    org_id, org_name, program, indicators = _resolve_payload(user, data)
    report.organization_id = org_id
    report.organization_name = org_name
    report.program = program
    report.indicators.clear()
    await db.flush()
    report.indicators.extend(indicators)
    report.total_resource_count = total_resource_count(i.resource_count for i in indicators)
    report.updated_by_id = user.id
    await db.flush()
    logger.info("Indicator report id=%s updated by user id=%s", report.id, user.id)
    return report


async def delete_report(db: AsyncSession, report: IndicatorReport, user: User) -> None:
    report_id = report.id
    await db.delete(report)
    await db.flush()
    logger.info("Indicator report id=%s deleted by user id=%s", report_id, user.id)


async def bulk_operation(db: AsyncSession, user: User, body: BulkRequest) -> int:
    """Delete or update a batch. Ownership of every id is verified before any write."""
    records = await load_bulk_records(db, EntityType.indicator_report, body.ids, user)
    ids = [r.id for r in records]
    if body.operation == "delete":
        for record in records:
            await db.delete(record)
    else:
        fields = body.update.model_dump(exclude_unset=True, exclude_none=True) if body.update else {}
        if not fields:
            raise ValidationError("No fields to update")
        for record in records:
            for key, value in fields.items():
                setattr(record, key, value)
            record.updated_by_id = user.id
    await db.flush()
    logger.info(
        "Bulk %s on %d indicator reports by user id=%s (org=%s)",
        body.operation, len(ids), user.id, user.organization_id,
    )
    return len(ids)


async def list_pending(db: AsyncSession, page: int = 1, limit: int = 10) -> tuple[list[IndicatorReport], int]:
    q = select(IndicatorReport).where(
        IndicatorReport.status == ReportStatus.pending,
        IndicatorReport.is_active == True,  # noqa: E712
    )
    total = (await db.execute(select(func.count()).select_from(q.subquery()))).scalar_one()
    result = await db.execute(
        q.order_by(IndicatorReport.submitted_at.desc())
        .offset(page_offset(page, limit))
        .limit(limit)
    )
    return list(result.scalars().all()), total


def change_status(
    report: IndicatorReport, user: User, status: str, reason: str | None = None
) -> IndicatorReport:
    """Route a requested target status through the state machine."""
    transition = REPORT_TRANSITION_FOR_STATUS[parse_status(status)]
    return apply_report_transition(report, transition, user, reason)


async def bulk_change_status(
    db: AsyncSession, user: User, ids: list[int], status: str, reason: str | None = None
) -> BulkStatusResult:
    """Best-effort status change: every id is attempted, failures are reported per id."""
    transition = REPORT_TRANSITION_FOR_STATUS[parse_status(status)]
    unique_ids = list(dict.fromkeys(ids))
    result = await db.execute(select(IndicatorReport).where(IndicatorReport.id.in_(unique_ids)))
    by_id = {r.id: r for r in result.scalars().all()}
    failed: list[BulkFailure] = []
    succeeded = 0
    for report_id in unique_ids:
        report = by_id.get(report_id)
        try:
            if report is None:
                raise NotFound("Indicator report not found")
            apply_report_transition(report, transition, user, reason)
            succeeded += 1
        except AppError as exc:
            failed.append(BulkFailure(id=report_id, error=exc.kind, detail=str(exc.detail)))
    await db.flush()
    logger.info(
        "Bulk %s by user id=%s: %d requested, %d succeeded, %d failed",
        transition.value, user.id, len(unique_ids), succeeded, len(failed),
    )
    return BulkStatusResult(requested=len(unique_ids), succeeded=succeeded, failed=failed)
