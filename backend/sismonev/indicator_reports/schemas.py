"""Pydantic schemas for indicator reports."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from sismonev.core.models import AchievementCategory, ReportStatus


class YearRecordIn(BaseModel):
    """One year of an indicator; target/actual accept numbers, numeric strings or "-"."""

    year: int = Field(..., ge=1900, le=2100)
    target: float | str | None = None
    actual: float | str | None = None
    note: str | None = None


class IndicatorIn(BaseModel):
    name: str | None = None
    target_unit: str | None = None
    resource_count: float | str | None = 0
    year_records: list[YearRecordIn] = Field(default_factory=list)


class IndicatorReportCreate(BaseModel):
    """Create/replace payload. Status and approval fields are never accepted here."""

    organization_id: str | None = None
    organization_name: str | None = None
    program: str | None = None
    indicators: list[IndicatorIn] = Field(default_factory=list)


class IndicatorReportUpdate(IndicatorReportCreate):
    pass


class YearRecordResponse(BaseModel):
    year: int
    target: float
    actual: float
    percentage: int
    category: AchievementCategory
    note: str | None

    class Config:
        from_attributes = True


class IndicatorResponse(BaseModel):
    id: int
    name: str
    target_unit: str
    resource_count: int
    year_records: list[YearRecordResponse]

    class Config:
        from_attributes = True


class IndicatorReportResponse(BaseModel):
    """Indicator report in API responses."""

    id: int
    organization_id: str
    organization_name: str
    program: str
    total_resource_count: int
    status: ReportStatus
    approved_by_id: int | None
    approved_at: datetime | None
    rejection_reason: str | None
    submitted_at: datetime | None
    is_active: bool
    created_by_id: int | None
    updated_by_id: int | None
    created_at: datetime | None
    updated_at: datetime | None
    indicators: list[IndicatorResponse]

    class Config:
        from_attributes = True


class IndicatorReportList(BaseModel):
    items: list[IndicatorReportResponse]
    total: int
    page: int
    limit: int
    pages: int


class BulkUpdateFields(BaseModel):
    """Fields a bulk update may touch."""

    program: str | None = Field(None, min_length=1, max_length=500)
    is_active: bool | None = None


class BulkRequest(BaseModel):
    operation: Literal["delete", "update"]
    ids: list[int] = Field(..., min_length=1)
    update: BulkUpdateFields | None = None


class BulkResult(BaseModel):
    operation: str
    affected: int


class RejectRequest(BaseModel):
    reason: str | None = None


class StatusChangeRequest(BaseModel):
    """Target status; ``submitted`` is accepted as ``pending``."""

    status: str
    reason: str | None = None


class BulkStatusRequest(StatusChangeRequest):
    ids: list[int] = Field(..., min_length=1)


class BulkFailure(BaseModel):
    id: int
    error: str
    detail: str


class BulkStatusResult(BaseModel):
    requested: int
    succeeded: int
    failed: list[BulkFailure]


class YearsResponse(BaseModel):
    years: list[int]
