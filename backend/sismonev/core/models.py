"""SQLAlchemy models for the PAUD HI reporting and content backend."""

import enum
from datetime import datetime
from sqlalchemy import (
    String,
    Text,
    Boolean,
    Integer,
    Float,
    DateTime,
    ForeignKey,
    Enum,
    JSON,
    Column,
)
from sqlalchemy.orm import relationship
from sismonev.core.database import Base


def utc_now():
    """Return current UTC datetime."""
    return datetime.utcnow()


class UserRole(str, enum.Enum):
    """User role enumeration."""

    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    ORG_ADMIN = "ORG_ADMIN"

    @classmethod
    def parse(cls, value: "str | UserRole") -> "UserRole":
        """Resolve a role, accepting legacy names (admin_utama, admin_kl) and any casing."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().upper()
        key = _LEGACY_ROLE_NAMES.get(key, key)
        return cls(key)


_LEGACY_ROLE_NAMES = {
    "ADMIN_UTAMA": "SUPER_ADMIN",
    "ADMIN_KL": "ORG_ADMIN",
}

ELEVATED_ROLES = (UserRole.SUPER_ADMIN, UserRole.ADMIN)


class ReportStatus(str, enum.Enum):
    """Approval state of an indicator report."""

    draft = "draft"
    pending = "pending"
    approved = "approved"
    rejected = "rejected"

    @classmethod
    def parse(cls, value: "str | ReportStatus") -> "ReportStatus":
        """Resolve a status; ``submitted`` is the legacy name of ``pending``."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        if key == "submitted":
            return cls.pending
        return cls(key)


class AchievementCategory(str, enum.Enum):
    """Derived outcome of one indicator year."""

    ACHIEVED = "ACHIEVED"
    NOT_ACHIEVED = "NOT_ACHIEVED"
    NOT_REPORTED = "NOT_REPORTED"


class NewsStatus(str, enum.Enum):
    """Publication state of a news article."""

    draft = "draft"
    publish = "publish"


class ResourceType(str, enum.Enum):
    """Learning resource kind."""

    guide = "guide"
    video = "video"
    tool = "tool"


class User(Base):
    """User (actor) with role, organization affiliation and per-module permissions."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.ORG_ADMIN)
    # K/L catalog code; required for ORG_ADMIN
    organization_id = Column(String(50), nullable=True, index=True)
    organization_name = Column(String(255), nullable=True)
    # {module: {create, read, update, delete}} over all five modules
    permissions = Column(JSON, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)


class IndicatorReport(Base):
    """One ministry's program-level indicator report (RAN PAUD record)."""

    __tablename__ = "indicator_reports"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(String(50), nullable=False, index=True)
    organization_name = Column(String(255), nullable=False)
    program = Column(String(500), nullable=False)
    # Sum of indicators' resource_count, recomputed on every save
    total_resource_count = Column(Integer, nullable=False, default=0)
    status = Column(Enum(ReportStatus), nullable=False, default=ReportStatus.draft, index=True)
    approved_by_id = Column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    approved_at = Column(DateTime, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    submitted_at = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_by_id = Column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    updated_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    indicators = relationship(
        "Indicator",
        back_populates="report",
        lazy="selectin",
        order_by="Indicator.sort_order",
        cascade="all, delete-orphan",
    )


class Indicator(Base):
    """Named metric tracked yearly within a report."""

    __tablename__ = "indicators"

    id = Column(Integer, primary_key=True, index=True)
    report_id = Column(
        Integer, ForeignKey("indicator_reports.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(Text, nullable=False)
    target_unit = Column(String(255), nullable=False, default="Unit")
    resource_count = Column(Integer, nullable=False, default=0)
    sort_order = Column(Integer, default=0)

    report = relationship("IndicatorReport", back_populates="indicators")
    year_records = relationship(
        "YearRecord",
        back_populates="indicator",
        lazy="selectin",
        order_by="YearRecord.sort_order",
        cascade="all, delete-orphan",
    )


class YearRecord(Base):
    """One year's target/actual with derived percentage and category."""

    __tablename__ = "indicator_year_records"

    id = Column(Integer, primary_key=True, index=True)
    indicator_id = Column(
        Integer, ForeignKey("indicators.id", ondelete="CASCADE"), nullable=False, index=True
    )
    year = Column(Integer, nullable=False, index=True)
    target = Column(Float, nullable=False, default=0)
    actual = Column(Float, nullable=False, default=0)
    percentage = Column(Integer, nullable=False, default=0)
    category = Column(Enum(AchievementCategory), nullable=False, default=AchievementCategory.NOT_REPORTED)
    note = Column(Text, nullable=True)
    sort_order = Column(Integer, default=0)

    indicator = relationship("Indicator", back_populates="year_records")


class NewsArticle(Base):
    """News article with draft/publish workflow."""

    __tablename__ = "news_articles"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(500), nullable=False, index=True)
    content = Column(Text, nullable=False)
    excerpt = Column(Text, nullable=False, default="")
    image = Column(String(2048), nullable=True)
    author_id = Column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    status = Column(Enum(NewsStatus), nullable=False, default=NewsStatus.draft, index=True)
    approved_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    published_at = Column(DateTime, nullable=True, index=True)
    # Author's organization name when the author is an ORG_ADMIN; never client-supplied
    source = Column(String(255), nullable=True, index=True)
    category = Column(String(100), nullable=False, default="general", index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    views = Column(Integer, nullable=False, default=0)
    likes = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    author = relationship("User", foreign_keys=[author_id], lazy="joined")


class LearningResource(Base):
    """Learning library item (guide, video or tool), owned by an organization."""

    __tablename__ = "learning_resources"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    resource_type = Column(Enum(ResourceType), nullable=False, index=True)
    category = Column(String(100), nullable=False, index=True)
    author = Column(String(100), nullable=False)
    age_group = Column(String(10), nullable=True)
    aspect = Column(String(50), nullable=True)
    tags = Column(JSON, nullable=True)
    stakeholder = Column(String(100), nullable=True)
    thumbnail = Column(String(2048), nullable=True)
    publish_date = Column(DateTime, default=utc_now)
    organization_id = Column(String(50), nullable=True, index=True)
    organization_name = Column(String(255), nullable=True)
    # Type-specific fields
    pages = Column(Integer, nullable=True)
    pdf_url = Column(String(2048), nullable=True)
    youtube_id = Column(String(11), nullable=True)
    duration = Column(String(10), nullable=True)
    format = Column(String(100), nullable=True)
    features = Column(JSON, nullable=True)
    usage = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    views = Column(Integer, nullable=False, default=0)
    downloads = Column(Integer, nullable=False, default=0)
    likes = Column(Integer, nullable=False, default=0)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    updated_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)


class FAQ(Base):
    """Frequently asked question."""

    __tablename__ = "faqs"

    id = Column(Integer, primary_key=True, index=True)
    question = Column(Text, nullable=False)
    answer = Column(Text, nullable=False)
    category = Column(String(100), nullable=False, default="general", index=True)
    tags = Column(JSON, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)
