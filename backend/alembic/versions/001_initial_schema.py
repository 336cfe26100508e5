"""Initial schema: users, indicator reports, news, learning resources, FAQs.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum("SUPER_ADMIN", "ADMIN", "ORG_ADMIN", name="userrole")
report_status = sa.Enum("draft", "pending", "approved", "rejected", name="reportstatus")
achievement_category = sa.Enum(
    "ACHIEVED", "NOT_ACHIEVED", "NOT_REPORTED", name="achievementcategory"
)
news_status = sa.Enum("draft", "publish", name="newsstatus")
resource_type = sa.Enum("guide", "video", "tool", name="resourcetype")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("organization_id", sa.String(50), nullable=True),
        sa.Column("organization_name", sa.String(255), nullable=True),
        sa.Column("permissions", sa.JSON(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_username"), "users", ["username"], unique=True)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_organization_id"), "users", ["organization_id"], unique=False)

    op.create_table(
        "indicator_reports",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("organization_id", sa.String(50), nullable=False),
        sa.Column("organization_name", sa.String(255), nullable=False),
        sa.Column("program", sa.String(500), nullable=False),
        sa.Column("total_resource_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", report_status, nullable=False),
        sa.Column("approved_by_id", sa.Integer(), nullable=True),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("submitted_at", sa.DateTime(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_by_id", sa.Integer(), nullable=True),
        sa.Column("updated_by_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["approved_by_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["updated_by_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_indicator_reports_id"), "indicator_reports", ["id"], unique=False)
    op.create_index(
        op.f("ix_indicator_reports_organization_id"), "indicator_reports", ["organization_id"], unique=False
    )
    op.create_index(op.f("ix_indicator_reports_status"), "indicator_reports", ["status"], unique=False)
    op.create_index(
        op.f("ix_indicator_reports_approved_by_id"), "indicator_reports", ["approved_by_id"], unique=False
    )
    op.create_index(
        op.f("ix_indicator_reports_created_by_id"), "indicator_reports", ["created_by_id"], unique=False
    )

    op.create_table(
        "indicators",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("report_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("target_unit", sa.String(255), nullable=False),
        sa.Column("resource_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("sort_order", sa.Integer(), nullable=True, server_default="0"),
        sa.ForeignKeyConstraint(["report_id"], ["indicator_reports.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_indicators_id"), "indicators", ["id"], unique=False)
    op.create_index(op.f("ix_indicators_report_id"), "indicators", ["report_id"], unique=False)

    op.create_table(
        "indicator_year_records",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("indicator_id", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("target", sa.Float(), nullable=False, server_default="0"),
        sa.Column("actual", sa.Float(), nullable=False, server_default="0"),
        sa.Column("percentage", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("category", achievement_category, nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=True, server_default="0"),
        sa.ForeignKeyConstraint(["indicator_id"], ["indicators.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_indicator_year_records_id"), "indicator_year_records", ["id"], unique=False)
    op.create_index(
        op.f("ix_indicator_year_records_indicator_id"), "indicator_year_records", ["indicator_id"], unique=False
    )
    op.create_index(op.f("ix_indicator_year_records_year"), "indicator_year_records", ["year"], unique=False)

    op.create_table(
        "news_articles",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("excerpt", sa.Text(), nullable=False, server_default=""),
        sa.Column("image", sa.String(2048), nullable=True),
        sa.Column("author_id", sa.Integer(), nullable=True),
        sa.Column("status", news_status, nullable=False),
        sa.Column("approved_by_id", sa.Integer(), nullable=True),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("published_at", sa.DateTime(), nullable=True),
        sa.Column("source", sa.String(255), nullable=True),
        sa.Column("category", sa.String(100), nullable=False, server_default="general"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("likes", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["approved_by_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_news_articles_id"), "news_articles", ["id"], unique=False)
    op.create_index(op.f("ix_news_articles_title"), "news_articles", ["title"], unique=False)
    op.create_index(op.f("ix_news_articles_author_id"), "news_articles", ["author_id"], unique=False)
    op.create_index(op.f("ix_news_articles_status"), "news_articles", ["status"], unique=False)
    op.create_index(op.f("ix_news_articles_published_at"), "news_articles", ["published_at"], unique=False)
    op.create_index(op.f("ix_news_articles_source"), "news_articles", ["source"], unique=False)
    op.create_index(op.f("ix_news_articles_category"), "news_articles", ["category"], unique=False)

    op.create_table(
        "learning_resources",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("resource_type", resource_type, nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("author", sa.String(100), nullable=False),
        sa.Column("age_group", sa.String(10), nullable=True),
        sa.Column("aspect", sa.String(50), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("stakeholder", sa.String(100), nullable=True),
        sa.Column("thumbnail", sa.String(2048), nullable=True),
        sa.Column("publish_date", sa.DateTime(), nullable=True),
        sa.Column("organization_id", sa.String(50), nullable=True),
        sa.Column("organization_name", sa.String(255), nullable=True),
        sa.Column("pages", sa.Integer(), nullable=True),
        sa.Column("pdf_url", sa.String(2048), nullable=True),
        sa.Column("youtube_id", sa.String(11), nullable=True),
        sa.Column("duration", sa.String(10), nullable=True),
        sa.Column("format", sa.String(100), nullable=True),
        sa.Column("features", sa.JSON(), nullable=True),
        sa.Column("usage", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("downloads", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("likes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_by_id", sa.Integer(), nullable=True),
        sa.Column("updated_by_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["updated_by_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_learning_resources_id"), "learning_resources", ["id"], unique=False)
    op.create_index(
        op.f("ix_learning_resources_resource_type"), "learning_resources", ["resource_type"], unique=False
    )
    op.create_index(op.f("ix_learning_resources_category"), "learning_resources", ["category"], unique=False)
    op.create_index(
        op.f("ix_learning_resources_organization_id"), "learning_resources", ["organization_id"], unique=False
    )

    op.create_table(
        "faqs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("answer", sa.Text(), nullable=False),
        sa.Column("category", sa.String(100), nullable=False, server_default="general"),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_by_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_faqs_id"), "faqs", ["id"], unique=False)
    op.create_index(op.f("ix_faqs_category"), "faqs", ["category"], unique=False)


def downgrade() -> None:
    op.drop_table("faqs")
    op.drop_table("learning_resources")
    op.drop_table("news_articles")
    op.drop_table("indicator_year_records")
    op.drop_table("indicators")
    op.drop_table("indicator_reports")
    op.drop_table("users")
    for enum in (resource_type, news_status, achievement_category, report_status, user_role):
        enum.drop(op.get_bind(), checkfirst=True)
