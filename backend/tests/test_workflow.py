"""
Unit tests for the indicator report and news approval state machines.
"""

import pytest

from sismonev.core.errors import Forbidden, InvalidTransition, ValidationError
from sismonev.core.models import IndicatorReport, NewsArticle, NewsStatus, ReportStatus, User, UserRole
from sismonev.workflow.transitions import (
    NewsTransition,
    ReportTransition,
    apply_news_transition,
    apply_report_transition,
    can_transition_report,
)


def _user(user_id: int, role: UserRole, org: str | None = None) -> User:
    return User(id=user_id, username=f"user{user_id}", role=role, organization_id=org)


def _report(status: ReportStatus, created_by_id: int = 3) -> IndicatorReport:
    return IndicatorReport(
        id=10,
        organization_id="KEMENKES",
        organization_name="Kementerian Kesehatan",
        program="Program",
        status=status,
        created_by_id=created_by_id,
    )


@pytest.fixture
def admin():
    return _user(2, UserRole.ADMIN)


@pytest.fixture
def owner():
    return _user(3, UserRole.ORG_ADMIN, "KEMENKES")


class TestReportTransitions:
    """draft -> pending -> approved/rejected, and back to draft."""

    @pytest.mark.parametrize("status", [ReportStatus.draft, ReportStatus.approved, ReportStatus.rejected])
    @pytest.mark.parametrize("transition", [ReportTransition.approve, ReportTransition.reject])
    def test_approve_reject_require_pending(self, admin, status, transition):
        report = _report(status)
        with pytest.raises(InvalidTransition):
            apply_report_transition(report, transition, admin, reason="incomplete")
        assert report.status == status

    def test_approve_sets_approval_fields(self, admin):
        report = apply_report_transition(_report(ReportStatus.pending), ReportTransition.approve, admin)
        assert report.status == ReportStatus.approved
        assert report.approved_by_id == admin.id
        assert report.approved_at is not None
        assert report.updated_by_id == admin.id

    def test_return_draft_clears_approval_fields(self, admin):
        report = _report(ReportStatus.pending)
        apply_report_transition(report, ReportTransition.reject, admin, reason="Data target belum lengkap")
        assert report.rejection_reason == "Data target belum lengkap"
        apply_report_transition(report, ReportTransition.return_draft, admin)
        assert report.status == ReportStatus.draft
        assert report.approved_by_id is None
        assert report.approved_at is None
        assert report.rejection_reason is None
        assert report.submitted_at is None

    def test_reject_requires_reason(self, admin):
        report = _report(ReportStatus.pending)
        with pytest.raises(ValidationError):
            apply_report_transition(report, ReportTransition.reject, admin, reason="  ")
        assert report.status == ReportStatus.pending

    def test_owner_may_submit(self, owner):
        report = apply_report_transition(_report(ReportStatus.draft), ReportTransition.submit, owner)
        assert report.status == ReportStatus.pending
        assert report.submitted_at is not None

    def test_non_owner_org_admin_may_not_submit(self, owner):
        report = _report(ReportStatus.draft, created_by_id=99)
        with pytest.raises(Forbidden):
            apply_report_transition(report, ReportTransition.submit, owner)

    def test_submit_requires_draft(self, admin):
        with pytest.raises(InvalidTransition):
            apply_report_transition(_report(ReportStatus.approved), ReportTransition.submit, admin)

    def test_org_admin_may_not_approve(self, owner):
        with pytest.raises(Forbidden):
            apply_report_transition(_report(ReportStatus.pending), ReportTransition.approve, owner)

    def test_can_transition(self):
        assert can_transition_report(_report(ReportStatus.pending), ReportTransition.approve)
        assert not can_transition_report(_report(ReportStatus.draft), ReportTransition.approve)
        assert can_transition_report(_report(ReportStatus.approved), ReportTransition.return_draft)


class TestNewsTransitions:
    """Publishing is reserved to the super admin."""

    def _article(self, status=NewsStatus.draft) -> NewsArticle:
        return NewsArticle(id=5, title="t", content="c", status=status, author_id=3, is_active=True)

    def test_super_admin_publishes(self):
        root = _user(1, UserRole.SUPER_ADMIN)
        article = apply_news_transition(self._article(), NewsTransition.publish, root)
        assert article.status == NewsStatus.publish
        assert article.approved_by_id == root.id
        assert article.published_at is not None

    @pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.ORG_ADMIN])
    def test_others_cannot_publish(self, role):
        article = self._article()
        with pytest.raises(Forbidden):
            apply_news_transition(article, NewsTransition.publish, _user(3, role, "KEMENKES"))
        assert article.status == NewsStatus.draft

    def test_publish_twice_is_invalid(self):
        with pytest.raises(InvalidTransition):
            apply_news_transition(
                self._article(NewsStatus.publish), NewsTransition.publish, _user(1, UserRole.SUPER_ADMIN)
            )

    def test_return_draft_clears_publication(self):
        root = _user(1, UserRole.SUPER_ADMIN)
        article = apply_news_transition(self._article(), NewsTransition.publish, root)
        apply_news_transition(article, NewsTransition.return_draft, root)
        assert article.status == NewsStatus.draft
        assert article.published_at is None
        assert article.approved_by_id is None
