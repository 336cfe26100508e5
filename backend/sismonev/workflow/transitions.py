"""Approval state machines for indicator reports and news articles.

Each machine is a table of transitions: allowed source states (``None`` means
any), target state and the roles eligible to fire it. The ``apply_*`` helpers
check eligibility and precondition, then mutate the record in place; the
caller commits.
"""

import enum
import logging
from datetime import datetime

from sismonev.core.errors import Forbidden, InvalidTransition, ValidationError
from sismonev.core.models import (
    ELEVATED_ROLES,
    IndicatorReport,
    NewsArticle,
    NewsStatus,
    ReportStatus,
    User,
    UserRole,
)

logger = logging.getLogger(__name__)


class ReportTransition(str, enum.Enum):
    submit = "submit"
    approve = "approve"
    reject = "reject"
    return_draft = "return_draft"


class NewsTransition(str, enum.Enum):
    publish = "publish"
    return_draft = "return_draft"


class TransitionRule:
    """One row of a transition table."""

    def __init__(self, sources, target, roles, owner_allowed: bool = False):
        self.sources = frozenset(sources) if sources is not None else None
        self.target = target
        self.roles = tuple(roles)
        self.owner_allowed = owner_allowed

    def permits_source(self, current) -> bool:
        return self.sources is None or current in self.sources


REPORT_RULES: dict[ReportTransition, TransitionRule] = {
    ReportTransition.submit: TransitionRule(
        {ReportStatus.draft}, ReportStatus.pending, ELEVATED_ROLES, owner_allowed=True
    ),
    ReportTransition.approve: TransitionRule(
        {ReportStatus.pending}, ReportStatus.approved, ELEVATED_ROLES
    ),
    ReportTransition.reject: TransitionRule(
        {ReportStatus.pending}, ReportStatus.rejected, ELEVATED_ROLES
    ),
    ReportTransition.return_draft: TransitionRule(None, ReportStatus.draft, ELEVATED_ROLES),
}

NEWS_RULES: dict[NewsTransition, TransitionRule] = {
    NewsTransition.publish: TransitionRule(
        {NewsStatus.draft}, NewsStatus.publish, (UserRole.SUPER_ADMIN,)
    ),
    NewsTransition.return_draft: TransitionRule(
        None, NewsStatus.draft, (UserRole.SUPER_ADMIN,)
    ),
}

# Target status requested through the generic status endpoints -> transition
REPORT_TRANSITION_FOR_STATUS: dict[ReportStatus, ReportTransition] = {
    ReportStatus.pending: ReportTransition.submit,
    ReportStatus.approved: ReportTransition.approve,
    ReportStatus.rejected: ReportTransition.reject,
    ReportStatus.draft: ReportTransition.return_draft,
}


def _check(rule: TransitionRule, name: str, current, actor: User, is_owner: bool) -> None:
    if actor.role not in rule.roles and not (rule.owner_allowed and is_owner):
        raise Forbidden(f"Access denied - not allowed to {name} this record")
    if not rule.permits_source(current):
        raise InvalidTransition(
            f"Cannot {name}: current status is '{current.value}', "
            f"expected {' or '.join(sorted(s.value for s in rule.sources))}"
        )


def can_transition_report(report: IndicatorReport, transition: ReportTransition) -> bool:
    """True if ``transition`` is legal from the report's current status."""
    return REPORT_RULES[transition].permits_source(report.status)


def apply_report_transition(
    report: IndicatorReport,
    transition: ReportTransition,
    actor: User,
    reason: str | None = None,
) -> IndicatorReport:
    """Fire a report transition. Raises Forbidden, InvalidTransition or ValidationError."""
    rule = REPORT_RULES[transition]
    is_owner = report.created_by_id is not None and report.created_by_id == actor.id
    _check(rule, transition.value.replace("_", "-"), report.status, actor, is_owner)
    if transition == ReportTransition.reject and not (reason and reason.strip()):
        raise ValidationError("Rejection reason is required")

    previous = report.status
    now = datetime.utcnow()
    report.status = rule.target
    if transition == ReportTransition.submit:
        report.submitted_at = now
    elif transition == ReportTransition.approve:
        report.approved_by_id = actor.id
        report.approved_at = now
    elif transition == ReportTransition.reject:
        report.approved_by_id = actor.id
        report.approved_at = now
        report.rejection_reason = reason.strip()
    else:
        report.approved_by_id = None
        report.approved_at = None
        report.rejection_reason = None
        report.submitted_at = None
    report.updated_by_id = actor.id
    logger.info(
        "Indicator report id=%s %s: %s -> %s by user id=%s (org=%s)",
        report.id, transition.value, previous.value, rule.target.value,
        actor.id, report.organization_id,
    )
    return report


def apply_news_transition(
    article: NewsArticle,
    transition: NewsTransition,
    actor: User,
) -> NewsArticle:
    """Fire a news transition. Raises Forbidden or InvalidTransition."""
    rule = NEWS_RULES[transition]
    _check(rule, transition.value.replace("_", "-"), article.status, actor, False)

    previous = article.status
    now = datetime.utcnow()
    article.status = rule.target
    if transition == NewsTransition.publish:
        article.approved_by_id = actor.id
        article.approved_at = now
        article.published_at = now
        article.is_active = True
    else:
        article.approved_by_id = None
        article.approved_at = None
        article.published_at = None
    logger.info(
        "News article id=%s %s: %s -> %s by user id=%s",
        article.id, transition.value, previous.value, rule.target.value, actor.id,
    )
    return article
