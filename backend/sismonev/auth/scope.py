"""Organization (K/L) scope: query filters, write injection and ownership checks."""

import enum
import logging
from collections.abc import Sequence
from typing import Annotated

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sismonev.auth.dependencies import get_current_user
from sismonev.core.database import get_db
from sismonev.core.errors import Forbidden, MissingOrganization, NotFound
from sismonev.core.models import ELEVATED_ROLES, IndicatorReport, LearningResource, User, UserRole
from sismonev.organizations.service import resolve_organization

logger = logging.getLogger(__name__)


class EntityType(str, enum.Enum):
    """Organization-owned entity kinds."""

    indicator_report = "indicator_report"
    learning_resource = "learning_resource"


ENTITY_MODELS = {
    EntityType.indicator_report: IndicatorReport,
    EntityType.learning_resource: LearningResource,
}

ENTITY_LABELS = {
    EntityType.indicator_report: "Indicator report",
    EntityType.learning_resource: "Learning resource",
}


def _own_organization(user: User) -> str:
    if not user.organization_id:
        raise MissingOrganization("No organization assigned to this user")
    return user.organization_id


def scope_filter(user: User) -> dict[str, str]:
    """{} for elevated roles, {"organization_id": own} for ORG_ADMIN."""
    if user.role in ELEVATED_ROLES:
        return {}
    if user.role == UserRole.ORG_ADMIN:
        return {"organization_id": _own_organization(user)}
    raise Forbidden("Access denied - role not allowed")


def apply_scope(query, model, user: User):
    """Restrict a select() on ``model`` to the rows ``user`` may see."""
    for column, value in scope_filter(user).items():
        query = query.where(getattr(model, column) == value)
    return query


def _org_label(user: User) -> str:
    return f"{user.organization_name} ({user.organization_id})"


def restrict_to_own_organization(user: User, requested_org_id: str | None) -> str | None:
    """Resolve the organization a write should be attributed to.

    Elevated roles get ``requested_org_id`` back unchanged. An ORG_ADMIN asking
    for another organization is rejected; asking for none gets their own.
    """
    if user.role in ELEVATED_ROLES:
        return requested_org_id
    own = _own_organization(user)
    if requested_org_id and requested_org_id != own:
        logger.warning(
            "Cross-organization write rejected: user id=%s org=%s requested=%s",
            user.id, own, requested_org_id,
        )
        raise Forbidden(
            f"No access to organization data: {requested_org_id}. "
            f"You can only access data of {_org_label(user)}"
        )
    return own


def resolve_write_organization(
    user: User, requested_org_id: str | None, requested_name: str | None = None
) -> tuple[str | None, str | None]:
    """(code, name) a write is attributed to, or (None, None) when an elevated actor names none.

    Only elevated roles may supply a display name; an ORG_ADMIN always gets the
    catalog name of their own organization.
    """
    org_id = restrict_to_own_organization(user, requested_org_id)
    if not org_id:
        return None, None
    name = requested_name if user.role in ELEVATED_ROLES else None
    return resolve_organization(org_id, name)


def check_record_access(user: User, record) -> None:
    """Ownership check for a single loaded record."""
    if user.role in ELEVATED_ROLES:
        return
    own = _own_organization(user)
    if record.organization_id != own:
        logger.warning(
            "Record access rejected: user id=%s org=%s record=%s/%s",
            user.id, own, type(record).__name__, record.id,
        )
        raise Forbidden(
            f"No access to this data. Data belongs to organization: {record.organization_id}, "
            f"you can only access data of {_org_label(user)}"
        )


async def load_scoped_record(
    db: AsyncSession,
    entity: EntityType,
    record_id: int,
    user: User,
    active_only: bool = False,
):
    """Load a record by id and verify ownership. Raises NotFound / Forbidden."""
    model = ENTITY_MODELS[entity]
    q = select(model).where(model.id == record_id)
    if active_only:
        q = q.where(model.is_active == True)  # noqa: E712
    result = await db.execute(q)
    record = result.scalar_one_or_none()
    if record is None:
        raise NotFound(f"{ENTITY_LABELS[entity]} not found")
    check_record_access(user, record)
    return record


def validate_bulk_access(user: User, records: Sequence) -> None:
    """Reject the whole batch if any record belongs to another organization."""
    if user.role in ELEVATED_ROLES:
        return
    own = _own_organization(user)
    foreign = sorted({r.organization_id for r in records if r.organization_id != own})
    if foreign:
        logger.warning(
            "Bulk operation rejected: user id=%s org=%s foreign=%s", user.id, own, foreign
        )
        raise Forbidden(
            f"Cannot run a bulk operation on data of organization: {', '.join(foreign)}. "
            f"You can only access data of {_org_label(user)}"
        )


async def load_bulk_records(
    db: AsyncSession,
    entity: EntityType,
    ids: Sequence[int],
    user: User,
) -> list:
    """Load every id of a batch and verify ownership before any write."""
    model = ENTITY_MODELS[entity]
    unique_ids = list(dict.fromkeys(ids))
    result = await db.execute(select(model).where(model.id.in_(unique_ids)))
    records = list(result.scalars().all())
    missing = sorted(set(unique_ids) - {r.id for r in records})
    if missing:
        raise NotFound(f"{ENTITY_LABELS[entity]} not found: {', '.join(str(i) for i in missing)}")
    validate_bulk_access(user, records)
    return records


def validate_data_access(entity: EntityType, active_only: bool = False):
    """Dependency factory: load ``{record_id}`` and enforce organization ownership."""

    async def _validate(
        record_id: int,
        db: Annotated[AsyncSession, Depends(get_db)],
        current_user: Annotated[User, Depends(get_current_user)],
    ):
        return await load_scoped_record(db, entity, record_id, current_user, active_only=active_only)

    return _validate
