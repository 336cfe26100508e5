"""Role gate and per-module CRUD permission evaluation.

Two independent predicates live here: ``authorize_roles`` (is the actor's role
in an allowed set) and ``has_permission`` (does the actor hold a module/action
grant). Routes pick exactly one of them; see the dependencies in
``sismonev.auth.dependencies``.
"""

import copy
import enum
import logging
from collections.abc import Iterable
from typing import Any

from sismonev.core.errors import Forbidden, Unauthenticated
from sismonev.core.models import User, UserRole

logger = logging.getLogger(__name__)


class Module(str, enum.Enum):
    """Permission-gated modules."""

    indicatorReports = "indicatorReports"
    news = "news"
    learningResources = "learningResources"
    faq = "faq"
    users = "users"


class Action(str, enum.Enum):
    """CRUD actions."""

    create = "create"
    read = "read"
    update = "update"
    delete = "delete"


# Module names used by older records
_LEGACY_MODULE_NAMES = {
    "ran_paud": Module.indicatorReports,
    "ranPaud": Module.indicatorReports,
    "ranpaud": Module.indicatorReports,
    "pembelajaran": Module.learningResources,
    "learning_resources": Module.learningResources,
    "indicator_reports": Module.indicatorReports,
}


def _grant(value: bool) -> dict[str, bool]:
    return {a.value: value for a in Action}


def default_permissions(role: UserRole) -> dict[str, dict[str, bool]]:
    """Fully populated permission map for a new user of ``role``.

    Content modules are granted to every role; ``users`` only to SUPER_ADMIN.
    """
    perms = {m.value: _grant(True) for m in Module}
    perms[Module.users.value] = _grant(role == UserRole.SUPER_ADMIN)
    return perms


def _module_key(name: Any) -> str | None:
    if isinstance(name, Module):
        return name.value
    if not isinstance(name, str):
        return None
    if name in Module.__members__:
        return name
    legacy = _LEGACY_MODULE_NAMES.get(name)
    return legacy.value if legacy else None


def normalize_permissions(raw: Any, role: UserRole) -> dict[str, dict[str, bool]]:
    """Return the canonical map for any stored permission shape.

    Accepts the canonical map (possibly partial or with legacy module names),
    the legacy ``[{"module": ..., "actions": [...]}]`` list, or nothing at all.
    Modules missing from the input get the role defaults. Idempotent.
    """
    result = default_permissions(role)
    if isinstance(raw, list):
        for item in raw:
            if not isinstance(item, dict):
                continue
            key = _module_key(item.get("module"))
            actions = item.get("actions")
            if key is None or not isinstance(actions, list):
                continue
            result[key] = {a.value: a.value in actions for a in Action}
        if role == UserRole.SUPER_ADMIN:
            result[Module.users.value] = _grant(True)
        return result
    if isinstance(raw, dict):
        for name, grants in raw.items():
            key = _module_key(name)
            if key is None or not isinstance(grants, dict):
                continue
            result[key] = {a.value: bool(grants.get(a.value, False)) for a in Action}
    return result


def is_canonical(raw: Any) -> bool:
    """True if ``raw`` is already a fully populated canonical map."""
    if not isinstance(raw, dict) or set(raw) != {m.value for m in Module}:
        return False
    for grants in raw.values():
        if not isinstance(grants, dict) or set(grants) != {a.value for a in Action}:
            return False
        if not all(isinstance(v, bool) for v in grants.values()):
            return False
    return True


def ensure_canonical_permissions(user: User) -> bool:
    """Normalize ``user.permissions`` in place. Returns True if it changed."""
    if is_canonical(user.permissions):
        return False
    logger.warning("Normalizing legacy permissions for user id=%s", user.id)
    user.permissions = normalize_permissions(copy.deepcopy(user.permissions), user.role)
    return True


def has_permission(user: User | None, module: Module | str, action: Action | str) -> bool:
    """Single source of truth for module-level CRUD gating.

    SUPER_ADMIN always passes. Otherwise ``permissions[module][action]`` must be
    true; anything absent is a deny.
    """
    if user is None:
        return False
    if user.role == UserRole.SUPER_ADMIN:
        return True
    perms = user.permissions
    if not isinstance(perms, dict):
        return False
    module_key = module.value if isinstance(module, Module) else str(module)
    action_key = action.value if isinstance(action, Action) else str(action)
    grants = perms.get(module_key)
    if not isinstance(grants, dict):
        return False
    return grants.get(action_key) is True


def authorize_roles(user: User | None, allowed_roles: Iterable[UserRole]) -> User:
    """Role gate: 401 without identity, 403 when role is not allowed."""
    if user is None:
        raise Unauthenticated("User not authenticated")
    if user.role not in tuple(allowed_roles):
        raise Forbidden("Access denied - role not allowed")
    return user


def authorize_permission(user: User | None, module: Module, action: Action) -> User:
    """Permission gate: 401 without identity, 403 without the module/action grant."""
    if user is None:
        raise Unauthenticated("User not authenticated")
    if not has_permission(user, module, action):
        raise Forbidden(f"No {action.value} permission for module {module.value}")
    return user
