"""
Unit tests for module permission evaluation and normalization.
"""

import pytest

from sismonev.auth.permissions import (
    Action,
    Module,
    authorize_permission,
    authorize_roles,
    default_permissions,
    ensure_canonical_permissions,
    has_permission,
    is_canonical,
    normalize_permissions,
)
from sismonev.core.errors import Forbidden, Unauthenticated
from sismonev.core.models import User, UserRole


def _user(role: UserRole, permissions=None, user_id: int = 1) -> User:
    return User(id=user_id, username="u", role=role, permissions=permissions, organization_id="KEMENKES")


class TestDefaultPermissions:
    """Default grants on user creation."""

    def test_org_admin_denied_users_module(self):
        """Users module is never granted to an org admin by default."""
        perms = default_permissions(UserRole.ORG_ADMIN)
        assert perms["users"] == {"create": False, "read": False, "update": False, "delete": False}

    def test_content_modules_granted(self):
        perms = default_permissions(UserRole.ADMIN)
        for module in ("indicatorReports", "news", "learningResources", "faq"):
            assert all(perms[module].values())
        assert not any(perms["users"].values())

    def test_super_admin_gets_users_module(self):
        assert all(default_permissions(UserRole.SUPER_ADMIN)["users"].values())

    def test_always_fully_populated(self):
        for role in UserRole:
            assert is_canonical(default_permissions(role))


class TestHasPermission:
    """The single predicate behind every permission gate."""

    @pytest.mark.parametrize("action", list(Action))
    def test_org_admin_users_module_default_deny(self, action):
        user = _user(UserRole.ORG_ADMIN, default_permissions(UserRole.ORG_ADMIN))
        assert has_permission(user, Module.users, action) is False

    def test_explicit_grant_allows(self):
        perms = default_permissions(UserRole.ORG_ADMIN)
        perms["users"]["read"] = True
        user = _user(UserRole.ORG_ADMIN, perms)
        assert has_permission(user, Module.users, Action.read) is True
        assert has_permission(user, Module.users, Action.delete) is False

    def test_super_admin_always_passes(self):
        user = _user(UserRole.SUPER_ADMIN, permissions={})
        assert has_permission(user, Module.users, Action.delete) is True

    def test_missing_map_denies(self):
        assert has_permission(_user(UserRole.ADMIN, None), Module.news, Action.read) is False

    def test_truthy_non_boolean_denies(self):
        user = _user(UserRole.ADMIN, {"news": {"create": "yes"}})
        assert has_permission(user, Module.news, Action.create) is False

    def test_anonymous_denied(self):
        assert has_permission(None, Module.faq, Action.read) is False

    def test_accepts_plain_strings(self):
        user = _user(UserRole.ADMIN, default_permissions(UserRole.ADMIN))
        assert has_permission(user, "news", "update") is True


class TestNormalizePermissions:
    """Legacy permission shapes converge to the canonical map."""

    def test_legacy_list_with_legacy_module_names(self):
        raw = [
            {"module": "ran_paud", "actions": ["read", "update"]},
            {"module": "news", "actions": ["read"]},
        ]
        perms = normalize_permissions(raw, UserRole.ORG_ADMIN)
        assert perms["indicatorReports"] == {"create": False, "read": True, "update": True, "delete": False}
        assert perms["news"] == {"create": False, "read": True, "update": False, "delete": False}
        # Modules absent from the list keep the role defaults
        assert all(perms["faq"].values())
        assert not any(perms["users"].values())

    def test_partial_map_filled_with_defaults(self):
        perms = normalize_permissions({"pembelajaran": {"read": True}}, UserRole.ADMIN)
        assert is_canonical(perms)
        assert perms["learningResources"] == {"create": False, "read": True, "update": False, "delete": False}

    def test_unknown_modules_dropped(self):
        perms = normalize_permissions({"reports": {"read": True}}, UserRole.ADMIN)
        assert "reports" not in perms

    def test_none_gives_defaults(self):
        assert normalize_permissions(None, UserRole.ORG_ADMIN) == default_permissions(UserRole.ORG_ADMIN)

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            [{"module": "ranPaud", "actions": ["create"]}],
            {"news": {"read": True, "delete": 1}},
            default_permissions(UserRole.ADMIN),
        ],
    )
    def test_idempotent(self, raw):
        once = normalize_permissions(raw, UserRole.ADMIN)
        assert normalize_permissions(once, UserRole.ADMIN) == once

    def test_ensure_canonical_rewrites_in_place(self):
        user = _user(UserRole.ORG_ADMIN, [{"module": "news", "actions": ["read"]}])
        assert ensure_canonical_permissions(user) is True
        assert is_canonical(user.permissions)
        assert ensure_canonical_permissions(user) is False


class TestGates:
    """Role gate and permission gate error kinds."""

    def test_role_gate_without_identity(self):
        with pytest.raises(Unauthenticated):
            authorize_roles(None, (UserRole.ADMIN,))

    def test_role_gate_wrong_role(self):
        with pytest.raises(Forbidden):
            authorize_roles(_user(UserRole.ORG_ADMIN), (UserRole.ADMIN, UserRole.SUPER_ADMIN))

    def test_permission_gate_denied(self):
        perms = default_permissions(UserRole.ORG_ADMIN)
        perms["news"]["delete"] = False
        with pytest.raises(Forbidden):
            authorize_permission(_user(UserRole.ORG_ADMIN, perms), Module.news, Action.delete)

    def test_permission_gate_passes(self):
        user = _user(UserRole.ORG_ADMIN, default_permissions(UserRole.ORG_ADMIN))
        assert authorize_permission(user, Module.news, Action.create) is user
