"""
API tests for user management.
"""

import pytest

from sismonev.core.models import UserRole
from tests.helpers import auth_headers

BASE = "/api/users"


def _new_user(**overrides) -> dict:
    payload = {
        "username": "kemensos_admin",
        "email": "Admin@Kemensos.go.id",
        "password": "rahasia1",
        "full_name": "Admin Kemensos",
        "role": "admin_kl",
        "organization_id": "KEMENSOS",
    }
    payload.update(overrides)
    return payload


class TestCreateUser:
    @pytest.mark.asyncio
    async def test_create_with_legacy_role_name(self, client, users):
        response = await client.post(BASE, json=_new_user(), headers=auth_headers(users["admin"]))
        assert response.status_code == 201
        body = response.json()
        assert body["role"] == "ORG_ADMIN"
        assert body["email"] == "admin@kemensos.go.id"
        assert body["organization_name"] == "Kementerian Sosial"
        assert body["permissions"]["users"] == {"create": False, "read": False, "update": False, "delete": False}
        assert body["permissions"]["news"]["create"] is True

    @pytest.mark.asyncio
    async def test_org_admin_requires_organization(self, client, users):
        response = await client.post(
            BASE, json=_new_user(organization_id=None), headers=auth_headers(users["admin"])
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_duplicate_conflict(self, client, users):
        response = await client.post(
            BASE, json=_new_user(username="reviewer"), headers=auth_headers(users["super_admin"])
        )
        assert response.status_code == 409
        response = await client.post(
            BASE, json=_new_user(email="ROOT@example.go.id"), headers=auth_headers(users["super_admin"])
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_admin_cannot_create_super_admin(self, client, users):
        response = await client.post(
            BASE, json=_new_user(role="admin_utama", organization_id=None), headers=auth_headers(users["admin"])
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_cannot_set_permissions(self, client, users):
        response = await client.post(
            BASE,
            json=_new_user(permissions={"users": {"read": True}}),
            headers=auth_headers(users["admin"]),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_super_admin_sets_legacy_permission_list(self, client, users):
        response = await client.post(
            BASE,
            json=_new_user(permissions=[{"module": "pembelajaran", "actions": ["read"]}]),
            headers=auth_headers(users["super_admin"]),
        )
        perms = response.json()["permissions"]
        assert perms["learningResources"] == {"create": False, "read": True, "update": False, "delete": False}
        assert set(perms) == {"indicatorReports", "news", "learningResources", "faq", "users"}

    @pytest.mark.asyncio
    async def test_org_admin_has_no_access(self, client, users):
        response = await client.get(BASE, headers=auth_headers(users["kemenkes"]))
        assert response.status_code == 403


class TestManageUser:
    @pytest.mark.asyncio
    async def test_list_filters(self, client, users):
        response = await client.get(BASE, params={"role": "ORG_ADMIN"}, headers=auth_headers(users["admin"]))
        assert {u["username"] for u in response.json()["items"]} == {"kemenkes_admin", "kemenag_admin"}

        response = await client.get(BASE, params={"search": "kemenag"}, headers=auth_headers(users["admin"]))
        assert response.json()["total"] == 1

        response = await client.get(BASE, params={"role": "nobody"}, headers=auth_headers(users["admin"]))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_empty_password_keeps_current(self, client, users):
        target = users["kemenkes"]
        response = await client.put(
            f"{BASE}/{target.id}",
            json={"password": "", "full_name": "Admin Kemenkes RI"},
            headers=auth_headers(users["admin"]),
        )
        assert response.status_code == 200
        assert response.json()["full_name"] == "Admin Kemenkes RI"
        login = await client.post(
            "/api/auth/login", json={"identifier": "kemenkes_admin", "password": "secret123"}
        )
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_demotion_resets_permissions_to_new_role(self, client, users, make_user):
        other_root = await make_user("root_cadangan", UserRole.SUPER_ADMIN)
        response = await client.put(
            f"{BASE}/{other_root.id}",
            json={"role": "ORG_ADMIN", "organization_id": "KEMENKES"},
            headers=auth_headers(users["super_admin"]),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["role"] == "ORG_ADMIN"
        assert body["organization_name"] == "Kementerian Kesehatan"
        assert body["permissions"]["users"] == {
            "create": False, "read": False, "update": False, "delete": False,
        }
        assert body["permissions"]["news"]["create"] is True

        response = await client.get(BASE, headers=auth_headers(other_root))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_cannot_modify_super_admin(self, client, users):
        root = users["super_admin"]
        response = await client.put(
            f"{BASE}/{root.id}", json={"full_name": "x"}, headers=auth_headers(users["admin"])
        )
        assert response.status_code == 403
        response = await client.delete(f"{BASE}/{root.id}", headers=auth_headers(users["admin"]))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_no_self_deactivation_or_deletion(self, client, users):
        me = users["admin"]
        headers = auth_headers(me)
        assert (await client.patch(f"{BASE}/{me.id}/toggle-status", headers=headers)).status_code == 400
        assert (await client.delete(f"{BASE}/{me.id}", headers=headers)).status_code == 400

    @pytest.mark.asyncio
    async def test_toggle_and_delete(self, client, users):
        target = users["kemenag"]
        headers = auth_headers(users["super_admin"])
        toggled = await client.patch(f"{BASE}/{target.id}/toggle-status", headers=headers)
        assert toggled.json() == {"id": target.id, "is_active": False}

        # Deactivated user's token stops working
        me = await client.get("/api/auth/me", headers=auth_headers(target))
        assert me.status_code == 401

        assert (await client.delete(f"{BASE}/{target.id}", headers=headers)).status_code == 204
        assert (await client.get(f"{BASE}/{target.id}", headers=headers)).status_code == 404
