"""
API tests for FAQs.
"""

import pytest

from sismonev.core.models import UserRole
from tests.helpers import auth_headers

BASE = "/api/faqs"


async def _create(client, user, question="Bagaimana cara mengisi laporan?", **fields) -> dict:
    payload = {
        "question": question,
        "answer": "Masuk sebagai admin K/L lalu buka menu RAN PAUD.",
        "category": "laporan",
        "tags": "laporan,ran paud",
    }
    payload.update(fields)
    response = await client.post(BASE, json=payload, headers=auth_headers(user))
    assert response.status_code == 201, response.text
    return response.json()


class TestFaqs:
    @pytest.mark.asyncio
    async def test_create_splits_tags(self, client, users):
        faq = await _create(client, users["admin"])
        assert faq["tags"] == ["laporan", "ran paud"]
        assert faq["created_by_id"] == users["admin"].id

    @pytest.mark.asyncio
    async def test_public_list_hides_inactive(self, client, users):
        active = await _create(client, users["admin"])
        inactive = await _create(client, users["admin"], question="Pertanyaan lama?", is_active=False)

        public = await client.get(BASE)
        assert [f["id"] for f in public.json()] == [active["id"]]
        assert (await client.get(f"{BASE}/{inactive['id']}")).status_code == 404

        full = await client.get(f"{BASE}/all", headers=auth_headers(users["admin"]))
        assert {f["id"] for f in full.json()} == {active["id"], inactive["id"]}
        detail = await client.get(f"{BASE}/{inactive['id']}", headers=auth_headers(users["admin"]))
        assert detail.status_code == 200

    @pytest.mark.asyncio
    async def test_full_list_requires_permission(self, client, users):
        assert (await client.get(f"{BASE}/all")).status_code == 401

    @pytest.mark.asyncio
    async def test_write_permission(self, client, make_user):
        perms = {"faq": {"create": False, "read": True, "update": False, "delete": False}}
        reader = await make_user("faq_reader", UserRole.ADMIN, permissions=perms)
        response = await client.post(
            BASE,
            json={"question": "Apa itu PAUD HI?", "answer": "Pengembangan anak usia dini holistik."},
            headers=auth_headers(reader),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_update_toggle_delete(self, client, users):
        faq = await _create(client, users["admin"])
        headers = auth_headers(users["kemenkes"])
        url = f"{BASE}/{faq['id']}"

        updated = await client.put(url, json={"category": "umum"}, headers=headers)
        assert updated.json()["category"] == "umum"
        assert updated.json()["question"] == faq["question"]

        toggled = await client.patch(f"{url}/toggle", headers=headers)
        assert toggled.json()["is_active"] is False

        assert (await client.delete(url, headers=headers)).status_code == 204
        assert (await client.get(url, headers=headers)).status_code == 404

    @pytest.mark.asyncio
    async def test_reorder(self, client, users):
        first = await _create(client, users["admin"])
        second = await _create(client, users["admin"], question="Siapa yang menyetujui laporan?")
        response = await client.put(
            f"{BASE}/reorder", json={"ids": [second["id"], first["id"]]}, headers=auth_headers(users["admin"])
        )
        assert response.json() == {"updated": 2}
        listed = await client.get(BASE)
        assert [f["id"] for f in listed.json()] == [second["id"], first["id"]]

        missing = await client.put(
            f"{BASE}/reorder", json={"ids": [first["id"], 999]}, headers=auth_headers(users["admin"])
        )
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_search(self, client, users):
        await _create(client, users["admin"])
        await _create(client, users["admin"], question="Kapan batas waktu pengisian?", tags=["jadwal"])
        response = await client.get(BASE, params={"search": "jadwal"})
        assert len(response.json()) == 1
