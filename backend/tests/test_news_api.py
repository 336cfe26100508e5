"""
API tests for news: publish gate, visibility rules and counters.
"""

import pytest

from sismonev.core.models import UserRole
from sismonev.news.images import normalize_image_input, to_full_image_url
from tests.helpers import auth_headers

BASE = "/api/news"


async def _create(client, user, **fields) -> dict:
    payload = {"title": "Rakor PAUD HI 2024", "content": "Isi berita", "category": "kegiatan"}
    payload.update(fields)
    response = await client.post(BASE, json=payload, headers=auth_headers(user))
    assert response.status_code == 201, response.text
    return response.json()


class TestImageNormalization:
    def test_json_string_with_url(self):
        assert normalize_image_input('{"url": "/uploads/news/a.jpg"}') == "/uploads/news/a.jpg"

    def test_object_fields(self):
        assert normalize_image_input({"relativePath": "uploads/news/b.png"}) == "uploads/news/b.png"
        assert normalize_image_input({"filename": "c.png"}) == "c.png"
        assert normalize_image_input({}) is None

    def test_absolute_urls(self):
        base = "http://host/"
        assert to_full_image_url(base, "https://cdn/x.jpg") == "https://cdn/x.jpg"
        assert to_full_image_url(base, "/uploads/news/x.jpg") == "http://host/uploads/news/x.jpg"
        assert to_full_image_url(base, "uploads/x.jpg") == "http://host/uploads/x.jpg"
        assert to_full_image_url(base, "x.jpg") == "http://host/uploads/news/x.jpg"
        assert to_full_image_url(base, None) is None


class TestCreate:
    @pytest.mark.asyncio
    async def test_created_as_draft_with_source(self, client, users):
        article = await _create(client, users["kemenkes"], image={"filename": "foto.jpg"})
        assert article["status"] == "draft"
        assert article["source"] == users["kemenkes"].organization_name
        assert article["author"]["id"] == users["kemenkes"].id
        assert article["image"] == "http://testserver/uploads/news/foto.jpg"

    @pytest.mark.asyncio
    async def test_source_not_client_supplied(self, client, users):
        article = await _create(client, users["admin"], source="Palsu")
        assert article["source"] is None

    @pytest.mark.asyncio
    async def test_non_super_admin_cannot_create_published(self, client, users):
        response = await client.post(
            BASE,
            json={"title": "t", "content": "c", "status": "publish"},
            headers=auth_headers(users["admin"]),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_super_admin_publishes_on_create(self, client, users):
        article = await _create(client, users["super_admin"], status="publish")
        assert article["status"] == "publish"
        assert article["published_at"] is not None
        assert article["approved_by_id"] == users["super_admin"].id

    @pytest.mark.asyncio
    async def test_permission_gate(self, client, make_user):
        perms = {"news": {"create": False, "read": True, "update": False, "delete": False}}
        writer = await make_user("no_news", UserRole.ORG_ADMIN, "KEMENSOS", permissions=perms)
        response = await client.post(
            BASE, json={"title": "t", "content": "c"}, headers=auth_headers(writer)
        )
        assert response.status_code == 403


class TestPublishGate:
    """Only the super admin can move an article to publish."""

    @pytest.mark.asyncio
    async def test_update_with_publish_rejected_without_mutation(self, client, users):
        article = await _create(client, users["kemenkes"])
        response = await client.put(
            f"{BASE}/{article['id']}",
            json={"title": "Judul baru", "status": "publish"},
            headers=auth_headers(users["kemenkes"]),
        )
        assert response.status_code == 403

        stored = await client.get(f"{BASE}/{article['id']}", headers=auth_headers(users["kemenkes"]))
        assert stored.json()["status"] == "draft"
        assert stored.json()["title"] == "Rakor PAUD HI 2024"

    @pytest.mark.asyncio
    async def test_admin_cannot_publish(self, client, users):
        article = await _create(client, users["admin"])
        response = await client.post(f"{BASE}/{article['id']}/publish", headers=auth_headers(users["admin"]))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_super_admin_publish_and_return(self, client, users):
        article = await _create(client, users["kemenkes"])
        published = await client.post(
            f"{BASE}/{article['id']}/publish", headers=auth_headers(users["super_admin"])
        )
        assert published.json()["status"] == "publish"

        again = await client.post(
            f"{BASE}/{article['id']}/publish", headers=auth_headers(users["super_admin"])
        )
        assert again.status_code == 400
        assert again.json()["error"] == "InvalidTransition"

        draft = await client.post(
            f"{BASE}/{article['id']}/return-draft", headers=auth_headers(users["super_admin"])
        )
        assert draft.json()["status"] == "draft"
        assert draft.json()["published_at"] is None

    @pytest.mark.asyncio
    async def test_only_author_or_super_admin_edits(self, client, users):
        article = await _create(client, users["kemenkes"])
        response = await client.put(
            f"{BASE}/{article['id']}", json={"title": "x"}, headers=auth_headers(users["kemenag"])
        )
        assert response.status_code == 403

        response = await client.put(
            f"{BASE}/{article['id']}", json={"excerpt": "Ringkasan"}, headers=auth_headers(users["super_admin"])
        )
        assert response.status_code == 200
        assert response.json()["excerpt"] == "Ringkasan"

    @pytest.mark.asyncio
    async def test_delete_by_author(self, client, users):
        article = await _create(client, users["kemenkes"])
        response = await client.delete(f"{BASE}/{article['id']}", headers=auth_headers(users["kemenag"]))
        assert response.status_code == 403
        response = await client.delete(f"{BASE}/{article['id']}", headers=auth_headers(users["kemenkes"]))
        assert response.status_code == 204


class TestVisibility:
    """Anonymous readers see published news only."""

    @pytest.mark.asyncio
    async def test_anonymous_list_ignores_requested_status(self, client, users):
        draft = await _create(client, users["kemenkes"])
        published = await _create(client, users["super_admin"], status="publish")

        response = await client.get(BASE, params={"status": "draft"})
        assert [a["id"] for a in response.json()["items"]] == [published["id"]]

        response = await client.get(BASE, params={"status": "draft"}, headers=auth_headers(users["admin"]))
        assert [a["id"] for a in response.json()["items"]] == [draft["id"]]

    @pytest.mark.asyncio
    async def test_org_admin_sees_published_and_own(self, client, users):
        own = await _create(client, users["kemenkes"])
        await _create(client, users["kemenag"])
        published = await _create(client, users["super_admin"], status="publish")

        response = await client.get(BASE, headers=auth_headers(users["kemenkes"]))
        assert {a["id"] for a in response.json()["items"]} == {own["id"], published["id"]}

    @pytest.mark.asyncio
    async def test_draft_detail_hidden(self, client, users):
        draft = await _create(client, users["kemenkes"])
        assert (await client.get(f"{BASE}/{draft['id']}")).status_code == 404
        hidden = await client.get(f"{BASE}/{draft['id']}", headers=auth_headers(users["kemenag"]))
        assert hidden.status_code == 404
        visible = await client.get(f"{BASE}/{draft['id']}", headers=auth_headers(users["admin"]))
        assert visible.status_code == 200

    @pytest.mark.asyncio
    async def test_admin_list_counts(self, client, users):
        await _create(client, users["kemenkes"])
        await _create(client, users["super_admin"], status="publish")
        response = await client.get(f"{BASE}/admin", headers=auth_headers(users["super_admin"]))
        assert response.json()["status_counts"] == {"draft": 1, "publish": 1}
        response = await client.get(f"{BASE}/admin", headers=auth_headers(users["admin"]))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_invalid_status_filter(self, client, users):
        response = await client.get(BASE, params={"status": "archived"})
        assert response.status_code == 400


class TestCounters:
    @pytest.mark.asyncio
    async def test_views_and_likes_increment(self, client, users):
        article = await _create(client, users["super_admin"], status="publish")
        url = f"{BASE}/{article['id']}"
        await client.get(url)
        second = await client.get(url)
        assert second.json()["views"] == 2

        liked = await client.post(f"{url}/like")
        assert liked.json() == {"id": article["id"], "likes": 1}

    @pytest.mark.asyncio
    async def test_cannot_like_hidden_article(self, client, users):
        draft = await _create(client, users["kemenkes"])
        response = await client.post(f"{BASE}/{draft['id']}/like")
        assert response.status_code == 404
