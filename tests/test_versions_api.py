"""Tests for version history endpoints."""

from tests.conftest import auth_headers, make_document


def _snapshot(client, doc_id, title, user="u1", **params):
    return client.post(
        f"/api/documents/{doc_id}/versions",
        params=params,
        json={"content": f"body of {title}", "title": title},
        headers=auth_headers(user),
    )


class TestVersionsAPI:

    def test_create_and_list_newest_first(self, client):
        doc = make_document(client)
        assert _snapshot(client, doc["id"], "v1").status_code == 201
        _snapshot(client, doc["id"], "v2")

        resp = client.get(f"/api/documents/{doc['id']}/versions", headers=auth_headers("u1"))
        assert resp.status_code == 200
        assert [v["title"] for v in resp.json()] == ["v2", "v1"]

    def test_latest(self, client):
        doc = make_document(client)
        _snapshot(client, doc["id"], "v1")
        _snapshot(client, doc["id"], "v2")
        resp = client.get(f"/api/documents/{doc['id']}/versions/latest", headers=auth_headers("u1"))
        assert resp.json()["title"] == "v2"

    def test_latest_is_null_without_versions(self, client):
        doc = make_document(client)
        resp = client.get(f"/api/documents/{doc['id']}/versions/latest", headers=auth_headers("u1"))
        assert resp.status_code == 200
        assert resp.json() is None

    def test_get_by_id(self, client):
        doc = make_document(client)
        version = _snapshot(client, doc["id"], "v1").json()
        resp = client.get(f"/api/versions/{version['id']}", headers=auth_headers("u1"))
        assert resp.status_code == 200
        assert resp.json()["content"] == "body of v1"
        assert resp.json()["created_by"] == "u1"


class TestVersionSoftFail:
    """The list answers [] where the by-id lookup answers 403."""

    def test_stranger_list_empty_get_forbidden(self, client):
        doc = make_document(client)
        version = _snapshot(client, doc["id"], "v1").json()

        listed = client.get(f"/api/documents/{doc['id']}/versions", headers=auth_headers("u2"))
        assert listed.status_code == 200
        assert listed.json() == []

        direct = client.get(f"/api/versions/{version['id']}", headers=auth_headers("u2"))
        assert direct.status_code == 403
        assert direct.json()["error"]["code"] == "FORBIDDEN"

    def test_any_active_link_opens_history(self, client):
        doc = make_document(client)
        version = _snapshot(client, doc["id"], "v1").json()
        client.post(f"/api/documents/{doc['id']}/share-links", json={}, headers=auth_headers("u1"))

        assert len(client.get(f"/api/documents/{doc['id']}/versions", headers=auth_headers("u2")).json()) == 1
        assert client.get(f"/api/versions/{version['id']}", headers=auth_headers("u2")).status_code == 200

    def test_missing_document_is_404(self, client):
        resp = client.get("/api/documents/missing/versions", headers=auth_headers("u1"))
        assert resp.status_code == 404

    def test_missing_version_is_404(self, client):
        resp = client.get("/api/versions/missing", headers=auth_headers("u1"))
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "VERSION_NOT_FOUND"


class TestVersionCreateGate:

    def test_commenter_cannot_snapshot(self, client):
        doc = make_document(client)
        client.post(f"/api/documents/{doc['id']}/permissions", json={"user_id": "u2", "role": "commenter"}, headers=auth_headers("u1"))
        assert _snapshot(client, doc["id"], "v1", user="u2").status_code == 403

    def test_editor_link_can_snapshot(self, client):
        doc = make_document(client)
        link = client.post(f"/api/documents/{doc['id']}/share-links", json={"role": "editor"}, headers=auth_headers("u1")).json()
        resp = _snapshot(client, doc["id"], "v1", user="u3", token=link["token"])
        assert resp.status_code == 201
