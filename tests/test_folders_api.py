"""Tests for folder endpoints and FolderService cycle handling."""

import pytest

from docward.exceptions import ValidationError
from docward.models import Folder
from docward.services.folder_service import MAX_FOLDER_DEPTH, FolderService
from tests.conftest import auth_headers, make_document, make_principal


def _create(client, name, parent_id=None, user="u1", org=None):
    resp = client.post("/api/folders", json={"name": name, "parent_id": parent_id}, headers=auth_headers(user, org))
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestFoldersAPI:

    def test_create_and_list(self, client):
        root = _create(client, "Projects")
        child = _create(client, "Alpha", parent_id=root["id"])
        assert child["parent_id"] == root["id"]

        names = [f["name"] for f in client.get("/api/folders", headers=auth_headers("u1")).json()]
        assert names == ["Alpha", "Projects"]

    def test_other_users_folders_hidden(self, client):
        _create(client, "Private", user="u1")
        assert client.get("/api/folders", headers=auth_headers("u2")).json() == []

    def test_org_members_see_org_folders(self, client):
        _create(client, "Team", user="u1", org="orgA")
        names = [f["name"] for f in client.get("/api/folders", headers=auth_headers("u4", org="orgA")).json()]
        assert names == ["Team"]

    def test_invalid_name_is_400(self, client):
        resp = client.post("/api/folders", json={"name": "a/b"}, headers=auth_headers("u1"))
        assert resp.status_code == 400

    def test_rename(self, client):
        folder = _create(client, "Old")
        resp = client.patch(f"/api/folders/{folder['id']}", json={"name": "New"}, headers=auth_headers("u1"))
        assert resp.status_code == 200
        assert resp.json()["name"] == "New"

    def test_only_owner_may_rename(self, client):
        folder = _create(client, "Mine", user="u1", org="orgA")
        resp = client.patch(f"/api/folders/{folder['id']}", json={"name": "Theirs"}, headers=auth_headers("u4", org="orgA"))
        assert resp.status_code == 403

    def test_move_into_descendant_is_400(self, client):
        a = _create(client, "A")
        b = _create(client, "B", parent_id=a["id"])
        resp = client.patch(f"/api/folders/{a['id']}", json={"parent_id": b["id"]}, headers=auth_headers("u1"))
        assert resp.status_code == 400

    def test_move_to_root(self, client):
        a = _create(client, "A")
        b = _create(client, "B", parent_id=a["id"])
        resp = client.patch(f"/api/folders/{b['id']}", json={"parent_id": None}, headers=auth_headers("u1"))
        assert resp.json()["parent_id"] is None

    def test_path(self, client):
        a = _create(client, "A")
        b = _create(client, "B", parent_id=a["id"])
        c = _create(client, "C", parent_id=b["id"])
        resp = client.get(f"/api/folders/{c['id']}/path", headers=auth_headers("u1"))
        assert [f["name"] for f in resp.json()] == ["A", "B", "C"]

    def test_delete_reparents_and_detaches(self, client):
        a = _create(client, "A")
        b = _create(client, "B", parent_id=a["id"])
        c = _create(client, "C", parent_id=b["id"])
        doc = make_document(client, folder_id=b["id"])

        resp = client.delete(f"/api/folders/{b['id']}", headers=auth_headers("u1"))
        assert resp.status_code == 204

        folders = {f["id"]: f for f in client.get("/api/folders", headers=auth_headers("u1")).json()}
        assert b["id"] not in folders
        assert folders[c["id"]]["parent_id"] == a["id"]
        assert client.get(f"/api/documents/{doc['id']}", headers=auth_headers("u1")).json()["folder_id"] is None

    def test_missing_folder_is_404(self, client):
        resp = client.delete("/api/folders/missing", headers=auth_headers("u1"))
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "FOLDER_NOT_FOUND"


class TestFolderCycles:
    """Walks stay bounded even over rows that already form a cycle."""

    def test_folder_path_tolerates_existing_cycle(self, db):
        a = Folder(id="a", name="A", owner_id="u1")
        b = Folder(id="b", name="B", owner_id="u1")
        db.add_all([a, b])
        db.commit()
        a.parent_id = "b"
        b.parent_id = "a"
        db.commit()

        path = FolderService(db).folder_path("a")
        assert [f.id for f in path] == ["b", "a"]

    def test_move_into_self_rejected(self, db):
        svc = FolderService(db)
        owner = make_principal("u1")
        folder = svc.create_folder(owner, "Solo")
        with pytest.raises(ValidationError):
            svc.move_folder(owner, folder.id, folder.id)

    def test_too_deep_chain_rejected(self, db):
        svc = FolderService(db)
        owner = make_principal("u1")
        parent = None
        for n in range(MAX_FOLDER_DEPTH + 1):
            parent = svc.create_folder(owner, f"level-{n}", parent.id if parent else None)
        extra = svc.create_folder(owner, "extra")
        with pytest.raises(ValidationError):
            svc.move_folder(owner, extra.id, parent.id)

    def test_delete_inside_cycle_leaves_no_self_loop(self, db):
        a = Folder(id="a", name="A", owner_id="u1")
        b = Folder(id="b", name="B", owner_id="u1")
        db.add_all([a, b])
        db.commit()
        a.parent_id = "b"
        b.parent_id = "a"
        db.commit()

        FolderService(db).delete_folder(make_principal("u1"), "a")

        db.expire_all()
        remaining = db.get(Folder, "b")
        assert remaining.parent_id is None
        assert db.get(Folder, "a") is None
