"""
Tests for the notes workspace: folders, notes, move/reorder, inline images.
"""


def _create_note(client, headers, folder_id=None):
    r = client.post("/api/notes", json={"folder_id": folder_id}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def _create_folder(client, headers, name="Folder"):
    r = client.post("/api/notes/folders", json={"name": name}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def _positions(client, headers, folder_id):
    notes = client.get("/api/notes/workspace", headers=headers).json()["notes"]
    return sorted(
        (n["position"], n["id"]) for n in notes if n["folder_id"] == folder_id
    )


class TestWorkspace:

    def test_first_visit_seeds(self, client, auth):
        ws = client.get("/api/notes/workspace", headers=auth).json()
        assert [f["name"] for f in ws["folders"]] == ["General"]
        assert len(ws["notes"]) == 1
        note = ws["notes"][0]
        assert note["title"] == "New note"
        assert note["folder_id"] is None
        assert note["font_size"] == 16

    def test_second_visit_does_not_reseed(self, client, auth):
        client.get("/api/notes/workspace", headers=auth)
        ws = client.get("/api/notes/workspace", headers=auth).json()
        assert len(ws["folders"]) == 1
        assert len(ws["notes"]) == 1

    def test_isolated_per_user(self, client, auth, other_auth):
        _create_note(client, auth)
        ws = client.get("/api/notes/workspace", headers=other_auth).json()
        assert len(ws["notes"]) == 1  # only the seeded note


class TestFolders:

    def test_create_positions(self, client, auth):
        a = _create_folder(client, auth, "A")
        b = _create_folder(client, auth, " ")
        assert a["position"] == 0
        assert b["position"] == 1
        assert b["name"] == "New folder"

    def test_rename(self, client, auth):
        f = _create_folder(client, auth)
        r = client.patch(f"/api/notes/folders/{f['id']}", json={"name": "Ideas"}, headers=auth)
        assert r.json()["name"] == "Ideas"
        r = client.patch(f"/api/notes/folders/{f['id']}", json={"name": ""}, headers=auth)
        assert r.status_code == 400

    def test_reorder(self, client, auth):
        a, b, c = (_create_folder(client, auth, n) for n in "abc")
        r = client.post("/api/notes/folders/reorder", json={"ordered_ids": [c["id"], a["id"], b["id"]]}, headers=auth)
        assert [(f["name"], f["position"]) for f in r.json()] == [("c", 0), ("a", 1), ("b", 2)]

        listed = client.get("/api/notes/folders", headers=auth).json()
        assert [f["name"] for f in listed] == ["c", "a", "b"]

    def test_delete_moves_notes_to_uncategorized(self, client, auth):
        loose = _create_note(client, auth)
        folder = _create_folder(client, auth)
        n1 = _create_note(client, auth, folder["id"])
        n2 = _create_note(client, auth, folder["id"])

        r = client.delete(f"/api/notes/folders/{folder['id']}", headers=auth)
        assert r.json() == {"deleted": True, "moved_notes": 2}

        assert [nid for _, nid in _positions(client, auth, None)] == [loose["id"], n1["id"], n2["id"]]
        assert [p for p, _ in _positions(client, auth, None)] == [0, 1, 2]

    def test_foreign_folder(self, client, auth, other_auth):
        f = _create_folder(client, auth)
        assert client.patch(f"/api/notes/folders/{f['id']}", json={"name": "x"}, headers=other_auth).status_code == 404
        assert client.delete(f"/api/notes/folders/{f['id']}", headers=other_auth).status_code == 404
        assert client.post("/api/notes", json={"folder_id": f["id"]}, headers=other_auth).status_code == 404


class TestNotes:

    def test_create_appends(self, client, auth):
        a = _create_note(client, auth)
        b = _create_note(client, auth)
        assert (a["position"], b["position"]) == (0, 1)

    def test_get(self, client, auth):
        n = _create_note(client, auth)
        r = client.get(f"/api/notes/{n['id']}", headers=auth)
        assert r.status_code == 200
        assert r.json()["id"] == n["id"]

    def test_patch(self, client, auth):
        n = _create_note(client, auth)
        r = client.patch(
            f"/api/notes/{n['id']}",
            json={"title": "  ", "content": "<p>Hello <b>there</b></p>", "font_size": 72},
            headers=auth,
        )
        body = r.json()
        assert body["title"] == "New note"
        assert body["content"] == "<p>Hello <b>there</b></p>"
        assert body["excerpt"] == "Hello there"
        assert body["font_size"] == 40

        r = client.patch(f"/api/notes/{n['id']}", json={"title": "Plan", "font_size": 3.4}, headers=auth)
        assert r.json()["title"] == "Plan"
        assert r.json()["font_size"] == 12
        assert r.json()["content"] == "<p>Hello <b>there</b></p>"

    def test_move_reindexes_both_folders(self, client, auth):
        folder = _create_folder(client, auth)
        a = _create_note(client, auth)
        b = _create_note(client, auth)
        c = _create_note(client, auth)
        existing = _create_note(client, auth, folder["id"])

        r = client.post(f"/api/notes/{b['id']}/move", json={"folder_id": folder["id"]}, headers=auth)
        assert r.json()["folder_id"] == folder["id"]
        assert r.json()["position"] == 1

        assert _positions(client, auth, None) == [(0, a["id"]), (1, c["id"])]
        assert _positions(client, auth, folder["id"]) == [(0, existing["id"]), (1, b["id"])]

    def test_move_to_same_folder_is_noop(self, client, auth):
        a = _create_note(client, auth)
        r = client.post(f"/api/notes/{a['id']}/move", json={"folder_id": None}, headers=auth)
        assert r.json()["position"] == 0

    def test_reorder(self, client, auth):
        a, b, c = (_create_note(client, auth) for _ in range(3))
        r = client.post(
            "/api/notes/reorder",
            json={"folder_id": None, "ordered_ids": [c["id"], a["id"], b["id"]]},
            headers=auth,
        )
        assert r.status_code == 200
        assert [(n["id"], n["position"]) for n in r.json()] == [(c["id"], 0), (a["id"], 1), (b["id"], 2)]

    def test_reorder_rejects_note_from_other_folder(self, client, auth):
        folder = _create_folder(client, auth)
        a = _create_note(client, auth)
        elsewhere = _create_note(client, auth, folder["id"])
        r = client.post(
            "/api/notes/reorder",
            json={"folder_id": None, "ordered_ids": [elsewhere["id"], a["id"]]},
            headers=auth,
        )
        assert r.status_code == 400

    def test_delete_reindexes(self, client, auth):
        a, b, c = (_create_note(client, auth) for _ in range(3))
        assert client.delete(f"/api/notes/{b['id']}", headers=auth).json() == {"deleted": True}
        assert _positions(client, auth, None) == [(0, a["id"]), (1, c["id"])]

    def test_foreign_note(self, client, auth, other_auth):
        n = _create_note(client, auth)
        assert client.get(f"/api/notes/{n['id']}", headers=other_auth).status_code == 404
        assert client.patch(f"/api/notes/{n['id']}", json={"title": "x"}, headers=other_auth).status_code == 404
        assert client.delete(f"/api/notes/{n['id']}", headers=other_auth).status_code == 404


PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


class TestNoteImages:

    def test_upload_and_fetch(self, client, auth):
        r = client.post(
            "/api/notes/images/upload",
            files={"file": ("paste.png", PNG, "image/png")},
            headers=auth,
        )
        assert r.status_code == 200
        body = r.json()
        assert body["ok"] is True
        assert body["path"].startswith("notes/")
        assert body["path"].endswith(".png")
        assert body["url"].startswith("/api/notes/images?path=notes%2F")

        img = client.get(body["url"], headers=auth)
        assert img.status_code == 200
        assert img.content == PNG
        assert img.headers["content-type"] == "image/png"
        assert "immutable" in img.headers["cache-control"]

    def test_unsupported_type(self, client, auth):
        r = client.post(
            "/api/notes/images/upload",
            files={"file": ("doc.pdf", b"%PDF", "application/pdf")},
            headers=auth,
        )
        assert r.status_code == 415

    def test_too_large(self, client, auth, monkeypatch):
        from settings import get_settings

        monkeypatch.setattr(get_settings(), "max_note_image_bytes", 8)
        r = client.post(
            "/api/notes/images/upload",
            files={"file": ("big.png", PNG, "image/png")},
            headers=auth,
        )
        assert r.status_code == 413

    def test_other_users_image_forbidden(self, client, auth, other_auth):
        path = client.post(
            "/api/notes/images/upload",
            files={"file": ("paste.png", PNG, "image/png")},
            headers=auth,
        ).json()["path"]
        r = client.get("/api/notes/images", params={"path": path}, headers=other_auth)
        assert r.status_code == 403

    def test_missing_path_and_object(self, client, auth):
        assert client.get("/api/notes/images", headers=auth).status_code == 400

        me = client.get("/api/auth/me", headers=auth).json()
        r = client.get("/api/notes/images", params={"path": f"notes/{me['id']}/nope.png"}, headers=auth)
        assert r.status_code == 404

    def test_requires_auth(self, client):
        assert client.get("/api/notes/images", params={"path": "notes/x/y.png"}).status_code == 401
