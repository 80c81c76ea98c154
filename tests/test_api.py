import base64

from sqlalchemy import text


def test_health_check(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_db_check_lists_contacts_table(client):
    body = client.get("/db_check").json()
    assert body["ok"] is True
    assert "contacts" in body["tables"]


def test_index_page(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert "Contactbook" in resp.text


def test_create_and_fetch(client):
    resp = client.post("/contacts")
    assert resp.status_code == 201
    created = resp.json()
    assert created["first"] == "New"
    assert created["favorite"] is False

    fetched = client.get(f"/contacts/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == created


def test_get_missing_contact_is_404(client):
    resp = client.get("/contacts/-1")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Contact not found"


def test_list_contacts(client):
    ids = {client.post("/contacts").json()["id"] for _ in range(2)}
    body = client.get("/contacts").json()
    assert {c["id"] for c in body} == ids
    assert all(c["favorite"] is False for c in body)


def test_patch_updates_only_given_fields(client):
    created = client.post("/contacts").json()
    resp = client.patch(f"/contacts/{created['id']}", json={"first": "Ada", "twitter": "@ada"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["first"] == "Ada"
    assert body["twitter"] == "@ada"
    assert body["last"] == "Contact"
    assert body["favorite"] is False


def test_patch_missing_contact_is_404(client):
    resp = client.patch("/contacts/99", json={"first": "Ada"})
    assert resp.status_code == 404


def test_favorite_toggle(client):
    created = client.post("/contacts").json()
    resp = client.post(f"/contacts/{created['id']}/favorite", json={"favorite": True})
    assert resp.json()["favorite"] is True
    resp = client.post(f"/contacts/{created['id']}/favorite", json={"favorite": False})
    assert resp.json()["favorite"] is False


def test_avatar_upload_stores_data_url(client):
    created = client.post("/contacts").json()
    payload = b"\x89PNG\r\n\x1a\nfake"
    resp = client.post(
        f"/contacts/{created['id']}/avatar",
        files={"file": ("me.png", payload, "image/png")},
    )
    assert resp.status_code == 200
    expected = "data:image/png;base64," + base64.b64encode(payload).decode("ascii")
    assert resp.json()["avatar"] == expected


def test_avatar_upload_rejects_non_image(client):
    created = client.post("/contacts").json()
    resp = client.post(
        f"/contacts/{created['id']}/avatar",
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )
    assert resp.status_code == 400


def test_avatar_upload_rejects_large_file(client, monkeypatch):
    from contactbook import config

    monkeypatch.setattr(config, "MAX_AVATAR_BYTES", 4)
    created = client.post("/contacts").json()
    resp = client.post(
        f"/contacts/{created['id']}/avatar",
        files={"file": ("me.png", b"too big", "image/png")},
    )
    assert resp.status_code == 413


def test_delete_contact_twice(client):
    created = client.post("/contacts").json()
    first = client.delete(f"/contacts/{created['id']}")
    assert first.json() == {"ok": True, "deleted": 1}
    assert client.get(f"/contacts/{created['id']}").status_code == 404
    second = client.delete(f"/contacts/{created['id']}")
    assert second.json() == {"ok": True, "deleted": 0}


def test_storage_fault_is_500(client):
    store = client.app.state.store
    with store.engine.begin() as conn:
        conn.execute(text("DROP TABLE contacts"))
    resp = client.get("/contacts")
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Database error"}


def test_patch_returns_404_when_contact_vanishes_before_reload(client, monkeypatch):
    created = client.post("/contacts").json()
    store = client.app.state.store
    monkeypatch.setattr(store, "get", lambda contact_id: None)
    resp = client.patch(f"/contacts/{created['id']}", json={"first": "Ada"})
    assert resp.status_code == 404
    resp = client.post(f"/contacts/{created['id']}/favorite", json={"favorite": True})
    assert resp.status_code == 404
