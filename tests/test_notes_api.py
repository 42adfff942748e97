"""Tests for notes CRUD."""

from conftest import DEVICE_B


def _create(client, headers, **body):
    return client.post("/notes", json=body, headers=headers)


def test_create_and_list(client, auth_headers):
    response = _create(client, auth_headers, title="Groceries", value="milk")
    assert response.status_code == 201
    note = response.get_json()["data"]["note"]
    assert note["title"] == "Groceries"
    assert note["value"] == "milk"

    notes = client.get("/notes", headers=auth_headers).get_json()["data"]["notes"]
    assert [n["id"] for n in notes] == [note["id"]]


def test_default_title(client, auth_headers):
    note = _create(client, auth_headers, value="no title").get_json()["data"]["note"]
    assert note["title"] == "Untitled"


def test_get_update_delete(client, auth_headers):
    note_id = _create(client, auth_headers, title="a").get_json()["data"]["note"]["id"]

    response = client.get(f"/notes/{note_id}", headers=auth_headers)
    assert response.status_code == 200

    response = client.put(f"/notes/{note_id}", json={"value": "updated"}, headers=auth_headers)
    assert response.status_code == 200
    note = response.get_json()["data"]["note"]
    assert note["value"] == "updated"
    assert note["title"] == "a"

    response = client.delete(f"/notes/{note_id}", headers=auth_headers)
    assert response.status_code == 200
    assert client.get(f"/notes/{note_id}", headers=auth_headers).status_code == 404


def test_unknown_note(client, auth_headers):
    for method in ("get", "put", "delete"):
        response = getattr(client, method)("/notes/nope", headers=auth_headers)
        assert response.status_code == 404
        assert response.get_json()["error"]["message"] == "Note not found!"


def test_notes_are_private(client, make_client, signup, auth_headers):
    note_id = _create(client, auth_headers, title="mine").get_json()["data"]["note"]["id"]

    other = make_client()
    response = signup(http=other, device=DEVICE_B, email="bob@b.com", username="bob")
    bob = {"Authorization": f"Bearer {response.get_json()['data']['accessToken']}"}

    assert other.get(f"/notes/{note_id}", headers=bob).status_code == 404
    assert other.get("/notes", headers=bob).get_json()["data"]["notes"] == []
    assert other.delete(f"/notes/{note_id}", headers=bob).status_code == 404


def test_title_too_long(client, auth_headers):
    response = _create(client, auth_headers, title="x" * 256)
    assert response.status_code == 422


def test_requires_auth(client):
    assert client.get("/notes").status_code == 401
    assert client.post("/notes", json={}).status_code == 401
