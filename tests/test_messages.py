from __future__ import annotations

from conftest import auth


def send(client, sender, receiver, **body):
    return client.post(f"/api/messages/{receiver.id}", json=body, headers=auth(sender))


def test_send_message_notifies_and_pushes(client, make_user, events):
    alice, bob = make_user("alice"), make_user("bob")

    response = send(client, alice, bob, text="Hi Bob")

    assert response.status_code == 201
    assert response.json()["is_read"] is False
    pushed = [(user_id, event) for user_id, event, _ in events]
    assert (bob.id, "new_notification") in pushed
    assert (bob.id, "receive_message") in pushed
    assert (alice.id, "message_sent") in pushed

    notification = client.get("/api/notifications", headers=auth(bob)).json()[0]
    assert notification["type"] == "message"
    assert notification["content"] == "Hi Bob"


def test_empty_message_rejected(client, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    assert send(client, alice, bob, text="   ").status_code == 400


def test_message_to_missing_user(client, make_user):
    alice = make_user("alice")
    response = client.post("/api/messages/999", json={"text": "hello?"}, headers=auth(alice))
    assert response.status_code == 404


def test_fetching_thread_marks_incoming_read(client, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    send(client, alice, bob, text="one")
    send(client, bob, alice, text="two")

    conversations = client.get("/api/messages/conversations", headers=auth(bob)).json()
    assert conversations[0]["participant"]["id"] == alice.id
    assert conversations[0]["last_message"] == "two"
    assert conversations[0]["unread_count"] == 1

    thread = client.get(f"/api/messages/{alice.id}", headers=auth(bob)).json()
    assert [m["text"] for m in thread] == ["one", "two"]

    conversations = client.get("/api/messages/conversations", headers=auth(bob)).json()
    assert conversations[0]["unread_count"] == 0
    # Bob's own message stays unread for Alice.
    assert client.get("/api/messages/conversations", headers=auth(alice)).json()[0]["unread_count"] == 1


def test_only_sender_updates_or_deletes(client, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    message = send(client, alice, bob, text="draft").json()

    assert client.put(f"/api/messages/update/{message['id']}", json={"text": "x"}, headers=auth(bob)).status_code == 403
    assert client.delete(f"/api/messages/delete/{message['id']}", headers=auth(bob)).status_code == 403

    response = client.put(f"/api/messages/update/{message['id']}", json={"text": "final"}, headers=auth(alice))
    assert response.status_code == 200
    assert response.json()["text"] == "final"

    assert client.delete(f"/api/messages/delete/{message['id']}", headers=auth(alice)).status_code == 200
    assert client.get(f"/api/messages/{bob.id}", headers=auth(alice)).json() == []


def test_replacing_image_deletes_old_file(client, make_user, storage):
    alice, bob = make_user("alice"), make_user("bob")
    message = send(client, alice, bob, image="http://cdn/uploads/old.png").json()

    response = client.put(
        f"/api/messages/update/{message['id']}",
        json={"image": "http://cdn/uploads/new.png"},
        headers=auth(alice),
    )

    assert response.json()["image"] == "http://cdn/uploads/new.png"
    assert storage.deleted == ["old.png"]


def test_text_edit_keeps_image(client, make_user, storage):
    alice, bob = make_user("alice"), make_user("bob")
    message = send(client, alice, bob, text="look", image="http://cdn/uploads/pic.png").json()

    response = client.put(f"/api/messages/update/{message['id']}", json={"text": "look again"}, headers=auth(alice))

    assert response.json()["image"] == "http://cdn/uploads/pic.png"
    assert storage.deleted == []


def test_clearing_only_content_rejected(client, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    message = send(client, alice, bob, image="http://cdn/uploads/pic.png").json()

    response = client.put(f"/api/messages/update/{message['id']}", json={"image": None}, headers=auth(alice))

    assert response.status_code == 400


def test_delete_message_removes_image(client, make_user, storage, events):
    alice, bob = make_user("alice"), make_user("bob")
    message = send(client, alice, bob, image="http://cdn/uploads/pic.png").json()

    client.delete(f"/api/messages/delete/{message['id']}", headers=auth(alice))

    assert storage.deleted == ["pic.png"]
    assert (bob.id, "message_deleted", {"id": message["id"]}) in events
