from __future__ import annotations

from app.models.notification import Notification
from app.models.post import Post, PostMedia, Comment
from app.services.visibility import normalize_pagination
from conftest import auth, befriend


def create_post(client, user, content="Hello", visibility="public", media=None):
    response = client.post(
        "/api/posts",
        json={"content": content, "visibility": visibility, "media": media or []},
        headers=auth(user),
    )
    assert response.status_code == 201, response.text
    return response.json()


def feed_ids(client, user=None, **params):
    headers = auth(user) if user else {}
    return [post["id"] for post in client.get("/api/posts", params=params, headers=headers).json()["items"]]


def test_connections_post_visible_after_friendship(client, make_user):
    alice, carol = make_user("alice"), make_user("carol")
    post = create_post(client, alice, visibility="connections")

    assert post["id"] not in feed_ids(client, carol)
    assert client.get(f"/api/posts/{post['id']}", headers=auth(carol)).status_code == 403

    befriend(client, alice, carol)

    assert post["id"] in feed_ids(client, carol)
    assert client.get(f"/api/posts/{post['id']}", headers=auth(carol)).status_code == 200


def test_anonymous_viewer_sees_public_posts_only(client, make_user):
    alice = make_user("alice")
    public = create_post(client, alice, visibility="public")
    create_post(client, alice, visibility="connections")
    create_post(client, alice, visibility="private")

    assert feed_ids(client) == [public["id"]]


def test_private_post_visible_to_author_only(client, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    befriend(client, alice, bob)
    post = create_post(client, alice, visibility="private")

    assert client.get(f"/api/posts/{post['id']}", headers=auth(alice)).status_code == 200
    assert client.get(f"/api/posts/{post['id']}", headers=auth(bob)).status_code == 403
    assert client.get(f"/api/posts/{post['id']}").status_code == 403
    assert post["id"] in feed_ids(client, alice)
    assert post["id"] not in feed_ids(client, bob)


def test_missing_post_is_404(client, make_user):
    assert client.get("/api/posts/12345", headers=auth(make_user("alice"))).status_code == 404


def test_feed_is_newest_first_and_paginated(client, make_user):
    alice = make_user("alice")
    ids = [create_post(client, alice, content=f"post {i}")["id"] for i in range(3)]

    body = client.get("/api/posts", params={"page": 1, "limit": 2}).json()
    assert [p["id"] for p in body["items"]] == [ids[2], ids[1]]
    assert body["pagination"] == {
        "page": 1,
        "limit": 2,
        "total_posts": 3,
        "total_pages": 2,
        "has_next_page": True,
    }

    second = client.get("/api/posts", params={"page": 2, "limit": 2}).json()
    assert [p["id"] for p in second["items"]] == [ids[0]]
    assert second["pagination"]["has_next_page"] is False


def test_pagination_limits_are_clamped():
    assert normalize_pagination(None, None) == (1, 10, 0)
    assert normalize_pagination(0, 0) == (1, 10, 0)
    assert normalize_pagination(3, 500) == (3, 50, 100)
    assert normalize_pagination(-2, -5) == (1, 1, 0)


def test_empty_post_rejected(client, make_user):
    alice = make_user("alice")
    response = client.post("/api/posts", json={"content": "   "}, headers=auth(alice))
    assert response.status_code == 400


def test_media_only_post_allowed(client, make_user):
    alice = make_user("alice")
    post = create_post(client, alice, content="", media=[{"url": "http://cdn/uploads/a.png", "type": "image"}])
    assert post["media"][0]["storage_id"] == "a.png"
    assert "storageId" not in post["media"][0]


def test_invalid_visibility_rejected(client, make_user):
    response = client.post("/api/posts", json={"content": "x", "visibility": "friends"}, headers=auth(make_user("alice")))
    assert response.status_code == 400


def test_new_post_notifies_each_friend(client, make_user, db_session):
    alice, bob, carol, dave = make_user("alice"), make_user("bob"), make_user("carol"), make_user("dave")
    befriend(client, alice, bob)
    befriend(client, carol, alice)

    post = create_post(client, alice)

    recipients = {
        n.recipient_id
        for n in db_session.query(Notification).filter_by(type="post", related_item_id=post["id"]).all()
    }
    assert recipients == {bob.id, carol.id}
    assert dave.id not in recipients


def test_like_toggles(client, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    post = create_post(client, bob)

    first = client.post(f"/api/posts/{post['id']}/like", headers=auth(alice)).json()
    second = client.post(f"/api/posts/{post['id']}/like", headers=auth(alice)).json()

    assert first == {"likes_count": 1, "is_liked": True}
    assert second == {"likes_count": 0, "is_liked": False}

    notifications = client.get("/api/notifications", headers=auth(bob)).json()
    assert [n["type"] for n in notifications] == ["like"]


def test_liking_own_post_does_not_notify(client, make_user):
    alice = make_user("alice")
    post = create_post(client, alice)
    client.post(f"/api/posts/{post['id']}/like", headers=auth(alice))
    assert client.get("/api/notifications", headers=auth(alice)).json() == []


def test_bookmarks(client, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    post = create_post(client, bob)

    assert client.post(f"/api/posts/{post['id']}/bookmark", headers=auth(alice)).json() == {"is_bookmarked": True}
    assert client.get(f"/api/posts/{post['id']}/bookmark", headers=auth(alice)).json() == {"is_bookmarked": True}
    assert [p["id"] for p in client.get("/api/posts/bookmarks", headers=auth(alice)).json()] == [post["id"]]

    assert client.post(f"/api/posts/{post['id']}/bookmark", headers=auth(alice)).json() == {"is_bookmarked": False}
    assert client.get("/api/posts/bookmarks", headers=auth(alice)).json() == []


def test_share_counter(client, make_user):
    alice = make_user("alice")
    post = create_post(client, alice)

    client.post(f"/api/posts/{post['id']}/share", headers=auth(alice))
    response = client.post(f"/api/posts/{post['id']}/share", headers=auth(alice))

    assert response.json() == {"shares_count": 2}
    assert client.get(f"/api/posts/{post['id']}/shares").json() == {"shares_count": 2}


def test_update_post_removes_selected_media(client, make_user, storage):
    alice = make_user("alice")
    post = create_post(
        client,
        alice,
        media=[
            {"url": "http://cdn/uploads/keep.png", "storageId": "keep.png"},
            {"url": "http://cdn/uploads/drop.png", "storageId": "drop.png"},
        ],
    )

    response = client.put(
        f"/api/posts/{post['id']}",
        json={"content": "Edited", "mediaToDelete": ["drop.png"]},
        headers=auth(alice),
    )

    assert response.status_code == 200
    assert response.json()["content"] == "Edited"
    assert [m["storage_id"] for m in response.json()["media"]] == ["keep.png"]
    assert storage.deleted == ["drop.png"]


def test_only_author_or_admin_can_modify(client, make_user):
    alice, bob, admin = make_user("alice"), make_user("bob"), make_user("root", role="admin")
    post = create_post(client, alice)

    assert client.put(f"/api/posts/{post['id']}", json={"content": "hijack"}, headers=auth(bob)).status_code == 403
    assert client.delete(f"/api/posts/{post['id']}", headers=auth(bob)).status_code == 403
    assert client.delete(f"/api/posts/{post['id']}", headers=auth(admin)).status_code == 200


def test_delete_post_removes_media_and_comments(client, make_user, storage, db_session):
    alice, bob = make_user("alice"), make_user("bob")
    media = [{"url": f"http://cdn/uploads/{i}.png", "storageId": f"{i}.png"} for i in range(3)]
    post = create_post(client, alice, media=media)
    client.post(f"/api/posts/{post['id']}/comments", json={"content": "nice"}, headers=auth(bob))

    assert client.delete(f"/api/posts/{post['id']}", headers=auth(alice)).status_code == 200

    assert sorted(storage.deleted) == ["0.png", "1.png", "2.png"]
    assert db_session.query(Post).count() == 0
    assert db_session.query(PostMedia).count() == 0
    assert db_session.query(Comment).count() == 0


def test_delete_post_survives_storage_failure(client, make_user, storage):
    alice = make_user("alice")
    storage.failing.add("broken.png")
    post = create_post(client, alice, media=[{"url": "http://cdn/uploads/broken.png"}])

    assert client.delete(f"/api/posts/{post['id']}", headers=auth(alice)).status_code == 200
    assert client.get(f"/api/posts/{post['id']}", headers=auth(alice)).status_code == 404


def test_my_posts(client, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    mine = create_post(client, alice, visibility="private")
    create_post(client, bob)

    assert [p["id"] for p in client.get("/api/posts/mine", headers=auth(alice)).json()] == [mine["id"]]


def test_hidden_post_cannot_be_bookmarked(client, make_user):
    alice, mallory = make_user("alice"), make_user("mallory")
    post = create_post(client, alice, content="secret plan", visibility="private")

    assert client.post(f"/api/posts/{post['id']}/bookmark", headers=auth(mallory)).status_code == 403
    assert client.get(f"/api/posts/{post['id']}/bookmark", headers=auth(mallory)).status_code == 403
    assert client.get("/api/posts/bookmarks", headers=auth(mallory)).json() == []


def test_bookmark_list_drops_posts_made_private(client, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    post = create_post(client, alice)
    client.post(f"/api/posts/{post['id']}/bookmark", headers=auth(bob))

    client.put(f"/api/posts/{post['id']}", json={"visibility": "private"}, headers=auth(alice))

    assert client.get("/api/posts/bookmarks", headers=auth(bob)).json() == []


def test_connections_post_bookmarkable_by_friends(client, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    befriend(client, alice, bob)
    post = create_post(client, alice, visibility="connections")

    assert client.post(f"/api/posts/{post['id']}/bookmark", headers=auth(bob)).json() == {"is_bookmarked": True}
    assert [p["id"] for p in client.get("/api/posts/bookmarks", headers=auth(bob)).json()] == [post["id"]]


def test_hidden_post_cannot_be_liked_or_shared(client, make_user, db_session):
    alice, carol = make_user("alice"), make_user("carol")
    post = create_post(client, alice, visibility="connections")

    assert client.post(f"/api/posts/{post['id']}/like", headers=auth(carol)).status_code == 403
    assert client.post(f"/api/posts/{post['id']}/share", headers=auth(carol)).status_code == 403
    assert client.get(f"/api/posts/{post['id']}/shares", headers=auth(carol)).status_code == 403
    assert client.get(f"/api/posts/{post['id']}/shares").status_code == 403

    assert db_session.query(Notification).filter_by(type="like").count() == 0
    assert client.get(f"/api/posts/{post['id']}", headers=auth(alice)).json()["likes_count"] == 0
