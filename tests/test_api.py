from models.Like import Like
from models.Notification import Notification
from models.User import User
from schemas import ExternalIdentity


def test_feed_empty(client):
    resp = client.get("/posts/")
    assert resp.status_code == 200
    assert resp.json() == []


def test_create_post_unauthenticated(client):
    resp = client.post("/posts/", json={"content": "hello"})
    assert resp.status_code == 401


def test_first_request_provisions_user(client, db, identities):
    identities["new-uid"] = ExternalIdentity(uid="new-uid", email="newbie@example.com", name="New Bie")

    resp = client.post("/posts/", json={"content": "hello"}, headers={"X-Test-Uid": "new-uid"})

    assert resp.status_code == 201
    user = db.query(User).filter(User.firebase_uid == "new-uid").one()
    assert user.username == "newbie"
    assert resp.json()["author_id"] == user.id


def test_sync_user_is_idempotent(client, identities):
    identities["uid-1"] = ExternalIdentity(uid="uid-1", email="ada@example.com")
    headers = {"X-Test-Uid": "uid-1"}

    first = client.post("/users/sync", headers=headers)
    second = client.post("/users/sync", headers=headers)

    assert first.status_code == 200
    assert first.json()["id"] == second.json()["id"]


def test_me_with_counts(client, make_user, make_post, login):
    ada = make_user("ada")
    make_post(ada)

    resp = client.get("/users/me", headers=login(ada))

    assert resp.status_code == 200
    body = resp.json()
    assert body["username"] == "ada"
    assert body["posts_count"] == 1


def test_like_flow_over_http(client, db, make_user, make_post, login):
    ada, bob = make_user("ada"), make_user("bob")
    post = make_post(ada)

    resp = client.post(f"/posts/{post.id}/like", headers=login(bob))
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert resp.json()["data"] == {"liked": True}

    feed = client.get("/posts/").json()
    assert feed[0]["_count"] == {"likes": 1}
    assert feed[0]["likes"] == [{"user_id": bob.id}]

    resp = client.post(f"/posts/{post.id}/like", headers=login(bob))
    assert resp.json()["data"] == {"liked": False}
    assert db.query(Like).count() == 0
    assert db.query(Notification).count() == 1


def test_delete_post_forbidden(client, make_user, make_post, login):
    ada, bob = make_user("ada"), make_user("bob")
    post = make_post(ada)

    resp = client.delete(f"/posts/{post.id}", headers=login(bob))

    assert resp.status_code == 403
    assert client.get("/posts/").json()[0]["id"] == post.id


def test_delete_post_by_author(client, make_user, make_post, login):
    ada = make_user("ada")
    post = make_post(ada)

    assert client.delete(f"/posts/{post.id}", headers=login(ada)).status_code == 204
    assert client.delete(f"/posts/{post.id}", headers=login(ada)).status_code == 404


def test_comment_flow(client, make_user, make_post, login):
    ada, bob = make_user("ada"), make_user("bob")
    post = make_post(ada)

    resp = client.post(f"/posts/{post.id}/comments", json={"content": "hi"}, headers=login(bob))
    assert resp.status_code == 201
    comment_id = resp.json()["id"]

    assert client.post(f"/posts/{post.id}/comments", json={"content": " "}, headers=login(bob)).status_code == 400

    comments = client.get(f"/posts/{post.id}/comments").json()
    assert [c["id"] for c in comments] == [comment_id]

    assert client.delete(f"/posts/comments/{comment_id}", headers=login(bob)).status_code == 204
    assert client.get(f"/posts/{post.id}/comments").json() == []


def test_self_follow_over_http(client, make_user, login):
    ada = make_user("ada")

    resp = client.post(f"/follows/{ada.id}/toggle", headers=login(ada))

    assert resp.status_code == 400
    assert resp.json()["detail"] == "You cannot follow yourself"


def test_follow_status(client, make_user, login):
    ada, bob = make_user("ada"), make_user("bob")
    headers = login(bob)

    assert client.get(f"/follows/{ada.id}/status", headers=headers).json() == {"is_following": False}
    client.post(f"/follows/{ada.id}/toggle", headers=headers)
    assert client.get(f"/follows/{ada.id}/status", headers=headers).json() == {"is_following": True}
    assert client.get(f"/follows/{ada.id}/status").json() == {"is_following": False}


def test_notifications_flow(client, make_user, make_post, login):
    ada, bob = make_user("ada"), make_user("bob")
    post = make_post(ada)
    client.post(f"/posts/{post.id}/like", headers=login(bob))
    client.post(f"/follows/{ada.id}/toggle", headers=login(bob))

    assert client.get("/notifications/").json() == []

    notifications = client.get("/notifications/", headers=login(ada)).json()
    assert {n["type"] for n in notifications} == {"LIKE", "FOLLOW"}
    assert all(n["creator"]["username"] == "bob" for n in notifications)
    assert client.get("/notifications/unread-count", headers=login(ada)).json() == {"unread": 2}

    ids = [n["id"] for n in notifications] + ["unknown-id"]
    resp = client.post("/notifications/read", json={"notification_ids": ids}, headers=login(ada))
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert client.get("/notifications/unread-count", headers=login(ada)).json() == {"unread": 0}


def test_mark_read_empty_list(client, make_user, login):
    ada = make_user("ada")
    resp = client.post("/notifications/read", json={"notification_ids": []}, headers=login(ada))
    assert resp.status_code == 200
    assert resp.json()["success"] is True


def test_profile_endpoints(client, make_user, make_post, login):
    ada, bob = make_user("ada"), make_user("bob")
    make_post(ada)
    client.post(f"/follows/{ada.id}/toggle", headers=login(bob))

    profile = client.get("/profiles/ada").json()
    assert profile["followers_count"] == 1
    assert profile["posts_count"] == 1

    assert client.get("/profiles/ghost").status_code == 404

    page = client.get("/profiles/ada/page", headers=login(bob)).json()
    assert page["is_following"] is True
    assert len(page["posts"]) == 1

    assert len(client.get(f"/profiles/id/{ada.id}/posts").json()) == 1
    assert client.get(f"/profiles/id/{ada.id}/likes").json() == []


def test_update_profile_over_http(client, make_user, login):
    ada = make_user("ada")

    resp = client.patch("/profiles/me", json={"bio": "Analyst", "location": "London"}, headers=login(ada))

    assert resp.status_code == 200
    assert resp.json()["bio"] == "Analyst"
    assert client.patch("/profiles/me", json={"bio": "x"}).status_code == 401


def test_suggested_users(client, make_user, login):
    ada = make_user("ada")
    make_user("bob")

    assert client.get("/users/suggested").json() == []
    suggested = client.get("/users/suggested", headers=login(ada)).json()
    assert [u["username"] for u in suggested] == ["bob"]


def test_conflicting_identity_is_treated_as_unauthenticated(client, db, make_user, identities):
    make_user("ada")
    identities["uid-ada-new"] = ExternalIdentity(uid="uid-ada-new", email="ada@example.com")
    headers = {"X-Test-Uid": "uid-ada-new"}

    notifications = client.get("/notifications/", headers=headers)
    post = client.post("/posts/", json={"content": "hello"}, headers=headers)

    assert notifications.status_code == 200
    assert notifications.json() == []
    assert post.status_code == 401
    assert db.query(User).count() == 1


def test_sync_conflicting_identity(client, make_user, identities):
    make_user("ada")
    identities["uid-ada-new"] = ExternalIdentity(uid="uid-ada-new", email="ada@example.com")

    resp = client.post("/users/sync", headers={"X-Test-Uid": "uid-ada-new"})

    assert resp.status_code == 400
