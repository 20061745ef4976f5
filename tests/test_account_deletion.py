"""Cascading account deletion tests."""

from unittest.mock import patch

import pytest
from conftest import PNG_BYTES, TEST_PASSWORD

from src.models import Favorite, Post, Rating, User
from src.services.account_service import AccountService
from src.services.errors import InvalidCredentialError, NotFoundError
from src.services.media import MediaKind, MediaStore


def delete_account(client, headers, password=TEST_PASSWORD):
    return client.request("DELETE", "/api/user/me", headers=headers, json={"password": password})


def test_delete_account_removes_everything(client, db, register_user, create_post):
    """No rating, favorite or post references the deleted user or their posts."""
    alice = register_user(email="alice@example.com")
    bob = register_user(email="bob@example.com")
    alice_post = create_post(alice, title="Alice post")
    bob_post = create_post(bob, title="Bob post")

    # Bob interacts with Alice's post, Alice with Bob's
    client.put(f"/api/ratings/{alice_post['id']}", headers=bob, json={"rating": 5})
    client.post(f"/api/favorites/{alice_post['id']}", headers=bob)
    client.put(f"/api/ratings/{bob_post['id']}", headers=alice, json={"rating": 1})
    client.post(f"/api/favorites/{bob_post['id']}", headers=alice)

    response = delete_account(client, alice)
    assert response.status_code == 200
    assert response.json() == {"ok": True}

    assert db.query(User).filter(User.id == alice.user_id).count() == 0
    assert db.query(Post).filter(Post.author_id == alice.user_id).count() == 0
    assert db.query(Rating).filter(Rating.user_id == alice.user_id).count() == 0
    assert db.query(Favorite).filter(Favorite.user_id == alice.user_id).count() == 0
    assert db.query(Rating).filter(Rating.post_id == alice_post["id"]).count() == 0
    assert db.query(Favorite).filter(Favorite.post_id == alice_post["id"]).count() == 0
    assert not MediaStore().path_for(alice_post["image"], MediaKind.POSTS).exists()

    # Bob's data survives, minus Alice's contributions
    summary = client.get(f"/api/ratings/{bob_post['id']}", headers=bob).json()
    assert summary == {"averageRating": 0, "votesCount": 0, "myRating": 0}
    assert client.get("/api/favorites", headers=bob).json() == []
    assert [p["title"] for p in client.get("/api/posts").json()] == ["Bob post"]


def test_deleted_user_token_stops_working(client, auth_headers):
    assert delete_account(client, auth_headers).status_code == 200

    assert client.get("/api/user/me", headers=auth_headers).status_code == 401
    response = client.post(
        "/api/user/auth", json={"email": auth_headers.email, "password": TEST_PASSWORD}
    )
    assert response.status_code == 401


def test_delete_account_wrong_password(client, db, auth_headers, create_post):
    """A wrong password deletes nothing."""
    post = create_post(auth_headers)

    response = delete_account(client, auth_headers, password="wrongpass")
    assert response.status_code == 401

    assert db.query(User).filter(User.id == auth_headers.user_id).count() == 1
    assert client.get(f"/api/posts/{post['id']}").status_code == 200
    assert MediaStore().path_for(post["image"], MediaKind.POSTS).exists()


def test_delete_account_requires_auth(client):
    response = client.request("DELETE", "/api/user/me", json={"password": TEST_PASSWORD})
    assert response.status_code == 401


def test_delete_account_removes_uploaded_avatar(client, auth_headers):
    avatar_url = client.post(
        "/api/user/me/avatar",
        headers=auth_headers,
        files={"avatar": ("me.png", PNG_BYTES, "image/png")},
    ).json()["avatarUrl"]
    avatar_path = MediaStore().path_for(avatar_url, MediaKind.AVATARS)
    assert avatar_path.exists()

    assert delete_account(client, auth_headers).status_code == 200
    assert not avatar_path.exists()


def test_delete_account_keeps_external_avatar(db, make_user):
    """Default avatars are hosted elsewhere and never touched."""
    user = make_user("external@example.com")
    media = MediaStore()

    with patch.object(media, "delete", wraps=media.delete) as delete_spy:
        report = AccountService(db, media=media).delete_account(user.id, TEST_PASSWORD)

    delete_spy.assert_not_called()
    assert report.files_deleted == 0
    assert report.files_failed == 0


def test_file_failures_do_not_abort_deletion(db, make_user, make_post):
    """Every row is removed even if each file deletion fails."""
    user = make_user("broken@example.com")
    user_id = user.id
    media = MediaStore()
    make_post(user, title="One", image=media.url_for(MediaKind.POSTS, "one.png"))
    make_post(user, title="Two", image=media.url_for(MediaKind.POSTS, "two.png"))
    user.avatar_url = media.url_for(MediaKind.AVATARS, "me.png")
    db.commit()

    with patch.object(media, "delete", side_effect=OSError("disk on fire")):
        report = AccountService(db, media=media).delete_account(user_id, TEST_PASSWORD)

    assert report.posts == 2
    assert report.files_failed == 3
    assert report.files_deleted == 0
    assert db.query(User).filter(User.id == user_id).count() == 0
    assert db.query(Post).count() == 0


def test_missing_files_are_not_failures(db, make_user, make_post):
    user = make_user("tidy@example.com")
    make_post(user)

    report = AccountService(db).delete_account(user.id, TEST_PASSWORD)

    assert report.posts == 1
    assert report.files_deleted == 0
    assert report.files_failed == 0


def test_deletion_report_counts_dependants(db, make_user, make_post):
    author = make_user("author@example.com")
    reader = make_user("reader@example.com")
    post = make_post(author)
    other_post = make_post(reader)
    db.add_all(
        [
            Rating(user_id=reader.id, post_id=post.id, value=4),
            Favorite(user_id=reader.id, post_id=post.id),
            Rating(user_id=author.id, post_id=other_post.id, value=2),
        ]
    )
    db.commit()

    report = AccountService(db).delete_account(author.id, TEST_PASSWORD)

    assert report.posts == 1
    assert report.ratings == 2
    assert report.favorites == 1
    assert db.query(Rating).count() == 0
    assert db.query(Favorite).count() == 0
    assert db.query(Post).all() == [other_post]


def test_three_user_scenario(client, register_user, create_post):
    """A and B rate and favorite C's post; deleting C leaves nothing behind for A and B."""
    a = register_user(email="a@example.com")
    b = register_user(email="b@example.com")
    c = register_user(email="c@example.com")
    post = create_post(c)

    client.put(f"/api/ratings/{post['id']}", headers=a, json={"rating": 4})
    client.put(f"/api/ratings/{post['id']}", headers=b, json={"rating": 2})
    client.post(f"/api/favorites/{post['id']}", headers=a)
    assert client.get(f"/api/ratings/{post['id']}", headers=a).json()["averageRating"] == 3.0

    assert delete_account(client, c).status_code == 200

    assert client.get(f"/api/posts/{post['id']}").status_code == 404
    assert client.get(f"/api/ratings/{post['id']}", headers=a).status_code == 404
    assert client.get("/api/favorites", headers=a).json() == []
    assert client.get("/api/posts").json() == []


def test_delete_account_unknown_user(db):
    with pytest.raises(NotFoundError):
        AccountService(db).delete_account(9999, TEST_PASSWORD)


def test_delete_account_service_wrong_password(db, make_user):
    user = make_user("careful@example.com")
    with pytest.raises(InvalidCredentialError):
        AccountService(db).delete_account(user.id, "wrongpass")
    assert db.query(User).filter(User.id == user.id).count() == 1
