"""Favorites tests."""

from conftest import TestingSessionLocal

from src.models import Favorite, Post
from src.services.favorite_service import FavoriteService


def test_add_favorite(client, auth_headers, create_post):
    post = create_post(auth_headers)

    response = client.post(f"/api/favorites/{post['id']}", headers=auth_headers)
    assert response.status_code == 201
    assert response.json() == {"ok": True}

    response = client.get(f"/api/favorites/{post['id']}", headers=auth_headers)
    assert response.json() == {"favorite": True}


def test_add_favorite_twice_is_idempotent(client, db, auth_headers, create_post):
    """Adding the same favorite twice succeeds and keeps one row."""
    post = create_post(auth_headers)

    first = client.post(f"/api/favorites/{post['id']}", headers=auth_headers)
    second = client.post(f"/api/favorites/{post['id']}", headers=auth_headers)
    assert first.status_code == 201
    assert second.status_code == 200
    assert second.json() == {"ok": True}

    count = (
        db.query(Favorite)
        .filter(Favorite.user_id == auth_headers.user_id, Favorite.post_id == post["id"])
        .count()
    )
    assert count == 1


def test_add_favorite_unknown_post(client, auth_headers):
    response = client.post("/api/favorites/9999", headers=auth_headers)
    assert response.status_code == 404


def test_favorites_require_auth(client):
    assert client.get("/api/favorites").status_code == 401
    assert client.post("/api/favorites/1").status_code == 401


def test_list_favorites_most_recent_first(client, auth_headers, create_post):
    first = create_post(auth_headers, title="First")
    second = create_post(auth_headers, title="Second")
    third = create_post(auth_headers, title="Third")

    for post in (second, first, third):
        client.post(f"/api/favorites/{post['id']}", headers=auth_headers)

    response = client.get("/api/favorites", headers=auth_headers)
    assert response.status_code == 200
    assert [p["title"] for p in response.json()] == ["Third", "First", "Second"]


def test_favorites_are_per_user(client, register_user, create_post):
    alice = register_user(email="alice@example.com")
    bob = register_user(email="bob@example.com")
    post = create_post(alice)
    client.post(f"/api/favorites/{post['id']}", headers=alice)

    assert client.get("/api/favorites", headers=bob).json() == []
    assert client.get(f"/api/favorites/{post['id']}", headers=bob).json() == {"favorite": False}


def test_remove_favorite(client, auth_headers, create_post):
    post = create_post(auth_headers)
    client.post(f"/api/favorites/{post['id']}", headers=auth_headers)

    response = client.delete(f"/api/favorites/{post['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert client.get("/api/favorites", headers=auth_headers).json() == []


def test_remove_missing_favorite_succeeds(client, auth_headers):
    response = client.delete("/api/favorites/9999", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_list_skips_favorites_of_missing_posts(db, make_user, make_post):
    """A favorite whose post row vanished is dropped from the listing."""
    user = make_user("reader@example.com")
    kept = make_post(user, title="Kept")
    gone = make_post(user, title="Gone")
    db.add_all(
        [
            Favorite(user_id=user.id, post_id=kept.id),
            Favorite(user_id=user.id, post_id=gone.id),
        ]
    )
    db.commit()

    # Bypass the service cascade to simulate an orphaned favorite
    db.query(Post).filter(Post.id == gone.id).delete(synchronize_session=False)
    db.commit()

    favorites = FavoriteService(db).list_my_favorites(user.id)
    assert [post.title for post in favorites] == ["Kept"]


def test_delete_for_posts_leaves_other_posts(db, make_user, make_post):
    user = make_user("reader@example.com")
    first = make_post(user, title="First")
    second = make_post(user, title="Second")
    service = FavoriteService(db)
    service.add_favorite(user.id, first.id)
    service.add_favorite(user.id, second.id)

    removed = service.delete_for_posts([first.id])
    db.commit()

    assert removed == 1
    assert service.is_favorite(user.id, second.id)
    assert not service.is_favorite(user.id, first.id)


def test_concurrent_favorite_insert_is_success(db, make_user, make_post, monkeypatch):
    """Losing the insert race to another request still counts as favorited."""
    user = make_user("reader@example.com")
    post = make_post(user)
    user_id, post_id = user.id, post.id

    original_add = db.add

    def add_after_concurrent_insert(instance, *args, **kwargs):
        if isinstance(instance, Favorite):
            other = TestingSessionLocal()
            other.add(Favorite(user_id=user_id, post_id=post_id))
            other.commit()
            other.close()
        return original_add(instance, *args, **kwargs)

    monkeypatch.setattr(db, "add", add_after_concurrent_insert)

    service = FavoriteService(db)
    assert service.add_favorite(user_id, post_id) is False

    count = (
        db.query(Favorite)
        .filter(Favorite.user_id == user_id, Favorite.post_id == post_id)
        .count()
    )
    assert count == 1
    assert service.is_favorite(user_id, post_id)
