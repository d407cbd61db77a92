from datetime import datetime, timedelta

from featureforge.models import Notification
from featureforge.utils.notification_service import create_notification, cleanup_old_notifications


def notify(db, user, actor, message="hello", type="mention"):
    return create_notification(
        db,
        user_id=user.id,
        type=type,
        related_id=1,
        related_type="comment",
        message=message,
        triggered_by=actor.id,
        metadata={"feature_id": 1}
    )


def test_list_is_paginated_newest_first(client, test_db, alice, bob, headers_for):
    for i in range(3):
        notify(test_db, bob, alice, message=f"n{i}")

    data = client.get("/api/notifications?limit=2", headers=headers_for(bob)).json()["data"]
    assert [n["message"] for n in data["notifications"]] == ["n2", "n1"]
    assert data["total_count"] == 3
    assert data["total_pages"] == 2
    assert data["unread_count"] == 3
    assert data["notifications"][0]["trigger"]["name"] == "Alice"
    assert data["notifications"][0]["metadata"] == {"feature_id": 1}

    page_two = client.get("/api/notifications?limit=2&page=2", headers=headers_for(bob)).json()["data"]
    assert [n["message"] for n in page_two["notifications"]] == ["n0"]


def test_filters(client, test_db, alice, bob, headers_for):
    notify(test_db, bob, alice, type="mention")
    reply = notify(test_db, bob, alice, type="reply")
    reply.is_read = True
    test_db.commit()

    unread = client.get("/api/notifications?unread_only=true", headers=headers_for(bob)).json()["data"]
    assert [n["type"] for n in unread["notifications"]] == ["mention"]

    replies = client.get("/api/notifications?type=reply", headers=headers_for(bob)).json()["data"]
    assert replies["total_count"] == 1


def test_mark_read_and_unread_count(client, test_db, alice, bob, headers_for):
    first = notify(test_db, bob, alice)
    notify(test_db, bob, alice)

    response = client.put(f"/api/notifications/{first.id}/read", headers=headers_for(bob))
    assert response.json()["data"]["is_read"] is True
    assert client.get("/api/notifications/unread-count", headers=headers_for(bob)).json()["data"] == {"unread_count": 1}

    response = client.put("/api/notifications/read-all", headers=headers_for(bob))
    assert response.json()["data"] == {"updated_count": 1}
    assert client.get("/api/notifications/unread-count", headers=headers_for(bob)).json()["data"] == {"unread_count": 0}


def test_cannot_touch_someone_elses_notification(client, test_db, alice, bob, headers_for):
    n = notify(test_db, bob, alice)
    assert client.put(f"/api/notifications/{n.id}/read", headers=headers_for(alice)).status_code == 404
    assert client.delete(f"/api/notifications/{n.id}", headers=headers_for(alice)).status_code == 404
    assert client.delete(f"/api/notifications/{n.id}", headers=headers_for(bob)).status_code == 200
    assert test_db.query(Notification).count() == 0


def test_cleanup_old_notifications(test_db, alice, bob):
    old = notify(test_db, bob, alice, message="old")
    old.created_at = datetime.utcnow() - timedelta(days=31)
    notify(test_db, bob, alice, message="recent")
    test_db.commit()

    assert cleanup_old_notifications(test_db) == 1
    assert [n.message for n in test_db.query(Notification).all()] == ["recent"]
    assert cleanup_old_notifications(test_db, days=0) == 1
