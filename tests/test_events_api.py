"""
Tests for the event, dashboard, team, gallery and review endpoints.
"""

from fastapi import HTTPException
import pytest

from app.storage import build_object_key


def test_list_events_is_public(test_client, db):
    db.add_event(title="Old", event_date="2025-01-01T18:00:00+00:00")
    db.add_event(title="New", event_date="2025-06-01T18:00:00+00:00")

    response = test_client.get("/api/v1/events")

    assert response.status_code == 200
    assert [e["title"] for e in response.json()] == ["New", "Old"]


def test_get_missing_event(test_client):
    assert test_client.get("/api/v1/events/missing").status_code == 404


def test_admin_event_lifecycle(test_client, db, admin_headers):
    created = test_client.post(
        "/api/v1/events",
        json={"title": "Skyblock Cup", "max_participants": 32, "event_date": "2025-07-01T18:00:00Z"},
        headers=admin_headers
    )
    assert created.status_code == 201
    event_id = created.json()["id"]

    updated = test_client.put(f"/api/v1/events/{event_id}", json={"featured": True}, headers=admin_headers)
    assert updated.status_code == 200
    assert updated.json()["featured"] is True
    assert updated.json()["title"] == "Skyblock Cup"

    deleted = test_client.delete(f"/api/v1/events/{event_id}", headers=admin_headers)
    assert deleted.status_code == 204
    assert db.rows("events") == []


def test_create_event_requires_admin(test_client, user_headers):
    response = test_client.post("/api/v1/events", json={"title": "Nope"}, headers=user_headers)
    assert response.status_code == 403


def test_event_image_upload(test_client, db, admin_headers):
    event = db.add_event()

    response = test_client.post(
        f"/api/v1/events/{event['id']}/image",
        files={"file": ("cover.JPG", b"jpegdata", "image/jpeg")},
        headers=admin_headers
    )

    assert response.status_code == 200
    url = response.json()["image_url"]
    assert url.startswith("https://storage.test/images/events/")
    assert url.endswith(".jpg")
    assert len(db.storage.objects) == 1


def test_dashboard_stats(test_client, db, admin_headers):
    first = db.add_event(title="A very long tournament name", status="completed")
    second = db.add_event(title="Second")
    db.add_registration(first["id"], "u1")
    db.add_registration(first["id"], "u2")
    db.add_registration(second["id"], "u3")

    response = test_client.get("/api/v1/events/stats/dashboard", headers=admin_headers)

    assert response.status_code == 200
    stats = response.json()
    assert stats["total_events"] == 2
    assert stats["total_registrations"] == 3
    assert stats["total_users"] == 1
    assert {s["name"]: s["value"] for s in stats["events_by_status"]} == {"completed": 1, "upcoming": 1}
    by_event = {e["event_id"]: e for e in stats["registrations_by_event"]}
    assert by_event[first["id"]]["registrations"] == 2
    assert by_event[first["id"]]["name"] == "A very long tourname"


def test_build_object_key():
    key = build_object_key("gallery", "photo.PNG")
    folder, name = key.split("/")
    assert folder == "gallery"
    assert name.endswith(".png")
    assert len(name) == len(".png") + 32


def test_build_object_key_rejects_unknown_folder():
    with pytest.raises(HTTPException) as exc_info:
        build_object_key("secrets", "x.png")
    assert exc_info.value.status_code == 400


def test_team_listing_is_ordered(test_client, db, admin_headers):
    test_client.post("/api/v1/team", json={"name": "Bea", "role": "Builder", "display_order": 2}, headers=admin_headers)
    test_client.post("/api/v1/team", json={"name": "Ana", "role": "Founder", "display_order": 1}, headers=admin_headers)

    response = test_client.get("/api/v1/team")

    assert [m["name"] for m in response.json()] == ["Ana", "Bea"]


def test_gallery_upload_and_delete(test_client, db, admin_headers):
    event = db.add_event()

    uploaded = test_client.post(
        "/api/v1/gallery",
        data={"event_id": event["id"], "caption": "Podium", "display_order": "1"},
        files={"file": ("podium.webp", b"img", "image/webp")},
        headers=admin_headers
    )
    assert uploaded.status_code == 201
    assert uploaded.json()["caption"] == "Podium"

    listed = test_client.get("/api/v1/gallery", params={"event_id": event["id"]}).json()
    assert len(listed) == 1
    assert listed[0]["image_url"].startswith("https://storage.test/images/gallery/")

    deleted = test_client.delete(f"/api/v1/gallery/{listed[0]['id']}", headers=admin_headers)
    assert deleted.status_code == 204
    assert db.rows("event_gallery") == []


def test_reviews_require_attendance(test_client, db, user_headers):
    event = db.add_event(status="completed")
    user_id = db.rows("profiles")[0]["id"]
    registration = db.add_registration(event["id"], user_id)
    url = f"/api/v1/events/{event['id']}/reviews"

    rejected = test_client.put(url, json={"rating": 5}, headers=user_headers)
    assert rejected.status_code == 403

    registration["attended"] = True
    first = test_client.put(url, json={"rating": 4, "comment": "Great"}, headers=user_headers)
    second = test_client.put(url, json={"rating": 5}, headers=user_headers)
    assert first.status_code == 200
    assert second.status_code == 200
    assert len(db.rows("event_reviews")) == 1

    listed = test_client.get(url).json()
    assert listed["total"] == 1
    assert listed["average_rating"] == 5.0
    assert listed["reviews"][0]["reviewer_email"] == "player@example.com"


def test_review_rating_bounds(test_client, db, user_headers):
    event = db.add_event()
    response = test_client.put(f"/api/v1/events/{event['id']}/reviews", json={"rating": 6}, headers=user_headers)
    assert response.status_code == 422
