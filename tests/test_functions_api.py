"""
Tests for the backend function endpoints called by the frontend
(check-low-capacity, send-event-notification).
"""


def test_check_low_capacity_fans_out_warning(functions_client, db):
    event = db.add_event(title="Bed Wars", max_participants=4)
    registrant = db.add_user("new@example.com")
    others = [db.add_user(f"u{i}@example.com") for i in range(2)]
    db.add_registration(event["id"], registrant)

    response = functions_client.post(
        "/check-low-capacity",
        json={"eventId": event["id"], "newRegistrationUserId": registrant}
    )

    assert response.status_code == 200
    body = response.json()
    assert body == {"message": "Notifications sent", "count": 2, "remainingSpots": 3}
    assert sorted(r["user_id"] for r in db.rows("notifications")) == sorted(others)


def test_check_low_capacity_without_limit(functions_client, db):
    event = db.add_event(max_participants=None)

    response = functions_client.post("/check-low-capacity", json={"eventId": event["id"]})

    assert response.status_code == 200
    assert response.json() == {"message": "No capacity limit set"}


def test_check_low_capacity_unknown_event(functions_client):
    response = functions_client.post("/check-low-capacity", json={"eventId": "missing"})
    assert response.status_code == 404
    assert response.json() == {"error": "Event not found"}


def test_send_event_notification_requires_token(functions_client, db):
    event = db.add_event()
    response = functions_client.post(
        "/send-event-notification",
        json={"eventId": event["id"], "title": "Hi", "message": "Hello"}
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Authorization header required"}


def test_send_event_notification_rejects_bad_token(functions_client, db):
    event = db.add_event()
    response = functions_client.post(
        "/send-event-notification",
        json={"eventId": event["id"], "title": "Hi", "message": "Hello"},
        headers={"Authorization": "Bearer forged"}
    )
    assert response.status_code == 401


def test_send_event_notification_rejects_non_admin(functions_client, db, user_headers):
    event = db.add_event()
    response = functions_client.post(
        "/send-event-notification",
        json={"eventId": event["id"], "title": "Hi", "message": "Hello"},
        headers=user_headers
    )
    assert response.status_code == 403
    assert db.rows("notifications") == []


def test_send_event_notification_as_admin(functions_client, db, admin_headers):
    event = db.add_event()
    members = [db.add_user(f"m{i}@example.com") for i in range(3)]

    response = functions_client.post(
        "/send-event-notification",
        json={"eventId": event["id"], "title": "Finals", "message": "Tonight at 9"},
        headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "count": 4}
    rows = db.rows("notifications")
    assert {r["user_id"] for r in rows} >= set(members)
    assert all(r["event_id"] == event["id"] and r["type"] == "event" for r in rows)


def test_cors_preflight_allows_any_origin(functions_client):
    response = functions_client.options(
        "/send-event-notification",
        headers={
            "Origin": "https://some-site.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization, content-type, apikey, x-client-info",
        }
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
