import pytest

from tests.conftest import MONDAY


@pytest.fixture
def seeded(make_user, make_room):
    make_user("u-1")
    make_user("u-2")
    make_user("u-admin", role="ADMIN")
    make_room("r-1", name="Sala Andes", capacity=8, equipment=("projector", "whiteboard"))


def book(client, user_id, start, end, room_id="r-1"):
    return client.post(
        "/reservations",
        json={"room_id": room_id, "start_at": start, "end_at": end},
        headers={"X-User-Id": user_id},
    )


def test_root(client):
    assert client.get("/").json() == {"ok": True, "service": "room-booking-api"}


def test_create_reservation(client, seeded):
    r = book(client, "u-1", "2030-01-07T09:00:00-03:00", "2030-01-07T10:00:00-03:00")
    assert r.status_code == 201
    body = r.json()
    assert body["status"] == "CONFIRMED"
    assert body["room_id"] == "r-1"
    assert body["start_at"].startswith("2030-01-07T09:00:00")

    detail = client.get(f"/reservations/{body['reservation_id']}")
    assert detail.status_code == 200
    assert detail.json()["user_id"] == "u-1"


def test_naive_times_use_canonical_zone(client, seeded):
    r = book(client, "u-1", "2030-01-07T09:00:00", "2030-01-07T10:00:00")
    assert r.status_code == 201
    assert r.json()["start_at"] == "2030-01-07T09:00:00-03:00"


def test_missing_identity_is_unauthorized(client, seeded):
    r = client.post(
        "/reservations",
        json={"room_id": "r-1", "start_at": "2030-01-07T09:00:00", "end_at": "2030-01-07T10:00:00"},
    )
    assert r.status_code == 401


def test_overlap_returns_conflict(client, seeded):
    assert book(client, "u-1", "2030-01-07T09:00:00", "2030-01-07T10:00:00").status_code == 201
    r = book(client, "u-2", "2030-01-07T09:30:00", "2030-01-07T10:30:00")
    assert r.status_code == 409
    body = r.json()
    assert body["code"] == "ROOM_ALREADY_BOOKED"
    assert body["status"] == 409
    assert "timestamp" in body


def test_misaligned_returns_bad_request(client, seeded):
    r = book(client, "u-1", "2030-01-07T09:10:00", "2030-01-07T10:10:00")
    assert r.status_code == 400
    assert r.json()["code"] == "MISALIGNED"


def test_unknown_room_returns_not_found(client, seeded):
    r = book(client, "u-1", "2030-01-07T09:00:00", "2030-01-07T10:00:00", room_id="r-missing")
    assert r.status_code == 404


def test_cancel_flow(client, seeded):
    reservation_id = book(client, "u-1", "2030-01-07T09:00:00", "2030-01-07T10:00:00").json()["reservation_id"]

    r = client.post(f"/reservations/{reservation_id}/cancel", headers={"X-User-Id": "u-2"})
    assert r.status_code == 403

    r = client.post(f"/reservations/{reservation_id}/cancel", headers={"X-User-Id": "u-1"})
    assert r.status_code == 200
    assert r.json() == {"reservation_id": reservation_id, "status": "CANCELLED"}

    # idempotent
    r = client.post(f"/reservations/{reservation_id}/cancel", headers={"X-User-Id": "u-1"})
    assert r.status_code == 200
    assert r.json()["status"] == "CANCELLED"


def test_admin_cancel(client, seeded):
    reservation_id = book(client, "u-1", "2030-01-07T09:00:00", "2030-01-07T10:00:00").json()["reservation_id"]
    r = client.post(f"/reservations/{reservation_id}/cancel", headers={"X-User-Id": "u-admin"})
    assert r.status_code == 200
    assert r.json()["status"] == "CANCELLED"


def test_admin_header_grants_nothing(client, seeded):
    reservation_id = book(client, "u-1", "2030-01-07T09:00:00", "2030-01-07T10:00:00").json()["reservation_id"]
    r = client.post(
        f"/reservations/{reservation_id}/cancel",
        headers={"X-User-Id": "u-2", "X-Is-Admin": "true"},
    )
    assert r.status_code == 403


def test_list_slots(client, seeded):
    r = client.get("/availability/slots", params={"date": MONDAY.isoformat()})
    assert r.status_code == 200
    body = r.json()
    assert len(body) == 12
    assert body[0] == {"slot_id": "09:00-10:00", "label": "09:00 - 10:00"}
    assert body[-1]["slot_id"] == "20:00-21:00"

    r = client.get("/availability/slots", params={"date": MONDAY.isoformat(), "slot_minutes": 0})
    assert r.status_code == 400


def test_cancel_unknown(client, seeded):
    r = client.post("/reservations/nope/cancel", headers={"X-User-Id": "u-1"})
    assert r.status_code == 404


def test_my_reservations(client, seeded):
    book(client, "u-1", "2030-01-07T09:00:00", "2030-01-07T10:00:00")
    book(client, "u-2", "2030-01-07T10:00:00", "2030-01-07T11:00:00")

    r = client.get("/reservations/mine", headers={"X-User-Id": "u-1"})
    assert r.status_code == 200
    body = r.json()
    assert len(body["upcoming"]) == 1
    assert body["current"] == [] and body["past"] == []


def test_availability_grid(client, seeded):
    book(client, "u-1", "2030-01-07T09:00:00", "2030-01-07T10:00:00")

    r = client.get("/availability", params={"date": MONDAY.isoformat()})
    assert r.status_code == 200
    body = r.json()
    assert body["slots"][0] == {"slot_id": "09:00-10:00", "label": "09:00 - 10:00"}
    assert body["rooms"][0]["equipment"] == ["projector", "whiteboard"]
    matrix = {(m["room_id"], m["slot_id"]): m["available"] for m in body["matrix"]}
    assert matrix[("r-1", "09:00-10:00")] is False
    assert matrix[("r-1", "10:00-11:00")] is True


def test_availability_grid_rejects_bad_hours(client, seeded):
    r = client.get("/availability", params={"date": MONDAY.isoformat(), "day_start_hour": 20, "day_end_hour": 8})
    assert r.status_code == 400


def test_room_availability(client, seeded):
    book(client, "u-1", "2030-01-07T10:00:00", "2030-01-07T11:00:00")

    r = client.get("/availability/rooms/r-1", params={"date": MONDAY.isoformat(), "slot_minutes": 60})
    assert r.status_code == 200
    body = r.json()
    assert body["open"] == "09:00"
    assert body["close"] == "18:00"
    assert body["booked"] == [{"start": "10:00", "end": "11:00"}]
    assert body["free"][0] == {"start": "09:00", "end": "10:00"}
    assert body["free"][1] == {"start": "11:00", "end": "12:00"}


def test_room_availability_closed_day(client, seeded):
    r = client.get("/availability/rooms/r-1", params={"date": "2030-01-12"})
    assert r.status_code == 409
    assert r.json()["code"] == "OUTSIDE_OPENING_HOURS"


def test_list_rooms(client, seeded):
    r = client.get("/rooms")
    assert r.status_code == 200
    assert r.json() == [
        {
            "room_id": "r-1",
            "name": "Sala Andes",
            "capacity": 8,
            "equipment": ["projector", "whiteboard"],
            "active": True,
        }
    ]
