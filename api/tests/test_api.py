"""API tests: health, auth, bookings, permanence, clients, courts, users, statistics, audit log."""

from datetime import datetime, timedelta
from io import BytesIO

import pytest
from openpyxl import load_workbook
from sqlalchemy import text

from conftest import STAFF_EMAIL, STAFF_PASSWORD
from courtdesk.core.database import engine
from courtdesk.services.booking_rules import LOCAL_TZ
from courtdesk.services.export import XLSX_MEDIA_TYPE

API = "/api/v1"


def local_today():
    return datetime.now(LOCAL_TZ).date()


async def make_court(client, headers, name="Court 1", **pricing):
    resp = await client.post(
        f"{API}/courts",
        json={"name": name, "color": "#2e7d32", "pricing": pricing or {"seven_to_fifteen": 150}},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


async def make_client(client, headers, name, **fields):
    resp = await client.post(f"{API}/clients", json={"name": name, **fields}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def make_booking(client, headers, court_id, day, slot, client_name="Walk-in", **fields):
    return await client.post(
        f"{API}/bookings",
        json={
            "court_id": court_id,
            "booking_date": day.isoformat(),
            "time_slot": slot,
            "client_name": client_name,
            **fields,
        },
        headers=headers,
    )


async def client_bookings(client, headers, client_id):
    resp = await client.get(f"{API}/clients/{client_id}", headers=headers)
    assert resp.status_code == 200
    return resp.json()["bookings"]


# ---------------------------------------------------------------------------
# Health and auth
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_register_and_login(client):
    resp = await client.post(
        f"{API}/auth/register",
        json={"name": "New Staff", "email": "new@example.com", "password": "secret123"},
    )
    assert resp.status_code == 201
    assert "access_token" in resp.json()

    resp = await client.post(f"{API}/auth/login", json={"email": "new@example.com", "password": "secret123"})
    assert resp.status_code == 200
    tokens = resp.json()

    resp = await client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert resp.status_code == 200
    assert resp.json()["name"] == "New Staff"
    assert resp.json()["role"] == "user"

    resp = await client.post(f"{API}/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_register_duplicate_email(client, seed_users):
    resp = await client.post(
        f"{API}/auth/register",
        json={"name": "Someone", "email": STAFF_EMAIL, "password": "secret123"},
    )
    assert resp.status_code == 409
    assert resp.json()["detail"]["fields"] == ["email"]


@pytest.mark.asyncio
async def test_login_wrong_password(client, seed_users):
    resp = await client.post(f"{API}/auth/login", json={"email": STAFF_EMAIL, "password": "nope"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_refresh_token_cannot_be_used_as_access(client, seed_users):
    resp = await client.post(f"{API}/auth/login", json={"email": STAFF_EMAIL, "password": STAFF_PASSWORD})
    refresh = resp.json()["refresh_token"]
    resp = await client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {refresh}"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_me_unauthenticated(client, schema):
    resp = await client.get(f"{API}/auth/me")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_re_auth(client, staff_headers):
    resp = await client.post(f"{API}/auth/re-auth", json={"password": STAFF_PASSWORD}, headers=staff_headers)
    assert resp.status_code == 200

    resp = await client.post(f"{API}/auth/re-auth", json={"password": "wrong"}, headers=staff_headers)
    assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_staff_books_future_slot(client, admin_headers, staff_headers):
    court = await make_court(client, admin_headers)
    tomorrow = local_today() + timedelta(days=1)

    resp = await make_booking(client, staff_headers, court["id"], tomorrow, "10:00", deposit=20)
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["booking_date"] == tomorrow.isoformat()
    assert body["time_slot"] == "10:00"
    assert body["client_id"] is None
    assert body["status"] is None
    assert body["is_permanent"] is False

    resp = await client.get(f"{API}/bookings/court/{court['id']}", headers=staff_headers)
    assert [b["id"] for b in resp.json()] == [body["id"]]


@pytest.mark.asyncio
async def test_past_booking_rejected_for_staff_allowed_for_admin(client, admin_headers, staff_headers):
    court = await make_court(client, admin_headers)
    yesterday = local_today() - timedelta(days=1)

    resp = await make_booking(client, staff_headers, court["id"], yesterday, "10:00")
    assert resp.status_code == 400
    assert resp.json()["detail"][0]["rule"] == "past_booking"

    resp = await make_booking(client, admin_headers, court["id"], yesterday, "10:00")
    assert resp.status_code == 201


@pytest.mark.asyncio
@pytest.mark.parametrize("slot", ["10:30", "05:00", "24:00", "noon"])
async def test_invalid_time_slot(client, admin_headers, slot):
    court = await make_court(client, admin_headers)
    resp = await make_booking(client, admin_headers, court["id"], local_today() + timedelta(days=1), slot)
    assert resp.status_code == 400
    assert resp.json()["detail"][0]["rule"] == "time_slot"


@pytest.mark.asyncio
async def test_malformed_body_is_400(client, staff_headers):
    resp = await client.post(f"{API}/bookings", json={"court_id": 1}, headers=staff_headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_booking_unknown_court(client, staff_headers):
    resp = await make_booking(client, staff_headers, 999, local_today() + timedelta(days=1), "10:00")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_booking_unknown_client(client, admin_headers):
    court = await make_court(client, admin_headers)
    tomorrow = local_today() + timedelta(days=1)

    resp = await make_booking(client, admin_headers, court["id"], tomorrow, "10:00", client_name="Ana", client_id=999)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Client not found"

    booking = (await make_booking(client, admin_headers, court["id"], tomorrow, "11:00")).json()
    resp = await client.put(f"{API}/bookings/{booking['id']}", json={"client_id": 999}, headers=admin_headers)
    assert resp.status_code == 404

    resp = await client.get(f"{API}/bookings/court/{court['id']}", headers=admin_headers)
    assert [b["client_id"] for b in resp.json()] == [None]


@pytest.mark.asyncio
async def test_range_listing_is_inclusive(client, admin_headers):
    court = await make_court(client, admin_headers)
    day = local_today() + timedelta(days=3)
    for offset, slot in [(0, "06:00"), (1, "23:00"), (2, "12:00")]:
        resp = await make_booking(client, admin_headers, court["id"], day + timedelta(days=offset), slot)
        assert resp.status_code == 201

    resp = await client.get(
        f"{API}/bookings/court/{court['id']}/range",
        params={"start_date": day.isoformat(), "end_date": (day + timedelta(days=1)).isoformat()},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert [(b["booking_date"], b["time_slot"]) for b in resp.json()] == [
        (day.isoformat(), "06:00"),
        ((day + timedelta(days=1)).isoformat(), "23:00"),
    ]

    resp = await client.get(
        f"{API}/bookings/court/999/range",
        params={"start_date": day.isoformat(), "end_date": day.isoformat()},
        headers=admin_headers,
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_client_back_reference_follows_booking(client, admin_headers):
    court = await make_court(client, admin_headers)
    ana = await make_client(client, admin_headers, "Ana")
    luis = await make_client(client, admin_headers, "Luis")
    day = local_today() + timedelta(days=2)

    # Matched by exact name
    resp = await make_booking(client, admin_headers, court["id"], day, "18:00", client_name="Ana")
    booking = resp.json()
    assert booking["client_id"] == ana["id"]
    assert await client_bookings(client, admin_headers, ana["id"]) == [booking["id"]]

    resp = await client.put(
        f"{API}/bookings/{booking['id']}",
        json={"client_id": luis["id"], "client_name": "Luis"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["client_id"] == luis["id"]
    assert await client_bookings(client, admin_headers, ana["id"]) == []
    assert await client_bookings(client, admin_headers, luis["id"]) == [booking["id"]]

    # Touching only the deposit leaves the client alone
    resp = await client.put(
        f"{API}/bookings/{booking['id']}",
        json={"deposit": 40, "status": "arrived"},
        headers=admin_headers,
    )
    assert resp.json()["client_id"] == luis["id"]
    assert resp.json()["deposit"] == 40
    assert resp.json()["status"] == "arrived"
    assert await client_bookings(client, admin_headers, luis["id"]) == [booking["id"]]

    resp = await client.delete(f"{API}/bookings/{booking['id']}", headers=admin_headers)
    assert resp.status_code == 204
    assert await client_bookings(client, admin_headers, luis["id"]) == []


@pytest.mark.asyncio
async def test_client_id_alone_renames_booking(client, admin_headers):
    court = await make_court(client, admin_headers)
    ana = await make_client(client, admin_headers, "Ana")
    luis = await make_client(client, admin_headers, "Luis")
    day = local_today() + timedelta(days=2)
    booking = (await make_booking(client, admin_headers, court["id"], day, "18:00", client_name="Ana")).json()

    resp = await client.put(f"{API}/bookings/{booking['id']}", json={"client_id": luis["id"]}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["client_id"] == luis["id"]
    assert resp.json()["client_name"] == "Luis"
    assert await client_bookings(client, admin_headers, ana["id"]) == []
    assert await client_bookings(client, admin_headers, luis["id"]) == [booking["id"]]


@pytest.mark.asyncio
async def test_unmatched_name_keeps_free_text(client, admin_headers):
    court = await make_court(client, admin_headers)
    await make_client(client, admin_headers, "Ana")
    resp = await make_booking(
        client, admin_headers, court["id"], local_today() + timedelta(days=1), "09:00", client_name="ana"
    )
    assert resp.json()["client_id"] is None
    assert resp.json()["client_name"] == "ana"


@pytest.mark.asyncio
async def test_only_admin_deletes_bookings(client, admin_headers, staff_headers):
    court = await make_court(client, admin_headers)
    resp = await make_booking(client, staff_headers, court["id"], local_today() + timedelta(days=1), "10:00")

    resp = await client.delete(f"{API}/bookings/{resp.json()['id']}", headers=staff_headers)
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Permanence
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_permanence_series_lifecycle(client, admin_headers, staff_headers):
    court = await make_court(client, admin_headers)
    ana = await make_client(client, admin_headers, "Ana")
    luis = await make_client(client, admin_headers, "Luis")
    start = local_today() + timedelta(days=1)

    anchor = (await make_booking(client, admin_headers, court["id"], start, "18:00", client_name="Ana")).json()
    taken = (
        await make_booking(client, admin_headers, court["id"], start + timedelta(days=14), "18:00", client_name="Luis")
    ).json()

    resp = await client.put(
        f"{API}/bookings/{anchor['id']}/permanent", json={"is_permanent": True}, headers=staff_headers
    )
    assert resp.status_code == 403

    resp = await client.put(
        f"{API}/bookings/{anchor['id']}/permanent", json={"is_permanent": True}, headers=admin_headers
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["created"] == 51
    assert body["booking"]["is_permanent"] is True
    assert body["booking"]["permanent_end_date"] is not None
    assert len(await client_bookings(client, admin_headers, ana["id"])) == 52

    # Collapse from the fourth week
    pivot_day = (start + timedelta(days=28)).isoformat()
    resp = await client.get(
        f"{API}/bookings/court/{court['id']}/range",
        params={"start_date": pivot_day, "end_date": pivot_day},
        headers=admin_headers,
    )
    (pivot,) = resp.json()
    assert pivot["is_permanent"] is True
    assert pivot["status"] == "not-arrived"

    resp = await client.put(
        f"{API}/bookings/{pivot['id']}/permanent", json={"is_permanent": False}, headers=admin_headers
    )
    assert resp.status_code == 200
    assert resp.json()["kept"] == 4
    assert resp.json()["removed"] == 48

    remaining = (await client.get(f"{API}/bookings/court/{court['id']}", headers=admin_headers)).json()
    assert len(remaining) == 5
    assert all(b["is_permanent"] is False for b in remaining)
    assert max(b["booking_date"] for b in remaining) == pivot_day

    ana_links = await client_bookings(client, admin_headers, ana["id"])
    assert sorted(ana_links) == sorted(b["id"] for b in remaining if b["client_name"] == "Ana")
    assert len(ana_links) == 4
    assert await client_bookings(client, admin_headers, luis["id"]) == [taken["id"]]


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_client_duplicate_fields_conflict(client, admin_headers):
    await make_client(client, admin_headers, "Ana", phone="5550001", email="ana@example.com")

    resp = await client.post(f"{API}/clients", json={"name": "Ana"}, headers=admin_headers)
    assert resp.status_code == 409
    assert resp.json()["detail"]["fields"] == ["name"]

    resp = await client.post(f"{API}/clients", json={"name": "Bea", "phone": "5550001"}, headers=admin_headers)
    assert resp.status_code == 409
    assert resp.json()["detail"]["fields"] == ["phone"]

    resp = await client.post(
        f"{API}/clients",
        json={"name": "Ana", "phone": "5550001", "email": "ana@example.com"},
        headers=admin_headers,
    )
    assert resp.json()["detail"]["fields"] == ["name", "phone", "email"]


@pytest.mark.asyncio
async def test_client_update_conflict_changes_nothing(client, admin_headers):
    await make_client(client, admin_headers, "Ana", phone="5550001")
    bea = await make_client(client, admin_headers, "Bea", phone="5550002")

    resp = await client.put(
        f"{API}/clients/{bea['id']}", json={"name": "Ana", "phone": "5550009"}, headers=admin_headers
    )
    assert resp.status_code == 409
    assert resp.json()["detail"]["fields"] == ["name"]

    resp = await client.get(f"{API}/clients/{bea['id']}", headers=admin_headers)
    assert resp.json()["name"] == "Bea"
    assert resp.json()["phone"] == "5550002"

    # Saving a client with its own values is not a conflict
    resp = await client.put(f"{API}/clients/{bea['id']}", json={"phone": "5550002"}, headers=admin_headers)
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_client_writes_require_admin(client, staff_headers):
    resp = await client.post(f"{API}/clients", json={"name": "Ana"}, headers=staff_headers)
    assert resp.status_code == 403

    resp = await client.get(f"{API}/clients", headers=staff_headers)
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_delete_client_keeps_bookings(client, admin_headers):
    court = await make_court(client, admin_headers)
    ana = await make_client(client, admin_headers, "Ana")
    tomorrow = local_today() + timedelta(days=1)
    booking = (await make_booking(client, admin_headers, court["id"], tomorrow, "10:00", client_name="Ana")).json()

    resp = await client.delete(f"{API}/clients/{ana['id']}", headers=admin_headers)
    assert resp.status_code == 204
    assert (await client.get(f"{API}/clients/{ana['id']}", headers=admin_headers)).status_code == 404

    (kept,) = (await client.get(f"{API}/bookings/court/{court['id']}", headers=admin_headers)).json()
    assert kept["id"] == booking["id"]
    assert kept["client_id"] is None
    assert kept["client_name"] == "Ana"


@pytest.mark.asyncio
async def test_client_stats_and_history(client, admin_headers):
    court = await make_court(client, admin_headers)
    ana = await make_client(client, admin_headers, "Ana")
    today = local_today()

    await make_booking(
        client,
        admin_headers,
        court["id"],
        today - timedelta(days=2),
        "10:00",
        client_name="Ana",
        status="arrived",
        deposit=50,
    )
    await make_booking(client, admin_headers, court["id"], today + timedelta(days=2), "10:00", client_name="Ana")

    resp = await client.get(f"{API}/clients/{ana['id']}/stats", headers=admin_headers)
    assert resp.status_code == 200
    stats = resp.json()
    assert stats["total_bookings"] == 2
    assert stats["arrived_bookings"] == 1
    assert stats["arrival_rate"] == 0.5
    assert stats["total_deposit"] == 50
    assert stats["avg_deposit"] == 25

    history = (await client.get(f"{API}/clients/{ana['id']}/bookings", headers=admin_headers)).json()
    assert [b["booking_date"] for b in history] == [
        (today + timedelta(days=2)).isoformat(),
        (today - timedelta(days=2)).isoformat(),
    ]


# ---------------------------------------------------------------------------
# Courts
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_court_with_original(client, admin_headers, staff_headers):
    resp = await client.post(
        f"{API}/courts",
        json={
            "name": "Court 1",
            "color": "#1565c0",
            "create_original": True,
            "pricing": {"six_am": -20, "seven_to_fifteen": 150, "twenty_three": "80"},
        },
        headers=admin_headers,
    )
    assert resp.status_code == 201
    assert resp.json()["pricing"] == {
        "six_am": 0,
        "seven_to_fifteen": 150,
        "sixteen_to_twenty_one": 0,
        "twenty_two": 0,
        "twenty_three": 80,
    }

    courts = (await client.get(f"{API}/courts", headers=staff_headers)).json()
    assert [c["name"] for c in courts] == ["Court 1"]

    originals = (await client.get(f"{API}/courts/originals", headers=staff_headers)).json()
    assert [c["name"] for c in originals] == ["Court 1 (Original)"]
    assert originals[0]["is_original"] is True
    assert originals[0]["pricing"]["seven_to_fifteen"] == 150


@pytest.mark.asyncio
async def test_court_writes_require_admin(client, staff_headers):
    resp = await client.post(f"{API}/courts", json={"name": "Court 9", "color": "red"}, headers=staff_headers)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_court_name_conflict(client, admin_headers):
    await make_court(client, admin_headers)
    resp = await client.post(f"{API}/courts", json={"name": "Court 1", "color": "red"}, headers=admin_headers)
    assert resp.status_code == 409
    assert resp.json()["detail"]["fields"] == ["name"]


@pytest.mark.asyncio
async def test_update_court_pricing_merges(client, admin_headers):
    court = await make_court(client, admin_headers, six_am=100, seven_to_fifteen=150)

    resp = await client.put(
        f"{API}/courts/{court['id']}", json={"pricing": {"six_am": 120}, "color": "blue"}, headers=admin_headers
    )
    assert resp.status_code == 200
    assert resp.json()["color"] == "blue"
    assert resp.json()["pricing"]["six_am"] == 120
    assert resp.json()["pricing"]["seven_to_fifteen"] == 150


@pytest.mark.asyncio
async def test_delete_court_removes_bookings_and_links(client, admin_headers):
    court = await make_court(client, admin_headers)
    ana = await make_client(client, admin_headers, "Ana")
    tomorrow = local_today() + timedelta(days=1)
    await make_booking(client, admin_headers, court["id"], tomorrow, "10:00", client_name="Ana")

    resp = await client.delete(f"{API}/courts/{court['id']}", headers=admin_headers)
    assert resp.status_code == 204
    assert await client_bookings(client, admin_headers, ana["id"]) == []
    assert (await client.get(f"{API}/bookings/court/{court['id']}", headers=admin_headers)).json() == []


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_user_management(client, admin_headers, staff_headers, seed_users):
    resp = await client.get(f"{API}/users", headers=staff_headers)
    assert resp.status_code == 403

    resp = await client.post(
        f"{API}/users",
        json={"name": "Second Admin", "email": "boss@example.com", "password": "secret123", "role": "admin"},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    assert resp.json()["role"] == "admin"

    resp = await client.post(
        f"{API}/users",
        json={"name": "Copy", "email": STAFF_EMAIL, "password": "secret123"},
        headers=admin_headers,
    )
    assert resp.status_code == 409

    staff_id = seed_users["staff"].id
    resp = await client.put(f"{API}/users/{staff_id}", json={"name": "Reception"}, headers=admin_headers)
    assert resp.json()["name"] == "Reception"

    resp = await client.delete(f"{API}/users/{seed_users['admin'].id}", headers=admin_headers)
    assert resp.status_code == 400

    resp = await client.delete(f"{API}/users/{staff_id}", headers=admin_headers)
    assert resp.status_code == 204

    resp = await client.post(f"{API}/auth/login", json={"email": STAFF_EMAIL, "password": STAFF_PASSWORD})
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Statistics and audit log
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_stats_require_admin(client, staff_headers):
    for path in ("/stats/clients", "/stats/financial", "/stats/clients/export", "/stats/financial/export"):
        resp = await client.get(f"{API}{path}", headers=staff_headers)
        assert resp.status_code == 403, path


@pytest.mark.asyncio
async def test_stats_trailing_week(client, admin_headers):
    court = await make_court(client, admin_headers, seven_to_fifteen=150, sixteen_to_twenty_one=200)
    ana = await make_client(client, admin_headers, "Ana")
    yesterday = local_today() - timedelta(days=1)

    await make_booking(client, admin_headers, court["id"], yesterday, "10:00", client_name="Ana", status="arrived")
    await make_booking(client, admin_headers, court["id"], yesterday, "17:00", client_name="Ana", status="not-arrived")

    # Anything other than week, month or year means the last seven days
    resp = await client.get(f"{API}/stats/clients", params={"type": "recent"}, headers=admin_headers)
    assert resp.status_code == 200
    (row,) = resp.json()
    assert row["client_id"] == ana["id"]
    assert row["bookings_count"] == 2
    assert row["attendance_count"] == 1
    assert row["attendance_rate"] == 0.5
    assert row["total_calculated_income"] == 150

    resp = await client.get(f"{API}/stats/financial", params={"type": "recent"}, headers=admin_headers)
    assert resp.status_code == 200
    summary = resp.json()
    assert summary["total_income"] == 150
    assert summary["by_period"] == [{"date": yesterday.isoformat(), "income": 150, "bookings": 1}]
    assert summary["by_court"][0]["court_name"] == "Court 1"
    assert summary["by_schedule"] == [{"hour": 10, "income": 150, "bookings": 1}]


@pytest.mark.asyncio
async def test_stats_exports(client, admin_headers):
    await make_client(client, admin_headers, "Ana")

    resp = await client.get(f"{API}/stats/clients/export", params={"type": "month"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"] == XLSX_MEDIA_TYPE
    assert "clients_month_" in resp.headers["content-disposition"]
    assert load_workbook(BytesIO(resp.content)).sheetnames == ["Client statistics"]

    resp = await client.get(f"{API}/stats/financial/export", headers=admin_headers)
    assert resp.status_code == 200
    assert "financial_week_" in resp.headers["content-disposition"]
    assert "By schedule" in load_workbook(BytesIO(resp.content)).sheetnames


@pytest.mark.asyncio
async def test_audit_log(client, admin_headers, staff_headers):
    await make_court(client, admin_headers, name="Center")

    resp = await client.get(f"{API}/logs", headers=staff_headers)
    assert resp.status_code == 403

    resp = await client.get(f"{API}/logs", headers=admin_headers)
    assert resp.status_code == 200
    entries = [(e["user"], e["action"]) for e in resp.json()]
    assert ("Admin", "Created court Center") in entries
    assert ("Admin", "Logged in") in entries
    assert ("Front Desk", "Logged in") in entries

    resp = await client.get(f"{API}/logs", params={"limit": 1}, headers=admin_headers)
    assert len(resp.json()) == 1


@pytest.mark.asyncio
async def test_audit_failure_keeps_the_change(client, admin_headers):
    async with engine.begin() as conn:
        await conn.execute(text("DROP TABLE audit_logs"))

    resp = await client.post(f"{API}/clients", json={"name": "Ana", "phone": "555"}, headers=admin_headers)
    assert resp.status_code == 201

    resp = await client.get(f"{API}/clients/{resp.json()['id']}", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["phone"] == "555"
