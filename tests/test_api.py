"""
Market Registry Backend — API Integration Tests
=================================================

What:  Drives the HTTP API end to end against a temporary SQLite database.
How:   Each test gets a freshly created app (schema + seeded staff accounts)
       through the test_client fixture.

What we test:
    ✅ Login / register, including duplicate email
    ✅ Market workflow: manager recommends, director approves or rejects
    ✅ Vendor workflow: supervisor verifies, manager approves with a stall
    ✅ Error mapping: 400 / 401 / 403 / 404 / 409 / 422
    ✅ Permissive mode, listings, stats, health, rate limiting
"""

import re
from datetime import datetime, timedelta, timezone

import pytest

from app.models.log import Log


async def _login(client, email, password):
    response = await client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()


async def _staff_ids(client):
    ids = {}
    for role in ("admin", "director", "manager", "supervisor", "officer"):
        user = await _login(client, f"{role}@kcca.go.ug", f"{role}123")
        ids[role] = user["id"]
    return ids


def _as(user_id):
    return {"X-User-ID": str(user_id)}


async def _create_market(client, payload):
    response = await client.post("/api/markets", json=payload)
    assert response.status_code == 201
    return response.json()


async def _approved_market(client, payload, staff):
    market = await _create_market(client, payload)
    await client.patch(
        f"/api/markets/{market['id']}/status",
        json={"status": "recommended"},
        headers=_as(staff["manager"]),
    )
    await client.patch(
        f"/api/markets/{market['id']}/status",
        json={"status": "approved"},
        headers=_as(staff["director"]),
    )
    return market


async def _applicant(client, email="trader@example.org"):
    response = await client.post(
        "/api/auth/register",
        json={"name": "Amina Trader", "email": email, "password": "pw", "role": "vendor"},
    )
    assert response.status_code == 200
    return response.json()


class TestAuth:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "role", ["admin", "director", "manager", "supervisor", "officer"]
    )
    async def test_seeded_staff_can_log_in(self, test_client, role):
        user = await _login(test_client, f"{role}@kcca.go.ug", f"{role}123")

        assert user["role"] == role
        assert user["status"] == "active"
        assert "password" not in user

    @pytest.mark.asyncio
    async def test_wrong_password(self, test_client):
        response = await test_client.post(
            "/api/auth/login", json={"email": "admin@kcca.go.ug", "password": "wrong"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_register_defaults_to_applicant(self, test_client):
        response = await test_client.post(
            "/api/auth/register",
            json={"name": "New Applicant", "email": "new@example.org", "password": "pw"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["role"] == "applicant"
        assert isinstance(body["id"], int)

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, test_client):
        response = await test_client.post(
            "/api/auth/register",
            json={"name": "Impostor", "email": "admin@kcca.go.ug", "password": "pw"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Email already exists"
        assert body["details"]["field"] == "email"

    @pytest.mark.asyncio
    async def test_register_unknown_role(self, test_client):
        response = await test_client.post(
            "/api/auth/register",
            json={"name": "X", "email": "x@example.org", "password": "pw", "role": "superuser"},
        )

        assert response.status_code == 422


class TestMarketWorkflow:

    @pytest.mark.asyncio
    async def test_register_market(self, test_client, market_payload):
        created = await _create_market(test_client, market_payload)

        assert created["status"] == "pending"
        assert re.fullmatch(r"MKT-[A-Z0-9]{6}", created["ref_no"])

        detail = (await test_client.get(f"/api/markets/{created['id']}")).json()
        assert detail["name"] == "Nakasero Market"
        assert detail["stalls_count"] == 40
        assert detail["owner_email"] is None
        assert detail["allowed_transitions"] == []

    @pytest.mark.asyncio
    async def test_full_approval(self, test_client, market_payload):
        staff = await _staff_ids(test_client)
        market = await _create_market(test_client, market_payload)
        url = f"/api/markets/{market['id']}/status"

        response = await test_client.patch(
            url, json={"status": "recommended"}, headers=_as(staff["manager"])
        )
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "id": market["id"],
            "status": "recommended",
            "stall_no": None,
        }

        detail = await test_client.get(
            f"/api/markets/{market['id']}", headers=_as(staff["director"])
        )
        assert detail.json()["allowed_transitions"] == ["approved", "rejected"]

        response = await test_client.patch(
            url, json={"status": "approved"}, headers=_as(staff["director"])
        )
        assert response.status_code == 200
        assert response.json()["status"] == "approved"

    @pytest.mark.asyncio
    async def test_director_rejects(self, test_client, market_payload):
        staff = await _staff_ids(test_client)
        market = await _create_market(test_client, market_payload)
        url = f"/api/markets/{market['id']}/status"

        await test_client.patch(url, json={"status": "recommended"}, headers=_as(staff["manager"]))
        response = await test_client.patch(
            url, json={"status": "rejected"}, headers=_as(staff["director"])
        )

        assert response.status_code == 200
        assert response.json()["status"] == "rejected"

    @pytest.mark.asyncio
    async def test_director_cannot_skip_recommendation(self, test_client, market_payload):
        staff = await _staff_ids(test_client)
        market = await _create_market(test_client, market_payload)

        response = await test_client.patch(
            f"/api/markets/{market['id']}/status",
            json={"status": "approved"},
            headers=_as(staff["director"]),
        )

        assert response.status_code == 409
        assert response.json()["error"] == "invalid_transition"
        detail = (await test_client.get(f"/api/markets/{market['id']}")).json()
        assert detail["status"] == "pending"

    @pytest.mark.asyncio
    async def test_director_cannot_recommend(self, test_client, market_payload):
        staff = await _staff_ids(test_client)
        market = await _create_market(test_client, market_payload)

        response = await test_client.patch(
            f"/api/markets/{market['id']}/status",
            json={"status": "recommended"},
            headers=_as(staff["director"]),
        )

        assert response.status_code == 403
        assert response.json()["error"] == "permission_denied"

    @pytest.mark.asyncio
    async def test_status_change_requires_acting_user(self, test_client, market_payload):
        market = await _create_market(test_client, market_payload)

        response = await test_client.patch(
            f"/api/markets/{market['id']}/status", json={"status": "recommended"}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_acting_user(self, test_client, market_payload):
        market = await _create_market(test_client, market_payload)

        response = await test_client.patch(
            f"/api/markets/{market['id']}/status",
            json={"status": "recommended"},
            headers=_as(9999),
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_status_value(self, test_client, market_payload):
        staff = await _staff_ids(test_client)
        market = await _create_market(test_client, market_payload)

        response = await test_client.patch(
            f"/api/markets/{market['id']}/status",
            json={"status": "archived"},
            headers=_as(staff["manager"]),
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_market(self, test_client):
        staff = await _staff_ids(test_client)

        assert (await test_client.get("/api/markets/12345")).status_code == 404
        response = await test_client.patch(
            "/api/markets/12345/status",
            json={"status": "recommended"},
            headers=_as(staff["manager"]),
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_list_newest_first(self, test_client, market_payload):
        first = await _create_market(test_client, market_payload)
        second = await _create_market(test_client, {**market_payload, "marketName": "Owino"})

        markets = (await test_client.get("/api/markets")).json()

        assert [m["id"] for m in markets] == [second["id"], first["id"]]
        assert markets[0]["name"] == "Owino"

    @pytest.mark.asyncio
    async def test_missing_required_field(self, test_client, market_payload):
        payload = dict(market_payload)
        del payload["marketName"]

        response = await test_client.post("/api/markets", json=payload)

        assert response.status_code == 422


class TestVendorWorkflow:

    @pytest.mark.asyncio
    async def test_vendor_lifecycle(self, test_client, market_payload, vendor_payload):
        staff = await _staff_ids(test_client)
        market = await _approved_market(test_client, market_payload, staff)
        applicant = await _applicant(test_client)

        response = await test_client.post(
            "/api/vendors", json=vendor_payload(applicant["id"], market["id"])
        )
        assert response.status_code == 201
        vendor = response.json()
        assert vendor["status"] == "pending"
        assert re.fullmatch(r"VND-[A-Z0-9]{6}", vendor["ref_no"])

        listing = (await test_client.get("/api/vendors")).json()
        assert listing[0]["market_name"] == "Nakasero Market"
        assert listing[0]["stall_no"] is None

        url = f"/api/vendors/{vendor['id']}/status"
        response = await test_client.patch(
            url, json={"status": "verified"}, headers=_as(staff["supervisor"])
        )
        assert response.status_code == 200
        assert response.json()["status"] == "verified"

        response = await test_client.patch(
            url, json={"status": "approved"}, headers=_as(staff["manager"])
        )
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "stall_no"

        response = await test_client.patch(
            url,
            json={"status": "approved", "stall_no": " A-12 "},
            headers=_as(staff["manager"]),
        )
        assert response.status_code == 200
        assert response.json()["stall_no"] == "A-12"

        detail = (await test_client.get(f"/api/vendors/{vendor['id']}")).json()
        assert detail["status"] == "approved"
        assert detail["stall_no"] == "A-12"

    @pytest.mark.asyncio
    async def test_vendor_without_market(self, test_client, vendor_payload):
        applicant = await _applicant(test_client)

        response = await test_client.post("/api/vendors", json=vendor_payload(applicant["id"]))

        assert response.status_code == 201
        listing = (await test_client.get("/api/vendors")).json()
        assert listing[0]["market_id"] is None
        assert listing[0]["market_name"] is None

    @pytest.mark.asyncio
    async def test_vendor_cannot_apply_to_pending_market(
        self, test_client, market_payload, vendor_payload
    ):
        market = await _create_market(test_client, market_payload)
        applicant = await _applicant(test_client)

        response = await test_client.post(
            "/api/vendors", json=vendor_payload(applicant["id"], market["id"])
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "marketId"

    @pytest.mark.asyncio
    async def test_unknown_applicant(self, test_client, vendor_payload):
        response = await test_client.post("/api/vendors", json=vendor_payload(4242))

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_manager_cannot_verify(self, test_client, vendor_payload):
        staff = await _staff_ids(test_client)
        applicant = await _applicant(test_client)
        vendor = (
            await test_client.post("/api/vendors", json=vendor_payload(applicant["id"]))
        ).json()

        response = await test_client.patch(
            f"/api/vendors/{vendor['id']}/status",
            json={"status": "verified"},
            headers=_as(staff["manager"]),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_list_newest_first(self, test_client, vendor_payload):
        applicant = await _applicant(test_client)
        created = []
        for name in ("First Trader", "Second Trader", "Third Trader"):
            response = await test_client.post(
                "/api/vendors", json={**vendor_payload(applicant["id"]), "fullName": name}
            )
            created.append(response.json()["id"])

        vendors = (await test_client.get("/api/vendors")).json()

        assert [v["id"] for v in vendors] == list(reversed(created))
        assert vendors[0]["full_name"] == "Third Trader"

    @pytest.mark.asyncio
    async def test_unknown_vendor(self, test_client):
        assert (await test_client.get("/api/vendors/777")).status_code == 404


class TestPermissiveMode:

    @pytest.mark.asyncio
    async def test_any_caller_sets_any_status(
        self, permissive_client, market_payload, vendor_payload
    ):
        market = await _create_market(permissive_client, market_payload)

        response = await permissive_client.patch(
            f"/api/markets/{market['id']}/status", json={"status": "approved"}
        )
        assert response.status_code == 200
        assert response.json()["status"] == "approved"

        applicant = await _applicant(permissive_client)
        vendor = (
            await permissive_client.post(
                "/api/vendors", json=vendor_payload(applicant["id"], market["id"])
            )
        ).json()
        response = await permissive_client.patch(
            f"/api/vendors/{vendor['id']}/status",
            json={"status": "approved", "stall_no": "C-4"},
        )
        assert response.status_code == 200
        assert response.json()["stall_no"] == "C-4"

    @pytest.mark.asyncio
    async def test_health_reports_mode(self, permissive_client):
        body = (await permissive_client.get("/health")).json()

        assert body["workflow_enforcement"] is False


class TestListings:

    @pytest.mark.asyncio
    async def test_users_listing_hides_passwords(self, test_client):
        users = (await test_client.get("/api/users")).json()

        assert len(users) == 5
        assert all("password" not in u for u in users)

    @pytest.mark.asyncio
    async def test_logs_start_empty(self, test_client):
        response = await test_client.get("/api/logs")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_logs_newest_first_and_capped(self, test_app, test_client):
        admin = await _login(test_client, "admin@kcca.go.ug", "admin123")
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        async with test_app.state.session_factory() as session:
            for i in range(105):
                session.add(
                    Log(
                        user_id=admin["id"] if i % 2 == 0 else None,
                        action=f"action-{i}",
                        timestamp=base + timedelta(minutes=i),
                    )
                )
            await session.commit()

        logs = (await test_client.get("/api/logs")).json()

        assert len(logs) == 100
        assert [entry["action"] for entry in logs[:3]] == ["action-104", "action-103", "action-102"]
        assert logs[-1]["action"] == "action-5"
        assert logs[0]["user_name"] == "Admin User"
        assert logs[1]["user_name"] is None

    @pytest.mark.asyncio
    async def test_stats(self, test_client, market_payload, vendor_payload):
        staff = await _staff_ids(test_client)
        market = await _approved_market(test_client, market_payload, staff)
        await _create_market(test_client, {**market_payload, "stallsCount": "10"})
        applicant = await _applicant(test_client)
        await test_client.post("/api/vendors", json=vendor_payload(applicant["id"], market["id"]))

        stats = (await test_client.get("/api/stats")).json()

        assert stats["total_markets"] == 2
        assert stats["markets_by_status"]["approved"] == 1
        assert stats["markets_by_type"]["Public"] == 2
        assert stats["total_vendors"] == 1
        assert stats["pending_applications"] == 2
        assert stats["total_stalls"] == 50
        assert stats["available_stalls"] == 50

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["workflow_enforcement"] is True

    @pytest.mark.asyncio
    async def test_request_id_header(self, test_client):
        response = await test_client.get("/api/markets", headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Request-ID"] == "abc123"


@pytest.mark.asyncio
async def test_rate_limit(limited_client):
    statuses = [(await limited_client.get("/api/markets")).status_code for _ in range(11)]

    assert statuses[:10] == [200] * 10
    assert statuses[10] == 429

    # Health checks bypass the limiter
    assert (await limited_client.get("/health")).status_code == 200
