"""
Integration tests for the user, pharmacy, viewer and admin endpoints.

Routes run against the production models on in-memory SQLite; see
``conftest.py`` for the dependency overrides.
"""

import pytest
from httpx import AsyncClient

from tests.conftest import (
    CUSTOMER_LAT,
    CUSTOMER_LNG,
    FAKE_NOW,
    create_pharmacy,
    create_user,
)


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/api/v1/admin/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


# ── Users ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_user_returns_201(client: AsyncClient):
    user = await create_user(client, email="Aarav@Example.COM")
    assert user["id"] is not None
    assert user["email"] == "aarav@example.com"
    assert user["role"] == "customer"
    assert user["created_at"] is not None


@pytest.mark.asyncio
async def test_duplicate_email_conflicts(client: AsyncClient):
    await create_user(client)
    resp = await client.post(
        "/api/v1/users",
        json={
            "name": "Someone Else",
            "email": "AARAV@example.com",
            "phone": "123",
            "role": "delivery",
        },
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "override",
    [
        {"email": "not-an-email"},
        {"role": "admin"},
        {"latitude": 91},
        {"longitude": -181},
        {"name": "   "},
    ],
)
async def test_create_user_validation(client: AsyncClient, override: dict):
    body = {
        "name": "Aarav Sharma",
        "email": "aarav@example.com",
        "phone": "+91 98200 00001",
        "role": "customer",
        **override,
    }
    resp = await client.post("/api/v1/users", json=body)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_get_user_not_found(client: AsyncClient):
    resp = await client.get("/api/v1/users/9999")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_list_users_filters(client: AsyncClient):
    await create_user(client)
    await create_user(
        client, name="Vikram Singh", email="vikram@example.com", role="delivery"
    )

    resp = await client.get("/api/v1/users", params={"role": "delivery"})
    assert [u["name"] for u in resp.json()] == ["Vikram Singh"]

    resp = await client.get("/api/v1/users", params={"search": "AARAV"})
    assert [u["email"] for u in resp.json()] == ["aarav@example.com"]


@pytest.mark.asyncio
async def test_list_users_pagination(client: AsyncClient):
    for i in range(3):
        await create_user(client, email=f"user{i}@example.com")

    resp = await client.get("/api/v1/users", params={"limit": 2})
    assert len(resp.json()) == 2
    resp = await client.get("/api/v1/users", params={"limit": 2, "offset": 2})
    assert len(resp.json()) == 1
    resp = await client.get("/api/v1/users", params={"limit": 1000})
    assert resp.status_code == 200
    resp = await client.get("/api/v1/users", params={"offset": -1})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_update_user_partial(client: AsyncClient):
    user = await create_user(client)
    resp = await client.patch(
        f"/api/v1/users/{user['id']}", json={"phone": "555", "address": None}
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["phone"] == "555"
    assert data["address"] is None
    assert data["name"] == user["name"]


@pytest.mark.asyncio
async def test_update_user_email_taken(client: AsyncClient):
    await create_user(client)
    other = await create_user(client, email="priya@example.com")
    resp = await client.patch(
        f"/api/v1/users/{other['id']}", json={"email": "aarav@example.com"}
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_update_user_keeping_own_email(client: AsyncClient):
    user = await create_user(client)
    resp = await client.patch(
        f"/api/v1/users/{user['id']}", json={"email": "aarav@example.com"}
    )
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_delete_user_returns_record(client: AsyncClient):
    user = await create_user(client)
    resp = await client.delete(f"/api/v1/users/{user['id']}")
    assert resp.status_code == 200
    assert resp.json()["deleted"]["id"] == user["id"]
    assert (await client.get(f"/api/v1/users/{user['id']}")).status_code == 404


# ── Pharmacies ────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_pharmacy_defaults(client: AsyncClient):
    pharmacy = await create_pharmacy(client)
    assert pharmacy["is_active"] is True
    assert pharmacy["rating"] == 0.0
    assert pharmacy["user_id"] is None


@pytest.mark.asyncio
async def test_duplicate_license_conflicts(client: AsyncClient):
    await create_pharmacy(client)
    resp = await client.post(
        "/api/v1/pharmacies",
        json={
            "pharmacy_name": "Copy",
            "license_number": "MH-PH-1001",
            "address": "Elsewhere",
            "latitude": 19.0,
            "longitude": 72.8,
            "phone": "1",
            "email": "copy@example.com",
        },
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_pharmacy_with_unknown_owner_rejected(client: AsyncClient):
    resp = await client.post(
        "/api/v1/pharmacies",
        json={
            "pharmacy_name": "Orphan",
            "license_number": "MH-PH-9999",
            "address": "Nowhere",
            "latitude": 19.0,
            "longitude": 72.8,
            "phone": "1",
            "email": "orphan@example.com",
            "user_id": 42,
        },
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_pharmacy_rating_range(client: AsyncClient):
    pharmacy = await create_pharmacy(client)
    resp = await client.patch(
        f"/api/v1/pharmacies/{pharmacy['id']}", json={"rating": 5.5}
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_list_pharmacies_active_filter(client: AsyncClient):
    await create_pharmacy(client)
    await create_pharmacy(
        client, license_number="MH-PH-1002", pharmacy_name="Closed", is_active=False
    )
    resp = await client.get("/api/v1/pharmacies", params={"is_active": "false"})
    assert [p["pharmacy_name"] for p in resp.json()] == ["Closed"]


@pytest.mark.asyncio
async def test_nearby_pharmacies_sorted_and_filtered(client: AsyncClient):
    await create_pharmacy(
        client,
        license_number="MH-PH-POWAI",
        pharmacy_name="Powai Care",
        latitude=19.1176,
        longitude=72.9060,
    )
    await create_pharmacy(client)
    await create_pharmacy(
        client,
        license_number="MH-PH-OFF",
        pharmacy_name="Closed Bandra",
        is_active=False,
    )

    resp = await client.get(
        "/api/v1/pharmacies/nearby",
        params={"latitude": CUSTOMER_LAT, "longitude": CUSTOMER_LNG, "radius": 20},
    )
    assert resp.status_code == 200
    data = resp.json()
    names = [p["pharmacy_name"] for p in data["pharmacies"]]
    assert names == ["Bandra Wellness Pharmacy", "Powai Care"]
    assert data["count"] == 2
    assert data["radius"] == 20
    assert data["user_location"] == {
        "latitude": CUSTOMER_LAT,
        "longitude": CUSTOMER_LNG,
    }
    distances = [p["distance"] for p in data["pharmacies"]]
    assert distances == sorted(distances)
    assert all(p["distance_unit"] == "km" for p in data["pharmacies"])

    resp = await client.get(
        "/api/v1/pharmacies/nearby",
        params={"latitude": CUSTOMER_LAT, "longitude": CUSTOMER_LNG, "radius": 5},
    )
    assert resp.json()["count"] == 1


@pytest.mark.asyncio
async def test_nearby_includes_inactive_on_request(client: AsyncClient):
    await create_pharmacy(client, is_active=False)
    resp = await client.get(
        "/api/v1/pharmacies/nearby",
        params={
            "latitude": CUSTOMER_LAT,
            "longitude": CUSTOMER_LNG,
            "is_active": "false",
        },
    )
    assert resp.json()["count"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params",
    [
        {"latitude": 19.0},
        {"latitude": 95, "longitude": 72.8},
        {"latitude": 19.0, "longitude": 72.8, "radius": 0},
        {"latitude": 19.0, "longitude": 72.8, "radius": 51},
    ],
)
async def test_nearby_validation(client: AsyncClient, params: dict):
    resp = await client.get("/api/v1/pharmacies/nearby", params=params)
    assert resp.status_code == 422


# ── Viewers ───────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_viewer_heartbeat(client: AsyncClient, fake_redis):
    fake_redis.zcard.return_value = 4
    resp = await client.post("/api/v1/viewers", json={"viewer_id": "tab-1"})
    assert resp.status_code == 200
    assert resp.json() == {"active_viewers": 4, "success": True}
    fake_redis.zadd.assert_awaited_once_with("viewers:active", {"tab-1": FAKE_NOW})


@pytest.mark.asyncio
async def test_viewer_count(client: AsyncClient, fake_redis):
    fake_redis.zcard.return_value = 2
    resp = await client.get("/api/v1/viewers")
    assert resp.json() == {"active_viewers": 2}


@pytest.mark.asyncio
async def test_viewer_heartbeat_requires_id(client: AsyncClient):
    resp = await client.post("/api/v1/viewers", json={"viewer_id": ""})
    assert resp.status_code == 422
