"""API tests: health, auth, catalog, admin dashboard."""

import pytest

from conftest import PASSWORD, booking_body

REGISTRATION = {
    "nid_no": "1995000111",
    "name": "Nusrat Jahan",
    "email": "Nusrat@Example.com",
    "contact": "01811111111",
    "password": "Careful1",
}


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_register_and_login(client):
    resp = await client.post("/api/v1/auth/register", json=REGISTRATION)
    assert resp.status_code == 201
    tokens = resp.json()
    assert "access_token" in tokens

    # Emails are stored lowercased
    resp = await client.post("/api/v1/auth/login", json={"email": "nusrat@example.com", "password": "Careful1"})
    assert resp.status_code == 200
    assert "access_token" in resp.json()

    resp = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["email"] == "nusrat@example.com"
    assert body["nid_no"] == "1995000111"
    assert body["role"] == "user"


@pytest.mark.asyncio
async def test_register_duplicate_email(client):
    await client.post("/api/v1/auth/register", json=REGISTRATION)
    resp = await client.post("/api/v1/auth/register", json={**REGISTRATION, "nid_no": "1995000222"})
    assert resp.status_code == 409
    assert resp.json()["error"] == "Email already registered"


@pytest.mark.asyncio
async def test_register_duplicate_nid(client):
    await client.post("/api/v1/auth/register", json=REGISTRATION)
    resp = await client.post("/api/v1/auth/register", json={**REGISTRATION, "email": "other@example.com"})
    assert resp.status_code == 409
    assert resp.json()["error"] == "NID already registered"


@pytest.mark.asyncio
@pytest.mark.parametrize("password", ["Ab1", "alllowercase", "ALLUPPERCASE"])
async def test_register_weak_password(client, password):
    resp = await client.post("/api/v1/auth/register", json={**REGISTRATION, "password": password})
    assert resp.status_code == 400
    assert "Password" in resp.json()["error"]


@pytest.mark.asyncio
async def test_register_blank_name(client):
    resp = await client.post("/api/v1/auth/register", json={**REGISTRATION, "name": "  "})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_login_wrong_password(client, user):
    resp = await client.post("/api/v1/auth/login", json={"email": user.email, "password": "Wrong123"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid email or password"


@pytest.mark.asyncio
async def test_login_seeded_user(client, user):
    resp = await client.post("/api/v1/auth/login", json={"email": user.email, "password": PASSWORD})
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_refresh_token(client):
    tokens = (await client.post("/api/v1/auth/register", json=REGISTRATION)).json()

    resp = await client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert resp.status_code == 200
    assert "access_token" in resp.json()

    # An access token is not a refresh token
    resp = await client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_me_unauthenticated(client):
    resp = await client.get("/api/v1/auth/me")
    assert resp.status_code == 401
    assert resp.json() == {"error": "Unauthorized. Please login."}


@pytest.mark.asyncio
async def test_me_garbage_token(client):
    resp = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_update_profile(client, auth_headers):
    resp = await client.put("/api/v1/auth/me", headers=auth_headers, json={"contact": "01999999999"})
    assert resp.status_code == 200
    assert resp.json()["contact"] == "01999999999"
    assert resp.json()["name"] == "Rahim"


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_services(client):
    resp = await client.get("/api/v1/services")
    assert resp.status_code == 200
    by_id = {s["service_id"]: s for s in resp.json()}
    assert set(by_id) == {"baby-care", "elderly-care", "sick-care"}
    assert by_id["elderly-care"]["charge_per_hour"] == 250
    assert by_id["elderly-care"]["category"] == "elderly"


@pytest.mark.asyncio
async def test_get_service(client):
    resp = await client.get("/api/v1/services/sick-care")
    assert resp.status_code == 200
    assert resp.json()["name"] == "Sick People Care"


@pytest.mark.asyncio
async def test_get_unknown_service(client):
    resp = await client.get("/api/v1/services/pet-care")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Service not found", "code": "not_found"}


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_admin_lists_all_bookings(client, auth_headers, other_auth_headers, admin_headers):
    await client.post("/api/v1/bookings", headers=auth_headers, json=booking_body())
    await client.post("/api/v1/bookings", headers=other_auth_headers, json=booking_body("baby-care"))

    resp = await client.get("/api/v1/admin/bookings", headers=admin_headers)
    assert resp.status_code == 200
    bookings = resp.json()
    assert len(bookings) == 2
    assert [b["user"]["email"] for b in bookings] == ["karim@example.com", "rahim@example.com"]
    assert bookings[0]["service_id"] == "baby-care"


@pytest.mark.asyncio
async def test_admin_endpoints_refuse_users(client, auth_headers):
    resp = await client.get("/api/v1/admin/bookings", headers=auth_headers)
    assert resp.status_code == 403
    assert resp.json()["error"] == "Admin access required"

    resp = await client.put("/api/v1/admin/bookings/1", headers=auth_headers, json={"status": "Confirmed"})
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_admin_sets_status(client, auth_headers, admin_headers):
    resp = await client.post("/api/v1/bookings", headers=auth_headers, json=booking_body())
    booking_id = resp.json()["id"]

    resp = await client.put(f"/api/v1/admin/bookings/{booking_id}", headers=admin_headers, json={"status": "Confirmed"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "Confirmed"

    resp = await client.get(f"/api/v1/bookings/{booking_id}", headers=auth_headers)
    assert resp.json()["status"] == "Confirmed"
    assert resp.json()["total_cost"] == 500


@pytest.mark.asyncio
async def test_admin_sets_status_missing_booking(client, admin_headers):
    resp = await client.put("/api/v1/admin/bookings/9999", headers=admin_headers, json={"status": "Confirmed"})
    assert resp.status_code == 404
