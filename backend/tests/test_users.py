"""
Audit Quiz Platform - Profile and Admin API Tests
"""
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_get_profile(client: AsyncClient, register, sample_user_data):
    await register(client, primaryColor="#112233")

    response = await client.get("/api/v1/profile")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["email"] == sample_user_data["email"]
    assert data["primaryColor"] == "#112233"


@pytest.mark.asyncio
async def test_update_profile_refreshes_session(client: AsyncClient, register, sample_user_data):
    await register(client, profileImageUrl="https://img.example.com/me.png")

    response = await client.patch("/api/v1/profile", json={
        "name": "Renamed Owner",
        "secondaryColor": "#abcdef",
        "profileImageUrl": "",
    })

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Renamed Owner"
    assert data["secondaryColor"] == "#abcdef"
    assert data["profileImageUrl"] is None

    me = (await client.get("/api/v1/auth/me")).json()["data"]
    assert me["name"] == "Renamed Owner"


@pytest.mark.asyncio
async def test_update_passcode(client_factory, register, sample_user_data):
    client = client_factory()
    await register(client)
    await client.patch("/api/v1/profile", json={"passCode": "brand-new-code"})

    fresh = client_factory()
    old = await fresh.post("/api/v1/auth/login", json={
        "email": sample_user_data["email"],
        "passCode": sample_user_data["passCode"],
    })
    new = await fresh.post("/api/v1/auth/login", json={
        "email": sample_user_data["email"],
        "passCode": "brand-new-code",
    })
    assert old.status_code == 401
    assert new.status_code == 200


@pytest.mark.asyncio
async def test_update_profile_validation(client: AsyncClient, register):
    await register(client)

    response = await client.patch("/api/v1/profile", json={
        "primaryColor": "blue",
        "companyLogoUrl": "ftp://logo",
        "passCode": "123",
    })

    assert response.status_code == 400
    errors = response.json()["errors"]
    assert {"primaryColor", "companyLogoUrl", "passCode"} <= set(errors)


@pytest.mark.asyncio
async def test_admin_users_requires_admin(client_factory, register):
    admin_client = client_factory()
    await register(admin_client)
    member_client = client_factory()
    await register(member_client, email="member@example.com", role="USER")

    forbidden = await member_client.get("/api/v1/admin/users")
    assert forbidden.status_code == 403

    allowed = await admin_client.get("/api/v1/admin/users")
    assert allowed.status_code == 200
    assert {u["email"] for u in allowed.json()["data"]} == {"owner@example.com", "member@example.com"}
