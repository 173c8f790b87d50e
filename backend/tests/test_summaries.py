"""
Audit Quiz Platform - Summary API Tests
"""
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_summary_create_read_update(client: AsyncClient, register, create_audit):
    await register(client)
    audit = await create_audit(client)
    sales_id = audit["categories"][0]["id"]
    url = f"/api/v1/summaries/{audit['id']}"

    empty = (await client.get(url)).json()["data"]
    assert empty["summary"] is None
    assert [c["name"] for c in empty["categories"]] == ["Sales", "Marketing"]

    created = await client.post(url, json={
        "categoryRecommendations": [{"categoryId": sales_id, "recommendation": "Review weekly"}],
        "nextSteps": [{"type": "file", "content": "Checklist", "fileUrl": "https://files.example.com/c.pdf"}],
        "overallDetails": "Good foundations",
    })
    assert created.status_code == 201

    duplicate = await client.post(url, json={"overallDetails": "Again"})
    assert duplicate.status_code == 400

    updated = await client.patch(url, json={"overallDetails": "Strong foundations"})
    summary = updated.json()["data"]
    assert summary["overallDetails"] == "Strong foundations"
    assert summary["categoryRecommendations"] == [
        {"categoryId": sales_id, "recommendation": "Review weekly"},
    ]
    assert summary["nextSteps"][0]["fileUrl"] == "https://files.example.com/c.pdf"


@pytest.mark.asyncio
async def test_summary_patch_creates_when_missing(client: AsyncClient, register, create_audit):
    await register(client)
    audit = await create_audit(client)

    response = await client.patch(f"/api/v1/summaries/{audit['id']}", json={"overallDetails": "New"})

    assert response.status_code == 200
    assert response.json()["data"]["presentationId"] == audit["id"]


@pytest.mark.asyncio
async def test_summary_rejects_unknown_step_type(client: AsyncClient, register, create_audit):
    await register(client)
    audit = await create_audit(client)

    response = await client.post(f"/api/v1/summaries/{audit['id']}", json={
        "nextSteps": [{"type": "video", "content": "x"}],
    })

    assert response.status_code == 400
    assert "nextSteps.0.type" in response.json()["errors"]


@pytest.mark.asyncio
async def test_summary_is_owner_only(client_factory, register, create_audit):
    owner_client = client_factory()
    await register(owner_client)
    audit = await create_audit(owner_client)

    other_client = client_factory()
    await register(other_client, email="other@example.com")

    response = await other_client.get(f"/api/v1/summaries/{audit['id']}")
    assert response.status_code == 403
