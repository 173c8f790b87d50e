"""
Audit Quiz Platform - Presentation, Category and Question API Tests
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from auditquiz import models


@pytest.mark.asyncio
async def test_presentation_crud(client: AsyncClient, register):
    user = await register(client)

    created = await client.post("/api/v1/presentations", json={"title": "Quarterly check"})
    assert created.status_code == 201
    presentation = created.json()["data"]
    assert presentation["userId"] == user["id"]

    renamed = await client.patch(
        f"/api/v1/presentations/{presentation['id']}", json={"title": "Quarterly audit"}
    )
    assert renamed.json()["data"]["title"] == "Quarterly audit"

    listed = (await client.get("/api/v1/presentations")).json()["data"]
    assert [p["title"] for p in listed] == ["Quarterly audit"]

    deleted = await client.delete(f"/api/v1/presentations/{presentation['id']}")
    assert deleted.status_code == 200

    missing = await client.get(f"/api/v1/presentations/{presentation['id']}")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_delete_presentation_cascades(
    client: AsyncClient, register, create_audit, find_option, db_session
):
    user = await register(client)
    audit = await create_audit(client)
    good = find_option(audit, "Good")
    await client.post("/api/v1/tests/submit", json={
        "presentationId": audit["id"],
        "userId": user["id"],
        "answers": [{"questionId": good["questionId"], "optionId": good["id"]}],
    })

    response = await client.delete(f"/api/v1/presentations/{audit['id']}")

    assert response.status_code == 200
    for model in (models.Category, models.Question, models.Option, models.Test, models.Answer):
        assert await db_session.scalar(select(func.count()).select_from(model)) == 0


@pytest.mark.asyncio
async def test_category_crud(client: AsyncClient, register, create_audit):
    await register(client)
    audit = await create_audit(client)

    created = await client.post("/api/v1/categories", json={
        "presentationId": audit["id"],
        "name": "Finance",
        "icon": "   ",
    })
    assert created.status_code == 201
    category = created.json()["data"]
    assert category["position"] == 2
    assert category["icon"] is None

    updated = await client.patch(f"/api/v1/categories/{category['id']}", json={"icon": " coins "})
    assert updated.json()["data"]["icon"] == "coins"
    assert updated.json()["data"]["name"] == "Finance"

    listed = await client.get("/api/v1/categories", params={"presentationId": audit["id"]})
    assert [c["name"] for c in listed.json()["data"]] == ["Sales", "Marketing", "Finance"]

    deleted = await client.delete(f"/api/v1/categories/{category['id']}")
    assert deleted.status_code == 200

    missing = await client.patch(f"/api/v1/categories/{category['id']}", json={"name": "X"})
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_category_writes_are_owner_only(client_factory, register, create_audit):
    owner_client = client_factory()
    await register(owner_client)
    audit = await create_audit(owner_client)

    other_client = client_factory()
    await register(other_client, email="other@example.com")

    create = await other_client.post("/api/v1/categories", json={
        "presentationId": audit["id"],
        "name": "Sneaky",
    })
    assert create.status_code == 403

    delete = await other_client.delete(f"/api/v1/categories/{audit['categories'][0]['id']}")
    assert delete.status_code == 403


@pytest.mark.asyncio
async def test_question_crud(client: AsyncClient, register, create_audit):
    await register(client)
    audit = await create_audit(client)
    category_id = audit["categories"][0]["id"]

    created = await client.post("/api/v1/questions", json={
        "categoryId": category_id,
        "text": "Is pricing reviewed yearly?",
        "options": [{"text": "No", "points": 0}, {"text": "Yes", "points": 5}],
    })
    assert created.status_code == 201
    question = created.json()["data"]
    assert question["position"] == 1
    assert [o["text"] for o in question["options"]] == ["No", "Yes", "Option 3", "Option 4", "Option 5"]

    options = [{"id": o["id"], "text": o["text"], "points": o["points"]} for o in question["options"]]
    options[1]["text"] = "Always"
    updated = await client.patch(f"/api/v1/questions/{question['id']}", json={
        "text": "Is pricing reviewed?",
        "options": options[:2],
    })
    data = updated.json()["data"]
    assert data["text"] == "Is pricing reviewed?"
    assert [o["id"] for o in data["options"][:2]] == [o["id"] for o in question["options"][:2]]
    assert data["options"][1]["text"] == "Always"
    assert len(data["options"]) == 5

    fetched = await client.get(f"/api/v1/questions/{question['id']}")
    assert fetched.json()["data"]["text"] == "Is pricing reviewed?"

    deleted = await client.delete(f"/api/v1/questions/{question['id']}")
    assert deleted.status_code == 200
    assert (await client.get(f"/api/v1/questions/{question['id']}")).status_code == 404
