"""
Audit Quiz Platform - Audit Authoring API Tests
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from auditquiz import models


def _as_payload(audit: dict) -> dict:
    """Turn a returned presentation back into an authoring payload with ids."""
    return {
        "title": audit["title"],
        "categories": [
            {
                "id": category["id"],
                "name": category["name"],
                "icon": category["icon"],
                "questions": [
                    {
                        "id": question["id"],
                        "text": question["text"],
                        "options": [
                            {"id": o["id"], "text": o["text"], "points": o["points"]}
                            for o in question["options"]
                        ],
                    }
                    for question in category["questions"]
                ],
            }
            for category in audit["categories"]
        ],
    }


@pytest.mark.asyncio
async def test_create_audit_pads_options(client: AsyncClient, register, create_audit):
    user = await register(client)
    audit = await create_audit(client)

    assert audit["userId"] == user["id"]
    assert [c["name"] for c in audit["categories"]] == ["Sales", "Marketing"]
    assert [c["position"] for c in audit["categories"]] == [0, 1]

    marketing_options = audit["categories"][1]["questions"][0]["options"]
    assert [(o["text"], o["points"]) for o in marketing_options] == [
        ("Never", 1),
        ("Sometimes", 3),
        ("Option 3", 3),
        ("Option 4", 4),
        ("Option 5", 5),
    ]
    assert [o["position"] for o in marketing_options] == [0, 1, 2, 3, 4]


@pytest.mark.asyncio
async def test_create_audit_with_summary(client: AsyncClient, register, create_audit, sample_audit_payload):
    await register(client)
    payload = {
        **sample_audit_payload,
        "summary": {
            "overallDetails": "Solid start",
            "nextSteps": [{"type": "text", "content": "Book a review"}],
        },
    }
    audit = await create_audit(client, payload)

    assert audit["summary"]["overallDetails"] == "Solid start"
    assert audit["summary"]["nextSteps"] == [{"type": "text", "content": "Book a review"}]


@pytest.mark.asyncio
async def test_create_audit_rejects_more_than_five_options(
    client: AsyncClient, register, sample_audit_payload, db_session
):
    await register(client)
    question = sample_audit_payload["categories"][0]["questions"][0]
    question["options"].append({"text": "Legendary", "points": 5})

    response = await client.post("/api/v1/audits", json=sample_audit_payload)

    assert response.status_code == 400
    assert "categories.0.questions.0.options" in response.json()["errors"]
    assert await db_session.scalar(select(func.count()).select_from(models.Presentation)) == 0


@pytest.mark.asyncio
async def test_create_audit_rejects_out_of_range_points(client: AsyncClient, register, sample_audit_payload):
    await register(client)
    sample_audit_payload["categories"][0]["questions"][0]["options"][0]["points"] = 6

    response = await client.post("/api/v1/audits", json=sample_audit_payload)

    assert response.status_code == 400
    assert "categories.0.questions.0.options.0.points" in response.json()["errors"]


@pytest.mark.asyncio
async def test_create_audit_requires_session(client: AsyncClient, sample_audit_payload):
    response = await client.post("/api/v1/audits", json=sample_audit_payload)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_reconcile_deletes_missing_category(
    client: AsyncClient, register, create_audit, db_session
):
    """Keeping only the first category updates it and deletes the second."""
    await register(client)
    audit = await create_audit(client)
    payload = _as_payload(audit)
    payload["categories"] = payload["categories"][:1]
    payload["categories"][0]["name"] = "Sales & Pipeline"

    response = await client.patch(f"/api/v1/audits/{audit['id']}", json=payload)

    assert response.status_code == 200
    updated = response.json()["data"]
    assert [(c["id"], c["name"]) for c in updated["categories"]] == [
        (audit["categories"][0]["id"], "Sales & Pipeline"),
    ]
    assert await db_session.scalar(select(func.count()).select_from(models.Category)) == 1
    assert await db_session.scalar(select(func.count()).select_from(models.Question)) == 1
    assert await db_session.scalar(select(func.count()).select_from(models.Option)) == 5


@pytest.mark.asyncio
async def test_reconcile_updates_in_place_and_creates_new(client: AsyncClient, register, create_audit):
    await register(client)
    audit = await create_audit(client)
    payload = _as_payload(audit)

    sales = payload["categories"][0]
    sales["questions"][0]["options"][2]["text"] = "Pretty good"
    sales["questions"].append({
        "text": "Do you forecast monthly?",
        "options": [{"text": "Yes", "points": 5}],
    })
    payload["categories"].insert(0, {
        "name": "Operations",
        "questions": [{"text": "Are processes documented?", "options": [{"text": "No", "points": 1}]}],
    })

    response = await client.patch(f"/api/v1/audits/{audit['id']}", json=payload)

    updated = response.json()["data"]
    assert [c["name"] for c in updated["categories"]] == ["Operations", "Sales", "Marketing"]
    assert [c["position"] for c in updated["categories"]] == [0, 1, 2]

    updated_sales = updated["categories"][1]
    assert updated_sales["id"] == audit["categories"][0]["id"]
    first_question = updated_sales["questions"][0]
    assert first_question["id"] == audit["categories"][0]["questions"][0]["id"]
    assert [o["id"] for o in first_question["options"]] == [
        o["id"] for o in audit["categories"][0]["questions"][0]["options"]
    ]
    assert first_question["options"][2]["text"] == "Pretty good"

    new_question = updated_sales["questions"][1]
    assert [(o["text"], o["points"]) for o in new_question["options"]] == [
        ("Yes", 5), ("Option 2", 2), ("Option 3", 3), ("Option 4", 4), ("Option 5", 5),
    ]


@pytest.mark.asyncio
async def test_reconcile_treats_foreign_id_as_create(client: AsyncClient, register, create_audit):
    await register(client)
    first = await create_audit(client)
    second = await create_audit(client)

    payload = _as_payload(first)
    foreign = _as_payload(second)["categories"][0]
    payload["categories"] = [foreign]

    response = await client.patch(f"/api/v1/audits/{first['id']}", json=payload)

    updated = response.json()["data"]
    assert len(updated["categories"]) == 1
    assert updated["categories"][0]["id"] not in {
        c["id"] for c in first["categories"] + second["categories"]
    }

    untouched = (await client.get(f"/api/v1/presentations/{second['id']}")).json()["data"]
    assert [c["id"] for c in untouched["categories"]] == [c["id"] for c in second["categories"]]


@pytest.mark.asyncio
async def test_reconcile_remaps_summary_recommendations(client: AsyncClient, register, create_audit):
    await register(client)
    audit = await create_audit(client)
    payload = _as_payload(audit)
    payload["summary"] = {
        "categoryRecommendations": [
            {"categoryId": "client-side-1", "recommendation": "Tighten pipeline reviews"},
            {"categoryId": "client-side-2", "recommendation": "Track attribution"},
        ],
    }

    response = await client.patch(f"/api/v1/audits/{audit['id']}", json=payload)

    summary = response.json()["data"]["summary"]
    assert [r["categoryId"] for r in summary["categoryRecommendations"]] == [
        audit["categories"][0]["id"],
        audit["categories"][1]["id"],
    ]


@pytest.mark.asyncio
async def test_reconcile_not_found_and_forbidden(client_factory, register, create_audit):
    owner_client = client_factory()
    await register(owner_client)
    audit = await create_audit(owner_client)
    payload = _as_payload(audit)

    missing = await owner_client.patch("/api/v1/audits/missing", json=payload)
    assert missing.status_code == 404

    other_client = client_factory()
    await register(other_client, email="other@example.com")
    forbidden = await other_client.patch(f"/api/v1/audits/{audit['id']}", json=payload)
    assert forbidden.status_code == 403


@pytest.mark.asyncio
async def test_list_audits_includes_own_and_shared(client_factory, register, create_audit, find_option):
    owner_client = client_factory()
    await register(owner_client)
    audit = await create_audit(owner_client)

    member_client = client_factory()
    member = await register(member_client, email="member@example.com", role="USER")
    own = await create_audit(member_client)

    shared = await owner_client.post("/api/v1/invitations/audit", json={
        "email": "member@example.com",
        "presentationId": audit["id"],
    })
    assert shared.status_code == 200

    good = find_option(audit, "Good")
    await member_client.post("/api/v1/tests/submit", json={
        "presentationId": audit["id"],
        "userId": member["id"],
        "answers": [{"questionId": good["questionId"], "optionId": good["id"]}],
    })

    response = await member_client.get("/api/v1/audits")

    body = response.json()
    assert body["isInvitedUser"] is False
    by_id = {p["id"]: p for p in body["data"]}
    assert set(by_id) == {audit["id"], own["id"]}
    assert [t["totalScore"] for t in by_id[audit["id"]]["tests"]] == [3]
    assert by_id[own["id"]]["tests"] == []


@pytest.mark.asyncio
async def test_list_audits_for_invited_user(client_factory, register, create_audit, mailer):
    owner_client = client_factory()
    await register(owner_client)
    audit = await create_audit(owner_client)
    await create_audit(owner_client)

    invite = await owner_client.post("/api/v1/invitations/audit", json={
        "email": "guest@example.com",
        "presentationId": audit["id"],
    })
    assert invite.status_code == 201
    token = invite.json()["data"]["token"]

    guest_client = client_factory()
    await register(
        guest_client,
        email="guest@example.com",
        role="USER",
        companyName=None,
        inviteToken=token,
    )

    body = (await guest_client.get("/api/v1/audits")).json()
    assert body["isInvitedUser"] is True
    assert [p["id"] for p in body["data"]] == [audit["id"]]
