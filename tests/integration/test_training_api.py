"""
Training API integration tests.

Drives the HTTP surface with httpx against the ASGI app, with the
database dependency pointed at the test SQLite file.
"""

import uuid
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from academy.database import get_db
from academy.kernel.identity.jwt import StaffRole
from academy.main import app

from conftest import bearer

API = "/api/v1/training"


@pytest_asyncio.fixture
async def client(session_maker):
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def staff_headers(jwt_manager, staff_id):
    return bearer(jwt_manager, staff_id)


@pytest.fixture
def admin_headers(jwt_manager):
    return bearer(jwt_manager, uuid.uuid4(), StaffRole.ADMIN)


def _quiz(count: int) -> list:
    return [
        {"text": f"Question {i + 1}", "options": ["right", "wrong"], "correct_index": 0}
        for i in range(count)
    ]


async def _seed(client: AsyncClient, headers: dict) -> dict:
    """Foundation: one reading. L1: one 10-question quiz. L3: capstone."""
    courses = {}
    for key, body in (
        ("welcome", {"tier": "foundation", "title": "Welcome", "content_type": "reading"}),
        ("l1_quiz", {"tier": "L1", "title": "L1 Quiz", "content_type": "quiz", "questions": _quiz(10)}),
        ("l2_read", {"tier": "L2", "title": "L2 Reading", "content_type": "reading"}),
        ("capstone", {"tier": "L3", "title": "Capstone", "content_type": "quiz",
                      "questions": _quiz(5), "is_capstone": True}),
    ):
        r = await client.post(f"{API}/courses", json=body, headers=headers)
        assert r.status_code == 201, r.text
        courses[key] = r.json()["id"]
    return courses


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_requires_token(client: AsyncClient):
    r = await client.get(f"{API}/tiers")
    assert r.status_code == 401

    r = await client.get(f"{API}/tiers", headers={"Authorization": "Bearer nonsense"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_authoring_requires_admin(client: AsyncClient, staff_headers):
    r = await client.post(
        f"{API}/courses",
        json={"tier": "foundation", "title": "Sneaky", "content_type": "reading"},
        headers=staff_headers,
    )
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_invalid_course_definition_rejected(client: AsyncClient, admin_headers):
    r = await client.post(
        f"{API}/courses",
        json={"tier": "L1", "title": "Empty quiz", "content_type": "quiz", "questions": []},
        headers=admin_headers,
    )
    assert r.status_code == 422
    assert r.json()["error"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_catalog_hides_answer_key(client: AsyncClient, admin_headers, staff_headers):
    courses = await _seed(client, admin_headers)

    r = await client.get(f"{API}/courses", headers=staff_headers)
    assert r.status_code == 200
    assert [c["tier"] for c in r.json()] == ["foundation", "L1", "L2", "L3"]

    r = await client.get(f"{API}/courses", params={"tier": "L1"}, headers=staff_headers)
    assert [c["id"] for c in r.json()] == [courses["l1_quiz"]]

    r = await client.get(f"{API}/courses/{courses['l1_quiz']}", headers=staff_headers)
    body = r.json()
    assert body["tier_name"] == "Level 1 Food Hygiene"
    assert len(body["questions"]) == 10
    assert "correct_index" not in body["questions"][0]


@pytest.mark.asyncio
async def test_unknown_course_is_404(client: AsyncClient, staff_headers):
    r = await client.get(f"{API}/courses/{uuid.uuid4()}", headers=staff_headers)
    assert r.status_code == 404
    body = r.json()
    assert body["error"] == "UNKNOWN_COURSE"
    assert body["request_id"]
    assert r.headers["X-Request-ID"] == body["request_id"]


@pytest.mark.asyncio
async def test_locked_tier_is_403(client: AsyncClient, admin_headers, staff_headers):
    courses = await _seed(client, admin_headers)
    r = await client.post(
        f"{API}/courses/{courses['l1_quiz']}/quiz",
        json={"answers": [0] * 10},
        headers=staff_headers,
    )
    assert r.status_code == 403
    assert r.json()["error"] == "TIER_LOCKED"
    assert r.json()["details"]["tier"] == "L1"


@pytest.mark.asyncio
async def test_learner_flow(client: AsyncClient, admin_headers, staff_headers):
    courses = await _seed(client, admin_headers)

    r = await client.post(f"{API}/courses/{courses['welcome']}/complete", headers=staff_headers)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["tier_status"] == "complete"
    assert body["certificate_issued"] is True
    assert body["certificate"]["tier"] == "foundation"
    assert body["certificate"]["status"] == "valid"

    # Partial submission
    r = await client.post(
        f"{API}/courses/{courses['l1_quiz']}/quiz",
        json={"answers": [0, 0, None, 0, 0, 0, 0, 0, 0, 0]},
        headers=staff_headers,
    )
    assert r.status_code == 422
    assert r.json()["error"] == "INCOMPLETE_SUBMISSION"

    r = await client.post(
        f"{API}/courses/{courses['l1_quiz']}/quiz",
        json={"answers": [0] * 7 + [1] * 3},
        headers=staff_headers,
    )
    body = r.json()
    assert body["quiz"]["score_percentage"] == 70
    assert body["quiz"]["passed"] is False
    assert body["progress"]["status"] == "in_progress"
    assert body["progress"]["progress_percent"] == 50
    assert body["progress"]["quiz_attempts"] == 1

    r = await client.post(
        f"{API}/courses/{courses['l1_quiz']}/quiz",
        json={"answers": [0] * 9 + [1]},
        headers=staff_headers,
    )
    body = r.json()
    assert body["quiz"]["score_percentage"] == 90
    assert body["progress"]["status"] == "completed"
    assert body["progress"]["quiz_attempts"] == 2
    assert body["certificate_issued"] is True
    assert body["certificate"]["certificate_number"].startswith("AURA-L1-")

    r = await client.get(f"{API}/tiers", headers=staff_headers)
    tiers = {t["tier"]: t for t in r.json()["tiers"]}
    assert tiers["foundation"]["status"] == "complete"
    assert tiers["L1"]["status"] == "complete"
    assert tiers["L2"]["status"] == "unlocked_incomplete"
    assert tiers["L3"]["status"] == "locked"

    r = await client.get(f"{API}/certificates", headers=staff_headers)
    certs = r.json()["certificates"]
    assert [c["tier"] for c in certs] == ["foundation", "L1"]
    assert all(c["days_until_expiry"] >= 364 for c in certs)


@pytest.mark.asyncio
async def test_capstone_reflection_flow(client: AsyncClient, admin_headers, staff_headers):
    courses = await _seed(client, admin_headers)
    await client.post(f"{API}/courses/{courses['welcome']}/complete", headers=staff_headers)
    await client.post(f"{API}/courses/{courses['l1_quiz']}/quiz", json={"answers": [0] * 10}, headers=staff_headers)
    await client.post(f"{API}/courses/{courses['l2_read']}/complete", headers=staff_headers)

    reflection = {
        "what_learned": "Allergen control",
        "connected_value": "People First",
        "proud_moment": "Trained two new starters",
    }
    r = await client.post(f"{API}/courses/{courses['capstone']}/reflection", json=reflection, headers=staff_headers)
    assert r.status_code == 409
    assert r.json()["error"] == "REFLECTION_NOT_DUE"

    r = await client.post(f"{API}/courses/{courses['capstone']}/quiz", json={"answers": [0] * 5}, headers=staff_headers)
    body = r.json()
    assert body["progress"]["stage"] == "awaiting_reflection"
    assert body["progress"]["progress_percent"] == 90
    assert body["certificate"] is None

    r = await client.post(
        f"{API}/courses/{courses['capstone']}/reflection",
        json={**reflection, "proud_moment": "  "},
        headers=staff_headers,
    )
    assert r.status_code == 422
    assert r.json()["details"]["missing_fields"] == ["proud_moment"]

    r = await client.post(f"{API}/courses/{courses['capstone']}/reflection", json=reflection, headers=staff_headers)
    assert r.status_code == 200
    body = r.json()
    assert body["progress"]["status"] == "completed"
    assert body["reflection_id"]
    assert body["certificate"]["tier"] == "L3"


@pytest.mark.asyncio
async def test_journey_endpoints(client: AsyncClient, admin_headers, staff_headers):
    r = await client.get(f"{API}/journey", headers=staff_headers)
    assert r.status_code == 200
    assert r.json()["current_step"] == "values"

    r = await client.post(f"{API}/journey/culture-acknowledged", headers=staff_headers)
    assert r.json()["values_completed"] is True
    assert r.json()["current_step"] == "hygiene"


@pytest.mark.asyncio
async def test_admin_override(client: AsyncClient, admin_headers, staff_headers, staff_id):
    courses = await _seed(client, admin_headers)
    await client.post(f"{API}/courses/{courses['welcome']}/complete", headers=staff_headers)

    r = await client.post(
        f"{API}/admin/progress/{staff_id}/{courses['welcome']}",
        json={"status": "not_started", "reason": "Completed on the wrong account"},
        headers=staff_headers,
    )
    assert r.status_code == 403

    r = await client.post(
        f"{API}/admin/progress/{staff_id}/{courses['welcome']}",
        json={"status": "not_started", "reason": "Completed on the wrong account"},
        headers=admin_headers,
    )
    assert r.status_code == 200
    assert r.json()["tier_status"] == "unlocked_incomplete"

    r = await client.get(f"{API}/tiers", headers=staff_headers)
    tiers = {t["tier"]: t for t in r.json()["tiers"]}
    assert tiers["L1"]["status"] == "locked"

    r = await client.post(
        f"{API}/admin/progress/{staff_id}/{courses['capstone']}",
        json={"status": "completed"},
        headers=admin_headers,
    )
    assert r.status_code == 409
    assert r.json()["error"] == "REFLECTION_REQUIRED"


@pytest.mark.asyncio
async def test_quiz_answers_must_be_plain_integers(client: AsyncClient, admin_headers, staff_headers):
    courses = await _seed(client, admin_headers)
    await client.post(f"{API}/courses/{courses['welcome']}/complete", headers=staff_headers)

    for coerced in (True, "0", 0.0):
        r = await client.post(
            f"{API}/courses/{courses['l1_quiz']}/quiz",
            json={"answers": [coerced] + [0] * 9},
            headers=staff_headers,
        )
        assert r.status_code == 422, coerced
        assert r.json()["error"] == "VALIDATION_ERROR"

    r = await client.get(f"{API}/tiers", headers=staff_headers)
    tiers = {t["tier"]: t for t in r.json()["tiers"]}
    assert tiers["L1"]["completed_courses"] == 0
