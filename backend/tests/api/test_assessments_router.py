"""
HTTP tests for app.api.v1.assessments

Coverage:
    GET  /api/v1/assessment/questions          -> 200, ordered catalog
    POST /api/v1/assessment/init               -> 201 new / 200 resumed / 400 / 403 / 404
    GET  /api/v1/assessment/{id}               -> 200 with diagnosis / 404
    PUT  /api/v1/assessment/{id}/answers       -> 200 success / 400 / 404 / 500 persistence
    POST /api/v1/assessment/{id}/finalize      -> 200 result / 500 empty / 403
    Authentication                             -> 401 without or with a bad token
"""
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from jose import jwt

from app.core.config import settings
from app.core.exceptions import PersistenceError
from tests.fixtures import make_user

pytestmark = pytest.mark.router

BASE = "/api/v1/assessment"


@pytest.fixture
async def assessment_id(client, catalog, application):
    resp = await client.post(f"{BASE}/init", json={"application_id": str(application.id)})
    assert resp.status_code == 201
    return resp.json()["id"]


async def answer_example(client, assessment_id):
    for question_id, option_id in [(1, 11), (2, 21), (3, 31)]:
        resp = await client.put(
            f"{BASE}/{assessment_id}/answers",
            json={"question_id": question_id, "selected_option_id": option_id},
        )
        assert resp.status_code == 200


# ── GET /assessment/questions ─────────────────────────────────────────────────

async def test_list_questions(client, catalog):
    resp = await client.get(f"{BASE}/questions")

    assert resp.status_code == 200
    body = resp.json()
    assert [q["id"] for q in body] == [1, 2, 3, 4]
    assert body[0]["section"] == {"id": 1, "title": "Governança"}
    assert body[0]["options"] == [
        {"id": 11, "text": "Sim, formalizada", "score_value": 80},
        {"id": 12, "text": "Não", "score_value": 20},
    ]


# ── POST /assessment/init ─────────────────────────────────────────────────────

async def test_init_creates_then_resumes(client, catalog, application):
    first = await client.post(f"{BASE}/init", json={"application_id": str(application.id)})
    assert first.status_code == 201
    assert first.json()["status"] == "IN_PROGRESS"
    assert first.json()["answers"] == []
    assert first.json()["template_id"] == 2

    await client.put(
        f"{BASE}/{first.json()['id']}/answers",
        json={"question_id": 1, "selected_option_id": 11},
    )

    second = await client.post(f"{BASE}/init", json={"application_id": str(application.id)})
    assert second.status_code == 200
    assert second.json()["id"] == first.json()["id"]
    assert [a["question_id"] for a in second.json()["answers"]] == [1]
    assert second.json()["answers"][0]["score_awarded"] == 80


@pytest.mark.parametrize("body", [{}, {"application_id": None}, {"application_id": "nope"}])
async def test_init_malformed_application_id(client, catalog, body):
    resp = await client.post(f"{BASE}/init", json=body)

    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "VALIDATION_ERROR"


async def test_init_without_body(client, catalog):
    resp = await client.post(f"{BASE}/init")
    assert resp.status_code == 400


async def test_init_unknown_application(client, catalog, company):
    resp = await client.post(f"{BASE}/init", json={"application_id": str(uuid.uuid4())})

    assert resp.status_code == 404
    assert resp.json()["detail"]["error"] == "NOT_FOUND"


async def test_init_forbidden(client, catalog, application, user):
    from app.api.deps import get_current_user
    from app.main import app

    app.dependency_overrides[get_current_user] = lambda: make_user()
    resp = await client.post(f"{BASE}/init", json={"application_id": str(application.id)})

    assert resp.status_code == 403
    assert resp.json()["detail"]["error"] == "NOT_AUTHORIZED"


# ── PUT /assessment/{id}/answers ──────────────────────────────────────────────

async def test_save_answer(client, assessment_id):
    resp = await client.put(
        f"{BASE}/{assessment_id}/answers",
        json={"question_id": "1", "selected_option_id": "12"},
    )

    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    detail = await client.get(f"{BASE}/{assessment_id}")
    assert [(a["question_id"], a["score_awarded"]) for a in detail.json()["answers"]] == [(1, 20)]


@pytest.mark.parametrize(
    "body",
    [
        {"selected_option_id": 11},
        {"question_id": 1},
        {"question_id": "one", "selected_option_id": 11},
        {"question_id": "\u00b2", "selected_option_id": 11},
        {"question_id": 1, "selected_option_id": 0},
        {"question_id": 1, "selected_option_id": 21},
    ],
)
async def test_save_answer_bad_request(client, assessment_id, body):
    resp = await client.put(f"{BASE}/{assessment_id}/answers", json=body)

    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "VALIDATION_ERROR"


async def test_save_answer_unknown_option(client, assessment_id):
    resp = await client.put(
        f"{BASE}/{assessment_id}/answers",
        json={"question_id": 1, "selected_option_id": 999},
    )
    assert resp.status_code == 404


async def test_save_answer_unknown_assessment(client, catalog):
    resp = await client.put(
        f"{BASE}/{uuid.uuid4()}/answers",
        json={"question_id": 1, "selected_option_id": 11},
    )
    assert resp.status_code == 404


async def test_save_answer_persistence_error(client, assessment_id, mocker):
    mocker.patch(
        "app.api.v1.assessments.AssessmentService.save_answer",
        AsyncMock(
            side_effect=PersistenceError(
                "Failed to save answer", operation="save_answer", original=Exception("disk full")
            )
        ),
    )

    resp = await client.put(
        f"{BASE}/{assessment_id}/answers",
        json={"question_id": 1, "selected_option_id": 11},
    )

    assert resp.status_code == 500
    detail = resp.json()["detail"]
    assert detail["error"] == "PERSISTENCE_ERROR"
    assert detail["details"]["original_error"] == "disk full"


# ── POST /assessment/{id}/finalize ────────────────────────────────────────────

async def test_finalize(client, assessment_id):
    await answer_example(client, assessment_id)

    resp = await client.post(f"{BASE}/{assessment_id}/finalize")

    assert resp.status_code == 200
    assert resp.json() == {
        "id": assessment_id,
        "score": 60.0,
        "maturity_level": "Intermediário",
        "risk_label": "Moderado",
        "axis_analysis": [
            {"section_id": 1, "title": "Governança", "score": 70.0, "answer_count": 2},
            {"section_id": 2, "title": "Dados", "score": 40.0, "answer_count": 1},
        ],
        "maturity_percentage": 60,
    }

    detail = await client.get(f"{BASE}/{assessment_id}")
    body = detail.json()
    assert body["status"] == "COMPLETED"
    assert body["calculated_score"] == 60.0
    assert body["maturity_percentage"] == 60
    assert body["diagnosis"]["maturity_level"] == "Intermediário"
    assert body["diagnosis"]["action_plan"] == []


async def test_finalize_with_bulk_answers(client, assessment_id):
    resp = await client.post(
        f"{BASE}/{assessment_id}/finalize",
        json={
            "answers": [
                {"question_id": 1, "selected_option_id": 11},
                {"question_id": 2, "selected_option_id": 22},
                {"question_id": "bad", "selected_option_id": 31},
            ]
        },
    )

    assert resp.status_code == 200
    assert resp.json()["score"] == 90.0
    assert resp.json()["maturity_level"] == "Avançado"


async def test_finalize_twice_same_result(client, assessment_id):
    await answer_example(client, assessment_id)

    first = await client.post(f"{BASE}/{assessment_id}/finalize")
    second = await client.post(f"{BASE}/{assessment_id}/finalize")

    assert first.json() == second.json()


async def test_finalize_without_answers(client, assessment_id):
    resp = await client.post(f"{BASE}/{assessment_id}/finalize", json={"answers": []})

    assert resp.status_code == 500
    assert resp.json()["detail"]["error"] == "DOMAIN_INVARIANT_VIOLATION"

    detail = await client.get(f"{BASE}/{assessment_id}")
    assert detail.json()["status"] == "IN_PROGRESS"
    assert detail.json()["diagnosis"] is None


async def test_finalize_forbidden(client, assessment_id):
    from app.api.deps import get_current_user
    from app.main import app

    app.dependency_overrides[get_current_user] = lambda: make_user()
    resp = await client.post(f"{BASE}/{assessment_id}/finalize")

    assert resp.status_code == 403


# ── GET /assessment/{id} ──────────────────────────────────────────────────────

async def test_get_unknown_assessment(client, catalog):
    resp = await client.get(f"{BASE}/{uuid.uuid4()}")
    assert resp.status_code == 404


async def test_get_malformed_assessment_id(client, catalog):
    resp = await client.get(f"{BASE}/not-a-uuid")
    assert resp.status_code == 400


# ── Authentication ────────────────────────────────────────────────────────────

async def test_missing_token(anonymous_client, catalog):
    resp = await anonymous_client.get(f"{BASE}/questions")

    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"


async def test_invalid_token(anonymous_client, catalog):
    resp = await anonymous_client.get(
        f"{BASE}/questions", headers={"Authorization": "Bearer not-a-jwt"}
    )

    assert resp.status_code == 401
    assert resp.json()["detail"]["error"] == "NOT_AUTHENTICATED"


async def test_valid_token(anonymous_client, catalog):
    token = jwt.encode(
        {
            "sub": str(uuid.uuid4()),
            "email": "owner@acme.test",
            "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
        },
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )

    resp = await anonymous_client.get(
        f"{BASE}/questions", headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 200


async def test_expired_token(anonymous_client, catalog):
    token = jwt.encode(
        {"sub": str(uuid.uuid4()), "exp": datetime.now(timezone.utc) - timedelta(minutes=5)},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )

    resp = await anonymous_client.get(
        f"{BASE}/questions", headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 401
