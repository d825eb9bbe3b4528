"""
HTTP tests for app.api.v1.companies and the app level routes

Coverage:
    GET /api/v1/companies/{id}/metrics -> 200 aggregate / 403 / 404 / 400
    GET /health                        -> 200
"""
import uuid
from unittest.mock import AsyncMock

import pytest

from tests.fixtures import make_user

pytestmark = pytest.mark.router

BASE = "/api/v1/companies"


async def test_metrics_after_finalize(client, catalog, application, company):
    init = await client.post("/api/v1/assessment/init", json={"application_id": str(application.id)})
    assessment_id = init.json()["id"]
    await client.put(
        f"/api/v1/assessment/{assessment_id}/answers",
        json={"question_id": 2, "selected_option_id": 22},
    )
    await client.post(f"/api/v1/assessment/{assessment_id}/finalize")

    resp = await client.get(f"{BASE}/{company.id}/metrics")

    assert resp.status_code == 200
    assert resp.json() == {
        "company_id": str(company.id),
        "total_applications": 1,
        "completed_assessments": 1,
        "in_progress_assessments": 0,
        "average_score": 100.0,
        "maturity_percentage": 100,
    }


async def test_metrics_without_assessments(client, company):
    resp = await client.get(f"{BASE}/{company.id}/metrics")

    assert resp.status_code == 200
    assert resp.json()["average_score"] is None
    assert resp.json()["maturity_percentage"] == 0


async def test_metrics_forbidden(client, company):
    from app.api.deps import get_current_user
    from app.main import app

    app.dependency_overrides[get_current_user] = lambda: make_user()
    resp = await client.get(f"{BASE}/{company.id}/metrics")

    assert resp.status_code == 403


async def test_metrics_unknown_company(client, company):
    resp = await client.get(f"{BASE}/{uuid.uuid4()}/metrics")
    assert resp.status_code == 404


async def test_metrics_malformed_company_id(client):
    resp = await client.get(f"{BASE}/acme/metrics")
    assert resp.status_code == 400


async def test_metrics_uses_service(client, mocker):
    company_id = uuid.uuid4()
    mocker.patch(
        "app.api.v1.companies.OrganizationService.get_company_metrics",
        AsyncMock(
            return_value={
                "company_id": company_id,
                "total_applications": 3,
                "completed_assessments": 2,
                "in_progress_assessments": 1,
                "average_score": 72.35,
                "maturity_percentage": 72,
            }
        ),
    )

    resp = await client.get(f"{BASE}/{company_id}/metrics")

    assert resp.status_code == 200
    assert resp.json()["maturity_percentage"] == 72


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy"}
