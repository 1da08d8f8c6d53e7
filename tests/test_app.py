"""
HTTP-level tests for the onboarding API.
"""

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app.main import app, create_app
from app.modules.onboarding.api.router import get_onboarding_service
from app.modules.onboarding.schema.config import OnboardingConfig
from app.modules.onboarding.services.exceptions import ServiceError
from app.modules.onboarding.services.onboarding import OnboardingService

STEP_URL = "/api/v1/onboarding/step"
GENERATE_URL = "/api/v1/onboarding/generate"
REFINE_URL = "/api/v1/onboarding/refine"


@pytest.fixture
def onboarding(fake_service):
    settings = SimpleNamespace(OPENAI_API_KEY=None, LLM_MODEL="o4-mini", OPENAI_TIMEOUT_SECS=30)
    return OnboardingService(OnboardingConfig(), settings, service_factory=lambda creds, config: fake_service)


@pytest.fixture
def client(onboarding):
    app.dependency_overrides[get_onboarding_service] = lambda: onboarding
    yield TestClient(app)
    app.dependency_overrides.clear()


def turns(history):
    return [t.model_dump() for t in history]


class TestHealth:

    def test_healthz(self, client):
        response = client.get("/healthz")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestStepEndpoint:

    def test_missing_key_is_401(self, client):
        response = client.post(STEP_URL, json={"history": [], "category": "residential"})

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "NO_API_KEY"

    def test_question(self, client, fake_service):
        fake_service.queue({
            "type": "question",
            "question": {"text": "How many rooms?", "inputType": "number", "options": None},
            "document": None,
        })

        response = client.post(
            STEP_URL,
            json={"history": [], "category": "residential"},
            headers={"X-OpenAI-Key": "sk-user"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["phase"] == "awaiting_answer"
        assert body["step"]["type"] == "question"
        assert body["step"]["question"]["inputType"] == "number"

    def test_budget_forces_document(self, client, history):
        response = client.post(
            STEP_URL,
            json={"history": turns(history), "category": "residential", "api_key": "sk-user", "max_questions": 5},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["phase"] == "document_ready"
        assert body["step"]["document"]["rfq_number"].startswith("RFQ-")

    def test_service_failure_is_502(self, client, fake_service):
        fake_service.queue(ServiceError("upstream timed out"))

        response = client.post(STEP_URL, json={"history": [], "category": "residential", "api_key": "sk-user"})

        assert response.status_code == 502
        assert response.json()["error"] == "API_ERROR"

    def test_empty_category_rejected(self, client):
        response = client.post(STEP_URL, json={"history": [], "category": ""})
        assert response.status_code == 422


class TestDocumentEndpoints:

    def test_generate(self, client, fake_service, history, rfq):
        fake_service.queue(rfq, {"passed": True, "issues": [], "refinement_instructions": None})

        response = client.post(
            GENERATE_URL,
            json={"history": turns(history), "category": "residential", "api_key": "sk-user"},
        )

        assert response.status_code == 200
        assert response.json()["document"] == rfq.model_dump()

    def test_generate_without_key(self, client, history):
        response = client.post(GENERATE_URL, json={"history": turns(history), "category": "residential"})
        assert response.status_code == 401

    def test_refine(self, client, fake_service, rfq, refined_rfq):
        fake_service.queue(refined_rfq)

        response = client.post(
            REFINE_URL,
            json={"document": rfq.model_dump(), "feedback": "Lower the budget", "api_key": "sk-user"},
        )

        assert response.status_code == 200
        assert response.json()["document"]["budget_range"] == "AED 8,000 - AED 10,000"

    def test_refine_blank_feedback_rejected(self, client, rfq):
        response = client.post(
            REFINE_URL,
            json={"document": rfq.model_dump(), "feedback": "   ", "api_key": "sk-user"},
        )
        assert response.status_code == 422

    def test_quote_refinement(self, client, fake_service, quote):
        fake_service.queue(quote.model_copy(update={"total_cost": "AED 6,000"}))

        response = client.post(
            REFINE_URL,
            json={"document": quote.model_dump(), "feedback": "Cap at AED 6,000", "api_key": "sk-user"},
        )

        assert response.status_code == 200
        assert response.json()["document"]["total_cost"] == "AED 6,000"


def test_models(client):
    response = client.get("/api/v1/onboarding/models")

    assert response.status_code == 200
    body = response.json()
    assert body["default"] == "o4-mini"
    assert any(m["id"] == "gpt-4o" for m in body["models"])


def test_shared_http_client_closed_on_shutdown():
    fresh = create_app()
    shared = fresh.state.http_client

    with TestClient(fresh) as test_client:
        assert test_client.get("/healthz").status_code == 200
        assert not shared.is_closed

    assert shared.is_closed
