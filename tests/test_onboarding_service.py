"""
Tests for the caller-facing onboarding service (credential handling and dispatch).
"""

from types import SimpleNamespace

import httpx
import pytest

from app.modules.onboarding.schema.models import DocumentStep, QuestionStep
from app.modules.onboarding.services.exceptions import NoCredentialError
from app.modules.onboarding.services.llm import Credentials, OpenAIGenerationService
from app.modules.onboarding.services.onboarding import OnboardingService, openai_service_factory


def make_settings(key=None, model="o4-mini"):
    return SimpleNamespace(OPENAI_API_KEY=key, LLM_MODEL=model, OPENAI_TIMEOUT_SECS=30)


@pytest.fixture
def factory_calls():
    return []


@pytest.fixture
def service_factory(fake_service, factory_calls):
    def _factory(credentials, config):
        factory_calls.append((credentials, config))
        return fake_service
    return _factory


class TestNextStep:

    @pytest.mark.asyncio
    async def test_uses_request_credential_and_model(self, config, fake_service, service_factory, factory_calls):
        fake_service.queue({
            "type": "question",
            "question": {"text": "How many rooms?", "inputType": "number", "options": None},
            "document": None,
        })
        onboarding = OnboardingService(config, make_settings(), service_factory=service_factory)

        step = await onboarding.next_step([], "residential", credential="sk-user", model_hint="gpt-4o")

        assert isinstance(step, QuestionStep)
        credentials, _ = factory_calls[0]
        assert credentials.api_key == "sk-user"
        assert credentials.model == "gpt-4o"

    @pytest.mark.asyncio
    async def test_default_model_from_config(self, config, fake_service, service_factory, factory_calls):
        fake_service.queue({
            "type": "question",
            "question": {"text": "How many rooms?", "inputType": "number", "options": None},
            "document": None,
        })
        onboarding = OnboardingService(config, make_settings(key="sk-env"), service_factory=service_factory)

        await onboarding.next_step([], "residential")

        credentials, _ = factory_calls[0]
        assert credentials.api_key == "sk-env"
        assert credentials.model == config.default_model

    @pytest.mark.asyncio
    async def test_no_credential_under_surface_policy(self, config, service_factory, factory_calls):
        onboarding = OnboardingService(config, make_settings(), service_factory=service_factory)

        with pytest.raises(NoCredentialError):
            await onboarding.next_step([], "residential")
        assert factory_calls == []

    @pytest.mark.asyncio
    async def test_no_credential_under_fallback_policy(self, legacy_config, service_factory):
        onboarding = OnboardingService(legacy_config, make_settings(), service_factory=service_factory)

        step = await onboarding.next_step([], "industrial")

        assert step.question.text == "What specific type of industrial project are you looking for?"

    @pytest.mark.asyncio
    async def test_question_budget_override(self, config, fake_service, service_factory, make_history, today):
        onboarding = OnboardingService(config, make_settings(key="sk-env"), service_factory=service_factory)

        step = await onboarding.next_step(make_history(3), "residential", question_budget=3, today=today)

        assert isinstance(step, DocumentStep)
        assert fake_service.calls == []
        assert onboarding.config.max_questions == 10

    @pytest.mark.asyncio
    async def test_zero_budget_forces_document(self, config, fake_service, service_factory, today):
        onboarding = OnboardingService(config, make_settings(key="sk-env"), service_factory=service_factory)

        step = await onboarding.next_step([], "residential", question_budget=0, today=today)

        assert isinstance(step, DocumentStep)
        assert fake_service.calls == []

    @pytest.mark.asyncio
    async def test_zero_budget_under_fallback_policy(self, legacy_config, service_factory):
        onboarding = OnboardingService(legacy_config, make_settings(), service_factory=service_factory)

        step = await onboarding.next_step([], "residential", question_budget=0)

        assert isinstance(step, DocumentStep)


class TestDocuments:

    @pytest.mark.asyncio
    async def test_generate_audited(self, config, fake_service, service_factory, history, rfq):
        fake_service.queue(rfq, {"passed": True, "issues": [], "refinement_instructions": None})
        onboarding = OnboardingService(config, make_settings(key="sk-env"), service_factory=service_factory)

        assert await onboarding.generate_audited(history, "residential") == rfq

    @pytest.mark.asyncio
    async def test_generate_audited_requires_credential(self, legacy_config, service_factory, history):
        onboarding = OnboardingService(legacy_config, make_settings(), service_factory=service_factory)

        with pytest.raises(NoCredentialError):
            await onboarding.generate_audited(history, "residential")

    @pytest.mark.asyncio
    async def test_refine(self, config, fake_service, service_factory, rfq, refined_rfq):
        fake_service.queue(refined_rfq)
        onboarding = OnboardingService(config, make_settings(), service_factory=service_factory)

        revised = await onboarding.refine(rfq, "Lower the budget", credential="sk-user")

        assert revised == refined_rfq

    @pytest.mark.asyncio
    async def test_refine_requires_credential(self, config, service_factory, rfq):
        onboarding = OnboardingService(config, make_settings(), service_factory=service_factory)

        with pytest.raises(NoCredentialError):
            await onboarding.refine(rfq, "Lower the budget")


def test_openai_factory_builds_client(config):
    factory = openai_service_factory(timeout=15)
    onboarding = OnboardingService(config, make_settings(key="sk-env"))
    service = factory(onboarding._credentials(None, "gpt-4o"), config)

    assert isinstance(service, OpenAIGenerationService)
    assert service.model == "gpt-4o"
    assert service.deadline == config.request_deadline_secs


class TestHttpTransport:

    def test_factory_services_share_one_transport(self, config):
        shared = httpx.AsyncClient()
        factory = openai_service_factory(timeout=15, http_client=shared)
        creds = Credentials(api_key="sk-env", model="gpt-4o")

        first = factory(creds, config)
        second = factory(creds, config)

        assert first._client is not second._client
        assert first._client._client is shared
        assert second._client._client is shared

    def test_factory_creates_one_transport_when_none_given(self, config):
        factory = openai_service_factory(timeout=15)
        creds = Credentials(api_key="sk-env", model="gpt-4o")

        assert factory(creds, config)._client._client is factory(creds, config)._client._client

    def test_onboarding_service_uses_supplied_transport(self, config):
        shared = httpx.AsyncClient()
        onboarding = OnboardingService(config, make_settings(key="sk-env"), http_client=shared)

        service = onboarding._service(onboarding._credentials(None, None), config)

        assert service._client._client is shared
