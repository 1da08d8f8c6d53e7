import logging
from datetime import date
from typing import Callable, Optional, Sequence, Union

import httpx
from pydantic import BaseModel

from app.modules.onboarding.schema.config import OnboardingConfig
from app.modules.onboarding.schema.models import RFQ, DocumentStep, QuestionStep, Quote, Turn
from app.modules.onboarding.services import orchestrator, refiner, step_engine
from app.modules.onboarding.services.llm import (
    Credentials,
    GenerationService,
    OpenAIGenerationService,
    resolve_credentials,
)

logger = logging.getLogger(__name__)

ServiceFactory = Callable[[Credentials, OnboardingConfig], GenerationService]

HTTP_LIMITS = httpx.Limits(max_keepalive_connections=20, max_connections=40)


def shared_http_client(timeout: float) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=timeout, limits=HTTP_LIMITS)


def openai_service_factory(timeout: float, http_client: Optional[httpx.AsyncClient] = None) -> ServiceFactory:
    """Per-call OpenAI services on one shared HTTP transport.

    The transport is created here unless supplied; its owner closes it.
    """
    if http_client is None:
        http_client = shared_http_client(timeout)

    def _factory(credentials: Credentials, config: OnboardingConfig) -> GenerationService:
        return OpenAIGenerationService(
            api_key=credentials.require_key(),
            model=credentials.model,
            timeout=timeout,
            deadline=config.request_deadline_secs,
            http_client=http_client,
        )
    return _factory


class OnboardingService:
    """Caller-facing entry points: credential lookup plus engine dispatch.

    Holds no per-session state; history always comes from the caller.
    """

    def __init__(
        self,
        config: OnboardingConfig,
        settings,
        service_factory: Optional[ServiceFactory] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config
        self.settings = settings
        self.service_factory = service_factory or openai_service_factory(
            settings.OPENAI_TIMEOUT_SECS, http_client=http_client
        )

    def _credentials(self, credential: Optional[str], model_hint: Optional[str]) -> Credentials:
        return resolve_credentials(credential, model_hint or self.config.default_model, self.settings)

    def _service(self, creds: Credentials, config: OnboardingConfig) -> GenerationService:
        creds.require_key()
        return self.service_factory(creds, config)

    async def next_step(
        self,
        history: Sequence[Turn],
        category: str,
        credential: Optional[str] = None,
        model_hint: Optional[str] = None,
        question_budget: Optional[int] = None,
        today: Optional[date] = None,
    ) -> Union[QuestionStep, DocumentStep]:
        config = self.config.with_budget(question_budget)
        creds = self._credentials(credential, model_hint)
        service = self.service_factory(creds, config) if creds.api_key else None
        return await step_engine.next_step(history, category, service, config, today=today)

    async def generate_audited(
        self,
        history: Sequence[Turn],
        category: str,
        credential: Optional[str] = None,
        model_hint: Optional[str] = None,
    ) -> Union[Quote, RFQ]:
        service = self._service(self._credentials(credential, model_hint), self.config)
        return await orchestrator.generate_audited(history, category, service, self.config)

    async def refine(
        self,
        document: BaseModel,
        feedback: str,
        credential: Optional[str] = None,
        model_hint: Optional[str] = None,
    ) -> BaseModel:
        service = self._service(self._credentials(credential, model_hint), self.config)
        return await refiner.refine(document, feedback, service, self.config)
