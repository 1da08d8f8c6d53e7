"""
Core Configuration and Services
Consolidated configuration settings and service wiring for the onboarding API
"""

import logging
import os
from functools import lru_cache
from typing import Literal, Optional

from fastapi import FastAPI
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

BASE_PATH = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=f"{BASE_PATH}/.env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    PROJECT_NAME: str = "3Quotes Onboarding"

    # LLM
    OPENAI_API_KEY: Optional[str] = None
    LLM_MODEL: str = "o4-mini"
    OPENAI_TIMEOUT_SECS: int = 60

    # Onboarding flow
    ONBOARDING_MIN_QUESTIONS: int = 5
    ONBOARDING_MAX_QUESTIONS: int = 10
    ONBOARDING_FALLBACK_QUESTIONS: int = 3
    ONBOARDING_DOCUMENT_KIND: Literal["rfq", "quote"] = "rfq"
    ONBOARDING_FAILURE_POLICY: Literal["surface", "fallback"] = "surface"
    ONBOARDING_CURRENCY: str = "AED"
    ONBOARDING_COMPANY_NAME: str = "3Quotes"
    ONBOARDING_CONTACT_INFO: str = "procurement@3quotes.ae"
    ONBOARDING_REQUEST_DEADLINE_SECS: float = 90.0

    # Sampling temperatures (ignored by reasoning models)
    LLM_TEMPERATURE_STEP: float = 0.7
    LLM_TEMPERATURE_SYNTHESIS: float = 0.5
    LLM_TEMPERATURE_AUDIT: float = 0.3
    LLM_TEMPERATURE_REFINE: float = 0.7

    # CORS Configuration
    CORS_ALLOWED_ORIGINS: list[str] = [
        "http://127.0.0.1:8000",
        "http://localhost:5173",
        "http://localhost:3000",
    ]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()


def wire_services(app: FastAPI) -> None:
    """Wire singleton services into app.state on startup."""
    from app.modules.onboarding.schema.config import OnboardingConfig
    from app.modules.onboarding.services.onboarding import OnboardingService, shared_http_client

    logger.info("Wiring global services...")
    app.state.settings = settings

    config = OnboardingConfig.from_settings(settings)
    app.state.http_client = shared_http_client(settings.OPENAI_TIMEOUT_SECS)
    app.state.onboarding = OnboardingService(config=config, settings=settings, http_client=app.state.http_client)
    logger.info(
        f"Onboarding wired: kind={config.document_kind}, policy={config.failure_policy}, "
        f"questions={config.min_questions}..{config.max_questions}, model={config.default_model}"
    )
