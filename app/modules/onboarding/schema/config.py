from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.modules.onboarding.schema.models import DocumentKind

FailurePolicy = Literal["surface", "fallback"]


class OnboardingConfig(BaseModel):
    """Explicit per-deployment (or per-session) onboarding configuration.

    Engines receive this value as an argument; none of them read ambient
    settings, so sessions with different budgets can run side by side.
    """

    model_config = ConfigDict(frozen=True)

    min_questions: int = Field(default=5, ge=0)
    max_questions: int = Field(default=10, ge=0)
    fallback_questions: int = Field(default=3, ge=0, le=3)
    document_kind: DocumentKind = "rfq"
    failure_policy: FailurePolicy = "surface"
    default_model: str = "o4-mini"
    currency: str = "AED"
    company_name: str = "3Quotes"
    contact_info: str = "procurement@3quotes.ae"
    submission_window_days: int = 7
    request_deadline_secs: Optional[float] = 90.0

    step_temperature: float = 0.7
    synthesis_temperature: float = 0.5
    audit_temperature: float = 0.3
    refine_temperature: float = 0.7

    @model_validator(mode="after")
    def _budget_covers_minimum(self) -> "OnboardingConfig":
        if self.min_questions > self.max_questions:
            raise ValueError("min_questions cannot exceed max_questions")
        return self

    @classmethod
    def from_settings(cls, settings) -> "OnboardingConfig":
        return cls(
            min_questions=min(settings.ONBOARDING_MIN_QUESTIONS, settings.ONBOARDING_MAX_QUESTIONS),
            max_questions=settings.ONBOARDING_MAX_QUESTIONS,
            fallback_questions=settings.ONBOARDING_FALLBACK_QUESTIONS,
            document_kind=settings.ONBOARDING_DOCUMENT_KIND,
            failure_policy=settings.ONBOARDING_FAILURE_POLICY,
            default_model=settings.LLM_MODEL,
            currency=settings.ONBOARDING_CURRENCY,
            company_name=settings.ONBOARDING_COMPANY_NAME,
            contact_info=settings.ONBOARDING_CONTACT_INFO,
            request_deadline_secs=settings.ONBOARDING_REQUEST_DEADLINE_SECS,
            step_temperature=settings.LLM_TEMPERATURE_STEP,
            synthesis_temperature=settings.LLM_TEMPERATURE_SYNTHESIS,
            audit_temperature=settings.LLM_TEMPERATURE_AUDIT,
            refine_temperature=settings.LLM_TEMPERATURE_REFINE,
        )

    def with_budget(self, question_budget: Optional[int]) -> "OnboardingConfig":
        """Copy of this config with a caller-chosen question budget."""
        if question_budget is None or question_budget == self.max_questions:
            return self
        return OnboardingConfig(
            **{
                **self.model_dump(),
                "max_questions": question_budget,
                "min_questions": min(self.min_questions, question_budget),
            }
        )
