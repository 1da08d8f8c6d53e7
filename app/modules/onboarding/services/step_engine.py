import logging
from datetime import date
from typing import Optional, Sequence, Union

from app.modules.onboarding.schema.config import OnboardingConfig
from app.modules.onboarding.schema.models import (
    DocumentStep,
    NextStepEnvelope,
    QuestionStep,
    Turn,
    document_shape,
)
from app.modules.onboarding.services.exceptions import NoCredentialError, ServiceError
from app.modules.onboarding.services.fallback import fallback_document, fallback_step
from app.modules.onboarding.services.llm import GenerationService, request_structured
from app.modules.onboarding.services.prompts import STEP_USER_PROMPT, build_step_prompt
from core.utils.perf import profile_stage

logger = logging.getLogger(__name__)

Step = Union[QuestionStep, DocumentStep]


@profile_stage("next_step")
async def next_step(
    history: Sequence[Turn],
    category: str,
    service: Optional[GenerationService],
    config: OnboardingConfig,
    today: Optional[date] = None,
) -> Step:
    """Decide whether to ask another question or emit the document.

    ``service`` is None when no credential is configured. Under the
    ``surface`` policy that raises NoCredentialError and service failures
    propagate as ServiceError; under ``fallback`` both are replaced by the
    deterministic fallback step.
    """
    if service is None:
        if config.failure_policy == "fallback":
            logger.info(f"[STEP] No credential, fallback step at {len(history)} answers")
            return fallback_step(history, category, config, today)
        raise NoCredentialError("No OpenAI API key configured", context={"category": category})

    if len(history) >= config.max_questions:
        logger.info(f"[STEP] Question budget reached ({len(history)}/{config.max_questions}), forcing document")
        return DocumentStep(document=fallback_document(history, category, config, today))

    shape = NextStepEnvelope[document_shape(config.document_kind)]
    try:
        envelope = await request_structured(
            service,
            build_step_prompt(history, category, config),
            STEP_USER_PROMPT,
            shape,
            temperature=config.step_temperature,
        )
    except ServiceError as e:
        if config.failure_policy == "fallback":
            logger.warning(f"[STEP] Service failed, using fallback step: {e}")
            return fallback_step(history, category, config, today)
        logger.error(f"[STEP] Service failed: {e}")
        raise

    step = envelope.to_step()
    logger.info(f"[STEP] {step.type} after {len(history)}/{config.max_questions} answers")
    return step
