import logging

from pydantic import BaseModel

from app.modules.onboarding.schema.config import OnboardingConfig
from app.modules.onboarding.services.llm import GenerationService, request_structured
from app.modules.onboarding.services.prompts import REFINE_USER_PROMPT, build_refine_prompt
from core.utils.perf import profile_stage

logger = logging.getLogger(__name__)


@profile_stage("refine")
async def refine(
    document: BaseModel,
    feedback: str,
    service: GenerationService,
    config: OnboardingConfig,
) -> BaseModel:
    """Return a complete revised document with only the feedback applied.

    The revision is validated against the same shape as the input document.
    """
    if not (feedback or "").strip():
        raise ValueError("Refinement feedback must not be empty")

    revised = await request_structured(
        service,
        build_refine_prompt(document, feedback, config),
        REFINE_USER_PROMPT,
        type(document),
        temperature=config.refine_temperature,
    )
    logger.info(f"[REFINE] {type(document).__name__} revised")
    return revised
