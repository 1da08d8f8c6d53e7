import logging
from typing import Sequence, Union

from app.modules.onboarding.schema.config import OnboardingConfig
from app.modules.onboarding.schema.models import RFQ, Quote, Turn, document_shape
from app.modules.onboarding.services.llm import GenerationService, request_structured
from app.modules.onboarding.services.prompts import SYNTHESIS_USER_PROMPT, build_synthesis_prompt
from core.utils.perf import profile_stage

logger = logging.getLogger(__name__)


@profile_stage("synthesize")
async def synthesize(
    history: Sequence[Turn],
    category: str,
    service: GenerationService,
    config: OnboardingConfig,
) -> Union[Quote, RFQ]:
    """Generate the document straight from the full history (no question branch)."""
    document = await request_structured(
        service,
        build_synthesis_prompt(history, category, config),
        SYNTHESIS_USER_PROMPT,
        document_shape(config.document_kind),
        temperature=config.synthesis_temperature,
    )
    logger.info(f"[SYNTH] {config.document_kind} generated from {len(history)} answers")
    return document
