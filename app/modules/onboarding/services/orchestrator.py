"""
Audited document generation: synthesize, audit, then refine at most once.

Only a synthesis failure fails the call. A failed audit request returns the
unaudited document; a failed refinement returns the unrefined one.
"""

import logging
from typing import Sequence, Union

from app.modules.onboarding.schema.config import OnboardingConfig
from app.modules.onboarding.schema.models import RFQ, Quote, Turn
from app.modules.onboarding.services.auditor import audit
from app.modules.onboarding.services.exceptions import ServiceError
from app.modules.onboarding.services.llm import GenerationService
from app.modules.onboarding.services.prompts import build_audit_feedback
from app.modules.onboarding.services.refiner import refine
from app.modules.onboarding.services.synthesizer import synthesize
from core.utils.perf import profile_stage

logger = logging.getLogger(__name__)


@profile_stage("generate_audited")
async def generate_audited(
    history: Sequence[Turn],
    category: str,
    service: GenerationService,
    config: OnboardingConfig,
) -> Union[Quote, RFQ]:
    draft = await synthesize(history, category, service, config)

    try:
        verdict = await audit(history, draft, service, config)
    except ServiceError as e:
        logger.warning(f"[AUDITED] Audit request failed, returning unaudited document: {e}")
        return draft

    if verdict.passed:
        return draft

    logger.info(f"[AUDITED] Auto-refining after issues: {verdict.issues}")
    try:
        return await refine(draft, build_audit_feedback(verdict, history), service, config)
    except ServiceError as e:
        logger.warning(f"[AUDITED] Refinement failed, returning initial document: {e}")
        return draft
