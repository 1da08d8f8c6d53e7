import logging
from typing import Sequence

from pydantic import BaseModel

from app.modules.onboarding.schema.config import OnboardingConfig
from app.modules.onboarding.schema.models import AuditVerdict, Turn
from app.modules.onboarding.services.llm import GenerationService, request_structured
from app.modules.onboarding.services.prompts import AUDIT_USER_PROMPT, build_audit_prompt
from core.utils.perf import profile_stage

logger = logging.getLogger(__name__)


@profile_stage("audit")
async def audit(
    history: Sequence[Turn],
    document: BaseModel,
    service: GenerationService,
    config: OnboardingConfig,
) -> AuditVerdict:
    """Check a generated document against the conversation it came from.

    Flags omissions, contradictions, fabrications and scope gaps; the verdict
    passes only when none are found. Runs at the audit temperature, which is
    lower than any generation request.
    """
    verdict = await request_structured(
        service,
        build_audit_prompt(history, document, config),
        AUDIT_USER_PROMPT,
        AuditVerdict,
        temperature=config.audit_temperature,
    )
    if verdict.passed:
        logger.info("[AUDIT] passed")
    else:
        logger.info(f"[AUDIT] failed with {len(verdict.issues)} issue(s)")
    return verdict
