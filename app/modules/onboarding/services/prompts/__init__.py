# Prompt builders for the onboarding generation requests.

from .common import document_label, document_rules, format_history
from .documents import (
    AUDIT_USER_PROMPT,
    REFINE_USER_PROMPT,
    SYNTHESIS_USER_PROMPT,
    build_audit_feedback,
    build_audit_prompt,
    build_refine_prompt,
    build_synthesis_prompt,
)
from .step import STEP_USER_PROMPT, build_step_prompt

__all__ = [
    "format_history",
    "document_label",
    "document_rules",
    "build_step_prompt",
    "build_synthesis_prompt",
    "build_audit_prompt",
    "build_refine_prompt",
    "build_audit_feedback",
    "STEP_USER_PROMPT",
    "SYNTHESIS_USER_PROMPT",
    "AUDIT_USER_PROMPT",
    "REFINE_USER_PROMPT",
]
