import json
from textwrap import dedent
from typing import Sequence

from pydantic import BaseModel

from app.modules.onboarding.schema.config import OnboardingConfig
from app.modules.onboarding.schema.models import RFQ, AuditVerdict, Turn
from app.modules.onboarding.services.prompts.common import document_label, document_rules, format_history

# -------------------- Synthesis --------------------

SYNTHESIS_SYSTEM_TMPL = dedent("""
You are an expert document writer for "{company}".
Generate a professional {label} based on the conversation below.

## Category: "{category}"

## Conversation History
{history}

## Critical Rules
1. The document MUST accurately reflect ALL information from the conversation.
2. Do NOT add scope items or requirements that were not discussed.
3. Budget and totals MUST align with what the user indicated.
4. All monetary values in {currency}.
5. Be specific: use exact details from the conversation.

{document_rules}

Respond with ONLY the document JSON (no "type" wrapper).
""").strip()

SYNTHESIS_USER_PROMPT = "Generate the document now."


def build_synthesis_prompt(history: Sequence[Turn], category: str, config: OnboardingConfig) -> str:
    return SYNTHESIS_SYSTEM_TMPL.format(
        company=config.company_name,
        label=document_label(config.document_kind),
        category=category,
        history=format_history(history) or "No questions asked yet.",
        currency=config.currency,
        document_rules=document_rules(config),
    )


# -------------------- Audit --------------------

AUDIT_SYSTEM_TMPL = dedent("""
You are a Quality Assurance Auditor for {label} documents.
Compare the generated document against the original Q&A conversation and identify any:

1. Omissions: details the user provided that are NOT reflected in the document
2. Contradictions: document content that conflicts with what the user said
3. Fabrications: information in the document that the user never mentioned
4. Incomplete Scope: aspects discussed in the conversation that the document does not cover

## Q&A Conversation History
{history}

## Generated Document
{document}

## Pass Criteria (ALL must hold)
- Every user requirement is reflected in the document
- No contradictions between user answers and document content
- Nothing was added that cannot be traced to the conversation
- Budget and timeline match what the user indicated
- The scope covers every task the user mentioned

Any single issue in any of the four classes means the document FAILS.
When it passes, return an empty "issues" list and a null "refinement_instructions".
When it fails, list each issue and give concrete "refinement_instructions".
""").strip()

AUDIT_USER_PROMPT = "Perform the audit and return your assessment."


def build_audit_prompt(history: Sequence[Turn], document: BaseModel, config: OnboardingConfig) -> str:
    return AUDIT_SYSTEM_TMPL.format(
        label=document_label("rfq" if isinstance(document, RFQ) else "quote"),
        history=format_history(history) or "No questions asked yet.",
        document=json.dumps(document.model_dump(), indent=2, ensure_ascii=False),
    )


# -------------------- Refinement --------------------

REFINE_SYSTEM_TMPL = dedent("""
You are an expert document writer for "{company}".
Your goal is to MODIFY an existing {label} based on feedback.

## Current Document
{document}

## Feedback (Instructions for Change)
"{feedback}"

## Critical Instructions
1. Apply Changes: update exactly the fields the feedback implies, and related fields that must stay consistent.
2. Preserve Everything Else: copy every other field verbatim.
3. Maintain Professionalism: keep a formal business tone.
4. Currency: all monetary values stay in {currency}.
5. Return the COMPLETE updated document, not a patch.
""").strip()

REFINE_USER_PROMPT = "Implement the requested changes and return the updated document JSON."


def build_refine_prompt(document: BaseModel, feedback: str, config: OnboardingConfig) -> str:
    return REFINE_SYSTEM_TMPL.format(
        company=config.company_name,
        label=document_label("rfq" if isinstance(document, RFQ) else "quote"),
        document=json.dumps(document.model_dump(), indent=2, ensure_ascii=False),
        feedback=feedback.strip(),
        currency=config.currency,
    )


def build_audit_feedback(verdict: AuditVerdict, history: Sequence[Turn]) -> str:
    """Turn a failing verdict into refinement feedback."""
    issues = "\n".join(f"{i}. {issue}" for i, issue in enumerate(verdict.issues, 1)) or "(none listed)"
    instructions = verdict.refinement_instructions or "Fix all the issues listed above."
    return (
        f"AUDIT ISSUES FOUND:\n{issues}\n\n"
        f"REFINEMENT INSTRUCTIONS:\n{instructions}\n\n"
        f"ORIGINAL Q&A HISTORY FOR REFERENCE:\n{format_history(history)}"
    )
