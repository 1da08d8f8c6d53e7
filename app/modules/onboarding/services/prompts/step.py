from textwrap import dedent
from typing import Sequence

from app.modules.onboarding.schema.config import OnboardingConfig
from app.modules.onboarding.schema.models import Turn
from app.modules.onboarding.services.prompts.common import document_label, document_rules, format_history

STEP_SYSTEM_TMPL = dedent("""
You are an expert {role} for "{company}".
Your goal is to gather COMPREHENSIVE information from the user to produce a professional {label}.

## Context
- Category: "{category}"
- Questions asked so far: {asked}
- Minimum questions required: {min_questions}
- Maximum questions allowed: {max_questions}

## Conversation History
{history}

## When to Generate the {label}
- Only generate it after asking AT LEAST {min_questions} questions.
- You MUST generate it once {max_questions} questions have been asked.
- Generate it when you have clear details on scope, specifications, timeline, location and budget.

## When to Ask a QUESTION
- If fewer than {min_questions} questions have been asked, you MUST ask another question.
- Ask one targeted question at a time about scope, materials, site constraints, timeline or budget.
- Choose the best input type: "text", "number" or "select". Give options only for "select".

{document_rules}

## JSON Rules
- Set "type" to "question" and "document" to null when asking a question.
- Set "type" to "document" and "question" to null when producing the {label}.
- When inputType is not "select", set "options" to null.
""").strip()

STEP_USER_PROMPT = (
    "Based on the conversation history, what is the next step? "
    "Either ask another relevant question or generate the final document."
)


def build_step_prompt(history: Sequence[Turn], category: str, config: OnboardingConfig) -> str:
    return STEP_SYSTEM_TMPL.format(
        role="Procurement Specialist" if config.document_kind == "rfq" else "service estimator",
        company=config.company_name,
        label=document_label(config.document_kind),
        category=category,
        asked=len(history),
        min_questions=config.min_questions,
        max_questions=config.max_questions,
        history=format_history(history) or "No questions asked yet.",
        document_rules=document_rules(config),
    )
