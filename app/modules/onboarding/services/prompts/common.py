from textwrap import dedent
from typing import Sequence

from app.modules.onboarding.schema.config import OnboardingConfig
from app.modules.onboarding.schema.models import Turn


def format_history(history: Sequence[Turn]) -> str:
    """Render the transcript as numbered Q/A pairs, oldest first."""
    return "\n\n".join(
        f"Q{i}: {turn.question}\nA{i}: {turn.answer}"
        for i, turn in enumerate(history, 1)
    )


def document_label(kind: str) -> str:
    return "REQUEST FOR QUOTATION (RFQ)" if kind == "rfq" else "PROJECT QUOTE"


_RFQ_RULES = dedent("""
## RFQ Generation Rules
1. Professional Tone: the output is a formal business document sent to vendors.
2. Detailed Scope: break the work into clear, actionable phases or tasks in "scope_of_work".
3. Specific Requirements: list concrete constraints in "technical_requirements".
4. Accurate Reflection: the RFQ must strictly reflect the user's answers.
5. Budget in {currency}: "budget_range" must be expressed in {currency}.
6. Contact: use "{contact}" for "contact_info" unless the user gave another contact.
""").strip()

_QUOTE_RULES = dedent("""
## Quote Generation Rules
1. Base every line item on the user's specific answers; include 3-5 relevant items.
2. "project_name" reflects what the user actually described, not just the category.
3. If the user stated a budget, keep "total_cost" within it.
4. All prices in {currency}, written as display strings (e.g. "{currency} 2,500").
5. Quantities carry their units (e.g. "500 sq ft", "8 hours").
""").strip()


def document_rules(config: OnboardingConfig) -> str:
    tmpl = _RFQ_RULES if config.document_kind == "rfq" else _QUOTE_RULES
    return tmpl.format(currency=config.currency, contact=config.contact_info)
