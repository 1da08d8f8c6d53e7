"""
Deterministic, service-free substitutes for the step decision.

Used when the generation service is absent (legacy policy) and whenever the
question budget forces a document. Output depends only on the history, the
category, the config and the issue date.
"""

import zlib
from datetime import date, timedelta
from typing import Optional, Sequence, Union

from app.modules.onboarding.schema.config import OnboardingConfig
from app.modules.onboarding.schema.models import (
    RFQ,
    DocumentStep,
    Question,
    QuestionStep,
    Quote,
    QuoteItem,
    ScopeItem,
    Turn,
)

CATEGORY_SCALE = {
    "residential": 1.0,
    "commercial": 2.5,
    "industrial": 4.0,
}

# (name, qty, unit price, units) at residential scale
_QUOTE_LINES = [
    ("Consultation & Planning", "1", 500, 1),
    ("Materials & Equipment", "1", 1500, 1),
    ("Labor (estimated)", "8 hours", 75, 8),
    ("Project Management", "1", 400, 1),
]

_RFQ_SCOPE = [
    ScopeItem(
        title="Phase 1: Planning & Design",
        description="Initial consultation, site assessment, and detailed planning.",
        deliverable="Project plan and design approval.",
    ),
    ScopeItem(
        title="Phase 2: Execution",
        description="Implementation of the main project tasks as per specifications.",
        deliverable="Completed project work.",
    ),
    ScopeItem(
        title="Phase 3: Review & Handover",
        description="Final quality checks and project handover.",
        deliverable="Signed off completion certificate.",
    ),
]

_RFQ_BUDGET = (5000, 15000)


def category_scale(category: str) -> float:
    return CATEGORY_SCALE.get((category or "").strip().lower(), 1.0)


def _money(currency: str, amount: float) -> str:
    return f"{currency} {round(amount):,}"


def _project_name(category: str) -> str:
    return f"{(category or 'General').strip().capitalize()} Project"


def _long_date(d: date) -> str:
    return f"{d.strftime('%B')} {d.day}, {d.year}"


def fallback_questions(category: str, config: OnboardingConfig) -> list[Question]:
    c = config.currency
    return [
        Question(
            text=f"What specific type of {category} project are you looking for?",
            inputType="text",
        ),
        Question(
            text="What is your approximate budget range?",
            inputType="select",
            options=[
                f"Under {c} 5,000",
                f"{c} 5,000 - {c} 20,000",
                f"{c} 20,000 - {c} 50,000",
                f"Over {c} 50,000",
            ],
        ),
        Question(
            text="What is your preferred timeline?",
            inputType="select",
            options=["Urgent (within 1 week)", "Soon (1-2 weeks)", "Flexible (1 month+)"],
        ),
    ]


def fallback_quote(category: str, config: OnboardingConfig, today: date) -> Quote:
    scale = category_scale(category)
    items = []
    total = 0.0
    for name, qty, unit_price, units in _QUOTE_LINES:
        price = unit_price * scale
        line_total = price * units
        total += line_total
        items.append(
            QuoteItem(
                name=name,
                qty=qty,
                price=_money(config.currency, price) + ("/hr" if qty.endswith("hours") else ""),
                total=_money(config.currency, line_total),
            )
        )
    return Quote(
        project_name=_project_name(category),
        client_name="John Doe",
        date=today.strftime("%b %d, %Y"),
        items=items,
        total_cost=_money(config.currency, total),
    )


def rfq_number(history: Sequence[Turn], category: str, year: int) -> str:
    seed = category + "".join(f"{t.question}\x1f{t.answer}\x1e" for t in history)
    return f"RFQ-{year}-{1000 + zlib.crc32(seed.encode('utf-8')) % 9000}"


def fallback_rfq(history: Sequence[Turn], category: str, config: OnboardingConfig, today: date) -> RFQ:
    scale = category_scale(category)
    low, high = (_money(config.currency, b * scale) for b in _RFQ_BUDGET)
    deadline = today + timedelta(days=config.submission_window_days)
    return RFQ(
        project_title=f"RFQ for {_project_name(category)}",
        rfq_number=rfq_number(history, category, today.year),
        date_issued=_long_date(today),
        executive_summary=(
            f"This Request for Quotation (RFQ) outlines the requirements for a {category} project. "
            "The goal is to select a qualified vendor who can deliver high-quality results "
            "within the specified timeline and budget."
        ),
        scope_of_work=list(_RFQ_SCOPE),
        technical_requirements=[
            "All work must comply with local regulations.",
            "Vendor must provide all necessary tools and equipment.",
            "Quality of materials must meet industry standards.",
        ],
        project_timeline="Estimated 2-4 weeks",
        budget_range=f"{low} - {high}",
        submission_deadline=deadline.strftime("%m/%d/%Y"),
        contact_info=config.contact_info,
    )


def fallback_document(
    history: Sequence[Turn],
    category: str,
    config: OnboardingConfig,
    today: Optional[date] = None,
) -> Union[Quote, RFQ]:
    today = today or date.today()
    if config.document_kind == "quote":
        return fallback_quote(category, config, today)
    return fallback_rfq(history, category, config, today)


def fallback_step(
    history: Sequence[Turn],
    category: str,
    config: OnboardingConfig,
    today: Optional[date] = None,
) -> Union[QuestionStep, DocumentStep]:
    """Canned question for the first rounds, then a placeholder document.

    Never fails, and always terminates once the history reaches either the
    fallback question count or the question budget.
    """
    position = len(history)
    questions = fallback_questions(category, config)[: config.fallback_questions]
    if position < len(questions) and position < config.max_questions:
        return QuestionStep(question=questions[position])
    return DocumentStep(document=fallback_document(history, category, config, today))
