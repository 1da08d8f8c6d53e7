"""
Shared pytest configuration and fixtures for onboarding tests.

The generation service is replaced by a scripted fake that returns queued
responses (or raises queued exceptions) and records every request.
"""

import json
from datetime import date
from types import SimpleNamespace

import pytest

from app.modules.onboarding.schema.config import OnboardingConfig
from app.modules.onboarding.schema.models import RFQ, Quote, QuoteItem, ScopeItem, Turn


class FakeGenerationService:
    """Stands in for the OpenAI-backed service in unit tests."""

    def __init__(self, *responses, model="gpt-4o-mini"):
        self.model = model
        self.responses = list(responses)
        self.calls = []

    def queue(self, *responses):
        self.responses.extend(responses)
        return self

    async def generate(self, system_prompt, user_prompt, response_shape, temperature=None):
        self.calls.append(
            SimpleNamespace(
                system_prompt=system_prompt,
                user_prompt=user_prompt,
                response_shape=response_shape,
                temperature=temperature,
            )
        )
        if not self.responses:
            raise AssertionError("FakeGenerationService received an unexpected request")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, str):
            return response
        if hasattr(response, "model_dump_json"):
            return response.model_dump_json()
        return json.dumps(response)


# =============================================================================
# Data Fixtures
# =============================================================================

@pytest.fixture
def config():
    return OnboardingConfig()


@pytest.fixture
def quote_config():
    return OnboardingConfig(document_kind="quote")


@pytest.fixture
def legacy_config():
    return OnboardingConfig(failure_policy="fallback")


@pytest.fixture
def today():
    return date(2025, 3, 14)


@pytest.fixture
def history():
    return [
        Turn(question="What specific type of residential project are you looking for?", answer="Repaint a 3-bedroom villa"),
        Turn(question="What is your approximate budget range?", answer="Up to AED 10,000"),
        Turn(question="What is your preferred timeline?", answer="Soon (1-2 weeks)"),
        Turn(question="Do you have a paint preference?", answer="Low-VOC, non-toxic paint"),
        Turn(question="Are there any site access restrictions?", answer="Work hours 9am-5pm only"),
    ]


@pytest.fixture
def make_history():
    def _make(length):
        return [Turn(question=f"Question {i}?", answer=f"Answer {i}") for i in range(1, length + 1)]
    return _make


@pytest.fixture
def rfq():
    return RFQ(
        project_title="Villa Interior Repainting",
        rfq_number="RFQ-2025-0042",
        date_issued="March 14, 2025",
        executive_summary="Interior repainting of a 3-bedroom villa using low-VOC paint.",
        scope_of_work=[
            ScopeItem(
                title="Surface preparation",
                description="Fill cracks, sand and prime all interior walls.",
                deliverable="Walls ready for painting",
            ),
            ScopeItem(
                title="Painting",
                description="Two coats of low-VOC paint in all rooms.",
                deliverable="Fully painted interior",
            ),
        ],
        technical_requirements=["Must use non-toxic paint", "Work hours 9am-5pm only"],
        project_timeline="1-2 weeks",
        budget_range="AED 12,000 - AED 15,000",
        submission_deadline="03/21/2025",
        contact_info="procurement@3quotes.ae",
    )


@pytest.fixture
def refined_rfq(rfq):
    return rfq.model_copy(update={"budget_range": "AED 8,000 - AED 10,000"})


@pytest.fixture
def quote():
    return Quote(
        project_name="Villa Repainting",
        client_name="John Doe",
        date="Mar 14, 2025",
        items=[
            QuoteItem(name="Low-VOC paint", qty="12 gallons", price="AED 150", total="AED 1,800"),
            QuoteItem(name="Labor", qty="40 hours", price="AED 120/hr", total="AED 4,800"),
        ],
        total_cost="AED 6,600",
    )


@pytest.fixture
def fake_service():
    return FakeGenerationService()
