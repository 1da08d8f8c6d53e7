from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple, Union

from app.modules.onboarding.schema.models import RFQ, DocumentStep, Question, QuestionStep, Quote, Turn
from app.modules.onboarding.services.exceptions import InvalidTransition


class Phase(str, Enum):
    CATEGORY_SELECTION = "category_selection"
    AWAITING_STEP = "awaiting_step"
    AWAITING_ANSWER = "awaiting_answer"
    DOCUMENT_READY = "document_ready"


@dataclass(frozen=True)
class OnboardingSession:
    """Client-held onboarding session. Every transition returns a new value.

    category_selection -> awaiting_step -> awaiting_answer -> awaiting_step
    -> ... -> document_ready (terminal)
    """

    category: Optional[str] = None
    history: Tuple[Turn, ...] = ()
    phase: Phase = Phase.CATEGORY_SELECTION
    pending_question: Optional[Question] = None
    document: Optional[Union[Quote, RFQ]] = None

    def _expect(self, phase: Phase, action: str) -> None:
        if self.phase != phase:
            raise InvalidTransition(
                f"Cannot {action} while {self.phase.value}",
                context={"expected": phase.value},
            )

    def choose_category(self, category: str) -> OnboardingSession:
        self._expect(Phase.CATEGORY_SELECTION, "choose a category")
        if not (category or "").strip():
            raise InvalidTransition("Category must not be empty")
        return replace(self, category=category.strip(), phase=Phase.AWAITING_STEP)

    def receive_step(self, step: Union[QuestionStep, DocumentStep]) -> OnboardingSession:
        self._expect(Phase.AWAITING_STEP, "receive a step")
        if isinstance(step, QuestionStep):
            return replace(self, phase=Phase.AWAITING_ANSWER, pending_question=step.question)
        return replace(self, phase=Phase.DOCUMENT_READY, pending_question=None, document=step.document)

    def submit_answer(self, answer: str) -> OnboardingSession:
        self._expect(Phase.AWAITING_ANSWER, "submit an answer")
        if not (answer or "").strip():
            raise InvalidTransition("Answer must not be empty")
        turn = Turn(question=self.pending_question.text, answer=answer.strip())
        return replace(
            self,
            history=self.history + (turn,),
            phase=Phase.AWAITING_STEP,
            pending_question=None,
        )

    @property
    def is_complete(self) -> bool:
        return self.phase == Phase.DOCUMENT_READY


def phase_after(step: Union[QuestionStep, DocumentStep]) -> Phase:
    """Phase a client moves to once it has received ``step``."""
    return Phase.AWAITING_ANSWER if isinstance(step, QuestionStep) else Phase.DOCUMENT_READY
