"""
Domain models for the onboarding conversation and the documents it produces.

Monetary and quantity fields are presentation strings ("AED 5,000 - AED 15,000",
"8 hours"); nothing in this package does arithmetic on values returned by the
generation service.
"""

from __future__ import annotations

from typing import Annotated, Generic, List, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


InputType = Literal["text", "number", "select"]
DocumentKind = Literal["rfq", "quote"]


class Turn(BaseModel):
    """One completed question/answer round."""

    model_config = ConfigDict(frozen=True)

    question: str
    answer: str


History = List[Turn]


class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    inputType: InputType
    options: Optional[List[str]] = None

    @model_validator(mode="after")
    def _options_match_input_type(self) -> "Question":
        if self.inputType == "select":
            if not self.options:
                raise ValueError("select questions require at least one option")
        elif self.options is not None:
            raise ValueError(f"options must be null for inputType '{self.inputType}'")
        return self


# -------------------- Quote --------------------

class QuoteItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Name of the service or item")
    qty: str = Field(description="Quantity (e.g., '500 sq ft', '3 Rooms')")
    price: str = Field(description="Unit price (e.g., 'AED 50')")
    total: str = Field(description="Total price for this item (e.g., 'AED 2,500')")


class Quote(BaseModel):
    model_config = ConfigDict(frozen=True)

    project_name: str = Field(description="Name of the project the user described")
    client_name: str
    date: str
    items: List[QuoteItem]
    total_cost: str


# -------------------- RFQ --------------------

class ScopeItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = Field(description="Title of the scope item")
    description: str = Field(description="Detailed description of the work required")
    deliverable: str = Field(description="Expected outcome or deliverable")


class RFQ(BaseModel):
    """Request for Quotation sent to vendors."""

    model_config = ConfigDict(frozen=True)

    project_title: str
    rfq_number: str = Field(description="Unique RFQ identifier (e.g., RFQ-2025-001)")
    date_issued: str
    executive_summary: str
    scope_of_work: List[ScopeItem]
    technical_requirements: List[str]
    project_timeline: str
    budget_range: str = Field(description="Estimated budget range (e.g., 'AED 10,000 - AED 15,000')")
    submission_deadline: str
    contact_info: str


Document = Union[Quote, RFQ]

DOCUMENT_SHAPES = {
    "quote": Quote,
    "rfq": RFQ,
}


def document_shape(kind: DocumentKind) -> type[BaseModel]:
    return DOCUMENT_SHAPES[kind]


# -------------------- Next step --------------------

class QuestionStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["question"] = "question"
    question: Question


class DocumentStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["document"] = "document"
    document: Document


NextStep = Annotated[Union[QuestionStep, DocumentStep], Field(discriminator="type")]


DocT = TypeVar("DocT", bound=BaseModel)


class NextStepEnvelope(BaseModel, Generic[DocT]):
    """Wire shape requested from the generation service for a step decision.

    The service answers with a flat record carrying both alternatives; exactly
    one of them must be populated and it must agree with ``type``.
    """

    type: Literal["question", "document"]
    question: Optional[Question] = None
    document: Optional[DocT] = None

    @model_validator(mode="after")
    def _exactly_one_alternative(self) -> "NextStepEnvelope":
        if self.type == "question":
            if self.question is None or self.document is not None:
                raise ValueError("type 'question' requires question and a null document")
        elif self.document is None or self.question is not None:
            raise ValueError("type 'document' requires document and a null question")
        return self

    def to_step(self) -> Union[QuestionStep, DocumentStep]:
        if self.type == "question":
            return QuestionStep(question=self.question)
        return DocumentStep(document=self.document)


# -------------------- Audit --------------------

class AuditVerdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    passed: bool = Field(description="Whether the document passes audit")
    issues: List[str] = Field(description="Issues found (empty if passed)")
    refinement_instructions: Optional[str] = Field(
        default=None, description="Instructions for refinement if not passed"
    )

    @model_validator(mode="after")
    def _passed_is_clean(self) -> "AuditVerdict":
        if self.passed and (self.issues or self.refinement_instructions):
            raise ValueError("a passing verdict carries no issues or refinement instructions")
        if not self.issues and self.refinement_instructions:
            raise ValueError("refinement instructions require at least one issue")
        return self
