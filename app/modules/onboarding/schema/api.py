from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from app.modules.onboarding.schema.models import RFQ, NextStep, Quote, Turn


class StepRequest(BaseModel):
    history: List[Turn] = Field(default_factory=list)
    category: str = Field(..., min_length=1)
    api_key: Optional[str] = None
    model: Optional[str] = None
    max_questions: Optional[int] = Field(default=None, ge=1, le=50)


class StepResponse(BaseModel):
    success: bool = True
    phase: str
    step: NextStep


class GenerateRequest(BaseModel):
    history: List[Turn] = Field(default_factory=list)
    category: str = Field(..., min_length=1)
    api_key: Optional[str] = None
    model: Optional[str] = None


class RefineRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    document: Union[RFQ, Quote]
    feedback: str = Field(..., min_length=1)
    api_key: Optional[str] = None
    model: Optional[str] = None


class DocumentResponse(BaseModel):
    success: bool = True
    document: Union[RFQ, Quote]


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    detail: Optional[str] = None


class ModelCatalogResponse(BaseModel):
    default: str
    models: List[Dict[str, Any]]
