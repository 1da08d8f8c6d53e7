import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse

from app.modules.onboarding.schema.api import (
    DocumentResponse,
    ErrorResponse,
    GenerateRequest,
    ModelCatalogResponse,
    RefineRequest,
    StepRequest,
    StepResponse,
)
from app.modules.onboarding.services.exceptions import NoCredentialError, OnboardingError, ServiceError
from app.modules.onboarding.services.llm import AVAILABLE_MODELS
from app.modules.onboarding.services.onboarding import OnboardingService
from app.modules.onboarding.services.session import phase_after

logger = logging.getLogger(__name__)

v1 = APIRouter(prefix="/api/v1/onboarding", tags=["Onboarding"])
router = v1

_STATUS = {
    NoCredentialError: 401,
    ServiceError: 502,
}


def get_onboarding_service(request: Request) -> OnboardingService:
    return request.app.state.onboarding


def _error(e: OnboardingError) -> JSONResponse:
    status = _STATUS.get(type(e), 500)
    body = ErrorResponse(error=e.code, detail=e.message)
    return JSONResponse(status_code=status, content=body.model_dump())


@v1.post("/step", response_model=StepResponse, responses={401: {"model": ErrorResponse}, 502: {"model": ErrorResponse}})
async def next_step(
    req: StepRequest,
    x_openai_key: Optional[str] = Header(default=None),
    onboarding: OnboardingService = Depends(get_onboarding_service),
):
    """Ask the next question or return the document for the given history."""
    try:
        step = await onboarding.next_step(
            req.history,
            req.category,
            credential=req.api_key or x_openai_key,
            model_hint=req.model,
            question_budget=req.max_questions,
        )
    except (NoCredentialError, ServiceError) as e:
        logger.warning(f"Step failed for category={req.category}: {e}")
        return _error(e)
    return StepResponse(phase=phase_after(step).value, step=step)


@v1.post("/generate", response_model=DocumentResponse, responses={401: {"model": ErrorResponse}, 502: {"model": ErrorResponse}})
async def generate_document(
    req: GenerateRequest,
    x_openai_key: Optional[str] = Header(default=None),
    onboarding: OnboardingService = Depends(get_onboarding_service),
):
    """Synthesize, audit and (if needed) refine the final document."""
    try:
        document = await onboarding.generate_audited(
            req.history,
            req.category,
            credential=req.api_key or x_openai_key,
            model_hint=req.model,
        )
    except (NoCredentialError, ServiceError) as e:
        logger.warning(f"Audited generation failed for category={req.category}: {e}")
        return _error(e)
    return DocumentResponse(document=document)


@v1.post("/refine", response_model=DocumentResponse, responses={401: {"model": ErrorResponse}, 502: {"model": ErrorResponse}})
async def refine_document(
    req: RefineRequest,
    x_openai_key: Optional[str] = Header(default=None),
    onboarding: OnboardingService = Depends(get_onboarding_service),
):
    """Apply user feedback to an existing document."""
    try:
        document = await onboarding.refine(
            req.document,
            req.feedback,
            credential=req.api_key or x_openai_key,
            model_hint=req.model,
        )
    except (NoCredentialError, ServiceError) as e:
        logger.warning(f"Refinement failed: {e}")
        return _error(e)
    return DocumentResponse(document=document)


@v1.get("/models", response_model=ModelCatalogResponse)
async def list_models(onboarding: OnboardingService = Depends(get_onboarding_service)):
    return ModelCatalogResponse(default=onboarding.config.default_model, models=AVAILABLE_MODELS)
