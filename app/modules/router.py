# app/modules/router.py
from fastapi import APIRouter
from app.modules.onboarding.api.router import v1 as onboarding_router

router = APIRouter()
router.include_router(onboarding_router)
