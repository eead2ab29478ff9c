"""V1 API router aggregation."""

from fastapi import APIRouter

from tenancy.api.v1.invitations import router as invitations_router
from tenancy.api.v1.onboarding import router as onboarding_router

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(onboarding_router)
v1_router.include_router(invitations_router)
