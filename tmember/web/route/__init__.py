"""Route aggregation for the tmember web application."""

from fastapi import APIRouter

from . import auth, health, organization, user

router = APIRouter()
router.include_router(auth.router)
router.include_router(user.router)
router.include_router(organization.router)
router.include_router(health.router)
