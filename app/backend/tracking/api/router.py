"""Top-level API router."""

from fastapi import APIRouter

from tracking.api.routes.accounts import router as accounts_router
from tracking.api.routes.health import router as health_router
from tracking.api.routes.persons import router as persons_router
from tracking.api.routes.projects import router as projects_router
from tracking.api.routes.weekly_summaries import router as weekly_summaries_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(accounts_router)
api_router.include_router(projects_router)
api_router.include_router(persons_router)
api_router.include_router(weekly_summaries_router)
