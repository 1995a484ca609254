"""APIRouter registration for the assessment engine service."""

from __future__ import annotations

from fastapi import APIRouter

from app.routes.authoring import router as authoring_router
from app.routes.scoring import router as scoring_router
from app.routes.visibility import router as visibility_router

api_router = APIRouter()
api_router.include_router(authoring_router, tags=["Authoring"])
api_router.include_router(visibility_router, tags=["Visibility"])
api_router.include_router(scoring_router, tags=["Scoring"])

__all__ = ["api_router"]
