"""FastAPI application package for the Assessment Engine.

This package exposes a small FastAPI application factory around a pure rules
engine for psychometric assessments: schema validation (including dependency
cycle detection), conditional question visibility, and scoring with risk
flags. The engine lives in `app/logic/`, route handlers in `app/routes/`.
"""

from __future__ import annotations

from app.main import create_app

__all__ = ["create_app"]
