"""Functional test bootstrap for the assessment engine.

Provides authored schema fixtures shared across modules and an in-process
FastAPI TestClient for the HTTP adapter. No database or network is involved:
the engine is pure, and the app factory only reads optional config files.
"""

from __future__ import annotations

import os
from typing import Any, Dict

import pytest

from schema_builders import radio

# Keep test output quiet; the factory reads LOG_LEVEL before configuring logging
os.environ.setdefault("LOG_LEVEL", "WARNING")


@pytest.fixture()
def screening_schema() -> Dict[str, Any]:
    """Four questions: two unconditional, one simple and one compound showIf."""
    return {
        "questions": [
            {
                "id": "mood",
                "text": "How often have you felt down?",
                "type": "likert",
                "order": 1,
                "options": [
                    {"value": 0, "label": "Never"},
                    {"value": 1, "label": "Sometimes"},
                    {"value": 2, "label": "Often"},
                    {"value": 3, "label": "Always"},
                ],
            },
            radio("sleep", order=2),
            {
                "id": "sleep_detail",
                "text": "Describe your sleep",
                "type": "text",
                "order": 3,
                "maxLength": 500,
                "showIf": {"questionId": "sleep", "equals": 1},
            },
            radio(
                "harm",
                order=4,
                isCritical=True,
                helpText="If you are in danger, call your local emergency number.",
                show_if={"or": [{"questionId": "mood", "gte": 2}, {"question": "sleep", "equals": 1}]},
            ),
        ]
    }


@pytest.fixture()
def client():
    from fastapi.testclient import TestClient
    from app.main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client
