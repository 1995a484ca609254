"""CORS configuration helpers.

Applies CORS for the authoring and respondent front-ends and exposes the
request id header to browsers.
"""

from __future__ import annotations

from typing import Iterable
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


EXPOSE_HEADERS: list[str] = ["X-Request-Id"]


def apply_cors(app: FastAPI, *, origins: Iterable[str] | None = None) -> None:
    allow = list(origins or ["*"])
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow,
        # Credentials cannot be combined with a wildcard origin
        allow_credentials="*" not in allow,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=EXPOSE_HEADERS,
    )


__all__ = ["apply_cors", "EXPOSE_HEADERS"]
