from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError

from app.config import load_config
from app.http.problem import (
    handle_http_exception,
    handle_request_validation_error,
    handle_schema_validation_error,
    handle_unexpected_error,
)
from app.http.request_id import RequestIdMiddleware
from app.logging_setup import configure_logging
from app.logic.validation import SchemaValidationError
from app.middleware.cors import apply_cors
from app.routes import api_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    config = load_config()
    # Configure global logging before app instantiation so all modules emit
    configure_logging(config.logging.level)
    app = FastAPI(title="Assessment Engine", version="1.0.0")

    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(SchemaValidationError, handle_schema_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    apply_cors(app, origins=config.api.cors_allow_origins)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router, prefix=config.api.prefix)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    logger.info("app_created prefix=%s log_level=%s", config.api.prefix, config.logging.level)
    return app


# Intentionally do not instantiate the app at import time to prevent side effects.
