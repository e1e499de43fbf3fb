"""
Application factory for FastAPI.

Builds the orders service: middleware stack, domain error rendering,
the versioned API router and an unauthenticated health probe.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from orderflow.api.exception_handlers import register_exception_handlers
from orderflow.api.middleware.logging_middleware import RequestLoggingMiddleware
from orderflow.api.router import api_router
from orderflow.config.settings import Settings, get_settings
from orderflow.core.lifecycle import lifespan

logger = logging.getLogger(__name__)

OPENAPI_TAGS = [
    {"name": "orders", "description": "Checkout, payment and fulfilment of orders"},
    {"name": "cart", "description": "The caller's cart"},
    {"name": "webhooks", "description": "Payment gateway callbacks (signed, no bearer token)"},
    {"name": "health", "description": "Liveness probe"},
]


class AppFactory:
    """
    Assembles the orders API from settings.

    Steps run in a fixed order so middleware wraps every route,
    including the ones registered last.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def create_app(self) -> FastAPI:
        app = FastAPI(
            title=self._settings.PROJECT_NAME,
            description=self._settings.PROJECT_DESCRIPTION,
            version=self._settings.VERSION,
            openapi_tags=OPENAPI_TAGS,
            docs_url=self._docs_path("docs"),
            redoc_url=self._docs_path("redoc"),
            lifespan=lifespan,
        )

        self._add_middleware(app)
        register_exception_handlers(app)
        app.include_router(api_router, prefix=self._settings.API_V1_STR)
        self._add_health_probe(app)

        logger.info(
            f"{self._settings.PROJECT_NAME} ready: env={self._settings.ENVIRONMENT}, "
            f"currency={self._settings.CURRENCY}, prefix={self._settings.API_V1_STR}"
        )
        return app

    def _docs_path(self, name: str) -> str | None:
        # Interactive docs only outside production
        if not self._settings.DEBUG:
            return None
        return f"{self._settings.API_V1_STR}/{name}"

    def _add_middleware(self, app: FastAPI) -> None:
        """
        Register middleware. The last one added runs first, so request logging
        sits inside CORS and sees the final status of every API call.
        """
        app.add_middleware(RequestLoggingMiddleware)
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"] if self._settings.DEBUG else self._settings.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
            allow_headers=["Authorization", "Content-Type", "Idempotency-Key", "X-Correlation-ID"],
            expose_headers=["X-Correlation-ID"],
        )

    def _add_health_probe(self, app: FastAPI) -> None:
        environment = self._settings.ENVIRONMENT

        @app.get("/health", tags=["health"])
        async def health_check() -> dict[str, str]:
            return {"status": "ok", "environment": environment}


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the FastAPI application, optionally with explicit settings."""
    return AppFactory(settings).create_app()
