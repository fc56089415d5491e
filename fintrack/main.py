"""
Fintrack - FastAPI Application Entry Point

Personal finance tracker API: categories, transactions, budgets, reports,
and an AI assistance layer (category suggestions, duplicate detection,
natural-language filters, budget coaching, report summaries).

DESIGN PRINCIPLES:
- AI answers are advisory; nothing is written to the ledger by the AI layer
- Text is sanitized (PII redacted, truncated) before it reaches a provider
- A missing or broken remote provider degrades to the offline mock provider
- Provider errors are logged, never echoed to clients
"""

from typing import Optional
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fintrack.config.firebase import initialize_firestore
from fintrack.core.exceptions import RecordNotFoundError
from fintrack.core.logging import configure_logging
from fintrack.core.settings import Settings, settings as default_settings
from fintrack.routes import ai, budgets, categories, health, reports, transactions
from fintrack.services.ai_plugin.base import AIProvider
from fintrack.services.ai_plugin.registry import default_registry, select_provider
from fintrack.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    db=None,
    ai_provider: Optional[AIProvider] = None,
    rate_limiter: Optional[RateLimiter] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration (defaults to the environment-loaded settings)
        db: Firestore client; when None it is initialized on startup
        ai_provider: Provider override; when None it is selected from AI_PROVIDER
        rate_limiter: Limiter override (tests inject one with a fake clock)

    Returns:
        Configured FastAPI app
    """
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Personal finance tracker with AI assistance",
        debug=settings.DEBUG,
    )

    app.state.settings = settings
    app.state.db = db
    app.state.ai_provider = ai_provider or select_provider(settings.AI_PROVIDER, default_registry(settings))
    app.state.rate_limiter = rate_limiter or RateLimiter(max_buckets=settings.RATE_LIMIT_MAX_BUCKETS)

    @app.exception_handler(RecordNotFoundError)
    async def not_found_handler(request: Request, exc: RecordNotFoundError):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": str(exc)},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.info(f"🔥 Validation error {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"🔥 Unhandled exception {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def startup_event():
        logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION} (AI provider: {app.state.ai_provider.name})")
        if app.state.db is not None:
            return
        try:
            app.state.db = initialize_firestore(settings)
        except RuntimeError as e:
            logger.warning(f"⚠️ Firestore initialization failed: {e}")
            logger.warning("The app will start but ledger endpoints will fail until Firestore is configured.")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info(f"Shutting down {settings.APP_NAME}")

    app.include_router(health.router)
    app.include_router(categories.router)
    app.include_router(transactions.router)
    app.include_router(budgets.router)
    app.include_router(reports.router)
    app.include_router(ai.router)

    @app.get("/")
    async def root():
        """
        Root endpoint - API information.
        """
        return {
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running",
            "docs": "/docs",
            "health": "/health",
            "ai_provider": app.state.ai_provider.name,
        }

    return app


app = create_app()
