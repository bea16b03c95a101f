"""
FusionCaller Lead Intake - FastAPI Application Entry Point.

Turns ad-platform form submissions into leads and outbound AI calls:
- Service detection from free text
- Lead creation in Supabase
- Outbound call through Vapi
- Tenant workflow rules

Run with:
    uvicorn fusioncaller.main:app --reload --port 8000
"""

import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fusioncaller.core.config import get_settings
from fusioncaller.core.database import db_service
from fusioncaller.api import webhook_router, leads_router, workflows_router
from fusioncaller.api.errors import register_error_handlers

SERVICE_NAME = "FusionCaller Lead Intake"
SERVICE_VERSION = "1.0.0"


# ===========================================
# Logging Configuration
# ===========================================

def setup_logging():
    """Configure application logging."""
    settings = get_settings()

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)
    root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("LiteLLM").setLevel(logging.WARNING)

    return logging.getLogger(__name__)


logger = setup_logging()


# ===========================================
# Application Lifespan
# ===========================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    logger.info("=" * 50)
    logger.info(f"{SERVICE_NAME} Starting Up")
    logger.info("=" * 50)
    logger.info(f"Environment: {'Development' if settings.DEBUG else 'Production'}")

    # Verify critical settings
    if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
        logger.warning("Supabase credentials not configured!")

    if not settings.OPENAI_API_KEY:
        logger.warning("OpenAI API key not configured - service detection will use keyword fallback")

    if not settings.VAPI_API_KEY:
        logger.warning("Vapi API key not configured - leads will be created without calls")

    if not settings.FORM_WEBHOOK_SECRET:
        logger.warning("FORM_WEBHOOK_SECRET not set - form webhook accepts unauthenticated submissions")

    logger.info("Startup complete - ready to accept webhooks")

    yield

    logger.info(f"{SERVICE_NAME} shutting down...")


# ===========================================
# FastAPI Application
# ===========================================

def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=SERVICE_NAME,
        description="""
        Lead intake and outbound-call orchestration for service businesses.

        ## Webhooks

        - `POST /api/webhooks/form-submission` - Ad platform / site form submissions
        - `GET /api/webhooks/form-submission` - Webhook liveness

        ## Leads & Workflows

        - `PATCH /api/leads/{lead_id}` - Update a lead (fires status workflows)
        - `POST /api/workflows/execute` - Trigger workflows manually
        """,
        version=SERVICE_VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(webhook_router)
    app.include_router(leads_router)
    app.include_router(workflows_router)

    return app


# Create app instance
app = create_app()


# ===========================================
# Root & Health Endpoints
# ===========================================

@app.get("/", tags=["root"])
async def root():
    """Root endpoint with API information."""
    return JSONResponse({
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "status": "running",
        "endpoints": {
            "webhooks": {
                "form_submission": "POST /api/webhooks/form-submission",
            },
            "leads": {
                "update": "PATCH /api/leads/{lead_id}",
            },
            "workflows": {
                "execute": "POST /api/workflows/execute",
            },
            "health": "GET /health",
        }
    })


@app.get("/health", tags=["root"])
async def health():
    """Liveness plus database connectivity."""
    database_ok = await db_service.health_check()
    return JSONResponse(
        status_code=200 if database_ok else 503,
        content={
            "status": "healthy" if database_ok else "degraded",
            "database": "ok" if database_ok else "unreachable",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    )


# ===========================================
# Main Entry Point
# ===========================================

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "fusioncaller.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info"
    )
