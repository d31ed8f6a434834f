"""Dashboard API FastAPI application."""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from dashboard_api import __version__
from dashboard_api.config import settings, validate_secret_key
from dashboard_api.core.token_auth import AUTH_RESPONSE_HEADER
from dashboard_api.database import close_database
from dashboard_api.logging_config import get_logger, setup_logging
from dashboard_api.middleware import CORRELATION_ID_HEADER, CorrelationIdMiddleware
from dashboard_api.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from dashboard_api.routers import auth, health, scopes

setup_logging(
    log_format=settings.log_format,
    log_level=settings.log_level,
    service_name=settings.service_name,
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Migrations are applied by `dashboard-migrate` before the server starts
    validate_secret_key()
    logger.info("Dashboard API started", version=__version__)

    yield

    logger.info("Shutting down Dashboard API...")
    await close_database()
    logger.info("Dashboard API shutdown complete")


app = FastAPI(
    title="Dashboard API",
    description="Scope lookups and bearer token authentication",
    version=__version__,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# First added = last executed
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[AUTH_RESPONSE_HEADER, CORRELATION_ID_HEADER],
)
app.add_middleware(CorrelationIdMiddleware)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(scopes.router)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint."""
    return {
        "name": "Dashboard API",
        "version": __version__,
        "docs": "/docs",
    }
