# =============================================================================================
# APP/MAIN.PY - FASTAPI APPLICATION: AUTHENTICATION + CURRENCY CALCULATOR
# =============================================================================================
# This is the entry point for the web API. It provides:
# - Authentication (register, login, refresh, logout) with JWT access tokens and
#   store-backed refresh tokens
# - Currencies with pairwise exchange rates, and conversion between them
#
# ARCHITECTURE:
# - SQLite (SQLAlchemy): users, refresh tokens, currencies, exchange rates
# - FastAPI: REST API server
# - structlog: structured logs
#
# RUN:
#   uvicorn app.main:app --reload
# =============================================================================================

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import get_settings
from app.core.db import init_db
from app.core.handlers import register_exception_handlers
from app.core.logging_config import configure_logging
from app.routers import auth, currencies

settings = get_settings()
configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)
logger = structlog.get_logger(__name__)


# -------------------------
# Database initialization on startup
# -------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Create missing tables before the first request (CREATE TABLE IF NOT EXISTS).

    Idempotent: safe on every start.
    """
    init_db()
    logger.info("application_started", app=settings.APP_NAME)
    yield
    logger.info("application_stopped")


# -------------------------
# Create FastAPI application
# -------------------------
app = FastAPI(
    title=settings.APP_NAME,
    description="User authentication and currency conversion with pairwise exchange rates",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# -------------------------
# Routers
# -------------------------
# - /auth/register, /auth/login, /auth/refresh, /auth/logout, /auth/me
# - /currencies, /currencies/rate, /currencies/convert
app.include_router(auth.router)
app.include_router(currencies.router)


# =============================================================================================
# PUBLIC ROUTES (no authentication required)
# =============================================================================================

@app.get("/")
def root():
    """Liveness check."""
    return {"msg": settings.APP_NAME}
