"""
Cowork Sessions - FastAPI Application

Main entry point for the backend API.
Provides staff endpoints to start and end customer sessions, the customer
directory and the subscription plan listing.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cowork.config.settings import settings
from cowork.infrastructure.exceptions import (
    CoworkError,
    NotFoundError,
    StoreError,
    SessionAlreadyActiveError,
    SessionNotActiveError,
    NoActiveSubscriptionError,
    InsufficientBalanceError,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info(f"Cowork Sessions backend starting in {settings.environment} mode...")

    if settings.database_url or settings.supabase_password:
        try:
            from cowork.infrastructure.db.database import init_db
            await init_db()
            logger.info("Database connection pool initialized")
        except Exception as e:
            logger.warning(f"Database initialization skipped: {e}")

    yield

    from cowork.infrastructure.db.database import close_db
    await close_db()
    logger.info("Cowork Sessions backend shutting down...")


app = FastAPI(
    title="Cowork Sessions",
    description="Session tracking and hour-balance billing for a coworking space",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.debug,
)

# CORS configuration from Settings
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Exception Handlers
# ============================================================================

@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    """Handle not found errors."""
    return JSONResponse(status_code=404, content=exc.to_dict())


@app.exception_handler(SessionAlreadyActiveError)
@app.exception_handler(SessionNotActiveError)
async def session_conflict_handler(request: Request, exc: CoworkError):
    """Session state does not allow the requested transition."""
    return JSONResponse(status_code=409, content=exc.to_dict())


@app.exception_handler(NoActiveSubscriptionError)
@app.exception_handler(InsufficientBalanceError)
async def subscription_rule_handler(request: Request, exc: CoworkError):
    """Customer's subscription does not allow a new session."""
    return JSONResponse(status_code=422, content=exc.to_dict())


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"Store error: {exc.message} {exc.details} ({exc.original_error})")
    return JSONResponse(status_code=500, content=exc.to_dict())


@app.exception_handler(CoworkError)
async def general_error_handler(request: Request, exc: CoworkError):
    """Handle all other application errors."""
    return JSONResponse(status_code=500, content=exc.to_dict())


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "cowork-sessions"}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Cowork Sessions API",
        "version": "1.0.0",
        "docs": "/docs",
    }


# ============================================================================
# Import and register routers
# ============================================================================

from cowork.api.routes import sessions, customers, subscriptions  # noqa: E402

app.include_router(sessions.router, prefix="/api", tags=["Sessions"])
app.include_router(customers.router, prefix="/api", tags=["Customers"])
app.include_router(subscriptions.router, prefix="/api", tags=["Subscriptions"])
