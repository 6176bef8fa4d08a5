"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from nmt_access.core.config import settings
from nmt_access.core.structured_logging import build_log_context
from nmt_access.core.trip_status import InvalidTransitionError, UnknownStatusError
from nmt_access.db.session import engine
from nmt_access.routers import permissions_router, trips_router
from nmt_access.services.permission_service import (
    AlreadyGrantedError,
    InvalidGrantScopeError,
    UserNotFoundError,
)
from nmt_access.services.permission_store import PermissionStoreUnavailableError
from nmt_access.services.trip_status_service import TripNotFoundError

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="NMT Access API",
    description="Hierarchical permissions and trip lifecycle for NMT scheduling",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
)

# CORS middleware - must be added before routers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,  # Required for cookies
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)


# ============================================================================
# Exception Handlers
# ============================================================================

@app.exception_handler(PermissionStoreUnavailableError)
async def permission_store_unavailable_handler(
    request: Request, exc: PermissionStoreUnavailableError
) -> JSONResponse:
    logger.error(
        "Permission store unavailable",
        extra=build_log_context(route=request.url.path, method=request.method),
    )
    return JSONResponse(
        status_code=503,
        content={"detail": str(exc), "migration_required": True},
    )


@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(
    request: Request, exc: InvalidTransitionError
) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={
            "detail": exc.reason,
            "current_status": exc.current.value,
            "requested_status": exc.requested.value,
            "allowed": [s.value for s in exc.allowed],
        },
    )


@app.exception_handler(UnknownStatusError)
async def unknown_status_handler(request: Request, exc: UnknownStatusError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(AlreadyGrantedError)
async def already_granted_handler(request: Request, exc: AlreadyGrantedError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(InvalidGrantScopeError)
async def invalid_grant_scope_handler(
    request: Request, exc: InvalidGrantScopeError
) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(UserNotFoundError)
async def user_not_found_handler(request: Request, exc: UserNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(TripNotFoundError)
async def trip_not_found_handler(request: Request, exc: TripNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


# ============================================================================
# Routers
# ============================================================================

app.include_router(permissions_router)
app.include_router(trips_router)


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
def health():
    """
    Health check endpoint.

    Verifies database connectivity and returns environment info.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return {"status": "ok", "env": settings.ENV, "version": settings.VERSION}
