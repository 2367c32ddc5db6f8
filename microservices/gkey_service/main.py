"""
G-Key Service Main Application

FastAPI application for streamer G-Keys.
Port: 8301
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from core.auth_dependencies import SessionAuthenticator, require_capability, require_session
from core.config_manager import ConfigManager
from core.jwt_manager import JWTManager, SessionClaims
from core.logger import setup_service_logger
from core.roles import Capability

from .factory import GKeyServiceFactory, SERVICE_NAME
from .gkey_service import GKeyService
from .models import (
    AcquireKeyRequest,
    AcquireKeyResponse,
    CampaignReleaseRequest,
    CampaignReleaseResponse,
    CategoryListResponse,
    CooloffSweepResponse,
    ErrorResponse,
    GKey,
    HealthResponse,
    KeyAvailabilityResponse,
    KeyDebugStatus,
    KeysSummary,
    KeyStatusDetail,
    LivenessResponse,
    ReadinessResponse,
    ReleaseKeyRequest,
    ReleaseKeyResponse,
)
from .protocols import (
    ConcurrentModificationError,
    GKeyServiceError,
    InvalidCategoryError,
    InvalidCooloffError,
    KeyInCooloffError,
    KeyNotFoundError,
    KeyUnavailableError,
    NoLockedKeyError,
)

config_manager = ConfigManager(SERVICE_NAME)
config = config_manager.get_service_config()

logger = setup_service_logger(SERVICE_NAME, level=config.log_level.upper())

if config.debug:
    config_manager.print_config_summary(show_secrets=False)

SERVICE_PORT = config.service_port
SERVICE_VERSION = "1.0.0"

# Track startup time for uptime calculation
startup_time = time.time()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info(f"Starting {SERVICE_NAME} on port {SERVICE_PORT}")

    factory = GKeyServiceFactory(config_manager)
    await factory.initialize()
    app.state.factory = factory
    app.state.service = factory.service

    yield

    logger.info(f"Shutting down {SERVICE_NAME}")
    await factory.close()
    app.state.service = None


app = FastAPI(
    title="G-Key Service",
    description="Per-category exclusivity keys gating streamer campaign participation",
    version=SERVICE_VERSION,
    lifespan=lifespan,
)

app.state.authenticator = SessionAuthenticator(
    JWTManager(
        secret_key=config_manager.settings.auth.jwt_secret,
        algorithm=config_manager.settings.auth.jwt_algorithm,
    )
)
app.state.service = None


# ====================
# Exception Handlers
# ====================


def _error(status_code: int, exc: GKeyServiceError, error: str) -> JSONResponse:
    body = ErrorResponse(
        error=error,
        code=exc.code,
        message=str(exc),
        cooloff_ends_at=getattr(exc, "cooloff_ends_at", None),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", exclude_none=True))


@app.exception_handler(KeyNotFoundError)
async def key_not_found_handler(request: Request, exc: KeyNotFoundError):
    return _error(status.HTTP_404_NOT_FOUND, exc, "Not found")


@app.exception_handler(NoLockedKeyError)
async def no_locked_key_handler(request: Request, exc: NoLockedKeyError):
    return _error(status.HTTP_404_NOT_FOUND, exc, "Not found")


@app.exception_handler(KeyUnavailableError)
async def key_unavailable_handler(request: Request, exc: KeyUnavailableError):
    return _error(status.HTTP_409_CONFLICT, exc, "G-Key already in use")


@app.exception_handler(KeyInCooloffError)
async def key_in_cooloff_handler(request: Request, exc: KeyInCooloffError):
    return _error(status.HTTP_409_CONFLICT, exc, "G-Key in cooloff")


@app.exception_handler(ConcurrentModificationError)
async def concurrent_modification_handler(request: Request, exc: ConcurrentModificationError):
    return _error(status.HTTP_409_CONFLICT, exc, "Concurrent update")


@app.exception_handler(InvalidCategoryError)
async def invalid_category_handler(request: Request, exc: InvalidCategoryError):
    return _error(status.HTTP_400_BAD_REQUEST, exc, "Invalid category")


@app.exception_handler(InvalidCooloffError)
async def invalid_cooloff_handler(request: Request, exc: InvalidCooloffError):
    return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, exc, "Invalid cooloff")


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


# ====================
# Dependencies
# ====================


def get_service(request: Request) -> GKeyService:
    """Get the G-Key service built in the lifespan"""
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not initialized",
        )
    return service


# ====================
# Health Endpoints
# ====================


@app.get("/api/v1/g-keys/health", response_model=HealthResponse, tags=["Health"])
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request: Request):
    """Health check endpoint"""
    dependencies = {}
    service = getattr(request.app.state, "service", None)
    if service is not None:
        db_healthy = await service.repository.health_check()
        dependencies["postgres"] = "healthy" if db_healthy else "unhealthy"

    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        port=SERVICE_PORT,
        version=SERVICE_VERSION,
        dependencies=dependencies,
    )


@app.get("/health/ready", response_model=ReadinessResponse, tags=["Health"])
async def readiness_check(request: Request):
    """Readiness check endpoint"""
    checks = {}
    details = {}

    service = getattr(request.app.state, "service", None)
    if service is not None:
        db_healthy = await service.repository.health_check()
        checks["database"] = db_healthy
        details["database"] = "Connected" if db_healthy else "Connection failed"
    else:
        checks["service"] = False
        details["service"] = "Service not initialized"

    return ReadinessResponse(
        ready=bool(checks) and all(checks.values()),
        checks=checks,
        details=details,
    )


@app.get("/health/live", response_model=LivenessResponse, tags=["Health"])
async def liveness_check():
    """Liveness check endpoint"""
    return LivenessResponse(alive=True, uptime_seconds=time.time() - startup_time)


# ====================
# G-Key Endpoints
# ====================


@app.get("/api/v1/g-keys", response_model=List[GKey], tags=["G-Keys"])
async def list_keys(
    claims: SessionClaims = Depends(require_session),
    service: GKeyService = Depends(get_service),
):
    """List the caller's keys. Only streamers hold keys; everyone else gets an empty list."""
    if not claims.has(Capability.HOLD_GKEYS):
        return []
    return await service.get_user_keys(claims.user_id)


@app.get("/api/v1/g-keys/summary", response_model=KeysSummary, tags=["G-Keys"])
async def keys_summary(
    claims: SessionClaims = Depends(require_session),
    service: GKeyService = Depends(get_service),
):
    if not claims.has(Capability.HOLD_GKEYS):
        return KeysSummary()
    return await service.get_keys_summary(claims.user_id)


@app.post(
    "/api/v1/g-keys/initialize",
    response_model=List[GKey],
    status_code=status.HTTP_201_CREATED,
    tags=["G-Keys"],
)
async def initialize_keys(
    claims: SessionClaims = Depends(require_capability(Capability.HOLD_GKEYS)),
    service: GKeyService = Depends(get_service),
):
    return await service.initialize_keys(claims.user_id)


@app.get("/api/v1/g-keys/category/{category}", response_model=GKey, tags=["G-Keys"])
async def get_key_status(
    category: str,
    claims: SessionClaims = Depends(require_session),
    service: GKeyService = Depends(get_service),
):
    return await service.get_key_status(claims.user_id, category)


@app.get("/api/v1/g-keys/category/{category}/details", response_model=KeyStatusDetail, tags=["G-Keys"])
async def get_key_status_details(
    category: str,
    claims: SessionClaims = Depends(require_session),
    service: GKeyService = Depends(get_service),
):
    return await service.get_key_status_details(claims.user_id, category)


@app.get("/api/v1/g-keys/available/{category}", response_model=KeyAvailabilityResponse, tags=["G-Keys"])
async def check_available(
    category: str,
    brand_id: Optional[str] = Query(None),
    claims: SessionClaims = Depends(require_session),
    service: GKeyService = Depends(get_service),
):
    available = await service.has_available_key(claims.user_id, category, brand_id)
    return KeyAvailabilityResponse(category=category.strip().lower(), available=available, brand_id=brand_id)


@app.post("/api/v1/g-keys/acquire", response_model=AcquireKeyResponse, tags=["G-Keys"])
async def acquire_key(
    request: AcquireKeyRequest,
    claims: SessionClaims = Depends(require_capability(Capability.HOLD_GKEYS)),
    service: GKeyService = Depends(get_service),
):
    """Lock a key for a campaign the caller is joining"""
    key = await service.acquire_key(
        user_id=claims.user_id,
        categories=request.categories,
        campaign_id=request.campaign_id,
        brand_id=request.brand_id,
    )
    return AcquireKeyResponse(key=key)


@app.post("/api/v1/g-keys/release", response_model=ReleaseKeyResponse, tags=["G-Keys"])
async def release_key(
    request: ReleaseKeyRequest,
    claims: SessionClaims = Depends(require_session),
    service: GKeyService = Depends(get_service),
):
    """Release a campaign's key. Releasing for another user needs MANAGE_GKEYS."""
    target_user = request.user_id or claims.user_id
    required = Capability.HOLD_GKEYS if target_user == claims.user_id else Capability.MANAGE_GKEYS
    if not claims.has(required):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": "Forbidden", "required": required.value, "currentRole": claims.role},
        )

    return await service.release_key(
        user_id=target_user,
        campaign_id=request.campaign_id,
        brand_id=request.brand_id,
        cooloff_hours=request.cooloff_hours,
        category=request.category,
    )


@app.post(
    "/api/v1/g-keys/campaigns/{campaign_id}/release",
    response_model=CampaignReleaseResponse,
    tags=["G-Keys"],
)
async def release_campaign_keys(
    campaign_id: str,
    request: CampaignReleaseRequest,
    claims: SessionClaims = Depends(require_capability(Capability.MANAGE_GKEYS)),
    service: GKeyService = Depends(get_service),
):
    """Release all participants' keys on campaign completion"""
    return await service.release_campaign_keys(
        campaign_id=campaign_id,
        user_ids=request.user_ids,
        brand_id=request.brand_id,
        cooloff_hours=request.cooloff_hours,
    )


@app.post("/api/v1/g-keys/update-cooloffs", response_model=CooloffSweepResponse, tags=["Admin"])
async def update_cooloffs(
    claims: SessionClaims = Depends(require_capability(Capability.MANAGE_GKEYS)),
    service: GKeyService = Depends(get_service),
):
    updated = await service.expire_cooloffs()
    return CooloffSweepResponse(updated=updated, message=f"Updated {updated} expired cooloffs")


@app.post("/api/v1/g-keys/force-unlock/{category}", response_model=GKey, tags=["Admin"])
async def force_unlock(
    category: str,
    user_id: Optional[str] = Query(None, description="Key owner; defaults to the caller"),
    claims: SessionClaims = Depends(require_capability(Capability.MANAGE_GKEYS)),
    service: GKeyService = Depends(get_service),
):
    return await service.force_unlock(user_id or claims.user_id, category)


@app.get("/api/v1/g-keys/debug/categories", response_model=CategoryListResponse, tags=["Debug"])
async def debug_categories(
    claims: SessionClaims = Depends(require_session),
    service: GKeyService = Depends(get_service),
):
    return service.list_categories()


@app.get("/api/v1/g-keys/debug/{category}", response_model=KeyDebugStatus, tags=["Debug"])
async def debug_key_status(
    category: str,
    claims: SessionClaims = Depends(require_session),
    service: GKeyService = Depends(get_service),
):
    """Stored state of the caller's key with cooloff analysis"""
    return await service.debug_key_status(claims.user_id, category)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "microservices.gkey_service.main:app",
        host=config.service_host,
        port=SERVICE_PORT,
        reload=config.debug,
        log_level=config.log_level.lower(),
    )
