"""
Web Gateway Main Application

FastAPI application proxying the web client's API calls to the marketplace
backend with session checks in front.
Port: 8300
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from core.auth_dependencies import SessionAuthenticator, optional_session, require_session
from core.config_manager import ConfigManager
from core.jwt_manager import JWTManager, SessionClaims
from core.logger import setup_service_logger
from core.roles import capabilities_for

from .backend_client import BackendClient
from .models import HealthResponse, SessionView, StatusCheckResponse
from .proxy import NO_STORE, get_backend, proxy_passthrough, register_routes
from .route_table import ROUTES

SERVICE_NAME = "web_gateway"

config_manager = ConfigManager(SERVICE_NAME)
config = config_manager.get_service_config()

logger = setup_service_logger(SERVICE_NAME, level=config.log_level.upper())

if config.debug:
    config_manager.print_config_summary(show_secrets=False)

SERVICE_PORT = config.service_port
SERVICE_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info(f"Starting {SERVICE_NAME} on port {SERVICE_PORT}")

    backend = BackendClient(config_manager.settings.services)
    app.state.backend = backend
    logger.info(f"Proxying to {backend.base_url}")

    yield

    logger.info(f"Shutting down {SERVICE_NAME}")
    await backend.close()
    app.state.backend = None


app = FastAPI(
    title="Web Gateway",
    description="Session-checked proxy in front of the marketplace backend API",
    version=SERVICE_VERSION,
    lifespan=lifespan,
)

app.state.authenticator = SessionAuthenticator(
    JWTManager(
        secret_key=config_manager.settings.auth.session_secret,
        algorithm=config_manager.settings.auth.jwt_algorithm,
    ),
    cookie_name=config_manager.settings.auth.session_cookie_name,
)
app.state.backend = None


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ====================
# Gateway-local endpoints
# ====================


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        port=SERVICE_PORT,
        version=SERVICE_VERSION,
        backend_url=config_manager.settings.services.backend_api_url,
        route_count=len(ROUTES),
    )


@app.get("/api/status-check", response_model=StatusCheckResponse, tags=["Health"])
async def status_check(backend: BackendClient = Depends(get_backend)):
    """Report whether the backend answers at its root URL"""
    try:
        response = await backend.ping()
    except httpx.HTTPError as e:
        logger.error(f"Backend status check failed: {e}")
        body = StatusCheckResponse(
            backend_url=backend.root_url,
            success=False,
            message="Failed to connect to backend",
            error=type(e).__name__,
        )
        return JSONResponse(status_code=500, content=body.model_dump(), headers=NO_STORE)

    body = StatusCheckResponse(
        backend_url=backend.root_url,
        success=response.is_success,
        status=response.status_code,
        response_text=response.text[:500],
        message="Backend reachable" if response.is_success else "Backend answered with an error",
    )
    return JSONResponse(content=body.model_dump(), headers=NO_STORE)


@app.get("/api/auth/session", response_model=SessionView, tags=["Auth"])
async def session_view(claims: SessionClaims = Depends(require_session)):
    """Sanitised view of the validated session"""
    return SessionView(
        authenticated=True,
        session=claims.redacted(),
        capabilities=sorted(c.value for c in capabilities_for(claims.role)),
        timestamp=datetime.now(timezone.utc),
    )


register_routes(app, ROUTES)


# Registered last so table routes win
@app.api_route(
    "/api/v1/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    tags=["Proxy"],
)
async def backend_passthrough(
    path: str,
    request: Request,
    claims: Optional[SessionClaims] = Depends(optional_session),
    backend: BackendClient = Depends(get_backend),
):
    return await proxy_passthrough(request, path, claims, backend)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "microservices.web_gateway.main:app",
        host=config.service_host,
        port=SERVICE_PORT,
        reload=config.debug,
        log_level=config.log_level.lower(),
    )
