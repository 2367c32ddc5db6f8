"""
API Test Configuration and Fixtures

Drives the FastAPI apps in-process through httpx.ASGITransport. The lifespan
does not run under ASGITransport, so each client fixture puts its own
collaborators on ``app.state`` and restores the previous ones afterwards.
"""
import os
import sys
from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

os.environ.setdefault("ENV", "testing")
os.environ.setdefault("GKEY_SWEEPER_ENABLED", "false")

from core.auth_dependencies import SessionAuthenticator
from core.config import ServiceConfig
from core.jwt_manager import JWTManager
from microservices.gkey_service.gkey_service import GKeyService
from microservices.gkey_service.main import app as gkey_app
from microservices.web_gateway.backend_client import BackendClient
from microservices.web_gateway.main import app as gateway_app
from tests.component.mocks import FakeClock, MockBackend, MockGKeyRepository
from tests.fixtures import auth_headers, make_session_token


def pytest_collection_modifyitems(config, items):
    """Add api marker to all tests in this directory"""
    for item in items:
        if "/api/" in str(item.fspath):
            item.add_marker(pytest.mark.api)


# =============================================================================
# Session helpers
# =============================================================================


class SessionTokens:
    """Signs session tokens with the secret the app under test verifies"""

    def __init__(self, secret: str):
        self.secret = secret

    def token(self, user_id: str = None, role: str = "streamer", **kwargs) -> str:
        return make_session_token(self.secret, user_id=user_id, role=role, **kwargs)

    def headers(self, user_id: str = None, role: str = "streamer", **kwargs) -> dict:
        return auth_headers(self.token(user_id=user_id, role=role, **kwargs))


@pytest.fixture
def gkey_tokens(test_config) -> SessionTokens:
    return SessionTokens(test_config.JWT_SECRET)


@pytest.fixture
def gateway_tokens(test_config) -> SessionTokens:
    return SessionTokens(test_config.SESSION_SECRET)


# =============================================================================
# G-Key service
# =============================================================================


@pytest.fixture
def gkey_repository() -> MockGKeyRepository:
    return MockGKeyRepository()


@pytest.fixture
def gkey_clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def gkey_client(gkey_repository, gkey_clock, test_config) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Client for the G-Key service backed by the in-memory repository"""
    previous = (gkey_app.state.service, gkey_app.state.authenticator)
    gkey_app.state.service = GKeyService(repository=gkey_repository, clock=gkey_clock)
    gkey_app.state.authenticator = SessionAuthenticator(JWTManager(secret_key=test_config.JWT_SECRET))

    transport = httpx.ASGITransport(app=gkey_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    gkey_app.state.service, gkey_app.state.authenticator = previous


# =============================================================================
# Web gateway
# =============================================================================


@pytest.fixture
def backend() -> MockBackend:
    return MockBackend()


@pytest_asyncio.fixture
async def gateway_client(backend, test_config) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Client for the gateway with the backend answered by MockBackend"""
    previous = (gateway_app.state.backend, gateway_app.state.authenticator)
    backend_client = BackendClient(
        ServiceConfig(backend_url=test_config.BACKEND_URL),
        transport=backend.transport,
    )
    gateway_app.state.backend = backend_client
    gateway_app.state.authenticator = SessionAuthenticator(
        JWTManager(secret_key=test_config.SESSION_SECRET),
        cookie_name="session-token",
    )

    transport = httpx.ASGITransport(app=gateway_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    await backend_client.close()
    gateway_app.state.backend, gateway_app.state.authenticator = previous
