"""
Gateway Proxy

Turns ProxyRoute entries into FastAPI endpoints that check the session,
build the backend request, forward it and relay the answer.
"""

import json
import logging
import re
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
from urllib.parse import quote

import httpx
from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from core.auth_dependencies import optional_session, require_capability, require_session
from core.jwt_manager import SessionClaims

from .backend_client import BackendClient
from .models import ProxyErrorResponse
from .route_table import ProxyRoute

logger = logging.getLogger(__name__)

NO_STORE = {"Cache-Control": "no-store"}
SESSION_USER_PARAM = "session_user_id"

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


class ProxyRequestError(Exception):
    """A gateway-side rejection answered before anything is forwarded"""

    def __init__(self, status_code: int, body: Dict[str, Any]):
        super().__init__(body.get("error"))
        self.status_code = status_code
        self.body = body

    def to_response(self) -> JSONResponse:
        return JSONResponse(status_code=self.status_code, content=self.body, headers=NO_STORE)


def get_backend(request: Request) -> BackendClient:
    backend = getattr(request.app.state, "backend", None)
    if backend is None:
        raise HTTPException(status_code=503, detail="Backend client not initialized")
    return backend


def session_dependency(route: ProxyRoute) -> Callable:
    if route.public:
        return optional_session
    if route.capability is not None:
        return require_capability(route.capability)
    return require_session


# ========================================
# Request building
# ========================================

def build_backend_path(
    template: str,
    path_params: Dict[str, str],
    claims: Optional[SessionClaims] = None,
) -> str:
    """Substitute ``{name}`` placeholders with URL-encoded values"""
    values = dict(path_params)
    if claims is not None:
        values[SESSION_USER_PARAM] = claims.user_id

    def _sub(match: "re.Match") -> str:
        name = match.group(1)
        if name not in values or values[name] is None:
            raise ProxyRequestError(400, {"error": f"Missing path parameter: {name}"})
        return quote(str(values[name]), safe="")

    return _PLACEHOLDER.sub(_sub, template)


def build_query(route: ProxyRoute, request: Request) -> Tuple[str, List[Tuple[str, str]]]:
    """Pick the backend path and the query pairs to pass through"""
    backend_path = route.backend_path
    items = list(request.query_params.multi_items())

    switch = route.query_switch
    if switch is not None and request.query_params.get(switch.param) == switch.value:
        backend_path = switch.backend_path
        items = [(k, v) for k, v in items if k != switch.param]

    present = {k for k, _ in items}
    items.extend((k, v) for k, v in route.extra_query if k not in present)
    return backend_path, items


def _field_label(field: str) -> str:
    spaced = re.sub(r"(?<!^)(?=[A-Z])", " ", field).replace("_", " ").lower()
    return spaced[:1].upper() + spaced[1:]


async def build_json_body(
    route: ProxyRoute,
    request: Request,
    claims: Optional[SessionClaims],
) -> Optional[Any]:
    if request.method in ("GET", "HEAD"):
        return None

    raw = await request.body()
    body: Any = None
    if raw.strip():
        try:
            body = json.loads(raw)
        except ValueError:
            raise ProxyRequestError(400, {"error": "Invalid JSON body"})

    if route.required_body_fields or route.inject_user:
        if body is None:
            body = {}
        if not isinstance(body, dict):
            raise ProxyRequestError(400, {"error": "JSON object body required"})

    for field in route.required_body_fields:
        if body.get(field) in (None, ""):
            raise ProxyRequestError(400, {"error": f"{_field_label(field)} is required"})

    if route.inject_user and claims is not None:
        body = {**body, route.inject_user: claims.user_id}

    return body


# ========================================
# Response relay
# ========================================

def _error_message(response: httpx.Response) -> Any:
    try:
        data = response.json()
    except ValueError:
        return response.text or None
    if isinstance(data, dict):
        for key in ("message", "error", "detail"):
            if data.get(key):
                return data[key]
    return data


def relay_response(response: httpx.Response, error_label: str) -> Response:
    """Mirror the backend answer back to the client"""
    status_code = response.status_code

    if status_code >= 400:
        body = ProxyErrorResponse(
            error=error_label,
            message=_error_message(response),
            status=status_code,
        )
        return JSONResponse(
            status_code=status_code,
            content=body.model_dump(exclude_none=True),
            headers=NO_STORE,
        )

    headers = dict(NO_STORE)
    # redirects are not followed; the client gets the backend's Location
    if 300 <= status_code < 400 and "location" in response.headers:
        headers["Location"] = response.headers["location"]

    if not response.content:
        return Response(status_code=status_code, headers=headers)

    content_type = response.headers.get("content-type", "")
    media_type = content_type.split(";")[0].strip().lower()

    if media_type == "text/html":
        return Response(
            content=response.content,
            status_code=status_code,
            media_type=content_type,
            headers=headers,
        )

    if media_type == "application/json" or media_type.endswith("+json"):
        # raises ValueError on a malformed body; the caller answers 500
        data = response.json()
        return JSONResponse(status_code=status_code, content=data, headers=headers)

    if not media_type:
        try:
            return JSONResponse(status_code=status_code, content=response.json(), headers=headers)
        except ValueError:
            content_type = "text/plain; charset=utf-8"

    return Response(
        content=response.text,
        status_code=status_code,
        media_type=content_type,
        headers=headers,
    )


def internal_error() -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"},
        headers=NO_STORE,
    )


def missing_backend_token() -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"error": "Backend authentication token not found"},
        headers=NO_STORE,
    )


async def proxy_request(
    route: ProxyRoute,
    request: Request,
    claims: Optional[SessionClaims],
    backend: BackendClient,
) -> Response:
    """Forward one request described by ``route``"""
    if not route.public and (claims is None or not claims.access_token):
        logger.warning(f"No backend access token in session for {request.url.path}")
        return missing_backend_token()

    try:
        backend_path, params = build_query(route, request)
        backend_path = build_backend_path(backend_path, request.path_params, claims)
        body = await build_json_body(route, request, claims)
    except ProxyRequestError as e:
        return e.to_response()

    token = claims.access_token if claims is not None else None
    try:
        response = await backend.forward(
            request.method,
            backend_path,
            params=params,
            json=body,
            bearer_token=token,
        )
        return relay_response(response, route.error_label)
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Proxy {request.method} {backend_path} failed: {e}", exc_info=True)
        return internal_error()


async def proxy_passthrough(
    request: Request,
    path: str,
    claims: Optional[SessionClaims],
    backend: BackendClient,
) -> Response:
    """Forward any method under the API prefix, body and query untouched"""
    backend_path = "/" + quote(path.lstrip("/"), safe="/")
    raw = await request.body()
    token = claims.access_token if claims is not None else None
    try:
        response = await backend.forward(
            request.method,
            backend_path,
            params=list(request.query_params.multi_items()),
            content=raw or None,
            content_type=request.headers.get("content-type"),
            bearer_token=token,
        )
        return relay_response(response, "Backend request failed")
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Passthrough {request.method} {backend_path} failed: {e}", exc_info=True)
        return internal_error()


# ========================================
# Registration
# ========================================

def _make_endpoint(route: ProxyRoute) -> Callable:
    dependency = session_dependency(route)

    async def endpoint(
        request: Request,
        claims: Optional[SessionClaims] = Depends(dependency),
        backend: BackendClient = Depends(get_backend),
    ) -> Response:
        return await proxy_request(route, request, claims, backend)

    endpoint.__name__ = route.route_name
    return endpoint


def register_routes(app: FastAPI, routes: Iterable[ProxyRoute]) -> int:
    """Add one API route per table entry; returns how many were added"""
    count = 0
    for route in routes:
        app.add_api_route(
            route.path,
            _make_endpoint(route),
            methods=list(route.methods),
            name=route.route_name,
            include_in_schema=True,
        )
        count += 1
    logger.info(f"Registered {count} proxy routes")
    return count


__all__ = [
    "NO_STORE",
    "ProxyRequestError",
    "build_backend_path",
    "build_query",
    "build_json_body",
    "get_backend",
    "proxy_passthrough",
    "proxy_request",
    "register_routes",
    "relay_response",
]
