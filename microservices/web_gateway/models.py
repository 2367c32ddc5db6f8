"""
Web Gateway Models
"""

from typing import Any, Dict, Optional, Union
from datetime import datetime
from pydantic import BaseModel, Field


class ProxyErrorResponse(BaseModel):
    """Body returned when the backend answers with a non-2xx status"""
    error: str
    message: Optional[Union[str, list, Dict[str, Any]]] = None
    status: int


class StatusCheckResponse(BaseModel):
    backend_url: str
    success: bool
    status: Optional[int] = None
    response_text: Optional[str] = None
    message: str
    error: Optional[str] = None


class SessionView(BaseModel):
    authenticated: bool
    session: Optional[Dict[str, Any]] = None
    capabilities: list = Field(default_factory=list)
    timestamp: datetime


class HealthResponse(BaseModel):
    status: str
    service: str
    port: int
    version: str
    backend_url: str
    route_count: int
