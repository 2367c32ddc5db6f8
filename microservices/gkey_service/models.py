"""
G-Key Service Models

Data models for G-Keys and the G-Key API.
"""

from typing import Optional, Dict, List
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict, field_validator
from enum import Enum


class KeyStatus(str, Enum):
    """G-Key lifecycle states"""
    AVAILABLE = "available"
    LOCKED = "locked"
    COOLOFF = "cooloff"


class GKey(BaseModel):
    """One exclusivity key per (user, category)"""
    model_config = ConfigDict(from_attributes=True)

    key_id: str
    user_id: str
    category: str
    status: KeyStatus = KeyStatus.AVAILABLE
    usage_count: int = Field(default=0, ge=0)
    last_used: Optional[datetime] = None
    cooloff_ends_at: Optional[datetime] = None

    # Lock holder
    locked_with: Optional[str] = None  # campaign id
    locked_at: Optional[datetime] = None

    # Brand affinity
    last_brand_id: Optional[str] = None
    last_brand_cooloff_hours: Optional[int] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class KeyReleaseUpdate(BaseModel):
    """Field values written by a release"""
    status: KeyStatus
    cooloff_ends_at: Optional[datetime] = None
    last_used: datetime
    usage_count: int
    last_brand_id: Optional[str] = None
    last_brand_cooloff_hours: Optional[int] = None
    effective_cooloff_hours: int


# ====================
# Requests
# ====================


class AcquireKeyRequest(BaseModel):
    """Lock a key for a campaign the streamer is joining"""
    campaign_id: str = Field(..., min_length=1)
    brand_id: str = Field(..., min_length=1)
    categories: List[str] = Field(..., min_length=1)

    @field_validator("categories")
    @classmethod
    def strip_empty(cls, v: List[str]) -> List[str]:
        cleaned = [c for c in v if c and c.strip()]
        if not cleaned:
            raise ValueError("At least one non-empty category is required")
        return cleaned


class ReleaseKeyRequest(BaseModel):
    """Release the key held by a campaign"""
    campaign_id: str = Field(..., min_length=1)
    brand_id: Optional[str] = None
    cooloff_hours: Optional[int] = Field(None, ge=0, le=8760)
    category: Optional[str] = None
    user_id: Optional[str] = None  # admin/service release on behalf of a streamer


class CampaignReleaseRequest(BaseModel):
    """Release every participant's key when a campaign completes"""
    user_ids: List[str] = Field(default_factory=list)
    brand_id: Optional[str] = None
    cooloff_hours: Optional[int] = Field(None, ge=0, le=8760)


# ====================
# Responses
# ====================


class KeyView(BaseModel):
    """Key with computed cooloff timings"""
    key: GKey
    completion_count: int = 0
    cooloff_time_remaining: Optional[int] = None  # ms
    cooloff_time_formatted: Optional[str] = None
    cooloff_time_elapsed: Optional[int] = None  # ms
    cooloff_time_elapsed_formatted: Optional[str] = None
    category_display_name: Optional[str] = None


class KeysSummary(BaseModel):
    """Counts by status plus per-key detail"""
    total_keys: int = 0
    available_keys: int = 0
    locked_keys: int = 0
    cooloff_keys: int = 0
    keys: List[KeyView] = Field(default_factory=list)


class KeyStatusDetail(BaseModel):
    """Status of one key with remaining cooloff"""
    category: str
    status: KeyStatus
    last_brand_id: Optional[str] = None
    last_brand_cooloff_hours: Optional[int] = None
    cooloff_ends_at: Optional[datetime] = None
    cooloff_time_remaining: Optional[int] = None  # ms
    locked_with: Optional[str] = None


class CooloffAnalysis(BaseModel):
    has_expired: bool
    time_until_expiry: int  # ms, negative once ended
    minutes_until_expiry: int


class KeyDebugStatus(BaseModel):
    """Raw stored state of one key, read without lazy expiry"""
    user_id: str
    category: str
    status: KeyStatus
    locked_with: Optional[str] = None
    locked_at: Optional[datetime] = None
    cooloff_ends_at: Optional[datetime] = None
    last_brand_id: Optional[str] = None
    last_brand_cooloff_hours: Optional[int] = None
    last_brand_cooloff_label: Optional[str] = None
    last_used: Optional[datetime] = None
    usage_count: int = 0
    category_default_cooloff_hours: int
    cooloff_analysis: Optional[CooloffAnalysis] = None


class KeyAvailabilityResponse(BaseModel):
    category: str
    available: bool
    brand_id: Optional[str] = None


class AcquireKeyResponse(BaseModel):
    key: GKey
    message: str = "G-Key locked for campaign"


class ReleaseKeyResponse(BaseModel):
    key: GKey
    effective_cooloff_hours: int
    message: str = "G-Key released"


class CooloffSweepResponse(BaseModel):
    updated: int
    message: str


class CampaignReleaseResponse(BaseModel):
    campaign_id: str
    released: List[str] = Field(default_factory=list)
    failed: Dict[str, str] = Field(default_factory=dict)


class CategoryInfo(BaseModel):
    value: str
    display_name: str
    description: str
    color: str
    default_cooloff_hours: int
    max_usage_per_day: int = 1
    legacy: bool = False


class CooloffOptionInfo(BaseModel):
    hours: int
    label: str
    description: str
    duration: str
    recommended: bool = False


class CategoryListResponse(BaseModel):
    categories: List[CategoryInfo]
    total: int
    cooloff_options: List[CooloffOptionInfo] = Field(default_factory=list)
    default_cooloff_hours: int = 720


class ErrorResponse(BaseModel):
    error: str
    code: str
    message: str
    cooloff_ends_at: Optional[datetime] = None


class HealthResponse(BaseModel):
    status: str
    service: str
    port: int
    version: str
    dependencies: Dict[str, str] = Field(default_factory=dict)


class ReadinessResponse(BaseModel):
    ready: bool
    checks: Dict[str, bool] = Field(default_factory=dict)
    details: Dict[str, str] = Field(default_factory=dict)


class LivenessResponse(BaseModel):
    alive: bool
    uptime_seconds: float


__all__ = [
    "KeyStatus",
    "GKey",
    "KeyReleaseUpdate",
    "AcquireKeyRequest",
    "ReleaseKeyRequest",
    "CampaignReleaseRequest",
    "KeyView",
    "KeysSummary",
    "KeyStatusDetail",
    "CooloffAnalysis",
    "KeyDebugStatus",
    "KeyAvailabilityResponse",
    "AcquireKeyResponse",
    "ReleaseKeyResponse",
    "CooloffSweepResponse",
    "CampaignReleaseResponse",
    "CategoryInfo",
    "CooloffOptionInfo",
    "CategoryListResponse",
    "ErrorResponse",
    "HealthResponse",
    "ReadinessResponse",
    "LivenessResponse",
]
