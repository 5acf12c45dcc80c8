from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


# ============================================================
# NORMALIZED UPDATE (cached + returned by /latest)
# ============================================================
class NormalizedUpdate(BaseModel):
    """
    Canonical description of the latest release, whatever source produced it.

    Used by:
        GET /latest
    """

    version: str                 # leading "v" already stripped
    url: str                     # direct download URL of the main asset
    changelog: str
    size: int = Field(ge=0)      # bytes
    date: str                    # ISO-8601, UTC, e.g. 2024-01-01T00:00:00.000Z
    source: str                  # display name of the winning source


# ============================================================
# HEALTH
# ============================================================
class CacheStatus(BaseModel):
    valid: bool
    source: Optional[str] = None
    age: Optional[float] = None  # seconds since capture


class SourceSummary(BaseModel):
    name: str
    enabled: bool
    priority: int


class HealthResponse(BaseModel):
    status: str
    uptime: float
    timestamp: str
    hasToken: bool
    cache: CacheStatus
    sources: List[SourceSummary] = Field(default_factory=list)


# ============================================================
# SOURCE PROBES (/test-sources)
# ============================================================
class SourceProbe(BaseModel):
    name: str
    success: bool
    data: Dict[str, Any]


# ============================================================
# ERRORS
# ============================================================
class UnavailableResponse(BaseModel):
    error: str
    message: str
    details: str
