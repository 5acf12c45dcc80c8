import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from schemas import HealthResponse, SourceSummary

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
def health(request: Request):
    state = request.app.state
    coordinator = state.coordinator

    return HealthResponse(
        status="operational",
        uptime=round(time.monotonic() - state.started_at, 3),
        timestamp=datetime.now(timezone.utc).isoformat(),
        hasToken=bool(state.settings.github_token),
        cache=coordinator.cache.describe(),
        sources=[
            SourceSummary(name=s.name, enabled=s.enabled, priority=s.priority)
            for s in coordinator.registry.all_sources()
        ],
    )


@router.get("/healthz", include_in_schema=False)
def health_probe():
    return {"status": "healthy"}
