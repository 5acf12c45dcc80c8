# routers/updates.py

import logging
from typing import List

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from schemas import NormalizedUpdate, SourceProbe, UnavailableResponse
from services.coordinator import AllSourcesExhausted, FetchCoordinator
from services.fetch_result import FetchSuccess

logger = logging.getLogger("mirror-coordinator")

router = APIRouter(tags=["Updates"])


def _coordinator(request: Request) -> FetchCoordinator:
    return request.app.state.coordinator


# ---------------------------
# Latest release
# ---------------------------
@router.get(
    "/latest",
    response_model=NormalizedUpdate,
    responses={503: {"model": UnavailableResponse}},
)
async def latest(request: Request):
    logger.info("Update check requested")
    try:
        return await _coordinator(request).get_latest_update()
    except AllSourcesExhausted as e:
        body = UnavailableResponse(
            error=str(e),
            message="Please try again later or check manually on GitHub",
            details=e.details(),
        )
        return JSONResponse(status_code=503, content=body.model_dump())


# ---------------------------
# Cache administration
# ---------------------------
@router.get("/clear-cache")
def clear_cache(request: Request):
    _coordinator(request).clear_cache()
    return {"message": "Cache cleared"}


# ---------------------------
# Source diagnostics
# ---------------------------
@router.get("/test-sources", response_model=List[SourceProbe])
async def test_sources(request: Request):
    probes = await _coordinator(request).probe_sources()
    return [
        SourceProbe(
            name=p.source.name,
            success=isinstance(p.result, FetchSuccess),
            data=p.result.to_dict(),
        )
        for p in probes
    ]
