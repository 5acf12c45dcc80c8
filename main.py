# main.py

import asyncio
import logging
import time

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.settings import CoordinatorSettings, load_settings

# ================================================================
# SETTINGS + LOGGING (BOOT FIRST)
# ================================================================
settings = load_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger("mirror-coordinator")
logger.info("Mirror coordinator boot sequence started")

from routers.health import router as health_router
from routers.updates import router as updates_router
from services.adapters.base import AdapterOptions
from services.adapters.registry import build_adapters
from services.coordinator import FetchCoordinator
from services.source_registry import SourceRegistry
from services.ttl_cache import TTLCache


# ================================================================
# COORDINATOR WIRING
# ================================================================
def build_coordinator(cfg: CoordinatorSettings) -> FetchCoordinator:
    options = AdapterOptions(
        mod_id=cfg.mod_id,
        package_extension=cfg.package_extension,
        auth_token=cfg.github_token,
    )
    return FetchCoordinator(
        registry=SourceRegistry(cfg.sources),
        cache=TTLCache(ttl_seconds=cfg.cache_ttl_seconds),
        adapters=build_adapters(options),
        timeout_ms=cfg.source_timeout_ms,
        single_flight=cfg.single_flight,
    )


# ================================================================
# FASTAPI APP
# ================================================================
logger.info("Creating FastAPI app")

app = FastAPI(
    title=f"{settings.mod_name} Mirror Coordinator",
    description="Latest mod release across GitHub and mirror sources",
    version="1.0.0",
)

app.state.settings = settings
app.state.coordinator = build_coordinator(settings)
app.state.started_at = time.monotonic()

# ================================================================
# CORS
# ================================================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept"],
)


# ================================================================
# UNCAUGHT ERRORS (log and keep serving)
# ================================================================
@app.exception_handler(Exception)
async def unhandled_exception(request: Request, exc: Exception):
    logger.exception(f"Uncaught exception on {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "details": str(exc)},
    )


def _log_loop_exception(loop: asyncio.AbstractEventLoop, context: dict) -> None:
    exc = context.get("exception")
    logger.error(f"Unhandled task error: {context.get('message')}", exc_info=exc)


# ================================================================
# ROOT
# ================================================================
@app.get("/")
def root(request: Request):
    cfg: CoordinatorSettings = request.app.state.settings
    return {
        "message": f"{cfg.mod_name} Mirror Coordinator Online",
        "modName": cfg.mod_name,
        "modId": cfg.mod_id,
        "cacheTtlSeconds": cfg.cache_ttl_seconds,
        "sourceTimeoutMs": cfg.source_timeout_ms,
        "hasToken": bool(cfg.github_token),
    }


# ================================================================
# ROUTERS
# ================================================================
app.include_router(updates_router)
app.include_router(health_router)


# ================================================================
# LIFECYCLE
# ================================================================
@app.on_event("startup")
async def startup_event():
    asyncio.get_running_loop().set_exception_handler(_log_loop_exception)

    cfg: CoordinatorSettings = app.state.settings
    port = cfg.port
    logger.info("===========================================")
    logger.info(f"  {cfg.mod_name} Mirror Coordinator Started")
    logger.info("===========================================")
    logger.info(f"  Update endpoint: http://localhost:{port}/latest")
    logger.info(f"  Health check: http://localhost:{port}/health")
    logger.info("  Enabled sources:")
    for s in app.state.coordinator.registry.enabled_sources_by_priority():
        logger.info(f"    {s.priority}. {s.name} ({s.type})")
    logger.info("===========================================")


@app.on_event("shutdown")
def shutdown_event():
    app.state.coordinator.close()
    logger.info("Mirror coordinator stopped.")


if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port)
