"""
coordinator.py

Fetch Coordinator
────────────────────────────────────────
- Serves the cached update while it is fresh (no upstream calls)
- Otherwise walks enabled sources in ascending priority, one at a time
- Each adapter call is bounded by the per-source timeout
- First success is normalized, cached and returned; later sources are skipped
- If every source fails, raises AllSourcesExhausted (never serves stale data)

Concurrency:
- Overlapping refreshes are allowed by default; the cache is last-writer-wins.
- single_flight=True makes concurrent callers share one in-flight refresh.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from config.sources import SourceConfig
from schemas import NormalizedUpdate
from services.adapters.base import BaseAdapter
from services.fetch_result import FetchFailure, FetchResult, FetchSuccess
from services.normalizer import normalize
from services.source_registry import SourceRegistry
from services.ttl_cache import TTLCache

logger = logging.getLogger("mirror-coordinator")

EXHAUSTED_MESSAGE = "All update sources are currently unavailable"
WORKERS_PER_SOURCE = 4


@dataclass(frozen=True)
class SourceFailure:
    source: str
    reason: str


class AllSourcesExhausted(RuntimeError):
    def __init__(self, failures: List[SourceFailure]):
        super().__init__(EXHAUSTED_MESSAGE)
        self.failures = list(failures)

    def details(self) -> str:
        if not self.failures:
            return "No enabled update sources are configured"
        return "; ".join(f"{f.source}: {f.reason}" for f in self.failures)


def _mark_started(started: asyncio.Future) -> None:
    if not started.done():
        started.set_result(None)


def _consume_refresh_error(task: asyncio.Task) -> None:
    # Every waiter may have been cancelled; mark the error as retrieved here.
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.debug(f"Shared refresh finished with {type(error).__name__}: {error}")


@dataclass(frozen=True)
class SourceProbeResult:
    source: SourceConfig
    result: FetchResult


class FetchCoordinator:
    def __init__(
        self,
        registry: SourceRegistry,
        cache: TTLCache,
        adapters: Mapping[str, BaseAdapter],
        *,
        timeout_ms: int = 5000,
        single_flight: bool = False,
    ):
        self.registry = registry
        self.cache = cache
        self.adapters = dict(adapters)
        self.timeout_ms = timeout_ms
        self.single_flight = single_flight
        self._inflight: Optional[asyncio.Task] = None
        self._executors: Dict[SourceConfig, ThreadPoolExecutor] = {}

    # ============================================================
    # Single source call
    # ============================================================

    async def fetch_from_source(self, source: SourceConfig) -> FetchResult:
        logger.info(f"Attempting to fetch from {source.name}...")

        adapter = self.adapters.get(source.type)
        if adapter is None:
            return FetchFailure(message=f"Unknown source type: {source.type}")

        timeout_s = self.timeout_ms / 1000.0
        loop = asyncio.get_running_loop()
        started = loop.create_future()

        def run() -> FetchResult:
            if not loop.is_closed():
                loop.call_soon_threadsafe(_mark_started, started)
            return adapter.fetch(source, timeout_s)

        future = loop.run_in_executor(self._executor_for(source), run)

        # Queue time on this source's own workers; a call still queued at the
        # deadline is dropped without ever reaching the upstream.
        try:
            await asyncio.wait_for(asyncio.shield(started), timeout=timeout_s)
        except asyncio.TimeoutError:
            future.cancel()
            return FetchFailure(message=f"Timed out after {self.timeout_ms}ms waiting for a free worker")

        # The clock for the upstream call starts once the worker is running.
        # get_json enforces the same deadline inside the thread, so a
        # timed-out worker frees its slot on its own.
        try:
            return await asyncio.wait_for(future, timeout=timeout_s)
        except asyncio.TimeoutError:
            return FetchFailure(message=f"Timed out after {self.timeout_ms}ms")
        except Exception as e:
            logger.exception(f"{source.name} adapter crashed")
            return FetchFailure(message=str(e) or type(e).__name__)

    def _executor_for(self, source: SourceConfig) -> ThreadPoolExecutor:
        # one pool per source: a slow upstream cannot starve the others
        executor = self._executors.get(source)
        if executor is None:
            executor = ThreadPoolExecutor(
                max_workers=WORKERS_PER_SOURCE,
                thread_name_prefix=f"fetch-{source.name}",
            )
            self._executors[source] = executor
        return executor

    def close(self) -> None:
        for executor in self._executors.values():
            executor.shutdown(wait=False, cancel_futures=True)
        self._executors.clear()

    # ============================================================
    # Public API
    # ============================================================

    async def get_latest_update(self) -> NormalizedUpdate:
        if self.cache.is_valid():
            logger.info("Returning cached data")
            return self.cache.get()

        if not self.single_flight:
            return await self._refresh()

        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.ensure_future(self._refresh())
            self._inflight.add_done_callback(_consume_refresh_error)
        # shield: one caller going away must not cancel the shared refresh
        return await asyncio.shield(self._inflight)

    async def probe_sources(self) -> List[SourceProbeResult]:
        """Every enabled source, sequentially, bypassing cache and short-circuit."""
        results: List[SourceProbeResult] = []
        for source in self.registry.enabled_sources_by_priority():
            results.append(SourceProbeResult(source=source, result=await self.fetch_from_source(source)))
        return results

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("Cache cleared")

    # ============================================================
    # Refresh pass
    # ============================================================

    async def _refresh(self) -> NormalizedUpdate:
        failures: List[SourceFailure] = []

        for source in self.registry.enabled_sources_by_priority():
            result = await self.fetch_from_source(source)

            if isinstance(result, FetchSuccess):
                try:
                    normalized = normalize(result)
                except Exception as e:
                    result = FetchFailure(message=str(e) or type(e).__name__)
                else:
                    self.cache.store(normalized, source.name)
                    logger.info(f"✓ Successfully fetched from {source.name}")
                    return normalized

            logger.warning(f"✗ {source.name} failed: {result.message}")
            failures.append(SourceFailure(source=source.name, reason=result.message))

        error = AllSourcesExhausted(failures)
        logger.error(f"{EXHAUSTED_MESSAGE}: {error.details()}")
        raise error
