# tests/conftest.py

import time

import pytest
from fastapi.testclient import TestClient

import main
from config.sources import SourceConfig
from services.coordinator import FetchCoordinator
from services.fetch_result import FetchFailure, FetchSuccess
from services.source_registry import SourceRegistry
from services.ttl_cache import TTLCache


class FakeAdapter:
    """
    Stands in for a real adapter: answers from a per-source script,
    records every call, optionally sleeps to simulate a slow upstream.
    """

    def __init__(self, results=None, delay_s=0.0):
        self.results = dict(results or {})
        self.delay_s = delay_s
        self.calls = []

    def fetch(self, source, timeout_s):
        self.calls.append(source.name)
        if self.delay_s:
            time.sleep(self.delay_s)
        result = self.results.get(source.name)
        if result is None:
            return FetchFailure(message=f"{source.name} unavailable")
        return result


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def success(source_name, version="1.2.0", **overrides):
    fields = dict(
        version=version,
        download_url=f"https://x/{source_name.lower()}.zip",
        file_size=5000000,
        changelog="Fixes",
        release_timestamp="2024-01-01T00:00:00Z",
        source_name=source_name,
    )
    fields.update(overrides)
    return FetchSuccess(**fields)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sources():
    return [
        SourceConfig(name="Primary", type="fake", endpoint="https://a/releases", priority=1),
        SourceConfig(name="Mirror", type="fake", endpoint="https://b/meta.json", priority=2),
        SourceConfig(name="Archive", type="fake", endpoint="https://c/meta.json", priority=3, enabled=False),
    ]


@pytest.fixture
def make_coordinator(sources, clock):
    def _make(adapter, *, timeout_ms=5000, ttl_seconds=300, single_flight=False, source_list=None):
        return FetchCoordinator(
            registry=SourceRegistry(source_list if source_list is not None else sources),
            cache=TTLCache(ttl_seconds=ttl_seconds, clock=clock),
            adapters={"fake": adapter},
            timeout_ms=timeout_ms,
            single_flight=single_flight,
        )
    return _make


# ----------------------------------------------------------
# App client with a scripted coordinator (no network)
# ----------------------------------------------------------
@pytest.fixture
def client():
    previous = main.app.state.coordinator
    with TestClient(main.app, raise_server_exceptions=False) as c:
        yield c
    main.app.state.coordinator = previous


@pytest.fixture
def install_coordinator():
    def _install(coordinator):
        main.app.state.coordinator = coordinator
        return coordinator
    return _install


@pytest.fixture
def fake_adapter():
    return FakeAdapter


@pytest.fixture
def make_success():
    return success
