import json

import pytest

from config.settings import load_settings
from config.sources import DEFAULT_SOURCES, ConfigError, load_sources_file, source_from_dict

ENV_VARS = (
    "MOD_NAME", "MOD_ID", "MIRROR_PACKAGE_EXTENSION", "MIRROR_SOURCE_TIMEOUT_MS",
    "MIRROR_CACHE_TTL_SECONDS", "PORT", "HOST", "GITHUB_TOKEN", "MIRROR_SOURCES_FILE",
    "MIRROR_SINGLE_FLIGHT", "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    s = load_settings()
    assert s.source_timeout_ms == 5000
    assert s.cache_ttl_seconds == 300
    assert s.port == 3000
    assert s.github_token is None
    assert s.single_flight is False
    assert s.sources == DEFAULT_SOURCES


def test_default_sources_github_first_mediafire_disabled():
    github, mediafire = DEFAULT_SOURCES
    assert (github.name, github.type, github.priority, github.enabled) == ("GitHub", "github", 1, True)
    assert (mediafire.name, mediafire.type, mediafire.priority, mediafire.enabled) == ("Mediafire", "mediafire", 2, False)


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("MIRROR_SOURCE_TIMEOUT_MS", "2500")
    monkeypatch.setenv("MIRROR_CACHE_TTL_SECONDS", "60")
    monkeypatch.setenv("GITHUB_TOKEN", " ghp_token ")
    monkeypatch.setenv("MIRROR_PACKAGE_EXTENSION", "7z")
    monkeypatch.setenv("MIRROR_SINGLE_FLIGHT", "true")

    s = load_settings()
    assert s.source_timeout_ms == 2500
    assert s.cache_ttl_seconds == 60
    assert s.github_token == "ghp_token"
    assert s.package_extension == ".7z"
    assert s.single_flight is True


@pytest.mark.parametrize("value", ["abc", "0", "-5"])
def test_bad_numbers_are_config_errors(monkeypatch, value):
    monkeypatch.setenv("MIRROR_CACHE_TTL_SECONDS", value)
    with pytest.raises(ConfigError):
        load_settings()


def test_sources_file(monkeypatch, tmp_path):
    path = tmp_path / "sources.json"
    path.write_text(json.dumps([
        {"name": "Mirror", "type": "static_metadata", "metadataUrl": "https://m/meta.json", "priority": 2},
        {"name": "GitHub", "type": "GitHub", "url": "https://api.github.com/x", "priority": 1, "enabled": False},
    ]))
    monkeypatch.setenv("MIRROR_SOURCES_FILE", str(path))

    sources = load_settings().sources
    assert [(s.name, s.type, s.endpoint, s.enabled) for s in sources] == [
        ("Mirror", "static_metadata", "https://m/meta.json", True),
        ("GitHub", "github", "https://api.github.com/x", False),
    ]


def test_sources_file_must_be_a_list(tmp_path):
    path = tmp_path / "sources.json"
    path.write_text(json.dumps({"name": "GitHub"}))
    with pytest.raises(ConfigError):
        load_sources_file(str(path))


def test_missing_sources_file_is_config_error(tmp_path):
    with pytest.raises(ConfigError):
        load_sources_file(str(tmp_path / "nope.json"))


@pytest.mark.parametrize("raw", [
    {"type": "github", "endpoint": "https://x", "priority": 1},
    {"name": "A", "endpoint": "https://x", "priority": 1},
    {"name": "A", "type": "github", "priority": 1},
    {"name": "A", "type": "github", "endpoint": "https://x", "priority": 0},
    {"name": "A", "type": "github", "endpoint": "https://x", "priority": "1"},
    {"name": "A", "type": "github", "endpoint": "https://x", "enabled": "yes"},
])
def test_malformed_source_entries(raw):
    with pytest.raises(ConfigError):
        source_from_dict(raw)
