import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

from config.sources import DEFAULT_SOURCES, ConfigError, SourceConfig, load_sources_file

load_dotenv()


@dataclass(frozen=True)
class CoordinatorSettings:
    mod_name: str = "Sonic Frontiers Revisited"
    mod_id: str = "sfr"
    package_extension: str = ".zip"
    source_timeout_ms: int = 5000
    cache_ttl_seconds: int = 300
    host: str = "0.0.0.0"
    port: int = 3000
    github_token: Optional[str] = None
    single_flight: bool = False
    log_level: str = "INFO"
    sources: List[SourceConfig] = field(default_factory=lambda: list(DEFAULT_SOURCES))


def _env_int(name: str, default: int, *, minimum: int = 1) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    return value


def _env_flag(name: str, default: bool = False) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "y")


def load_settings() -> CoordinatorSettings:
    """
    Reads coordinator settings from the environment (.env for local dev).

    Raises ConfigError on malformed values so a broken deploy fails at boot,
    not on the first update check.
    """
    sources_file = (os.getenv("MIRROR_SOURCES_FILE") or "").strip()
    sources = load_sources_file(sources_file) if sources_file else list(DEFAULT_SOURCES)

    extension = (os.getenv("MIRROR_PACKAGE_EXTENSION") or ".zip").strip().lower()
    if not extension.startswith("."):
        extension = f".{extension}"

    return CoordinatorSettings(
        mod_name=(os.getenv("MOD_NAME") or "Sonic Frontiers Revisited").strip(),
        mod_id=(os.getenv("MOD_ID") or "sfr").strip().lower(),
        package_extension=extension,
        source_timeout_ms=_env_int("MIRROR_SOURCE_TIMEOUT_MS", 5000),
        cache_ttl_seconds=_env_int("MIRROR_CACHE_TTL_SECONDS", 300),
        host=(os.getenv("HOST") or "0.0.0.0").strip(),
        port=_env_int("PORT", 3000),
        github_token=(os.getenv("GITHUB_TOKEN") or "").strip() or None,
        single_flight=_env_flag("MIRROR_SINGLE_FLIGHT"),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
        sources=sources,
    )
