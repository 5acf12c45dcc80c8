"""
sources.py

Central list of upstream sources the mirror coordinator may query
for the latest mod release.

Each entry is a SourceConfig:
- name:      display name (returned to callers as `source`)
- type:      adapter selector (github | static_metadata | mediafire)
- endpoint:  releases API URL or metadata document URL
- priority:  lower is tried first
- enabled:   disabled sources are never contacted

The built-in list can be replaced at startup with a JSON file
(see config.settings.MIRROR_SOURCES_FILE).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List


class ConfigError(ValueError):
    """Raised when the coordinator configuration is malformed."""


# ==============================================================
# SOURCE DEFINITION
# ==============================================================

@dataclass(frozen=True)
class SourceConfig:
    name: str
    type: str  # github|static_metadata|mediafire
    endpoint: str
    priority: int = 1
    enabled: bool = True


def _source(name: str, type: str, endpoint: str, priority: int, enabled: bool = True) -> SourceConfig:
    # guardrails (fail fast if someone misconfigures a source)
    if not name or not str(name).strip():
        raise ConfigError("source name must be a non-empty string")
    if not type or not str(type).strip():
        raise ConfigError(f"source type must be set for {name}")
    if not endpoint or not str(endpoint).strip():
        raise ConfigError(f"source endpoint must be set for {name}")
    if isinstance(priority, bool) or not isinstance(priority, int) or priority < 1:
        raise ConfigError(f"priority must be a positive integer for {name}")
    if not isinstance(enabled, bool):
        raise ConfigError(f"enabled must be true/false for {name}")
    return SourceConfig(
        name=str(name).strip(),
        type=str(type).strip().lower(),
        endpoint=str(endpoint).strip(),
        priority=priority,
        enabled=enabled,
    )


# ==============================================================
# BUILT-IN SOURCES
# ==============================================================

DEFAULT_SOURCES: List[SourceConfig] = [
    _source(
        "GitHub",
        "github",
        "https://api.github.com/repos/SFR-Team/sonic-frontiers-revisited-mod-files/releases/latest",
        priority=1,
    ),
    _source(
        "Mediafire",
        "mediafire",
        "https://sfr-team.github.io/sfr-metadata/sfr-mediafire-metadata.json",
        priority=2,
        enabled=False,
    ),
]


# ==============================================================
# JSON SOURCE FILES
# ==============================================================

def source_from_dict(raw: Dict[str, Any]) -> SourceConfig:
    """
    Builds a SourceConfig from one JSON object.

    `endpoint` may also be spelled `url` (release APIs) or
    `metadataUrl` (static metadata documents).
    """
    if not isinstance(raw, dict):
        raise ConfigError(f"source entry must be an object, got {type(raw).__name__}")

    endpoint = raw.get("endpoint") or raw.get("url") or raw.get("metadataUrl")
    return _source(
        raw.get("name", ""),
        raw.get("type", ""),
        endpoint or "",
        priority=raw.get("priority", 1),
        enabled=raw.get("enabled", True),
    )


def load_sources_file(path: str) -> List[SourceConfig]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not read sources file {path}: {e}") from e

    if not isinstance(data, list):
        raise ConfigError(f"Sources file {path} must contain a JSON array")

    return [source_from_dict(entry) for entry in data]
