# services/source_registry.py
from __future__ import annotations

from typing import Iterable, List

from config.sources import ConfigError, SourceConfig


class SourceRegistry:
    """
    Ordered view over the configured upstream sources.

    Duplicate names and duplicate priorities are allowed; equal priorities
    keep their configured relative order.
    """

    def __init__(self, sources: Iterable[SourceConfig]):
        self._sources: List[SourceConfig] = list(sources)
        for s in self._sources:
            if not isinstance(s, SourceConfig):
                raise ConfigError(f"Expected SourceConfig, got {type(s).__name__}")

    def all_sources(self) -> List[SourceConfig]:
        return list(self._sources)

    def enabled_sources_by_priority(self) -> List[SourceConfig]:
        # sorted() is stable, so ties stay in configured order
        return sorted((s for s in self._sources if s.enabled), key=lambda s: s.priority)
