from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from config.sources import SourceConfig
from services.fetch_result import NO_CHANGELOG, FetchFailure, FetchResult, FetchSuccess

logger = logging.getLogger("mirror-coordinator")


class AdapterError(Exception):
    """A source answered, but not with something we can use."""


@dataclass(frozen=True)
class AdapterOptions:
    mod_id: str = "sfr"
    package_extension: str = ".zip"
    auth_token: Optional[str] = None
    session: Optional[requests.Session] = None


class BaseAdapter(ABC):
    """
    Turns one source's raw response into a FetchSuccess or FetchFailure.

    Exactly one upstream request per call; no internal retry.
    """

    def __init__(self, options: Optional[AdapterOptions] = None):
        self.options = options or AdapterOptions()

    @abstractmethod
    def _fetch(self, source: SourceConfig, timeout_s: float) -> FetchSuccess:
        """Return a success record or raise."""

    def fetch(self, source: SourceConfig, timeout_s: float) -> FetchResult:
        try:
            return self._fetch(source, timeout_s)
        except Exception as e:
            logger.warning(f"{source.name} fetch failed: {e}")
            return FetchFailure(message=str(e))

    @staticmethod
    def changelog_or_placeholder(value: Any) -> str:
        if value is None:
            return NO_CHANGELOG
        text = str(value)
        return text if text.strip() else NO_CHANGELOG

    @staticmethod
    def require(payload: Dict[str, Any], key: str, what: str) -> Any:
        value = payload.get(key)
        if value is None or value == "":
            raise AdapterError(f"{what} missing field '{key}'")
        return value

    @staticmethod
    def as_size(value: Any) -> int:
        if value is None or value == "":
            return 0
        if isinstance(value, bool):
            raise AdapterError(f"Invalid file size: {value!r}")
        # no silent truncation of 12.7, inf or nan
        if isinstance(value, float) and not value.is_integer():
            raise AdapterError(f"Invalid file size: {value!r}")
        try:
            size = int(value)
        except (TypeError, ValueError, OverflowError):
            raise AdapterError(f"Invalid file size: {value!r}")
        if size < 0:
            raise AdapterError(f"Invalid file size: {value!r}")
        return size
