# services/normalizer.py
from __future__ import annotations

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

from schemas import NormalizedUpdate
from services.fetch_result import FetchSuccess


class NormalizationError(ValueError):
    pass


def _parse_timestamp(value: Any) -> datetime:
    # epoch milliseconds
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise NormalizationError(f"Invalid release date: {value!r}")

    if not isinstance(value, str) or not value.strip():
        raise NormalizationError(f"Invalid release date: {value!r}")

    text = value.strip()
    try:
        dt = datetime.fromisoformat(text.replace("Z", "+00:00").replace("z", "+00:00"))
    except ValueError:
        try:
            dt = parsedate_to_datetime(text)
        except (TypeError, ValueError):
            raise NormalizationError(f"Invalid release date: {value!r}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def to_iso_timestamp(value: Any) -> str:
    """
    UTC, millisecond precision, trailing Z:
      "2024-01-01T00:00:00Z" -> "2024-01-01T00:00:00.000Z"
    """
    dt = _parse_timestamp(value).astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def normalize(result: FetchSuccess) -> NormalizedUpdate:
    return NormalizedUpdate(
        version=result.version,
        url=result.download_url,
        changelog=result.changelog,
        size=result.file_size,
        date=to_iso_timestamp(result.release_timestamp),
        source=result.source_name,
    )
