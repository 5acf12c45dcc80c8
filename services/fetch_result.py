# services/fetch_result.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Union

NO_CHANGELOG = "No changelog provided"


@dataclass(frozen=True)
class FetchSuccess:
    """
    Provisional record produced by an adapter.
    release_timestamp is still in the source's native date format.
    """
    version: str
    download_url: str
    file_size: int
    changelog: str
    release_timestamp: Any
    source_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "version": self.version,
            "downloadUrl": self.download_url,
            "fileSize": self.file_size,
            "changelog": self.changelog,
            "releaseDate": self.release_timestamp,
            "source": self.source_name,
        }


@dataclass(frozen=True)
class FetchFailure:
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


FetchResult = Union[FetchSuccess, FetchFailure]
