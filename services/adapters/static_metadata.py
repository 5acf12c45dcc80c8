# services/adapters/static_metadata.py
from __future__ import annotations

from config.sources import SourceConfig
from services.adapters.base import AdapterError, BaseAdapter
from services.fetch_result import FetchSuccess
from utils.http_client import get_json


class StaticMetadataAdapter(BaseAdapter):
    """
    Hand-maintained metadata document (e.g. the Mediafire mirror):
      { version, downloadUrl, fileSize, changelog, releaseDate }
    """

    def _fetch(self, source: SourceConfig, timeout_s: float) -> FetchSuccess:
        metadata = get_json(source.endpoint, timeout_s=timeout_s, session=self.options.session)
        if not isinstance(metadata, dict):
            raise AdapterError("Metadata document is not a JSON object")

        return FetchSuccess(
            version=str(self.require(metadata, "version", "Metadata document")),
            download_url=str(self.require(metadata, "downloadUrl", "Metadata document")),
            file_size=self.as_size(metadata.get("fileSize")),
            changelog=self.changelog_or_placeholder(metadata.get("changelog")),
            release_timestamp=self.require(metadata, "releaseDate", "Metadata document"),
            source_name=source.name,
        )
