# services/adapters/release_api.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from config.sources import SourceConfig
from services.adapters.base import AdapterError, BaseAdapter
from services.fetch_result import FetchSuccess
from utils.http_client import get_json

NO_ASSET_MESSAGE = "No valid mod file found in release"


def strip_version_prefix(tag: str) -> str:
    tag = str(tag).strip()
    if tag[:1] in ("v", "V"):
        return tag[1:]
    return tag


def select_main_asset(
    assets: List[Dict[str, Any]],
    *,
    package_extension: str,
    mod_id: str,
) -> Optional[Dict[str, Any]]:
    """
    1) first asset whose name ends in the package extension (case-insensitive)
    2) else first asset whose name contains the mod's short identifier
    """
    named = [a for a in assets if isinstance(a, dict) and isinstance(a.get("name"), str)]
    ext = package_extension.lower()
    for asset in named:
        if asset["name"].lower().endswith(ext):
            return asset

    needle = mod_id.lower()
    if needle:
        for asset in named:
            if needle in asset["name"].lower():
                return asset
    return None


class ReleaseApiAdapter(BaseAdapter):
    """
    GitHub-style "latest release" endpoint:
      { tag_name, body, published_at, assets: [{name, size, browser_download_url}] }
    """

    def _headers(self) -> Dict[str, str]:
        h = {"Accept": "application/vnd.github.v3+json"}
        if self.options.auth_token:
            h["Authorization"] = f"Bearer {self.options.auth_token}"
        return h

    def _fetch(self, source: SourceConfig, timeout_s: float) -> FetchSuccess:
        data = get_json(
            source.endpoint,
            timeout_s=timeout_s,
            headers=self._headers(),
            session=self.options.session,
        )
        if not isinstance(data, dict):
            raise AdapterError("Release response is not a JSON object")

        tag = self.require(data, "tag_name", "Release response")
        published_at = self.require(data, "published_at", "Release response")

        assets = data.get("assets")
        if not isinstance(assets, list):
            raise AdapterError("Release response missing field 'assets'")

        asset = select_main_asset(
            assets,
            package_extension=self.options.package_extension,
            mod_id=self.options.mod_id,
        )
        if asset is None:
            raise AdapterError(NO_ASSET_MESSAGE)

        return FetchSuccess(
            version=strip_version_prefix(tag),
            download_url=self.require(asset, "browser_download_url", "Release asset"),
            file_size=self.as_size(asset.get("size")),
            changelog=self.changelog_or_placeholder(data.get("body")),
            release_timestamp=published_at,
            source_name=source.name,
        )
