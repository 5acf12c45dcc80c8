from __future__ import annotations

from typing import Dict, Optional, Type

from services.adapters.base import AdapterOptions, BaseAdapter
from services.adapters.release_api import ReleaseApiAdapter
from services.adapters.static_metadata import StaticMetadataAdapter


ADAPTERS: Dict[str, Type[BaseAdapter]] = {
    "github": ReleaseApiAdapter,
    "static_metadata": StaticMetadataAdapter,
    "mediafire": StaticMetadataAdapter,
}


def get_adapter(source_type: str, options: Optional[AdapterOptions] = None) -> BaseAdapter:
    cls = ADAPTERS[source_type]
    return cls(options)


def build_adapters(options: Optional[AdapterOptions] = None) -> Dict[str, BaseAdapter]:
    return {name: get_adapter(name, options) for name in ADAPTERS}
