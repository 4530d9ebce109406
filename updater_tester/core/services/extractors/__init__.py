"""Text extractors — one scanner per upstream text shape."""

from updater_tester.core.services.extractors.manifest import extract_manifest
from updater_tester.core.services.extractors.release_page import find_release_digest
from updater_tester.core.services.extractors.release_record import (
    extract_release_record,
    list_asset_names,
    resolve_asset_url,
    tag_from_location,
)

__all__ = [
    "extract_manifest",
    "extract_release_record",
    "find_release_digest",
    "list_asset_names",
    "resolve_asset_url",
    "tag_from_location",
]
