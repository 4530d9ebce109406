"""
Release-record extractor — tag and asset URLs from a GitHub release
description (``/repos/<slug>/releases/latest`` or ``/releases/tags/<tag>``).

The record is treated as a flat, ordered stream of ``"key": "value"``
string pairs, not as a tree. Asset names and download URLs are paired
by position: the URL belonging to an asset is the first
``browser_download_url`` that follows its ``name``.
"""

from __future__ import annotations

import re
from collections.abc import Iterator

from updater_tester.core.models.facts import ExtractionRecord, Fact

_PAIR_RE = re.compile(r'"([A-Za-z0-9_]+)"\s*:\s*"((?:[^"\\]|\\.)*)"')

TAG_KEY = "tag_name"
NAME_KEY = "name"
URL_KEY = "browser_download_url"


def iter_pairs(text: str) -> Iterator[tuple[str, str]]:
    """Every string-valued ``"key": "value"`` pair, in document order."""
    for m in _PAIR_RE.finditer(text):
        yield m.group(1), m.group(2).replace('\\"', '"').replace("\\/", "/")


def resolve_asset_url(text: str, asset_name: str) -> Fact:
    """Download URL of ``asset_name``, by forward adjacency.

    Scans for ``"name": "<asset_name>"``; from there (not from the
    start) the next ``browser_download_url`` is the match.
    """
    fact_name = f"asset:{asset_name}"
    found = False
    for key, value in iter_pairs(text):
        if not found:
            found = key == NAME_KEY and value == asset_name
        elif key == URL_KEY:
            return Fact(name=fact_name, value=value, source=f"{NAME_KEY}->{URL_KEY}")
    return Fact.absent(fact_name)


def list_asset_names(text: str, suffix: str = ".deb") -> list[str]:
    """All ``name`` values ending with ``suffix`` (diagnostics only)."""
    return [
        value for key, value in iter_pairs(text)
        if key == NAME_KEY and value.endswith(suffix)
    ]


def extract_release_record(
    text: str,
    asset_names: dict[str, str] | None = None,
) -> ExtractionRecord:
    """Extract ``tag`` plus one URL fact per requested asset.

    Args:
        text: Raw release record.
        asset_names: fact name → asset filename, e.g.
            ``{"asset": "fastfetch-linux-amd64.deb"}``.
    """
    record = ExtractionRecord()
    for key, value in iter_pairs(text):
        if key == TAG_KEY and record.offer("tag", value, TAG_KEY):
            break
    for fact, name in (asset_names or {}).items():
        resolved = resolve_asset_url(text, name)
        record.offer(fact, resolved.value, resolved.source)
    return record


def tag_from_location(location: str) -> str:
    """Tag carried by a ``.../releases/tag/<tag>`` redirect target."""
    _, sep, tail = location.partition("/tag/")
    if not sep:
        return ""
    return tail.strip().split("?", 1)[0].split("#", 1)[0].rstrip("/")
