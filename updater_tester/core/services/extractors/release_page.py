"""
Release-page extractor — SHA-256 digest of an asset from the HTML
release notes.

Upstream prints checksums as ``<sha256>  <path>`` lines, with the path
either nested under a directory named after the artifact or flat::

    <sha256>  fastfetch-linux-amd64/fastfetch-linux-amd64.deb
    <sha256>  fastfetch-linux-amd64.deb

Two passes, each trying the nested form before the flat one:

1. raw markup: ``hex64 <whitespace> path``;
2. only if pass 1 found nothing: strip tags, then take the first hex64
   on a line that mentions the path (markup can split a line).
"""

from __future__ import annotations

import re

from updater_tester.core.models.facts import Fact

_HEX64 = r"(?<![0-9a-fA-F])([0-9a-fA-F]{64})(?![0-9a-fA-F])"
_HEX64_RE = re.compile(_HEX64)
_TAG_RE = re.compile(r"<[^>]*>")


def asset_paths(asset_name: str, artifact: str) -> list[tuple[str, str]]:
    """Candidate paths in priority order, as ``(form, path)``."""
    return [
        ("nested", f"{artifact}/{asset_name}"),
        ("flat", asset_name),
    ]


def strip_tags(html: str) -> str:
    return _TAG_RE.sub("", html)


def _raw_pass(html: str, paths: list[tuple[str, str]]) -> tuple[str, str]:
    for form, path in paths:
        pattern = re.compile(_HEX64 + r"\s+" + re.escape(path) + r"(?![\w.-])")
        m = pattern.search(html)
        if m:
            return m.group(1), f"raw:{form}"
    return "", ""


def _text_pass(html: str, paths: list[tuple[str, str]]) -> tuple[str, str]:
    lines = strip_tags(html).splitlines()
    for form, path in paths:
        for line in lines:
            if path not in line:
                continue
            m = _HEX64_RE.search(line)
            if m:
                return m.group(1), f"text:{form}"
    return "", ""


def find_release_digest(html: str, asset_name: str, artifact: str) -> Fact:
    """Digest published for ``asset_name`` on a release page.

    Args:
        html: Raw release page markup.
        asset_name: e.g. ``fastfetch-linux-amd64.deb``.
        artifact: Directory name of the nested form, e.g.
            ``fastfetch-linux-amd64``.

    Returns:
        Fact ``sha256`` whose source tells which pass and path form
        matched; absent when nothing matched.
    """
    paths = asset_paths(asset_name, artifact)
    for scan in (_raw_pass, _text_pass):
        digest, source = scan(html, paths)
        if digest:
            return Fact(name="sha256", value=digest, source=source)
    return Fact.absent("sha256")
