"""
Signature verifier — best-effort magic-byte check over a byte range.

Fetches the first 16 bytes of an asset and compares the prefix that
identifies its container format. A mismatch is WARN, never ERR: CDNs,
proxies and redirects can legitimately change what the first bytes of a
response are. Every way of not being able to look is "skipped" (OK).
"""

from __future__ import annotations

import logging
from pathlib import Path

from updater_tester.adapters.base import RangeFetcher
from updater_tester.core.models.check import CheckResult, Severity
from updater_tester.core.models.facts import AssetDescriptor, AssetFormat

logger = logging.getLogger(__name__)

SNIPPET_START = 0
SNIPPET_END = 15

MAGIC_PREFIXES: dict[AssetFormat, bytes] = {
    AssetFormat.XZ: bytes.fromhex("fd377a585a00"),
    AssetFormat.GZ: bytes.fromhex("1f8b"),
    AssetFormat.DEB: b"!<arch>\n",
}

_DESCRIPTIONS: dict[AssetFormat, str] = {
    AssetFormat.XZ: "header looks correct",
    AssetFormat.GZ: "header looks correct",
    AssetFormat.DEB: "ar header looks correct",
}


def check_magic(snippet: bytes | None, fmt: AssetFormat) -> Severity:
    """Compare ``snippet`` against the magic prefix of ``fmt``.

    Returns OK on a byte-exact prefix match and for anything that cannot
    be checked (unknown format, no bytes); WARN on mismatch.
    """
    magic = MAGIC_PREFIXES.get(fmt)
    if magic is None or not snippet:
        return Severity.OK
    return Severity.OK if snippet.startswith(magic) else Severity.WARN


def verify_signature(
    asset: AssetDescriptor,
    fetcher: RangeFetcher | None,
    *,
    snippet_path: Path | None = None,
) -> CheckResult:
    """Best-effort magic check of ``asset``.

    Args:
        asset: Download target; format ``unknown`` disables the check.
        fetcher: Range capability, or None if the environment has none.
        snippet_path: Where to keep the fetched bytes (scratch dir).
    """
    label = f"Magic {asset.format}"
    if not asset.verifiable:
        return CheckResult(label=label, severity=Severity.OK, message="format unknown (skipped)")
    if fetcher is None or not fetcher.available:
        return CheckResult(label=label, severity=Severity.OK, message="range capability missing (skipped)")

    snippet = fetcher.fetch_range(asset.url, SNIPPET_START, SNIPPET_END, dest=snippet_path)
    if not snippet:
        return CheckResult(label=label, severity=Severity.OK, message="Range fetch unavailable (skipped)")

    severity = check_magic(snippet, asset.format)
    logger.debug("Magic %s for %s: %s (%s)", asset.format, asset.url, severity.label, snippet[:8].hex())
    if severity is Severity.OK:
        return CheckResult(label=label, severity=severity, message=_DESCRIPTIONS[asset.format])
    return CheckResult(label=label, severity=severity, message="header mismatch (proxy/redirect?)")
