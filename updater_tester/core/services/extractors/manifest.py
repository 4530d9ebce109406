"""
Manifest extractor — version, asset URL and digest from the Rust
channel manifest (``channel-rust-stable.toml``).

The manifest is scanned line by line as a small state machine instead
of being parsed as TOML: only the section headers and a handful of
``key = "value"`` lines matter, and the shape is what we are testing.

States::

    outside ──[pkg.rust]──────────────────────▶ in package
    any ─────[pkg.rust.target.*<triple>*]─────▶ in target
    any ─────any other [header] ──────────────▶ outside

Facts produced: ``version``, ``url``, ``hash`` (plus the shape markers
``pkg_section`` and ``version_key``).
"""

from __future__ import annotations

import re

from updater_tester.core.models.facts import ExtractionRecord

PACKAGE_HEADER = "[pkg.rust]"
TARGET_HEADER_PREFIX = "[pkg.rust.target."

_HEADER_RE = re.compile(r"^\s*\[")
_FIELD_RE = re.compile(r"^\s*([A-Za-z0-9_]+)\s*=\s*(.*?)\s*$")
_VERSION_KEY_RE = re.compile(r"^\s*version\s*=", re.MULTILINE)

# Fallback chains, highest priority first. A generic field is used only
# when no preferred field was ever seen inside the target section.
URL_RULES: tuple[str, ...] = ("xz_url", "url")
HASH_RULES: tuple[str, ...] = ("xz_hash", "hash")
TARGET_RULES: dict[str, tuple[str, ...]] = {
    "url": URL_RULES,
    "hash": HASH_RULES,
}


def _unquote(raw: str) -> str:
    value = raw.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        value = value[1:-1]
    return value.strip()


class ManifestScanner:
    """Single-pass scanner over the manifest lines."""

    def __init__(self, triple: str):
        self.triple = triple
        self.in_package = False
        self.in_target = False
        self.version = ""
        # first value seen per raw key inside the matching target
        self.target_fields: dict[str, str] = {}

    def feed(self, line: str) -> None:
        stripped = line.strip()

        if _HEADER_RE.match(line):
            self._enter(stripped)
            return

        m = _FIELD_RE.match(line)
        if not m:
            return
        key, raw = m.group(1), m.group(2)

        if self.in_package and key == "version" and not self.version:
            # "1.80.0 (051478957 2024-07-21)" -> "1.80.0"
            parts = _unquote(raw).split()
            self.version = parts[0] if parts else ""

        if self.in_target and key not in self.target_fields:
            self.target_fields[key] = _unquote(raw)

    def _enter(self, header: str) -> None:
        self.in_package = header == PACKAGE_HEADER
        self.in_target = (
            bool(self.triple)
            and header.startswith(TARGET_HEADER_PREFIX)
            and self.triple in header
        )

    def record(self) -> ExtractionRecord:
        record = ExtractionRecord()
        record.offer("version", self.version, PACKAGE_HEADER)
        for fact, rules in TARGET_RULES.items():
            for key in rules:
                if record.offer(fact, self.target_fields.get(key, ""), key):
                    break
        return record


def extract_manifest(text: str, triple: str) -> ExtractionRecord:
    """Extract version / asset URL / digest for ``triple``.

    Missing sections or fields are left absent; deciding whether that is
    an error is up to the caller.
    """
    scanner = ManifestScanner(triple)
    for line in text.splitlines():
        scanner.feed(line)
    record = scanner.record()

    # Shape markers, independent of the state machine
    for line in text.splitlines():
        if line.strip() == PACKAGE_HEADER:
            record.offer("pkg_section", PACKAGE_HEADER, "header")
            break
    m = _VERSION_KEY_RE.search(text)
    if m:
        record.offer("version_key", "version", "key")
    return record
