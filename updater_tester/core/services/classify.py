"""
Severity classifier — map the raw result of each check to OK/WARN/ERR.

General rule: hard requirements missing or hard endpoints unreachable
are ERR; soft requirements missing or best-effort checks inconclusive
are WARN; everything nominal is OK. Pure functions, no I/O.
"""

from __future__ import annotations

import re

from updater_tester.adapters.base import is_reachable
from updater_tester.core.models.check import CheckResult, Severity
from updater_tester.core.models.facts import Fact

_SHA256_RE = re.compile(r"^[0-9a-fA-F]{64}$")


def classify_tool(
    label: str,
    present: bool,
    *,
    required: bool = True,
    fallback: str | None = None,
    missing_note: str = "missing",
) -> CheckResult:
    """Presence of a local tool.

    Args:
        present: Whether the tool resolved on PATH.
        required: Absent required tools are ERR.
        fallback: For optional tools, a description of a usable
            fallback; when given, absence is OK with that note
            instead of WARN.
    """
    if present:
        return CheckResult(label=label, severity=Severity.OK, message="available")
    if required:
        return CheckResult(label=label, severity=Severity.ERR, message=missing_note)
    if fallback is not None:
        return CheckResult(label=label, severity=Severity.OK, message=f"missing ({fallback})")
    return CheckResult(label=label, severity=Severity.WARN, message=missing_note)


def reachability_severity(code: str, *, required: bool = True, exact: str | None = None) -> Severity:
    """Severity of an HTTP probe.

    Args:
        code: 3-digit status or ``"000"``.
        required: Unreachable required endpoints are ERR, others WARN.
        exact: When set, only this status counts as success
            (e.g. ``"200"`` for documents that are downloaded next).
    """
    ok = code == exact if exact else is_reachable(code)
    if ok:
        return Severity.OK
    return Severity.ERR if required else Severity.WARN


def classify_reachability(
    label: str,
    code: str,
    *,
    required: bool = True,
    exact: str | None = None,
    failure_note: str | None = None,
) -> CheckResult:
    """Probe result as a check; ``failure_note`` replaces the default
    suffix on a failed probe."""
    severity = reachability_severity(code, required=required, exact=exact)
    if severity is Severity.OK:
        message = f"reachable (HTTP {code})"
    elif failure_note:
        message = f"HTTP {code} ({failure_note})"
    elif required:
        message = f"HTTP {code}"
    else:
        message = f"HTTP {code} (best-effort)"
    return CheckResult(label=label, severity=severity, message=message)


def classify_fact(
    label: str,
    fact: Fact,
    *,
    required: bool = True,
    show_value: bool = True,
    missing_note: str = "missing",
) -> CheckResult:
    """A required fact missing after every fallback is ERR, optional WARN."""
    if fact.present:
        return CheckResult(
            label=label,
            severity=Severity.OK,
            message=fact.value if show_value else "parsed",
        )
    return CheckResult(
        label=label,
        severity=Severity.ERR if required else Severity.WARN,
        message=missing_note,
    )


def is_sha256(digest: str) -> bool:
    return bool(_SHA256_RE.match(digest))


def classify_digest(label: str, digest: str) -> CheckResult:
    """Digest must be present and exactly 64 hex characters."""
    if not digest:
        return CheckResult(label=label, severity=Severity.ERR, message="missing")
    if not is_sha256(digest):
        return CheckResult(label=label, severity=Severity.ERR, message="not 64-hex")
    return CheckResult(label=label, severity=Severity.OK, message="64-hex (SHA256)")


def classify_suffix(
    label: str,
    url: str,
    suffixes: tuple[str, ...],
    *,
    required: bool = True,
) -> CheckResult:
    """URL must end with one of ``suffixes``."""
    expected = "/".join(suffixes)
    if url.endswith(suffixes):
        return CheckResult(label=label, severity=Severity.OK, message=f"expected ({expected})")
    if required:
        return CheckResult(label=label, severity=Severity.ERR, message="unexpected")
    return CheckResult(
        label=label, severity=Severity.WARN, message="unexpected (updater may fail)",
    )
