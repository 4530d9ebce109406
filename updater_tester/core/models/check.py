"""
Check models — severities, sections and the results of single checks.

Every discrete check yields exactly one Severity. Checks are never
booleans: "skipped" and "inconclusive" are OK or WARN with a note.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum

from pydantic import BaseModel, ConfigDict

# Status code recorded when a probe fails below HTTP (timeout, DNS, TLS).
UNKNOWN_STATUS = "000"


class Severity(IntEnum):
    """Tri-state check outcome, ordered so that ``max()`` folds them."""

    OK = 0
    WARN = 1
    ERR = 2

    @property
    def label(self) -> str:
        return self.name


class SectionId(StrEnum):
    """Independently scored groups of checks."""

    INFRA = "infra"
    TOOLCHAIN = "toolchain"
    PACKAGE = "package"

    @property
    def bit(self) -> int:
        """Exit-status bit owned by this section."""
        return _SECTION_BITS[self]


_SECTION_BITS: dict[SectionId, int] = {
    SectionId.INFRA: 1,
    SectionId.TOOLCHAIN: 2,
    SectionId.PACKAGE: 4,
}


class CheckResult(BaseModel):
    """One line of the report: a label, its severity and a short message."""

    model_config = ConfigDict(frozen=True)

    label: str
    severity: Severity = Severity.OK
    message: str = ""

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "severity": self.severity.label,
            "message": self.message,
        }


class ProbeResult(BaseModel):
    """One network reachability probe. Immutable once produced."""

    model_config = ConfigDict(frozen=True)

    target: str                         # human name, e.g. "Rust manifest"
    url: str
    code: str = UNKNOWN_STATUS          # 3-digit HTTP status or "000"
    severity: Severity = Severity.OK

    def to_dict(self) -> dict:
        return {
            "target": self.target,
            "url": self.url,
            "code": self.code,
            "severity": self.severity.label,
        }
