"""
Report models — per-section outcomes and the run-level aggregate.

A SectionOutcome is created when its section starts, appended to while
the section runs, and finalized (read-only) when it ends. Its severity
only ever rises. The RunReport folds finalized sections into the exit
bitmask with an explicit reducer; there is no shared mask variable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import reduce
from typing import Any

from updater_tester.core.models.check import (
    CheckResult,
    ProbeResult,
    SectionId,
    Severity,
)
from updater_tester.core.models.facts import Fact

logger = logging.getLogger(__name__)


@dataclass
class SectionOutcome:
    """Accumulated checks, probes and notes of one section."""

    section: SectionId
    title: str = ""
    severity: Severity = Severity.OK
    checks: list[CheckResult] = field(default_factory=list)
    probes: list[ProbeResult] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    facts: list[Fact] = field(default_factory=list)
    finalized: bool = False

    def _ensure_open(self) -> None:
        if self.finalized:
            raise RuntimeError(f"Section {self.section} is already finalized")

    def add_check(self, check: CheckResult) -> CheckResult:
        self._ensure_open()
        self.checks.append(check)
        self.severity = max(self.severity, check.severity)
        return check

    def add_probe(self, probe: ProbeResult) -> ProbeResult:
        self._ensure_open()
        self.probes.append(probe)
        return probe

    def add_fact(self, fact: Fact) -> Fact:
        self._ensure_open()
        if fact.present:
            self.facts.append(fact)
        return fact

    def add_note(self, note: str) -> None:
        self._ensure_open()
        self.notes.append(note)

    def finalize(self) -> SectionOutcome:
        self.finalized = True
        logger.info("Section %s finished: %s", self.section, self.severity.label)
        return self

    @property
    def has_error(self) -> bool:
        return self.severity is Severity.ERR

    @property
    def counts(self) -> dict[str, int]:
        result = {s.label: 0 for s in Severity}
        for c in self.checks:
            result[c.severity.label] += 1
        return result

    def to_dict(self) -> dict[str, Any]:
        return {
            "section": str(self.section),
            "title": self.title,
            "severity": self.severity.label,
            "counts": self.counts,
            "checks": [c.to_dict() for c in self.checks],
            "probes": [p.to_dict() for p in self.probes],
            "facts": {f.name: f.value for f in self.facts},
            "notes": self.notes,
        }


def fold_exit_mask(sections: list[SectionOutcome]) -> int:
    """OR together the bits of every section that recorded an ERR."""
    return reduce(
        lambda mask, s: mask | (s.section.bit if s.has_error else 0),
        sections,
        0,
    )


@dataclass
class RunReport:
    """Everything one invocation produced, emitted once at the end."""

    sections: list[SectionOutcome] = field(default_factory=list)
    selected: list[SectionId] = field(default_factory=list)
    scratch_dir: str = ""

    def add(self, outcome: SectionOutcome) -> None:
        if not outcome.finalized:
            outcome.finalize()
        self.sections.append(outcome)

    def get(self, section: SectionId) -> SectionOutcome | None:
        for s in self.sections:
            if s.section is section:
                return s
        return None

    @property
    def probes(self) -> list[ProbeResult]:
        return [p for s in self.sections for p in s.probes]

    @property
    def skipped(self) -> list[SectionId]:
        """Selected sections that never ran (infra short-circuit)."""
        ran = {s.section for s in self.sections}
        return [s for s in self.selected if s not in ran]

    @property
    def exit_mask(self) -> int:
        return fold_exit_mask(self.sections)

    def to_dict(self) -> dict[str, Any]:
        return {
            "exit_mask": self.exit_mask,
            "scratch_dir": self.scratch_dir,
            "selected": [str(s) for s in self.selected],
            "skipped": [str(s) for s in self.skipped],
            "sections": [s.to_dict() for s in self.sections],
            "probes": [p.to_dict() for p in self.probes],
        }
