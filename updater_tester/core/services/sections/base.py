"""
Section plumbing — shared context and the per-section recorder.

A SectionRunner owns one SectionOutcome from start to finalization and
forwards every check to an optional listener as it happens, so the CLI
can print results live while the report is still being assembled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from updater_tester.adapters.base import Downloader, RangeFetcher
from updater_tester.core.models.check import CheckResult, ProbeResult, SectionId, Severity
from updater_tester.core.models.facts import Fact
from updater_tester.core.models.report import SectionOutcome
from updater_tester.core.models.settings import TesterSettings
from updater_tester.core.services.classify import classify_reachability, classify_tool
from updater_tester.core.services.host import Host

logger = logging.getLogger(__name__)


class SectionListener(Protocol):
    """Receives section events as they happen (e.g. the terminal printer)."""

    def begin(self, section: SectionId, title: str) -> None: ...

    def check(self, section: SectionId, result: CheckResult) -> None: ...

    def note(self, section: SectionId, text: str) -> None: ...


@dataclass
class SectionContext:
    """Everything a section orchestrator may touch."""

    settings: TesterSettings = field(default_factory=TesterSettings)
    host: Host = field(default_factory=Host)
    downloader: Downloader | None = None
    range_fetcher: RangeFetcher | None = None
    scratch_dir: Path | None = None
    listener: SectionListener | None = None

    def scratch_path(self, name: str) -> Path:
        """Path for a downloaded artefact inside the run's scratch dir."""
        assert self.scratch_dir is not None, "scratch dir not created"
        return self.scratch_dir / name


class SectionRunner:
    """Records checks, probes, facts and notes for one section."""

    def __init__(self, ctx: SectionContext, section: SectionId, title: str):
        self.ctx = ctx
        self.outcome = SectionOutcome(section=section, title=title)
        logger.info("Section %s started", section)
        if ctx.listener:
            ctx.listener.begin(section, title)

    @property
    def section(self) -> SectionId:
        return self.outcome.section

    # ── Recording ────────────────────────────────────────────────

    def record(self, result: CheckResult) -> CheckResult:
        self.outcome.add_check(result)
        if result.severity is Severity.ERR:
            logger.info("[%s] ERR %s: %s", self.section, result.label, result.message)
        if self.ctx.listener:
            self.ctx.listener.check(self.section, result)
        return result

    def ok(self, label: str, message: str = "") -> CheckResult:
        return self.record(CheckResult(label=label, severity=Severity.OK, message=message))

    def warn(self, label: str, message: str = "") -> CheckResult:
        return self.record(CheckResult(label=label, severity=Severity.WARN, message=message))

    def err(self, label: str, message: str = "") -> CheckResult:
        return self.record(CheckResult(label=label, severity=Severity.ERR, message=message))

    def note(self, text: str) -> None:
        self.outcome.add_note(text)
        if self.ctx.listener:
            self.ctx.listener.note(self.section, text)

    def fact(self, fact: Fact) -> Fact:
        return self.outcome.add_fact(fact)

    # ── Common checks ────────────────────────────────────────────

    def tool(
        self,
        label: str,
        tool: str,
        *,
        required: bool = True,
        fallback: str | None = None,
        missing_note: str = "missing",
    ) -> bool:
        """Record the presence of ``tool`` on PATH; returns presence."""
        present = self.ctx.host.has(tool)
        self.record(
            classify_tool(
                label, present,
                required=required, fallback=fallback, missing_note=missing_note,
            )
        )
        return present

    def probe(
        self,
        label: str,
        url: str,
        *,
        target: str | None = None,
        required: bool = True,
        exact: str | None = None,
        failure_note: str | None = None,
    ) -> ProbeResult:
        """HEAD ``url`` once, record the probe and its classified check."""
        assert self.ctx.downloader is not None, "probe() needs a selected downloader"
        code = self.ctx.downloader.probe_status(url)
        check = self.record(
            classify_reachability(
                label, code, required=required, exact=exact, failure_note=failure_note,
            )
        )
        return self.outcome.add_probe(
            ProbeResult(target=target or label, url=url, code=code, severity=check.severity)
        )

    def finish(self) -> SectionOutcome:
        return self.outcome.finalize()
