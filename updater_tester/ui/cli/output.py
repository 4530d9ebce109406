"""
Terminal output — section banners, dotted status lines and the summary.

Colors appear only inside the status brackets. They are disabled when
stdout is not a TTY (click's own detection), when NO_COLOR is set to any
value, or when ``--no-color`` is given. ERR lines go to stderr.
"""

from __future__ import annotations

import os

import click

from updater_tester.core.models.check import CheckResult, SectionId, Severity
from updater_tester.core.models.report import RunReport

LEFT_COL_WIDTH = 32
DOTS = "." * 40
RULE = "=" * 30

SECTION_NAMES: dict[SectionId, str] = {
    SectionId.INFRA: "Self/infra",
    SectionId.TOOLCHAIN: "Rust",
    SectionId.PACKAGE: "Fastfetch",
}

_BRACKETS: dict[Severity, tuple[str, str]] = {
    Severity.OK: (" OK ", "green"),
    Severity.WARN: ("WARN", "yellow"),
    Severity.ERR: ("ERR ", "red"),
}


def color_setting(no_color: bool) -> bool | None:
    """``False`` forces plain output; ``None`` lets click detect a TTY."""
    if no_color or "NO_COLOR" in os.environ:
        return False
    return None


def bracket(severity: Severity) -> str:
    text, fg = _BRACKETS[severity]
    return "[" + click.style(text, fg=fg) + "]"


def dot_line(severity: Severity, label: str, message: str = "") -> str:
    line = f"{bracket(severity)}  - {label:<{LEFT_COL_WIDTH}} {DOTS}"
    if message:
        line += f" {message}"
    return line


class TerminalReporter:
    """Prints section events live and the summary at the end."""

    def __init__(self, color: bool | None = None):
        self.color = color
        self._counter = 0

    def _echo(self, text: str = "", err: bool = False) -> None:
        click.echo(text, err=err, color=self.color)

    def _banner(self, title: str) -> None:
        self._counter += 1
        if self._counter > 1:
            self._echo()
        self._echo(click.style(RULE, bold=True))
        self._echo(click.style(f"{self._counter}) {title}", bold=True))
        self._echo(click.style(RULE, bold=True))

    def line(self, severity: Severity, label: str, message: str = "") -> None:
        self._echo(dot_line(severity, label, message), err=severity is Severity.ERR)

    # ── SectionListener ──────────────────────────────────────────

    def begin(self, section: SectionId, title: str) -> None:
        self._banner(title)

    def check(self, section: SectionId, result: CheckResult) -> None:
        self.line(result.severity, result.label, result.message)

    def note(self, section: SectionId, text: str) -> None:
        self._echo(f"  {text}")

    # ── Summary ──────────────────────────────────────────────────

    def summary(self, report: RunReport) -> None:
        self._banner("Summary")

        self._echo("Checked URLs (HTTP codes):")
        for probe in report.probes:
            self._echo(f"  - {probe.target + ':':<22}{probe.url} -> {probe.code}")

        if report.scratch_dir:
            self._echo()
            self._echo(f"Temp dir used: {report.scratch_dir} (cleaned on exit)")

        self._echo()
        self._echo("Section status:")
        for section in [SectionId.INFRA, *report.selected]:
            name = SECTION_NAMES[section]
            outcome = report.get(section)
            if outcome is None:
                self.line(Severity.WARN, name, "not run (infra checks failed)")
            elif outcome.has_error:
                self.line(Severity.ERR, name, "ERR")
            else:
                self.line(Severity.OK, name, "OK/WARN only")

        self._echo()
        mask = report.exit_mask
        if mask == 0:
            self.line(Severity.OK, "Overall", "OK")
        else:
            self.line(Severity.ERR, "Overall", f"ERR (exit mask: {mask})")
