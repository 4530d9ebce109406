"""
Run use case — execute the selected sections and assemble the report.

This is the top-level orchestrator: it creates the scratch directory,
runs the infra section, selects the downloader, runs the toolchain and
package sections strictly in sequence, and returns the RunReport. The
scratch directory is removed on every exit path, exceptions included.
"""

from __future__ import annotations

import logging
import tempfile
from contextlib import ExitStack
from pathlib import Path

from updater_tester.adapters.base import RangeFetcher
from updater_tester.adapters.registry import DownloaderRegistry, default_range_fetcher
from updater_tester.core.models.check import SectionId
from updater_tester.core.models.report import RunReport
from updater_tester.core.models.settings import TesterSettings
from updater_tester.core.services.host import Host
from updater_tester.core.services.sections.base import SectionContext, SectionListener
from updater_tester.core.services.sections.infra import run_infra
from updater_tester.core.services.sections.package import run_package
from updater_tester.core.services.sections.toolchain import run_toolchain

logger = logging.getLogger(__name__)

SCRATCH_PREFIX = "updater-tester."

ALL_SECTIONS: list[SectionId] = [SectionId.TOOLCHAIN, SectionId.PACKAGE]

_SECTION_RUNNERS = {
    SectionId.TOOLCHAIN: run_toolchain,
    SectionId.PACKAGE: run_package,
}


def run_tester(
    selected: list[SectionId] | None = None,
    settings: TesterSettings | None = None,
    *,
    registry: DownloaderRegistry | None = None,
    range_fetcher: RangeFetcher | None = None,
    host: Host | None = None,
    listener: SectionListener | None = None,
    tmp_root: Path | None = None,
) -> RunReport:
    """Run every selected section once and fold the results.

    Args:
        selected: Subject sections to run (infra always runs).
            None = toolchain and package.
        settings: Endpoints, timeouts and tool lists.
        registry: Downloader backends; default is curl > wget2 > wget.
        range_fetcher: Byte-range capability; default is curl.
        host: Local machine probe.
        listener: Receives checks as they are recorded.
        tmp_root: Parent of the scratch directory (default: system temp).

    Returns:
        RunReport; ``exit_mask`` is the process exit status.
    """
    settings = settings or TesterSettings()
    selected = list(selected) if selected is not None else list(ALL_SECTIONS)
    registry = registry or DownloaderRegistry.default(settings.timeouts)
    if range_fetcher is None:
        range_fetcher = default_range_fetcher(settings.timeouts)

    report = RunReport(selected=selected)
    ctx = SectionContext(
        settings=settings,
        host=host or Host(),
        range_fetcher=range_fetcher,
        listener=listener,
    )

    with ExitStack() as stack:
        scratch_error = ""
        try:
            scratch = stack.enter_context(
                tempfile.TemporaryDirectory(prefix=SCRATCH_PREFIX, dir=tmp_root)
            )
            ctx.scratch_dir = Path(scratch)
            report.scratch_dir = scratch
            logger.debug("Scratch dir: %s", scratch)
        except OSError as e:
            scratch_error = str(e)
            logger.warning("Cannot create scratch dir: %s", e)

        infra, downloader = run_infra(ctx, registry, selected, scratch_error=scratch_error)
        report.add(infra)

        if downloader is None:
            logger.warning(
                "Infra checks failed; skipping %s",
                ", ".join(str(s) for s in report.skipped) or "nothing",
            )
            return report

        for section in selected:
            report.add(_SECTION_RUNNERS[section](ctx))

    logger.info("Run finished with exit mask %d", report.exit_mask)
    return report
