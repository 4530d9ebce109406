"""
Self/infra section — local prerequisites, scratch space, downloader
selection and baseline connectivity.

Failures here short-circuit the rest of the run when they leave the
engine without a scratch directory or without any downloader.
"""

from __future__ import annotations

import logging
import tempfile

from updater_tester.adapters.base import Downloader
from updater_tester.adapters.registry import DownloaderRegistry
from updater_tester.core.models.check import SectionId
from updater_tester.core.models.report import SectionOutcome
from updater_tester.core.services.sections.base import SectionContext, SectionRunner

logger = logging.getLogger(__name__)

TITLE = "Self checks"


def run_infra(
    ctx: SectionContext,
    registry: DownloaderRegistry,
    selected: list[SectionId],
    *,
    scratch_error: str = "",
) -> tuple[SectionOutcome, Downloader | None]:
    """Run the self/infra checks.

    Args:
        ctx: Section context; ``scratch_dir`` is None when the scratch
            directory could not be created.
        registry: Ranked downloader backends.
        selected: Sections chosen on the command line.
        scratch_error: Why the scratch directory is missing, if it is.

    Returns:
        ``(outcome, downloader)``; downloader is None when no backend is
        available or when the run cannot continue.
    """
    run = SectionRunner(ctx, SectionId.INFRA, TITLE)
    tools = ctx.settings.tools

    # Core tools the updaters use throughout
    for t in tools.base:
        run.tool(f"Tool: {t}", t)

    for t in tools.optional:
        run.tool(
            f"Tool: {t}", t,
            required=False, missing_note="missing (some checks may be skipped)",
        )

    # The magic check reads bytes itself; od only matters to the updaters
    run.tool("Tool: od", "od", required=False, fallback="magic bytes read in-process")

    if ctx.host.has("sha256sum"):
        run.ok("Tool: sha256sum", "available")
    elif ctx.host.has("shasum"):
        run.warn("Tool: sha256sum", "missing (fallback: shasum -a 256 available)")
    else:
        run.warn("Tool: sha256sum", "missing (hash verification may fail)")

    if ctx.scratch_dir is None:
        root = tempfile.gettempdir()
        run.err("Temp dir", f"failed under {root}" + (f": {scratch_error}" if scratch_error else ""))
        return run.finish(), None
    run.ok("Temp dir", str(ctx.scratch_dir))

    downloader = registry.select()
    if downloader is None:
        run.err("Downloader", "need " + "/".join(registry.list_downloaders()))
        return run.finish(), None
    run.ok("Downloader", f"selected: {downloader.name}")
    for alt in registry.available():
        if alt is not downloader:
            run.ok("Downloader alt", f"{alt.name} available")

    if SectionId.TOOLCHAIN in selected:
        run.tool(
            "Rust updater", tools.rust_updater,
            required=False, missing_note=f"not in PATH: {tools.rust_updater}",
        )
    if SectionId.PACKAGE in selected:
        run.tool(
            "Fastfetch updater", tools.fastfetch_updater,
            required=False, missing_note=f"not in PATH: {tools.fastfetch_updater}",
        )

    ctx.downloader = downloader
    for host, url in ctx.settings.endpoints.internet.items():
        run.probe(f"Internet: {host}", url, target=host)

    return run.finish(), downloader

