"""
Toolchain section — assumptions of ``rust-stable-install``.

Sequence:
    1. local tools and delete backend
    2. OS and target triple
    3. channel manifest: reachability, download, shape
    4. facts: version, asset URL (xz preferred), digest (xz preferred)
    5. asset: suffix, triple, reachability, digest shape
    6. best-effort magic bytes of the archive
"""

from __future__ import annotations

import logging

from updater_tester.core.models.check import SectionId
from updater_tester.core.models.facts import AssetDescriptor
from updater_tester.core.models.report import SectionOutcome
from updater_tester.core.services.classify import (
    classify_digest,
    classify_fact,
    classify_suffix,
)
from updater_tester.core.services.extractors.manifest import extract_manifest
from updater_tester.core.services.sections.base import SectionContext, SectionRunner
from updater_tester.core.services.signature import verify_signature

logger = logging.getLogger(__name__)

TITLE = "Rust checks"
MANIFEST_FILE = "channel-rust-stable.toml"
SNIPPET_FILE = "rust.asset.snip"
ARCHIVE_SUFFIXES = (".tar.xz", ".tar.gz")


def _check_local(run: SectionRunner) -> str:
    """Tools, delete backend, OS and triple; returns the triple or ``""``."""
    ctx = run.ctx
    host = ctx.host

    for t in ctx.settings.tools.rust:
        run.tool(f"Rust tool: {t}", t)

    has_trash = host.has("trash")
    if has_trash:
        run.ok("Delete backend", "trash available")
    else:
        run.ok("Delete backend", "trash missing (rm fallback expected)")

    if host.has("trash-empty"):
        run.ok("trash-empty", "available")
    elif has_trash:
        run.warn("trash-empty", "missing (trash present; incomplete backend)")
    else:
        run.ok("trash-empty", "n/a")

    run.tool("rm", "rm")

    if host.system == "Linux":
        run.ok("OS", host.system)
    else:
        run.err("OS", f"{host.system or 'unknown'} unsupported")

    triple = host.rust_triple
    if triple:
        run.ok("Triple", triple)
    else:
        run.err("Arch", f"{host.machine or 'unknown'} unsupported (no triple mapping)")
    return triple


def _load_manifest(run: SectionRunner, url: str) -> str | None:
    """Download the manifest into the scratch dir and check its shape."""
    path = run.ctx.scratch_path(MANIFEST_FILE)
    assert run.ctx.downloader is not None

    if run.ctx.downloader.fetch_to_path(url, path):
        run.ok("Fetch manifest", "ok")
    else:
        run.err("Fetch manifest", "failed")
        return None

    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.info("Cannot read %s: %s", path, e)
        text = ""
    if not text:
        run.err("Manifest file", "empty/missing after download")
        return None
    return text


def run_toolchain(ctx: SectionContext) -> SectionOutcome:
    """Validate the Rust channel manifest and the archive it points to."""
    run = SectionRunner(ctx, SectionId.TOOLCHAIN, TITLE)
    triple = _check_local(run)

    manifest_url = ctx.settings.endpoints.rust_manifest
    manifest = run.probe("Rust manifest", manifest_url, exact="200")
    if manifest.code != "200" or not triple:
        return run.finish()

    text = _load_manifest(run, manifest_url)
    if text is None:
        return run.finish()

    record = extract_manifest(text, triple)
    run.record(classify_fact(
        "Manifest shape", record.get("pkg_section"),
        show_value=False, missing_note="missing [pkg.rust]",
    ))
    run.record(classify_fact(
        "Manifest shape", record.get("version_key"),
        show_value=False, missing_note="missing version key",
    ))

    version = run.fact(record.get("version"))
    run.record(classify_fact("Manifest version", version))

    url = run.fact(record.get("url"))
    digest = run.fact(record.get("hash"))
    asset = AssetDescriptor.from_facts(url, digest)
    logger.debug("Manifest facts: %s", record.to_dict())

    run.record(classify_fact("Manifest asset URL", url, show_value=False))
    if url.present:
        run.record(classify_suffix("Asset suffix", asset.url, ARCHIVE_SUFFIXES, required=False))
        if triple in asset.url:
            run.ok("Asset triple", "present")
        else:
            run.warn("Asset triple", "not in URL")
        run.probe("Rust asset", asset.url)

    run.record(classify_digest("Asset hash", digest.value))

    if asset.verifiable:
        fetcher = ctx.range_fetcher
        if fetcher is not None and fetcher.available:
            run.ok("Range support", "available")
        else:
            run.ok("Range support", "unavailable (magic check skipped)")
        run.record(verify_signature(asset, fetcher, snippet_path=ctx.scratch_path(SNIPPET_FILE)))

    return run.finish()
