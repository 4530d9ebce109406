"""
Package section — assumptions of ``update-fastfetch``.

Sequence:
    1. dpkg tooling and arch token
    2. latest release record: API first, ``/releases/latest`` redirect
       plus tag record as fallback
    3. plain .deb asset (required) and polyfilled .deb asset (optional)
    4. release page: reachability and published SHA-256
    5. best-effort magic bytes of the .deb
    6. local fastfetch / dpkg information
"""

from __future__ import annotations

import logging

from updater_tester.core.models.check import SectionId
from updater_tester.core.models.facts import AssetDescriptor, Fact
from updater_tester.core.models.report import SectionOutcome
from updater_tester.core.services.classify import (
    classify_digest,
    classify_fact,
    classify_suffix,
)
from updater_tester.core.services.extractors.release_page import find_release_digest
from updater_tester.core.services.extractors.release_record import (
    extract_release_record,
    list_asset_names,
    tag_from_location,
)
from updater_tester.core.services.host import describe_tool_version, installed_deb_version
from updater_tester.core.services.sections.base import SectionContext, SectionRunner
from updater_tester.core.services.signature import verify_signature

logger = logging.getLogger(__name__)

TITLE = "Fastfetch checks"
PACKAGE = "fastfetch"
SNIPPET_FILE = "fastfetch.deb.snip"
RELEASE_PAGE_FILE = "fastfetch.release.html"


def asset_names(arch: str) -> dict[str, str]:
    """Fact name → .deb filename for ``arch``."""
    return {
        "asset": f"fastfetch-linux-{arch}.deb",
        "asset_poly": f"fastfetch-linux-{arch}-polyfilled.deb",
    }


def _fetch_text(run: SectionRunner, url: str) -> str:
    assert run.ctx.downloader is not None
    body = run.ctx.downloader.fetch_body(url)
    return body.decode("utf-8", errors="replace") if body else ""


def _latest_release(run: SectionRunner) -> tuple[str, str]:
    """Release record text and tag, via the API or the redirect fallback."""
    ctx = run.ctx
    endpoints = ctx.settings.endpoints
    assert ctx.downloader is not None

    api = run.probe(
        "Fastfetch API", endpoints.fastfetch_api_latest, exact="200", required=False,
        failure_note="fallback via redirect possible",
    )
    record_text = ""
    if api.code == "200":
        record_text = _fetch_text(run, endpoints.fastfetch_api_latest)
        if record_text:
            run.ok("Fetch API JSON", "ok")
        else:
            run.warn("Fetch API JSON", "empty/failed")
    else:
        run.note("API unavailable; falling back to the releases/latest redirect")

    if record_text:
        tag = run.fact(extract_release_record(record_text).get("tag"))
        run.record(classify_fact("Latest tag", tag, missing_note="missing in JSON"))
        return record_text, tag.value

    location = ctx.downloader.redirect_location(endpoints.fastfetch_latest_page)
    tag_value = tag_from_location(location)
    if not tag_value:
        run.err("Latest tag", "fallback could not parse redirect")
        return "", ""
    run.fact(Fact(name="tag", value=tag_value, source="redirect"))
    run.ok("Latest tag", f"redirect -> {tag_value}")

    tag_url = endpoints.fastfetch_api_tag(tag_value)
    tag_probe = run.probe("Tag JSON", tag_url, exact="200")
    if tag_probe.code != "200":
        return "", tag_value
    record_text = _fetch_text(run, tag_url)
    if record_text:
        run.ok("Fetch tag JSON", "ok")
    else:
        run.err("Fetch tag JSON", "empty/failed")
    return record_text, tag_value


def _release_digest(run: SectionRunner, tag: str, names: dict[str, str], arch: str) -> None:
    """Probe the release page and find the published digest of the asset."""
    ctx = run.ctx
    page_url = ctx.settings.endpoints.fastfetch_release_page(tag)
    page = run.probe("Release page", page_url)
    if page.code != "200":
        return

    html = _fetch_text(run, page_url)
    if not html:
        run.err("Fetch release HTML", "failed")
        return
    run.ok("Fetch release HTML", "ok")
    try:
        ctx.scratch_path(RELEASE_PAGE_FILE).write_text(html, encoding="utf-8")
    except OSError as e:
        logger.info("Cannot keep release page copy: %s", e)

    digest = run.fact(find_release_digest(html, names["asset"], f"fastfetch-linux-{arch}"))
    if not digest.present:
        run.err("Release SHA", "not found for asset")
        return
    logger.debug("Release SHA matched via %s", digest.source)
    run.record(classify_digest("Release SHA", digest.value))


def _local_info(run: SectionRunner) -> None:
    host = run.ctx.host
    if host.has(PACKAGE):
        line = describe_tool_version(PACKAGE, host)
        if line == "present but failed to run":
            run.warn("Local fastfetch", "present but version query failed")
        else:
            run.ok("Local fastfetch", line)
    else:
        run.ok("Local fastfetch", "not in PATH")

    if host.has("dpkg-query"):
        version = installed_deb_version(PACKAGE, host)
        if version is None:
            run.ok("Installed fastfetch", "not installed via dpkg")
        elif version:
            run.ok("Installed fastfetch", f"dpkg: {version}")
        else:
            run.ok("Installed fastfetch", "installed (version read failed)")


def run_package(ctx: SectionContext) -> SectionOutcome:
    """Validate the fastfetch release record, assets and release page."""
    run = SectionRunner(ctx, SectionId.PACKAGE, TITLE)

    run.tool(
        "Fastfetch tool: dpkg", "dpkg",
        required=False, missing_note="missing (install step may fail)",
    )
    run.tool(
        "Fastfetch tool: dpkg-query", "dpkg-query",
        required=False, fallback="package version checks skipped",
    )

    arch = ctx.host.deb_arch
    if arch:
        run.ok("Arch token", arch)
    else:
        run.err("Arch", f"{ctx.host.machine or 'unknown'} unsupported")

    record_text, tag = _latest_release(run)

    if record_text and arch:
        names = asset_names(arch)
        record = extract_release_record(record_text, names)

        url = run.fact(record.get("asset"))
        if url.present:
            run.ok("Asset URL", "parsed (plain)")
            run.record(classify_suffix("Asset suffix", url.value, (".deb",)))
            run.probe("Asset", url.value, target="Fastfetch asset")
        else:
            run.err("Asset URL", f"asset '{names['asset']}' not found")
            seen = list_asset_names(record_text, ".deb")
            run.note("Available .deb assets seen: " + (", ".join(seen) if seen else "none"))

        poly = run.fact(record.get("asset_poly"))
        if poly.present:
            run.ok("Asset URL", "parsed (polyfilled)")
            run.probe("Asset poly", poly.value, target="Fastfetch asset poly", required=False)
        else:
            run.warn("Asset poly", "not present (OK if upstream stopped publishing)")

        if tag:
            _release_digest(run, tag, names, arch)

        if url.present:
            asset = AssetDescriptor.from_facts(url)
            run.record(verify_signature(asset, ctx.range_fetcher, snippet_path=ctx.scratch_path(SNIPPET_FILE)))

    _local_info(run)
    return run.finish()
