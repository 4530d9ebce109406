"""
Tests for the section orchestrators, run one at a time against a mock
upstream and a fake host.
"""

import pytest
from conftest import (
    DEFAULT_TOOLS,
    FF_ASSET_URL,
    FF_POLY_URL,
    FF_TAG,
    RUST_XZ_URL,
    make_host,
)

from updater_tester.adapters.mock import MockDownloader, MockRangeFetcher
from updater_tester.adapters.registry import DownloaderRegistry
from updater_tester.core.models import SectionId, Severity
from updater_tester.core.services.sections import (
    SectionContext,
    run_infra,
    run_package,
    run_toolchain,
)


@pytest.fixture
def ctx(settings, host, upstream, range_fetcher, tmp_path):
    return SectionContext(
        settings=settings,
        host=host,
        downloader=upstream,
        range_fetcher=range_fetcher,
        scratch_dir=tmp_path,
    )


def _check(outcome, label):
    """First check recorded under ``label``."""
    for c in outcome.checks:
        if c.label == label:
            return c
    raise AssertionError(f"no check labelled {label!r}: {[c.label for c in outcome.checks]}")


# ═══════════════════════════════════════════════════════════════════
#  Infra
# ═══════════════════════════════════════════════════════════════════


class TestInfraSection:
    def test_healthy(self, ctx, registry, upstream):
        outcome, downloader = run_infra(ctx, registry, [SectionId.TOOLCHAIN, SectionId.PACKAGE])
        assert outcome.severity is Severity.OK
        assert downloader is upstream
        assert ctx.downloader is upstream
        assert [p.target for p in outcome.probes] == [
            "github.com", "api.github.com", "static.rust-lang.org",
        ]

    def test_missing_base_tool_is_err(self, ctx, registry):
        ctx.host = make_host(DEFAULT_TOOLS - {"awk"})
        outcome, downloader = run_infra(ctx, registry, [SectionId.TOOLCHAIN])
        assert outcome.has_error
        assert _check(outcome, "Tool: awk").severity is Severity.ERR
        # a missing tool does not stop the run
        assert downloader is not None

    def test_missing_optional_tool_is_warn(self, ctx, registry):
        ctx.host = make_host(DEFAULT_TOOLS - {"wc"})
        outcome, _ = run_infra(ctx, registry, [SectionId.TOOLCHAIN])
        assert outcome.severity is Severity.WARN

    def test_shasum_fallback(self, ctx, registry):
        ctx.host = make_host((DEFAULT_TOOLS - {"sha256sum"}) | {"shasum"})
        outcome, _ = run_infra(ctx, registry, [])
        check = _check(outcome, "Tool: sha256sum")
        assert check.severity is Severity.WARN
        assert "shasum" in check.message

    def test_no_downloader(self, ctx):
        registry = DownloaderRegistry([
            MockDownloader("curl", available=False),
            MockDownloader("wget", available=False),
        ])
        outcome, downloader = run_infra(ctx, registry, [SectionId.TOOLCHAIN])
        assert downloader is None
        check = _check(outcome, "Downloader")
        assert check.severity is Severity.ERR
        assert check.message == "need curl/wget"
        assert outcome.probes == []

    def test_alternatives_listed(self, ctx, upstream):
        registry = DownloaderRegistry([upstream, MockDownloader("wget")])
        outcome, downloader = run_infra(ctx, registry, [])
        assert downloader is upstream
        assert _check(outcome, "Downloader alt").message == "wget available"

    def test_first_available_backend_is_selected(self, ctx):
        wget2 = MockDownloader("wget2")
        registry = DownloaderRegistry([
            MockDownloader("curl", available=False),
            wget2,
            MockDownloader("wget"),
        ])
        outcome, downloader = run_infra(ctx, registry, [])
        assert downloader is wget2
        assert ctx.downloader is wget2
        assert _check(outcome, "Downloader").message == "selected: wget2"
        alts = [c.message for c in outcome.checks if c.label == "Downloader alt"]
        assert alts == ["wget available"]

    def test_no_scratch_dir(self, ctx, registry, upstream):
        ctx.scratch_dir = None
        outcome, downloader = run_infra(ctx, registry, [], scratch_error="Permission denied")
        assert downloader is None
        check = _check(outcome, "Temp dir")
        assert check.severity is Severity.ERR
        assert "Permission denied" in check.message
        assert upstream.call_count == 0

    def test_updater_presence_only_for_selected(self, ctx, registry):
        ctx.host = make_host(DEFAULT_TOOLS - {"rust-stable-install", "update-fastfetch"})
        outcome, _ = run_infra(ctx, registry, [SectionId.PACKAGE])
        labels = [c.label for c in outcome.checks]
        assert "Fastfetch updater" in labels
        assert "Rust updater" not in labels
        assert _check(outcome, "Fastfetch updater").severity is Severity.WARN

    def test_internet_unreachable(self, ctx, registry, upstream, settings):
        upstream.set_status(settings.endpoints.internet["github.com"], "000")
        outcome, _ = run_infra(ctx, registry, [])
        assert _check(outcome, "Internet: github.com").severity is Severity.ERR


# ═══════════════════════════════════════════════════════════════════
#  Toolchain
# ═══════════════════════════════════════════════════════════════════


class TestToolchainSection:
    def test_healthy(self, ctx, tmp_path):
        outcome = run_toolchain(ctx)
        assert outcome.severity is Severity.OK
        assert {f.name: f.value for f in outcome.facts}["version"] == "1.80.0"
        assert _check(outcome, "Magic xz").severity is Severity.OK
        assert (tmp_path / "channel-rust-stable.toml").is_file()
        assert (tmp_path / "rust.asset.snip").is_file()

    def test_manifest_404(self, ctx, upstream, settings):
        upstream.set_status(settings.endpoints.rust_manifest, "404")
        outcome = run_toolchain(ctx)
        assert outcome.has_error
        assert _check(outcome, "Rust manifest").message == "HTTP 404"
        assert ("download", settings.endpoints.rust_manifest) not in upstream.call_log

    def test_manifest_redirect_is_not_enough(self, ctx, upstream, settings):
        upstream.set_status(settings.endpoints.rust_manifest, "301")
        assert run_toolchain(ctx).has_error

    def test_manifest_download_fails(self, ctx, upstream, settings):
        upstream.bodies.pop(settings.endpoints.rust_manifest)
        outcome = run_toolchain(ctx)
        assert _check(outcome, "Fetch manifest").severity is Severity.ERR

    def test_manifest_without_target(self, ctx, upstream, settings):
        upstream.set_body(settings.endpoints.rust_manifest, '[pkg.rust]\nversion = "1.80.0"\n')
        outcome = run_toolchain(ctx)
        assert outcome.has_error
        assert _check(outcome, "Manifest asset URL").severity is Severity.ERR
        assert _check(outcome, "Asset hash").message == "missing"

    def test_asset_unreachable(self, ctx, upstream):
        upstream.set_status(RUST_XZ_URL, "403")
        outcome = run_toolchain(ctx)
        assert _check(outcome, "Rust asset").severity is Severity.ERR

    def test_magic_mismatch_is_only_warn(self, ctx):
        ctx.range_fetcher = MockRangeFetcher({RUST_XZ_URL: b"<html><body>pro"})
        outcome = run_toolchain(ctx)
        assert outcome.severity is Severity.WARN
        assert _check(outcome, "Magic xz").severity is Severity.WARN

    def test_no_range_capability(self, ctx):
        ctx.range_fetcher = MockRangeFetcher(available=False)
        outcome = run_toolchain(ctx)
        assert outcome.severity is Severity.OK
        assert "skipped" in _check(outcome, "Range support").message

    def test_non_linux(self, ctx):
        ctx.host = make_host(system="Darwin")
        outcome = run_toolchain(ctx)
        assert _check(outcome, "OS").severity is Severity.ERR

    def test_unknown_arch_stops_before_download(self, ctx, upstream, settings):
        ctx.host = make_host(machine="sparc64")
        outcome = run_toolchain(ctx)
        assert _check(outcome, "Arch").severity is Severity.ERR
        assert ("download", settings.endpoints.rust_manifest) not in upstream.call_log

    def test_trash_without_trash_empty(self, ctx):
        ctx.host = make_host(DEFAULT_TOOLS | {"trash"})
        outcome = run_toolchain(ctx)
        assert _check(outcome, "trash-empty").severity is Severity.WARN


# ═══════════════════════════════════════════════════════════════════
#  Package
# ═══════════════════════════════════════════════════════════════════


class TestPackageSection:
    def test_healthy(self, ctx, tmp_path):
        outcome = run_package(ctx)
        assert outcome.severity is Severity.OK
        facts = {f.name: f for f in outcome.facts}
        assert facts["tag"].value == FF_TAG
        assert facts["asset"].value == FF_ASSET_URL
        assert facts["sha256"].source == "raw:nested"
        assert _check(outcome, "Release SHA").message == "64-hex (SHA256)"
        assert _check(outcome, "Magic deb").severity is Severity.OK
        assert (tmp_path / "fastfetch.release.html").is_file()

    def test_api_fallback_via_redirect(self, ctx, upstream, settings, release_json):
        ep = settings.endpoints
        upstream.set_status(ep.fastfetch_api_latest, "403")
        upstream.locations[ep.fastfetch_latest_page] = ep.fastfetch_release_page(FF_TAG)
        upstream.set_body(ep.fastfetch_api_tag(FF_TAG), release_json)

        outcome = run_package(ctx)
        assert outcome.severity is Severity.WARN   # API probe is best-effort
        assert not outcome.has_error
        tag = next(f for f in outcome.facts if f.name == "tag")
        assert tag.source == "redirect"
        assert any("falling back" in n for n in outcome.notes)
        api = _check(outcome, "Fastfetch API")
        assert api.severity is Severity.WARN
        assert api.message == "HTTP 403 (fallback via redirect possible)"

    def test_fallback_without_redirect(self, ctx, upstream, settings):
        upstream.set_status(settings.endpoints.fastfetch_api_latest, "000")
        outcome = run_package(ctx)
        assert _check(outcome, "Latest tag").severity is Severity.ERR

    def test_fallback_tag_record_missing(self, ctx, upstream, settings):
        ep = settings.endpoints
        upstream.set_status(ep.fastfetch_api_latest, "403")
        upstream.locations[ep.fastfetch_latest_page] = ep.fastfetch_release_page(FF_TAG)
        outcome = run_package(ctx)
        assert _check(outcome, "Tag JSON").severity is Severity.ERR

    def test_missing_asset_lists_seen(self, ctx):
        ctx.host = make_host(machine="riscv64")
        outcome = run_package(ctx)
        assert outcome.has_error
        assert "not found" in _check(outcome, "Asset URL").message
        assert any(
            n.startswith("Available .deb assets seen:") and "fastfetch-linux-amd64.deb" in n
            for n in outcome.notes
        )

    def test_polyfilled_missing_is_warn(self, ctx, upstream, settings, release_json):
        stripped = release_json.replace("fastfetch-linux-amd64-polyfilled.deb", "gone.deb")
        upstream.set_body(settings.endpoints.fastfetch_api_latest, stripped)
        outcome = run_package(ctx)
        assert outcome.severity is Severity.WARN
        assert "upstream stopped" in _check(outcome, "Asset poly").message

    def test_polyfilled_unreachable_is_warn(self, ctx, upstream):
        upstream.set_status(FF_POLY_URL, "404")
        outcome = run_package(ctx)
        assert outcome.severity is Severity.WARN

    def test_release_sha_missing(self, ctx, upstream, settings):
        upstream.set_body(settings.endpoints.fastfetch_release_page(FF_TAG), "<html>no sums</html>")
        outcome = run_package(ctx)
        assert _check(outcome, "Release SHA").message == "not found for asset"

    def test_asset_unreachable(self, ctx, upstream):
        upstream.set_status(FF_ASSET_URL, "404")
        assert run_package(ctx).has_error

    def test_local_fastfetch_reported(self, ctx):
        ctx.host = make_host(
            DEFAULT_TOOLS | {"fastfetch", "dpkg-query"},
            outputs={
                "fastfetch": "fastfetch 2.40.4 (x86_64)",
                "dpkg-query": "install ok installed 2.40.4",
            },
        )
        outcome = run_package(ctx)
        assert _check(outcome, "Local fastfetch").message == "fastfetch 2.40.4 (x86_64)"
        assert _check(outcome, "Installed fastfetch").message == "dpkg: 2.40.4"
