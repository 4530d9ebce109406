"""
Shared test fixtures and configuration.

No test touches the network: sections run against MockDownloader /
MockRangeFetcher and a FakeHost with a controlled PATH.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from updater_tester.adapters.mock import MockDownloader, MockRangeFetcher
from updater_tester.adapters.registry import DownloaderRegistry
from updater_tester.core.models.settings import TesterSettings
from updater_tester.core.services.host import Host

FIXTURES = Path(__file__).parent / "fixtures"

TRIPLE = "x86_64-unknown-linux-gnu"
RUST_XZ_URL = "https://static.rust-lang.org/dist/2024-07-25/rust-1.80.0-x86_64-unknown-linux-gnu.tar.xz"
RUST_GZ_URL = "https://static.rust-lang.org/dist/2024-07-25/rust-1.80.0-x86_64-unknown-linux-gnu.tar.gz"
RUST_XZ_HASH = "fedcba9876543210" * 4
RUST_GZ_HASH = "0123456789abcdef" * 4

FF_TAG = "2.40.4"
FF_DOWNLOAD = f"https://github.com/fastfetch-cli/fastfetch/releases/download/{FF_TAG}"
FF_ASSET_URL = f"{FF_DOWNLOAD}/fastfetch-linux-amd64.deb"
FF_POLY_URL = f"{FF_DOWNLOAD}/fastfetch-linux-amd64-polyfilled.deb"
FF_SHA = "4f7d2b0c9e1a3f5d7b9c1e3a5f7d9b1c3e5a7f9d1b3c5e7a9f1d3b5c7e9a1f3d"

XZ_SNIPPET = bytes.fromhex("fd377a585a00") + b"\x00\x04\xe6\xd6\xb4\x46\x02\x00\x21\x01"
DEB_SNIPPET = b"!<arch>\ndebian-b"

DEFAULT_TOOLS = frozenset({
    # infra
    "uname", "awk", "grep", "sed", "cat", "head", "cut", "rm", "mkdir",
    "tr", "wc", "sha256sum", "curl",
    "rust-stable-install", "update-fastfetch",
    # toolchain
    "bash", "id", "tar",
    # package
    "dpkg",
})


def on_path(tools: Iterable[str]) -> Callable[[str], str | None]:
    """A ``shutil.which`` stand-in that finds exactly ``tools``."""
    names = frozenset(tools)
    return lambda tool: f"/usr/bin/{tool}" if tool in names else None


@dataclass
class FakeHost(Host):
    """Host with canned first-line outputs instead of real subprocesses."""

    outputs: dict[str, str] = field(default_factory=dict)

    def first_line(self, argv: list[str]) -> str:
        return self.outputs.get(argv[0], "")


def make_host(
    tools: Iterable[str] = DEFAULT_TOOLS,
    system: str = "Linux",
    machine: str = "x86_64",
    outputs: dict[str, str] | None = None,
) -> FakeHost:
    return FakeHost(
        which=on_path(tools),
        system=system,
        machine=machine,
        outputs=outputs or {},
    )


def read_fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the test fixtures directory."""
    return FIXTURES


@pytest.fixture
def manifest_text() -> str:
    return read_fixture("channel-rust-stable.toml")


@pytest.fixture
def release_json() -> str:
    return read_fixture("release_latest.json")


@pytest.fixture
def release_html() -> str:
    return read_fixture("release_page.html")


@pytest.fixture
def settings() -> TesterSettings:
    return TesterSettings()


@pytest.fixture
def host() -> FakeHost:
    return make_host()


@pytest.fixture
def upstream(settings: TesterSettings, manifest_text, release_json, release_html) -> MockDownloader:
    """A mock downloader serving a healthy upstream."""
    ep = settings.endpoints
    mock = MockDownloader(adapter_name="curl")
    for url in ep.internet.values():
        mock.set_status(url, "200")
    mock.set_body(ep.rust_manifest, manifest_text)
    mock.set_status(RUST_XZ_URL, "200")
    mock.set_body(ep.fastfetch_api_latest, release_json)
    mock.set_status(FF_ASSET_URL, "302")
    mock.set_status(FF_POLY_URL, "302")
    mock.set_body(ep.fastfetch_release_page(FF_TAG), release_html)
    return mock


@pytest.fixture
def registry(upstream: MockDownloader) -> DownloaderRegistry:
    return DownloaderRegistry([upstream])


@pytest.fixture
def range_fetcher() -> MockRangeFetcher:
    return MockRangeFetcher({RUST_XZ_URL: XZ_SNIPPET, FF_ASSET_URL: DEB_SNIPPET})
