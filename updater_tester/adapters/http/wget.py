"""
wget / wget2 backends — fallbacks when curl is not installed.

Both tools share the same flags for everything we need. Server headers
are printed to stderr under ``--server-response``.
"""

from __future__ import annotations

from pathlib import Path

from updater_tester.adapters.base import Downloader, parse_status_line
from updater_tester.adapters.shell.command import CommandResult


class WgetDownloader(Downloader):
    """Downloader backed by GNU ``wget``."""

    binary = "wget"

    def _bounds(self, total: int) -> list[str]:
        return [
            "--tries=1",
            f"--connect-timeout={self.timeouts.connect}",
            f"--timeout={total}",
        ]

    def probe_argv(self, url: str) -> list[str]:
        return [
            self.binary, "-q", "--spider", "--server-response",
            *self._bounds(self.timeouts.probe),
            url,
        ]

    def headers_argv(self, url: str) -> list[str]:
        return [
            self.binary, "-q", "--spider", "--server-response", "--max-redirect=0",
            *self._bounds(self.timeouts.probe),
            url,
        ]

    def fetch_argv(self, url: str) -> list[str]:
        return [
            self.binary, "-qO-", "--https-only",
            *self._bounds(self.timeouts.fetch),
            url,
        ]

    def download_argv(self, url: str, path: Path) -> list[str]:
        return [
            self.binary, "-q", "--https-only",
            *self._bounds(self.timeouts.download),
            "-O", str(path),
            url,
        ]

    def parse_probe(self, result: CommandResult) -> str:
        # --spider exits non-zero on 4xx/5xx but still prints the status
        return parse_status_line(result.combined_text)


class Wget2Downloader(WgetDownloader):
    """Downloader backed by ``wget2``."""

    binary = "wget2"
