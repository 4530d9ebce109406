"""
Mock transport — universal test double for downloader operations.

Serves canned status codes, bodies and redirect targets keyed by URL
without touching the network. Unknown URLs behave like unreachable
hosts: status ``"000"``, no body, no redirect.
"""

from __future__ import annotations

from pathlib import Path

from updater_tester.adapters.base import Downloader, RangeFetcher
from updater_tester.adapters.shell.command import CommandResult
from updater_tester.core.models.check import UNKNOWN_STATUS


class MockDownloader(Downloader):
    """Canned-response downloader for tests.

    Every operation is appended to ``call_log`` as ``(operation, url)``.
    """

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        statuses: dict[str, str] | None = None,
        bodies: dict[str, bytes | str] | None = None,
        locations: dict[str, str] | None = None,
    ):
        super().__init__()
        self._name = adapter_name
        self._available = available
        self.statuses: dict[str, str] = dict(statuses or {})
        self.bodies: dict[str, bytes] = {
            url: body.encode() if isinstance(body, str) else body
            for url, body in (bodies or {}).items()
        }
        self.locations: dict[str, str] = dict(locations or {})
        self.call_log: list[tuple[str, str]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_count(self) -> int:
        return len(self.call_log)

    def is_available(self) -> bool:
        return self._available

    def set_status(self, url: str, code: str) -> None:
        self.statuses[url] = code

    def set_body(self, url: str, body: bytes | str, code: str = "200") -> None:
        """Serve ``body`` for ``url`` and make it answer ``code``."""
        self.bodies[url] = body.encode() if isinstance(body, str) else body
        self.statuses.setdefault(url, code)

    def reset(self) -> None:
        self.call_log.clear()

    # argv builders are never executed by the mock
    def probe_argv(self, url: str) -> list[str]:
        return ["mock", "probe", url]

    def headers_argv(self, url: str) -> list[str]:
        return ["mock", "headers", url]

    def fetch_argv(self, url: str) -> list[str]:
        return ["mock", "fetch", url]

    def download_argv(self, url: str, path: Path) -> list[str]:
        return ["mock", "download", url, str(path)]

    def parse_probe(self, result: CommandResult) -> str:
        return UNKNOWN_STATUS

    def probe_status(self, url: str) -> str:
        self.call_log.append(("probe", url))
        return self.statuses.get(url, UNKNOWN_STATUS)

    def redirect_location(self, url: str) -> str:
        self.call_log.append(("location", url))
        return self.locations.get(url, "")

    def fetch_body(self, url: str) -> bytes | None:
        self.call_log.append(("fetch", url))
        return self.bodies.get(url)

    def fetch_to_path(self, url: str, path: Path) -> bool:
        self.call_log.append(("download", url))
        body = self.bodies.get(url)
        if body is None:
            return False
        path.write_bytes(body)
        return True


class MockRangeFetcher(RangeFetcher):
    """Canned byte-range snippets for tests."""

    def __init__(
        self,
        snippets: dict[str, bytes] | None = None,
        available: bool = True,
    ):
        self.snippets: dict[str, bytes] = dict(snippets or {})
        self._available = available
        self.call_log: list[str] = []

    @property
    def available(self) -> bool:
        return self._available

    def fetch_range(
        self,
        url: str,
        start: int,
        end: int,
        dest: Path | None = None,
    ) -> bytes | None:
        self.call_log.append(url)
        if not self._available:
            return None
        data = self.snippets.get(url)
        if data is None:
            return None
        snippet = data[start : end + 1]
        if dest is not None:
            dest.write_bytes(snippet)
        return snippet
