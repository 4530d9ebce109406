"""
Adapter base — the transport contract between engine and HTTP tools.

The engine only talks to downloaders through this protocol, never
directly to curl or wget. Backends differ only in how they spell a
request on the command line; running the command and interpreting the
result lives here, once.

Adapters NEVER raise. A failed probe is the sentinel status ``"000"``,
a failed fetch is ``None`` / ``False``.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path

from updater_tester.adapters.shell.command import (
    TIMEOUT_GRACE_S,
    CommandResult,
    run_command,
    tool_available,
)
from updater_tester.core.models.check import UNKNOWN_STATUS
from updater_tester.core.models.settings import Timeouts

logger = logging.getLogger(__name__)

_STATUS_RE = re.compile(r"^\d{3}$")
_SERVER_STATUS_RE = re.compile(r"^\s*HTTP/[0-9.]+\s+(\d{3})", re.MULTILINE)
_LOCATION_RE = re.compile(r"^\s*location:\s*(\S+)", re.IGNORECASE | re.MULTILINE)


def is_reachable(code: str) -> bool:
    """2xx and 3xx are reachable; everything else (incl. ``"000"``) is not."""
    return bool(_STATUS_RE.match(code)) and code[0] in "23"


def parse_status_line(output: str) -> str:
    """Last ``HTTP/x.y NNN`` status in a server-response dump, or ``"000"``.

    The last status is the one served after any redirects were followed.
    """
    codes = _SERVER_STATUS_RE.findall(output)
    return codes[-1] if codes else UNKNOWN_STATUS


def parse_location(output: str) -> str:
    """Last ``Location:`` header value in a header dump, or ``""``."""
    locations = _LOCATION_RE.findall(output)
    return locations[-1].strip() if locations else ""


class Downloader(ABC):
    """Abstract base class for interchangeable HTTP-capable tools.

    To add a backend:
        1. Subclass Downloader
        2. Set ``binary`` and implement the ``*_argv`` builders
        3. Rank it in ``adapters.registry.DOWNLOADER_RANKING``
    """

    binary: str = ""

    def __init__(self, timeouts: Timeouts | None = None):
        self.timeouts = timeouts or Timeouts()

    @property
    def name(self) -> str:
        """The backend identifier (e.g., 'curl', 'wget2')."""
        return self.binary

    def is_available(self) -> bool:
        """Check if the underlying tool is on PATH. Fast, never raises."""
        return tool_available(self.binary)

    # ── argv builders (per backend) ──────────────────────────────

    @abstractmethod
    def probe_argv(self, url: str) -> list[str]:
        """Header-only request that follows redirects."""

    @abstractmethod
    def headers_argv(self, url: str) -> list[str]:
        """Header-only request that does NOT follow redirects."""

    @abstractmethod
    def fetch_argv(self, url: str) -> list[str]:
        """Body to stdout."""

    @abstractmethod
    def download_argv(self, url: str, path: Path) -> list[str]:
        """Body to ``path``."""

    @abstractmethod
    def parse_probe(self, result: CommandResult) -> str:
        """Extract the status code from a probe command result."""

    # ── Operations ───────────────────────────────────────────────

    def _run(self, argv: list[str], total: int) -> CommandResult:
        return run_command(argv, timeout=total + TIMEOUT_GRACE_S)

    def probe_status(self, url: str) -> str:
        """HEAD ``url`` and return its 3-digit status or ``"000"``."""
        result = self._run(self.probe_argv(url), self.timeouts.probe)
        if result.error:
            logger.info("Probe %s failed: %s", url, result.error)
            return UNKNOWN_STATUS
        code = self.parse_probe(result)
        if not _STATUS_RE.match(code):
            return UNKNOWN_STATUS
        logger.debug("Probe %s -> %s", url, code)
        return code

    def redirect_location(self, url: str) -> str:
        """Target of the redirect served for ``url``, without following it."""
        result = self._run(self.headers_argv(url), self.timeouts.probe)
        if result.error:
            logger.info("Header request %s failed: %s", url, result.error)
            return ""
        return parse_location(result.combined_text)

    def fetch_body(self, url: str) -> bytes | None:
        """GET ``url`` into memory; ``None`` on any failure."""
        result = self._run(self.fetch_argv(url), self.timeouts.fetch)
        if not result.ok:
            logger.info("Fetch %s failed: %s", url, result.error or result.returncode)
            return None
        return result.stdout

    def fetch_to_path(self, url: str, path: Path) -> bool:
        """GET ``url`` into ``path``; False on any failure."""
        result = self._run(self.download_argv(url, path), self.timeouts.download)
        if not result.ok:
            logger.info("Download %s failed: %s", url, result.error or result.returncode)
            return False
        return path.is_file()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class RangeFetcher(ABC):
    """Independent byte-range capability.

    Not every downloader implements ``Range:`` reliably, so this is a
    separate capability queried on its own. Unavailable means the check
    is skipped, never that it failed.
    """

    @property
    @abstractmethod
    def available(self) -> bool:
        """Whether byte-range requests can be issued at all."""

    @abstractmethod
    def fetch_range(
        self,
        url: str,
        start: int,
        end: int,
        dest: Path | None = None,
    ) -> bytes | None:
        """Bytes ``start..end`` (inclusive) of ``url``; ``None`` on failure."""
