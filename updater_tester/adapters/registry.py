"""
Downloader registry — ranked lookup of the available HTTP backends.

Selection is static for the run: the first available backend in rank
order wins. The range capability is resolved separately because it does
not depend on which downloader was selected.
"""

from __future__ import annotations

import logging

from updater_tester.adapters.base import Downloader, RangeFetcher
from updater_tester.adapters.http.curl import CurlDownloader, CurlRangeFetcher
from updater_tester.adapters.http.wget import Wget2Downloader, WgetDownloader
from updater_tester.core.models.settings import Timeouts

logger = logging.getLogger(__name__)

# Ranked: curl > wget2 > wget (same preference as the updaters)
DOWNLOADER_RANKING: tuple[type[Downloader], ...] = (
    CurlDownloader,
    Wget2Downloader,
    WgetDownloader,
)


class DownloaderRegistry:
    """Ranked registry of downloader backends.

    Features:
        - Hold backends in preference order
        - Query availability of every backend
        - Select the first available backend once per run
    """

    def __init__(self, downloaders: list[Downloader] | None = None):
        self._downloaders: list[Downloader] = list(downloaders or [])

    @classmethod
    def default(cls, timeouts: Timeouts | None = None) -> DownloaderRegistry:
        """Registry holding every known backend, in rank order."""
        return cls([klass(timeouts) for klass in DOWNLOADER_RANKING])

    def list_downloaders(self) -> list[str]:
        return [d.name for d in self._downloaders]

    def available(self) -> list[Downloader]:
        """Available backends, best first."""
        found = []
        for d in self._downloaders:
            try:
                ok = d.is_available()
            except Exception:
                logger.debug("Availability check failed for %s", d.name, exc_info=True)
                ok = False
            if ok:
                found.append(d)
        return found

    def select(self) -> Downloader | None:
        """The best available backend, or None when there is none."""
        found = self.available()
        if not found:
            logger.warning("No downloader available (tried %s)", ", ".join(self.list_downloaders()))
            return None
        logger.info("Selected downloader: %s", found[0].name)
        return found[0]


def default_range_fetcher(timeouts: Timeouts | None = None) -> RangeFetcher:
    """The range capability used for signature checks."""
    return CurlRangeFetcher(timeouts)
