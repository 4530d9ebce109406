"""Adapters — bindings to the local HTTP tools.

Public re-exports for convenient access.
"""

from updater_tester.adapters.base import Downloader, RangeFetcher, is_reachable
from updater_tester.adapters.mock import MockDownloader, MockRangeFetcher
from updater_tester.adapters.registry import DownloaderRegistry, default_range_fetcher

__all__ = [
    "Downloader",
    "DownloaderRegistry",
    "MockDownloader",
    "MockRangeFetcher",
    "RangeFetcher",
    "default_range_fetcher",
    "is_reachable",
]
