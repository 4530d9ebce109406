"""HTTP downloader backends (curl, wget2, wget) and the range capability."""

from updater_tester.adapters.http.curl import CurlDownloader, CurlRangeFetcher
from updater_tester.adapters.http.wget import Wget2Downloader, WgetDownloader

__all__ = [
    "CurlDownloader",
    "CurlRangeFetcher",
    "Wget2Downloader",
    "WgetDownloader",
]
