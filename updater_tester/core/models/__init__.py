"""
Domain models for the tester.

All models are re-exported here for convenient access:

    from updater_tester.core.models import Severity, Fact, RunReport
"""

from updater_tester.core.models.check import (
    UNKNOWN_STATUS,
    CheckResult,
    ProbeResult,
    SectionId,
    Severity,
)
from updater_tester.core.models.facts import (
    AssetDescriptor,
    AssetFormat,
    ExtractionRecord,
    Fact,
    detect_format,
)
from updater_tester.core.models.report import RunReport, SectionOutcome, fold_exit_mask
from updater_tester.core.models.settings import Endpoints, TesterSettings, Timeouts, ToolLists

__all__ = [
    # check.py
    "CheckResult",
    "ProbeResult",
    "SectionId",
    "Severity",
    "UNKNOWN_STATUS",
    # facts.py
    "AssetDescriptor",
    "AssetFormat",
    "ExtractionRecord",
    "Fact",
    "detect_format",
    # report.py
    "RunReport",
    "SectionOutcome",
    "fold_exit_mask",
    # settings.py
    "Endpoints",
    "TesterSettings",
    "Timeouts",
    "ToolLists",
]
