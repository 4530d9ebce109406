"""Section orchestrators — one independently scored group of checks each."""

from updater_tester.core.services.sections.base import (
    SectionContext,
    SectionListener,
    SectionRunner,
)
from updater_tester.core.services.sections.infra import run_infra
from updater_tester.core.services.sections.package import run_package
from updater_tester.core.services.sections.toolchain import run_toolchain

__all__ = [
    "SectionContext",
    "SectionListener",
    "SectionRunner",
    "run_infra",
    "run_package",
    "run_toolchain",
]
