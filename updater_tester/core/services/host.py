"""
Host probing — local tools, platform identity and installed versions.

Read-only probes: PATH lookups, ``uname``-equivalents and ``--version``
commands. The Host object is injectable so sections can be exercised
against a fake machine in tests.
"""

from __future__ import annotations

import logging
import platform
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field

from updater_tester.adapters.shell.command import run_command

logger = logging.getLogger(__name__)

# uname -m → Rust target triple used by rust-stable-install
RUST_TRIPLES: dict[str, str] = {
    "x86_64": "x86_64-unknown-linux-gnu",
    "amd64": "x86_64-unknown-linux-gnu",
    "aarch64": "aarch64-unknown-linux-gnu",
    "arm64": "aarch64-unknown-linux-gnu",
    "i686": "i686-unknown-linux-gnu",
    "i386": "i686-unknown-linux-gnu",
    "armv7l": "armv7-unknown-linux-gnueabihf",
    "armv7": "armv7-unknown-linux-gnueabihf",
    "armhf": "armv7-unknown-linux-gnueabihf",
}

# uname -m → fastfetch .deb asset arch token
DEB_ARCH_TOKENS: dict[str, str] = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "aarch64",
    "arm64": "aarch64",
    "armv7l": "armv7l",
    "armv7": "armv7l",
    "armhf": "armv7l",
    "riscv64": "riscv64",
    "i686": "i686",
    "i386": "i686",
}

VERSION_COMMANDS: dict[str, list[str]] = {
    "rustc": ["rustc", "--version"],
    "cargo": ["cargo", "--version"],
    "fastfetch": ["fastfetch", "--version"],
}

_LOCAL_TIMEOUT_S = 10


@dataclass
class Host:
    """The machine the updaters would run on."""

    which: Callable[[str], str | None] = shutil.which
    system: str = field(default_factory=platform.system)
    machine: str = field(default_factory=platform.machine)

    def has(self, tool: str) -> bool:
        return self.which(tool) is not None

    @property
    def rust_triple(self) -> str:
        return RUST_TRIPLES.get(self.machine, "")

    @property
    def deb_arch(self) -> str:
        return DEB_ARCH_TOKENS.get(self.machine, "")

    def first_line(self, argv: list[str]) -> str:
        """First non-empty output line of ``argv``, ``""`` on failure."""
        result = run_command(argv, timeout=_LOCAL_TIMEOUT_S)
        if not result.ok:
            return ""
        for line in result.text.splitlines():
            if line.strip():
                return line.strip()
        return ""


def describe_tool_version(tool: str, host: Host) -> str:
    """Human line for the ``--version`` diagnostics.

    Returns the tool's first version line, ``"not found in PATH"`` or
    ``"present but failed to run"``.
    """
    argv = VERSION_COMMANDS.get(tool, [tool, "--version"])
    if not host.has(argv[0]):
        return "not found in PATH"
    line = host.first_line(argv)
    return line or "present but failed to run"


def installed_deb_version(package: str, host: Host) -> str | None:
    """Version of ``package`` installed via dpkg.

    Returns:
        The version string, ``""`` when installed but unreadable, or
        None when the package is not installed (or dpkg-query is absent).
    """
    if not host.has("dpkg-query"):
        return None
    status = host.first_line(
        ["dpkg-query", "-W", "-f=${Status} ${Version}\\n", package],
    )
    if not status.startswith("install ok installed"):
        return None
    parts = status.split()
    return parts[3] if len(parts) > 3 else ""
