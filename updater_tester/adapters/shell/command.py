"""
Shell command runner — execute a local tool and capture its output.

This is the most fundamental adapter: every downloader backend and every
local version probe goes through it. It NEVER raises; timeouts and
spawn failures are captured in the returned CommandResult.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Extra seconds granted to the subprocess on top of the tool's own
# total timeout, so the tool gets to report its own failure first.
TIMEOUT_GRACE_S = 5


@dataclass
class CommandResult:
    """Outcome of a single command execution."""

    argv: list[str]
    returncode: int = -1
    stdout: bytes = b""
    stderr: bytes = b""
    duration_ms: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Whether the command ran and exited 0."""
        return self.error is None and self.returncode == 0

    @property
    def text(self) -> str:
        """Stdout decoded leniently."""
        return self.stdout.decode("utf-8", errors="replace")

    @property
    def combined_text(self) -> str:
        """Stdout + stderr decoded leniently (wget reports headers on stderr)."""
        return (self.stdout + self.stderr).decode("utf-8", errors="replace")


def tool_available(tool: str) -> bool:
    """Check whether ``tool`` resolves on PATH."""
    return shutil.which(tool) is not None


def run_command(argv: list[str], timeout: float) -> CommandResult:
    """Run ``argv`` without a shell and capture raw stdout/stderr.

    Args:
        argv: Command and arguments.
        timeout: Hard limit in seconds; the process is killed after it.

    Returns:
        CommandResult. ``error`` is set when the command could not be
        started or timed out.
    """
    logger.debug("Executing: %s (timeout=%ss)", " ".join(argv), timeout)
    start = time.monotonic()

    try:
        proc = subprocess.run(
            argv,
            capture_output=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return CommandResult(
            argv=argv,
            duration_ms=int((time.monotonic() - start) * 1000),
            error=f"Command timed out after {timeout}s",
        )
    except OSError as e:
        return CommandResult(
            argv=argv,
            duration_ms=int((time.monotonic() - start) * 1000),
            error=f"Command execution error: {e}",
        )

    elapsed_ms = int((time.monotonic() - start) * 1000)
    if proc.returncode != 0:
        logger.debug("Command %s exited with code %d", argv[0], proc.returncode)

    return CommandResult(
        argv=argv,
        returncode=proc.returncode,
        stdout=proc.stdout or b"",
        stderr=proc.stderr or b"",
        duration_ms=elapsed_ms,
    )
