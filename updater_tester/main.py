"""
updater-tester — CLI entrypoint.

Usage:
    python -m updater_tester.main --help
    updater-tester                  # Rust and fastfetch
    updater-tester --rust           # Rust only
    updater-tester --fastfetch      # fastfetch only
"""

from __future__ import annotations

import json
import logging
import signal
import sys
from pathlib import Path

import click

from updater_tester import __version__
from updater_tester.core.observability.logging_config import setup_from_env

logger = logging.getLogger(__name__)

EXIT_USAGE = 64
EXIT_INTERNAL = 128

_EPILOG = """\b
Exit codes (bitmask):
  0    OK/WARN only
  1    Self/infra ERR
  2    Rust ERR
  4    Fastfetch ERR
  64   Usage error
  128  Internal tester error
"""


class UsageError(click.UsageError):
    """Command-line misuse; exits with the tester's usage status."""

    exit_code = EXIT_USAGE


class TesterCommand(click.Command):
    """Command whose parse errors exit with EXIT_USAGE instead of click's 2."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = EXIT_USAGE
            raise


def _print_version(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    """Eager ``--version``: tester version plus local tool versions."""
    if not value or ctx.resilient_parsing:
        return
    from updater_tester.core.services.host import Host, describe_tool_version

    host = Host()
    click.echo(f"updater-tester {__version__}")
    for tool in ("rustc", "cargo", "fastfetch"):
        click.echo(f"{tool}: {describe_tool_version(tool, host)}")
    ctx.exit(0)


@click.command(
    cls=TesterCommand,
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog=_EPILOG,
)
@click.option("--rust", "--cargo", "rust", is_flag=True, help="Test Rust only.")
@click.option("--fastfetch", "--fetch", "fastfetch", is_flag=True, help="Test Fastfetch only.")
@click.option("--no-color", is_flag=True, help="Disable colors (also: NO_COLOR env var).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output the report as JSON.")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help="Tester YAML config (default: $UPDATER_TESTER_CONFIG, else built-in).",
)
@click.option("--verbose", is_flag=True, help="Enable verbose logging on stderr.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "-v",
    "--version",
    is_flag=True,
    expose_value=False,
    is_eager=True,
    callback=_print_version,
    help="Show tester and local tool versions.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    rust: bool,
    fastfetch: bool,
    no_color: bool,
    as_json: bool,
    config_path: Path | None,
    verbose: bool,
    debug: bool,
) -> None:
    """Tester for the Rust and Fastfetch updater scripts.

    Validates, without changing the system, that the upstream endpoints
    and data shapes used by rust-stable-install and update-fastfetch
    still hold. Default: test both.
    """
    try:
        code = _run(ctx, rust, fastfetch, no_color, as_json, config_path, verbose, debug)
    except click.ClickException:
        raise
    except Exception as e:
        logger.debug("Internal tester error", exc_info=True)
        click.echo(f"Internal tester error: {e}", err=True)
        code = EXIT_INTERNAL
    ctx.exit(code)


def _run(
    ctx: click.Context,
    rust: bool,
    fastfetch: bool,
    no_color: bool,
    as_json: bool,
    config_path: Path | None,
    verbose: bool,
    debug: bool,
) -> int:
    """Command body; returns the exit code."""
    setup_from_env(debug=debug, verbose=verbose)

    # ── Selection (before any probe) ─────────────────────────────
    if rust and fastfetch:
        raise UsageError("Cannot specify both Rust and Fastfetch selection flags", ctx=ctx)

    from updater_tester.core.config.loader import ConfigError, load_settings
    from updater_tester.core.models.check import SectionId
    from updater_tester.core.use_cases.run import ALL_SECTIONS, run_tester
    from updater_tester.ui.cli.output import TerminalReporter, color_setting

    if rust:
        selected = [SectionId.TOOLCHAIN]
    elif fastfetch:
        selected = [SectionId.PACKAGE]
    else:
        selected = list(ALL_SECTIONS)

    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        raise UsageError(str(e), ctx=ctx) from e

    reporter = None if as_json else TerminalReporter(color=color_setting(no_color))
    report = run_tester(selected, settings, listener=reporter)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        assert reporter is not None
        reporter.summary(report)

    return report.exit_mask


def _exit_on_signal(signum: int, _frame: object) -> None:
    # SystemExit unwinds the stack so the scratch dir is removed
    raise SystemExit(128 + signum)


def main() -> None:
    """Console-script entrypoint."""
    for sig in (signal.SIGINT, signal.SIGTERM, signal.SIGHUP):
        signal.signal(sig, _exit_on_signal)
    cli()


if __name__ == "__main__":
    sys.exit(main())
