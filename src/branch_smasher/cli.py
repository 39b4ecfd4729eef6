"""
Command-line interface for branch smasher.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import os
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .smasher import BranchSmasher
from .cli_prompt import CliPrompt
from .prompt_interface import AutoConfirmPrompt
from .models import DEFAULT_TARGET_BRANCH, PreconditionError, SmashError
from . import __version__ as PACKAGE_VERSION


console = Console()
logger = logging.getLogger(__name__)


def _print_version(ctx, param, value):
    """Eager option callback to print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    click.echo(f"branch-smasher {PACKAGE_VERSION}")
    ctx.exit()


def _default_log_path() -> Path:
    """Determine default log file path (~/.branch-smasher/branch-smasher.log)."""
    env_path = os.environ.get("BRANCH_SMASHER_LOG")
    if env_path:
        p = Path(env_path).expanduser()
        p.parent.mkdir(parents=True, exist_ok=True)
        return p
    base = Path.home() / ".branch-smasher"
    base.mkdir(parents=True, exist_ok=True)
    return base / "branch-smasher.log"


def setup_logging(
    verbose: bool = False, console_level: Optional[str] = None, log_file: Optional[Path] = None
) -> Path:
    """Setup logging to a rotating file, plus the console when asked for.

    Returns the log file path.
    """
    log_path = Path(log_file) if log_file else _default_log_path()
    log_path.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    # Clear existing handlers to avoid duplication in tests / repeated invocations
    root.handlers.clear()
    root.setLevel(logging.DEBUG)

    file_handler = RotatingFileHandler(
        str(log_path), maxBytes=1_000_000, backupCount=3, encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(file_handler)

    # Console handler (optional)
    if verbose or console_level:
        level_map = {
            "debug": logging.DEBUG,
            "info": logging.INFO,
            "warning": logging.WARNING,
            "error": logging.ERROR,
        }
        console_handler = RichHandler(console=console, rich_tracebacks=True)
        console_handler.setLevel(level_map.get((console_level or "info").lower(), logging.INFO))
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(console_handler)

    return log_path


def _maybe_print_log_notice(verbose: bool, console_level: Optional[str], log_path: Path) -> None:
    """Inform user about logging destination and how to enable console logs."""
    if verbose or console_level:
        return
    console.print(f"[dim]Logs are written to {log_path}. Use -v or --log-level to see them here.[/dim]")


@click.command()
@click.argument("branch", required=False, default=DEFAULT_TARGET_BRANCH)
@click.option(
    "--version",
    "-V",
    is_flag=True,
    callback=_print_version,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose console logging (INFO)")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Console log level. By default, console logging is disabled.",
)
@click.option(
    "--repo-path",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Path to repository (defaults to current directory)",
)
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Merge back without asking.")
@click.option(
    "--force-with-lease",
    is_flag=True,
    help="Refuse to overwrite remote commits you have not seen when force pushing.",
)
def cli(
    branch: str,
    verbose: bool,
    log_level: Optional[str],
    repo_path: Optional[Path],
    assume_yes: bool,
    force_with_lease: bool,
) -> None:
    """
    Rebase the current branch onto BRANCH (default: master), force push it,
    then optionally fast-forward BRANCH to it and push.

    Example: branch-smasher develop
    """
    log_path = setup_logging(verbose, console_level=log_level)
    _maybe_print_log_notice(verbose, log_level, log_path)
    logger.debug(f"CLI init: cwd={Path.cwd()} repo_path={repo_path} branch={branch}")

    try:
        prompt = AutoConfirmPrompt() if assume_yes else CliPrompt(console)
        smasher = BranchSmasher(
            repo_path.resolve() if repo_path else None,
            prompt,
            force_with_lease=force_with_lease,
            on_progress=lambda msg: console.print(f"➡️  {msg}"),
        )
        session = smasher.run(branch)
    except PreconditionError as e:
        console.print(f"\n❌ **Cannot start:** {escape(str(e))}", style="bold red")
        logger.debug("Precondition failed", exc_info=True)
        sys.exit(1)
    except SmashError as e:
        console.print(f"\n❌ **Smash Error:** {escape(str(e))}", style="bold red")
        # Debug stack trace to file logs for diagnostics
        logger.debug("Run aborted due to SmashError", exc_info=True)
        sys.exit(1)
    except (click.Abort, KeyboardInterrupt):
        console.print("\n\n🚫 **Operation cancelled by user**", style="bold yellow")
        logger.debug("Operation cancelled by user", exc_info=True)
        sys.exit(130)
    except Exception as e:
        console.print(f"\n💥 **Unexpected Error:** {escape(str(e))}", style="bold red")
        if verbose:
            console.print_exception()
        logger.debug("Unexpected error during run", exc_info=True)
        sys.exit(1)

    if session.merge_confirmed:
        console.print(
            f"\n🎉 **{session.current_branch} merged into {session.target_branch} and pushed**",
            style="bold green",
        )
    else:
        console.print(
            f"\n✅ **{session.current_branch} rebased and force pushed; {session.target_branch} left untouched**",
            style="bold green",
        )


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n\n🚫 **Operation cancelled by user**", style="bold yellow")
        logger.debug("Top-level cancellation (KeyboardInterrupt)", exc_info=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
