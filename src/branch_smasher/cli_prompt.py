"""
CLI-specific implementation of the prompt interface.
"""

from __future__ import annotations

import click
from rich.console import Console
from rich.panel import Panel

from .prompt_interface import MergePrompt


class CliPrompt(MergePrompt):
    """CLI implementation of the prompt interface using click and rich."""

    def __init__(self, console: Console = None):
        self.console = console or Console()

    def confirm_merge(self, source_branch: str, target_branch: str) -> bool:
        """Read one line; only a literal lowercase 'y' confirms."""
        panel = Panel(
            f"[green]{source_branch}[/green] has been rebased and force-pushed.\n\n"
            f"Merging fast-forwards [cyan]{target_branch}[/cyan] to it and pushes "
            f"[cyan]{target_branch}[/cyan].",
            title="Merge Back",
            border_style="blue",
        )
        self.console.print(panel)

        try:
            entered = click.prompt(
                f"Merge into {target_branch}? (y/N)", default="", show_default=False
            )
        except click.Abort as e:
            # click raises Abort for Ctrl-C too; only end of input means "no"
            if isinstance(e.__context__, EOFError):
                return False
            raise

        return entered == "y"
