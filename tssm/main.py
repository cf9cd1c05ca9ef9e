#!/usr/bin/env python3
"""tssm - Main entry point"""

import dataclasses
import functools
import sys
from pathlib import Path

from rich.console import Console

# Rich-Click: colored help
import rich_click as click

click.rich_click.USE_RICH_MARKUP = True
click.rich_click.USE_MARKDOWN = False
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.MAX_WIDTH = 100

# COMMANDS: Bold cyan
click.rich_click.STYLE_COMMAND = "bold cyan"

# OPTIONS: Bold magenta
click.rich_click.STYLE_OPTION = "bold magenta"
click.rich_click.STYLE_SWITCH = "bold green"
click.rich_click.STYLE_ARGUMENT = "bold yellow"

# HEADERS: Bold cyan
click.rich_click.STYLE_HEADER_TEXT = "bold cyan"
click.rich_click.STYLE_USAGE = "bold yellow"
click.rich_click.STYLE_USAGE_COMMAND = "bold cyan"

click.rich_click.STYLE_HELPTEXT_FIRST_LINE = "bold white"
click.rich_click.STYLE_HELPTEXT = ""
click.rich_click.STYLE_METAVAR = "bold yellow"
click.rich_click.STYLE_OPTION_DEFAULT = "dim cyan"
click.rich_click.STYLE_EPILOG_TEXT = "dim"

# PANEL BORDERS: Cyan
click.rich_click.STYLE_OPTIONS_PANEL_BORDER = "cyan"
click.rich_click.STYLE_COMMANDS_PANEL_BORDER = "cyan"
click.rich_click.ALIGN_ERRORS_PANEL = "left"
click.rich_click.ERRORS_EPILOGUE = ""

from tssm import __version__
from tssm.commands import (
    askpass,
    config_path,
    connect,
    cred,
    hosts,
    internal_connect,
    scp,
    ssh,
)
from tssm.core.settings import Settings
from tssm.utils import PathUtils

console = Console(stderr=True)


def handle_cli_errors(func):
    """Decorator to handle CLI errors gracefully."""
    from click.exceptions import Abort, ClickException, UsageError

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except UsageError as e:
            console.print(f"\n[bold red]✗ Error:[/bold red] {e.format_message()}\n")
            if e.ctx and e.ctx.command:
                console.print(
                    f"[dim]Run[/dim] [cyan]tssm {e.ctx.command.name} --help[/cyan] [dim]for usage information[/dim]\n"
                )
            sys.exit(2)
        except ClickException as e:
            e.show()
            sys.exit(e.exit_code)
        except Abort:
            console.print("\n[yellow]Aborted[/yellow]")
            sys.exit(1)
        except KeyboardInterrupt:
            console.print("\n\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            sys.exit(130)

    return wrapper


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Host catalog (default: $TSSM_CONFIG or ~/.config/tssm/hosts.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, config_file) -> None:
    """
    tssm - tmux SSH manager

    \b
    Quick Start:
      tssm hosts                          # List catalog hosts
      tssm connect web1                   # Connect
      tssm connect web1 --split-count 4   # Four tmux windows
      tssm cred set --host web1           # Store a password, enable automation

    \b
    Drop-in wrappers:
      alias ssh='tssm ssh'
      alias scp='tssm scp'
    """
    settings = ctx.obj if isinstance(ctx.obj, Settings) else Settings.from_env()
    if config_file:
        settings = dataclasses.replace(
            settings, config_path=Path(PathUtils.expand(config_file))
        )
    ctx.obj = settings


# Register commands
cli.add_command(connect)
cli.add_command(ssh)
cli.add_command(scp)
cli.add_command(cred)
cli.add_command(hosts)
cli.add_command(config_path)
cli.add_command(internal_connect)
cli.add_command(askpass)


@handle_cli_errors
def main():
    """Main entry point with error handling."""
    cli(standalone_mode=False)


if __name__ == "__main__":
    main()
