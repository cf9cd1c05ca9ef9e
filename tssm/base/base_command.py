"""
Base Command Class

Abstract base for all tssm CLI commands.
Provides common functionality and structure.
"""

from abc import ABC, abstractmethod
from typing import Optional
from rich.console import Console

from tssm.core.settings import Settings
from tssm.exceptions import ChildExitError, TssmError
from tssm.logger import ConnectLogger
from tssm.ui_components import show_header


class BaseCommand(ABC):
    """
    Abstract base command class.

    Provides:
    - Logger initialization
    - Header display
    - Error handling and exit status mapping
    """

    def __init__(self, settings: Settings, verbose: bool = False):
        self.settings = settings
        self.verbose = verbose
        # stdout belongs to ssh/scp and dry-run output
        self.console = Console(stderr=True)
        self.logger: Optional[ConnectLogger] = None

    def init_logger(self, host_key: str, operation: str) -> ConnectLogger:
        """
        Initialize command logger.

        Args:
            host_key: Target host (use "tssm" for global commands)
            operation: Operation name

        Returns:
            ConnectLogger instance
        """
        self.logger = ConnectLogger(
            host_key,
            operation,
            log_dir=self.settings.log_dir,
            verbose=self.verbose,
            enabled=self.settings.log_enabled,
            output=self.console,
        )
        return self.logger

    def show_header(
        self,
        title: str,
        subtitle: Optional[str] = None,
        host: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Show command header (skip in verbose mode)."""
        if not self.verbose:
            show_header(
                title=title,
                subtitle=subtitle,
                host=host,
                details=details,
                console=self.console,
            )

    def print_success(self, message: str) -> None:
        self.console.print(f"[green]✓ {message}[/green]")

    def print_error(self, message: str) -> None:
        self.console.print(f"[red]✗ {message}[/red]")

    def print_warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠ {message}[/yellow]")

    def print_dim(self, message: str) -> None:
        self.console.print(f"[dim]{message}[/dim]")

    def finish(self, argv: list[str], returncode: int) -> None:
        """
        Propagate a client exit status.

        Raises:
            ChildExitError: If returncode is non-zero
        """
        if returncode != 0:
            raise ChildExitError(argv, returncode)

    @abstractmethod
    def execute(self, **kwargs) -> None:
        """
        Execute command logic.

        Must be implemented by subclasses.
        """
        pass

    def run(self, **kwargs) -> None:
        """
        Run command with error handling.

        Exit status: the client's own status (signal N -> 128+N), 1 for tssm
        errors, 130 on Ctrl+C.
        """
        try:
            self.execute(**kwargs)
        except KeyboardInterrupt:
            self.console.print("\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            raise SystemExit(130)
        except SystemExit:
            raise
        except ChildExitError as e:
            if self.logger:
                self.logger.log(e.message, "WARNING")
            raise SystemExit(e.exit_status)
        except TssmError as e:
            self.console.print(f"\n[bold red]✗ {e.message}[/bold red]")
            if e.context:
                self.console.print(f"  [dim]{e.context}[/dim]")
            self.console.print()
            if self.logger and self.logger.log_path:
                self.console.print(f"[dim]Logs saved to:[/dim] {self.logger.log_path}\n")
            raise SystemExit(1)
        except ValueError as e:
            self.console.print(f"\n[bold red]✗ Invalid value:[/bold red] {e}\n")
            raise SystemExit(1)
        except PermissionError as e:
            self.console.print(f"\n[bold red]✗ Permission denied:[/bold red] {e}\n")
            raise SystemExit(1)
        except FileNotFoundError as e:
            self.console.print(f"\n[bold red]✗ File not found:[/bold red] {e}\n")
            raise SystemExit(1)
