"""
Logging system for tssm
Writes per-connection log files with clean console output on stderr
"""

import re
from pathlib import Path
from datetime import datetime
from typing import Optional, TextIO
from rich.console import Console

from tssm.constants import LOG_DATE_FORMAT, LOG_TIME_FORMAT
from tssm.utils import PathUtils

# stdout belongs to the remote session
console = Console(stderr=True)

_ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


class ConnectLogger:
    """
    Manages logging for connection operations
    - Writes decisions, commands and outcomes to a log file in real-time
    - Shows short progress lines on stderr (unless quiet)
    - Never receives secrets or session bytes
    """

    def __init__(
        self,
        host_key: str,
        operation: str,
        log_dir: Optional[Path] = None,
        verbose: bool = False,
        enabled: bool = True,
        output: Optional[Console] = None,
    ):
        """
        Initialize logger

        Args:
            host_key: Host the operation targets (or 'tssm' for global commands)
            operation: Operation name (e.g., 'connect', 'fanout', 'scp')
            log_dir: Root of the log tree; no file is written when None
            verbose: If True, show all log lines in console
            enabled: If False, skip the log file entirely
            output: Console for progress lines (defaults to stderr)
        """
        self.host_key = host_key
        self.operation = operation
        self.verbose = verbose
        self.console = output or console
        self.log_file: Optional[TextIO] = None
        self.log_path: Optional[Path] = None
        self.has_errors = False
        self.quiet = False

        if not enabled or log_dir is None:
            return

        # Structure: logs/{host}/{date}/{time}_{operation}.log
        now = datetime.now()
        host_logs_dir = (
            Path(log_dir).expanduser()
            / PathUtils.sanitize_host_key(host_key)
            / now.strftime(LOG_DATE_FORMAT)
        )
        try:
            host_logs_dir.mkdir(parents=True, exist_ok=True)
            self.log_path = host_logs_dir / f"{now.strftime(LOG_TIME_FORMAT)}_{operation}.log"
            self.log_file = open(self.log_path, "w", buffering=1)
        except OSError as e:
            # Logging must never block a login
            self.log_path = None
            self.log_file = None
            self.console.print(f"[dim]Log file disabled: {e}[/dim]")
            return

        self._write_log_header()

    def _write_log_header(self):
        """Write log file header"""
        header = f"""
{"=" * 80}
tssm Connection Log
{"=" * 80}
Host: {self.host_key}
Operation: {self.operation}
Started: {datetime.now().isoformat()}
{"=" * 80}

"""
        self.log_file.write(header)
        self.log_file.flush()

    def _show(self, markup: str):
        if not self.quiet:
            self.console.print(markup)

    def log(self, message: str, level: str = "INFO"):
        """
        Log a message to file and optionally console

        Args:
            message: Message to log
            level: Log level (INFO, WARNING, ERROR, DEBUG)
        """
        timestamp = datetime.now().strftime("%H:%M:%S")
        log_line = f"[{timestamp}] [{level}] {_ANSI_ESCAPE.sub('', message)}\n"

        if self.log_file:
            self.log_file.write(log_line)
            self.log_file.flush()

        if self.verbose:
            if level == "ERROR":
                self._show(f"[red]{message}[/red]")
            elif level == "WARNING":
                self._show(f"[yellow]{message}[/yellow]")
            elif level == "DEBUG":
                self._show(f"[dim]{message}[/dim]")
            else:
                self._show(message)

    def log_command(self, command: str):
        """Log a command being executed"""
        self.log(f"Executing: {command}", "DEBUG")

    def log_error(self, error: str, context: Optional[str] = None):
        """
        Log an error with context

        Args:
            error: Error message
            context: Additional context (e.g., command that failed)
        """
        self.has_errors = True

        if self.log_file:
            error_block = f"""
{"!" * 80}
ERROR OCCURRED
{"!" * 80}
{error}
"""
            if context:
                error_block += f"\nContext: {context}\n"
            error_block += f"{'!' * 80}\n\n"
            self.log_file.write(error_block)
            self.log_file.flush()

        self._show(f"[bold red]✗ {error}[/bold red]")
        if context:
            self._show(f"  [color(208)]{context}[/color(208)]")

    def step(self, step_name: str):
        """
        Start a new step

        Args:
            step_name: Name of the step
        """
        self.log(f"Step: {step_name}", "INFO")

        if not self.verbose:
            self._show(f"[color(214)]▶[/color(214)] [white]{step_name}[/white]")

    def success(self, message: str):
        """Log a success message"""
        self.log(message, "INFO")

        if not self.verbose:
            self._show(f"  [dim]✓ {message}[/dim]")

    def warning(self, message: str):
        """Log a warning message"""
        self.log(message, "WARNING")

        if not self.verbose:
            self._show(f"  [yellow]⚠[/yellow] [dim]{message}[/dim]")

    def debug(self, message: str):
        """File-only unless verbose."""
        self.log(message, "DEBUG")

    def close(self):
        """Close log file"""
        if self.log_file:
            footer = f"""
{"=" * 80}
Completed: {datetime.now().isoformat()}
Status: {"FAILED" if self.has_errors else "SUCCESS"}
{"=" * 80}
"""
            self.log_file.write(footer)
            self.log_file.close()
            self.log_file = None

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, _exc_tb):
        """Context manager exit"""
        if exc_type is not None and not issubclass(exc_type, (SystemExit, KeyboardInterrupt)):
            # The command's error handler prints to the console
            self.quiet = True
            self.log_error(
                str(exc_val) if exc_val else "Operation failed",
                context=f"{exc_type.__name__}",
            )
        self.close()
        return False
