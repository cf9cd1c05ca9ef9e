"""
tssm Exception Hierarchy

Clean exception hierarchy for consistent error handling across the CLI.
"""

from typing import Optional


class TssmError(Exception):
    """Base exception for all tssm errors."""

    def __init__(self, message: str, context: Optional[str] = None):
        self.message = message
        self.context = context
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with optional context."""
        if self.context:
            return f"{self.message}\nContext: {self.context}"
        return self.message


class ConfigurationError(TssmError):
    """Raised when the host catalog or per-host extras are malformed."""

    pass


class CredentialUnavailableError(TssmError):
    """Raised when a secret cannot be found or read from the secret store."""

    def __init__(self, host_key: str, user: Optional[str], kind: str, reason: str = ""):
        self.host_key = host_key
        self.user = user
        self.kind = kind
        message = f"Credential missing/unavailable for {host_key}"
        context = f"user={user or host_key} kind={kind}"
        if reason:
            context = f"{context} ({reason})"
        super().__init__(message, context)


class ProcessStartError(TssmError):
    """Raised when the PTY cannot be allocated or the client cannot be executed."""

    pass


class TerminalBusyError(TssmError):
    """Raised when a second session tries to take raw mode on the same terminal."""

    pass


class MultiplexerError(TssmError):
    """Raised when a tmux control call fails."""

    pass


class FanoutEnvironmentError(TssmError):
    """Raised when fanout is requested in an environment that cannot host it."""

    pass


class PartialFanoutError(MultiplexerError):
    """Raised when a split-mode fanout fails after some panes were created."""

    def __init__(self, created: int, requested: int, cause: Exception):
        self.created = created
        self.requested = requested
        self.cause = cause
        message = f"Fanout aborted after {created} of {requested} panes"
        super().__init__(message, context=str(cause))


class ChildExitError(TssmError):
    """Raised when the network client exits non-zero or is killed by a signal."""

    def __init__(self, argv: list[str], returncode: int):
        self.argv = argv
        self.returncode = returncode
        if returncode < 0:
            message = f"{argv[0]} was killed by signal {-returncode}"
        else:
            message = f"{argv[0]} exited with status {returncode}"
        super().__init__(message)

    @property
    def exit_status(self) -> int:
        """Exit status to propagate as this program's own (shell convention for signals)."""
        if self.returncode < 0:
            return 128 - self.returncode
        return self.returncode
