"""
tssm Services Layer

Connection logic behind the CLI commands.
"""

from .askpass_service import AskpassService
from .command_service import CommandBuilder
from .connect_service import ConnectService
from .decision_service import DecisionEngine
from .fanout_service import FanoutOrchestrator
from .override_service import HostExtras, HostExtrasService
from .process_service import ProcessRunner
from .pty_service import PromptDetector, PtyInterceptor, PtyProcess, PTYSession
from .resolver_service import HostResolver, NativeSSHConfig
from .secret_service import KeyringSecretStore, SecretStore
from .terminal_service import (
    NullResizeSource,
    PosixTerminal,
    ResizeEventSource,
    SignalResizeSource,
    TerminalController,
)
from .tmux_service import TmuxService

__all__ = [
    "AskpassService",
    "CommandBuilder",
    "ConnectService",
    "DecisionEngine",
    "FanoutOrchestrator",
    "HostExtras",
    "HostExtrasService",
    "ProcessRunner",
    "PromptDetector",
    "PtyInterceptor",
    "PtyProcess",
    "PTYSession",
    "HostResolver",
    "NativeSSHConfig",
    "KeyringSecretStore",
    "SecretStore",
    "NullResizeSource",
    "PosixTerminal",
    "ResizeEventSource",
    "SignalResizeSource",
    "TerminalController",
    "TmuxService",
]
