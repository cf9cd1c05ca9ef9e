"""tmux control surface, targeted at the server from $TMUX when known."""

import subprocess
from typing import Callable, Optional, Sequence

from tssm.constants import TMUX_BINARY, TMUX_SHELL, TMUX_START_DIRECTORY
from tssm.core.settings import Settings
from tssm.exceptions import MultiplexerError


class TmuxService:
    """
    Thin wrapper over the tmux CLI.

    Every failure becomes MultiplexerError; nothing is retried.
    """

    def __init__(
        self,
        socket: Optional[str] = None,
        runner: Callable = subprocess.run,
        binary: str = TMUX_BINARY,
    ):
        """
        Initialize tmux service.

        Args:
            socket: Server socket path (tmux -S); default server when None
            runner: subprocess.run-compatible callable
            binary: tmux executable
        """
        self.socket = socket
        self.runner = runner
        self.binary = binary

    @classmethod
    def from_settings(cls, settings: Settings, runner: Callable = subprocess.run) -> "TmuxService":
        return cls(socket=settings.tmux_socket, runner=runner)

    def command(self, args: Sequence[str]) -> list[str]:
        argv = [self.binary]
        if self.socket:
            argv += ["-S", self.socket]
        return argv + list(args)

    def run(self, args: Sequence[str]) -> str:
        """
        Run one tmux command.

        Returns:
            Trimmed stdout

        Raises:
            MultiplexerError: On a missing binary or non-zero exit
        """
        argv = self.command(args)
        try:
            result = self.runner(
                argv,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as e:
            raise MultiplexerError("tmux is not installed", context=str(e))
        except (OSError, subprocess.SubprocessError) as e:
            raise MultiplexerError(f"tmux {args[0]} failed", context=str(e))

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise MultiplexerError(
                f"tmux {args[0]} failed (exit {result.returncode})",
                context=stderr or " ".join(argv),
            )
        return (result.stdout or "").strip()

    def has_session(self, name: str) -> bool:
        try:
            self.run(["has-session", "-t", name])
        except MultiplexerError:
            return False
        return True

    def new_session(self, name: str, detached: bool = True) -> None:
        args = ["new-session"]
        if detached:
            args.append("-d")
        self.run(args + ["-s", name])

    def new_window(
        self,
        name: str,
        command_line: str,
        target: Optional[str] = None,
        start_dir: Optional[str] = TMUX_START_DIRECTORY,
        print_id: bool = False,
    ) -> Optional[str]:
        """
        Open a window running `bash -lc <command_line>`.

        Returns:
            The new window id when print_id is set
        """
        args = ["new-window"]
        if print_id:
            args += ["-P", "-F", "#{window_id}"]
        if target:
            args += ["-t", target]
        args += ["-n", name]
        if start_dir:
            args += ["-c", start_dir]
        args += ["--"] + TMUX_SHELL + [command_line]

        output = self.run(args)
        if print_id:
            window_id = output.splitlines()[0].strip() if output else ""
            if not window_id:
                raise MultiplexerError("tmux new-window returned no window id")
            return window_id
        return None

    def split_pane(
        self,
        target: str,
        command_line: str,
        flag: str = "-v",
        start_dir: Optional[str] = TMUX_START_DIRECTORY,
    ) -> None:
        """Split a pane in target and run `bash -lc <command_line>` in it."""
        args = ["split-window", flag, "-t", target]
        if start_dir:
            args += ["-c", start_dir]
        args += ["--"] + TMUX_SHELL + [command_line]
        self.run(args)

    def select_layout(self, target: str, layout: str) -> None:
        self.run(["select-layout", "-t", target, layout])
