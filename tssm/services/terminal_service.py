"""
Terminal Control Service

Raw-mode ownership, size queries, input flushing, and resize notifications
for the real controlling terminal.
"""

import os
import signal
import sys
import termios
import threading
import tty
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from tssm.exceptions import TerminalBusyError

# Show cursor, reset attributes
_TERMINAL_RESET = b"\033[?25h\033[0m"


def stream_fd(stream) -> Optional[int]:
    """Descriptor behind a standard stream, or None when it has none."""
    try:
        return stream.fileno()
    except (AttributeError, ValueError, OSError):
        return None


class TerminalController(ABC):
    """Capability over the user's terminal used by a PTY session."""

    @abstractmethod
    def is_interactive(self) -> bool:
        pass

    @abstractmethod
    def get_size(self) -> Optional[tuple[int, int]]:
        """(rows, cols), or None when unknown."""

    @abstractmethod
    def raw_mode(self):
        """Context manager holding raw, no-echo mode; restores on every exit."""

    @abstractmethod
    def flush_input(self) -> None:
        """Discard pending unread input. Best effort."""


class PosixTerminal(TerminalController):
    """
    Controller for a POSIX tty.

    Raw mode is exclusive per terminal device within this process; a second
    acquisition raises TerminalBusyError.
    """

    _held: set = set()
    _lock = threading.Lock()

    def __init__(self, in_fd: Optional[int] = None, out_fd: Optional[int] = None):
        """
        Initialize terminal controller.

        Args:
            in_fd: Terminal input descriptor (defaults to stdin)
            out_fd: Terminal output descriptor (defaults to stdout)
        """
        self.in_fd = stream_fd(sys.stdin) if in_fd is None else in_fd
        self.out_fd = stream_fd(sys.stdout) if out_fd is None else out_fd

    def is_interactive(self) -> bool:
        if self.in_fd is None:
            return False
        try:
            return os.isatty(self.in_fd)
        except OSError:
            return False

    def get_size(self) -> Optional[tuple[int, int]]:
        for fd in (self.out_fd, self.in_fd):
            if fd is None:
                continue
            try:
                size = os.get_terminal_size(fd)
            except OSError:
                continue
            if size.lines > 0 and size.columns > 0:
                return size.lines, size.columns
        return None

    def flush_input(self) -> None:
        if not self.is_interactive():
            return
        try:
            termios.tcflush(self.in_fd, termios.TCIFLUSH)
        except (termios.error, OSError):
            pass

    def _device_key(self):
        try:
            return os.fstat(self.in_fd).st_rdev
        except OSError:
            return ("fd", self.in_fd)

    @contextmanager
    def raw_mode(self) -> Iterator[None]:
        """
        Hold raw mode for the duration of the block.

        Non-interactive input is left untouched.

        Raises:
            TerminalBusyError: If another session already holds this terminal
        """
        if not self.is_interactive():
            yield
            return

        key = self._device_key()
        with PosixTerminal._lock:
            if key in PosixTerminal._held:
                raise TerminalBusyError(
                    "Terminal is already in raw mode for another session",
                    context=f"fd={self.in_fd}",
                )
            PosixTerminal._held.add(key)

        try:
            saved = termios.tcgetattr(self.in_fd)
            try:
                tty.setraw(self.in_fd)
                yield
            finally:
                termios.tcsetattr(self.in_fd, termios.TCSADRAIN, saved)
                if self.out_fd is not None:
                    try:
                        os.write(self.out_fd, _TERMINAL_RESET)
                    except OSError:
                        pass
        finally:
            with PosixTerminal._lock:
                PosixTerminal._held.discard(key)


class ResizeEventSource(ABC):
    """Delivers terminal resize notifications."""

    @abstractmethod
    def listen(self, callback: Callable[[], None]):
        """Context manager that calls callback on each resize while active."""


class NullResizeSource(ResizeEventSource):
    """Never notifies. Used off the main thread or without SIGWINCH."""

    @contextmanager
    def listen(self, callback: Callable[[], None]) -> Iterator[None]:
        yield


class SignalResizeSource(ResizeEventSource):
    """SIGWINCH-based resize notifications."""

    @staticmethod
    def available() -> bool:
        return hasattr(signal, "SIGWINCH") and (
            threading.current_thread() is threading.main_thread()
        )

    @contextmanager
    def listen(self, callback: Callable[[], None]) -> Iterator[None]:
        if not self.available():
            yield
            return

        def _handler(_signum, _frame):
            callback()

        previous = signal.signal(signal.SIGWINCH, _handler)
        try:
            yield
        finally:
            signal.signal(signal.SIGWINCH, previous)


def default_resize_source() -> ResizeEventSource:
    if SignalResizeSource.available():
        return SignalResizeSource()
    return NullResizeSource()
