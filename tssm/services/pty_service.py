"""
PTY Interception Service

Runs the ssh client under a pseudo-terminal, passes bytes through in both
directions, and answers the first password prompt with a stored secret.
"""

import fcntl
import os
import pty
import re
import selectors
import struct
import subprocess
import sys
import termios
import threading
import time
from typing import BinaryIO, Callable, Mapping, Optional, Sequence

from tssm.constants import (
    INPUT_JOIN_TIMEOUT,
    INPUT_POLL_INTERVAL,
    PROMPT_DETECTION_WINDOW,
    PROMPT_PATTERN,
    PROMPT_TAIL_LIMIT,
    PTY_READ_SIZE,
    STDIN_READ_SIZE,
)
from tssm.exceptions import ProcessStartError
from tssm.logger import ConnectLogger
from tssm.services.terminal_service import (
    NullResizeSource,
    PosixTerminal,
    ResizeEventSource,
    TerminalController,
    default_resize_source,
    stream_fd,
)


def wipe(buffer: Optional[bytearray]) -> None:
    """Overwrite a secret buffer in place."""
    if buffer is None:
        return
    buffer[:] = b"\x00" * len(buffer)


class PromptDetector:
    """
    Spots a password prompt at the end of the output stream.

    Keeps a bounded tail of recent output, so a prompt split across reads is
    still found as long as no line break intervenes. One-shot: after the first
    match, or once the detection window has passed, it never matches again.
    """

    def __init__(
        self,
        window: float = PROMPT_DETECTION_WINDOW,
        clock: Callable[[], float] = time.monotonic,
        pattern: str = PROMPT_PATTERN,
        tail_limit: int = PROMPT_TAIL_LIMIT,
    ):
        self.clock = clock
        self.deadline = clock() + window
        self.pattern = re.compile(pattern, re.IGNORECASE)
        self.tail_limit = tail_limit
        self._tail = bytearray()
        self._done = False

    @property
    def active(self) -> bool:
        return not self._done

    def feed(self, chunk: bytes) -> bool:
        """
        Inspect one output chunk.

        Returns:
            True exactly once, on the chunk that completes a prompt
        """
        if self._done:
            return False
        if self.clock() > self.deadline:
            self._stop()
            return False

        self._tail.extend(chunk.replace(b"\x00", b"").replace(b"\r", b"\n"))
        if len(self._tail) > self.tail_limit:
            del self._tail[: len(self._tail) - self.tail_limit]

        last_line = self._tail[self._tail.rfind(b"\n") + 1 :]
        text = last_line.decode("utf-8", errors="replace").strip()
        if text and self.pattern.search(text):
            self._stop()
            return True
        return False

    def _stop(self) -> None:
        self._done = True
        self._tail.clear()


def _claim_controlling_tty() -> None:
    # Runs in the child after setsid(); stdin is already the PTY slave.
    fcntl.ioctl(0, termios.TIOCSCTTY, 0)


class PtyProcess:
    """A child process attached to a freshly allocated PTY."""

    def __init__(self, master_fd: int, process: subprocess.Popen):
        self.master_fd = master_fd
        self.process = process

    @classmethod
    def spawn(
        cls, argv: Sequence[str], env: Optional[Mapping[str, str]] = None
    ) -> "PtyProcess":
        """
        Start argv with a new PTY as its controlling terminal.

        Raises:
            ProcessStartError: If the PTY cannot be allocated or argv cannot run
        """
        try:
            master_fd, slave_fd = pty.openpty()
        except OSError as e:
            raise ProcessStartError("Failed to allocate pseudo-terminal", context=str(e))

        try:
            process = subprocess.Popen(
                list(argv),
                stdin=slave_fd,
                stdout=slave_fd,
                stderr=slave_fd,
                env=dict(env) if env is not None else None,
                start_new_session=True,
                preexec_fn=_claim_controlling_tty,
                close_fds=True,
            )
        except (OSError, subprocess.SubprocessError) as e:
            os.close(master_fd)
            raise ProcessStartError(f"Failed to start {argv[0]}", context=str(e))
        finally:
            os.close(slave_fd)

        return cls(master_fd, process)

    def read(self, size: int) -> bytes:
        """Read output; b"" once the PTY is closed or fails (EIO on Linux)."""
        try:
            return os.read(self.master_fd, size)
        except OSError:
            return b""

    def write(self, data) -> int:
        return os.write(self.master_fd, data)

    def set_size(self, rows: int, cols: int) -> None:
        fcntl.ioctl(self.master_fd, termios.TIOCSWINSZ, struct.pack("HHHH", rows, cols, 0, 0))

    def wait(self) -> int:
        return self.process.wait()

    def kill(self) -> None:
        if self.process.poll() is None:
            try:
                self.process.kill()
            except ProcessLookupError:
                pass

    def close(self) -> None:
        if self.master_fd is not None:
            try:
                os.close(self.master_fd)
            except OSError:
                pass
            self.master_fd = None


class PTYSession:
    """
    One running client plus exclusive ownership of the user's terminal.

    The calling thread copies PTY output to the user; a daemon thread copies
    user input to the PTY until stopped.
    """

    def __init__(
        self,
        child: PtyProcess,
        terminal: TerminalController,
        resize_source: ResizeEventSource,
        output: BinaryIO,
        input_fd: Optional[int] = None,
        detector: Optional[PromptDetector] = None,
        secret: Optional[bytearray] = None,
        logger: Optional[ConnectLogger] = None,
    ):
        self.child = child
        self.terminal = terminal
        self.resize_source = resize_source
        self.output = output
        self.input_fd = input_fd
        self.detector = detector
        self.logger = logger
        self.injections = 0
        self._secret = secret
        self._stop = threading.Event()

    def run(self) -> int:
        """
        Pump I/O until the child exits.

        Returns:
            The child's wait status (negative for signals)
        """
        self.sync_size()
        self.terminal.flush_input()

        if self.logger:
            self.logger.quiet = True
        try:
            with self.terminal.raw_mode(), self.resize_source.listen(self.sync_size):
                pump = threading.Thread(target=self._pump_input, name="tssm-input", daemon=True)
                pump.start()
                try:
                    self._pump_output()
                    return self.child.wait()
                finally:
                    self._stop.set()
                    pump.join(INPUT_JOIN_TIMEOUT)
        except BaseException:
            self.child.kill()
            raise
        finally:
            wipe(self._secret)
            self._secret = None
            self.child.close()
            if self.logger:
                self.logger.quiet = False

    def sync_size(self) -> None:
        """Copy the user's terminal size to the PTY. Failures are ignored."""
        size = self.terminal.get_size()
        if not size:
            return
        try:
            self.child.set_size(*size)
        except OSError as e:
            if self.logger:
                self.logger.debug(f"PTY resize failed: {e}")

    def _pump_output(self) -> None:
        while True:
            data = self.child.read(PTY_READ_SIZE)
            if not data:
                return
            self.output.write(data)
            self.output.flush()
            if self.detector is not None and self.detector.feed(data):
                self._inject()

    def _inject(self) -> None:
        secret = self._secret
        self._secret = None
        if secret is None:
            return
        try:
            secret.extend(b"\r")
            self.child.write(secret)
            self.injections += 1
            if self.logger:
                self.logger.log("Password prompt detected; stored credential sent")
        except OSError as e:
            if self.logger:
                self.logger.warning(f"Credential injection failed: {e}")
        finally:
            wipe(secret)

    def _pump_input(self) -> None:
        if self.input_fd is None:
            return
        selector = selectors.DefaultSelector()
        try:
            selector.register(self.input_fd, selectors.EVENT_READ)
        except (ValueError, OSError):
            # Regular files cannot be polled but never block either
            selector.close()
            self._copy_input()
            return

        try:
            while not self._stop.is_set():
                if not selector.select(INPUT_POLL_INTERVAL):
                    continue
                if not self._forward_input():
                    return
        finally:
            selector.close()

    def _copy_input(self) -> None:
        while not self._stop.is_set():
            if not self._forward_input():
                return

    def _forward_input(self) -> bool:
        """Move one read of user input to the PTY. False on EOF or error."""
        try:
            data = os.read(self.input_fd, STDIN_READ_SIZE)
        except OSError:
            return False
        if not data:
            return False
        try:
            self.child.write(data)
        except OSError:
            return False
        return True


class PtyInterceptor:
    """
    Entry point for running one client under a PTY.

    Collaborators are injectable so the pumping logic can be exercised without
    a real terminal or ssh.
    """

    def __init__(
        self,
        terminal: Optional[TerminalController] = None,
        resize_source: Optional[ResizeEventSource] = None,
        spawner: Callable[..., PtyProcess] = PtyProcess.spawn,
        output: Optional[BinaryIO] = None,
        input_fd: Optional[int] = None,
        logger: Optional[ConnectLogger] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.terminal = terminal or PosixTerminal()
        self.resize_source = resize_source or (
            default_resize_source() if self.terminal.is_interactive() else NullResizeSource()
        )
        self.spawner = spawner
        self.output = output if output is not None else sys.stdout.buffer
        self.input_fd = input_fd if input_fd is not None else stream_fd(sys.stdin)
        self.logger = logger
        self.clock = clock

    def run(
        self,
        argv: Sequence[str],
        secret: Optional[bytearray] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> int:
        """
        Run argv under a PTY, injecting secret at the first password prompt.

        Args:
            argv: Client argument vector
            secret: Password bytes; wiped before this returns
            env: Child environment (defaults to ours)

        Returns:
            The child's wait status, unchanged

        Raises:
            ProcessStartError: If the PTY or the client cannot be started
        """
        if secret is not None and not isinstance(secret, bytearray):
            secret = bytearray(secret)
        try:
            if self.logger:
                self.logger.log_command(" ".join(argv))
            child = self.spawner(argv, env)
            detector = PromptDetector(clock=self.clock) if secret else None
            session = PTYSession(
                child,
                self.terminal,
                self.resize_source,
                self.output,
                input_fd=self.input_fd,
                detector=detector,
                secret=secret,
                logger=self.logger,
            )
            returncode = session.run()
            if self.logger:
                self.logger.log(f"Client exited with status {returncode}")
            return returncode
        finally:
            wipe(secret)
