"""Running client processes in the foreground or in place of this process."""

import os
import shutil
import subprocess
from typing import Callable, Mapping, Optional, Sequence

from tssm.exceptions import ProcessStartError


class ProcessRunner:
    """Runs ssh/scp attached to the user's terminal."""

    def __init__(self, runner: Callable = subprocess.run, execve: Callable = os.execve):
        self.runner = runner
        self.execve = execve

    def run(
        self,
        argv: Sequence[str],
        exec_replace: bool = False,
        env: Optional[Mapping[str, str]] = None,
        stdin=None,
    ) -> int:
        """
        Run argv and return its exit status.

        Args:
            argv: Command to run
            exec_replace: Replace this process instead of waiting (ignored when stdin is set)
            env: Full child environment (defaults to ours)
            stdin: Replacement stdin (e.g. subprocess.DEVNULL)

        Raises:
            ProcessStartError: If the program cannot be found or started
        """
        argv = list(argv)
        if not argv:
            raise ProcessStartError("empty command")

        if exec_replace and stdin is None:
            path = shutil.which(argv[0])
            if not path:
                raise ProcessStartError(f"command not found: {argv[0]}")
            try:
                self.execve(path, argv, dict(env) if env is not None else dict(os.environ))
            except OSError as e:
                raise ProcessStartError(f"Failed to exec {argv[0]}", context=str(e))
            return 0

        try:
            result = self.runner(
                argv,
                stdin=stdin,
                env=dict(env) if env is not None else None,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise ProcessStartError(f"Failed to start {argv[0]}", context=str(e))
        return result.returncode
