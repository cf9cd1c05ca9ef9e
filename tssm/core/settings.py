"""
Runtime Settings

Environment-driven settings, read once at startup and passed explicitly to
the services that need them.
"""

import os
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from tssm.constants import (
    DEFAULT_BIN_NAME,
    ENV_CONFIG,
    ENV_LOG,
    ENV_SELF_BIN,
    ENV_SSH_MUX,
    ENV_SSH_MUX_PATH,
    ENV_TMUX,
    EXTRAS_DIRNAME,
    LOGS_DIRNAME,
)
from tssm.utils import EnvUtils, PathUtils


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration for one tssm invocation."""

    self_executable: str
    tmux: str = ""
    config_path: Optional[Path] = None
    config_home: Path = Path("~/.config/tssm")
    log_dir: Path = Path("~/.local/state/tssm/logs")
    log_enabled: bool = True
    ssh_mux: bool = False
    ssh_mux_path: Optional[str] = None

    @property
    def in_multiplexer(self) -> bool:
        """Whether this process already runs inside a tmux session."""
        return bool(self.tmux.strip())

    @property
    def tmux_socket(self) -> Optional[str]:
        return EnvUtils.tmux_socket_path(self.tmux)

    @property
    def extras_dir(self) -> Path:
        return self.config_home / EXTRAS_DIRNAME

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        argv0: Optional[str] = None,
    ) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Environment mapping (defaults to os.environ)
            argv0: Program path used to locate our own executable

        Returns:
            Settings instance
        """
        env = os.environ if environ is None else environ
        config_value = env.get(ENV_CONFIG, "").strip()
        mux_path = env.get(ENV_SSH_MUX_PATH, "").strip()

        return cls(
            self_executable=cls.resolve_self_executable(env, argv0),
            tmux=env.get(ENV_TMUX, ""),
            config_path=Path(PathUtils.expand(config_value)) if config_value else None,
            config_home=PathUtils.config_home(env),
            log_dir=PathUtils.state_home(env) / LOGS_DIRNAME,
            log_enabled=not EnvUtils.is_disabled(env.get(ENV_LOG)),
            ssh_mux=EnvUtils.is_truthy(env.get(ENV_SSH_MUX)),
            ssh_mux_path=mux_path or None,
        )

    @staticmethod
    def resolve_self_executable(
        environ: Mapping[str, str], argv0: Optional[str] = None
    ) -> str:
        """
        Find the path used to re-invoke this program inside new panes/windows.

        Order: explicit override, absolute path of argv[0], `tssm` on PATH,
        bare program name.
        """
        override = environ.get(ENV_SELF_BIN, "").strip()
        if override:
            return override

        candidate = argv0 if argv0 is not None else sys.argv[0]
        if candidate and os.sep in candidate:
            path = Path(candidate).expanduser()
            if path.is_file() and os.access(path, os.X_OK):
                return str(path.resolve())

        return shutil.which(DEFAULT_BIN_NAME) or DEFAULT_BIN_NAME
