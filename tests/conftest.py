"""Shared test fixtures for tssm."""

import dataclasses
import threading
from contextlib import contextmanager
from pathlib import Path
from types import SimpleNamespace

import pytest

from tssm.core.settings import Settings
from tssm.exceptions import CredentialUnavailableError, MultiplexerError
from tssm.services.secret_service import SecretStore
from tssm.services.terminal_service import TerminalController

TMUX_ENV = "/tmp/tmux-1000/default,4242,0"

CATALOG_YAML = """
groups:
  - name: prod
    default_user: deploy
    default_port: 2200
    jump_host: bastion.example.com
hosts:
  - name: web1
    user: admin
    port: 2222
    tags: [web, primary]
  - name: db1
    group: prod
    login_mode: askpass
    tags: [db]
  - name: cache1
    group: prod
    user: redis
"""


class MemorySecretStore(SecretStore):
    """In-memory secret store keyed like the keyring one."""

    def __init__(self, secrets=None, fail=False):
        self.secrets = dict(secrets or {})
        self.fail = fail
        self.probes = []

    @staticmethod
    def key(ref):
        return (ref.host_key, ref.account, ref.kind.value)

    def exists(self, ref):
        self.probes.append(ref)
        if self.fail:
            raise OSError("keyring locked")
        return self.key(ref) in self.secrets

    def reveal(self, ref):
        if self.key(ref) not in self.secrets:
            raise CredentialUnavailableError(ref.host_key, ref.user, ref.kind.value, "not found")
        return bytearray(self.secrets[self.key(ref)].encode("utf-8"))

    def store(self, ref, secret):
        self.secrets[self.key(ref)] = secret

    def delete(self, ref):
        self.secrets.pop(self.key(ref), None)


class FakeTerminal(TerminalController):
    """Records raw-mode transitions instead of touching a tty."""

    def __init__(self, interactive=True, size=(40, 120)):
        self.interactive = interactive
        self.size = size
        self.events = []

    def is_interactive(self):
        return self.interactive

    def get_size(self):
        return self.size

    def flush_input(self):
        self.events.append("flush")

    @contextmanager
    def raw_mode(self):
        self.events.append("raw-enter")
        try:
            yield
        finally:
            self.events.append("raw-exit")


WAIT_FOR_INPUT = object()


class FakeChild:
    """Stands in for PtyProcess: queued output chunks, recorded writes."""

    def __init__(self, chunks=(), returncode=0):
        self.chunks = list(chunks)
        self.returncode = returncode
        self.writes = []
        self.sizes = []
        self.killed = False
        self.closed = False
        self._wrote = threading.Event()

    def read(self, size):
        if not self.chunks:
            return b""
        chunk = self.chunks.pop(0)
        if chunk is WAIT_FOR_INPUT:
            self._wrote.wait(2.0)
            return self.read(size)
        return chunk

    def write(self, data):
        self.writes.append(bytes(data))
        self._wrote.set()
        return len(data)

    def set_size(self, rows, cols):
        self.sizes.append((rows, cols))

    def wait(self):
        return self.returncode

    def kill(self):
        self.killed = True

    def close(self):
        self.closed = True


class FakeTmux:
    """Records TmuxService calls; fails the N-th call of a method when asked."""

    def __init__(self, window_id="@7", fail=None):
        self.window_id = window_id
        self.fail = dict(fail or {})
        self.calls = []
        self._counts = {}

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        self._counts[name] = self._counts.get(name, 0) + 1
        if self.fail.get(name) == self._counts[name]:
            raise MultiplexerError(f"tmux {name} failed", context="no space for new pane")

    def new_window(self, name, command_line, target=None, start_dir=None, print_id=False):
        self._record("new_window", name, command_line, print_id)
        return self.window_id if print_id else None

    def split_pane(self, target, command_line, flag="-v", start_dir=None):
        self._record("split_pane", target, command_line, flag)

    def select_layout(self, target, layout):
        self._record("select_layout", target, layout)


class RecordingRunner:
    """subprocess.run stand-in returning canned results."""

    def __init__(self, returncode=0, stdout="", stderr="", error=None):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.error = error
        self.calls = []

    def __call__(self, argv, **kwargs):
        self.calls.append((list(argv), kwargs))
        if self.error is not None:
            raise self.error
        return SimpleNamespace(returncode=self.returncode, stdout=self.stdout, stderr=self.stderr)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings outside tmux with file logging off."""
    return Settings(
        self_executable="/usr/local/bin/tssm",
        config_home=tmp_path / "config",
        log_dir=tmp_path / "logs",
        log_enabled=False,
    )


@pytest.fixture()
def tmux_settings(settings: Settings) -> Settings:
    """Settings as seen from inside a tmux pane."""
    return dataclasses.replace(settings, tmux=TMUX_ENV)


@pytest.fixture()
def catalog_file(settings: Settings) -> Path:
    """Sample catalog written to the settings' config home."""
    path = settings.config_home / "hosts.yaml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(CATALOG_YAML)
    return path
