"""Tests for the single-connection chain and the process runner."""

import subprocess
from types import SimpleNamespace

import pytest

from conftest import MemorySecretStore, RecordingRunner
from tssm.constants import AUTOMATION_SSH_OPTIONS
from tssm.core.config_loader import CatalogLoader
from tssm.exceptions import CredentialUnavailableError, ProcessStartError
from tssm.services.command_service import CommandBuilder
from tssm.services.connect_service import ConnectService
from tssm.services.decision_service import DecisionEngine
from tssm.services.override_service import HostExtrasService
from tssm.services.process_service import ProcessRunner
from tssm.services.pty_service import wipe
from tssm.services.resolver_service import HostResolver, NativeHostConfig


class NoNative:
    def evaluate(self, host):
        return NativeHostConfig()


class InterceptorSpy:
    def __init__(self, returncode=0):
        self.returncode = returncode
        self.calls = []

    def run(self, argv, secret=None, env=None):
        self.calls.append((list(argv), bytes(secret) if secret is not None else None))
        wipe(secret)
        return self.returncode


class VanishingStore(MemorySecretStore):
    """Reports the secret as present, then fails to reveal it."""

    def exists(self, ref):
        return True

    def reveal(self, ref):
        raise CredentialUnavailableError(ref.host_key, ref.user, ref.kind.value, "locked")


@pytest.fixture()
def harness(settings, catalog_file):
    catalog = CatalogLoader(settings.config_home).load()
    extras = HostExtrasService(settings.extras_dir)
    store = MemorySecretStore({("db1", "deploy", "password"): "pw"})
    spy = InterceptorSpy()
    process = RecordingRunner()
    lines = []

    def build(secrets=store):
        return ConnectService(
            resolver=HostResolver(catalog, NoNative()),
            engine=DecisionEngine(secrets, extras),
            builder=CommandBuilder(settings, extras),
            secrets=secrets,
            runner=ProcessRunner(runner=process),
            interceptor_factory=lambda logger: spy,
            echo=lines.append,
        )

    return SimpleNamespace(build=build, spy=spy, process=process, lines=lines, store=store)


DB1_AUTOMATION = ["ssh"] + AUTOMATION_SSH_OPTIONS + ["-p", "2200", "-J", "bastion.example.com", "deploy@db1"]


def test_default_host_runs_plain_ssh(harness):
    code = harness.build().connect("web1")

    assert code == 0
    assert harness.process.calls[0][0] == ["ssh", "-p", "2222", "admin@web1"]
    assert harness.spy.calls == []


def test_askpass_host_runs_under_interceptor(harness):
    harness.build().connect("db1")

    assert harness.spy.calls == [(DB1_AUTOMATION, b"pw")]
    assert harness.process.calls == []


def test_extra_args_disable_automation(harness):
    harness.build().connect("db1", extra=["-A"])

    assert harness.spy.calls == []
    assert harness.process.calls[0][0][-2:] == ["deploy@db1", "-A"]


def test_dry_run_prints_the_automation_argv(harness):
    harness.build().connect("db1", dry_run=True)

    assert harness.lines == [" ".join(DB1_AUTOMATION)]
    assert harness.spy.calls == []
    assert harness.process.calls == []


def test_vanished_secret_falls_back_to_manual(harness):
    harness.build(VanishingStore()).connect("db1")

    assert harness.spy.calls == []
    assert harness.process.calls[0][0][-1] == "deploy@db1"


def test_debug_reports_decision(harness, capsys):
    harness.build().connect("web1", dry_run=True, debug=True)

    err = capsys.readouterr().err
    assert "tssm --debug:" in err
    assert "automate=False (default passthrough)" in err
    assert "pw" not in err


def test_connect_with_credential(harness):
    harness.store.secrets[("10.0.0.5", "admin", "password")] = "s3cret"

    harness.build().connect_with_credential("10.0.0.5", "admin")

    argv, secret = harness.spy.calls[0]
    assert argv[-1] == "admin@10.0.0.5"
    assert secret == b"s3cret"


def test_connect_with_credential_requires_secret(harness):
    with pytest.raises(CredentialUnavailableError):
        harness.build().connect_with_credential("10.0.0.5", "admin")


def test_process_runner_returns_exit_status():
    runner = RecordingRunner(returncode=255)

    assert ProcessRunner(runner=runner).run(["ssh", "web1"], stdin=subprocess.DEVNULL) == 255
    assert runner.calls[0][1]["stdin"] is subprocess.DEVNULL


def test_process_runner_start_failure():
    runner = RecordingRunner(error=FileNotFoundError("ssh"))

    with pytest.raises(ProcessStartError):
        ProcessRunner(runner=runner).run(["ssh", "web1"])


def test_process_runner_exec_replace(monkeypatch):
    calls = []
    monkeypatch.setattr("tssm.services.process_service.shutil.which", lambda name: "/usr/bin/" + name)

    code = ProcessRunner(execve=lambda *args: calls.append(args)).run(
        ["ssh", "web1"], exec_replace=True, env={"TERM": "xterm"}
    )

    assert code == 0
    assert calls == [("/usr/bin/ssh", ["ssh", "web1"], {"TERM": "xterm"})]


def test_process_runner_exec_missing_program(monkeypatch):
    monkeypatch.setattr("tssm.services.process_service.shutil.which", lambda name: None)

    with pytest.raises(ProcessStartError, match="command not found"):
        ProcessRunner(execve=lambda *args: None).run(["ssh"], exec_replace=True)
