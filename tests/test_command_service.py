"""Tests for argv building and shell-safe command lines."""

import dataclasses
import shlex

import pytest

from tssm.constants import AUTOMATION_SSH_OPTIONS
from tssm.models.host import EffectiveHost
from tssm.services.command_service import CommandBuilder
from tssm.services.override_service import HostExtrasService
from tssm.utils import format_command_line


@pytest.fixture()
def builder(settings):
    return CommandBuilder(settings, HostExtrasService(settings.extras_dir))


def test_command_line_survives_shell_tokenizing():
    argv = ["ssh", "-o", "ProxyCommand=nc %h %p", "it's", "", "$HOME", "`id`", "a\"b", "plain"]

    assert shlex.split(format_command_line(argv)) == argv


def test_safe_arguments_stay_unquoted():
    assert format_command_line(["ssh", "-p", "2222", "admin@web1"]) == "ssh -p 2222 admin@web1"


def test_replica_line_with_spaces_in_executable(settings):
    settings = dataclasses.replace(settings, self_executable="/opt/my tools/tssm")
    builder = CommandBuilder(settings)

    line = builder.replica_command_line("web1", extra=["-L", "8080:localhost:80"], user="o'neil")

    assert line.startswith("exec ")
    assert shlex.split(line[len("exec "):]) == [
        "/opt/my tools/tssm",
        "ssh",
        "--tmux",
        "--host",
        "web1",
        "--user",
        "o'neil",
        "--",
        "-L",
        "8080:localhost:80",
    ]


def test_replica_argv_minimal(builder):
    assert builder.replica_argv("web1") == [
        "/usr/local/bin/tssm",
        "ssh",
        "--tmux",
        "--host",
        "web1",
    ]


def test_ssh_argv_for_catalog_host(builder):
    host = EffectiveHost(
        name="db1",
        user="deploy",
        port=2200,
        jump_host="bastion.example.com",
        in_catalog=True,
    )

    assert builder.ssh_argv(host, ["-A"]) == [
        "ssh",
        "-p",
        "2200",
        "-J",
        "bastion.example.com",
        "deploy@db1",
        "-A",
    ]


def test_default_port_is_omitted(builder):
    host = EffectiveHost(name="web1", port=22, in_catalog=True)

    assert builder.ssh_argv(host) == ["ssh", "web1"]


def test_identity_file_from_host_extras(builder, settings):
    path = settings.extras_dir / "10.0.0.5.yaml"
    path.parent.mkdir(parents=True)
    path.write_text("identity_file: /keys/web1_ed25519\n")
    host = EffectiveHost(name="web1", hostname="10.0.0.5", user="admin", in_catalog=True)

    assert builder.ssh_argv(host) == ["ssh", "-i", "/keys/web1_ed25519", "admin@10.0.0.5"]


def test_literal_argv_keeps_extra_before_destination(builder):
    host = EffectiveHost(name="example.org", user="me", port=2022, in_catalog=False)

    assert builder.direct_argv(host, ["-v"]) == ["ssh", "-v", "-p", "2022", "me@example.org"]


def test_automation_argv_forces_password_auth(builder):
    host = EffectiveHost(
        name="web1", hostname="10.0.0.5", user="admin", port=2222, in_catalog=True
    )

    argv = builder.automation_argv(host)

    assert argv[0] == "ssh"
    assert argv[1 : 1 + len(AUTOMATION_SSH_OPTIONS)] == AUTOMATION_SSH_OPTIONS
    assert argv[-3:] == ["-p", "2222", "admin@10.0.0.5"]


def test_mux_options_with_explicit_path(settings):
    settings = dataclasses.replace(settings, ssh_mux=True, ssh_mux_path="/tmp/tssm-mux.sock")
    builder = CommandBuilder(settings)
    host = EffectiveHost(name="web1", user="admin", in_catalog=True)

    argv = builder.ssh_argv(host)

    assert "ControlMaster=auto" in argv
    assert "ControlPath=/tmp/tssm-mux.sock" in argv
    assert argv[-1] == "admin@web1"


def test_mux_control_path_under_config_home(settings):
    settings = dataclasses.replace(settings, ssh_mux=True)
    builder = CommandBuilder(settings)
    host = EffectiveHost(name="web1", user="admin", port=2222, in_catalog=True)

    path = builder.control_path(host)

    assert path == str(settings.config_home / "mux" / "admin@web1_2222.sock")
    assert (settings.config_home / "mux").is_dir()


def test_mux_disabled_by_default(builder):
    assert builder.mux_options(EffectiveHost(name="web1")) == []


def test_scp_argv(builder):
    assert builder.scp_argv(["-P", "2222", "a.txt", "web1:/tmp/"]) == [
        "scp",
        "-P",
        "2222",
        "a.txt",
        "web1:/tmp/",
    ]
