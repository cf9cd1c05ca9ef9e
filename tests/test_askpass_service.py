"""Tests for scp operand parsing and the SSH_ASKPASS wrapper."""

import os
import shlex
import stat
from pathlib import Path

import pytest

from tssm.services.askpass_service import AskpassService, find_scp_remote, parse_scp_remote


@pytest.mark.parametrize(
    "arg, expected",
    [
        ("admin@web1:/var/log/app.log", ("web1", "admin")),
        ("web1:/tmp/", ("web1", None)),
        ("[fe80::1]:/tmp/x", ("fe80::1", None)),
        ("./local/file", None),
        ("./dir:with-colon", None),
        (":/odd", None),
        ("admin@:/tmp", None),
    ],
)
def test_parse_scp_remote(arg, expected):
    assert parse_scp_remote(arg) == expected


def test_find_first_remote_skips_flags():
    assert find_scp_remote(["-r", "build/", "deploy@db1:/srv/"]) == ("db1", "deploy")
    assert find_scp_remote(["a.txt", "b.txt"]) is None


def test_wrapper_script_calls_back(settings, tmp_path: Path):
    service = AskpassService(settings, temp_dir=tmp_path)

    path = service.write_wrapper("10.0.0.5", "admin")

    assert path.name == f"tssm-askpass-{os.getpid()}.sh"
    assert stat.S_IMODE(path.stat().st_mode) == 0o700
    lines = path.read_text().splitlines()
    assert lines[0] == "#!/usr/bin/env bash"
    assert shlex.split(lines[1]) == [
        "exec",
        "/usr/local/bin/tssm",
        "__askpass",
        "--host",
        "10.0.0.5",
        "--user",
        "admin",
        "--kind",
        "password",
    ]


def test_environment_forces_askpass(settings, tmp_path: Path):
    service = AskpassService(settings, temp_dir=tmp_path)

    env = service.environment(tmp_path / "w.sh")

    assert env == {
        "SSH_ASKPASS": str(tmp_path / "w.sh"),
        "SSH_ASKPASS_REQUIRE": "force",
        "DISPLAY": "1",
    }
    merged = service.merged_environment(env)
    assert merged["SSH_ASKPASS_REQUIRE"] == "force"
    assert "PATH" in merged
