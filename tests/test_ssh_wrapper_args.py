"""Tests for ssh-compatible argument handling in the wrapper."""

import click
import pytest

from tssm.commands.ssh import parse_ssh_wrapper_args


def test_plain_destination():
    parsed = parse_ssh_wrapper_args(["web1"])

    assert parsed.destination == "web1"
    assert parsed.host_token == "web1"
    assert parsed.has_extra is False
    assert parsed.passthrough == ["web1"]


def test_port_and_typed_user():
    parsed = parse_ssh_wrapper_args(["-p", "2222", "admin@web1"])

    assert (parsed.host_token, parsed.user, parsed.port) == ("web1", "admin", 2222)
    assert parsed.has_extra is False


def test_option_values_are_not_destinations():
    parsed = parse_ssh_wrapper_args(["-i", "~/.ssh/web1", "-o", "ServerAliveInterval=30", "web1"])

    assert parsed.destination == "web1"
    assert parsed.has_extra is True


def test_remote_command_counts_as_extra():
    parsed = parse_ssh_wrapper_args(["web1", "uptime"])

    assert parsed.destination == "web1"
    assert parsed.has_extra is True


def test_wrapper_flags_are_removed():
    parsed = parse_ssh_wrapper_args(["--debug", "--no-tmux", "web1"])

    assert parsed.debug is True
    assert parsed.no_tmux is True
    assert parsed.passthrough == ["web1"]


def test_tmux_flags_conflict():
    with pytest.raises(click.UsageError):
        parse_ssh_wrapper_args(["--tmux", "--no-tmux", "web1"])


def test_host_and_user_are_translated():
    parsed = parse_ssh_wrapper_args(["--tmux", "--host", "web1", "--user", "admin"])

    assert parsed.force_tmux is True
    assert parsed.passthrough == ["-l", "admin", "web1"]
    assert (parsed.host_token, parsed.user) == ("web1", "admin")


def test_replica_extra_args_follow_destination():
    parsed = parse_ssh_wrapper_args(["--tmux", "--host", "web1", "--", "-L", "8080:localhost:80"])

    assert parsed.passthrough == ["web1", "-L", "8080:localhost:80"]
    assert parsed.destination == "web1"
    assert parsed.has_extra is True


def test_double_dash_without_host_is_kept():
    parsed = parse_ssh_wrapper_args(["-o", "User=ops", "--", "box"])

    assert parsed.passthrough == ["-o", "User=ops", "--", "box"]
    assert parsed.destination == "box"


def test_no_destination():
    parsed = parse_ssh_wrapper_args(["-V"])

    assert parsed.destination is None
    assert parsed.host_token is None


def test_typed_user_beats_login_flag():
    parsed = parse_ssh_wrapper_args(["-l", "ops", "root@box"])

    assert parsed.user == "root"
