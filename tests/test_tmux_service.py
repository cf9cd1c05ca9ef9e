"""Tests for the tmux control wrapper."""

import pytest

from conftest import RecordingRunner
from tssm.exceptions import MultiplexerError
from tssm.services.tmux_service import TmuxService


def test_targets_socket_from_tmux_env(tmux_settings):
    runner = RecordingRunner()
    tmux = TmuxService.from_settings(tmux_settings, runner=runner)

    tmux.select_layout("@3", "tiled")

    argv, kwargs = runner.calls[0]
    assert argv == ["tmux", "-S", "/tmp/tmux-1000/default", "select-layout", "-t", "@3", "tiled"]
    assert kwargs["capture_output"] is True


def test_default_server_without_socket():
    runner = RecordingRunner()

    TmuxService(runner=runner).has_session("tssm-ssh")

    assert runner.calls[0][0] == ["tmux", "has-session", "-t", "tssm-ssh"]


def test_new_window_returns_window_id():
    runner = RecordingRunner(stdout="@12\n")
    tmux = TmuxService(runner=runner)

    window_id = tmux.new_window("web1", "exec tssm ssh --tmux --host web1", print_id=True)

    assert window_id == "@12"
    assert runner.calls[0][0] == [
        "tmux",
        "new-window",
        "-P",
        "-F",
        "#{window_id}",
        "-n",
        "web1",
        "-c",
        "#{pane_current_path}",
        "--",
        "bash",
        "-lc",
        "exec tssm ssh --tmux --host web1",
    ]


def test_new_window_in_session_without_start_dir():
    runner = RecordingRunner()

    TmuxService(runner=runner).new_window("web1", "ssh web1", target="tssm-ssh", start_dir=None)

    assert runner.calls[0][0] == [
        "tmux",
        "new-window",
        "-t",
        "tssm-ssh",
        "-n",
        "web1",
        "--",
        "bash",
        "-lc",
        "ssh web1",
    ]


def test_split_pane_args():
    runner = RecordingRunner()

    TmuxService(runner=runner).split_pane("@12", "exec tssm ssh --tmux --host web1", flag="-h")

    assert runner.calls[0][0][:6] == ["tmux", "split-window", "-h", "-t", "@12", "-c"]
    assert runner.calls[0][0][-3:] == ["bash", "-lc", "exec tssm ssh --tmux --host web1"]


def test_non_zero_exit_raises_with_stderr():
    runner = RecordingRunner(returncode=1, stderr="no space for new pane\n")

    with pytest.raises(MultiplexerError) as exc_info:
        TmuxService(runner=runner).split_pane("@12", "true")

    assert exc_info.value.context == "no space for new pane"


def test_missing_binary_raises():
    runner = RecordingRunner(error=FileNotFoundError("tmux"))

    with pytest.raises(MultiplexerError, match="not installed"):
        TmuxService(runner=runner).new_session("tssm-ssh")


def test_missing_window_id_raises():
    runner = RecordingRunner(stdout="")

    with pytest.raises(MultiplexerError):
        TmuxService(runner=runner).new_window("web1", "true", print_id=True)


def test_has_session_false_on_error():
    runner = RecordingRunner(returncode=1, stderr="can't find session: tssm-ssh")

    assert TmuxService(runner=runner).has_session("tssm-ssh") is False


def test_new_session_detached():
    runner = RecordingRunner()

    TmuxService(runner=runner).new_session("tssm-ssh")

    assert runner.calls[0][0] == ["tmux", "new-session", "-d", "-s", "tssm-ssh"]
