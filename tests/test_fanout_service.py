"""Tests for fanout across tmux windows and panes."""

import pytest

from conftest import FakeTmux
from tssm.exceptions import FanoutEnvironmentError, MultiplexerError, PartialFanoutError
from tssm.models.fanout import FanoutPlan, LayoutMode
from tssm.models.results import ResultStatus
from tssm.services.command_service import CommandBuilder
from tssm.services.fanout_service import FanoutOrchestrator

LINE = "exec /usr/local/bin/tssm ssh --tmux --host web1"


class DirectConnectSpy:
    def __init__(self, code=0):
        self.code = code
        self.calls = []

    def __call__(self, target, extra, exec_replace, dry_run):
        self.calls.append((target, extra, exec_replace, dry_run))
        return self.code


def _orchestrator(settings, tmux=None, direct=None, echo=None):
    return FanoutOrchestrator(
        settings,
        tmux or FakeTmux(),
        CommandBuilder(settings),
        direct or DirectConnectSpy(),
        echo=echo or (lambda line: None),
    )


def test_vertical_split_call_order(tmux_settings):
    tmux = FakeTmux(window_id="@7")
    plan = FanoutPlan("web1", 3, LayoutMode.VERTICAL_SPLIT, "tiled")

    result = _orchestrator(tmux_settings, tmux).run(plan)

    assert tmux.calls == [
        ("new_window", "web1", LINE, True),
        ("split_pane", "@7", LINE, "-v"),
        ("split_pane", "@7", LINE, "-v"),
        ("select_layout", "@7", "tiled"),
    ]
    assert result.status is ResultStatus.SUCCESS
    assert result.layout_applied is True
    assert len(result.replicas) == 3


def test_horizontal_split_without_layout(tmux_settings):
    tmux = FakeTmux()

    _orchestrator(tmux_settings, tmux).run(FanoutPlan("web1", 2, LayoutMode.HORIZONTAL_SPLIT))

    assert [c[0] for c in tmux.calls] == ["new_window", "split_pane"]
    assert tmux.calls[1][3] == "-h"


def test_split_failure_aborts_remaining(tmux_settings):
    tmux = FakeTmux(fail={"split_pane": 2})
    plan = FanoutPlan("web1", 4, LayoutMode.VERTICAL_SPLIT, "tiled")

    with pytest.raises(PartialFanoutError) as exc_info:
        _orchestrator(tmux_settings, tmux).run(plan)

    assert exc_info.value.created == 2
    assert exc_info.value.requested == 4
    assert "no space for new pane" in exc_info.value.context
    assert [c[0] for c in tmux.calls] == ["new_window", "split_pane", "split_pane"]


def test_first_window_failure_is_not_partial(tmux_settings):
    tmux = FakeTmux(fail={"new_window": 1})

    with pytest.raises(MultiplexerError) as exc_info:
        _orchestrator(tmux_settings, tmux).run(FanoutPlan("web1", 3, LayoutMode.VERTICAL_SPLIT))

    assert not isinstance(exc_info.value, PartialFanoutError)
    assert len(tmux.calls) == 1


def test_window_mode_is_best_effort(tmux_settings):
    tmux = FakeTmux(fail={"new_window": 2})

    result = _orchestrator(tmux_settings, tmux).run(FanoutPlan("web1", 3))

    assert [c[1] for c in tmux.calls] == ["web1[1]", "web1[2]", "web1[3]"]
    assert [r.index for r in result.failures] == [1]
    assert result.status is ResultStatus.PARTIAL
    assert result.exit_code == 1


def test_count_one_delegates_to_direct_connect(tmux_settings):
    tmux = FakeTmux()
    direct = DirectConnectSpy(code=7)

    result = _orchestrator(tmux_settings, tmux, direct).run(
        FanoutPlan("web1", 1), extra_args=["-A"], exec_replace=True
    )

    assert direct.calls == [("web1", ["-A"], True, False)]
    assert tmux.calls == []
    assert result.exit_code == 7


def test_requires_tmux_even_for_one_replica(settings):
    direct = DirectConnectSpy()

    with pytest.raises(FanoutEnvironmentError, match="requires tmux"):
        _orchestrator(settings, direct=direct).run(FanoutPlan("web1", 1))

    assert direct.calls == []


def test_exec_replace_rejected_for_fanout(tmux_settings):
    tmux = FakeTmux()

    with pytest.raises(FanoutEnvironmentError):
        _orchestrator(tmux_settings, tmux).run(FanoutPlan("web1", 2), exec_replace=True)

    assert tmux.calls == []


def test_dry_run_prints_each_replica(tmux_settings):
    tmux = FakeTmux()
    lines = []

    result = _orchestrator(tmux_settings, tmux, echo=lines.append).run(
        FanoutPlan("web1", 3, LayoutMode.VERTICAL_SPLIT), dry_run=True
    )

    assert lines == [LINE, LINE, LINE]
    assert tmux.calls == []
    assert result.replicas == []


def test_extra_args_reach_the_replica_line(tmux_settings):
    lines = []

    _orchestrator(tmux_settings, echo=lines.append).run(
        FanoutPlan("web1", 2), extra_args=["-L", "8080:localhost:80"], dry_run=True
    )

    assert lines[0] == LINE + " -- -L 8080:localhost:80"


def test_plan_validation():
    with pytest.raises(ValueError, match="split-count"):
        FanoutPlan("web1", 0)
    with pytest.raises(ValueError):
        LayoutMode.parse("diagonal")
    assert LayoutMode.parse("v") is LayoutMode.VERTICAL_SPLIT
    assert LayoutMode.parse("h").split_flag == "-h"
