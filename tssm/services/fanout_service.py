"""
Fanout Orchestration Service

Replicates one connection across tmux windows or panes. Every replica
re-invokes this program, so each one makes its own credential decision.
"""

from typing import Callable, Optional, Sequence

import click

from tssm.core.settings import Settings
from tssm.exceptions import (
    FanoutEnvironmentError,
    MultiplexerError,
    PartialFanoutError,
)
from tssm.logger import ConnectLogger
from tssm.models.fanout import FanoutPlan
from tssm.models.results import FanoutResult, ReplicaOutcome
from tssm.services.command_service import CommandBuilder
from tssm.services.tmux_service import TmuxService

# (target, extra_args, exec_replace, dry_run) -> exit status
DirectConnect = Callable[[str, Sequence[str], bool, bool], int]


class FanoutOrchestrator:
    """
    Runs a FanoutPlan.

    - count == 1: delegates to the direct connect path unchanged
    - window mode: one window per replica, failures recorded per window
    - split modes: one window, then count-1 splits, then the optional layout;
      the first failure aborts the rest
    """

    def __init__(
        self,
        settings: Settings,
        tmux: TmuxService,
        builder: CommandBuilder,
        direct_connect: DirectConnect,
        echo: Callable[[str], None] = click.echo,
        logger: Optional[ConnectLogger] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            settings: Runtime settings (tmux presence, self executable)
            tmux: tmux control surface
            builder: Builds the per-replica command line
            direct_connect: The non-fanout connect path
            echo: Line printer for dry-run output
            logger: Operation logger (optional)
        """
        self.settings = settings
        self.tmux = tmux
        self.builder = builder
        self.direct_connect = direct_connect
        self.echo = echo
        self.logger = logger

    def run(
        self,
        plan: FanoutPlan,
        extra_args: Sequence[str] = (),
        exec_replace: bool = False,
        dry_run: bool = False,
    ) -> FanoutResult:
        """
        Execute the plan.

        Raises:
            FanoutEnvironmentError: Not inside tmux, or exec-replace with count > 1
            PartialFanoutError: A split-mode step failed after the window was created
            MultiplexerError: The first window or the layout could not be created
        """
        if not self.settings.in_multiplexer:
            raise FanoutEnvironmentError(
                "split-count requires tmux",
                context="Run inside a tmux session or drop --split-count",
            )

        if not plan.is_fanout:
            code = self.direct_connect(plan.target, list(extra_args), exec_replace, dry_run)
            return FanoutResult(target=plan.target, requested=1, exit_code=code)

        if exec_replace:
            raise FanoutEnvironmentError(
                "cannot use --exec-replace with --split-count",
                context="exec-replace would replace this process; fanout opens several sessions",
            )

        line = self.builder.replica_command_line(plan.target, extra_args)

        if dry_run:
            for _ in range(plan.replica_count):
                self.echo(line)
            return FanoutResult(target=plan.target, requested=plan.replica_count)

        if self.logger:
            self.logger.step(f"Opening {plan.replica_count} x {plan.target} ({plan.layout_mode.value})")
        self._log_command(line)

        if plan.layout_mode.is_split:
            return self._run_split(plan, line)
        return self._run_windows(plan, line)

    def _run_windows(self, plan: FanoutPlan, line: str) -> FanoutResult:
        result = FanoutResult(target=plan.target, requested=plan.replica_count)
        for i in range(plan.replica_count):
            outcome = ReplicaOutcome(index=i, command_line=line)
            try:
                self.tmux.new_window(plan.window_name(i), line)
            except MultiplexerError as e:
                outcome.error = e.format_message()
                if self.logger:
                    self.logger.warning(f"Window {i + 1} failed: {e.message}")
            result.replicas.append(outcome)

        if result.failures:
            result.exit_code = 1
        return result

    def _run_split(self, plan: FanoutPlan, line: str) -> FanoutResult:
        result = FanoutResult(target=plan.target, requested=plan.replica_count)

        window_id = self.tmux.new_window(plan.window_name(0), line, print_id=True)
        result.replicas.append(ReplicaOutcome(index=0, command_line=line, window_id=window_id))

        for i in range(1, plan.replica_count):
            try:
                self.tmux.split_pane(window_id, line, flag=plan.layout_mode.split_flag)
            except MultiplexerError as e:
                raise PartialFanoutError(len(result.replicas), plan.replica_count, e) from e
            result.replicas.append(
                ReplicaOutcome(index=i, command_line=line, window_id=window_id)
            )

        layout = (plan.layout_spec or "").strip()
        if layout:
            self.tmux.select_layout(window_id, layout)
            result.layout_applied = True
        return result

    def _log_command(self, line: str) -> None:
        if self.logger:
            self.logger.log_command(line)
