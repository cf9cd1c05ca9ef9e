"""
Connect Command

Connect to a host, optionally fanned out across tmux windows or panes.
"""

import rich_click as click
from dataclasses import dataclass, field
from typing import Optional

from tssm.base import HostCommand
from tssm.models.fanout import FanoutPlan, LayoutMode
from tssm.services import FanoutOrchestrator


@dataclass
class ConnectOptions:
    """Options for connect command."""

    host: str
    extra: list[str] = field(default_factory=list)
    split_count: Optional[int] = None
    split_mode: str = "window"
    split_layout: Optional[str] = None
    exec_replace: bool = False
    dry_run: bool = False
    debug: bool = False


class ConnectCommand(HostCommand):
    """
    Connect to a catalog host or literal destination.

    Features:
    - Credential automation when policy and the keyring allow it
    - Fanout across tmux windows or split panes (--split-count)
    - Exit status propagation from ssh
    """

    def __init__(self, settings, options: ConnectOptions, verbose: bool = False):
        super().__init__(settings, verbose=verbose)
        self.options = options

    def execute(self) -> None:
        """Execute connect command."""
        if self.options.split_count is None:
            self._execute_direct()
        else:
            self._execute_fanout()

    def direct_connect(self, target, extra, exec_replace, dry_run) -> int:
        """The single-connection path shared with count=1 fanouts."""
        service = self.ensure_connect_service()
        return service.connect(
            target,
            extra=extra,
            exec_replace=exec_replace,
            dry_run=dry_run,
            debug=self.options.debug,
            logger=self.logger,
        )

    def _execute_direct(self) -> None:
        opts = self.options
        with self.init_logger(opts.host, "connect"):
            code = self.direct_connect(opts.host, opts.extra, opts.exec_replace, opts.dry_run)
            self.finish(["ssh", opts.host], code)

    def _execute_fanout(self) -> None:
        opts = self.options
        plan = FanoutPlan(
            target=opts.host.strip(),
            replica_count=opts.split_count,
            layout_mode=LayoutMode.parse(opts.split_mode),
            layout_spec=opts.split_layout,
        )

        if plan.is_fanout and not opts.dry_run:
            self.show_header(
                title="Fanout",
                host=plan.target,
                details={
                    "Replicas": plan.replica_count,
                    "Mode": plan.layout_mode.value,
                    **({"Layout": plan.layout_spec} if plan.layout_spec else {}),
                },
            )

        with self.init_logger(plan.target, "fanout") as logger:
            orchestrator = FanoutOrchestrator(
                self.settings,
                self.tmux_service(),
                self.command_builder(),
                self.direct_connect,
                logger=logger,
            )
            result = orchestrator.run(
                plan,
                extra_args=opts.extra,
                exec_replace=opts.exec_replace,
                dry_run=opts.dry_run,
            )

            if not plan.is_fanout:
                self.finish(["ssh", plan.target], result.exit_code)
                return
            if opts.dry_run:
                return

            opened = len(result.replicas) - len(result.failures)
            if result.failures:
                logger.warning(f"Opened {opened} of {plan.replica_count} windows")
                for failure in result.failures:
                    self.print_dim(f"  replica {failure.index + 1}: {failure.error}")
                raise SystemExit(1)

            where = "windows" if not plan.layout_mode.is_split else "panes"
            logger.success(f"Opened {opened} {where} for {plan.target}")


@click.command(name="connect")
@click.argument("host")
@click.argument("extra", nargs=-1, type=click.UNPROCESSED)
@click.option("--split-count", type=int, default=None, help="Open N connections in tmux")
@click.option(
    "--split-mode",
    default="window",
    show_default=True,
    help="window | v | h | vertical-split | horizontal-split",
)
@click.option("--split-layout", default=None, help="tmux layout for split modes (e.g. tiled)")
@click.option("--exec-replace", is_flag=True, help="Replace this process with ssh")
@click.option("--dry-run", is_flag=True, help="Print the command line(s) instead of running")
@click.option("--debug", is_flag=True, help="Print the credential decision to stderr")
@click.option("--verbose", "-v", is_flag=True, help="Show all log lines")
@click.pass_obj
def connect(settings, host, extra, split_count, split_mode, split_layout, exec_replace, dry_run, debug, verbose):
    """
    Connect to a host

    Resolves HOST against the catalog and ssh config, decides whether a
    stored password should be typed for you, and runs ssh.

    Examples:
        # Plain connect
        tssm connect web1

        # Four vertical panes, tiled
        tssm connect web1 --split-count 4 --split-mode v --split-layout tiled

        # Extra ssh arguments after --
        tssm connect web1 -- -L 8080:localhost:80
    """
    options = ConnectOptions(
        host=host,
        extra=list(extra),
        split_count=split_count,
        split_mode=split_mode,
        split_layout=split_layout,
        exec_replace=exec_replace,
        dry_run=dry_run,
        debug=debug,
    )

    cmd = ConnectCommand(settings, options, verbose=verbose)
    cmd.run()
