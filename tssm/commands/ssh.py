"""
SSH Wrapper Command

Drop-in `ssh` replacement: same arguments, plus credential automation for
hosts that opt in. Safe to alias as `ssh`.
"""

import rich_click as click
from dataclasses import dataclass, field
from typing import Optional

from tssm.base import HostCommand
from tssm.constants import SSH_BINARY, TMUX_WRAPPER_SESSION
from tssm.exceptions import MultiplexerError
from tssm.utils import format_command_line, split_destination

# ssh(1) single-letter options that consume the next argument
_SSH_OPTIONS_WITH_VALUE = set("BbcDEeFIiJLlmOoPpQRSWw")


@dataclass
class SSHWrapperArgs:
    """ssh-style arguments with the wrapper-only flags taken out."""

    passthrough: list[str] = field(default_factory=list)
    debug: bool = False
    force_tmux: bool = False
    no_tmux: bool = False
    destination: Optional[str] = None
    user: Optional[str] = None
    port: Optional[int] = None
    # True when anything besides destination, -l and -p was given
    has_extra: bool = False

    @property
    def host_token(self) -> Optional[str]:
        if not self.destination:
            return None
        return split_destination(self.destination)[1] or None


def parse_ssh_wrapper_args(args: list[str]) -> SSHWrapperArgs:
    """
    Split wrapper flags from ssh arguments.

    --debug, --tmux and --no-tmux are consumed. --host H [--user U] is
    rewritten to `[-l U] H` so it never reaches ssh.

    Raises:
        click.UsageError: On --tmux together with --no-tmux
    """
    parsed = SSHWrapperArgs()
    host = None
    user = None
    rest = []
    trailing = None

    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--":
            trailing = args[i + 1 :]
            break
        if arg == "--debug":
            parsed.debug = True
        elif arg == "--tmux":
            parsed.force_tmux = True
        elif arg == "--no-tmux":
            parsed.no_tmux = True
        elif arg in ("--host", "--user") and i + 1 < len(args):
            if arg == "--host":
                host = args[i + 1].strip()
            else:
                user = args[i + 1].strip()
            i += 1
        else:
            rest.append(arg)
        i += 1

    if parsed.force_tmux and parsed.no_tmux:
        raise click.UsageError("cannot combine --no-tmux and --tmux")

    if host:
        # ssh re-reads options that follow the destination
        translated = ["-l", user] if user else []
        rest = translated + [host] + rest + (trailing or [])
    elif trailing is not None:
        rest = rest + ["--"] + trailing

    parsed.passthrough = rest

    i = 0
    while i < len(rest):
        arg = rest[i]
        if arg == "--":
            for operand in rest[i + 1 :]:
                if parsed.destination is None:
                    parsed.destination = operand.strip()
                else:
                    parsed.has_extra = True
            break
        if arg == "-l" and i + 1 < len(rest):
            parsed.user = parsed.user or rest[i + 1].strip() or None
            i += 2
            continue
        if arg == "-p" and i + 1 < len(rest):
            try:
                parsed.port = int(rest[i + 1])
            except ValueError:
                parsed.has_extra = True
            i += 2
            continue
        if arg.startswith("-"):
            parsed.has_extra = True
            takes_value = len(arg) == 2 and arg[1] in _SSH_OPTIONS_WITH_VALUE
            i += 2 if takes_value else 1
            continue
        if parsed.destination is None:
            parsed.destination = arg.strip()
        else:
            parsed.has_extra = True
        i += 1

    if parsed.destination:
        typed_user, _ = split_destination(parsed.destination)
        if typed_user:
            parsed.user = typed_user

    return parsed


class SSHWrapperCommand(HostCommand):
    """
    ssh-compatible entry point.

    Inside tmux, or outside without --tmux, the session runs in place.
    Outside tmux with --tmux, a window in the `tssm-ssh` session hosts it.
    """

    def __init__(self, settings, args: SSHWrapperArgs, exec_replace: bool = False):
        super().__init__(settings)
        self.args = args
        self.exec_replace = exec_replace

    def execute(self) -> None:
        args = self.args
        argv = [SSH_BINARY] + args.passthrough

        if not args.host_token:
            if args.debug:
                self.print_dim("tssm ssh --debug: no destination; passthrough to ssh")
            self.finish(argv, self.process_runner.run(argv, exec_replace=self.exec_replace))
            return

        with self.init_logger(args.host_token, "ssh") as logger:
            service = self.ensure_connect_service()
            host = service.resolver.resolve(args.host_token, user=args.user, port=args.port)
            decision = service.engine.decide_for(host)
            automate = decision.use_automation and not args.has_extra

            in_tmux = self.settings.in_multiplexer
            use_tmux = (in_tmux or args.force_tmux) and not args.no_tmux
            service.report(host, decision, args.debug, logger)
            if args.debug:
                self.print_dim(
                    f"tssm ssh --debug: in_tmux={in_tmux} use_tmux={use_tmux} automate={automate}"
                )

            if not use_tmux or in_tmux:
                if automate:
                    code = service.run_automated(host, decision, logger=logger)
                else:
                    logger.log_command(format_command_line(argv))
                    code = self.process_runner.run(argv, exec_replace=self.exec_replace)
                self.finish(argv, code)
                return

            self._open_in_session(decision if automate else None, argv)

    def _open_in_session(self, decision, argv: list[str]) -> None:
        if decision is not None:
            line_argv = [self.settings.self_executable, "__connect", "--host", decision.host_key]
            if decision.user:
                line_argv += ["--user", decision.user]
            line = format_command_line(line_argv)
        else:
            line = format_command_line(argv)

        tmux = self.tmux_service()
        try:
            if not tmux.has_session(TMUX_WRAPPER_SESSION):
                tmux.new_session(TMUX_WRAPPER_SESSION)
            tmux.new_window(
                self.args.host_token,
                line,
                target=TMUX_WRAPPER_SESSION,
                start_dir=None,
            )
        except MultiplexerError as e:
            e.context = f"{e.context or ''} (try --no-tmux)".strip()
            raise

        self.logger.success(f"Opened {self.args.host_token} in tmux session '{TMUX_WRAPPER_SESSION}'")
        self.print_dim(f"Attach with: tmux attach -t {TMUX_WRAPPER_SESSION}")


@click.command(
    name="ssh",
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_obj
def ssh(settings, args):
    """
    ssh-compatible wrapper

    Takes the same arguments as ssh. Wrapper-only flags: --debug, --tmux,
    --no-tmux, and --host/--user (translated to ssh arguments).

    Examples:
        tssm ssh web1
        tssm ssh -p 2222 admin@10.0.0.5
        tssm ssh --tmux --host web1
    """
    if not args:
        raise click.UsageError("usage: tssm ssh <ssh-style args...>")

    cmd = SSHWrapperCommand(settings, parse_ssh_wrapper_args(list(args)))
    cmd.run()
