"""
SCP Wrapper Command

Drop-in `scp` replacement. For hosts with credential automation enabled,
scp gets its password from `tssm __askpass` through SSH_ASKPASS.
"""

import subprocess

import rich_click as click

from tssm.base import HostCommand
from tssm.services import AskpassService
from tssm.services.askpass_service import find_scp_remote
from tssm.utils import format_command_line


class SCPWrapperCommand(HostCommand):
    """scp-compatible entry point."""

    def __init__(self, settings, args: list[str], debug: bool = False):
        super().__init__(settings)
        self.args = args
        self.debug = debug

    def execute(self) -> None:
        builder = self.command_builder()
        argv = builder.scp_argv(self.args)

        remote = find_scp_remote(self.args)
        if remote is None:
            if self.debug:
                self.print_dim("tssm scp --debug: no remote operand; passthrough to scp")
            self.finish(argv, self.process_runner.run(argv))
            return

        host_token, user = remote
        with self.init_logger(host_token, "scp") as logger:
            service = self.ensure_connect_service()
            host = service.resolver.resolve(host_token, user=user)
            decision = service.engine.decide_for(host)
            service.report(host, decision, self.debug, logger)

            if not decision.use_automation:
                logger.log_command(format_command_line(argv))
                self.finish(argv, self.process_runner.run(argv))
                return

            askpass = AskpassService(self.settings)
            wrapper = askpass.write_wrapper(decision.host_key, decision.user)
            logger.log(f"SSH_ASKPASS wrapper: {wrapper}")
            logger.log_command(format_command_line(argv))

            env = askpass.merged_environment(askpass.environment(wrapper))
            code = self.process_runner.run(argv, env=env, stdin=subprocess.DEVNULL)
            if code != 0:
                self.print_dim(f"askpass wrapper kept at {wrapper}")
            self.finish(argv, code)


@click.command(
    name="scp",
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_obj
def scp(settings, args):
    """
    scp-compatible wrapper

    Takes the same arguments as scp, plus --debug.

    Examples:
        tssm scp ./build.tgz web1:/tmp/
        tssm scp admin@db1:/var/log/app.log .
    """
    args = list(args)
    debug = "--debug" in args
    args = [a for a in args if a != "--debug"]
    if not args:
        raise click.UsageError("usage: tssm scp <scp-style args...>")

    cmd = SCPWrapperCommand(settings, args, debug=debug)
    cmd.run()
