"""
Connect Service

The single-connection chain: resolve the host, decide on credential
automation, build argv, then run ssh directly or under the PTY interceptor.
"""

from typing import Callable, Optional, Sequence

import click

from tssm.exceptions import CredentialUnavailableError
from tssm.logger import ConnectLogger
from tssm.models.auth import AuthDecision, CredentialKind, CredentialRef
from tssm.models.host import EffectiveHost
from tssm.services.command_service import CommandBuilder
from tssm.services.decision_service import DecisionEngine
from tssm.services.process_service import ProcessRunner
from tssm.services.pty_service import PtyInterceptor
from tssm.services.resolver_service import HostResolver
from tssm.services.secret_service import SecretStore
from tssm.utils import format_command_line

InterceptorFactory = Callable[[Optional[ConnectLogger]], PtyInterceptor]


def _default_interceptor(logger: Optional[ConnectLogger]) -> PtyInterceptor:
    return PtyInterceptor(logger=logger)


class ConnectService:
    """Connects to one host, with or without credential automation."""

    def __init__(
        self,
        resolver: HostResolver,
        engine: DecisionEngine,
        builder: CommandBuilder,
        secrets: SecretStore,
        runner: Optional[ProcessRunner] = None,
        interceptor_factory: InterceptorFactory = _default_interceptor,
        echo: Callable[[str], None] = click.echo,
    ):
        self.resolver = resolver
        self.engine = engine
        self.builder = builder
        self.secrets = secrets
        self.runner = runner or ProcessRunner()
        self.interceptor_factory = interceptor_factory
        self.echo = echo

    def connect(
        self,
        token: str,
        extra: Sequence[str] = (),
        exec_replace: bool = False,
        dry_run: bool = False,
        debug: bool = False,
        user: Optional[str] = None,
        port: Optional[int] = None,
        logger: Optional[ConnectLogger] = None,
    ) -> int:
        """
        Connect to token.

        Args:
            token: Alias, hostname or user@host
            extra: Extra ssh arguments (disable automation when present)
            exec_replace: Replace this process with ssh for manual logins
            dry_run: Print the argv instead of running it
            debug: Print the decision to stderr
            user: Explicit user
            port: Explicit port
            logger: Operation logger

        Returns:
            Exit status of ssh (wait status for automated sessions)
        """
        host = self.resolver.resolve(token, user=user, port=port)
        decision = self.engine.decide_for(host)
        self.report(host, decision, debug, logger)

        if decision.use_automation and not extra:
            argv = self.builder.automation_argv(host)
            if dry_run:
                self.echo(format_command_line(argv))
                return 0
            return self.run_automated(host, decision, logger=logger)

        argv = self.builder.direct_argv(host, extra)
        if dry_run:
            self.echo(format_command_line(argv))
            return 0
        if logger:
            logger.log_command(format_command_line(argv))
        return self.runner.run(argv, exec_replace=exec_replace)

    def run_automated(
        self,
        host: EffectiveHost,
        decision: AuthDecision,
        logger: Optional[ConnectLogger] = None,
    ) -> int:
        """
        Run ssh under the PTY interceptor with the decided credential.

        Falls back to a manual login if the secret vanished since the decision.
        """
        try:
            secret = self.secrets.reveal(decision.credential)
        except CredentialUnavailableError as e:
            if logger:
                logger.warning(f"{e.message}; falling back to manual login")
            return self.runner.run(self.builder.direct_argv(host))

        interceptor = self.interceptor_factory(logger)
        return interceptor.run(self.builder.automation_argv(host), secret)

    def connect_with_credential(
        self,
        host_key: str,
        user: Optional[str] = None,
        logger: Optional[ConnectLogger] = None,
    ) -> int:
        """
        Connect with a stored password, no decision step.

        Raises:
            CredentialUnavailableError: If no password is stored for (host_key, user)
        """
        resolved = self.resolver.resolve(host_key, user=user)
        host = EffectiveHost(
            name=host_key,
            hostname=host_key,
            user=user or None,
            port=resolved.port,
            jump_host=resolved.jump_host,
            login_mode=resolved.login_mode,
            tags=resolved.tags,
            group=resolved.group,
            in_catalog=resolved.in_catalog,
        )
        secret = self.secrets.reveal(CredentialRef(host_key, user or None, CredentialKind.PASSWORD))
        interceptor = self.interceptor_factory(logger)
        return interceptor.run(self.builder.automation_argv(host), secret)

    def report(
        self,
        host: EffectiveHost,
        decision: AuthDecision,
        debug: bool,
        logger: Optional[ConnectLogger],
    ) -> None:
        line = (
            f"host={host.name} host_key={decision.host_key} user={decision.user or ''} "
            f"port={host.port} in_catalog={host.in_catalog} "
            f"automate={decision.use_automation} ({decision.reason})"
        )
        if logger:
            logger.log(f"Decision: {line}")
        if debug:
            click.echo(f"tssm --debug: {line}", err=True)
