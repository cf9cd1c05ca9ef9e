"""
Internal Commands

Hidden entry points re-invoked by tmux windows and by OpenSSH.
"""

import sys

import rich_click as click

from tssm.base import HostCommand
from tssm.models.auth import CredentialKind, CredentialRef
from tssm.services.pty_service import wipe


class InternalConnectCommand(HostCommand):
    """Connect with a stored password, skipping the decision step."""

    def __init__(self, settings, host: str, user: str = None):
        super().__init__(settings)
        self.host = host.strip()
        self.user = (user or "").strip() or None

    def execute(self) -> None:
        if not self.host:
            raise click.UsageError("usage: tssm __connect --host <host> [--user <user>]")
        with self.init_logger(self.host, "connect") as logger:
            service = self.ensure_connect_service()
            code = service.connect_with_credential(self.host, self.user, logger=logger)
            self.finish(["ssh", self.host], code)


class AskpassCommand(HostCommand):
    """
    SSH_ASKPASS helper.

    Prints the secret on stdout because that is the askpass protocol; nothing
    else is written there and nothing is logged.
    """

    def __init__(self, settings, host: str, user: str = None, kind: str = "password"):
        super().__init__(settings)
        self.host = host.strip()
        self.user = (user or "").strip() or None
        self.kind = (kind or "password").strip().lower()

    def execute(self) -> None:
        if self.kind != CredentialKind.PASSWORD.value:
            raise click.UsageError(f"__askpass: unsupported kind {self.kind!r} (password only)")

        ref = CredentialRef(self.host, self.user, CredentialKind.PASSWORD)
        secret = self.ensure_secret_store().reveal(ref)
        try:
            sys.stdout.buffer.write(secret)
            sys.stdout.buffer.flush()
        finally:
            wipe(secret)


@click.command(name="__connect", hidden=True)
@click.option("--host", required=True)
@click.option("--user", default=None)
@click.pass_obj
def internal_connect(settings, host, user):
    """Connect using the stored password (used inside tmux windows)"""
    InternalConnectCommand(settings, host, user).run()


@click.command(name="__askpass", hidden=True)
@click.option("--host", required=True)
@click.option("--user", default=None)
@click.option("--kind", default="password")
@click.pass_obj
def askpass(settings, host, user, kind):
    """Print the stored password for OpenSSH (SSH_ASKPASS)"""
    AskpassCommand(settings, host, user, kind).run()
