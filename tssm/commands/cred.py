"""
Credential Commands

Store, check and remove keyring passwords used for credential automation.
"""

import rich_click as click
from typing import Optional

from tssm.base import HostCommand
from tssm.constants import CREDENTIAL_KINDS
from tssm.models.auth import AuthOverride, CredentialKind, CredentialRef


class CredCommand(HostCommand):
    """
    Manage one credential.

    Actions:
    - set: prompt without echo, store, enable automation for the host
    - get: verify that a credential exists (never prints it)
    - delete: remove the credential
    """

    def __init__(self, settings, action: str, host: str, user: Optional[str], kind: str):
        super().__init__(settings)
        self.action = action
        self.ref = CredentialRef(host.strip(), (user or "").strip() or None, CredentialKind(kind))

    def execute(self) -> None:
        store = self.ensure_secret_store()
        ref = self.ref
        label = f"{ref.kind.value} for {ref.account}@{ref.host_key}"

        if self.action == "set":
            secret = click.prompt(
                f"{ref.kind.value.capitalize()} for {ref.account}@{ref.host_key}",
                hide_input=True,
                confirmation_prompt=True,
                err=True,
            )
            store.store(ref, secret)
            path = self.ensure_extras_service().set_auth_override(
                ref.host_key, AuthOverride.AUTOMATE
            )
            self.print_success(f"Stored {label}")
            self.print_dim(f"Automation enabled in {path}")
        elif self.action == "get":
            if not store.exists(ref):
                self.print_error(f"No {label}")
                raise SystemExit(1)
            self.print_success(f"Found {label}")
        elif self.action == "delete":
            store.delete(ref)
            self.print_success(f"Deleted {label}")


def _cred_options(func):
    func = click.option(
        "--kind",
        type=click.Choice(CREDENTIAL_KINDS),
        default="password",
        show_default=True,
        help="Credential kind",
    )(func)
    func = click.option("--user", default=None, help="Account (defaults to the host key)")(func)
    func = click.option("--host", required=True, help="Host key (resolved hostname or alias)")(func)
    return func


@click.group(name="cred")
def cred():
    """
    Manage stored credentials

    Credentials live in the OS keyring under service tssm:<kind>:<host>.
    """


@cred.command(name="set")
@_cred_options
@click.pass_obj
def cred_set(settings, host, user, kind):
    """Store a credential and enable automation for the host"""
    CredCommand(settings, "set", host, user, kind).run()


@cred.command(name="get")
@_cred_options
@click.pass_obj
def cred_get(settings, host, user, kind):
    """Check that a credential exists"""
    CredCommand(settings, "get", host, user, kind).run()


@cred.command(name="delete")
@_cred_options
@click.pass_obj
def cred_delete(settings, host, user, kind):
    """Delete a credential"""
    CredCommand(settings, "delete", host, user, kind).run()
