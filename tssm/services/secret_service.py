"""
Secret Store Service

Narrow capability over the OS secret store, keyed by (host key, user, kind).
Secrets are returned as bytearrays so callers can wipe them after use.
"""

from abc import ABC, abstractmethod

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from tssm.constants import APP_NAME
from tssm.exceptions import CredentialUnavailableError
from tssm.models.auth import CredentialRef


class SecretStore(ABC):
    """Secret store capability."""

    @abstractmethod
    def exists(self, ref: CredentialRef) -> bool:
        """True if a secret is stored for ref. Never raises."""

    @abstractmethod
    def reveal(self, ref: CredentialRef) -> bytearray:
        """Return the secret bytes. Raises CredentialUnavailableError."""

    @abstractmethod
    def store(self, ref: CredentialRef, secret: str) -> None:
        pass

    @abstractmethod
    def delete(self, ref: CredentialRef) -> None:
        pass


class KeyringSecretStore(SecretStore):
    """
    Secret store backed by the `keyring` library.

    Entries use service "tssm:<kind>:<host_key>" and the user (or the host key)
    as account.
    """

    @staticmethod
    def service_name(ref: CredentialRef) -> str:
        return f"{APP_NAME}:{ref.kind.value}:{ref.host_key}"

    def exists(self, ref: CredentialRef) -> bool:
        """
        Probe for a stored secret without handing it to the caller.

        keyring has no metadata-only lookup, so the backend still decrypts the
        entry; the credential object is dropped here without being read.
        """
        try:
            return keyring.get_credential(self.service_name(ref), ref.account) is not None
        except KeyringError:
            return False

    def reveal(self, ref: CredentialRef) -> bytearray:
        try:
            secret = keyring.get_password(self.service_name(ref), ref.account)
        except KeyringError as e:
            raise CredentialUnavailableError(
                ref.host_key, ref.user, ref.kind.value, reason=str(e)
            )
        if secret is None:
            raise CredentialUnavailableError(
                ref.host_key, ref.user, ref.kind.value, reason="not found"
            )
        return bytearray(secret.encode("utf-8"))

    def store(self, ref: CredentialRef, secret: str) -> None:
        """
        Store a secret.

        Raises:
            CredentialUnavailableError: If the backend refuses the write
        """
        try:
            keyring.set_password(self.service_name(ref), ref.account, secret)
        except KeyringError as e:
            raise CredentialUnavailableError(
                ref.host_key, ref.user, ref.kind.value, reason=f"store failed: {e}"
            )

    def delete(self, ref: CredentialRef) -> None:
        """
        Delete a secret.

        Raises:
            CredentialUnavailableError: If nothing is stored or the backend fails
        """
        try:
            keyring.delete_password(self.service_name(ref), ref.account)
        except PasswordDeleteError:
            raise CredentialUnavailableError(
                ref.host_key, ref.user, ref.kind.value, reason="not found"
            )
        except KeyringError as e:
            raise CredentialUnavailableError(
                ref.host_key, ref.user, ref.kind.value, reason=f"delete failed: {e}"
            )
