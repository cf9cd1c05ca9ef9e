"""
Authentication Models

Credential references, per-host overrides, and automation decisions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CredentialKind(Enum):
    """Kind of secret stored for a host."""

    PASSWORD = "password"
    PASSPHRASE = "passphrase"
    OTP = "otp"


class AuthOverride(Enum):
    """Per-host auth mode override persisted in host extras."""

    UNSET = "unset"
    AUTOMATE = "automate"
    MANUAL = "manual"

    @classmethod
    def parse(cls, value: Optional[str]) -> "AuthOverride":
        """Parse a stored value. 'keychain' is the historical spelling of automate."""
        normalized = (value or "").strip().lower()
        if normalized in ("automate", "keychain"):
            return cls.AUTOMATE
        if normalized == "manual":
            return cls.MANUAL
        return cls.UNSET


@dataclass(frozen=True)
class CredentialRef:
    """Identifies a secret without holding it."""

    host_key: str
    user: Optional[str] = None
    kind: CredentialKind = CredentialKind.PASSWORD

    @property
    def account(self) -> str:
        """Account name in the secret store (user, or the host key when no user)."""
        return self.user or self.host_key

    def __repr__(self) -> str:
        return f"CredentialRef(host_key={self.host_key}, account={self.account}, kind={self.kind.value})"


@dataclass(frozen=True)
class AuthDecision:
    """Verdict on whether to automate credential entry for one connection attempt."""

    use_automation: bool
    reason: str
    host_key: str
    user: Optional[str] = None

    @property
    def credential(self) -> CredentialRef:
        """Reference to the password this decision was made for."""
        return CredentialRef(self.host_key, self.user, CredentialKind.PASSWORD)

    def __repr__(self) -> str:
        return (
            f"AuthDecision(use_automation={self.use_automation}, host_key={self.host_key}, "
            f"user={self.user}, reason='{self.reason}')"
        )
