"""
Credential Automation Decision Service

Decides, per connection attempt, whether a stored password should be injected
or the user should authenticate by hand.
"""

from typing import Optional

from tssm.exceptions import TssmError
from tssm.models.auth import AuthDecision, AuthOverride, CredentialKind, CredentialRef
from tssm.models.host import EffectiveHost, LoginMode
from tssm.services.override_service import HostExtrasService
from tssm.services.secret_service import SecretStore

REASON_OVERRIDE_AUTOMATE = "host override: automate"
REASON_OVERRIDE_MANUAL = "host override: manual"
REASON_LOGIN_MODE_ASKPASS = "login_mode=askpass"
REASON_DEFAULT = "default passthrough"
REASON_CREDENTIAL_MISSING = (
    "credential missing/unavailable; fallback to standard authentication"
)


class DecisionEngine:
    """
    Computes AuthDecision values.

    Order:
    1. Host override automate (or keychain) -> automate; manual -> passthrough
    2. Catalog login_mode askpass -> automate; anything else -> passthrough
    3. Automate only if a password for (host_key, user) exists right now

    Nothing is cached; every call probes again.
    """

    def __init__(self, secrets: SecretStore, extras: Optional[HostExtrasService] = None):
        """
        Initialize decision engine.

        Args:
            secrets: Secret store used for the existence probe
            extras: Per-host override store (optional)
        """
        self.secrets = secrets
        self.extras = extras

    def lookup_override(self, host_key: str) -> AuthOverride:
        """Override for host_key; storage errors count as no override."""
        if self.extras is None:
            return AuthOverride.UNSET
        try:
            return self.extras.auth_override(host_key)
        except (TssmError, OSError):
            return AuthOverride.UNSET

    def decide(
        self,
        host_key: str,
        user: Optional[str] = None,
        login_mode: LoginMode = LoginMode.DEFAULT,
    ) -> AuthDecision:
        """
        Decide whether to automate credential entry.

        Args:
            host_key: Network-resolved host name (or typed alias when unresolved)
            user: Remote user, if known
            login_mode: Static catalog login mode

        Returns:
            AuthDecision carrying the exact (host_key, user) to reveal later
        """
        host_key = (host_key or "").strip()
        user = (user or "").strip() or None

        override = self.lookup_override(host_key)
        if override is AuthOverride.MANUAL:
            return AuthDecision(False, REASON_OVERRIDE_MANUAL, host_key, user)

        if override is AuthOverride.AUTOMATE:
            reason = REASON_OVERRIDE_AUTOMATE
        elif login_mode is LoginMode.ASKPASS:
            reason = REASON_LOGIN_MODE_ASKPASS
        else:
            return AuthDecision(False, REASON_DEFAULT, host_key, user)

        ref = CredentialRef(host_key, user, CredentialKind.PASSWORD)
        if not self._probe(ref):
            return AuthDecision(False, REASON_CREDENTIAL_MISSING, host_key, user)

        return AuthDecision(True, reason, host_key, user)

    def decide_for(self, host: EffectiveHost) -> AuthDecision:
        """Decide for a resolved host."""
        return self.decide(host.host_key, host.user, host.login_mode)

    def _probe(self, ref: CredentialRef) -> bool:
        if not ref.host_key:
            return False
        try:
            return bool(self.secrets.exists(ref))
        except (TssmError, OSError):
            return False
