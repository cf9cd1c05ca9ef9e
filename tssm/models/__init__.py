"""
tssm Domain Models

Clean dataclass-based models for type-safe data handling.
"""

from .auth import (
    AuthDecision,
    AuthOverride,
    CredentialKind,
    CredentialRef,
)
from .fanout import (
    FanoutPlan,
    LayoutMode,
)
from .host import (
    CatalogHost,
    EffectiveHost,
    HostGroup,
    LoginMode,
)
from .results import (
    FanoutResult,
    ReplicaOutcome,
    ResultStatus,
)

__all__ = [
    # Auth
    "AuthDecision",
    "AuthOverride",
    "CredentialKind",
    "CredentialRef",
    # Fanout
    "FanoutPlan",
    "LayoutMode",
    # Hosts
    "CatalogHost",
    "EffectiveHost",
    "HostGroup",
    "LoginMode",
    # Results
    "FanoutResult",
    "ReplicaOutcome",
    "ResultStatus",
]
