"""
Result Models

Dataclass models for connection and fanout outcomes.
"""

from dataclasses import dataclass, field
from typing import Optional
from enum import Enum


class ResultStatus(Enum):
    """Status of an operation result."""

    SUCCESS = "success"
    FAILURE = "failure"
    PARTIAL = "partial"


@dataclass
class ReplicaOutcome:
    """What happened to one replica of a fanout."""

    index: int
    command_line: str
    window_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.error is None


@dataclass
class FanoutResult:
    """Result of replicating a connection across tmux windows or panes."""

    target: str
    requested: int
    replicas: list[ReplicaOutcome] = field(default_factory=list)
    exit_code: int = 0
    layout_applied: bool = False

    @property
    def failures(self) -> list[ReplicaOutcome]:
        return [r for r in self.replicas if not r.is_success]

    @property
    def status(self) -> ResultStatus:
        """Overall status across replicas."""
        if not self.replicas:
            return ResultStatus.SUCCESS if self.exit_code == 0 else ResultStatus.FAILURE
        failed = len(self.failures)
        if failed == 0:
            return ResultStatus.SUCCESS
        if failed == len(self.replicas):
            return ResultStatus.FAILURE
        return ResultStatus.PARTIAL

    def __repr__(self) -> str:
        return (
            f"FanoutResult(target={self.target}, requested={self.requested}, "
            f"status={self.status.value})"
        )

