"""
Fanout Models

Dataclass models describing how one connection is replicated across tmux.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class LayoutMode(Enum):
    """Where each replica of a fanout is placed."""

    WINDOW = "window"
    VERTICAL_SPLIT = "vertical-split"
    HORIZONTAL_SPLIT = "horizontal-split"

    @classmethod
    def parse(cls, value: Optional[str]) -> "LayoutMode":
        """Parse a CLI value; accepts the short forms 'v' and 'h'."""
        normalized = (value or "").strip().lower()
        aliases = {
            "": cls.WINDOW,
            "v": cls.VERTICAL_SPLIT,
            "h": cls.HORIZONTAL_SPLIT,
        }
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(
                "split-mode must be one of: window, v, h, vertical-split, horizontal-split"
            ) from None

    @property
    def is_split(self) -> bool:
        return self is not LayoutMode.WINDOW

    @property
    def split_flag(self) -> str:
        """tmux split-window flag for this mode."""
        return "-h" if self is LayoutMode.HORIZONTAL_SPLIT else "-v"


@dataclass(frozen=True)
class FanoutPlan:
    """One target connection replicated across several tmux sessions."""

    target: str
    replica_count: int = 1
    layout_mode: LayoutMode = LayoutMode.WINDOW
    layout_spec: Optional[str] = None

    def __post_init__(self):
        if self.replica_count < 1:
            raise ValueError("split-count must be > 0")
        if not self.target.strip():
            raise ValueError("empty host")

    @property
    def is_fanout(self) -> bool:
        return self.replica_count > 1

    def window_name(self, index: int) -> str:
        """Window name for replica `index` (0-based)."""
        if self.replica_count > 1 and not self.layout_mode.is_split:
            return f"{self.target}[{index + 1}]"
        return self.target
