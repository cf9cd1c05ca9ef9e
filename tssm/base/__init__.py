"""
tssm CLI Base Command Classes

Abstract base classes for consistent command structure.
"""

from .base_command import BaseCommand
from .host_command import HostCommand

__all__ = [
    "BaseCommand",
    "HostCommand",
]
