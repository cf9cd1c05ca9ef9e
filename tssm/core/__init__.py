"""
tssm Core

Runtime settings and host catalog loading.
"""

from .config_loader import CatalogLoader, HostCatalog
from .settings import Settings

__all__ = [
    "CatalogLoader",
    "HostCatalog",
    "Settings",
]
