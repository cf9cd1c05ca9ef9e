"""
tssm CLI Commands
"""

from .connect import connect
from .cred import cred
from .hosts import config_path, hosts
from .internal import askpass, internal_connect
from .scp import scp
from .ssh import ssh

__all__ = [
    "askpass",
    "config_path",
    "connect",
    "cred",
    "hosts",
    "internal_connect",
    "scp",
    "ssh",
]
