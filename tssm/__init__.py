"""tssm - tmux SSH manager"""

__version__ = "1.0.0"
