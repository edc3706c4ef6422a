"""Hash-slot and command routing for cluster-mode key-value servers."""

__version__ = "0.1.0"
__all__ = ["routing"]