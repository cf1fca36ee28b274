"""Exception types raised by neurograph."""

from __future__ import annotations


class NeuroGraphError(RuntimeError):
    """Base class for runtime failures of a network or model file."""


class CorruptModelError(NeuroGraphError):
    """Raised when a model stream is truncated or internally inconsistent."""


class GraphOrderError(NeuroGraphError):
    """Raised when the edge list cannot be executed in its current order."""


__all__ = ["CorruptModelError", "GraphOrderError", "NeuroGraphError"]
