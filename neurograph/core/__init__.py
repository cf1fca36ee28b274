"""Core numerical primitives for neurograph."""

from . import activations, codec, recurrent, types

__all__ = ["activations", "codec", "recurrent", "types"]
