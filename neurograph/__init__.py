"""neurograph public API."""

from . import layers  # noqa: F401
from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.activations import Activation
from .core.types import Edge, LayerKind, LinkStatus
from .errors import CorruptModelError, GraphOrderError, NeuroGraphError
from .graph import NeuralNet
from .reporting import describe, write_summary
from .serialization import dumps, load_model, loads, save_model

__all__ = [
    "Activation",
    "CorruptModelError",
    "Edge",
    "GraphOrderError",
    "LayerKind",
    "LinkStatus",
    "NeuralNet",
    "NeuroGraphError",
    "activations",
    "describe",
    "dumps",
    "layers",
    "load_model",
    "loads",
    "save_model",
    "types",
    "write_summary",
]
