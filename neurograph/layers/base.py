"""Layer contract and the kind-indexed layer registry."""

from __future__ import annotations

from typing import Callable, ClassVar, Dict, Iterable, Protocol, Type, TypeVar

import numpy as np

from ..core.codec import BinaryReader, BinaryWriter
from ..core.types import MAX_LAYER_SIZE, Array, LayerKind


class Layer(Protocol):
    """Protocol implemented by every executable layer kind."""

    kind: ClassVar[LayerKind]
    name: str

    def input_len(self) -> int:
        """Length of the vector :meth:`run` expects."""

    def output_len(self) -> int:
        """Length of the vector :meth:`run` produces."""

    def run(self, x: Array) -> Array:
        """Evaluate the layer on ``x`` and return (and retain) its output."""

    def output(self) -> Array:
        """Output of the most recent :meth:`run`."""

    def write(self, writer: BinaryWriter) -> None:
        """Serialise shape header, name and weights."""

    @classmethod
    def read(cls, reader: BinaryReader, *, rng: np.random.Generator | None = None) -> "Layer":
        """Inverse of :meth:`write`; ``rng`` is kept by layers that draw weights later."""


L = TypeVar("L")

_REGISTRY: Dict[LayerKind, Type] = {}


def register_layer(kind: LayerKind) -> Callable[[Type[L]], Type[L]]:
    """Class decorator binding a layer implementation to ``kind``."""

    def _decorator(cls: Type[L]) -> Type[L]:
        if kind in _REGISTRY:
            raise ValueError(f"Layer kind {kind.name} already registered")
        cls.kind = kind  # type: ignore[attr-defined]
        _REGISTRY[kind] = cls
        return cls

    return _decorator


def layer_class(kind: LayerKind | int) -> Type:
    """Return the implementation registered for ``kind``."""

    try:
        return _REGISTRY[LayerKind(kind)]
    except (KeyError, ValueError):
        raise KeyError(f"No layer registered for kind {kind!r}") from None


def registered_kinds() -> Iterable[LayerKind]:
    return sorted(_REGISTRY)


def check_input(layer: Layer, x: Array) -> Array:
    x = np.asarray(x, dtype=np.float64).reshape(-1)
    if x.shape[0] != layer.input_len():
        raise ValueError(
            f"{type(layer).__name__} {layer.name!r} expects {layer.input_len()} "
            f"inputs, got {x.shape[0]}"
        )
    return x


def positive(value: int, what: str) -> int:
    value = int(value)
    if value < 1:
        raise ValueError(f"{what} must be positive, got {value}")
    return value


def bounded(value: int, what: str) -> int:
    """Reject buffer lengths read from a file that no real model would use."""

    value = int(value)
    if value > MAX_LAYER_SIZE:
        raise ValueError(f"{what} {value} exceeds the limit of {MAX_LAYER_SIZE}")
    return value


__all__ = [
    "Layer",
    "bounded",
    "check_input",
    "layer_class",
    "positive",
    "register_layer",
    "registered_kinds",
]
