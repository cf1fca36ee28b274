"""Normalisation layer."""

from __future__ import annotations

import numpy as np

from ..core.codec import BinaryReader, BinaryWriter
from ..core.types import LAYER_NAME_LEN, Array, LayerKind
from .base import bounded, check_input, positive, register_layer


@register_layer(LayerKind.NORMAL)
class NormalLayer:
    """Apply ``g * (x - m) / s + b`` with scalar statistics."""

    def __init__(self, inputs: int, name: str = "") -> None:
        self.inputs = positive(inputs, "Normalization input count")
        self.name = name
        self.m = 0.0
        self.s = 1.0
        self.g = 1.0
        self.b = 0.0
        self._out = np.zeros(self.inputs, dtype=np.float64)

    def input_len(self) -> int:
        return self.inputs

    def output_len(self) -> int:
        return self.inputs

    def set_stats(
        self,
        *,
        m: float | None = None,
        s: float | None = None,
        g: float | None = None,
        b: float | None = None,
    ) -> None:
        if s is not None and s == 0.0:
            raise ValueError("Standard deviation must be non-zero")
        self.m = self.m if m is None else float(m)
        self.s = self.s if s is None else float(s)
        self.g = self.g if g is None else float(g)
        self.b = self.b if b is None else float(b)

    def run(self, x: Array) -> Array:
        x = check_input(self, x)
        self._out = self.g * (x - self.m) / self.s + self.b
        return self._out.copy()

    def output(self) -> Array:
        return self._out.copy()

    def write(self, writer: BinaryWriter) -> None:
        writer.i32(self.inputs)
        writer.text(self.name, LAYER_NAME_LEN)
        for value in (self.m, self.s, self.g, self.b):
            writer.f64(value)

    @classmethod
    def read(cls, reader: BinaryReader, *, rng: np.random.Generator | None = None) -> "NormalLayer":
        inputs = bounded(reader.i32(), "Normalization input count")
        name = reader.text(LAYER_NAME_LEN)
        m, s, g, b = (reader.f64() for _ in range(4))
        if s == 0.0:
            raise ValueError(f"Normalization layer {name!r} has zero standard deviation")
        layer = cls(inputs, name)
        layer.m, layer.s, layer.g, layer.b = m, s, g, b
        return layer


__all__ = ["NormalLayer"]
