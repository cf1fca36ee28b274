"""Accumulator: a named buffer that gathers slices from several sources."""

from __future__ import annotations

import numpy as np

from ..core.codec import BinaryReader, BinaryWriter
from ..core.types import LAYER_NAME_LEN, Array, LayerKind
from .base import bounded, check_input, positive, register_layer


@register_layer(LayerKind.ACCUM)
class AccumLayer:
    """Identity layer whose output is the most recently assigned input."""

    def __init__(self, inputs: int, name: str = "") -> None:
        self.inputs = positive(inputs, "Accumulator size")
        self.name = name
        self._out = np.zeros(self.inputs, dtype=np.float64)

    def input_len(self) -> int:
        return self.inputs

    def output_len(self) -> int:
        return self.inputs

    def run(self, x: Array) -> Array:
        self._out = check_input(self, x).copy()
        return self._out.copy()

    def output(self) -> Array:
        return self._out.copy()

    def write(self, writer: BinaryWriter) -> None:
        writer.i32(self.inputs)
        writer.text(self.name, LAYER_NAME_LEN)

    @classmethod
    def read(cls, reader: BinaryReader, *, rng: np.random.Generator | None = None) -> "AccumLayer":
        inputs = bounded(reader.i32(), "Accumulator size")
        return cls(inputs, reader.text(LAYER_NAME_LEN))


__all__ = ["AccumLayer"]
