"""Fully connected layer."""

from __future__ import annotations

import numpy as np

from ..core import activations
from ..core.activations import Activation
from ..core.codec import BinaryReader, BinaryWriter
from ..core.types import LAYER_NAME_LEN, Array, LayerKind
from .base import check_input, positive, register_layer


@register_layer(LayerKind.DENSE)
class DenseLayer:
    """Affine map followed by per-unit activations.

    ``weights`` has shape ``(inputs + 1, nodes)``; column ``j`` holds the
    weights feeding unit ``j`` and the last row holds the biases. ``mask``
    has the same shape and zeroes out a weight wherever it is ``False``.
    """

    def __init__(
        self,
        inputs: int,
        nodes: int,
        name: str = "",
        *,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.inputs = positive(inputs, "Dense input count")
        self.nodes = positive(nodes, "Dense node count")
        self.name = name
        rng = rng if rng is not None else np.random.default_rng()
        self.weights = rng.uniform(-1.0, 1.0, size=(self.inputs + 1, self.nodes))
        self.mask = np.ones((self.inputs + 1, self.nodes), dtype=bool)
        self.functions = np.full(self.nodes, Activation.RELU, dtype=np.uint8)
        self.alphas = np.ones(self.nodes, dtype=np.float64)
        self._out = np.zeros(self.nodes, dtype=np.float64)

    def input_len(self) -> int:
        return self.inputs

    def output_len(self) -> int:
        return self.nodes

    # ------------------------------------------------------------------
    # Setters. Out-of-range indices are ignored.

    def set_weights(self, weights: Array) -> None:
        weights = np.asarray(weights, dtype=np.float64)
        if weights.shape != self.weights.shape:
            raise ValueError(
                f"Expected weights of shape {self.weights.shape}, got {weights.shape}"
            )
        self.weights = weights.copy()

    def set_unit_weights(self, unit: int, weights: Array) -> None:
        """Set the ``inputs + 1`` weights (bias last) feeding ``unit``."""

        if not 0 <= unit < self.nodes:
            return
        weights = np.asarray(weights, dtype=np.float64).reshape(-1)
        if weights.shape[0] != self.inputs + 1:
            raise ValueError(
                f"Expected {self.inputs + 1} weights for unit {unit}, got {weights.shape[0]}"
            )
        self.weights[:, unit] = weights

    def set_weight(self, unit: int, index: int, value: float) -> None:
        if 0 <= unit < self.nodes and 0 <= index <= self.inputs:
            self.weights[index, unit] = float(value)

    def set_mask(self, unit: int, index: int, enabled: bool) -> None:
        if 0 <= unit < self.nodes and 0 <= index <= self.inputs:
            self.mask[index, unit] = bool(enabled)

    def set_function(self, unit: int, func: Activation | int) -> None:
        if 0 <= unit < self.nodes and activations.is_valid(func):
            self.functions[unit] = int(func)

    def set_functions(self, func: Activation | int) -> None:
        if activations.is_valid(func):
            self.functions[:] = int(func)

    def set_alpha(self, unit: int, alpha: float) -> None:
        if 0 <= unit < self.nodes:
            self.alphas[unit] = float(alpha)

    # ------------------------------------------------------------------

    def run(self, x: Array) -> Array:
        x = check_input(self, x)
        augmented = np.append(x, 1.0)
        pre = augmented @ np.where(self.mask, self.weights, 0.0)
        self._out = activations.apply(pre, self.functions, self.alphas)
        return self._out.copy()

    def output(self) -> Array:
        return self._out.copy()

    def write(self, writer: BinaryWriter) -> None:
        writer.i32(self.inputs)
        writer.i32(self.nodes)
        writer.text(self.name, LAYER_NAME_LEN)
        writer.f64_array(self.weights)
        writer.u8_array(self.mask.astype(np.uint8))
        writer.u8_array(self.functions)
        writer.f64_array(self.alphas)

    @classmethod
    def read(cls, reader: BinaryReader, *, rng: np.random.Generator | None = None) -> "DenseLayer":
        inputs = positive(reader.i32(), "Dense input count")
        nodes = positive(reader.i32(), "Dense node count")
        name = reader.text(LAYER_NAME_LEN)
        shape = (inputs + 1, nodes)
        weights = reader.f64_array(shape[0] * shape[1], shape)
        mask = reader.u8_array(shape[0] * shape[1]).reshape(shape) != 0
        functions = reader.u8_array(nodes)
        if not all(activations.is_valid(code) for code in functions):
            raise ValueError(f"Unknown activation code in dense layer {name!r}")
        alphas = reader.f64_array(nodes)

        layer = cls(inputs, nodes, name, rng=rng)
        layer.weights = weights
        layer.mask = mask
        layer.functions = functions
        layer.alphas = alphas
        return layer


__all__ = ["DenseLayer"]
