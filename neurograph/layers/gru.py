"""Gated recurrent unit layer."""

from __future__ import annotations

import numpy as np

from ..core.activations import sigmoid
from ..core.types import Array, LayerKind
from .base import register_layer
from .recurrent import RecurrentLayer


@register_layer(LayerKind.GRU)
class GRULayer(RecurrentLayer):
    """GRU with update (z) and reset (r) gates."""

    PARAMS = (
        "Wz", "Wr", "Wh",
        "Uz", "Ur", "Uh",
        "bz", "br", "bh",
    )

    def _step(self, x: Array, h_prev: Array) -> Array:
        p = self.params
        z = sigmoid(self._gate("z", x, h_prev))
        r = sigmoid(self._gate("r", x, h_prev))
        candidate = np.tanh(p["Wh"] @ x + p["Uh"] @ (r * h_prev) + p["bh"])
        return z * h_prev + (1.0 - z) * candidate


__all__ = ["GRULayer"]
