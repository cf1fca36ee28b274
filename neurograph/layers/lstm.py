"""Long short-term memory layer."""

from __future__ import annotations

import numpy as np

from ..core.activations import sigmoid
from ..core.types import Array, LayerKind
from .base import register_layer
from .recurrent import RecurrentLayer


@register_layer(LayerKind.LSTM)
class LSTMLayer(RecurrentLayer):
    """LSTM with input (i), output (o), forget (f) and candidate (c) gates.

    The cell state is kept alongside the hidden-state history and cleared by
    :meth:`reset`. Forget-gate biases start at 1.
    """

    PARAMS = (
        "Wi", "Wo", "Wf", "Wc",
        "Ui", "Uo", "Uf", "Uc",
        "bi", "bo", "bf", "bc",
    )
    BIAS_DEFAULTS = {"bf": 1.0}

    def __init__(
        self,
        d: int,
        h: int,
        cache: int,
        name: str = "",
        *,
        rng: np.random.Generator | None = None,
    ) -> None:
        super().__init__(d, h, cache, name, rng=rng)
        self.cell = np.zeros(self.h, dtype=np.float64)

    def _step(self, x: Array, h_prev: Array) -> Array:
        i = sigmoid(self._gate("i", x, h_prev))
        f = sigmoid(self._gate("f", x, h_prev))
        o = sigmoid(self._gate("o", x, h_prev))
        candidate = np.tanh(self._gate("c", x, h_prev))
        self.cell = f * self.cell + i * candidate
        return o * np.tanh(self.cell)

    def reset(self) -> None:
        super().reset()
        self.cell = np.zeros(self.h, dtype=np.float64)


__all__ = ["LSTMLayer"]
