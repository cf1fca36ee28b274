"""Shared machinery for the LSTM and GRU layers."""

from __future__ import annotations

from typing import ClassVar, Dict, Tuple

import numpy as np

from ..core.codec import BinaryReader, BinaryWriter
from ..core.recurrent import StateCache
from ..core.types import LAYER_NAME_LEN, Array
from .base import bounded, check_input, positive


class RecurrentLayer:
    """Base class for gated recurrent layers with a bounded state history.

    Subclasses list their parameters in file order in ``PARAMS`` and
    implement :meth:`_step`. Parameter names starting with ``W`` are
    ``(h, d)`` input weights, ``U`` are ``(h, h)`` recurrent weights and
    ``b`` are length ``h`` biases.
    """

    PARAMS: ClassVar[Tuple[str, ...]] = ()
    BIAS_DEFAULTS: ClassVar[Dict[str, float]] = {}

    def __init__(
        self,
        d: int,
        h: int,
        cache: int,
        name: str = "",
        *,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.d = positive(d, "Recurrent input dimension")
        self.h = positive(h, "Recurrent state dimension")
        self.name = name
        self.cache = StateCache(self.h, positive(cache, "Recurrent cache length"))
        rng = rng if rng is not None else np.random.default_rng()
        limit = np.sqrt(6.0 / (self.d + self.h))
        self.params: Dict[str, Array] = {}
        for key in self.PARAMS:
            shape = self.param_shape(key)
            if key.startswith("b"):
                self.params[key] = np.full(shape, self.BIAS_DEFAULTS.get(key, 0.0))
            else:
                self.params[key] = rng.uniform(-limit, limit, size=shape)

    def param_shape(self, key: str) -> Tuple[int, ...]:
        if key.startswith("W"):
            return (self.h, self.d)
        if key.startswith("U"):
            return (self.h, self.h)
        return (self.h,)

    def set_param(self, key: str, value: Array) -> None:
        if key not in self.params:
            raise KeyError(f"Unknown parameter {key!r} for {type(self).__name__}")
        value = np.asarray(value, dtype=np.float64)
        if value.shape != self.param_shape(key):
            raise ValueError(
                f"Parameter {key} expects shape {self.param_shape(key)}, got {value.shape}"
            )
        self.params[key] = value.copy()

    def input_len(self) -> int:
        return self.d

    def output_len(self) -> int:
        return self.h

    @property
    def t(self) -> int:
        return self.cache.t

    def state(self) -> Array:
        """Latest hidden state (zeros before the first step)."""

        return self.cache.current()

    def run(self, x: Array) -> Array:
        x = check_input(self, x)
        # h(t-1) is read before the cache shifts.
        h_prev = self.cache.current()
        h_new = self._step(x, h_prev)
        self.cache.push(h_new)
        return h_new.copy()

    def output(self) -> Array:
        return self.state()

    def reset(self) -> None:
        self.cache.reset()

    def _step(self, x: Array, h_prev: Array) -> Array:
        raise NotImplementedError

    def _gate(self, gate: str, x: Array, h_prev: Array) -> Array:
        p = self.params
        return p["W" + gate] @ x + p["U" + gate] @ h_prev + p["b" + gate]

    def write(self, writer: BinaryWriter) -> None:
        writer.i32(self.d)
        writer.i32(self.h)
        writer.i32(self.cache.capacity)
        writer.text(self.name, LAYER_NAME_LEN)
        for key in self.PARAMS:
            writer.f64_array(self.params[key])

    @classmethod
    def read(cls, reader: BinaryReader, *, rng: np.random.Generator | None = None) -> "RecurrentLayer":
        d = positive(reader.i32(), "Recurrent input dimension")
        h = positive(reader.i32(), "Recurrent state dimension")
        cache = positive(reader.i32(), "Recurrent cache length")
        bounded(h * cache, "Recurrent state history length")
        name = reader.text(LAYER_NAME_LEN)
        values = {}
        for key in cls.PARAMS:
            shape = (h, d) if key.startswith("W") else (h, h) if key.startswith("U") else (h,)
            values[key] = reader.f64_array(int(np.prod(shape)), shape)
        layer = cls(d, h, cache, name, rng=rng)
        layer.params.update(values)
        return layer


__all__ = ["RecurrentLayer"]
