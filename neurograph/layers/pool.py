"""Two-dimensional pooling."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import List

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from ..core.codec import BinaryReader, BinaryWriter
from ..core.types import LAYER_NAME_LEN, Array, LayerKind
from .base import bounded, check_input, positive, register_layer
from .conv2d import map_size


class PoolFunction(IntEnum):
    MAX = 0
    MIN = 1
    AVG = 2
    MEDIAN = 3


_REDUCERS = {
    PoolFunction.MAX: np.max,
    PoolFunction.MIN: np.min,
    PoolFunction.AVG: np.mean,
    PoolFunction.MEDIAN: np.median,
}


@dataclass
class Pool2D:
    w: int
    h: int
    stride_h: int = 1
    stride_v: int = 1
    func: int = int(PoolFunction.MAX)


@register_layer(LayerKind.POOL)
class PoolLayer:
    """Set of pooling windows applied to a ``width x height`` input.

    Each pool slides a ``w x h`` window with its own strides and reduces the
    covered values with max, min, mean or median. Outputs of all pools are
    concatenated in pool order.
    """

    def __init__(self, width: int, height: int, name: str = "") -> None:
        self.width = positive(width, "Pool input width")
        self.height = positive(height, "Pool input height")
        self.name = name
        self.pools: List[Pool2D] = []
        self._out = np.zeros(0, dtype=np.float64)

    def input_len(self) -> int:
        return self.width * self.height

    def output_len(self) -> int:
        total = 0
        for pool in self.pools:
            cols, rows = map_size(
                self.width, self.height, pool.w, pool.h, pool.stride_h, pool.stride_v
            )
            total += cols * rows
        return total

    def add_pool(self, w: int, h: int, func: PoolFunction | int = PoolFunction.MAX) -> int:
        """Append a ``w x h`` pool with unit strides; return the pool count."""

        self.pools.append(self._checked(Pool2D(w=w, h=h, func=int(func))))
        self._out = np.zeros(self.output_len(), dtype=np.float64)
        return len(self.pools)

    def _checked(self, pool: Pool2D) -> Pool2D:
        if not (1 <= pool.w <= self.width and 1 <= pool.h <= self.height):
            raise ValueError(
                f"Pool {pool.w}x{pool.h} does not fit a {self.width}x{self.height} input"
            )
        if pool.stride_h < 1 or pool.stride_v < 1:
            raise ValueError("Pool strides must be positive")
        if pool.func not in set(PoolFunction):
            raise ValueError(f"Unknown pool function {pool.func}")
        return pool

    def set_stride(self, index: int, stride_h: int, stride_v: int) -> None:
        if 0 <= index < len(self.pools) and stride_h >= 1 and stride_v >= 1:
            self.pools[index].stride_h = int(stride_h)
            self.pools[index].stride_v = int(stride_v)
            self._out = np.zeros(self.output_len(), dtype=np.float64)

    def set_function(self, index: int, func: PoolFunction | int) -> None:
        if 0 <= index < len(self.pools) and func in set(PoolFunction):
            self.pools[index].func = int(func)

    def run(self, x: Array) -> Array:
        image = check_input(self, x).reshape(self.height, self.width)
        maps = []
        for pool in self.pools:
            windows = sliding_window_view(image, (pool.h, pool.w))
            windows = windows[:: pool.stride_v, :: pool.stride_h]
            reduced = _REDUCERS[PoolFunction(pool.func)](windows, axis=(2, 3))
            maps.append(np.asarray(reduced, dtype=np.float64).reshape(-1))
        self._out = np.concatenate(maps) if maps else np.zeros(0, dtype=np.float64)
        return self._out.copy()

    def output(self) -> Array:
        return self._out.copy()

    def write(self, writer: BinaryWriter) -> None:
        writer.i32(self.width)
        writer.i32(self.height)
        writer.i32(len(self.pools))
        writer.text(self.name, LAYER_NAME_LEN)
        for pool in self.pools:
            writer.i32(pool.w)
            writer.i32(pool.h)
            writer.i32(pool.stride_h)
            writer.i32(pool.stride_v)
            writer.u8(pool.func)

    @classmethod
    def read(cls, reader: BinaryReader, *, rng: np.random.Generator | None = None) -> "PoolLayer":
        width = reader.i32()
        height = reader.i32()
        count = reader.count("pool count")
        layer = cls(width, height, reader.text(LAYER_NAME_LEN))
        for _ in range(count):
            w, h, stride_h, stride_v = (reader.i32() for _ in range(4))
            layer.pools.append(layer._checked(Pool2D(w, h, stride_h, stride_v, reader.u8())))
        layer._out = np.zeros(bounded(layer.output_len(), "Pool output length"), dtype=np.float64)
        return layer


__all__ = ["Pool2D", "PoolFunction", "PoolLayer"]
