"""Up-resolution layer: stride insertion followed by border padding."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import List

import numpy as np

from ..core.codec import BinaryReader, BinaryWriter
from ..core.types import LAYER_NAME_LEN, Array, LayerKind
from .base import bounded, check_input, positive, register_layer


class FillMethod(IntEnum):
    ZERO = 0
    SAME = 1
    INTERP = 2


@dataclass
class UpresParams:
    """One up-resolution recipe.

    ``stride_h``/``stride_v`` new columns/rows are inserted between every
    pair of source columns/rows and filled with ``stride_method``. Then
    ``padding_h``/``padding_v`` columns/rows are added to each border and
    filled with ``pad_method``; for padding, ``SAME`` and ``INTERP`` both
    replicate the nearest edge value.
    """

    stride_h: int = 0
    stride_v: int = 0
    padding_h: int = 0
    padding_v: int = 0
    stride_method: int = int(FillMethod.ZERO)
    pad_method: int = int(FillMethod.ZERO)


def _interp_axis(size: int, stride: int) -> tuple[Array, Array, Array]:
    positions = np.arange(size * (stride + 1) - stride) / (stride + 1)
    lo = np.floor(positions).astype(int)
    hi = np.minimum(lo + 1, size - 1)
    return lo, hi, positions - lo


def upsample(image: Array, params: UpresParams) -> Array:
    """Return the up-resolved 2-D map of ``image`` (rows x cols)."""

    height, width = image.shape
    sh, sv = params.stride_h, params.stride_v
    rows = height * (sv + 1) - sv
    cols = width * (sh + 1) - sh

    method = FillMethod(params.stride_method)
    if method is FillMethod.ZERO:
        grid = np.zeros((rows, cols), dtype=np.float64)
        grid[:: sv + 1, :: sh + 1] = image
    elif method is FillMethod.SAME:
        grid = image[np.arange(rows) // (sv + 1)][:, np.arange(cols) // (sh + 1)]
    else:
        y0, y1, b = _interp_axis(height, sv)
        x0, x1, a = _interp_axis(width, sh)
        top = image[y0][:, x0] * (1.0 - a) + image[y0][:, x1] * a
        bottom = image[y1][:, x0] * (1.0 - a) + image[y1][:, x1] * a
        grid = top * (1.0 - b)[:, None] + bottom * b[:, None]

    pad = ((params.padding_v, params.padding_v), (params.padding_h, params.padding_h))
    if params.pad_method == FillMethod.ZERO:
        return np.pad(grid, pad, mode="constant")
    return np.pad(grid, pad, mode="edge")


@register_layer(LayerKind.UPRES)
class UpresLayer:
    """Set of up-resolution recipes applied to a ``width x height`` input."""

    def __init__(self, width: int, height: int, name: str = "") -> None:
        self.width = positive(width, "Upres input width")
        self.height = positive(height, "Upres input height")
        self.name = name
        self.params: List[UpresParams] = []
        self._out = np.zeros(0, dtype=np.float64)

    def input_len(self) -> int:
        return self.width * self.height

    def output_len(self) -> int:
        total = 0
        for p in self.params:
            cols = self.width * (p.stride_h + 1) - p.stride_h + 2 * p.padding_h
            rows = self.height * (p.stride_v + 1) - p.stride_v + 2 * p.padding_v
            total += cols * rows
        return total

    def add_params(self, stride: int, padding: int) -> int:
        """Append a recipe with equal horizontal/vertical settings; return the count."""

        params = UpresParams(stride, stride, padding, padding)
        self.params.append(self._checked(params))
        self._out = np.zeros(self.output_len(), dtype=np.float64)
        return len(self.params)

    @staticmethod
    def _checked(params: UpresParams) -> UpresParams:
        if min(params.stride_h, params.stride_v, params.padding_h, params.padding_v) < 0:
            raise ValueError("Upres strides and paddings must be non-negative")
        for method in (params.stride_method, params.pad_method):
            if method not in set(FillMethod):
                raise ValueError(f"Unknown fill method {method}")
        return params

    def set_stride(self, index: int, stride_h: int, stride_v: int) -> None:
        if 0 <= index < len(self.params) and stride_h >= 0 and stride_v >= 0:
            self.params[index].stride_h = int(stride_h)
            self.params[index].stride_v = int(stride_v)
            self._out = np.zeros(self.output_len(), dtype=np.float64)

    def set_padding(self, index: int, padding_h: int, padding_v: int) -> None:
        if 0 <= index < len(self.params) and padding_h >= 0 and padding_v >= 0:
            self.params[index].padding_h = int(padding_h)
            self.params[index].padding_v = int(padding_v)
            self._out = np.zeros(self.output_len(), dtype=np.float64)

    def set_stride_method(self, index: int, method: FillMethod | int) -> None:
        if 0 <= index < len(self.params) and method in set(FillMethod):
            self.params[index].stride_method = int(method)

    def set_padding_method(self, index: int, method: FillMethod | int) -> None:
        if 0 <= index < len(self.params) and method in set(FillMethod):
            self.params[index].pad_method = int(method)

    def run(self, x: Array) -> Array:
        image = check_input(self, x).reshape(self.height, self.width)
        maps = [upsample(image, p).reshape(-1) for p in self.params]
        self._out = np.concatenate(maps) if maps else np.zeros(0, dtype=np.float64)
        return self._out.copy()

    def output(self) -> Array:
        return self._out.copy()

    def write(self, writer: BinaryWriter) -> None:
        writer.i32(self.width)
        writer.i32(self.height)
        writer.i32(len(self.params))
        writer.text(self.name, LAYER_NAME_LEN)
        for p in self.params:
            writer.i32(p.stride_h)
            writer.i32(p.stride_v)
            writer.i32(p.padding_h)
            writer.i32(p.padding_v)
            writer.u8(p.stride_method)
            writer.u8(p.pad_method)

    @classmethod
    def read(cls, reader: BinaryReader, *, rng: np.random.Generator | None = None) -> "UpresLayer":
        width = reader.i32()
        height = reader.i32()
        count = reader.count("up-resolution parameter count")
        layer = cls(width, height, reader.text(LAYER_NAME_LEN))
        for _ in range(count):
            sh, sv, ph, pv = (reader.i32() for _ in range(4))
            params = UpresParams(sh, sv, ph, pv, reader.u8(), reader.u8())
            layer.params.append(layer._checked(params))
        layer._out = np.zeros(bounded(layer.output_len(), "Upres output length"), dtype=np.float64)
        return layer


__all__ = ["FillMethod", "UpresLayer", "UpresParams", "upsample"]
