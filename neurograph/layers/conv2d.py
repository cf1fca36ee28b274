"""Two-dimensional convolution over a flattened, row-major input."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from ..core import activations
from ..core.activations import Activation
from ..core.codec import BinaryReader, BinaryWriter
from ..core.types import LAYER_NAME_LEN, Array, LayerKind
from .base import bounded, check_input, positive, register_layer


@dataclass
class Filter2D:
    """One convolution kernel: ``w * h`` weights followed by a bias."""

    w: int
    h: int
    weights: Array
    stride_h: int = 1
    stride_v: int = 1
    func: int = int(Activation.RELU)
    alpha: float = 1.0

    def kernel(self) -> Array:
        return self.weights[:-1].reshape(self.h, self.w)

    @property
    def bias(self) -> float:
        return float(self.weights[-1])


def map_size(width: int, height: int, w: int, h: int, stride_h: int, stride_v: int) -> tuple[int, int]:
    """Return ``(cols, rows)`` of a valid sliding window over a ``width x height`` map."""

    return (width - w) // stride_h + 1, (height - h) // stride_v + 1


@register_layer(LayerKind.CONV2D)
class Conv2DLayer:
    """Bank of filters applied to a ``width x height`` input.

    The output is the concatenation of each filter's activated response map,
    in filter order. No padding is applied.
    """

    def __init__(
        self,
        width: int,
        height: int,
        name: str = "",
        *,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.width = positive(width, "Conv2D input width")
        self.height = positive(height, "Conv2D input height")
        self.name = name
        self.filters: List[Filter2D] = []
        self._rng = rng if rng is not None else np.random.default_rng()
        self._out = np.zeros(0, dtype=np.float64)

    def input_len(self) -> int:
        return self.width * self.height

    def output_len(self) -> int:
        total = 0
        for filt in self.filters:
            cols, rows = map_size(
                self.width, self.height, filt.w, filt.h, filt.stride_h, filt.stride_v
            )
            total += cols * rows
        return total

    def add_filter(self, w: int, h: int) -> int:
        """Append a ``w x h`` filter with random weights; return the filter count."""

        self._check_window(w, h)
        weights = self._rng.uniform(-1.0, 1.0, size=w * h + 1)
        self.filters.append(Filter2D(w=w, h=h, weights=weights))
        self._out = np.zeros(self.output_len(), dtype=np.float64)
        return len(self.filters)

    def _check_window(self, w: int, h: int) -> None:
        if not (1 <= w <= self.width and 1 <= h <= self.height):
            raise ValueError(
                f"Filter {w}x{h} does not fit a {self.width}x{self.height} input"
            )

    # Setters. Out-of-range filter indices are ignored.

    def set_weights(self, index: int, weights: Array) -> None:
        if not 0 <= index < len(self.filters):
            return
        filt = self.filters[index]
        weights = np.asarray(weights, dtype=np.float64).reshape(-1)
        if weights.shape[0] != filt.w * filt.h + 1:
            raise ValueError(
                f"Filter {index} takes {filt.w * filt.h + 1} weights, got {weights.shape[0]}"
            )
        filt.weights = weights.copy()

    def set_stride(self, index: int, stride_h: int, stride_v: int) -> None:
        if 0 <= index < len(self.filters) and stride_h >= 1 and stride_v >= 1:
            self.filters[index].stride_h = int(stride_h)
            self.filters[index].stride_v = int(stride_v)
            self._out = np.zeros(self.output_len(), dtype=np.float64)

    def set_function(self, index: int, func: Activation | int) -> None:
        if 0 <= index < len(self.filters) and activations.is_valid(func):
            self.filters[index].func = int(func)

    def set_alpha(self, index: int, alpha: float) -> None:
        if 0 <= index < len(self.filters):
            self.filters[index].alpha = float(alpha)

    def run(self, x: Array) -> Array:
        image = check_input(self, x).reshape(self.height, self.width)
        maps = []
        for filt in self.filters:
            windows = sliding_window_view(image, (filt.h, filt.w))
            windows = windows[:: filt.stride_v, :: filt.stride_h]
            response = np.tensordot(windows, filt.kernel(), axes=([2, 3], [0, 1]))
            response = response.reshape(-1) + filt.bias
            maps.append(activations.apply_uniform(response, filt.func, filt.alpha))
        self._out = np.concatenate(maps) if maps else np.zeros(0, dtype=np.float64)
        return self._out.copy()

    def output(self) -> Array:
        return self._out.copy()

    def write(self, writer: BinaryWriter) -> None:
        writer.i32(self.width)
        writer.i32(self.height)
        writer.i32(len(self.filters))
        writer.text(self.name, LAYER_NAME_LEN)
        for filt in self.filters:
            writer.i32(filt.w)
            writer.i32(filt.h)
            writer.i32(filt.stride_h)
            writer.i32(filt.stride_v)
            writer.u8(filt.func)
            writer.f64(filt.alpha)
            writer.f64_array(filt.weights)

    @classmethod
    def read(cls, reader: BinaryReader, *, rng: np.random.Generator | None = None) -> "Conv2DLayer":
        width = reader.i32()
        height = reader.i32()
        count = reader.count("filter count")
        layer = cls(width, height, reader.text(LAYER_NAME_LEN), rng=rng)
        for _ in range(count):
            w = reader.i32()
            h = reader.i32()
            stride_h = positive(reader.i32(), "Filter horizontal stride")
            stride_v = positive(reader.i32(), "Filter vertical stride")
            func = reader.u8()
            if not activations.is_valid(func):
                raise ValueError(f"Unknown activation code {func} in {layer.name!r}")
            alpha = reader.f64()
            layer._check_window(w, h)
            weights = reader.f64_array(w * h + 1)
            layer.filters.append(
                Filter2D(w, h, weights, stride_h=stride_h, stride_v=stride_v, func=func, alpha=alpha)
            )
        layer._out = np.zeros(bounded(layer.output_len(), "Conv2D output length"), dtype=np.float64)
        return layer


__all__ = ["Conv2DLayer", "Filter2D", "map_size"]
