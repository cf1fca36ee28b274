"""Core typing contracts for neurograph."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Tuple

import numpy as np

Array = np.ndarray

LAYER_NAME_LEN = 32
COMMSTR_LEN = 64
VARSTR_LEN = 16
MAX_VARIABLES = 255
# Upper bound on any layer buffer length accepted from a model file.
MAX_LAYER_SIZE = 1 << 26


class LayerKind(IntEnum):
    """Numeric layer kind codes as stored in model files."""

    INPUT = 0
    DENSE = 1
    CONV2D = 2
    ACCUM = 3
    LSTM = 4
    GRU = 5
    POOL = 6
    UPRES = 7
    NORMAL = 8


# Order in which layer counts and layer payloads appear in a model file.
LAYER_KINDS: Tuple[LayerKind, ...] = (
    LayerKind.DENSE,
    LayerKind.CONV2D,
    LayerKind.ACCUM,
    LayerKind.LSTM,
    LayerKind.GRU,
    LayerKind.POOL,
    LayerKind.UPRES,
    LayerKind.NORMAL,
)

RECURRENT_KINDS = frozenset({LayerKind.LSTM, LayerKind.GRU})

NodeRef = Tuple[LayerKind, int]
INPUT_NODE: NodeRef = (LayerKind.INPUT, 0)


@dataclass(frozen=True)
class Edge:
    """Directed, slice-selecting connection between two graph nodes.

    Attributes
    ----------
    src_kind, src_index:
        The producing node. ``(LayerKind.INPUT, 0)`` is the network input.
    start, end:
        Half-open range ``[start, end)`` selected from the source output.
    dst_kind, dst_index:
        The consuming layer.
    """

    src_kind: LayerKind
    src_index: int
    start: int
    end: int
    dst_kind: LayerKind
    dst_index: int

    @property
    def source(self) -> NodeRef:
        return (self.src_kind, self.src_index)

    @property
    def dest(self) -> NodeRef:
        return (self.dst_kind, self.dst_index)

    @property
    def width(self) -> int:
        return self.end - self.start


class LinkStatus(Enum):
    """Outcome of :meth:`neurograph.graph.NeuralNet.link_layers`.

    Only ``OK`` is truthy so callers can write ``if net.link_layers(...)``.
    """

    OK = "ok"
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    SELECTOR_OUT_OF_RANGE = "selector_out_of_range"
    SHAPE_MISMATCH = "shape_mismatch"
    FAN_IN_OVERFLOW = "fan_in_overflow"
    DUPLICATE_EDGE = "duplicate_edge"
    CYCLE = "cycle"

    def __bool__(self) -> bool:
        return self is LinkStatus.OK
