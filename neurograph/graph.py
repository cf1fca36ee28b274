"""Layer registry, edge validation and the forward execution engine."""

from __future__ import annotations

import copy
import logging
from collections import deque
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Sequence

import numpy as np

from . import config
from .core.types import (
    COMMSTR_LEN,
    INPUT_NODE,
    LAYER_KINDS,
    LAYER_NAME_LEN,
    MAX_VARIABLES,
    RECURRENT_KINDS,
    VARSTR_LEN,
    Array,
    Edge,
    LayerKind,
    LinkStatus,
    NodeRef,
)
from .errors import GraphOrderError, NeuroGraphError
from .layers import (
    AccumLayer,
    Conv2DLayer,
    DenseLayer,
    GRULayer,
    Layer,
    LSTMLayer,
    NormalLayer,
    PoolLayer,
    UpresLayer,
)

logger = logging.getLogger(__name__)


def _check_text(value: str, width: int, what: str) -> str:
    if len(value.encode("utf-8")) > width:
        raise ValueError(f"{what} {value!r} exceeds {width} bytes")
    return value


class NeuralNet:
    """Directed acyclic graph of layers fed by a fixed-length input vector.

    Layers live in one list per :class:`LayerKind` and are addressed by
    ``(kind, index)``. Edges select a ``[start, end)`` slice of a source's
    output and feed it to a destination layer; ``(LayerKind.INPUT, 0)`` is
    the network input.
    """

    def __init__(self, inputs: int, *, rng: np.random.Generator | None = None) -> None:
        if int(inputs) < 1:
            raise ValueError(f"Network input count must be positive, got {inputs}")
        self.inputs = int(inputs)
        self.edges: List[Edge] = []
        self.generation = 0
        self.fitness = 0.0
        self._comment = ""
        self._variables: Dict[str, float] = {}
        self._layers: Dict[LayerKind, List[Layer]] = {kind: [] for kind in LAYER_KINDS}
        self._rng = rng if rng is not None else config.default_rng()

    # ------------------------------------------------------------------
    # Layer registry

    def _append(self, layer: Layer) -> int:
        _check_text(layer.name, LAYER_NAME_LEN, "Layer name")
        bucket = self._layers[layer.kind]
        bucket.append(layer)
        return len(bucket)

    def add_dense(self, inputs: int, nodes: int, name: str = "") -> int:
        return self._append(DenseLayer(inputs, nodes, name, rng=self._rng))

    def add_conv2d(self, width: int, height: int, name: str = "") -> int:
        return self._append(Conv2DLayer(width, height, name, rng=self._rng))

    def add_accum(self, inputs: int, name: str = "") -> int:
        return self._append(AccumLayer(inputs, name))

    def add_lstm(self, d: int, h: int, cache: int, name: str = "") -> int:
        return self._append(LSTMLayer(d, h, cache, name, rng=self._rng))

    def add_gru(self, d: int, h: int, cache: int, name: str = "") -> int:
        return self._append(GRULayer(d, h, cache, name, rng=self._rng))

    def add_pool(self, width: int, height: int, name: str = "") -> int:
        return self._append(PoolLayer(width, height, name))

    def add_upres(self, width: int, height: int, name: str = "") -> int:
        return self._append(UpresLayer(width, height, name))

    def add_normal(self, inputs: int, name: str = "") -> int:
        return self._append(NormalLayer(inputs, name))

    def count(self, kind: LayerKind | int) -> int:
        return len(self._layers[LayerKind(kind)])

    def layers(self, kind: LayerKind | int) -> Sequence[Layer]:
        return tuple(self._layers[LayerKind(kind)])

    def layer(self, kind: LayerKind | int, index: int) -> Layer:
        kind = LayerKind(kind)
        if kind is LayerKind.INPUT:
            raise KeyError("The network input is not a layer")
        bucket = self._layers[kind]
        if not 0 <= index < len(bucket):
            raise IndexError(f"{kind.name} layer {index} does not exist")
        return bucket[index]

    def dense(self, index: int) -> DenseLayer:
        return self.layer(LayerKind.DENSE, index)  # type: ignore[return-value]

    def conv2d(self, index: int) -> Conv2DLayer:
        return self.layer(LayerKind.CONV2D, index)  # type: ignore[return-value]

    def accum(self, index: int) -> AccumLayer:
        return self.layer(LayerKind.ACCUM, index)  # type: ignore[return-value]

    def lstm(self, index: int) -> LSTMLayer:
        return self.layer(LayerKind.LSTM, index)  # type: ignore[return-value]

    def gru(self, index: int) -> GRULayer:
        return self.layer(LayerKind.GRU, index)  # type: ignore[return-value]

    def pool(self, index: int) -> PoolLayer:
        return self.layer(LayerKind.POOL, index)  # type: ignore[return-value]

    def upres(self, index: int) -> UpresLayer:
        return self.layer(LayerKind.UPRES, index)  # type: ignore[return-value]

    def normal(self, index: int) -> NormalLayer:
        return self.layer(LayerKind.NORMAL, index)  # type: ignore[return-value]

    def name_index(self, name: str) -> int | None:
        """Index of the first layer called ``name``, or ``None``."""

        found = self._find(name)
        return None if found is None else found[1]

    def name_type(self, name: str) -> LayerKind | None:
        """Kind of the first layer called ``name``, or ``None``."""

        found = self._find(name)
        return None if found is None else found[0]

    def _find(self, name: str) -> NodeRef | None:
        for kind in LAYER_KINDS:
            for index, layer in enumerate(self._layers[kind]):
                if layer.name == name:
                    return (kind, index)
        return None

    # ------------------------------------------------------------------
    # Edges

    def _exists(self, node: NodeRef) -> bool:
        kind, index = node
        if kind is LayerKind.INPUT:
            return index == 0
        return 0 <= index < len(self._layers[kind])

    def _output_len(self, node: NodeRef) -> int:
        if node[0] is LayerKind.INPUT:
            return self.inputs
        return self.layer(*node).output_len()

    def link_layers(
        self,
        src_kind: LayerKind | int,
        src_index: int,
        start: int,
        end: int,
        dst_kind: LayerKind | int,
        dst_index: int,
    ) -> LinkStatus:
        """Validate and append the edge ``src[start:end] -> dst``.

        Returns :attr:`LinkStatus.OK` on success. Any other status names the
        first failed check; the edge list is left untouched in that case.
        """

        status = self._check_link(src_kind, src_index, start, end, dst_kind, dst_index)
        if status is LinkStatus.OK:
            self.edges.append(
                Edge(
                    LayerKind(src_kind),
                    int(src_index),
                    int(start),
                    int(end),
                    LayerKind(dst_kind),
                    int(dst_index),
                )
            )
        else:
            logger.debug(
                "Rejected edge %s[%s]<%s:%s> -> %s[%s]: %s",
                src_kind, src_index, start, end, dst_kind, dst_index, status.value,
            )
        return status

    def _check_link(self, src_kind, src_index, start, end, dst_kind, dst_index) -> LinkStatus:
        try:
            source: NodeRef = (LayerKind(src_kind), int(src_index))
            dest: NodeRef = (LayerKind(dst_kind), int(dst_index))
        except ValueError:
            return LinkStatus.INDEX_OUT_OF_RANGE
        if dest[0] is LayerKind.INPUT or not (self._exists(source) and self._exists(dest)):
            return LinkStatus.INDEX_OUT_OF_RANGE

        if not 0 <= start <= end <= self._output_len(source):
            return LinkStatus.SELECTOR_OUT_OF_RANGE

        width = end - start
        capacity = self.layer(*dest).input_len()
        if dest[0] is LayerKind.ACCUM:
            if width > capacity:
                return LinkStatus.SHAPE_MISMATCH
        elif width != capacity:
            return LinkStatus.SHAPE_MISMATCH

        candidate = Edge(source[0], source[1], int(start), int(end), dest[0], dest[1])
        if candidate in self.edges:
            return LinkStatus.DUPLICATE_EDGE

        inbound = sum(edge.width for edge in self.edges if edge.dest == dest)
        if inbound + width > capacity:
            return LinkStatus.FAN_IN_OVERFLOW

        if source == dest or self._reachable(dest, source):
            return LinkStatus.CYCLE
        return LinkStatus.OK

    def _reachable(self, start: NodeRef, target: NodeRef) -> bool:
        adjacency: Dict[NodeRef, List[NodeRef]] = {}
        for edge in self.edges:
            adjacency.setdefault(edge.source, []).append(edge.dest)
        seen = {start}
        queue = deque([start])
        while queue:
            node = queue.popleft()
            if node == target:
                return True
            for succ in adjacency.get(node, ()):
                if succ not in seen:
                    seen.add(succ)
                    queue.append(succ)
        return False

    def sort_edges(self) -> None:
        """Reorder edges so every edge precedes the edges leaving its destination.

        Batches are collected backwards from the output layers (nodes with
        no outbound edge). An edge found again from a deeper batch moves to
        that batch. Edges into one destination always share a batch and are
        kept contiguous in their original relative order.
        """

        sources = {edge.source for edge in self.edges}
        outputs = {edge.dest for edge in self.edges} - sources
        batch = [edge for edge in self.edges if edge.dest in outputs]
        batches = [batch]
        while batch:
            if len(batches) > len(self.edges):
                raise GraphOrderError("Edge list contains a cycle")
            feeding = {edge.source for edge in batch}
            batch = [edge for edge in self.edges if edge.dest in feeding]
            if not batch:
                break
            moved = set(batch)
            batches = [[edge for edge in b if edge not in moved] for b in batches]
            batches.insert(0, batch)

        ordered: List[Edge] = []
        for b in batches:
            groups: Dict[NodeRef, List[Edge]] = {}
            for edge in b:
                groups.setdefault(edge.dest, []).append(edge)
            for group in groups.values():
                ordered.extend(group)
        if len(ordered) != len(self.edges):
            raise GraphOrderError("Edge list could not be ordered from the output layers")
        self.edges = ordered

    # ------------------------------------------------------------------
    # Execution

    def run(self, x: Array | Sequence[float]) -> Array:
        """Evaluate the network on ``x`` and return the last executed output.

        Edges are consumed in list order; contiguous edges sharing a
        destination form one input vector, filled left to right and padded
        with zeros up to the destination's input length.
        """

        x = np.asarray(x, dtype=np.float64).reshape(-1)
        if x.shape[0] != self.inputs:
            raise ValueError(f"Network expects {self.inputs} inputs, got {x.shape[0]}")
        if not self.edges:
            raise GraphOrderError("Network has no edges to execute")

        fed = {edge.dest for edge in self.edges}
        executed: set[NodeRef] = set()
        last: Layer | None = None
        i = 0
        while i < len(self.edges):
            dest = self.edges[i].dest
            j = i
            while j < len(self.edges) and self.edges[j].dest == dest:
                j += 1
            if dest in executed:
                raise GraphOrderError(
                    f"Edges into {dest[0].name}[{dest[1]}] are not contiguous; call sort_edges()"
                )

            layer = self.layer(*dest)
            buffer = np.zeros(layer.input_len(), dtype=np.float64)
            offset = 0
            for edge in self.edges[i:j]:
                if edge.source in fed and edge.source not in executed:
                    raise GraphOrderError(
                        f"{edge.src_kind.name}[{edge.src_index}] is consumed before it runs; "
                        "call sort_edges()"
                    )
                buffer[offset : offset + edge.width] = self._node_output(edge.source, x)[
                    edge.start : edge.end
                ]
                offset += edge.width

            layer.run(buffer)
            executed.add(dest)
            last = layer
            i = j

        assert last is not None
        return last.output()

    def _node_output(self, node: NodeRef, x: Array) -> Array:
        if node == INPUT_NODE:
            return x
        layer = self.layer(*node)
        if node[0] in RECURRENT_KINDS:
            return layer.state()  # type: ignore[attr-defined]
        return layer.output()

    def reset(self) -> None:
        """Clear the state history of every recurrent layer."""

        for kind in RECURRENT_KINDS:
            for layer in self._layers[kind]:
                layer.reset()  # type: ignore[attr-defined]

    def clone(self) -> "NeuralNet":
        """Deep copy of weights, edges, metadata and recurrent state."""

        return copy.deepcopy(self)

    # ------------------------------------------------------------------
    # Metadata

    @property
    def comment(self) -> str:
        return self._comment

    @comment.setter
    def comment(self, value: str) -> None:
        self._comment = _check_text(value, COMMSTR_LEN, "Comment")

    @property
    def variables(self) -> Mapping[str, float]:
        return dict(self._variables)

    def set_variable(self, key: str, value: float) -> None:
        _check_text(key, VARSTR_LEN, "Variable key")
        if key not in self._variables and len(self._variables) >= MAX_VARIABLES:
            raise ValueError(f"A network holds at most {MAX_VARIABLES} variables")
        self._variables[key] = float(value)

    def variable(self, key: str) -> float:
        if key not in self._variables:
            raise KeyError(f"Unknown variable: {key}")
        return self._variables[key]

    # ------------------------------------------------------------------
    # Persistence

    def load(self, path: str | Path) -> bool:
        """Replace this network with the model stored at ``path``.

        Returns ``False`` (and leaves the network unchanged) on failure.
        """

        from . import serialization

        try:
            loaded = serialization.load_model(path, rng=self._rng)
        except (OSError, NeuroGraphError) as exc:
            logger.error("Failed to load model from %s: %s", path, exc)
            return False
        self.__dict__.update(loaded.__dict__)
        logger.info("Loaded model from %s", path)
        return True

    def write(self, path: str | Path) -> bool:
        """Write this network to ``path``; return ``False`` on failure."""

        from . import serialization

        try:
            serialization.save_model(self, path)
        except OSError as exc:
            logger.error("Failed to write model to %s: %s", path, exc)
            return False
        logger.info("Wrote model to %s", path)
        return True

    def __repr__(self) -> str:
        counts = ", ".join(
            f"{kind.name.lower()}={len(self._layers[kind])}"
            for kind in LAYER_KINDS
            if self._layers[kind]
        )
        return f"NeuralNet(inputs={self.inputs}, edges={len(self.edges)}, {counts or 'empty'})"


def iter_layers(net: NeuralNet) -> Iterable[tuple[LayerKind, int, Layer]]:
    """Yield ``(kind, index, layer)`` in serialization order."""

    for kind in LAYER_KINDS:
        for index, layer in enumerate(net.layers(kind)):
            yield kind, index, layer


__all__ = ["NeuralNet", "iter_layers"]
