"""Binary model format.

All fields are little-endian. Layout::

    inputs:i32  edges:i32  count:i32 x 8 (Dense, Conv2D, Accum, LSTM, GRU,
    Pool, Upres, Normal)  vars:u8  generation:i32  fitness:f64
    comment[64]
    edges x (src_kind:u8 src_index:i32 start:i32 end:i32 dst_kind:u8 dst_index:i32)
    layers, kind order then index order, each written by the layer itself
    vars x (key[16] value:f64)

There is no version tag. Recurrent state is not stored.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import BinaryIO

import numpy as np

from .core.codec import BinaryReader, BinaryWriter
from .core.types import COMMSTR_LEN, LAYER_KINDS, VARSTR_LEN
from .errors import CorruptModelError
from .graph import NeuralNet, iter_layers
from .layers import layer_class

logger = logging.getLogger(__name__)


def write_model(net: NeuralNet, stream: BinaryIO) -> None:
    writer = BinaryWriter(stream)
    variables = net.variables

    writer.i32(net.inputs)
    writer.i32(len(net.edges))
    for kind in LAYER_KINDS:
        writer.i32(net.count(kind))
    writer.u8(len(variables))
    writer.i32(net.generation)
    writer.f64(net.fitness)
    writer.text(net.comment, COMMSTR_LEN)

    for edge in net.edges:
        writer.u8(edge.src_kind)
        writer.i32(edge.src_index)
        writer.i32(edge.start)
        writer.i32(edge.end)
        writer.u8(edge.dst_kind)
        writer.i32(edge.dst_index)

    for _, _, layer in iter_layers(net):
        layer.write(writer)

    for key, value in variables.items():
        writer.text(key, VARSTR_LEN)
        writer.f64(value)


def read_model(stream: BinaryIO, *, rng: np.random.Generator | None = None) -> NeuralNet:
    """Parse a model from ``stream``.

    Raises :class:`CorruptModelError` when the stream is truncated, declares
    impossible counts, or describes edges the layers cannot satisfy.
    """

    reader = BinaryReader(stream)
    inputs = reader.i32()
    if inputs < 1:
        raise CorruptModelError(f"Invalid network input count {inputs}")
    edge_count = reader.count("edge count")
    counts = {kind: reader.count(f"{kind.name} layer count") for kind in LAYER_KINDS}
    var_count = reader.u8()
    generation = reader.i32()
    fitness = reader.f64()
    comment = reader.text(COMMSTR_LEN)

    raw_edges = []
    for _ in range(edge_count):
        raw_edges.append(
            (reader.u8(), reader.i32(), reader.i32(), reader.i32(), reader.u8(), reader.i32())
        )

    net = NeuralNet(inputs, rng=rng)
    net.generation = generation
    net.fitness = fitness
    try:
        net.comment = comment
        for kind in LAYER_KINDS:
            cls = layer_class(kind)
            for index in range(counts[kind]):
                try:
                    net._append(cls.read(reader, rng=net._rng))
                except ValueError as exc:
                    raise CorruptModelError(f"{kind.name} layer {index}: {exc}") from exc

        # Stored order is kept; any edge link_layers rejects makes the file corrupt.
        for position, raw in enumerate(raw_edges):
            status = net.link_layers(*raw)
            if not status:
                raise CorruptModelError(f"Edge {position} {raw} is invalid: {status.value}")

        for _ in range(var_count):
            key = reader.text(VARSTR_LEN)
            net.set_variable(key, reader.f64())
    except ValueError as exc:
        raise CorruptModelError(str(exc)) from exc
    if len(net.variables) != var_count:
        raise CorruptModelError("Duplicate variable keys")
    return net


def dumps(net: NeuralNet) -> bytes:
    buffer = io.BytesIO()
    write_model(net, buffer)
    return buffer.getvalue()


def loads(data: bytes, *, rng: np.random.Generator | None = None) -> NeuralNet:
    """Parse a complete model from ``data``; trailing bytes are an error."""

    stream = io.BytesIO(data)
    net = read_model(stream, rng=rng)
    if stream.read(1):
        raise CorruptModelError("Trailing bytes after model data")
    return net


def save_model(net: NeuralNet, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(dumps(net))
    logger.debug("Serialised %r to %s", net, path)
    return path


def load_model(path: str | Path, *, rng: np.random.Generator | None = None) -> NeuralNet:
    return loads(Path(path).read_bytes(), rng=rng)


__all__ = ["dumps", "load_model", "loads", "read_model", "save_model", "write_model"]
