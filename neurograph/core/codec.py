"""Little-endian primitives for the binary model format."""

from __future__ import annotations

import struct
from typing import BinaryIO, Sequence

import numpy as np

from ..errors import CorruptModelError
from .types import Array

_I32 = struct.Struct("<i")
_U8 = struct.Struct("<B")
_F64 = struct.Struct("<d")
_CHUNK = 1 << 20


def encode_text(text: str, width: int) -> bytes:
    """Encode ``text`` as UTF-8 into exactly ``width`` NUL-padded bytes."""

    raw = text.encode("utf-8")[:width]
    # Never leave half of a multi-byte character at the cut.
    raw = raw.decode("utf-8", errors="ignore").encode("utf-8")
    return raw.ljust(width, b"\x00")


def decode_text(raw: bytes) -> str:
    return raw.split(b"\x00", 1)[0].decode("utf-8", errors="replace")


class BinaryWriter:
    """Write model fields to a binary stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def i32(self, value: int) -> None:
        self._stream.write(_I32.pack(int(value)))

    def u8(self, value: int) -> None:
        self._stream.write(_U8.pack(int(value)))

    def f64(self, value: float) -> None:
        self._stream.write(_F64.pack(float(value)))

    def text(self, value: str, width: int) -> None:
        self._stream.write(encode_text(value, width))

    def f64_array(self, values: Array) -> None:
        self._stream.write(np.ascontiguousarray(values, dtype="<f8").tobytes())

    def u8_array(self, values: Array | Sequence[int]) -> None:
        self._stream.write(np.asarray(values, dtype=np.uint8).tobytes())


class BinaryReader:
    """Read model fields from a binary stream.

    Every read is exact: a short read raises :class:`CorruptModelError`.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def _take(self, size: int) -> bytes:
        chunks = []
        remaining = size
        while remaining > 0:
            chunk = self._stream.read(min(remaining, _CHUNK))
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        data = b"".join(chunks)
        if len(data) != size:
            raise CorruptModelError(
                f"Unexpected end of model data: wanted {size} bytes, got {len(data)}"
            )
        return data

    def i32(self) -> int:
        return _I32.unpack(self._take(_I32.size))[0]

    def u8(self) -> int:
        return _U8.unpack(self._take(_U8.size))[0]

    def f64(self) -> float:
        return _F64.unpack(self._take(_F64.size))[0]

    def count(self, what: str) -> int:
        """Read an i32 that must be non-negative."""

        value = self.i32()
        if value < 0:
            raise CorruptModelError(f"Negative {what}: {value}")
        return value

    def text(self, width: int) -> str:
        return decode_text(self._take(width))

    def f64_array(self, count: int, shape: tuple[int, ...] | None = None) -> Array:
        data = np.frombuffer(self._take(8 * count), dtype="<f8").astype(np.float64)
        return data.reshape(shape) if shape is not None else data

    def u8_array(self, count: int) -> Array:
        return np.frombuffer(self._take(count), dtype=np.uint8).copy()

    def at_end(self) -> bool:
        return self._stream.read(1) == b""


__all__ = ["BinaryReader", "BinaryWriter", "decode_text", "encode_text"]
