import io
import struct

import numpy as np
import pytest

from neurograph.core import activations
from neurograph.core.activations import Activation
from neurograph.core.codec import BinaryReader, BinaryWriter, decode_text, encode_text
from neurograph.errors import CorruptModelError


def test_elementwise_activations():
    x = np.array([-2.0, 0.0, 2.0])
    assert np.allclose(activations.relu(x), [0.0, 0.0, 2.0])
    assert np.allclose(activations.leaky_relu(x, 0.1), [-0.2, 0.0, 2.0])
    assert np.isclose(activations.sigmoid(np.array([0.0]))[0], 0.5)
    assert np.allclose(activations.threshold(x, 1.0), [0.0, 0.0, 1.0])
    assert np.allclose(activations.linear(x, 3.0), [-6.0, 0.0, 6.0])
    assert np.allclose(activations.symmetrical_sigmoid(x), np.tanh(x / 2))


def test_apply_mixes_functions_and_joint_softmax():
    x = np.array([1.0, 2.0, -3.0, 3.0])
    funcs = np.array(
        [Activation.SOFTMAX, Activation.SOFTMAX, Activation.RELU, Activation.SOFTMAX],
        dtype=np.uint8,
    )
    out = activations.apply(x, funcs, np.ones(4))
    assert out[2] == 0.0
    assert np.isclose(out[[0, 1, 3]].sum(), 1.0)
    assert out[3] > out[1] > out[0]


def test_sigmoid_saturates_without_overflow():
    out = activations.sigmoid(np.array([-1e6, 1e6]))
    assert np.allclose(out, [0.0, 1.0])


def test_text_fields_are_padded_and_truncated():
    assert encode_text("abc", 5) == b"abc\x00\x00"
    assert encode_text("abcdefgh", 4) == b"abcd"
    # Two-byte characters are never split.
    assert encode_text("é" * 3, 5) == "éé".encode() + b"\x00"
    assert decode_text(b"name\x00\x00junk") == "name"


def test_writer_is_little_endian():
    buffer = io.BytesIO()
    writer = BinaryWriter(buffer)
    writer.i32(1)
    writer.u8(7)
    writer.f64(0.5)
    writer.f64_array(np.array([[1.0, 2.0]]))
    assert buffer.getvalue() == struct.pack("<iBddd", 1, 7, 0.5, 1.0, 2.0)

    reader = BinaryReader(io.BytesIO(buffer.getvalue()))
    assert reader.i32() == 1
    assert reader.u8() == 7
    assert reader.f64() == 0.5
    assert np.array_equal(reader.f64_array(2, (1, 2)), [[1.0, 2.0]])
    assert reader.at_end()


def test_reader_rejects_short_and_negative_fields():
    with pytest.raises(CorruptModelError):
        BinaryReader(io.BytesIO(b"\x01\x00")).i32()
    with pytest.raises(CorruptModelError):
        BinaryReader(io.BytesIO(struct.pack("<i", -3))).count("edge count")
    with pytest.raises(CorruptModelError):
        BinaryReader(io.BytesIO(b"\x00" * 15)).f64_array(2)
