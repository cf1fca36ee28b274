import numpy as np
import pytest

from neurograph import NeuralNet
from neurograph.models import XOR_CASES, build_xor

# The reference weights saturate at roughly 0.03 / 0.97.
TOLERANCE = 0.05


@pytest.mark.parametrize("inputs,expected", XOR_CASES)
def test_xor_network(inputs, expected):
    net = build_xor(np.random.default_rng(0))
    out = net.run(np.array(inputs))
    assert out.shape == (1,)
    assert abs(out[0] - expected) < TOLERANCE


def test_xor_survives_a_file_round_trip(tmp_path):
    path = tmp_path / "models" / "xor.nn"
    assert build_xor(np.random.default_rng(0)).write(path)

    net = NeuralNet(1)
    assert net.load(path)
    assert net.name_index("Dense-2") == 1
    for inputs, expected in XOR_CASES:
        assert abs(net.run(inputs)[0] - expected) < TOLERANCE
