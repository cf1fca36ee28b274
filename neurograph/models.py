"""Reference networks with known weights."""

from __future__ import annotations

import numpy as np

from .core.activations import Activation
from .core.types import LayerKind
from .graph import NeuralNet

XOR_HIDDEN = np.array(
    [
        [4.169506539262890, 6.166518349083749],
        [4.175620772246105, 6.187965760394095],
        [-6.399885541033798, -2.678140646720913],
    ]
)
XOR_OUTPUT = np.array([[-9.175274710095412], [8.486130185157748], [-3.875273098510313]])

XOR_CASES = (
    ((0.0, 0.0), 0.0),
    ((1.0, 0.0), 1.0),
    ((0.0, 1.0), 1.0),
    ((1.0, 1.0), 0.0),
)


def build_xor(rng: np.random.Generator | None = None) -> NeuralNet:
    """Two-input, 2-2-1 sigmoid network computing XOR."""

    net = NeuralNet(2, rng=rng)
    net.add_dense(2, 2, "Dense-1")
    net.add_dense(2, 1, "Dense-2")
    net.link_layers(LayerKind.INPUT, 0, 0, 2, LayerKind.DENSE, 0)
    net.link_layers(LayerKind.DENSE, 0, 0, 2, LayerKind.DENSE, 1)
    net.sort_edges()

    for index, weights in enumerate((XOR_HIDDEN, XOR_OUTPUT)):
        layer = net.dense(index)
        layer.set_weights(weights)
        layer.set_functions(Activation.SIGMOID)

    net.comment = "Two-input network performs XOR"
    return net


__all__ = ["XOR_CASES", "build_xor"]
