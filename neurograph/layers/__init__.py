"""Layer implementations, registered by kind on import."""

from .accum import AccumLayer
from .base import Layer, layer_class, register_layer, registered_kinds
from .conv2d import Conv2DLayer, Filter2D
from .dense import DenseLayer
from .gru import GRULayer
from .lstm import LSTMLayer
from .normal import NormalLayer
from .pool import Pool2D, PoolFunction, PoolLayer
from .recurrent import RecurrentLayer
from .upres import FillMethod, UpresLayer, UpresParams

__all__ = [
    "AccumLayer",
    "Conv2DLayer",
    "DenseLayer",
    "FillMethod",
    "Filter2D",
    "GRULayer",
    "LSTMLayer",
    "Layer",
    "NormalLayer",
    "Pool2D",
    "PoolFunction",
    "PoolLayer",
    "RecurrentLayer",
    "UpresLayer",
    "UpresParams",
    "layer_class",
    "register_layer",
    "registered_kinds",
]
