"""Activation utilities for neurograph layers."""

from __future__ import annotations

from enum import IntEnum

import numpy as np

from .types import Array


class Activation(IntEnum):
    """Activation codes as stored (one byte per unit) in model files."""

    RELU = 0
    LEAKY_RELU = 1
    SIGMOID = 2
    TANH = 3
    SOFTMAX = 4
    SYMMETRICAL_SIGMOID = 5
    THRESHOLD = 6
    LINEAR = 7


def relu(x: Array, alpha: Array | float = 1.0) -> Array:
    """Return the ReLU activation. ``alpha`` is accepted and ignored."""

    return np.maximum(x, 0.0)


def leaky_relu(x: Array, alpha: Array | float = 1.0) -> Array:
    return np.where(x > 0.0, x, x * alpha)


def sigmoid(x: Array, alpha: Array | float = 1.0) -> Array:
    """Logistic function with gain ``alpha``."""

    z = np.clip(x * alpha, -500.0, 500.0)
    return 1.0 / (1.0 + np.exp(-z))


def tanh(x: Array, alpha: Array | float = 1.0) -> Array:
    return np.tanh(x * alpha)


def symmetrical_sigmoid(x: Array, alpha: Array | float = 1.0) -> Array:
    """``(1 - e^-ax) / (1 + e^-ax)``, i.e. ``tanh(ax / 2)``."""

    return np.tanh(x * alpha * 0.5)


def threshold(x: Array, alpha: Array | float = 1.0) -> Array:
    return np.where(x > alpha, 1.0, 0.0)


def linear(x: Array, alpha: Array | float = 1.0) -> Array:
    return x * alpha


def softmax(x: Array) -> Array:
    if x.size == 0:
        return x
    shifted = np.exp(x - np.max(x))
    return shifted / np.sum(shifted)


_ELEMENTWISE = {
    Activation.RELU: relu,
    Activation.LEAKY_RELU: leaky_relu,
    Activation.SIGMOID: sigmoid,
    Activation.TANH: tanh,
    Activation.SYMMETRICAL_SIGMOID: symmetrical_sigmoid,
    Activation.THRESHOLD: threshold,
    Activation.LINEAR: linear,
}


def apply(x: Array, funcs: Array, alphas: Array) -> Array:
    """Apply per-unit activations to the pre-activation vector ``x``.

    ``funcs`` holds one :class:`Activation` code per unit and ``alphas`` the
    matching parameter. Units flagged ``SOFTMAX`` are normalised jointly.
    """

    x = np.asarray(x, dtype=np.float64)
    funcs = np.asarray(funcs)
    alphas = np.asarray(alphas, dtype=np.float64)
    out = np.empty_like(x)
    for code in np.unique(funcs):
        mask = funcs == code
        if code == Activation.SOFTMAX:
            out[mask] = softmax(x[mask])
        else:
            out[mask] = _ELEMENTWISE[Activation(int(code))](x[mask], alphas[mask])
    return out


def apply_uniform(x: Array, func: Activation | int, alpha: float = 1.0) -> Array:
    """Apply a single activation (with a scalar parameter) to all of ``x``."""

    x = np.asarray(x, dtype=np.float64)
    if func == Activation.SOFTMAX:
        return softmax(x)
    return _ELEMENTWISE[Activation(int(func))](x, alpha)


def is_valid(code: int) -> bool:
    return Activation.RELU <= code <= Activation.LINEAR


__all__ = [
    "Activation",
    "apply",
    "apply_uniform",
    "is_valid",
    "leaky_relu",
    "linear",
    "relu",
    "sigmoid",
    "softmax",
    "symmetrical_sigmoid",
    "tanh",
    "threshold",
]
