"""Activation and cost utilities for ReplyNet."""

from __future__ import annotations

import numpy as np

from .types import Array


def sigmoid(x: Array) -> Array:
    """Return the logistic activation ``1 / (1 + e^-x)``."""

    return 1.0 / (1.0 + np.exp(-x))


def sigmoid_deriv(activation: Array) -> Array:
    """Logistic derivative expressed through the already computed activation."""

    return activation * (1.0 - activation)


def squared_error(output: Array, target: Array) -> Array:
    """Element-wise cost ``0.5 * (output - target) ** 2``."""

    return 0.5 * np.square(output - target)


def squared_error_deriv(output: Array, target: Array) -> Array:
    return output - target
