"""Gradient descent with classical momentum."""

from __future__ import annotations

from .types import Array


def momentum_step(
    param: Array,
    velocity: Array,
    gradient: Array,
    learning_rate: float,
    momentum: float,
) -> Array:
    """Apply one momentum update to ``param`` in place and return the step.

    ``velocity`` is overwritten with ``learning_rate * gradient + momentum *
    velocity`` and that value is subtracted from ``param``. Values of
    ``learning_rate`` or ``momentum`` outside the usual ranges (``> 0`` and
    ``[0, 1)``) are accepted but tend to make training diverge.
    """

    if param.shape != velocity.shape or param.shape != gradient.shape:
        raise ValueError(
            f"Shape mismatch: param {param.shape}, velocity {velocity.shape}, "
            f"gradient {gradient.shape}"
        )
    velocity *= momentum
    velocity += learning_rate * gradient
    param -= velocity
    return velocity
