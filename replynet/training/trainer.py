"""Online training loop for :class:`~replynet.core.network.NeuralNetwork`."""

from __future__ import annotations

from typing import Mapping, Sequence

import numpy as np

from ..core.network import NeuralNetwork
from ..core.types import Array, TrainResult


class Trainer:
    """Run epochs of per-example forward/backpropagate/update steps.

    Callbacks (and per-split loggers) receive ``on_epoch(epoch, metrics)``;
    plain callables are invoked as ``callback(epoch, metrics)``.
    """

    def __init__(
        self,
        network: NeuralNetwork,
        learning_rate: float,
        momentum: float,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        self.network = network
        self.learning_rate = float(learning_rate)
        self.momentum = float(momentum)
        self.callbacks = list(callbacks or [])

    def run(
        self,
        inputs: Array | Sequence[Sequence[float]],
        targets: Array | Sequence[Sequence[float]],
        *,
        epochs: int,
        error_threshold: float = 0.0,
        split_loggers: Mapping[str, Sequence[object]] | None = None,
    ) -> TrainResult:
        inputs = np.asarray(inputs, dtype=np.float64)
        targets = np.asarray(targets, dtype=np.float64)
        if inputs.shape[0] != targets.shape[0]:
            raise ValueError(
                f"Got {inputs.shape[0]} inputs but {targets.shape[0]} targets"
            )
        if inputs.shape[0] == 0:
            raise ValueError("Training requires at least one example")
        if epochs < 1:
            raise ValueError("epochs must be >= 1")

        split_loggers = split_loggers or {}
        history: list[float] = []
        converged = False
        for epoch in range(1, epochs + 1):
            error = self.train_epoch(inputs, targets)
            history.append(error)
            self._emit_epoch("train", epoch, {"loss": error}, split_loggers)
            if error < error_threshold:
                converged = True
                break

        return TrainResult(
            epochs=len(history),
            final_error=history[-1],
            converged=converged,
            history=history,
        )

    def train_epoch(self, inputs: Array, targets: Array) -> float:
        """One pass over every example; returns the mean example error."""

        total = 0.0
        for x, t in zip(inputs, targets):
            self.network.forward(x)
            self.network.backpropagate(t)
            self.network.update_weights(self.learning_rate, self.momentum)
            total += self.network.get_error(t)
        return total / inputs.shape[0]

    def _emit_epoch(
        self,
        split: str,
        epoch: int,
        metrics: Mapping[str, float],
        loggers: Mapping[str, Sequence[object]],
    ) -> None:
        for callback in list(self.callbacks) + list(loggers.get(split, [])):
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


__all__ = ["Trainer"]
