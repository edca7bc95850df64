"""Core typing contracts for ReplyNet."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import numpy as np

Array = np.ndarray


@dataclass(frozen=True)
class ActivationTrace:
    """Per-layer outputs captured during one forward pass.

    ``layers[0]`` is the input vector and ``layers[-1]`` the network output.
    """

    layers: Tuple[Array, ...]

    @property
    def output(self) -> Array:
        return self.layers[-1]

    def __len__(self) -> int:
        return len(self.layers)

    def __getitem__(self, index: int) -> Array:
        return self.layers[index]


@dataclass(frozen=True)
class ModelDescription:
    """Description of the feed-forward network architecture."""

    layer_dims: List[int]


@dataclass(frozen=True)
class TrainResult:
    """Outcome of :meth:`replynet.training.trainer.Trainer.run`."""

    epochs: int
    final_error: float
    converged: bool
    history: List[float] = field(default_factory=list)


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`replynet.training.pipelines.run_pipeline`."""

    epochs: int
    final_error: float
    converged: bool
    model_path: str
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
    loaded: bool = False


StateDict = Dict[str, Array]
