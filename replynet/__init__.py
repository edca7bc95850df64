"""ReplyNet public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.network import NeuralNetwork
from .training.pipelines import build_session, load_preset, presets, run_pipeline
from .training.ranking import rank_responses
from .training.trainer import Trainer

__all__ = [
    "NeuralNetwork",
    "Trainer",
    "activations",
    "types",
    "build_session",
    "load_preset",
    "presets",
    "rank_responses",
    "run_pipeline",
]
