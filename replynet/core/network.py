"""Fully-connected sigmoid network trained by backpropagation with momentum."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import List, Mapping, Sequence

import numpy as np

from .activations import sigmoid, sigmoid_deriv, squared_error, squared_error_deriv
from .types import ActivationTrace, Array, ModelDescription, StateDict
from .update import momentum_step

FORMAT_TAG = "replynet-mlp"
FORMAT_VERSION = 1


class NetworkError(Exception):
    """Base class for engine errors."""


class TopologyError(NetworkError, ValueError):
    """Raised for a layer specification the engine cannot build."""


class ShapeError(NetworkError, ValueError):
    """Raised when a vector or matrix does not match the topology."""


class CallOrderError(NetworkError, RuntimeError):
    """Raised when forward/backpropagate/update are called out of order."""


class ModelFormatError(NetworkError, ValueError):
    """Raised when a persisted model does not match the engine."""


class Phase(str, Enum):
    IDLE = "idle"
    FORWARDED = "forwarded"
    BACKPROPAGATED = "backpropagated"


def _as_rng(rng: np.random.Generator | int | None) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def _validate_topology(layer_sizes: Sequence[int]) -> tuple[int, ...]:
    sizes = tuple(layer_sizes)
    if len(sizes) < 2:
        raise TopologyError(f"At least two layers are required, got {len(sizes)}")
    for idx, size in enumerate(sizes):
        if isinstance(size, bool) or not isinstance(size, (int, np.integer)):
            raise TopologyError(f"Layer {idx} size must be an integer, got {size!r}")
        if size <= 0:
            raise TopologyError(f"Layer {idx} size must be positive, got {size}")
    return tuple(int(size) for size in sizes)


class NeuralNetwork:
    """Multi-layer perceptron with a logistic activation on every layer.

    Parameters
    ----------
    layer_sizes:
        Unit count per layer, input layer first. Transition ``i`` owns a weight
        matrix of shape ``(layer_sizes[i + 1], layer_sizes[i])`` and a bias
        vector of length ``layer_sizes[i + 1]``.
    rng:
        Random source for the uniform ``[-1, 1)`` initialisation. Either a
        :class:`numpy.random.Generator`, an integer seed, or ``None``.

    A training step is ``forward`` followed by ``backpropagate`` followed by
    ``update_weights``; any other order raises :class:`CallOrderError`.
    """

    def __init__(
        self,
        layer_sizes: Sequence[int],
        rng: np.random.Generator | int | None = None,
    ) -> None:
        self.layer_sizes = _validate_topology(layer_sizes)
        generator = _as_rng(rng)
        self.weights: List[Array] = []
        self.biases: List[Array] = []
        for in_dim, out_dim in zip(self.layer_sizes[:-1], self.layer_sizes[1:]):
            self.weights.append(generator.uniform(-1.0, 1.0, size=(out_dim, in_dim)))
            self.biases.append(generator.uniform(-1.0, 1.0, size=out_dim))
        self.weight_velocity: List[Array] = [np.zeros_like(W) for W in self.weights]
        self.bias_velocity: List[Array] = [np.zeros_like(b) for b in self.biases]
        self._activations: List[Array] = []
        self._deltas: List[Array] = [np.zeros_like(b) for b in self.biases]
        self.phase = Phase.IDLE

    # ------------------------------------------------------------------
    # Topology

    @property
    def num_transitions(self) -> int:
        return len(self.weights)

    @property
    def weight_count(self) -> int:
        return int(sum(W.size for W in self.weights))

    @property
    def bias_count(self) -> int:
        return int(sum(b.size for b in self.biases))

    @property
    def parameter_count(self) -> int:
        return self.weight_count + self.bias_count

    def describe(self) -> ModelDescription:
        return ModelDescription(layer_dims=list(self.layer_sizes))

    # ------------------------------------------------------------------
    # Training step

    def forward(self, inputs: Sequence[float] | Array) -> ActivationTrace:
        """Propagate ``inputs`` through every layer and return the trace."""

        x = self._check_vector(inputs, self.layer_sizes[0], "input")
        activations = [x]
        for W, b in zip(self.weights, self.biases):
            activations.append(sigmoid(W @ activations[-1] + b))
        self._activations = activations
        self.phase = Phase.FORWARDED
        return ActivationTrace(layers=tuple(a.copy() for a in activations))

    def predict(self, inputs: Sequence[float] | Array) -> Array:
        return self.forward(inputs).output

    def backpropagate(self, targets: Sequence[float] | Array) -> None:
        """Fill the delta trace for ``targets`` from the last forward pass."""

        if self.phase is not Phase.FORWARDED:
            raise CallOrderError(
                f"backpropagate requires a preceding forward pass (phase={self.phase.value})"
            )
        t = self._check_vector(targets, self.layer_sizes[-1], "target")
        acts = self._activations
        last = self.num_transitions - 1
        self._deltas[last] = squared_error_deriv(acts[-1], t) * sigmoid_deriv(acts[-1])
        for idx in reversed(range(last)):
            back = self.weights[idx + 1].T @ self._deltas[idx + 1]
            self._deltas[idx] = sigmoid_deriv(acts[idx + 1]) * back
        self.phase = Phase.BACKPROPAGATED

    def update_weights(self, learning_rate: float, momentum: float) -> None:
        """Descend along the last computed gradient using classical momentum."""

        if self.phase is not Phase.BACKPROPAGATED:
            raise CallOrderError(
                f"update_weights requires a preceding backpropagate (phase={self.phase.value})"
            )
        for idx, delta in enumerate(self._deltas):
            grad_W = np.outer(delta, self._activations[idx])
            momentum_step(
                self.weights[idx], self.weight_velocity[idx], grad_W, learning_rate, momentum
            )
            momentum_step(
                self.biases[idx], self.bias_velocity[idx], delta, learning_rate, momentum
            )
        self.phase = Phase.IDLE

    def get_error(self, targets: Sequence[float] | Array) -> float:
        """Squared-error cost of the last forward pass against ``targets``."""

        if not self._activations:
            raise CallOrderError("get_error requires at least one forward pass")
        t = self._check_vector(targets, self.layer_sizes[-1], "target")
        return float(np.sum(squared_error(self._activations[-1], t)))

    @property
    def deltas(self) -> List[Array]:
        return [d.copy() for d in self._deltas]

    # ------------------------------------------------------------------
    # Parameter access

    def state_dict(self) -> StateDict:
        state: StateDict = {}
        for idx, (W, b) in enumerate(zip(self.weights, self.biases)):
            state[f"W{idx}"] = W.copy()
            state[f"b{idx}"] = b.copy()
        return state

    def load_state_dict(self, state: Mapping[str, Array]) -> None:
        """Replace every parameter; momentum and traces are reset."""

        staged: list[tuple[Array, Array]] = []
        for idx, (W, b) in enumerate(zip(self.weights, self.biases)):
            for key, current in ((f"W{idx}", W), (f"b{idx}", b)):
                if key not in state:
                    raise KeyError(f"Missing parameter {key} in state dict")
                value = np.asarray(state[key], dtype=np.float64)
                if value.shape != current.shape:
                    raise ShapeError(
                        f"Parameter {key} has shape {value.shape}, expected {current.shape}"
                    )
            staged.append(
                (
                    np.array(state[f"W{idx}"], dtype=np.float64),
                    np.array(state[f"b{idx}"], dtype=np.float64),
                )
            )
        self.weights = [W for W, _ in staged]
        self.biases = [b for _, b in staged]
        self.weight_velocity = [np.zeros_like(W) for W in self.weights]
        self.bias_velocity = [np.zeros_like(b) for b in self.biases]
        self._activations = []
        self._deltas = [np.zeros_like(b) for b in self.biases]
        self.phase = Phase.IDLE

    # ------------------------------------------------------------------
    # Persistence

    def save(self, path: str | Path) -> bool:
        """Write parameters as text; ``False`` if ``path`` cannot be written."""

        try:
            with Path(path).open("w", encoding="utf-8") as handle:
                handle.write(f"# {FORMAT_TAG} {FORMAT_VERSION}\n")
                handle.write("# topology " + " ".join(str(n) for n in self.layer_sizes) + "\n")
                for W, b in zip(self.weights, self.biases):
                    np.savetxt(handle, np.column_stack([W, b]), fmt="%.17g")
        except OSError:
            return False
        return True

    def load(self, path: str | Path) -> bool:
        """Read parameters written by :meth:`save`.

        Returns ``False`` when ``path`` cannot be opened. A file written for a
        different topology, or one with a malformed body, raises
        :class:`ModelFormatError` and leaves the parameters untouched.
        Headerless files are read when their line layout matches exactly.
        """

        try:
            with Path(path).open("r", encoding="utf-8") as handle:
                lines = [line.strip() for line in handle]
        except UnicodeDecodeError as exc:
            raise ModelFormatError(f"{path}: not a text model file") from exc
        except OSError:
            return False
        lines = [line for line in lines if line]
        header = [line[1:].split() for line in lines if line.startswith("#")]
        body = [line for line in lines if not line.startswith("#")]
        if header:
            self._check_header(header, path)
        self.load_state_dict(self._parse_body(body, path))
        return True

    def _check_header(self, header: List[List[str]], path: str | Path) -> None:
        fields = {tokens[0]: tokens[1:] for tokens in header if tokens}
        version = fields.get(FORMAT_TAG)
        if version is None:
            raise ModelFormatError(f"{path}: missing {FORMAT_TAG!r} format tag")
        if version != [str(FORMAT_VERSION)]:
            raise ModelFormatError(f"{path}: unsupported format version {' '.join(version)}")
        try:
            topology = tuple(int(n) for n in fields.get("topology", []))
        except ValueError as exc:
            raise ModelFormatError(f"{path}: malformed topology line") from exc
        if topology != self.layer_sizes:
            raise ModelFormatError(
                f"{path}: stored topology {list(topology)} does not match "
                f"{list(self.layer_sizes)}"
            )

    def _parse_body(self, body: List[str], path: str | Path) -> StateDict:
        expected_rows = sum(self.layer_sizes[1:])
        if len(body) != expected_rows:
            raise ModelFormatError(
                f"{path}: expected {expected_rows} parameter rows, found {len(body)}"
            )
        state: StateDict = {}
        row = 0
        for idx, (in_dim, out_dim) in enumerate(
            zip(self.layer_sizes[:-1], self.layer_sizes[1:])
        ):
            block = np.empty((out_dim, in_dim + 1), dtype=np.float64)
            for j in range(out_dim):
                values = body[row].split()
                if len(values) != in_dim + 1:
                    raise ModelFormatError(
                        f"{path}: row {row} has {len(values)} values, expected {in_dim + 1}"
                    )
                try:
                    block[j] = [float(v) for v in values]
                except ValueError as exc:
                    raise ModelFormatError(f"{path}: row {row} is not numeric") from exc
                row += 1
            state[f"W{idx}"] = block[:, :-1]
            state[f"b{idx}"] = block[:, -1]
        return state

    # ------------------------------------------------------------------
    # Helpers

    @staticmethod
    def _check_vector(values: Sequence[float] | Array, size: int, name: str) -> Array:
        vec = np.asarray(values, dtype=np.float64)
        if vec.ndim != 1 or vec.shape[0] != size:
            raise ShapeError(f"Expected {name} vector of length {size}, got shape {vec.shape}")
        return vec.copy()


__all__ = [
    "CallOrderError",
    "ModelFormatError",
    "NetworkError",
    "NeuralNetwork",
    "Phase",
    "ShapeError",
    "TopologyError",
]
