"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List, MutableMapping, Tuple

import numpy as np

from ..core.types import Array


@dataclass(frozen=True)
class DatasetSpec:
    """Training examples for the response network.

    Attributes
    ----------
    name:
        Registry identifier of the dataset.
    inputs:
        Array of shape ``(n_examples, d_in)``; one bag-of-words row per prompt.
    targets:
        Array of shape ``(n_examples, d_out)``; one bag-of-words row per reply.
    vocabulary:
        Token for every input/output slot, in slot order.
    provenance:
        Free-form metadata recorded in run manifests so that a run can be
        traced back to the file (or fixture parameters) it was built from.
    """

    name: str
    inputs: Array
    targets: Array
    vocabulary: List[str]
    provenance: Dict[str, Any] = field(default_factory=dict)

    @property
    def d_in(self) -> int:
        return int(self.inputs.shape[1])

    @property
    def d_out(self) -> int:
        return int(self.targets.shape[1])

    def __len__(self) -> int:
        return int(self.inputs.shape[0])

    def examples(self) -> Iterator[Tuple[Array, Array]]:
        return zip(self.inputs, self.targets)


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    ``register_dataset`` can be used both as a decorator::

        @register_dataset("chat")
        def make_chat(**kwargs):
            ...

    or directly::

        register_dataset("chat", make_chat)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(dataset: str | None = None, /, **options: Any) -> DatasetSpec:
    """Return the :class:`DatasetSpec` for ``dataset``."""

    if dataset is None:
        if "name" in options:
            dataset = str(options.pop("name"))
        else:
            raise TypeError("Dataset name must be provided")

    if dataset not in _REGISTRY:
        raise KeyError(f"Unknown dataset: {dataset}")

    spec = _REGISTRY[dataset](**options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


def _validate_spec(spec: DatasetSpec) -> None:
    if spec.inputs.ndim != 2 or spec.targets.ndim != 2:
        raise ValueError("DatasetSpec inputs and targets must be 2-D arrays")
    if spec.inputs.shape[0] != spec.targets.shape[0]:
        raise ValueError(
            f"DatasetSpec has {spec.inputs.shape[0]} inputs but {spec.targets.shape[0]} targets"
        )
    if spec.inputs.shape[0] == 0:
        raise ValueError(f"Dataset {spec.name!r} has no training examples")
    if not np.all(np.isfinite(spec.inputs)) or not np.all(np.isfinite(spec.targets)):
        raise ValueError(f"Dataset {spec.name!r} contains non-finite values")


__all__ = [
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
