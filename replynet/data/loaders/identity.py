from __future__ import annotations

import numpy as np

from ..registry import DatasetSpec, register_dataset


def _factory(*, size: int = 2, repeats: int = 1, seed: int = 0, **_: object) -> DatasetSpec:
    if size <= 0 or repeats <= 0:
        raise ValueError("identity dataset requires positive size and repeats")
    rng = np.random.default_rng(seed)
    eye = np.eye(size, dtype=np.float64)
    order = np.concatenate([rng.permutation(size) for _ in range(repeats)])
    provenance = {"type": "identity", "size": size, "repeats": repeats, "seed": seed}
    return DatasetSpec(
        name="identity",
        inputs=eye[order],
        targets=eye[order],
        vocabulary=[f"t{idx}" for idx in range(size)],
        provenance=provenance,
    )


register_dataset("identity", _factory)

__all__ = ["_factory"]
