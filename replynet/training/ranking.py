"""Turn final-layer scores into ranked response words."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from ..core.types import Array


@dataclass(frozen=True)
class Response:
    word: str
    score: float

    @property
    def percent(self) -> float:
        return self.score * 100.0


def rank_responses(
    scores: Array | Sequence[float],
    vocabulary: Sequence[str],
    top_k: int = 5,
) -> List[Response]:
    """Return the ``top_k`` highest scoring words, best first.

    Ties keep vocabulary order.
    """

    values = np.asarray(scores, dtype=np.float64)
    if values.ndim != 1 or values.shape[0] != len(vocabulary):
        raise ValueError(
            f"Expected {len(vocabulary)} scores, got array of shape {values.shape}"
        )
    if top_k <= 0:
        return []
    order = np.argsort(-values, kind="stable")[:top_k]
    return [Response(word=vocabulary[idx], score=float(values[idx])) for idx in order]


def format_responses(responses: Sequence[Response]) -> str:
    return " ".join(f"{r.word} ({r.percent:.1f}%)" for r in responses)


__all__ = ["Response", "format_responses", "rank_responses"]
