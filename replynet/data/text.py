"""Tokenisation and bag-of-words encoding for chat messages."""

from __future__ import annotations

import re
from typing import Iterable, List, Sequence

import numpy as np
from sklearn.feature_extraction.text import CountVectorizer

from ..core.types import Array
from .chat import Message

_SPLIT = re.compile(r"[ ,.!?]+")


def tokenize(text: str) -> List[str]:
    """Split ``text`` on spaces and ``, . ! ?``; case is preserved."""

    return [token for token in _SPLIT.split(text) if token]


def build_vocabulary(messages: Iterable[Message]) -> List[str]:
    """Unique tokens across ``messages`` in order of first appearance."""

    seen: dict[str, None] = {}
    for message in messages:
        for token in tokenize(message.content):
            seen.setdefault(token, None)
    return list(seen)


class BagOfWords:
    """Binary presence vectors over a fixed vocabulary."""

    def __init__(self, vocabulary: Sequence[str]) -> None:
        if not vocabulary:
            raise ValueError("Vocabulary must contain at least one token")
        if len(set(vocabulary)) != len(vocabulary):
            raise ValueError("Vocabulary tokens must be unique")
        self.vocabulary = list(vocabulary)
        self._vectorizer = CountVectorizer(
            vocabulary=self.vocabulary,
            tokenizer=tokenize,
            token_pattern=None,
            lowercase=False,
            binary=True,
        )

    def __len__(self) -> int:
        return len(self.vocabulary)

    def encode(self, text: str) -> Array:
        return self.encode_many([text])[0]

    def encode_many(self, texts: Iterable[str]) -> Array:
        texts = list(texts)
        if not texts:
            return np.zeros((0, len(self)), dtype=np.float64)
        matrix = self._vectorizer.transform(texts)
        return matrix.toarray().astype(np.float64)

    def decode(self, index: int) -> str:
        return self.vocabulary[index]


__all__ = ["BagOfWords", "build_vocabulary", "tokenize"]
