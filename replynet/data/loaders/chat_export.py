from __future__ import annotations

from pathlib import Path

from ..chat import read_chat, reply_pairs
from ..registry import DatasetSpec, register_dataset
from ..text import BagOfWords, build_vocabulary
from ..utils import checksum_path


def _factory(*, path: str | Path | None = None, user: str | None = None, **_: object) -> DatasetSpec:
    if path is None or not user:
        raise ValueError("The chat dataset requires both a 'path' and a 'user' option")
    chat_path = Path(path)
    messages = read_chat(chat_path)
    if not messages:
        raise ValueError(f"No messages found in {chat_path}")
    pairs = reply_pairs(messages, user)
    if not pairs:
        raise ValueError(f"{user!r} never replies to another participant in {chat_path}")

    encoder = BagOfWords(build_vocabulary(messages))
    inputs = encoder.encode_many(prompt.content for prompt, _ in pairs)
    targets = encoder.encode_many(reply.content for _, reply in pairs)
    provenance = {
        "type": "chat",
        "path": str(chat_path),
        "sha256": checksum_path(chat_path),
        "user": user,
        "messages": len(messages),
        "pairs": len(pairs),
        "vocabulary": len(encoder),
    }
    return DatasetSpec(
        name="chat",
        inputs=inputs,
        targets=targets,
        vocabulary=encoder.vocabulary,
        provenance=provenance,
    )


register_dataset("chat", _factory)

__all__ = ["_factory"]
