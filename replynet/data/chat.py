"""Chat export parsing.

The reader understands the plain-text layout produced by WhatsApp's
"Export chat" > "Without media" action::

    [12/01/2024, 09:15:02] Alice: are you coming tonight?
    [12/01/2024, 09:16:40] Bob: yes, see you at eight
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Tuple

# Left-to-right mark; WhatsApp prefixes system notices and media placeholders with it.
_LRM = "\u200e"


@dataclass(frozen=True)
class Message:
    sender: str
    content: str


def parse_line(line: str) -> Message | None:
    """Return the :class:`Message` on ``line`` or ``None`` for non-message lines."""

    line = line.rstrip("\r\n")
    if not line or _LRM in line:
        return None
    bracket = line.find("]")
    if bracket == -1:
        return None
    separator = line.find(": ", bracket)
    if separator == -1:
        return None
    sender = line[bracket + 1 : separator].strip()
    if not sender:
        return None
    return Message(sender=sender, content=line[separator + 2 :])


def parse_chat(lines: Iterable[str]) -> List[Message]:
    messages: List[Message] = []
    for line in lines:
        message = parse_line(line)
        if message is not None:
            messages.append(message)
    return messages


def read_chat(path: str | Path) -> List[Message]:
    """Read every message from the export at ``path``."""

    with Path(path).open("r", encoding="utf-8-sig") as handle:
        return parse_chat(handle)


def reply_pairs(messages: Iterable[Message], user: str) -> List[Tuple[Message, Message]]:
    """Pair each message from ``user`` with the message it answers.

    Only replies that directly follow somebody else's message count.
    """

    pairs: List[Tuple[Message, Message]] = []
    previous: Message | None = None
    for message in messages:
        if previous is not None and message.sender == user and previous.sender != user:
            pairs.append((previous, message))
        previous = message
    return pairs


__all__ = ["Message", "parse_chat", "parse_line", "read_chat", "reply_pairs"]
