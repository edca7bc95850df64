"""Core numerical primitives for ReplyNet."""

from . import activations, network, types, update

__all__ = ["activations", "network", "types", "update"]
