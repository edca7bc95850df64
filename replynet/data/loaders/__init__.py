"""Built-in dataset loaders.

Importing this module registers every bundled dataset with the registry.
"""

from . import chat_export, identity  # noqa: F401

__all__ = ["chat_export", "identity"]
