"""Dataset registry, chat parsing and text encoding."""

# Ensure built-in datasets register themselves when the package is imported.
from .loaders import chat_export as _chat_export  # noqa: F401
from .loaders import identity as _identity  # noqa: F401
from .registry import DatasetSpec, available_datasets, get_dataset, register_dataset

__all__ = [
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
