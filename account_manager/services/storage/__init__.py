"""
Storage Services Package

Provides the abstract dataset storage interface and its implementations:
a JSON file on disk (the real backend) and an in-memory store.
"""

from account_manager.services.storage.interface import (
    CorruptDataError,
    DatasetStorageInterface,
    SerializationError,
    StorageAccessError,
    StorageError,
)
from account_manager.services.storage.json_file import JsonFileDatasetStorage
from account_manager.services.storage.memory import InMemoryDatasetStorage

__all__ = [
    # Interface
    "DatasetStorageInterface",
    # Exceptions
    "CorruptDataError",
    "SerializationError",
    "StorageAccessError",
    "StorageError",
    # Implementations
    "InMemoryDatasetStorage",
    "JsonFileDatasetStorage",
]
