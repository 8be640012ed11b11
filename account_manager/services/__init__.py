"""Services package."""

from account_manager.services.storage import (
    CorruptDataError,
    DatasetStorageInterface,
    InMemoryDatasetStorage,
    JsonFileDatasetStorage,
    SerializationError,
    StorageAccessError,
    StorageError,
)

__all__ = [
    "CorruptDataError",
    "DatasetStorageInterface",
    "InMemoryDatasetStorage",
    "JsonFileDatasetStorage",
    "SerializationError",
    "StorageAccessError",
    "StorageError",
]
