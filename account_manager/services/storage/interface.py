"""
Abstract Storage Interface

DESIGN DECISION: The dataset is stored through an abstract interface.
This allows us to:
1. Use an in-memory store in tests
2. Move the file (or the backend) without touching business logic
3. Keep path resolution and raw I/O out of the parsing/merging core

The interface is intentionally tiny: the whole document is read and the
whole document is written. There are no partial updates.
"""

from abc import ABC, abstractmethod
from typing import Optional

from account_manager.models.dataset import Dataset


class DatasetStorageInterface(ABC):
    """
    Abstract interface for dataset storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def read(self) -> Dataset:
        """
        Read the stored dataset exactly as persisted (not normalized).

        Returns:
            The stored dataset, or an empty one if nothing is stored yet

        Raises:
            StorageAccessError: If the backing store cannot be read
            CorruptDataError: If the stored document cannot be parsed
        """
        pass

    @abstractmethod
    def write(self, dataset: Dataset) -> None:
        """
        Replace the stored dataset.

        Either the whole document is written or nothing is.

        Raises:
            StorageAccessError: If the backing store cannot be written
            SerializationError: If the dataset cannot be serialized
        """
        pass

    @abstractmethod
    def location(self) -> str:
        """Human-readable location of the backing store (diagnostic only)."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class StorageAccessError(StorageError):
    """Directory or file could not be read or written."""
    pass


class CorruptDataError(StorageError):
    """Stored document is not valid JSON or does not match the schema."""
    pass


class SerializationError(StorageError):
    """Dataset could not be serialized for writing."""
    pass
