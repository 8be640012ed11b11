"""
In-Memory Storage Implementation

Keeps the serialized document in a string instead of a file. Data goes
through the same JSON round trip as the file store, so tests exercise the
real serialization.
"""

from typing import Optional

from pydantic import ValidationError

from account_manager.models.dataset import Dataset
from account_manager.services.storage.interface import (
    CorruptDataError,
    DatasetStorageInterface,
)


class InMemoryDatasetStorage(DatasetStorageInterface):
    """Dataset storage backed by a string."""

    LOCATION = "memory://dataset"

    def __init__(self, document: Optional[str] = None):
        self.document = document
        self.write_count = 0

    def location(self) -> str:
        return self.LOCATION

    def read(self) -> Dataset:
        if self.document is None or not self.document.strip():
            return Dataset.empty()
        try:
            return Dataset.model_validate_json(self.document)
        except ValidationError as e:
            raise CorruptDataError(
                f"Failed to parse stored document: {e}",
                path=self.LOCATION,
            ) from e

    def write(self, dataset: Dataset) -> None:
        self.document = dataset.to_document()
        self.write_count += 1
