"""
JSON File Storage Implementation

DESIGN DECISION: One pretty-printed JSON file holds everything because:
1. Users can back it up or inspect it with any editor
2. No database setup for a single-user desktop tool
3. Hand edits are safe: every read goes through the Normalizer

TRADEOFFS:
- The whole file is rewritten on every save (fine at this size)
- Single writer only; there is no cross-process locking

Writes go to a temporary sibling file that is moved over the real one
with os.replace, so a crash never leaves a half-written document.
"""

import contextlib
import os
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from account_manager.config import get_settings
from account_manager.models.dataset import Dataset
from account_manager.services.storage.interface import (
    CorruptDataError,
    DatasetStorageInterface,
    SerializationError,
    StorageAccessError,
)


class JsonFileDatasetStorage(DatasetStorageInterface):
    """
    Stores the dataset as a single JSON document on disk.

    The parent directory is created on first write.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        if path is None:
            path = get_settings().storage.path
        self._path = Path(path).expanduser().resolve()

    @property
    def path(self) -> Path:
        return self._path

    def location(self) -> str:
        return str(self._path)

    def read(self) -> Dataset:
        if not self._path.exists():
            return Dataset.empty()

        try:
            raw = self._path.read_text(encoding="utf-8-sig")
        except OSError as e:
            raise StorageAccessError(
                f"Failed to read data file ({self._path}): {e}",
                path=str(self._path),
            ) from e
        except UnicodeDecodeError as e:
            raise CorruptDataError(
                f"Failed to parse data file ({self._path}): {e}",
                path=str(self._path),
            ) from e

        if not raw.strip():
            return Dataset.empty()

        try:
            return Dataset.model_validate_json(raw)
        except ValidationError as e:
            raise CorruptDataError(
                f"Failed to parse data file ({self._path}): {e}",
                path=str(self._path),
            ) from e

    def write(self, dataset: Dataset) -> None:
        try:
            document = dataset.to_document()
        except (TypeError, ValueError) as e:
            raise SerializationError(
                f"Failed to serialize data: {e}",
                path=str(self._path),
            ) from e

        tmp = self._path.with_name(f".{self._path.name}.tmp-{os.getpid()}")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(document)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self._path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            raise StorageAccessError(
                f"Failed to write data file ({self._path}): {e}",
                path=str(self._path),
            ) from e
