"""Tests for the dataset storage backends."""

import json

import pytest

from account_manager.models.dataset import Account, Dataset, FamilyGroup, FamilyMember
from account_manager.services.storage import (
    CorruptDataError,
    InMemoryDatasetStorage,
    JsonFileDatasetStorage,
    StorageAccessError,
)


@pytest.fixture
def dataset():
    return Dataset(
        accounts=[
            Account(
                id="a1",
                login="user@example.com",
                password="pw",
                recovery_email="backup@example.com",
                created_at=1,
                updated_at=2,
            ),
        ],
        groups=[
            FamilyGroup(
                id="g1",
                name="Home",
                members=[FamilyMember(account_id="a1", role="admin")],
                created_at=1,
                updated_at=1,
            ),
        ],
    )


class TestJsonFileStorage:
    """Local JSON file backend."""

    def test_missing_file_reads_empty(self, tmp_path):
        storage = JsonFileDatasetStorage(tmp_path / "missing.json")

        assert storage.read() == Dataset.empty()
        assert not (tmp_path / "missing.json").exists()

    def test_blank_file_reads_empty(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("  \n", encoding="utf-8")

        assert JsonFileDatasetStorage(path).read() == Dataset.empty()

    def test_round_trip(self, tmp_path, dataset):
        storage = JsonFileDatasetStorage(tmp_path / "data.json")

        storage.write(dataset)

        assert storage.read() == dataset

    def test_document_layout(self, tmp_path, dataset):
        """Test that the file is pretty-printed camelCase JSON."""
        path = tmp_path / "data.json"
        JsonFileDatasetStorage(path).write(dataset)

        text = path.read_text(encoding="utf-8")
        document = json.loads(text)

        assert text.startswith("{\n")
        assert document["accounts"][0]["recoveryEmail"] == "backup@example.com"
        assert document["groups"][0]["members"][0]["accountId"] == "a1"

    def test_reads_byte_order_mark(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text('\ufeff{"accounts": [{"login": "a@x.com"}]}', encoding="utf-8")

        dataset = JsonFileDatasetStorage(path).read()

        assert dataset.accounts[0].login == "a@x.com"

    def test_creates_parent_directories(self, tmp_path, dataset):
        path = tmp_path / "nested" / "dir" / "data.json"
        JsonFileDatasetStorage(path).write(dataset)
        assert path.exists()

    def test_no_temporary_file_left(self, tmp_path, dataset):
        storage = JsonFileDatasetStorage(tmp_path / "data.json")
        storage.write(dataset)
        storage.write(Dataset.empty())

        assert [p.name for p in tmp_path.iterdir()] == ["data.json"]
        assert storage.read() == Dataset.empty()

    def test_corrupt_file(self, tmp_path):
        """Test that unparseable content fails loudly with the path."""
        path = tmp_path / "data.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(CorruptDataError) as exc_info:
            JsonFileDatasetStorage(path).read()

        assert str(path.resolve()) in str(exc_info.value)
        assert exc_info.value.path == str(path.resolve())

    def test_wrong_shape_is_corrupt(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text('{"accounts": "nope"}', encoding="utf-8")

        with pytest.raises(CorruptDataError):
            JsonFileDatasetStorage(path).read()

    def test_unreadable_path(self, tmp_path):
        """A directory where the file should be is an access error."""
        path = tmp_path / "data.json"
        path.mkdir()

        with pytest.raises(StorageAccessError):
            JsonFileDatasetStorage(path).read()

    def test_unwritable_path(self, tmp_path, dataset):
        """A file where the parent directory should be is an access error."""
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        path = blocker / "data.json"

        with pytest.raises(StorageAccessError) as exc_info:
            JsonFileDatasetStorage(path).write(dataset)

        assert exc_info.value.path == str(path.resolve())
        assert "blocker" in str(exc_info.value)

    def test_invalid_utf8_is_corrupt(self, tmp_path):
        """Undecodable bytes fail loudly with the path."""
        path = tmp_path / "data.json"
        path.write_bytes(b'{"version": 1, "accounts": [{"login": "\xff\xfe"}]}')

        with pytest.raises(CorruptDataError) as exc_info:
            JsonFileDatasetStorage(path).read()

        assert exc_info.value.path == str(path.resolve())

    def test_location_is_absolute(self, tmp_path):
        storage = JsonFileDatasetStorage(tmp_path / "data.json")
        assert storage.location() == str((tmp_path / "data.json").resolve())


class TestInMemoryStorage:
    """In-memory backend used by tests and previews."""

    def test_empty(self):
        assert InMemoryDatasetStorage().read() == Dataset.empty()

    def test_round_trip(self, dataset):
        storage = InMemoryDatasetStorage()
        storage.write(dataset)

        assert storage.read() == dataset
        assert storage.write_count == 1
        assert json.loads(storage.document)["accounts"][0]["login"] == "user@example.com"

    def test_corrupt_document(self):
        with pytest.raises(CorruptDataError):
            InMemoryDatasetStorage("[1, 2").read()

    def test_location(self):
        assert InMemoryDatasetStorage().location() == "memory://dataset"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
