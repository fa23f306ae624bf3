import json

import pytest

from clinker_quiz.core.errors import StorageError
from clinker_quiz.core.storage import CollectionStore, InMemoryStore, JsonFileStore


class TestJsonFileStore:
    def test_values_survive_a_new_instance(self, tmp_path):
        path = tmp_path / "nested" / "storage.json"
        JsonFileStore(path).set("clinker-theme", "dark")

        reopened = JsonFileStore(path)
        assert reopened.get("clinker-theme") == "dark"
        assert json.loads(path.read_text(encoding="utf-8")) == {"clinker-theme": "dark"}

    def test_missing_file_reads_as_empty(self, tmp_path):
        store = JsonFileStore(tmp_path / "absent.json")

        assert store.get("anything") is None
        assert store.keys() == []

    def test_delete_removes_key(self, tmp_path):
        store = JsonFileStore(tmp_path / "storage.json")
        store.set("a", "1")
        store.set("b", "2")
        store.delete("a")

        assert JsonFileStore(tmp_path / "storage.json").keys() == ["b"]

    def test_corrupt_file_raises_storage_error(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(StorageError):
            JsonFileStore(path).get("clinker-users")

    def test_non_object_file_raises_storage_error(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")

        with pytest.raises(StorageError):
            JsonFileStore(path).keys()


class TestCollectionStore:
    def test_missing_collection_is_empty(self, collections):
        assert collections.read_collection("clinker-quizzes") == []

    def test_collection_round_trip(self, collections):
        collections.write_collection("clinker-results", [{"id": "r1"}])

        assert collections.read_collection("clinker-results") == [{"id": "r1"}]

    def test_non_list_collection_is_rejected(self):
        collections = CollectionStore(InMemoryStore({"clinker-quizzes": '{"id": 1}'}))

        with pytest.raises(StorageError):
            collections.read_collection("clinker-quizzes")

    def test_invalid_json_value_is_rejected(self):
        collections = CollectionStore(InMemoryStore({"clinker-user": "not-json"}))

        with pytest.raises(StorageError):
            collections.read_value("clinker-user")

    def test_text_values_are_stored_raw(self, collections, store):
        collections.write_text("clinker-theme", "dark")

        assert store.get("clinker-theme") == "dark"
        collections.remove("clinker-theme")
        assert collections.read_text("clinker-theme") is None
