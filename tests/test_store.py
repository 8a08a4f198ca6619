"""Unit tests for the dataset store adapters."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from core.config import Settings
from core.data import Dataset, dataset_from_payload, dataset_to_payload
from core.errors import AuthorizationError, ReadError
from core.store import (
    DOCUMENT_ID,
    DatasetStore,
    JsonFileDatasetStore,
    MemoryDatasetStore,
    build_store,
)

SECRET = "s3cret"


@pytest.fixture(params=["memory", "file"])
def store(request: pytest.FixtureRequest, tmp_path: Path) -> DatasetStore:
    if request.param == "memory":
        return MemoryDatasetStore(SECRET)
    return JsonFileDatasetStore(tmp_path / "store" / "doc.json", SECRET)


def test_empty_store_loads_nothing(store: DatasetStore) -> None:
    assert store.load() is None


def test_save_then_load_round_trips_dataset(store: DatasetStore, sample_dataset: Dataset) -> None:
    saved = store.save(dataset_to_payload(sample_dataset), SECRET)

    doc = store.load()

    assert doc is not None
    assert doc.updated_at == saved.updated_at
    restored = dataset_from_payload(doc.data)
    assert [r.requested_date for r in restored.records] == [r.requested_date for r in sample_dataset.records]


def test_save_replaces_previous_document(store: DatasetStore, sample_dataset: Dataset, scenario_dataset: Dataset) -> None:
    store.save(dataset_to_payload(sample_dataset), SECRET)
    store.save(dataset_to_payload(scenario_dataset), SECRET)

    restored = dataset_from_payload(store.load().data)

    assert len(restored.records) == len(scenario_dataset.records)


def test_wrong_credential_rejected_before_mutation(store: DatasetStore, scenario_dataset: Dataset) -> None:
    store.save(dataset_to_payload(scenario_dataset), SECRET)
    before = store.load()

    with pytest.raises(AuthorizationError):
        store.save({"records": []}, "guess")
    with pytest.raises(AuthorizationError):
        store.clear(None)

    assert store.load() == before


def test_clear_removes_document(store: DatasetStore, scenario_dataset: Dataset) -> None:
    store.save(dataset_to_payload(scenario_dataset), SECRET)

    store.clear(SECRET)
    store.clear(SECRET)

    assert store.load() is None


def test_store_without_secret_rejects_all_writes(tmp_path: Path) -> None:
    for unsecured in (MemoryDatasetStore(None), JsonFileDatasetStore(tmp_path / "doc.json", None)):
        with pytest.raises(AuthorizationError):
            unsecured.save({"records": []}, "")
        with pytest.raises(AuthorizationError):
            unsecured.save({"records": []}, None)
        assert unsecured.load() is None


def test_file_store_persists_document_shape(tmp_path: Path, scenario_dataset: Dataset) -> None:
    path = tmp_path / "doc.json"
    JsonFileDatasetStore(path, SECRET).save(dataset_to_payload(scenario_dataset), SECRET)

    raw = json.loads(path.read_text(encoding="utf-8"))
    reopened = JsonFileDatasetStore(path, SECRET).load()

    assert raw["_id"] == DOCUMENT_ID
    assert set(raw) == {"_id", "data", "updatedAt"}
    assert reopened is not None
    assert reopened.data == raw["data"]
    assert list(tmp_path.iterdir()) == [path]


@pytest.mark.parametrize(
    "content",
    ["{not json", json.dumps([1, 2]), json.dumps({"_id": "other", "data": {}, "updatedAt": "2024-01-01T00:00:00+00:00"})],
)
def test_file_store_corrupt_document_raises_read_error(tmp_path: Path, content: str) -> None:
    path = tmp_path / "doc.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ReadError):
        JsonFileDatasetStore(path, SECRET).load()


def test_file_store_ping_creates_directory(tmp_path: Path) -> None:
    store = JsonFileDatasetStore(tmp_path / "nested" / "doc.json", SECRET)

    store.ping()

    assert (tmp_path / "nested").is_dir()


def test_build_store_selects_backend(tmp_path: Path) -> None:
    memory = build_store(Settings(admin_password=SECRET, store_backend="memory"))
    file_store = build_store(Settings(admin_password=SECRET, store_path=tmp_path / "doc.json"))

    assert isinstance(memory, MemoryDatasetStore)
    assert isinstance(file_store, JsonFileDatasetStore)
    assert file_store.path == tmp_path / "doc.json"
