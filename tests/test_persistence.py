import json

from shopper.persistence import JsonFileStorage, MemoryStorage, restore_snapshot
from shopper.stores.preferences import Language, PreferencesSnapshot, Theme


def test_memory_storage_round_trip():
    storage = MemoryStorage()

    storage.save("key", {"a": 1})

    assert storage.load("key") == {"a": 1}
    assert storage.keys() == ["key"]


def test_memory_storage_missing_key():
    assert MemoryStorage().load("missing") is None


def test_memory_storage_overwrites():
    storage = MemoryStorage()
    storage.save("key", {"a": 1})

    storage.save("key", {"b": 2})

    assert storage.load("key") == {"b": 2}


def test_memory_storage_unreadable_value():
    storage = MemoryStorage()
    storage._data["broken"] = "{not json"
    storage._data["list"] = "[1, 2]"

    assert storage.load("broken") is None
    assert storage.load("list") is None


def test_memory_storage_save_failure_is_not_raised():
    storage = MemoryStorage()

    storage.save("key", {"value": object()})

    assert storage.load("key") is None


def test_json_file_storage(tmp_path):
    storage = JsonFileStorage(tmp_path / "state")

    storage.save("grama-cart-storage", {"items": []})

    assert json.loads((tmp_path / "state" / "grama-cart-storage.json").read_text()) == {"items": []}
    assert JsonFileStorage(tmp_path / "state").load("grama-cart-storage") == {"items": []}


def test_json_file_storage_corrupt_file(tmp_path):
    storage = JsonFileStorage(tmp_path)
    (tmp_path / "grama-app-storage.json").write_text("{oops")

    assert storage.load("grama-app-storage") is None


def test_json_file_storage_remove(tmp_path):
    storage = JsonFileStorage(tmp_path)
    storage.save("key", {"a": 1})

    storage.remove("key")
    storage.remove("key")

    assert storage.load("key") is None


def test_restore_snapshot_defaults():
    assert restore_snapshot(PreferencesSnapshot, None) == PreferencesSnapshot()
    assert restore_snapshot(PreferencesSnapshot, "garbage") == PreferencesSnapshot()


def test_restore_snapshot_keeps_valid_fields():
    snapshot = restore_snapshot(
        PreferencesSnapshot,
        {"theme": "dark", "language": "klingon", "selected_address": "addr-1", "settings": {"auto_sync": "nope"}},
    )

    assert snapshot.theme == Theme.DARK
    assert snapshot.language == Language.ENGLISH
    assert snapshot.selected_address == "addr-1"
    assert snapshot.settings.auto_sync is True
