import json

from manuscripts.corpus import Verse
from manuscripts.practice.store import JsonFileBackend, MemoryBackend, PracticeStore, verse_key

KEY = "Jn:1:1:en-US"


class FailingBackend:
    """Storage that is full or gone."""

    def get(self, key):
        raise OSError("storage unavailable")

    def set(self, key, value):
        raise OSError("quota exceeded")

    def delete(self, key):
        raise OSError("storage unavailable")

    def keys(self):
        raise OSError("storage unavailable")


def test_verse_key():
    verse = Verse("1Co", 13, 4, "Charity suffereth long", "Ἡ ἀγάπη μακροθυμεῖ")
    assert verse_key(verse, "el-GR") == "1Co:13:4:el-GR"


def test_round_trip(store):
    store.save(KEY, {0: True, 1: False})
    assert store.load(KEY) == {0: True, 1: False}


def test_saving_empty_mapping_clears(store):
    store.save(KEY, {0: True})
    store.save(KEY, {})
    assert store.load(KEY) == {}
    assert store.backend.keys() == []


def test_unknown_key_loads_empty(store):
    assert store.load("Mk:1:1:en-US") == {}


def test_clear(store):
    store.save(KEY, {2: True})
    store.clear(KEY)
    assert store.load(KEY) == {}


def test_json_file_survives_reopen(tmp_path):
    path = tmp_path / "nested" / "practice.json"
    PracticeStore.open(path).save(KEY, {0: True, 3: False})

    assert PracticeStore.open(path).load(KEY) == {0: True, 3: False}
    on_disk = json.loads(path.read_text(encoding="utf-8"))
    assert json.loads(on_disk[KEY]) == {"0": True, "3": False}


def test_json_file_delete(tmp_path):
    path = tmp_path / "practice.json"
    store = PracticeStore.open(path)
    store.save(KEY, {0: True})
    store.save("Jn:1:2:en-US", {0: False})
    store.clear(KEY)
    assert JsonFileBackend(path).keys() == ["Jn:1:2:en-US"]


def test_corrupt_file_loads_empty(tmp_path):
    path = tmp_path / "practice.json"
    path.write_text("{not json", encoding="utf-8")
    assert PracticeStore.open(path).load(KEY) == {}


def test_malformed_entries_are_skipped(store):
    store.backend.set(KEY, json.dumps({"0": True, "x": False, "2": False}))
    assert store.load(KEY) == {0: True, 2: False}


def test_non_boolean_values_are_skipped(store):
    store.backend.set(KEY, json.dumps({"0": "false", "1": 1, "2": None, "3": False, "4": True}))
    assert store.load(KEY) == {3: False, 4: True}


def test_storage_failures_are_absorbed():
    store = PracticeStore(FailingBackend())
    store.save(KEY, {0: True})
    store.save(KEY, {})
    store.clear(KEY)
    assert store.load(KEY) == {}
    assert list(store.records()) == []


def test_records_lists_non_empty_entries():
    backend = MemoryBackend()
    store = PracticeStore(backend)
    store.save("Jn:1:2:el-GR", {0: True})
    store.save(KEY, {0: False, 1: True})
    backend.set("Jn:1:3:en-US", "{}")
    assert list(store.records()) == [
        ("Jn:1:1:en-US", {0: False, 1: True}),
        ("Jn:1:2:el-GR", {0: True}),
    ]
