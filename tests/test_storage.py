# tests/test_storage.py
import json

from azlok.storage import LEGACY_TOKEN_KEY, TOKEN_KEY, LocalStorage


def test_values_survive_a_new_instance(tmp_path):
    path = tmp_path / "nested" / "storage.json"
    LocalStorage(path).set_item("azlok-cart", "[]")
    assert LocalStorage(path).get_item("azlok-cart") == "[]"
    assert json.loads(path.read_text()) == {"azlok-cart": "[]"}


def test_values_are_strings(storage):
    storage.set_item("count", 3)
    assert storage.get_item("count") == "3"


def test_remove_and_clear(storage):
    storage.set_item("a", "1")
    storage.set_item("b", "2")
    storage.remove_item("a")
    storage.remove_item("missing")
    assert storage.keys() == ["b"]
    storage.clear()
    assert storage.keys() == []
    assert LocalStorage(storage.path).keys() == []


def test_unreadable_file_is_empty(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("{oops")
    assert LocalStorage(path).keys() == []
    path.write_text('["not", "an", "object"]')
    assert LocalStorage(path).keys() == []


def test_auth_token_prefers_current_key(storage):
    assert storage.auth_token() is None
    storage.set_item(LEGACY_TOKEN_KEY, "old")
    assert storage.auth_token() == "old"
    storage.set_item(TOKEN_KEY, "new")
    assert storage.auth_token() == "new"
