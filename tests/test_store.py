from __future__ import annotations

import csv
import json
from datetime import datetime

import pytest

from caresite.errors import StorageError, ValidationError
from caresite.services.store import MessageStore


@pytest.fixture
def store(tmp_path):
    return MessageStore(tmp_path / "message_board.json", tmp_path / "message_board.csv")


def _csv_rows(path):
    with path.open(newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


def test_load_all_missing_file(store):
    assert store.load_all() == []


def test_load_all_corrupt_file_degrades_to_empty(store, caplog):
    store.json_path.write_text("{not json", encoding="utf-8")
    assert store.load_all() == []
    assert "Error reading messages JSON" in caplog.text


def test_load_all_non_array_is_ignored(store):
    store.json_path.write_text('{"id": "1"}', encoding="utf-8")
    assert store.load_all() == []


def test_append_builds_message(store):
    msg = store.append("  Jane ", "  Hi there  ")
    assert msg.author == "Jane"
    assert msg.message == "Hi there"
    assert msg.id.isdigit()
    assert msg.created_at.endswith("Z")
    datetime.fromisoformat(msg.created_at.replace("Z", "+00:00"))
    assert store.load_all() == [msg.to_json()]
    assert list(store.load_all()[0].keys()) == ["id", "author", "message", "createdAt"]


@pytest.mark.parametrize("author", [None, "", "   ", 42])
def test_append_defaults_author(store, author):
    assert store.append(author, "Hello").author == "Anonymous"


@pytest.mark.parametrize("message", [None, "", "   \n\t", 5, ["hi"]])
def test_append_rejects_missing_message(store, message):
    with pytest.raises(ValidationError):
        store.append("Jane", message)
    assert not store.json_path.exists()
    assert not store.csv_path.exists()


def test_append_preserves_order(store):
    for i in range(3):
        store.append("a", f"m{i}")
    assert [m["message"] for m in store.load_all()] == ["m0", "m1", "m2"]


def test_csv_mirror_quotes_and_round_trips(store):
    text = 'She said "hello", then left'
    msg = store.append('Jo "JJ" Smith', text)

    raw = store.csv_path.read_text(encoding="utf-8").splitlines()
    assert raw[0] == "id,created_at,author,message"
    assert raw[1] == f'"{msg.id}","{msg.created_at}","Jo ""JJ"" Smith","She said ""hello"", then left"'

    rows = _csv_rows(store.csv_path)
    assert len(rows) == 1
    assert rows[0]["id"] == msg.id
    assert rows[0]["author"] == 'Jo "JJ" Smith'
    assert rows[0]["message"] == text


def test_csv_has_one_row_per_message(store):
    ids = [store.append("x", f"m{i}").id for i in range(4)]
    rows = _csv_rows(store.csv_path)
    assert [r["id"] for r in rows] == ids
    assert [m["id"] for m in store.load_all()] == ids


def test_json_write_failure_raises_storage_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")
    store = MessageStore(blocker / "message_board.json", tmp_path / "message_board.csv")
    with pytest.raises(StorageError):
        store.append("a", "b")
    assert not store.csv_path.exists()


def test_csv_failure_does_not_fail_append(tmp_path, caplog):
    csv_path = tmp_path / "message_board.csv"
    csv_path.mkdir()
    store = MessageStore(tmp_path / "message_board.json", csv_path)
    msg = store.append("a", "still saved")
    assert json.loads(store.json_path.read_text(encoding="utf-8"))[-1]["id"] == msg.id
    assert "Error writing message CSV" in caplog.text


def test_failed_rewrite_keeps_previous_document(store, monkeypatch):
    first = store.append("a", "kept")
    before = store.json_path.read_text(encoding="utf-8")

    def fail_replace(*_args):
        raise OSError("disk full")

    monkeypatch.setattr("caresite.services.store.os.replace", fail_replace)
    with pytest.raises(StorageError):
        store.append("b", "lost")

    assert store.json_path.read_text(encoding="utf-8") == before
    assert [m["id"] for m in store.load_all()] == [first.id]
    assert list(store.json_path.parent.glob("*.tmp")) == []


def test_append_leaves_no_temp_file(store):
    store.append("a", "b")
    assert list(store.json_path.parent.glob("*.tmp")) == []
