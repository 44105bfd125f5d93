"""
Bookmarks2Notion - Checkpoint Store Tests
"""

import json
from datetime import datetime, timezone

import pytest

from notion_ingest.checkpoint import CheckpointMismatchError, CheckpointStore
from notion_ingest.google_parser import Bookmark


def test_missing_file_starts_at_zero(tmp_path):
    store = CheckpointStore(tmp_path / "checkpoint.json")

    assert store.load() is None
    assert store.resume_index() == 0


def test_save_and_resume(tmp_path):
    store = CheckpointStore(tmp_path / "checkpoint.json")

    store.save(41, "https://example.com/")
    checkpoint = CheckpointStore(tmp_path / "checkpoint.json").load()

    assert checkpoint.last_index == 41
    assert checkpoint.url == "https://example.com/"
    assert checkpoint.updated_at.tzinfo is not None
    assert store.resume_index() == 42


def test_file_is_plain_json(tmp_path):
    path = tmp_path / "checkpoint.json"

    CheckpointStore(path).save(3, "https://例え.jp/")

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["last_index"] == 3
    assert data["url"] == "https://例え.jp/"
    assert not path.with_suffix(".json.tmp").exists()


def test_corrupted_file_is_ignored(tmp_path):
    path = tmp_path / "checkpoint.json"
    path.write_text("{not json", encoding="utf-8")

    assert CheckpointStore(path).load() is None
    assert CheckpointStore(path).resume_index() == 0


def test_clear(tmp_path):
    store = CheckpointStore(tmp_path / "checkpoint.json")
    store.save(0, "https://example.com/")

    assert store.clear() is True
    assert store.clear() is False
    assert store.load() is None


def _bookmarks(*urls):
    date = datetime(2021, 1, 1, tzinfo=timezone.utc)
    return [Bookmark(title=url, url=url, date=date, tags=[], memo="") for url in urls]


def test_resume_checks_url_at_index(tmp_path):
    store = CheckpointStore(tmp_path / "checkpoint.json")
    store.save(1, "https://b.example/")

    assert store.resume_index(_bookmarks("https://a.example/", "https://b.example/", "https://c.example/")) == 2


def test_resume_rejects_shifted_list(tmp_path):
    store = CheckpointStore(tmp_path / "checkpoint.json")
    store.save(1, "https://b.example/")

    with pytest.raises(CheckpointMismatchError, match="https://a.example/"):
        store.resume_index(_bookmarks("https://new.example/", "https://a.example/", "https://b.example/"))


def test_resume_rejects_index_past_end(tmp_path):
    store = CheckpointStore(tmp_path / "checkpoint.json")
    store.save(5, "https://b.example/")

    with pytest.raises(CheckpointMismatchError, match="no entry"):
        store.resume_index(_bookmarks("https://a.example/", "https://b.example/"))
