"""GenerationHistoryService tests."""

from __future__ import annotations

import json

import pytest

from modules.pipelines.coloring import GenerationResult
from modules.services.history_service import (
    GenerationHistoryService,
    HistoryError,
    HistoryItem,
    time_ago,
)


def make_item(index: int) -> HistoryItem:
    return HistoryItem.create(f"prompt {index}", [GenerationResult(original=f"img{index}")], now=1_700_000_000 + index)


def test_load_missing_file_returns_empty(tmp_path):
    service = GenerationHistoryService(tmp_path / "history.json")

    assert service.load() == []
    assert service.list() == []


def test_record_persists_newest_first(tmp_path):
    path = tmp_path / "nested" / "history.json"
    service = GenerationHistoryService(path)
    service.record(make_item(1))
    service.record(make_item(2))

    reloaded = GenerationHistoryService(path)
    items = reloaded.load()

    assert [item.prompt for item in items] == ["prompt 2", "prompt 1"]
    assert items[0].images == [GenerationResult(original="img2")]
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert set(raw[0]) == {"id", "prompt", "images", "timestamp"}


def test_record_caps_to_limit(tmp_path):
    service = GenerationHistoryService(tmp_path / "history.json", limit=10)
    for index in range(12):
        service.record(make_item(index))

    items = service.load()

    assert len(items) == 10
    assert items[0].prompt == "prompt 11"
    assert items[-1].prompt == "prompt 2"


def test_clear_empties_file(tmp_path):
    path = tmp_path / "history.json"
    service = GenerationHistoryService(path)
    service.record(make_item(1))
    service.clear()

    assert service.list() == []
    assert json.loads(path.read_text(encoding="utf-8")) == []


def test_corrupt_file_raises_history_error(tmp_path):
    path = tmp_path / "history.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(HistoryError, match="Could not load generation history."):
        GenerationHistoryService(path).load()


@pytest.mark.parametrize(
    "payload",
    [
        [{"id": "a", "prompt": "p", "images": ["x"], "timestamp": 1}],
        [{"id": "a", "prompt": "p", "images": [{"original": 5}], "timestamp": 1}],
        [{"id": "a", "prompt": "p", "images": "abc", "timestamp": 1}],
        ["not an entry"],
        [{"prompt": "missing id"}],
    ],
)
def test_malformed_entries_raise_history_error(tmp_path, payload):
    path = tmp_path / "history.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(HistoryError, match="Could not load generation history."):
        GenerationHistoryService(path).load()


def test_save_failure_keeps_memory(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    service = GenerationHistoryService(blocker / "history.json")

    with pytest.raises(HistoryError, match="Could not save generation history."):
        service.record(make_item(1))

    assert [item.prompt for item in service.list()] == ["prompt 1"]


def test_history_item_create_and_get(tmp_path):
    item = HistoryItem.create("  a fox  ", [], now=1_700_000_000.5)
    service = GenerationHistoryService(tmp_path / "history.json")
    service.record(item)

    assert item.prompt == "a fox"
    assert item.timestamp == 1_700_000_000_500
    assert item.id == "2023-11-14T22:13:20.500Z"
    assert service.get(item.id) is item
    assert service.get("missing") is None
    assert item.thumbnail_source() is None


def test_history_accepts_data_url_images(tmp_path):
    path = tmp_path / "history.json"
    path.write_text(
        json.dumps(
            [
                {
                    "id": "2024-01-01T00:00:00.000Z",
                    "prompt": "fox",
                    "images": [{"original": None, "coloring": "data:image/png;base64,QUJD"}],
                    "timestamp": 1,
                }
            ]
        ),
        encoding="utf-8",
    )

    (item,) = GenerationHistoryService(path).load()

    assert item.thumbnail_source() == "QUJD"


@pytest.mark.parametrize(
    ("elapsed", "expected"),
    [
        (2, "just now"),
        (30, "30 seconds ago"),
        (60, "1 minute ago"),
        (7200, "2 hours ago"),
        (86400 * 3, "3 days ago"),
        (2592000, "1 month ago"),
        (31536000 * 2, "2 years ago"),
    ],
)
def test_time_ago(elapsed, expected):
    now = 1_700_000_000.0
    assert time_ago(int((now - elapsed) * 1000), now=now) == expected
