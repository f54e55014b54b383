"""Generation history tracking."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from modules.pipelines.coloring import GenerationResult

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 10


class HistoryError(RuntimeError):
    """Raised when the history file cannot be read or written."""


@dataclass(slots=True)
class HistoryItem:
    """One completed batch: the prompt text and every image pair it produced."""

    id: str
    prompt: str
    images: List[GenerationResult] = field(default_factory=list)
    timestamp: int = 0  # epoch milliseconds

    @classmethod
    def create(cls, prompt: str, images: Sequence[GenerationResult], now: Optional[float] = None) -> "HistoryItem":
        moment = time.time() if now is None else now
        created = datetime.fromtimestamp(moment, tz=timezone.utc)
        return cls(
            id=created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            prompt=prompt.strip(),
            images=list(images),
            timestamp=int(moment * 1000),
        )

    def thumbnail_source(self) -> Optional[str]:
        """Base64 payload of the first available image, if any."""
        for result in self.images:
            image = result.first_image()
            if image:
                return image
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "prompt": self.prompt,
            "images": [result.to_dict() for result in self.images],
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "HistoryItem":
        if not isinstance(data, dict):
            raise ValueError(f"history entry must be an object, got {type(data).__name__}")
        images = data.get("images") or []
        if not isinstance(images, list):
            raise ValueError("'images' must be a list")
        return cls(
            id=str(data["id"]),
            prompt=str(data.get("prompt", "")),
            images=[GenerationResult.from_dict(entry) for entry in images],
            timestamp=int(data.get("timestamp") or 0),
        )


_TIME_INTERVALS = (
    ("year", 31536000),
    ("month", 2592000),
    ("day", 86400),
    ("hour", 3600),
    ("minute", 60),
)


def time_ago(timestamp_ms: int, now: Optional[float] = None) -> str:
    """Humanize a millisecond timestamp relative to ``now`` (seconds)."""
    current = time.time() if now is None else now
    seconds = int((current * 1000 - timestamp_ms) // 1000)
    if seconds < 5:
        return "just now"
    for label, length in _TIME_INTERVALS:
        count = seconds // length
        if count >= 1:
            return f"{count} {label}{'s' if count > 1 else ''} ago"
    return f"{seconds} seconds ago"


class GenerationHistoryService:
    """JSON-backed history store keeping the most recent batches."""

    def __init__(self, history_path: Path, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        self.history_path = Path(history_path)
        self.limit = limit
        self._items: List[HistoryItem] = []

    def load(self) -> List[HistoryItem]:
        """Read the history file into memory."""
        if not self.history_path.exists():
            self._items = []
            return []
        try:
            raw = json.loads(self.history_path.read_text(encoding="utf-8"))
            if not isinstance(raw, list):
                raise ValueError("history file does not contain a list")
            items = [HistoryItem.from_dict(entry) for entry in raw]
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.error("Failed to load history from %s: %s", self.history_path, exc)
            raise HistoryError("Could not load generation history.") from exc
        self._items = items[: self.limit]
        return list(self._items)

    def list(self, limit: Optional[int] = None) -> List[HistoryItem]:
        """Return the most recent records, newest first."""
        if limit is None:
            return list(self._items)
        return self._items[:limit]

    def get(self, item_id: str) -> Optional[HistoryItem]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def record(self, item: HistoryItem) -> List[HistoryItem]:
        """Prepend a record, keep the newest ``limit`` and persist them."""
        self._items = [item, *self._items][: self.limit]
        self._save()
        return list(self._items)

    def clear(self) -> None:
        """Remove every record."""
        self._items = []
        self._save()

    def _save(self) -> None:
        payload = [item.to_dict() for item in self._items]
        try:
            self.history_path.parent.mkdir(parents=True, exist_ok=True)
            self.history_path.write_text(json.dumps(payload), encoding="utf-8")
        except OSError as exc:
            logger.error("Failed to save history to %s: %s", self.history_path, exc)
            raise HistoryError("Could not save generation history.") from exc
