"""
ProgressTracker - the set of completed lesson ids for a single learner.

The tracker never touches storage directly; it is handed an adapter with
``get(key)`` / ``set(key, value)`` so tests can pass ``MemoryStorage`` and the
CLI can pass ``JsonFileStorage``. The browser twin lives in
``web/core/progress.js`` and stores the same JSON array in localStorage.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from .config import PROGRESS_STORAGE_KEY

logger = logging.getLogger(__name__)


class Storage(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value


class JsonFileStorage:
    """Key/value strings kept in one JSON object on disk."""

    def __init__(self, path):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable progress file %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)


def percent_complete(completed_count: int, total: int) -> int:
    if total <= 0:
        return 0
    return max(0, min(100, round(completed_count / total * 100)))


class ProgressTracker:
    def __init__(self, storage: Storage, key: str = PROGRESS_STORAGE_KEY):
        self.storage = storage
        self.key = key
        self._completed = self._load()

    def _load(self) -> set:
        raw = self.storage.get(self.key)
        if not raw:
            return set()
        try:
            items = json.loads(raw)
        except ValueError:
            logger.warning("Progress record %r is corrupt, starting empty", self.key)
            return set()
        if not isinstance(items, list) or not all(
            isinstance(item, int) and not isinstance(item, bool) for item in items
        ):
            logger.warning("Progress record %r has an unexpected shape, starting empty", self.key)
            return set()
        return set(items)

    def _save(self) -> None:
        self.storage.set(self.key, json.dumps(sorted(self._completed)))

    @property
    def completed(self) -> List[int]:
        return sorted(self._completed)

    def is_completed(self, lesson_id: int) -> bool:
        return lesson_id in self._completed

    def mark_completed(self, lesson_id: int) -> None:
        self._completed.add(lesson_id)
        self._save()

    def percent(self, total: int) -> int:
        return percent_complete(len(self._completed), total)
