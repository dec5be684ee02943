"""Path-keyed expand/collapse state that outlives tree instances.

Entries are added on expand and flipped on shrink, never removed, so a
directory remembers its state across reloads and root changes.
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterator
from pathlib import Path


def _key(path: str | os.PathLike[str]) -> str:
    return os.path.normpath(os.fspath(path))


class ExpandStore:
    """In-memory ``path -> expanded`` mapping; absent means collapsed."""

    def __init__(self, record: dict[str, bool] | None = None) -> None:
        self.record: dict[str, bool] = {}
        for path, expanded in (record or {}).items():
            self.record[_key(path)] = bool(expanded)

    def expand(self, path: str | os.PathLike[str]) -> None:
        self.record[_key(path)] = True

    def shrink(self, path: str | os.PathLike[str]) -> None:
        self.record[_key(path)] = False

    def is_expanded(self, path: str | os.PathLike[str]) -> bool:
        return self.record.get(_key(path), False)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        return _key(path) in self.record

    def __len__(self) -> int:
        return len(self.record)

    def __iter__(self) -> Iterator[str]:
        return iter(self.record)


class JsonExpandStore(ExpandStore):
    """``ExpandStore`` persisted as a JSON object of ``path: bool``.

    Unreadable or malformed files start empty and
    non-boolean values are dropped. ``save`` never raises.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(self._load())

    def _load(self) -> dict[str, bool]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except Exception:
            return {}
        if not isinstance(data, dict):
            return {}
        return {
            key: value
            for key, value in data.items()
            if isinstance(key, str) and isinstance(value, bool)
        }

    def save(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self.record, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        except Exception:
            pass


__all__ = ["ExpandStore", "JsonExpandStore"]
