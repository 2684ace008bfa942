# src/dodge/game/highscore.py
"""
High score persistence.

Storage is a plain get/set key-value contract. The gateway on top of it is
best-effort: a missing, corrupt or unreachable value reads as the default and
a failed write is logged and dropped.
"""
from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union

logger = logging.getLogger(__name__)


class Storage(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...
    def set(self, key: str, value: Any) -> None: ...


class MemoryStorage:
    """In-process storage, lost when the process exits."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value


class JsonFileStorage:
    """Key-value pairs kept as one JSON object in a file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        try:
            data = self._read()
        except ValueError:
            # unreadable file gets replaced
            data = {}
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        tmp.replace(self.path)


def _as_score(raw: Any) -> Optional[int]:
    """Non-negative integer view of a stored value, None if it is not one."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float) and raw.is_integer():
        value = int(raw)
    elif isinstance(raw, str) and raw.strip().isdigit():
        value = int(raw.strip())
    else:
        return None
    return value if value >= 0 else None


class HighScoreStore:
    """Tolerant load/save of integer scores on top of any Storage."""

    def __init__(self, storage: Storage):
        self.storage = storage

    def load(self, key: str, default: int = 0) -> int:
        try:
            raw = self.storage.get(key, default)
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"High score unavailable ({key}): {e}")
            return default
        value = _as_score(raw)
        if value is None:
            logger.warning(f"Ignoring corrupt high score {raw!r} for {key}")
            return default
        return value

    def save(self, key: str, value: int) -> None:
        try:
            self.storage.set(key, int(value))
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Could not save high score ({key}={value}): {e}")
        else:
            logger.debug(f"Saved high score {key}={value}")
