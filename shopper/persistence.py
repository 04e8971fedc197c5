"""
Store persistence

Each store saves a whitelisted snapshot of its state under a fixed key and
restores it when it is created. Storage is a plain key/value contract so the
same stores work against memory (tests), a JSON directory (desktop/CLI) or
any other backend.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Protocol, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

logger = logging.getLogger(__name__)

SnapshotT = TypeVar("SnapshotT", bound=BaseModel)


class KeyValueStorage(Protocol):
    """Persistence contract used by the stores"""

    def save(self, key: str, snapshot: dict) -> None:
        """Overwrite the value under key. Failures are logged, never raised."""
        ...

    def load(self, key: str) -> Optional[dict]:
        """Value under key, or None when absent or unreadable"""
        ...


class MemoryStorage:
    """In-process storage. Values are kept JSON-encoded, like a browser's local storage."""

    def __init__(self):
        self._data: dict[str, str] = {}

    def save(self, key: str, snapshot: dict) -> None:
        try:
            self._data[key] = json.dumps(snapshot)
        except (TypeError, ValueError) as e:
            logger.error(f"Could not serialise snapshot for {key}: {e}")

    def load(self, key: str) -> Optional[dict]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return _decode(key, raw)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileStorage:
    """One ``<key>.json`` file per key inside a directory"""

    def __init__(self, directory: str | os.PathLike):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def save(self, key: str, snapshot: dict) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            tmp_path.write_text(json.dumps(snapshot), encoding="utf-8")
            tmp_path.replace(path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Could not save {key} to {path}: {e}")

    def load(self, key: str) -> Optional[dict]:
        path = self._path(key)
        if not path.exists():
            return None

        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not read {path}: {e}")
            return None
        return _decode(key, raw)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


def _decode(key: str, raw: str) -> Optional[dict]:
    try:
        value = json.loads(raw)
    except ValueError as e:
        logger.warning(f"Discarding unreadable snapshot for {key}: {e}")
        return None

    if not isinstance(value, dict):
        logger.warning(f"Discarding snapshot for {key}: expected an object, got {type(value).__name__}")
        return None
    return value


def restore_snapshot(model: type[SnapshotT], raw: Optional[dict]) -> SnapshotT:
    """
    Rebuild a snapshot model from stored data without ever failing.

    Fields that are missing or do not validate get the model's default;
    everything that does validate is kept.
    """
    if not isinstance(raw, dict):
        return model()

    try:
        return model.model_validate(raw)
    except SchemaError:
        pass

    kept = {}
    dropped = []
    for name in model.model_fields:
        if name not in raw:
            continue
        try:
            model.model_validate({name: raw[name]})
        except SchemaError:
            dropped.append(name)
        else:
            kept[name] = raw[name]

    logger.warning(f"Partially restored {model.__name__}, reset to defaults: {', '.join(dropped)}")
    return model.model_validate(kept)
