"""
Persistence
===========

Key-value stores for best scores and the selected cosmetic.

The core only depends on the KeyValueStore contract. Values are plain strings
(integers or enum tags); there is no schema versioning.
"""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Abstract string key-value store."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""


class MemoryStore(KeyValueStore):
    """In-process store; nothing survives the interpreter."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def as_dict(self) -> Dict[str, str]:
        """Copy of the stored data."""
        return dict(self._data)


class JsonFileStore(KeyValueStore):
    """
    Store backed by a single JSON object on disk.

    The file is read lazily on first access and rewritten in full on every
    set(). Writes go to a sibling temp file first and are moved into place,
    so a failed write leaves the previous save intact.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize store.

        Args:
            path: Location of the save file. "~" is expanded.
        """
        self._path = Path(os.path.expanduser(str(path)))
        self._data: Optional[Dict[str, str]] = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> Dict[str, str]:
        if self._data is None:
            if not self._path.exists():
                self._data = {}
            else:
                with open(self._path, "r") as f:
                    raw = json.load(f)
                if not isinstance(raw, dict):
                    raise ValueError(f"Save file {self._path} does not hold a JSON object")
                self._data = {str(k): str(v) for k, v in raw.items()}
        return self._data

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        try:
            data = dict(self._load())
        except (OSError, ValueError) as e:
            # Unreadable save data is replaced by the next write
            logger.warning("Overwriting unreadable save file %s: %s", self._path, e)
            data = {}
        data[key] = str(value)

        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            with open(tmp_path, "w") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self._path)
        except Exception:
            if tmp_path.exists():
                tmp_path.unlink()
            raise

        self._data = data
        logger.debug("Saved %s=%s to %s", key, value, self._path)
