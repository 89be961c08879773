"""
Durable storage for the planner document.

The document lives under a single fixed key. ``JsonFileStorage`` keeps one
``<key>.json`` file inside the application data directory and replaces it
atomically on every write; ``MemoryStorage`` keeps the serialized text in a
dict and is used for ephemeral sessions and tests.
"""
from __future__ import annotations
import json
import logging
import os
import tempfile
from datetime import datetime
from typing import Dict, Optional

from config import STORAGE_KEY
from errors import PersistenceFailure
from utils import app_dir

logger = logging.getLogger(__name__)


def _dumps(payload: dict) -> str:
    try:
        return json.dumps(payload, ensure_ascii=False, indent=2, allow_nan=False)
    except (TypeError, ValueError) as ex:
        raise PersistenceFailure(f"Document could not be serialized: {ex}") from ex


class JsonFileStorage:
    """Stores the document as a JSON file"""

    def __init__(self, directory: Optional[str] = None, key: str = STORAGE_KEY):
        self.directory = directory or app_dir()
        self.key = key

    @property
    def path(self) -> str:
        return os.path.join(self.directory, f"{self.key}.json")

    def read(self) -> Optional[dict]:
        """
        Return the stored document, or None when there is none.
        A file that does not hold a JSON object is moved aside to
        ``<key>.json.<timestamp>.corrupt`` first, so it is never overwritten.
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except ValueError as ex:
            self._set_aside(ex)
            return None
        except OSError as ex:
            raise PersistenceFailure(f"Could not read {self.path}: {ex}") from ex
        if not isinstance(data, dict):
            self._set_aside("expected a JSON object")
            return None
        return data

    def _set_aside(self, reason) -> str:
        backup = f"{self.path}.{datetime.now().strftime('%Y%m%d%H%M%S%f')}.corrupt"
        try:
            os.replace(self.path, backup)
        except OSError as ex:
            raise PersistenceFailure(f"Could not move unreadable {self.path} aside: {ex}") from ex
        logger.warning("Unreadable document at %s (%s), kept as %s", self.path, reason, backup)
        return backup

    def write(self, payload: dict) -> None:
        text = _dumps(payload)
        try:
            os.makedirs(self.directory, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=f".{self.key}.", suffix=".tmp", dir=self.directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(text)
                os.replace(tmp, self.path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as ex:
            raise PersistenceFailure(f"Could not write {self.path}: {ex}") from ex

    def clear(self) -> None:
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
        except OSError as ex:
            raise PersistenceFailure(f"Could not remove {self.path}: {ex}") from ex


class MemoryStorage:
    """Keeps serialized documents in memory"""

    def __init__(self, key: str = STORAGE_KEY):
        self.key = key
        self._items: Dict[str, str] = {}

    def read(self) -> Optional[dict]:
        text = self._items.get(self.key)
        if text is None:
            return None
        return json.loads(text)

    def write(self, payload: dict) -> None:
        self._items[self.key] = _dumps(payload)

    def clear(self) -> None:
        self._items.pop(self.key, None)
