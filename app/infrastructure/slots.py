"""JSON file implementation of the slot store.

Each slot is one file under LOCAL_STORE_DIR. Writes go to a temporary file and
are moved into place, so a slot is either the old value or the new one.
"""

import json
import os
import re
import tempfile
from typing import Any, Optional

import structlog

from app.core.exceptions import StoreError

logger = structlog.get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def slot_filename(name: str) -> str:
    """Map a slot name to a file name that cannot escape the store directory."""
    safe = _UNSAFE_CHARS.sub("_", name.strip()).lstrip(".")
    if not safe:
        raise ValueError(f"Invalid slot name: {name!r}")
    return f"{safe}.json"


class JsonSlotStore:
    """Slot store keeping one JSON document per slot on disk."""

    def __init__(self, directory: str):
        self.directory = directory

    def _path(self, name: str) -> str:
        return os.path.join(self.directory, slot_filename(name))

    def get(self, name: str) -> Optional[Any]:
        path = self._path(name)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            raise StoreError(f"Slot '{name}' could not be read: {e}") from e

    def put(self, name: str, value: Any) -> None:
        path = self._path(name)
        try:
            os.makedirs(self.directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(value, f, ensure_ascii=False, default=str)
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise StoreError(f"Slot '{name}' could not be written: {e}") from e
        logger.debug("Slot written", slot=name)

    def clear(self, name: str) -> None:
        try:
            os.remove(self._path(name))
        except FileNotFoundError:
            return
        except OSError as e:
            raise StoreError(f"Slot '{name}' could not be cleared: {e}") from e
        logger.debug("Slot cleared", slot=name)
