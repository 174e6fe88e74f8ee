"""
Local Key-Value Storage
A small file-backed string store with the same shape as browser localStorage:
get_item / set_item / remove_item on string keys and string values.

All keys live in one JSON object file. Every write replaces the file
atomically (temp file + rename), so a crash never leaves half a file behind.
"""

import json
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional, Union

from nanoexpo.config import config

logger = logging.getLogger(__name__)


class LocalStorage:
    """
    File-backed key-value store.

    Usage:
        storage = LocalStorage("data/local_storage.json")
        storage.set_item("key", "value")
        storage.get_item("key")   # -> "value"
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def get_item(self, key: str) -> Optional[str]:
        """
        Return the value stored under key, or None if absent.
        Raises OSError / ValueError / RecursionError if the storage file exists but can't be read.
        """
        items = self._read_all()
        value = items.get(key)
        logger.debug(f"get_item: key={key!r} → {'hit' if value is not None else 'miss'}")
        return value

    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any prior value."""
        with self._transaction() as items:
            items[key] = value
        logger.debug(f"set_item: key={key!r} ({len(value)} chars)")

    def remove_item(self, key: str) -> None:
        """Delete key. No-op if it isn't there."""
        with self._transaction() as items:
            if items.pop(key, None) is not None:
                logger.debug(f"remove_item: key={key!r} removed")

    def keys(self):
        return list(self._read_all().keys())

    # ------------------------------------------------------------------

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        raw = self.path.read_text(encoding='utf-8')
        if not raw.strip():
            return {}
        items = json.loads(raw)
        if not isinstance(items, dict):
            raise ValueError(f"Storage file {self.path} is not a JSON object")
        return items

    @contextmanager
    def _transaction(self) -> Iterator[Dict[str, str]]:
        """
        Yield the current key map; write it back if the block finishes cleanly.
        An unreadable storage file is started over rather than blocking writes.
        """
        try:
            items = self._read_all()
        except (OSError, ValueError, RecursionError) as e:
            logger.error(f"Storage file {self.path} unreadable, starting fresh: {e}")
            items = {}

        yield items

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name, suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                json.dump(items, fh)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise


def get_storage(path: Optional[Union[str, Path]] = None) -> LocalStorage:
    """Storage at path, or at STORAGE_PATH from config."""
    return LocalStorage(path or config.STORAGE_PATH)
