"""Document cache keyed by selector and invalidated when the backing file changes."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from yaml_datastore.errors import DocumentNotFoundError, DocumentReadError
from yaml_datastore.loader import DocumentLoader
from yaml_datastore.value import Node

__all__ = ["CachePolicy", "DocumentCache"]

logger = logging.getLogger(__name__)


class CachePolicy(str, Enum):
    """Whether repeated queries reuse parsed documents."""

    NONE = "none"
    MTIME = "mtime"


@dataclass(frozen=True)
class _CacheEntry:
    path: Path
    mtime_ns: int
    size: int
    root: Node

    def is_fresh(self, path: Path, mtime_ns: int, size: int) -> bool:
        return self.path == path and self.mtime_ns == mtime_ns and self.size == size


class DocumentCache:
    """Shares parsed document trees between queries until their file changes.

    An entry stays valid while the located file path, modification time and
    size are unchanged. Trees are immutable, so every reader gets the same one.

    Thread safety:
        Internally synchronized. Loads of one selector are serialized so a
        document is parsed at most once per change, and an entry is only
        published after its tree is fully built.
    """

    def __init__(self, loader: DocumentLoader) -> None:
        self._loader = loader
        self._entries: dict[str, _CacheEntry] = {}
        self._selector_locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def load(self, selector: str) -> Node:
        """Return the tree for ``selector``, reading the file only if it changed."""
        path = self._loader.locate(selector)
        mtime_ns, size = self._stamp(selector, path)

        with self._lock:
            entry = self._entries.get(selector)
            selector_lock = self._selector_locks.setdefault(selector, threading.Lock())
        if entry is not None and entry.is_fresh(path, mtime_ns, size):
            logger.debug("Cache hit for document '%s'", selector)
            return entry.root

        with selector_lock:
            # Another thread may have loaded it while we waited.
            with self._lock:
                entry = self._entries.get(selector)
            if entry is not None and entry.is_fresh(path, mtime_ns, size):
                logger.debug("Cache hit for document '%s'", selector)
                return entry.root

            logger.debug("Cache miss for document '%s'", selector)
            root = self._loader.load_path(selector, path)
            with self._lock:
                self._entries[selector] = _CacheEntry(path=path, mtime_ns=mtime_ns, size=size, root=root)
            return root

    def invalidate(self, selector: str | None = None) -> None:
        """Drop one cached document, or all of them when no selector is given."""
        with self._lock:
            if selector is None:
                self._entries.clear()
                self._selector_locks.clear()
            else:
                self._entries.pop(selector, None)
                self._selector_locks.pop(selector, None)

    def clear(self) -> None:
        self.invalidate()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, selector: object) -> bool:
        with self._lock:
            return selector in self._entries

    @staticmethod
    def _stamp(selector: str, path: Path) -> tuple[int, int]:
        try:
            stat = os.stat(path)
        except FileNotFoundError as e:
            raise DocumentNotFoundError(selector=selector, searched=[str(path)], cause=e) from e
        except OSError as e:
            raise DocumentReadError(selector=selector, path=str(path), reason=str(e), cause=e) from e
        return stat.st_mtime_ns, stat.st_size
