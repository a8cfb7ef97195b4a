"""Datastore: a directory of YAML documents queried by keypath."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Sequence, TypeVar, overload

from yaml_datastore.cache import CachePolicy, DocumentCache
from yaml_datastore.config import Config
from yaml_datastore.convert import TypeConverter
from yaml_datastore.errors import ConfigError, DatastoreError, StoreNotFoundError
from yaml_datastore.keypath import KeyPath
from yaml_datastore.loader import DocumentLoader
from yaml_datastore.resolver import KeypathResolver
from yaml_datastore.value import Node

__all__ = ["Datastore"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _check_root(root: Path) -> None:
    if not root.exists():
        raise StoreNotFoundError(root=str(root))
    if not root.is_dir():
        raise StoreNotFoundError(root=str(root), reason="not a directory")
    if not os.access(root, os.R_OK | os.X_OK):
        raise StoreNotFoundError(root=str(root), reason="directory is not readable")


class Datastore:
    """Read-only view of a directory of YAML documents.

    Each ``<name>.yaml`` (or ``<name>.yml``) file is one document. A keypath
    such as ``complete.nested.value`` selects the document ``complete`` and
    walks ``nested`` then ``value`` inside it::

        store = Datastore.open("data/")
        store.get("complete.tags.1", str)   # "done"

    Settings come from keyword overrides first, then ``config`` (keys under
    ``datastore.``), then defaults. By default every query re-reads its
    document; ``cache_policy="mtime"`` reuses parsed documents until their
    file changes.

    Thread safety:
        Safe for concurrent queries. Without a cache, queries share no
        mutable state; the cache is internally synchronized.
    """

    def __init__(
        self,
        root: str | Path,
        config: Config | None = None,
        *,
        extensions: Sequence[str] | None = None,
        encoding: str | None = None,
        cache_policy: CachePolicy | str | None = None,
        strict_types: bool | None = None,
        validate_root: bool | None = None,
    ) -> None:
        config = config or Config()
        if extensions is None:
            extensions = config.get("datastore.extensions")
        if encoding is None:
            encoding = config.get("datastore.encoding")
        if cache_policy is None:
            cache_policy = config.get("datastore.cache")
        if strict_types is None:
            strict_types = config.get("datastore.strict_types")
        if validate_root is None:
            validate_root = config.get("datastore.validate_root")

        try:
            self._cache_policy = CachePolicy(cache_policy)
        except ValueError as e:
            allowed = ", ".join(p.value for p in CachePolicy)
            raise ConfigError(f"Invalid cache policy {cache_policy!r}, expected one of: {allowed}", cause=e) from e
        if not isinstance(strict_types, bool):
            raise ConfigError(f"'strict_types' must be a boolean, got {type(strict_types).__name__}")
        if not isinstance(validate_root, bool):
            raise ConfigError(f"'validate_root' must be a boolean, got {type(validate_root).__name__}")

        self._loader = DocumentLoader(root, extensions=extensions, encoding=encoding)
        if validate_root:
            _check_root(self._loader.root)

        self._cache: DocumentCache | None = None
        if self._cache_policy == CachePolicy.MTIME:
            self._cache = DocumentCache(self._loader)
            self._resolver = KeypathResolver(self._cache)
        else:
            self._resolver = KeypathResolver(self._loader)
        self._converter = TypeConverter(strict=strict_types)
        logger.debug(
            "Opened datastore at %s (extensions=%s, cache=%s)",
            self._loader.root,
            ",".join(self._loader.extensions),
            self._cache_policy.value,
        )

    @classmethod
    def open(cls, root: str | Path, config: Config | None = None, **overrides: Any) -> Datastore:
        """Open the store rooted at ``root``.

        Raises:
            StoreNotFoundError: If root validation is enabled and the root is
                missing, not a directory, or unreadable.
            ConfigError: If a setting is invalid.
        """
        return cls(root, config, **overrides)

    @property
    def root(self) -> Path:
        return self._loader.root

    @property
    def cache_policy(self) -> CachePolicy:
        return self._cache_policy

    @overload
    def get(self, keypath: str) -> Any: ...

    @overload
    def get(self, keypath: str, as_type: type[T]) -> T: ...

    def get(self, keypath: str, as_type: Any = Any) -> Any:
        """Resolve ``keypath`` and convert the value found there to ``as_type``.

        Without ``as_type`` the value is returned as plain Python data.

        Raises:
            DatastoreError: The first failure met, tagged with the keypath and
                the index of the segment reached.
        """
        parsed = self._parse(keypath)
        try:
            node = self._resolver.resolve(parsed)
            return self._converter.convert(node, as_type, parsed)
        except DatastoreError as e:
            logger.debug("Query '%s' failed: %s", keypath, e)
            raise e.annotate(keypath=str(parsed), segment_index=len(parsed) - 1)

    def resolve(self, keypath: str) -> Node:
        """Resolve ``keypath`` to its value node without converting it."""
        parsed = self._parse(keypath)
        try:
            return self._resolver.resolve(parsed)
        except DatastoreError as e:
            logger.debug("Query '%s' failed: %s", keypath, e)
            raise e.annotate(keypath=str(parsed))

    def documents(self) -> list[str]:
        """Selectors of all documents in the store, sorted."""
        return self._loader.documents()

    def clear_cache(self) -> None:
        """Drop cached documents and type adapters."""
        if self._cache is not None:
            self._cache.clear()
        self._converter.clear_cache()

    def __repr__(self) -> str:
        return f"Datastore(root={str(self.root)!r}, cache_policy={self._cache_policy.value!r})"

    @staticmethod
    def _parse(keypath: str) -> KeyPath:
        try:
            return KeyPath.parse(keypath)
        except DatastoreError as e:
            raise e.annotate(keypath=keypath, segment_index=0)
