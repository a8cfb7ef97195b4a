"""Document loader: maps a selector to its YAML file and parses it into a node tree."""

from __future__ import annotations

import codecs
import logging
import os
from pathlib import Path
from typing import Sequence

import yaml

from yaml_datastore.errors import (
    ConfigError,
    DocumentNotFoundError,
    DocumentReadError,
    InvalidSelectorError,
    ParseFailureError,
    StoreNotFoundError,
)
from yaml_datastore.keypath import DELIMITER
from yaml_datastore.value import Node, from_python

__all__ = ["DEFAULT_EXTENSIONS", "DocumentLoader", "validate_selector"]

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS: tuple[str, ...] = ("yaml", "yml")

_SEPARATORS = {"/", "\\", "\0"} | {sep for sep in (os.sep, os.altsep) if sep}


class _DocumentYAMLLoader(yaml.SafeLoader):
    """SafeLoader that leaves timestamps as the strings they were written as."""


_DocumentYAMLLoader.add_constructor("tag:yaml.org,2002:timestamp", _DocumentYAMLLoader.construct_yaml_str)


def _selector_problem(selector: str) -> str | None:
    if not selector:
        return "selector is empty"
    if selector in (".", ".."):
        return "path traversal is not allowed"
    for char in _SEPARATORS:
        if char in selector:
            return f"contains path separator {char!r}"
    if DELIMITER in selector:
        return f"contains keypath delimiter {DELIMITER!r}"
    return None


def validate_selector(selector: str) -> None:
    """Reject selectors that are empty or could address a file outside the store root.

    Raises:
        InvalidSelectorError: If the selector is not a plain file stem.
    """
    problem = _selector_problem(selector)
    if problem is not None:
        raise InvalidSelectorError(selector=selector, reason=problem)


def _normalize_extensions(extensions: Sequence[str]) -> tuple[str, ...]:
    if isinstance(extensions, str):
        extensions = [extensions]
    if not isinstance(extensions, (list, tuple)):
        raise ConfigError(f"Document extensions must be a list of strings, got {type(extensions).__name__}")
    for ext in extensions:
        if not isinstance(ext, str):
            raise ConfigError(f"Document extension must be a string, got {type(ext).__name__}: {ext!r}")
    normalized = tuple(ext.lstrip(".") for ext in extensions)
    if not normalized:
        raise ConfigError("At least one document extension is required")
    for ext in normalized:
        if not ext or any(char in ext for char in _SEPARATORS):
            raise ConfigError(f"Invalid document extension: {ext!r}")
    return normalized


def _check_encoding(encoding: str) -> str:
    if not isinstance(encoding, str):
        raise ConfigError(f"Document encoding must be a string, got {type(encoding).__name__}")
    try:
        codecs.lookup(encoding)
    except LookupError as e:
        raise ConfigError(f"Unknown document encoding: {encoding!r}", cause=e) from e
    return encoding


class DocumentLoader:
    """Locates, reads and parses the document behind a selector.

    Extensions are tried in the configured order; the first existing readable
    file wins. No caching, no retries: every ``load`` reads the file again.
    """

    def __init__(
        self,
        root: str | Path,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        encoding: str = "utf-8",
    ) -> None:
        self._root = Path(root).resolve()
        self._extensions = _normalize_extensions(extensions)
        self._encoding = _check_encoding(encoding)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def extensions(self) -> tuple[str, ...]:
        return self._extensions

    def locate(self, selector: str) -> Path:
        """Return the file backing ``selector``.

        Raises:
            InvalidSelectorError: Before any filesystem access, for unsafe selectors.
            DocumentNotFoundError: If no candidate file exists.
        """
        validate_selector(selector)

        searched: list[str] = []
        unreadable: Path | None = None
        for ext in self._extensions:
            candidate = self._root / f"{selector}.{ext}"
            searched.append(str(candidate))
            if not candidate.is_file():
                continue
            if os.access(candidate, os.R_OK):
                return candidate
            if unreadable is None:
                unreadable = candidate

        # Let the read report the permission problem.
        if unreadable is not None:
            return unreadable
        raise DocumentNotFoundError(selector=selector, searched=searched)

    def read(self, selector: str, path: Path) -> str:
        """Read a document file as text."""
        try:
            return path.read_text(encoding=self._encoding)
        except FileNotFoundError as e:
            # Removed between locate and read.
            raise DocumentNotFoundError(selector=selector, searched=[str(path)], cause=e) from e
        except (OSError, UnicodeError, LookupError) as e:
            raise DocumentReadError(selector=selector, path=str(path), reason=str(e), cause=e) from e

    def parse(self, selector: str, text: str) -> Node:
        """Parse YAML text into a node tree. An empty document is a ``NullNode``."""
        try:
            data = yaml.load(text, Loader=_DocumentYAMLLoader)
        except yaml.YAMLError as e:
            raise ParseFailureError(selector=selector, reason=str(e), cause=e) from e

        try:
            return from_python(data)
        except ValueError as e:
            raise ParseFailureError(selector=selector, reason=str(e), cause=e) from e
        except RecursionError as e:
            raise ParseFailureError(
                selector=selector, reason="document is recursive or nested too deeply", cause=e
            ) from e

    def load_path(self, selector: str, path: Path) -> Node:
        """Read and parse an already located document."""
        logger.debug("Loading document '%s' from %s", selector, path)
        return self.parse(selector, self.read(selector, path))

    def load(self, selector: str) -> Node:
        """Locate, read and parse the document behind ``selector``."""
        return self.load_path(selector, self.locate(selector))

    def documents(self) -> list[str]:
        """List the selectors of all eligible documents in the store, sorted.

        Hidden files and stems that are not valid selectors are skipped. When a
        stem exists under several extensions, the earlier extension wins.
        """
        try:
            entries = list(os.scandir(self._root))
        except OSError as e:
            raise StoreNotFoundError(root=str(self._root), reason=str(e), cause=e) from e

        file_names: list[str] = []
        for entry in entries:
            try:
                if entry.is_file():
                    file_names.append(entry.name)
            except OSError as e:
                logger.error("OS error accessing %s: %s", entry.path, e)
        file_names.sort()

        found: dict[str, str] = {}
        for ext in self._extensions:
            suffix = f".{ext}"
            for name in file_names:
                if not name.endswith(suffix) or name.startswith("."):
                    continue
                stem = name[: -len(suffix)]
                if _selector_problem(stem) is not None:
                    continue
                if stem in found:
                    logger.warning("Document %s is shadowed by %s", name, found[stem])
                    continue
                found[stem] = name
        return sorted(found)
