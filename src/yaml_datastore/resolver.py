"""Keypath resolution: load the selected document and walk it segment by segment."""

from __future__ import annotations

import logging
from typing import Protocol

from yaml_datastore.errors import (
    CannotDescendIntoScalarError,
    DatastoreError,
    IndexOutOfBoundsError,
    KeyNotFoundError,
    NotAnIndexError,
)
from yaml_datastore.keypath import KeyPath
from yaml_datastore.value import MappingNode, Node, ScalarNode, SequenceNode

__all__ = ["DocumentSource", "KeypathResolver", "parse_index", "walk"]

logger = logging.getLogger(__name__)


class DocumentSource(Protocol):
    """Anything that turns a selector into a document tree."""

    def load(self, selector: str) -> Node: ...


def parse_index(segment: str) -> int | None:
    """Return ``segment`` as a non-negative integer, or None if it is not one.

    Only ASCII digits are accepted, so signs, whitespace and other numerals
    never count as an index.
    """
    if segment.isascii() and segment.isdigit():
        return int(segment)
    return None


def walk(root: Node, keypath: KeyPath) -> Node:
    """Apply the navigation segments of ``keypath`` to ``root``.

    The current node's variant alone decides how a segment is read: a mapping
    key, a sequence index, or an error on a scalar.

    Raises:
        KeyNotFoundError: Mapping has no such key.
        NotAnIndexError: Sequence segment is not a non-negative integer.
        IndexOutOfBoundsError: Sequence index is past the end.
        CannotDescendIntoScalarError: Segments remain after a scalar.
    """
    current = root
    for index, segment in enumerate(keypath.segments, start=1):
        path = keypath.prefix(index)
        if isinstance(current, MappingNode):
            child = current.get(segment)
            if child is None:
                raise KeyNotFoundError(segment=segment, path=path, segment_index=index)
            current = child
        elif isinstance(current, SequenceNode):
            position = parse_index(segment)
            if position is None:
                raise NotAnIndexError(segment=segment, path=path, segment_index=index)
            if position >= len(current):
                raise IndexOutOfBoundsError(segment=segment, path=path, length=len(current), segment_index=index)
            current = current[position]
        elif isinstance(current, ScalarNode):
            raise CannotDescendIntoScalarError(
                segment=segment, path=path, kind=current.kind.value, segment_index=index
            )
        else:
            raise TypeError(f"Not a value node: {type(current).__name__}")
    return current


class KeypathResolver:
    """Resolves keypaths to nodes using a document source."""

    def __init__(self, source: DocumentSource) -> None:
        self._source = source

    def resolve(self, keypath: str | KeyPath) -> Node:
        """Load the document named by the selector and walk to the addressed node."""
        if not isinstance(keypath, KeyPath):
            keypath = KeyPath.parse(keypath)

        try:
            root = self._source.load(keypath.selector)
        except DatastoreError as e:
            raise e.annotate(keypath=str(keypath), segment_index=0)

        try:
            node = walk(root, keypath)
        except DatastoreError as e:
            raise e.annotate(keypath=str(keypath))
        logger.debug("Resolved '%s' to %s node", keypath, node.kind.value)
        return node
