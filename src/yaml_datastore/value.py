"""Value nodes: the generic tree every parsed document is turned into.

The family is closed. A node is exactly one of ``NullNode``, ``BoolNode``,
``IntegerNode``, ``FloatNode``, ``StringNode``, ``SequenceNode`` or
``MappingNode``, and code that dispatches on nodes handles all seven.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Iterator

__all__ = [
    "NodeKind",
    "Node",
    "NullNode",
    "BoolNode",
    "IntegerNode",
    "FloatNode",
    "StringNode",
    "SequenceNode",
    "MappingNode",
    "ScalarNode",
    "from_python",
    "to_python",
]


class NodeKind(str, Enum):
    """Runtime variant of a value node."""

    NULL = "null"
    BOOL = "bool"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


class Node:
    """Base class of all value nodes."""

    __slots__ = ()

    kind: ClassVar[NodeKind]

    @property
    def is_scalar(self) -> bool:
        return self.kind not in (NodeKind.SEQUENCE, NodeKind.MAPPING)


@dataclass(frozen=True)
class NullNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.NULL


@dataclass(frozen=True)
class BoolNode(Node):
    value: bool
    kind: ClassVar[NodeKind] = NodeKind.BOOL


@dataclass(frozen=True)
class IntegerNode(Node):
    value: int
    kind: ClassVar[NodeKind] = NodeKind.INTEGER


@dataclass(frozen=True)
class FloatNode(Node):
    value: float
    kind: ClassVar[NodeKind] = NodeKind.FLOAT


@dataclass(frozen=True)
class StringNode(Node):
    value: str
    kind: ClassVar[NodeKind] = NodeKind.STRING


@dataclass(frozen=True)
class SequenceNode(Node):
    """An ordered list of nodes."""

    items: tuple[Node, ...] = ()
    kind: ClassVar[NodeKind] = NodeKind.SEQUENCE

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> Node:
        return self.items[index]

    def __iter__(self) -> Iterator[Node]:
        return iter(self.items)


@dataclass(frozen=True)
class MappingNode(Node):
    """String-keyed nodes in document order. Keys are unique."""

    entries: dict[str, Node] = field(default_factory=dict)
    kind: ClassVar[NodeKind] = NodeKind.MAPPING

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def get(self, key: str) -> Node | None:
        """Return the node stored under ``key``, or None."""
        return self.entries.get(key)

    def keys(self) -> list[str]:
        return list(self.entries)


ScalarNode = (NullNode, BoolNode, IntegerNode, FloatNode, StringNode)


def _key_text(key: Any) -> str:
    """Render a YAML mapping key the way it would be written in a keypath."""
    if key is None:
        return "null"
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, (int, float, str)):
        return str(key)
    raise ValueError(f"unsupported mapping key {key!r}")


def from_python(data: Any) -> Node:
    """Build a node tree from plain Python data as produced by a YAML parser.

    Raises:
        ValueError: For values outside the seven node variants, non-scalar
            mapping keys, or keys that collide once rendered as strings.
    """
    if data is None:
        return NullNode()
    # bool is a subclass of int
    if isinstance(data, bool):
        return BoolNode(data)
    if isinstance(data, int):
        return IntegerNode(data)
    if isinstance(data, float):
        return FloatNode(data)
    if isinstance(data, str):
        return StringNode(data)
    if isinstance(data, (list, tuple)):
        return SequenceNode(tuple(from_python(item) for item in data))
    if isinstance(data, dict):
        entries: dict[str, Node] = {}
        for key, value in data.items():
            text = _key_text(key)
            if text in entries:
                raise ValueError(f"duplicate mapping key '{text}'")
            entries[text] = from_python(value)
        return MappingNode(entries)
    raise ValueError(f"unsupported value type {type(data).__name__}")


def to_python(node: Node) -> Any:
    """Convert a node tree back into plain None/bool/int/float/str/list/dict data."""
    if isinstance(node, NullNode):
        return None
    if isinstance(node, (BoolNode, IntegerNode, FloatNode, StringNode)):
        return node.value
    if isinstance(node, SequenceNode):
        return [to_python(item) for item in node.items]
    if isinstance(node, MappingNode):
        return {key: to_python(value) for key, value in node.entries.items()}
    raise TypeError(f"Not a value node: {type(node).__name__}")
