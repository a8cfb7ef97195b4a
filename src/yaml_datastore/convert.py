"""TypeConverter: materializes resolved nodes as the caller's requested type."""

from __future__ import annotations

import threading
from typing import Any

from pydantic import PydanticUserError, TypeAdapter, ValidationError as PydanticValidationError
from pydantic_core import to_json

from yaml_datastore.errors import TypeMismatchError, UnsupportedTypeError
from yaml_datastore.keypath import KeyPath
from yaml_datastore.value import Node, to_python

__all__ = ["TypeConverter", "type_name"]


def type_name(target: Any) -> str:
    """Readable name of a conversion target, e.g. ``int`` or ``list[str]``."""
    if isinstance(target, type) and not getattr(target, "__args__", None):
        return target.__name__
    return repr(target).replace("typing.", "")


class TypeConverter:
    """Converts nodes into Python types with pydantic.

    In strict mode (the default) no lossy coercion happens: ``int`` rejects
    booleans and numeric strings, ``str`` rejects numbers, ``float`` accepts
    integers. Strict validation runs in pydantic's JSON mode, so sequences
    still fill ``tuple``, ``set`` and ``frozenset`` targets, mappings fill
    dataclasses and models, and strings fill enums. With ``strict=False``
    pydantic's lax coercion rules apply.
    Requesting ``Any`` or ``object`` returns plain Python data, and
    requesting ``Node`` or one of its subclasses returns the node itself.
    """

    def __init__(self, strict: bool = True) -> None:
        self._strict = strict
        self._adapters: dict[Any, TypeAdapter[Any]] = {}
        self._lock = threading.Lock()

    @property
    def strict(self) -> bool:
        return self._strict

    def convert(self, node: Node, target: Any, keypath: KeyPath | str) -> Any:
        """Convert ``node`` to ``target``.

        Raises:
            TypeMismatchError: If the node does not fit the target type.
            UnsupportedTypeError: If pydantic cannot build a validator for the target.
        """
        path = str(keypath)
        if target is Any or target is object:
            return to_python(node)

        if _is_node_type(target):
            if isinstance(node, target):
                return node
            raise TypeMismatchError(expected=type_name(target), actual=node.kind.value, path=path)

        adapter = self._adapter(target)
        try:
            if self._strict:
                return adapter.validate_json(_to_json(node), strict=True)
            return adapter.validate_python(to_python(node), strict=False)
        except PydanticValidationError as e:
            raise TypeMismatchError(
                expected=type_name(target),
                actual=node.kind.value,
                path=path,
                errors=_error_details(e),
                cause=e,
            ) from e

    def _adapter(self, target: Any) -> TypeAdapter[Any]:
        try:
            hash(target)
        except TypeError:
            return _build_adapter(target)

        with self._lock:
            adapter = self._adapters.get(target)
        if adapter is None:
            adapter = _build_adapter(target)
            with self._lock:
                adapter = self._adapters.setdefault(target, adapter)
        return adapter

    def clear_cache(self) -> None:
        with self._lock:
            self._adapters.clear()


def _is_node_type(target: Any) -> bool:
    # Generic aliases pass isinstance(..., type) on some interpreters but fail issubclass.
    try:
        return isinstance(target, type) and issubclass(target, Node)
    except TypeError:
        return False


def _build_adapter(target: Any) -> TypeAdapter[Any]:
    try:
        return TypeAdapter(target)
    except (PydanticUserError, TypeError) as e:
        raise UnsupportedTypeError(target=type_name(target), reason=str(e), cause=e) from e


def _error_details(error: PydanticValidationError) -> list[dict[str, Any]]:
    """Flatten a pydantic ValidationError into path/message/constraint/actual dicts."""
    details: list[dict[str, Any]] = []
    for err in error.errors():
        loc = err.get("loc", ())
        details.append(
            {
                "path": "/" + "/".join(str(segment) for segment in loc) if loc else "/",
                "message": err.get("msg", ""),
                "constraint": err.get("type", ""),
                "actual": err.get("input"),
            }
        )
    return details


def _to_json(node: Node) -> bytes:
    # Non-finite floats are written as NaN/Infinity, which validate_json accepts.
    return to_json(to_python(node), inf_nan_mode="constants")
