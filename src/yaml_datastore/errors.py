"""Error hierarchy for the yaml_datastore package."""

from __future__ import annotations

from enum import Enum
from typing import Any

__all__ = [
    "ErrorStage",
    "DatastoreError",
    "ConfigError",
    "ConfigNotFoundError",
    "StoreNotFoundError",
    "EmptyKeypathError",
    "InvalidKeypathError",
    "InvalidSelectorError",
    "DocumentNotFoundError",
    "DocumentReadError",
    "ParseFailureError",
    "NavigationError",
    "KeyNotFoundError",
    "NotAnIndexError",
    "IndexOutOfBoundsError",
    "CannotDescendIntoScalarError",
    "TypeMismatchError",
    "UnsupportedTypeError",
    "ErrorCodes",
]


class ErrorStage(str, Enum):
    """The resolution stage a failure originated from."""

    CONFIG = "config"
    KEYPATH = "keypath"
    IO = "io"
    PARSE = "parse"
    NAVIGATION = "navigation"
    CONVERSION = "conversion"


class DatastoreError(Exception):
    """Base error for all yaml_datastore errors."""

    stage: ErrorStage = ErrorStage.CONFIG

    def __init__(
        self,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
        keypath: str | None = None,
        segment_index: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details: dict[str, Any] = details or {}
        self.cause = cause
        self.keypath = keypath
        self.segment_index = segment_index

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def annotate(self, keypath: str | None = None, segment_index: int | None = None) -> DatastoreError:
        """Record where in a query the error happened, keeping values already set."""
        if self.keypath is None:
            self.keypath = keypath
        if self.segment_index is None:
            self.segment_index = segment_index
        return self


class ConfigError(DatastoreError):
    """Raised when configuration is invalid."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(code="CONFIG_INVALID", message=message, **kwargs)


class ConfigNotFoundError(DatastoreError):
    """Raised when a configuration file cannot be found."""

    def __init__(self, config_path: str, **kwargs: Any) -> None:
        super().__init__(
            code="CONFIG_NOT_FOUND",
            message=f"Configuration file not found: {config_path}",
            details={"config_path": config_path},
            **kwargs,
        )


class StoreNotFoundError(DatastoreError):
    """Raised when the store root is missing, not a directory, or unreadable."""

    def __init__(self, root: str, reason: str = "directory does not exist", **kwargs: Any) -> None:
        super().__init__(
            code="STORE_NOT_FOUND",
            message=f"Store root unavailable: {root} ({reason})",
            details={"root": root, "reason": reason},
            **kwargs,
        )

    @property
    def root(self) -> str:
        """The store root that could not be used."""
        return self.details["root"]


class EmptyKeypathError(DatastoreError):
    """Raised when a keypath has no segments at all."""

    stage = ErrorStage.KEYPATH

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(code="EMPTY_KEYPATH", message="Keypath is empty", **kwargs)


class InvalidKeypathError(DatastoreError):
    """Raised when a keypath contains an empty navigation segment."""

    stage = ErrorStage.KEYPATH

    def __init__(self, keypath: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            code="INVALID_KEYPATH",
            message=f"Invalid keypath '{keypath}': {reason}",
            details={"reason": reason},
            keypath=keypath,
            **kwargs,
        )


class InvalidSelectorError(DatastoreError):
    """Raised when a document selector could escape the store root."""

    stage = ErrorStage.KEYPATH

    def __init__(self, selector: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            code="INVALID_SELECTOR",
            message=f"Invalid document selector '{selector}': {reason}",
            details={"selector": selector, "reason": reason},
            **kwargs,
        )

    @property
    def selector(self) -> str:
        """The rejected selector."""
        return self.details["selector"]


class DocumentNotFoundError(DatastoreError):
    """Raised when no file backs a document selector."""

    stage = ErrorStage.IO

    def __init__(self, selector: str, searched: list[str] | None = None, **kwargs: Any) -> None:
        super().__init__(
            code="DOCUMENT_NOT_FOUND",
            message=f"Document not found: {selector}",
            details={"selector": selector, "searched": searched or []},
            **kwargs,
        )

    @property
    def selector(self) -> str:
        """The selector that matched no file."""
        return self.details["selector"]

    @property
    def searched(self) -> list[str]:
        """The candidate file paths that were tried, in order."""
        return self.details["searched"]


class DocumentReadError(DatastoreError):
    """Raised when a document file exists but cannot be read."""

    stage = ErrorStage.IO

    def __init__(self, selector: str, path: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            code="DOCUMENT_READ_ERROR",
            message=f"Cannot read document '{selector}' from {path}: {reason}",
            details={"selector": selector, "path": path, "reason": reason},
            **kwargs,
        )

    @property
    def selector(self) -> str:
        """The selector whose file could not be read."""
        return self.details["selector"]

    @property
    def path(self) -> str:
        """The file that could not be read."""
        return self.details["path"]


class ParseFailureError(DatastoreError):
    """Raised when a document is not well-formed YAML or holds unsupported values."""

    stage = ErrorStage.PARSE

    def __init__(self, selector: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            code="PARSE_FAILURE",
            message=f"Failed to parse document '{selector}': {reason}",
            details={"selector": selector, "reason": reason},
            **kwargs,
        )

    @property
    def selector(self) -> str:
        """The selector of the malformed document."""
        return self.details["selector"]

    @property
    def reason(self) -> str:
        """The underlying parser message."""
        return self.details["reason"]


class NavigationError(DatastoreError):
    """Base class for failures while walking a document tree."""

    stage = ErrorStage.NAVIGATION

    @property
    def segment(self) -> str:
        """The segment that could not be applied."""
        return self.details["segment"]

    @property
    def path(self) -> str:
        """The keypath prefix consumed before the failing segment."""
        return self.details["path"]


class KeyNotFoundError(NavigationError):
    """Raised when a mapping has no entry for a segment."""

    def __init__(self, segment: str, path: str, **kwargs: Any) -> None:
        super().__init__(
            code="KEY_NOT_FOUND",
            message=f"Key '{segment}' not found at '{path}'",
            details={"segment": segment, "path": path},
            **kwargs,
        )


class NotAnIndexError(NavigationError):
    """Raised when a segment applied to a sequence is not a non-negative integer."""

    def __init__(self, segment: str, path: str, **kwargs: Any) -> None:
        super().__init__(
            code="NOT_AN_INDEX",
            message=f"Segment '{segment}' is not a sequence index at '{path}'",
            details={"segment": segment, "path": path},
            **kwargs,
        )


class IndexOutOfBoundsError(NavigationError):
    """Raised when a sequence index is past the end of the sequence."""

    def __init__(self, segment: str, path: str, length: int, **kwargs: Any) -> None:
        super().__init__(
            code="INDEX_OUT_OF_BOUNDS",
            message=f"Index {segment} out of bounds at '{path}' (length {length})",
            details={"segment": segment, "path": path, "length": length},
            **kwargs,
        )

    @property
    def length(self) -> int:
        """The length of the sequence that was indexed."""
        return self.details["length"]


class CannotDescendIntoScalarError(NavigationError):
    """Raised when segments remain after reaching a scalar."""

    def __init__(self, segment: str, path: str, kind: str, **kwargs: Any) -> None:
        super().__init__(
            code="CANNOT_DESCEND_INTO_SCALAR",
            message=f"Cannot apply '{segment}' to {kind} scalar at '{path}'",
            details={"segment": segment, "path": path, "kind": kind},
            **kwargs,
        )

    @property
    def kind(self) -> str:
        """The kind of the scalar that ended the walk."""
        return self.details["kind"]


class TypeMismatchError(DatastoreError):
    """Raised when a resolved node cannot be converted to the requested type."""

    stage = ErrorStage.CONVERSION

    def __init__(
        self,
        expected: str,
        actual: str,
        path: str,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            code="TYPE_MISMATCH",
            message=f"Expected {expected} at '{path}', found {actual}",
            details={"expected": expected, "actual": actual, "path": path, "errors": errors or []},
            **kwargs,
        )

    @property
    def expected(self) -> str:
        """Readable name of the requested type."""
        return self.details["expected"]

    @property
    def actual(self) -> str:
        """Kind of the node that was found."""
        return self.details["actual"]

    @property
    def path(self) -> str:
        """The keypath of the node that failed to convert."""
        return self.details["path"]

    @property
    def errors(self) -> list[dict[str, Any]]:
        """Per-field conversion failures."""
        return self.details["errors"]


class UnsupportedTypeError(DatastoreError):
    """Raised when the requested type cannot be used as a conversion target."""

    stage = ErrorStage.CONVERSION

    def __init__(self, target: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            code="UNSUPPORTED_TYPE",
            message=f"Cannot convert to {target}: {reason}",
            details={"target": target, "reason": reason},
            **kwargs,
        )


class ErrorCodes:
    """All datastore error codes as constants.

    Example:
        if error.code == ErrorCodes.DOCUMENT_NOT_FOUND:
            handle_missing_document()
    """

    CONFIG_INVALID = "CONFIG_INVALID"
    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
    STORE_NOT_FOUND = "STORE_NOT_FOUND"
    EMPTY_KEYPATH = "EMPTY_KEYPATH"
    INVALID_KEYPATH = "INVALID_KEYPATH"
    INVALID_SELECTOR = "INVALID_SELECTOR"
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    DOCUMENT_READ_ERROR = "DOCUMENT_READ_ERROR"
    PARSE_FAILURE = "PARSE_FAILURE"
    KEY_NOT_FOUND = "KEY_NOT_FOUND"
    NOT_AN_INDEX = "NOT_AN_INDEX"
    INDEX_OUT_OF_BOUNDS = "INDEX_OUT_OF_BOUNDS"
    CANNOT_DESCEND_INTO_SCALAR = "CANNOT_DESCEND_INTO_SCALAR"
    TYPE_MISMATCH = "TYPE_MISMATCH"
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("ErrorCodes is immutable")
