"""yaml_datastore - A directory of YAML files used as one keypath-addressed datastore."""

from __future__ import annotations

# Core
from yaml_datastore.datastore import Datastore
from yaml_datastore.keypath import KeyPath
from yaml_datastore.loader import DEFAULT_EXTENSIONS, DocumentLoader
from yaml_datastore.resolver import KeypathResolver, walk
from yaml_datastore.convert import TypeConverter
from yaml_datastore.cache import CachePolicy, DocumentCache

# Config
from yaml_datastore.config import Config

# Value nodes
from yaml_datastore.value import (
    BoolNode,
    FloatNode,
    IntegerNode,
    MappingNode,
    Node,
    NodeKind,
    NullNode,
    SequenceNode,
    StringNode,
    from_python,
    to_python,
)

# Errors
from yaml_datastore.errors import (
    CannotDescendIntoScalarError,
    ConfigError,
    ConfigNotFoundError,
    DatastoreError,
    DocumentNotFoundError,
    DocumentReadError,
    EmptyKeypathError,
    ErrorCodes,
    ErrorStage,
    IndexOutOfBoundsError,
    InvalidKeypathError,
    InvalidSelectorError,
    KeyNotFoundError,
    NavigationError,
    NotAnIndexError,
    ParseFailureError,
    StoreNotFoundError,
    TypeMismatchError,
    UnsupportedTypeError,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "Datastore",
    "KeyPath",
    "DocumentLoader",
    "DEFAULT_EXTENSIONS",
    "KeypathResolver",
    "walk",
    "TypeConverter",
    "CachePolicy",
    "DocumentCache",
    # Config
    "Config",
    # Value nodes
    "Node",
    "NodeKind",
    "NullNode",
    "BoolNode",
    "IntegerNode",
    "FloatNode",
    "StringNode",
    "SequenceNode",
    "MappingNode",
    "from_python",
    "to_python",
    # Errors
    "ErrorCodes",
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
]
