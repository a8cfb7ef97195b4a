"""Keypath parsing.

A keypath is a string of dot-separated components such as
``complete.nested.value``. Component 0 is the document selector and the
remaining components are navigation segments applied inside that document.
Whitespace around each component is stripped, so ``" a . b "`` parses as
``a.b``. Navigation segments must not be empty.
"""

from __future__ import annotations

from dataclasses import dataclass

from yaml_datastore.errors import EmptyKeypathError, InvalidKeypathError

__all__ = ["DELIMITER", "KeyPath"]

DELIMITER = "."


@dataclass(frozen=True)
class KeyPath:
    """A parsed keypath. Construct with ``KeyPath.parse``."""

    components: tuple[str, ...]

    @classmethod
    def parse(cls, keypath: str) -> KeyPath:
        """Split and validate a keypath string.

        Raises:
            EmptyKeypathError: If the keypath is empty or only whitespace.
            InvalidKeypathError: If a navigation segment is empty.
        """
        if not keypath or not keypath.strip():
            raise EmptyKeypathError(keypath=keypath)

        components = tuple(component.strip() for component in keypath.split(DELIMITER))
        # An empty selector is reported by selector validation in the loader.
        for index, component in enumerate(components[1:], start=1):
            if not component:
                raise InvalidKeypathError(
                    keypath=keypath,
                    reason=f"segment {index} is empty",
                    segment_index=index,
                )
        return cls(components)

    @property
    def selector(self) -> str:
        return self.components[0]

    @property
    def segments(self) -> tuple[str, ...]:
        return self.components[1:]

    def prefix(self, length: int) -> str:
        """Join the first ``length`` components back into keypath text."""
        return DELIMITER.join(self.components[:length])

    def __len__(self) -> int:
        return len(self.components)

    def __str__(self) -> str:
        return DELIMITER.join(self.components)
