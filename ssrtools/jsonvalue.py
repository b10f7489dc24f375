"""Parsed JSON values with forgiving accessors."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Iterator, Union


class JsonType(enum.IntEnum):
    """Kind of a parsed JSON value."""

    NONE = 0
    OBJECT = 1
    ARRAY = 2
    INTEGER = 3
    DOUBLE = 4
    STRING = 5
    BOOLEAN = 6
    NULL = 7


_DEFAULTS = {
    JsonType.INTEGER: 0,
    JsonType.DOUBLE: 0.0,
    JsonType.STRING: "",
    JsonType.BOOLEAN: False,
}


@dataclass
class JsonValue:
    """A node of a parsed JSON document.

    ``value`` holds a list of ``(name, JsonValue)`` pairs for objects (order
    kept, duplicate names allowed), a list of ``JsonValue`` for arrays, and
    the plain Python value for scalars.
    """

    type: JsonType = JsonType.NONE
    value: Any = None

    def __post_init__(self) -> None:
        self.type = JsonType(self.type)
        if self.type in (JsonType.OBJECT, JsonType.ARRAY):
            self.value = list(self.value) if self.value is not None else []
            if self.type is JsonType.OBJECT:
                self.value = [(str(name), item) for name, item in self.value]
        elif self.type in (JsonType.NONE, JsonType.NULL):
            self.value = None
        elif self.value is None:
            self.value = _DEFAULTS[self.type]
        elif self.type is JsonType.INTEGER:
            self.value = int(self.value)
        elif self.type is JsonType.DOUBLE:
            self.value = float(self.value)
        elif self.type is JsonType.STRING:
            self.value = str(self.value)
        elif self.type is JsonType.BOOLEAN:
            self.value = bool(self.value)

    def __getitem__(self, index: Union[int, str]) -> "JsonValue":
        """Look up an array element or object member.

        A missing entry, or a lookup on the wrong kind of value, yields a
        value of type ``JsonType.NONE`` rather than raising.
        """
        if isinstance(index, str):
            if self.type is JsonType.OBJECT:
                for name, item in self.value:
                    if name == index:
                        return item
            return JsonValue()
        if isinstance(index, int) and not isinstance(index, bool):
            if self.type is JsonType.ARRAY and 0 <= index < len(self.value):
                return self.value[index]
            return JsonValue()
        return JsonValue()

    def __iter__(self) -> Iterator[Any]:
        """Iterate array elements, or ``(name, value)`` pairs of an object."""
        if self.type in (JsonType.ARRAY, JsonType.OBJECT):
            yield from self.value

    def __len__(self) -> int:
        """Number of elements, members or string characters; 0 otherwise."""
        if self.type in (JsonType.ARRAY, JsonType.OBJECT, JsonType.STRING):
            return len(self.value)
        return 0

    def __bool__(self) -> bool:
        """True only for a boolean value that is true."""
        return self.type is JsonType.BOOLEAN and bool(self.value)

    def as_str(self) -> str:
        """The string contents, or an empty string for other kinds."""
        return self.value if self.type is JsonType.STRING else ""

    def as_int(self) -> int:
        """The integer value; doubles are truncated, other kinds give 0."""
        if self.type is JsonType.INTEGER:
            return self.value
        if self.type is JsonType.DOUBLE:
            return int(self.value)
        return 0

    def as_float(self) -> float:
        """The numeric value as a float, or 0.0 for non-numbers."""
        if self.type in (JsonType.INTEGER, JsonType.DOUBLE):
            return float(self.value)
        return 0.0

    def to_python(self) -> Any:
        """Convert to plain dicts, lists and scalars.

        For duplicate object names the first occurrence wins, as with
        item lookup.
        """
        if self.type is JsonType.OBJECT:
            result: dict = {}
            for name, item in self.value:
                result.setdefault(name, item.to_python())
            return result
        if self.type is JsonType.ARRAY:
            return [item.to_python() for item in self.value]
        return self.value