"""A small, forgiving JSON parser producing :class:`JsonValue` trees.

The grammar is slightly looser than strict JSON: trailing commas in arrays
and objects are accepted, unknown escapes stand for the escaped character,
a NUL byte ends the document, and ``//`` and ``/* */`` comments may be
enabled through :class:`JsonSettings`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Union

from ssrtools.jsonvalue import JsonType, JsonValue

__all__ = ["JsonSettings", "JsonParseError", "parse", "parse_ex"]

# Parser state bits.
_NEXT = 1 << 0
_REPROC = 1 << 1
_NEED_COMMA = 1 << 2
_SEEK_VALUE = 1 << 3
_ESCAPED = 1 << 4
_STRING = 1 << 5
_NEED_COLON = 1 << 6
_DONE = 1 << 7
_NUM_NEGATIVE = 1 << 8
_NUM_ZERO = 1 << 9
_NUM_E = 1 << 10
_NUM_E_GOT_SIGN = 1 << 11
_NUM_E_NEGATIVE = 1 << 12
_LINE_COMMENT = 1 << 13
_BLOCK_COMMENT = 1 << 14

# Memory accounting, in bytes, for the limit in JsonSettings.max_memory.
_VALUE_SIZE = 40
_POINTER_SIZE = 8
_OBJECT_ENTRY_SIZE = 24
_LENGTH_LIMIT = 0xFFFFFFFF - 8

_WHITESPACE = frozenset(b" \t\r\n")
_SIMPLE_ESCAPES = {
    ord("b"): 0x08,
    ord("f"): 0x0C,
    ord("n"): 0x0A,
    ord("r"): 0x0D,
    ord("t"): 0x09,
}
_BOM = b"\xef\xbb\xbf"


@dataclass
class JsonSettings:
    """Options for :func:`parse_ex`.

    ``max_memory`` of 0 means no limit.
    """

    max_memory: int = 0
    enable_comments: bool = False


class JsonParseError(ValueError):
    """Raised when a document cannot be parsed."""

    def __init__(self, message: str, line: Optional[int] = None,
                 column: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column


@dataclass
class _Frame:
    value: JsonValue
    key: Optional[str] = None


def _wrap64(number: int) -> int:
    number &= 0xFFFFFFFFFFFFFFFF
    return number - (1 << 64) if number >= 1 << 63 else number


def _pow10(exponent: int) -> float:
    try:
        return 10.0 ** exponent
    except OverflowError:
        return math.inf


def _hex_value(byte: int) -> Optional[int]:
    char = chr(byte)
    if char in "0123456789abcdefABCDEF" and byte:
        return int(char, 16)
    return None


def _is_digit(byte: int) -> bool:
    return 0x30 <= byte <= 0x39


def _decode(raw: bytearray) -> str:
    try:
        return raw.decode("utf-8", "surrogatepass")
    except UnicodeDecodeError:
        return raw.decode("utf-8", "replace")


def _fail(message: str, line: Optional[int] = None,
          column: Optional[int] = None) -> JsonParseError:
    # A NUL character in a message ends it, as the formatted text would.
    return JsonParseError(message.split("\0", 1)[0], line, column)


class _Parser:
    def __init__(self, settings: JsonSettings, data: bytes) -> None:
        self.settings = settings
        self.data = data
        self.used = 0

    def _charge(self, size: int) -> None:
        self.used += size
        if self.settings.max_memory and self.used > self.settings.max_memory:
            raise _fail("Memory allocation failure")

    def _push(self, stack: List[_Frame], kind: JsonType, value=None) -> JsonValue:
        self._charge(_VALUE_SIZE)
        node = JsonValue(kind, value)
        stack.append(_Frame(node))
        return node

    def run(self) -> JsonValue:
        data = self.data
        n = len(data)
        comments = self.settings.enable_comments
        stack: List[_Frame] = []
        extra = 0
        flags = _SEEK_VALUE
        line = 1
        line_begin = 0
        buf = bytearray()
        num_digits = num_e = num_fraction = 0
        i = -1

        def where() -> str:
            return f"{line}:{i - line_begin}"

        def error(text: str) -> JsonParseError:
            return _fail(f"{where()}: {text}", line, i - line_begin)

        while True:
            i += 1
            b = data[i] if i < n else 0
            ch = chr(b)

            if flags & _STRING:
                if not b:
                    raise _fail(f"Unexpected EOF in string (at {where()})",
                                line, i - line_begin)
                if len(buf) > _LENGTH_LIMIT:
                    raise error("Too long (caught overflow)")
                if flags & _ESCAPED:
                    flags &= ~_ESCAPED
                    if b in _SIMPLE_ESCAPES:
                        buf.append(_SIMPLE_ESCAPES[b])
                    elif b == 0x75:
                        if n - i < 4:
                            raise _fail(
                                f"Invalid character value `u` (at {where()})",
                                line, i - line_begin)
                        code = 0
                        for _ in range(4):
                            i += 1
                            digit = _hex_value(data[i] if i < n else 0)
                            if digit is None:
                                raise _fail(
                                    f"Invalid character value `u` (at {where()})",
                                    line, i - line_begin)
                            code = code * 16 + digit
                        buf += chr(code).encode("utf-8", "surrogatepass")
                    else:
                        buf.append(b)
                    continue
                if b == 0x5C:
                    flags |= _ESCAPED
                    continue
                if b != 0x22:
                    buf.append(b)
                    continue
                flags &= ~_STRING
                frame = stack[-1]
                extra += len(buf) + 1
                if frame.value.type is JsonType.STRING:
                    frame.value.value = _decode(buf)
                    flags |= _NEXT
                else:
                    frame.key = _decode(buf)
                    flags |= _SEEK_VALUE | _NEED_COLON
                    continue

            if comments:
                if flags & _LINE_COMMENT:
                    if b in (0x0D, 0x0A, 0):
                        flags &= ~_LINE_COMMENT
                        i -= 1
                    continue
                if flags & _BLOCK_COMMENT:
                    if not b:
                        raise error("Unexpected EOF in block comment")
                    if b == 0x2A and i < n - 1 and data[i + 1] == 0x2F:
                        flags &= ~_BLOCK_COMMENT
                        i += 1
                    continue
                if b == 0x2F:
                    if (not flags & (_SEEK_VALUE | _DONE)
                            and stack[-1].value.type is not JsonType.OBJECT):
                        raise error("Comment not allowed here")
                    i += 1
                    if i == n:
                        raise error("EOF unexpected")
                    b = data[i]
                    if b == 0x2F:
                        flags |= _LINE_COMMENT
                        continue
                    if b == 0x2A:
                        flags |= _BLOCK_COMMENT
                        continue
                    raise error(f"Unexpected `{chr(b)}` in comment opening sequence")

            if flags & _DONE:
                if not b:
                    break
                if b in _WHITESPACE:
                    if b == 0x0A:
                        line += 1
                        line_begin = i
                    continue
                raise error(f"Trailing garbage: `{ch}`")

            if flags & _SEEK_VALUE:
                if b in _WHITESPACE:
                    if b == 0x0A:
                        line += 1
                        line_begin = i
                    continue
                if b == 0x5D:
                    if stack and stack[-1].value.type is JsonType.ARRAY:
                        flags = (flags & ~(_NEED_COMMA | _SEEK_VALUE)) | _NEXT
                    else:
                        raise error("Unexpected ]")
                else:
                    if flags & _NEED_COMMA:
                        if b == 0x2C:
                            flags &= ~_NEED_COMMA
                            continue
                        raise error(f"Expected , before {ch}")
                    if flags & _NEED_COLON:
                        if b == 0x3A:
                            flags &= ~_NEED_COLON
                            continue
                        raise error(f"Expected : before {ch}")
                    flags &= ~_SEEK_VALUE
                    if b == 0x7B:
                        self._push(stack, JsonType.OBJECT)
                        continue
                    if b == 0x5B:
                        self._push(stack, JsonType.ARRAY)
                        flags |= _SEEK_VALUE
                        continue
                    if b == 0x22:
                        self._push(stack, JsonType.STRING)
                        flags |= _STRING
                        buf = bytearray()
                        continue
                    literal = {0x74: (b"rue", JsonType.BOOLEAN, True),
                               0x66: (b"alse", JsonType.BOOLEAN, False),
                               0x6E: (b"ull", JsonType.NULL, None)}.get(b)
                    if literal is not None:
                        rest, kind, value = literal
                        if n - i < len(rest):
                            raise error("Unknown value")
                        for expected in rest:
                            i += 1
                            if i >= n or data[i] != expected:
                                raise error("Unknown value")
                        self._push(stack, kind, value)
                        flags |= _NEXT
                    elif _is_digit(b) or b == 0x2D:
                        self._push(stack, JsonType.INTEGER, 0)
                        flags &= ~(_NUM_NEGATIVE | _NUM_E | _NUM_E_GOT_SIGN
                                   | _NUM_E_NEGATIVE | _NUM_ZERO)
                        num_digits = num_fraction = num_e = 0
                        if b != 0x2D:
                            flags |= _REPROC
                        else:
                            flags |= _NUM_NEGATIVE
                            continue
                    else:
                        raise error(f"Unexpected {ch} when seeking value")
            else:
                node = stack[-1].value
                if node.type is JsonType.OBJECT:
                    if b in _WHITESPACE:
                        if b == 0x0A:
                            line += 1
                            line_begin = i
                        continue
                    if b == 0x22:
                        if flags & _NEED_COMMA:
                            raise error('Expected , before "')
                        flags |= _STRING
                        buf = bytearray()
                    elif b == 0x7D:
                        flags = (flags & ~_NEED_COMMA) | _NEXT
                    elif b == 0x2C and flags & _NEED_COMMA:
                        flags &= ~_NEED_COMMA
                    else:
                        raise error(f"Unexpected `{ch}` in object")
                elif node.type in (JsonType.INTEGER, JsonType.DOUBLE):
                    if _is_digit(b):
                        digit = b - 0x30
                        num_digits += 1
                        if node.type is JsonType.INTEGER or flags & _NUM_E:
                            if flags & _NUM_E:
                                flags |= _NUM_E_GOT_SIGN
                                num_e = _wrap64(num_e * 10 + digit)
                                continue
                            if flags & _NUM_ZERO:
                                raise error(f"Unexpected `0` before `{ch}`")
                            if num_digits == 1 and b == 0x30:
                                flags |= _NUM_ZERO
                            node.value = _wrap64(node.value * 10 + digit)
                            continue
                        num_fraction = _wrap64(num_fraction * 10 + digit)
                        continue
                    if b in (0x2B, 0x2D):
                        if flags & _NUM_E and not flags & _NUM_E_GOT_SIGN:
                            flags |= _NUM_E_GOT_SIGN
                            if b == 0x2D:
                                flags |= _NUM_E_NEGATIVE
                            continue
                    elif b == 0x2E and node.type is JsonType.INTEGER:
                        if not num_digits:
                            raise error("Expected digit before `.`")
                        node.type = JsonType.DOUBLE
                        node.value = float(node.value)
                        num_digits = 0
                        continue
                    if not flags & _NUM_E:
                        if node.type is JsonType.DOUBLE:
                            if not num_digits:
                                raise error("Expected digit after `.`")
                            node.value += float(num_fraction) / _pow10(num_digits)
                        if b in (0x65, 0x45):
                            flags |= _NUM_E
                            if node.type is JsonType.INTEGER:
                                node.type = JsonType.DOUBLE
                                node.value = float(node.value)
                            num_digits = 0
                            flags &= ~_NUM_ZERO
                            continue
                    else:
                        if not num_digits:
                            raise error("Expected digit after `e`")
                        exponent = -num_e if flags & _NUM_E_NEGATIVE else num_e
                        node.value *= _pow10(exponent)
                    if flags & _NUM_NEGATIVE:
                        if node.type is JsonType.INTEGER:
                            node.value = _wrap64(-node.value)
                        else:
                            node.value = -node.value
                    flags |= _NEXT | _REPROC

            if flags & _REPROC:
                flags &= ~_REPROC
                i -= 1

            if flags & _NEXT:
                flags = (flags & ~_NEXT) | _NEED_COMMA
                if len(stack) == 1:
                    flags |= _DONE
                    continue
                frame = stack.pop()
                parent = stack[-1]
                if parent.value.type is JsonType.ARRAY:
                    flags |= _SEEK_VALUE
                    parent.value.value.append(frame.value)
                    extra += _POINTER_SIZE
                else:
                    parent.value.value.append((parent.key or "", frame.value))
                    parent.key = None
                    extra += _OBJECT_ENTRY_SIZE
                if len(parent.value.value) > _LENGTH_LIMIT:
                    raise error("Too long (caught overflow)")
                continue

        self._charge(extra)
        return stack[0].value


def parse_ex(settings: Optional[JsonSettings],
             data: Union[str, bytes, bytearray]) -> JsonValue:
    """Parse ``data`` with ``settings``; raise :class:`JsonParseError` on failure."""
    if settings is None:
        settings = JsonSettings()
    raw = data.encode("utf-8", "surrogatepass") if isinstance(data, str) else bytes(data)
    if raw.startswith(_BOM):
        raw = raw[len(_BOM):]
    return _Parser(settings, raw).run()


def parse(data: Union[str, bytes, bytearray],
          settings: Optional[JsonSettings] = None) -> JsonValue:
    """Parse ``data``, with default settings unless others are given."""
    return parse_ex(settings, data)