"""
Flat properties text format.

Parses the line-oriented ``key=value`` convention: ``#``/``!`` comment lines,
``=``, ``:`` or whitespace separators, backslash line continuation and
backslash escapes (including ``\\uXXXX``).
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping, MutableMapping
from typing import BinaryIO

DEFAULT_ENCODING = "ISO-8859-1"

_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_WHITESPACE = " \t\f"
_SEPARATORS = "=:"
_COMMENT_MARKERS = "#!"
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def _continues(line: str) -> bool:
    """A line continues when it ends in an odd number of backslashes."""
    trailing = len(line) - len(line.rstrip("\\"))
    return trailing % 2 == 1


def iter_logical_lines(text: str) -> Iterator[str]:
    """Yield logical lines with comments and blanks dropped and continuations joined."""
    lines = iter(_LINE_BREAK.split(text))
    for line in lines:
        logical = line.lstrip(_WHITESPACE)
        if not logical or logical[0] in _COMMENT_MARKERS:
            continue
        while _continues(logical):
            logical = logical[:-1]
            following = next(lines, None)
            if following is None:
                break
            logical += following.lstrip(_WHITESPACE)
        yield logical


def _unescape(text: str) -> str:
    out: list[str] = []
    saw_unicode_escape = False
    i = 0
    n = len(text)
    while i < n:
        char = text[i]
        if char != "\\":
            out.append(char)
            i += 1
            continue
        i += 1
        if i >= n:
            break
        char = text[i]
        if char == "u":
            digits = text[i + 1 : i + 5]
            if len(digits) != 4 or not set(digits) <= _HEX_DIGITS:
                raise ValueError(f"Malformed \\uxxxx encoding in '{text}'")
            out.append(chr(int(digits, 16)))
            saw_unicode_escape = True
            i += 5
            continue
        out.append(_ESCAPES.get(char, char))
        i += 1
    result = "".join(out)
    if saw_unicode_escape:
        # Join UTF-16 surrogate pairs written as two \uXXXX escapes
        result = result.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")
    return result


def split_key_value(line: str) -> tuple[str, str]:
    """
    Split one logical line into its unescaped key and value.

    The key ends at the first unescaped ``=``, ``:`` or whitespace character.
    Whitespace around the separator is skipped, and a line without a
    separator yields an empty value.
    """
    n = len(line)
    i = 0
    while i < n:
        char = line[i]
        if char == "\\":
            i += 2
            continue
        if char in _SEPARATORS or char in _WHITESPACE:
            break
        i += 1
    i = min(i, n)
    key = line[:i]

    j = i
    while j < n and line[j] in _WHITESPACE:
        j += 1
    if j < n and line[j] in _SEPARATORS:
        j += 1
        while j < n and line[j] in _WHITESPACE:
            j += 1

    return _unescape(key), _unescape(line[j:])


def parse_properties(text: str) -> dict[str, str]:
    """Parse properties text into a dict. Later keys overwrite earlier ones."""
    properties: dict[str, str] = {}
    for line in iter_logical_lines(text):
        key, value = split_key_value(line)
        properties[key] = value
    return properties


def load_properties(
    stream: BinaryIO,
    target: MutableMapping[str, str],
    encoding: str = DEFAULT_ENCODING,
) -> MutableMapping[str, str]:
    """
    Read properties from a byte stream and merge them into target.

    Args:
        stream: Binary stream holding properties text
        target: Mapping updated in place (overwrite by key)
        encoding: Byte encoding of the stream (default: ISO-8859-1)

    Returns:
        The updated target mapping

    Raises:
        OSError: If the stream cannot be read
        ValueError: If the bytes cannot be decoded or an escape is malformed
    """
    text = stream.read().decode(encoding)
    target.update(parse_properties(text))
    return target


def _escape(text: str, *, is_key: bool) -> str:
    out: list[str] = []
    for index, char in enumerate(text):
        if char == "\\":
            out.append("\\\\")
        elif char == "\n":
            out.append("\\n")
        elif char == "\r":
            out.append("\\r")
        elif char == "\t":
            out.append("\\t")
        elif char == "\f":
            out.append("\\f")
        elif char == " " and (is_key or index == 0):
            out.append("\\ ")
        elif char in "=:#!" and (is_key or index == 0):
            out.append("\\" + char)
        elif not " " <= char <= "~":
            # Outside printable ASCII; UTF-16 code units so the text stays ISO-8859-1 safe
            units = char.encode("utf-16-be", "surrogatepass")
            out.extend(f"\\u{int.from_bytes(units[i : i + 2], 'big'):04X}" for i in range(0, len(units), 2))
        else:
            out.append(char)
    return "".join(out)


def dump_properties(properties: Mapping[str, str]) -> str:
    """Render a mapping as properties text, one ``key=value`` line per entry."""
    return "".join(f"{_escape(k, is_key=True)}={_escape(v, is_key=False)}\n" for k, v in properties.items())
