"""Reader for Java-style ``.properties`` policy files.

Only the parts of the format that policy files use are implemented, which in
practice covers everything ``java.util.Properties`` accepts:

* ``key=value``, ``key: value`` and ``key value`` assignments.
* Comment lines starting with ``#`` or ``!``.
* Backslash line continuation (leading whitespace on the next line dropped).
* ``\\t``, ``\\n``, ``\\r``, ``\\f`` and ``\\uXXXX`` escapes.

Example
-------
>>> parse_properties("fileAgeDays = 7\\n# comment\\nfilePattern:*.log;*.txt")
{'fileAgeDays': '7', 'filePattern': '*.log;*.txt'}
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Iterator, List, Tuple

_COMMENT_PATTERN = re.compile(r"^\s*[#!]")
_TRAILING_BACKSLASHES = re.compile(r"(\\+)$")
_KEY_TERMINATORS = frozenset("=: \t\f")
_SEPARATORS = frozenset("=:")
_WHITESPACE = frozenset(" \t\f")
_SIMPLE_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


class PropertiesSyntaxError(ValueError):
    """Raised when a properties document contains an invalid escape."""

    def __init__(self, line_number: int, message: str) -> None:
        self.line_number = line_number
        super().__init__(f"line {line_number}: {message}")


def _continues(line: str) -> bool:
    match = _TRAILING_BACKSLASHES.search(line)
    return bool(match) and len(match.group(1)) % 2 == 1


def _iter_logical_lines(text: str) -> Iterator[Tuple[int, str]]:
    buffer: List[str] = []
    start = 0
    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.lstrip(" \t\f") if buffer else raw
        if not buffer:
            if not line.strip() or _COMMENT_PATTERN.match(line):
                continue
            start = number
        if _continues(line):
            buffer.append(line[:-1])
            continue
        buffer.append(line)
        yield start, "".join(buffer)
        buffer = []
    if buffer:
        yield start, "".join(buffer)


def _unescape(value: str, line_number: int) -> str:
    if "\\" not in value:
        return value
    result: List[str] = []
    index = 0
    length = len(value)
    while index < length:
        char = value[index]
        if char != "\\":
            result.append(char)
            index += 1
            continue
        index += 1
        if index >= length:
            break
        code = value[index]
        if code == "u":
            digits = value[index + 1:index + 5]
            if len(digits) != 4 or not re.fullmatch(r"[0-9a-fA-F]{4}", digits):
                raise PropertiesSyntaxError(line_number, f"malformed \\uXXXX escape: \\u{digits}")
            result.append(chr(int(digits, 16)))
            index += 5
            continue
        result.append(_SIMPLE_ESCAPES.get(code, code))
        index += 1
    return "".join(result)


def _split_assignment(line: str) -> Tuple[str, str]:
    text = line.lstrip(" \t\f")
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char in _KEY_TERMINATORS:
            break
        index += 1
    key = text[:index]
    while index < length and text[index] in _WHITESPACE:
        index += 1
    if index < length and text[index] in _SEPARATORS:
        index += 1
        while index < length and text[index] in _WHITESPACE:
            index += 1
    return key, text[index:]


def parse_properties(text: str) -> Dict[str, str]:
    """Parse ``text`` into a key/value mapping; later keys override earlier ones."""

    properties: Dict[str, str] = {}
    for line_number, line in _iter_logical_lines(text):
        raw_key, raw_value = _split_assignment(line)
        key = _unescape(raw_key, line_number)
        if not key:
            continue
        properties[key] = _unescape(raw_value, line_number)
    return properties


def load_properties(path: Path) -> Dict[str, str]:
    """Read ``path`` as ISO-8859-1 text, the encoding properties files use."""

    text = Path(path).read_text(encoding="latin-1")
    return parse_properties(text)


__all__ = ["PropertiesSyntaxError", "load_properties", "parse_properties"]
