"""Repair of truncated JSON prefixes from streaming responses.

A model streaming JSON produces text that is almost never valid until the
last token arrives. ``repair`` closes whatever is still open so the prefix
can be parsed, keeping every fully-formed value seen so far:

    >>> repair('{"name": "Alice", "tags": ["a", "b')
    '{"name": "Alice", "tags": ["a", "b"]}'

A trailing member that cannot be completed without guessing (a key with no
value yet, ``tr`` of ``true``, ``1.`` of ``1.5``) is dropped rather than
invented. Only truncation is handled. Arbitrary corruption is passed through
and will still fail to parse.
"""

from __future__ import annotations

import json
import re
from enum import Enum, auto
from typing import Any

_JSON_WHITESPACE = " \t\n\r"
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_COMPLETE_SCALAR = re.compile(r"true|false|null|-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")
_NUMBER_PREFIX = re.compile(r"-|-?(?:0|[1-9]\d*)(?:\.\d*)?(?:(?<=\d)[eE][+-]?\d*)?")
_LITERALS = ("true", "false", "null")


def _is_scalar_prefix(token: str) -> bool:
    return any(literal.startswith(token) for literal in _LITERALS) or bool(_NUMBER_PREFIX.fullmatch(token))


class Bracket(Enum):
    OBJECT = "}"
    ARRAY = "]"

    @property
    def closer(self) -> str:
        return self.value


class _Expect(Enum):
    KEY = auto()
    COLON = auto()
    VALUE = auto()
    SCALAR = auto()  # inside a bare number or literal
    AFTER = auto()  # a complete member was just read


_OPENERS = {"{": Bracket.OBJECT, "[": Bracket.ARRAY}
_CLOSERS = {"}": Bracket.OBJECT, "]": Bracket.ARRAY}


class _ScanState:
    """Scan state for one pass over the input."""

    __slots__ = (
        "in_string",
        "string_is_key",
        "pending_escape",
        "unicode_left",
        "escape_start",
        "expect",
        "cut",
        "scalar_start",
        "stack",
    )

    def __init__(self) -> None:
        self.in_string = False
        self.string_is_key = False
        self.pending_escape = False
        # hex digits still expected by an open \uXXXX escape
        self.unicode_left = 0
        # position of the backslash that opened the current escape
        self.escape_start = -1
        self.expect = _Expect.VALUE
        # truncating the output here drops the current, possibly unfinished member
        self.cut = 0
        self.scalar_start = 0
        self.stack: list[Bracket] = []

    @property
    def escape_incomplete(self) -> bool:
        return self.in_string and (self.pending_escape or self.unicode_left > 0)

    def open(self, bracket: Bracket, position: int) -> None:
        self.stack.append(bracket)
        self.expect = _Expect.KEY if bracket is Bracket.OBJECT else _Expect.VALUE
        self.cut = position + 1

    def close(self, bracket: Bracket) -> None:
        """Pop ``bracket`` off the stack.

        A mismatched closer pops the top entry and then, if the entry beneath
        matches, that one too: ``{"a": [1}`` closes both the array and the
        object. This is a lossy heuristic, not grammar-correct recovery.
        """
        self.expect = _Expect.AFTER
        if not self.stack:
            return
        if self.stack[-1] is bracket:
            self.stack.pop()
            return
        self.stack.pop()
        if self.stack and self.stack[-1] is bracket:
            self.stack.pop()

    def separate(self, position: int) -> None:
        in_object = bool(self.stack) and self.stack[-1] is Bracket.OBJECT
        self.expect = _Expect.KEY if in_object else _Expect.VALUE
        self.cut = position

    def end_string(self) -> None:
        self.in_string = False
        self.expect = _Expect.COLON if self.string_is_key else _Expect.AFTER


def _drop_dangling_comma(out: list[str]) -> None:
    i = len(out) - 1
    while i >= 0 and out[i] in _JSON_WHITESPACE:
        i -= 1
    if i >= 0 and out[i] == ",":
        del out[i]


def repair(text: str) -> str:
    """Return a syntactically valid JSON string for a truncated JSON prefix.

    Never raises. The empty string repairs to ``{}``.
    """
    if not text:
        return "{}"

    state = _ScanState()
    out: list[str] = []

    for char in text:
        if state.in_string:
            if state.pending_escape:
                state.pending_escape = False
                if char == "u":
                    state.unicode_left = 4
            elif state.unicode_left and char in _HEX_DIGITS:
                state.unicode_left -= 1
            else:
                state.unicode_left = 0
                if char == "\\":
                    state.pending_escape = True
                    state.escape_start = len(out)
                elif char == '"':
                    state.end_string()
        elif char == '"':
            state.in_string = True
            state.string_is_key = state.expect is _Expect.KEY
        elif char in _OPENERS:
            state.open(_OPENERS[char], len(out))
        elif char in _CLOSERS:
            # Only backward edit during the scan: removes an already-emitted comma.
            _drop_dangling_comma(out)
            state.close(_CLOSERS[char])
            if not state.stack:
                state.cut = len(out) + 1
        elif char == ",":
            state.separate(len(out))
        elif char == ":":
            state.expect = _Expect.VALUE
        elif char in _JSON_WHITESPACE:
            if state.expect is _Expect.SCALAR:
                state.expect = _Expect.AFTER
                if not state.stack:
                    state.cut = len(out)
        elif state.expect is not _Expect.SCALAR:
            state.expect = _Expect.SCALAR
            state.scalar_start = len(out)
        out.append(char)

    if state.in_string:
        if state.escape_incomplete:
            del out[state.escape_start :]
        out.append('"')
        state.end_string()

    if state.expect is _Expect.SCALAR:
        token = "".join(out[state.scalar_start :])
        # a token that cannot grow into a scalar is corruption and is left to fail parsing
        if _COMPLETE_SCALAR.fullmatch(token) or not _is_scalar_prefix(token):
            state.expect = _Expect.AFTER
    if state.expect is not _Expect.AFTER:
        del out[state.cut :]

    result = "".join(out).rstrip(_JSON_WHITESPACE)
    if result.endswith(","):
        result = result[:-1]

    closers = "".join(bracket.closer for bracket in reversed(state.stack))
    return (result + closers) or "{}"


def parse(text: str) -> Any:
    """Repair ``text`` and parse it into a JSON tree.

    Raises ``json.JSONDecodeError`` if the repaired text still is not JSON.
    """
    return json.loads(repair(text))


def try_parse(text: str) -> Any | None:
    """Like ``parse`` but returns None when the text cannot be repaired."""
    try:
        return parse(text)
    except json.JSONDecodeError:
        return None
