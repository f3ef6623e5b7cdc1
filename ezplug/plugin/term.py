"""
Descriptor Term Parser.

This module parses the term syntax used by plugin descriptor (.app) files.

Key features:
- Atoms (bare and quoted), strings, integers, floats, characters
- Tuples, lists and binaries
- Comments and a single terminating full stop
"""

import re
from typing import Any


class TermSyntaxError(Exception):
    """Raised when descriptor text is not a well-formed term."""

    def __init__(self, message: str, position: int):
        super().__init__(f"{message} (at offset {position})")
        self.position = position


class Atom(str):
    """A symbolic constant, kept distinct from string literals."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"Atom({str.__repr__(self)})"


_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+|%[^\n]*)
    |(?P<float>-?\d+\.\d+(?:[eE][+-]?\d+)?)
    |(?P<radix>-?\d+\#[0-9a-zA-Z]+)
    |(?P<int>-?\d+)
    |(?P<atom>[a-z][a-zA-Z0-9_@]*)
    |(?P<qatom>'(?:[^'\\]|\\.)*')
    |(?P<string>"(?:[^"\\]|\\.)*")
    |(?P<char>\$(?:\\(?:[0-7]{1,3}|x\{[0-9a-fA-F]+\}|x[0-9a-fA-F]{2}|\^.|.)|[^\\]))
    |(?P<var>[A-Z_][a-zA-Z0-9_@]*)
    |(?P<punct><<|>>|[{}\[\],|])
    |(?P<dot>\.(?=\s|%|$))
    """,
    re.VERBOSE | re.DOTALL,
)

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "s": " ",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "e": "\x1b",
    "d": "\x7f",
}


_ESCAPE_RE = re.compile(
    r"\\(?:(?P<oct>[0-7]{1,3})|x\{(?P<hexb>[0-9a-fA-F]+)\}|x(?P<hex>[0-9a-fA-F]{2})"
    r"|\^(?P<ctrl>[a-zA-Z@\[\\\]^_?])|(?P<other>.)|(?P<end>$))",
    re.DOTALL,
)


def _unescape(body: str, position: int = 0) -> str:
    def _replace(match: re.Match) -> str:
        if match.group("oct") is not None:
            return chr(int(match.group("oct"), 8))
        digits = match.group("hexb") or match.group("hex")
        if digits is not None:
            code = int(digits, 16)
            if code > 0x10FFFF:
                raise TermSyntaxError(
                    f"Escape out of range: {match.group()!r}", position
                )
            return chr(code)
        if match.group("ctrl") is not None:
            return chr(ord(match.group("ctrl")) & 0x1F)
        other = match.group("other")
        if other is None or other == "x":
            raise TermSyntaxError(f"Invalid escape: {match.group()!r}", position)
        return _ESCAPES.get(other, other)

    return _ESCAPE_RE.sub(_replace, body)


def tokenize(text: str) -> list[tuple[str, Any, int]]:
    """
    Split descriptor text into tokens.

    Args:
        text: Descriptor source text

    Returns:
        List of (kind, value, offset) tuples, whitespace and comments removed

    Raises:
        TermSyntaxError: If an unexpected character is found
    """
    tokens = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise TermSyntaxError(f"Unexpected character {text[pos]!r}", pos)

        kind = match.lastgroup
        raw = match.group()
        if kind == "ws":
            pass
        elif kind == "float":
            tokens.append(("value", float(raw), pos))
        elif kind == "radix":
            base, digits = raw.lstrip("-").split("#", 1)
            try:
                value = int(digits, int(base))
            except ValueError as e:
                raise TermSyntaxError(f"Invalid integer {raw!r}", pos) from e
            tokens.append(("value", -value if raw.startswith("-") else value, pos))
        elif kind == "int":
            tokens.append(("value", int(raw), pos))
        elif kind == "atom":
            tokens.append(("value", Atom(raw), pos))
        elif kind == "qatom":
            tokens.append(("value", Atom(_unescape(raw[1:-1], pos)), pos))
        elif kind == "string":
            tokens.append(("string", _unescape(raw[1:-1], pos), pos))
        elif kind == "char":
            tokens.append(("value", ord(_unescape(raw[1:], pos)), pos))
        elif kind == "var":
            raise TermSyntaxError(f"Variables are not allowed in terms: {raw}", pos)
        else:
            tokens.append((raw, raw, pos))
        pos = match.end()
    return tokens


class _Parser:
    def __init__(self, tokens: list[tuple[str, Any, int]], end: int):
        self._tokens = tokens
        self._index = 0
        self._end = end

    def _peek(self) -> tuple[str, Any, int]:
        if self._index < len(self._tokens):
            return self._tokens[self._index]
        return ("eof", None, self._end)

    def _take(self, kind: str | None = None) -> tuple[str, Any, int]:
        token = self._peek()
        if kind is not None and token[0] != kind:
            raise TermSyntaxError(f"Expected {kind!r}, got {token[0]!r}", token[2])
        if token[0] == "eof":
            raise TermSyntaxError("Unexpected end of input", token[2])
        self._index += 1
        return token

    def parse(self) -> Any:
        term = self._term()
        self._take(".")
        trailing = self._peek()
        if trailing[0] != "eof":
            raise TermSyntaxError("Unexpected content after term", trailing[2])
        return term

    def _term(self) -> Any:
        kind, value, pos = self._take()
        if kind == "value":
            return value
        if kind == "string":
            # Adjacent string literals form one string
            parts = [value]
            while self._peek()[0] == "string":
                parts.append(self._take()[1])
            return "".join(parts)
        if kind == "{":
            return tuple(self._sequence("}"))
        if kind == "[":
            return self._list()
        if kind == "<<":
            return self._binary()
        raise TermSyntaxError(f"Unexpected token {kind!r}", pos)

    def _sequence(self, close: str) -> list[Any]:
        items: list[Any] = []
        if self._peek()[0] == close:
            self._take()
            return items
        while True:
            items.append(self._term())
            kind, _, pos = self._take()
            if kind == close:
                return items
            if kind != ",":
                raise TermSyntaxError(f"Expected ',' or {close!r}", pos)

    def _list(self) -> list[Any]:
        items: list[Any] = []
        if self._peek()[0] == "]":
            self._take()
            return items
        while True:
            items.append(self._term())
            kind, _, pos = self._take()
            if kind == "]":
                return items
            if kind == "|":
                tail = self._term()
                self._take("]")
                if isinstance(tail, str) and not isinstance(tail, Atom):
                    tail = [ord(c) for c in tail]
                if not isinstance(tail, list):
                    raise TermSyntaxError("Improper lists are not supported", pos)
                return items + tail
            if kind != ",":
                raise TermSyntaxError("Expected ',' '|' or ']'", pos)

    def _binary(self) -> bytes:
        segments = []
        if self._peek()[0] == ">>":
            self._take()
            return b""
        while True:
            kind, value, pos = self._take()
            if kind == "string":
                segments.append(value.encode("utf-8"))
            elif kind == "value" and isinstance(value, int) and 0 <= value < 256:
                segments.append(bytes([value]))
            else:
                raise TermSyntaxError("Unsupported binary segment", pos)
            kind, _, pos = self._take()
            if kind == ">>":
                return b"".join(segments)
            if kind != ",":
                raise TermSyntaxError("Expected ',' or '>>'", pos)


def parse_term(text: str) -> Any:
    """
    Parse a single full-stop terminated term.

    Args:
        text: Descriptor source text

    Returns:
        The parsed term (Atom, str, int, float, bytes, tuple or list)

    Raises:
        TermSyntaxError: If the text is not exactly one well-formed term
    """
    return _Parser(tokenize(text), len(text)).parse()
