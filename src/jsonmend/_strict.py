"""
Strict RFC 8259 reader used as the validate/reload fast path.

Well-formed input is decoded straight into the repair engine's value tree
(integers stay raw, objects keep insertion order), so valid JSON never pays
for the heuristics. Anything the grammar rejects raises JSONDecodeError
with a precise position, and the caller falls back to repairing.
"""

from dataclasses import dataclass
from enum import Enum

from ._errors import JSONDecodeError
from ._errors import Position
from ._values import OrderedObject
from ._values import RawNumber
from ._values import TreeValue
from ._values import format_float

_WHITESPACE = frozenset(" \t\n\r")
_DIGITS = frozenset("0123456789")
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_SIMPLE_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}
_LITERALS: dict[str, TreeValue] = {"true": True, "false": False, "null": None}


class TokenKind(Enum):
    """Lexical categories produced by JsonLexer."""

    PUNCTUATION = "punctuation"
    STRING = "string"
    NUMBER = "number"
    LITERAL = "literal"


@dataclass(frozen=True)
class JsonToken:
    """A lexed token with its source span."""

    kind: TokenKind
    value: str
    start: Position
    end: Position


class JsonLexer:
    """
    Tokenizes strictly valid JSON text.

    Character-by-character scanning over code points; raises on the first
    deviation from the grammar.
    """

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.length = len(text)

    def peek(self) -> str:
        """Returns current character without advancing."""
        return self.text[self.pos] if self.pos < self.length else ""

    def advance(self) -> str:
        char = self.peek()
        if self.pos < self.length:
            self.pos += 1
        return char

    def skip_whitespace(self) -> None:
        while self.pos < self.length and self.text[self.pos] in _WHITESPACE:
            self.pos += 1

    def scan_string(self) -> JsonToken:
        """Scans a string token including its quotes, validating escapes."""
        start = self.pos
        if self.advance() != '"':
            raise JSONDecodeError("Expected string", self.text, start)

        while self.pos < self.length:
            char = self.advance()
            if char == '"':
                return JsonToken(
                    TokenKind.STRING, self.text[start : self.pos], start, self.pos
                )
            if char == "\\":
                self._scan_escape(start)
            elif char < " ":
                raise JSONDecodeError(
                    "Invalid control character at", self.text, self.pos - 1
                )

        raise JSONDecodeError(
            "Unterminated string starting at", self.text, start
        )

    def _scan_escape(self, start: Position) -> None:
        escape_pos = self.pos - 1
        char = self.advance()
        if char in _SIMPLE_ESCAPES:
            return
        if char == "u":
            digits = self.text[self.pos : self.pos + 4]
            if len(digits) == 4 and all(c in _HEX_DIGITS for c in digits):
                self.pos += 4
                return
            raise JSONDecodeError("Invalid \\uXXXX escape", self.text, escape_pos)
        if not char:
            raise JSONDecodeError(
                "Unterminated string starting at", self.text, start
            )
        raise JSONDecodeError("Invalid \\escape", self.text, escape_pos)

    def _scan_integer_part(self, start: Position) -> None:
        if self.peek() not in _DIGITS:
            raise JSONDecodeError("Expecting value", self.text, start)

        if self.peek() == "0":
            self.advance()
            if self.peek() in _DIGITS:
                raise JSONDecodeError(
                    "Leading zeros not allowed", self.text, start
                )
        else:
            while self.peek() in _DIGITS:
                self.advance()

    def _scan_decimal_part(self, start: Position) -> None:
        if self.peek() == ".":
            self.advance()
            if self.peek() not in _DIGITS:
                raise JSONDecodeError(
                    "Invalid decimal number", self.text, start
                )
            while self.peek() in _DIGITS:
                self.advance()

    def _scan_exponent_part(self, start: Position) -> None:
        if self.peek() in ("e", "E"):
            self.advance()
            if self.peek() in ("+", "-"):
                self.advance()
            if self.peek() not in _DIGITS:
                raise JSONDecodeError("Invalid exponent", self.text, start)
            while self.peek() in _DIGITS:
                self.advance()

    def scan_number(self) -> JsonToken:
        """Scans a number token; the raw text becomes a RawNumber."""
        start = self.pos
        if self.peek() == "-":
            self.advance()

        self._scan_integer_part(start)
        self._scan_decimal_part(start)
        self._scan_exponent_part(start)

        return JsonToken(
            TokenKind.NUMBER, self.text[start : self.pos], start, self.pos
        )

    def scan_literal(self) -> JsonToken:
        """Scans literal tokens: true, false, null."""
        start = self.pos
        for literal in _LITERALS:
            if self.text.startswith(literal, self.pos):
                self.pos += len(literal)
                return JsonToken(TokenKind.LITERAL, literal, start, self.pos)
        raise JSONDecodeError("Expecting value", self.text, start)

    def next_token(self) -> JsonToken | None:
        """Returns the next token or None if at end."""
        self.skip_whitespace()

        if self.pos >= self.length:
            return None

        char = self.peek()
        start = self.pos

        if char in "{}[],:":
            self.advance()
            return JsonToken(TokenKind.PUNCTUATION, char, start, self.pos)
        if char == '"':
            return self.scan_string()
        if char in _DIGITS or char == "-":
            return self.scan_number()
        if char in "tfn":
            return self.scan_literal()
        raise JSONDecodeError("Expecting value", self.text, self.pos)


class JsonParser:
    """
    Recursive descent over the token stream, building the value tree.

    Duplicate keys overwrite earlier values in place, keeping the key's
    first position.
    """

    def __init__(self, lexer: JsonLexer):
        self.lexer = lexer
        self.current_token: JsonToken | None = None

    def advance_token(self) -> JsonToken | None:
        self.current_token = self.lexer.next_token()
        return self.current_token

    def _is_punctuation(self, value: str) -> bool:
        token = self.current_token
        return (
            token is not None
            and token.kind is TokenKind.PUNCTUATION
            and token.value == value
        )

    def _error_pos(self) -> Position:
        if self.current_token:
            return self.current_token.start
        return self.lexer.pos

    def expect_token(self, expected_value: str) -> JsonToken:
        """Expects a specific punctuation token and advances past it."""
        token = self.current_token
        if token is None or not self._is_punctuation(expected_value):
            raise JSONDecodeError(
                f"Expecting '{expected_value}' delimiter",
                self.lexer.text,
                self._error_pos(),
            )
        self.advance_token()
        return token

    def parse_value(self) -> TreeValue:
        token = self.current_token
        if token is None:
            raise JSONDecodeError(
                "Expecting value", self.lexer.text, self.lexer.pos
            )

        if token.kind is TokenKind.LITERAL:
            self.advance_token()
            return _LITERALS[token.value]
        if token.kind is TokenKind.STRING:
            self.advance_token()
            return decode_string_token(token.value)
        if token.kind is TokenKind.NUMBER:
            self.advance_token()
            return _number_value(token.value)
        if token.value == "{":
            return self.parse_object()
        if token.value == "[":
            return self.parse_array()
        raise JSONDecodeError("Expecting value", self.lexer.text, token.start)

    def _parse_object_key(self) -> str:
        token = self.current_token
        if token is None or token.kind is not TokenKind.STRING:
            raise JSONDecodeError(
                "Expecting property name enclosed in double quotes",
                self.lexer.text,
                self._error_pos(),
            )
        self.advance_token()
        return decode_string_token(token.value)

    def _continue_container(self, closing: str, kind: str) -> bool:
        """Consumes ',' or the closing bracket; True when another item follows."""
        if self._is_punctuation(closing):
            self.advance_token()
            return False
        if not self._is_punctuation(","):
            raise JSONDecodeError(
                "Expecting ',' delimiter", self.lexer.text, self._error_pos()
            )
        comma_pos = self._error_pos()
        self.advance_token()
        if self._is_punctuation(closing):
            raise JSONDecodeError(
                f"Illegal trailing comma before end of {kind}",
                self.lexer.text,
                comma_pos,
            )
        return True

    def parse_object(self) -> OrderedObject:
        self.expect_token("{")
        obj = OrderedObject()

        if self._is_punctuation("}"):
            self.advance_token()
            return obj

        while True:
            key = self._parse_object_key()
            self.expect_token(":")
            obj.set(key, self.parse_value())
            if not self._continue_container("}", "object"):
                return obj

    def parse_array(self) -> list[TreeValue]:
        self.expect_token("[")
        values: list[TreeValue] = []

        if self._is_punctuation("]"):
            self.advance_token()
            return values

        while True:
            values.append(self.parse_value())
            if not self._continue_container("]", "array"):
                return values


def _number_value(raw: str) -> RawNumber:
    # Floats share the repair path's rendering; out-of-range ones stay raw
    if any(c in raw for c in ".eE"):
        return RawNumber(format_float(raw) or raw)
    return RawNumber(raw)


def decode_string_token(raw: str) -> str:
    """Decodes a validated string token (quotes included) to its text."""
    inner = raw[1:-1]
    if "\\" not in inner:
        return inner

    result: list[str] = []
    i = 0
    while i < len(inner):
        char = inner[i]
        if char != "\\":
            result.append(char)
            i += 1
            continue
        escape = inner[i + 1]
        if escape != "u":
            result.append(_SIMPLE_ESCAPES[escape])
            i += 2
            continue
        code_point = int(inner[i + 2 : i + 6], 16)
        i += 6
        # Join a UTF-16 surrogate pair into a single code point
        if 0xD800 <= code_point <= 0xDBFF and inner.startswith("\\u", i):
            low = int(inner[i + 2 : i + 6], 16)
            if 0xDC00 <= low <= 0xDFFF:
                code_point = 0x10000 + ((code_point - 0xD800) << 10) + (
                    low - 0xDC00
                )
                i += 6
        result.append(chr(code_point))
    return "".join(result)


def decode(text: str) -> TreeValue:
    """
    Decodes strictly valid JSON into the value tree.

    Raises JSONDecodeError for anything RFC 8259 rejects, including a
    leading byte order mark and data after the first value.
    """
    if text.startswith("\ufeff"):
        raise JSONDecodeError(
            "JSON input should not contain BOM (Byte Order Mark)", text, 0
        )

    lexer = JsonLexer(text)
    parser = JsonParser(lexer)
    parser.advance_token()

    result = parser.parse_value()

    if parser.current_token:
        raise JSONDecodeError("Extra data", text, parser.current_token.start)

    return result
