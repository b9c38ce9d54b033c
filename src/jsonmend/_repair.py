"""
Fault-tolerant recursive descent parser for malformed JSON.

RepairParser walks the input with a single cursor and never gives up on
bad structure: missing quotes, brackets and commas are inferred from the
surrounding context, stray text is skipped and comments are dropped. Every
recovery is reported through ``_log``, which always emits a DEBUG record
and, when requested, also appends a LogEntry to the repair log.

Strict mode turns a fixed set of recoveries into StrictModeError.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from ._context import ContextValue
from ._context import JsonContext
from ._errors import StrictModeError
from ._errors import StrictViolation
from ._profile import profiled
from ._values import OrderedObject
from ._values import RawNumber
from ._values import TreeValue
from ._values import canonical_integer
from ._values import format_float
from ._values import is_same_object
from ._values import is_strictly_empty

logger = logging.getLogger(__name__)

STRING_DELIMITERS = frozenset("\"'“”")
NUMBER_CHARS = frozenset("0123456789-.eE/,_")
HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
LOG_WINDOW = 10

_STRAY_ESCAPES = {
    "t": "\t",
    "n": "\n",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "/": "/",
}
_LITERALS: dict[str, tuple[str, TreeValue]] = {
    "t": ("true", True),
    "f": ("false", False),
    "n": ("null", None),
}

OBJECT_KEY = ContextValue.OBJECT_KEY
OBJECT_VALUE = ContextValue.OBJECT_VALUE
ARRAY = ContextValue.ARRAY


class _NoLiteral:
    """Marker for a failed true/false/null match (None is a valid result)."""

    def __repr__(self) -> str:
        return "<no literal>"


_NO_LITERAL = _NoLiteral()


class _QuoteVerdict(Enum):
    """What to do with a closing delimiter found inside a string."""

    CLOSE = "close"
    KEEP = "keep"
    TOGGLE = "toggle"
    UNDECIDED = "undecided"


_MISPLACED_QUOTE = (
    "While parsing a string, we found a misplaced quote that would have"
    " closed the string but has a different meaning here, ignoring it"
)


@dataclass(frozen=True)
class LogEntry:
    """One repair decision and the input surrounding the cursor at the time."""

    context: str
    text: str


def _is_alnum(char: str) -> bool:
    return char.isalpha() or char.isdecimal()


class RepairParser:
    """
    Cursor-based repair parser over a code-point sequence.

    ``parse`` returns the value tree built from the input; composite
    parsers push their ContextValue on entry and pop it on every exit.
    The input may grow during parsing when an opening brace is synthesized
    for a run of repeated keys inside an array.
    """

    def __init__(
        self,
        text: str,
        *,
        with_log: bool = False,
        stream_stable: bool = False,
        strict: bool = False,
    ) -> None:
        self.text = text
        self.index = 0
        self.context = JsonContext()
        self.with_log = with_log
        self.stream_stable = stream_stable
        self.strict = strict
        self.repair_log: list[LogEntry] = []
        # Array start reached by reparsing an empty object; no object there
        self._array_reparse_at = -1
        # Insertions only ever happen after the first structural character
        self._first_content = len(text) - len(text.lstrip())

    def _log(self, text: str) -> None:
        logger.debug("%s (position %d)", text, self.index)
        if self.with_log:
            start = max(self.index - LOG_WINDOW, 0)
            window = self.text[start : self.index + LOG_WINDOW]
            self.repair_log.append(LogEntry(context=window, text=text))

    def _strict_error(self, violation: StrictViolation) -> StrictModeError:
        message = violation.value
        self._log(f"{message[0].upper()}{message[1:]}, raising an error")
        return StrictModeError(violation, self.text, self.index)

    # Cursor helpers

    def _char_at(self, offset: int = 0) -> str:
        """Character at cursor + offset, or "" outside the input."""
        idx = self.index + offset
        if 0 <= idx < len(self.text):
            return self.text[idx]
        return ""

    def skip_whitespaces(self) -> None:
        while self._char_at().isspace():
            self.index += 1

    def scroll_whitespaces(self, idx: int = 0) -> int:
        """Offset of the first non-whitespace character at or after idx."""
        while self._char_at(idx).isspace():
            idx += 1
        return idx

    def skip_to_character(
        self, targets: str | tuple[str, ...], idx: int = 0
    ) -> int:
        """
        Offset of the next unescaped target character at or after idx.

        A target preceded by an odd run of backslashes is escaped and does
        not count. Returns the offset of the end of input when none is found.
        """
        text = self.text
        i = self.index + idx
        backslashes = 0
        while i < len(text):
            char = text[i]
            if char == "\\":
                backslashes += 1
                i += 1
                continue
            if char in targets and backslashes % 2 == 0:
                return i - self.index
            backslashes = 0
            i += 1
        return len(text) - self.index

    def _only_whitespace_until(self, end: int) -> bool:
        return not self.text[self.index + 1 : self.index + end].strip()

    def _only_whitespace_before(self) -> bool:
        return self.index <= self._first_content

    def _quote_closes_value(self) -> bool:
        """True when the quote under the cursor is followed by a separator."""
        after = self._char_at(self.scroll_whitespaces(1))
        return after in ("", ",", "}", "]", ":")

    def _insert_char(self, pos: int, char: str) -> None:
        pos = min(max(pos, 0), len(self.text))
        self.text = self.text[:pos] + char + self.text[pos:]

    # Top level

    def parse(self) -> TreeValue:
        """Parses the whole input, reconciling multiple top-level values."""
        json_value = self.parse_json()
        if self.index >= len(self.text):
            return json_value

        self._log(
            "The parser returned early, checking if there's more json elements"
        )
        values: list[TreeValue] = [json_value]
        while self.index < len(self.text):
            self.context.reset()
            value = self.parse_json()
            if value:
                if values and is_same_object(values[-1], value):
                    values.pop()
                elif values and not values[-1]:
                    values.pop()
                values.append(value)
            elif len(values) > 1:
                if self._char_at():
                    values.pop()
                    self.index = len(self.text)
                break
            else:
                self.index += 1

        if len(values) == 1:
            self._log(
                "There were no more elements, returning the element without"
                " the array"
            )
            return values[0]
        if self.strict:
            raise self._strict_error(StrictViolation.MULTIPLE_TOP_LEVEL)
        return values

    @profiled("parse_json")
    def parse_json(self) -> TreeValue:
        """Dispatches on the character under the cursor, skipping junk."""
        while True:
            char = self._char_at()
            if not char:
                return ""
            if char == "{":
                self.index += 1
                return self.parse_object()
            if char == "[":
                self.index += 1
                return self.parse_array()
            nested = not self.context.empty
            if nested and (char in STRING_DELIMITERS or char.isalpha()):
                return self.parse_string()
            if (char.isdecimal() or char in ("-", ".")) and (
                nested or self._only_whitespace_before()
            ):
                return self.parse_number()
            if char in ("#", "/"):
                value = self.parse_comment()
                if nested:
                    return value
                continue
            if (
                not nested
                and char in ("t", "f", "n")
                and self._only_whitespace_before()
            ):
                value = self.parse_boolean_or_null()
                if value is not _NO_LITERAL:
                    return value  # type: ignore[return-value]
            if not nested and char == ":":
                return ""
            self.index += 1

    # Composite values

    @profiled("parse_object")
    def parse_object(self) -> TreeValue:
        obj = OrderedObject()
        start_index = self.index
        key_attempted = False

        while True:
            self.skip_whitespaces()
            char = self._char_at()
            if not char or char == "}":
                break
            if char == ":":
                self._log(
                    "While parsing an object we found a : before a key, ignoring"
                )
                self.index += 1

            self.context.set(OBJECT_KEY)
            key_attempted = True
            rollback_index = self.index
            key = ""
            while self._char_at():
                rollback_index = self.index
                if self._char_at() == "[" and key == "":
                    prev_key = obj.last_key()
                    prev_value = obj.get(prev_key) if prev_key is not None else None
                    if (
                        prev_key is not None
                        and isinstance(prev_value, list)
                        and not self.strict
                    ):
                        self.index += 1
                        new_array = self.parse_array()
                        if isinstance(new_array, list):
                            obj.set(
                                prev_key, self._merge_rows(prev_value, new_array)
                            )
                        self.skip_whitespaces()
                        if self._char_at() == ",":
                            self.index += 1
                        self.skip_whitespaces()
                        continue

                raw_key = self.parse_string()
                key = raw_key if isinstance(raw_key, str) else ""
                if not key:
                    self.skip_whitespaces()
                if key or self._char_at() in (":", "}"):
                    if not key and self.strict:
                        raise self._strict_error(StrictViolation.EMPTY_KEY)
                    break

            if ARRAY in self.context and key in obj:
                if self.strict:
                    raise self._strict_error(StrictViolation.DUPLICATE_KEY)
                self._log(
                    "While parsing an object we found a duplicate key, closing"
                    " the object here and rolling back the index"
                )
                self.index = rollback_index - 1
                self._insert_char(self.index + 1, "{")
                self.context.reset()
                break

            self.skip_whitespaces()
            if self._char_at() in ("", "}"):
                self.context.reset()
                continue

            if self._char_at() != ":":
                if self.strict:
                    raise self._strict_error(StrictViolation.MISSING_COLON)
                self._log("While parsing an object we missed a : after a key")
            self.index += 1

            self.context.reset()
            self.context.set(OBJECT_VALUE)
            self.skip_whitespaces()
            char = self._char_at()
            value: TreeValue = ""
            if char in (",", "}"):
                self._log(
                    f"While parsing an object value we found a stray {char},"
                    " ignoring it"
                )
            else:
                value = self.parse_json()

            if (
                self.strict
                and value == ""
                and self._char_at(-1) not in STRING_DELIMITERS
            ):
                raise self._strict_error(StrictViolation.EMPTY_VALUE)

            self.context.reset()
            obj.set(key, value)

            if self._char_at() in (",", "'", '"'):
                self.index += 1
            if self._char_at() == "]" and ARRAY in self.context:
                self._log(
                    "While parsing an object we found a closing array bracket,"
                    " closing the object here and rolling back the index"
                )
                self.index -= 1
                break
            self.skip_whitespaces()

        self.index += 1

        if not obj:
            if self.index - start_index <= 2 or not key_attempted:
                return obj
            if self.strict:
                raise self._strict_error(StrictViolation.EMPTY_OBJECT)
            self._log(
                "Parsed object is empty, we will try to parse this as an array"
                " instead"
            )
            self.index = start_index
            previous = self._array_reparse_at
            self._array_reparse_at = self.index + self.scroll_whitespaces()
            try:
                return self.parse_array()
            finally:
                self._array_reparse_at = previous

        if not self.context.empty:
            if self._char_at() == "}" and self.context.current is ARRAY:
                self._log(
                    "Found an extra closing brace that shouldn't be there,"
                    " skipping it"
                )
                self.index += 1
            return obj

        # A comma and a key right after the closing brace continue the object
        self.skip_whitespaces()
        if self._char_at() != ",":
            return obj
        self.index += 1
        self.skip_whitespaces()
        if self._char_at() not in STRING_DELIMITERS:
            return obj
        if not self.strict:
            self._log(
                "Found a comma and string delimiter after object closing brace,"
                " checking for additional key-value pairs"
            )
            additional = self.parse_object()
            if isinstance(additional, OrderedObject):
                obj.merge(additional)
        return obj

    def _merge_rows(
        self, rows: list[TreeValue], new_array: list[TreeValue]
    ) -> list[TreeValue]:
        """
        Folds a keyless sibling array into the previous key's array.

        When the existing rows are nested arrays of one common length, any
        trailing scalars are regrouped into rows of that length first.
        """
        lengths = [len(item) for item in rows if isinstance(item, list)]
        expected = lengths[0] if lengths and len(set(lengths)) == 1 else 0

        if not expected:
            if len(new_array) == 1 and isinstance(new_array[0], list):
                rows.extend(new_array[0])
            else:
                rows.extend(new_array)
            return rows

        tail: list[TreeValue] = []
        while rows and not isinstance(rows[-1], list):
            tail.append(rows.pop())
        if tail:
            tail.reverse()
            if len(tail) % expected == 0:
                self._log(
                    "While parsing an object we found row values without an"
                    " inner array, grouping them into rows"
                )
                rows.extend(
                    tail[i : i + expected] for i in range(0, len(tail), expected)
                )
            else:
                rows.extend(tail)

        if new_array:
            if all(isinstance(item, list) for item in new_array):
                self._log(
                    "While parsing an object we found additional rows,"
                    " appending them without flattening"
                )
                rows.extend(new_array)
            else:
                rows.append(new_array)
        return rows

    @profiled("parse_array")
    def parse_array(self) -> TreeValue:
        arr: list[TreeValue] = []
        self.context.set(ARRAY)

        char = self._char_at()
        while char and char not in ("]", "}"):
            self.skip_whitespaces()
            char = self._char_at()
            if not char or char in ("]", "}"):
                break
            value: TreeValue
            if char in STRING_DELIMITERS:
                # A quoted run followed by ':' is an object missing its brace
                i = self.skip_to_character(char, 1)
                i = self.scroll_whitespaces(i + 1)
                if (
                    self._char_at(i) == ":"
                    and self.index != self._array_reparse_at
                ):
                    value = self.parse_object()
                else:
                    value = self.parse_string()
            else:
                value = self.parse_json()

            if is_strictly_empty(value):
                if self._char_at() in ("]", ","):
                    arr.append(value)
                else:
                    self.index += 1
            elif value == "..." and self._char_at(-1) == ".":
                self._log(
                    "While parsing an array, found a stray '...'; ignoring it"
                )
            else:
                arr.append(value)

            char = self._char_at()
            while char and char != "]" and (char.isspace() or char == ","):
                self.index += 1
                char = self._char_at()

        if char != "]":
            self._log(
                "While parsing an array we missed the closing ], ignoring it"
            )

        self.index += 1
        self.context.reset()
        return arr

    # Scalars

    @profiled("parse_comment")
    def parse_comment(self) -> TreeValue:
        """Skips #, // and /* */ comments; always yields an empty value."""
        char = self._char_at()
        terminators = {"\n", "\r"}
        if ARRAY in self.context:
            terminators.add("]")
        if OBJECT_VALUE in self.context:
            terminators.add("}")
        if OBJECT_KEY in self.context:
            terminators.add(":")

        if char == "#" or (char == "/" and self._char_at(1) == "/"):
            start = self.index
            while self._char_at() and self._char_at() not in terminators:
                self.index += 1
            comment = self.text[start : self.index]
            self._log(f"Found line comment: {comment}, ignoring")
        elif char == "/" and self._char_at(1) == "*":
            start = self.index
            self.index += 2
            while True:
                if not self._char_at():
                    self._log(
                        "Reached end-of-string while parsing block comment;"
                        " unclosed block comment."
                    )
                    break
                self.index += 1
                if self.text[self.index - 2 : self.index] == "*/":
                    break
            comment = self.text[start : self.index]
            self._log(f"Found block comment: {comment}, ignoring")
        elif char:
            self.index += 1
        return ""

    @profiled("parse_number")
    def parse_number(self) -> TreeValue:
        start = self.index
        chars: list[str] = []
        in_array = self.context.current is ARRAY

        char = self._char_at()
        while (
            char
            and (
                char in NUMBER_CHARS
                or (char == "+" and chars[-1:] in (["e"], ["E"]))
            )
            and (not in_array or char != "," or "/" in chars)
        ):
            if char != "_":
                chars.append(char)
            self.index += 1
            char = self._char_at()

        if char.isalpha():
            # Not a number after all, e.g. 1notanumber or a UUID
            self.index = start
            return self.parse_string()

        number = "".join(chars)
        while number and number[-1] in ("-", "+", "e", "E", "/", ","):
            number = number[:-1]
            self.index -= 1

        if "/" in number or "," in number or "-" in number[1:]:
            if "e" in number or "E" in number:
                formatted = format_float(number)
                return RawNumber(formatted) if formatted else number
            return number
        if any(c in number for c in ".eE"):
            formatted = format_float(number)
            return RawNumber(formatted) if formatted else number
        if number in ("", "-"):
            return ""
        return RawNumber(canonical_integer(number))

    @profiled("parse_boolean_or_null")
    def parse_boolean_or_null(self) -> TreeValue | _NoLiteral:
        """
        Case-insensitive true/false/null at the cursor.

        A spelling with any uppercase letter is only accepted inside a
        structure. Restores the cursor and returns _NO_LITERAL on failure.
        """
        char = self._char_at()
        literal = _LITERALS.get(char.lower())
        if literal is None:
            return _NO_LITERAL
        token, value = literal

        start = self.index
        match_upper = char.isupper()
        current = char.lower()
        matched = 0
        while matched < len(token) and current == token[matched]:
            matched += 1
            self.index += 1
            char = self._char_at()
            if not char:
                break
            if char.isupper():
                match_upper = True
            current = char.lower()

        if matched == len(token) and not (match_upper and self.context.empty):
            return value
        self.index = start
        return _NO_LITERAL

    def _parse_json_llm_block(self) -> tuple[bool, TreeValue]:
        """Parses the JSON inside a ```json fenced block at the cursor."""
        if self.text.startswith("```json", self.index):
            i = self.skip_to_character("`", 7)
            if self.text.startswith("```", self.index + i):
                self.index += 7
                return True, self.parse_json()
        return False, ""

    @profiled("parse_string")
    def parse_string(self) -> TreeValue:
        missing_quotes = False
        doubled_quotes = False
        lstring_delimiter = rstring_delimiter = '"'
        current = self.context.current

        char = self._char_at()
        if char in ("#", "/"):
            return self.parse_comment()
        while char and char not in STRING_DELIMITERS and not _is_alnum(char):
            self.index += 1
            char = self._char_at()
        if not char:
            return ""

        if char == "'":
            lstring_delimiter = rstring_delimiter = "'"
        elif char == "“":
            lstring_delimiter, rstring_delimiter = "“", "”"
        elif _is_alnum(char):
            if char.lower() in ("t", "f", "n") and current is not OBJECT_KEY:
                value = self.parse_boolean_or_null()
                if value is not _NO_LITERAL:
                    return value  # type: ignore[return-value]
            self._log(
                "While parsing a string, we found a literal instead of a quote"
            )
            missing_quotes = True

        if not missing_quotes:
            self.index += 1

        if self._char_at() == "`":
            found, value = self._parse_json_llm_block()
            if found:
                return value
            if self.context.empty:
                return ""
            self._log(
                "While parsing a string, we found code fences but they did not"
                " enclose valid JSON, continuing parsing the string"
            )

        if self._char_at() == lstring_delimiter:
            following = self._char_at(1)
            if (
                (current is OBJECT_KEY and following == ":")
                or (current is OBJECT_VALUE and following in (",", "}"))
                or (current is ARRAY and following in (",", "]"))
            ):
                self.index += 1
                return ""
            if (
                current is OBJECT_KEY
                and self._char_at(self.scroll_whitespaces(1)) == ":"
            ):
                self.index += 1
                return ""
            if following == lstring_delimiter:
                self._log(
                    "While parsing a string, we found a doubled quote and then"
                    " a quote again, ignoring it"
                )
                if self.strict:
                    raise StrictModeError(
                        StrictViolation.DOUBLED_QUOTES, self.text, self.index
                    )
                return ""

            i = self.skip_to_character(rstring_delimiter, 1)
            if self._char_at(i + 1) == rstring_delimiter:
                self._log(
                    "While parsing a string, we found a valid starting doubled"
                    " quote"
                )
                doubled_quotes = True
                self.index += 1
            else:
                following = self._char_at(self.scroll_whitespaces(1))
                if following in STRING_DELIMITERS or following in ("{", "["):
                    self._log(
                        "While parsing a string, we found a doubled quote but"
                        " also another quote afterwards, ignoring it"
                    )
                    if self.strict:
                        raise StrictModeError(
                            StrictViolation.DOUBLED_QUOTES_IN_STRING,
                            self.text,
                            self.index,
                        )
                    self.index += 1
                    return ""
                if following not in (",", "]", "}"):
                    self._log(
                        "While parsing a string, we found a doubled quote but"
                        " it was a mistake, removing one quote"
                    )
                    self.index += 1

        acc: list[str] = []
        char = self._char_at()
        unmatched_delimiter = False
        escaped_delimiter = False
        while char and char != rstring_delimiter:
            if missing_quotes:
                if current is OBJECT_KEY and (char == ":" or char.isspace()):
                    self._log(
                        "While parsing a string missing the left delimiter in"
                        " object key context, we found a :, stopping here"
                    )
                    break
                if current is ARRAY and char in ("]", ","):
                    self._log(
                        "While parsing a string missing the left delimiter in"
                        " array context, we found a ] or ,, stopping here"
                    )
                    break

            if (
                not self.stream_stable
                and current is OBJECT_VALUE
                and char in (",", "}")
                and (not acc or acc[-1] != rstring_delimiter)
            ):
                if self._separator_ends_value(
                    acc, lstring_delimiter, rstring_delimiter
                ):
                    break

            if (
                not self.stream_stable
                and char == "]"
                and ARRAY in self.context
                and not self._char_at(self.skip_to_character(rstring_delimiter))
            ):
                break

            if current is OBJECT_VALUE and char == "}":
                i = self.scroll_whitespaces(1)
                following = self._char_at(i)
                if following == "`" and self.text.startswith(
                    "```", self.index + i
                ):
                    self._log(
                        "While parsing a string in object value context, we"
                        " found a } that closes the object before code fences,"
                        " stopping here"
                    )
                    break
                if not following:
                    self._log(
                        "While parsing a string in object value context, we"
                        " found a } that closes the object, stopping here"
                    )
                    break

            acc.append(char)
            self.index += 1
            char = self._char_at()
            if not char:
                if self.stream_stable and acc and acc[-1] == "\\":
                    acc.pop()
                break

            if acc and acc[-1] == "\\":
                self._log("Found a stray escape sequence, normalizing it")
                if (
                    char == rstring_delimiter
                    or char == "\\"
                    or char in _STRAY_ESCAPES
                ):
                    acc[-1] = _STRAY_ESCAPES.get(char, char)
                    self.index += 1
                    char = self._char_at()
                    # \\" only escapes the quote when the quote can't close
                    if (
                        acc[-1] == "\\"
                        and char == rstring_delimiter
                        and not self._quote_closes_value()
                    ):
                        acc[-1] = char
                        self.index += 1
                        char = self._char_at()
                    if acc == [rstring_delimiter]:
                        escaped_delimiter = True
                    continue
                if char in ("u", "x"):
                    decoded = self._decode_hex_escape(char)
                    if decoded is not None:
                        self._log("Found a unicode escape sequence, normalizing it")
                        acc[-1] = decoded
                        char = self._char_at()
                        continue
                elif char in STRING_DELIMITERS and char != rstring_delimiter:
                    self._log(
                        "Found a delimiter that was escaped but shouldn't be"
                        " escaped, removing the escape"
                    )
                    acc[-1] = char
                    self.index += 1
                    char = self._char_at()
                    continue

            if char == ":" and not missing_quotes and current is OBJECT_KEY:
                i = self.skip_to_character(lstring_delimiter, 1)
                if not self._char_at(i):
                    self._log(
                        "While parsing a string missing the right delimiter in"
                        " object key context, we found a :, stopping here"
                    )
                    break
                i = self.skip_to_character(rstring_delimiter, i + 1)
                if self._char_at(i):
                    following = self._char_at(self.scroll_whitespaces(i + 1))
                    if following in (",", "}"):
                        self._log(
                            "While parsing a string missing the right delimiter"
                            f" in object key context, we found a {following}"
                            " stopping here"
                        )
                        break

            if char == rstring_delimiter and acc[-1] != "\\":
                if doubled_quotes:
                    if self._char_at(1) == rstring_delimiter:
                        self._log(
                            "While parsing a string, we found a doubled quote,"
                            " ignoring it"
                        )
                        self.index += 1
                elif missing_quotes and current is OBJECT_VALUE:
                    i = 1
                    following = self._char_at(i)
                    while following and following not in (
                        rstring_delimiter,
                        lstring_delimiter,
                    ):
                        i += 1
                        following = self._char_at(i)
                    if (
                        following
                        and self._char_at(self.scroll_whitespaces(i + 1)) == ":"
                    ):
                        self.index -= 1
                        char = self._char_at()
                        self._log(
                            "In a string with missing quotes and object value"
                            " context, I found a delimeter but it turns out it"
                            " was the beginning on the next key. Stopping here."
                        )
                        break
                elif unmatched_delimiter:
                    unmatched_delimiter = False
                    acc.append(char)
                    self.index += 1
                    char = self._char_at()
                else:
                    verdict = self._classify_inner_quote(
                        lstring_delimiter, rstring_delimiter
                    )
                    if verdict is _QuoteVerdict.CLOSE:
                        break
                    if verdict is not _QuoteVerdict.UNDECIDED:
                        if verdict is _QuoteVerdict.TOGGLE:
                            unmatched_delimiter = not unmatched_delimiter
                        acc.append(char)
                        self.index += 1
                        char = self._char_at()
                        if not char:
                            break

        if (
            char
            and missing_quotes
            and current is OBJECT_KEY
            and char.isspace()
        ):
            self._log(
                "While parsing a string, handling an extreme corner case in"
                " which the LLM added a comment instead of valid string,"
                " invalidate the string and return an empty value"
            )
            self.skip_whitespaces()
            if self._char_at() not in ("", ":"):
                self.index -= 1
                return ""

        if char != rstring_delimiter:
            if not self.stream_stable:
                self._log(
                    "While parsing a string, we missed the closing quote,"
                    " ignoring"
                )
                _rstrip(acc)
        else:
            self.index += 1

        if not self.stream_stable and (
            missing_quotes or (acc and acc[-1] == "\n")
        ):
            _rstrip(acc)

        if self.context.empty:
            if self._char_at(self.scroll_whitespaces()) in ("{", "[", "`"):
                return ""
            if missing_quotes and (not acc or acc == ['"']):
                return ""
        if acc == [rstring_delimiter] and not escaped_delimiter:
            return ""
        return "".join(acc)

    def _separator_ends_value(
        self, acc: list[str], lstring_delimiter: str, rstring_delimiter: str
    ) -> bool:
        """
        Decides whether a , or } inside an object value ends the string.

        The string keeps going when a closing delimiter further on is
        followed by the end of the pair, or when no later key can be found.
        """
        missing = self._char_at(1) != "\\"
        i = self.skip_to_character(rstring_delimiter, 1)
        if self._char_at(i):
            i = self.scroll_whitespaces(i + 1)
            if self._char_at(i) in (",", "}"):
                missing = False
            else:
                i = self.skip_to_character(lstring_delimiter, i)
                if not self._char_at(i):
                    missing = False
                elif self._char_at(self.scroll_whitespaces(i + 1)) != ":":
                    missing = False
        else:
            # No closing delimiter anywhere, but a later key follows
            if self._char_at(self.skip_to_character(":", 1)):
                return True
            i = self.scroll_whitespaces(1)
            j = self.skip_to_character("}", i)
            if j - i > 1:
                missing = False
            elif self._char_at(j) and "{" in acc:
                missing = False

        if missing:
            self._log(
                "While parsing a string missing the left delimiter in object"
                " value context, we found a , or } and we couldn't determine"
                " that a right delimiter was present. Stopping here"
            )
        return missing

    def _decode_hex_escape(self, kind: str) -> str | None:
        """
        Decodes \\uXXXX or \\xXX after a stray backslash; the cursor sits on
        the u or x. Joins a following low surrogate escape into one code
        point. Returns None when the digits are not hex.
        """
        width = 4 if kind == "u" else 2
        start = self.index + 1
        digits = self.text[start : start + width]
        if len(digits) != width or not all(c in HEX_DIGITS for c in digits):
            return None

        code_point = int(digits, 16)
        consumed = 1 + width
        if kind == "u" and 0xD800 <= code_point <= 0xDBFF:
            tail = self.text[start + width : start + width + 6]
            low_digits = tail[2:]
            if (
                tail.startswith("\\u")
                and len(low_digits) == 4
                and all(c in HEX_DIGITS for c in low_digits)
                and 0xDC00 <= int(low_digits, 16) <= 0xDFFF
            ):
                low = int(low_digits, 16)
                code_point = 0x10000 + ((code_point - 0xD800) << 10) + (
                    low - 0xDC00
                )
                consumed += 6

        self.index += consumed
        return chr(code_point)

    def _classify_inner_quote(
        self, lstring_delimiter: str, rstring_delimiter: str
    ) -> _QuoteVerdict:
        """
        Looks past a closing delimiter to decide if it really ends the string.

        Called with the cursor on the delimiter; only reads ahead.
        """
        current = self.context.current
        check_comma = True
        i = 1
        following = self._char_at(i)
        while following and following not in (
            rstring_delimiter,
            lstring_delimiter,
        ):
            if check_comma and following.isalpha():
                check_comma = False
            if (
                (OBJECT_KEY in self.context and following in (":", "}"))
                or (OBJECT_VALUE in self.context and following == "}")
                or (ARRAY in self.context and following in ("]", ","))
                or (check_comma and current is OBJECT_VALUE and following == ",")
            ):
                break
            i += 1
            following = self._char_at(i)

        if following == "," and current is OBJECT_VALUE:
            i = self.skip_to_character(rstring_delimiter, i + 1)
            if self._char_at(self.scroll_whitespaces(i + 1)) in ("}", ","):
                self._log(_MISPLACED_QUOTE)
                return _QuoteVerdict.KEEP
            return _QuoteVerdict.UNDECIDED

        if not (
            following == rstring_delimiter and self._char_at(i - 1) != "\\"
        ):
            return _QuoteVerdict.UNDECIDED
        if self._only_whitespace_until(i):
            return _QuoteVerdict.CLOSE

        if current is OBJECT_VALUE:
            i = self.scroll_whitespaces(i + 1)
            if self._char_at(i) == ",":
                i = self.skip_to_character(lstring_delimiter, i + 1)
                i = self.skip_to_character(rstring_delimiter, i + 2)
                i = self.scroll_whitespaces(i + 1)
                if self._char_at(i) == ":":
                    self._log(_MISPLACED_QUOTE)
                    return _QuoteVerdict.KEEP
            i = self.skip_to_character(rstring_delimiter, i + 1) + 1
            following = self._char_at(i)
            while following and following != ":":
                if following in (",", "]", "}") or (
                    following == rstring_delimiter
                    and self._char_at(i - 1) != "\\"
                ):
                    break
                i += 1
                following = self._char_at(i)
            if following != ":":
                self._log(_MISPLACED_QUOTE)
                return _QuoteVerdict.TOGGLE
            return _QuoteVerdict.UNDECIDED

        if current is ARRAY:
            # Quotes inside an array element must come in pairs
            even_delimiters = True
            while following == rstring_delimiter:
                i = self.skip_to_character((rstring_delimiter, "]"), i + 1)
                if self._char_at(i) != rstring_delimiter:
                    even_delimiters = False
                    break
                i = self.skip_to_character((rstring_delimiter, "]"), i + 1)
                following = self._char_at(i)
            if not even_delimiters:
                return _QuoteVerdict.CLOSE
            self._log(
                "While parsing a string in Array context, we detected a quoted"
                " section that would have closed the string but has a"
                " different meaning here, ignoring it"
            )
            return _QuoteVerdict.TOGGLE

        if current is OBJECT_KEY:
            self._log(
                "While parsing a string in Object Key context, we detected a"
                " quoted section that would have closed the string but has a"
                " different meaning here, ignoring it"
            )
            return _QuoteVerdict.KEEP
        return _QuoteVerdict.UNDECIDED


def _rstrip(acc: list[str]) -> None:
    while acc and acc[-1].isspace():
        acc.pop()
