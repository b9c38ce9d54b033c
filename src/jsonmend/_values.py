"""
Value tree types shared by the repair parser, the strict reader and the encoder.

Numbers stay as raw text tokens until normalization so that integers of any
size survive untouched, and objects keep first-insertion order for
serialization.
"""

import math
from collections.abc import Iterator
from dataclasses import dataclass
from decimal import Decimal
from typing import Any
from typing import TypeAlias


@dataclass(frozen=True, slots=True)
class RawNumber:
    """
    Numeric token kept verbatim from (or canonicalized by) the parser.

    Conversion to a concrete numeric type is deferred to the normalizer.
    """

    raw: str

    @property
    def is_integer(self) -> bool:
        """True when the token has no fraction or exponent part."""
        return not any(c in self.raw for c in ".eE")

    def __bool__(self) -> bool:
        return self.raw != ""

    def __str__(self) -> str:
        return self.raw


def format_float(text: str) -> str | None:
    """
    Renders a float token in plain positional notation.

    Returns None when the text is not a finite float. Uses the shortest
    round-tripping digits and always keeps a fractional part, so "1e10"
    becomes "10000000000.0" and "1." becomes "1.0".
    """
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None

    formatted = format(Decimal(repr(value)), "f")
    if "." not in formatted:
        formatted += ".0"
    return formatted


def canonical_integer(text: str) -> str:
    """Strips redundant leading zeros: "013" -> "13", "-00" -> "-0"."""
    sign = "-" if text.startswith("-") else ""
    digits = text[len(sign) :].lstrip("0")
    return sign + (digits or "0")


class OrderedObject:
    """
    Insertion-ordered key/value container backing every parsed JSON object.

    Overwriting an existing key keeps its original position; new keys are
    appended. Backed by a plain dict, whose iteration order is insertion
    order and whose lookups double as the key-to-position index.
    """

    __slots__ = ("_items",)

    def __init__(self, pairs: list[tuple[str, Any]] | None = None) -> None:
        self._items: dict[str, Any] = {}
        for key, value in pairs or ():
            self.set(key, value)

    def set(self, key: str, value: Any) -> None:
        """Overwrites in place when the key exists, appends otherwise."""
        self._items[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._items.get(key, default)

    def last_key(self) -> str | None:
        """Returns the most recently appended key, or None when empty."""
        return next(reversed(self._items), None)

    def merge(self, other: "OrderedObject") -> None:
        """Later entries overwrite earlier ones by key; new keys append."""
        for key, value in other.items():
            self.set(key, value)

    def items(self) -> Iterator[tuple[str, Any]]:
        return iter(self._items.items())

    def keys(self) -> Iterator[str]:
        return iter(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrderedObject):
            return NotImplemented
        return list(self._items.items()) == list(other._items.items())

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"OrderedObject({list(self._items.items())!r})"


# Recursive variant of everything the parsers produce
TreeValue: TypeAlias = (
    str | RawNumber | bool | None | list["TreeValue"] | OrderedObject
)


def is_strictly_empty(value: TreeValue) -> bool:
    """True for an empty string, array or object, and nothing else."""
    return isinstance(value, str | list | OrderedObject) and len(value) == 0


def is_same_object(left: TreeValue, right: TreeValue) -> bool:
    """
    Structural comparison used to collapse repeated top-level blocks.

    Containers are compared key by key and item by item; scalars only need
    to share a type, so two strings with different text still match.
    """
    if isinstance(left, OrderedObject):
        if not isinstance(right, OrderedObject) or len(left) != len(right):
            return False
        return all(
            key in right and is_same_object(value, right.get(key))
            for key, value in left.items()
        )
    if isinstance(left, list):
        if not isinstance(right, list) or len(left) != len(right):
            return False
        return all(
            is_same_object(a, b) for a, b in zip(left, right, strict=True)
        )
    if left is None or right is None:
        return left is right
    return type(left) is type(right)
