"""
Output side of the repair pipeline.

``serialize`` renders a value tree as compact JSON text with ", " and ": "
separators, numbers written exactly as they were read. ``normalize``
turns the same tree into plain Python values for callers of ``loads``.
"""

from collections.abc import Callable
from decimal import Decimal
from typing import Any

from ._values import OrderedObject
from ._values import RawNumber
from ._values import TreeValue

ASCII_LIMIT = 0x7F

_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def _encode_string(s: str, ensure_ascii: bool) -> str:
    """Encode string with proper escape sequences."""
    result = ['"']
    for char in s:
        escaped = _ESCAPES.get(char)
        if escaped is not None:
            result.append(escaped)
            continue
        code_point = ord(char)
        if code_point < 0x20:
            result.append(f"\\u{code_point:04x}")
        elif ensure_ascii and code_point > ASCII_LIMIT:
            if code_point > 0xFFFF:
                # Supplementary planes are written as a UTF-16 surrogate pair
                offset = code_point - 0x10000
                high = 0xD800 + (offset >> 10)
                low = 0xDC00 + (offset & 0x3FF)
                result.append(f"\\u{high:04x}\\u{low:04x}")
            else:
                result.append(f"\\u{code_point:04x}")
        else:
            result.append(char)
    result.append('"')
    return "".join(result)


def _encode_array(arr: list[TreeValue], ensure_ascii: bool) -> str:
    encoded_items = [_encode_value(item, ensure_ascii) for item in arr]
    return "[" + ", ".join(encoded_items) + "]"


def _encode_object(obj: OrderedObject, ensure_ascii: bool) -> str:
    formatted_items = []
    for key, value in obj.items():
        encoded_key = _encode_string(key, ensure_ascii)
        encoded_value = _encode_value(value, ensure_ascii)
        formatted_items.append(f"{encoded_key}: {encoded_value}")
    return "{" + ", ".join(formatted_items) + "}"


def _encode_value(obj: Any, ensure_ascii: bool) -> str:  # noqa: PLR0911
    """Encode any value-tree node."""
    if obj is None:
        return "null"
    elif obj is True:
        return "true"
    elif obj is False:
        return "false"
    elif isinstance(obj, str):
        return _encode_string(obj, ensure_ascii)
    elif isinstance(obj, RawNumber):
        return obj.raw
    elif isinstance(obj, OrderedObject):
        return _encode_object(obj, ensure_ascii)
    elif isinstance(obj, list):
        return _encode_array(obj, ensure_ascii)
    else:
        msg = f"Object of type {type(obj).__name__} is not JSON serializable"
        raise TypeError(msg)


def serialize(value: TreeValue, ensure_ascii: bool = True) -> str:
    """
    Renders a value tree as compact JSON text.

    Objects keep first-insertion key order. With ensure_ascii, every code
    point above 0x7F is written as a lowercase \\uXXXX escape.
    """
    return _encode_value(value, ensure_ascii)


def normalize(
    value: TreeValue,
    parse_int: Callable[[str], Any] = int,
    parse_float: Callable[[str], Any] = Decimal,
) -> Any:
    """
    Converts a value tree into plain Python values.

    Objects become dicts, integer tokens go through parse_int and every
    other numeric token through parse_float. An integer token too long for
    int() falls back to parse_float.
    """
    if isinstance(value, OrderedObject):
        return {
            key: normalize(item, parse_int, parse_float)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [normalize(item, parse_int, parse_float) for item in value]
    if isinstance(value, RawNumber):
        if value.is_integer:
            try:
                return parse_int(value.raw)
            except ValueError:
                # CPython caps int() conversion at sys.get_int_max_str_digits()
                return parse_float(value.raw)
        return parse_float(value.raw)
    return value
