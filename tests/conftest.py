"""
Pytest configuration and shared fixtures for jsonmend tests.

Provides immutable repair cases and the json.org conformance documents
used by both the strict reader and the repair entry points.
"""

from dataclasses import dataclass
from dataclasses import field
from typing import Any

import pytest


@dataclass(frozen=True)
class RepairCase:
    """
    Immutable container for one repair scenario.

    Holds the damaged input, the expected repaired text or Python value,
    and the keyword options passed to the entry point.
    """

    description: str
    input_data: str
    expected: Any = ""
    options: dict[str, Any] = field(default_factory=dict)


def case_id(case: RepairCase) -> str:
    return case.description


@pytest.fixture
def json_fail_documents() -> list[tuple[str, str]]:
    """
    Provides json.org JSON_checker documents the strict reader must reject.

    fail1 (scalar payload) and fail18 (deep nesting) are valid RFC 8259
    and are left out.
    """
    fail_docs = [
        '["Unclosed array"',
        '{unquoted_key: "keys must be quoted"}',
        '["extra comma",]',
        '["double extra comma",,]',
        '[   , "<-- missing value"]',
        '["Comma after the close"],',
        '["Extra close"]]',
        '{"Extra comma": true,}',
        '{"Extra value after close": true} "misplaced quoted value"',
        '{"Illegal expression": 1 + 2}',
        '{"Illegal invocation": alert()}',
        '{"Numbers cannot have leading zeroes": 013}',
        '{"Numbers cannot be hex": 0x14}',
        '["Illegal backslash escape: \\x15"]',
        "[\\naked]",
        '["Illegal backslash escape: \\017"]',
        '{"Missing colon" null}',
        '{"Double colon":: null}',
        '{"Comma instead of colon", null}',
        '["Colon instead of comma": false]',
        '["Bad value", truth]',
        "['single quote']",
        '["\ttab\tcharacter\tin\tstring\t"]',
        '["tab\\   character\\   in\\  string\\  "]',
        '["line\nbreak"]',
        '["line\\\nbreak"]',
        "[0e]",
        "[0e+]",
        "[0e+-1]",
        '{"Comma instead if closing brace": true,',
        '["mismatch"}',
        '["A\u001fZ control characters in string"]',
    ]
    return [(f"fail{idx + 1}", doc) for idx, doc in enumerate(fail_docs)]


@pytest.fixture
def json_pass_documents() -> list[str]:
    """
    Provides json.org JSON_checker documents that are already valid.

    Repairing these must not change any value.
    """
    return [
        """[
    "JSON Test Pattern pass1",
    {"object with 1 member":["array with 1 element"]},
    {},
    [],
    -42,
    true,
    false,
    null,
    {
        "integer": 1234567890,
        "real": -9876.543210,
        "e": 0.123456789e-12,
        "E": 1.234567890E+34,
        "":  23456789012E66,
        "zero": 0,
        "one": 1,
        "space": " ",
        "quote": "\\"",
        "backslash": "\\\\",
        "controls": "\\b\\f\\n\\r\\t",
        "slash": "/ & \\/",
        "alpha": "abcdefghijklmnopqrstuvwyz",
        "ALPHA": "ABCDEFGHIJKLMNOPQRSTUVWYZ",
        "digit": "0123456789",
        "0123456789": "digit",
        "special": "`1~!@#$%^&*()_+-={':[,]}|;.</>?",
        "hex": "\\u0123\\u4567\\u89AB\\uCDEF\\uabcd\\uef4A",
        "true": true,
        "false": false,
        "null": null,
        "array":[  ],
        "object":{  },
        "address": "50 St. James Street",
        "url": "https://www.JSON.org/",
        "comment": "// /* <!-- --",
        "# -- --> */": " ",
        " s p a c e d " :[1,2 , 3

,

4 , 5        ,          6           ,7        ],"compact":[1,2,3,4,5,6,7],
        "jsontext": "{\\"object with 1 member\\":[\\"array with 1 element\\"]}"
    }
]""",
        '[[[[[[[[[[[[[[[[[[["Not too deep"]]]]]]]]]]]]]]]]]]]',
        '{"JSON Test Pattern pass3": {"The outermost value": "must be an'
        ' object or array.", "In this test": "It is an object."}}',
    ]


@pytest.fixture
def llm_responses() -> list[RepairCase]:
    """
    Provides typical damaged model outputs with their repaired text.

    Covers prose around fenced blocks, truncation and mixed quoting.
    """
    return [
        RepairCase(
            "fenced block after prose",
            "Based on the information extracted, here is the filled JSON output:"
            " ```json { 'a': 'b' } ```",
            '{"a": "b"}',
        ),
        RepairCase(
            "truncated object",
            '{"name": "John", "age": 30, "city": "New',
            '{"name": "John", "age": 30, "city": "New"}',
        ),
        RepairCase(
            "unquoted keys",
            "{key:value,key2:value2}",
            '{"key": "value", "key2": "value2"}',
        ),
        RepairCase(
            "python literals",
            '{"key": TRUE, "key2": FALSE, "key3": Null}   ',
            '{"key": true, "key2": false, "key3": null}',
        ),
        RepairCase(
            "trailing comma",
            "[1, 2, 3,",
            "[1, 2, 3]",
        ),
    ]
