"""
Test data generators for JSON repair benchmarks.

Creates model-style payloads in two flavours:
- Valid JSON of different sizes and shapes, which takes the fast path
- The same payloads damaged the way language models damage JSON
  (truncation, fences, bare keys, Python literals, trailing commas)
"""

import json
import random
import re
import string
from typing import Any

VALID_DATA_TYPES = [
    "small_object",
    "large_object",
    "mixed_array",
    "nested_structure",
    "string_heavy",
]

DAMAGE_TYPES = [
    "truncated",
    "fenced",
    "unquoted_keys",
    "python_literals",
    "trailing_commas",
]

_rng = random.Random(20241015)


def generate_test_data(data_type: str) -> str:
    """Generates valid JSON test data based on specified type."""
    generators = {
        "small_object": _generate_small_object,
        "large_object": _generate_large_object,
        "mixed_array": _generate_mixed_array,
        "nested_structure": _generate_nested_structure,
        "string_heavy": _generate_string_heavy,
    }

    if data_type not in generators:
        raise ValueError(f"Unknown data type: {data_type}")

    return json.dumps(generators[data_type]())


def generate_damaged_data(data_type: str, damage: str) -> str:
    """Generates data_type and breaks it with the named damage."""
    damagers = {
        "truncated": _truncate,
        "fenced": _fence,
        "unquoted_keys": _unquote_keys,
        "python_literals": _python_literals,
        "trailing_commas": _trailing_commas,
    }

    if damage not in damagers:
        raise ValueError(f"Unknown damage type: {damage}")

    return damagers[damage](generate_test_data(data_type))


def _generate_small_object() -> dict[str, Any]:
    """A tool-call style answer (< 1KB)."""
    return {
        "tool": "lookup_order",
        "arguments": {"order_id": 12345, "include_items": True},
        "confidence": 0.92,
        "reason": "The user asked about order 12345.",
        "follow_up": None,
    }


def _generate_large_object() -> dict[str, Any]:
    """A structured extraction result (> 10KB)."""
    return {
        "document_id": _rng.randint(1000000, 9999999),
        "summary": " ".join(_random_word() for _ in range(80)),
        "entities": [
            {
                "name": f"{_random_word().title()} {_random_word().title()}",
                "type": _rng.choice(["person", "org", "place", "product"]),
                "salience": round(_rng.uniform(0.0, 1.0), 4),
                "mentions": [
                    {"start": _rng.randint(0, 5000), "text": _random_word()}
                    for _ in range(3)
                ],
            }
            for _ in range(60)
        ],
        "sentiment": {"label": "positive", "score": 0.81},
        "keywords": [_random_word() for _ in range(100)],
    }


def _generate_mixed_array() -> list[Any]:
    """A large array of scalar and object items."""
    array: list[Any] = []
    for i in range(200):
        choice = _rng.randint(1, 6)
        if choice == 1:
            array.append(_rng.randint(-1000, 1000))
        elif choice == 2:
            array.append(round(_rng.uniform(-100.0, 100.0), 3))
        elif choice == 3:
            array.append(_random_word())
        elif choice == 4:
            array.append(_rng.choice([True, False]))
        elif choice == 5:
            array.append(None)
        else:
            array.append({"index": i, "label": _random_word()})
    return array


def _generate_nested_structure() -> dict[str, Any]:
    """A deeply nested plan with sub-steps."""

    def create_step(depth: int) -> dict[str, Any]:
        if depth <= 0:
            return {"action": _random_word()}

        return {
            "depth": depth,
            "goal": _random_word(),
            "steps": [create_step(depth - 1) for _ in range(2)],
        }

    return create_step(8)


def _generate_string_heavy() -> dict[str, Any]:
    """Long free-text answers with quotes, newlines and non-ASCII text."""
    texts = [
        f'He said "{_random_word()}"\nthen left. Café {_random_word()} 日本',
        f"Path C:\\Users\\{_random_word()}\\file.txt\t(tab)",
    ]
    return {
        "answers": [_rng.choice(texts) for _ in range(100)],
        "notes": {f"note_{i}": _rng.choice(texts) for i in range(20)},
    }


def _truncate(text: str) -> str:
    return text[: int(len(text) * 0.7)]


def _fence(text: str) -> str:
    return f"Here is the result you asked for:\n```json\n{text}\n```\nDone."


def _unquote_keys(text: str) -> str:
    return re.sub(r'"([A-Za-z_][A-Za-z0-9_]*)":', r"\1:", text)


def _python_literals(text: str) -> str:
    return (
        text.replace(": true", ": True")
        .replace(": false", ": False")
        .replace(": null", ": None")
    )


def _trailing_commas(text: str) -> str:
    return text.replace("}", ",}").replace("]", ",]")


def _random_word() -> str:
    return "".join(_rng.choices(string.ascii_lowercase, k=_rng.randint(3, 10)))
