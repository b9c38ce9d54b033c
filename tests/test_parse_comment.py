"""
Comment handling tests.
"""

import pytest

import jsonmend

from .conftest import RepairCase
from .conftest import case_id

COMMENT_CASES = [
    RepairCase("just slash", "/", ""),
    RepairCase(
        "block comment before object",
        '/* comment */ {"key": "value"}',
        '{"key": "value"}',
    ),
    RepairCase(
        "line comment closes nothing",
        '{ "key": { "key2": "value2" // comment }, "key3": "value3" }',
        '{"key": {"key2": "value2"}, "key3": "value3"}',
    ),
    RepairCase(
        "hash comment",
        '{ "key": { "key2": "value2" # comment }, "key3": "value3" }',
        '{"key": {"key2": "value2"}, "key3": "value3"}',
    ),
    RepairCase(
        "block comment inside object",
        '{ "key": { "key2": "value2" /* comment */ }, "key3": "value3" }',
        '{"key": {"key2": "value2"}, "key3": "value3"}',
    ),
    RepairCase(
        "block comment inside array",
        '[ "value", /* comment */ "value2" ]',
        '["value", "value2"]',
    ),
    RepairCase(
        "unterminated block comment",
        '{ "key": "value" /* comment',
        '{"key": "value"}',
    ),
]


@pytest.mark.parametrize("case", COMMENT_CASES, ids=case_id)
def test_comments_dropped(case: RepairCase) -> None:
    """
    Validates #, // and /* */ comments are skipped wherever they appear.
    """
    assert jsonmend.repair_json(case.input_data) == case.expected


def test_comment_logged() -> None:
    """
    Validates a skipped comment shows up in the repair log.
    """
    _, log = jsonmend.repair_json_with_log('[1, # note\n 2]')
    assert [entry.text for entry in log] == [
        "Found line comment: # note, ignoring"
    ]


@pytest.mark.parametrize(
    "noise",
    ["see a/b ", "# note\n", "// note\n", "/* note */ "],
)
def test_long_runs_of_top_level_comments(noise: str) -> None:
    """
    Validates many comments and stray slashes before the payload are
    skipped without deep recursion.
    """
    assert jsonmend.loads(noise * 2000 + '{"a": 1}') == {"a": 1}
