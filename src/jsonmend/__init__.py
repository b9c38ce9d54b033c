"""
Fault-tolerant JSON repair for language-model output.

Accepts text that is supposed to be JSON but often is not (truncated,
mixed quoting, stray literals, markdown fences, comments) and either
re-serializes it as valid JSON or parses it straight into Python values,
optionally recording every repair it made.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import IO
from typing import Any

from . import _strict
from ._encoder import normalize
from ._encoder import serialize
from ._errors import JSONDecodeError
from ._errors import StrictModeError
from ._errors import StrictViolation
from ._profile import HotPathStats
from ._profile import clear_hot_path_stats
from ._profile import get_hot_path_stats
from ._repair import LogEntry
from ._repair import RepairParser
from ._values import TreeValue

__version__ = "0.1.0"

logger = logging.getLogger(__name__)

# Normalizer hooks receive the raw numeric token text
ParseFloatHook = Callable[[str], Any]
ParseIntHook = Callable[[str], Any]


@dataclass(frozen=True)
class RepairConfig:
    """
    Configures repair behavior with immutable settings.

    Every public entry point builds one of these from its keyword arguments,
    so unknown options fail with the usual dataclass TypeError.
    """

    ensure_ascii: bool = True
    skip_json_loads: bool = False
    stream_stable: bool = False
    strict: bool = False
    parse_float: ParseFloatHook = Decimal
    parse_int: ParseIntHook = int

    def __post_init__(self) -> None:
        if not isinstance(self.ensure_ascii, bool):
            raise TypeError("ensure_ascii must be a boolean")
        if not isinstance(self.skip_json_loads, bool):
            raise TypeError("skip_json_loads must be a boolean")
        if not isinstance(self.stream_stable, bool):
            raise TypeError("stream_stable must be a boolean")
        if not isinstance(self.strict, bool):
            raise TypeError("strict must be a boolean")
        if not callable(self.parse_float):
            raise TypeError("parse_float must be callable")
        if not callable(self.parse_int):
            raise TypeError("parse_int must be callable")


class ParseOutcome(Enum):
    """How parse_partial_json arrived at its value."""

    UNDEFINED = "undefined"
    SUCCESSFUL = "successful"
    REPAIRED = "repaired"
    FAILED = "failed"


@dataclass(frozen=True)
class PartialResult:
    """Value recovered by parse_partial_json plus how it was obtained."""

    value: Any
    outcome: ParseOutcome
    error: JSONDecodeError | None = None


def _check_input(s: Any) -> None:
    if not isinstance(s, str):
        raise TypeError("the JSON object must be str, not bytes")


def _build_tree(
    s: str, config: RepairConfig, with_log: bool = False
) -> tuple[TreeValue, list[LogEntry]]:
    """
    Produces the value tree for s, trying the strict reader first.

    Valid JSON never reaches the repair parser and yields an empty log.
    """
    if not config.skip_json_loads:
        try:
            return _strict.decode(s), []
        except JSONDecodeError as exc:
            logger.debug("Input is not valid JSON, repairing: %s", exc)

    parser = RepairParser(
        s,
        with_log=with_log,
        stream_stable=config.stream_stable,
        strict=config.strict,
    )
    return parser.parse(), parser.repair_log


def _to_python(tree: TreeValue, config: RepairConfig) -> Any:
    if tree == "":
        return ""
    return normalize(tree, config.parse_int, config.parse_float)


def repair_json(s: str, **kwargs: Any) -> str:
    """
    Repairs s into compact, valid JSON text.

    Returns "" when nothing JSON-like could be recovered. Raises
    StrictModeError when strict=True and a heuristic repair was needed.
    """
    _check_input(s)
    config = RepairConfig(**kwargs)
    tree, _ = _build_tree(s, config)
    if isinstance(tree, str):
        return ""
    return serialize(tree, config.ensure_ascii)


def loads(s: str, **kwargs: Any) -> Any:
    """
    Repairs s and returns the result as Python values.

    Integers go through parse_int and every other number through
    parse_float (Decimal by default), so no precision is lost.
    """
    _check_input(s)
    config = RepairConfig(**kwargs)
    tree, _ = _build_tree(s, config)
    return _to_python(tree, config)


def repair_json_with_log(s: str, **kwargs: Any) -> tuple[Any, list[LogEntry]]:
    """Like loads, also returning one LogEntry per repair decision."""
    _check_input(s)
    config = RepairConfig(**kwargs)
    tree, repair_log = _build_tree(s, config, with_log=True)
    return _to_python(tree, config), repair_log


def load(fp: IO[str], **kwargs: Any) -> Any:
    """
    Repairs the contents of a text file object.
    """
    if not hasattr(fp, "read"):
        raise TypeError("fp must have a read() method")

    return loads(fp.read(), **kwargs)


def parse_partial_json(text: str, **kwargs: Any) -> PartialResult:
    """
    Parses possibly incomplete JSON and reports whether repair was needed.

    Empty input is UNDEFINED. Valid JSON is SUCCESSFUL. Otherwise the text
    is repaired and read back: REPAIRED on success, FAILED (with the error
    attached) when nothing could be recovered or strict mode objected.
    """
    _check_input(text)
    if text == "":
        return PartialResult(None, ParseOutcome.UNDEFINED)

    config = RepairConfig(**kwargs)
    try:
        tree = _strict.decode(text)
    except JSONDecodeError as exc:
        logger.debug("Partial JSON needs repair: %s", exc)
    else:
        return PartialResult(
            _to_python(tree, config), ParseOutcome.SUCCESSFUL
        )

    try:
        repaired = repair_json(text, **{**kwargs, "skip_json_loads": True})
        tree = _strict.decode(repaired)
    except JSONDecodeError as exc:
        logger.debug("Partial JSON could not be repaired: %s", exc)
        return PartialResult(None, ParseOutcome.FAILED, exc)

    return PartialResult(_to_python(tree, config), ParseOutcome.REPAIRED)


__all__ = [
    "HotPathStats",
    "JSONDecodeError",
    "LogEntry",
    "ParseOutcome",
    "PartialResult",
    "RepairConfig",
    "StrictModeError",
    "StrictViolation",
    "clear_hot_path_stats",
    "get_hot_path_stats",
    "load",
    "loads",
    "parse_partial_json",
    "repair_json",
    "repair_json_with_log",
]
