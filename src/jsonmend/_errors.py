"""Exception types raised by the strict reader and by strict-mode repair."""

from enum import Enum
from typing import TypeAlias

Position: TypeAlias = int


class JSONDecodeError(ValueError):
    """
    Handles JSON parsing failures with precise position and context information.

    Error state containing position, line/column numbers, and surrounding
    context to help users identify and fix JSON syntax issues.
    """

    def __init__(self, msg: str, doc: str = "", pos: Position = 0) -> None:
        if not isinstance(msg, str):
            raise TypeError("msg must be a string")
        if not isinstance(pos, int) or pos < 0:
            raise ValueError("pos must be a non-negative integer")

        self.msg = msg
        self.doc = doc
        self.pos = pos

        # Compute line and column numbers from position
        self.lineno = doc.count("\n", 0, pos) + 1 if doc else 1
        self.colno = pos - doc.rfind("\n", 0, pos) if doc else pos + 1

        super().__init__(f"{msg} at line {self.lineno}, column {self.colno}")

    def __reduce__(self) -> tuple[type, tuple[str, str, int]]:
        return self.__class__, (self.msg, self.doc, self.pos)


class StrictViolation(Enum):
    """
    Heuristic recoveries that become hard errors when strict mode is on.

    Each member's value is the fixed message carried by the raised error.
    """

    MULTIPLE_TOP_LEVEL = "multiple top-level JSON elements found in strict mode"
    DUPLICATE_KEY = "duplicate key found in strict mode while parsing object"
    EMPTY_KEY = "empty key found in strict mode while parsing object"
    MISSING_COLON = "missing ':' after key in strict mode while parsing object"
    EMPTY_VALUE = "parsed value is empty in strict mode while parsing object"
    EMPTY_OBJECT = (
        "parsed object is empty but contains extra characters in strict mode"
    )
    DOUBLED_QUOTES = "found doubled quotes followed by another quote"
    DOUBLED_QUOTES_IN_STRING = (
        "found doubled quotes followed by another quote while parsing a string"
    )


class StrictModeError(JSONDecodeError):
    """Raised instead of applying a heuristic repair when strict mode is on."""

    def __init__(
        self, violation: StrictViolation, doc: str = "", pos: Position = 0
    ) -> None:
        self.violation = violation
        super().__init__(violation.value, doc, pos)

    def __reduce__(self) -> tuple[type, tuple[StrictViolation, str, int]]:  # type: ignore[override]
        return self.__class__, (self.violation, self.doc, self.pos)
