"""Nesting-aware parse context that decides how delimiters are read."""

from enum import Enum


class ContextValue(Enum):
    """Where the cursor currently sits inside the structure being parsed."""

    OBJECT_KEY = "object_key"
    OBJECT_VALUE = "object_value"
    ARRAY = "array"


class JsonContext:
    """
    Explicit stack of ContextValue tags.

    Composite parsers push on entry and pop on every exit path, so the
    depth always equals the structural nesting depth of the cursor.
    """

    def __init__(self) -> None:
        self._stack: list[ContextValue] = []

    @property
    def current(self) -> ContextValue | None:
        """Top of the stack, or None at top level."""
        return self._stack[-1] if self._stack else None

    @property
    def empty(self) -> bool:
        return not self._stack

    def set(self, value: ContextValue) -> None:
        self._stack.append(value)

    def reset(self) -> None:
        """Pops the top of the stack; a no-op at top level."""
        if self._stack:
            self._stack.pop()

    def __contains__(self, value: object) -> bool:
        return value in self._stack

    def __len__(self) -> int:
        return len(self._stack)
