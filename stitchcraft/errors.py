"""
Error taxonomy shared by the calculators, the shaping processor and the
instruction engine.

ValidationError and ShapingDataError also derive from ValueError so callers
that only care about "bad input" can catch the builtin.
"""

from __future__ import annotations

from collections.abc import Iterable


class StitchcraftError(Exception):
    """Base class for every error raised by stitchcraft."""


class ValidationError(StitchcraftError, ValueError):
    """Raised when a numeric input is missing or non-positive.

    Attributes:
        messages: One human-readable message per violated rule.
    """

    def __init__(self, messages: str | Iterable[str]) -> None:
        if isinstance(messages, str):
            messages = (messages,)
        self.messages: tuple[str, ...] = tuple(messages)
        super().__init__("; ".join(self.messages))


class ShapingDataError(StitchcraftError, ValueError):
    """Raised for a malformed shaping schedule entry.

    Attributes:
        detail: Description of what is wrong with the entry.
        event_index: Position of the entry in its schedule, when known.
    """

    def __init__(self, detail: str, event_index: int | None = None) -> None:
        prefix = f"shaping event {event_index + 1}: " if event_index is not None else ""
        super().__init__(f"{prefix}{detail}")
        self.detail = detail
        self.event_index = event_index


class UnsupportedConstructionError(StitchcraftError):
    """Raised for a construction-method key with no calculator.

    Attributes:
        construction_key: The key that was requested.
        supported: Keys that would have been accepted.
    """

    def __init__(self, construction_key: str, supported: Iterable[str] = ()) -> None:
        self.construction_key = construction_key
        self.supported: tuple[str, ...] = tuple(supported)
        detail = f"Unsupported construction method: {construction_key}"
        if self.supported:
            detail += f" (expected one of: {', '.join(self.supported)})"
        super().__init__(detail)


class TemplateError(StitchcraftError, LookupError):
    """Raised when a template or a placeholder value cannot be found."""
