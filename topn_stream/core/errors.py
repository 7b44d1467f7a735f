from __future__ import annotations

from typing import Any, List, Optional


class TopNError(Exception):
    """Base class for every fatal condition of a selection run.

    ``partial`` holds whatever the accumulator or reservoir contained when
    the run stopped, so callers can still show it.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.partial: Optional[List[Any]] = None


class ParseError(TopNError):
    def __init__(self, message: str, line_no: int = 0, line: str = "") -> None:
        if line_no:
            message = f"line {line_no}: {message}"
        super().__init__(message)
        self.line_no = line_no
        self.line = line


class InsufficientStreamError(TopNError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            f"cannot fill reservoir: need {required} records, stream yielded {available}"
        )
        self.required = required
        self.available = available


class ConfigurationError(TopNError, ValueError):
    pass


__all__ = ["TopNError", "ParseError", "InsufficientStreamError", "ConfigurationError"]
