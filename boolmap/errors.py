"""Exception types raised by the Boolean engine."""

from __future__ import annotations

from typing import Optional


class BooleanEngineError(Exception):
    """Base class for all engine errors."""


class ParseError(BooleanEngineError, ValueError):
    """Raised when an input string cannot be turned into an expression tree.

    ``fragment`` holds the offending part of the input and ``processed`` the
    string as it looked when parsing gave up.
    """

    def __init__(
        self,
        message: str,
        fragment: Optional[str] = None,
        processed: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.fragment = fragment
        self.processed = processed

    def __str__(self) -> str:
        text = super().__str__()
        if self.fragment:
            text = f"{text} (near {self.fragment!r})"
        return text


ConversionError = ParseError


class EvalError(BooleanEngineError):
    """Raised when an expression tree is malformed (missing child, unknown node)."""


MalformedExpression = EvalError


class MinimizationFailure(BooleanEngineError):
    """Raised inside the minimizer; never escapes ``minimize``."""


__all__ = [
    "BooleanEngineError",
    "ConversionError",
    "EvalError",
    "MalformedExpression",
    "MinimizationFailure",
    "ParseError",
]
