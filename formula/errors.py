"""Error type for the formula evaluator.

Every failure, from a bad character to a division by zero, is a single
FormulaError tagged with an ErrorKind. The first error raised aborts the
evaluation; nothing is retried or recovered.
"""

from __future__ import annotations

from typing import Optional

from formula.models import ErrorKind

_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.INVALID_NUMBER: "Invalid number",
    ErrorKind.UNEXPECTED_CHARACTER: "Unexpected character",
    ErrorKind.UNEXPECTED_TOKEN: "Unexpected token",
    ErrorKind.UNEXPECTED_END: "Expression ended unexpectedly",
    ErrorKind.UNMATCHED_PARENTHESIS: "Missing closing parenthesis",
    ErrorKind.INVALID_EXPRESSION: "Invalid expression",
    ErrorKind.INVALID_OPERATOR: "Operator not allowed here",
    ErrorKind.DIVISION_BY_ZERO: "Division by zero",
    ErrorKind.INVALID_EXPONENTIATION: "Invalid exponentiation",
    ErrorKind.INVALID_ROOT: "Invalid root",
    ErrorKind.EVEN_ROOT_OF_NEGATIVE: "Even root of a negative number",
    ErrorKind.OVERFLOW: "Numeric overflow",
    ErrorKind.UNDERFLOW: "Numeric underflow",
    ErrorKind.EXPRESSION_TOO_COMPLEX: "Expression too complex",
}


def describe(kind: ErrorKind) -> str:
    """Human-readable message for an error kind."""
    return _MESSAGES[kind]


class FormulaError(ValueError):
    """Raised for any lexical, structural, arithmetic or limit failure.

    Attributes:
        kind: The ErrorKind tag.
        position: Index of the offending token, None for lexical errors.
        offset: Character index in the source text, when known.
        detail: Extra context appended to the message.
    """

    def __init__(
        self,
        kind: ErrorKind,
        detail: str = "",
        position: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> None:
        self.kind = kind
        self.detail = detail
        self.position = position
        self.offset = offset
        super().__init__(self._render())

    def _render(self) -> str:
        msg = describe(self.kind)
        if self.detail:
            msg = f"{msg}: {self.detail}"
        if self.offset is not None:
            msg = f"{msg} (at column {self.offset + 1})"
        return msg

    def __repr__(self) -> str:
        return (
            f"FormulaError({self.kind.value!r}, position={self.position}, "
            f"offset={self.offset})"
        )
