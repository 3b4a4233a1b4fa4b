"""Data models for the formula evaluator.

TokenKind, Token, ErrorKind, Limits, Outcome — the typed structures that flow
through tokenizer → evaluator → CLI.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from formula.errors import FormulaError


class TokenKind(str, Enum):
    """Lexical token kinds."""

    NUMBER = "number"
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    CARET = "^"
    DOLLAR = "$"
    LPAREN = "("
    RPAREN = ")"
    EQUALS = "="
    END = "end"


# Single-character symbols → token kind
SYMBOLS: dict[str, TokenKind] = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "^": TokenKind.CARET,
    "$": TokenKind.DOLLAR,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "=": TokenKind.EQUALS,
}

BINARY_OPERATORS = frozenset({
    TokenKind.PLUS, TokenKind.MINUS, TokenKind.STAR,
    TokenKind.SLASH, TokenKind.CARET, TokenKind.DOLLAR,
})


@dataclass(frozen=True)
class Token:
    """A classified lexical unit. `value` is set for NUMBER only."""

    kind: TokenKind
    offset: int
    text: str = ""
    value: Optional[float] = None

    def __str__(self) -> str:
        if self.kind == TokenKind.NUMBER:
            return f"{self.value:g}"
        if self.kind == TokenKind.END:
            return "<end>"
        return self.kind.value


class ErrorPhase(str, Enum):
    """Which stage of the pipeline raised an error."""

    LEXICAL = "lexical"
    STRUCTURAL = "structural"
    ARITHMETIC = "arithmetic"
    LIMIT = "limit"


class ErrorKind(str, Enum):
    """Closed error taxonomy."""

    INVALID_NUMBER = "invalid-number"
    UNEXPECTED_CHARACTER = "unexpected-character"

    UNEXPECTED_TOKEN = "unexpected-token"
    UNEXPECTED_END = "unexpected-end"
    UNMATCHED_PARENTHESIS = "unmatched-parenthesis"
    INVALID_EXPRESSION = "invalid-expression"
    INVALID_OPERATOR = "invalid-operator"

    DIVISION_BY_ZERO = "division-by-zero"
    INVALID_EXPONENTIATION = "invalid-exponentiation"
    INVALID_ROOT = "invalid-root"
    EVEN_ROOT_OF_NEGATIVE = "even-root-of-negative"
    OVERFLOW = "overflow"
    UNDERFLOW = "underflow"

    EXPRESSION_TOO_COMPLEX = "expression-too-complex"

    @property
    def phase(self) -> ErrorPhase:
        return _PHASES[self]


_PHASES: dict[ErrorKind, ErrorPhase] = {
    ErrorKind.INVALID_NUMBER: ErrorPhase.LEXICAL,
    ErrorKind.UNEXPECTED_CHARACTER: ErrorPhase.LEXICAL,
    ErrorKind.UNEXPECTED_TOKEN: ErrorPhase.STRUCTURAL,
    ErrorKind.UNEXPECTED_END: ErrorPhase.STRUCTURAL,
    ErrorKind.UNMATCHED_PARENTHESIS: ErrorPhase.STRUCTURAL,
    ErrorKind.INVALID_EXPRESSION: ErrorPhase.STRUCTURAL,
    ErrorKind.INVALID_OPERATOR: ErrorPhase.STRUCTURAL,
    ErrorKind.DIVISION_BY_ZERO: ErrorPhase.ARITHMETIC,
    ErrorKind.INVALID_EXPONENTIATION: ErrorPhase.ARITHMETIC,
    ErrorKind.INVALID_ROOT: ErrorPhase.ARITHMETIC,
    ErrorKind.EVEN_ROOT_OF_NEGATIVE: ErrorPhase.ARITHMETIC,
    ErrorKind.OVERFLOW: ErrorPhase.ARITHMETIC,
    ErrorKind.UNDERFLOW: ErrorPhase.ARITHMETIC,
    ErrorKind.EXPRESSION_TOO_COMPLEX: ErrorPhase.LIMIT,
}


@dataclass(frozen=True)
class Limits:
    """Optional complexity caps for one evaluation. None means unlimited."""

    max_depth: Optional[int] = None
    max_tokens: Optional[int] = None


@dataclass
class Outcome:
    """Result of evaluating one formula: exactly one of value or error."""

    expression: str
    value: Optional[float] = None
    error: Optional[FormulaError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        d: dict = {"expression": self.expression, "ok": self.ok}
        if self.error is None:
            d["value"] = self.value
        else:
            d["error"] = {
                "kind": self.error.kind.value,
                "phase": self.error.kind.phase.value,
                "message": str(self.error),
                "position": self.error.position,
                "offset": self.error.offset,
            }
        return d


def save_outcomes(outcomes: list[Outcome], path: Path) -> None:
    """Write outcomes as a JSON array."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps([o.to_dict() for o in outcomes], indent=2), encoding="utf-8"
    )
