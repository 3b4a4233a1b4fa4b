"""Tokenizer: raw formula text → list of Tokens.

Scans left to right, skipping whitespace. A literal is a maximal run of
digits with at most one decimal point (`27`, `5.3`, `.12`). A minus sign is
always its own token; negation is applied by the evaluator. The returned list
always ends with a single END token, whether or not the text contained `=`.
"""

from __future__ import annotations

import logging
import math

from formula.errors import FormulaError
from formula.models import SYMBOLS, ErrorKind, Token, TokenKind

logger = logging.getLogger(__name__)

_DIGITS = frozenset("0123456789")


def _scan_number(text: str, start: int) -> tuple[Token, int]:
    """Read one numeric literal starting at `start`.

    Returns (token, index just past the literal).
    """
    pos = start
    seen_point = False
    while pos < len(text):
        c = text[pos]
        if c in _DIGITS:
            pos += 1
        elif c == ".":
            if seen_point:
                raise FormulaError(
                    ErrorKind.INVALID_NUMBER,
                    f"too many decimal points in '{text[start:pos + 1]}'",
                    offset=start,
                )
            seen_point = True
            pos += 1
        else:
            break

    literal = text[start:pos]
    if not any(ch in _DIGITS for ch in literal):
        raise FormulaError(ErrorKind.INVALID_NUMBER, f"'{literal}'", offset=start)

    value = float(literal)
    if not math.isfinite(value):
        raise FormulaError(ErrorKind.OVERFLOW, f"literal '{literal}' is out of range", offset=start)
    return Token(TokenKind.NUMBER, start, literal, value), pos


def tokenize(text: str) -> list[Token]:
    """Split a formula into tokens.

    Raises:
        FormulaError: INVALID_NUMBER for a malformed literal,
            UNEXPECTED_CHARACTER for a symbol outside the grammar,
            OVERFLOW for a literal too large for a float.
    """
    tokens: list[Token] = []
    pos = 0

    while pos < len(text):
        c = text[pos]
        if c.isspace():
            pos += 1
            continue
        if c in _DIGITS or c == ".":
            token, pos = _scan_number(text, pos)
        elif c in SYMBOLS:
            token = Token(SYMBOLS[c], pos, c)
            pos += 1
        else:
            raise FormulaError(ErrorKind.UNEXPECTED_CHARACTER, repr(c), offset=pos)
        logger.debug("token %d: %s %r", len(tokens), token.kind.name, token.text)
        tokens.append(token)

    tokens.append(Token(TokenKind.END, len(text)))
    logger.debug("tokenized %d tokens from %r", len(tokens), text)
    return tokens
