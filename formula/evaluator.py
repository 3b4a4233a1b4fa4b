"""Recursive-descent evaluator: tokens → float, no syntax tree in between.

Grammar (one method per non-terminal, each returns the value it parsed):

    F  → E '='                         evaluate_formula
    E  → P (('+' | '-') P)*            evaluate_expression   left-assoc
    P  → U (('*' | '/' | implicit) U)* evaluate_product      left-assoc
    U  → W ('$' U)?                    evaluate_root         right-assoc
    W  → B ('^' W)?                    evaluate_power        right-assoc
    B  → '-' B | NUMBER | '(' E ')'    evaluate_unary

`^` binds tighter than `$`, so `4 ^ 2 $ 2` is `(4 ^ 2) $ 2`. Implicit
multiplication is decided inside P only, from the kind of the last consumed
token and the kind of the current one (see is_implicit_multiplication).

Data flow per call:
1. tokenize() the text (always ends with an END token)
2. Check the optional token limit
3. Walk the grammar with a fresh Cursor, computing values on the way
4. Require '=' followed by END
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from formula.errors import FormulaError
from formula.models import (
    BINARY_OPERATORS,
    ErrorKind,
    Limits,
    Outcome,
    Token,
    TokenKind,
)
from formula.tokenizer import tokenize

logger = logging.getLogger(__name__)


def is_implicit_multiplication(previous: Optional[TokenKind], current: TokenKind) -> bool:
    """Whether a multiplication is implied between two adjacent tokens.

    True for `2(`, `)(` and `)2`. Two adjacent numbers are not a product.

    Args:
        previous: Kind of the most recently consumed token (None at start).
        current: Kind of the next unconsumed token.
    """
    if current == TokenKind.LPAREN:
        return previous in (TokenKind.NUMBER, TokenKind.RPAREN)
    if current == TokenKind.NUMBER:
        return previous == TokenKind.RPAREN
    return False


class Cursor:
    """Position in the token list plus the kind of the last consumed token."""

    def __init__(self, tokens: list[Token]) -> None:
        if not tokens or tokens[-1].kind != TokenKind.END:
            raise ValueError("token list must end with an END token")
        self.tokens = tokens
        self.index = 0
        self.previous: Optional[TokenKind] = None

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def advance(self) -> Token:
        """Consume and return the current token. END is never stepped past."""
        token = self.tokens[self.index]
        if token.kind != TokenKind.END:
            self.index += 1
        self.previous = token.kind
        return token


class Evaluator:
    """Evaluates one token list. Create a new instance per evaluation."""

    def __init__(self, tokens: list[Token], limits: Optional[Limits] = None) -> None:
        self.cursor = Cursor(tokens)
        self.limits = limits or Limits()
        self._depth = 0

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    def _error(self, kind: ErrorKind, detail: str = "", at: Optional[int] = None) -> FormulaError:
        """Build a FormulaError located at token index `at` (default: current)."""
        index = self.cursor.index if at is None else at
        return FormulaError(kind, detail, position=index, offset=self.cursor.tokens[index].offset)

    def _enter(self) -> None:
        """Count one nesting level; the caller decrements `_depth` on the way out.

        Parentheses, negations and the right operand of `^` or `$` each nest.
        """
        self._depth += 1
        max_depth = self.limits.max_depth
        if max_depth is not None and self._depth > max_depth:
            raise self._error(ErrorKind.EXPRESSION_TOO_COMPLEX, f"nesting deeper than {max_depth}")

    # ------------------------------------------------------------------
    # Grammar
    # ------------------------------------------------------------------

    def evaluate_formula(self) -> float:
        """F → E '='. The whole token list must be consumed."""
        first = self.cursor.current
        if first.kind == TokenKind.END:
            raise self._error(ErrorKind.UNEXPECTED_END, "empty input")
        if first.kind == TokenKind.EQUALS:
            raise self._error(ErrorKind.INVALID_EXPRESSION, "empty formula")

        value = self.evaluate_expression()

        token = self.cursor.current
        if token.kind == TokenKind.END:
            raise self._error(ErrorKind.UNEXPECTED_END, "missing '='")
        if token.kind != TokenKind.EQUALS:
            raise self._error(ErrorKind.UNEXPECTED_TOKEN, f"'{token.text}'")
        self.cursor.advance()

        trailing = self.cursor.current
        if trailing.kind != TokenKind.END:
            raise self._error(ErrorKind.UNEXPECTED_TOKEN, f"'{trailing.text}' after '='")
        self.cursor.advance()
        return value

    def evaluate_expression(self) -> float:
        """E → P (('+' | '-') P)*"""
        logger.debug("expression at token %d", self.cursor.index)
        result = self.evaluate_product()

        while self.cursor.current.kind in (TokenKind.PLUS, TokenKind.MINUS):
            at = self.cursor.index
            op = self.cursor.advance()
            right = self.evaluate_product()
            if op.kind == TokenKind.PLUS:
                logger.debug("add: %r + %r", result, right)
                result = self._finite(result + right, at)
            else:
                logger.debug("subtract: %r - %r", result, right)
                result = self._finite(result - right, at)
        return result

    def evaluate_product(self) -> float:
        """P → U (('*' | '/' | implicit) U)*"""
        logger.debug("product at token %d", self.cursor.index)
        result = self.evaluate_root()

        while True:
            at = self.cursor.index
            kind = self.cursor.current.kind
            if kind == TokenKind.STAR:
                self.cursor.advance()
                right = self.evaluate_root()
                logger.debug("multiply: %r * %r", result, right)
                result = self._multiply(result, right, at)
            elif kind == TokenKind.SLASH:
                self.cursor.advance()
                right = self.evaluate_root()
                logger.debug("divide: %r / %r", result, right)
                result = self._divide(result, right, at)
            elif is_implicit_multiplication(self.cursor.previous, kind):
                right = self.evaluate_root()
                logger.debug("implicit multiply: %r * %r", result, right)
                result = self._multiply(result, right, at)
            elif kind == TokenKind.NUMBER and self.cursor.previous == TokenKind.NUMBER:
                raise self._error(
                    ErrorKind.UNEXPECTED_TOKEN,
                    f"'{self.cursor.current.text}' follows a number with no operator",
                )
            else:
                return result

    def evaluate_root(self) -> float:
        """U → W ('$' U)?  `a $ b` is the b-th root of a."""
        radicand = self.evaluate_power()
        if self.cursor.current.kind != TokenKind.DOLLAR:
            return radicand
        at = self.cursor.index
        self.cursor.advance()
        try:
            self._enter()
            index = self.evaluate_root()
        finally:
            self._depth -= 1
        logger.debug("root: %r $ %r", radicand, index)
        return self._root(radicand, index, at)

    def evaluate_power(self) -> float:
        """W → B ('^' W)?"""
        base = self.evaluate_unary()
        if self.cursor.current.kind != TokenKind.CARET:
            return base
        at = self.cursor.index
        self.cursor.advance()
        try:
            self._enter()
            exponent = self.evaluate_power()
        finally:
            self._depth -= 1
        logger.debug("power: %r ^ %r", base, exponent)
        return self._power(base, exponent, at)

    def evaluate_unary(self) -> float:
        """B → '-' B | NUMBER | '(' E ')'"""
        try:
            self._enter()
            token = self.cursor.current
            if token.kind == TokenKind.MINUS:
                self.cursor.advance()
                return -self.evaluate_unary()

            if token.kind == TokenKind.NUMBER:
                self.cursor.advance()
                return token.value

            if token.kind == TokenKind.LPAREN:
                opening = self.cursor.index
                self.cursor.advance()
                value = self.evaluate_expression()
                if self.cursor.current.kind != TokenKind.RPAREN:
                    raise self._error(
                        ErrorKind.UNMATCHED_PARENTHESIS,
                        f"'(' is never closed, found {self.cursor.current}",
                        at=opening,
                    )
                self.cursor.advance()
                return value

            if token.kind in (TokenKind.EQUALS, TokenKind.END):
                raise self._error(ErrorKind.UNEXPECTED_END, "expected a number or '('")
            if token.kind in BINARY_OPERATORS:
                raise self._error(ErrorKind.INVALID_OPERATOR, f"'{token.text}' where an operand belongs")
            raise self._error(ErrorKind.UNEXPECTED_TOKEN, f"'{token.text}'")
        finally:
            self._depth -= 1

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def _finite(self, value: float, at: int) -> float:
        if math.isnan(value) or math.isinf(value):
            raise self._error(ErrorKind.OVERFLOW, f"result {value}", at=at)
        return value

    def _multiply(self, left: float, right: float, at: int) -> float:
        result = self._finite(left * right, at)
        if result == 0.0 and left != 0.0 and right != 0.0:
            raise self._error(ErrorKind.UNDERFLOW, f"{left!r} * {right!r}", at=at)
        return result

    def _divide(self, left: float, right: float, at: int) -> float:
        if right == 0.0:
            raise self._error(ErrorKind.DIVISION_BY_ZERO, at=at)
        result = self._finite(left / right, at)
        if result == 0.0 and left != 0.0:
            raise self._error(ErrorKind.UNDERFLOW, f"{left!r} / {right!r}", at=at)
        return result

    def _power(self, base: float, exponent: float, at: int) -> float:
        try:
            result = math.pow(base, exponent)
        except OverflowError:
            raise self._error(ErrorKind.OVERFLOW, f"{base!r} ^ {exponent!r}", at=at) from None
        except ValueError:
            raise self._error(
                ErrorKind.INVALID_EXPONENTIATION, f"{base!r} ^ {exponent!r} is not a real number", at=at,
            ) from None

        if math.isnan(result):
            raise self._error(ErrorKind.INVALID_EXPONENTIATION, f"{base!r} ^ {exponent!r}", at=at)
        if math.isinf(result):
            raise self._error(ErrorKind.OVERFLOW, f"{base!r} ^ {exponent!r}", at=at)
        if result == 0.0 and base != 0.0:
            raise self._error(ErrorKind.UNDERFLOW, f"{base!r} ^ {exponent!r}", at=at)
        return result

    def _root(self, radicand: float, index: float, at: int) -> float:
        if index == 0.0:
            raise self._error(ErrorKind.INVALID_ROOT, "root index is zero", at=at)

        integral = index.is_integer()
        if radicand < 0.0:
            if not integral:
                raise self._error(
                    ErrorKind.INVALID_ROOT, f"{index!r}-th root of negative {radicand!r}", at=at,
                )
            if int(index) % 2 == 0:
                raise self._error(ErrorKind.EVEN_ROOT_OF_NEGATIVE, f"{index:g}-th root of {radicand!r}", at=at)

        exponent = self._finite(1.0 / index, at)
        magnitude = self._power(abs(radicand), exponent, at)
        result = -magnitude if radicand < 0.0 else magnitude

        # snap exact integer roots
        if integral and index > 0 and radicand.is_integer():
            candidate = round(result)
            if candidate ** int(index) == radicand:
                return float(candidate)
        return result


def evaluate_tokens(tokens: list[Token], limits: Optional[Limits] = None) -> float:
    """Evaluate an already tokenized formula with a fresh cursor.

    Raises:
        FormulaError: for any structural, arithmetic or limit failure.
    """
    limits = limits or Limits()
    significant = len(tokens) - 1  # END sentinel excluded
    if limits.max_tokens is not None and significant > limits.max_tokens:
        raise FormulaError(
            ErrorKind.EXPRESSION_TOO_COMPLEX,
            f"{significant} tokens, limit is {limits.max_tokens}",
        )

    evaluator = Evaluator(tokens, limits)
    try:
        return evaluator.evaluate_formula()
    except RecursionError:
        raise FormulaError(
            ErrorKind.EXPRESSION_TOO_COMPLEX,
            "nesting exceeds the interpreter recursion limit",
            position=evaluator.cursor.index,
            offset=evaluator.cursor.current.offset,
        ) from None


def calculate(expression: str, limits: Optional[Limits] = None) -> float:
    """Evaluate a formula such as '2(3 + 1) =' and return its value.

    An unrecognized character is reported as INVALID_EXPRESSION here; the
    tokenizer itself tags it UNEXPECTED_CHARACTER.

    Raises:
        FormulaError: on the first error found while tokenizing or evaluating.
    """
    try:
        tokens = tokenize(expression)
    except FormulaError as e:
        if e.kind != ErrorKind.UNEXPECTED_CHARACTER:
            raise
        raise FormulaError(
            ErrorKind.INVALID_EXPRESSION, f"unexpected character {e.detail}", offset=e.offset,
        ) from e
    value = evaluate_tokens(tokens, limits)
    logger.info("%s → %r", expression.strip(), value)
    return value


def evaluate(expression: str, limits: Optional[Limits] = None) -> Outcome:
    """Evaluate a formula, returning either its value or its error.

    Never raises FormulaError; the Outcome holds exactly one of the two.
    """
    try:
        value = calculate(expression, limits)
    except FormulaError as e:
        logger.info("%s → %s", expression.strip(), e.kind.value)
        return Outcome(expression=expression, error=e)
    return Outcome(expression=expression, value=value)
