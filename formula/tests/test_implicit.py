"""The implicit multiplication predicate, in isolation and in context."""

import pytest

from formula.evaluator import calculate, is_implicit_multiplication
from formula.models import TokenKind as K


@pytest.mark.parametrize("previous,current", [
    (K.NUMBER, K.LPAREN),   # 2(
    (K.RPAREN, K.LPAREN),   # )(
    (K.RPAREN, K.NUMBER),   # )2
])
def test_implied(previous, current):
    assert is_implicit_multiplication(previous, current)


@pytest.mark.parametrize("previous,current", [
    (K.NUMBER, K.NUMBER),   # 5 5 is ambiguous, not a product
    (None, K.LPAREN),       # start of input
    (None, K.NUMBER),
    (K.LPAREN, K.LPAREN),   # ((
    (K.STAR, K.LPAREN),     # *(
    (K.MINUS, K.NUMBER),    # -2
    (K.NUMBER, K.PLUS),     # 2 +
    (K.RPAREN, K.MINUS),    # ) -
    (K.RPAREN, K.RPAREN),
    (K.NUMBER, K.EQUALS),
    (K.RPAREN, K.END),
])
def test_not_implied(previous, current):
    assert not is_implicit_multiplication(previous, current)


def test_every_operator_blocks_implication():
    operators = [K.PLUS, K.MINUS, K.STAR, K.SLASH, K.CARET, K.DOLLAR]
    for previous in (K.NUMBER, K.RPAREN):
        for current in operators:
            assert not is_implicit_multiplication(previous, current)


# --- In context ---

def test_number_then_paren():
    assert calculate("2(3 + 1) =") == pytest.approx(8.0)


def test_paren_then_paren():
    assert calculate("(1 + 2)(3 + 4) =") == pytest.approx(21.0)


def test_paren_then_number():
    assert calculate("(2)3 =") == pytest.approx(6.0)


def test_chain_of_groups():
    assert calculate("2(3)(4)5 =") == pytest.approx(120.0)


def test_explicit_plus_is_not_multiplication():
    assert calculate("2 + 3 =") == pytest.approx(5.0)


def test_binds_like_explicit_multiplication():
    # 1 + (2 * 3), not (1 + 2) * 3
    assert calculate("1 + 2(3) =") == pytest.approx(7.0)


def test_power_before_implicit_product():
    # (2 ^ 3) * 4
    assert calculate("2^3(4) =") == pytest.approx(32.0)
