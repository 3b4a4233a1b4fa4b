"""Batch loading, value formatting, JSON output and table rendering."""

import json

import pytest
from rich.console import Console

from formula.evaluator import evaluate
from formula.models import ErrorPhase, save_outcomes
from formula.report import (
    _PHASE_STYLES,
    evaluate_all,
    format_value,
    load_formulas,
    render_error_kinds,
    render_outcomes,
    render_tokens,
)
from formula.tokenizer import tokenize


@pytest.fixture
def console():
    return Console(record=True, width=120, color_system=None)


# --- Formatting ---

@pytest.mark.parametrize("value,precision,expected", [
    (8.0, 3, "8.000"),
    (-28.442965, 3, "-28.443"),
    (1 / 3, 6, "0.333333"),
    (-0.0, 3, "0.000"),
    (2.5, 0, "2"),
])
def test_format_value(value, precision, expected):
    assert format_value(value, precision) == expected


# --- Batch files ---

def test_load_formulas_skips_blanks_and_comments(tmp_path):
    path = tmp_path / "formulas.txt"
    path.write_text("# header\n\n2 + 2 =\n   \n  27$3 =  \n# trailing\n", encoding="utf-8")
    assert load_formulas(path) == ["2 + 2 =", "27$3 ="]


def test_evaluate_all_keeps_order_and_isolates_errors():
    outcomes = evaluate_all(["1/0 =", "2(3 + 1) =", "5 5 ="])
    assert [o.ok for o in outcomes] == [False, True, False]
    assert outcomes[1].value == pytest.approx(8.0)


def test_save_outcomes(tmp_path):
    path = tmp_path / "out" / "results.json"
    save_outcomes([evaluate("2 + 3 ="), evaluate("1/0 =")], path)
    data = json.loads(path.read_text(encoding="utf-8"))

    assert data[0] == {"expression": "2 + 3 =", "ok": True, "value": 5.0}
    assert data[1]["ok"] is False
    assert "value" not in data[1]
    assert data[1]["error"]["kind"] == "division-by-zero"
    assert data[1]["error"]["phase"] == "arithmetic"
    assert data[1]["error"]["position"] == 1


# --- Rendering ---

def test_render_tokens(console):
    render_tokens(tokenize("2(3) ="), console)
    text = console.export_text()
    for name in ("NUMBER", "LPAREN", "RPAREN", "EQUALS", "END"):
        assert name in text


def test_render_outcomes_summary(console):
    render_outcomes(evaluate_all(["2 + 2 =", "1/0 ="]), console)
    text = console.export_text()
    assert "4.000" in text
    assert "division-by-zero" in text
    assert "1/2 evaluated" in text


def test_render_outcomes_empty(console):
    render_outcomes([], console)
    assert "No formulas" in console.export_text()


def test_render_error_kinds(console):
    render_error_kinds(console)
    text = console.export_text()
    assert "even-root-of-negative" in text
    assert "expression-too-complex" in text


def test_every_phase_has_a_style():
    assert set(_PHASE_STYLES) == set(ErrorPhase)
