"""CLI tests through typer's CliRunner."""

import json

from typer.testing import CliRunner

from formula.__main__ import app
from formula.config import MAX_DEPTH_VAR

runner = CliRunner()


# --- eval ---

def test_eval_prints_value():
    result = runner.invoke(app, ["eval", "2(3 + 1) ="])
    assert result.exit_code == 0
    assert result.stdout.strip() == "8.000"


def test_eval_precision():
    result = runner.invoke(app, ["eval", "2 $ 2 =", "--precision", "5"])
    assert result.exit_code == 0
    assert result.stdout.strip() == "1.41421"


def test_eval_error_exits_nonzero():
    result = runner.invoke(app, ["eval", "1/0 ="])
    assert result.exit_code == 1
    assert "division-by-zero" in result.output


def test_eval_depth_option():
    result = runner.invoke(app, ["eval", "((((1)))) =", "--max-depth", "2"])
    assert result.exit_code == 1
    assert "expression-too-complex" in result.output


def test_eval_bad_environment():
    result = runner.invoke(app, ["eval", "1 ="], env={MAX_DEPTH_VAR: "lots"})
    assert result.exit_code == 2
    assert "Invalid configuration" in result.output


def test_verbose_flag():
    result = runner.invoke(app, ["--verbose", "eval", "1 + 1 ="])
    assert result.exit_code == 0
    assert "2.000" in result.stdout


# --- tokens ---

def test_tokens_table():
    result = runner.invoke(app, ["tokens", "(1 + 2)(3 + 4) ="])
    assert result.exit_code == 0
    assert "LPAREN" in result.output


def test_tokens_lexical_error():
    result = runner.invoke(app, ["tokens", "2 # 3 ="])
    assert result.exit_code == 1
    assert "unexpected-character" in result.output


# --- batch ---

def test_batch_all_pass(tmp_path):
    path = tmp_path / "formulas.txt"
    path.write_text("2 + 2 =\n27$3 =\n", encoding="utf-8")
    result = runner.invoke(app, ["batch", str(path)])
    assert result.exit_code == 0
    assert "2/2 evaluated" in result.output


def test_batch_failure_and_json(tmp_path):
    path = tmp_path / "formulas.txt"
    path.write_text("2 + 2 =\n(-4)$2 =\n", encoding="utf-8")
    out = tmp_path / "out.json"
    result = runner.invoke(app, ["batch", str(path), "--json", str(out)])
    assert result.exit_code == 1
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data[1]["error"]["kind"] == "even-root-of-negative"


def test_batch_missing_file(tmp_path):
    result = runner.invoke(app, ["batch", str(tmp_path / "missing.txt")])
    assert result.exit_code == 2


# --- errors ---

def test_errors_lists_taxonomy():
    result = runner.invoke(app, ["errors"])
    assert result.exit_code == 0
    assert "division-by-zero" in result.output
