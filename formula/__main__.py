"""CLI for the formula evaluator.

Usage:
    python -m formula eval "2(3 + 1) ="              # Evaluate one formula
    python -m formula eval "27 $ 3 =" --precision 6  # More decimals
    python -m formula tokens "(1 + 2)(3 + 4) ="      # Show the token stream
    python -m formula batch formulas.txt             # Evaluate a file
    python -m formula batch formulas.txt --json out.json
    python -m formula errors                         # List error kinds

Limits can also be set with FORMULA_MAX_DEPTH / FORMULA_MAX_TOKENS.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from formula.config import load_limits
from formula.errors import FormulaError
from formula.evaluator import calculate
from formula.models import Limits, save_outcomes
from formula.report import (
    evaluate_all,
    format_value,
    load_formulas,
    render_error_kinds,
    render_outcomes,
    render_tokens,
)
from formula.tokenizer import tokenize

app = typer.Typer(
    name="formula",
    help="Evaluate arithmetic formulas terminated by '='",
    no_args_is_help=True,
)
console = Console(stderr=True)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Trace tokenizing and evaluation"),
) -> None:
    """Evaluate arithmetic formulas terminated by '='."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _limits(max_depth: Optional[int], max_tokens: Optional[int]) -> Limits:
    try:
        return load_limits(max_depth=max_depth, max_tokens=max_tokens)
    except ValueError as e:
        console.print(f"[red]Invalid configuration:[/red] {escape(str(e))}")
        raise typer.Exit(2)


@app.command("eval")
def cmd_eval(
    expression: str = typer.Argument(help="Formula ending in '=' (e.g., '2(3 + 1) =')"),
    precision: int = typer.Option(3, "--precision", "-p", min=0, max=17, help="Decimals to print"),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", help="Maximum nesting depth"),
    max_tokens: Optional[int] = typer.Option(None, "--max-tokens", help="Maximum number of tokens"),
) -> None:
    """Evaluate one formula and print its value."""
    limits = _limits(max_depth, max_tokens)
    try:
        value = calculate(expression, limits)
    except FormulaError as e:
        console.print(f"[red]Error ({e.kind.value}):[/red] {escape(str(e))}")
        raise typer.Exit(1)
    typer.echo(format_value(value, precision))


@app.command("tokens")
def cmd_tokens(
    expression: str = typer.Argument(help="Formula to tokenize"),
) -> None:
    """Show the token stream for a formula."""
    try:
        tokens = tokenize(expression)
    except FormulaError as e:
        console.print(f"[red]Error ({e.kind.value}):[/red] {escape(str(e))}")
        raise typer.Exit(1)
    render_tokens(tokens, console)


@app.command("batch")
def cmd_batch(
    path: Path = typer.Argument(help="File with one formula per line"),
    json_out: Optional[Path] = typer.Option(None, "--json", help="Also write outcomes as JSON"),
    precision: int = typer.Option(3, "--precision", "-p", min=0, max=17, help="Decimals to print"),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", help="Maximum nesting depth"),
    max_tokens: Optional[int] = typer.Option(None, "--max-tokens", help="Maximum number of tokens"),
) -> None:
    """Evaluate every formula in a file."""
    limits = _limits(max_depth, max_tokens)
    try:
        formulas = load_formulas(path)
    except OSError as e:
        console.print(f"[red]Cannot read {escape(str(path))}:[/red] {escape(str(e))}")
        raise typer.Exit(2)

    outcomes = evaluate_all(formulas, limits)
    render_outcomes(outcomes, console, precision=precision)

    if json_out:
        save_outcomes(outcomes, json_out)
        console.print(f"Outcomes written to {escape(str(json_out))}")

    if any(not o.ok for o in outcomes):
        raise typer.Exit(1)


@app.command("errors")
def cmd_errors() -> None:
    """List every error kind with its phase and message."""
    render_error_kinds(console)


if __name__ == "__main__":
    app()
