"""Rich rendering for tokens, outcomes and batch runs.

Batch files hold one formula per line. Blank lines and lines starting with
`#` are skipped.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from formula.errors import describe
from formula.evaluator import evaluate
from formula.models import ErrorKind, ErrorPhase, Limits, Outcome, Token, TokenKind

_PHASE_STYLES: dict[ErrorPhase, str] = {
    ErrorPhase.LEXICAL: "magenta",
    ErrorPhase.STRUCTURAL: "yellow",
    ErrorPhase.ARITHMETIC: "red",
    ErrorPhase.LIMIT: "cyan",
}


def format_value(value: float, precision: int = 3) -> str:
    """Format a result with a fixed number of decimals; -0 prints as 0."""
    if value == 0.0:
        value = 0.0
    return f"{value:.{precision}f}"


def load_formulas(path: Path) -> list[str]:
    """Read formulas from a batch file, skipping blanks and # comments."""
    formulas: list[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        formulas.append(line)
    return formulas


def evaluate_all(formulas: list[str], limits: Optional[Limits] = None) -> list[Outcome]:
    """Evaluate each formula independently, in order."""
    return [evaluate(f, limits) for f in formulas]


def render_tokens(tokens: list[Token], console: Console) -> None:
    """Render a token stream as a table."""
    table = Table(title="Tokens", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Kind", style="green")
    table.add_column("Text")
    table.add_column("Column", justify="right")
    table.add_column("Value", justify="right")

    for i, token in enumerate(tokens):
        value = f"{token.value:g}" if token.kind == TokenKind.NUMBER else ""
        table.add_row(str(i), token.kind.name, token.text, str(token.offset + 1), value)

    console.print()
    console.print(table)
    console.print()


def render_outcomes(outcomes: list[Outcome], console: Console, precision: int = 3) -> None:
    """Render a results table followed by a pass/fail summary line."""
    if not outcomes:
        console.print("[yellow]No formulas to evaluate.[/yellow]")
        return

    table = Table(title="Results", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Formula", min_width=20)
    table.add_column("Result", justify="right", min_width=12)
    table.add_column("Error")

    for i, o in enumerate(outcomes, 1):
        if o.ok:
            table.add_row(str(i), o.expression, f"[green]{format_value(o.value, precision)}[/green]", "")
        else:
            style = _PHASE_STYLES.get(o.error.kind.phase, "white")
            table.add_row(str(i), o.expression, f"[{style}]{o.error.kind.value}[/{style}]", str(o.error))

    console.print()
    console.print(table)

    failed = sum(1 for o in outcomes if not o.ok)
    passed = len(outcomes) - failed
    color = "green" if failed == 0 else "yellow" if passed else "red"
    console.print(f"[{color}]{passed}/{len(outcomes)} evaluated[/{color}], {failed} failed")
    console.print()


def render_error_kinds(console: Console) -> None:
    """Render the error taxonomy."""
    table = Table(title="Error kinds", show_header=True, header_style="bold")
    table.add_column("Kind", min_width=24)
    table.add_column("Phase")
    table.add_column("Message")

    for kind in ErrorKind:
        style = _PHASE_STYLES.get(kind.phase, "white")
        table.add_row(kind.value, f"[{style}]{kind.phase.value}[/{style}]", describe(kind))

    console.print()
    console.print(table)
    console.print()
