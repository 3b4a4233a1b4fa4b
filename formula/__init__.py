"""formula — evaluate single-line arithmetic formulas terminated by '='.

Supports + - * /, right-associative power (^) and n-th root ($), nested
parentheses, repeated unary minus and implicit multiplication such as
'2(3 + 1) =' or '(1 + 2)(3 + 4) ='.

Usage:
    >>> from formula import evaluate
    >>> evaluate("2(3 + 1) =").value
    8.0
    python -m formula eval "27 $ 3 ="
"""

from formula.errors import FormulaError
from formula.evaluator import calculate, evaluate
from formula.models import ErrorKind, Limits, Outcome

__all__ = ["ErrorKind", "FormulaError", "Limits", "Outcome", "calculate", "evaluate"]
