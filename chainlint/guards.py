"""
Guard classification for operands of ``&&`` and ``||`` runs.

In an ``&&`` run a guard passes when its subject is present: ``E``,
``E != null``, ``E !== undefined`` and so on. In an ``||`` run the mirror
forms apply: ``!E``, ``E == null``, ``E === undefined``. Anything else is not
a guard and ends the current chain.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .expressions import ExprKind, kind_of, operator_of, unwrap_parens, is_nullish_literal


class GuardForm(Enum):
    BARE = "bare"
    NEGATED = "negated"
    COMPARISON = "comparison"


PRESENT_COMPARISONS = frozenset(["!==", "!="])
ABSENT_COMPARISONS = frozenset(["===", "=="])


@dataclass(frozen=True)
class Guard:
    """A classified operand.

    ``subject`` is the expression whose presence the operand tests. For
    comparisons, ``comparison`` and ``right_text`` keep the operator and the
    literal so a rewrite ending on this operand can restore them.
    """
    operand: Any
    subject: Any
    form: GuardForm
    comparison: Optional[str] = None
    right_text: Optional[str] = None


def classify_guard(operand, operator: str, source) -> Optional[Guard]:
    """Classify ``operand`` of a run of ``operator`` (``&&`` or ``||``).

    Returns ``None`` when the operand is not a guard in that context.
    """
    expr = unwrap_parens(operand)
    if expr is None:
        return None

    if operator == "&&":
        comparisons = PRESENT_COMPARISONS
    elif operator == "||":
        comparisons = ABSENT_COMPARISONS
    else:
        return None

    kind = kind_of(expr)
    if kind == ExprKind.BINARY:
        op = operator_of(expr)
        if op in comparisons and is_nullish_literal(expr.child_by_field_name("right"), source):
            subject = unwrap_parens(expr.child_by_field_name("left"))
            if subject is None:
                return None
            right = expr.child_by_field_name("right")
            return Guard(operand, subject, GuardForm.COMPARISON, op, source.text(right))

    if operator == "&&":
        if kind == ExprKind.UNARY:
            return None
        return Guard(operand, expr, GuardForm.BARE)

    if kind == ExprKind.UNARY and operator_of(expr) == "!":
        subject = unwrap_parens(expr.child_by_field_name("argument"))
        if subject is None:
            return None
        return Guard(operand, subject, GuardForm.NEGATED)
    return None
