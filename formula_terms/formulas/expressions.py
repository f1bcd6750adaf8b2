"""
Expression trees consumed by the term builder.

An expression is a symbol (``str``), an integer literal (``int``), or a
:class:`Call` node carrying an operator and an ordered argument list.
"""

from dataclasses import dataclass, field
from typing import Any, List, Union


@dataclass
class Call:
    """
    An n-ary call node, e.g. ``Call("+", ["a", "b"])`` for ``a + b``.

    Examples:
        Call("~", ["y", Call("+", ["a", "b"])])     # y ~ a + b
        Call("*", ["a", "b"])                      # a * b
        Call("|", [1, "g"])                        # (1 | g)
    """

    op: str
    args: List[Any] = field(default_factory=list)

    def __post_init__(self):
        self.args = list(self.args)

    def __str__(self) -> str:
        return expression_to_string(self)


Expression = Union[str, int, Call]

# binding strength used when rendering infix expressions
_PRECEDENCE = {"~": 1, "|": 2, "+": 3, "-": 3, "*": 4, "&": 5}


def is_call(expr: Any) -> bool:
    """Whether ``expr`` is a call-form node."""
    return isinstance(expr, Call)


def call_operator(expr: Call) -> str:
    """Operator name of a call node, e.g. ``"+"`` or ``"log"``."""
    return expr.op


def call_arguments(expr: Call) -> List[Any]:
    """Argument list of a call node."""
    return expr.args


def is_symbol(expr: Any) -> bool:
    """Variables are represented by plain strings."""
    return isinstance(expr, str)


def is_integer(expr: Any) -> bool:
    """Whether ``expr`` is an integer literal (booleans are not)."""
    return isinstance(expr, int) and not isinstance(expr, bool)


def expression_to_string(expr: Any) -> str:
    """Render an expression in infix formula notation."""
    return _render(expr, 0)


def _render(expr: Any, parent_precedence: int) -> str:
    if not is_call(expr):
        return str(expr)

    op = call_operator(expr)
    args = call_arguments(expr)
    precedence = _PRECEDENCE.get(op)

    if precedence is None:
        return f"{op}({', '.join(_render(a, 0) for a in args)})"

    if op == "~" and len(args) == 1:
        return f"~ {_render(args[0], precedence)}"

    if op == "|":
        return f"({' | '.join(_render(a, precedence) for a in args)})"

    # right operands of '-' bind tighter so that a - (b - 1) keeps its parens
    parts = [
        _render(a, precedence + 1 if op == "-" and i > 0 else precedence)
        for i, a in enumerate(args)
    ]
    separator = f" {op} " if op != "&" else "&"
    text = separator.join(parts)
    if precedence < parent_precedence:
        text = f"({text})"
    return text
