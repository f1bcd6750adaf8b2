"""
Formula string parser for formula-terms.

Turns Wilkinson-style (R) formula strings into expression trees understood
by the term builder. Supported syntax:

- Variables: age, sex, log.weight
- Sums and intercepts: 1 + age, 0 + age, age - 1, -1 + age
- Interactions: age & sex (or age:sex)
- Crossing: age * sex (expands to age + sex + age&sex)
- Grouping: (1 | site)
"""

import re
from typing import Any, List, NamedTuple, Optional

from .expressions import Call, is_call
from .formula import Formula
from ..core.exceptions import FormulaSyntaxError
from ..utils.logging import get_logger


logger = get_logger(__name__)


class Token(NamedTuple):
    kind: str
    value: str
    position: int


_TOKEN_PATTERN = re.compile(
    r"\s*(?:(?P<number>\d+)|(?P<name>[A-Za-z_.][A-Za-z0-9_.]*)|(?P<op>[~+\-*&:|(),]))"
)


def tokenize(text: str) -> List[Token]:
    """
    Split a formula string into tokens.

    Raises:
        FormulaSyntaxError: On characters that are not part of the syntax
    """
    tokens = []
    position = 0
    end = len(text.rstrip())
    while position < end:
        match = _TOKEN_PATTERN.match(text, position)
        if match is None:
            offset = position + len(text[position:]) - len(text[position:].lstrip())
            raise FormulaSyntaxError(
                expression=text,
                reason=f"unexpected character {text[offset]!r} at position {offset}",
            )
        kind = match.lastgroup
        tokens.append(Token(kind, match.group(kind), match.start(kind)))
        position = match.end()
    tokens.append(Token("end", "", len(text)))
    return tokens


class FormulaParser:
    """
    Recursive-descent parser for formula strings.

    Precedence, lowest first: ``~``, ``|``, ``+``/``-``, ``*``,
    ``&``/``:``, unary minus. Chains of ``+`` and of ``*`` produce a single
    n-ary call.
    """

    def __init__(self):
        self.logger = get_logger(__name__)
        self._tokens: List[Token] = []
        self._index = 0
        self._text = ""

    def parse(self, formula_string: str) -> Formula:
        """
        Parse a formula string into a Formula.

        Args:
            formula_string: Formula such as 'y ~ a + b' or '~ a*b'

        Returns:
            Formula with expression-tree sides

        Examples:
            "y ~ a + b"   -> Formula("y", Call("+", ["a", "b"]))
            "~ a*b"       -> Formula(None, Call("*", ["a", "b"]))
            "y ~ x - 1"   -> Formula("y", Call("-", ["x", 1]))
        """
        self.logger.bind(formula=formula_string).debug("Parsing formula")
        expr = self.parse_expression(formula_string)
        if not (is_call(expr) and expr.op == "~"):
            raise FormulaSyntaxError(
                expression=formula_string,
                reason="expected formula separator ~",
                suggestions=[
                    "Formulas look like 'y ~ a + b' or '~ a + b'",
                    "Use parse_expression() for a bare right-hand side",
                ],
            )
        return Formula.from_expression(expr)

    def parse_expression(self, text: str) -> Any:
        """Parse ``text`` into an expression tree; ``~`` is optional."""
        if not text or not text.strip():
            raise FormulaSyntaxError(
                expression=text,
                reason="empty formula",
                suggestions=[
                    "Provide a non-empty formula",
                    "Use 'y ~ 1' for intercept-only models",
                ],
            )
        self._text = text
        self._tokens = tokenize(text)
        self._index = 0

        expr = self._formula()
        if self._peek().kind != "end":
            self._fail("unexpected token")
        return expr

    # Grammar

    def _formula(self) -> Any:
        if self._accept("~"):
            return Call("~", [self._grouping()])
        lhs = self._grouping()
        if self._accept("~"):
            return Call("~", [lhs, self._grouping()])
        return lhs

    def _grouping(self) -> Any:
        node = self._additive()
        while self._accept("|"):
            node = Call("|", [node, self._additive()])
        return node

    def _additive(self) -> Any:
        node = self._product()
        chain: Optional[Call] = None
        while True:
            if self._accept("+"):
                operand = self._product()
                if chain is not None and node is chain:
                    chain.args.append(operand)
                else:
                    chain = Call("+", [node, operand])
                    node = chain
            elif self._accept("-"):
                node = Call("-", [node, self._product()])
            else:
                return node

    def _product(self) -> Any:
        operands = [self._interaction()]
        while self._accept("*"):
            operands.append(self._interaction())
        return operands[0] if len(operands) == 1 else Call("*", operands)

    def _interaction(self) -> Any:
        node = self._unary()
        while self._accept("&") or self._accept(":"):
            node = Call("&", [node, self._unary()])
        return node

    def _unary(self) -> Any:
        if self._accept("-"):
            token = self._peek()
            if token.kind != "number":
                self._fail("unary minus is only supported for integer literals")
            self._index += 1
            return -int(token.value)
        return self._primary()

    def _primary(self) -> Any:
        token = self._peek()
        if token.kind == "number":
            self._index += 1
            return int(token.value)
        if token.kind == "name":
            self._index += 1
            if self._accept("("):
                return Call(token.value, self._arguments())
            return token.value
        if self._accept("("):
            node = self._grouping()
            self._expect(")")
            return node
        self._fail("expected a variable, a number or '('")

    def _arguments(self) -> List[Any]:
        args = []
        if self._accept(")"):
            return args
        while True:
            args.append(self._grouping())
            if self._accept(")"):
                return args
            self._expect(",")

    # Token helpers

    def _peek(self) -> Token:
        return self._tokens[self._index]

    def _accept(self, op: str) -> bool:
        token = self._peek()
        if token.kind == "op" and token.value == op:
            self._index += 1
            return True
        return False

    def _expect(self, op: str) -> None:
        if not self._accept(op):
            self._fail(f"expected '{op}'")

    def _fail(self, reason: str):
        token = self._peek()
        found = token.value or "end of input"
        raise FormulaSyntaxError(
            expression=self._text,
            reason=f"{reason}, found {found!r} at position {token.position}",
        )


# Convenience functions for common use cases


def parse_formula(formula_string: str) -> Formula:
    """
    Parse a single formula string.

    Args:
        formula_string: Formula string such as 'y ~ a*b + (1 | g)'

    Returns:
        Formula object
    """
    parser = FormulaParser()
    return parser.parse(formula_string)


def parse_expression(text: str) -> Any:
    """Parse a formula or bare right-hand side into an expression tree."""
    parser = FormulaParser()
    return parser.parse_expression(text)
