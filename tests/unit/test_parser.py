"""
Tests for the formula string parser.
"""

import pytest

from formula_terms.core.exceptions import FormulaSyntaxError
from formula_terms.formulas import (
    Call,
    Formula,
    FormulaParser,
    parse_expression,
    parse_formula,
)
from formula_terms.formulas.parser import tokenize


class TestTokenize:

    def test_tokens(self):
        tokens = tokenize("y ~ a*b")
        assert [t.kind for t in tokens] == ["name", "op", "name", "op", "name", "end"]
        assert [t.value for t in tokens[:-1]] == ["y", "~", "a", "*", "b"]
        assert [t.position for t in tokens] == [0, 2, 4, 5, 6, 7]

    def test_names_with_dots_and_underscores(self):
        assert [t.value for t in tokenize("log.weight + _x1")[:-1]] == ["log.weight", "+", "_x1"]

    def test_trailing_whitespace(self):
        assert tokenize("a  ")[-1].kind == "end"

    def test_unexpected_character(self):
        with pytest.raises(FormulaSyntaxError, match=r"unexpected character '\$' at position 6"):
            tokenize("y ~ a $ b")


class TestParseFormula:
    """Formula strings to expression trees."""

    def test_two_sided(self):
        assert parse_formula("y ~ a + b") == Formula("y", Call("+", ["a", "b"]))

    def test_one_sided(self):
        assert parse_formula("~ a*b") == Formula(None, Call("*", ["a", "b"]))

    def test_sum_chain_is_n_ary(self):
        assert parse_formula("y ~ a + b + c").rhs == Call("+", ["a", "b", "c"])

    def test_product_chain_is_n_ary(self):
        assert parse_formula("y ~ a*b*c").rhs == Call("*", ["a", "b", "c"])

    def test_intercept_removal(self):
        assert parse_formula("y ~ x - 1").rhs == Call("-", ["x", 1])
        assert parse_formula("y ~ -1 + x").rhs == Call("+", [-1, "x"])
        assert parse_formula("y ~ 0 + x").rhs == Call("+", [0, "x"])

    def test_subtraction_after_sum(self):
        assert parse_formula("y ~ a + b - 1").rhs == Call("-", [Call("+", ["a", "b"]), 1])

    def test_colon_is_interaction(self):
        assert parse_formula("y ~ a:b").rhs == parse_formula("y ~ a&b").rhs == Call("&", ["a", "b"])

    def test_precedence(self):
        # & binds tighter than *, which binds tighter than +
        assert parse_formula("y ~ a + b*c&d").rhs == Call("+", [
            "a", Call("*", ["b", Call("&", ["c", "d"])]),
        ])

    def test_parentheses(self):
        assert parse_formula("y ~ (a + b)&c").rhs == Call("&", [Call("+", ["a", "b"]), "c"])

    def test_grouping(self):
        assert parse_formula("y ~ x + (1 | g)").rhs == Call("+", ["x", Call("|", [1, "g"])])

    def test_function_call_syntax(self):
        assert parse_formula("y ~ log(x)").rhs == Call("log", ["x"])

    def test_parser_is_reusable(self):
        parser = FormulaParser()
        assert parser.parse("y ~ a").rhs == "a"
        assert parser.parse("z ~ b").lhs == "z"


class TestParseErrors:

    @pytest.mark.parametrize("text", ["", "   "])
    def test_empty_formula(self, text):
        with pytest.raises(FormulaSyntaxError, match="empty formula"):
            parse_formula(text)

    def test_missing_separator(self):
        with pytest.raises(FormulaSyntaxError, match="expected formula separator ~"):
            parse_formula("a + b")

    def test_missing_rhs(self):
        with pytest.raises(FormulaSyntaxError, match="end of input"):
            parse_formula("y ~")

    def test_unbalanced_parentheses(self):
        with pytest.raises(FormulaSyntaxError, match="expected '\\)'"):
            parse_formula("y ~ (a + b")

    def test_trailing_tokens(self):
        with pytest.raises(FormulaSyntaxError, match="unexpected token"):
            parse_formula("y ~ a b")

    def test_unary_minus_on_variable(self):
        with pytest.raises(FormulaSyntaxError, match="unary minus"):
            parse_formula("y ~ -x")


class TestParseExpression:

    def test_bare_rhs(self):
        assert parse_expression("a*b") == Call("*", ["a", "b"])

    def test_formula_expression(self):
        assert parse_expression("y ~ x") == Call("~", ["y", "x"])

    def test_literal(self):
        assert parse_expression("1") == 1
