"""Unit tests for the arithmetic lexer, parser and evaluator."""

import pytest

from utils.errors import EvaluationError, MalformedTerm
from utils.expression import (
    DICE, LPAREN, NUMBER, OPERATOR, RPAREN, GroupNode, evaluate, format_number, parse, tokenize
)


class TestTokenize:
    def test_kinds_and_positions(self) -> None:
        tokens = tokenize("(2d20kh1 + 3.5)")
        assert [(t.kind, t.text, t.position) for t in tokens] == [
            (LPAREN, "(", 0),
            (DICE, "2d20kh1", 1),
            (OPERATOR, "+", 9),
            (NUMBER, "3.5", 11),
            (RPAREN, ")", 14),
        ]

    def test_dice_without_count(self) -> None:
        assert [t.kind for t in tokenize("d6")] == [DICE]

    def test_leading_decimal_point(self) -> None:
        assert tokenize(".5")[0].text == ".5"

    def test_unknown_character(self) -> None:
        with pytest.raises(MalformedTerm, match="Unexpected character"):
            tokenize("2 ^ 3")

    def test_keep_without_count_is_rejected(self) -> None:
        with pytest.raises(MalformedTerm):
            tokenize("2d20kh")


class TestParse:
    def test_empty(self) -> None:
        with pytest.raises(MalformedTerm, match="Empty expression"):
            parse([])

    def test_group_node(self) -> None:
        assert isinstance(parse(tokenize("(1)")), GroupNode)

    def test_dice_nodes_in_textual_order(self) -> None:
        tree = parse(tokenize("1d4*(2d6-(3d8))+4d10"))
        assert [node.token.text for node in tree.dice_nodes()] == ["1d4", "2d6", "3d8", "4d10"]

    @pytest.mark.parametrize("text", ["1 +", "* 2", "(1", "1)", "()", "2 (3)", "1 2"])
    def test_structural_errors(self, text) -> None:
        with pytest.raises(MalformedTerm):
            parse(tokenize(text))


class TestEvaluate:
    @pytest.mark.parametrize("text,expected", [
        ("2+3*4", 14),
        ("(2+3)*4", 20),
        ("10-4-3", 3),
        ("12/4/3", 1),
        ("7/2", 3.5),
        ("-3+5", 2),
        ("-(2+3)", -5),
        ("+4", 4),
        ("1.5*2", 3),
        (" 1 + 1 ", 2),
    ])
    def test_arithmetic(self, text, expected) -> None:
        assert evaluate(text) == expected

    def test_division_by_zero(self) -> None:
        with pytest.raises(EvaluationError, match="Division by zero"):
            evaluate("1/(2-2)")

    def test_malformed_is_evaluation_error(self) -> None:
        with pytest.raises(EvaluationError):
            evaluate("1 + + ")

    def test_dice_are_rejected(self) -> None:
        with pytest.raises(EvaluationError, match="dice"):
            evaluate("1d6+2")


class TestFormatNumber:
    def test_integral_values_have_no_fraction(self) -> None:
        assert format_number(5.0) == "5"
        assert format_number(-3.0) == "-3"
        assert format_number(0.0) == "0"

    def test_fractional_values(self) -> None:
        assert format_number(0.75) == "0.75"
        assert format_number(1 / 3) == "0.3333333333333333"
