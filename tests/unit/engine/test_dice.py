"""Tests for dice parsing and seeded rolling."""

from __future__ import annotations

import pytest

from dnd_encounter.core.exceptions import DiceRollError
from dnd_encounter.engine.dice import DiceTerm, FlatTerm, parse_expression, roll
from dnd_encounter.engine.rng import derive_seed, seeded_random


class TestParseExpression:
    """Tests for the expression parser."""

    def test_dice_and_modifier(self) -> None:
        """Test a dice term with a flat modifier."""
        parsed = parse_expression("2d6+3")

        assert parsed.terms == (DiceTerm(sign=1, count=2, sides=6), FlatTerm(sign=1, value=3))
        assert parsed.normalized == "2d6+3"
        assert parsed.flat_total == 3

    def test_whitespace_and_case(self) -> None:
        """Test whitespace is ignored and the d is case-insensitive."""
        assert parse_expression(" 1D20 - 1 ").normalized == "1d20-1"

    def test_implicit_count(self) -> None:
        """Test a bare die means one die."""
        assert parse_expression("d8").normalized == "1d8"

    def test_leading_negative(self) -> None:
        """Test a negative first term keeps its sign."""
        parsed = parse_expression("-1d4+2d6-1")

        assert parsed.normalized == "-1d4+2d6-1"
        assert parsed.flat_total == -1
        assert len(parsed.dice_terms) == 2

    @pytest.mark.parametrize("expression", ["", "   ", None])
    def test_empty_rejected(self, expression: str | None) -> None:
        """Test empty input is rejected."""
        with pytest.raises(DiceRollError):
            parse_expression(expression)  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        ("expression", "token"),
        [
            ("0d6", "0d6"),
            ("1d1", "1d1"),
            ("2d6+x", "+x"),
            ("1d6+2.5", "+2.5"),
        ],
    )
    def test_bad_tokens(self, expression: str, token: str) -> None:
        """Test invalid tokens are reported."""
        with pytest.raises(DiceRollError) as exc_info:
            parse_expression(expression)

        assert exc_info.value.details["token"] == token
        assert exc_info.value.details["expression"] == expression

    def test_dangling_operator(self) -> None:
        """Test an operator with no term is rejected."""
        with pytest.raises(DiceRollError):
            parse_expression("1d6+")


class TestRoll:
    """Tests for seeded rolling."""

    def test_single_die(self) -> None:
        """Test a seeded d6."""
        result = roll("1d6", seed="simple")

        assert result.rolls == (3,)
        assert result.total == 3
        assert result.expression == "1d6"

    def test_modifier(self) -> None:
        """Test a seeded roll with a modifier."""
        result = roll("2d6+3", seed="mods")

        assert result.rolls == (1, 2)
        assert result.total == 6

    def test_subtracted_dice(self) -> None:
        """Test subtracted dice count against the total."""
        result = roll("1d6-1d4", seed="neg")

        assert result.rolls == (6, 2)
        assert result.total == 4

    def test_repeatable(self) -> None:
        """Test the same seed gives the same result."""
        assert roll("4d6+2", seed="repeatable") == roll("4d6+2", seed="repeatable")

    def test_advantage(self) -> None:
        """Test advantage keeps the higher d20 and reports both."""
        result = roll("1d20+5", seed="hero", advantage=True)

        assert result.rolls == (7, 12)
        assert result.total == 17
        assert result.expression == "1d20+5 adv"

    def test_disadvantage(self) -> None:
        """Test disadvantage keeps the lower d20."""
        result = roll("1d20+5", seed="hero", disadvantage=True)

        assert result.rolls == (7, 12)
        assert result.total == 12
        assert result.expression == "1d20+5 dis"

    def test_advantage_and_disadvantage_rejected(self) -> None:
        """Test requesting both is an error."""
        with pytest.raises(DiceRollError):
            roll("1d20", advantage=True, disadvantage=True)

    def test_advantage_on_multi_die_d20_term(self) -> None:
        """Test the sole d20 term is rolled twice as a group."""
        adv = roll("2d20+3", seed="pair", advantage=True)
        dis = roll("2d20+3", seed="pair", disadvantage=True)

        assert adv.rolls == (5, 9, 17, 1)
        assert adv.total == 21
        assert dis.total == 17

    def test_advantage_only_on_first_bare_d20(self) -> None:
        """Test other dice terms roll once."""
        result = roll("1d20+1d4", seed="mixed", advantage=True)

        assert result.rolls == (14, 2, 2)
        assert result.total == 16

    def test_advantage_after_other_terms(self) -> None:
        """Test the d20 pair is drawn in term order."""
        result = roll("1d4+1d20", seed="mixed", advantage=True)

        assert result.rolls == (3, 2, 9)
        assert result.total == 12

    def test_advantage_ignored_without_d20(self) -> None:
        """Test advantage on an expression with no d20 rolls normally."""
        result = roll("1d6", seed="simple", advantage=True)

        assert result.rolls == (3,)
        assert result.expression == "1d6 adv"

    def test_explicit_rng(self) -> None:
        """Test an explicit random source takes precedence over the seed."""
        result = roll("1d20", seed="ignored", rng=seeded_random("hero"))

        assert result.rolls == (7,)

    def test_unseeded_in_range(self) -> None:
        """Test unseeded rolls stay within bounds."""
        for _ in range(50):
            assert 3 <= roll("3d6").total <= 18


class TestSeeds:
    """Tests for seed derivation and the random source."""

    def test_derive_seed(self) -> None:
        """Test suffixes are joined with colons."""
        assert derive_seed("fight", "init", "goblin") == "fight:init:goblin"

    def test_derive_without_base(self) -> None:
        """Test no base seed stays unseeded."""
        assert derive_seed(None, "init") is None

    def test_seeded_sequence(self) -> None:
        """Test the generator's first d20 values for a known seed."""
        rng = seeded_random("hero")
        assert [int(rng() * 20) + 1 for _ in range(3)] == [7, 12, 6]

    def test_floats_in_unit_interval(self) -> None:
        """Test the generator stays in [0, 1)."""
        rng = seeded_random("bounds")
        assert all(0 <= rng() < 1 for _ in range(1000))
