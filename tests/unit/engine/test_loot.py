"""Tests for XP, coin rolls and the loot logs."""

from __future__ import annotations

import pytest

from dnd_encounter.core.exceptions import ValidationError
from dnd_encounter.engine.loot import (
    CR_COINS,
    CR_XP,
    record_loot,
    record_xp,
    roll_coin_expression,
    roll_coins_for_cr,
    total_xp,
    xp_for_cr,
)
from dnd_encounter.models import CoinBundle, EncounterState


class TestXp:
    """Tests for XP by challenge rating."""

    @pytest.mark.parametrize(("cr", "xp"), [("0", 10), ("1/4", 50), ("1", 200), (" 5 ", 1800), ("30", 0)])
    def test_xp_for_cr(self, cr: str, xp: int) -> None:
        """Test table lookups with unknown ratings worth nothing."""
        assert xp_for_cr(cr) == xp

    def test_total(self) -> None:
        """Test XP sums across monsters."""
        assert total_xp(["1/4", "1/4", "1"]) == 300

    def test_tables_cover_same_ratings(self) -> None:
        """Test every XP rating has a coin row."""
        assert set(CR_XP) == set(CR_COINS)


class TestCoins:
    """Tests for coin rolls."""

    def test_expression(self) -> None:
        """Test each die is rolled from its own seed."""
        assert roll_coin_expression("3d4", seed="c") == 9

    def test_multiplier(self) -> None:
        """Test the multiplier applies to the sum."""
        assert roll_coin_expression("3D4x10", seed="c") == 90

    @pytest.mark.parametrize("expression", ["", "d6", "2d6+1", "2d6x"])
    def test_invalid(self, expression: str) -> None:
        """Test malformed notation fails."""
        with pytest.raises(ValidationError):
            roll_coin_expression(expression)

    def test_for_cr(self) -> None:
        """Test a rating rolls its denominations."""
        assert roll_coins_for_cr("1", seed="loot") == CoinBundle(gp=100)

    def test_unknown_cr(self) -> None:
        """Test unknown ratings give no coins."""
        assert roll_coins_for_cr("99", seed="loot") == CoinBundle()

    def test_unseeded_in_range(self) -> None:
        """Test unseeded rolls stay within bounds."""
        for _ in range(20):
            assert 20 <= roll_coins_for_cr("1").gp <= 120


class TestLogs:
    """Tests for the encounter logs."""

    def test_record_loot(self, rolled: EncounterState) -> None:
        """Test mapping and bundle coins are both accepted."""
        state = record_loot(rolled, {"gp": 12}, ["Potion of Healing"], note="goblin pouch")
        state = record_loot(state, CoinBundle(sp=3))

        assert [entry.coins for entry in state.loot_log] == [CoinBundle(gp=12), CoinBundle(sp=3)]
        assert state.loot_log[0].items == ("Potion of Healing",)
        assert state.loot_log[0].note == "goblin pouch"
        assert rolled.loot_log == ()

    def test_record_empty_loot(self, rolled: EncounterState) -> None:
        """Test an entry with nothing in it is still logged."""
        assert record_loot(rolled).loot_log[0].coins == CoinBundle()

    def test_record_xp(self, rolled: EncounterState) -> None:
        """Test XP totals default to the table sum."""
        state = record_xp(rolled, ["1/4", "1/4"])
        state = record_xp(state, ["1"], total=150)

        assert [(entry.crs, entry.total) for entry in state.xp_log] == [(("1/4", "1/4"), 100), (("1",), 150)]
