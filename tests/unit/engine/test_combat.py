"""Tests for attack and damage resolution."""

from __future__ import annotations

import pytest

from dnd_encounter.core.exceptions import DiceRollError
from dnd_encounter.engine.combat import DamageSpec, attack_roll, damage_roll, resolve_attack


CRIT_SEED = "swing-9:attack:fighter->goblin:atk"
FUMBLE_SEED = "swing-31:attack:fighter->goblin:atk"


class TestAttackRoll:
    """Tests for attack rolls."""

    def test_modifiers_and_hit(self) -> None:
        """Test ability and proficiency are added and compared to AC."""
        result = attack_roll(ability_mod=3, proficient=True, seed="hero", target_ac=12)

        assert result.d20s == (7,)
        assert result.natural == 7
        assert result.total == 12
        assert result.hit is True
        assert result.expression == "1d20+5 vs AC 12"

    def test_explicit_proficiency_bonus(self) -> None:
        """Test an explicit bonus overrides the configured default."""
        result = attack_roll(ability_mod=0, proficient=True, proficiency_bonus=4, seed="hero")

        assert result.total == 11
        assert result.hit is None

    def test_miss(self) -> None:
        """Test a total below AC misses."""
        assert attack_roll(seed="hero", target_ac=8).hit is False

    def test_advantage_uses_independent_seeds(self) -> None:
        """Test both d20s are reported and the higher kept."""
        result = attack_roll(seed="hero", advantage=True)

        assert result.d20s == (4, 5)
        assert result.natural == 5
        assert result.expression == "1d20 adv"

    def test_disadvantage(self) -> None:
        """Test disadvantage keeps the lower d20."""
        result = attack_roll(seed="hero", disadvantage=True)

        assert result.natural == 4
        assert result.expression == "1d20 dis"

    def test_both_flags_rejected(self) -> None:
        """Test advantage and disadvantage together fail."""
        with pytest.raises(DiceRollError):
            attack_roll(advantage=True, disadvantage=True)

    def test_natural_twenty_always_hits(self) -> None:
        """Test a critical hit ignores AC."""
        result = attack_roll(seed=CRIT_SEED, target_ac=40)

        assert result.natural == 20
        assert result.is_crit is True
        assert result.hit is True

    def test_natural_one_always_misses(self) -> None:
        """Test a fumble misses any AC."""
        result = attack_roll(ability_mod=30, seed=FUMBLE_SEED, target_ac=5)

        assert result.is_fumble is True
        assert result.hit is False


class TestDamageRoll:
    """Tests for damage rolls."""

    def test_plain(self) -> None:
        """Test dice plus flat modifier."""
        result = damage_roll("2d6+3", seed="dmg")

        assert result.rolls == (2, 1)
        assert result.crit_rolls is None
        assert result.base_total == 6
        assert result.final_total == 6
        assert result.expression == "2d6+3"

    def test_crit_rerolls_dice_only(self) -> None:
        """Test a crit adds a second roll of the dice but not the modifier."""
        result = damage_roll("2d6+3", crit=True, seed="dmg")

        assert result.crit_rolls == (1, 1)
        assert result.base_total == 8
        assert result.expression == "2d6+3 (crit)"

    def test_resistance_halves_down(self) -> None:
        """Test resistance floors the halved total."""
        assert damage_roll("2d6+3", resistance=True, seed="dmg").final_total == 3

    def test_vulnerability_doubles(self) -> None:
        """Test vulnerability doubles the total."""
        result = damage_roll("2d6+3", vulnerability=True, seed="dmg")

        assert result.final_total == 12
        assert result.expression == "2d6+3 (vuln)"

    def test_floor_at_zero(self) -> None:
        """Test negative totals become zero."""
        assert damage_roll("1d4-5", seed="dmg").final_total == 0

    def test_invalid_expression(self) -> None:
        """Test bad damage expressions fail."""
        with pytest.raises(DiceRollError):
            damage_roll("sword")


class TestResolveAttack:
    """Tests for combined attack and damage."""

    def test_crit_rolls_crit_damage(self) -> None:
        """Test a critical hit rolls critical damage."""
        result = resolve_attack(DamageSpec("1d8+3", seed="dmg"), seed=CRIT_SEED, target_ac=30)

        assert result.attack.is_crit is True
        assert result.damage is not None
        assert result.damage.rolls == (2,)
        assert result.damage.crit_rolls == (2,)
        assert result.damage.final_total == 7

    def test_miss_has_no_damage(self) -> None:
        """Test a miss rolls no damage."""
        result = resolve_attack(DamageSpec("1d8+3", seed="dmg"), seed=FUMBLE_SEED, target_ac=10)

        assert result.attack.hit is False
        assert result.damage is None

    def test_no_ac_rolls_damage(self) -> None:
        """Test damage is rolled when no AC is given and the attack is not a fumble."""
        result = resolve_attack(DamageSpec("1d8+3", seed="dmg"), seed="hero")

        assert result.attack.hit is None
        assert result.damage is not None
        assert result.damage.final_total == 5

    def test_deterministic(self) -> None:
        """Test the same seeds give the same outcome."""
        spec = DamageSpec("2d6+3", seed="dmg")

        assert resolve_attack(spec, seed="hero", target_ac=5) == resolve_attack(spec, seed="hero", target_ac=5)
