"""Attack and damage resolution.

Attack rolls decide hit, critical and fumble; damage rolls handle
critical dice, resistance and vulnerability. Every sub-roll derives its
seed from the caller's seed with a fixed suffix (``:0``/``:1`` for the
advantage pair, ``:crit`` for critical dice), so a replay with the same
seed reproduces the same combat log.
"""

from __future__ import annotations

from dataclasses import dataclass

from dnd_encounter.core.config import get_settings
from dnd_encounter.core.constants import NATURAL_CRIT, NATURAL_FUMBLE
from dnd_encounter.core.exceptions import DiceRollError
from dnd_encounter.core.logging import get_logger
from dnd_encounter.engine.dice import format_terms, parse_expression, roll
from dnd_encounter.engine.rng import derive_seed


logger = get_logger(__name__)


@dataclass(frozen=True)
class AttackRollResult:
    """Outcome of an attack roll.

    Attributes:
        d20s: The d20 results, two under advantage or disadvantage.
        natural: The kept d20.
        total: Natural roll plus every modifier.
        is_crit: Natural 20.
        is_fumble: Natural 1.
        hit: Whether the attack hit, or None when no AC was given.
        expression: Display form, e.g. ``1d20+5 adv vs AC 15``.
    """

    d20s: tuple[int, ...]
    natural: int
    total: int
    is_crit: bool
    is_fumble: bool
    hit: bool | None
    expression: str


@dataclass(frozen=True)
class DamageRollResult:
    """Outcome of a damage roll.

    Attributes:
        rolls: Dice from the base roll.
        crit_rolls: Extra dice rolled for a critical hit.
        base_total: Dice plus critical dice plus flat modifiers.
        final_total: After resistance and vulnerability, never negative.
        expression: Canonical expression with ``(crit, resist, vuln)`` tags.
    """

    rolls: tuple[int, ...]
    crit_rolls: tuple[int, ...] | None
    base_total: int
    final_total: int
    expression: str


@dataclass(frozen=True)
class DamageSpec:
    """Damage half of a composite attack."""

    expression: str
    crit: bool = False
    resistance: bool = False
    vulnerability: bool = False
    seed: str | None = None


@dataclass(frozen=True)
class ResolveAttackResult:
    attack: AttackRollResult
    damage: DamageRollResult | None = None


def _signed(value: int) -> str:
    return f"+{value}" if value >= 0 else str(value)


def attack_roll(
    *,
    ability_mod: int = 0,
    proficient: bool = False,
    proficiency_bonus: int | None = None,
    advantage: bool = False,
    disadvantage: bool = False,
    seed: str | None = None,
    target_ac: int | None = None,
) -> AttackRollResult:
    """Roll an attack.

    Args:
        ability_mod: Modifier added to the d20.
        proficient: Whether to add the proficiency bonus.
        proficiency_bonus: Bonus to add; defaults to the configured value.
        advantage: Roll two d20s and keep the higher.
        disadvantage: Roll two d20s and keep the lower.
        seed: Base seed for the roll.
        target_ac: Armor class to compare against.

    Returns:
        AttackRollResult. ``hit`` is None when ``target_ac`` is None.

    Raises:
        DiceRollError: If both advantage and disadvantage are requested.
    """
    if advantage and disadvantage:
        raise DiceRollError("Cannot roll with both advantage and disadvantage", expression="1d20")

    proficiency = 0
    if proficient:
        proficiency = (
            proficiency_bonus
            if proficiency_bonus is not None
            else get_settings().game.default_proficiency_bonus
        )
    modifier = ability_mod + proficiency

    if advantage or disadvantage:
        first = roll("1d20", seed=derive_seed(seed, 0))
        second = roll("1d20", seed=derive_seed(seed, 1))
        d20s = (first.rolls[0], second.rolls[0])
        natural = max(d20s) if advantage else min(d20s)
    else:
        d20s = roll("1d20", seed=seed).rolls
        natural = d20s[0]

    total = natural + modifier
    is_crit = natural == NATURAL_CRIT
    is_fumble = natural == NATURAL_FUMBLE

    hit: bool | None = None
    if target_ac is not None:
        hit = not is_fumble and (is_crit or total >= target_ac)

    expression = "1d20"
    if modifier:
        expression += _signed(modifier)
    if advantage:
        expression += " adv"
    elif disadvantage:
        expression += " dis"
    if target_ac is not None:
        expression += f" vs AC {target_ac}"

    return AttackRollResult(
        d20s=tuple(d20s),
        natural=natural,
        total=total,
        is_crit=is_crit,
        is_fumble=is_fumble,
        hit=hit,
        expression=expression,
    )


def damage_roll(
    expression: str,
    *,
    crit: bool = False,
    resistance: bool = False,
    vulnerability: bool = False,
    seed: str | None = None,
) -> DamageRollResult:
    """Roll damage.

    A critical hit rolls the dice terms a second time with an independent
    seed; flat modifiers are never doubled. Resistance halves the total
    (rounding down), vulnerability doubles it, and the result is never
    below zero.

    Args:
        expression: Damage expression, e.g. ``1d8+3``.
        crit: Add a second roll of the dice terms.
        resistance: Halve the total.
        vulnerability: Double the total.
        seed: Base seed for the roll.

    Returns:
        DamageRollResult.

    Raises:
        DiceRollError: If the expression is invalid.
    """
    parsed = parse_expression(expression)
    base = roll(parsed.normalized, seed=seed)

    dice_total = base.total - parsed.flat_total

    crit_rolls: tuple[int, ...] | None = None
    crit_total = 0
    dice_terms = parsed.dice_terms
    if crit and dice_terms:
        crit_result = roll(format_terms(dice_terms), seed=derive_seed(seed, "crit"))
        crit_rolls = crit_result.rolls
        crit_total = crit_result.total

    base_total = dice_total + crit_total + parsed.flat_total
    final_total = base_total
    if resistance:
        final_total //= 2
    if vulnerability:
        final_total *= 2
    final_total = max(0, final_total)

    labels = [
        label
        for label, flag in (("crit", crit), ("resist", resistance), ("vuln", vulnerability))
        if flag
    ]
    shown = f"{base.expression} ({', '.join(labels)})" if labels else base.expression

    return DamageRollResult(
        rolls=base.rolls,
        crit_rolls=crit_rolls,
        base_total=base_total,
        final_total=final_total,
        expression=shown,
    )


def resolve_attack(
    damage: DamageSpec,
    *,
    ability_mod: int = 0,
    proficient: bool = False,
    proficiency_bonus: int | None = None,
    advantage: bool = False,
    disadvantage: bool = False,
    seed: str | None = None,
    target_ac: int | None = None,
) -> ResolveAttackResult:
    """Roll an attack and, when it lands, its damage.

    Damage is rolled on a critical hit, on a hit, or when no AC was given
    and the attack is not a fumble.

    Args:
        damage: Damage expression and modifiers.
        ability_mod: Attack modifier.
        proficient: Whether to add the proficiency bonus.
        proficiency_bonus: Bonus to add when proficient.
        advantage: Attack with advantage.
        disadvantage: Attack with disadvantage.
        seed: Seed for the attack roll.
        target_ac: Armor class to compare against.

    Returns:
        ResolveAttackResult; ``damage`` is None when no damage was rolled.
    """
    attack = attack_roll(
        ability_mod=ability_mod,
        proficient=proficient,
        proficiency_bonus=proficiency_bonus,
        advantage=advantage,
        disadvantage=disadvantage,
        seed=seed,
        target_ac=target_ac,
    )

    lands = attack.is_crit or attack.hit is True or (attack.hit is None and not attack.is_fumble)
    if not lands:
        logger.debug("Attack missed", expression=attack.expression, natural=attack.natural)
        return ResolveAttackResult(attack=attack)

    damage_result = damage_roll(
        damage.expression,
        crit=attack.is_crit or damage.crit,
        resistance=damage.resistance,
        vulnerability=damage.vulnerability,
        seed=damage.seed,
    )
    logger.debug(
        "Attack resolved",
        expression=attack.expression,
        natural=attack.natural,
        crit=attack.is_crit,
        damage=damage_result.final_total,
    )
    return ResolveAttackResult(attack=attack, damage=damage_result)


__all__ = [
    "AttackRollResult",
    "DamageRollResult",
    "DamageSpec",
    "ResolveAttackResult",
    "attack_roll",
    "damage_roll",
    "resolve_attack",
]
