"""Weapon attacks from a rules-level weapon record.

Picks the attack ability (STR, or DEX for ranged and finesse weapons),
folds the modifier into the damage dice, and resolves the attack with
:func:`dnd_encounter.engine.combat.resolve_attack`.

Example:
    >>> from dnd_encounter.engine.weapons import resolve_weapon_attack
    >>> result = resolve_weapon_attack(
    ...     rapier,
    ...     {"STR": 0, "DEX": 3},
    ...     proficiencies={"martial"},
    ...     target_ac=14,
    ...     seed="duel",
    ... )
"""

from __future__ import annotations

import re
from collections.abc import Collection, Mapping
from dataclasses import dataclass

from dnd_encounter.core.config import get_settings
from dnd_encounter.core.logging import get_logger
from dnd_encounter.engine.combat import DamageSpec, ResolveAttackResult, resolve_attack
from dnd_encounter.engine.rng import derive_seed
from dnd_encounter.models import Ability, AttackMode, Weapon, WeaponCategory, WeaponProfile, WeaponProperty


logger = get_logger(__name__)

_TRAILING_ZERO = re.compile(r"[+-]0$")


@dataclass(frozen=True)
class WeaponAttackResult:
    """A resolved weapon attack.

    Attributes:
        weapon: Weapon used.
        ability: Ability the attack and damage used.
        proficient: Whether the proficiency bonus was added.
        damage_expression: Damage dice with the ability modifier folded in.
        resolved: Attack roll and, when it landed, damage.
    """

    weapon: Weapon
    ability: Ability
    proficient: bool
    damage_expression: str
    resolved: ResolveAttackResult


def _modifier(abilities: Mapping[Ability | str, int], ability: Ability) -> int:
    for key, value in abilities.items():
        if Ability(key) is ability:
            return value
    return 0


def choose_attack_ability(
    weapon: Weapon,
    abilities: Mapping[Ability | str, int],
    *,
    thrown: bool = False,
) -> Ability:
    """Pick the ability a weapon attacks with.

    Ranged weapons use DEX unless thrown. Finesse weapons use DEX when it
    beats STR. Everything else uses STR.

    Args:
        weapon: Weapon being used.
        abilities: Ability modifiers; missing abilities count as 0.
        thrown: The weapon is being thrown rather than fired.
    """
    if weapon.kind is AttackMode.RANGED and not thrown:
        return Ability.DEX
    if weapon.has_property(WeaponProperty.FINESSE) and _modifier(abilities, Ability.DEX) > _modifier(
        abilities, Ability.STR
    ):
        return Ability.DEX
    return Ability.STR


def apply_ability_modifier(expression: str, modifier: int) -> str:
    """Append a signed modifier to a damage expression.

    A trailing ``+0``/``-0`` is dropped before the modifier is added.

    Example:
        >>> apply_ability_modifier("1d8", 3)
        '1d8+3'
        >>> apply_ability_modifier("1d6+0", -1)
        '1d6-1'
    """
    trimmed = expression.strip()
    if modifier == 0:
        return trimmed
    cleaned = _TRAILING_ZERO.sub("", trimmed)
    return f"{cleaned}+{modifier}" if modifier > 0 else f"{cleaned}{modifier}"


def resolve_weapon_attack(
    weapon: Weapon,
    abilities: Mapping[Ability | str, int],
    *,
    proficiencies: Collection[WeaponCategory | str] = (),
    proficiency_bonus: int | None = None,
    two_handed: bool = False,
    thrown: bool = False,
    advantage: bool = False,
    disadvantage: bool = False,
    resistance: bool = False,
    vulnerability: bool = False,
    target_ac: int | None = None,
    seed: str | None = None,
) -> WeaponAttackResult:
    """Roll an attack with a weapon and its damage when it lands.

    Args:
        weapon: Weapon used.
        abilities: Wielder's ability modifiers.
        proficiencies: Weapon categories the wielder is proficient with.
        proficiency_bonus: Bonus added when proficient; defaults to the configured value.
        two_handed: Use the versatile dice when the weapon has them.
        thrown: Treat a ranged-kind weapon as thrown (STR).
        advantage: Attack with advantage.
        disadvantage: Attack with disadvantage.
        resistance: Target resists the damage.
        vulnerability: Target is vulnerable to the damage.
        target_ac: Armor class to compare against.
        seed: Attack seed; damage uses ``<seed>:damage``.

    Raises:
        DiceRollError: If the weapon's dice are invalid or both advantage
            and disadvantage are requested.
    """
    ability = choose_attack_ability(weapon, abilities, thrown=thrown)
    ability_mod = _modifier(abilities, ability)
    proficient = weapon.category in {WeaponCategory(category) for category in proficiencies}

    base_expression = weapon.versatile_expr if two_handed and weapon.versatile_expr else weapon.damage_expr
    damage_expression = apply_ability_modifier(base_expression, ability_mod)

    resolved = resolve_attack(
        DamageSpec(
            expression=damage_expression,
            resistance=resistance,
            vulnerability=vulnerability,
            seed=derive_seed(seed, "damage"),
        ),
        ability_mod=ability_mod,
        proficient=proficient,
        proficiency_bonus=proficiency_bonus,
        advantage=advantage,
        disadvantage=disadvantage,
        seed=seed,
        target_ac=target_ac,
    )
    logger.debug(
        "Weapon attack",
        weapon=weapon.name,
        ability=ability,
        proficient=proficient,
        damage_expression=damage_expression,
        hit=resolved.attack.hit,
    )
    return WeaponAttackResult(
        weapon=weapon,
        ability=ability,
        proficient=proficient,
        damage_expression=damage_expression,
        resolved=resolved,
    )


def weapon_profile(
    weapon: Weapon,
    abilities: Mapping[Ability | str, int],
    *,
    proficiencies: Collection[WeaponCategory | str] = (),
    proficiency_bonus: int | None = None,
    thrown: bool = False,
) -> WeaponProfile:
    """Flatten a weapon into the attack profile an actor carries.

    The attack bonus includes the chosen ability modifier plus the
    proficiency bonus when proficient. The damage dice carry the ability
    modifier only.
    """
    ability = choose_attack_ability(weapon, abilities, thrown=thrown)
    ability_mod = _modifier(abilities, ability)
    attack_mod = ability_mod
    if weapon.category in {WeaponCategory(category) for category in proficiencies}:
        attack_mod += (
            proficiency_bonus if proficiency_bonus is not None else get_settings().game.default_proficiency_bonus
        )
    return WeaponProfile(
        name=weapon.name,
        attack_mod=attack_mod,
        damage_expr=apply_ability_modifier(weapon.damage_expr, ability_mod),
        versatile_expr=apply_ability_modifier(weapon.versatile_expr, ability_mod) if weapon.versatile_expr else None,
    )


__all__ = [
    "WeaponAttackResult",
    "choose_attack_ability",
    "apply_ability_modifier",
    "resolve_weapon_attack",
    "weapon_profile",
]
