"""Ability checks and saving throws."""

from __future__ import annotations

from dataclasses import dataclass

from dnd_encounter.core.config import get_settings
from dnd_encounter.core.constants import MAX_CHARACTER_LEVEL, PROFICIENCY_BY_LEVEL
from dnd_encounter.core.exceptions import ValidationError
from dnd_encounter.core.logging import get_logger
from dnd_encounter.engine.conditions import advantage_flags, combine_advantage, has_status
from dnd_encounter.engine.dice import roll
from dnd_encounter.engine.state import require_actor
from dnd_encounter.models import Ability, Actor, AdvantageState, EncounterState, Skill, StatusEffect


logger = get_logger(__name__)


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a check or save.

    Attributes:
        ability: Ability tested.
        rolls: Every d20 rolled.
        total: Kept d20 plus modifiers.
        expression: Display form, e.g. ``1d20+3+2 adv vs DC 15``.
        success: Whether the DC was met; None without a DC.
    """

    ability: Ability
    rolls: tuple[int, ...]
    total: int
    expression: str
    success: bool | None = None


def _signed(value: int) -> str:
    return f"+{value}" if value >= 0 else str(value)


def proficiency_bonus_for_level(level: int) -> int:
    """Proficiency bonus for a character level.

    Levels above 20 use the level 20 bonus.

    Raises:
        ValidationError: If the level is below 1.
    """
    if level < 1:
        raise ValidationError(
            f"Invalid level {level}. Level must be between 1 and {MAX_CHARACTER_LEVEL}.",
            field_name="level",
            invalid_value=level,
        )
    for max_level, bonus in PROFICIENCY_BY_LEVEL:
        if level <= max_level:
            return bonus
    return PROFICIENCY_BY_LEVEL[-1][1]


def actor_proficiency_bonus(actor: Actor, level: int | None = None) -> int:
    """The actor's own bonus, else the level table, else the configured default."""
    if actor.proficiency_bonus is not None:
        return actor.proficiency_bonus
    if level is not None:
        return proficiency_bonus_for_level(level)
    return get_settings().game.default_proficiency_bonus


def _resolve(
    ability: Ability | str,
    *,
    modifier: int,
    proficient: bool,
    proficiency_bonus: int | None,
    advantage: bool,
    disadvantage: bool,
    dc: int | None,
    seed: str | None,
) -> CheckResult:
    ability = Ability(ability)
    bonus = 0
    if proficient:
        bonus = (
            proficiency_bonus
            if proficiency_bonus is not None
            else get_settings().game.default_proficiency_bonus
        )

    result = roll("1d20", seed=seed, advantage=advantage, disadvantage=disadvantage)
    total = result.total + modifier + bonus

    expression = "1d20"
    if modifier:
        expression += _signed(modifier)
    if bonus:
        expression += _signed(bonus)
    if advantage:
        expression += " adv"
    elif disadvantage:
        expression += " dis"
    if dc is not None:
        expression += f" vs DC {dc}"

    return CheckResult(
        ability=ability,
        rolls=result.rolls,
        total=total,
        expression=expression,
        success=total >= dc if dc is not None else None,
    )


def ability_check(
    ability: Ability | str,
    *,
    modifier: int = 0,
    proficient: bool = False,
    proficiency_bonus: int | None = None,
    advantage: bool = False,
    disadvantage: bool = False,
    dc: int | None = None,
    seed: str | None = None,
) -> CheckResult:
    """Roll an ability check.

    Args:
        ability: Ability tested.
        modifier: Ability modifier.
        proficient: Whether to add the proficiency bonus.
        proficiency_bonus: Bonus to add; defaults to the configured value.
        advantage: Roll with advantage.
        disadvantage: Roll with disadvantage.
        dc: Difficulty class to compare against.
        seed: Roll seed.

    Raises:
        DiceRollError: If both advantage and disadvantage are requested.
    """
    return _resolve(
        ability,
        modifier=modifier,
        proficient=proficient,
        proficiency_bonus=proficiency_bonus,
        advantage=advantage,
        disadvantage=disadvantage,
        dc=dc,
        seed=seed,
    )


def saving_throw(
    ability: Ability | str,
    *,
    modifier: int = 0,
    proficient: bool = False,
    proficiency_bonus: int | None = None,
    advantage: bool = False,
    disadvantage: bool = False,
    dc: int | None = None,
    seed: str | None = None,
) -> CheckResult:
    """Roll a saving throw. Arguments as for :func:`ability_check`."""
    return _resolve(
        ability,
        modifier=modifier,
        proficient=proficient,
        proficiency_bonus=proficiency_bonus,
        advantage=advantage,
        disadvantage=disadvantage,
        dc=dc,
        seed=seed,
    )


def skill_check(
    skill: Skill | str,
    *,
    modifier: int = 0,
    proficient: bool = False,
    expertise: bool = False,
    proficiency_bonus: int | None = None,
    advantage: bool = False,
    disadvantage: bool = False,
    dc: int | None = None,
    seed: str | None = None,
) -> CheckResult:
    """Roll a skill check against the skill's ability.

    Expertise doubles the proficiency bonus and implies proficiency.
    """
    skill = Skill(skill)
    if expertise:
        proficient = True
        if proficiency_bonus is None:
            proficiency_bonus = get_settings().game.default_proficiency_bonus
        proficiency_bonus *= 2
    return _resolve(
        skill.ability,
        modifier=modifier,
        proficient=proficient,
        proficiency_bonus=proficiency_bonus,
        advantage=advantage,
        disadvantage=disadvantage,
        dc=dc,
        seed=seed,
    )


def encounter_ability_check(
    state: EncounterState,
    actor_id: str,
    ability: Ability | str,
    *,
    base_mod: int | None = None,
    dc: int | None = None,
    advantage: bool = False,
    disadvantage: bool = False,
    seed: str | None = None,
) -> CheckResult:
    """Roll an ability check for an encounter actor.

    A poisoned actor has disadvantage; combined with caller flags the
    usual cancel-out rule applies.

    Args:
        state: Current encounter.
        actor_id: Actor making the check.
        ability: Ability tested.
        base_mod: Modifier override; defaults to the actor's ability modifier.
        dc: Difficulty class.
        advantage: Caller-granted advantage.
        disadvantage: Caller-imposed disadvantage.
        seed: Roll seed; defaults to ``<encounter seed>:check:<actor>:<ability>``.

    Raises:
        UnknownActorError: If the actor does not exist.
    """
    actor = require_actor(state, actor_id)
    ability = Ability(ability)
    poisoned = AdvantageState.DISADVANTAGE if has_status(actor, StatusEffect.POISONED) else AdvantageState.NORMAL
    net_advantage, net_disadvantage = advantage_flags(combine_advantage(advantage, disadvantage, poisoned))

    if seed is None and state.seed:
        seed = f"{state.seed}:check:{actor_id}:{ability.value}"
    result = ability_check(
        ability,
        modifier=base_mod if base_mod is not None else actor.ability_mod(ability),
        advantage=net_advantage,
        disadvantage=net_disadvantage,
        dc=dc,
        seed=seed,
    )
    logger.debug("Ability check", actor_id=actor_id, ability=ability, total=result.total, success=result.success)
    return result


def encounter_skill_check(
    state: EncounterState,
    actor_id: str,
    skill: Skill | str,
    *,
    proficient: bool = False,
    expertise: bool = False,
    dc: int | None = None,
    advantage: bool = False,
    disadvantage: bool = False,
    seed: str | None = None,
) -> CheckResult:
    """Roll a skill check for an encounter actor.

    Uses the actor's modifier for the skill's ability and, when
    proficient, the actor's proficiency bonus. Poisoned imposes
    disadvantage as for ability checks. The default seed is
    ``<encounter seed>:skill:<actor>:<skill>``.

    Raises:
        UnknownActorError: If the actor does not exist.
    """
    actor = require_actor(state, actor_id)
    skill = Skill(skill)
    poisoned = AdvantageState.DISADVANTAGE if has_status(actor, StatusEffect.POISONED) else AdvantageState.NORMAL
    net_advantage, net_disadvantage = advantage_flags(combine_advantage(advantage, disadvantage, poisoned))

    if seed is None and state.seed:
        seed = f"{state.seed}:skill:{actor_id}:{skill.value}"
    result = skill_check(
        skill,
        modifier=actor.ability_mod(skill.ability),
        proficient=proficient,
        expertise=expertise,
        proficiency_bonus=actor_proficiency_bonus(actor) if proficient or expertise else None,
        advantage=net_advantage,
        disadvantage=net_disadvantage,
        dc=dc,
        seed=seed,
    )
    logger.debug("Skill check", actor_id=actor_id, skill=skill, total=result.total, success=result.success)
    return result


__all__ = [
    "CheckResult",
    "proficiency_bonus_for_level",
    "actor_proficiency_bonus",
    "ability_check",
    "saving_throw",
    "skill_check",
    "encounter_ability_check",
    "encounter_skill_check",
]
