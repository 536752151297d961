"""Short and long rests for a side or named actors.

Targets are chosen with one specifier: a side keyword (``party``,
``foe``, ``neutral``), an actor id, or an actor name (exact first, then
case-insensitive). A specifier that selects nobody is an error.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from dnd_encounter.core.config import get_settings
from dnd_encounter.core.constants import (
    BARDIC_INSPIRATION_KEY,
    CONCENTRATION_KEY_PREFIX,
    CONDITION_KEY_PREFIX,
    SPELL_KEY_PREFIX,
    STATE_ADVANTAGE_KEY,
    STATE_DISADVANTAGE_KEY,
)
from dnd_encounter.core.exceptions import RestTargetError, ValidationError
from dnd_encounter.core.logging import get_logger
from dnd_encounter.engine.bardic import is_bardic_inspiration_tag
from dnd_encounter.engine.concentration import end_concentration
from dnd_encounter.engine.conditions import status_from_tag
from dnd_encounter.engine.state import drop_tags, replace_actors
from dnd_encounter.models import Ability, Actor, EncounterState, Side, Tag


logger = get_logger(__name__)

DEFAULT_TARGET = Side.PARTY

_CLEARED_PREFIXES = (CONDITION_KEY_PREFIX, SPELL_KEY_PREFIX, CONCENTRATION_KEY_PREFIX)
_CLEARED_KEYS = frozenset({STATE_ADVANTAGE_KEY, STATE_DISADVANTAGE_KEY, BARDIC_INSPIRATION_KEY})


@dataclass(frozen=True)
class RestResult:
    """Outcome of a rest.

    Attributes:
        state: Encounter after the rest.
        actor_ids: Actors that rested, in registration order.
        lines: ``"{name} → HP {hp}/{max}"`` per rested actor.
    """

    state: EncounterState
    actor_ids: tuple[str, ...]
    lines: tuple[str, ...]


def average_die(sides: int) -> int:
    """Rounded-up average of a die, as used for fixed hit die healing."""
    if sides <= 0:
        return 0
    return math.ceil((sides + 1) / 2)


def select_rest_targets(state: EncounterState, who: str | Side | None = None) -> list[str]:
    """Resolve a rest specifier to actor ids.

    Raises:
        RestTargetError: If nothing matches.
    """
    raw = str(who).strip() if who is not None else ""
    if not raw:
        raw = DEFAULT_TARGET.value

    available = sorted(actor.name for actor in state.actors.values())
    lowered = raw.lower()
    if lowered in {side.value for side in Side}:
        matches = [actor_id for actor_id, actor in state.actors.items() if actor.side == lowered]
        if not matches:
            raise RestTargetError(f'No actors on side "{lowered}".', who=raw, available=available)
        return matches

    matches = [
        actor_id
        for actor_id, actor in state.actors.items()
        if actor_id == raw or actor.name == raw or actor.name.lower() == lowered
    ]
    if not matches:
        raise RestTargetError(f'No encounter actors match "{raw}".', who=raw, available=available)
    return matches


def _line(actor: Actor) -> str:
    return f"{actor.name} → HP {actor.hp}/{actor.max_hp}"


def _cleared_by_long_rest(tag: Tag) -> bool:
    """Consumables and status effects go; free-form notes stay."""
    key = (tag.key or "").strip().lower()
    if key.startswith(_CLEARED_PREFIXES) or key in _CLEARED_KEYS:
        return True
    if is_bardic_inspiration_tag(tag):
        return True
    return status_from_tag(tag) is not None


def short_rest(
    state: EncounterState,
    who: str | Side | None = None,
    *,
    hit_dice: int = 0,
    hit_die: int | None = None,
) -> RestResult:
    """Spend hit dice to heal.

    Each spent die heals its rounded-up average plus the actor's CON
    modifier, never less than zero in total and never above max hp.

    Args:
        state: Encounter to update.
        who: Side keyword, actor id or name; defaults to the party.
        hit_dice: Hit dice spent by each selected actor.
        hit_die: Die size; defaults to the configured hit die.

    Raises:
        RestTargetError: If the specifier selects nobody.
        ValidationError: If ``hit_dice`` is negative.
    """
    if hit_dice < 0:
        raise ValidationError("Hit dice spent cannot be negative", field_name="hit_dice", invalid_value=hit_dice)
    sides = hit_die if hit_die and hit_die > 0 else get_settings().game.default_hit_die
    targets = select_rest_targets(state, who)

    updated: dict[str, Actor] = {}
    defeated = state.defeated
    for actor_id in targets:
        actor = state.actors[actor_id]
        heal = max(0, (average_die(sides) + actor.ability_mod(Ability.CON)) * hit_dice)
        hp = min(actor.max_hp, actor.hp + heal)
        if hp != actor.hp:
            changes: dict = {"hp": hp}
            if hp > 0:
                changes["death"] = None
                defeated = defeated - {actor_id}
            updated[actor_id] = actor.model_copy(update=changes)

    next_state = replace_actors(state, updated, defeated=defeated) if updated else state
    logger.info("Short rest", who=str(who or DEFAULT_TARGET), actors=targets, hit_dice=hit_dice, die=sides)
    return RestResult(
        state=next_state,
        actor_ids=tuple(targets),
        lines=tuple(_line(next_state.actors[actor_id]) for actor_id in targets),
    )


def long_rest(state: EncounterState, who: str | Side | None = None) -> RestResult:
    """Fully recover the selected actors.

    Hp returns to max, every condition flag clears, status and consumable
    tags are removed, death saves reset, and any concentration an actor
    holds ends along with all of its linked tags.

    Raises:
        RestTargetError: If the specifier selects nobody.
    """
    targets = select_rest_targets(state, who)

    next_state = state
    for actor_id in targets:
        next_state = end_concentration(next_state, actor_id, reason="long rest").state

    removals = [
        (actor_id, tag.id)
        for actor_id in targets
        for tag in next_state.actors[actor_id].tags
        if _cleared_by_long_rest(tag)
    ]
    next_state = drop_tags(next_state, removals)

    updated = {
        actor_id: next_state.actors[actor_id].model_copy(
            update={"hp": next_state.actors[actor_id].max_hp, "conditions": frozenset(), "death": None}
        )
        for actor_id in targets
    }
    next_state = replace_actors(next_state, updated, defeated=next_state.defeated - set(targets))

    logger.info("Long rest", who=str(who or DEFAULT_TARGET), actors=targets)
    return RestResult(
        state=next_state,
        actor_ids=tuple(targets),
        lines=tuple(_line(next_state.actors[actor_id]) for actor_id in targets),
    )


__all__ = ["RestResult", "average_die", "select_rest_targets", "short_rest", "long_rest"]
