"""Encounter turn-order state machine.

The machine has two states. With an empty initiative list it is in
``NO_ORDER``; turn navigation then falls back to registration order.
Once initiative exists it is ``ACTIVE`` and the turn pointer walks the
order, skipping defeated actors and wrapping into the next (or previous)
round. Every transition returns a new EncounterState.

Turn transitions also drive the tag lifecycle: the outgoing actor's
``turnEnd`` countdowns tick, round and wall-clock expiry are swept,
expired concentration ends, then the incoming actor's ``turnStart``
countdowns tick.

Example:
    >>> state = create_encounter(seed="goblins")
    >>> state = add_actor(state, fighter)
    >>> state = add_actor(state, goblin)
    >>> state = roll_initiative(state)
    >>> state = next_turn(state)
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import TypeAdapter

from dnd_encounter.core.exceptions import TurnManagementError, ValidationError
from dnd_encounter.core.logging import get_logger
from dnd_encounter.engine.concentration import expire_concentration, release_actor
from dnd_encounter.engine.dice import roll
from dnd_encounter.engine.rng import derive_seed
from dnd_encounter.engine.state import replace_actors, require_actor, utc_now
from dnd_encounter.engine.tags import expire_tags, tick_tag_durations
from dnd_encounter.models import (
    Ability,
    Actor,
    DeathState,
    EncounterState,
    InitiativeEntry,
    TagPhase,
)


logger = get_logger(__name__)

_ACTOR_ADAPTER: TypeAdapter[Actor] = TypeAdapter(Actor)


# =============================================================================
# Setup
# =============================================================================


def create_encounter(seed: str | None = None, *, encounter_id: str | None = None) -> EncounterState:
    """Create an empty encounter.

    Args:
        seed: Base seed for every roll the encounter makes.
        encounter_id: Explicit id; defaults to ``encounter-<seed>``.

    Returns:
        A new EncounterState in the NO_ORDER phase.
    """
    if encounter_id is None:
        encounter_id = f"encounter-{seed}" if seed else "encounter"
    logger.debug("Encounter created", encounter_id=encounter_id, seeded=bool(seed))
    return EncounterState(id=encounter_id, seed=seed or None)


def add_actor(state: EncounterState, actor: Actor | Mapping[str, Any]) -> EncounterState:
    """Register an actor, replacing any actor with the same id.

    The defeated set is reconciled from the actor's current hp.

    Args:
        state: Encounter to update.
        actor: Actor model, or a mapping validated as one.

    Returns:
        Updated state.
    """
    if isinstance(actor, Mapping):
        actor = _ACTOR_ADAPTER.validate_python(actor)
    defeated = state.defeated - {actor.id} if actor.hp > 0 else state.defeated | {actor.id}
    logger.debug("Actor added", actor_id=actor.id, side=actor.side, hp=actor.hp)
    return state.model_copy(
        update={"actors": {**state.actors, actor.id: actor}, "defeated": defeated}
    )


def remove_actor(state: EncounterState, actor_id: str) -> EncounterState:
    """Remove an actor and repair the turn pointer.

    The actor's concentration ends (with its linked tags) and links to the
    actor's own tags are dropped from other casters' entries, and so is the
    actor's inventory. The pointer is clamped into the shrunk order and then
    re-snapped to the first active entry. An empty order collapses the
    round to 0.

    Raises:
        UnknownActorError: If the actor does not exist.
    """
    require_actor(state, actor_id)
    state = release_actor(state, actor_id)

    actors = {key: value for key, value in state.actors.items() if key != actor_id}
    order = tuple(entry for entry in state.order if entry.actor_id != actor_id)
    removed_index = next(
        (i for i, entry in enumerate(state.order) if entry.actor_id == actor_id), None
    )

    turn_index = state.turn_index
    if removed_index is not None:
        if not order:
            turn_index = 0
        elif removed_index < state.turn_index or state.turn_index >= len(order):
            turn_index = max(0, min(len(order) - 1, state.turn_index - 1))
        else:
            turn_index = min(len(order) - 1, state.turn_index)
    else:
        turn_index = max(0, min(len(order) - 1, turn_index))

    next_state = state.model_copy(
        update={
            "actors": actors,
            "order": order,
            "defeated": state.defeated - {actor_id},
            "inventories": {key: value for key, value in state.inventories.items() if key != actor_id},
            "turn_index": turn_index,
            "round_number": state.round_number if order else 0,
        }
    )
    first_active = _first_active_index(next_state, order)
    if first_active is not None:
        next_state = next_state.model_copy(update={"turn_index": first_active})

    logger.info("Actor removed", actor_id=actor_id, remaining=len(actors))
    return next_state


# =============================================================================
# Initiative
# =============================================================================


def _first_active_index(state: EncounterState, order: tuple[InitiativeEntry, ...]) -> int | None:
    for index, entry in enumerate(order):
        if state.is_active(entry.actor_id):
            return index
    return None


def _sort_order(
    state: EncounterState,
    entries: list[InitiativeEntry],
) -> tuple[InitiativeEntry, ...]:
    """Descending total, then DEX, then name, then registration position."""
    registration = {actor_id: index for index, actor_id in enumerate(state.actors)}

    def sort_key(item: tuple[int, InitiativeEntry]) -> tuple:
        position, entry = item
        actor = state.actors.get(entry.actor_id)
        dex = actor.ability_mod(Ability.DEX) if actor is not None else 0
        name = actor.name if actor is not None else ""
        return (
            -entry.total,
            -dex,
            name.casefold(),
            name,
            registration.get(entry.actor_id, len(registration) + position),
        )

    return tuple(entry for _, entry in sorted(enumerate(entries), key=sort_key))


def roll_initiative(state: EncounterState) -> EncounterState:
    """Roll 1d20 + DEX for every actor and start round 1.

    Each actor's roll is seeded from ``<seed>:init:<actor_id>``, so adding
    an actor never changes anyone else's roll.

    Returns:
        Updated state. Round is 1 when any actor exists, otherwise 0, and
        the pointer rests on the first active entry.
    """
    entries = []
    for actor in state.actors.values():
        rolled = roll("1d20", seed=derive_seed(state.seed, "init", actor.id)).rolls[0]
        entries.append(
            InitiativeEntry(
                actor_id=actor.id,
                rolled=rolled,
                total=rolled + actor.ability_mod(Ability.DEX),
            )
        )

    order = _sort_order(state, entries)
    next_state = state.model_copy(
        update={"order": order, "round_number": 1 if order else 0, "turn_index": 0}
    )
    first_active = _first_active_index(next_state, order)
    if first_active is not None:
        next_state = next_state.model_copy(update={"turn_index": first_active})

    logger.info(
        "Initiative rolled",
        encounter_id=state.id,
        order=[(entry.actor_id, entry.total) for entry in order],
    )
    return next_state


def set_initiative(state: EncounterState, actor_id: str, score: int | float) -> EncounterState:
    """Set an actor's initiative by hand and re-sort.

    Args:
        state: Encounter to update.
        actor_id: Actor whose score is set.
        score: Whole-number initiative score.

    Returns:
        Updated state; round is at least 1 and the pointer re-snaps to
        the first active entry.

    Raises:
        UnknownActorError: If the actor does not exist.
        ValidationError: If the score is not a finite whole number.
    """
    require_actor(state, actor_id)
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ValidationError(
            "Initiative score must be a number",
            field_name="score",
            invalid_value=score,
        )
    if not math.isfinite(score) or score != int(score):
        raise ValidationError(
            "Initiative score must be a finite whole number",
            field_name="score",
            invalid_value=score,
        )

    value = int(score)
    remaining = [entry for entry in state.order if entry.actor_id != actor_id]
    remaining.append(InitiativeEntry(actor_id=actor_id, rolled=value, total=value))
    order = _sort_order(state, remaining)

    next_state = state.model_copy(
        update={"order": order, "round_number": max(state.round_number, 1), "turn_index": 0}
    )
    first_active = _first_active_index(next_state, order)
    if first_active is not None:
        next_state = next_state.model_copy(update={"turn_index": first_active})

    logger.info("Initiative set", actor_id=actor_id, score=value)
    return next_state


def clear_initiative(state: EncounterState) -> EncounterState:
    """Drop the initiative order and return to round 0."""
    if not state.order and state.turn_index == 0 and state.round_number == 0:
        return state
    logger.info("Initiative cleared", encounter_id=state.id)
    return state.model_copy(update={"order": (), "turn_index": 0, "round_number": 0})


# =============================================================================
# Turns
# =============================================================================


def _check_order(state: EncounterState) -> None:
    counts = Counter(entry.actor_id for entry in state.order)
    duplicates = sorted(actor_id for actor_id, count in counts.items() if count > 1)
    if duplicates:
        raise TurnManagementError("Initiative order lists an actor more than once", actor_ids=duplicates)
    missing = sorted(set(counts) - set(state.actors))
    if missing:
        raise TurnManagementError("Initiative order names unknown actors", actor_ids=missing)


def _effective_order(state: EncounterState) -> tuple[tuple[InitiativeEntry, ...], bool]:
    """The initiative order, or registration order when none exists."""
    if state.order:
        _check_order(state)
        return state.order, False
    fallback = tuple(
        InitiativeEntry(actor_id=actor_id, rolled=0, total=0) for actor_id in state.actors
    )
    return fallback, True


def _resolve_current_index(
    state: EncounterState,
    order: tuple[InitiativeEntry, ...],
) -> int | None:
    """Clamp the pointer and heal it onto an active entry."""
    index = max(0, min(len(order) - 1, state.turn_index))
    if state.is_active(order[index].actor_id):
        return index
    return _first_active_index(state, order)


def _step(
    state: EncounterState,
    order: tuple[InitiativeEntry, ...],
    start: int,
    direction: int,
) -> tuple[int, bool]:
    """Find the next active index in a direction, reporting a wrap."""
    total = len(order)
    index = start
    wrapped = False
    for _ in range(total):
        candidate = (index + direction) % total
        if not wrapped and (candidate <= start if direction > 0 else candidate >= start):
            wrapped = True
        index = candidate
        if state.is_active(order[index].actor_id):
            return index, wrapped
    return start, False


def _sweep(state: EncounterState, now: datetime) -> EncounterState:
    state = expire_tags(state, now)
    return expire_concentration(state, now)


def next_turn(state: EncounterState, *, now: datetime | None = None) -> EncounterState:
    """Advance to the next active actor.

    Wrapping past the end of the order starts a new round. When nobody
    can act the state is returned unchanged.

    Args:
        state: Encounter to advance.
        now: Wall-clock time for expiry; defaults to the current UTC time.

    Returns:
        Updated state.
    """
    order, fallback = _effective_order(state)
    if not order:
        return state
    current = _resolve_current_index(state, order)
    if current is None:
        logger.debug("No active actors; turn not advanced", encounter_id=state.id)
        return state

    moment = now or utc_now()
    next_state = tick_tag_durations(state, order[current].actor_id, TagPhase.TURN_END)

    round_number = max(next_state.round_number, 1) if fallback else next_state.round_number
    index, wrapped = _step(next_state, order, current, 1)
    if wrapped:
        round_number += 1

    next_state = next_state.model_copy(update={"turn_index": index, "round_number": round_number})
    next_state = _sweep(next_state, moment)
    next_state = tick_tag_durations(next_state, order[index].actor_id, TagPhase.TURN_START)

    if wrapped:
        logger.info("Round advanced", encounter_id=state.id, round_number=round_number)
    logger.debug("Turn advanced", actor_id=order[index].actor_id, turn_index=index)
    return next_state


def previous_turn(state: EncounterState, *, now: datetime | None = None) -> EncounterState:
    """Step back to the previous active actor.

    Wrapping past the start of the order goes back a round, never below 0
    (or 1 without an initiative order). Expiry is swept but countdowns do
    not tick and expired tags are not restored.
    """
    order, fallback = _effective_order(state)
    if not order:
        return state
    current = _resolve_current_index(state, order)
    if current is None:
        return state

    round_number = max(state.round_number, 1) if fallback else state.round_number
    index, wrapped = _step(state, order, current, -1)
    if wrapped:
        round_number = max(1 if fallback else 0, round_number - 1)

    next_state = state.model_copy(update={"turn_index": index, "round_number": round_number})
    logger.debug("Turn reversed", actor_id=order[index].actor_id, round_number=round_number)
    return _sweep(next_state, now or utc_now())


def current_actor(state: EncounterState) -> Actor | None:
    """The actor whose turn it is.

    If the stored pointer names a defeated actor, the first active entry
    is returned instead; the state itself is not changed.
    """
    order, _ = _effective_order(state)
    if not order:
        return None
    index = _resolve_current_index(state, order)
    if index is None:
        return None
    return state.actors.get(order[index].actor_id)


# =============================================================================
# Hit points
# =============================================================================


def apply_damage(state: EncounterState, actor_id: str, amount: int) -> EncounterState:
    """Reduce an actor's hp, never below 0.

    Dropping to 0 adds the actor to the defeated set and opens a death
    save tally. Non-positive amounts change nothing.

    Raises:
        UnknownActorError: If the actor does not exist.
    """
    actor = require_actor(state, actor_id)
    if amount <= 0:
        return state

    hp = max(0, actor.hp - amount)
    changes: dict[str, Any] = {"hp": hp}
    if hp == 0:
        death = actor.death or DeathState()
        changes["death"] = death.model_copy(update={"stable": False})
    defeated = state.defeated | {actor_id} if hp == 0 else state.defeated - {actor_id}

    logger.debug("Damage applied", actor_id=actor_id, amount=amount, hp=hp)
    if hp == 0 and actor_id not in state.defeated:
        logger.info("Actor defeated", actor_id=actor_id)
    return replace_actors(state, {actor_id: actor.model_copy(update=changes)}, defeated=defeated)


def apply_healing(state: EncounterState, actor_id: str, amount: int) -> EncounterState:
    """Restore hp up to the maximum.

    Healing above 0 removes the actor from the defeated set and resets its
    death saves. Non-positive amounts change nothing.

    Raises:
        UnknownActorError: If the actor does not exist.
    """
    actor = require_actor(state, actor_id)
    if amount <= 0:
        return state

    hp = min(actor.max_hp, actor.hp + amount)
    changes: dict[str, Any] = {"hp": hp}
    if hp > 0:
        changes["death"] = None
    defeated = state.defeated - {actor_id} if hp > 0 else state.defeated

    logger.debug("Healing applied", actor_id=actor_id, amount=amount, hp=hp)
    return replace_actors(state, {actor_id: actor.model_copy(update=changes)}, defeated=defeated)


__all__ = [
    "create_encounter",
    "add_actor",
    "remove_actor",
    "roll_initiative",
    "set_initiative",
    "clear_initiative",
    "next_turn",
    "previous_turn",
    "current_actor",
    "apply_damage",
    "apply_healing",
]
