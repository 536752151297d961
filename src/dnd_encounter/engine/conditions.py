"""Unified status lookup and condition flags.

A status can live on an actor in two places: the boolean ``conditions``
set, or a tag whose key (or label) normalizes to ``condition-<name>``.
Every rule that consults a status goes through :func:`statuses_of` so
both sources always count. Tags naming an unknown condition become
:class:`CustomStatus` values; they carry no mechanical effect but are
reported like the others.
"""

from __future__ import annotations

from dataclasses import dataclass

from dnd_encounter.core.logging import get_logger
from dnd_encounter.engine.state import drop_tags, replace_actors, require_actor
from dnd_encounter.models import (
    Actor,
    AdvantageState,
    EncounterState,
    StatusEffect,
    Tag,
    normalize_identifier,
)


logger = get_logger(__name__)

_CONDITION_PREFIX = "condition-"


@dataclass(frozen=True)
class CustomStatus:
    """A free-text status with no built-in rules."""

    text: str


Status = StatusEffect | CustomStatus


def status_from_tag(tag: Tag) -> Status | None:
    """Read the status a tag stands for, if any.

    ``condition:prone``, ``Condition Prone`` and a bare ``Prone`` label all
    resolve to :attr:`StatusEffect.PRONE`. An unknown ``condition:`` key
    becomes a :class:`CustomStatus`.
    """
    identifier = tag.identifier
    if not identifier:
        return None
    prefixed = identifier.startswith(_CONDITION_PREFIX)
    name = identifier[len(_CONDITION_PREFIX) :] if prefixed else identifier
    try:
        return StatusEffect(name)
    except ValueError:
        pass
    if prefixed and name:
        return CustomStatus(name)
    return None


def statuses_of(actor: Actor | None) -> frozenset[Status]:
    """Collect every status on an actor from flags and tags."""
    if actor is None:
        return frozenset()
    found: set[Status] = set(actor.conditions)
    for tag in actor.tags:
        status = status_from_tag(tag)
        if status is not None:
            found.add(status)
    return frozenset(found)


def has_status(actor: Actor | None, status: Status) -> bool:
    return status in statuses_of(actor)


def tag_identifiers(actor: Actor | None) -> frozenset[str]:
    """Normalized identifiers of all of an actor's tags."""
    if actor is None:
        return frozenset()
    return frozenset(ident for ident in (tag.identifier for tag in actor.tags) if ident)


# =============================================================================
# Advantage arithmetic
# =============================================================================


def advantage_state(advantage: bool = False, disadvantage: bool = False) -> AdvantageState:
    """Fold a pair of flags into one state; both together cancel out."""
    if advantage and not disadvantage:
        return AdvantageState.ADVANTAGE
    if disadvantage and not advantage:
        return AdvantageState.DISADVANTAGE
    return AdvantageState.NORMAL


def advantage_flags(state: AdvantageState) -> tuple[bool, bool]:
    """Split a state into ``(advantage, disadvantage)`` roll flags."""
    return state is AdvantageState.ADVANTAGE, state is AdvantageState.DISADVANTAGE


def combine_advantage(
    advantage: bool = False,
    disadvantage: bool = False,
    *others: AdvantageState,
) -> AdvantageState:
    """Combine caller flags with derived states.

    Any number of advantage sources and any number of disadvantage
    sources together roll normally.

    Example:
        >>> combine_advantage(True, False, AdvantageState.DISADVANTAGE)
        <AdvantageState.NORMAL: 'normal'>
    """
    for other in others:
        advantage = advantage or other is AdvantageState.ADVANTAGE
        disadvantage = disadvantage or other is AdvantageState.DISADVANTAGE
    return advantage_state(advantage, disadvantage)


# =============================================================================
# Condition flags
# =============================================================================


def set_condition(state: EncounterState, actor_id: str, condition: StatusEffect) -> EncounterState:
    """Raise a condition flag on an actor.

    Raises:
        UnknownActorError: If the actor does not exist.
    """
    actor = require_actor(state, actor_id)
    if condition in actor.conditions:
        return state
    updated = actor.model_copy(update={"conditions": actor.conditions | {condition}})
    logger.debug("Condition set", actor_id=actor_id, condition=condition)
    return replace_actors(state, {actor_id: updated})


def clear_condition(
    state: EncounterState,
    actor_id: str,
    condition: StatusEffect,
) -> EncounterState:
    """Clear a condition from both the flag set and mirroring tags.

    Raises:
        UnknownActorError: If the actor does not exist.
    """
    actor = require_actor(state, actor_id)
    mirrored = [(actor_id, tag.id) for tag in actor.tags if status_from_tag(tag) is condition]
    next_state = state
    if condition in actor.conditions:
        updated = actor.model_copy(update={"conditions": actor.conditions - {condition}})
        next_state = replace_actors(state, {actor_id: updated})
    if mirrored or next_state is not state:
        logger.debug("Condition cleared", actor_id=actor_id, condition=condition)
    return drop_tags(next_state, mirrored)


__all__ = [
    "CustomStatus",
    "Status",
    "status_from_tag",
    "statuses_of",
    "has_status",
    "tag_identifiers",
    "advantage_state",
    "advantage_flags",
    "combine_advantage",
    "set_condition",
    "clear_condition",
]
