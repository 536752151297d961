"""Derive attack advantage from actor state.

Sources are read from the unified status lookup, so a Prone flag and a
``condition:prone`` tag count the same. Any advantage source together
with any disadvantage source rolls normally.
"""

from __future__ import annotations

from dnd_encounter.core.constants import STATE_ADVANTAGE_KEY, STATE_DISADVANTAGE_KEY
from dnd_encounter.engine.conditions import advantage_state, statuses_of, tag_identifiers
from dnd_encounter.engine.state import require_actor
from dnd_encounter.models import (
    AdvantageState,
    AttackMode,
    EncounterState,
    StatusEffect,
    normalize_identifier,
)


_ADVANTAGE_IDENT = normalize_identifier(STATE_ADVANTAGE_KEY)
_DISADVANTAGE_IDENT = normalize_identifier(STATE_DISADVANTAGE_KEY)

# Attacker statuses that hinder the attacker's own rolls.
_ATTACKER_DISADVANTAGE = frozenset(
    {StatusEffect.RESTRAINED, StatusEffect.PRONE, StatusEffect.POISONED}
)


def state_tag_flags(state: EncounterState, actor_id: str) -> tuple[bool, bool]:
    """Return ``(advantage, disadvantage)`` from an actor's state tags."""
    identifiers = tag_identifiers(state.actors.get(actor_id))
    return _ADVANTAGE_IDENT in identifiers, _DISADVANTAGE_IDENT in identifiers


def compute_advantage_state(
    state: EncounterState,
    attacker_id: str,
    defender_id: str,
    mode: AttackMode = AttackMode.MELEE,
) -> AdvantageState:
    """Work out whether an attack rolls with advantage.

    Args:
        state: Current encounter.
        attacker_id: Attacking actor.
        defender_id: Target of the attack.
        mode: Melee or ranged; matters only against a prone target.

    Returns:
        The net AdvantageState.

    Raises:
        UnknownActorError: If either actor does not exist.
    """
    attacker = require_actor(state, attacker_id, "attacker")
    defender = require_actor(state, defender_id, "defender")

    advantage, disadvantage = state_tag_flags(state, attacker_id)

    attacker_statuses = statuses_of(attacker)
    if attacker_statuses & _ATTACKER_DISADVANTAGE:
        disadvantage = True
    if StatusEffect.INVISIBLE in attacker_statuses:
        advantage = True

    defender_statuses = statuses_of(defender)
    if StatusEffect.RESTRAINED in defender_statuses:
        advantage = True
    if StatusEffect.INVISIBLE in defender_statuses:
        disadvantage = True
    if StatusEffect.PRONE in defender_statuses:
        if AttackMode(mode) is AttackMode.MELEE:
            advantage = True
        else:
            disadvantage = True

    return advantage_state(advantage, disadvantage)


__all__ = ["compute_advantage_state", "state_tag_flags"]
