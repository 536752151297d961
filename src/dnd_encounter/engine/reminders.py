"""Human-readable reminders for an upcoming roll.

Nothing here changes state. Reminders list bonuses the engine does not
roll for the player (Bless, Guidance, Bardic Inspiration, Hunter's Mark)
and condition effects that shape the roll, so a table can apply them.
"""

from __future__ import annotations

from dnd_encounter.engine.advantage import state_tag_flags
from dnd_encounter.engine.bardic import bardic_inspiration_die, find_bardic_inspiration
from dnd_encounter.engine.concentration import (
    concentration_dc_from_damage,
    concentration_entries_for,
)
from dnd_encounter.engine.conditions import statuses_of, tag_identifiers
from dnd_encounter.engine.spells import bless, guidance
from dnd_encounter.engine.spells.hunters_mark import marked_by
from dnd_encounter.engine.state import require_actor
from dnd_encounter.models import EncounterState, RollEvent, StatusEffect, normalize_identifier


_ROLL_NOUN = {
    RollEvent.ATTACK: "attack roll",
    RollEvent.SAVE: "saving throw",
    RollEvent.CHECK: "ability check",
}

_EVENT_WORD = {
    RollEvent.ATTACK: "attack",
    RollEvent.SAVE: "save",
    RollEvent.CHECK: "ability check",
}


def _spell_active_on(state: EncounterState, actor_id: str, spell_id: str, tag_key: str) -> bool:
    """Whether a spell affects an actor, by tag or by concentration targets."""
    identifiers = tag_identifiers(state.actors.get(actor_id))
    if normalize_identifier(tag_key) in identifiers or spell_id in identifiers:
        return True
    return any(
        entry.spell_id == spell_id and actor_id in entry.target_ids
        for entry in state.concentration.values()
    )


def _condition_lines(
    state: EncounterState,
    actor_id: str,
    target_id: str | None,
    event: RollEvent,
) -> list[str]:
    own = statuses_of(state.actors.get(actor_id))
    lines: list[str] = []

    if event is RollEvent.ATTACK:
        theirs = statuses_of(state.actors.get(target_id)) if target_id else frozenset()
        if StatusEffect.PRONE in theirs:
            lines.append("Reminder: Target is Prone (melee attacks: advantage; ranged attacks: disadvantage)")
        if StatusEffect.PRONE in own:
            lines.append("Reminder: Attacker is Prone (attacks: disadvantage)")
        if StatusEffect.RESTRAINED in theirs:
            lines.append("Reminder: Target is Restrained (attacks against it: advantage)")
        if StatusEffect.RESTRAINED in own:
            lines.append("Reminder: Attacker is Restrained (attacks: disadvantage)")
        if StatusEffect.INVISIBLE in theirs:
            lines.append("Reminder: Target is Invisible (attacks against it: disadvantage)")
        if StatusEffect.INVISIBLE in own:
            lines.append("Reminder: Attacker is Invisible (attacks: advantage)")
        if StatusEffect.POISONED in own:
            lines.append("Reminder: Attacker is Poisoned (attacks: disadvantage)")
    elif event is RollEvent.SAVE:
        if StatusEffect.RESTRAINED in own:
            lines.append("Reminder: Restrained (DEX saves: disadvantage)")
    elif event is RollEvent.CHECK:
        if StatusEffect.POISONED in own:
            lines.append("Reminder: Poisoned (ability checks: disadvantage)")
    return lines


def reminders_for(
    state: EncounterState,
    actor_id: str,
    target_id: str | None,
    event: RollEvent | str,
) -> list[str]:
    """Collect reminder lines for an actor about to roll.

    Args:
        state: Current encounter.
        actor_id: Actor making the roll.
        target_id: Target of an attack, if any.
        event: ``attack``, ``save`` or ``check``.

    Returns:
        Reminder lines in a stable order: advantage state, Bless,
        Guidance, Bardic Inspiration, Hunter's Mark, then conditions.

    Raises:
        UnknownActorError: If the actor or target is unknown.
    """
    event = RollEvent(event)
    require_actor(state, actor_id)
    target = require_actor(state, target_id, "target") if target_id else None

    lines: list[str] = []
    word = _EVENT_WORD[event]

    advantage, disadvantage = state_tag_flags(state, actor_id)
    if advantage and disadvantage:
        lines.append("Reminder: Advantage & Disadvantage both present — they cancel out (roll normally)")
    elif advantage:
        lines.append(f"Reminder: Advantage on this {event.value}")
    elif disadvantage:
        lines.append(f"Reminder: Disadvantage on this {event.value}")

    if _spell_active_on(state, actor_id, bless.SPELL_ID, bless.TAG_KEY):
        lines.append(f"Reminder: Bless (+d4 to {_ROLL_NOUN[event]})")

    if event is RollEvent.CHECK and _spell_active_on(state, actor_id, guidance.SPELL_ID, guidance.TAG_KEY):
        lines.append("Reminder: Guidance (+1d4 to this ability check; concentration)")

    inspiration = find_bardic_inspiration(state.actors[actor_id])
    if inspiration is not None:
        die = bardic_inspiration_die(inspiration)
        lines.append(f"Reminder: Bardic Inspiration (+{die} to {word}; after seeing roll)")

    if event is RollEvent.ATTACK and target is not None and marked_by(state, actor_id, target.id):
        lines.append(f"Reminder: Hunter's Mark (+1d6 on hit vs {target.name})")

    lines.extend(_condition_lines(state, actor_id, target_id, event))
    return lines


def concentration_reminder_lines_for_damage(
    state: EncounterState,
    actor_id: str,
    damage: int,
) -> list[str]:
    """Concentration save reminders for an actor that just took damage."""
    if damage <= 0:
        return []
    dc = concentration_dc_from_damage(damage)
    return [
        f"Reminder: Concentration check DC {dc} for {entry.spell_name or 'spell'}"
        for entry in concentration_entries_for(state, actor_id)
    ]


__all__ = ["reminders_for", "concentration_reminder_lines_for_damage"]
