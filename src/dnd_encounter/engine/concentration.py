"""Concentration tracking.

Each caster holds at most one concentration entry. An entry owns a link
table of ``(actor_id, tag_id)`` pairs naming exactly the tags it created,
on any actor. Ending the entry removes those tags and nothing else, and
starting a new entry for a caster ends the old one first, so no tag from
a replaced effect survives.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from dnd_encounter.core.constants import MIN_CONCENTRATION_DC
from dnd_encounter.core.exceptions import ConcentrationError, SpellTargetError
from dnd_encounter.core.logging import get_logger
from dnd_encounter.engine.state import drop_tags, require_actor, utc_now
from dnd_encounter.engine.tags import attach_tags
from dnd_encounter.models import (
    ConcentrationEntry,
    ConcentrationLink,
    EncounterState,
    Tag,
    TagSpec,
)


logger = get_logger(__name__)


@dataclass(frozen=True)
class ConcentrationRemoval:
    """Outcome of ending a concentration entry.

    Attributes:
        state: Encounter after the removal.
        entry: The entry that ended, or None if the caster held none.
        removed_tags: ``(actor_id, tag)`` for every linked tag deleted.
    """

    state: EncounterState
    entry: ConcentrationEntry | None
    removed_tags: tuple[tuple[str, Tag], ...] = ()


@dataclass(frozen=True)
class ConcentrationStart:
    """Outcome of starting a concentration entry.

    Attributes:
        state: Encounter with the new entry installed.
        entry: The new entry.
        created_tags: ``(actor_id, tag)`` for every linked tag created.
        replaced: Removal result for the entry this one replaced.
    """

    state: EncounterState
    entry: ConcentrationEntry
    created_tags: tuple[tuple[str, Tag], ...] = ()
    replaced: ConcentrationRemoval | None = None


def concentration_dc_from_damage(damage: int) -> int:
    """Concentration save DC after taking damage: half the damage, minimum 10.

    Example:
        >>> concentration_dc_from_damage(27)
        13
    """
    return max(MIN_CONCENTRATION_DC, damage // 2)


def get_concentration(state: EncounterState, caster_id: str) -> ConcentrationEntry | None:
    return state.concentration.get(caster_id)


def _without_entry(state: EncounterState, caster_id: str) -> EncounterState:
    concentration = {k: v for k, v in state.concentration.items() if k != caster_id}
    return state.model_copy(update={"concentration": concentration})


def end_concentration(
    state: EncounterState,
    caster_id: str,
    *,
    reason: str | None = None,
) -> ConcentrationRemoval:
    """End a caster's concentration and delete every linked tag.

    Ending concentration for a caster who holds none is a no-op.

    Args:
        state: Encounter to update.
        caster_id: Concentrating caster.
        reason: Why concentration ended, for the log.

    Returns:
        ConcentrationRemoval describing what was removed.
    """
    entry = state.concentration.get(caster_id)
    if entry is None:
        return ConcentrationRemoval(state=state, entry=None)

    removed: list[tuple[str, Tag]] = []
    for link in entry.links:
        actor = state.actors.get(link.actor_id)
        tag = actor.find_tag(link.tag_id) if actor is not None else None
        if tag is not None:
            removed.append((link.actor_id, tag))

    next_state = _without_entry(state, caster_id)
    next_state = drop_tags(next_state, ((link.actor_id, link.tag_id) for link in entry.links))

    logger.info(
        "Concentration ended",
        caster_id=caster_id,
        spell_id=entry.spell_id,
        removed_tags=len(removed),
        reason=reason,
    )
    return ConcentrationRemoval(state=next_state, entry=entry, removed_tags=tuple(removed))


def start_concentration(
    state: EncounterState,
    caster_id: str,
    *,
    spell_id: str,
    spell_name: str,
    target_ids: Sequence[str],
    tags: Iterable[tuple[str, TagSpec]] = (),
    duration_label: str | None = None,
    note: str | None = None,
    expires_at_round: int | None = None,
    expires_at: datetime | None = None,
) -> ConcentrationStart:
    """Start concentration, replacing any entry the caster already holds.

    Every id is validated before anything changes. The old entry, and
    every tag it linked, is removed before the new tags are created.

    Args:
        state: Encounter to update.
        caster_id: Concentrating caster.
        spell_id: Machine identifier of the effect.
        spell_name: Display name.
        target_ids: Affected actors, at least one.
        tags: ``(actor_id, spec)`` pairs to create and link, in order.
        duration_label: Human-readable duration.
        note: Free-form note.
        expires_at_round: Last round the effect lasts.
        expires_at: Wall-clock expiry.

    Returns:
        ConcentrationStart with the new state and entry.

    Raises:
        UnknownActorError: If the caster, a target, or a tag owner is unknown.
        SpellTargetError: If no target is given.
    """
    require_actor(state, caster_id, "caster")
    targets = tuple(dict.fromkeys(target_ids))
    if not targets:
        raise SpellTargetError(
            f"{spell_name} requires at least one target",
            spell_id=spell_id,
            requested=[],
        )
    for target_id in targets:
        require_actor(state, target_id, "target")
    tag_requests = list(tags)
    for owner_id, _ in tag_requests:
        require_actor(state, owner_id, "target")

    replaced = None
    if caster_id in state.concentration:
        replaced = end_concentration(state, caster_id, reason=f"replaced by {spell_name}")
        state = replaced.state

    created: list[tuple[str, Tag]] = []
    for owner_id, spec in tag_requests:
        state, new_tags = attach_tags(state, owner_id, [spec])
        created.append((owner_id, new_tags[0]))

    entry = ConcentrationEntry(
        caster_id=caster_id,
        spell_id=spell_id,
        spell_name=spell_name,
        target_ids=targets,
        duration_label=duration_label,
        note=note,
        expires_at_round=expires_at_round,
        expires_at=expires_at,
        links=tuple(ConcentrationLink(actor_id=a, tag_id=t.id) for a, t in created),
    )
    state = state.model_copy(update={"concentration": {**state.concentration, caster_id: entry}})

    logger.info(
        "Concentration started",
        caster_id=caster_id,
        spell_id=spell_id,
        targets=list(targets),
        linked_tags=len(created),
    )
    return ConcentrationStart(
        state=state, entry=entry, created_tags=tuple(created), replaced=replaced
    )


def link_tag(state: EncounterState, caster_id: str, actor_id: str, tag_id: str) -> EncounterState:
    """Put an existing tag under a caster's concentration.

    Raises:
        ConcentrationError: If the caster is not concentrating or the tag
            does not exist.
        UnknownActorError: If the actor does not exist.
    """
    entry = state.concentration.get(caster_id)
    if entry is None:
        raise ConcentrationError("Caster is not concentrating", caster_id=caster_id)
    actor = require_actor(state, actor_id)
    if actor.find_tag(tag_id) is None:
        raise ConcentrationError(
            f"No tag {tag_id} on {actor_id}",
            caster_id=caster_id,
            spell_id=entry.spell_id,
        )
    link = ConcentrationLink(actor_id=actor_id, tag_id=tag_id)
    if link in entry.links:
        return state
    updated = entry.model_copy(update={"links": (*entry.links, link)})
    return state.model_copy(update={"concentration": {**state.concentration, caster_id: updated}})


def unlink_tag(state: EncounterState, caster_id: str, actor_id: str, tag_id: str) -> EncounterState:
    """Release a tag from a caster's concentration without deleting it."""
    entry = state.concentration.get(caster_id)
    if entry is None:
        return state
    links = tuple(
        link for link in entry.links if (link.actor_id, link.tag_id) != (actor_id, tag_id)
    )
    if len(links) == len(entry.links):
        return state
    updated = entry.model_copy(update={"links": links})
    return state.model_copy(update={"concentration": {**state.concentration, caster_id: updated}})


def clear_all_concentration(state: EncounterState) -> EncounterState:
    """End every concentration entry, cascading to all linked tags."""
    for caster_id in list(state.concentration):
        state = end_concentration(state, caster_id, reason="cleared").state
    return state


def expire_concentration(state: EncounterState, now: datetime | None = None) -> EncounterState:
    """End every entry whose round or wall-clock expiry has passed."""
    moment = now or utc_now()
    for caster_id, entry in list(state.concentration.items()):
        if entry.is_expired(state.round_number, moment):
            state = end_concentration(state, caster_id, reason="expired").state
    return state


def release_actor(state: EncounterState, actor_id: str) -> EncounterState:
    """Detach a departing actor from all concentration bookkeeping.

    Ends the actor's own concentration, and any entry whose only target
    was the actor. Other entries lose their links to the actor's tags and
    the actor's place in their target lists.
    """
    state = end_concentration(state, actor_id, reason="actor removed").state
    for caster_id, entry in list(state.concentration.items()):
        if entry.target_ids and all(t == actor_id for t in entry.target_ids):
            state = end_concentration(state, caster_id, reason="last target removed").state
    if not state.concentration:
        return state

    concentration = {}
    changed = False
    for caster_id, entry in state.concentration.items():
        links = tuple(link for link in entry.links if link.actor_id != actor_id)
        targets = tuple(t for t in entry.target_ids if t != actor_id)
        if links != entry.links or targets != entry.target_ids:
            changed = True
            entry = entry.model_copy(update={"links": links, "target_ids": targets})
        concentration[caster_id] = entry
    if not changed:
        return state
    return state.model_copy(update={"concentration": concentration})


def concentration_entries_for(state: EncounterState, actor_id: str) -> list[ConcentrationEntry]:
    """Entries held by an actor (zero or one)."""
    return [entry for entry in state.concentration.values() if entry.caster_id == actor_id]


__all__ = [
    "ConcentrationRemoval",
    "ConcentrationStart",
    "concentration_dc_from_damage",
    "get_concentration",
    "start_concentration",
    "end_concentration",
    "link_tag",
    "unlink_tag",
    "clear_all_concentration",
    "expire_concentration",
    "release_actor",
    "concentration_entries_for",
]
