"""Hunter's Mark: extra 1d6 weapon damage against one marked creature.

The mark can move to a new creature without dropping concentration: the
tags on the old target are removed, a fresh tag goes on the new one, and
the caster's maintaining tag stays where it is.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from dnd_encounter.core.constants import CONCENTRATION_KEY_PREFIX
from dnd_encounter.core.exceptions import ConcentrationError
from dnd_encounter.core.logging import get_logger
from dnd_encounter.engine.concentration import (
    ConcentrationRemoval,
    end_concentration,
    start_concentration,
)
from dnd_encounter.engine.spells.common import SpellCastResult, maintaining_tag
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

SPELL_ID = "hunters-mark"
SPELL_NAME = "Hunter's Mark"
TAG_KEY = "spell:hunters-mark"
MAINTAINING_KEY = f"{CONCENTRATION_KEY_PREFIX}{SPELL_ID}"
TAG_NOTE = "Add 1d6 to weapon damage rolls against this target"
DEFAULT_DURATION = timedelta(hours=1)


@dataclass(frozen=True)
class MarkTransferResult:
    """Outcome of moving Hunter's Mark.

    Attributes:
        state: Encounter after the transfer.
        entry: Updated concentration entry.
        previous_target_id: Creature the mark moved from.
        removed_tags: ``(actor_id, tag)`` deleted from former targets.
        effect_tag: Tag placed on the new target.
    """

    state: EncounterState
    entry: ConcentrationEntry
    previous_target_id: str | None
    removed_tags: tuple[tuple[str, Tag], ...]
    effect_tag: Tag


def _duration_label(duration: timedelta) -> str:
    hours, remainder = divmod(int(duration.total_seconds()), 3600)
    if hours and not remainder:
        return "1 hour" if hours == 1 else f"{hours} hours"
    minutes = int(duration.total_seconds()) // 60
    return "1 minute" if minutes == 1 else f"{minutes} minutes"


def _effect_tag(caster_name: str, expires_at: datetime | None) -> TagSpec:
    return TagSpec(
        text=SPELL_NAME,
        key=TAG_KEY,
        value=True,
        note=TAG_NOTE,
        source=caster_name,
        expires_at=expires_at,
    )


def cast_hunters_mark(
    state: EncounterState,
    caster_id: str,
    target_id: str,
    *,
    duration: timedelta = DEFAULT_DURATION,
    note: str | None = None,
    now: datetime | None = None,
) -> SpellCastResult:
    """Cast Hunter's Mark on one creature.

    Args:
        state: Encounter to update.
        caster_id: Caster id.
        target_id: Creature to mark.
        duration: Wall-clock duration, one hour by default.
        note: Free-form note for the concentration entry.
        now: Cast time; defaults to the current UTC time.

    Returns:
        SpellCastResult.

    Raises:
        UnknownActorError: If the caster or target is unknown.
    """
    caster = require_actor(state, caster_id, "caster")
    require_actor(state, target_id, "target")

    expires_at = (now or utc_now()) + duration
    label = _duration_label(duration)
    started = start_concentration(
        state,
        caster_id,
        spell_id=SPELL_ID,
        spell_name=SPELL_NAME,
        target_ids=[target_id],
        tags=[
            (target_id, _effect_tag(caster.name, expires_at)),
            (
                caster_id,
                maintaining_tag(SPELL_ID, SPELL_NAME, label, source=caster.name, expires_at=expires_at),
            ),
        ],
        duration_label=label,
        note=note,
        expires_at=expires_at,
    )
    return SpellCastResult.from_start(started, caster_id, SPELL_ID)


def _is_maintaining_link(state: EncounterState, caster_id: str, link: ConcentrationLink) -> bool:
    if link.actor_id != caster_id:
        return False
    actor = state.actors.get(caster_id)
    tag = actor.find_tag(link.tag_id) if actor is not None else None
    return tag is not None and tag.key == MAINTAINING_KEY


def transfer_hunters_mark(
    state: EncounterState,
    caster_id: str,
    new_target_id: str,
    *,
    note: str | None = None,
) -> MarkTransferResult:
    """Move an active Hunter's Mark to a new creature.

    Concentration and its expiry are unchanged.

    Raises:
        ConcentrationError: If the caster has no active Hunter's Mark.
        UnknownActorError: If the caster or new target is unknown.
    """
    caster = require_actor(state, caster_id, "caster")
    require_actor(state, new_target_id, "target")
    entry = state.concentration.get(caster_id)
    if entry is None or entry.spell_id != SPELL_ID:
        raise ConcentrationError(
            "No active Hunter's Mark concentration to transfer",
            caster_id=caster_id,
            spell_id=SPELL_ID,
        )

    kept = [link for link in entry.links if _is_maintaining_link(state, caster_id, link)]
    moving = [link for link in entry.links if link not in kept]
    removed: list[tuple[str, Tag]] = []
    for link in moving:
        actor = state.actors.get(link.actor_id)
        tag = actor.find_tag(link.tag_id) if actor is not None else None
        if tag is not None:
            removed.append((link.actor_id, tag))

    # Detach the entry first so drop_tags does not rewrite it mid-update.
    detached = state.model_copy(
        update={"concentration": {k: v for k, v in state.concentration.items() if k != caster_id}}
    )
    next_state = drop_tags(detached, ((link.actor_id, link.tag_id) for link in moving))
    next_state, created = attach_tags(
        next_state, new_target_id, [_effect_tag(caster.name, entry.expires_at)]
    )
    effect_tag = created[0]

    updated = entry.model_copy(
        update={
            "target_ids": (new_target_id,),
            "links": (*kept, ConcentrationLink(actor_id=new_target_id, tag_id=effect_tag.id)),
            "note": note if note is not None else entry.note,
        }
    )
    next_state = next_state.model_copy(
        update={"concentration": {**next_state.concentration, caster_id: updated}}
    )

    previous = entry.target_ids[0] if entry.target_ids else None
    logger.info(
        "Hunter's Mark transferred",
        caster_id=caster_id,
        previous_target=previous,
        new_target=new_target_id,
    )
    return MarkTransferResult(
        state=next_state,
        entry=updated,
        previous_target_id=previous,
        removed_tags=tuple(removed),
        effect_tag=effect_tag,
    )


def end_hunters_mark(state: EncounterState, caster_id: str) -> ConcentrationRemoval:
    """End the caster's Hunter's Mark; any other concentration is left alone."""
    entry = state.concentration.get(caster_id)
    if entry is None or entry.spell_id != SPELL_ID:
        return ConcentrationRemoval(state=state, entry=None)
    return end_concentration(state, caster_id, reason="hunter's mark ended")


def marked_by(state: EncounterState, caster_id: str, target_id: str) -> bool:
    """Whether the caster's active Hunter's Mark is on the target.

    Reads the concentration entry and its link table, never tag sources.
    """
    entry = state.concentration.get(caster_id)
    if entry is None or entry.spell_id != SPELL_ID:
        return False
    if target_id in entry.target_ids:
        return True
    return any(
        link.actor_id == target_id and not _is_maintaining_link(state, caster_id, link)
        for link in entry.links
    )


__all__ = [
    "SPELL_ID",
    "SPELL_NAME",
    "TAG_KEY",
    "MarkTransferResult",
    "cast_hunters_mark",
    "transfer_hunters_mark",
    "end_hunters_mark",
    "marked_by",
]
