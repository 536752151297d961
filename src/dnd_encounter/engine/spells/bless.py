"""Bless: up to three creatures add 1d4 to attack rolls and saving throws.

Each additional slot level above 1st adds one more target. Recasting
replaces the previous cast entirely, so creatures dropped from the new
target list lose their Bless tag.
"""

from __future__ import annotations

from collections.abc import Sequence

from dnd_encounter.core.config import get_settings
from dnd_encounter.core.constants import ROUNDS_PER_MINUTE
from dnd_encounter.core.exceptions import SpellTargetError, ValidationError
from dnd_encounter.core.logging import get_logger
from dnd_encounter.engine.concentration import (
    ConcentrationRemoval,
    end_concentration,
    start_concentration,
)
from dnd_encounter.engine.spells.common import SpellCastResult, maintaining_tag, rounds_label
from dnd_encounter.engine.state import require_actor
from dnd_encounter.models import EncounterState, TagSpec


logger = get_logger(__name__)

SPELL_ID = "bless"
SPELL_NAME = "Bless"
TAG_KEY = "spell:bless"
TAG_NOTE = "Add 1d4 to attack rolls and saving throws"


def max_bless_targets(slot_level: int = 1) -> int:
    """Number of creatures Bless can affect at a slot level."""
    return get_settings().game.bless_max_targets + max(0, slot_level - 1)


def cast_bless(
    state: EncounterState,
    caster_id: str,
    target_ids: Sequence[str],
    *,
    rounds: int = ROUNDS_PER_MINUTE,
    slot_level: int = 1,
    note: str | None = None,
    strict: bool = False,
) -> SpellCastResult:
    """Cast Bless.

    Duplicate ids are collapsed, keeping first occurrences. When more
    unique targets are given than the slot allows, the first ones in input
    order are kept and the rest ignored; with ``strict=True`` the cast is
    refused instead.

    Args:
        state: Encounter to update.
        caster_id: Caster id.
        target_ids: Creatures to bless.
        rounds: Duration in rounds, counting the current one.
        slot_level: Spell slot level.
        note: Free-form note stored on the concentration entry.
        strict: Raise instead of truncating an oversized target list.

    Returns:
        SpellCastResult.

    Raises:
        ValidationError: If the slot level or duration is not positive.
        SpellTargetError: If no target is given, or too many in strict mode.
        UnknownActorError: If the caster or a kept target is unknown.
    """
    if slot_level < 1:
        raise ValidationError(
            "Bless slot level must be at least 1",
            field_name="slot_level",
            invalid_value=slot_level,
        )
    if rounds < 1:
        raise ValidationError("Bless duration must be at least 1 round", field_name="rounds", invalid_value=rounds)

    caster = require_actor(state, caster_id, "caster")
    unique = [target for target in dict.fromkeys(t.strip() for t in target_ids) if target]
    if not unique:
        raise SpellTargetError("Bless requires at least one target", spell_id=SPELL_ID, requested=[])

    allowed = max_bless_targets(slot_level)
    if len(unique) > allowed:
        if strict:
            raise SpellTargetError(
                f"Too many targets (max {allowed} at level {slot_level})",
                spell_id=SPELL_ID,
                max_targets=allowed,
                requested=unique,
            )
        logger.warning(
            "Bless targets truncated",
            caster_id=caster_id,
            requested=unique,
            kept=unique[:allowed],
        )
        unique = unique[:allowed]

    expires_at_round = state.round_number + rounds - 1
    label = rounds_label(rounds)
    effect = TagSpec(
        text=SPELL_NAME,
        key=TAG_KEY,
        value=True,
        note=TAG_NOTE,
        source=caster.name,
        expires_at_round=expires_at_round,
    )
    tags = [(target_id, effect) for target_id in unique]
    tags.append(
        (
            caster_id,
            maintaining_tag(
                SPELL_ID,
                SPELL_NAME,
                label,
                source=caster.name,
                expires_at_round=expires_at_round,
            ),
        )
    )

    started = start_concentration(
        state,
        caster_id,
        spell_id=SPELL_ID,
        spell_name=SPELL_NAME,
        target_ids=unique,
        tags=tags,
        duration_label=label,
        note=note,
        expires_at_round=expires_at_round,
    )
    return SpellCastResult.from_start(started, caster_id, SPELL_ID)


def end_bless(state: EncounterState, caster_id: str) -> ConcentrationRemoval:
    """End the caster's Bless; any other concentration is left alone."""
    entry = state.concentration.get(caster_id)
    if entry is None or entry.spell_id != SPELL_ID:
        return ConcentrationRemoval(state=state, entry=None)
    return end_concentration(state, caster_id, reason="bless ended")


__all__ = ["SPELL_ID", "SPELL_NAME", "TAG_KEY", "max_bless_targets", "cast_bless", "end_bless"]
