"""Guidance: one creature adds 1d4 to a single ability check."""

from __future__ import annotations

from collections.abc import Sequence

from dnd_encounter.core.constants import ROUNDS_PER_MINUTE
from dnd_encounter.core.exceptions import SpellTargetError
from dnd_encounter.engine.concentration import (
    ConcentrationRemoval,
    end_concentration,
    start_concentration,
)
from dnd_encounter.engine.spells.common import SpellCastResult, maintaining_tag
from dnd_encounter.engine.state import require_actor
from dnd_encounter.models import EncounterState, TagSpec


SPELL_ID = "guidance"
SPELL_NAME = "Guidance"
TAG_KEY = "spell:guidance"
TAG_NOTE = "Add 1d4 to a single ability check"


def cast_guidance(
    state: EncounterState,
    caster_id: str,
    target_id: str | Sequence[str],
    *,
    note: str | None = None,
) -> SpellCastResult:
    """Cast Guidance on exactly one creature for up to one minute.

    Raises:
        SpellTargetError: If a list of targets is given.
        UnknownActorError: If the caster or target is unknown.
    """
    if not isinstance(target_id, str):
        raise SpellTargetError(
            "Guidance targets exactly one creature",
            spell_id=SPELL_ID,
            max_targets=1,
            requested=list(target_id),
        )
    caster = require_actor(state, caster_id, "caster")
    require_actor(state, target_id, "target")

    expires_at_round = state.round_number + ROUNDS_PER_MINUTE - 1
    started = start_concentration(
        state,
        caster_id,
        spell_id=SPELL_ID,
        spell_name=SPELL_NAME,
        target_ids=[target_id],
        tags=[
            (
                target_id,
                TagSpec(
                    text=SPELL_NAME,
                    key=TAG_KEY,
                    value=True,
                    note=TAG_NOTE,
                    source=caster.name,
                    expires_at_round=expires_at_round,
                ),
            ),
            (
                caster_id,
                maintaining_tag(
                    SPELL_ID,
                    SPELL_NAME,
                    "1 minute",
                    source=caster.name,
                    expires_at_round=expires_at_round,
                ),
            ),
        ],
        duration_label="1 minute",
        note=note,
        expires_at_round=expires_at_round,
    )
    return SpellCastResult.from_start(started, caster_id, SPELL_ID)


def end_guidance(state: EncounterState, caster_id: str) -> ConcentrationRemoval:
    """End the caster's Guidance, typically once the check is rolled."""
    entry = state.concentration.get(caster_id)
    if entry is None or entry.spell_id != SPELL_ID:
        return ConcentrationRemoval(state=state, entry=None)
    return end_concentration(state, caster_id, reason="guidance used")


__all__ = ["SPELL_ID", "SPELL_NAME", "TAG_KEY", "cast_guidance", "end_guidance"]
