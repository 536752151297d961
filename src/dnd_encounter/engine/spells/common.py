"""Pieces shared by the built-in concentration spells."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from dnd_encounter.core.constants import CONCENTRATION_KEY_PREFIX
from dnd_encounter.engine.concentration import ConcentrationRemoval, ConcentrationStart
from dnd_encounter.models import ConcentrationEntry, EncounterState, Tag, TagSpec


@dataclass(frozen=True)
class SpellCastResult:
    """Outcome of casting a concentration spell.

    Attributes:
        state: Encounter after the cast.
        entry: The caster's concentration entry.
        effect_tags: ``(actor_id, tag)`` for each target effect tag.
        concentration_tag: The caster's maintaining tag.
        replaced: Removal result for any concentration the cast ended.
    """

    state: EncounterState
    entry: ConcentrationEntry
    effect_tags: tuple[tuple[str, Tag], ...]
    concentration_tag: Tag | None
    replaced: ConcentrationRemoval | None = None

    @classmethod
    def from_start(cls, started: ConcentrationStart, caster_id: str, spell_id: str) -> SpellCastResult:
        maintaining_key = f"{CONCENTRATION_KEY_PREFIX}{spell_id}"
        effect_tags = []
        concentration_tag = None
        for owner_id, tag in started.created_tags:
            if owner_id == caster_id and tag.key == maintaining_key:
                concentration_tag = tag
            else:
                effect_tags.append((owner_id, tag))
        return cls(
            state=started.state,
            entry=started.entry,
            effect_tags=tuple(effect_tags),
            concentration_tag=concentration_tag,
            replaced=started.replaced,
        )


def maintaining_tag(
    spell_id: str,
    spell_name: str,
    duration_label: str,
    *,
    source: str,
    expires_at_round: int | None = None,
    expires_at: datetime | None = None,
) -> TagSpec:
    """Tag on the caster showing which spell they are concentrating on."""
    return TagSpec(
        text=f"Concentration: {spell_name}",
        key=f"{CONCENTRATION_KEY_PREFIX}{spell_id}",
        value=True,
        note=f"Maintaining {spell_name} ({duration_label})",
        source=source,
        expires_at_round=expires_at_round,
        expires_at=expires_at,
    )


def rounds_label(rounds: int) -> str:
    return "1 round" if rounds == 1 else f"{rounds} rounds"


__all__ = ["SpellCastResult", "maintaining_tag", "rounds_label"]
