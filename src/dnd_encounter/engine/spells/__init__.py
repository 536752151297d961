"""Built-in concentration spells and general spell resolution."""

from __future__ import annotations

from dnd_encounter.engine.spells.bless import cast_bless, end_bless, max_bless_targets
from dnd_encounter.engine.spells.casting import (
    SpellCastOutcome,
    cast_spell,
    choose_casting_ability,
    dice_for_character_level,
    dice_for_slot_level,
    spell_damage_dice,
    spell_save_dc,
)
from dnd_encounter.engine.spells.common import SpellCastResult
from dnd_encounter.engine.spells.guidance import cast_guidance, end_guidance
from dnd_encounter.engine.spells.hunters_mark import (
    MarkTransferResult,
    cast_hunters_mark,
    end_hunters_mark,
    marked_by,
    transfer_hunters_mark,
)


__all__ = [
    "SpellCastResult",
    "MarkTransferResult",
    "cast_bless",
    "end_bless",
    "max_bless_targets",
    "cast_hunters_mark",
    "transfer_hunters_mark",
    "end_hunters_mark",
    "marked_by",
    "cast_guidance",
    "end_guidance",
    "SpellCastOutcome",
    "cast_spell",
    "choose_casting_ability",
    "spell_save_dc",
    "dice_for_character_level",
    "dice_for_slot_level",
    "spell_damage_dice",
]
