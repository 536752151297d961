"""Pydantic V2 schema for normalized spell records.

Only the mechanics the engine resolves are modelled: a spell attack or a
saving throw, base damage dice, and how those dice scale with caster
level (cantrips) or slot level (leveled spells).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dnd_encounter.models.enums import Ability, AttackMode, DamageType, SpellSaveEffect


CASTING_ABILITIES = (Ability.INT, Ability.WIS, Ability.CHA)


class SpellSave(BaseModel):
    """Saving throw a spell forces.

    Attributes:
        ability: Ability the target saves with.
        on_success: Damage left after a successful save.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    ability: Ability = Field(description="Saving throw ability")
    on_success: SpellSaveEffect = Field(default=SpellSaveEffect.NONE, description="Effect of a save")


class Spell(BaseModel):
    """A spell as the engine sees it.

    Attributes:
        name: Display name.
        level: Spell level, 0 for cantrips.
        attack_type: Melee or ranged spell attack, if the spell attacks.
        save: Saving throw, if the spell forces one.
        damage_dice: Base damage dice.
        damage_type: Damage type dealt.
        damage_at_character_level: Cantrip dice keyed by caster level threshold.
        damage_at_slot_level: Dice keyed by the slot the spell is cast with.
        dc_ability: Casting ability fixed by the spell, if any.
        concentration: Whether casting requires concentration.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1, description="Spell name")
    level: int = Field(default=0, ge=0, le=9, description="Spell level")
    attack_type: AttackMode | None = Field(default=None, description="Spell attack delivery")
    save: SpellSave | None = Field(default=None, description="Forced saving throw")
    damage_dice: str | None = Field(default=None, description="Base damage dice")
    damage_type: DamageType | None = Field(default=None, description="Damage type")
    damage_at_character_level: dict[int, str] = Field(default_factory=dict, description="Cantrip scaling")
    damage_at_slot_level: dict[int, str] = Field(default_factory=dict, description="Slot scaling")
    dc_ability: Ability | None = Field(default=None, description="Fixed casting ability")
    concentration: bool = Field(default=False, description="Requires concentration")

    @field_validator("dc_ability")
    @classmethod
    def validate_dc_ability(cls, value: Ability | None) -> Ability | None:
        """Restrict the casting ability to INT, WIS or CHA."""
        if value is not None and value not in CASTING_ABILITIES:
            raise ValueError(f"Casting ability must be INT, WIS or CHA, not {value}")
        return value

    @property
    def is_cantrip(self) -> bool:
        return self.level == 0


__all__ = ["CASTING_ABILITIES", "Spell", "SpellSave"]
