"""Pydantic V2 schema for normalized weapon records.

A ``Weapon`` is the rules-level description of a weapon (category,
properties, base damage). Resolving it for a wielder, which picks the
ability and adds the modifier, happens in ``engine.weapons``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

from dnd_encounter.models.enums import AttackMode, DamageType, WeaponCategory, WeaponProperty


class Weapon(BaseModel):
    """A weapon as it appears in the rules.

    Attributes:
        name: Display name.
        category: Simple or martial, for proficiency.
        kind: Melee or ranged weapon.
        damage_expr: Base damage dice without the ability modifier.
        damage_type: Damage type dealt.
        versatile_expr: Two-handed damage dice, if versatile.
        properties: Weapon properties.
        range_normal: Normal range in feet for ranged or thrown use.
        range_long: Long range in feet.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1, description="Weapon name")
    category: WeaponCategory = Field(description="Proficiency group")
    kind: AttackMode = Field(default=AttackMode.MELEE, description="Melee or ranged")
    damage_expr: str = Field(min_length=1, description="Base damage dice")
    damage_type: DamageType | None = Field(default=None, description="Damage type")
    versatile_expr: str | None = Field(default=None, description="Two-handed damage dice")
    properties: frozenset[WeaponProperty] = Field(default=frozenset(), description="Properties")
    range_normal: int | None = Field(default=None, ge=0, description="Normal range (ft)")
    range_long: int | None = Field(default=None, ge=0, description="Long range (ft)")

    @model_validator(mode="after")
    def validate_range(self) -> "Weapon":
        """Ensure long range is not shorter than normal range."""
        if self.range_normal is not None and self.range_long is not None and self.range_long < self.range_normal:
            raise ValueError(f"range_long ({self.range_long}) is shorter than range_normal ({self.range_normal})")
        return self

    @field_serializer("properties")
    def serialize_properties(self, properties: frozenset[WeaponProperty]) -> list[str]:
        return sorted(prop.value for prop in properties)

    def has_property(self, prop: WeaponProperty) -> bool:
        return prop in self.properties


__all__ = ["Weapon"]
