"""Pydantic V2 schemas for encounter participants.

Actors arrive already normalized by whatever adapter built them; the
engine never looks up monsters or spells itself. Every model here is
frozen: engine operations build replacement records with
``model_copy(update=...)`` instead of mutating in place, so a caller can
keep any earlier encounter state around for undo or auditing.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from dnd_encounter.models.enums import Ability, Side, StatusEffect, TagPhase


_NON_IDENTIFIER = re.compile(r"[^a-z0-9]+")


def normalize_identifier(value: str | None) -> str | None:
    """Collapse free text into a comparable identifier.

    ``"condition:prone"`` and ``"Condition Prone"`` both become
    ``"condition-prone"``.

    Args:
        value: Raw key or label.

    Returns:
        Lower-case identifier with runs of other characters folded to
        ``-``, or None for empty input.
    """
    if not value:
        return None
    return _NON_IDENTIFIER.sub("-", value.lower())


# =============================================================================
# Weapons
# =============================================================================


class WeaponProfile(BaseModel):
    """An attack an actor can make.

    Attributes:
        name: Display name of the attack.
        attack_mod: Total bonus added to the attack roll.
        damage_expr: Damage dice expression (e.g. ``1d8+3``).
        versatile_expr: Two-handed damage expression, if any.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1, description="Attack name")
    attack_mod: int = Field(default=0, description="Attack roll bonus")
    damage_expr: str = Field(min_length=1, description="Damage expression")
    versatile_expr: str | None = Field(default=None, description="Two-handed damage")


# =============================================================================
# Tags
# =============================================================================


class TagDuration(BaseModel):
    """Countdown tied to the owning actor's own turn boundary.

    Attributes:
        rounds: Turns remaining before the tag expires.
        at: Which edge of the owner's turn decrements the counter.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    rounds: int = Field(ge=0, description="Remaining owner turns")
    at: TagPhase = Field(default=TagPhase.TURN_END, description="Tick edge")


class TagSpec(BaseModel):
    """Everything needed to create a tag except its identity.

    Attributes:
        text: Free-text label shown to the table.
        key: Optional normalized machine identifier (``condition:prone``).
        value: Optional scalar value (e.g. a Bardic Inspiration die).
        payload: Optional structured data.
        note: Longer human-readable note.
        source: Who or what applied the tag (display only).
        expires_at_round: Last round in which the tag is still active.
        expires_at: Wall-clock instant after which the tag is gone.
        duration: Countdown on the owner's turn edges.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    text: str = Field(default="", description="Display label")
    key: str | None = Field(default=None, description="Normalized identifier")
    value: Any = Field(default=None, description="Scalar value")
    payload: dict[str, Any] | None = Field(default=None, description="Structured data")
    note: str | None = Field(default=None, description="Human-readable note")
    source: str | None = Field(default=None, description="Display-only origin")
    expires_at_round: int | None = Field(default=None, description="Last active round")
    expires_at: datetime | None = Field(default=None, description="Wall-clock expiry")
    duration: TagDuration | None = Field(default=None, description="Turn countdown")

    @field_validator("expires_at")
    @classmethod
    def assume_utc(cls, value: datetime | None) -> datetime | None:
        """Treat naive timestamps as UTC."""
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def require_label_or_key(self) -> "TagSpec":
        """A tag must be identifiable by its text or its key."""
        if not self.text and not self.key:
            raise ValueError("a tag needs either text or key")
        return self

    @property
    def identifier(self) -> str | None:
        """Normalized identifier from the key, falling back to the text."""
        return normalize_identifier(self.key or self.text)


class Tag(TagSpec):
    """A tag attached to an actor.

    Attributes:
        id: Per-actor identifier (``t1``, ``t2``...), never reused.
        added_at_round: Encounter round when the tag was attached.
    """

    id: str = Field(min_length=1, description="Per-actor tag id")
    added_at_round: int = Field(ge=0, description="Round the tag was added")

    def is_expired(self, round_number: int, now: datetime) -> bool:
        """Check the round and wall-clock expiry mechanisms.

        Turn countdowns are handled separately, at the owner's turn edges.

        Args:
            round_number: Current encounter round.
            now: Current wall-clock time.

        Returns:
            True if either mechanism has fired.
        """
        if self.expires_at_round is not None and round_number > self.expires_at_round:
            return True
        return self.expires_at is not None and now >= self.expires_at


# =============================================================================
# Death Saves
# =============================================================================


class DeathState(BaseModel):
    """Death saving throw tally for an actor at 0 HP."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    successes: Annotated[int, Field(ge=0, le=3)] = 0
    failures: Annotated[int, Field(ge=0, le=3)] = 0
    stable: bool = False
    dead: bool = False


# =============================================================================
# Actors
# =============================================================================


class ActorBase(BaseModel):
    """Fields shared by every encounter participant.

    Attributes:
        id: Unique identifier within the encounter.
        name: Display name.
        side: Which side the actor fights on.
        ac: Armor class.
        hp: Current hit points, always within ``[0, max_hp]``.
        max_hp: Maximum hit points.
        ability_mods: Ability modifiers; missing abilities count as 0.
        proficiency_bonus: Proficiency bonus, if known.
        tags: Ordered status annotations.
        conditions: Boolean condition flags.
        tag_seq: Highest tag number issued so far.
        death: Death save tally, once the actor has dropped to 0.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1, description="Actor id")
    name: str = Field(min_length=1, description="Display name")
    side: Side = Field(description="Encounter side")
    ac: int = Field(ge=0, description="Armor class")
    hp: int = Field(ge=0, description="Current HP")
    max_hp: int = Field(ge=0, description="Maximum HP")
    ability_mods: dict[Ability, int] = Field(default_factory=dict, description="Modifiers")
    proficiency_bonus: int | None = Field(default=None, ge=0, description="Proficiency bonus")
    tags: tuple[Tag, ...] = Field(default=(), description="Status annotations")
    conditions: frozenset[StatusEffect] = Field(default=frozenset(), description="Flags")
    tag_seq: int = Field(default=0, ge=0, description="Last issued tag number")
    death: DeathState | None = Field(default=None, description="Death saves")

    @model_validator(mode="after")
    def validate_hp_range(self) -> "ActorBase":
        """Ensure hit points stay within ``[0, max_hp]``."""
        if self.hp > self.max_hp:
            raise ValueError(f"hp ({self.hp}) exceeds max_hp ({self.max_hp})")
        return self

    @field_serializer("conditions")
    def serialize_conditions(self, conditions: frozenset[StatusEffect]) -> list[str]:
        return sorted(condition.value for condition in conditions)

    def ability_mod(self, ability: Ability) -> int:
        """Get an ability modifier, defaulting missing abilities to 0."""
        return self.ability_mods.get(ability, 0)

    def find_tag(self, tag_id: str) -> Tag | None:
        """Look up one of this actor's tags by id."""
        for tag in self.tags:
            if tag.id == tag_id:
                return tag
        return None


class MonsterActor(ActorBase):
    """A monster with one or more attack profiles."""

    type: Literal["monster"] = "monster"
    attacks: tuple[WeaponProfile, ...] = Field(default=(), description="Attack profiles")

    @property
    def primary_weapon(self) -> WeaponProfile | None:
        return self.attacks[0] if self.attacks else None


class PlayerActor(ActorBase):
    """A player character with an optional default weapon."""

    type: Literal["pc"] = "pc"
    default_weapon: WeaponProfile | None = Field(default=None, description="Default weapon")

    @property
    def primary_weapon(self) -> WeaponProfile | None:
        return self.default_weapon


Actor = Annotated[MonsterActor | PlayerActor, Field(discriminator="type")]
"""Type-discriminated actor record."""


__all__ = [
    "normalize_identifier",
    "WeaponProfile",
    "TagDuration",
    "TagSpec",
    "Tag",
    "DeathState",
    "ActorBase",
    "MonsterActor",
    "PlayerActor",
    "Actor",
]
