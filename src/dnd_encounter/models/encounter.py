"""Pydantic V2 schemas for encounter state.

EncounterState is the single value every engine operation consumes and
returns. It is frozen; the engine replaces only the maps and tuples an
operation touches and shares the rest with the input state.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)

from dnd_encounter.models.actor import Actor
from dnd_encounter.models.enums import EncounterPhase


# =============================================================================
# Initiative
# =============================================================================


class InitiativeEntry(BaseModel):
    """One slot in the initiative order.

    Attributes:
        actor_id: Actor taking this slot.
        rolled: Raw d20 result (or the manual score).
        total: Roll plus DEX modifier; the primary sort key.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    actor_id: str = Field(min_length=1, description="Actor in this slot")
    rolled: int = Field(description="Raw d20 result")
    total: int = Field(description="Initiative total")


# =============================================================================
# Concentration
# =============================================================================


class ConcentrationLink(BaseModel):
    """A tag created by a concentration entry, on some actor."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    actor_id: str = Field(min_length=1, description="Actor owning the tag")
    tag_id: str = Field(min_length=1, description="Tag id on that actor")


class ConcentrationEntry(BaseModel):
    """A caster's single sustained effect.

    The ``links`` table lists exactly the tags the entry created; ending
    the entry removes those tags and nothing else.

    Attributes:
        caster_id: Concentrating actor.
        spell_id: Machine identifier (``bless``, ``hunters-mark``).
        spell_name: Display name.
        target_ids: Affected actors, at least one.
        duration_label: Human-readable duration ("1 minute").
        note: Free-form note.
        expires_at_round: Last round the effect lasts.
        expires_at: Wall-clock expiry.
        links: Tags owned by this entry.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    caster_id: str = Field(min_length=1, description="Concentrating caster")
    spell_id: str = Field(min_length=1, description="Spell identifier")
    spell_name: str = Field(min_length=1, description="Spell display name")
    target_ids: tuple[str, ...] = Field(min_length=1, description="Affected actors")
    duration_label: str | None = Field(default=None, description="Duration label")
    note: str | None = Field(default=None, description="Free-form note")
    expires_at_round: int | None = Field(default=None, description="Last active round")
    expires_at: datetime | None = Field(default=None, description="Wall-clock expiry")
    links: tuple[ConcentrationLink, ...] = Field(default=(), description="Owned tags")

    @field_validator("expires_at")
    @classmethod
    def assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def is_expired(self, round_number: int, now: datetime) -> bool:
        if self.expires_at_round is not None and round_number > self.expires_at_round:
            return True
        return self.expires_at is not None and now >= self.expires_at


# =============================================================================
# Loot, XP and Inventory
# =============================================================================


class CoinBundle(BaseModel):
    """Coins by denomination."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    cp: int = Field(default=0, ge=0)
    sp: int = Field(default=0, ge=0)
    gp: int = Field(default=0, ge=0)
    pp: int = Field(default=0, ge=0)


class LootEntry(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    coins: CoinBundle = Field(default_factory=CoinBundle)
    items: tuple[str, ...] = Field(default=())
    note: str | None = None


class XpEntry(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    crs: tuple[str, ...] = Field(default=())
    total: int = Field(ge=0)


class InventoryItem(BaseModel):
    """A stack of identically-named items."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1, description="Item name")
    qty: int = Field(ge=1, description="Quantity")


# =============================================================================
# Encounter
# =============================================================================


class EncounterState(BaseModel):
    """Complete state of one tracked encounter.

    Attributes:
        id: Encounter identifier.
        seed: Base seed for every roll the encounter makes.
        round_number: Current round; 0 until initiative exists.
        turn_index: Pointer into ``order``.
        order: Initiative order.
        actors: Registered actors, in registration order.
        defeated: Ids of actors at 0 HP.
        concentration: Active concentration entries by caster id.
        loot_log: Recorded loot.
        xp_log: Recorded experience awards.
        party_bag: Shared party inventory.
        inventories: Per-actor inventories.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1, description="Encounter id")
    seed: str | None = Field(default=None, description="Base roll seed")
    round_number: int = Field(default=0, ge=0, description="Current round")
    turn_index: int = Field(default=0, ge=0, description="Turn pointer")
    order: tuple[InitiativeEntry, ...] = Field(default=(), description="Initiative order")
    actors: dict[str, Actor] = Field(default_factory=dict, description="Actors by id")
    defeated: frozenset[str] = Field(default=frozenset(), description="Defeated ids")
    concentration: dict[str, ConcentrationEntry] = Field(default_factory=dict)
    loot_log: tuple[LootEntry, ...] = Field(default=())
    xp_log: tuple[XpEntry, ...] = Field(default=())
    party_bag: tuple[InventoryItem, ...] = Field(default=())
    inventories: dict[str, tuple[InventoryItem, ...]] = Field(default_factory=dict)

    @field_validator("defeated", mode="before")
    @classmethod
    def coerce_defeated(cls, value: object) -> object:
        """Accept the list form used on the wire."""
        if isinstance(value, (list, tuple)):
            return frozenset(value)
        return value

    @field_serializer("defeated")
    def serialize_defeated(self, defeated: frozenset[str]) -> list[str]:
        return sorted(defeated)

    @property
    def phase(self) -> EncounterPhase:
        """Turn-order machine state."""
        return EncounterPhase.ACTIVE if self.order else EncounterPhase.NO_ORDER

    def is_active(self, actor_id: str) -> bool:
        """Check whether an actor can take a turn.

        Args:
            actor_id: Actor to check.

        Returns:
            True if the actor exists, is not defeated and has HP left.
        """
        if actor_id in self.defeated:
            return False
        actor = self.actors.get(actor_id)
        return actor is not None and actor.hp > 0


__all__ = [
    "InitiativeEntry",
    "ConcentrationLink",
    "ConcentrationEntry",
    "CoinBundle",
    "LootEntry",
    "XpEntry",
    "InventoryItem",
    "EncounterState",
]
