"""Value types for the encounter engine.

All models are frozen Pydantic V2 schemas. Engine operations never mutate
them; they return updated copies.
"""

from __future__ import annotations

from dnd_encounter.models.actor import (
    Actor,
    ActorBase,
    DeathState,
    MonsterActor,
    PlayerActor,
    Tag,
    TagDuration,
    TagSpec,
    WeaponProfile,
    normalize_identifier,
)
from dnd_encounter.models.encounter import (
    CoinBundle,
    ConcentrationEntry,
    ConcentrationLink,
    EncounterState,
    InitiativeEntry,
    InventoryItem,
    LootEntry,
    XpEntry,
)
from dnd_encounter.models.enums import (
    SKILL_ABILITY,
    Ability,
    AdvantageState,
    AttackMode,
    DamageType,
    EncounterPhase,
    RollEvent,
    Side,
    Skill,
    SpellResolution,
    SpellSaveEffect,
    StatusEffect,
    TagPhase,
    WeaponCategory,
    WeaponProperty,
)
from dnd_encounter.models.equipment import Weapon
from dnd_encounter.models.spell import CASTING_ABILITIES, Spell, SpellSave


__all__ = [
    # Enums
    "Ability",
    "AdvantageState",
    "AttackMode",
    "DamageType",
    "EncounterPhase",
    "RollEvent",
    "SKILL_ABILITY",
    "Side",
    "Skill",
    "SpellResolution",
    "SpellSaveEffect",
    "StatusEffect",
    "TagPhase",
    "WeaponCategory",
    "WeaponProperty",
    # Actors
    "Actor",
    "ActorBase",
    "DeathState",
    "MonsterActor",
    "PlayerActor",
    "Tag",
    "TagDuration",
    "TagSpec",
    "WeaponProfile",
    "normalize_identifier",
    # Encounter
    "CoinBundle",
    "ConcentrationEntry",
    "ConcentrationLink",
    "EncounterState",
    "InitiativeEntry",
    "InventoryItem",
    "LootEntry",
    "XpEntry",
    # Rules records
    "CASTING_ABILITIES",
    "Spell",
    "SpellSave",
    "Weapon",
]
