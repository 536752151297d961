"""Enumeration types for the encounter engine.

These enums are the closed vocabularies the engine reasons about: which
side an actor fights on, which ability a modifier belongs to, which
status effects change roll modifiers, and at which turn edge a countdown
ticks.
"""

from __future__ import annotations

from enum import StrEnum


class Side(StrEnum):
    """Which side of the encounter an actor belongs to."""

    PARTY = "party"
    FOE = "foe"
    NEUTRAL = "neutral"


class EncounterPhase(StrEnum):
    """Turn-order machine states."""

    NO_ORDER = "no_order"
    ACTIVE = "active"


class Ability(StrEnum):
    """The six ability modifiers an actor may carry."""

    STR = "STR"
    DEX = "DEX"
    CON = "CON"
    INT = "INT"
    WIS = "WIS"
    CHA = "CHA"

    @property
    def full_name(self) -> str:
        """Get the full name of the ability.

        Returns:
            Full ability name (e.g., 'Dexterity' for DEX).
        """
        names = {
            Ability.STR: "Strength",
            Ability.DEX: "Dexterity",
            Ability.CON: "Constitution",
            Ability.INT: "Intelligence",
            Ability.WIS: "Wisdom",
            Ability.CHA: "Charisma",
        }
        return names[self]


class Skill(StrEnum):
    """Skills, each tied to the ability its checks use."""

    # Strength skills
    ATHLETICS = "athletics"

    # Dexterity skills
    ACROBATICS = "acrobatics"
    SLEIGHT_OF_HAND = "sleight_of_hand"
    STEALTH = "stealth"

    # Intelligence skills
    ARCANA = "arcana"
    HISTORY = "history"
    INVESTIGATION = "investigation"
    NATURE = "nature"
    RELIGION = "religion"

    # Wisdom skills
    ANIMAL_HANDLING = "animal_handling"
    INSIGHT = "insight"
    MEDICINE = "medicine"
    PERCEPTION = "perception"
    SURVIVAL = "survival"

    # Charisma skills
    DECEPTION = "deception"
    INTIMIDATION = "intimidation"
    PERFORMANCE = "performance"
    PERSUASION = "persuasion"

    @property
    def ability(self) -> Ability:
        """Get the ability a check with this skill uses."""
        return SKILL_ABILITY[self]

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


SKILL_ABILITY: dict[Skill, Ability] = {
    Skill.ATHLETICS: Ability.STR,
    Skill.ACROBATICS: Ability.DEX,
    Skill.SLEIGHT_OF_HAND: Ability.DEX,
    Skill.STEALTH: Ability.DEX,
    Skill.ARCANA: Ability.INT,
    Skill.HISTORY: Ability.INT,
    Skill.INVESTIGATION: Ability.INT,
    Skill.NATURE: Ability.INT,
    Skill.RELIGION: Ability.INT,
    Skill.ANIMAL_HANDLING: Ability.WIS,
    Skill.INSIGHT: Ability.WIS,
    Skill.MEDICINE: Ability.WIS,
    Skill.PERCEPTION: Ability.WIS,
    Skill.SURVIVAL: Ability.WIS,
    Skill.DECEPTION: Ability.CHA,
    Skill.INTIMIDATION: Ability.CHA,
    Skill.PERFORMANCE: Ability.CHA,
    Skill.PERSUASION: Ability.CHA,
}


class StatusEffect(StrEnum):
    """Status effects with mechanical weight.

    A status can be present either as a boolean condition flag on the
    actor or as a tag whose normalized key is ``condition:<value>``. Both
    sources resolve to the same member.
    """

    PRONE = "prone"
    RESTRAINED = "restrained"
    POISONED = "poisoned"
    INVISIBLE = "invisible"
    GRAPPLED = "grappled"

    @property
    def tag_key(self) -> str:
        """Normalized tag key that mirrors this status."""
        return f"condition:{self.value}"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class TagPhase(StrEnum):
    """Turn edge at which a tag countdown ticks."""

    TURN_START = "turnStart"
    TURN_END = "turnEnd"


class AttackMode(StrEnum):
    """Attack delivery, which decides how a prone target is treated."""

    MELEE = "melee"
    RANGED = "ranged"


class DamageType(StrEnum):
    """Damage types."""

    ACID = "acid"
    BLUDGEONING = "bludgeoning"
    COLD = "cold"
    FIRE = "fire"
    FORCE = "force"
    LIGHTNING = "lightning"
    NECROTIC = "necrotic"
    PIERCING = "piercing"
    POISON = "poison"
    PSYCHIC = "psychic"
    RADIANT = "radiant"
    SLASHING = "slashing"
    THUNDER = "thunder"


class WeaponCategory(StrEnum):
    """Weapon proficiency groups."""

    SIMPLE = "simple"
    MARTIAL = "martial"


class WeaponProperty(StrEnum):
    """Weapon properties that change how an attack is made."""

    FINESSE = "finesse"
    LIGHT = "light"
    HEAVY = "heavy"
    THROWN = "thrown"
    REACH = "reach"
    TWO_HANDED = "two_handed"
    AMMUNITION = "ammunition"
    LOADING = "loading"


class SpellResolution(StrEnum):
    """How a cast spell resolves against its target."""

    ATTACK = "attack"
    SAVE = "save"
    NONE = "none"


class SpellSaveEffect(StrEnum):
    """What a successful save does to a spell's damage."""

    HALF = "half"
    NONE = "none"


class AdvantageState(StrEnum):
    """Net roll modifier after combining every source."""

    NORMAL = "normal"
    ADVANTAGE = "advantage"
    DISADVANTAGE = "disadvantage"


class RollEvent(StrEnum):
    """Kind of roll a reminder is being produced for."""

    ATTACK = "attack"
    SAVE = "save"
    CHECK = "check"


__all__ = [
    "Side",
    "EncounterPhase",
    "Ability",
    "Skill",
    "SKILL_ABILITY",
    "StatusEffect",
    "TagPhase",
    "AttackMode",
    "DamageType",
    "WeaponCategory",
    "WeaponProperty",
    "SpellResolution",
    "SpellSaveEffect",
    "AdvantageState",
    "RollEvent",
]
