"""Rules constants shared across the encounter engine."""

from __future__ import annotations

# =============================================================================
# Dice
# =============================================================================

D20_SIDES = 20
"""Sides on the die used for attacks, checks, saves and initiative."""

NATURAL_CRIT = 20
"""Natural d20 result that is always a critical hit."""

NATURAL_FUMBLE = 1
"""Natural d20 result that always misses."""

# =============================================================================
# Concentration
# =============================================================================

MIN_CONCENTRATION_DC = 10
"""Floor for the concentration save DC after taking damage."""

# =============================================================================
# Death Saves
# =============================================================================

MAX_DEATH_SAVES = 3
"""Successes to stabilise, or failures to die."""

DEATH_SAVE_DC = 10
"""Minimum d20 result for a successful death save."""

# =============================================================================
# Tags
# =============================================================================

TAG_ID_PREFIX = "t"
"""Prefix for per-actor tag identifiers (``t1``, ``t2``...)."""

CONDITION_KEY_PREFIX = "condition:"
"""Normalized key prefix for tags that mirror a condition."""

SPELL_KEY_PREFIX = "spell:"
"""Normalized key prefix for spell effect tags."""

CONCENTRATION_KEY_PREFIX = "concentration:"
"""Normalized key prefix for a caster's maintaining tag."""

STATE_ADVANTAGE_KEY = "state:advantage"
"""Tag key granting advantage on the owner's rolls."""

STATE_DISADVANTAGE_KEY = "state:disadvantage"
"""Tag key imposing disadvantage on the owner's rolls."""

BARDIC_INSPIRATION_KEY = "bardic-inspiration"
"""Tag key for an unspent Bardic Inspiration die."""

# =============================================================================
# Proficiency & Spellcasting
# =============================================================================

PROFICIENCY_BY_LEVEL: tuple[tuple[int, int], ...] = (
    (4, 2),
    (8, 3),
    (12, 4),
    (16, 5),
    (20, 6),
)
"""``(max_level, bonus)`` rows of the proficiency bonus table."""

MAX_CHARACTER_LEVEL = 20

SPELL_DC_BASE = 8
"""Spell save DC is 8 + proficiency bonus + casting ability modifier."""

# =============================================================================
# Misc
# =============================================================================

ROUNDS_PER_MINUTE = 10
"""Six-second rounds in one minute of game time."""


__all__ = [
    # Dice
    "D20_SIDES",
    "NATURAL_CRIT",
    "NATURAL_FUMBLE",
    # Concentration
    "MIN_CONCENTRATION_DC",
    # Death saves
    "MAX_DEATH_SAVES",
    "DEATH_SAVE_DC",
    # Tags
    "TAG_ID_PREFIX",
    "CONDITION_KEY_PREFIX",
    "SPELL_KEY_PREFIX",
    "CONCENTRATION_KEY_PREFIX",
    "STATE_ADVANTAGE_KEY",
    "STATE_DISADVANTAGE_KEY",
    "BARDIC_INSPIRATION_KEY",
    # Proficiency & spellcasting
    "PROFICIENCY_BY_LEVEL",
    "MAX_CHARACTER_LEVEL",
    "SPELL_DC_BASE",
    # Misc
    "ROUNDS_PER_MINUTE",
]
