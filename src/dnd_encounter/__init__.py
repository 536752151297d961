"""Deterministic D&D 5E encounter engine.

Tracks the participants of a fight, their initiative order, timed tags
and conditions, and concentration spells with their linked effects, and
resolves seeded attacks, damage, checks and rests.

ARCHITECTURE:
- State is a frozen EncounterState; every operation returns a new one
- Randomness comes only from seeded rolls (or explicit unseeded ones)
- No I/O: callers load and persist state however they like

Example:
    >>> from dnd_encounter import create_encounter, add_actor, roll_initiative
    >>> from dnd_encounter.models import MonsterActor, Side
    >>>
    >>> goblin = MonsterActor(id="gob", name="Goblin", side=Side.FOE, ac=15, hp=7, max_hp=7)
    >>> state = add_actor(create_encounter(seed="cave"), goblin)
    >>> state = roll_initiative(state)
    >>> state.round_number
    1

Modules:
    core: Configuration, logging, and base exceptions.
    models: Pydantic V2 schemas for actors, tags and encounter state.
    engine: Dice, combat, turn order, tags, concentration and rests.
"""

from __future__ import annotations

# Core
from dnd_encounter.core.config import Settings, get_settings
from dnd_encounter.core.exceptions import DndEncounterError
from dnd_encounter.core.logging import configure_logging, get_logger

# Models
from dnd_encounter.models import (
    Actor,
    EncounterState,
    MonsterActor,
    PlayerActor,
    Spell,
    Tag,
    TagSpec,
    Weapon,
)

# Engine
from dnd_encounter.engine import (
    actor_attack,
    actor_cast_spell,
    add_actor,
    add_tag,
    create_encounter,
    long_rest,
    next_turn,
    previous_turn,
    remove_actor,
    roll,
    roll_initiative,
    short_rest,
)


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "DndEncounterError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "Actor",
    "EncounterState",
    "MonsterActor",
    "PlayerActor",
    "Spell",
    "Tag",
    "TagSpec",
    "Weapon",
    # Engine
    "roll",
    "create_encounter",
    "add_actor",
    "remove_actor",
    "roll_initiative",
    "next_turn",
    "previous_turn",
    "actor_attack",
    "actor_cast_spell",
    "add_tag",
    "short_rest",
    "long_rest",
]
