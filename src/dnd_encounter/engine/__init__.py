"""Encounter engine for turn-based D&D 5E combat.

Every operation is a pure transform: it takes an EncounterState and
returns a new one, leaving the input untouched.

Submodules:
    rng: Seeded xmur3/mulberry32 random source
    dice: Dice expression parser and roller
    combat: Attack and damage resolution
    encounter: Actors, initiative and the turn-order machine
    attacks: Actor-versus-actor attacks and spells with damage applied
    weapons: Weapon ability choice and weapon attacks
    tags: Tag lifecycle and expiry
    conditions: Unified condition lookup and advantage arithmetic
    concentration: Concentration tracker and link table
    spells: Bless, Hunter's Mark, Guidance and spell attacks/saves
    advantage: Attack advantage derived from actor state
    reminders: Roll reminders for the table
    rest: Short and long rests
    checks: Ability checks, skill checks and saving throws
    death: Death saving throws
    bardic: Bardic Inspiration
    inventory: Party bag and actor inventories
    loot: CR XP, coin rolls and loot/XP logs

Example:
    >>> from dnd_encounter.engine import (
    ...     create_encounter, add_actor, roll_initiative, next_turn, actor_attack
    ... )
    >>>
    >>> state = create_encounter(seed="ambush")
    >>> state = add_actor(state, fighter)
    >>> state = add_actor(state, goblin)
    >>> state = roll_initiative(state)
    >>> result = actor_attack(state, "fighter", "goblin")
    >>> state = next_turn(result.state)
"""

from __future__ import annotations

# =============================================================================
# Dice & Combat
# =============================================================================
from dnd_encounter.engine.combat import (
    AttackRollResult,
    DamageRollResult,
    DamageSpec,
    ResolveAttackResult,
    attack_roll,
    damage_roll,
    resolve_attack,
)
from dnd_encounter.engine.dice import RollResult, parse_expression, roll
from dnd_encounter.engine.rng import derive_seed, seeded_random
from dnd_encounter.engine.weapons import (
    WeaponAttackResult,
    apply_ability_modifier,
    choose_attack_ability,
    resolve_weapon_attack,
    weapon_profile,
)

# =============================================================================
# Encounter
# =============================================================================
from dnd_encounter.engine.attacks import ActorAttackResult, ActorSpellResult, actor_attack, actor_cast_spell
from dnd_encounter.engine.encounter import (
    add_actor,
    apply_damage,
    apply_healing,
    clear_initiative,
    create_encounter,
    current_actor,
    next_turn,
    previous_turn,
    remove_actor,
    roll_initiative,
    set_initiative,
)

# =============================================================================
# Tags, Conditions & Concentration
# =============================================================================
from dnd_encounter.engine.concentration import (
    ConcentrationRemoval,
    ConcentrationStart,
    clear_all_concentration,
    concentration_dc_from_damage,
    end_concentration,
    get_concentration,
    link_tag,
    start_concentration,
    unlink_tag,
)
from dnd_encounter.engine.conditions import (
    CustomStatus,
    clear_condition,
    combine_advantage,
    has_status,
    set_condition,
    statuses_of,
)
from dnd_encounter.engine.spells import (
    MarkTransferResult,
    SpellCastOutcome,
    SpellCastResult,
    cast_bless,
    cast_guidance,
    cast_hunters_mark,
    cast_spell,
    choose_casting_ability,
    spell_save_dc,
    end_bless,
    end_guidance,
    end_hunters_mark,
    transfer_hunters_mark,
)
from dnd_encounter.engine.tags import (
    add_tag,
    add_tag_detailed,
    clear_tags,
    remove_tag,
)

# =============================================================================
# Derivation & Recovery
# =============================================================================
from dnd_encounter.engine.advantage import compute_advantage_state
from dnd_encounter.engine.bardic import apply_bardic_inspiration, clear_bardic_inspiration
from dnd_encounter.engine.checks import (
    CheckResult,
    ability_check,
    encounter_ability_check,
    encounter_skill_check,
    proficiency_bonus_for_level,
    saving_throw,
    skill_check,
)
from dnd_encounter.engine.death import DeathSaveResult, roll_death_save
from dnd_encounter.engine.reminders import (
    concentration_reminder_lines_for_damage,
    reminders_for,
)
from dnd_encounter.engine.rest import RestResult, long_rest, short_rest

# =============================================================================
# Loot & Inventory
# =============================================================================
from dnd_encounter.engine.inventory import (
    give_to_actor,
    give_to_party,
    list_bag,
    list_inventory,
    take_from_actor,
    take_from_party,
)
from dnd_encounter.engine.loot import (
    record_loot,
    record_xp,
    roll_coins_for_cr,
    total_xp,
    xp_for_cr,
)


__all__ = [
    # Dice & combat
    "RollResult",
    "parse_expression",
    "roll",
    "derive_seed",
    "seeded_random",
    "AttackRollResult",
    "DamageRollResult",
    "DamageSpec",
    "ResolveAttackResult",
    "attack_roll",
    "damage_roll",
    "resolve_attack",
    "WeaponAttackResult",
    "choose_attack_ability",
    "apply_ability_modifier",
    "resolve_weapon_attack",
    "weapon_profile",
    # Encounter
    "create_encounter",
    "add_actor",
    "remove_actor",
    "roll_initiative",
    "set_initiative",
    "clear_initiative",
    "next_turn",
    "previous_turn",
    "current_actor",
    "apply_damage",
    "apply_healing",
    "ActorAttackResult",
    "actor_attack",
    "ActorSpellResult",
    "actor_cast_spell",
    # Tags, conditions & concentration
    "add_tag",
    "add_tag_detailed",
    "remove_tag",
    "clear_tags",
    "CustomStatus",
    "statuses_of",
    "has_status",
    "combine_advantage",
    "set_condition",
    "clear_condition",
    "ConcentrationRemoval",
    "ConcentrationStart",
    "concentration_dc_from_damage",
    "get_concentration",
    "start_concentration",
    "end_concentration",
    "link_tag",
    "unlink_tag",
    "clear_all_concentration",
    "SpellCastResult",
    "MarkTransferResult",
    "cast_bless",
    "end_bless",
    "cast_hunters_mark",
    "transfer_hunters_mark",
    "end_hunters_mark",
    "cast_guidance",
    "end_guidance",
    "SpellCastOutcome",
    "cast_spell",
    "choose_casting_ability",
    "spell_save_dc",
    # Derivation & recovery
    "compute_advantage_state",
    "reminders_for",
    "concentration_reminder_lines_for_damage",
    "apply_bardic_inspiration",
    "clear_bardic_inspiration",
    "CheckResult",
    "ability_check",
    "saving_throw",
    "encounter_ability_check",
    "skill_check",
    "encounter_skill_check",
    "proficiency_bonus_for_level",
    "DeathSaveResult",
    "roll_death_save",
    "RestResult",
    "short_rest",
    "long_rest",
    # Loot & inventory
    "list_bag",
    "list_inventory",
    "give_to_party",
    "give_to_actor",
    "take_from_party",
    "take_from_actor",
    "xp_for_cr",
    "total_xp",
    "roll_coins_for_cr",
    "record_loot",
    "record_xp",
]
