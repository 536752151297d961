"""Spell attacks, save DCs and damage scaling.

A spell either makes a spell attack against an AC or forces a saving
throw against the caster's save DC. Damage dice scale with the caster's
level for cantrips and with the slot for leveled spells; a positive
casting modifier is added to the damage.

Rolls derive from the caller's seed as ``<seed>:attack`` and
``<seed>:damage``.
"""

from __future__ import annotations

from dataclasses import dataclass

from dnd_encounter.core.constants import SPELL_DC_BASE
from dnd_encounter.core.exceptions import ValidationError
from dnd_encounter.core.logging import get_logger
from dnd_encounter.engine.checks import actor_proficiency_bonus
from dnd_encounter.engine.combat import AttackRollResult, DamageRollResult, attack_roll, damage_roll
from dnd_encounter.engine.rng import derive_seed
from dnd_encounter.engine.weapons import apply_ability_modifier
from dnd_encounter.models import CASTING_ABILITIES, Ability, Actor, Spell, SpellResolution


logger = get_logger(__name__)

NO_TARGET_AC_NOTE = "Spell attack requires a target AC."
NO_MECHANICS_NOTE = "No attack or save mechanics found for this spell."


@dataclass(frozen=True)
class SpellCastOutcome:
    """Result of resolving a spell's mechanics.

    Attributes:
        spell: Spell cast.
        kind: Attack, save, or neither.
        ability: Casting ability used.
        attack: Spell attack roll, for attack spells given a target AC.
        save_ability: Ability the target saves with, for save spells.
        dc: Spell save DC, for save spells.
        damage: Damage rolled; for save spells this is the full damage
            before the target's save.
        notes: Free-text notes for the table.
    """

    spell: Spell
    kind: SpellResolution
    ability: Ability
    attack: AttackRollResult | None = None
    save_ability: Ability | None = None
    dc: int | None = None
    damage: DamageRollResult | None = None
    notes: tuple[str, ...] = ()

    @property
    def hit(self) -> bool:
        return self.attack is not None and (self.attack.is_crit or self.attack.hit is True)


def choose_casting_ability(
    caster: Actor,
    spell: Spell,
    override: Ability | str | None = None,
) -> Ability:
    """Pick the casting ability.

    An explicit override wins, then the spell's own ability, then the
    caster's best of INT, WIS and CHA (earlier wins a tie).

    Raises:
        ValidationError: If the override is not INT, WIS or CHA.
    """
    if override is not None:
        ability = Ability(override)
        if ability not in CASTING_ABILITIES:
            raise ValidationError(
                f"Casting ability must be INT, WIS or CHA, not {ability}",
                field_name="casting_ability",
                invalid_value=ability.value,
            )
        return ability
    if spell.dc_ability is not None:
        return spell.dc_ability
    return max(CASTING_ABILITIES, key=caster.ability_mod)


def spell_save_dc(caster: Actor, ability: Ability | str, *, caster_level: int | None = None) -> int:
    """``8 + proficiency bonus + casting modifier``."""
    return SPELL_DC_BASE + actor_proficiency_bonus(caster, caster_level) + caster.ability_mod(Ability(ability))


def dice_for_character_level(spell: Spell, level: int) -> str | None:
    """Cantrip dice for a caster level: the highest threshold not above it."""
    reached = [threshold for threshold in spell.damage_at_character_level if threshold <= level]
    if not reached:
        return spell.damage_dice
    return spell.damage_at_character_level[max(reached)]


def dice_for_slot_level(spell: Spell, slot_level: int) -> str | None:
    """Dice for an exact slot level, else the base dice.

    Raises:
        ValidationError: If the slot is below the spell's level.
    """
    if slot_level < spell.level:
        raise ValidationError(
            f"{spell.name} cannot be cast with a level {slot_level} slot",
            field_name="slot_level",
            invalid_value=slot_level,
        )
    return spell.damage_at_slot_level.get(slot_level, spell.damage_dice)


def spell_damage_dice(
    spell: Spell,
    *,
    caster_level: int | None = None,
    slot_level: int | None = None,
) -> str | None:
    if spell.is_cantrip:
        if caster_level is not None:
            return dice_for_character_level(spell, caster_level)
        return spell.damage_dice
    if slot_level is not None:
        return dice_for_slot_level(spell, slot_level)
    return spell.damage_dice


def cast_spell(
    caster: Actor,
    spell: Spell,
    *,
    casting_ability: Ability | str | None = None,
    caster_level: int | None = None,
    slot_level: int | None = None,
    target_ac: int | None = None,
    advantage: bool = False,
    disadvantage: bool = False,
    seed: str | None = None,
) -> SpellCastOutcome:
    """Resolve a spell's attack or save and roll its damage.

    Attack spells need ``target_ac``; without one the outcome carries a
    note and no rolls. Save spells roll full damage and report the DC;
    applying the target's save is up to the caller.

    Args:
        caster: Casting actor.
        spell: Spell cast.
        casting_ability: Override for the casting ability.
        caster_level: Caster level, for cantrip scaling and the
            proficiency bonus when the actor has none.
        slot_level: Slot used for a leveled spell.
        target_ac: Armor class for a spell attack.
        advantage: Spell attack with advantage.
        disadvantage: Spell attack with disadvantage.
        seed: Base seed.

    Raises:
        ValidationError: If the casting ability or slot is invalid.
        DiceRollError: If the spell's dice are invalid.
    """
    ability = choose_casting_ability(caster, spell, casting_ability)
    modifier = caster.ability_mod(ability)
    dice = spell_damage_dice(spell, caster_level=caster_level, slot_level=slot_level)
    damage_expression = apply_ability_modifier(dice, max(0, modifier)) if dice else None
    damage_seed = derive_seed(seed, "damage")

    if spell.attack_type is not None:
        if target_ac is None:
            return SpellCastOutcome(
                spell=spell,
                kind=SpellResolution.ATTACK,
                ability=ability,
                notes=(NO_TARGET_AC_NOTE,),
            )
        attack = attack_roll(
            ability_mod=modifier,
            proficient=True,
            proficiency_bonus=actor_proficiency_bonus(caster, caster_level),
            advantage=advantage,
            disadvantage=disadvantage,
            seed=derive_seed(seed, "attack"),
            target_ac=target_ac,
        )
        damage = None
        if damage_expression and (attack.is_crit or attack.hit):
            damage = damage_roll(damage_expression, crit=attack.is_crit, seed=damage_seed)
        logger.debug("Spell attack", spell=spell.name, total=attack.total, hit=attack.hit)
        return SpellCastOutcome(
            spell=spell,
            kind=SpellResolution.ATTACK,
            ability=ability,
            attack=attack,
            damage=damage,
        )

    if spell.save is not None:
        dc = spell_save_dc(caster, ability, caster_level=caster_level)
        damage = damage_roll(damage_expression, seed=damage_seed) if damage_expression else None
        logger.debug("Spell save", spell=spell.name, dc=dc, save_ability=spell.save.ability)
        return SpellCastOutcome(
            spell=spell,
            kind=SpellResolution.SAVE,
            ability=ability,
            save_ability=spell.save.ability,
            dc=dc,
            damage=damage,
        )

    return SpellCastOutcome(
        spell=spell,
        kind=SpellResolution.NONE,
        ability=ability,
        notes=(NO_MECHANICS_NOTE,),
    )


__all__ = [
    "SpellCastOutcome",
    "choose_casting_ability",
    "spell_save_dc",
    "dice_for_character_level",
    "dice_for_slot_level",
    "spell_damage_dice",
    "cast_spell",
]
