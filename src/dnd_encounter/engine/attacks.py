"""Actor-versus-actor attacks inside an encounter."""

from __future__ import annotations

from dataclasses import dataclass

from dnd_encounter.core.config import get_settings
from dnd_encounter.core.exceptions import CombatError
from dnd_encounter.core.logging import get_logger
from dnd_encounter.engine.advantage import compute_advantage_state
from dnd_encounter.engine.checks import CheckResult, actor_proficiency_bonus, saving_throw
from dnd_encounter.engine.combat import (
    AttackRollResult,
    DamageRollResult,
    DamageSpec,
    resolve_attack,
)
from dnd_encounter.engine.conditions import advantage_flags, combine_advantage
from dnd_encounter.engine.encounter import apply_damage
from dnd_encounter.engine.reminders import concentration_reminder_lines_for_damage
from dnd_encounter.engine.rng import derive_seed
from dnd_encounter.engine.spells.casting import SpellCastOutcome, cast_spell
from dnd_encounter.engine.state import require_actor
from dnd_encounter.models import (
    Ability,
    Actor,
    AdvantageState,
    AttackMode,
    EncounterState,
    Spell,
    SpellResolution,
    SpellSaveEffect,
    WeaponProfile,
)


logger = get_logger(__name__)


@dataclass(frozen=True)
class ActorAttackResult:
    """Outcome of an encounter attack.

    Attributes:
        state: Encounter after damage is applied.
        weapon: Weapon profile used.
        attack: Attack roll.
        damage: Damage roll, or None on a miss.
        defender_hp: Defender hp after the attack.
        advantage: Net advantage state the attack rolled with.
        reminders: Concentration save reminders for the defender.
    """

    state: EncounterState
    weapon: WeaponProfile
    attack: AttackRollResult
    damage: DamageRollResult | None
    defender_hp: int
    advantage: AdvantageState
    reminders: tuple[str, ...] = ()


def unarmed_strike() -> WeaponProfile:
    return WeaponProfile(name="Unarmed Strike", attack_mod=0, damage_expr=get_settings().game.unarmed_damage)


def weapon_for(actor: Actor) -> WeaponProfile:
    """First monster attack, the PC's default weapon, or an unarmed strike."""
    return actor.primary_weapon or unarmed_strike()


def _require_active(state: EncounterState, *actors: Actor) -> None:
    for combatant in actors:
        if not state.is_active(combatant.id):
            raise CombatError(
                f"{combatant.name} is defeated and cannot take part in an attack",
                combatant_id=combatant.id,
                round_number=state.round_number,
            )


def actor_attack(
    state: EncounterState,
    attacker_id: str,
    defender_id: str,
    *,
    mode: AttackMode = AttackMode.MELEE,
    two_handed: bool = False,
    advantage: bool = False,
    disadvantage: bool = False,
    seed: str | None = None,
    adv_state_override: AdvantageState | None = None,
) -> ActorAttackResult:
    """Resolve one attack and apply its damage.

    Advantage combines the caller's flags with what the attacker's and
    defender's statuses and state tags imply, unless an override is given.
    Rolls are seeded from ``seed`` (or the encounter seed) as
    ``<base>:attack:<attacker>-><defender>:atk`` and ``...:damage``.

    Args:
        state: Current encounter.
        attacker_id: Attacking actor.
        defender_id: Target.
        mode: Melee or ranged.
        two_handed: Use the weapon's versatile damage when it has one.
        advantage: Caller-granted advantage.
        disadvantage: Caller-imposed disadvantage.
        seed: Base seed; defaults to the encounter seed.
        adv_state_override: Use this advantage state as-is.

    Returns:
        ActorAttackResult.

    Raises:
        UnknownActorError: If either actor does not exist.
        CombatError: If either actor is defeated.
    """
    attacker = require_actor(state, attacker_id, "attacker")
    defender = require_actor(state, defender_id, "defender")
    _require_active(state, attacker, defender)

    if adv_state_override is not None:
        net = AdvantageState(adv_state_override)
    else:
        net = combine_advantage(
            advantage,
            disadvantage,
            compute_advantage_state(state, attacker_id, defender_id, mode),
        )
    roll_advantage, roll_disadvantage = advantage_flags(net)

    weapon = weapon_for(attacker)
    expression = weapon.versatile_expr if two_handed and weapon.versatile_expr else weapon.damage_expr
    base = seed or state.seed
    prefix = f"{base}:attack:{attacker_id}->{defender_id}" if base else None

    resolved = resolve_attack(
        DamageSpec(expression=expression, seed=f"{prefix}:damage" if prefix else None),
        ability_mod=weapon.attack_mod,
        advantage=roll_advantage,
        disadvantage=roll_disadvantage,
        seed=f"{prefix}:atk" if prefix else None,
        target_ac=defender.ac,
    )

    next_state = state
    reminders: tuple[str, ...] = ()
    if resolved.damage is not None and resolved.damage.final_total > 0:
        next_state = apply_damage(state, defender_id, resolved.damage.final_total)
        reminders = tuple(
            concentration_reminder_lines_for_damage(next_state, defender_id, resolved.damage.final_total)
        )

    defender_hp = next_state.actors[defender_id].hp
    logger.info(
        "Attack",
        attacker_id=attacker_id,
        defender_id=defender_id,
        weapon=weapon.name,
        natural=resolved.attack.natural,
        total=resolved.attack.total,
        hit=resolved.attack.hit,
        crit=resolved.attack.is_crit,
        damage=resolved.damage.final_total if resolved.damage else 0,
        defender_hp=defender_hp,
    )
    return ActorAttackResult(
        state=next_state,
        weapon=weapon,
        attack=resolved.attack,
        damage=resolved.damage,
        defender_hp=defender_hp,
        advantage=net,
        reminders=reminders,
    )


@dataclass(frozen=True)
class ActorSpellResult:
    """Outcome of an encounter spell cast.

    Attributes:
        state: Encounter after damage is applied.
        outcome: Spell attack or save DC and the damage rolled.
        save: The target's saving throw, for save spells.
        damage_dealt: Damage applied after the save.
        target_hp: Target hp after the spell.
        reminders: Concentration save reminders for the target.
    """

    state: EncounterState
    outcome: SpellCastOutcome
    save: CheckResult | None
    damage_dealt: int
    target_hp: int
    reminders: tuple[str, ...] = ()


def actor_cast_spell(
    state: EncounterState,
    caster_id: str,
    target_id: str,
    spell: Spell,
    *,
    casting_ability: Ability | str | None = None,
    caster_level: int | None = None,
    slot_level: int | None = None,
    save_proficient: bool = False,
    advantage: bool = False,
    disadvantage: bool = False,
    seed: str | None = None,
) -> ActorSpellResult:
    """Cast a damaging spell at another actor and apply the result.

    Spell attacks roll against the target's AC. Save spells have the
    target roll its save against the caster's DC: a success halves the
    damage or negates it, as the spell says. Rolls are seeded from
    ``seed`` (or the encounter seed) as ``<base>:spell:<caster>-><target>``
    with ``:attack``, ``:damage`` and ``:save`` suffixes.

    Args:
        state: Current encounter.
        caster_id: Casting actor.
        target_id: Target.
        spell: Spell cast.
        casting_ability: Override for the casting ability.
        caster_level: Caster level for cantrip scaling.
        slot_level: Slot used for a leveled spell.
        save_proficient: Target adds its proficiency bonus to the save.
        advantage: Spell attack with advantage.
        disadvantage: Spell attack with disadvantage.
        seed: Base seed; defaults to the encounter seed.

    Raises:
        UnknownActorError: If either actor does not exist.
        CombatError: If either actor is defeated.
        ValidationError: If the casting ability or slot is invalid.
    """
    caster = require_actor(state, caster_id, "caster")
    target = require_actor(state, target_id, "target")
    _require_active(state, caster, target)

    base = seed or state.seed
    prefix = f"{base}:spell:{caster_id}->{target_id}" if base else None
    outcome = cast_spell(
        caster,
        spell,
        casting_ability=casting_ability,
        caster_level=caster_level,
        slot_level=slot_level,
        target_ac=target.ac,
        advantage=advantage,
        disadvantage=disadvantage,
        seed=prefix,
    )

    save: CheckResult | None = None
    damage_dealt = outcome.damage.final_total if outcome.damage else 0
    if outcome.kind is SpellResolution.SAVE and spell.save is not None:
        save = saving_throw(
            spell.save.ability,
            modifier=target.ability_mod(spell.save.ability),
            proficient=save_proficient,
            proficiency_bonus=actor_proficiency_bonus(target) if save_proficient else None,
            dc=outcome.dc,
            seed=derive_seed(prefix, "save"),
        )
        if save.success:
            damage_dealt = damage_dealt // 2 if spell.save.on_success is SpellSaveEffect.HALF else 0

    next_state = state
    reminders: tuple[str, ...] = ()
    if damage_dealt > 0:
        next_state = apply_damage(state, target_id, damage_dealt)
        reminders = tuple(concentration_reminder_lines_for_damage(next_state, target_id, damage_dealt))

    target_hp = next_state.actors[target_id].hp
    logger.info(
        "Spell cast",
        caster_id=caster_id,
        target_id=target_id,
        spell=spell.name,
        kind=outcome.kind,
        saved=save.success if save else None,
        damage=damage_dealt,
        target_hp=target_hp,
    )
    return ActorSpellResult(
        state=next_state,
        outcome=outcome,
        save=save,
        damage_dealt=damage_dealt,
        target_hp=target_hp,
        reminders=reminders,
    )


__all__ = [
    "ActorAttackResult",
    "ActorSpellResult",
    "actor_attack",
    "actor_cast_spell",
    "weapon_for",
    "unarmed_strike",
]
