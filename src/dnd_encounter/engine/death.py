"""Death saving throws for actors at 0 HP."""

from __future__ import annotations

from dataclasses import dataclass

from dnd_encounter.core.constants import DEATH_SAVE_DC, MAX_DEATH_SAVES, NATURAL_CRIT, NATURAL_FUMBLE
from dnd_encounter.core.logging import get_logger
from dnd_encounter.engine.dice import roll
from dnd_encounter.engine.state import replace_actors, require_actor
from dnd_encounter.models import DeathState, EncounterState


logger = get_logger(__name__)


@dataclass(frozen=True)
class DeathSaveResult:
    """Outcome of one death save.

    Attributes:
        state: Encounter after the save.
        d20: Natural roll used, or None when no save was needed.
        line: Display line describing the result.
    """

    state: EncounterState
    d20: int | None
    line: str


def _clamp(value: int) -> int:
    return max(0, min(MAX_DEATH_SAVES, value))


def roll_death_save(
    state: EncounterState,
    actor_id: str,
    d20: int | None = None,
    *,
    seed: str | None = None,
) -> DeathSaveResult:
    """Record a death save for a dying actor.

    A natural 20 brings the actor back with 1 HP. A natural 1 counts as
    two failures. Otherwise 10 or more is a success. Three successes
    stabilise the actor; three failures kill it. Conscious, stable and dead
    actors make no save.

    Args:
        state: Encounter to update.
        actor_id: Dying actor.
        d20: Natural roll to use; rolled with ``seed`` when omitted.
        seed: Seed for the roll when ``d20`` is omitted.

    Raises:
        UnknownActorError: If the actor does not exist.
    """
    actor = require_actor(state, actor_id)
    death = actor.death or DeathState()

    if death.dead:
        return DeathSaveResult(state=state, d20=None, line=f"{actor.name} is dead.")
    if actor.hp > 0:
        return DeathSaveResult(state=state, d20=None, line=f"{actor.name} is conscious (no death save needed).")
    if death.stable:
        return DeathSaveResult(state=state, d20=None, line=f"{actor.name} is stable (no death save).")

    natural = d20 if d20 is not None else roll("1d20", seed=seed).total

    if natural == NATURAL_CRIT:
        revived = actor.model_copy(update={"hp": max(1, actor.hp), "death": None})
        logger.info("Death save natural 20", actor_id=actor_id)
        return DeathSaveResult(
            state=replace_actors(state, {actor_id: revived}, defeated=state.defeated - {actor_id}),
            d20=natural,
            line=f"Death Save: NAT 20 — {actor.name} regains 1 HP!",
        )

    successes, failures = death.successes, death.failures
    if natural == NATURAL_FUMBLE:
        failures = _clamp(failures + 2)
    elif natural >= DEATH_SAVE_DC:
        successes = _clamp(successes + 1)
    else:
        failures = _clamp(failures + 1)

    if successes >= MAX_DEATH_SAVES:
        updated = DeathState(successes=MAX_DEATH_SAVES, failures=failures, stable=True)
        line = f"Death Save: Success ({MAX_DEATH_SAVES}). {actor.name} is stable."
        logger.info("Actor stabilised", actor_id=actor_id)
    elif failures >= MAX_DEATH_SAVES:
        updated = DeathState(successes=successes, failures=MAX_DEATH_SAVES, dead=True)
        line = f"Death Save: Failure ({MAX_DEATH_SAVES}). {actor.name} has died."
        logger.info("Actor died", actor_id=actor_id)
    else:
        updated = DeathState(successes=successes, failures=failures)
        outcome = "Success" if natural >= DEATH_SAVE_DC else "Failure"
        line = f"Death Save: {outcome} — S:{successes} F:{failures}"

    next_state = replace_actors(state, {actor_id: actor.model_copy(update={"death": updated})})
    return DeathSaveResult(state=next_state, d20=natural, line=line)


__all__ = ["DeathSaveResult", "roll_death_save"]
