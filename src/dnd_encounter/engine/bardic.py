"""Bardic Inspiration: a single consumable bonus die on one creature."""

from __future__ import annotations

from collections.abc import Mapping

from dnd_encounter.core.constants import BARDIC_INSPIRATION_KEY
from dnd_encounter.core.exceptions import ValidationError
from dnd_encounter.core.logging import get_logger
from dnd_encounter.engine.state import drop_tags, require_actor
from dnd_encounter.engine.tags import add_tag_detailed
from dnd_encounter.models import Actor, EncounterState, Tag, TagSpec, normalize_identifier


logger = get_logger(__name__)

FEATURE_NAME = "Bardic Inspiration"
DEFAULT_DIE = "d6"
VALID_DICE = ("d6", "d8", "d10", "d12")


def normalize_die(raw: str | None) -> str:
    """Validate a die size, defaulting to d6.

    Raises:
        ValidationError: For anything other than d6, d8, d10 or d12.
    """
    if not raw:
        return DEFAULT_DIE
    die = raw.strip().lower()
    if die not in VALID_DICE:
        raise ValidationError(
            f"Unsupported Bardic Inspiration die: {raw}. Expected one of {', '.join(VALID_DICE)}.",
            field_name="die",
            invalid_value=raw,
        )
    return die


def is_bardic_inspiration_tag(tag: Tag) -> bool:
    return BARDIC_INSPIRATION_KEY in (tag.identifier, normalize_identifier(tag.text))


def find_bardic_inspiration(actor: Actor | None) -> Tag | None:
    """The actor's unspent inspiration tag, if any."""
    if actor is None:
        return None
    return next((tag for tag in actor.tags if is_bardic_inspiration_tag(tag)), None)


def bardic_inspiration_die(tag: Tag | None) -> str:
    """Die size stored on an inspiration tag.

    The value may be the die string itself or a mapping with a ``die`` key.
    Missing or unsupported sizes read as the default die.
    """
    if tag is None:
        return DEFAULT_DIE
    value = tag.value
    if isinstance(value, Mapping):
        value = value.get("die")
    die = value.strip().lower() if isinstance(value, str) else ""
    if die not in VALID_DICE:
        if die:
            logger.debug("Unsupported inspiration die on tag", tag_id=tag.id, die=value)
        return DEFAULT_DIE
    return die


def clear_bardic_inspiration(state: EncounterState, target_id: str) -> EncounterState:
    """Remove every inspiration tag from a creature, typically once spent."""
    actor = state.actors.get(target_id)
    if actor is None:
        return state
    return drop_tags(state, [(target_id, tag.id) for tag in actor.tags if is_bardic_inspiration_tag(tag)])


def apply_bardic_inspiration(
    state: EncounterState,
    bard_id: str,
    target_id: str,
    die: str = DEFAULT_DIE,
) -> EncounterState:
    """Give a creature a Bardic Inspiration die, replacing any it holds.

    Raises:
        UnknownActorError: If the bard or target is unknown.
        ValidationError: If the die size is not supported.
    """
    bard = require_actor(state, bard_id, "bard")
    require_actor(state, target_id, "target")
    size = normalize_die(die)

    next_state = clear_bardic_inspiration(state, target_id)
    next_state, _ = add_tag_detailed(
        next_state,
        target_id,
        TagSpec(
            text=FEATURE_NAME,
            key=BARDIC_INSPIRATION_KEY,
            value=size,
            note=f"Add {size} to one ability check, attack roll, or saving throw",
            source=bard.name,
        ),
    )
    logger.info("Bardic Inspiration granted", bard_id=bard_id, target_id=target_id, die=size)
    return next_state


__all__ = [
    "FEATURE_NAME",
    "VALID_DICE",
    "normalize_die",
    "is_bardic_inspiration_tag",
    "find_bardic_inspiration",
    "bardic_inspiration_die",
    "apply_bardic_inspiration",
    "clear_bardic_inspiration",
]
