"""Tag lifecycle: add, remove, clear and expire per-actor tags.

Tags are the engine's general-purpose status annotations. Each actor
numbers its own tags ``t1``, ``t2``... and never reuses a number, even
after the tag is removed. A tag can expire in three ways:

* ``expires_at_round``: kept while the round is at most this value.
* ``expires_at``: kept until the wall clock reaches this instant.
* ``duration``: a countdown decremented at the start or end of the
  owning actor's own turn, removed when it runs out.

Round and wall-clock expiry are swept on every turn transition; the
countdown is ticked only at the owner's turn edges.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from dnd_encounter.core.constants import TAG_ID_PREFIX
from dnd_encounter.core.logging import get_logger
from dnd_encounter.engine.state import (
    drop_tags,
    prune_links,
    replace_actors,
    require_actor,
    utc_now,
)
from dnd_encounter.models import Actor, EncounterState, Tag, TagPhase, TagSpec


logger = get_logger(__name__)

_TAG_NUMBER = re.compile(rf"^{TAG_ID_PREFIX}(\d+)$")


def _next_tag_number(actor: Actor) -> int:
    highest = actor.tag_seq
    for tag in actor.tags:
        match = _TAG_NUMBER.match(tag.id)
        if match:
            highest = max(highest, int(match.group(1)))
    return highest + 1


def _build_spec(spec: TagSpec | None, fields: dict[str, Any]) -> TagSpec:
    if spec is None:
        return TagSpec(**fields)
    if fields:
        return TagSpec.model_validate({**spec.model_dump(exclude_unset=True), **fields})
    return spec


def attach_tags(
    state: EncounterState,
    actor_id: str,
    specs: Iterable[TagSpec],
) -> tuple[EncounterState, tuple[Tag, ...]]:
    """Attach several tags to one actor in a single copy.

    Args:
        state: Encounter to update.
        actor_id: Tag owner.
        specs: Tags to create, in order.

    Returns:
        The updated state and the created tags.

    Raises:
        UnknownActorError: If the actor does not exist.
    """
    actor = require_actor(state, actor_id)
    number = _next_tag_number(actor)
    created: list[Tag] = []
    for spec in specs:
        created.append(
            Tag(
                **spec.model_dump(exclude_unset=True),
                id=f"{TAG_ID_PREFIX}{number}",
                added_at_round=state.round_number,
            )
        )
        number += 1
    if not created:
        return state, ()

    updated = actor.model_copy(update={"tags": (*actor.tags, *created), "tag_seq": number - 1})
    logger.debug(
        "Tags added",
        actor_id=actor_id,
        tag_ids=[tag.id for tag in created],
        round_number=state.round_number,
    )
    return replace_actors(state, {actor_id: updated}), tuple(created)


def add_tag_detailed(
    state: EncounterState,
    actor_id: str,
    spec: TagSpec | None = None,
    **fields: Any,
) -> tuple[EncounterState, Tag]:
    """Add a tag and return it alongside the new state.

    Args:
        state: Encounter to update.
        actor_id: Tag owner.
        spec: Tag contents; keyword fields override or replace it.
        **fields: TagSpec fields (``text``, ``key``, ``duration``...).

    Returns:
        The updated state and the created tag.

    Raises:
        UnknownActorError: If the actor does not exist.
    """
    next_state, created = attach_tags(state, actor_id, [_build_spec(spec, fields)])
    return next_state, created[0]


def add_tag(
    state: EncounterState,
    actor_id: str,
    spec: TagSpec | None = None,
    **fields: Any,
) -> EncounterState:
    """Add a tag to an actor.

    Example:
        >>> state = add_tag(state, "gob-1", text="Marked", expires_at_round=3)
    """
    next_state, _ = add_tag_detailed(state, actor_id, spec, **fields)
    return next_state


def remove_tag(state: EncounterState, actor_id: str, tag_id: str) -> EncounterState:
    """Remove one tag by id. Removing a missing tag is a no-op.

    Raises:
        UnknownActorError: If the actor does not exist.
    """
    require_actor(state, actor_id)
    return drop_tags(state, [(actor_id, tag_id)])


def clear_tags(state: EncounterState, actor_id: str) -> EncounterState:
    """Remove every tag from an actor.

    Raises:
        UnknownActorError: If the actor does not exist.
    """
    actor = require_actor(state, actor_id)
    return drop_tags(state, [(actor_id, tag.id) for tag in actor.tags])


def expire_tags(state: EncounterState, now: datetime | None = None) -> EncounterState:
    """Sweep round- and wall-clock-expired tags from every actor.

    The turn machine calls this on every transition.

    Args:
        state: Encounter to sweep.
        now: Wall-clock time; defaults to the current UTC time.

    Returns:
        Updated state, or the input state if nothing expired.
    """
    moment = now or utc_now()
    expired = [
        (actor_id, tag.id)
        for actor_id, actor in state.actors.items()
        for tag in actor.tags
        if tag.is_expired(state.round_number, moment)
    ]
    if expired:
        logger.debug("Tags expired", round_number=state.round_number, tags=expired)
    return drop_tags(state, expired)


def tick_tag_durations(
    state: EncounterState,
    actor_id: str,
    phase: TagPhase,
) -> EncounterState:
    """Advance the countdowns that tick at one of an actor's turn edges.

    A countdown at 1 or below expires; anything higher is decremented.

    Args:
        state: Encounter to update.
        actor_id: Actor whose turn is starting or ending.
        phase: Which turn edge is being crossed.

    Returns:
        Updated state, or the input state if no countdown ticks here.
    """
    actor = state.actors.get(actor_id)
    if actor is None or not actor.tags:
        return state

    kept: list[Tag] = []
    expired: list[str] = []
    changed = False
    for tag in actor.tags:
        duration = tag.duration
        if duration is None or duration.at != phase:
            kept.append(tag)
            continue
        changed = True
        if duration.rounds <= 1:
            expired.append(tag.id)
            continue
        kept.append(
            tag.model_copy(
                update={"duration": duration.model_copy(update={"rounds": duration.rounds - 1})}
            )
        )

    if not changed:
        return state

    changes: dict[str, Any] = {}
    if expired:
        logger.debug("Tag countdowns expired", actor_id=actor_id, phase=phase, tag_ids=expired)
        concentration = prune_links(state, {(actor_id, tag_id) for tag_id in expired})
        if concentration is not state.concentration:
            changes["concentration"] = concentration
    updated = actor.model_copy(update={"tags": tuple(kept)})
    return replace_actors(state, {actor_id: updated}, **changes)


__all__ = [
    "attach_tags",
    "add_tag",
    "add_tag_detailed",
    "remove_tag",
    "clear_tags",
    "expire_tags",
    "tick_tag_durations",
]
