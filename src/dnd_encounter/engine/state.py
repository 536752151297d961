"""Copy-on-write helpers shared by the engine modules."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from dnd_encounter.core.exceptions import UnknownActorError
from dnd_encounter.models import Actor, EncounterState


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def require_actor(state: EncounterState, actor_id: str, role: str = "actor") -> Actor:
    """Look up an actor or fail with the ids that would have worked.

    Args:
        state: Encounter to search.
        actor_id: Id to resolve.
        role: What the id is used as, for the error message.

    Returns:
        The actor.

    Raises:
        UnknownActorError: If the id is not registered.
    """
    actor = state.actors.get(actor_id)
    if actor is None:
        raise UnknownActorError(
            f"Unknown {role}: {actor_id}",
            actor_id=actor_id,
            role=role,
            available=sorted(state.actors),
        )
    return actor


def replace_actors(
    state: EncounterState,
    updated: Mapping[str, Actor],
    **changes: Any,
) -> EncounterState:
    """Return a state with some actors swapped out.

    Untouched actors and fields are shared with the input state.
    """
    if not updated and not changes:
        return state
    if updated:
        changes["actors"] = {**state.actors, **updated}
    return state.model_copy(update=changes)


def drop_tags(
    state: EncounterState,
    removals: Iterable[tuple[str, str]],
) -> EncounterState:
    """Remove specific tags and forget any concentration links to them.

    Args:
        state: Encounter to update.
        removals: ``(actor_id, tag_id)`` pairs; unknown pairs are ignored.

    Returns:
        Updated state, or the input state if nothing matched.
    """
    by_actor: dict[str, set[str]] = {}
    for actor_id, tag_id in removals:
        by_actor.setdefault(actor_id, set()).add(tag_id)
    if not by_actor:
        return state

    updated: dict[str, Actor] = {}
    removed: set[tuple[str, str]] = set()
    for actor_id, tag_ids in by_actor.items():
        actor = state.actors.get(actor_id)
        if actor is None:
            continue
        kept = tuple(tag for tag in actor.tags if tag.id not in tag_ids)
        if len(kept) == len(actor.tags):
            continue
        removed.update((actor_id, tag.id) for tag in actor.tags if tag.id in tag_ids)
        updated[actor_id] = actor.model_copy(update={"tags": kept})

    if not updated:
        return state

    changes: dict[str, Any] = {}
    concentration = prune_links(state, removed)
    if concentration is not state.concentration:
        changes["concentration"] = concentration
    return replace_actors(state, updated, **changes)


def prune_links(state: EncounterState, removed: set[tuple[str, str]]) -> dict:
    """Drop concentration links that point at removed tags.

    Returns the original mapping object when no link changed.
    """
    if not removed or not state.concentration:
        return state.concentration

    pruned = {}
    changed = False
    for caster_id, entry in state.concentration.items():
        links = tuple(
            link for link in entry.links if (link.actor_id, link.tag_id) not in removed
        )
        if len(links) != len(entry.links):
            changed = True
            entry = entry.model_copy(update={"links": links})
        pruned[caster_id] = entry
    return pruned if changed else state.concentration


__all__ = [
    "utc_now",
    "require_actor",
    "replace_actors",
    "drop_tags",
    "prune_links",
]
