"""Party bag and per-actor inventories.

Items are stacks matched by name, ignoring case and surrounding spaces.
The first spelling given for a stack is the one kept.
"""

from __future__ import annotations

from dnd_encounter.core.logging import get_logger
from dnd_encounter.engine.state import require_actor
from dnd_encounter.models import EncounterState, InventoryItem


logger = get_logger(__name__)

Items = tuple[InventoryItem, ...]


def _match(name: str) -> str:
    return name.strip().lower()


def _add(items: Items, name: str, qty: int) -> Items:
    wanted = _match(name)
    result: list[InventoryItem] = []
    found = False
    for item in items:
        if not found and _match(item.name) == wanted:
            found = True
            remaining = item.qty + qty
            if remaining > 0:
                result.append(item.model_copy(update={"qty": remaining}))
            continue
        result.append(item)
    if not found and qty > 0:
        result.append(InventoryItem(name=name.strip(), qty=qty))
    return tuple(result)


def _take(items: Items, name: str, qty: int) -> tuple[Items, int]:
    wanted = _match(name)
    for index, item in enumerate(items):
        if _match(item.name) == wanted:
            removed = min(qty, item.qty)
            remaining = item.qty - removed
            rest = items[:index] + items[index + 1 :]
            if remaining > 0:
                rest = items[:index] + (item.model_copy(update={"qty": remaining}),) + items[index + 1 :]
            return rest, removed
    return items, 0


def list_bag(state: EncounterState) -> Items:
    return state.party_bag


def list_inventory(state: EncounterState, actor_id: str) -> Items:
    return state.inventories.get(actor_id, ())


def give_to_party(state: EncounterState, name: str, qty: int = 1) -> EncounterState:
    """Add items to the party bag.

    A negative quantity reduces an existing stack, removing it at zero.
    """
    if qty == 0:
        return state
    bag = _add(state.party_bag, name, qty)
    logger.debug("Party bag updated", item=name, qty=qty)
    return state.model_copy(update={"party_bag": bag})


def give_to_actor(state: EncounterState, actor_id: str, name: str, qty: int = 1) -> EncounterState:
    """Add items to an actor's inventory.

    Raises:
        UnknownActorError: If the actor does not exist.
    """
    require_actor(state, actor_id)
    if qty == 0:
        return state
    items = _add(list_inventory(state, actor_id), name, qty)
    logger.debug("Inventory updated", actor_id=actor_id, item=name, qty=qty)
    return state.model_copy(update={"inventories": {**state.inventories, actor_id: items}})


def take_from_party(state: EncounterState, name: str, qty: int = 1) -> tuple[EncounterState, int]:
    """Remove up to ``qty`` items from the party bag.

    Returns:
        The updated state and the number actually removed.
    """
    if qty <= 0:
        return state, 0
    bag, removed = _take(state.party_bag, name, qty)
    if not removed:
        return state, 0
    return state.model_copy(update={"party_bag": bag}), removed


def take_from_actor(
    state: EncounterState,
    actor_id: str,
    name: str,
    qty: int = 1,
) -> tuple[EncounterState, int]:
    """Remove up to ``qty`` items from an actor's inventory.

    Raises:
        UnknownActorError: If the actor does not exist.
    """
    require_actor(state, actor_id)
    if qty <= 0:
        return state, 0
    items, removed = _take(list_inventory(state, actor_id), name, qty)
    if not removed:
        return state, 0
    return state.model_copy(update={"inventories": {**state.inventories, actor_id: items}}), removed


__all__ = [
    "list_bag",
    "list_inventory",
    "give_to_party",
    "give_to_actor",
    "take_from_party",
    "take_from_actor",
]
