"""Tests for the party bag and actor inventories."""

from __future__ import annotations

import pytest

from dnd_encounter.core.exceptions import UnknownActorError
from dnd_encounter.engine.inventory import (
    give_to_actor,
    give_to_party,
    list_bag,
    list_inventory,
    take_from_actor,
    take_from_party,
)
from dnd_encounter.models import EncounterState, InventoryItem


class TestPartyBag:
    """Tests for the shared bag."""

    def test_stacks_by_name(self, rolled: EncounterState) -> None:
        """Test names match ignoring case and spaces, keeping the first spelling."""
        state = give_to_party(rolled, " Rope ", 1)
        state = give_to_party(state, "rope", 2)
        state = give_to_party(state, "Torch", 3)

        assert list_bag(state) == (InventoryItem(name="Rope", qty=3), InventoryItem(name="Torch", qty=3))

    def test_zero_is_noop(self, rolled: EncounterState) -> None:
        """Test a zero quantity changes nothing."""
        assert give_to_party(rolled, "Rope", 0) is rolled

    def test_negative_reduces(self, rolled: EncounterState) -> None:
        """Test a negative give shrinks or removes a stack."""
        state = give_to_party(rolled, "Rope", 2)

        assert list_bag(give_to_party(state, "ROPE", -1)) == (InventoryItem(name="Rope", qty=1),)
        assert list_bag(give_to_party(state, "rope", -5)) == ()
        assert list_bag(give_to_party(state, "Torch", -1)) == list_bag(state)

    def test_take_partial(self, rolled: EncounterState) -> None:
        """Test taking reports how many were removed."""
        state = give_to_party(rolled, "Potion", 2)

        state, removed = take_from_party(state, "potion", 5)

        assert removed == 2
        assert list_bag(state) == ()

    def test_take_missing(self, rolled: EncounterState) -> None:
        """Test taking an absent item removes nothing."""
        assert take_from_party(rolled, "Potion") == (rolled, 0)


class TestActorInventory:
    """Tests for per-actor inventories."""

    def test_give_and_take(self, rolled: EncounterState) -> None:
        """Test items move in and out of one actor's pack."""
        state = give_to_actor(rolled, "fighter", "Arrow", 20)
        state, removed = take_from_actor(state, "fighter", "arrow", 3)

        assert removed == 3
        assert list_inventory(state, "fighter") == (InventoryItem(name="Arrow", qty=17),)
        assert list_inventory(state, "cleric") == ()
        assert list_bag(state) == ()

    def test_unknown_actor(self, rolled: EncounterState) -> None:
        """Test unknown actors fail."""
        with pytest.raises(UnknownActorError):
            give_to_actor(rolled, "dragon", "Gold")
        with pytest.raises(UnknownActorError):
            take_from_actor(rolled, "dragon", "Gold")

    def test_non_positive_take(self, rolled: EncounterState) -> None:
        """Test taking zero removes nothing."""
        state = give_to_actor(rolled, "fighter", "Arrow", 2)

        assert take_from_actor(state, "fighter", "Arrow", 0) == (state, 0)
