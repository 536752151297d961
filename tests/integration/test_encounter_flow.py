"""Integration tests for a full encounter.

Runs a seeded fight from initiative through rests and loot.
"""

from __future__ import annotations

from datetime import datetime, timezone

from dnd_encounter.engine import (
    actor_attack,
    add_actor,
    cast_bless,
    create_encounter,
    current_actor,
    give_to_party,
    long_rest,
    next_turn,
    record_loot,
    record_xp,
    remove_actor,
    reminders_for,
    roll_coins_for_cr,
    roll_initiative,
    set_initiative,
)
from dnd_encounter.models import EncounterState


NOW = datetime(2030, 1, 1, tzinfo=timezone.utc)


def _current_id(state: EncounterState) -> str | None:
    actor = current_actor(state)
    return actor.id if actor is not None else None


class TestEncounterFlow:
    """Test complete encounter scenarios."""

    def test_full_fight(self, rolled: EncounterState) -> None:
        """Initiative, spells, attacks, defeat, rest and loot."""
        state = rolled
        assert _current_id(state) == "goblin"

        # Round 1
        swing = actor_attack(state, "goblin", "fighter", seed="swing-2")
        assert swing.defender_hp == 22
        state = next_turn(swing.state, now=NOW)

        assert _current_id(state) == "fighter"
        swing = actor_attack(state, "fighter", "goblin", seed="swing-15")
        assert swing.defender_hp == 1
        state = next_turn(swing.state, now=NOW)

        assert _current_id(state) == "cleric"
        state = cast_bless(state, "cleric", ["fighter", "cleric"]).state
        assert reminders_for(state, "fighter", "goblin", "attack") == ["Reminder: Bless (+d4 to attack roll)"]

        # Round 2
        state = next_turn(state, now=NOW)
        assert state.round_number == 2
        swing = actor_attack(state, "goblin", "cleric", seed="swing-3")
        assert swing.defender_hp == 17
        assert swing.reminders == ("Reminder: Concentration check DC 10 for Bless",)
        state = next_turn(swing.state, now=NOW)

        swing = actor_attack(state, "fighter", "goblin", seed="swing-3")
        assert swing.defender_hp == 0
        state = swing.state
        assert "goblin" in state.defeated

        state = next_turn(next_turn(state, now=NOW), now=NOW)
        assert _current_id(state) == "fighter"
        assert state.round_number == 3

        # Aftermath
        state = record_xp(state, ["1/4"])
        state = record_loot(state, roll_coins_for_cr("1/4", seed="goblin-pouch"), ["Scimitar"])
        state = give_to_party(state, "Scimitar")

        result = long_rest(state)
        state = result.state

        assert result.lines == ("Fighter → HP 30/30", "Cleric → HP 24/24")
        assert state.concentration == {}
        assert state.actors["fighter"].tags == ()
        assert state.xp_log[0].total == 50
        assert state.loot_log[0].items == ("Scimitar",)
        assert state.party_bag[0].name == "Scimitar"

        restored = EncounterState.model_validate_json(state.model_dump_json())
        assert restored == state

    def test_reinforcements_and_retreat(self) -> None:
        """Actors join from plain data, act on set scores and leave mid-round."""
        state = create_encounter(seed="ambush")
        state = add_actor(
            state,
            {"type": "pc", "id": "rogue", "name": "Rogue", "side": "party", "ac": 14, "hp": 18, "max_hp": 18},
        )
        state = add_actor(
            state,
            {"type": "monster", "id": "wolf", "name": "Wolf", "side": "foe", "ac": 13, "hp": 11, "max_hp": 11},
        )
        state = set_initiative(set_initiative(state, "rogue", 17), "wolf", 12)
        assert [entry.actor_id for entry in state.order] == ["rogue", "wolf"]

        state = next_turn(state, now=NOW)
        assert _current_id(state) == "wolf"

        state = add_actor(
            state,
            {"type": "monster", "id": "alpha", "name": "Alpha Wolf", "side": "foe", "ac": 14, "hp": 22, "max_hp": 22},
        )
        state = set_initiative(state, "alpha", 20)
        assert _current_id(state) == "alpha"

        state = remove_actor(state, "wolf")
        assert [entry.actor_id for entry in state.order] == ["alpha", "rogue"]
        assert _current_id(state) == "alpha"

        state = next_turn(next_turn(state, now=NOW), now=NOW)
        assert _current_id(state) == "alpha"
        assert state.round_number == 2

    def test_rolled_initiative_is_stable(self, encounter: EncounterState) -> None:
        """Rolling twice with the same seed gives the same order."""
        assert roll_initiative(encounter) == roll_initiative(encounter)
