"""Tests for the built-in concentration spells."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import pytest

from dnd_encounter.core.exceptions import (
    ConcentrationError,
    SpellTargetError,
    UnknownActorError,
    ValidationError,
)
from dnd_encounter.engine.encounter import add_actor, next_turn
from dnd_encounter.engine.spells import (
    cast_bless,
    cast_guidance,
    cast_hunters_mark,
    end_bless,
    end_guidance,
    end_hunters_mark,
    marked_by,
    max_bless_targets,
    transfer_hunters_mark,
)
from dnd_encounter.models import EncounterState, MonsterActor, PlayerActor


NOW = datetime(2030, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def party(rolled: EncounterState, make_pc: Callable[..., PlayerActor]) -> EncounterState:
    """The rolled encounter plus a rogue and a ranger."""
    state = add_actor(rolled, make_pc("rogue"))
    return add_actor(state, make_pc("ranger"))


class TestBless:
    """Tests for Bless."""

    def test_cast(self, rolled: EncounterState) -> None:
        """Test effect and maintaining tags are created and linked."""
        result = cast_bless(rolled, "cleric", ["fighter", "cleric"])

        assert [owner for owner, _ in result.effect_tags] == ["fighter", "cleric"]
        _, fighter_tag = result.effect_tags[0]
        assert fighter_tag.key == "spell:bless"
        assert fighter_tag.source == "Cleric"
        assert fighter_tag.note == "Add 1d4 to attack rolls and saving throws"
        assert fighter_tag.expires_at_round == 10

        assert result.concentration_tag is not None
        assert result.concentration_tag.text == "Concentration: Bless"
        assert result.concentration_tag.note == "Maintaining Bless (10 rounds)"
        assert len(result.entry.links) == 3
        assert result.entry.duration_label == "10 rounds"

    def test_max_targets(self, mock_env_vars: dict[str, str]) -> None:
        """Test the cap comes from settings and grows with slot level."""
        assert max_bless_targets() == 4
        assert max_bless_targets(3) == 6

    def test_truncates_extra_targets(self, party: EncounterState) -> None:
        """Test only the first three unique targets are kept."""
        result = cast_bless(party, "cleric", ["fighter", "fighter", "rogue", "ranger", "cleric"])

        assert result.entry.target_ids == ("fighter", "rogue", "ranger")
        assert result.state.actors["cleric"].tags[0].key == "concentration:bless"
        assert len(result.state.actors["cleric"].tags) == 1

    def test_higher_slot_allows_more(self, party: EncounterState) -> None:
        """Test a 2nd-level slot blesses four."""
        result = cast_bless(party, "cleric", ["fighter", "rogue", "ranger", "cleric"], slot_level=2)

        assert len(result.entry.target_ids) == 4

    def test_strict_refuses(self, party: EncounterState) -> None:
        """Test strict mode raises instead of truncating."""
        with pytest.raises(SpellTargetError) as exc_info:
            cast_bless(party, "cleric", ["fighter", "rogue", "ranger", "cleric"], strict=True)

        assert exc_info.value.details["max_targets"] == 3

    def test_truncated_unknown_ignored(self, party: EncounterState) -> None:
        """Test dropped ids are never validated."""
        result = cast_bless(party, "cleric", ["fighter", "rogue", "ranger", "dragon"])

        assert "dragon" not in result.entry.target_ids

    def test_no_targets(self, rolled: EncounterState) -> None:
        """Test an empty or blank list is refused."""
        with pytest.raises(SpellTargetError):
            cast_bless(rolled, "cleric", [" ", ""])

    @pytest.mark.parametrize("kwargs", [{"slot_level": 0}, {"rounds": 0}])
    def test_bad_arguments(self, rolled: EncounterState, kwargs: dict[str, int]) -> None:
        """Test non-positive slot level or duration is rejected."""
        with pytest.raises(ValidationError):
            cast_bless(rolled, "cleric", ["fighter"], **kwargs)

    def test_unknown_target(self, rolled: EncounterState) -> None:
        """Test an unknown kept target fails."""
        with pytest.raises(UnknownActorError):
            cast_bless(rolled, "cleric", ["dragon"])

    def test_recast_replaces(self, rolled: EncounterState) -> None:
        """Test creatures dropped from a recast lose the effect."""
        state = cast_bless(rolled, "cleric", ["fighter", "goblin"]).state
        result = cast_bless(state, "cleric", ["fighter"])

        assert result.replaced is not None
        assert result.state.actors["goblin"].tags == ()
        assert len(result.state.actors["fighter"].tags) == 1
        assert len(result.state.actors["cleric"].tags) == 1

    def test_end_bless(self, rolled: EncounterState) -> None:
        """Test ending Bless removes every linked tag."""
        state = cast_bless(rolled, "cleric", ["fighter"]).state
        removal = end_bless(state, "cleric")

        assert removal.entry is not None
        assert removal.state.concentration == {}
        assert all(actor.tags == () for actor in removal.state.actors.values())

    def test_end_bless_leaves_other_spell(self, rolled: EncounterState) -> None:
        """Test ending Bless does not touch a different spell."""
        state = cast_guidance(rolled, "cleric", "fighter").state

        assert end_bless(state, "cleric").state is state

    def test_expires_with_rounds(self, rolled: EncounterState) -> None:
        """Test a two-round Bless lasts through round 2."""
        state = cast_bless(rolled, "cleric", ["fighter"], rounds=2).state
        for _ in range(3):
            state = next_turn(state, now=NOW)
        assert state.round_number == 2
        assert "cleric" in state.concentration

        for _ in range(3):
            state = next_turn(state, now=NOW)
        assert state.round_number == 3
        assert state.concentration == {}


class TestHuntersMark:
    """Tests for Hunter's Mark."""

    def test_cast(self, rolled: EncounterState) -> None:
        """Test a one-hour mark with a maintaining tag."""
        result = cast_hunters_mark(rolled, "fighter", "goblin", now=NOW)

        (owner, tag), = result.effect_tags
        assert owner == "goblin"
        assert tag.key == "spell:hunters-mark"
        assert tag.expires_at == NOW + timedelta(hours=1)
        assert result.entry.duration_label == "1 hour"
        assert result.concentration_tag is not None
        assert result.concentration_tag.note == "Maintaining Hunter's Mark (1 hour)"
        assert marked_by(result.state, "fighter", "goblin")

    def test_custom_duration_label(self, rolled: EncounterState) -> None:
        """Test shorter durations are labelled in minutes."""
        result = cast_hunters_mark(rolled, "fighter", "goblin", duration=timedelta(minutes=10), now=NOW)

        assert result.entry.duration_label == "10 minutes"

    def test_transfer(self, rolled: EncounterState, make_monster: Callable[..., MonsterActor]) -> None:
        """Test the mark moves without dropping concentration."""
        state = add_actor(rolled, make_monster("orc"))
        state = cast_hunters_mark(state, "fighter", "goblin", now=NOW).state
        maintaining = state.actors["fighter"].tags

        result = transfer_hunters_mark(state, "fighter", "orc")

        assert result.previous_target_id == "goblin"
        assert result.state.actors["goblin"].tags == ()
        assert result.effect_tag.expires_at == NOW + timedelta(hours=1)
        assert result.state.actors["fighter"].tags == maintaining
        assert result.entry.target_ids == ("orc",)
        assert marked_by(result.state, "fighter", "orc")
        assert not marked_by(result.state, "fighter", "goblin")

    def test_transfer_from_self(self, rolled: EncounterState) -> None:
        """Test a self-mark moves off the caster and leaves only the maintaining tag."""
        state = cast_hunters_mark(rolled, "fighter", "fighter", now=NOW).state

        result = transfer_hunters_mark(state, "fighter", "goblin")
        fighter_keys = [tag.key for tag in result.state.actors["fighter"].tags]

        assert fighter_keys == ["concentration:hunters-mark"]
        assert [tag.key for tag in result.state.actors["goblin"].tags] == ["spell:hunters-mark"]
        assert [owner for owner, _ in result.removed_tags] == ["fighter"]
        assert len(result.entry.links) == 2
        assert marked_by(result.state, "fighter", "goblin")
        assert not marked_by(result.state, "fighter", "fighter")

    def test_transfer_requires_mark(self, rolled: EncounterState) -> None:
        """Test transferring without an active mark fails."""
        state = cast_bless(rolled, "fighter", ["cleric"]).state

        with pytest.raises(ConcentrationError):
            transfer_hunters_mark(state, "fighter", "goblin")

    def test_new_spell_drops_mark(self, rolled: EncounterState) -> None:
        """Test casting something else ends the mark."""
        state = cast_hunters_mark(rolled, "fighter", "goblin", now=NOW).state
        state = cast_bless(state, "fighter", ["cleric"]).state

        assert state.actors["goblin"].tags == ()
        assert not marked_by(state, "fighter", "goblin")

    def test_end_hunters_mark(self, rolled: EncounterState) -> None:
        """Test ending the mark clears both tags."""
        state = cast_hunters_mark(rolled, "fighter", "goblin", now=NOW).state
        state = end_hunters_mark(state, "fighter").state

        assert state.actors["goblin"].tags == ()
        assert state.actors["fighter"].tags == ()

    def test_marked_by_ignores_tag_source(self, rolled: EncounterState) -> None:
        """Test a same-named caster without the entry does not count."""
        state = cast_hunters_mark(rolled, "fighter", "goblin", now=NOW).state

        assert not marked_by(state, "cleric", "goblin")


class TestGuidance:
    """Tests for Guidance."""

    def test_cast(self, rolled: EncounterState) -> None:
        """Test a one-minute single-target effect."""
        result = cast_guidance(rolled, "cleric", "fighter")

        (owner, tag), = result.effect_tags
        assert owner == "fighter"
        assert tag.key == "spell:guidance"
        assert tag.expires_at_round == 10
        assert result.entry.duration_label == "1 minute"

    def test_single_target_only(self, rolled: EncounterState) -> None:
        """Test a list of targets is refused."""
        with pytest.raises(SpellTargetError):
            cast_guidance(rolled, "cleric", ["fighter", "goblin"])

    def test_end_guidance(self, rolled: EncounterState) -> None:
        """Test using the die ends the spell."""
        state = cast_guidance(rolled, "cleric", "fighter").state
        state = end_guidance(state, "cleric").state

        assert state.concentration == {}
        assert state.actors["fighter"].tags == ()
