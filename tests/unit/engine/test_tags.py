"""Tests for the tag lifecycle."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pydantic
import pytest

from dnd_encounter.core.exceptions import UnknownActorError
from dnd_encounter.engine.spells import cast_bless
from dnd_encounter.engine.tags import (
    add_tag,
    add_tag_detailed,
    attach_tags,
    clear_tags,
    expire_tags,
    remove_tag,
    tick_tag_durations,
)
from dnd_encounter.models import EncounterState, TagDuration, TagPhase, TagSpec


NOW = datetime(2030, 1, 1, tzinfo=timezone.utc)


class TestAddTag:
    """Tests for creating tags."""

    def test_ids_are_sequential(self, rolled: EncounterState) -> None:
        """Test each actor numbers its own tags."""
        state = add_tag(rolled, "fighter", text="Marked")
        state = add_tag(state, "fighter", text="Hidden")
        state = add_tag(state, "goblin", text="Frightened")

        assert [tag.id for tag in state.actors["fighter"].tags] == ["t1", "t2"]
        assert [tag.id for tag in state.actors["goblin"].tags] == ["t1"]

    def test_ids_never_reused(self, rolled: EncounterState) -> None:
        """Test a removed number is not handed out again."""
        state = add_tag(add_tag(rolled, "fighter", text="A"), "fighter", text="B")
        state = remove_tag(state, "fighter", "t2")
        state = add_tag(state, "fighter", text="C")

        assert [tag.id for tag in state.actors["fighter"].tags] == ["t1", "t3"]

    def test_ids_survive_clear(self, rolled: EncounterState) -> None:
        """Test clearing tags keeps the counter."""
        state = clear_tags(add_tag(rolled, "fighter", text="A"), "fighter")
        state = add_tag(state, "fighter", text="B")

        assert state.actors["fighter"].tags[0].id == "t2"

    def test_detailed_returns_tag(self, rolled: EncounterState) -> None:
        """Test the created tag carries its id and round."""
        state, tag = add_tag_detailed(
            rolled, "goblin", text="Prone", key="condition:prone", source="Fighter"
        )

        assert tag.id == "t1"
        assert tag.added_at_round == 1
        assert tag.source == "Fighter"
        assert state.actors["goblin"].tags == (tag,)

    def test_spec_with_overrides(self, rolled: EncounterState) -> None:
        """Test keyword fields override a spec."""
        spec = TagSpec(text="Marked", note="original")
        _, tag = add_tag_detailed(rolled, "goblin", spec, note="changed")

        assert tag.text == "Marked"
        assert tag.note == "changed"

    def test_text_or_key_required(self, rolled: EncounterState) -> None:
        """Test a tag with neither label nor key is rejected."""
        with pytest.raises(pydantic.ValidationError):
            add_tag(rolled, "goblin", note="nothing to show")

    def test_naive_expiry_assumed_utc(self, rolled: EncounterState) -> None:
        """Test naive timestamps are treated as UTC."""
        _, tag = add_tag_detailed(rolled, "goblin", text="Held", expires_at=datetime(2030, 1, 1))

        assert tag.expires_at == NOW

    def test_attach_many(self, rolled: EncounterState) -> None:
        """Test attaching several tags in one call."""
        state, created = attach_tags(rolled, "cleric", [TagSpec(text="A"), TagSpec(text="B")])

        assert [tag.id for tag in created] == ["t1", "t2"]
        assert state.actors["cleric"].tag_seq == 2

    def test_unknown_actor(self, rolled: EncounterState) -> None:
        """Test tagging an unknown actor fails."""
        with pytest.raises(UnknownActorError):
            add_tag(rolled, "dragon", text="Angry")

    def test_original_state_untouched(self, rolled: EncounterState) -> None:
        """Test adding a tag does not mutate the input state."""
        add_tag(rolled, "fighter", text="Marked")

        assert rolled.actors["fighter"].tags == ()


class TestRemoveTag:
    """Tests for removing tags."""

    def test_remove_missing_is_noop(self, rolled: EncounterState) -> None:
        """Test removing an absent tag changes nothing."""
        assert remove_tag(rolled, "fighter", "t9") is rolled

    def test_remove_unknown_actor(self, rolled: EncounterState) -> None:
        """Test removing from an unknown actor fails."""
        with pytest.raises(UnknownActorError):
            remove_tag(rolled, "dragon", "t1")

    def test_removing_linked_tag_prunes_link(self, rolled: EncounterState) -> None:
        """Test a hand-removed concentration tag is forgotten by its entry."""
        state = cast_bless(rolled, "cleric", ["fighter", "goblin"]).state
        state = remove_tag(state, "goblin", "t1")

        links = state.concentration["cleric"].links
        assert ("goblin", "t1") not in {(link.actor_id, link.tag_id) for link in links}
        assert len(links) == 2

    def test_clear_tags(self, rolled: EncounterState) -> None:
        """Test clearing removes every tag."""
        state = add_tag(add_tag(rolled, "fighter", text="A"), "fighter", text="B")

        assert clear_tags(state, "fighter").actors["fighter"].tags == ()


class TestExpiry:
    """Tests for round, wall-clock and countdown expiry."""

    def test_round_expiry_inclusive(self, rolled: EncounterState) -> None:
        """Test a tag lasts through its final round."""
        state = add_tag(rolled, "fighter", text="Blessed", expires_at_round=2)

        same_round = expire_tags(state.model_copy(update={"round_number": 2}), NOW)
        next_round = expire_tags(state.model_copy(update={"round_number": 3}), NOW)

        assert len(same_round.actors["fighter"].tags) == 1
        assert next_round.actors["fighter"].tags == ()

    def test_wall_clock_expiry(self, rolled: EncounterState) -> None:
        """Test a timestamp expiry fires once reached."""
        state = add_tag(rolled, "fighter", text="Haste", expires_at=NOW + timedelta(minutes=1))

        assert len(expire_tags(state, NOW).actors["fighter"].tags) == 1
        assert expire_tags(state, NOW + timedelta(minutes=1)).actors["fighter"].tags == ()

    def test_nothing_expired_returns_same_state(self, rolled: EncounterState) -> None:
        """Test a sweep with nothing to do returns the input."""
        state = add_tag(rolled, "fighter", text="Forever")

        assert expire_tags(state, NOW) is state

    def test_countdown_decrements(self, rolled: EncounterState) -> None:
        """Test a countdown above 1 is decremented."""
        state = add_tag(rolled, "goblin", text="Dodge", duration=TagDuration(rounds=3))
        state = tick_tag_durations(state, "goblin", TagPhase.TURN_END)

        duration = state.actors["goblin"].tags[0].duration
        assert duration is not None
        assert duration.rounds == 2

    @pytest.mark.parametrize("rounds", [0, 1])
    def test_countdown_expires(self, rolled: EncounterState, rounds: int) -> None:
        """Test countdowns at 1 or below expire."""
        state = add_tag(rolled, "goblin", text="Dodge", duration=TagDuration(rounds=rounds))

        assert tick_tag_durations(state, "goblin", TagPhase.TURN_END).actors["goblin"].tags == ()

    def test_countdown_other_phase_untouched(self, rolled: EncounterState) -> None:
        """Test a turnEnd countdown ignores turn starts."""
        state = add_tag(rolled, "goblin", text="Dodge", duration=TagDuration(rounds=1))

        assert tick_tag_durations(state, "goblin", TagPhase.TURN_START) is state
