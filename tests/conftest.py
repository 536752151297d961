"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the encounter engine test suite.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from dnd_encounter.engine.encounter import add_actor, create_encounter, roll_initiative
from dnd_encounter.models import (
    Ability,
    EncounterState,
    MonsterActor,
    PlayerActor,
    Side,
    WeaponProfile,
)


if TYPE_CHECKING:
    from collections.abc import Callable, Generator


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from dnd_encounter.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "DND_ENCOUNTER_DEBUG": "true",
        "DND_ENCOUNTER_LOG_LEVEL": "DEBUG",
        "DND_ENCOUNTER_GAME_DEFAULT_HIT_DIE": "10",
        "DND_ENCOUNTER_GAME_BLESS_MAX_TARGETS": "4",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


# =============================================================================
# Actor Fixtures
# =============================================================================


@pytest.fixture
def make_pc() -> Callable[..., PlayerActor]:
    """Factory for player characters with sensible defaults."""

    def _make(actor_id: str, **overrides: Any) -> PlayerActor:
        data: dict[str, Any] = {
            "id": actor_id,
            "name": actor_id.title(),
            "side": Side.PARTY,
            "ac": 14,
            "hp": 20,
            "max_hp": 20,
        }
        data.update(overrides)
        return PlayerActor(**data)

    return _make


@pytest.fixture
def make_monster() -> Callable[..., MonsterActor]:
    """Factory for monsters with sensible defaults."""

    def _make(actor_id: str, **overrides: Any) -> MonsterActor:
        data: dict[str, Any] = {
            "id": actor_id,
            "name": actor_id.title(),
            "side": Side.FOE,
            "ac": 12,
            "hp": 10,
            "max_hp": 10,
        }
        data.update(overrides)
        return MonsterActor(**data)

    return _make


@pytest.fixture
def fighter() -> PlayerActor:
    """A fighter with a versatile longsword."""
    return PlayerActor(
        id="fighter",
        name="Fighter",
        side=Side.PARTY,
        ac=16,
        hp=30,
        max_hp=30,
        ability_mods={Ability.STR: 3, Ability.DEX: 2, Ability.CON: 2},
        proficiency_bonus=2,
        default_weapon=WeaponProfile(
            name="Longsword",
            attack_mod=5,
            damage_expr="1d8+3",
            versatile_expr="1d10+3",
        ),
    )


@pytest.fixture
def goblin() -> MonsterActor:
    """A goblin with a scimitar."""
    return MonsterActor(
        id="goblin",
        name="Goblin",
        side=Side.FOE,
        ac=15,
        hp=7,
        max_hp=7,
        ability_mods={Ability.DEX: 2},
        attacks=(WeaponProfile(name="Scimitar", attack_mod=4, damage_expr="1d6+2"),),
    )


@pytest.fixture
def cleric() -> PlayerActor:
    """A cleric with no weapon profile."""
    return PlayerActor(
        id="cleric",
        name="Cleric",
        side=Side.PARTY,
        ac=18,
        hp=24,
        max_hp=24,
        ability_mods={Ability.CON: 1, Ability.WIS: 3},
    )


# =============================================================================
# Encounter Fixtures
# =============================================================================


@pytest.fixture
def encounter(fighter: PlayerActor, goblin: MonsterActor, cleric: PlayerActor) -> EncounterState:
    """Seeded encounter with fighter, goblin and cleric registered in that order.

    Returns:
        EncounterState without initiative.
    """
    state = create_encounter(seed="fight")
    for actor in (fighter, goblin, cleric):
        state = add_actor(state, actor)
    return state


@pytest.fixture
def rolled(encounter: EncounterState) -> EncounterState:
    """The seeded encounter after initiative.

    Seed ``fight`` rolls fighter 17 (+2), goblin 18 (+2), cleric 15, so
    the order is goblin 20, fighter 19, cleric 15.
    """
    return roll_initiative(encounter)
