"""Tests for configuration management."""

from __future__ import annotations

from pathlib import Path

import pytest

from dnd_encounter.core.config import (
    GameSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from dnd_encounter.core.exceptions import ConfigurationError


class TestGameSettings:
    """Tests for GameSettings configuration."""

    def test_default_values(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test default rules values."""
        monkeypatch.chdir(tmp_path)

        settings = GameSettings()

        assert settings.default_hit_die == 8
        assert settings.default_proficiency_bonus == 2
        assert settings.bless_max_targets == 3
        assert settings.unarmed_damage == "1d4"

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test values are read from prefixed environment variables."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("DND_ENCOUNTER_GAME_DEFAULT_HIT_DIE", "12")

        assert GameSettings().default_hit_die == 12

    def test_unarmed_damage_must_parse(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that an unparsable unarmed damage expression is rejected."""
        monkeypatch.chdir(tmp_path)

        with pytest.raises(ConfigurationError) as exc_info:
            GameSettings(unarmed_damage="fists")

        assert exc_info.value.details["config_key"] == "unarmed_damage"

    def test_unarmed_damage_accepts_modifier(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a dice expression with a flat modifier is accepted."""
        monkeypatch.chdir(tmp_path)

        assert GameSettings(unarmed_damage="1d4+1").unarmed_damage == "1d4+1"


class TestSettings:
    """Tests for main Settings configuration."""

    def test_default_settings(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test default settings initialization."""
        monkeypatch.chdir(tmp_path)

        settings = Settings()

        assert settings.app_name == "D&D Encounter Engine"
        assert settings.app_version == "0.1.0"
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert settings.log_json is False
        assert isinstance(settings.game, GameSettings)

    def test_debug_mode(self, tmp_path: Path, mock_env_vars: dict[str, str], monkeypatch: pytest.MonkeyPatch) -> None:
        """Test debug mode and nested game settings from the environment."""
        monkeypatch.chdir(tmp_path)

        settings = Settings()

        assert settings.debug is True
        assert settings.is_production is False
        assert settings.log_level == "DEBUG"
        assert settings.game.default_hit_die == 10
        assert settings.game.bless_max_targets == 4


class TestGetSettings:
    """Tests for get_settings singleton function."""

    def test_caching(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that settings are cached."""
        monkeypatch.chdir(tmp_path)

        assert get_settings() is get_settings()

    def test_cache_clear(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that cache can be cleared."""
        monkeypatch.chdir(tmp_path)

        settings1 = get_settings()
        clear_settings_cache()
        settings2 = get_settings()

        assert settings1 is not settings2

    def test_invalid_env_wrapped(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that load failures surface as ConfigurationError."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("DND_ENCOUNTER_LOG_LEVEL", "LOUD")

        with pytest.raises(ConfigurationError):
            get_settings()
