"""Custom exception hierarchy for the encounter engine.

Every failure the engine reports is one of these exceptions. All of them
inherit from DndEncounterError, so callers can catch the whole family at
their boundary while still reading domain-specific context from
``details`` to build a user-facing message.

Example:
    >>> from dnd_encounter.core.exceptions import UnknownActorError
    >>> raise UnknownActorError("Unknown target", actor_id="gob-9", role="target")
"""

from __future__ import annotations

from typing import Any


class DndEncounterError(Exception):
    """Base exception for all encounter engine errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Configuration & Validation Exceptions
# =============================================================================


class ConfigurationError(DndEncounterError):
    """Raised when application configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


class ValidationError(DndEncounterError):
    """Raised when a caller-supplied value is outside its domain.

    Distinct from ``pydantic.ValidationError``, which covers malformed
    records; this one covers well-formed values the rules reject.
    """

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error with field context.

        Args:
            message: Human-readable error description.
            field_name: Name of the field that failed validation.
            invalid_value: The value that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        if invalid_value is not None:
            combined_details["invalid_value"] = invalid_value
        super().__init__(message, details=combined_details)


# =============================================================================
# Game Engine Domain Exceptions
# =============================================================================


class GameEngineError(DndEncounterError):
    """Base exception for all game engine errors."""


class DiceRollError(GameEngineError):
    """Raised when a dice expression cannot be parsed or rolled."""

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        token: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize dice roll error with expression context.

        Args:
            message: Human-readable error description.
            expression: The dice expression that caused the error.
            token: The offending term within the expression, if known.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if expression is not None:
            combined_details["expression"] = expression
        if token is not None:
            combined_details["token"] = token
        super().__init__(message, details=combined_details)


class UnknownActorError(GameEngineError):
    """Raised when an actor, caster, target or bard id is not in the encounter."""

    def __init__(
        self,
        message: str,
        *,
        actor_id: str | None = None,
        role: str | None = None,
        available: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize unknown actor error.

        Args:
            message: Human-readable error description.
            actor_id: The id that could not be resolved.
            role: What the id was used as (``attacker``, ``caster``...).
            available: Ids that would have been accepted.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if actor_id is not None:
            combined_details["actor_id"] = actor_id
        if role:
            combined_details["role"] = role
        if available is not None:
            combined_details["available"] = available
        super().__init__(message, details=combined_details)


class CombatError(GameEngineError):
    """Raised when an attack cannot be resolved under the current state."""

    def __init__(
        self,
        message: str,
        *,
        combatant_id: str | None = None,
        round_number: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize combat error with combat context.

        Args:
            message: Human-readable error description.
            combatant_id: Identifier of the combatant involved.
            round_number: Current combat round when error occurred.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if combatant_id:
            combined_details["combatant_id"] = combatant_id
        if round_number is not None:
            combined_details["round_number"] = round_number
        super().__init__(message, details=combined_details)


class TurnManagementError(GameEngineError):
    """Raised when the initiative order cannot be walked.

    This covers orders that name missing actors or list an actor twice,
    which only a hand-built or deserialized state can contain.
    """

    def __init__(
        self,
        message: str,
        *,
        actor_ids: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if actor_ids:
            combined_details["actor_ids"] = actor_ids
        super().__init__(message, details=combined_details)


class ConcentrationError(GameEngineError):
    """Raised when a concentration operation does not match the caster's entry."""

    def __init__(
        self,
        message: str,
        *,
        caster_id: str | None = None,
        spell_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize concentration error.

        Args:
            message: Human-readable error description.
            caster_id: The concentrating caster.
            spell_id: The spell the operation expected.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if caster_id:
            combined_details["caster_id"] = caster_id
        if spell_id:
            combined_details["spell_id"] = spell_id
        super().__init__(message, details=combined_details)


class SpellTargetError(GameEngineError):
    """Raised when a spell is cast with an unacceptable target list."""

    def __init__(
        self,
        message: str,
        *,
        spell_id: str | None = None,
        max_targets: int | None = None,
        requested: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize spell target error.

        Args:
            message: Human-readable error description.
            spell_id: Identifier of the spell being cast.
            max_targets: The spell's target cap.
            requested: The target ids the caller asked for.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if spell_id:
            combined_details["spell_id"] = spell_id
        if max_targets is not None:
            combined_details["max_targets"] = max_targets
        if requested is not None:
            combined_details["requested"] = requested
        super().__init__(message, details=combined_details)


class RestTargetError(GameEngineError):
    """Raised when a rest target specifier matches no actors."""

    def __init__(
        self,
        message: str,
        *,
        who: str | None = None,
        available: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize rest target error.

        Args:
            message: Human-readable error description.
            who: The side keyword, id or name that matched nothing.
            available: Names of actors in the encounter.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if who is not None:
            combined_details["who"] = who
        if available is not None:
            combined_details["available"] = available
        super().__init__(message, details=combined_details)


__all__ = [
    # Base exception
    "DndEncounterError",
    # Configuration exceptions
    "ConfigurationError",
    "ValidationError",
    # Game engine exceptions
    "GameEngineError",
    "DiceRollError",
    "UnknownActorError",
    "CombatError",
    "TurnManagementError",
    "ConcentrationError",
    "SpellTargetError",
    "RestTargetError",
]
