"""Custom exception hierarchy for the dungeon turn engine.

All exceptions inherit from DungeonEngineError, so callers can handle
every engine failure at one boundary while still seeing domain-specific
context in ``details``.

Play-time rejections (walking into a wall, using an empty inventory slot,
acting after the game ended) are NOT exceptions: they come back as a
``RejectionReason`` on the turn outcome. The classes below cover programming
errors, invalid configuration and invariant violations.

Example:
    >>> from dungeon_engine.core.exceptions import OutOfBoundsError
    >>> raise OutOfBoundsError("No tile there", x=60, y=2, width=50, height=30)
"""

from __future__ import annotations

from typing import Any


class DungeonEngineError(Exception):
    """Base exception for all dungeon engine errors.

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
# Game Engine Domain Exceptions
# =============================================================================


class GameEngineError(DungeonEngineError):
    """Base exception for world, registry and turn processing errors."""


class OutOfBoundsError(GameEngineError):
    """Raised when a grid lookup addresses a cell outside the map."""

    def __init__(
        self,
        message: str,
        *,
        x: int | None = None,
        y: int | None = None,
        width: int | None = None,
        height: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize out-of-bounds error with coordinate context.

        Args:
            message: Human-readable error description.
            x: Requested column.
            y: Requested row.
            width: Grid width.
            height: Grid height.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if x is not None and y is not None:
            combined_details["position"] = (x, y)
        if width is not None and height is not None:
            combined_details["grid_size"] = (width, height)
        super().__init__(message, details=combined_details)


class PlacementError(GameEngineError):
    """Raised when an entity or item cannot be placed where requested.

    This covers duplicate NPC identities, spawning onto an occupied or
    unwalkable cell, and attempts to alias an item that is already held.
    """

    def __init__(
        self,
        message: str,
        *,
        entity_id: str | None = None,
        position: tuple[int, int] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize placement error with entity context.

        Args:
            message: Human-readable error description.
            entity_id: Identifier of the entity or item involved.
            position: Target cell as an ``(x, y)`` tuple.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if entity_id:
            combined_details["entity_id"] = entity_id
        if position is not None:
            combined_details["position"] = position
        super().__init__(message, details=combined_details)


class InvalidGameStateError(GameEngineError):
    """Raised when the engine is driven from a phase that does not allow it."""

    def __init__(
        self,
        message: str,
        *,
        current_state: str | None = None,
        expected_states: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize invalid game state error with state context.

        Args:
            message: Human-readable error description.
            current_state: The current phase identifier.
            expected_states: List of phases that were expected.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if current_state:
            combined_details["current_state"] = current_state
        if expected_states:
            combined_details["expected_states"] = expected_states
        super().__init__(message, details=combined_details)


class DiceRollError(GameEngineError):
    """Raised when a random draw is requested with an impossible range."""

    def __init__(
        self,
        message: str,
        *,
        low: int | float | None = None,
        high: int | float | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize dice roll error with range context.

        Args:
            message: Human-readable error description.
            low: Lower bound of the requested draw.
            high: Upper bound of the requested draw.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if low is not None:
            combined_details["low"] = low
        if high is not None:
            combined_details["high"] = high
        super().__init__(message, details=combined_details)


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(DungeonEngineError):
    """Raised when engine configuration is invalid."""

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


class InvalidModeConfigurationError(ConfigurationError):
    """Raised when a game mode is configured with unusable parameters.

    Validated once at session construction; a session never starts with
    an invalid mode, so this error cannot surface during play.
    """

    def __init__(
        self,
        message: str,
        *,
        mode: str | None = None,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize mode configuration error.

        Args:
            message: Human-readable error description.
            mode: The game mode being configured.
            config_key: The offending parameter name.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if mode:
            combined_details["mode"] = mode
        super().__init__(message, config_key=config_key, details=combined_details)


__all__ = [
    "DungeonEngineError",
    "GameEngineError",
    "OutOfBoundsError",
    "PlacementError",
    "InvalidGameStateError",
    "DiceRollError",
    "ConfigurationError",
    "InvalidModeConfigurationError",
]
