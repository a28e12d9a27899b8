"""Win/loss conditions for each game mode.

A condition is pure configuration: it is built once when the session is
created and never mutated afterwards. ``evaluate`` reads the registry and
returns a ``Verdict`` without side effects, so calling it repeatedly on an
unchanged world always yields the same answer.

Loss is checked before victory in every mode: a player who dies on the
turn that would have won still loses.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Annotated, Literal, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from dungeon_engine.core.config import Settings, get_settings
from dungeon_engine.core.exceptions import InvalidModeConfigurationError
from dungeon_engine.models.entities import Player
from dungeon_engine.models.enums import GameMode, GameStatus, ItemKind
from dungeon_engine.models.registry import EntityRegistry


LOSS_DESCRIPTION = "Don't let your health reach zero!"


class Verdict(BaseModel):
    """Result of evaluating a condition.

    Attributes:
        status: ONGOING, WON or LOST.
        reason: Why the game ended; None while ongoing.
    """

    model_config = ConfigDict(frozen=True)

    status: GameStatus = GameStatus.ONGOING
    reason: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


ONGOING = Verdict()


# =============================================================================
# Conditions
# =============================================================================


class _Condition(BaseModel, ABC):
    """Shared evaluation: loss on death, then the mode's victory test.

    Subclasses provide ``win_description`` and ``is_won``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    @abstractmethod
    def win_description(self) -> str:
        """Goal text shown to the player."""

    @property
    def loss_description(self) -> str:
        return LOSS_DESCRIPTION

    @property
    def goal_text(self) -> str:
        return self.win_description

    @abstractmethod
    def is_won(self, player: Player) -> bool:
        """Whether the victory requirement is met."""

    def evaluate(self, registry: EntityRegistry) -> Verdict:
        """Decide whether the game is ongoing, won or lost."""
        player = registry.player
        if player.health <= 0:
            return Verdict(status=GameStatus.LOST, reason="You have fallen in the dungeon.")
        if self.is_won(player):
            return Verdict(status=GameStatus.WON, reason=self.victory_reason(player))
        return ONGOING

    def victory_reason(self, player: Player) -> str:
        return "Victory!"


class TreasureHuntCondition(_Condition):
    """Won as soon as a treasure is carried."""

    mode: Literal[GameMode.TREASURE_HUNT] = GameMode.TREASURE_HUNT

    @property
    def win_description(self) -> str:
        return "Find and collect the treasure!"

    def is_won(self, player: Player) -> bool:
        return player.has_item_kind(ItemKind.TREASURE)

    def victory_reason(self, player: Player) -> str:
        return "You found the treasure!"


class SurvivalCondition(_Condition):
    """Won once the turn counter reaches ``turn_limit``.

    Attributes:
        turn_limit: Number of completed turns required to win.
    """

    mode: Literal[GameMode.SURVIVAL] = GameMode.SURVIVAL
    turn_limit: int

    @model_validator(mode="after")
    def validate_turn_limit(self) -> Self:
        if self.turn_limit <= 0:
            raise InvalidModeConfigurationError(
                f"Survival turn limit must be positive, got {self.turn_limit}",
                mode=GameMode.SURVIVAL.value,
                config_key="turn_limit",
            )
        return self

    @property
    def win_description(self) -> str:
        return f"Survive for {self.turn_limit} turns!"

    def is_won(self, player: Player) -> bool:
        return player.turn >= self.turn_limit

    def victory_reason(self, player: Player) -> str:
        return f"You survived {player.turn} turns!"


class CollectionCondition(_Condition):
    """Won once the inventory holds at least the required count of each kind.

    Attributes:
        required_counts: Minimum number of items per kind.
    """

    mode: Literal[GameMode.COLLECTION] = GameMode.COLLECTION
    required_counts: dict[ItemKind, int]

    @model_validator(mode="after")
    def validate_required_counts(self) -> Self:
        if not self.required_counts:
            raise InvalidModeConfigurationError(
                "Collection requires at least one item kind",
                mode=GameMode.COLLECTION.value,
                config_key="required_counts",
            )
        invalid = {kind.value: count for kind, count in self.required_counts.items() if count <= 0}
        if invalid:
            raise InvalidModeConfigurationError(
                "Collection counts must be positive",
                mode=GameMode.COLLECTION.value,
                config_key="required_counts",
                details={"invalid_counts": invalid},
            )
        return self

    @property
    def win_description(self) -> str:
        wanted = ", ".join(f"{count} {kind.value}" for kind, count in self.required_counts.items())
        return f"Collect all required items: {wanted}!"

    def missing(self, player: Player) -> dict[ItemKind, int]:
        """Items still needed, by kind."""
        counts = player.inventory_counts()
        return {
            kind: required - counts[kind]
            for kind, required in self.required_counts.items()
            if counts[kind] < required
        }

    def is_won(self, player: Player) -> bool:
        return not self.missing(player)

    def victory_reason(self, player: Player) -> str:
        return "You collected everything you came for!"


GameCondition = Annotated[
    TreasureHuntCondition | SurvivalCondition | CollectionCondition,
    Field(discriminator="mode"),
]
"""Any of the mode conditions, discriminated by ``mode``."""


def build_condition(
    mode: GameMode,
    *,
    turn_limit: int | None = None,
    required_counts: dict[ItemKind, int] | None = None,
    settings: Settings | None = None,
) -> TreasureHuntCondition | SurvivalCondition | CollectionCondition:
    """Create the condition for ``mode``.

    Args:
        mode: Selected game mode.
        turn_limit: Survival turn limit. Defaults to the configured limit.
        required_counts: Collection targets. Required for Collection.
        settings: Settings to read defaults from.

    Returns:
        The validated condition.

    Raises:
        InvalidModeConfigurationError: If the mode parameters are unusable.
    """
    try:
        mode = GameMode(mode)
    except ValueError as exc:
        raise InvalidModeConfigurationError(f"Unknown game mode: {mode}", mode=str(mode)) from exc

    if mode is GameMode.TREASURE_HUNT:
        return TreasureHuntCondition()

    if mode is GameMode.SURVIVAL:
        if turn_limit is None:
            turn_limit = (settings or get_settings()).modes.survival_turn_limit
        try:
            return SurvivalCondition(turn_limit=turn_limit)
        except ValidationError as exc:
            raise InvalidModeConfigurationError(
                f"Invalid Survival turn limit: {turn_limit!r}",
                mode=mode.value,
                config_key="turn_limit",
                details={"errors": exc.errors(include_url=False)},
            ) from exc

    if mode is GameMode.COLLECTION:
        if required_counts is None:
            raise InvalidModeConfigurationError(
                "Collection mode requires required_counts",
                mode=mode.value,
                config_key="required_counts",
            )
        try:
            return CollectionCondition(required_counts=dict(required_counts))
        except ValidationError as exc:
            raise InvalidModeConfigurationError(
                f"Invalid Collection targets: {required_counts!r}",
                mode=mode.value,
                config_key="required_counts",
                details={"errors": exc.errors(include_url=False)},
            ) from exc

    raise InvalidModeConfigurationError(f"Unsupported game mode: {mode}", mode=mode.value)


__all__ = [
    "LOSS_DESCRIPTION",
    "Verdict",
    "TreasureHuntCondition",
    "SurvivalCondition",
    "CollectionCondition",
    "GameCondition",
    "build_condition",
]
