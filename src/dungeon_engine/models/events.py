"""Turn events and the bounded session event log."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from dungeon_engine.core import constants
from dungeon_engine.core.exceptions import ConfigurationError
from dungeon_engine.models.entities import ActorRef
from dungeon_engine.models.enums import ActionType


class TurnEvent(BaseModel):
    """One entry in the turn log: who did what, and what came of it.

    Attributes:
        turn: Turn counter value after the player's action of this turn.
        actor: Display name of the acting actor.
        actor_ref: Reference to the acting actor.
        action: Kind of action performed.
        outcome: Human-readable result for the presentation layer.
        details: Structured data about the action (damage, positions, items).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    turn: int = Field(ge=0)
    actor: str
    actor_ref: ActorRef
    action: ActionType
    outcome: str
    details: dict[str, Any] = Field(default_factory=dict)

    def __str__(self) -> str:
        return f"[{self.turn}] {self.outcome}"


class EventLog:
    """FIFO ring buffer of the most recent TurnEvents.

    When full, appending evicts the oldest entry.
    """

    def __init__(self, capacity: int = constants.EVENT_LOG_CAPACITY) -> None:
        if capacity <= 0:
            raise ConfigurationError(
                f"Event log capacity must be positive, got {capacity}",
                config_key="log_capacity",
            )
        self._entries: deque[TurnEvent] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or 0

    def append(self, event: TurnEvent) -> None:
        self._entries.append(event)

    def extend(self, events: Iterable[TurnEvent]) -> None:
        self._entries.extend(events)

    def recent(self, count: int | None = None) -> list[TurnEvent]:
        """Return up to ``count`` newest events, oldest first."""
        entries = list(self._entries)
        if count is None:
            return entries
        return entries[-count:] if count > 0 else []

    def __iter__(self) -> Iterator[TurnEvent]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


__all__ = [
    "TurnEvent",
    "EventLog",
]
