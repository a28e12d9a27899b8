"""Entity registry: owner of the player, NPCs and ground items.

The registry enforces the occupancy invariants at insertion time: NPC
identities are unique, no two blocking actors share a cell, a cell holds at
most one ground item, and an item uid is never held in two places at once.
Movement legality against terrain is the movement validator's concern, not
the registry's.
"""

from __future__ import annotations

from collections.abc import Iterator
from uuid import UUID

from dungeon_engine.core.exceptions import PlacementError
from dungeon_engine.core.logging import get_logger
from dungeon_engine.models.entities import NPC, ActorRef, Player
from dungeon_engine.models.grid import Position
from dungeon_engine.models.items import Item, WorldItem


logger = get_logger(__name__)


class EntityRegistry:
    """Holds the player singleton, NPCs by identity and items by cell.

    NPC iteration follows insertion order, which gives every turn a stable
    NPC order and therefore a deterministic event log for a given seed.

    Attributes:
        player: The player character.
    """

    def __init__(self, player: Player) -> None:
        """Initialize the registry around the session's player.

        Args:
            player: The player character.
        """
        self.player = player
        self._npcs: dict[str, NPC] = {}
        self._items: dict[Position, WorldItem] = {}

    # -------------------------------------------------------------------------
    # Occupancy
    # -------------------------------------------------------------------------

    def occupant_at(self, pos: Position) -> ActorRef | None:
        """Return the blocking actor standing on ``pos``, if any."""
        if self.player.position == pos:
            return ActorRef.player()
        npc = self.npc_at(pos)
        if npc is not None:
            return npc.ref
        return None

    def is_occupied(self, pos: Position) -> bool:
        return self.occupant_at(pos) is not None

    def occupied_positions(self) -> list[Position]:
        """Positions of every blocking actor, player first."""
        return [self.player.position, *(npc.position for npc in self._npcs.values())]

    # -------------------------------------------------------------------------
    # NPCs
    # -------------------------------------------------------------------------

    @property
    def npc_count(self) -> int:
        return len(self._npcs)

    def add_npc(self, npc: NPC) -> None:
        """Register an NPC.

        Raises:
            PlacementError: If the identity is taken or the cell is occupied.
        """
        if npc.npc_id in self._npcs:
            raise PlacementError(
                f"Duplicate NPC identity: {npc.npc_id}",
                entity_id=npc.npc_id,
            )
        occupant = self.occupant_at(npc.position)
        if occupant is not None:
            raise PlacementError(
                f"Cannot place {npc.name} on a cell occupied by {occupant}",
                entity_id=npc.npc_id,
                position=npc.position.as_tuple(),
            )
        self._npcs[npc.npc_id] = npc
        logger.debug(
            "NPC registered",
            npc_id=npc.npc_id,
            kind=npc.kind.value,
            position=npc.position.as_tuple(),
        )

    def remove_npc(self, npc_id: str) -> NPC | None:
        """Remove an NPC immediately. Returns the removed NPC, if present."""
        npc = self._npcs.pop(npc_id, None)
        if npc is not None:
            logger.debug("NPC removed", npc_id=npc_id, kind=npc.kind.value)
        return npc

    def get_npc(self, npc_id: str) -> NPC | None:
        return self._npcs.get(npc_id)

    def npc_at(self, pos: Position) -> NPC | None:
        for npc in self._npcs.values():
            if npc.position == pos:
                return npc
        return None

    def iter_npcs(self) -> Iterator[NPC]:
        yield from self._npcs.values()

    def npc_order(self) -> list[str]:
        """Snapshot of NPC identities in iteration order.

        The turn engine walks this snapshot, so removals during the NPC
        phase never disturb the iteration.
        """
        return list(self._npcs)

    # -------------------------------------------------------------------------
    # Ground Items
    # -------------------------------------------------------------------------

    def item_at(self, pos: Position) -> WorldItem | None:
        return self._items.get(pos)

    def iter_items(self) -> Iterator[WorldItem]:
        yield from self._items.values()

    @property
    def item_count(self) -> int:
        return len(self._items)

    def holds_item(self, uid: UUID) -> bool:
        """Whether ``uid`` is already in the inventory or on the ground."""
        if any(item.uid == uid for item in self.player.inventory):
            return True
        return any(ground.item.uid == uid for ground in self._items.values())

    def place_item(self, pos: Position, item: Item) -> Item | None:
        """Put ``item`` on the ground at ``pos``, replacing any item there.

        Returns:
            The destroyed item that previously lay on the cell, if any.

        Raises:
            PlacementError: If the same logical item is already held elsewhere.
        """
        if self.holds_item(item.uid):
            raise PlacementError(
                f"Item {item.label} is already held",
                entity_id=str(item.uid),
                position=pos.as_tuple(),
            )
        replaced = self._items.pop(pos, None)
        self._items[pos] = WorldItem(position=pos, item=item)
        if replaced is not None:
            logger.debug(
                "Ground item replaced",
                position=pos.as_tuple(),
                destroyed=replaced.item.kind.value,
                created=item.kind.value,
            )
        return replaced.item if replaced is not None else None

    def take_item(self, pos: Position) -> Item | None:
        """Remove and return the ground item at ``pos``, if any."""
        ground = self._items.pop(pos, None)
        return ground.item if ground is not None else None

    def destroy_item(self, pos: Position) -> bool:
        """Destroy the ground item at ``pos``. Returns True if one existed."""
        return self._items.pop(pos, None) is not None


__all__ = [
    "EntityRegistry",
]
