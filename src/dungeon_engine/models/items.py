"""Item models.

Items are immutable. Copying an item into an inventory or onto the floor
never shares the instance between two places: every logical item has its
own ``uid``, and ``make_item`` always mints a fresh one.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from dungeon_engine.models.enums import ItemKind
from dungeon_engine.models.grid import Position


class Item(BaseModel):
    """An item payload.

    Attributes:
        uid: Identity of this logical item.
        kind: Item kind, which selects the use effect.
        label: Display name.
        description: Flavor text shown when the item is examined.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    uid: UUID = Field(default_factory=uuid4)
    kind: ItemKind
    label: str = Field(min_length=1, max_length=80)
    description: str = Field(default="", max_length=300)

    @property
    def glyph(self) -> str:
        return self.kind.glyph


class WorldItem(BaseModel):
    """An item lying on the grid, outside any inventory."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    position: Position
    item: Item


ITEM_CATALOG: dict[ItemKind, tuple[str, str]] = {
    ItemKind.KEY: ("Rusty Key", "An old iron key. It should fit a nearby door."),
    ItemKind.TREASURE_CHEST: ("Treasure Chest", "A heavy chest bound in brass."),
    ItemKind.TREASURE: ("Golden Idol", "The treasure this dungeon is famous for."),
    ItemKind.GEM: ("Ruby", "A deep red gem that catches the torchlight."),
    ItemKind.SCROLL: ("Ancient Scroll", "Faded runes cover the parchment."),
    ItemKind.POTION: ("Healing Potion", "A small vial of red liquid."),
}
"""Default label and description for each item kind."""


def make_item(
    kind: ItemKind,
    *,
    label: str | None = None,
    description: str | None = None,
) -> Item:
    """Create a new item with a fresh identity.

    Args:
        kind: Item kind.
        label: Display name; defaults to the catalog label.
        description: Flavor text; defaults to the catalog description.

    Returns:
        A new Item.
    """
    default_label, default_description = ITEM_CATALOG[kind]
    return Item(
        kind=kind,
        label=label or default_label,
        description=default_description if description is None else description,
    )


__all__ = [
    "Item",
    "WorldItem",
    "ITEM_CATALOG",
    "make_item",
]
