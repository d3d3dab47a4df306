"""Item instances carried by value in inventory, equipment and saved state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .stats import to_int
from .templates import ContentRepository, ItemTemplate

EQUIPMENT_SLOTS = ("back", "bodyarmor", "boots", "helmet", "leggings", "necklace", "shield", "weapon")


@dataclass(frozen=True)
class ItemInstance:
    """Flat snapshot of an item; two instances are "the same item" when every field matches."""

    id: int
    name: str
    type: str
    attack: int = 0
    defense: int = 0

    @classmethod
    def from_template(cls, template: ItemTemplate) -> "ItemInstance":
        return cls(
            id=template.id,
            name=template.name,
            type=template.type,
            attack=max(template.attack, 0),
            defense=max(template.defense, 0),
        )

    @classmethod
    def from_snapshot(cls, data) -> Optional["ItemInstance"]:
        """Rebuild from a stored or client-submitted dict; None when it has no usable id."""
        if isinstance(data, ItemInstance):
            return data
        if not isinstance(data, dict):
            return None
        item_id = to_int(data.get("id"))
        if item_id is None:
            return None
        return cls(
            id=item_id,
            name=str(data.get("name") or "Unknown Item"),
            type=str(data.get("type") or "Junk"),
            attack=max(to_int(data.get("attack"), 0), 0),
            defense=max(to_int(data.get("defense"), 0), 0),
        )

    def to_snapshot(self) -> dict:
        return {
            "name": self.name,
            "id": self.id,
            "type": self.type,
            "attack": self.attack,
            "defense": self.defense,
        }

    @property
    def slot(self) -> Optional[str]:
        return self.type if self.type in EQUIPMENT_SLOTS else None


def resolve_item(content: ContentRepository, ref) -> Optional[ItemInstance]:
    template = content.resolve("item", ref)
    if template is None:
        return None
    return ItemInstance.from_template(template)
