"""Immutable content templates and the lookup protocol the core depends on.

Templates are built from a content entry's id, title and JSON data. Numeric
fields that are missing or non-numeric become 0 so half-authored content never
raises; the stat floors in :mod:`wayfarer.game.stats` take it from there.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Tuple

from .requirements import parse_requirement
from .stats import to_int, vary

KINDS = ("room", "monster", "item", "skill", "guild", "achievement")


def _int(data: Dict[str, Any], key: str) -> int:
    return to_int(data.get(key), 0)


def _str(data: Dict[str, Any], key: str, default: str = "") -> str:
    value = data.get(key)
    if value is None:
        return default
    return str(value)


@dataclass(frozen=True)
class ItemTemplate:
    id: int
    name: str
    type: str = ""
    attack: int = 0
    defense: int = 0

    @classmethod
    def from_data(cls, id: int, title: str, data: dict) -> "ItemTemplate":
        return cls(
            id=id,
            name=title,
            type=_str(data, "type"),
            attack=_int(data, "attack"),
            defense=_int(data, "defense"),
        )


@dataclass(frozen=True)
class MonsterTemplate:
    id: int
    name: str
    image: str = ""
    hp: int = 0
    attack: int = 0
    defense: int = 0
    reward_gold: int = 0
    reward_exp: int = 0

    @classmethod
    def from_data(cls, id: int, title: str, data: dict) -> "MonsterTemplate":
        return cls(
            id=id,
            name=title,
            image=_str(data, "image"),
            hp=_int(data, "hp"),
            attack=_int(data, "attack"),
            defense=_int(data, "defense"),
            reward_gold=_int(data, "reward_gold"),
            reward_exp=_int(data, "reward_exp"),
        )


@dataclass(frozen=True)
class SkillTemplate:
    id: int
    name: str
    effect: str = "none"
    cost: int = 0
    strength: int = 0
    variability: int = 0

    @classmethod
    def from_data(cls, id: int, title: str, data: dict) -> "SkillTemplate":
        return cls(
            id=id,
            name=title,
            effect=_str(data, "effect", "none") or "none",
            cost=max(_int(data, "cost"), 0),
            strength=max(_int(data, "strength"), 0),
            variability=max(_int(data, "variability"), 0),
        )

    def roll_strength(self, rng) -> int:
        """Strength for one use, spread by ``variability`` percent either way."""
        return vary(self.strength, self.variability, rng)


@dataclass(frozen=True)
class GuildTemplate:
    id: int
    name: str

    @classmethod
    def from_data(cls, id: int, title: str, data: dict) -> "GuildTemplate":
        return cls(id=id, name=title)


@dataclass(frozen=True)
class AchievementTemplate:
    id: int
    title: str
    content: str = ""

    @classmethod
    def from_data(cls, id: int, title: str, data: dict) -> "AchievementTemplate":
        return cls(id=id, title=title, content=_str(data, "content"))


@dataclass(frozen=True)
class RoomObject:
    """An authored object in a room.

    ``action_type`` is one action name or ``multiple`` and ``action_value``
    holds its argument(s). ``requirement`` is the parsed predicate (see
    :mod:`wayfarer.game.requirements`) or None.
    """

    name: str
    description: str
    group: str = "examine"
    action_type: str = ""
    action_value: str = ""
    requirement: Any = None


@dataclass(frozen=True)
class RoomExit:
    link: str
    room_id: int
    requirement: Any = None


@dataclass(frozen=True)
class RoomTemplate:
    id: int
    title: str
    description: str = ""
    environment: str = ""
    objects: Tuple[RoomObject, ...] = ()
    exits: Tuple[RoomExit, ...] = ()
    monsters: Tuple[Any, ...] = ()
    max_monsters: int = 0

    @classmethod
    def from_data(cls, id: int, title: str, data: dict) -> "RoomTemplate":
        objects: List[RoomObject] = []
        for raw in data.get("objects") or []:
            if not isinstance(raw, dict):
                continue
            objects.append(
                RoomObject(
                    name=_str(raw, "name"),
                    description=_str(raw, "description"),
                    group=_str(raw, "group", "examine") or "examine",
                    action_type=_str(raw, "action_type"),
                    action_value=_str(raw, "action_value"),
                    requirement=parse_requirement(raw.get("requirement_type"), raw.get("requirement_value"), raw.get("match")),
                )
            )
        exits: List[RoomExit] = []
        for raw in data.get("exits") or []:
            if not isinstance(raw, dict):
                continue
            exits.append(
                RoomExit(
                    link=_str(raw, "link"),
                    room_id=to_int(raw.get("room_id"), 0),
                    requirement=parse_requirement(raw.get("requirement_type"), raw.get("requirement_value"), raw.get("match")),
                )
            )
        monsters = tuple(m for m in (data.get("monsters") or []) if m not in (None, ""))
        return cls(
            id=id,
            title=title,
            description=_str(data, "description"),
            environment=_str(data, "environment"),
            objects=tuple(objects),
            exits=tuple(exits),
            monsters=monsters,
            max_monsters=max(_int(data, "max_monsters"), 0),
        )


TEMPLATE_TYPES = {
    "room": RoomTemplate,
    "monster": MonsterTemplate,
    "item": ItemTemplate,
    "skill": SkillTemplate,
    "guild": GuildTemplate,
    "achievement": AchievementTemplate,
}


def build_template(kind: str, id: int, title: str, data: Optional[dict]):
    cls = TEMPLATE_TYPES.get(kind)
    if cls is None:
        return None
    return cls.from_data(id, title, data if isinstance(data, dict) else {})


class ContentRepository(Protocol):
    """Lookup of authored content by id or title."""

    def resolve(self, kind: str, ref) -> Optional[Any]:
        ...

    def achievements(self) -> List[AchievementTemplate]:
        ...


@dataclass
class TurnRules:
    """Gameplay tunables for one turn."""

    throttle_seconds: int = 3
    regen_hp: int = 1
    regen_mp: int = 1
    starting_gold: int = 100
    start_room: Any = "New Player Arrival"
