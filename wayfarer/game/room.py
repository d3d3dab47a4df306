"""
project: Wayfarer
module: room.py
License: MIT

Room interaction for the player's current location.

A ``Room`` wraps a room template for one turn: it filters objects and exits
by their requirements, resolves exit labels to destinations, runs object
actions (damage, quest flags, items, shop purchases, achievements, guilds,
skills) and rolls monsters for a new battle. Rooms are loaded fresh from the
content repository whenever they are needed and never cached across turns.
"""

from __future__ import annotations

import random
from typing import List, Optional

from wayfarer.logging_utils import get_logger

from .hooks import apply_filters
from .items import resolve_item
from .monster import Monster
from .requirements import check
from .stats import to_int
from .templates import ContentRepository, RoomObject, RoomTemplate

log = get_logger("room")


class Room:
    def __init__(self, template: RoomTemplate, player, content: ContentRepository):
        self.template = template
        self.player = player
        self.content = content
        self.notifications: List[List[str]] = []

    @classmethod
    def load(cls, ref, player, content: ContentRepository) -> Optional["Room"]:
        """Resolve ``ref`` (id or title) to a room; None when it does not exist."""
        template = content.resolve("room", ref)
        if template is None:
            return None
        return cls(template, player, content)

    @property
    def id(self) -> int:
        return self.template.id

    @property
    def monster_refs(self):
        return self.template.monsters

    @property
    def max_monsters(self) -> int:
        return self.template.max_monsters

    def add_notification(self, kind: str, message: str) -> None:
        self.notifications.append([kind, message])

    # ------------------------------------------------------------------
    # Visibility
    # ------------------------------------------------------------------
    def get_visible_objects(self) -> List[dict]:
        visible, seen = [], set()
        for obj in self.template.objects:
            if not obj.name or not obj.description or obj.name in seen:
                continue
            if not check(obj.requirement, self.player):
                continue
            seen.add(obj.name)
            visible.append(
                {
                    "name": obj.name,
                    "description": obj.description,
                    "action": 1 if obj.action_type and obj.action_value else 0,
                    "group": obj.group,
                }
            )
        return visible

    def get_visible_exits(self) -> List[dict]:
        visible, seen = [], set()
        for exit_ in self.template.exits:
            if not exit_.link or not exit_.room_id or exit_.link in seen:
                continue
            if not check(exit_.requirement, self.player):
                continue
            seen.add(exit_.link)
            visible.append({"link": exit_.link, "room_id": exit_.room_id})
        return visible

    def has_exit(self, label) -> Optional[int]:
        """Destination id for ``label`` when the player may use that exit, else None."""
        for exit_ in self.template.exits:
            if exit_.link == label and exit_.room_id and check(exit_.requirement, self.player):
                return exit_.room_id
        return None

    def to_payload(self) -> dict:
        return {
            "id": self.template.id,
            "description": self.template.description,
            "environment": self.template.environment,
            "monsters": len(self.template.monsters),
            "objects": self.get_visible_objects(),
            "exits": self.get_visible_exits(),
        }

    # ------------------------------------------------------------------
    # Monsters
    # ------------------------------------------------------------------
    def get_random_monsters(self, count: int, rng=None) -> List[Monster]:
        """Draw ``count`` monsters uniformly (with replacement) from this room's list."""
        rng = rng or random
        refs = list(self.template.monsters)
        monsters: List[Monster] = []
        if not refs:
            return monsters
        for _ in range(count):
            template = self.content.resolve("monster", refs[rng.randint(0, len(refs) - 1)])
            if template is not None:
                monsters.append(Monster.from_template(template, rng))
        return monsters

    # ------------------------------------------------------------------
    # Object actions
    # ------------------------------------------------------------------
    def process_object_action(self, object_name) -> bool:
        """Run the actions of the first object named ``object_name`` the player can use."""
        obj = next(
            (o for o in self.template.objects if o.name == object_name and check(o.requirement, self.player)),
            None,
        )
        if obj is None or not obj.action_type or not obj.action_value:
            return False
        for action in self._action_list(obj):
            name, _, arg = action.partition("-")
            self._execute(name.strip(), arg.strip())
        return True

    @staticmethod
    def _action_list(obj: RoomObject) -> List[str]:
        if obj.action_type == "multiple":
            return [part for part in obj.action_value.split(";") if part.strip()]
        return ["%s-%s" % (obj.action_type, obj.action_value)]

    def _execute(self, action: str, arg: str) -> None:
        handler = getattr(self, "_do_" + action, None) if action in ROOM_ACTIONS else None
        if handler is None:
            log.debug(event="room_action_skipped", room=self.id, action=action)
            return
        handler(arg)

    def _do_damage_player(self, arg: str) -> None:
        amount = to_int(arg)
        if amount is not None and amount > 0:
            self.player.augment("hp", -amount)

    def _do_set_quest_flag(self, arg: str) -> None:
        flag, _, value = arg.partition("=")
        if flag and to_int(value):
            self.player.set_quest_flag(flag.strip(), to_int(value))

    def _do_give_item(self, arg: str) -> None:
        item = resolve_item(self.content, arg)
        if item is not None:
            self.player.add_item(item)

    def _do_sell_to_player(self, arg: str) -> None:
        item_ref, sep, price_text = arg.partition("for")
        item_id, price = to_int(item_ref), to_int(price_text)
        if not sep or item_id is None or price is None:
            return
        shown_price = "{:,}".format(price)
        if self.player.gold < price:
            message = apply_filters(
                "not_enough_gold_message", "Sorry. You need %s gold to buy that." % shown_price, shown_price
            )
            self.add_notification("error", message)
            return
        item = resolve_item(self.content, item_id)
        if item is None:
            self.add_notification(
                "error",
                "Sorry. That is not a valid item. Please report this to the administrator, noting you are in "
                "room %s, what you clicked to buy, and that the item id was %s." % (self.id, item_id),
            )
            return
        self.player.augment("gold", -price)
        self.player.add_item(item)
        message = apply_filters(
            "purchase_message",
            "You've purchased a %s for %s gold." % (item.name, shown_price),
            item.name,
            shown_price,
        )
        self.add_notification("goodNews", message)

    def _do_award_achievement(self, arg: str) -> None:
        achievement_id = to_int(arg)
        if achievement_id is not None:
            self.player.award_achievement(achievement_id)

    def _do_join_guild(self, arg: str) -> None:
        if arg:
            self.player.join_guild(arg)

    def _do_leave_guild(self, arg: str) -> None:
        self.player.leave_guild()

    def _do_increase_guild_level(self, arg: str) -> None:
        guild, _, level = arg.partition("=")
        if guild.strip() and to_int(level):
            self.player.increase_guild_level(guild.strip(), to_int(level))

    def _do_teach_skill(self, arg: str) -> None:
        if arg:
            self.player.add_skill(arg)


ROOM_ACTIONS = frozenset(
    {
        "damage_player",
        "set_quest_flag",
        "give_item",
        "sell_to_player",
        "award_achievement",
        "join_guild",
        "leave_guild",
        "increase_guild_level",
        "teach_skill",
    }
)
