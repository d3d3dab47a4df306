"""
project: Wayfarer
module: player.py
License: MIT

Player state for a single turn.

A ``Player`` is rebuilt from its persisted record at the start of every turn,
mutated by actions, room effects and combat, and written back with
:meth:`Player.to_record`. Turn-scoped ``DirtyFlags`` track what changed so the
payload composer can send only those blocks; they are never persisted.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .hooks import apply_filters
from .items import EQUIPMENT_SLOTS, ItemInstance
from .stats import StatContainer, to_int
from .templates import ContentRepository

STAT_BLOCK_KEYS = ("max_hp", "hp", "max_mp", "mp", "str", "dex", "int", "attack", "defense", "xp", "gold")

DEFAULT_START_ROOM = "New Player Arrival"
DEFAULT_STARTING_GOLD = 100


class PlayerNotFound(LookupError):
    """Raised when a turn is requested for an account that does not exist."""


@dataclass
class DirtyFlags:
    stats: bool = False
    skills: bool = False
    items: bool = False
    moved: bool = False
    quest_flags: bool = False
    guild: bool = False
    healed: bool = False
    damaged: bool = False

    def force_full_snapshot(self) -> None:
        self.stats = self.skills = self.items = True
        self.moved = self.guild = self.healed = True


class Player(StatContainer):
    MINIMUMS = {
        "hp": 0,
        "max_hp": 50,
        "mp": 0,
        "max_mp": 25,
        "str": 1,
        "dex": 1,
        "int": 1,
        "attack": 0,
        "defense": 0,
        "gold": 0,
        "xp": 0,
    }

    def __init__(self, player_id: int, name: str, content: ContentRepository):
        super().__init__()
        self.id = player_id
        self.name = name
        self.content = content
        self.inventory: List[ItemInstance] = []
        self.equipment: Dict[str, Optional[ItemInstance]] = {slot: None for slot in EQUIPMENT_SLOTS}
        self.current_room = DEFAULT_START_ROOM
        self.quest_flags: Dict[str, int] = {}
        self.current_guild: Optional[str] = None
        self.guild_levels: Dict[str, Tuple[int, int]] = {}
        self.skills: Dict[str, int] = {}
        self.achievements: set = set()
        self.active_skill: Optional[dict] = None
        self.saved_battle: dict = {}
        self.last_access: Optional[int] = None
        self.this_access: int = 0

        self.flags = DirtyFlags()
        self.notifications: List[List[str]] = []
        self.new_achievements: Dict[int, List[str]] = {}

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    @classmethod
    def from_record(
        cls,
        player_id: int,
        name: str,
        content: ContentRepository,
        record: Optional[dict] = None,
        battle: Optional[dict] = None,
        start_room=DEFAULT_START_ROOM,
        starting_gold: int = DEFAULT_STARTING_GOLD,
    ) -> "Player":
        """Rebuild a player from its stored record; an empty record yields a new player."""
        record = record if isinstance(record, dict) else {}
        player = cls(player_id, name, content)
        player._load_stats(record, defaults={"gold": starting_gold})
        if to_int(record.get("hp")) is None:
            player._stats["hp"] = player._stats["max_hp"]
        if to_int(record.get("mp")) is None:
            player._stats["mp"] = player._stats["max_mp"]

        for raw in record.get("inventory") or []:
            item = ItemInstance.from_snapshot(raw)
            if item is not None:
                player.inventory.append(item)
        equipped = record.get("equipped_items")
        if isinstance(equipped, dict):
            for slot in EQUIPMENT_SLOTS:
                player.equipment[slot] = ItemInstance.from_snapshot(equipped.get(slot))

        current_room = record.get("current_room")
        player.current_room = current_room if current_room not in (None, "") else start_room

        flags = record.get("quest_flags")
        if isinstance(flags, dict):
            for flag, value in flags.items():
                value = to_int(value)
                if value:
                    player.quest_flags[str(flag)] = value

        player.current_guild = record.get("current_guild") or None
        levels = record.get("guild_levels")
        if isinstance(levels, dict):
            for guild, entry in levels.items():
                if isinstance(entry, (list, tuple)) and len(entry) == 2:
                    guild_id, level = to_int(entry[0], 0), to_int(entry[1], 0)
                    if level > 0:
                        player.guild_levels[str(guild)] = (guild_id, level)

        skills = record.get("skills")
        if isinstance(skills, dict):
            for skill, level in skills.items():
                level = to_int(level, 0)
                if level >= 1:
                    player.skills[str(skill)] = level

        for achievement in record.get("achievements") or []:
            achievement = to_int(achievement)
            if achievement is not None:
                player.achievements.add(achievement)

        active = record.get("active_skill")
        player.active_skill = dict(active) if isinstance(active, dict) and active else None
        player.saved_battle = dict(battle) if isinstance(battle, dict) and battle.get("enemies") else {}
        player.last_access = to_int(record.get("last_access"))
        return player

    def to_record(self) -> dict:
        """Canonical persisted form; ``last_access`` becomes this turn's timestamp."""
        record = {name: self._stats[name] for name in STAT_BLOCK_KEYS}
        record.update(
            {
                "inventory": [item.to_snapshot() for item in self.inventory],
                "equipped_items": {
                    slot: (item.to_snapshot() if item is not None else None) for slot, item in self.equipment.items()
                },
                "current_room": self.current_room,
                "quest_flags": dict(self.quest_flags),
                "current_guild": self.current_guild,
                "guild_levels": {guild: [gid, level] for guild, (gid, level) in self.guild_levels.items()},
                "skills": dict(self.skills),
                "achievements": sorted(self.achievements),
                "active_skill": dict(self.active_skill) if self.active_skill else None,
                "last_access": self.this_access,
            }
        )
        return record

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------
    @property
    def hp(self) -> int:
        return self._stats["hp"]

    @property
    def max_hp(self) -> int:
        return self._stats["max_hp"]

    @property
    def mp(self) -> int:
        return self._stats["mp"]

    @property
    def max_mp(self) -> int:
        return self._stats["max_mp"]

    @property
    def attack(self) -> int:
        return self._stats["attack"]

    @property
    def defense(self) -> int:
        return self._stats["defense"]

    @property
    def gold(self) -> int:
        return self._stats["gold"]

    @property
    def xp(self) -> int:
        return self._stats["xp"]

    @property
    def in_battle(self) -> bool:
        return bool(self.saved_battle.get("enemies"))

    def _on_damaged(self, stat: str) -> None:
        self.flags.damaged = True

    def _on_stats_changed(self) -> None:
        self.flags.stats = True

    def stats_block(self) -> dict:
        return {name: self._stats[name] for name in STAT_BLOCK_KEYS}

    def heal_naturally(self, hp: int = 1, mp: int = 1) -> None:
        """Passive regeneration, suppressed on turns the player was hurt or already healed."""
        if self.flags.healed or self.flags.damaged:
            return
        if self.hp < self.max_hp:
            self.augment("hp", hp)
        if self.mp < self.max_mp:
            self.augment("mp", mp)

    def add_notification(self, kind: str, message: str) -> None:
        self.notifications.append([kind, message])

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------
    def add_item(self, item: ItemInstance) -> None:
        self.inventory.append(item)
        self.flags.items = True

    def has_item(self, item_id) -> bool:
        item_id = to_int(item_id)
        if item_id is None:
            return False
        for item in self.equipment.values():
            if item is not None and item.id == item_id:
                return True
        return any(item.id == item_id for item in self.inventory)

    def equip_item(self, data) -> bool:
        item = ItemInstance.from_snapshot(data)
        if item is None or item.slot is None or item not in self.inventory:
            return False
        current = self.equipment[item.slot]
        if current is not None:
            self.unequip_item(current)
        self.inventory.remove(item)
        self.equipment[item.slot] = item
        self.augment("attack", item.attack)
        self.augment("defense", item.defense)
        self.flags.items = True
        return True

    def unequip_item(self, data) -> bool:
        item = ItemInstance.from_snapshot(data)
        if item is None or item.slot is None or self.equipment.get(item.slot) != item:
            return False
        self.equipment[item.slot] = None
        self.augment("attack", -item.attack)
        self.augment("defense", -item.defense)
        self.inventory.insert(0, item)
        self.flags.items = True
        return True

    def drop_item(self, data) -> bool:
        item = ItemInstance.from_snapshot(data)
        if item is None or item not in self.inventory:
            return False
        self.inventory.remove(item)
        self.flags.items = True
        return True

    # ------------------------------------------------------------------
    # Quest flags
    # ------------------------------------------------------------------
    def set_quest_flag(self, flag: str, value) -> bool:
        value = to_int(value)
        if not flag or value is None or value <= 0:
            return False
        if self.quest_flags.get(flag, 0) >= value:
            return False
        self.quest_flags[flag] = value
        self.flags.quest_flags = True
        return True

    def remove_quest_flag(self, flag: str) -> bool:
        if flag not in self.quest_flags:
            return False
        del self.quest_flags[flag]
        self.flags.quest_flags = True
        return True

    def has_quest_flag(self, flag: str, value: int = 1, exact: bool = False) -> bool:
        current = self.quest_flags.get(flag)
        if exact:
            if value == 0:
                return current is None
            return current == value
        return current is not None and current >= value

    # ------------------------------------------------------------------
    # Guilds
    # ------------------------------------------------------------------
    def currently_in_guild(self, guild: str, member: bool = True) -> bool:
        return (self.current_guild == guild) is member

    def guild_level(self, guild: Optional[str]) -> int:
        entry = self.guild_levels.get(guild) if guild else None
        return entry[1] if entry else 0

    def has_guild_level(self, guild: str, level: int, exact: bool = False) -> bool:
        current = self.guild_level(guild)
        if level <= 0:
            return current == 0
        if exact:
            return current == level
        return current >= level

    def join_guild(self, ref) -> bool:
        if self.current_guild:
            return False
        guild = self.content.resolve("guild", ref)
        if guild is None:
            return False
        self.current_guild = guild.name
        if guild.name in self.guild_levels:
            message = apply_filters(
                "rejoin_guild_message",
                "You are once again a level %d member of the %s Guild!" % (self.guild_level(guild.name), guild.name),
                guild.name,
            )
        else:
            self.guild_levels[guild.name] = (guild.id, 1)
            message = apply_filters(
                "join_new_guild_message",
                "Congratulations. You are now a member of the %s Guild!" % guild.name,
                guild.name,
            )
        self.add_notification("goodNews", message)
        self.flags.guild = True
        self.flags.moved = True
        return True

    def leave_guild(self) -> bool:
        if not self.current_guild:
            return False
        guild = self.current_guild
        self.current_guild = None
        message = apply_filters(
            "leave_guild_message",
            "You have left the %s Guild, but can rejoin in the future at the same level." % guild,
            guild,
        )
        self.add_notification("notice", message)
        self.flags.guild = True
        self.flags.moved = True
        return True

    def increase_guild_level(self, guild_name: str, level) -> bool:
        level = to_int(level)
        if not guild_name or level is None:
            return False
        guild = self.content.resolve("guild", guild_name)
        # Compare under the resolved name; the reference may be an id
        if guild is None or self.guild_level(guild.name) >= level:
            return False
        self.guild_levels[guild.name] = (guild.id, level)
        message = apply_filters(
            "increase_guild_level_message",
            "You have advanced to level %d in the %s Guild!" % (level, guild.name),
            guild.name,
            level,
        )
        self.add_notification("goodNews", message)
        self.flags.guild = True
        self.flags.moved = True
        return True

    # ------------------------------------------------------------------
    # Skills
    # ------------------------------------------------------------------
    def has_skill(self, skill: str, level: Optional[int] = None, exact: bool = False) -> bool:
        current = self.skills.get(skill, 0)
        if level is None:
            return current > 0
        if level <= 0:
            return current == 0
        if exact:
            return current == level
        return current >= level

    def add_skill(self, ref) -> bool:
        skill = self.content.resolve("skill", ref)
        if skill is None or skill.name in self.skills:
            return False
        self.skills[skill.name] = 1
        message = apply_filters("learn_skill_message", "You've learned the %s skill!" % skill.name, skill.name)
        self.add_notification("goodNews", message)
        self.flags.skills = True
        self.flags.moved = True
        return True

    def use_skill(self, name, rng=None) -> bool:
        """Queue a known skill for the next combat round."""
        if not name or not isinstance(name, str) or name not in self.skills or self.active_skill:
            return False
        skill = self.content.resolve("skill", name)
        if skill is None or skill.effect == "none" or self.mp < skill.cost:
            return False
        self.active_skill = {
            "name": skill.name,
            "effect": skill.effect,
            "cost": skill.cost,
            "strength": skill.roll_strength(rng or random),
        }
        return True

    # ------------------------------------------------------------------
    # Achievements
    # ------------------------------------------------------------------
    def award_achievement(self, ref) -> bool:
        achievement_id = to_int(ref)
        if achievement_id is None or achievement_id in self.achievements:
            return False
        achievement = self.content.resolve("achievement", achievement_id)
        if achievement is None:
            return False
        self.achievements.add(achievement.id)
        self.new_achievements[achievement.id] = [achievement.title, achievement.content]
        return True

    def all_achievements(self) -> Dict[int, List[Optional[str]]]:
        listing: Dict[int, List[Optional[str]]] = {}
        for achievement in self.content.achievements():
            if achievement.id in self.achievements:
                listing[achievement.id] = [achievement.title, achievement.content]
            else:
                listing[achievement.id] = [achievement.title, None]
        return listing
