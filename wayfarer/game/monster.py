"""Monster instances for a single battle.

A monster is either rolled fresh from its template (every stat varied by 5%)
or rebuilt exactly from the snapshot saved at the end of the previous round.
Only the snapshot is ever persisted.
"""

from __future__ import annotations

import random
from typing import Dict, List, Optional

from .stats import StatContainer, to_int, vary
from .templates import MonsterTemplate

TEMPLATE_VARIANCE_PCT = 5


class Monster(StatContainer):
    MINIMUMS = {
        "hp": 0,
        "max_hp": 1,
        "attack": 1,
        "defense": 0,
        "reward_gold": 0,
        "reward_exp": 0,
    }

    def __init__(self, name: str, image: str = ""):
        super().__init__()
        self.name = name
        self.image = image
        self.defeated = False
        self.rewards: Dict[str, int] = {}
        self.results: Dict[str, List] = {}

    @classmethod
    def from_template(cls, template: MonsterTemplate, rng=None) -> "Monster":
        rng = rng or random
        monster = cls(template.name or "Unknown Beast", template.image)
        rolled = {}
        for name, value in (
            ("hp", template.hp),
            ("attack", template.attack),
            ("defense", template.defense),
            ("reward_gold", template.reward_gold),
            ("reward_exp", template.reward_exp),
        ):
            floor = cls.MINIMUMS["max_hp"] if name == "hp" else cls.MINIMUMS[name]
            rolled[name] = floor if value < floor else max(vary(value, TEMPLATE_VARIANCE_PCT, rng), floor)
        rolled["max_hp"] = rolled["hp"]
        monster._load_stats(rolled)
        return monster

    @classmethod
    def from_snapshot(cls, data) -> Optional["Monster"]:
        if not isinstance(data, dict):
            return None
        monster = cls(str(data.get("name") or "Unknown Beast"), str(data.get("image") or ""))
        monster._load_stats(data)
        if to_int(data.get("hp")) is None:
            monster._stats["hp"] = monster._stats["max_hp"]
        monster.defeated = monster.hp == 0
        return monster

    @property
    def hp(self) -> int:
        return self._stats["hp"]

    @property
    def max_hp(self) -> int:
        return self._stats["max_hp"]

    @property
    def attack(self) -> int:
        return self._stats["attack"]

    @property
    def defense(self) -> int:
        return self._stats["defense"]

    @property
    def alive(self) -> bool:
        return self.hp > 0

    def take_damage(self, damage: int) -> Dict[str, int]:
        """Apply damage; returns the rewards dict the first time this brings hp to 0."""
        if damage <= 0 or not self.alive:
            return {}
        self.augment("hp", -damage)
        if self.defeated and self.rewards:
            rewards, self.rewards = self.rewards, {}
            return rewards
        return {}

    def _on_depleted(self) -> None:
        if self.defeated:
            return
        self.defeated = True
        self.rewards = {"xp": self._stats["reward_exp"], "gold": self._stats["reward_gold"]}
        self._add_result("monsterDefeated", [self.name, self._stats["reward_exp"], self._stats["reward_gold"]])

    def _add_result(self, key: str, data) -> None:
        self.results.setdefault(key, []).append(data)

    def to_snapshot(self) -> dict:
        return {
            "name": self.name,
            "image": self.image,
            "hp": self.hp,
            "max_hp": self.max_hp,
            "attack": self.attack,
            "defense": self.defense,
            "reward_gold": self._stats["reward_gold"],
            "reward_exp": self._stats["reward_exp"],
        }

    def to_browser(self) -> dict:
        return {"name": self.name, "image": self.image, "hp": self.hp, "max_hp": self.max_hp}
