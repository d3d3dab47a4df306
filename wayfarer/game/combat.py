"""Battle resolution.

Responsibilities:
    * Start a battle from a room's monster list, or pick one up again from the
      player's saved battle snapshot.
    * Play exactly one round per turn: the player strikes the first living
      monster (queued skill or plain attack), then every living monster strikes
      back in list order.
    * Detect victory, defeat and flight and keep ``player.saved_battle`` in step.

Design notes:
    - Monsters stay in the list at hp 0 so client-side indices remain stable.
    - A rebuilt battle starts at ``saved round + 1``; the round counter is never
      advanced anywhere else.
    - Rewards for a kill are credited before the monsters retaliate, so a player
      who dies later in the same round still keeps them.
    - Results are accumulated as ``key -> [values]`` so the turn payload can
      pass them straight through.
"""

from __future__ import annotations

import random
from typing import Dict, List, Optional

from wayfarer.logging_utils import get_logger

from .hooks import apply_filters
from .monster import Monster
from .stats import round_half_up, to_int, vary

PLAYER_ATTACK_VARIANCE_PCT = 10
ENEMY_ATTACK_VARIANCE_PCT = 15

log = get_logger("combat")


def _is_empty(data) -> bool:
    return data is None or data == "" or data == [] or data == {}


class Combat:
    def __init__(self, player, rng=None):
        self.player = player
        self.rng = rng or random
        self.round = 0
        self.enemies: List[Monster] = []
        self.new_combat = False
        self.payload: Dict[str, list] = {}

        saved = player.saved_battle
        if saved.get("enemies"):
            info = saved.get("info") or {}
            self.round = to_int(info.get("round"), 0) + 1
            for snapshot in saved["enemies"]:
                monster = Monster.from_snapshot(snapshot)
                if monster is not None:
                    self.enemies.append(monster)

    def _add(self, key: str, data) -> None:
        if _is_empty(data):
            return
        self.payload.setdefault(key, []).append(data)

    def _battle_data(self) -> dict:
        return {"round": [self.round], "enemies": [[m.to_browser() for m in self.enemies]]}

    def _save(self) -> None:
        self.player.saved_battle = {
            "info": {"round": self.round},
            "enemies": [m.to_snapshot() for m in self.enemies],
        }

    def _clear(self) -> None:
        self.player.saved_battle = {}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def initiate_new_battle(self, room) -> Optional[dict]:
        """Roll 1..max_monsters fresh monsters from ``room``; None when the room has none."""
        if room is None or not room.monster_refs or room.max_monsters <= 0:
            return None
        count = self.rng.randint(1, room.max_monsters)
        monsters = room.get_random_monsters(count, self.rng)
        if not monsters:
            return None
        self.enemies = monsters
        self.round = 1
        self.new_combat = True
        self._save()
        log.info(event="battle_started", player=self.player.id, room=room.id, monsters=len(monsters))
        return self._battle_data()

    def initiate_existing_battle(self) -> Optional[dict]:
        if not self.enemies:
            return None
        return self._battle_data()

    def flee_battle(self) -> dict:
        self._clear()
        log.info(event="battle_fled", player=self.player.id, round=self.round)
        return {"flee": [True]}

    # ------------------------------------------------------------------
    # Rounds
    # ------------------------------------------------------------------
    def _mitigate(self, damage: int, defense: int) -> int:
        if self.rng.randint(1, 10) > 1:
            return damage - defense
        return damage - round_half_up(defense / 4)

    def _player_strike(self, target: Monster) -> Dict[str, int]:
        player = self.player
        skill = player.active_skill
        if skill and player.mp >= to_int(skill.get("cost"), 0):
            strength = apply_filters("player_skill_attack_power", to_int(skill.get("strength"), 0), player, target)
            damage = self._mitigate(round_half_up(strength), target.defense)
            rewards = target.take_damage(damage)
            self._add(
                "playerSkillUsed",
                "You caused %d damage to %s with your %s skill." % (max(damage, 0), target.name, skill.get("name")),
            )
            player.augment("mp", -to_int(skill.get("cost"), 0))
            player.active_skill = None
            return rewards

        power = vary(player.attack, PLAYER_ATTACK_VARIANCE_PCT, self.rng)
        power = round_half_up(apply_filters("player_attack_power", power, player, target))
        return target.take_damage(self._mitigate(power, target.defense))

    def _enemy_strike(self, monster: Monster) -> int:
        power = vary(monster.attack, ENEMY_ATTACK_VARIANCE_PCT, self.rng)
        power = round_half_up(apply_filters("enemy_attack_power", power, monster, self.player))
        return self._mitigate(power, self.player.defense)

    def execute_battle_turn(self) -> Optional[dict]:
        """Play one round; returns the combat payload or None without enemies."""
        if not self.enemies:
            return None

        target = next((m for m in self.enemies if m.alive), None)
        if target is not None:
            rewards = self._player_strike(target)
            if rewards:
                self.player.augment("xp", rewards.get("xp", 0))
                self.player.augment("gold", rewards.get("gold", 0))

        for monster in self.enemies:
            if not monster.alive:
                continue
            damage = self._enemy_strike(monster)
            if damage > 0:
                self.player.augment("hp", -damage)
                if self.player.hp == 0:
                    return self._lose_combat(monster)

        return self._end_battle_turn()

    def _monster_results(self) -> list:
        return [m.results for m in self.enemies if m.results]

    def _lose_combat(self, killer: Monster) -> dict:
        for results in self._monster_results():
            self._add("results", results)
        self._clear()
        self._add("playerDefeated", killer.name)
        log.info(event="battle_lost", player=self.player.id, round=self.round, monster=killer.name)
        return self.payload

    def _end_battle_turn(self) -> dict:
        self._add("round", self.round)
        self._add("enemies", [m.to_browser() for m in self.enemies])
        for results in self._monster_results():
            self._add("results", results)
        if not any(m.alive for m in self.enemies):
            self._add("endCombat", True)
            self._clear()
            log.info(event="battle_won", player=self.player.id, round=self.round)
        else:
            self._save()
        return self.payload
