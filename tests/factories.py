"""Test data factories to reduce boilerplate in tests.

Usage examples:
    from tests.factories import MemoryContent, MemoryStore, ScriptedRandom, make_player

    def test_something():
        content = MemoryContent()
        sword = content.add("item", "Sword", {"type": "weapon", "attack": 5})
        player = make_player(content, gold=50)
"""
from __future__ import annotations

import copy
import json
from typing import Dict, Optional

from wayfarer import db
from wayfarer.game.engine import StoredPlayer
from wayfarer.game.items import ItemInstance
from wayfarer.game.player import Player
from wayfarer.game.templates import KINDS, build_template
from wayfarer.models.models import User


class ScriptedRandom:
    """randint() hands out queued values in order, then falls back to the upper bound."""

    def __init__(self, *values):
        self.values = list(values)
        self.calls = []

    def randint(self, a, b):
        self.calls.append((a, b))
        if self.values:
            return self.values.pop(0)
        return b


class MemoryContent:
    """Dict-backed content lookup with the same id/title rules as the database one."""

    def __init__(self):
        self._entries: Dict[str, Dict[int, object]] = {kind: {} for kind in KINDS}
        self._next_id = 100

    def add(self, kind: str, title: str, data: Optional[dict] = None, id: Optional[int] = None):
        if id is None:
            self._next_id += 1
            id = self._next_id
        template = build_template(kind, id, title, data or {})
        self._entries[kind][id] = template
        return template

    def resolve(self, kind: str, ref):
        entries = self._entries.get(kind, {})
        if isinstance(ref, int) and not isinstance(ref, bool):
            return entries.get(ref)
        if isinstance(ref, str) and ref.strip().isdigit():
            return entries.get(int(ref.strip()))
        for entry_id in sorted(entries):
            template = entries[entry_id]
            if getattr(template, "name", getattr(template, "title", None)) == ref:
                return template
        return None

    def achievements(self):
        entries = self._entries["achievement"]
        return [entries[i] for i in sorted(entries)]


class MemoryStore:
    """Player store keeping JSON-round-tripped records in memory."""

    def __init__(self):
        self.players: Dict[int, StoredPlayer] = {}
        self.saves = 0
        self.touches = []

    def add_player(self, player_id: int = 1, name: str = "Tester", record: Optional[dict] = None, battle=None):
        self.players[player_id] = StoredPlayer(player_id, name, dict(record or {}), dict(battle or {}))
        return self.players[player_id]

    def load(self, player_id: int) -> Optional[StoredPlayer]:
        stored = self.players.get(player_id)
        return copy.deepcopy(stored) if stored is not None else None

    def save(self, player: Player) -> None:
        self.saves += 1
        self.players[player.id] = StoredPlayer(
            player.id,
            player.name,
            json.loads(json.dumps(player.to_record())),
            json.loads(json.dumps(player.saved_battle or {})),
        )

    def touch(self, player_id: int, timestamp: int) -> None:
        self.touches.append(timestamp)
        self.players[player_id].record["last_access"] = timestamp

    def record(self, player_id: int = 1) -> dict:
        return self.players[player_id].record

    def battle(self, player_id: int = 1) -> dict:
        return self.players[player_id].battle


def make_player(content: Optional[MemoryContent] = None, player_id: int = 1, name: str = "Tester", **record) -> Player:
    player = Player.from_record(player_id, name, content or MemoryContent(), record)
    player.this_access = 1_000
    return player


def item(id: int, name: str = "Thing", type: str = "weapon", attack: int = 0, defense: int = 0) -> ItemInstance:
    return ItemInstance(id=id, name=name, type=type, attack=attack, defense=defense)


def monster_snapshot(name="Rat", hp=5, max_hp=5, attack=1, defense=0, reward_gold=0, reward_exp=0, image="") -> dict:
    return {
        "name": name,
        "image": image,
        "hp": hp,
        "max_hp": max_hp,
        "attack": attack,
        "defense": defense,
        "reward_gold": reward_gold,
        "reward_exp": reward_exp,
    }


def create_user(username: str, password: str = "pass") -> User:
    user = User.query.filter_by(username=username).first()
    if user:
        return user
    user = User(username=username)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user
