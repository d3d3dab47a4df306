"""
project: Wayfarer
module: engine.py
License: MIT

Turn engine: resolves one player request.

Order of play for a turn:
    1. Throttle: a request arriving too soon after the previous one (and not
       declared as the first turn since page load) only records the access
       time and answers ``{"pause": [...]}``.
    2. Queued actions run in submission order.
    3. Natural regeneration, unless the player is in a battle.
    4. One combat round, unless this is the first turn or the battle only
       started this turn.
    5. Player record and battle snapshot are persisted.
    6. The delta payload is composed from the turn's dirty flags.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Protocol, Tuple

from wayfarer.logging_utils import get_logger

from .combat import Combat
from .payload import TurnPayload, compose_delta
from .player import Player, PlayerNotFound
from .room import Room
from .templates import ContentRepository, TurnRules

log = get_logger("turn")

Action = Tuple[str, object]


@dataclass
class StoredPlayer:
    id: int
    name: str
    record: dict = field(default_factory=dict)
    battle: dict = field(default_factory=dict)


class PlayerStore(Protocol):
    def load(self, player_id: int) -> Optional[StoredPlayer]:
        ...

    def save(self, player: Player) -> None:
        ...

    def touch(self, player_id: int, timestamp: int) -> None:
        ...


def normalize_actions(actions) -> List[Action]:
    """Keep well-formed ``(name, argument)`` pairs; anything else is dropped."""
    normalized: List[Action] = []
    if not isinstance(actions, (list, tuple)):
        return normalized
    for entry in actions:
        if not isinstance(entry, (list, tuple)) or len(entry) != 2:
            continue
        name, arg = entry
        if isinstance(name, str) and name:
            normalized.append((name, arg))
    return normalized


class TurnEngine:
    def __init__(
        self,
        player_id: int,
        actions: Iterable,
        content: ContentRepository,
        store: PlayerStore,
        rules: Optional[TurnRules] = None,
        now: Optional[float] = None,
        rng=None,
    ):
        self.content = content
        self.store = store
        self.rules = rules or TurnRules()
        self.rng = rng or random
        self.actions = normalize_actions(actions)
        self.first_turn = ("system", "first-turn") in self.actions

        stored = store.load(player_id)
        if stored is None:
            log.warn(event="player_not_found", player=player_id)
            raise PlayerNotFound(player_id)
        self.player = Player.from_record(
            stored.id,
            stored.name,
            content,
            stored.record,
            stored.battle,
            start_room=self.rules.start_room,
            starting_gold=self.rules.starting_gold,
        )
        self.player.this_access = int(now if now is not None else time.time())

        self.payload = TurnPayload()
        self._room: Optional[Room] = None
        self._room_loaded = False
        self._room_notifications: List[List[str]] = []
        self._combat: Optional[Combat] = None

    # ------------------------------------------------------------------
    # Lazily built resolvers
    # ------------------------------------------------------------------
    def current_room(self) -> Optional[Room]:
        if not self._room_loaded:
            self._room = Room.load(self.player.current_room, self.player, self.content)
            self._room_loaded = True
        return self._room

    def combat(self) -> Combat:
        if self._combat is None:
            self._combat = Combat(self.player, self.rng)
        return self._combat

    # ------------------------------------------------------------------
    # Turn
    # ------------------------------------------------------------------
    def is_throttled(self) -> bool:
        last = self.player.last_access
        if last is None or self.first_turn:
            return False
        return self.player.this_access - last < self.rules.throttle_seconds

    def execute_turn(self) -> dict:
        player = self.player
        if self.is_throttled():
            self.store.touch(player.id, player.this_access)
            log.info(event="turn_throttled", player=player.id, gap=player.this_access - player.last_access)
            return {"pause": [True]}

        for action, arg in self.actions:
            self._dispatch(action, arg)

        if not player.in_battle:
            player.heal_naturally(self.rules.regen_hp, self.rules.regen_mp)
        self._try_fighting()

        self.store.save(player)
        compose_delta(self.payload, player, self.current_room, self.first_turn, self._room_notifications)
        result = self.payload.to_dict()
        log.info(event="turn_resolved", player=player.id, actions=len(self.actions), keys=",".join(sorted(result)))
        return result

    def _dispatch(self, action: str, arg) -> None:
        player = self.player
        if action == "system":
            if arg == "first-turn":
                self._setup_first_turn()
        elif action == "combat":
            if arg == "hunt":
                self._hunt()
            elif arg == "flee":
                self.payload.add("fleeCombat", self.combat().flee_battle())
        elif action == "movePlayer":
            self._move(arg)
        elif action == "roomObjectAction":
            room = self.current_room()
            if room is not None:
                room.process_object_action(arg)
                self._room_notifications.extend(room.notifications)
                room.notifications.clear()
        elif action == "equip_item":
            player.equip_item(arg)
        elif action == "unequip_item":
            player.unequip_item(arg)
        elif action == "drop_item":
            player.drop_item(arg)
        elif action == "use_skill":
            player.use_skill(arg, self.rng)
        else:
            log.debug(event="unknown_action", player=player.id, action=action)

    def _hunt(self) -> None:
        if self.player.flags.moved or self.player.in_battle:
            return
        room = self.current_room()
        if room is None:
            return
        self.payload.add("new_combat", self.combat().initiate_new_battle(room))

    def _move(self, label) -> None:
        player = self.player
        if player.flags.moved or player.in_battle:
            return
        room = self.current_room()
        destination = room.has_exit(label) if room is not None else None
        if destination is None:
            return
        new_room = Room.load(destination, player, self.content)
        if new_room is None:
            return
        self._room = new_room
        player.current_room = new_room.id
        player.flags.moved = True
        log.info(event="player_moved", player=player.id, room=new_room.id)

    def _setup_first_turn(self) -> None:
        player = self.player
        self.payload.add("playerIdentity", {"id": player.id, "name": player.name})
        player.flags.force_full_snapshot()
        if player.in_battle:
            self.payload.add("new_combat", self.combat().initiate_existing_battle())
            self.payload.add("pause", True)
        self.payload.add("achievements", player.all_achievements(), keep_empty=True)

    def _try_fighting(self) -> None:
        if self.first_turn or not self.player.in_battle:
            return
        combat = self.combat()
        if combat.new_combat:
            return
        self.payload.add("combat", combat.execute_battle_turn())


def execute_turn(player_id: int, actions, content: ContentRepository, store: PlayerStore, **kwargs) -> dict:
    """Convenience wrapper: build a :class:`TurnEngine` and run it."""
    return TurnEngine(player_id, actions, content, store, **kwargs).execute_turn()
