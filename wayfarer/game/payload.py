"""Turn response assembly.

The response is a map of ``key -> [values]``; a key's presence tells the
client something changed this turn. Which player blocks are included depends
only on the turn's dirty flags, never on a diff against stored state.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional

RESPONSE_KEYS = (
    "pause",
    "playerStats",
    "playerSkills",
    "playerInventory",
    "clearInventory",
    "playerEquipment",
    "room",
    "roomUpdate",
    "updatePlayerGuild",
    "playerIdentity",
    "notifications",
    "new_combat",
    "fleeCombat",
    "combat",
    "newAchievement",
    "achievements",
)


def _is_empty(data) -> bool:
    return data is None or data == "" or data == [] or data == {}


class TurnPayload:
    def __init__(self):
        self._data: Dict[str, List] = {}

    def add(self, key: str, data, keep_empty: bool = False) -> None:
        """Append ``data`` under ``key``; empty values are dropped unless ``keep_empty``."""
        if _is_empty(data) and not keep_empty:
            return
        self._data.setdefault(key, []).append(data)

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __getitem__(self, key: str) -> List:
        return self._data[key]

    def to_dict(self) -> Dict[str, List]:
        return {key: list(values) for key, values in self._data.items()}


def compose_delta(
    payload: TurnPayload,
    player,
    load_room: Callable[[], Optional[object]],
    first_turn: bool = False,
    room_notifications: Iterable[List[str]] = (),
) -> TurnPayload:
    """Add the player-state blocks this turn's dirty flags call for."""
    flags = player.flags

    if flags.stats:
        payload.add("playerStats", player.stats_block())
    if flags.skills:
        payload.add("playerSkills", dict(player.skills), keep_empty=True)
    if flags.items:
        if player.inventory:
            payload.add("playerInventory", [item.to_snapshot() for item in player.inventory])
        elif not first_turn:
            payload.add("clearInventory", True)
        payload.add(
            "playerEquipment",
            {slot: (item.to_snapshot() if item is not None else None) for slot, item in player.equipment.items()},
        )

    if flags.moved or flags.quest_flags:
        room = load_room()
        if room is not None:
            payload.add("room" if flags.moved else "roomUpdate", room.to_payload())

    if flags.guild:
        payload.add(
            "updatePlayerGuild",
            {"name": player.current_guild, "level": player.guild_level(player.current_guild)},
        )

    for notification in list(player.notifications) + list(room_notifications):
        payload.add("notifications", notification)
    if player.new_achievements:
        payload.add("newAchievement", dict(player.new_achievements))
    return payload
