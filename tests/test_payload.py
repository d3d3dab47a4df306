from tests.factories import MemoryContent, item, make_player
from wayfarer.game.payload import TurnPayload, compose_delta


class _FakeRoom:
    def __init__(self):
        self.loaded = 0

    def to_payload(self):
        return {"id": 5}


def _compose(player, first_turn=False, room_notifications=()):
    room = _FakeRoom()

    def load_room():
        room.loaded += 1
        return room

    payload = compose_delta(TurnPayload(), player, load_room, first_turn, room_notifications)
    return payload.to_dict(), room.loaded


def test_turn_payload_drops_empty_values():
    payload = TurnPayload()
    payload.add("notifications", [])
    payload.add("combat", None)
    payload.add("achievements", {}, keep_empty=True)
    payload.add("notifications", ["notice", "hi"])
    payload.add("notifications", ["error", "no"])
    assert "combat" not in payload
    assert payload["notifications"] == [["notice", "hi"], ["error", "no"]]
    assert payload.to_dict() == {"achievements": [{}], "notifications": [["notice", "hi"], ["error", "no"]]}


def test_clean_player_sends_nothing_and_skips_room_lookup():
    data, loads = _compose(make_player())
    assert data == {}
    assert loads == 0


def test_flags_select_blocks():
    player = make_player(MemoryContent())
    player.flags.stats = True
    player.flags.skills = True
    player.flags.quest_flags = True
    data, loads = _compose(player)
    assert data["playerStats"] == [player.stats_block()]
    assert data["playerSkills"] == [{}]
    assert data["roomUpdate"] == [{"id": 5}]
    assert loads == 1


def test_moved_wins_over_room_update():
    player = make_player()
    player.flags.moved = True
    player.flags.quest_flags = True
    data, _ = _compose(player)
    assert data["room"] == [{"id": 5}]
    assert "roomUpdate" not in data


def test_inventory_blocks():
    player = make_player()
    player.flags.items = True
    data, _ = _compose(player)
    assert data["clearInventory"] == [True]
    assert data["playerEquipment"][0]["weapon"] is None

    first, _ = _compose(player, first_turn=True)
    assert "clearInventory" not in first

    player.add_item(item(3, "Rope", "Junk"))
    data, _ = _compose(player)
    assert data["playerInventory"] == [[item(3, "Rope", "Junk").to_snapshot()]]


def test_guild_notifications_and_achievements():
    player = make_player(current_guild="Mages", guild_levels={"Mages": [4, 2]})
    player.flags.guild = True
    player.add_notification("goodNews", "Player first")
    player.new_achievements[20] = ["Explorer", "Found the cave."]
    data, _ = _compose(player, room_notifications=[["error", "Then the room"]])
    assert data["updatePlayerGuild"] == [{"name": "Mages", "level": 2}]
    assert data["notifications"] == [["goodNews", "Player first"], ["error", "Then the room"]]
    assert data["newAchievement"] == [{20: ["Explorer", "Found the cave."]}]
