import json

import pytest

from tests.factories import create_user
from wayfarer import app
from wayfarer.game.player import Player, PlayerNotFound
from wayfarer.models.models import GameConfig, PlayerState
from wayfarer.server import seed_content
from wayfarer.services import turn_service
from wayfarer.services.content_service import DbContentRepository, add_content
from wayfarer.services.player_store import DbPlayerStore

pytestmark = pytest.mark.db_isolation


def test_turn_requires_login(client):
    resp = client.post("/game/api/turn", json={"action": [["system", "first-turn"]]})
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "login_required"}


def test_first_turn_over_http(auth_client):
    seed_content()
    resp = auth_client.post("/game/api/turn", json={"action": [["system", "first-turn"]]})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["playerIdentity"][0]["name"] == "tester"
    assert data["playerStats"][0]["gold"] == 100
    assert data["room"][0]["description"].startswith("A quiet hall")
    names = [obj["name"] for obj in data["room"][0]["objects"]]
    assert names == ["Notice Board", "Quartermaster"]
    assert sorted(title for title, _ in data["achievements"][0].values()) == ["First Steps", "Wolfsbane"]
    assert "combat" not in data

    # Immediate follow-up is throttled and only the access time is recorded
    again = auth_client.post("/game/api/turn", json={"action": [["combat", "hunt"]]})
    assert again.get_json() == {"pause": [True]}
    state = PlayerState.query.one()
    assert state.battle_dict() == {}


def test_malformed_body_counts_as_no_actions(auth_client):
    resp = auth_client.post("/game/api/turn", data="not json", content_type="text/plain")
    assert resp.status_code == 200
    assert resp.get_json() == {}


def test_missing_player_maps_to_404(auth_client, monkeypatch):
    def _missing(user_id, actions):
        raise PlayerNotFound(user_id)

    monkeypatch.setattr(turn_service, "resolve_turn", _missing)
    resp = auth_client.post("/game/api/turn", json={"action": []})
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "player_not_found"}


def test_resolve_turn_persists_and_throttles():
    user = create_user("walker")
    seed_content()
    first = turn_service.resolve_turn(user.id, [["system", "first-turn"]], now=1000)
    assert first["playerIdentity"] == [{"id": user.id, "name": "walker"}]

    assert turn_service.resolve_turn(user.id, [], now=1001) == {"pause": [True]}
    state = PlayerState.query.filter_by(user_id=user.id).one()
    assert state.last_access == 1001
    assert state.record_dict()["last_access"] == 1001

    later = turn_service.resolve_turn(user.id, [["roomObjectAction", "Quartermaster"]], now=1010)
    assert [item["name"] for item in later["playerInventory"][0]] == ["Leather Cap"]
    assert "roomUpdate" in later
    with pytest.raises(PlayerNotFound):
        turn_service.resolve_turn(9999, [], now=1010)


def test_turn_rules_from_game_config(monkeypatch):
    GameConfig.set("turn_rules", json.dumps({"throttle_seconds": 10, "regen_hp": "x", "starting_gold": -5}))
    monkeypatch.setitem(app.config, "WAYFARER_START_ROOM", "Market Square")
    rules = turn_service.load_turn_rules()
    assert rules.throttle_seconds == 10
    assert rules.regen_hp == 1
    assert rules.starting_gold == 100
    assert rules.start_room == "Market Square"

    GameConfig.set("turn_rules", "{broken")
    assert turn_service.load_turn_rules().throttle_seconds == 3


def test_content_lookup_by_id_title_and_visibility():
    sword = add_content("item", "Short Sword", {"type": "weapon", "attack": 3})
    add_content("item", "Secret Blade", {"type": "weapon"}, published=False)
    content = DbContentRepository()
    assert content.resolve("item", sword.id).attack == 3
    assert content.resolve("item", str(sword.id)).name == "Short Sword"
    assert content.resolve("item", "Short Sword").id == sword.id
    assert content.resolve("item", "Secret Blade") is None
    assert content.resolve("room", "Short Sword") is None
    assert content.resolve("spell", sword.id) is None
    with pytest.raises(ValueError):
        add_content("spell", "Zap")


def test_player_store_round_trip():
    user = create_user("keeper")
    store = DbPlayerStore()
    assert store.load(424242) is None
    fresh = store.load(user.id)
    assert (fresh.name, fresh.record, fresh.battle) == ("keeper", {}, {})

    player = Player.from_record(user.id, "keeper", DbContentRepository(), {"gold": 7, "quest_flags": {"door": 2}})
    player.this_access = 500
    player.saved_battle = {"info": {"round": 2}, "enemies": [{"name": "Rat", "hp": 3, "max_hp": 5}]}
    store.save(player)

    loaded = store.load(user.id)
    assert loaded.record["gold"] == 7
    assert loaded.record["quest_flags"] == {"door": 2}
    assert loaded.record["last_access"] == 500
    assert loaded.battle["info"] == {"round": 2}

    store.touch(user.id, 777)
    assert store.load(user.id).record["last_access"] == 777
