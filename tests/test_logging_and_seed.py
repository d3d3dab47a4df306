import json

import pytest

from wayfarer import app, db
from wayfarer import logging_utils
from wayfarer.models.models import ContentEntry, GameConfig
from wayfarer.server import _configure_logging, _seed_game_config, seed_content
from wayfarer.services.content_service import DbContentRepository


@pytest.mark.db_isolation
def test_configure_logging_and_seed_content(tmp_path, monkeypatch):
    # Redirect instance path to a temp directory to exercise logging setup
    monkeypatch.setattr(app, "instance_path", str(tmp_path))
    # Run logging config twice to ensure idempotence (handler replace path)
    _configure_logging()
    _configure_logging()

    assert seed_content() is True
    count_before = ContentEntry.query.count()
    assert seed_content() is False
    assert ContentEntry.query.count() == count_before
    assert (tmp_path / "app.log").exists()


@pytest.mark.db_isolation
def test_seeded_world_is_connected():
    seed_content()
    content = DbContentRepository()
    arrival = content.resolve("room", "New Player Arrival")
    market_id = arrival.exits[0].room_id
    market = content.resolve("room", market_id)
    assert market.title == "Market Square"
    assert any(exit_.room_id == arrival.id for exit_ in market.exits)
    assert content.resolve("monster", arrival.monsters[0]).name == "Cellar Rat"
    assert [a.title for a in content.achievements()] == ["First Steps", "Wolfsbane"]


@pytest.mark.db_isolation
def test_game_config_seed_keeps_existing_values():
    GameConfig.set("turn_rules", json.dumps({"throttle_seconds": 9}))
    _seed_game_config()
    assert json.loads(GameConfig.get("turn_rules")) == {"throttle_seconds": 9}


def test_structured_logger_formats(capsys, monkeypatch):
    log = logging_utils.get_logger("turn")
    assert logging_utils.get_logger("turn") is log
    log.info(event="turn_resolved", player=7, keys="a b", skipped=None)
    out = capsys.readouterr().out
    assert "level=info" in out
    assert "event=turn_resolved" in out
    assert "player=7" in out
    assert "keys=a_b" in out
    assert "skipped" not in out
    assert "logger=turn" in out

    monkeypatch.setattr(logging_utils, "JSON_MODE", True)
    log.info(event="battle_won", round=3)
    record = json.loads(capsys.readouterr().out.strip())
    assert record["event"] == "battle_won"
    assert record["round"] == 3
    assert record["level"] == "info"


def test_structured_logger_level_filter(capsys, monkeypatch):
    monkeypatch.setattr(logging_utils, "CURRENT_LEVEL", logging_utils.LEVELS["warn"])
    log = logging_utils.get_logger("room")
    log.debug(event="room_action_skipped")
    log.info(event="ignored")
    log.error(event="boom")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "event=boom" in captured.err
