"""Turn service: runs one turn for an authenticated account.

Builds the database-backed content lookup and player store, reads the
``turn_rules`` tunables from GameConfig and hands everything to the turn
engine. The route layer stays a thin JSON wrapper around :func:`resolve_turn`.
"""

from __future__ import annotations

import json
from dataclasses import fields
from typing import Optional

from flask import current_app

from wayfarer.game.engine import TurnEngine
from wayfarer.game.stats import to_int
from wayfarer.game.templates import TurnRules
from wayfarer.models import GameConfig

from .content_service import DbContentRepository
from .player_store import DbPlayerStore

DEFAULT_TURN_RULES = {
    "throttle_seconds": 3,
    "regen_hp": 1,
    "regen_mp": 1,
    "starting_gold": 100,
}


def load_turn_rules() -> TurnRules:
    """Merge GameConfig key 'turn_rules' over the defaults; bad values are ignored."""
    merged = dict(DEFAULT_TURN_RULES)
    raw = GameConfig.get("turn_rules")
    if raw:
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            data = {}
        if isinstance(data, dict):
            for key in DEFAULT_TURN_RULES:
                value = to_int(data.get(key))
                if value is not None and value >= 0:
                    merged[key] = value
    known = {f.name for f in fields(TurnRules)}
    rules = TurnRules(**{k: v for k, v in merged.items() if k in known})
    rules.start_room = current_app.config.get("WAYFARER_START_ROOM") or rules.start_room
    return rules


def resolve_turn(user_id: int, actions, now: Optional[float] = None, rng=None) -> dict:
    """Resolve one turn; raises PlayerNotFound when the account does not exist."""
    engine = TurnEngine(
        user_id,
        actions,
        DbContentRepository(),
        DbPlayerStore(),
        rules=load_turn_rules(),
        now=now,
        rng=rng,
    )
    return engine.execute_turn()
