"""Turn API blueprint.

The browser posts its queued actions here once per polling cycle and renders
whatever blocks come back. Game rules live in the turn engine; this layer only
unpacks the request and maps a missing account to 404.
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from wayfarer.game.player import PlayerNotFound
from wayfarer.services import turn_service

bp_turn = Blueprint("turn", __name__)


def _submitted_actions() -> list:
    """Actions arrive as {"action": [[name, argument], ...]}; anything else means none."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return []
    actions = data.get("action")
    return actions if isinstance(actions, list) else []


@bp_turn.route("/game/api/turn", methods=["POST"])
@login_required
def take_turn():
    try:
        payload = turn_service.resolve_turn(current_user.id, _submitted_actions())
    except PlayerNotFound:
        return jsonify({"error": "player_not_found"}), 404
    return jsonify(payload)
