"""Player persistence over ``PlayerState`` rows.

The engine hands over a ``Player`` at the end of a turn; this module writes
its canonical record and battle snapshot as JSON and commits. Accounts that
have never played have no row yet and load as an empty record, which the
engine turns into a new player.
"""

from __future__ import annotations

import json
from typing import Optional

from wayfarer import db
from wayfarer.game.engine import StoredPlayer
from wayfarer.models import PlayerState, User


class DbPlayerStore:
    def load(self, player_id: int) -> Optional[StoredPlayer]:
        user = db.session.get(User, player_id)
        if user is None:
            return None
        state = PlayerState.query.filter_by(user_id=user.id).first()
        if state is None:
            return StoredPlayer(id=user.id, name=user.username)
        return StoredPlayer(id=user.id, name=user.username, record=state.record_dict(), battle=state.battle_dict())

    def _state(self, player_id: int) -> PlayerState:
        state = PlayerState.query.filter_by(user_id=player_id).first()
        if state is None:
            state = PlayerState(user_id=player_id, record="{}", battle="{}")
            db.session.add(state)
        return state

    def save(self, player) -> None:
        state = self._state(player.id)
        state.record = json.dumps(player.to_record())
        state.battle = json.dumps(player.saved_battle or {})
        state.last_access = player.this_access
        db.session.commit()

    def touch(self, player_id: int, timestamp: int) -> None:
        state = self._state(player_id)
        state.last_access = timestamp
        db.session.commit()
