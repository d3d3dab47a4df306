"""
project: Wayfarer
module: models.py
License: MIT

Database models used by the Wayfarer application.

Notes:
- Passwords are stored as hashed values (Werkzeug generate_password_hash).
- The player record and the saved battle are JSON strings on ``PlayerState``;
  the turn engine owns their shape, the database only stores them.
- Authored content (rooms, monsters, items, skills, guilds, achievements) is a
  generic document store: one ``ContentEntry`` row per entry with a JSON body.
"""

import json
from datetime import datetime

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from wayfarer import db


def _safe_json_load(raw, default):
    if not raw:
        return default
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return default
    return value if isinstance(value, type(default)) else default


class User(UserMixin, db.Model):
    """Authenticated player account.

    Attributes:
        id: Primary key (also the player id handed to the turn engine).
        username: Unique handle for login and display.
        password: Hashed password string (never store plaintext).
    """

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    password = db.Column(db.String(200), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def set_password(self, raw_password: str):
        self.password = generate_password_hash(raw_password)

    def check_password(self, candidate: str) -> bool:
        return check_password_hash(self.password or "", candidate)


class PlayerState(db.Model):
    """Persisted game state for one account.

    Attributes:
        user_id: FK to User.id (one row per user, created on first save)
        record: JSON string of the canonical player record
        battle: JSON string of the saved battle snapshot ('{}' when not fighting)
        last_access: unix timestamp of the last resolved or throttled turn
    """

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), unique=True, nullable=False)
    record = db.Column(db.Text, nullable=False, default="{}")
    battle = db.Column(db.Text, nullable=False, default="{}")
    last_access = db.Column(db.Integer, nullable=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def record_dict(self) -> dict:
        data = _safe_json_load(self.record, {})
        # The column wins so a throttled turn (which only touches last_access) is honoured
        if self.last_access is not None:
            data["last_access"] = self.last_access
        return data

    def battle_dict(self) -> dict:
        return _safe_json_load(self.battle, {})


class ContentEntry(db.Model):
    """Authored game content.

    ``kind`` is one of room/monster/item/skill/guild/achievement. ``data`` holds
    the kind-specific fields as JSON, e.g. for a monster:
        '{"image": "rat.png", "hp": 12, "attack": 3, "defense": 1, "reward_gold": 2, "reward_exp": 4}'
    Unpublished entries are invisible to the game.
    """

    id = db.Column(db.Integer, primary_key=True)
    kind = db.Column(db.String(20), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False, index=True)
    data = db.Column(db.Text, nullable=False, default="{}")
    published = db.Column(db.Boolean, nullable=False, default=True)

    def data_dict(self) -> dict:
        return _safe_json_load(self.data, {})


class GameConfig(db.Model):
    """Key/value style game configuration storage.

    Stores tunable gameplay constants so they can be adjusted without code
    changes. Values are persisted as JSON-serializable text.

    Example rows:
        key='turn_rules', value='{"throttle_seconds":3,"regen_hp":1,"regen_mp":1,"starting_gold":100}'
    """

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(80), unique=True, nullable=False)
    value = db.Column(db.Text, nullable=False)

    @staticmethod
    def get(key: str):
        row = GameConfig.query.filter_by(key=key).first()
        return row.value if row else None

    @staticmethod
    def set(key: str, value: str):
        row = GameConfig.query.filter_by(key=key).first()
        if not row:
            row = GameConfig(key=key, value=value)
            db.session.add(row)
        else:
            row.value = value
        db.session.commit()
