"""
project: Wayfarer
module: __init__.py
License: MIT

Flask application and core extensions setup.

This module wires together the Flask app, SQLAlchemy and Flask-Login.
Configuration is sourced from environment variables with reasonable defaults
for development. A local `instance/` directory is used for SQLite and other
runtime data.
"""

import logging
import os
import uuid
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_login import LoginManager
from flask_sqlalchemy import SQLAlchemy

# Load .env if present so `SECRET_KEY`, `DATABASE_URL`, etc. can be supplied
# without exporting shell variables during development.
load_dotenv()

# Instance-relative config so ./instance holds the SQLite database and app.log
app = Flask(__name__, instance_relative_config=True)

try:
    os.makedirs(app.instance_path, exist_ok=True)
except OSError:
    # Read-only checkouts still work with DATABASE_URL pointing elsewhere
    pass

secret_key = os.getenv("SECRET_KEY", "dev-secret-change-me")
database_url = os.getenv("DATABASE_URL")
if not database_url:
    db_path = Path(app.instance_path) / "wayfarer.db"
    # POSIX path for SQLAlchemy URI compatibility across OS
    database_url = f"sqlite:///{db_path.as_posix()}"

app.config.update(
    SECRET_KEY=secret_key,
    SQLALCHEMY_DATABASE_URI=database_url,
    SQLALCHEMY_TRACK_MODIFICATIONS=False,
    # Title or id of the room new players start in
    WAYFARER_START_ROOM=os.getenv("WAYFARER_START_ROOM", "New Player Arrival"),
)

engine_opts = {}
if database_url.startswith("sqlite:///"):
    engine_opts["connect_args"] = {
        "timeout": 10,  # busy timeout (seconds) for sqlite
        "check_same_thread": False,
    }
db = SQLAlchemy(app, session_options={"expire_on_commit": False}, engine_options=engine_opts)
login_manager = LoginManager(app)


@login_manager.user_loader
def load_user(user_id):  # pragma: no cover - simple loader
    from wayfarer.models.models import User

    try:
        return db.session.get(User, int(user_id))
    except (TypeError, ValueError):
        return None


@login_manager.unauthorized_handler
def _unauthorized():
    return jsonify({"error": "login_required"}), 401


# Register HTTP blueprints (import after app/db created)
from wayfarer.routes import auth  # noqa: E402
from wayfarer.routes.turn_api import bp_turn  # noqa: E402

app.register_blueprint(auth.bp)
app.register_blueprint(bp_turn)


def create_app():
    """Return the Flask app instance with tables and default config rows in place."""
    from wayfarer.server import _seed_game_config

    with app.app_context():
        db.create_all()
        _seed_game_config()
    return app


@app.errorhandler(500)
def internal_error(e):
    error_id = uuid.uuid4().hex[:8]
    logging.exception("Unhandled exception (id=%s)", error_id)
    return jsonify({"error": "internal_error", "error_id": error_id}), 500
