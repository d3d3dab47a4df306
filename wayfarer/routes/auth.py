"""Authentication routes: register, login, logout.

JSON in, JSON out. Accepts either a JSON body or form fields with
``username`` and ``password``.
"""

import logging

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from wayfarer import db
from wayfarer.models.models import User

bp = Blueprint("auth", __name__)


def _credentials():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = request.form
    username = str(data.get("username") or "").strip()
    password = str(data.get("password") or "")
    return username, password


@bp.route("/register", methods=["POST"])
def register():
    """Create an account and log it in."""
    username, password = _credentials()
    if not username or not password:
        return jsonify({"error": "username_and_password_required"}), 400
    if User.query.filter(func.lower(User.username) == username.lower()).first():
        return jsonify({"error": "username_taken"}), 409
    user = User(username=username)
    user.set_password(password)
    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({"error": "username_taken"}), 409
    login_user(user)
    logging.info("Registered user %s", user.username)
    return jsonify({"ok": True, "user": {"id": user.id, "username": user.username}}), 201


@bp.route("/login", methods=["POST"])
def login():
    """Case-insensitive username login."""
    username, password = _credentials()
    user = User.query.filter(func.lower(User.username) == username.lower()).first() if username else None
    if user is None or not user.check_password(password):
        logging.info("Login failed for identifier=%s", username)
        return jsonify({"error": "invalid_credentials"}), 401
    login_user(user)
    return jsonify({"ok": True, "user": {"id": user.id, "username": user.username}})


@bp.route("/logout", methods=["POST"])
@login_required
def logout():
    username = current_user.username
    logout_user()
    logging.info("User %s logged out", username)
    return jsonify({"ok": True})
