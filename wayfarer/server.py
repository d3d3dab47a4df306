"""
project: Wayfarer
module: server.py
License: MIT

Server bootstrap helpers.

Creates tables, seeds default GameConfig rows and a small starter world, sets
up rotating file logging and runs the Flask development server.
"""

import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from wayfarer import app, db
from wayfarer.models.models import ContentEntry, GameConfig, User
from wayfarer.services.content_service import add_content
from wayfarer.services.turn_service import DEFAULT_TURN_RULES


def start_server(host="0.0.0.0", port=5000, debug: bool = False):  # pragma: no cover (runtime only)
    """Ensure the schema and seeds exist, configure logging and serve."""
    with app.app_context():
        db.create_all()
        _seed_game_config()
        seed_content()
        _configure_logging()
    try:
        print(f"[INFO] Starting Wayfarer on {host}:{port}")
        app.run(host=host, port=port, debug=debug)
    except KeyboardInterrupt:
        print("\n[INFO] Server stopped by user (Ctrl+C)")
        sys.exit(0)


def _configure_logging():
    """Configure logging to both console and a rotating file in instance/.

    The file path will be instance/app.log. Retains a few backups to avoid growth.
    """
    log_dir = app.instance_path
    try:
        os.makedirs(log_dir, exist_ok=True)
    except OSError:
        pass
    log_path = os.path.join(log_dir, "app.log")

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3)
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(formatter)

    # Avoid duplicate handlers if reconfigured
    for h in list(root.handlers):
        root.removeHandler(h)

    root.addHandler(file_handler)
    root.addHandler(console)


def _seed_game_config():
    """Insert default tunables if missing; existing values are left alone."""
    if GameConfig.get("turn_rules") is None:
        GameConfig.set("turn_rules", json.dumps(DEFAULT_TURN_RULES))


def create_user(username: str, password: str) -> User:
    user = User.query.filter_by(username=username).first()
    if user is None:
        user = User(username=username)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
    return user


def seed_content() -> bool:
    """Create the starter world once. Returns False when content already exists."""
    if ContentEntry.query.first() is not None:
        return False

    sword = add_content("item", "Short Sword", {"type": "weapon", "attack": 3})
    buckler = add_content("item", "Wooden Buckler", {"type": "shield", "defense": 2})
    cap = add_content("item", "Leather Cap", {"type": "helmet", "defense": 1})
    add_content("item", "Trail Ration", {"type": "Junk"})

    rat = add_content("monster", "Cellar Rat", {"image": "rat.png", "hp": 12, "attack": 3, "defense": 0, "reward_gold": 2, "reward_exp": 3})
    wolf = add_content("monster", "Grey Wolf", {"image": "wolf.png", "hp": 25, "attack": 6, "defense": 2, "reward_gold": 5, "reward_exp": 8})

    add_content("skill", "Fire Bolt", {"effect": "damage", "cost": 5, "strength": 12, "variability": 20})
    add_content("guild", "Adventurers", {})
    first_steps = add_content("achievement", "First Steps", {"content": "You left the arrival hall for the first time."})
    add_content("achievement", "Wolfsbane", {"content": "You survived the forest path."})

    arrival = add_content("room", "New Player Arrival")
    market = add_content("room", "Market Square")
    forest = add_content("room", "Forest Path")

    worlds = {
        arrival: {
            "description": "A quiet hall where new arrivals find their bearings.",
            "environment": "indoors",
            "objects": [
                {"name": "Notice Board", "group": "examine", "description": "Welcome, wayfarer. The market lies east."},
                {
                    "name": "Quartermaster",
                    "group": "npc",
                    "description": "A tired quartermaster hands out supplies to newcomers.",
                    "action_type": "multiple",
                    "action_value": f"give_item-{cap.id};set_quest_flag-met_quartermaster=1",
                    "requirement_type": "has_quest_flag",
                    "requirement_value": "met_quartermaster=0",
                    "match": "exact",
                },
                {
                    "name": "Quartermaster",
                    "group": "npc",
                    "description": "The quartermaster nods. Nothing more for you today.",
                },
            ],
            "exits": [{"link": "East to the market", "room_id": market.id}],
            "monsters": [rat.id],
            "max_monsters": 1,
        },
        market: {
            "description": "Stalls crowd the square. A guild hall stands to the north.",
            "environment": "town",
            "objects": [
                {
                    "name": "Weaponsmith",
                    "group": "action",
                    "description": "Short swords, 40 gold apiece.",
                    "action_type": "sell_to_player",
                    "action_value": f"{sword.id}for40",
                },
                {
                    "name": "Carpenter",
                    "group": "action",
                    "description": "Sturdy bucklers, 25 gold.",
                    "action_type": "sell_to_player",
                    "action_value": f"{buckler.id}for25",
                },
                {
                    "name": "Guild Registrar",
                    "group": "npc",
                    "description": "Sign here to join the Adventurers.",
                    "action_type": "multiple",
                    "action_value": f"join_guild-Adventurers;award_achievement-{first_steps.id}",
                    "requirement_type": "in_guild",
                    "requirement_value": "Adventurers=0",
                },
                {
                    "name": "Fire Tutor",
                    "group": "npc",
                    "description": "Guild members may learn the Fire Bolt here.",
                    "action_type": "teach_skill",
                    "action_value": "Fire Bolt",
                    "requirement_type": "has_guild_level",
                    "requirement_value": "Adventurers=1",
                },
            ],
            "exits": [
                {"link": "West to the arrival hall", "room_id": arrival.id},
                {
                    "link": "South into the forest",
                    "room_id": forest.id,
                    "requirement_type": "in_guild",
                    "requirement_value": "Adventurers=1",
                },
            ],
        },
        forest: {
            "description": "Pines close in around a muddy trail.",
            "environment": "forest",
            "objects": [
                {
                    "name": "Bramble Patch",
                    "group": "action",
                    "description": "Thorns snag at anyone pushing through.",
                    "action_type": "damage_player",
                    "action_value": "3",
                }
            ],
            "exits": [{"link": "North to the market", "room_id": market.id}],
            "monsters": [rat.id, wolf.id],
            "max_monsters": 3,
        },
    }
    for entry, data in worlds.items():
        entry.data = json.dumps(data)
    db.session.commit()
    logging.info("Seeded starter world (%d entries)", ContentEntry.query.count())
    return True
