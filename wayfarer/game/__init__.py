# Turn resolution core (no Flask imports below this package)
from .engine import PlayerStore, StoredPlayer, TurnEngine, execute_turn  # noqa: F401 re-export
from .player import Player, PlayerNotFound  # noqa: F401 re-export
from .templates import ContentRepository, TurnRules  # noqa: F401 re-export

__all__ = [
    "ContentRepository",
    "Player",
    "PlayerNotFound",
    "PlayerStore",
    "StoredPlayer",
    "TurnEngine",
    "TurnRules",
    "execute_turn",
]
