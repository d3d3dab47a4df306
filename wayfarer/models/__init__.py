# Model package init
from .models import ContentEntry, GameConfig, PlayerState, User  # noqa: F401 re-export

__all__ = [
    "ContentEntry",
    "GameConfig",
    "PlayerState",
    "User",
]
