"""Named value filters.

Combat power and player-facing messages pass through ``apply_filters`` so a
plugin or test can adjust them without touching the resolvers::

    add_filter("player_attack_power", lambda dmg, player, target: dmg * 2)
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List

_FILTERS: Dict[str, List[Callable[..., Any]]] = {}


def add_filter(name: str, fn: Callable[..., Any]) -> None:
    _FILTERS.setdefault(name, []).append(fn)


def remove_filter(name: str, fn: Callable[..., Any]) -> bool:
    chain = _FILTERS.get(name)
    if not chain or fn not in chain:
        return False
    chain.remove(fn)
    return True


def clear_filters(name: str | None = None) -> None:
    if name is None:
        _FILTERS.clear()
    else:
        _FILTERS.pop(name, None)


def apply_filters(name: str, value: Any, *args: Any) -> Any:
    """Run ``value`` through every filter registered for ``name`` in registration order."""
    for fn in _FILTERS.get(name, ()):
        value = fn(value, *args)
    return value
