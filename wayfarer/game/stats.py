"""Bounded stat rules shared by players and monsters.

Every stat an entity owns is declared up front in ``MINIMUMS``; nothing else can
be changed through :meth:`StatContainer.augment`, which keeps identifiers and
derived values out of reach of room actions and combat.

Rules:
    * ``hp`` / ``mp`` are clamped to ``[0, max_hp]`` / ``[0, max_mp]``. A drop
      marks the owner damaged; hp reaching 0 fires defeat handling once.
    * Every other stat falls back to its declared minimum when a change would
      take it below that floor. There is no upper bound.
"""

from __future__ import annotations

import math
from typing import Dict, Optional

BOUNDED_STATS = {"hp": "max_hp", "mp": "max_mp"}
_CAPS = {cap: stat for stat, cap in BOUNDED_STATS.items()}


def to_int(value, default: Optional[int] = None) -> Optional[int]:
    """Coerce ints, finite floats and numeric strings to int; anything else yields ``default``."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return default
        return int(number) if math.isfinite(number) else default
    return default


def round_half_up(value: float) -> int:
    if value < 0:
        return -int(math.floor(-value + 0.5))
    return int(math.floor(value + 0.5))


def vary(value: float, percent: float, rng) -> int:
    """Uniform integer draw within ``percent`` of ``value``.

    Bounds are computed in floating point, clamped to 0 when negative and then
    floored before the inclusive draw.
    """
    spread = value * percent / 100.0
    low = max(value - spread, 0)
    high = max(value + spread, 0)
    return rng.randint(int(math.floor(low)), int(math.floor(high)))


class StatContainer:
    """Mixin holding an allowlisted set of integer stats."""

    MINIMUMS: Dict[str, int] = {}

    def __init__(self):
        self._stats: Dict[str, int] = {}

    def _load_stats(self, values: dict, defaults: Optional[dict] = None) -> None:
        defaults = defaults or {}
        for name, minimum in self.MINIMUMS.items():
            value = to_int(values.get(name))
            if value is None:
                value = to_int(defaults.get(name), minimum)
            self._stats[name] = max(value, minimum)
        for stat, cap in BOUNDED_STATS.items():
            if stat in self._stats and cap in self._stats:
                self._stats[stat] = min(self._stats[stat], self._stats[cap])

    def stat(self, name: str) -> int:
        return self._stats[name]

    def has_stat(self, name: str) -> bool:
        return name in self._stats

    def augment(self, stat: str, delta) -> bool:
        """Apply ``delta`` to ``stat``; returns False when nothing could be changed."""
        if stat not in self.MINIMUMS or stat not in self._stats:
            return False
        amount = to_int(delta)
        if not amount:
            return False

        old = self._stats[stat]
        cap = BOUNDED_STATS.get(stat)
        if cap is not None:
            if cap not in self._stats:
                return False
            new = max(0, min(old + amount, self._stats[cap]))
            self._stats[stat] = new
            if new < old:
                self._on_damaged(stat)
            if stat == "hp" and new == 0 and old > 0:
                self._on_depleted()
        else:
            floor = self.MINIMUMS[stat]
            self._stats[stat] = max(old + amount, floor)
            bounded = _CAPS.get(stat)
            if bounded in self._stats and self._stats[bounded] > self._stats[stat]:
                self._stats[bounded] = self._stats[stat]
        self._on_stats_changed()
        return True

    # Hooks for owners; monsters only care about depletion.
    def _on_damaged(self, stat: str) -> None:
        pass

    def _on_depleted(self) -> None:
        pass

    def _on_stats_changed(self) -> None:
        pass
