"""Requirement predicates gating room objects and exits.

Authored content stores a requirement as a type name plus a string value, e.g.
``has_quest_flag`` / ``"found_key=2"``. :func:`parse_requirement` turns that
into one of a fixed set of variants, each of which knows how to evaluate
itself against a player. A requirement whose value is missing or malformed
parses to :class:`Unsatisfiable` so the gated object simply stays hidden.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from .stats import to_int


class Match(str, Enum):
    EXACT = "exact"
    MINIMUM = "minimum"

    @classmethod
    def parse(cls, raw) -> "Match":
        return cls.EXACT if str(raw or "").strip().lower() == cls.EXACT.value else cls.MINIMUM


@dataclass(frozen=True)
class HasItem:
    item_id: int

    def evaluate(self, player) -> bool:
        return player.has_item(self.item_id)


@dataclass(frozen=True)
class HasQuestFlag:
    flag: str
    value: int = 1
    match: Match = Match.MINIMUM

    def evaluate(self, player) -> bool:
        return player.has_quest_flag(self.flag, self.value, exact=self.match is Match.EXACT)


@dataclass(frozen=True)
class HasGuildLevel:
    guild: str
    level: int
    match: Match = Match.MINIMUM

    def evaluate(self, player) -> bool:
        return player.has_guild_level(self.guild, self.level, exact=self.match is Match.EXACT)


@dataclass(frozen=True)
class InGuild:
    guild: str
    member: bool = True

    def evaluate(self, player) -> bool:
        return player.currently_in_guild(self.guild, self.member)


@dataclass(frozen=True)
class HasSkill:
    skill: str
    level: Optional[int] = None
    match: Match = Match.MINIMUM

    def evaluate(self, player) -> bool:
        return player.has_skill(self.skill, self.level, exact=self.match is Match.EXACT)


@dataclass(frozen=True)
class Unsatisfiable:
    kind: str

    def evaluate(self, player) -> bool:
        return False


Requirement = Union[HasItem, HasQuestFlag, HasGuildLevel, InGuild, HasSkill, Unsatisfiable]


def _split_pair(text: str) -> Tuple[str, Optional[str]]:
    if "=" not in text:
        return text.strip(), None
    name, _, value = text.partition("=")
    return name.strip(), value.strip()


def parse_requirement(kind, value, match=None) -> Optional[Requirement]:
    """Build a requirement variant; None means the object carries no requirement."""
    kind = str(kind or "").strip()
    if not kind:
        return None
    text = "" if value is None else str(value).strip()
    if not text:
        return Unsatisfiable(kind)
    how = Match.parse(match)

    if kind == "has_item":
        item_id = to_int(text)
        return HasItem(item_id) if item_id is not None else Unsatisfiable(kind)

    name, raw = _split_pair(text)
    if not name:
        return Unsatisfiable(kind)
    number = to_int(raw) if raw is not None else None
    if raw is not None and number is None:
        return Unsatisfiable(kind)

    if kind == "has_quest_flag":
        return HasQuestFlag(name, 1 if number is None else number, how)
    if kind == "has_guild_level":
        if number is None:
            return Unsatisfiable(kind)
        return HasGuildLevel(name, number, how)
    if kind == "in_guild":
        return InGuild(name, True if number is None else bool(number))
    if kind == "has_skill":
        return HasSkill(name, number, how)
    return Unsatisfiable(kind)


def check(requirement: Optional[Requirement], player) -> bool:
    """Absent requirements always pass."""
    if requirement is None:
        return True
    return requirement.evaluate(player)
