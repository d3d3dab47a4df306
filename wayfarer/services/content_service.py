"""Content lookup backed by ``ContentEntry`` rows.

Resolves rooms, monsters, items, skills, guilds and achievements by id or by
title into the immutable templates the turn engine works with. A reference
that is an int (or a string of digits) is looked up by id, anything else by
exact title. Missing or unpublished entries resolve to None.
"""

from __future__ import annotations

import json
from typing import List, Optional

from wayfarer import db
from wayfarer.game.templates import KINDS, AchievementTemplate, build_template
from wayfarer.models import ContentEntry

__all__ = ["DbContentRepository", "add_content"]


def _as_id(ref) -> Optional[int]:
    if isinstance(ref, bool):
        return None
    if isinstance(ref, int):
        return ref
    if isinstance(ref, str) and ref.strip().isdigit():
        return int(ref.strip())
    return None


class DbContentRepository:
    """One instance per turn; nothing is cached between turns."""

    def resolve(self, kind: str, ref):
        if kind not in KINDS or ref is None or ref == "":
            return None
        query = ContentEntry.query.filter_by(kind=kind, published=True)
        entry_id = _as_id(ref)
        if entry_id is not None:
            row = query.filter_by(id=entry_id).first()
        else:
            row = query.filter_by(title=str(ref).strip()).order_by(ContentEntry.id).first()
        if row is None:
            return None
        return build_template(kind, row.id, row.title, row.data_dict())

    def achievements(self) -> List[AchievementTemplate]:
        rows = ContentEntry.query.filter_by(kind="achievement", published=True).order_by(ContentEntry.id).all()
        return [build_template("achievement", row.id, row.title, row.data_dict()) for row in rows]


def add_content(kind: str, title: str, data: Optional[dict] = None, published: bool = True) -> ContentEntry:
    """Insert a content entry and return it (used by seeding and tests)."""
    if kind not in KINDS:
        raise ValueError(f"unknown content kind: {kind}")
    entry = ContentEntry(kind=kind, title=title, data=json.dumps(data or {}), published=published)
    db.session.add(entry)
    db.session.commit()
    return entry
