"""Fixed category catalog shared by the suggester and the validator."""

from __future__ import annotations

from typing import Dict, List, NamedTuple


class Category(NamedTuple):
    id: str
    name: str


CATEGORIES = (
    Category("dev", "개발"),
    Category("cooking", "요리"),
    Category("study", "공부"),
    Category("exercise", "운동"),
    Category("daily", "일상"),
)

CATEGORY_IDS = frozenset(c.id for c in CATEGORIES)
DEFAULT_CATEGORY = "daily"

_NAMES = {c.id: c.name for c in CATEGORIES}


def category_name(category_id: str) -> str:
    return _NAMES.get(category_id, category_id)


def catalog() -> List[Dict]:
    return [c._asdict() for c in CATEGORIES]
