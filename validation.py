"""
Shape checks for incoming post and quick memo payloads.

Create and update share one field table; they only differ in which fields
are mandatory. Only the first violated rule is reported back to the caller,
in the order given by ``FIELD_ORDER``.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from categories import CATEGORY_IDS

SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

FIELD_ORDER = (
    "id",
    "title",
    "slug",
    "content",
    "description",
    "category",
    "status",
    "tags",
    "suggested_category",
)

EXPECTED = {
    "id": "a non-empty string",
    "title": "a non-empty string",
    "slug": "lowercase letters and digits separated by single hyphens, e.g. 'my-first-post'",
    "content": "a non-empty string",
    "description": "a string",
    "category": "one of " + ", ".join(sorted(CATEGORY_IDS)),
    "status": "'draft' or 'published'",
    "tags": "a list of strings",
    "suggested_category": "one of " + ", ".join(sorted(CATEGORY_IDS)),
}


class PayloadError(ValueError):
    """Raised when a payload breaks a field rule; ``str()`` is user facing."""


def _non_blank(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("must not be blank")
    return value


def _known_category(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in CATEGORY_IDS:
        raise ValueError("unknown category")
    return value


class PostFields(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore")

    title: Optional[str] = None
    slug: Optional[str] = None
    content: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    status: Optional[Literal["draft", "published"]] = None
    tags: Optional[List[str]] = None
    suggested_category: Optional[str] = None

    @field_validator("title", "content")
    @classmethod
    def check_not_blank(cls, value):
        return _non_blank(value)

    @field_validator("slug")
    @classmethod
    def check_slug(cls, value):
        if value is not None and not SLUG_RE.fullmatch(value):
            raise ValueError("not a URL-safe slug")
        return value

    @field_validator("category", "suggested_category")
    @classmethod
    def check_category(cls, value):
        return _known_category(value)


class PostCreate(PostFields):
    title: str
    slug: str
    content: str


class PostUpdate(PostFields):
    id: str

    @field_validator("id")
    @classmethod
    def check_id(cls, value):
        return _non_blank(value)


class MemoCreate(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore")

    content: str

    @field_validator("content")
    @classmethod
    def trim_content(cls, value):
        return _non_blank(value).strip()


def _first_error(exc: ValidationError) -> str:
    def rank(error):
        field = str(error["loc"][0]) if error["loc"] else ""
        return FIELD_ORDER.index(field) if field in FIELD_ORDER else len(FIELD_ORDER)

    error = min(exc.errors(), key=rank)
    field = str(error["loc"][0]) if error["loc"] else "body"
    if error["type"] == "missing":
        return f"Missing required field '{field}'"
    expected = EXPECTED.get(field)
    if expected is None:
        return f"Invalid field '{field}'"
    return f"Invalid field '{field}': expected {expected}"


def _parse(model, payload: Any) -> Dict:
    if not isinstance(payload, dict):
        raise PayloadError("Request body must be a JSON object")
    try:
        parsed = model.model_validate(payload)
    except ValidationError as exc:
        raise PayloadError(_first_error(exc)) from exc
    # null on an optional field means "not supplied"
    return parsed.model_dump(exclude_unset=True, exclude_none=True)


def parse_create(payload: Any) -> Dict:
    return _parse(PostCreate, payload)


def parse_update(payload: Any) -> Dict:
    return _parse(PostUpdate, payload)


def parse_memo(payload: Any) -> str:
    return _parse(MemoCreate, payload)["content"]


def _message(parse, payload) -> Optional[str]:
    try:
        parse(payload)
    except PayloadError as exc:
        return str(exc)
    return None


def validate_create(payload: Any) -> Optional[str]:
    """Return ``None`` when ``payload`` may be stored as a new post."""
    return _message(parse_create, payload)


def validate_update(payload: Any) -> Optional[str]:
    """Return ``None`` when ``payload`` is an acceptable partial update."""
    return _message(parse_update, payload)


def validate_memo(payload: Any) -> Optional[str]:
    return _message(parse_memo, payload)
