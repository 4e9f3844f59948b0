"""
Flat-file persistence for posts and quick memos.

Everything lives in one JSON document at ``config.DATA_PATH``. Write
helpers return ``None``/``False`` on failure and log the cause; callers
only learn that the operation failed. Single-post lookups raise
``StoreError`` instead, so an unreadable file is never mistaken for a
missing post.
"""

from __future__ import annotations

import json
import logging
import os
import threading
import uuid
from datetime import datetime, timezone
from functools import wraps
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Dict, List, Optional

import config
from categories import DEFAULT_CATEGORY

logger = logging.getLogger(__name__)

# Serializes load-modify-save cycles within the process.
_write_lock = threading.Lock()


class StoreError(Exception):
    """The data file could not be read."""


POST_DEFAULTS = {
    "description": "",
    "category": DEFAULT_CATEGORY,
    "tags": [],
    "status": "draft",
    "suggested_category": None,
}


def now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def new_id() -> str:
    return uuid.uuid4().hex


def ensure_data_file() -> None:
    """Make sure the data file exists."""
    config.DATA_PATH.parent.mkdir(parents=True, exist_ok=True)
    if not config.DATA_PATH.exists():
        save_data({"posts": [], "quick_memos": []})


def load_data() -> Dict:
    ensure_data_file()
    with open(config.DATA_PATH, "r", encoding="utf-8") as fh:
        raw = json.load(fh)
    if not isinstance(raw, dict):
        raw = {"posts": raw}
    raw.setdefault("posts", [])
    raw.setdefault("quick_memos", [])
    return raw


def save_data(data: Dict) -> None:
    config.DATA_PATH.parent.mkdir(parents=True, exist_ok=True)
    with NamedTemporaryFile(
        "w", encoding="utf-8", dir=config.DATA_PATH.parent, suffix=".tmp", delete=False
    ) as tmp:
        json.dump(data, tmp, indent=2, ensure_ascii=False)
        tmp.flush()
        os.fsync(tmp.fileno())
        tmp_path = Path(tmp.name)
    tmp_path.replace(config.DATA_PATH)


def _locked(func):
    @wraps(func)
    def wrapped(*args, **kwargs):
        with _write_lock:
            return func(*args, **kwargs)

    return wrapped


def _newest_first(items: List[Dict], key: str) -> List[Dict]:
    # Later insertions win ties within the same second.
    ranked = sorted(
        enumerate(items), key=lambda pair: (pair[1].get(key) or "", pair[0]), reverse=True
    )
    return [item for _, item in ranked]


def _read(kind: str) -> Optional[List[Dict]]:
    try:
        return load_data()[kind]
    except (OSError, ValueError):
        logger.exception("Failed to read %s from %s", kind, config.DATA_PATH)
        return None


def _require(kind: str) -> List[Dict]:
    items = _read(kind)
    if items is None:
        raise StoreError(f"cannot read {kind}")
    return items


# Posts


def get_all_posts_admin() -> Optional[List[Dict]]:
    posts = _read("posts")
    if posts is None:
        return None
    return _newest_first(posts, "updated_at")


def get_published_posts() -> Optional[List[Dict]]:
    posts = get_all_posts_admin()
    if posts is None:
        return None
    return [p for p in posts if p.get("status") == "published"]


def get_post_by_id(post_id: str) -> Optional[Dict]:
    for post in _require("posts"):
        if post.get("id") == post_id:
            return post
    return None


def get_post_by_slug(slug: str) -> Optional[Dict]:
    for post in _newest_first(_require("posts"), "updated_at"):
        if post.get("slug") == slug:
            return post
    return None


@_locked
def create_post(fields: Dict) -> Optional[Dict]:
    timestamp = now_iso()
    post = {**POST_DEFAULTS, **fields}
    post["tags"] = list(post["tags"])
    post.update(id=new_id(), created_at=timestamp, updated_at=timestamp)
    try:
        data = load_data()
        data["posts"].append(post)
        save_data(data)
    except (OSError, ValueError):
        logger.exception("Failed to create post %r", fields.get("slug"))
        return None
    logger.info("Created post %s (%s)", post["id"], post["slug"])
    return post


@_locked
def update_post(fields: Dict) -> Optional[Dict]:
    changes = {k: v for k, v in fields.items() if k not in ("id", "created_at")}
    try:
        data = load_data()
        for idx, post in enumerate(data["posts"]):
            if post.get("id") == fields["id"]:
                updated = {**post, **changes, "updated_at": now_iso()}
                data["posts"][idx] = updated
                break
        else:
            logger.warning("Update for unknown post %s", fields["id"])
            return None
        save_data(data)
    except (OSError, ValueError):
        logger.exception("Failed to update post %s", fields["id"])
        return None
    logger.info("Updated post %s", fields["id"])
    return updated


@_locked
def delete_post(post_id: str) -> bool:
    try:
        data = load_data()
        remaining = [p for p in data["posts"] if p.get("id") != post_id]
        if len(remaining) == len(data["posts"]):
            logger.warning("Delete for unknown post %s", post_id)
            return False
        data["posts"] = remaining
        save_data(data)
    except (OSError, ValueError):
        logger.exception("Failed to delete post %s", post_id)
        return False
    logger.info("Deleted post %s", post_id)
    return True


# Quick memos


def get_quick_memos(limit: int) -> Optional[List[Dict]]:
    memos = _read("quick_memos")
    if memos is None:
        return None
    return _newest_first(memos, "created_at")[:limit]


@_locked
def create_quick_memo(content: str) -> Optional[Dict]:
    memo = {"id": new_id(), "content": content, "created_at": now_iso()}
    try:
        data = load_data()
        data["quick_memos"].append(memo)
        save_data(data)
    except (OSError, ValueError):
        logger.exception("Failed to create quick memo")
        return None
    return memo


@_locked
def delete_quick_memo(memo_id: str) -> bool:
    try:
        data = load_data()
        remaining = [m for m in data["quick_memos"] if m.get("id") != memo_id]
        if len(remaining) == len(data["quick_memos"]):
            logger.warning("Delete for unknown quick memo %s", memo_id)
            return False
        data["quick_memos"] = remaining
        save_data(data)
    except (OSError, ValueError):
        logger.exception("Failed to delete quick memo %s", memo_id)
        return False
    return True
