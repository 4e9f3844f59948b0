from __future__ import annotations

import logging
import re
from typing import Dict, Optional

from flask import Flask, jsonify, request
from markdown import markdown

import auth
import config
import store
from categories import DEFAULT_CATEGORY, catalog, category_name
from suggest import SUGGEST_MIN_LENGTH, suggest_category, suggest_slug
from validation import PayloadError, parse_create, parse_memo, parse_update

logger = logging.getLogger(__name__)

LEADING_INT_RE = re.compile(r"\s*[+-]?\d+")

app = Flask(__name__)
app.secret_key = config.SECRET_KEY
app.config.update(
    SESSION_COOKIE_NAME=config.SESSION_COOKIE_NAME,
    SESSION_COOKIE_HTTPONLY=True,
    SESSION_COOKIE_SECURE=config.IS_PRODUCTION,
    SESSION_COOKIE_SAMESITE="Strict",
    PERMANENT_SESSION_LIFETIME=config.SESSION_LIFETIME,
)


def configure_logging() -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def error_response(message: str, status: int):
    return jsonify({"error": message}), status


def read_json():
    """Parsed request body, or ``None`` when it is not valid JSON."""
    return request.get_json(force=True, silent=True)


def parse_limit(raw: Optional[str]) -> int:
    """Leading integer of ``raw`` clamped to the memo limits.

    Missing, non-numeric and zero values all mean the default.
    """
    match = LEADING_INT_RE.match(raw or "")
    limit = int(match.group(0)) if match else 0
    if limit == 0:
        return config.MEMO_LIMIT_DEFAULT
    return min(max(limit, config.MEMO_LIMIT_MIN), config.MEMO_LIMIT_MAX)


def render_markdown(md_text: str) -> str:
    return markdown(
        md_text or "",
        extensions=["fenced_code", "codehilite", "tables", "sane_lists"],
        output_format="html5",
    )


def build_excerpt(html: str, length: int = 220) -> str:
    text = re.sub(r"<[^>]+>", "", html or "").strip()
    if len(text) <= length:
        return text
    return f"{text[:length].rstrip()}…"


def attach_suggestion(fields: Dict, existing: Optional[Dict] = None) -> None:
    """Fill ``suggested_category`` from the body when the client sent none."""
    content = fields.get("content")
    if content is None or "suggested_category" in fields:
        return
    if len(content) <= SUGGEST_MIN_LENGTH:
        return
    chosen = fields.get("category") or (existing or {}).get("category") or DEFAULT_CATEGORY
    suggested = suggest_category(content, SUGGEST_MIN_LENGTH)
    fields["suggested_category"] = suggested if suggested != chosen else None


def slug_taken(slug: Optional[str], post_id: Optional[str] = None) -> bool:
    if not slug:
        return False
    other = store.get_post_by_slug(slug)
    return other is not None and other.get("id") != post_id


def public_post(post: Dict, with_body: bool = False) -> Dict:
    html = render_markdown(post.get("content", ""))
    payload = {
        "id": post.get("id"),
        "title": post.get("title"),
        "slug": post.get("slug"),
        "description": post.get("description", ""),
        "category": post.get("category"),
        "category_name": category_name(post.get("category", "")),
        "tags": post.get("tags", []),
        "updated_at": post.get("updated_at"),
        "excerpt": post.get("description") or build_excerpt(html),
    }
    if with_body:
        payload["content_html"] = html
    return payload


@app.errorhandler(404)
def not_found(_error):
    return error_response("Not found", 404)


@app.errorhandler(405)
def method_not_allowed(_error):
    return error_response("Method not allowed", 405)


@app.errorhandler(store.StoreError)
def store_unavailable(_error):
    return error_response("Failed to load posts", 500)


@app.errorhandler(500)
def internal_error(_error):
    return error_response("Internal server error", 500)


# Session


@app.route("/api/admin/login", methods=["POST"])
def admin_login():
    body = read_json()
    password = body.get("password") if isinstance(body, dict) else None
    if auth.check_password(password):
        auth.log_in()
        logger.info("Admin logged in")
        return jsonify({"success": True})
    logger.warning("Rejected admin login from %s", request.remote_addr)
    return jsonify({"success": False, "error": "Invalid password"}), 401


@app.route("/api/admin/login", methods=["DELETE"])
def admin_logout():
    auth.log_out()
    return jsonify({"success": True})


@app.route("/api/admin/session")
def admin_session():
    return jsonify({"authenticated": auth.is_authenticated()})


# Posts (admin)


@app.route("/api/posts", methods=["GET"])
@auth.login_required
def admin_posts():
    post_id = request.args.get("id")
    if post_id:
        post = store.get_post_by_id(post_id)
        if not post:
            return error_response("Post not found", 404)
        return jsonify(post)

    posts = store.get_all_posts_admin()
    if posts is None:
        return error_response("Failed to load posts", 500)
    return jsonify(posts)


@app.route("/api/posts", methods=["POST"])
@auth.login_required
def admin_create_post():
    body = read_json()
    if body is None:
        return error_response("Invalid JSON body", 400)
    try:
        fields = parse_create(body)
    except PayloadError as exc:
        return error_response(str(exc), 400)

    if slug_taken(fields["slug"]):
        return error_response("Slug already exists", 400)
    attach_suggestion(fields)

    post = store.create_post(fields)
    if not post:
        return error_response("Failed to create post", 500)
    return jsonify(post)


@app.route("/api/posts", methods=["PUT"])
@auth.login_required
def admin_update_post():
    body = read_json()
    if body is None:
        return error_response("Invalid JSON body", 400)
    try:
        fields = parse_update(body)
    except PayloadError as exc:
        return error_response(str(exc), 400)

    existing = store.get_post_by_id(fields["id"])
    if not existing:
        return error_response("Post not found", 404)
    if slug_taken(fields.get("slug"), post_id=fields["id"]):
        return error_response("Slug already exists", 400)
    attach_suggestion(fields, existing=existing)

    post = store.update_post(fields)
    if not post:
        return error_response("Failed to update post", 500)
    return jsonify(post)


@app.route("/api/posts", methods=["DELETE"])
@auth.login_required
def admin_delete_post():
    post_id = request.args.get("id")
    if not post_id:
        return error_response("Post ID required", 400)
    if not store.get_post_by_id(post_id):
        return error_response("Post not found", 404)
    if not store.delete_post(post_id):
        return error_response("Failed to delete post", 500)
    return jsonify({"success": True})


# Quick memos


@app.route("/api/quick-memos", methods=["GET"])
def quick_memos():
    limit = parse_limit(request.args.get("limit"))
    memos = store.get_quick_memos(limit)
    if memos is None:
        return error_response("Failed to load memos", 500)
    return jsonify(memos)


@app.route("/api/quick-memos", methods=["POST"])
@auth.login_required
def create_quick_memo():
    body = read_json()
    if body is None:
        return error_response("Invalid JSON body", 400)
    try:
        content = parse_memo(body)
    except PayloadError as exc:
        return error_response(str(exc), 400)

    memo = store.create_quick_memo(content)
    if not memo:
        return error_response("Failed to create memo", 500)
    return jsonify(memo)


@app.route("/api/quick-memos", methods=["DELETE"])
@auth.login_required
def delete_quick_memo():
    memo_id = request.args.get("id")
    if not memo_id:
        return error_response("Memo ID required", 400)
    if not store.delete_quick_memo(memo_id):
        return error_response("Failed to delete memo", 500)
    return jsonify({"success": True})


# Categories and suggestions


@app.route("/api/categories")
def categories():
    return jsonify(catalog())


@app.route("/api/suggest", methods=["POST"])
@auth.login_required
def suggest():
    body = read_json()
    if not isinstance(body, dict):
        return error_response("Invalid JSON body", 400)
    content = body.get("content") if isinstance(body.get("content"), str) else ""
    title = body.get("title") if isinstance(body.get("title"), str) else ""
    suggested = suggest_category(content, SUGGEST_MIN_LENGTH)
    return jsonify(
        {
            "category": suggested,
            "name": category_name(suggested),
            "differs": suggested != body.get("category"),
            "slug": suggest_slug(title),
        }
    )


# Public blog


@app.route("/api/blog")
def blog_index():
    posts = store.get_published_posts()
    if posts is None:
        return error_response("Failed to load posts", 500)
    return jsonify([public_post(p) for p in posts])


@app.route("/api/blog/<slug>")
def blog_post(slug: str):
    post = store.get_post_by_slug(slug)
    if not post or post.get("status") != "published":
        return error_response("Post not found", 404)
    return jsonify(public_post(post, with_body=True))


if __name__ == "__main__":
    configure_logging()
    app.run(debug=not config.IS_PRODUCTION)
