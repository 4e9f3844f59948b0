"""
Single-operator authentication on top of Flask's signed session cookie.

The cookie carries a sentinel plus the time it was issued. A caller is
authenticated only while both are present and the session has not outlived
``config.SESSION_LIFETIME``.
"""

from __future__ import annotations

import hmac
import time
from functools import wraps

from flask import jsonify, session

import config

SESSION_KEY = "admin"
ISSUED_AT_KEY = "issued_at"
AUTHENTICATED = "authenticated"


def check_password(candidate) -> bool:
    expected = config.ADMIN_PASSWORD
    if not expected or not isinstance(candidate, str):
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


def log_in() -> None:
    session.clear()
    session.permanent = True
    session[SESSION_KEY] = AUTHENTICATED
    session[ISSUED_AT_KEY] = int(time.time())


def log_out() -> None:
    session.clear()


def is_authenticated() -> bool:
    if session.get(SESSION_KEY) != AUTHENTICATED:
        return False
    issued_at = session.get(ISSUED_AT_KEY)
    if not isinstance(issued_at, int):
        return False
    age = time.time() - issued_at
    return 0 <= age < config.SESSION_LIFETIME.total_seconds()


def login_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not is_authenticated():
            return jsonify({"error": "Unauthorized"}), 401
        return view(*args, **kwargs)

    return wrapped
