"""
Admin access gate: a single shared PIN and a derived session token.

The token is sha256(pin) as hex, stored in an HTTP-only cookie. Every
comparison (PIN on login, token on protected requests) is constant time.
"""

import hashlib
import hmac
from functools import wraps
from typing import Optional

from flask import jsonify, request

from config import ADMIN_SESSION_COOKIE, ADMIN_SESSION_MAX_AGE, get_admin_pin, get_logger

logger = get_logger(__name__)


def get_session_token() -> Optional[str]:
    """Session token for the configured PIN, or None if no PIN is configured."""
    pin = get_admin_pin()
    if not pin:
        return None
    return hashlib.sha256(pin.encode("utf-8")).hexdigest()


def verify_pin(provided_pin: str) -> bool:
    """Constant-time check of a submitted PIN against the configured one."""
    pin = get_admin_pin()
    if not pin:
        return False
    return hmac.compare_digest(pin.encode("utf-8"), provided_pin.strip().encode("utf-8"))


def is_request_authorized(req=None) -> bool:
    """True if the request carries a valid admin session cookie."""
    req = req or request
    expected = get_session_token()
    if not expected:
        return False

    received = req.cookies.get(ADMIN_SESSION_COOKIE)
    if not received:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), received.encode("utf-8"))


def set_session_cookie(response, token: str):
    response.set_cookie(
        ADMIN_SESSION_COOKIE,
        token,
        max_age=ADMIN_SESSION_MAX_AGE,
        path="/",
        httponly=True,
        samesite="Lax",
    )
    return response


def clear_session_cookie(response):
    response.delete_cookie(ADMIN_SESSION_COOKIE, path="/")
    return response


def admin_required(view):
    """Reject the request with 401 unless it has a valid admin session."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if not is_request_authorized():
            logger.warning("Unauthorized admin request: %s %s", request.method, request.path)
            return jsonify({"error": "Unauthorized"}), 401
        return view(*args, **kwargs)

    return wrapper
