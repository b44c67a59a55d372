# auth_middleware.py
import logging
from functools import wraps
from flask import current_app, request, jsonify
from firebase_admin import auth as fb_auth

logger = logging.getLogger(__name__)


def require_auth(fn):
    """
    Verify Firebase ID token from 'Authorization: Bearer <token>'.
    Sets request.user = {"uid": ..., "email": ..., "name": ...}

    With AUTH_DISABLED (local dev only) the uid comes from the X-Debug-Uid
    header instead.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if current_app.config.get("AUTH_DISABLED"):
            uid = request.headers.get("X-Debug-Uid", "dev-user")
            request.user = {"uid": uid, "email": None, "name": None}
            return fn(*args, **kwargs)

        hdr = request.headers.get("Authorization", "")
        if not hdr.startswith("Bearer "):
            return jsonify({"ok": False, "error": "Missing Firebase ID token"}), 401
        try:
            decoded = fb_auth.verify_id_token(hdr.split(" ", 1)[1])
        except Exception as e:
            logger.info("[auth] token rejected: %s", e)
            return jsonify({"ok": False, "error": f"Invalid or expired token: {e}"}), 401

        request.user = {
            "uid": decoded["uid"],
            "email": decoded.get("email"),
            "name": decoded.get("name"),
        }
        return fn(*args, **kwargs)
    return wrapper
