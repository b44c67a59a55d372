# services/game_engine/routes.py
import logging

from flask import Blueprint, current_app, jsonify, request
from auth_middleware import require_auth

logger = logging.getLogger(__name__)

games_bp = Blueprint("games_bp", __name__)

STATUS_BY_CODE = {
    "InvalidOption": 400,
    "InvalidGuess": 400,
    "InvalidAmount": 400,
    "InvalidMetricValue": 400,
    "InvalidContent": 400,
    "UnknownMode": 400,
    "UnknownReward": 404,
    "NoActiveSession": 404,
    "AlreadyAcquired": 409,
    "InsufficientTickets": 409,
    "SessionInProgress": 409,
    "SessionNotComplete": 409,
    "SessionClosed": 409,
    "MarketDataUnavailable": 502,
}


def _service():
    return current_app.extensions["game_service"]


def _respond(result):
    if result.get("ok"):
        return jsonify(result), 200
    return jsonify(result), STATUS_BY_CODE.get(result.get("code"), 400)


# -------------------- Profile / Levels --------------------

@games_bp.get("/profile")
@require_auth
def profile():
    """
    XP, level, tickets, next-level info and high scores.

    Response:
    {
        "ok": true,
        "total_xp": 270,
        "level": 3,
        "tickets": 4,
        "next_level": {"level": 4, "xp_required": 500, "xp_needed": 230, "tickets": 3},
        "progress": 0.08,
        ...
    }
    """
    uid = request.user["uid"]
    try:
        return jsonify(_service().get_profile(uid)), 200
    except Exception as e:
        logger.exception("[profile] Error for %s", uid)
        return jsonify({"ok": False, "error": str(e)}), 500


@games_bp.get("/levels")
def levels():
    """Level ladder (public). Useful for showing progression UI."""
    return jsonify(_service().get_levels()), 200


# -------------------- Rewards --------------------

@games_bp.get("/rewards")
@require_auth
def rewards():
    uid = request.user["uid"]
    return jsonify(_service().list_rewards(uid)), 200


@games_bp.post("/rewards/<reward_id>/purchase")
@require_auth
def purchase_reward(reward_id):
    """
    Spend tickets on a reward.

    409 with code InsufficientTickets / AlreadyAcquired leaves the wallet untouched.
    """
    uid = request.user["uid"]
    try:
        return _respond(_service().purchase(uid, reward_id))
    except Exception as e:
        logger.exception("[purchase] Error for %s (%s)", uid, reward_id)
        return jsonify({"ok": False, "error": str(e)}), 500


# -------------------- Sessions --------------------

@games_bp.post("/<mode>/start")
@require_auth
def start(mode):
    uid = request.user["uid"]
    data = request.get_json(silent=True) or {}
    limit = data.get("limit")
    if limit is not None and (not isinstance(limit, int) or isinstance(limit, bool) or limit <= 0):
        return jsonify({"ok": False, "error": "limit must be a positive integer"}), 400
    return _respond(_service().start_game(uid, mode, limit=limit))


@games_bp.post("/market/<symbol>/start")
@require_auth
def start_market(symbol):
    """
    Market Adventure round built from live financials for `symbol`.

    Optional body: {"limit": 5, "industry_averages": {"peTTM": 22.4, "roeTTM": 14.2}}
    502 with code MarketDataUnavailable when the data provider fails.
    """
    uid = request.user["uid"]
    data = request.get_json(silent=True) or {}
    limit = data.get("limit")
    if limit is not None and (not isinstance(limit, int) or isinstance(limit, bool) or limit <= 0):
        return jsonify({"ok": False, "error": "limit must be a positive integer"}), 400
    averages = data.get("industry_averages")
    if averages is not None and not isinstance(averages, dict):
        return jsonify({"ok": False, "error": "industry_averages must be an object"}), 400
    return _respond(_service().start_market_game(uid, symbol, industry_averages=averages, limit=limit))


@games_bp.post("/answer")
@require_auth
def answer():
    """
    Request body, question modes:  {"guess": "good" | "bad"}
    Request body, decision modes:  {"option_id": "targeted"}
    """
    uid = request.user["uid"]
    data = request.get_json(silent=True) or {}
    response = data.get("option_id")
    if response is None:
        response = data.get("guess")
    if response is None:
        return jsonify({"ok": False, "error": "guess or option_id required"}), 400
    return _respond(_service().submit(uid, response))


@games_bp.post("/finish")
@require_auth
def finish():
    uid = request.user["uid"]
    try:
        return _respond(_service().finish_game(uid))
    except Exception as e:
        logger.exception("[finish] Error for %s", uid)
        return jsonify({"ok": False, "error": str(e)}), 500


@games_bp.post("/abandon")
@require_auth
def abandon():
    uid = request.user["uid"]
    return _respond(_service().abandon_game(uid))


@games_bp.get("/state")
@require_auth
def state():
    uid = request.user["uid"]
    return jsonify(_service().get_state(uid)), 200
