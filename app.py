# app.py
"""
Main Flask application entrypoint.

- Loads env/config
- Builds the game catalog, progress store and GameService
- Initializes Firebase Admin (for token verification) unless auth is disabled
- Enables CORS for /api/*
- Registers blueprints: Games
"""

from __future__ import annotations
import logging
import os
from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_cors import CORS

# ---- Load .env early ----
load_dotenv()

# ---- Config & blueprints ----
from config import Config
from services.game_engine.catalog import load_catalog, load_catalog_file
from services.game_engine.market_data import MarketDataClient
from services.game_engine.models import GameMode
from services.game_engine.routes import games_bp
from services.game_engine.service import GameService
from services.game_engine.session import GameSessionController
from services.game_engine.store import build_store

logger = logging.getLogger(__name__)


def build_game_service(app: Flask) -> GameService:
    """Wire catalog, store, session controller and market data from app.config."""
    cfg = app.config
    if cfg.get("GAME_CATALOG_PATH"):
        catalog = load_catalog_file(cfg["GAME_CATALOG_PATH"])
    else:
        catalog = load_catalog({
            "constants": {
                "GAME_TIME_LIMIT": cfg["TIME_ATTACK_LIMIT_SECONDS"],
                "QUESTIONS_PER_GAME": cfg["QUESTIONS_PER_GAME"],
                "DECISIONS_PER_GAME": cfg["DECISIONS_PER_GAME"],
            }
        })
    controller = GameSessionController(
        catalog.ladder,
        time_limits={GameMode.TIME_ATTACK: cfg["TIME_ATTACK_LIMIT_SECONDS"]},
    )
    market_data = MarketDataClient(
        api_key=cfg.get("FINNHUB_API_KEY"),
        base_url=cfg.get("FINNHUB_BASE_URL"),
        timeout=cfg.get("MARKET_DATA_TIMEOUT", 10),
    )
    return GameService(
        catalog,
        build_store(cfg.get("PROGRESS_STORE")),
        controller=controller,
        market_data=market_data,
    )


# ---------------------------------------------------------------------
# App Factory
# ---------------------------------------------------------------------
def create_app(config=None, service: GameService | None = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config or Config)

    if not app.testing:
        logging.basicConfig(
            level=app.config.get("LOG_LEVEL", "INFO"),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    # require_auth runs before any Firestore calls, so initialize Admin here
    if not app.testing and not app.config.get("AUTH_DISABLED"):
        from services.firebase import init_firebase_admin
        init_firebase_admin()
    elif app.config.get("AUTH_DISABLED"):
        logger.warning("[app] AUTH_DISABLED is set; requests are trusted by X-Debug-Uid")

    # CORS for mobile dev; lock down origins in production
    CORS(app, resources={r"/api/*": {"origins": "*"}})

    app.extensions["game_service"] = service or build_game_service(app)

    # --- Register blueprints ---
    app.register_blueprint(games_bp, url_prefix="/api/games")

    # --- Health (public) ---
    @app.get("/api/health")
    def health():
        return jsonify({"ok": True, "service": "flask", "version": "2.0.0"})

    # --- JSON error handlers ---
    @app.errorhandler(400)
    def handle_400(err):
        return jsonify({"ok": False, "error": str(err)}), 400

    @app.errorhandler(404)
    def handle_404(err):
        return jsonify({"ok": False, "error": "Not found"}), 404

    @app.errorhandler(405)
    def handle_405(err):
        return jsonify({"ok": False, "error": "Method not allowed"}), 405

    @app.errorhandler(500)
    def handle_500(err):
        return jsonify({"ok": False, "error": "Internal server error"}), 500

    return app


# ---------------------------------------------------------------------
# Dev Server Launcher
# ---------------------------------------------------------------------
if __name__ == "__main__":
    app = create_app()
    port = int(os.getenv("PORT", "5001"))
    app.run(host="0.0.0.0", port=port, debug=app.config.get("DEBUG", False))
