# services/game_engine/service.py
"""
Per-player game API used by the HTTP routes.

Public methods take a uid and return JSON-ready dicts:
    {"ok": True, ...}                      on success
    {"ok": False, "error": ..., "code": ...}  on a GameError

Sessions live in this service (one open session per uid). Progress lives in
the ProgressStore and is only written by purchase() and finish_game(), each
as a single atomic update. finish_game() and abandon_game() take the
session out of the registry before touching it, so two concurrent requests
cannot both settle the same session.
"""

from __future__ import annotations
from functools import wraps
from typing import Any, Callable, Dict, Mapping, Optional, TypeVar
import logging
import random
import threading

from . import rewards
from .catalog import GameCatalog
from .errors import GameError, MarketDataUnavailable, NoActiveSession
from .market_data import DEFAULT_INDUSTRY_AVERAGES, MarketDataClient, questions_for_symbol
from .models import ContentItem, Decision, GameMode, MetricQuestion, PlayerProgress
from .progression import level_summary, sync_level
from .session import GameSession, GameSessionController, coerce_mode
from .store import ProgressStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _game_errors_as_dict(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except GameError as e:
            logger.info("[game] %s rejected: %s (%s)", fn.__name__, e.message, e.code)
            return e.to_dict()
    return wrapper


def public_item(item: Optional[ContentItem]) -> Optional[Dict[str, Any]]:
    """Strip answers and impacts before sending content to the client."""
    if item is None:
        return None
    if isinstance(item, MetricQuestion):
        return {
            "type": "metric_question",
            "id": item.id,
            "metric": item.metric,
            "company_value": item.company_value,
            "industry_average": item.industry_average,
        }
    if isinstance(item, Decision):
        return {
            "type": "decision",
            "id": item.id,
            "title": item.title,
            "description": item.description,
            "options": [{"id": o.id, "text": o.text} for o in item.options],
        }
    return None


class GameService:
    def __init__(
        self,
        catalog: GameCatalog,
        store: ProgressStore,
        controller: Optional[GameSessionController] = None,
        rng: Optional[random.Random] = None,
        market_data: Optional[MarketDataClient] = None,
    ):
        self.catalog = catalog
        self.store = store
        self.controller = controller or GameSessionController(catalog.ladder)
        self.rng = rng or random.Random()
        self.market_data = market_data
        self._sessions: Dict[str, GameSession] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _open_session(self, uid: str) -> GameSession:
        session = self._sessions.get(uid)
        if session is None or not session.status.is_open:
            raise NoActiveSession("No active game. Start one first.")
        return session

    def _claim_session(self, uid: str) -> GameSession:
        """Remove the open session from the registry; only one caller gets it."""
        with self._lock:
            session = self._open_session(uid)
            del self._sessions[uid]
            return session

    def _restore_session(self, uid: str, session: GameSession) -> None:
        with self._lock:
            self._sessions.setdefault(uid, session)

    def _load_progress(self, uid: str) -> PlayerProgress:
        progress = self.store.get(uid)
        sync_level(progress, self.catalog.ladder)
        return progress

    def _update_progress(self, uid: str, mutator: Callable[[PlayerProgress], T]):
        def run(progress: PlayerProgress) -> T:
            sync_level(progress, self.catalog.ladder)
            return mutator(progress)
        return self.store.update(uid, run)

    def _progression_block(self, progress) -> Dict[str, Any]:
        summary = level_summary(progress, self.catalog.ladder)
        return {
            "total_xp": progress.total_xp,
            "level": progress.current_level,
            "tickets": progress.ticket_balance,
            "next_level": summary["next_level"],
            "progress": summary["progress"],
        }

    # ------------------------------------------------------------------
    # profile & catalog
    # ------------------------------------------------------------------
    def get_profile(self, uid: str) -> Dict[str, Any]:
        """
        Player's progression snapshot.

        Response:
        {
            "ok": true,
            "total_xp": 175, "level": 2, "tickets": 4,
            "level_description": "Basic investor skills",
            "next_level": {"level": 3, "xp_required": 250, "xp_needed": 75, "tickets": 2},
            "progress": 0.5,
            ...
        }
        """
        progress = self._load_progress(uid)
        summary = level_summary(progress, self.catalog.ladder)
        return {
            "ok": True,
            "total_xp": progress.total_xp,
            "level": progress.current_level,
            "tickets": progress.ticket_balance,
            "level_description": summary["description"],
            "next_level": summary["next_level"],
            "progress": summary["progress"],
            "max_level": summary["max_level"],
            "games_played": progress.games_played,
            "high_scores": dict(progress.high_scores),
            "metric_scores": dict(progress.metric_scores),
            "acquired_rewards": sorted(progress.acquired),
            "has_active_session": uid in self._sessions and self._sessions[uid].status.is_open,
        }

    def get_levels(self) -> Dict[str, Any]:
        return {"ok": True, "levels": self.catalog.ladder.to_list()}

    def list_rewards(self, uid: str) -> Dict[str, Any]:
        progress = self._load_progress(uid)
        return {
            "ok": True,
            "tickets": progress.ticket_balance,
            "rewards": [v.to_dict() for v in rewards.list_rewards(self.catalog.rewards, progress)],
        }

    @_game_errors_as_dict
    def purchase(self, uid: str, reward_id: str) -> Dict[str, Any]:
        progress, view = self._update_progress(
            uid, lambda p: rewards.purchase(self.catalog.rewards, reward_id, p)
        )
        return {"ok": True, "reward": view.to_dict(), "tickets": progress.ticket_balance}

    # ------------------------------------------------------------------
    # sessions
    # ------------------------------------------------------------------
    def _begin(self, uid: str, mode: GameMode, content) -> Dict[str, Any]:
        with self._lock:
            session = self.controller.start(mode, content, self._sessions.get(uid))
            self._sessions[uid] = session

        return {
            "ok": True,
            "session": session.to_dict(),
            "time_limit": session.time_limit,
            "current": public_item(session.current),
        }

    @_game_errors_as_dict
    def start_game(self, uid: str, mode: str, limit: Optional[int] = None) -> Dict[str, Any]:
        game_mode = coerce_mode(mode)
        content = self.catalog.content_for(game_mode, limit=limit, rng=self.rng)
        return self._begin(uid, game_mode, content)

    @_game_errors_as_dict
    def start_market_game(
        self,
        uid: str,
        symbol: str,
        industry_averages: Optional[Mapping[str, Any]] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Market Adventure round built from live financials for one ticker.

        Questions compare the company's basic financials with
        `industry_averages` (finnhub metric key -> value), falling back to
        DEFAULT_INDUSTRY_AVERAGES.
        """
        if self.market_data is None:
            raise MarketDataUnavailable("Market data is not configured.")

        result = questions_for_symbol(self.market_data, symbol, industry_averages or DEFAULT_INDUSTRY_AVERAGES)
        if not result.ok:
            raise MarketDataUnavailable(result.error or f"No market data for {symbol}.", symbol=symbol.upper())

        questions = list(result.data)
        self.rng.shuffle(questions)
        if limit:
            questions = questions[:limit]
        return self._begin(uid, GameMode.MARKET_ADVENTURE, questions)

    @_game_errors_as_dict
    def submit(self, uid: str, response: Any) -> Dict[str, Any]:
        session = self._open_session(uid)
        result = self.controller.advance(session, response)
        return {
            "ok": True,
            "result": result,
            "session": session.to_dict(),
            "current": public_item(session.current),
        }

    @_game_errors_as_dict
    def finish_game(self, uid: str) -> Dict[str, Any]:
        session = self._claim_session(uid)
        try:
            progress, outcome = self._update_progress(uid, lambda p: self.controller.settle(session, p))
        except Exception:
            # nothing committed; the player can keep playing or retry
            self._restore_session(uid, session)
            raise
        self.controller.mark_finished(session)

        out = {"ok": True}
        out.update(outcome.to_dict())
        out["progression"] = self._progression_block(progress)
        return out

    @_game_errors_as_dict
    def abandon_game(self, uid: str) -> Dict[str, Any]:
        session = self._claim_session(uid)
        self.controller.abandon(session)
        return {"ok": True, "abandoned": session.id}

    def get_state(self, uid: str) -> Dict[str, Any]:
        session = self._sessions.get(uid)
        if session is None or not session.status.is_open:
            return {"ok": True, "has_active_session": False}
        return {
            "ok": True,
            "has_active_session": True,
            "session": session.to_dict(),
            "current": public_item(session.current),
            "time_expired": self.controller.time_expired(session),
        }
