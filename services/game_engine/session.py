# services/game_engine/session.py
"""
Game session controller: one bounded play-through of a single mode.

Sessions are explicit handles. The controller holds no per-player state;
callers pass the player's currently open session (if any) into start() and
the session object into every later call.

Nothing a session does touches PlayerProgress until finish()/settle();
abandoning a session commits nothing.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union
import logging
import time
import uuid

from . import metrics, progression, rewards
from .decisions import DecisionRound
from .errors import (
    InvalidAmount,
    InvalidContent,
    InvalidOption,
    SessionClosed,
    SessionInProgress,
    SessionNotComplete,
    UnknownMode,
)
from .models import (
    ContentItem,
    Decision,
    GameMode,
    Guess,
    MetricQuestion,
    PlayerProgress,
    SessionOutcome,
    SessionReward,
    SessionStatus,
)
from .scoring import SCORING_RULES, ScoringRule

logger = logging.getLogger(__name__)

# ============================================================================
# Config
# ============================================================================
TIME_ATTACK_LIMIT_SECONDS = 90
MAX_INSIGHT_PER_ANSWER = 100


@dataclass
class GameSession:
    mode: GameMode
    queue: Sequence[ContentItem]
    started_at: float
    time_limit: Optional[float] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    cursor: int = 0
    score: Dict[str, float] = field(default_factory=dict)
    category_scores: Dict[str, float] = field(default_factory=dict)
    results: List[Dict[str, Any]] = field(default_factory=list)
    status: SessionStatus = SessionStatus.ACTIVE
    timed_out: bool = False

    @property
    def remaining(self) -> int:
        return max(0, len(self.queue) - self.cursor)

    @property
    def current(self) -> Optional[ContentItem]:
        if self.status is not SessionStatus.ACTIVE or self.cursor >= len(self.queue):
            return None
        return self.queue[self.cursor]

    @property
    def resolved_count(self) -> int:
        return sum(1 for r in self.results if "option_id" in r)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.id,
            "mode": self.mode.value,
            "status": self.status.value,
            "cursor": self.cursor,
            "total": len(self.queue),
            "remaining": self.remaining,
            "score": dict(self.score),
            "category_scores": dict(self.category_scores),
            "timed_out": self.timed_out,
        }


def coerce_mode(mode: Union[GameMode, str]) -> GameMode:
    if isinstance(mode, GameMode):
        return mode
    try:
        return GameMode(str(mode).strip().lower().replace("-", "_"))
    except ValueError:
        raise UnknownMode(f"Unknown game mode {mode!r}.", mode=str(mode)) from None


class GameSessionController:
    def __init__(
        self,
        ladder: progression.Ladder,
        scoring_rules: Optional[Mapping[GameMode, ScoringRule]] = None,
        time_limits: Optional[Mapping[GameMode, float]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ladder = ladder
        self.scoring_rules = dict(SCORING_RULES)
        if scoring_rules:
            self.scoring_rules.update(scoring_rules)
        self.time_limits = {GameMode.TIME_ATTACK: TIME_ATTACK_LIMIT_SECONDS}
        if time_limits is not None:
            self.time_limits = dict(time_limits)
        self.clock = clock

    # ------------------------------------------------------------------
    # start
    # ------------------------------------------------------------------
    def start(
        self,
        mode: Union[GameMode, str],
        content: Sequence[ContentItem],
        open_session: Optional[GameSession] = None,
    ) -> GameSession:
        if open_session is not None and open_session.status.is_open:
            raise SessionInProgress(
                f"A {open_session.mode.value} session is still open. Finish or abandon it first.",
                session_id=open_session.id,
            )

        mode = coerce_mode(mode)
        queue = tuple(content)
        if not queue:
            raise InvalidContent(f"No content available for {mode.value}.")

        expected = MetricQuestion if mode.uses_questions else Decision
        for item in queue:
            if not isinstance(item, expected):
                raise InvalidContent(f"{mode.value} expects {expected.__name__} content, got {type(item).__name__}.")

        if mode is GameMode.MARKET_ADVENTURE:
            # continuous scoring needs numbers on both sides
            for q in queue:
                metrics.compare_to_industry(q)

        session = GameSession(
            mode=mode,
            queue=queue,
            started_at=self.clock(),
            time_limit=self.time_limits.get(mode),
        )
        logger.info("[session] started %s (%s items) id=%s", mode.value, len(queue), session.id)
        return session

    # ------------------------------------------------------------------
    # advance
    # ------------------------------------------------------------------
    def time_expired(self, session: GameSession) -> bool:
        if session.time_limit is None:
            return False
        return (self.clock() - session.started_at) >= session.time_limit

    def _force_timeout(self, session: GameSession) -> None:
        session.status = SessionStatus.COMPLETE
        session.timed_out = True
        logger.info("[session] %s timed out after %s answers", session.id, session.cursor)

    def advance(self, session: GameSession, response: Union[Guess, bool, str]) -> Dict[str, Any]:
        """
        Feed one response (guess or option id) into the session.

        Returns a per-interaction record plus "complete"/"timed_out"/"remaining".
        """
        if session.status is not SessionStatus.ACTIVE:
            raise SessionClosed(f"Session {session.id} is {session.status.value}.")

        if self.time_expired(session):
            self._force_timeout(session)
            return {"accepted": False, "complete": True, "timed_out": True, "remaining": session.remaining}

        item = session.queue[session.cursor]
        if isinstance(item, MetricQuestion):
            record = self._answer_question(session, item, response)
        else:
            if not isinstance(response, str):
                raise InvalidOption(f"Decision responses must be option ids, got {response!r}.")
            record = self._resolve_decision(session, item, response)

        record["index"] = session.cursor
        session.results.append(record)
        session.cursor += 1
        if session.cursor >= len(session.queue):
            session.status = SessionStatus.COMPLETE

        out = dict(record)
        out.update({
            "accepted": True,
            "complete": session.status is SessionStatus.COMPLETE,
            "timed_out": False,
            "remaining": session.remaining,
        })
        return out

    def _answer_question(self, session: GameSession, q: MetricQuestion, response: Any) -> Dict[str, Any]:
        result = metrics.evaluate_guess(q, response)
        insight = 0.0
        if session.mode is GameMode.MARKET_ADVENTURE and result.correct:
            gap = metrics.compare_to_industry(q).relative_gap
            insight = float(round(MAX_INSIGHT_PER_ANSWER * min(1.0, gap)))

        key = "correct" if result.correct else "incorrect"
        session.score[key] = session.score.get(key, 0) + 1
        if session.mode is GameMode.MARKET_ADVENTURE:
            session.score["insight"] = session.score.get("insight", 0.0) + insight

        return {
            "question_id": q.id,
            "metric": q.metric,
            "correct": result.correct,
            "is_good": q.is_good,
            "explanation": result.explanation,
            "insight": insight,
        }

    def _resolve_decision(self, session: GameSession, d: Decision, option_id: str) -> Dict[str, Any]:
        rnd = DecisionRound(d)
        batch = rnd.select_option(option_id)
        rnd.resolve(session.score, session.category_scores)
        option = d.option(batch.option_id)
        record = batch.to_dict()
        record["explanation"] = option.explanation if option else None
        return record

    # ------------------------------------------------------------------
    # finish / abandon
    # ------------------------------------------------------------------
    def score(self, session: GameSession) -> SessionReward:
        if not session.status.is_open:
            raise SessionClosed(f"Session {session.id} is {session.status.value}.")

        if session.status is SessionStatus.ACTIVE:
            if self.time_expired(session):
                self._force_timeout(session)
            else:
                raise SessionNotComplete(
                    f"{session.remaining} of {len(session.queue)} items still to play.",
                    remaining=session.remaining,
                )

        reward = self.scoring_rules[session.mode](session)
        for name, value in (("xp", reward.xp), ("tickets", reward.tickets)):
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidAmount(f"Scoring rule for {session.mode.value} produced invalid {name}: {value!r}.")
        return reward

    def settle(self, session: GameSession, progress: PlayerProgress) -> SessionOutcome:
        """
        Apply the session's results to progress without closing the session.

        Safe to re-run against a fresh progress snapshot (e.g. inside a
        retried Firestore transaction).
        """
        reward = self.score(session)

        level_ups = progression.add_xp(progress, reward.xp, self.ladder)
        rewards.credit_tickets(progress, reward.tickets + sum(lu.tickets for lu in level_ups))

        if session.mode.uses_decisions:
            for metric, delta in session.score.items():
                progress.metric_scores[metric] = progress.metric_scores.get(metric, 0.0) + delta

        progress.games_played += 1
        best = progress.high_scores.get(session.mode.value)
        high_score = best is None or reward.final_score > best
        if high_score:
            progress.high_scores[session.mode.value] = reward.final_score

        return SessionOutcome(
            mode=session.mode,
            xp=reward.xp,
            tickets=reward.tickets,
            level_ups=level_ups,
            score=dict(session.score),
            final_score=reward.final_score,
            high_score=high_score,
            timed_out=session.timed_out,
        )

    def mark_finished(self, session: GameSession) -> None:
        session.status = SessionStatus.FINISHED
        logger.info("[session] finished %s id=%s", session.mode.value, session.id)

    def finish(self, session: GameSession, progress: PlayerProgress) -> SessionOutcome:
        outcome = self.settle(session, progress)
        self.mark_finished(session)
        return outcome

    def abandon(self, session: GameSession) -> None:
        if not session.status.is_open:
            raise SessionClosed(f"Session {session.id} is {session.status.value}.")
        session.status = SessionStatus.ABANDONED
        logger.info("[session] abandoned %s id=%s at %s/%s", session.mode.value, session.id, session.cursor, len(session.queue))
