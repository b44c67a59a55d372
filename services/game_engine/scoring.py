# services/game_engine/scoring.py
"""
Mode-specific scoring rules: session score vector -> XP and tickets.

Rules are plain functions looked up through SCORING_RULES ({mode: fn}); the
session controller accepts a replacement mapping, so these are defaults,
not hard-wired behaviour.
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Callable, Dict

from .models import GameMode, SessionReward

if TYPE_CHECKING:
    from .session import GameSession

# ============================================================================
# Config
# ============================================================================
XP_PER_CORRECT_ANSWER = 10
XP_PER_COMPLETED_GAME = 50
XP_PER_DECISION = 10
TICKETS_PER_10_CORRECT = 1
TICKETS_PER_DECISION_ROUND = 2
INSIGHT_POINTS_PER_TICKET = 100
INVESTOR_POINTS_PER_TICKET = 20
MACRO_POINTS_PER_TICKET = 50
MACRO_POINTS_PER_XP = 5

ScoringRule = Callable[["GameSession"], SessionReward]


def _positive_total(session: "GameSession") -> float:
    return max(0.0, sum(session.score.values()))


# ============================================================================
# Question-driven modes
# ============================================================================

def score_time_attack(session: "GameSession") -> SessionReward:
    """+10 XP per correct answer, +50 for finishing, 1 ticket per 10 correct."""
    correct = int(session.score.get("correct", 0))
    return SessionReward(
        xp=XP_PER_COMPLETED_GAME + correct * XP_PER_CORRECT_ANSWER,
        tickets=(correct // 10) * TICKETS_PER_10_CORRECT,
        final_score=float(correct),
    )


def score_market_adventure(session: "GameSession") -> SessionReward:
    correct = int(session.score.get("correct", 0))
    insight = session.score.get("insight", 0.0)
    return SessionReward(
        xp=XP_PER_COMPLETED_GAME + correct * XP_PER_CORRECT_ANSWER,
        tickets=int(insight // INSIGHT_POINTS_PER_TICKET),
        final_score=insight,
    )


# ============================================================================
# Decision-driven modes
# ============================================================================

def score_board_room(session: "GameSession") -> SessionReward:
    decisions = session.resolved_count
    return SessionReward(
        xp=XP_PER_COMPLETED_GAME + decisions * XP_PER_DECISION,
        tickets=TICKETS_PER_DECISION_ROUND,
        final_score=round(sum(session.score.values()), 2),
    )


def score_investor_simulator(session: "GameSession") -> SessionReward:
    points = _positive_total(session)
    return SessionReward(
        xp=XP_PER_COMPLETED_GAME + int(points),
        tickets=int(points // INVESTOR_POINTS_PER_TICKET),
        final_score=round(sum(session.score.values()), 2),
    )


def score_macro_mastermind(session: "GameSession") -> SessionReward:
    points = _positive_total(session)
    return SessionReward(
        xp=XP_PER_COMPLETED_GAME + int(points // MACRO_POINTS_PER_XP),
        tickets=int(points // MACRO_POINTS_PER_TICKET),
        final_score=round(sum(session.score.values()), 2),
    )


SCORING_RULES: Dict[GameMode, ScoringRule] = {
    GameMode.TIME_ATTACK: score_time_attack,
    GameMode.MARKET_ADVENTURE: score_market_adventure,
    GameMode.BOARD_ROOM: score_board_room,
    GameMode.INVESTOR_SIMULATOR: score_investor_simulator,
    GameMode.MACRO_MASTERMIND: score_macro_mastermind,
}
