# services/game_engine/models.py
"""
Domain types shared by the game engine.

Catalog entries (questions, decisions, ladder rows, rewards) are frozen and
never mutated by a session. PlayerProgress and GameSession are the only
mutable aggregates.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple, Union

MetricRaw = Union[str, int, float]


# ============================================================================
# Enums
# ============================================================================

class GameMode(str, Enum):
    BOARD_ROOM = "board_room"
    INVESTOR_SIMULATOR = "investor_simulator"
    MACRO_MASTERMIND = "macro_mastermind"
    MARKET_ADVENTURE = "market_adventure"
    TIME_ATTACK = "time_attack"

    @property
    def uses_questions(self) -> bool:
        return self in (GameMode.TIME_ATTACK, GameMode.MARKET_ADVENTURE)

    @property
    def uses_decisions(self) -> bool:
        return not self.uses_questions


class Guess(str, Enum):
    GOOD = "good"
    BAD = "bad"

    @property
    def is_good(self) -> bool:
        return self is Guess.GOOD


class RewardKind(str, Enum):
    BADGE = "badge"
    THEME = "theme"
    UNLOCK = "unlock"


class RewardState(str, Enum):
    """Two-state acquisition variant. There is no way back to LOCKED."""

    LOCKED = "locked"
    UNLOCKED = "unlocked"

    def unlock(self) -> "RewardState":
        return RewardState.UNLOCKED

    @property
    def acquired(self) -> bool:
        return self is RewardState.UNLOCKED


class ImpactCategory(str, Enum):
    GROWTH = "Growth"
    STABILITY = "Stability"
    MOMENTUM = "Momentum"
    VALUE = "Value"


class SessionStatus(str, Enum):
    ACTIVE = "active"
    COMPLETE = "complete"      # content exhausted or timed out, not yet scored
    FINISHED = "finished"      # scored and committed
    ABANDONED = "abandoned"

    @property
    def is_open(self) -> bool:
        return self in (SessionStatus.ACTIVE, SessionStatus.COMPLETE)


# ============================================================================
# Content
# ============================================================================

@dataclass(frozen=True)
class MetricQuestion:
    metric: str
    company_value: MetricRaw
    industry_average: MetricRaw
    is_good: bool
    explanation: str
    id: Optional[str] = None


@dataclass(frozen=True)
class Impact:
    metric: str
    change: float
    category: Optional[ImpactCategory] = None


@dataclass(frozen=True)
class Option:
    id: str
    text: str
    impacts: Tuple[Impact, ...]
    explanation: Optional[str] = None


@dataclass(frozen=True)
class Decision:
    id: str
    title: str
    description: str
    options: Tuple[Option, ...]

    def option(self, option_id: str) -> Optional[Option]:
        for opt in self.options:
            if opt.id == option_id:
                return opt
        return None


ContentItem = Union[MetricQuestion, Decision]


# ============================================================================
# Progression & rewards
# ============================================================================

@dataclass(frozen=True)
class LevelReward:
    tickets: int
    description: str


@dataclass(frozen=True)
class LevelRequirement:
    level: int
    xp_required: int
    rewards: LevelReward


@dataclass(frozen=True)
class LevelUp:
    level: int
    tickets: int
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {"level": self.level, "tickets": self.tickets, "description": self.description}


@dataclass(frozen=True)
class Reward:
    id: str
    name: str
    description: str
    ticket_cost: int
    kind: RewardKind
    icon: Optional[str] = None


@dataclass
class PlayerProgress:
    """Persistent per-player aggregate. Only engine operations mutate it."""

    total_xp: int = 0
    current_level: int = 1
    ticket_balance: int = 0
    acquired: Set[str] = field(default_factory=set)
    metric_scores: Dict[str, float] = field(default_factory=dict)
    games_played: int = 0
    high_scores: Dict[str, float] = field(default_factory=dict)
    version: int = 0

    def copy(self) -> "PlayerProgress":
        return PlayerProgress(
            total_xp=self.total_xp,
            current_level=self.current_level,
            ticket_balance=self.ticket_balance,
            acquired=set(self.acquired),
            metric_scores=dict(self.metric_scores),
            games_played=self.games_played,
            high_scores=dict(self.high_scores),
            version=self.version,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_xp": self.total_xp,
            "level": self.current_level,
            "tickets": self.ticket_balance,
            "acquired_rewards": sorted(self.acquired),
            "metric_scores": dict(self.metric_scores),
            "games_played": self.games_played,
            "high_scores": dict(self.high_scores),
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PlayerProgress":
        data = data or {}
        return cls(
            total_xp=int(data.get("total_xp", 0)),
            current_level=int(data.get("level", 1)),
            ticket_balance=int(data.get("tickets", 0)),
            acquired=set(data.get("acquired_rewards") or []),
            metric_scores={k: float(v) for k, v in (data.get("metric_scores") or {}).items()},
            games_played=int(data.get("games_played", 0)),
            high_scores={k: float(v) for k, v in (data.get("high_scores") or {}).items()},
            version=int(data.get("version", 0)),
        )


# ============================================================================
# Session results
# ============================================================================

@dataclass(frozen=True)
class SessionReward:
    xp: int
    tickets: int
    final_score: float = 0.0


@dataclass
class SessionOutcome:
    mode: GameMode
    xp: int
    tickets: int
    level_ups: List[LevelUp]
    score: Dict[str, float]
    final_score: float
    high_score: bool
    timed_out: bool = False

    @property
    def level_up_tickets(self) -> int:
        return sum(lu.tickets for lu in self.level_ups)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "xp_earned": self.xp,
            "tickets_earned": self.tickets,
            "level_up_tickets": self.level_up_tickets,
            "level_ups": [lu.to_dict() for lu in self.level_ups],
            "level_up": bool(self.level_ups),
            "score": dict(self.score),
            "final_score": self.final_score,
            "new_high_score": self.high_score,
            "timed_out": self.timed_out,
        }
