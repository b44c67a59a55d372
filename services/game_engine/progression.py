# services/game_engine/progression.py
"""
Level progression driven by a fixed XP threshold ladder.

Default ladder:
- Level 1 (0 XP)     - Starting level
- Level 2 (100 XP)   - Basic investor skills, +1 ticket
- Level 3 (250 XP)   - Intermediate knowledge, +2 tickets
- Level 4 (500 XP)   - Advanced understanding, +3 tickets
- Level 5 (1,000 XP) - Expert analyst, +5 tickets

The ladder is capped at its last entry; XP keeps accumulating past it but
the level does not extrapolate.
"""

from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional
import bisect
import logging

from .errors import CatalogError, InvalidAmount
from .models import LevelRequirement, LevelUp, PlayerProgress

logger = logging.getLogger(__name__)


# ============================================================================
# Ladder
# ============================================================================

class Ladder:
    """Validated, ordered list of LevelRequirement rows."""

    def __init__(self, requirements: Iterable[LevelRequirement]):
        rows = list(requirements)
        _validate_ladder(rows)
        self._rows = tuple(rows)
        self._thresholds = [r.xp_required for r in rows]

    def __iter__(self):
        return iter(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    @property
    def max_level(self) -> int:
        return self._rows[-1].level

    def requirement(self, level: int) -> LevelRequirement:
        if level < 1 or level > self.max_level:
            raise KeyError(level)
        return self._rows[level - 1]

    def level_for_xp(self, xp: int) -> int:
        """Greatest ladder level whose threshold is <= xp."""
        if xp <= 0:
            return 1
        idx = bisect.bisect_right(self._thresholds, xp) - 1
        return self._rows[max(0, idx)].level

    def to_list(self) -> List[Dict[str, Any]]:
        return [
            {
                "level": r.level,
                "xp_required": r.xp_required,
                "rewards": {"tickets": r.rewards.tickets, "description": r.rewards.description},
            }
            for r in self._rows
        ]


def _validate_ladder(rows: List[LevelRequirement]) -> None:
    if not rows:
        raise CatalogError("Level ladder is empty.")

    first = rows[0]
    if first.level != 1 or first.xp_required != 0:
        raise CatalogError(
            f"Ladder must start at level 1 with 0 XP, got level {first.level} at {first.xp_required} XP."
        )

    for prev, cur in zip(rows, rows[1:]):
        if cur.level != prev.level + 1:
            raise CatalogError(f"Ladder levels must be consecutive: {prev.level} -> {cur.level}.")
        if cur.xp_required <= prev.xp_required:
            raise CatalogError(
                f"Ladder XP must strictly increase: level {cur.level} needs {cur.xp_required} "
                f"but level {prev.level} already needs {prev.xp_required}."
            )

    for r in rows:
        if r.rewards.tickets < 0:
            raise CatalogError(f"Level {r.level} grants negative tickets.")


# ============================================================================
# Public API
# ============================================================================

def _validate_amount(amount: Any) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmount(f"XP amount must be a whole number, got {amount!r}.")
    if amount < 0:
        raise InvalidAmount(f"XP amount must not be negative, got {amount}.")
    return amount


def add_xp(progress: PlayerProgress, amount: int, ladder: Ladder) -> List[LevelUp]:
    """
    Award XP and move the level up the ladder.

    Every level crossed by this single award emits its own LevelUp, in
    ascending order, so a big jump still grants the intermediate rewards.
    Ticket grants are reported, not credited; the caller owns the wallet.
    """
    amount = _validate_amount(amount)

    old_level = progress.current_level
    total = progress.total_xp + amount
    new_level = max(old_level, ladder.level_for_xp(total))

    events: List[LevelUp] = []
    for level in range(old_level + 1, new_level + 1):
        req = ladder.requirement(level)
        events.append(LevelUp(level=level, tickets=req.rewards.tickets, description=req.rewards.description))

    progress.total_xp = total
    progress.current_level = new_level

    if events:
        logger.info("[progression] level %s -> %s (+%s XP)", old_level, new_level, amount)
    return events


def sync_level(progress: PlayerProgress, ladder: Ladder) -> int:
    """Recompute the stored level from total XP on the current ladder."""
    level = ladder.level_for_xp(progress.total_xp)
    if level != progress.current_level:
        logger.info("[progression] stored level %s realigned to %s", progress.current_level, level)
        progress.current_level = level
    return level


def level_summary(progress: PlayerProgress, ladder: Ladder) -> Dict[str, Any]:
    """
    Current level and progress toward the next one.

    Returns:
    {
        "level": 2,
        "total_xp": 175,
        "description": "Basic investor skills",
        "next_level": {"level": 3, "xp_required": 250, "xp_needed": 75} or None,
        "progress": 0.5,       # 0.0 to 1.0 within the current level
        "max_level": False
    }
    """
    level = progress.current_level
    current = ladder.requirement(level)
    next_req: Optional[LevelRequirement] = None
    if level < ladder.max_level:
        next_req = ladder.requirement(level + 1)

    if next_req:
        span = next_req.xp_required - current.xp_required
        frac = (progress.total_xp - current.xp_required) / span if span > 0 else 1.0
        next_level = {
            "level": next_req.level,
            "xp_required": next_req.xp_required,
            "xp_needed": max(0, next_req.xp_required - progress.total_xp),
            "tickets": next_req.rewards.tickets,
        }
    else:
        frac = 1.0
        next_level = None

    return {
        "level": level,
        "total_xp": progress.total_xp,
        "description": current.rewards.description,
        "next_level": next_level,
        "progress": round(min(1.0, max(0.0, frac)), 3),
        "max_level": next_req is None,
    }
