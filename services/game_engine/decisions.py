# services/game_engine/decisions.py
"""
Decision engine: resolve one branching decision into an impact batch.

Lifecycle of a decision instance:
    PRESENTED -> OPTION_SELECTED -> RESOLVED (terminal)

An impact batch is the complete set of (metric, delta) pairs produced by one
option. Duplicate metric names inside an option are summed before the batch
is applied, and the batch lands on the caller's score vector in one step.
The decision itself is never mutated.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, MutableMapping, Optional
import logging
import math

from .errors import InvalidOption
from .models import Decision, ImpactCategory

logger = logging.getLogger(__name__)

CATEGORY_MIN = 0.0
CATEGORY_MAX = 100.0
CATEGORY_DAMPING = 2  # category scores move half as much as the metric
CATEGORY_BASELINE = 50.0


class DecisionState(str, Enum):
    PRESENTED = "presented"
    OPTION_SELECTED = "option_selected"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class ImpactBatch:
    decision_id: str
    option_id: str
    deltas: Mapping[str, float]
    category_deltas: Mapping[str, float]

    def to_dict(self) -> Dict[str, object]:
        return {
            "decision_id": self.decision_id,
            "option_id": self.option_id,
            "impacts": dict(self.deltas),
            "category_impacts": dict(self.category_deltas),
        }


def _round_half_up(x: float) -> float:
    return float(math.floor(x + 0.5))


# ============================================================================
# Batch building & application
# ============================================================================

def build_impact_batch(decision: Decision, option_id: str) -> ImpactBatch:
    option = decision.option(option_id)
    if option is None:
        raise InvalidOption(
            f"Option {option_id!r} is not available for decision {decision.id!r}.",
            decision_id=decision.id,
            option_id=option_id,
        )

    deltas: Dict[str, float] = {}
    category_deltas: Dict[str, float] = {}
    for impact in option.impacts:
        deltas[impact.metric] = deltas.get(impact.metric, 0.0) + float(impact.change)
        if impact.category is not None:
            cat = ImpactCategory(impact.category).value
            category_deltas[cat] = category_deltas.get(cat, 0.0) + _round_half_up(impact.change / CATEGORY_DAMPING)

    return ImpactBatch(
        decision_id=decision.id,
        option_id=option.id,
        deltas=deltas,
        category_deltas=category_deltas,
    )


def apply_impact_batch(
    scores: MutableMapping[str, float],
    batch: ImpactBatch,
    category_scores: Optional[MutableMapping[str, float]] = None,
) -> None:
    """Apply every delta of the batch in one update; untouched metrics stay as they are."""
    updated = {metric: scores.get(metric, 0.0) + delta for metric, delta in batch.deltas.items()}
    scores.update(updated)

    if category_scores is not None and batch.category_deltas:
        cats = {
            cat: min(CATEGORY_MAX, max(CATEGORY_MIN, category_scores.get(cat, CATEGORY_BASELINE) + delta))
            for cat, delta in batch.category_deltas.items()
        }
        category_scores.update(cats)


# ============================================================================
# Decision instance
# ============================================================================

class DecisionRound:
    """One presented decision. Resolving it twice never applies twice."""

    def __init__(self, decision: Decision):
        self.decision = decision
        self.state = DecisionState.PRESENTED
        self._batch: Optional[ImpactBatch] = None

    @property
    def batch(self) -> Optional[ImpactBatch]:
        return self._batch

    def select_option(self, option_id: str) -> ImpactBatch:
        if self.state is DecisionState.RESOLVED:
            # idempotent replay
            return self._batch  # type: ignore[return-value]

        batch = build_impact_batch(self.decision, option_id)
        self._batch = batch
        self.state = DecisionState.OPTION_SELECTED
        return batch

    def resolve(
        self,
        scores: MutableMapping[str, float],
        category_scores: Optional[MutableMapping[str, float]] = None,
    ) -> ImpactBatch:
        if self.state is DecisionState.RESOLVED:
            return self._batch  # type: ignore[return-value]
        if self.state is not DecisionState.OPTION_SELECTED or self._batch is None:
            raise InvalidOption(f"No option selected for decision {self.decision.id!r}.")

        apply_impact_batch(scores, self._batch, category_scores)
        self.state = DecisionState.RESOLVED
        logger.debug("[decision] %s resolved with %s", self.decision.id, self._batch.option_id)
        return self._batch


def select_option(
    decision: Decision,
    option_id: str,
    scores: MutableMapping[str, float],
    category_scores: Optional[MutableMapping[str, float]] = None,
) -> ImpactBatch:
    """Select and resolve in one call on a fresh decision instance."""
    rnd = DecisionRound(decision)
    rnd.select_option(option_id)
    return rnd.resolve(scores, category_scores)
