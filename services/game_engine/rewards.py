# services/game_engine/rewards.py
"""
Reward catalog and ticket wallet.

Purchasing is all-or-nothing: every check runs before the wallet or the
acquired set is touched, and the debit and unlock then happen together.
Acquired rewards are never refunded or revoked.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional
import logging

from .errors import AlreadyAcquired, CatalogError, InsufficientTickets, InvalidAmount, UnknownReward
from .models import PlayerProgress, Reward, RewardKind, RewardState

logger = logging.getLogger(__name__)


class RewardCatalog:
    """Immutable, validated reward list keyed by id (insertion order kept)."""

    def __init__(self, rewards: Iterable[Reward]):
        items: Dict[str, Reward] = {}
        for r in rewards:
            if r.id in items:
                raise CatalogError(f"Duplicate reward id {r.id!r}.")
            if r.ticket_cost < 0:
                raise CatalogError(f"Reward {r.id!r} has a negative ticket cost.")
            if not isinstance(r.kind, RewardKind):
                raise CatalogError(f"Reward {r.id!r} has unknown kind {r.kind!r}.")
            items[r.id] = r
        self._items = items

    def __contains__(self, reward_id: str) -> bool:
        return reward_id in self._items

    def __iter__(self):
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def get(self, reward_id: str) -> Optional[Reward]:
        return self._items.get(reward_id)


@dataclass(frozen=True)
class RewardView:
    reward: Reward
    state: RewardState
    affordable: bool

    @property
    def acquired(self) -> bool:
        return self.state.acquired

    def to_dict(self) -> Dict[str, Any]:
        r = self.reward
        return {
            "id": r.id,
            "name": r.name,
            "description": r.description,
            "ticket_cost": r.ticket_cost,
            "type": r.kind.value,
            "icon": r.icon,
            "state": self.state.value,
            "acquired": self.acquired,
            "affordable": self.affordable,
        }


# ============================================================================
# Queries
# ============================================================================

def reward_state(reward: Reward, progress: PlayerProgress) -> RewardState:
    return RewardState.UNLOCKED if reward.id in progress.acquired else RewardState.LOCKED


def can_afford(reward: Reward, progress: PlayerProgress) -> bool:
    return progress.ticket_balance >= reward.ticket_cost


def list_rewards(catalog: RewardCatalog, progress: PlayerProgress) -> List[RewardView]:
    return [
        RewardView(reward=r, state=reward_state(r, progress), affordable=can_afford(r, progress))
        for r in catalog
    ]


# ============================================================================
# Mutations
# ============================================================================

def credit_tickets(progress: PlayerProgress, amount: int) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        raise InvalidAmount(f"Ticket credit must be a non-negative whole number, got {amount!r}.")
    progress.ticket_balance += amount
    return progress.ticket_balance


def purchase(catalog: RewardCatalog, reward_id: str, progress: PlayerProgress) -> RewardView:
    reward = catalog.get(reward_id)
    if reward is None:
        raise UnknownReward(f"Reward {reward_id!r} does not exist.", reward_id=reward_id)

    state = reward_state(reward, progress)
    if state.acquired:
        raise AlreadyAcquired(f"{reward.name} is already unlocked.", reward_id=reward_id)

    if not can_afford(reward, progress):
        raise InsufficientTickets(
            f"You need {reward.ticket_cost} tickets, but only have {progress.ticket_balance}.",
            reward_id=reward_id,
            ticket_cost=reward.ticket_cost,
            ticket_balance=progress.ticket_balance,
        )

    # both effects below cannot fail
    progress.ticket_balance -= reward.ticket_cost
    progress.acquired.add(reward.id)
    state = state.unlock()

    logger.info("[rewards] unlocked %s for %s tickets", reward.id, reward.ticket_cost)
    return RewardView(reward=reward, state=state, affordable=can_afford(reward, progress))
