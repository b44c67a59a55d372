# services/game_engine/store.py
"""
Player progress persistence with single-writer-per-player updates.

Every mutating engine call (XP award, purchase, session settlement) goes
through ProgressStore.update(uid, mutator): the mutator receives a working
copy of the player's progress and either returns normally (copy committed,
version bumped) or raises (nothing committed).

- InMemoryProgressStore: per-player lock, used for dev and tests.
- FirestoreProgressStore: @firestore.transactional read-modify-write on
  users/{uid}/profile/game_progress (Firestore retries on contention, so
  mutators must be safe to re-run against a fresh snapshot).
"""

from __future__ import annotations
from collections import defaultdict
from typing import Any, Callable, Dict, Optional, Tuple, TypeVar
import logging
import threading

from .models import PlayerProgress

logger = logging.getLogger(__name__)

T = TypeVar("T")
Mutator = Callable[[PlayerProgress], T]


class ProgressStore:
    def get(self, uid: str) -> PlayerProgress:
        raise NotImplementedError

    def update(self, uid: str, mutator: Mutator) -> Tuple[PlayerProgress, Any]:
        raise NotImplementedError


# ============================================================================
# In-memory
# ============================================================================

class InMemoryProgressStore(ProgressStore):
    def __init__(self):
        self._records: Dict[str, PlayerProgress] = {}
        self._locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._guard = threading.Lock()

    def _lock_for(self, uid: str) -> threading.Lock:
        with self._guard:
            return self._locks[uid]

    def get(self, uid: str) -> PlayerProgress:
        with self._lock_for(uid):
            rec = self._records.get(uid)
            return rec.copy() if rec else PlayerProgress()

    def update(self, uid: str, mutator: Mutator) -> Tuple[PlayerProgress, Any]:
        with self._lock_for(uid):
            current = self._records.get(uid) or PlayerProgress()
            working = current.copy()
            result = mutator(working)
            working.version = current.version + 1
            self._records[uid] = working
            return working.copy(), result


# ============================================================================
# Firestore
# ============================================================================

class FirestoreProgressStore(ProgressStore):
    def __init__(self, db=None):
        self._db = db

    @property
    def db(self):
        if self._db is None:
            from services.firebase import get_db
            self._db = get_db()
        return self._db

    def _progress_ref(self, uid: str):
        """Reference to user's game progress document"""
        return self.db.collection("users").document(uid).collection("profile").document("game_progress")

    def get(self, uid: str) -> PlayerProgress:
        snap = self._progress_ref(uid).get()
        return PlayerProgress.from_dict(snap.to_dict() if snap.exists else None)

    def update(self, uid: str, mutator: Mutator) -> Tuple[PlayerProgress, Any]:
        from firebase_admin import firestore

        ref = self._progress_ref(uid)

        # Use transaction for atomic read-modify-write
        @firestore.transactional
        def update_progress(transaction):
            snap = ref.get(transaction=transaction)
            progress = PlayerProgress.from_dict(snap.to_dict() if snap.exists else None)
            result = mutator(progress)
            progress.version += 1

            data = progress.to_dict()
            data["updatedAt"] = firestore.SERVER_TIMESTAMP
            transaction.set(ref, data, merge=True)
            return progress, result

        transaction = self.db.transaction()
        return update_progress(transaction)


def build_store(kind: Optional[str]) -> ProgressStore:
    kind = (kind or "memory").strip().lower()
    if kind == "firestore":
        logger.info("[store] using Firestore progress store")
        return FirestoreProgressStore()
    if kind != "memory":
        raise ValueError(f"Unknown PROGRESS_STORE {kind!r} (expected 'memory' or 'firestore').")
    logger.info("[store] using in-memory progress store")
    return InMemoryProgressStore()
