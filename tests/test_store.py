import threading

import pytest
from firebase_admin import firestore

from services.game_engine import rewards
from services.game_engine.errors import InsufficientTickets
from services.game_engine.models import PlayerProgress
from services.game_engine.store import (
    FirestoreProgressStore,
    InMemoryProgressStore,
    build_store,
)


def test_unknown_player_gets_fresh_progress():
    progress = InMemoryProgressStore().get("nobody")
    assert progress == PlayerProgress()


def test_update_commits_and_bumps_version():
    store = InMemoryProgressStore()
    progress, balance = store.update("u1", lambda p: rewards.credit_tickets(p, 30))

    assert balance == 30
    assert progress.version == 1
    assert store.get("u1").ticket_balance == 30

    # returned snapshot is a copy
    progress.ticket_balance = 999
    assert store.get("u1").ticket_balance == 30


def test_failed_mutator_commits_nothing():
    store = InMemoryProgressStore()
    store.update("u1", lambda p: rewards.credit_tickets(p, 30))

    def credit_then_fail(p):
        rewards.credit_tickets(p, 5)
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        store.update("u1", credit_then_fail)

    progress = store.get("u1")
    assert progress.ticket_balance == 30
    assert progress.version == 1


def test_rejected_purchase_leaves_record_untouched(catalog):
    store = InMemoryProgressStore()
    store.update("u1", lambda p: rewards.credit_tickets(p, 3))

    with pytest.raises(InsufficientTickets):
        store.update("u1", lambda p: rewards.purchase(catalog.rewards, "premium_badge", p))

    progress = store.get("u1")
    assert progress.ticket_balance == 3
    assert progress.acquired == set()


def test_progress_round_trips_through_dict():
    progress = PlayerProgress(
        total_xp=270,
        current_level=3,
        ticket_balance=4,
        acquired={"dark_theme"},
        metric_scores={"Revenue": 8.0},
        games_played=2,
        high_scores={"time_attack": 7.0},
        version=5,
    )
    assert PlayerProgress.from_dict(progress.to_dict()) == progress
    assert PlayerProgress.from_dict(None) == PlayerProgress()


class FakeSnapshot:
    def __init__(self, data):
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return self._data


class FakeRef:
    def __init__(self, path=(), data=None):
        self.path = path
        self.data = data

    def collection(self, name):
        return FakeRef(self.path + (name,), self.data)

    def document(self, name):
        return FakeRef(self.path + (name,), self.data)

    def get(self, transaction=None):
        return FakeSnapshot(self.data)


def test_firestore_store_reads_progress_document():
    db = FakeRef(data={"total_xp": 120, "level": 2, "tickets": 1, "acquired_rewards": ["premium_badge"]})
    store = FirestoreProgressStore(db=db)

    assert store._progress_ref("u1").path == ("users", "u1", "profile", "game_progress")
    progress = store.get("u1")
    assert progress.total_xp == 120
    assert progress.current_level == 2
    assert progress.acquired == {"premium_badge"}


def test_firestore_store_missing_document():
    store = FirestoreProgressStore(db=FakeRef(data=None))
    assert store.get("u1") == PlayerProgress()


def test_build_store():
    assert isinstance(build_store(None), InMemoryProgressStore)
    assert isinstance(build_store(" Memory "), InMemoryProgressStore)
    # the Firestore client is only created on first use
    assert isinstance(build_store("firestore"), FirestoreProgressStore)
    with pytest.raises(ValueError):
        build_store("redis")


def test_concurrent_updates_serialize_per_player():
    store = InMemoryProgressStore()

    def credit_many():
        for _ in range(25):
            store.update("u1", lambda p: rewards.credit_tickets(p, 1))

    workers = [threading.Thread(target=credit_many) for _ in range(8)]
    for w in workers:
        w.start()
    for w in workers:
        w.join()

    progress = store.get("u1")
    assert progress.ticket_balance == 200
    assert progress.version == 200


class FakeTransaction:
    def __init__(self):
        self.writes = []

    def set(self, ref, data, merge=False):
        self.writes.append((ref.path, data, merge))


class FakeDb(FakeRef):
    def __init__(self, data=None):
        super().__init__(data=data)
        self.txn = FakeTransaction()

    def transaction(self):
        return self.txn


@pytest.fixture
def firestore_db(monkeypatch):
    # run the transactional body directly against the fake transaction
    monkeypatch.setattr(firestore, "transactional", lambda fn: fn)
    return FakeDb(data={"total_xp": 40, "level": 1, "tickets": 2, "version": 7})


def test_firestore_update_writes_progress_and_timestamp(firestore_db):
    store = FirestoreProgressStore(db=firestore_db)

    progress, balance = store.update("u1", lambda p: rewards.credit_tickets(p, 3))

    assert balance == 5
    assert progress.ticket_balance == 5
    assert progress.version == 8

    [(path, data, merge)] = firestore_db.txn.writes
    assert path == ("users", "u1", "profile", "game_progress")
    assert merge is True
    assert data.pop("updatedAt") is firestore.SERVER_TIMESTAMP
    assert data == progress.to_dict()


def test_firestore_update_skips_write_when_mutator_rejects(firestore_db, catalog):
    store = FirestoreProgressStore(db=firestore_db)

    with pytest.raises(InsufficientTickets):
        store.update("u1", lambda p: rewards.purchase(catalog.rewards, "premium_badge", p))

    assert firestore_db.txn.writes == []
