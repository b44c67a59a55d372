import random

import pytest

from config import TestConfig
from services.game_engine.catalog import (
    BOARD_ROOM_DECISIONS,
    INVESTOR_SIMULATOR_DECISIONS,
    LEVEL_REQUIREMENTS,
    MACRO_MASTERMIND_DECISIONS,
    METRIC_QUESTIONS,
    load_catalog,
    load_decisions,
    load_ladder,
    load_questions,
)
from services.game_engine.market_data import MarketDataResult
from services.game_engine.service import GameService
from services.game_engine.session import GameSessionController
from services.game_engine.store import InMemoryProgressStore


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeMarketClient:
    """Stands in for MarketDataClient; returns a canned basic-financials result."""

    def __init__(self, result):
        self.result = result
        self.symbols = []

    def basic_financials(self, symbol):
        self.symbols.append(symbol)
        return self.result


class DevAuthConfig(TestConfig):
    AUTH_DISABLED = True


def correct_guess(question):
    return "good" if question.is_good else "bad"


def wrong_guess(question):
    return "bad" if question.is_good else "good"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ladder():
    return load_ladder(LEVEL_REQUIREMENTS)


@pytest.fixture
def questions():
    return load_questions(METRIC_QUESTIONS)


@pytest.fixture
def board_room_decisions():
    return load_decisions(BOARD_ROOM_DECISIONS)


@pytest.fixture
def investor_decisions():
    return load_decisions(INVESTOR_SIMULATOR_DECISIONS)


@pytest.fixture
def macro_decisions():
    return load_decisions(MACRO_MASTERMIND_DECISIONS)


@pytest.fixture
def controller(ladder, clock):
    return GameSessionController(ladder, clock=clock)


@pytest.fixture
def catalog():
    return load_catalog()


@pytest.fixture
def service(catalog, clock):
    controller = GameSessionController(catalog.ladder, clock=clock)
    return GameService(catalog, InMemoryProgressStore(), controller=controller, rng=random.Random(7))


@pytest.fixture
def app(service):
    from app import create_app

    return create_app(DevAuthConfig, service=service)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def market_client():
    return FakeMarketClient(MarketDataResult(ok=True, data={"metric": {"roeTTM": 20.0, "peTTM": 30.0}}))


@pytest.fixture
def market_service(catalog, clock, market_client):
    controller = GameSessionController(catalog.ladder, clock=clock)
    return GameService(
        catalog,
        InMemoryProgressStore(),
        controller=controller,
        rng=random.Random(7),
        market_data=market_client,
    )
