import json
import random
from pathlib import Path

import pytest

from services.game_engine.catalog import (
    load_catalog,
    load_catalog_file,
    load_decisions,
    load_questions,
    load_rewards,
)
from services.game_engine.errors import CatalogError
from services.game_engine.models import Decision, GameMode, ImpactCategory, MetricQuestion


def test_bundled_catalog_loads(catalog):
    assert len(catalog.questions) == 15
    assert set(catalog.decisions) == {
        GameMode.BOARD_ROOM,
        GameMode.INVESTOR_SIMULATOR,
        GameMode.MACRO_MASTERMIND,
    }
    assert catalog.ladder.max_level == 5
    assert [r.id for r in catalog.rewards] == [
        "premium_badge",
        "dark_theme",
        "advanced_metrics",
        "portfolio_simulator",
    ]


def test_investor_impacts_carry_categories(catalog):
    option = catalog.decisions[GameMode.INVESTOR_SIMULATOR][0].options[0]
    assert {i.category for i in option.impacts} == {
        ImpactCategory.VALUE,
        ImpactCategory.GROWTH,
        ImpactCategory.MOMENTUM,
    }


def test_content_for_uses_default_limits(catalog):
    questions = catalog.content_for(GameMode.TIME_ATTACK, rng=random.Random(1))
    assert len(questions) == 10
    assert all(isinstance(q, MetricQuestion) for q in questions)

    decisions = catalog.content_for(GameMode.MACRO_MASTERMIND, rng=random.Random(1))
    assert len(decisions) == 3
    assert all(isinstance(d, Decision) for d in decisions)


def test_content_for_respects_limit_and_seed(catalog):
    a = catalog.content_for(GameMode.MARKET_ADVENTURE, limit=4, rng=random.Random(42))
    b = catalog.content_for(GameMode.MARKET_ADVENTURE, limit=4, rng=random.Random(42))
    assert len(a) == 4
    assert [q.id for q in a] == [q.id for q in b]


def test_constants_override():
    catalog = load_catalog({"constants": {"QUESTIONS_PER_GAME": 3}})
    assert len(catalog.content_for(GameMode.TIME_ATTACK)) == 3


def test_decision_without_options_is_rejected():
    with pytest.raises(CatalogError):
        load_decisions([{"id": "d", "title": "D", "options": []}])


def test_duplicate_decision_and_option_ids_are_rejected():
    opt = {"id": "o", "text": "O", "impact": [{"name": "m", "change": 1}]}
    with pytest.raises(CatalogError):
        load_decisions([{"id": "d", "title": "D", "options": [opt]}, {"id": "d", "title": "D2", "options": [opt]}])
    with pytest.raises(CatalogError):
        load_decisions([{"id": "d", "title": "D", "options": [opt, opt]}])


def test_impacts_accept_both_shapes():
    decisions = load_decisions([{
        "id": "d",
        "title": "D",
        "options": [
            {"id": "a", "text": "A", "impact": [{"name": "Revenue", "change": 2}]},
            {"id": "b", "text": "B", "impacts": [{"metric": "Capital", "value": -3, "category": "Value"}]},
        ],
    }])
    a, b = decisions[0].options
    assert a.impacts[0].metric == "Revenue" and a.impacts[0].change == 2.0
    assert b.impacts[0].category is ImpactCategory.VALUE


@pytest.mark.parametrize(
    "impact",
    [{"name": "m", "change": "lots"}, {"change": 1}, {"name": "m", "change": 1, "category": "Luck"}],
)
def test_bad_impacts_are_rejected(impact):
    with pytest.raises(CatalogError):
        load_decisions([{"id": "d", "title": "D", "options": [{"id": "o", "text": "O", "impact": [impact]}]}])


def test_question_with_unparsable_value_is_rejected():
    with pytest.raises(CatalogError):
        load_questions([{"metric": "M", "companyValue": "lots", "industryAverage": 1, "isGood": True, "explanation": "E"}])


def test_question_needs_boolean_answer():
    with pytest.raises(CatalogError):
        load_questions([{"metric": "M", "companyValue": 1, "industryAverage": 2, "isGood": "yes", "explanation": "E"}])


def test_unknown_reward_type_is_rejected():
    with pytest.raises(CatalogError):
        load_rewards([{"id": "r", "name": "R", "ticketCost": 1, "type": "sticker"}])


def test_question_mode_cannot_have_decisions():
    with pytest.raises(CatalogError):
        load_catalog({"decisions": {"time_attack": []}})
    with pytest.raises(CatalogError):
        load_catalog({"decisions": {"poker": []}})


def test_load_catalog_file(tmp_path: Path):
    payload = {
        "questions": [
            {"id": "q1", "metric": "ROE", "companyValue": "18%", "industryAverage": "14%", "isGood": True,
             "explanation": "Efficient."},
        ],
        "decisions": {
            "board_room": [
                {"id": "d1", "title": "Hire", "options": [
                    {"id": "yes", "text": "Hire", "impact": [{"name": "Morale", "change": 2}]},
                ]},
            ],
        },
        "levels": [{"level": 1, "xpRequired": 0}, {"level": 2, "xpRequired": 50}],
        "rewards": [{"id": "r", "name": "R", "ticketCost": 1, "type": "badge"}],
    }
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    catalog = load_catalog_file(path)
    assert [q.id for q in catalog.questions] == ["q1"]
    assert list(catalog.decisions) == [GameMode.BOARD_ROOM]
    assert catalog.ladder.max_level == 2
    assert len(catalog.rewards) == 1


def test_load_catalog_file_errors(tmp_path: Path):
    with pytest.raises(CatalogError):
        load_catalog_file(tmp_path / "missing.json")

    path = tmp_path / "list.json"
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(CatalogError):
        load_catalog_file(path)
