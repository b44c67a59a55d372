import math

import pytest

from services.game_engine.errors import InvalidGuess, InvalidMetricValue, InvalidOption
from services.game_engine.metrics import (
    compare_to_industry,
    coerce_guess,
    evaluate_guess,
    parse_metric_value,
)
from services.game_engine.models import Guess, MetricQuestion


@pytest.mark.parametrize(
    "raw, expected",
    [
        (35.2, 35.2),
        (7, 7.0),
        ("12.5%", 12.5),
        ("-3.1%", -3.1),
        ("$1.2B", 1.2e9),
        ("$950M", 9.5e8),
        ("$420K", 4.2e5),
        ("-$3B", -3e9),
        ("$-3B", -3e9),
        ("1,234", 1234.0),
        ("2.1x", 2.1),
        ("  0.8 ", 0.8),
        ("+5", 5.0),
    ],
)
def test_parse_metric_value(raw, expected):
    assert math.isclose(parse_metric_value(raw), expected)


@pytest.mark.parametrize(
    "raw",
    ["abc", "", "$", "12.5%%", "N/A", "--3", "-$-3", "+-3", "$$3", True, None, float("nan"), float("inf")],
)
def test_parse_metric_value_rejects_garbage(raw):
    with pytest.raises(InvalidMetricValue):
        parse_metric_value(raw)


def test_coerce_guess_accepts_strings_bools_and_enum():
    assert coerce_guess("good") is Guess.GOOD
    assert coerce_guess(" BAD ") is Guess.BAD
    assert coerce_guess(True) is Guess.GOOD
    assert coerce_guess(False) is Guess.BAD
    assert coerce_guess(Guess.BAD) is Guess.BAD


def test_coerce_guess_rejects_unknown_values():
    with pytest.raises(InvalidGuess) as exc:
        coerce_guess("maybe")
    # guess errors are option errors for callers that only know InvalidOption
    assert isinstance(exc.value, InvalidOption)
    with pytest.raises(InvalidGuess):
        coerce_guess(1)


def test_evaluate_guess_always_returns_explanation():
    q = MetricQuestion("Revenue Growth", "12.5%", "8.2%", True, "Growing faster than peers.")

    right = evaluate_guess(q, "good")
    wrong = evaluate_guess(q, Guess.BAD)

    assert right.correct is True
    assert wrong.correct is False
    assert right.explanation == wrong.explanation == "Growing faster than peers."


def test_evaluate_guess_for_a_bad_metric():
    q = MetricQuestion("P/E Ratio", 35.2, 22.4, False, "Expensive.")
    assert evaluate_guess(q, "bad").correct is True
    assert evaluate_guess(q, "good").correct is False


def test_compare_to_industry_parses_both_sides():
    q = MetricQuestion("Free Cash Flow", "$1.2B", "$950M", True, "")
    cmp = compare_to_industry(q)

    assert math.isclose(cmp.company, 1.2e9)
    assert math.isclose(cmp.industry, 9.5e8)
    assert math.isclose(cmp.difference, 2.5e8)
    assert math.isclose(cmp.relative_gap, 2.5e8 / 9.5e8)


def test_compare_to_industry_with_zero_industry_average():
    assert compare_to_industry(MetricQuestion("x", 3, 0, True, "")).relative_gap == 1.0
    assert compare_to_industry(MetricQuestion("x", 0, 0, True, "")).relative_gap == 0.0


def test_compare_to_industry_rejects_unparsable_values():
    with pytest.raises(InvalidMetricValue):
        compare_to_industry(MetricQuestion("x", "n/a", 5, True, ""))
