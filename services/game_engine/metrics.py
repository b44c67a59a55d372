# services/game_engine/metrics.py
"""
Metric evaluation: judge a player's good/bad call on one financial metric.

Display values arrive as either numbers or formatted strings ("12.5%",
"$1.2B", "$420K"). Anything that needs a numeric comparison goes through
parse_metric_value() once, and a value that cannot be parsed is an
InvalidMetricValue rather than a silent guess.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Union
import math
import re

from .errors import InvalidGuess, InvalidMetricValue
from .models import Guess, MetricQuestion, MetricRaw

SCALE_SUFFIXES = {
    "k": 1e3,
    "m": 1e6,
    "b": 1e9,
    "t": 1e12,
}

_NUMBER_RE = re.compile(
    r"^(?P<sign1>[+-])?\$?(?P<sign2>[+-])?(?P<num>\d+(?:\.\d*)?|\.\d+)(?P<scale>[kmbt])?(%|x)?$"
)


@dataclass(frozen=True)
class GuessResult:
    correct: bool
    explanation: str


@dataclass(frozen=True)
class MetricComparison:
    company: float
    industry: float
    difference: float
    relative_gap: float


# ============================================================================
# Normalization
# ============================================================================

def parse_metric_value(raw: MetricRaw) -> float:
    """
    Normalize a display value into a float.

    Accepted: ints/floats, and strings like "35.2", "-3.1%", "$1.2B",
    "$950M", "1,234", "2.1x". Percent values keep their percent units so
    that company and industry values compare like for like.
    """
    if isinstance(raw, bool):
        raise InvalidMetricValue(f"Boolean is not a metric value: {raw!r}", value=raw)

    if isinstance(raw, (int, float)):
        value = float(raw)
        if not math.isfinite(value):
            raise InvalidMetricValue(f"Metric value is not finite: {raw!r}", value=raw)
        return value

    if not isinstance(raw, str):
        raise InvalidMetricValue(f"Unsupported metric value type: {type(raw).__name__}", value=repr(raw))

    s = raw.strip().replace(",", "").replace(" ", "").lower()
    # one optional sign, on either side of the currency symbol: "-$3B" / "$-3B"
    m = _NUMBER_RE.match(s)
    if not m or (m.group("sign1") and m.group("sign2")):
        raise InvalidMetricValue(f"Cannot parse metric value: {raw!r}", value=raw)

    sign = -1.0 if "-" in (m.group("sign1") or "", m.group("sign2") or "") else 1.0
    value = float(m.group("num")) * SCALE_SUFFIXES.get(m.group("scale") or "", 1.0)
    return sign * value


def coerce_guess(guess: Union[Guess, bool, str]) -> Guess:
    """Accept a Guess, a bool (True = good) or the strings 'good'/'bad'."""
    if isinstance(guess, Guess):
        return guess
    if isinstance(guess, bool):
        return Guess.GOOD if guess else Guess.BAD
    if isinstance(guess, str):
        try:
            return Guess(guess.strip().lower())
        except ValueError:
            pass
    raise InvalidGuess(f"Guess must be 'good' or 'bad', got {guess!r}")


# ============================================================================
# Public API
# ============================================================================

def evaluate_guess(question: MetricQuestion, guess: Union[Guess, bool, str]) -> GuessResult:
    """Correct iff the guess matches question.is_good. Explanation is always returned."""
    g = coerce_guess(guess)
    return GuessResult(correct=(g.is_good == question.is_good), explanation=question.explanation)


def compare_to_industry(question: MetricQuestion) -> MetricComparison:
    company = parse_metric_value(question.company_value)
    industry = parse_metric_value(question.industry_average)
    difference = company - industry

    if industry != 0:
        gap = abs(difference) / abs(industry)
    else:
        gap = 0.0 if difference == 0 else 1.0

    return MetricComparison(
        company=company,
        industry=industry,
        difference=difference,
        relative_gap=gap,
    )
