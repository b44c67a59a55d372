# services/game_engine/market_data.py
"""
Market-data adapter (Finnhub REST) and the mapping into MetricQuestion.

The engine never calls this client. Content loaders use it to shape raw
financials into metric questions. Every call returns a MarketDataResult
instead of raising, so callers branch on `.ok` only.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional
import logging
import os

import requests

from .errors import InvalidMetricValue
from .metrics import parse_metric_value
from .models import MetricQuestion

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://finnhub.io/api/v1"
DEFAULT_TIMEOUT = 10

# finnhub metric key -> (label, higher_is_better, explanation when it beats the industry, explanation when it trails)
METRIC_DEFINITIONS: Dict[str, tuple] = {
    "peTTM": ("P/E Ratio", False,
              "A P/E ratio below the industry average can mean the stock is cheaper than its peers for each dollar of earnings.",
              "A P/E ratio above the industry average means investors pay more for each dollar of earnings than at peers."),
    "pbQuarterly": ("Price to Book", False,
                    "A lower P/B ratio suggests the stock may be undervalued relative to its assets.",
                    "A higher P/B ratio means the stock is priced richly relative to its assets."),
    "netProfitMarginTTM": ("Profit Margin", True,
                           "Higher profit margins mean the company keeps more of each sales dollar as profit.",
                           "Thinner margins than peers leave less profit from each sales dollar."),
    "revenueGrowthTTMYoy": ("Revenue Growth", True,
                            "Growing revenue faster than peers shows the company is gaining market share.",
                            "Revenue growing slower than peers can mean the company is losing market share."),
    "roeTTM": ("Return on Equity", True,
               "Higher ROE indicates better efficiency at generating profit from shareholder equity.",
               "Lower ROE means the company generates less profit from shareholder equity than its peers."),
    "currentRatioQuarterly": ("Current Ratio", True,
                              "A stronger current ratio means more room to cover short-term obligations.",
                              "A weaker current ratio leaves less room to cover short-term obligations."),
    "dividendYieldIndicatedAnnual": ("Dividend Yield", True,
                                     "A higher dividend yield returns more cash to shareholders.",
                                     "A lower dividend yield returns less cash to shareholders than peers do."),
    "totalDebt/totalEquityQuarterly": ("Debt to Equity", False,
                                       "Lower leverage reduces financial risk during downturns.",
                                       "Higher leverage than peers adds financial risk during downturns."),
}

# Broad-market reference points used when a caller has no industry-specific figures
DEFAULT_INDUSTRY_AVERAGES: Dict[str, float] = {
    "peTTM": 22.4,
    "pbQuarterly": 4.5,
    "netProfitMarginTTM": 11.5,
    "revenueGrowthTTMYoy": 8.2,
    "roeTTM": 14.2,
    "currentRatioQuarterly": 1.2,
    "dividendYieldIndicatedAnnual": 2.8,
    "totalDebt/totalEquityQuarterly": 1.4,
}


@dataclass(frozen=True)
class MarketDataResult:
    ok: bool
    data: Any = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {"ok": True, "data": self.data}
        return {"ok": False, "error": self.error}


class MarketDataClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key if api_key is not None else os.getenv("FINNHUB_API_KEY")
        self.base_url = (base_url or os.getenv("FINNHUB_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    def _get(self, path: str, **params: Any) -> MarketDataResult:
        if not self.api_key:
            return MarketDataResult(ok=False, error="FINNHUB_API_KEY is not configured")

        url = f"{self.base_url}{path}"
        try:
            resp = self.http.get(url, params=params, headers={"X-Finnhub-Token": self.api_key}, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("[market_data] %s failed: %s", path, e)
            return MarketDataResult(ok=False, error=str(e))

        if resp.status_code != 200:
            logger.warning("[market_data] %s returned %s", path, resp.status_code)
            return MarketDataResult(ok=False, error=f"HTTP {resp.status_code}: {resp.text[:200]}")

        try:
            return MarketDataResult(ok=True, data=resp.json())
        except ValueError as e:
            return MarketDataResult(ok=False, error=f"Invalid JSON from {path}: {e}")

    def quote(self, symbol: str) -> MarketDataResult:
        return self._get("/quote", symbol=symbol.upper())

    def company_profile(self, symbol: str) -> MarketDataResult:
        return self._get("/stock/profile2", symbol=symbol.upper())

    def basic_financials(self, symbol: str) -> MarketDataResult:
        return self._get("/stock/metric", symbol=symbol.upper(), metric="all")

    def price_target(self, symbol: str) -> MarketDataResult:
        return self._get("/stock/price-target", symbol=symbol.upper())

    def recommendation_trends(self, symbol: str) -> MarketDataResult:
        return self._get("/stock/recommendation", symbol=symbol.upper())


# ============================================================================
# Mapping into metric questions
# ============================================================================

def build_metric_question(
    metric_key: str,
    financials: Mapping[str, Any],
    industry_average: Any,
    symbol: Optional[str] = None,
) -> MetricQuestion:
    """
    Shape one Finnhub basic-financials metric into a MetricQuestion.

    Raises InvalidMetricValue when either side is missing or not numeric.
    """
    if metric_key not in METRIC_DEFINITIONS:
        raise InvalidMetricValue(f"No definition for metric {metric_key!r}.", metric=metric_key)
    label, higher_is_better, good_explanation, weak_explanation = METRIC_DEFINITIONS[metric_key]

    values = financials.get("metric") if isinstance(financials.get("metric"), Mapping) else financials
    raw = values.get(metric_key)
    if raw is None:
        raise InvalidMetricValue(f"{label} is not reported{f' for {symbol}' if symbol else ''}.", metric=metric_key)

    company = parse_metric_value(raw)
    industry = parse_metric_value(industry_average)
    beats = company > industry if higher_is_better else company < industry

    if beats:
        explanation = good_explanation
    else:
        explanation = f"Compared with the industry average of {industry_average}, this {label} is weaker than peers. " + weak_explanation

    qid = f"{symbol.lower()}_{metric_key}" if symbol else metric_key
    return MetricQuestion(
        metric=label,
        company_value=round(company, 2),
        industry_average=industry_average,
        is_good=beats,
        explanation=explanation,
        id=qid,
    )


def questions_for_symbol(
    client: MarketDataClient,
    symbol: str,
    industry_averages: Mapping[str, Any],
) -> MarketDataResult:
    """Fetch basic financials and build one question per metric we have an industry average for."""
    fin = client.basic_financials(symbol)
    if not fin.ok:
        return fin

    questions: List[MetricQuestion] = []
    skipped: List[str] = []
    for key, avg in industry_averages.items():
        try:
            questions.append(build_metric_question(key, fin.data or {}, avg, symbol=symbol))
        except InvalidMetricValue as e:
            skipped.append(key)
            logger.info("[market_data] skipping %s for %s: %s", key, symbol, e.message)

    if not questions:
        return MarketDataResult(ok=False, error=f"No usable metrics for {symbol}", data={"skipped": skipped})
    return MarketDataResult(ok=True, data=questions)
