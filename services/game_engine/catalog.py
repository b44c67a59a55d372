# services/game_engine/catalog.py
"""
Static game content and its load-time validation.

Content arrives from the content-loading side as plain dicts (camelCase keys,
same shape as the mobile client's constants). load_catalog() turns them into
frozen domain objects and rejects anything malformed with CatalogError, so a
broken ladder or an option-less decision stops the app before any session
can start.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
import json
import logging
import random

from .errors import CatalogError, InvalidMetricValue
from .metrics import parse_metric_value
from .models import (
    ContentItem,
    Decision,
    GameMode,
    Impact,
    ImpactCategory,
    LevelRequirement,
    LevelReward,
    MetricQuestion,
    Option,
    Reward,
    RewardKind,
)
from .progression import Ladder
from .rewards import RewardCatalog

logger = logging.getLogger(__name__)

# ============================================================================
# Constants
# ============================================================================

GAME_CONSTANTS = {
    "GAME_TIME_LIMIT": 90,  # seconds
    "QUESTIONS_PER_GAME": 10,
    "DECISIONS_PER_GAME": 5,
}

METRIC_QUESTIONS: List[Dict[str, Any]] = [
    {"id": "pe_ratio", "metric": "P/E Ratio", "companyValue": 35.2, "industryAverage": 22.4, "isGood": False,
     "explanation": "A higher P/E ratio than industry average often indicates the stock is overvalued compared to peers."},
    {"id": "revenue_growth", "metric": "Revenue Growth", "companyValue": "12.5%", "industryAverage": "8.2%", "isGood": True,
     "explanation": "Growing revenue faster than industry peers shows the company is gaining market share."},
    {"id": "profit_margin", "metric": "Profit Margin", "companyValue": "8.3%", "industryAverage": "11.5%", "isGood": False,
     "explanation": "Lower profit margins than industry suggest the company is less efficient at converting revenue to profit."},
    {"id": "dividend_yield", "metric": "Dividend Yield", "companyValue": "4.2%", "industryAverage": "2.8%", "isGood": True,
     "explanation": "Higher dividend yield provides better income for investors while maintaining reasonable payout ratio."},
    {"id": "debt_to_equity", "metric": "Debt to Equity", "companyValue": 2.1, "industryAverage": 1.4, "isGood": False,
     "explanation": "Higher debt levels increase financial risk and vulnerability during downturns."},
    {"id": "roe", "metric": "Return on Equity", "companyValue": "18.5%", "industryAverage": "14.2%", "isGood": True,
     "explanation": "Higher ROE indicates better efficiency at generating profit from shareholder equity."},
    {"id": "current_ratio", "metric": "Current Ratio", "companyValue": 0.8, "industryAverage": 1.2, "isGood": False,
     "explanation": "Current ratio below 1.0 suggests potential liquidity problems meeting short-term obligations."},
    {"id": "price_to_book", "metric": "Price to Book", "companyValue": 3.2, "industryAverage": 4.5, "isGood": True,
     "explanation": "Lower P/B ratio suggests the stock might be undervalued relative to its assets compared to peers."},
    {"id": "operating_margin", "metric": "Operating Margin", "companyValue": "12.3%", "industryAverage": "9.7%", "isGood": True,
     "explanation": "Higher operating margins indicate stronger operational efficiency than competitors."},
    {"id": "inventory_turnover", "metric": "Inventory Turnover", "companyValue": 4.2, "industryAverage": 6.8, "isGood": False,
     "explanation": "Lower inventory turnover means the company is less efficient at selling through its inventory."},
    {"id": "free_cash_flow", "metric": "Free Cash Flow", "companyValue": "$1.2B", "industryAverage": "$950M", "isGood": True,
     "explanation": "Stronger free cash flow generation provides flexibility for investments, debt reduction, or shareholder returns."},
    {"id": "rd_ratio", "metric": "R&D as % of Revenue", "companyValue": "3.5%", "industryAverage": "8.2%", "isGood": False,
     "explanation": "Significantly lower R&D investment may impact future innovation and competitiveness."},
    {"id": "employee_revenue", "metric": "Employee Revenue", "companyValue": "$420K", "industryAverage": "$380K", "isGood": True,
     "explanation": "Higher revenue per employee indicates better workforce productivity and operational efficiency."},
    {"id": "price_to_sales", "metric": "Price to Sales", "companyValue": 6.8, "industryAverage": 4.2, "isGood": False,
     "explanation": "Higher P/S ratio suggests the company may be overvalued relative to its revenue generation."},
    {"id": "quick_ratio", "metric": "Quick Ratio", "companyValue": 1.4, "industryAverage": 1.1, "isGood": True,
     "explanation": "Stronger quick ratio indicates better ability to meet short-term obligations with liquid assets."},
]

BOARD_ROOM_DECISIONS: List[Dict[str, Any]] = [
    {
        "id": "cost_cutting",
        "title": "Cost Cutting Initiative",
        "description": "Your CFO has proposed a company-wide cost-cutting program to improve margins. How would you like to approach this?",
        "options": [
            {"id": "aggressive", "text": "Implement aggressive cost-cutting across all departments with 15% budget reduction targets",
             "impact": [{"name": "Profit Margin", "change": 4.2}, {"name": "Employee Satisfaction", "change": -8.5},
                        {"name": "Innovation Score", "change": -6.1}]},
            {"id": "targeted", "text": "Target inefficient departments for 10% cuts while protecting R&D and customer service",
             "impact": [{"name": "Profit Margin", "change": 2.8}, {"name": "Employee Satisfaction", "change": -3.2},
                        {"name": "Innovation Score", "change": -1.5}]},
            {"id": "strategic", "text": "Implement a strategic efficiency program focused on process improvements rather than cuts",
             "impact": [{"name": "Profit Margin", "change": 1.5}, {"name": "Employee Satisfaction", "change": 1.0},
                        {"name": "Innovation Score", "change": 0.5}]},
        ],
    },
    {
        "id": "expansion",
        "title": "Market Expansion",
        "description": "Your company has an opportunity to expand into new markets. What's your approach?",
        "options": [
            {"id": "aggressive", "text": "Rapid expansion into multiple international markets simultaneously",
             "impact": [{"name": "Revenue Growth", "change": 8.5}, {"name": "Profit Margin", "change": -3.2},
                        {"name": "Debt Ratio", "change": 7.5}]},
            {"id": "sequential", "text": "Phased approach with one market at a time to learn and adapt",
             "impact": [{"name": "Revenue Growth", "change": 4.2}, {"name": "Profit Margin", "change": -1.0},
                        {"name": "Debt Ratio", "change": 2.5}]},
            {"id": "partnership", "text": "Enter new markets through local partnerships and joint ventures",
             "impact": [{"name": "Revenue Growth", "change": 3.5}, {"name": "Profit Margin", "change": 0.8},
                        {"name": "Debt Ratio", "change": 0.5}]},
        ],
    },
    {
        "id": "product_development",
        "title": "Product Development Direction",
        "description": "Your product team needs direction on the next generation product line. What approach would you take?",
        "options": [
            {"id": "new_features", "text": "Focus on adding new features to existing products to attract new customers",
             "impact": [{"name": "Market Share", "change": 2.5}, {"name": "Development Cost", "change": 4.0},
                        {"name": "Customer Satisfaction", "change": -1.5}]},
            {"id": "quality", "text": "Improve quality and reliability of existing products to retain customers",
             "impact": [{"name": "Market Share", "change": 0.5}, {"name": "Development Cost", "change": 1.5},
                        {"name": "Customer Satisfaction", "change": 6.0}]},
            {"id": "disruptive", "text": "Invest in potentially disruptive new product categories",
             "impact": [{"name": "Market Share", "change": -0.5}, {"name": "Development Cost", "change": 8.5},
                        {"name": "Long-term Growth Potential", "change": 9.5}]},
        ],
    },
    {
        "id": "pricing_strategy",
        "title": "Pricing Strategy Adjustment",
        "description": "Market conditions have changed. How would you adjust pricing strategy?",
        "options": [
            {"id": "premium", "text": "Move upmarket with premium pricing and enhanced product quality",
             "impact": [{"name": "Profit Margin", "change": 5.5}, {"name": "Market Share", "change": -3.5},
                        {"name": "Brand Perception", "change": 4.0}]},
            {"id": "competitive", "text": "Maintain competitive pricing while adding incremental value",
             "impact": [{"name": "Profit Margin", "change": 0.0}, {"name": "Market Share", "change": 1.0},
                        {"name": "Brand Perception", "change": 0.5}]},
            {"id": "value", "text": "Reduce prices to gain market share through a value proposition",
             "impact": [{"name": "Profit Margin", "change": -4.0}, {"name": "Market Share", "change": 7.5},
                        {"name": "Brand Perception", "change": -2.0}]},
        ],
    },
    {
        "id": "acquisition",
        "title": "Acquisition Opportunity",
        "description": "A smaller competitor is available for acquisition. How do you proceed?",
        "options": [
            {"id": "full", "text": "Make a full acquisition offer at a premium to market value",
             "impact": [{"name": "Market Share", "change": 5.5}, {"name": "Debt Ratio", "change": 8.0},
                        {"name": "Integration Complexity", "change": 7.0}]},
            {"id": "partial", "text": "Propose a strategic partnership with option to acquire later",
             "impact": [{"name": "Market Share", "change": 2.0}, {"name": "Debt Ratio", "change": 1.5},
                        {"name": "Strategic Flexibility", "change": 6.0}]},
            {"id": "pass", "text": "Pass on the acquisition and focus on organic growth",
             "impact": [{"name": "Market Share", "change": 0.0}, {"name": "Debt Ratio", "change": -1.0},
                        {"name": "Internal Focus", "change": 5.0}]},
        ],
    },
]


def _investor_option(option_id: str, text: str, capital: float, knowledge: float, experience: float) -> Dict[str, Any]:
    return {
        "id": option_id,
        "text": text,
        "impacts": [
            {"metric": "Capital", "value": capital, "category": "Value"},
            {"metric": "Market Knowledge", "value": knowledge, "category": "Growth"},
            {"metric": "Trading Experience", "value": experience, "category": "Momentum"},
        ],
    }


INVESTOR_SIMULATOR_DECISIONS: List[Dict[str, Any]] = [
    {
        "id": "bubble_tech",
        "title": "Tech Bubble Dilemma",
        "description": "It's 1999, and technology stocks are soaring to unprecedented heights.",
        "options": [
            _investor_option("tech_all_in", "Invest heavily in the hottest tech stocks to maximize gains while the trend continues", -30, 10, 15),
            _investor_option("tech_value", "Seek established tech companies with real earnings and reasonable valuations", 10, 15, 10),
            _investor_option("tech_avoid", "Avoid tech stocks entirely and focus on undervalued companies in other sectors", 15, 10, 5),
            _investor_option("tech_short", "Short overvalued tech stocks, betting on the bubble bursting", -20, 20, 20),
        ],
    },
    {
        "id": "financial_crisis",
        "title": "2008 Financial Crisis",
        "description": "It's 2008, and the housing market is collapsing, triggering a global financial crisis.",
        "options": [
            _investor_option("crisis_sell", "Sell your investments to protect against further losses", -15, 10, 15),
            _investor_option("crisis_hold", "Hold your existing investments and maintain a long-term perspective", 20, 15, 20),
            _investor_option("crisis_buy", "Substantially increase investments, especially in undervalued financial stocks", 40, 20, 25),
            _investor_option("crisis_gold", "Shift assets to gold and other 'safe haven' investments", 0, 10, 10),
        ],
    },
    {
        "id": "retail_disruption",
        "title": "Retail Disruption",
        "description": "It's 2010, and e-commerce is beginning to seriously challenge traditional retail.",
        "options": [
            _investor_option("retail_traditional", "Invest in established retailers with strong brands at their discounted valuations", -5, 15, 10),
            _investor_option("retail_ecommerce", "Focus investments on leading e-commerce companies, despite their higher valuations", 45, 20, 15),
            _investor_option("retail_adapt", "Identify traditional retailers with the best omnichannel strategies", 25, 25, 20),
            _investor_option("retail_avoid", "Avoid the retail sector entirely due to the uncertainty", 10, 5, 5),
        ],
    },
    {
        "id": "dividend_growth",
        "title": "Income Strategy Decision",
        "description": "You need to establish a reliable income stream from your investments.",
        "options": [
            _investor_option("income_high_yield", "Focus on the highest-yielding dividend stocks and bonds", -10, 15, 10),
            _investor_option("income_dividend_growth", "Invest in companies with moderate yields but consistent dividend growth", 30, 20, 15),
            _investor_option("income_total_return", "Focus on total return and sell positions as needed for income", 25, 15, 20),
            _investor_option("income_bonds", "Create a bond ladder for predictable income", 5, 10, 10),
        ],
    },
]


def _policy(option_id: str, text: str, effects: Mapping[str, float]) -> Dict[str, Any]:
    return {"id": option_id, "text": text, "impact": [{"name": k, "change": v} for k, v in effects.items()]}


MACRO_MASTERMIND_DECISIONS: List[Dict[str, Any]] = [
    {
        "id": "evt_trade_agreement",
        "title": "International Trade Agreement",
        "description": "Major trading partners have proposed a new trade agreement that could reshape international commerce.",
        "options": [
            _policy("policy_embrace", "Embrace Agreement: fully support and sign the trade agreement.",
                    {"Technology": 5, "Manufacturing": 8, "Services": 3, "Energy": 2, "Finance": 4, "Trade Balance": 10}),
            _policy("policy_negotiate", "Negotiate Terms: seek modifications to better protect your interests.",
                    {"Technology": 2, "Manufacturing": 3, "Services": 2, "Energy": 1, "Finance": 2, "Trade Balance": 5}),
            _policy("policy_reject", "Reject Agreement: decline participation to protect domestic markets.",
                    {"Technology": -2, "Manufacturing": -3, "Services": -1, "Energy": -1, "Finance": -2, "Trade Balance": -5}),
        ],
    },
    {
        "id": "evt_tech_innovation",
        "title": "Technological Breakthrough",
        "description": "A major technological breakthrough has emerged that could transform multiple industries.",
        "options": [
            _policy("policy_invest", "Government Investment: provide substantial funding to accelerate adoption.",
                    {"Technology": 12, "Manufacturing": 6, "Services": 4, "Energy": 5, "Finance": 3, "Market Health": 10}),
            _policy("policy_partnership", "Public-Private Partnership: collaborate with private industry for balanced implementation.",
                    {"Technology": 8, "Manufacturing": 4, "Services": 3, "Energy": 3, "Finance": 2, "Market Health": 5}),
            _policy("policy_wait", "Wait and See: allow market forces to naturally integrate the technology.",
                    {"Technology": 4, "Manufacturing": 2, "Services": 1, "Energy": 1, "Finance": 1, "Market Health": 0}),
        ],
    },
    {
        "id": "evt_financial_crisis",
        "title": "Financial Market Turbulence",
        "description": "Financial markets are experiencing extreme volatility, threatening economic stability.",
        "options": [
            _policy("policy_bailout", "Financial Sector Bailout: provide emergency funds to stabilize financial institutions.",
                    {"Technology": -3, "Manufacturing": -2, "Services": -3, "Energy": -2, "Finance": -5, "Market Health": 15}),
            _policy("policy_regulation", "Increase Regulation: implement stricter financial regulations to prevent future crises.",
                    {"Technology": -4, "Manufacturing": -3, "Services": -4, "Energy": -3, "Finance": -8, "Market Health": 5}),
            _policy("policy_austerity", "Austerity Measures: cut government spending to maintain fiscal discipline.",
                    {"Technology": -5, "Manufacturing": -4, "Services": -6, "Energy": -3, "Finance": -10, "Market Health": -5}),
        ],
    },
]

GAME_REWARDS: List[Dict[str, Any]] = [
    {"id": "premium_badge", "name": "Premium Investor Badge", "ticketCost": 10, "type": "badge",
     "description": "Show off your financial expertise with this exclusive badge on your profile and leaderboard."},
    {"id": "dark_theme", "name": "Dark Mode Theme", "ticketCost": 15, "type": "theme",
     "description": "Unlock a sleek dark mode theme for the entire application."},
    {"id": "advanced_metrics", "name": "Advanced Metrics Pack", "ticketCost": 25, "type": "unlock",
     "description": "Unlock additional advanced financial metrics and comparisons for all stocks."},
    {"id": "portfolio_simulator", "name": "Portfolio Simulator", "ticketCost": 40, "type": "unlock",
     "description": "Advanced tool to simulate different portfolio allocations and test strategies."},
]

LEVEL_REQUIREMENTS: List[Dict[str, Any]] = [
    {"level": 1, "xpRequired": 0, "rewards": {"tickets": 0, "description": "Starting level"}},
    {"level": 2, "xpRequired": 100, "rewards": {"tickets": 1, "description": "Basic investor skills"}},
    {"level": 3, "xpRequired": 250, "rewards": {"tickets": 2, "description": "Intermediate knowledge"}},
    {"level": 4, "xpRequired": 500, "rewards": {"tickets": 3, "description": "Advanced understanding"}},
    {"level": 5, "xpRequired": 1000, "rewards": {"tickets": 5, "description": "Expert analyst"}},
]


# ============================================================================
# Loaders
# ============================================================================

def _require(d: Mapping[str, Any], key: str, where: str) -> Any:
    if key not in d or d[key] is None:
        raise CatalogError(f"{where}: missing '{key}'.")
    return d[key]


def _first(d: Mapping[str, Any], *keys: str) -> Any:
    for k in keys:
        if k in d and d[k] is not None:
            return d[k]
    return None


def _as_int(value: Any, where: str) -> int:
    if isinstance(value, bool):
        raise CatalogError(f"{where}: expected a whole number, got {value!r}.")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        raise CatalogError(f"{where}: expected a whole number, got {value!r}.")
    return value


def load_questions(raw: Sequence[Mapping[str, Any]]) -> List[MetricQuestion]:
    out: List[MetricQuestion] = []
    seen = set()
    for i, q in enumerate(raw):
        where = f"question[{i}]"
        qid = q.get("id") or f"q{i + 1}"
        if qid in seen:
            raise CatalogError(f"{where}: duplicate id {qid!r}.")
        seen.add(qid)

        company = _first(q, "companyValue", "company_value")
        industry = _first(q, "industryAverage", "industry_average")
        if company is None or industry is None:
            raise CatalogError(f"{where}: company and industry values are required.")
        try:
            parse_metric_value(company)
            parse_metric_value(industry)
        except InvalidMetricValue as e:
            raise CatalogError(f"{where}: {e.message}") from e

        is_good = _first(q, "isGood", "is_good")
        if not isinstance(is_good, bool):
            raise CatalogError(f"{where}: isGood must be a boolean.")

        out.append(MetricQuestion(
            metric=str(_require(q, "metric", where)),
            company_value=company,
            industry_average=industry,
            is_good=is_good,
            explanation=str(_require(q, "explanation", where)),
            id=qid,
        ))
    return out


def _load_impact(raw: Mapping[str, Any], where: str) -> Impact:
    metric = _first(raw, "metric", "name")
    change = _first(raw, "change", "value")
    if not metric:
        raise CatalogError(f"{where}: impact needs a metric name.")
    if isinstance(change, bool) or not isinstance(change, (int, float)):
        raise CatalogError(f"{where}: impact change must be numeric, got {change!r}.")

    category = raw.get("category")
    if category is not None:
        try:
            category = ImpactCategory(category)
        except ValueError:
            raise CatalogError(f"{where}: unknown impact category {category!r}.") from None
    return Impact(metric=str(metric), change=float(change), category=category)


def load_decisions(raw: Sequence[Mapping[str, Any]]) -> List[Decision]:
    out: List[Decision] = []
    seen = set()
    for i, d in enumerate(raw):
        where = f"decision[{i}]"
        did = str(_require(d, "id", where))
        if did in seen:
            raise CatalogError(f"{where}: duplicate id {did!r}.")
        seen.add(did)

        options_raw = d.get("options") or []
        if not options_raw:
            raise CatalogError(f"{where} ({did}): a decision needs at least one option.")

        options: List[Option] = []
        option_ids = set()
        for j, o in enumerate(options_raw):
            owhere = f"{where}.options[{j}]"
            oid = str(_require(o, "id", owhere))
            if oid in option_ids:
                raise CatalogError(f"{owhere}: duplicate option id {oid!r}.")
            option_ids.add(oid)
            impacts_raw = _first(o, "impacts", "impact") or []
            options.append(Option(
                id=oid,
                text=str(_require(o, "text", owhere)),
                impacts=tuple(_load_impact(imp, f"{owhere}.impact[{k}]") for k, imp in enumerate(impacts_raw)),
                explanation=o.get("explanation"),
            ))

        out.append(Decision(
            id=did,
            title=str(_require(d, "title", where)),
            description=str(d.get("description", "")),
            options=tuple(options),
        ))
    return out


def load_ladder(raw: Sequence[Mapping[str, Any]]) -> Ladder:
    rows: List[LevelRequirement] = []
    for i, r in enumerate(raw):
        where = f"level[{i}]"
        rewards = r.get("rewards") or {}
        level = _as_int(_require(r, "level", where), where)
        if level < 1:
            raise CatalogError(f"{where}: level must be positive.")
        xp = _as_int(_first(r, "xpRequired", "xp_required"), where)
        if xp < 0:
            raise CatalogError(f"{where}: xpRequired must not be negative.")
        rows.append(LevelRequirement(
            level=level,
            xp_required=xp,
            rewards=LevelReward(
                tickets=_as_int(rewards.get("tickets", 0), where),
                description=str(rewards.get("description", "")),
            ),
        ))
    return Ladder(rows)


def load_rewards(raw: Sequence[Mapping[str, Any]]) -> RewardCatalog:
    items: List[Reward] = []
    for i, r in enumerate(raw):
        where = f"reward[{i}]"
        kind = _first(r, "type", "kind")
        try:
            kind = RewardKind(kind)
        except ValueError:
            raise CatalogError(f"{where}: unknown reward type {kind!r}.") from None
        items.append(Reward(
            id=str(_require(r, "id", where)),
            name=str(_require(r, "name", where)),
            description=str(r.get("description", "")),
            ticket_cost=_as_int(_first(r, "ticketCost", "ticket_cost"), where),
            kind=kind,
            icon=r.get("icon"),
        ))
    return RewardCatalog(items)


# ============================================================================
# Catalog
# ============================================================================

@dataclass
class GameCatalog:
    questions: List[MetricQuestion]
    decisions: Dict[GameMode, List[Decision]]
    ladder: Ladder
    rewards: RewardCatalog
    constants: Dict[str, Any] = field(default_factory=lambda: dict(GAME_CONSTANTS))

    def content_for(
        self,
        mode: GameMode,
        limit: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> List[ContentItem]:
        """Shuffled content queue for one session of `mode`."""
        rng = rng or random.Random()
        if mode.uses_questions:
            pool: List[ContentItem] = list(self.questions)
            default_limit = self.constants.get("QUESTIONS_PER_GAME")
        else:
            pool = list(self.decisions.get(mode, []))
            default_limit = self.constants.get("DECISIONS_PER_GAME")
        rng.shuffle(pool)
        n = limit if limit is not None else default_limit
        return pool[:n] if n else pool


def load_catalog(raw: Optional[Mapping[str, Any]] = None) -> GameCatalog:
    """Build and validate the full catalog. Defaults to the bundled content."""
    raw = raw or {}
    decisions_raw = raw.get("decisions") or {
        GameMode.BOARD_ROOM.value: BOARD_ROOM_DECISIONS,
        GameMode.INVESTOR_SIMULATOR.value: INVESTOR_SIMULATOR_DECISIONS,
        GameMode.MACRO_MASTERMIND.value: MACRO_MASTERMIND_DECISIONS,
    }

    decisions: Dict[GameMode, List[Decision]] = {}
    for key, items in decisions_raw.items():
        try:
            mode = GameMode(key)
        except ValueError:
            raise CatalogError(f"Unknown game mode in decisions: {key!r}.") from None
        if mode.uses_questions:
            raise CatalogError(f"{mode.value} is question-driven and takes no decisions.")
        decisions[mode] = load_decisions(items)

    constants = dict(GAME_CONSTANTS)
    constants.update(raw.get("constants") or {})

    catalog = GameCatalog(
        questions=load_questions(raw.get("questions") or METRIC_QUESTIONS),
        decisions=decisions,
        ladder=load_ladder(raw.get("levels") or LEVEL_REQUIREMENTS),
        rewards=load_rewards(raw.get("rewards") or GAME_REWARDS),
        constants=constants,
    )
    logger.info(
        "[catalog] loaded %s questions, %s decisions, %s levels, %s rewards",
        len(catalog.questions),
        sum(len(v) for v in decisions.values()),
        len(catalog.ladder),
        len(catalog.rewards),
    )
    return catalog


def load_catalog_file(path: Union[str, Path]) -> GameCatalog:
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogError(f"Cannot read catalog file {p}: {e}") from e
    if not isinstance(data, dict):
        raise CatalogError(f"Catalog file {p} must contain a JSON object.")
    return load_catalog(data)
