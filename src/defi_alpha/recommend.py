"""Risk-profiled pool recommendations for external consumers.

Picks the top three pools for a chain list, minimum APY and risk tolerance,
widening the risk profile when nothing qualifies and falling back to the
overall leaders when even that fails.
"""

from __future__ import annotations

import logging
import urllib.parse
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from .core import ILRisk, PoolSnapshot, PoolWithScore
from .core.constants import (
    BEEFY_APP_URL,
    CHAIN_ALIASES,
    DEFILLAMA_PROJECT_URL,
    PROTOCOL_URLS,
)
from .pipeline import isoformat_z
from .risk_scoring import beefy_chain_slug

logger = logging.getLogger(__name__)

CEFI_KEYWORDS = ("cefi", "nexo", "celsius", "blockfi", "centralized", "exchange")
CEFI_BENCHMARK_APY = 8.0
APY_ANOMALY_THRESHOLD = 10_000.0
VERY_HIGH_APY = 1_000.0
TOP_PICKS = 3

_IL_DESCRIPTIONS = {
    ILRisk.NONE: "No impermanent loss risk (single-sided or lending)",
    ILRisk.LOW: "Low IL risk (stablecoin pairs)",
    ILRisk.MEDIUM: "Moderate IL risk (correlated assets)",
    ILRisk.HIGH: "Higher IL risk (volatile pair)",
}


class RiskTolerance(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class Recommendation:
    query: str
    risk_profile: RiskTolerance
    top_pick: dict[str, Any] | None
    alternatives: list[dict[str, Any]]
    summary: str
    timestamp: str
    risk_expanded: bool = False
    fallback_picks: list[dict[str, Any]] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "success": True,
            "query": self.query,
            "riskProfile": self.risk_profile.value,
        }
        if self.risk_expanded:
            body["riskExpanded"] = True
        body["topPick"] = self.top_pick
        body["alternatives"] = self.alternatives
        if self.fallback_picks:
            body["fallbackPicks"] = self.fallback_picks
        body["summary"] = self.summary
        if self.suggestions:
            body["suggestions"] = self.suggestions
        body["timestamp"] = self.timestamp
        return body


# -----------------
# Formatting
# -----------------


def format_tvl(tvl: float) -> str:
    if tvl >= 1e9:
        return f"${tvl / 1e9:.2f}B"
    if tvl >= 1e6:
        return f"${tvl / 1e6:.2f}M"
    if tvl >= 1e3:
        return f"${tvl / 1e3:.0f}K"
    return f"${tvl:.0f}"


def risk_description(pool: PoolWithScore) -> str:
    description = _IL_DESCRIPTIONS.get(pool.il_risk, "Unknown IL risk")
    if pool.stablecoin:
        description += " - Stablecoin pool"
    if pool.tvl_usd > 50_000_000:
        description += " - High TVL adds security"
    elif pool.tvl_usd < 1_000_000:
        description += " - Lower TVL, check liquidity"
    return description


def auto_compound_text(pool: PoolWithScore) -> str:
    if pool.is_beefy:
        return "Yes via Beefy (auto-compound active)"
    if pool.auto_compound and pool.auto_compound_project:
        return f"Yes via {pool.auto_compound_project}"
    if pool.beefy_available:
        return "Beefy vault available"
    return "No"


def pro_tip(pool: PoolWithScore, include_cefi: bool = False) -> str:
    tips: list[str] = []
    if include_cefi and CEFI_BENCHMARK_APY < pool.apy < APY_ANOMALY_THRESHOLD:
        tips.append(
            f"Beats Nexo's {CEFI_BENCHMARK_APY:g}% by {pool.apy - CEFI_BENCHMARK_APY:.1f}% "
            "while keeping full on-chain control"
        )
    elif 10 < pool.apy < APY_ANOMALY_THRESHOLD:
        tips.append(
            f"Beats centralized 10% rates by {pool.apy - 10:.1f}% while keeping full on-chain control"
        )

    if pool.is_beefy:
        tips.append("Auto-compounds via Beefy - set it and forget it")
    elif pool.auto_compound:
        tips.append(f"Auto-compounds via {pool.auto_compound_project} - no manual harvesting needed")
    elif pool.beefy_available:
        tips.append("Beefy vault available for auto-compounding")

    if pool.stablecoin and pool.il_risk == ILRisk.LOW:
        tips.append("Stablecoin pool with minimal IL - great for capital preservation")
    if pool.apy_pct_7d and pool.apy_pct_7d > 10:
        tips.append(f"APY trending up {pool.apy_pct_7d:.1f}% this week")
    if pool.is_hot:
        tips.append("Hot pool - high volume and rising APY")

    return tips[0] if tips else "Solid risk-adjusted opportunity based on TVL and APY"


def cefi_comparison(pool: PoolWithScore) -> str | None:
    if pool.apy >= APY_ANOMALY_THRESHOLD or pool.apy <= CEFI_BENCHMARK_APY:
        return None
    return f"This beats Nexo's {CEFI_BENCHMARK_APY:g}% by {pool.apy - CEFI_BENCHMARK_APY:.1f}%"


def apy_warning(pool: PoolWithScore) -> str | None:
    if pool.apy >= APY_ANOMALY_THRESHOLD:
        return (
            f"Extremely high APY ({pool.apy:.0f}%) - verify before investing, "
            "may be temporary or anomalous"
        )
    if pool.apy >= VERY_HIGH_APY:
        return "Very high APY - verify sustainability and check for reward token liquidity"
    return None


def zap_link(pool: PoolWithScore) -> str:
    """Deposit link: Beefy when a vault exists or could, else the protocol's app."""

    chain = pool.chain.lower()
    if pool.is_beefy or pool.beefy_available:
        slug = beefy_chain_slug(pool.chain) or chain
        return BEEFY_APP_URL.format(slug=slug, symbol=urllib.parse.quote(pool.symbol, safe=""))

    project = pool.project.lower()
    tokens = pool.symbol.split("-")
    for fragment, template in PROTOCOL_URLS.items():
        if fragment in project:
            return template.format(
                chain=chain,
                token0=tokens[0],
                token1=tokens[1] if len(tokens) > 1 else "",
            )
    return DEFILLAMA_PROJECT_URL.format(project=urllib.parse.quote(pool.project, safe=""))


def format_pool(pool: PoolWithScore, include_cefi: bool = False) -> dict[str, Any]:
    result: dict[str, Any] = {
        "pool": f"{pool.symbol} on {pool.project} ({pool.chain})",
        "apy": f"{pool.apy:.2f}%",
        "apyBase": f"{pool.apy_base or 0.0:.2f}%",
        "apyReward": f"{pool.apy_reward or 0.0:.2f}%",
        "risk": risk_description(pool),
        "tvl": format_tvl(pool.tvl_usd),
        "chain": pool.chain,
        "project": pool.project,
        "autoCompound": auto_compound_text(pool),
        "proTip": pro_tip(pool, include_cefi),
        "zapLink": zap_link(pool),
    }
    warning = apy_warning(pool)
    if warning:
        result["apyWarning"] = warning
    if include_cefi:
        comparison = cefi_comparison(pool)
        if comparison:
            result["cefiComparison"] = comparison
    return result


# -----------------
# Matching
# -----------------


def normalize_chain_name(name: str) -> str:
    lower = name.lower().strip()
    for canonical, aliases in CHAIN_ALIASES.items():
        if lower in aliases:
            return canonical
    return lower


def chain_matches(pool_chain: str, wanted: str) -> bool:
    """Loose chain match tolerating aliases such as ``eth`` or ``matic``."""

    pool_lower = pool_chain.lower()
    wanted_lower = wanted.lower().strip()
    if wanted_lower in pool_lower:
        return True
    canonical = normalize_chain_name(wanted_lower)
    if canonical in pool_lower:
        return True
    aliases = CHAIN_ALIASES.get(canonical)
    return bool(aliases) and any(alias in pool_lower for alias in aliases)


def matches_user_query(pool: PoolWithScore, query: str) -> bool:
    if not query:
        return True
    q = query.lower()
    if "stable" in q and pool.stablecoin:
        return True
    if "low il" in q and pool.il_risk in (ILRisk.NONE, ILRisk.LOW):
        return True
    if "auto" in q and pool.auto_compound:
        return True
    if "beefy" in q and (pool.is_beefy or pool.beefy_available):
        return True
    if "high apy" in q and pool.apy > 50:
        return True
    text = f"{pool.symbol} {pool.project} {pool.chain} {pool.il_risk}".lower()
    return any(word in text for word in q.split() if len(word) > 2)


def passes_risk_profile(pool: PoolWithScore, risk: RiskTolerance) -> bool:
    low_il = pool.il_risk in (ILRisk.NONE, ILRisk.LOW)
    if risk == RiskTolerance.LOW:
        max_apy = 50.0 if low_il else 0.0
    elif risk == RiskTolerance.MEDIUM:
        max_apy = 50.0 if low_il else 150.0 if pool.il_risk == ILRisk.MEDIUM else 0.0
    else:
        max_apy = float("inf")
    min_tvl = 5_000_000.0 if risk == RiskTolerance.LOW else 1_000_000.0

    not_purely_boosted = (pool.apy_base or 0.0) >= 0.5 * pool.apy or pool.apy < 10
    symbol = pool.symbol.upper()
    not_test = "TEST" not in symbol and "MOCK" not in symbol
    return pool.tvl_usd >= min_tvl and pool.apy <= max_apy and not_test and not_purely_boosted


def _by_score(pools: Iterable[PoolWithScore]) -> list[PoolWithScore]:
    return sorted(pools, key=lambda p: p.risk_adjusted_score, reverse=True)


# -----------------
# Entry point
# -----------------


def recommend(
    snapshot: PoolSnapshot,
    *,
    chains: str = "all",
    min_apy: float = 5.0,
    risk_tolerance: RiskTolerance | str = RiskTolerance.MEDIUM,
    user_query: str = "",
    now: datetime | None = None,
) -> Recommendation:
    requested = risk = RiskTolerance(risk_tolerance)
    wants_cefi = any(kw in user_query.lower() for kw in CEFI_KEYWORDS)

    candidates: Sequence[PoolWithScore] = snapshot.pools
    if chains != "all":
        wanted = [c.strip() for c in chains.split(",")]
        candidates = [p for p in candidates if any(chain_matches(p.chain, c) for c in wanted)]
        logger.debug("Chain filter %s left %d pools", wanted, len(candidates))
    candidates = [p for p in candidates if p.apy >= min_apy]

    risk_expanded = False
    profiled = [p for p in candidates if passes_risk_profile(p, risk)]
    if not profiled and risk == RiskTolerance.LOW:
        profiled = [p for p in candidates if passes_risk_profile(p, RiskTolerance.MEDIUM)]
        if profiled:
            risk_expanded, risk = True, RiskTolerance.MEDIUM
    if not profiled and risk != RiskTolerance.HIGH:
        profiled = [p for p in candidates if passes_risk_profile(p, RiskTolerance.HIGH)]
        if profiled:
            risk_expanded, risk = True, RiskTolerance.HIGH

    if user_query:
        profiled = [p for p in profiled if matches_user_query(p, user_query)]
    profiled = [p for p in profiled if p.apy < APY_ANOMALY_THRESHOLD]
    top = _by_score(profiled)[:TOP_PICKS]

    fallback: list[dict[str, Any]] = []
    suggestions: list[str] = []
    if not top:
        leaders = _by_score(p for p in snapshot.pools if p.apy < APY_ANOMALY_THRESHOLD)
        fallback = [format_pool(p, wants_cefi) for p in leaders[:TOP_PICKS]]
        if chains != "all":
            suggestions.append("Try chains=all for more options")
        if min_apy > 5:
            suggestions.append(f"Lower minApy threshold (currently {min_apy:g}%)")
        if risk != RiskTolerance.HIGH:
            suggestions.append("Try riskTolerance=high to include more volatile pools")

    query_summary = user_query or (
        f"Top pools with {min_apy:g}%+ APY, {requested.value} risk"
        + (f" on {chains}" if chains != "all" else "")
    )

    if not top:
        summary = "No pools found matching your exact criteria."
        if fallback:
            summary += f" Showing top {len(fallback)} overall picks instead."
    else:
        summary = f"No low-risk pools found, expanded to {risk.value} risk. " if risk_expanded else ""
        if len(top) == 1:
            summary += "Found 1 opportunity matching your criteria."
        else:
            best = top[0]
            best_apy = f"{best.apy:.2f}%" if best.apy < VERY_HIGH_APY else f"{best.apy:.0f}%"
            summary += (
                f"Found {len(top)} top opportunities. The top pick offers {best_apy} APY "
                f"with {best.il_risk} IL risk."
            )
        if wants_cefi and top[0].apy > CEFI_BENCHMARK_APY:
            summary += f" All picks beat typical CeFi rates of {CEFI_BENCHMARK_APY:g}%."

    return Recommendation(
        query=query_summary,
        risk_profile=risk,
        top_pick=format_pool(top[0], wants_cefi) if top else None,
        alternatives=[format_pool(p, wants_cefi) for p in top[1:]],
        summary=summary,
        timestamp=isoformat_z(now or datetime.now(tz=UTC)),
        risk_expanded=risk_expanded,
        fallback_picks=fallback,
        suggestions=suggestions,
    )


__all__ = [
    "RiskTolerance",
    "Recommendation",
    "recommend",
    "format_pool",
    "format_tvl",
    "zap_link",
    "chain_matches",
    "normalize_chain_name",
    "passes_risk_profile",
    "matches_user_query",
]
