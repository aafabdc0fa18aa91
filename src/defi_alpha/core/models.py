"""Immutable data models used throughout DefiAlpha."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import StrEnum
from typing import Any

import pandas as pd


class ILRisk(StrEnum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Exposure(StrEnum):
    SINGLE = "single"
    MULTI = "multi"


class ProjectType(StrEnum):
    LP = "lp"
    LENDING = "lending"
    STABLE = "stable"
    VOLATILE = "volatile"


class SortField(StrEnum):
    RISK_ADJUSTED_SCORE = "riskAdjustedScore"
    TVL_USD = "tvlUsd"
    APY = "apy"
    APY_PCT_7D = "apyPct7D"


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"


# Python attribute -> public (camelCase) key used by the HTTP layer.
_API_KEYS = {
    "pool_id": "pool",
    "chain": "chain",
    "project": "project",
    "symbol": "symbol",
    "tvl_usd": "tvlUsd",
    "apy_base": "apyBase",
    "apy_reward": "apyReward",
    "apy": "apy",
    "reward_tokens": "rewardTokens",
    "il7d": "il7d",
    "il_risk": "ilRisk",
    "exposure": "exposure",
    "stablecoin": "stablecoin",
    "volume_usd_7d": "volumeUsd7d",
    "apy_pct_1d": "apyPct1D",
    "apy_pct_7d": "apyPct7D",
    "apy_pct_30d": "apyPct30D",
    "pool_meta": "poolMeta",
    "underlying_tokens": "underlyingTokens",
    "url": "url",
    "risk_adjusted_score": "riskAdjustedScore",
    "is_hot": "isHot",
    "apy_declining": "apyDeclining",
    "low_liquidity_rewards": "lowLiquidityRewards",
    "il_pct_actual": "ilPctActual",
    "auto_compound": "autoCompound",
    "auto_compound_project": "autoCompoundProject",
    "is_beefy": "isBeefy",
    "beefy_available": "beefyAvailable",
}

# Internal bookkeeping fields that never leave the process.
_PRIVATE_FIELDS = {"no_il_flag"}


def _public_value(value: Any) -> Any:
    if isinstance(value, tuple):
        return list(value)
    if isinstance(value, StrEnum):
        return value.value
    return value


@dataclass(frozen=True)
class Pool:
    """Normalised snapshot of one upstream yield pool.

    Percentages (``apy``, ``il7d``, ``apy_pct_*``) stay in percent units as
    published by the feed, e.g. ``8.0`` for 8%.
    """

    pool_id: str
    chain: str
    project: str
    symbol: str
    tvl_usd: float
    apy: float
    apy_base: float | None = None
    apy_reward: float | None = None
    reward_tokens: tuple[str, ...] | None = None
    underlying_tokens: tuple[str, ...] | None = None
    il7d: float | None = None
    il_risk: ILRisk = ILRisk.MEDIUM  # placeholder until classified
    exposure: Exposure = Exposure.MULTI
    stablecoin: bool = False
    no_il_flag: bool = False  # upstream explicitly reported "no IL"
    volume_usd_7d: float | None = None
    apy_pct_1d: float | None = None
    apy_pct_7d: float | None = None
    apy_pct_30d: float | None = None
    pool_meta: str | None = None
    url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the camelCase shape served by the HTTP API."""

        return {
            _API_KEYS[f.name]: _public_value(getattr(self, f.name))
            for f in fields(self)
            if f.name not in _PRIVATE_FIELDS
        }


@dataclass(frozen=True)
class PoolWithScore(Pool):
    """Pool plus the fields derived during enrichment."""

    risk_adjusted_score: float = 0.0
    is_hot: bool = False
    apy_declining: bool = False
    low_liquidity_rewards: bool = False
    il_pct_actual: float | None = None
    auto_compound: bool = False
    auto_compound_project: str | None = None
    is_beefy: bool = False
    beefy_available: bool = False

    @classmethod
    def from_pool(cls, pool: Pool, **derived: Any) -> "PoolWithScore":
        base = {f.name: getattr(pool, f.name) for f in fields(Pool)}
        return cls(**base, **derived)


@dataclass(frozen=True)
class FilterState:
    min_tvl: float = 0.0
    chains: frozenset[str] = frozenset()
    project_types: frozenset[ProjectType] = frozenset()
    min_apy: float = 0.0
    low_il_only: bool = False
    search_query: str = ""


@dataclass(frozen=True)
class SortState:
    field: SortField = SortField.RISK_ADJUSTED_SCORE
    direction: SortDirection = SortDirection.DESC


@dataclass(frozen=True)
class PoolStats:
    total_pools: int = 0
    avg_apy: float = 0.0
    top_chain: str = "Ethereum"
    top_chain_tvl: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalPools": self.total_pools,
            "avgApy": self.avg_apy,
            "topChain": self.top_chain,
            "topChainTvl": self.top_chain_tvl,
        }


@dataclass(frozen=True)
class ChainShare:
    chain: str
    tvl: float
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"chain": self.chain, "tvl": self.tvl, "count": self.count}


@dataclass(frozen=True)
class PoolSnapshot:
    """One fetch cycle's enriched pool universe plus aggregates."""

    pools: tuple[PoolWithScore, ...]
    stats: PoolStats = field(default_factory=PoolStats)
    chains: tuple[str, ...] = ()
    chain_distribution: tuple[ChainShare, ...] = ()
    last_updated: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "pools": [p.to_dict() for p in self.pools],
            "stats": self.stats.to_dict(),
            "chains": list(self.chains),
            "chainDistribution": [c.to_dict() for c in self.chain_distribution],
            "lastUpdated": self.last_updated,
        }

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame([p.to_dict() for p in self.pools])


__all__ = [
    "ILRisk",
    "Exposure",
    "ProjectType",
    "SortField",
    "SortDirection",
    "Pool",
    "PoolWithScore",
    "FilterState",
    "SortState",
    "PoolStats",
    "ChainShare",
    "PoolSnapshot",
]
