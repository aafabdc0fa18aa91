"""
DefiAlpha: risk-adjusted discovery of DeFi yield pools.

Design goals:
- One upstream feed (DefiLlama yields) fetched in a single request
- Immutable data model (Pool, PoolWithScore, PoolSnapshot) + light repository
- Heuristic IL/auto-compound classification and a single ranking score
- TTL cache that serves stale data when the feed is down
- Pure filter/sort queries capped at 200 results
"""

from __future__ import annotations

from . import chat_context, recommend, reporting, risk_scoring, scoring
from .cache import CacheState, PoolCache
from .config import load_config
from .core import (
    ChainShare,
    Exposure,
    FilterState,
    ILRisk,
    Pool,
    PoolRepository,
    PoolSnapshot,
    PoolStats,
    PoolWithScore,
    ProjectType,
    SortDirection,
    SortField,
    SortState,
)
from .errors import DefiAlphaError, InvalidQuery, MalformedUpstreamRecord, UpstreamUnavailable
from .normalizer import normalize_pool, normalize_pools
from .pipeline import Pipeline, build_snapshot
from .query import QueryEngine, filter_and_sort, parse_query_params, query_pools
from .sources import DefiLlamaSource, RawPoolSource

__all__ = [
    "Pool",
    "PoolWithScore",
    "PoolSnapshot",
    "PoolStats",
    "ChainShare",
    "FilterState",
    "SortState",
    "ILRisk",
    "Exposure",
    "ProjectType",
    "SortField",
    "SortDirection",
    "PoolRepository",
    "DefiAlphaError",
    "UpstreamUnavailable",
    "InvalidQuery",
    "MalformedUpstreamRecord",
    "normalize_pool",
    "normalize_pools",
    "Pipeline",
    "build_snapshot",
    "PoolCache",
    "CacheState",
    "QueryEngine",
    "parse_query_params",
    "filter_and_sort",
    "query_pools",
    "DefiLlamaSource",
    "RawPoolSource",
    "load_config",
    "chat_context",
    "recommend",
    "reporting",
    "risk_scoring",
    "scoring",
]
