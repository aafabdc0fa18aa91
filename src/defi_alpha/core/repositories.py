"""In-memory repository for enriched pools."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator

import pandas as pd

from .constants import LENDING_KEYWORDS
from .models import (
    Exposure,
    FilterState,
    ILRisk,
    PoolWithScore,
    ProjectType,
    SortDirection,
    SortField,
    SortState,
)

_SORT_KEYS: dict[SortField, Callable[[PoolWithScore], float]] = {
    SortField.RISK_ADJUSTED_SCORE: lambda p: p.risk_adjusted_score,
    SortField.TVL_USD: lambda p: p.tvl_usd,
    SortField.APY: lambda p: p.apy,
    # absent trend values compare as 0 without touching the pool
    SortField.APY_PCT_7D: lambda p: p.apy_pct_7d or 0.0,
}


def is_lending(pool: PoolWithScore) -> bool:
    project = pool.project.lower()
    return any(keyword in project for keyword in LENDING_KEYWORDS)


def matches_project_type(pool: PoolWithScore, project_type: ProjectType) -> bool:
    if project_type == ProjectType.STABLE:
        return pool.stablecoin
    if project_type == ProjectType.VOLATILE:
        return not pool.stablecoin
    if project_type == ProjectType.LENDING:
        return is_lending(pool)
    return pool.exposure == Exposure.MULTI


def matches_filters(pool: PoolWithScore, filters: FilterState) -> bool:
    """Return ``True`` when ``pool`` passes every active filter."""

    if pool.tvl_usd < filters.min_tvl:
        return False
    if filters.chains and pool.chain not in filters.chains:
        return False
    if filters.project_types and not any(
        matches_project_type(pool, t) for t in filters.project_types
    ):
        return False
    if pool.apy < filters.min_apy:
        return False
    if filters.low_il_only and pool.il_risk not in (ILRisk.NONE, ILRisk.LOW):
        return False
    if filters.search_query:
        haystack = f"{pool.project} {pool.symbol} {pool.chain}".lower()
        if filters.search_query.lower() not in haystack:
            return False
    return True


class PoolRepository:
    """Lightweight in-memory collection with pandas export.

    Every operation returns a new repository; the receiver is never mutated
    by ``filter``, ``sort`` or ``head``.
    """

    def __init__(self, pools: Iterable[PoolWithScore] | None = None) -> None:
        self._pools: list[PoolWithScore] = list(pools) if pools else []

    def filter(self, filters: FilterState) -> "PoolRepository":
        return PoolRepository(p for p in self._pools if matches_filters(p, filters))

    def sort(self, sort: SortState) -> "PoolRepository":
        # sorted() is stable for both directions, so ties keep input order
        key = _SORT_KEYS[sort.field]
        return PoolRepository(
            sorted(self._pools, key=key, reverse=sort.direction == SortDirection.DESC)
        )

    def head(self, n: int) -> "PoolRepository":
        return PoolRepository(self._pools[: max(n, 0)])

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame([pool.to_dict() for pool in self._pools])

    def to_list(self) -> list[PoolWithScore]:
        return list(self._pools)

    def __len__(self) -> int:
        return len(self._pools)

    def __iter__(self) -> Iterator[PoolWithScore]:
        return iter(self._pools)


__all__ = ["PoolRepository", "matches_filters", "matches_project_type", "is_lending"]
