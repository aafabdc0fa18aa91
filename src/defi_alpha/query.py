"""Filter/sort queries over the cached pool snapshot."""

from __future__ import annotations

import math
from dataclasses import replace
from collections.abc import Iterable, Mapping
from typing import Any

from .cache import PoolCache
from .core import (
    FilterState,
    PoolRepository,
    PoolSnapshot,
    PoolWithScore,
    ProjectType,
    SortDirection,
    SortField,
    SortState,
)
from .errors import InvalidQuery

MAX_RESULTS = 200
DEFAULT_MIN_TVL = 5_000_000.0
DEFAULT_MIN_APY = 0.0


def _values(params: Mapping[str, Any], key: str) -> list[str]:
    """Collect ``key`` and ``key[]`` values from a plain or multi-valued mapping."""

    out: list[str] = []
    for name in (key, f"{key}[]"):
        getlist = getattr(params, "getlist", None)
        if getlist is not None:
            out.extend(str(v) for v in getlist(name))
            continue
        value = params.get(name)
        if value is None:
            continue
        if isinstance(value, (list, tuple, set, frozenset)):
            out.extend(str(v) for v in value)
        else:
            out.append(str(value))
    return out


def _number(value: Any, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    return max(0.0, number)


def _enum_value(enum_cls: Any, field: str, raw: Any, default: Any, errors: list[dict[str, Any]]) -> Any:
    if raw is None:
        return default
    try:
        return enum_cls(str(raw))
    except ValueError:
        errors.append(
            {
                "field": field,
                "message": f"Invalid enum value. Expected {', '.join(repr(m.value) for m in enum_cls)}",
                "received": raw,
            }
        )
        return default


def parse_query_params(
    params: Mapping[str, Any],
    *,
    default_min_tvl: float = DEFAULT_MIN_TVL,
    default_min_apy: float = DEFAULT_MIN_APY,
) -> tuple[FilterState, SortState]:
    """Validate raw query parameters into filter and sort state.

    Unparseable numbers fall back to their defaults. Unknown enum members for
    ``sortField``, ``sortDirection`` or ``projectTypes`` raise
    :class:`InvalidQuery` listing every offending field.
    """

    errors: list[dict[str, Any]] = []

    project_types: set[ProjectType] = set()
    for raw in _values(params, "projectTypes"):
        parsed = _enum_value(ProjectType, "projectTypes", raw, None, errors)
        if parsed is not None:
            project_types.add(parsed)

    sort_field = _enum_value(
        SortField, "sortField", params.get("sortField"), SortField.RISK_ADJUSTED_SCORE, errors
    )
    direction = _enum_value(
        SortDirection, "sortDirection", params.get("sortDirection"), SortDirection.DESC, errors
    )
    if errors:
        raise InvalidQuery(errors)

    filters = FilterState(
        min_tvl=_number(params.get("minTvl"), default_min_tvl),
        chains=frozenset(_values(params, "chains")),
        project_types=frozenset(project_types),
        min_apy=_number(params.get("minApy"), default_min_apy),
        low_il_only=params.get("lowIlOnly") == "true",
        search_query=str(params.get("searchQuery") or ""),
    )
    return filters, SortState(field=sort_field, direction=direction)


def filter_and_sort(
    pools: Iterable[PoolWithScore],
    filters: FilterState,
    sort: SortState,
    *,
    limit: int = MAX_RESULTS,
) -> list[PoolWithScore]:
    """Filter, stable-sort and truncate ``pools``. Pure; inputs are untouched."""

    return PoolRepository(pools).filter(filters).sort(sort).head(limit).to_list()


def query_pools(
    snapshot: PoolSnapshot,
    filters: FilterState,
    sort: SortState,
    *,
    limit: int = MAX_RESULTS,
) -> dict[str, Any]:
    """Build the ``/pools`` response body for one snapshot."""

    pools = filter_and_sort(snapshot.pools, filters, sort, limit=limit)
    return replace(snapshot, pools=tuple(pools)).to_dict()


class QueryEngine:
    """Answers pool queries against whatever snapshot ``cache`` currently holds."""

    def __init__(
        self,
        cache: PoolCache,
        *,
        max_results: int = MAX_RESULTS,
        default_min_tvl: float = DEFAULT_MIN_TVL,
        default_min_apy: float = DEFAULT_MIN_APY,
    ) -> None:
        self.cache = cache
        self.max_results = max_results
        self.default_min_tvl = default_min_tvl
        self.default_min_apy = default_min_apy

    def query(self, filters: FilterState, sort: SortState) -> dict[str, Any]:
        return query_pools(self.cache.get_snapshot(), filters, sort, limit=self.max_results)

    def query_params(self, params: Mapping[str, Any]) -> dict[str, Any]:
        filters, sort = parse_query_params(
            params,
            default_min_tvl=self.default_min_tvl,
            default_min_apy=self.default_min_apy,
        )
        return self.query(filters, sort)


__all__ = [
    "MAX_RESULTS",
    "DEFAULT_MIN_TVL",
    "QueryEngine",
    "parse_query_params",
    "filter_and_sort",
    "query_pools",
]
