"""Enrichment pipeline: raw feed -> normalised -> classified -> scored snapshot."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

import pandas as pd

from ..core import ChainShare, Pool, PoolSnapshot, PoolStats, PoolWithScore
from ..normalizer import normalize_pools
from ..scoring import enrich_pool
from ..sources import RawPoolSource

logger = logging.getLogger(__name__)

DEFAULT_TOP_CHAIN = "Ethereum"


def isoformat_z(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""

    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def chain_distribution(pools: Sequence[Pool]) -> list[ChainShare]:
    """Summed TVL and pool count per chain, largest TVL first."""

    if not pools:
        return []
    df = pd.DataFrame({"chain": [p.chain for p in pools], "tvl": [p.tvl_usd for p in pools]})
    grouped = (
        df.groupby("chain", sort=False)
        .agg(tvl=("tvl", "sum"), count=("tvl", "size"))
        .sort_values("tvl", ascending=False, kind="stable")
    )
    return [
        ChainShare(chain=str(chain), tvl=float(row["tvl"]), count=int(row["count"]))
        for chain, row in grouped.iterrows()
    ]


def pool_stats(pools: Sequence[Pool], distribution: Sequence[ChainShare]) -> PoolStats:
    if not pools:
        return PoolStats(top_chain=DEFAULT_TOP_CHAIN)
    apys = pd.Series([p.apy for p in pools], dtype=float)
    top = distribution[0] if distribution else None
    return PoolStats(
        total_pools=len(pools),
        avg_apy=float(apys.mean()),
        top_chain=top.chain if top else DEFAULT_TOP_CHAIN,
        top_chain_tvl=top.tvl if top else 0.0,
    )


def build_snapshot(raw_records: Sequence[Any], *, now: datetime | None = None) -> PoolSnapshot:
    """Turn one raw feed payload into an immutable :class:`PoolSnapshot`."""

    pools = normalize_pools(raw_records)
    enriched: list[PoolWithScore] = [enrich_pool(p) for p in pools]
    distribution = chain_distribution(pools)
    moment = now or datetime.now(tz=UTC)
    return PoolSnapshot(
        pools=tuple(enriched),
        stats=pool_stats(pools, distribution),
        chains=tuple(share.chain for share in distribution),
        chain_distribution=tuple(distribution),
        last_updated=isoformat_z(moment),
    )


class Pipeline:
    """Fetch from a raw source and enrich the result into a snapshot.

    Upstream errors propagate; deciding whether stale data may be served is
    the cache's job, not the pipeline's.
    """

    def __init__(self, source: RawPoolSource) -> None:
        self._source = source

    def run(self, *, now: datetime | None = None) -> PoolSnapshot:
        raw = self._source.fetch_raw()
        snapshot = build_snapshot(raw, now=now)
        logger.info(
            "Enriched %d of %d raw pools from %s",
            len(snapshot.pools),
            len(raw),
            self._source.__class__.__name__,
        )
        return snapshot


__all__ = ["Pipeline", "build_snapshot", "chain_distribution", "pool_stats", "isoformat_z"]
