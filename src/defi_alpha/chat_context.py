"""Render the top-ranked pools as a text block for the advisor chat."""

from __future__ import annotations

from collections.abc import Sequence

from .core import PoolRepository, PoolSnapshot, PoolStats, PoolWithScore, SortState

CONTEXT_TOP_N = 20


def _pool_line(rank: int, pool: PoolWithScore) -> str:
    flags = ""
    if pool.apy_declining:
        flags += " [APY DECLINING]"
    if pool.low_liquidity_rewards:
        flags += " [LOW LIQ REWARDS]"
    if pool.is_hot:
        flags += " [HOT]"
    if pool.is_beefy:
        flags += " [AUTO-COMPOUND: Beefy]"
    elif pool.auto_compound and pool.auto_compound_project:
        flags += f" [AUTO-COMPOUND: {pool.auto_compound_project}]"
    elif pool.beefy_available:
        flags += " [BEEFY VAULT AVAILABLE]"
    return (
        f"{rank}. **{pool.project}** {pool.symbol} on {pool.chain}: "
        f"APY {pool.apy:.2f}%, TVL ${pool.tvl_usd / 1e6:.2f}M, "
        f"IL Risk: {pool.il_risk}{flags}"
    )


def build_pool_context(
    pools: Sequence[PoolWithScore],
    stats: PoolStats,
    *,
    top_n: int = CONTEXT_TOP_N,
) -> str:
    """Summarise ``pools`` (already in rank order) and the snapshot ``stats``."""

    summaries = "\n".join(_pool_line(i + 1, p) for i, p in enumerate(pools[:top_n]))
    return (
        "## Current Market Data (Real-time from DeFiLlama)\n"
        "\n"
        "**Stats Overview:**\n"
        f"- Total Pools Analyzed: {stats.total_pools:,}\n"
        f"- Average APY: {stats.avg_apy:.2f}%\n"
        f"- Top Chain by TVL: {stats.top_chain}\n"
        "\n"
        f"**Top {top_n} Pools by Risk-Adjusted Score:**\n"
        f"{summaries}\n"
        "\n"
        "Use this data to provide specific, data-driven recommendations."
    )


def build_snapshot_context(snapshot: PoolSnapshot, *, top_n: int = CONTEXT_TOP_N) -> str:
    """Rank a whole snapshot by risk-adjusted score and summarise it."""

    ranked = PoolRepository(snapshot.pools).sort(SortState()).head(top_n).to_list()
    return build_pool_context(ranked, snapshot.stats, top_n=top_n)


__all__ = ["build_pool_context", "build_snapshot_context", "CONTEXT_TOP_N"]
