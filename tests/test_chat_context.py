from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest

from defi_alpha.chat_context import build_pool_context, build_snapshot_context
from defi_alpha.core import PoolSnapshot, PoolStats
from defi_alpha.pipeline import build_snapshot


@pytest.fixture()
def snapshot(raw_records: list[dict[str, Any]]) -> PoolSnapshot:
    return build_snapshot(raw_records, now=datetime(2024, 5, 1, tzinfo=UTC))


def test_context_lists_pools_by_score(snapshot: PoolSnapshot) -> None:
    text = build_snapshot_context(snapshot)
    lines = text.splitlines()

    assert lines[0] == "## Current Market Data (Real-time from DeFiLlama)"
    assert "- Total Pools Analyzed: 5" in lines
    assert "- Average APY: 24.84%" in lines
    assert "- Top Chain by TVL: Ethereum" in lines
    assert "**Top 20 Pools by Risk-Adjusted Score:**" in lines
    assert (
        "1. **uniswap-v3** WETH-USDC on Ethereum: APY 25.00%, TVL $200.00M, "
        "IL Risk: medium [HOT] [BEEFY VAULT AVAILABLE]"
    ) in lines
    assert "2. **beefy** WETH-USDC on Arbitrum: APY 12.00%, TVL $8.00M, IL Risk: low [HOT] [AUTO-COMPOUND: Beefy]" in lines
    assert any(
        line.startswith("3. **aerodrome-v2**")
        and line.endswith("[APY DECLINING] [LOW LIQ REWARDS] [BEEFY VAULT AVAILABLE]")
        for line in lines
    )
    assert lines[-1] == "Use this data to provide specific, data-driven recommendations."


def test_context_respects_top_n(snapshot: PoolSnapshot) -> None:
    text = build_snapshot_context(snapshot, top_n=2)

    assert "**Top 2 Pools by Risk-Adjusted Score:**" in text
    assert "3. **" not in text


def test_large_counts_use_thousands_separator() -> None:
    text = build_pool_context([], PoolStats(total_pools=12345, avg_apy=7.123))

    assert "- Total Pools Analyzed: 12,345" in text
    assert "- Average APY: 7.12%" in text
