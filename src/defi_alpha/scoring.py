"""Risk-adjusted ranking score and derived pool signals."""

from __future__ import annotations

from .core import ILRisk, Pool, PoolWithScore
from .core.constants import (
    DECLINING_APY_PCT_7D,
    HOT_APY_PCT_7D,
    HOT_VOLUME_USD_7D,
    IL_PENALTY,
    LIQUID_REWARD_TOKENS,
    TVL_SATURATION_USD,
)
from .risk_scoring import AutoCompoundInfo, classify_pool, detect_auto_compound


def tvl_factor(tvl_usd: float) -> float:
    """Linear ramp to 1.0, saturating (inclusively) at $10M TVL."""

    return min(tvl_usd / TVL_SATURATION_USD, 1.0)


def il_factor(il_risk: ILRisk | str) -> float:
    return 1.0 - IL_PENALTY[str(il_risk)]


def risk_adjusted_score(pool: Pool) -> float:
    """``apy * tvl_factor * il_factor`` using the pool's resolved ``il_risk``."""

    if pool.apy == 0:
        return 0.0
    return pool.apy * tvl_factor(pool.tvl_usd) * il_factor(pool.il_risk)


def is_hot(pool: Pool) -> bool:
    """High 7d volume or a sharply rising 7d APY."""

    high_volume = pool.volume_usd_7d is not None and pool.volume_usd_7d > HOT_VOLUME_USD_7D
    rising_apy = pool.apy_pct_7d is not None and pool.apy_pct_7d > HOT_APY_PCT_7D
    return high_volume or rising_apy


def is_apy_declining(pool: Pool) -> bool:
    return pool.apy_pct_7d is not None and pool.apy_pct_7d < DECLINING_APY_PCT_7D


def has_low_liquidity_rewards(pool: Pool) -> bool:
    """Coarse warning: reward tokens exist but none is a known liquid token.

    Matching is case-insensitive on symbols and contract addresses.
    """

    tokens = pool.reward_tokens
    if not tokens:
        return False
    return not any(token.lower() in LIQUID_REWARD_TOKENS for token in tokens)


def score_pool(pool: Pool, auto: AutoCompoundInfo | None = None) -> PoolWithScore:
    """Enrich a classified pool with its score and derived flags.

    ``pool.il_risk`` must already be resolved (see
    :func:`defi_alpha.risk_scoring.classify_pool`).
    """

    auto = auto or detect_auto_compound(pool)
    return PoolWithScore.from_pool(
        pool,
        risk_adjusted_score=risk_adjusted_score(pool),
        is_hot=is_hot(pool),
        apy_declining=is_apy_declining(pool),
        low_liquidity_rewards=has_low_liquidity_rewards(pool),
        il_pct_actual=pool.il7d,
        auto_compound=auto.auto_compound,
        auto_compound_project=auto.auto_compound_project,
        is_beefy=auto.is_beefy,
        beefy_available=auto.beefy_available,
    )


def enrich_pool(pool: Pool) -> PoolWithScore:
    """Classify and score a freshly normalised pool in one step."""

    return score_pool(classify_pool(pool))


__all__ = [
    "tvl_factor",
    "il_factor",
    "risk_adjusted_score",
    "is_hot",
    "is_apy_declining",
    "has_low_liquidity_rewards",
    "score_pool",
    "enrich_pool",
]
