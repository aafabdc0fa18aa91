"""Core constants shared across DefiAlpha modules.

All tables are plain immutable mappings or frozensets. Lookups against them
treat a missing key as "not found" and never raise.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

# Common stablecoins, upper-cased. Used to recognise liquid reward tokens and
# stable legs when describing pools.
STABLE_TOKENS = frozenset(
    {
        "USDC",
        "USDT",
        "DAI",
        "FRAX",
        "LUSD",
        "GUSD",
        "TUSD",
        "USDP",
        "BUSD",
        "USDD",
        "SUSD",
        "CRVUSD",
        "GHO",
        "PYUSD",
        "USDS",
        "USDC.E",
        "USDT.E",
    }
)

# Reward tokens with deep secondary markets. DefiLlama reports reward tokens
# as contract addresses, so both symbols and well-known addresses are listed
# (lower-cased).
LIQUID_REWARD_TOKENS = frozenset(
    {token.lower() for token in STABLE_TOKENS}
    | {
        "eth",
        "weth",
        "btc",
        "wbtc",
        "aave",
        "crv",
        "cvx",
        "bal",
        "arb",
        "op",
        "uni",
        "ldo",
        "comp",
        "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2",  # WETH
        "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48",  # USDC
        "0xdac17f958d2ee523a2206206994597c13d831ec7",  # USDT
        "0x6b175474e89094c44da98b954eedeac495271d0f",  # DAI
        "0x2260fac5e5542a773aa44fbcfedf7c193bc2c599",  # WBTC
        "0x7fc66500c84a76ad7e9c93437bfc5ac33e2ddae9",  # AAVE
        "0xd533a949740bb3306d119cc777fa900ba034cd52",  # CRV
        "0x912ce59144191c1204e64559fe8253a0e49e6548",  # ARB
        "0x4200000000000000000000000000000000000042",  # OP
    }
)

# Project-name fragments that mark a lending protocol.
LENDING_KEYWORDS = ("lend", "aave", "compound")

# Scoring heuristics. Literal values, no derivation behind them.
TVL_SATURATION_USD = 10_000_000.0
IL_LOW_THRESHOLD = 0.1
IL_HIGH_THRESHOLD = 1.0
HOT_VOLUME_USD_7D = 1_000_000.0
HOT_APY_PCT_7D = 5.0
DECLINING_APY_PCT_7D = -20.0

IL_PENALTY: Mapping[str, float] = MappingProxyType(
    {
        "none": 0.0,
        "low": 0.1,
        "medium": 0.25,
        "high": 0.5,
    }
)

# Yield aggregators that auto-compound their own vaults.
AUTO_COMPOUND_PROJECTS = frozenset(
    {
        "beefy",
        "yearn-finance",
        "gamma",
        "arrakis",
        "reaper-farm",
        "autofarm",
        "concentrator",
        "origin-dollar",
        "aura",
        "convex-finance",
        "convex",
        "pendle",
        "sommelier",
        "pickle-finance",
        "harvest-finance",
    }
)

AUTO_COMPOUND_KEYWORDS = ("vault", "auto", "compound", "autocompound")

# Underlying protocols Beefy builds vaults on top of.
BEEFY_SUPPORTED_PROTOCOLS = frozenset(
    {
        "aerodrome-v1",
        "aerodrome-v2",
        "velodrome-v2",
        "velodrome-v1",
        "uniswap-v3",
        "uniswap-v2",
        "pancakeswap-amm-v3",
        "pancakeswap-amm-v2",
        "sushiswap",
        "curve-dex",
        "curve",
        "balancer-v2",
        "camelot-v3",
        "camelot-v2",
        "trader-joe-dex",
        "quickswap-dex",
        "thena-v1",
        "thena-v2",
        "ramses-v2",
        "lynex",
        "solidly-v2",
        "equalizer",
    }
)

# DefiLlama chain name -> Beefy app chain slug. Chains absent here have no
# Beefy deployment.
BEEFY_CHAIN_SLUGS: Mapping[str, str] = MappingProxyType(
    {
        "Ethereum": "ethereum",
        "Arbitrum": "arbitrum",
        "Optimism": "optimism",
        "Polygon": "polygon",
        "Base": "base",
        "BSC": "bsc",
        "Avalanche": "avax",
        "Fantom": "fantom",
        "Cronos": "cronos",
        "zkSync Era": "zksync",
        "Linea": "linea",
        "Mantle": "mantle",
        "Scroll": "scroll",
        "Mode": "mode",
        "Fraxtal": "fraxtal",
    }
)

# Canonical chain key -> accepted spellings in free-text chain filters.
CHAIN_ALIASES: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "bsc": ("binance", "bnb", "bsc"),
        "ethereum": ("eth", "ethereum", "mainnet"),
        "arbitrum": ("arb", "arbitrum"),
        "avalanche": ("avax", "avalanche"),
        "optimism": ("op", "optimism"),
        "polygon": ("matic", "polygon"),
        "base": ("base",),
        "solana": ("sol", "solana"),
        "fantom": ("ftm", "fantom"),
    }
)

# Project-name fragment -> deposit URL template. ``{chain}``, ``{token0}`` and
# ``{token1}`` are filled in by the recommender.
PROTOCOL_URLS: Mapping[str, str] = MappingProxyType(
    {
        "aerodrome": "https://aerodrome.finance/liquidity?token0={token0}&token1={token1}",
        "velodrome": "https://velodrome.finance/liquidity",
        "uniswap": "https://app.uniswap.org/#/pools",
        "curve": "https://curve.fi/#/{chain}/pools",
    }
)

BEEFY_APP_URL = "https://app.beefy.com/{slug}?search={symbol}"
DEFILLAMA_PROJECT_URL = "https://defillama.com/yields?project={project}"

__all__ = [
    "STABLE_TOKENS",
    "LIQUID_REWARD_TOKENS",
    "LENDING_KEYWORDS",
    "TVL_SATURATION_USD",
    "IL_LOW_THRESHOLD",
    "IL_HIGH_THRESHOLD",
    "HOT_VOLUME_USD_7D",
    "HOT_APY_PCT_7D",
    "DECLINING_APY_PCT_7D",
    "IL_PENALTY",
    "AUTO_COMPOUND_PROJECTS",
    "AUTO_COMPOUND_KEYWORDS",
    "BEEFY_SUPPORTED_PROTOCOLS",
    "BEEFY_CHAIN_SLUGS",
    "CHAIN_ALIASES",
    "PROTOCOL_URLS",
    "BEEFY_APP_URL",
    "DEFILLAMA_PROJECT_URL",
]
