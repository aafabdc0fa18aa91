"""Heuristic risk classification for yield pools.

Two independent classifications live here:

* the impermanent-loss tier (:func:`classify_il_risk`), and
* auto-compounding capability (:func:`detect_auto_compound`), matched against
  static registries of vault operators and Beefy-supported protocols/chains.

Unknown projects or chains simply fall through every lookup.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from .core import Exposure, ILRisk, Pool
from .core.constants import (
    AUTO_COMPOUND_KEYWORDS,
    AUTO_COMPOUND_PROJECTS,
    BEEFY_CHAIN_SLUGS,
    BEEFY_SUPPORTED_PROTOCOLS,
    IL_HIGH_THRESHOLD,
    IL_LOW_THRESHOLD,
)


@dataclass(frozen=True)
class AutoCompoundInfo:
    auto_compound: bool = False
    auto_compound_project: str | None = None
    is_beefy: bool = False
    beefy_available: bool = False


def classify_il_risk(pool: Pool) -> ILRisk:
    """Derive the impermanent-loss tier; the first matching rule wins.

    1. single-asset exposure, or upstream reports no IL -> ``none``
    2. known ``il7d``: ``|il| < 0.1`` low, ``< 1`` medium, else high
    3. stablecoin pool -> ``low``
    4. anything else -> ``medium``
    """

    if pool.exposure == Exposure.SINGLE or pool.no_il_flag:
        return ILRisk.NONE
    if pool.il7d is not None:
        magnitude = abs(pool.il7d)
        if magnitude < IL_LOW_THRESHOLD:
            return ILRisk.LOW
        if magnitude < IL_HIGH_THRESHOLD:
            return ILRisk.MEDIUM
        return ILRisk.HIGH
    if pool.stablecoin:
        return ILRisk.LOW
    return ILRisk.MEDIUM


def beefy_chain_slug(chain: str) -> str | None:
    return BEEFY_CHAIN_SLUGS.get(chain)


def is_beefy_eligible(pool: Pool) -> bool:
    """Whether Beefy could run a vault over this pool's protocol and chain."""

    return (
        pool.project.lower() in BEEFY_SUPPORTED_PROTOCOLS
        and beefy_chain_slug(pool.chain) is not None
    )


def _display_name(project: str) -> str:
    return " ".join(part[:1].upper() + part[1:] for part in project.split("-"))


def detect_auto_compound(pool: Pool) -> AutoCompoundInfo:
    """Classify auto-compounding capability.

    ``is_beefy`` implies ``auto_compound``. ``beefy_available`` is the softer
    "a Beefy vault could exist" signal and is only informative when the pool
    is not already auto-compounded.
    """

    project = pool.project.lower()
    if project == "beefy":
        return AutoCompoundInfo(
            auto_compound=True,
            auto_compound_project="Beefy",
            is_beefy=True,
            beefy_available=True,
        )

    beefy_available = is_beefy_eligible(pool)
    if project in AUTO_COMPOUND_PROJECTS:
        return AutoCompoundInfo(
            auto_compound=True,
            auto_compound_project=_display_name(pool.project),
            beefy_available=beefy_available,
        )

    meta = (pool.pool_meta or "").lower()
    symbol = pool.symbol.lower()
    if any(kw in meta or kw in symbol for kw in AUTO_COMPOUND_KEYWORDS):
        return AutoCompoundInfo(
            auto_compound=True,
            auto_compound_project=pool.project,
            beefy_available=beefy_available,
        )

    return AutoCompoundInfo(beefy_available=beefy_available)


def classify_pool(pool: Pool) -> Pool:
    """Return a copy of ``pool`` with ``il_risk`` resolved."""

    return replace(pool, il_risk=classify_il_risk(pool))


__all__ = [
    "AutoCompoundInfo",
    "classify_il_risk",
    "classify_pool",
    "detect_auto_compound",
    "is_beefy_eligible",
    "beefy_chain_slug",
]
