"""Core data structures for :mod:`defi_alpha`.

This subpackage groups the fundamental models, lookup tables and the pool
repository so they can be shared without importing the entire public
interface exposed in :mod:`defi_alpha.__init__`.
"""

from __future__ import annotations

from .constants import STABLE_TOKENS
from .models import (
    ChainShare,
    Exposure,
    FilterState,
    ILRisk,
    Pool,
    PoolSnapshot,
    PoolStats,
    PoolWithScore,
    ProjectType,
    SortDirection,
    SortField,
    SortState,
)
from .repositories import PoolRepository

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
    "STABLE_TOKENS",
]
