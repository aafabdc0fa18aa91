"""Map loosely-typed DefiLlama pool records onto :class:`~defi_alpha.core.Pool`."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any

from .core import Exposure, Pool
from .errors import MalformedUpstreamRecord

logger = logging.getLogger(__name__)


def _optional_float(raw: Mapping[str, Any], key: str) -> float | None:
    value = raw.get(key)
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _optional_tokens(raw: Mapping[str, Any], key: str) -> tuple[str, ...] | None:
    value = raw.get(key)
    if not isinstance(value, (list, tuple)):
        return None
    return tuple(str(v) for v in value if v is not None)


def _optional_str(raw: Mapping[str, Any], key: str) -> str | None:
    value = raw.get(key)
    return None if value is None else str(value)


def normalize_pool(raw: Mapping[str, Any]) -> Pool | None:
    """Return a :class:`Pool` for ``raw`` or ``None`` when it is filtered out.

    Records without positive TVL or with a missing/negative APY are rejected
    (``None``). Records whose identity fields are missing or not strings raise
    :class:`MalformedUpstreamRecord`.
    """

    if not isinstance(raw, Mapping):
        raise MalformedUpstreamRecord(f"expected a mapping, got {type(raw).__name__}")

    tvl = _optional_float(raw, "tvlUsd")
    apy = _optional_float(raw, "apy")
    if tvl is None or tvl <= 0 or apy is None or apy < 0:
        return None

    pool_id = raw.get("pool")
    if not isinstance(pool_id, str) or not pool_id:
        raise MalformedUpstreamRecord(f"missing pool id: {pool_id!r}")
    identity = {}
    for key in ("chain", "project", "symbol"):
        value = raw.get(key)
        if not isinstance(value, str):
            raise MalformedUpstreamRecord(f"pool {pool_id}: field {key!r} is {value!r}")
        identity[key] = value

    return Pool(
        pool_id=pool_id,
        chain=identity["chain"],
        project=identity["project"],
        symbol=identity["symbol"],
        tvl_usd=tvl,
        apy=apy,
        apy_base=_optional_float(raw, "apyBase"),
        apy_reward=_optional_float(raw, "apyReward"),
        reward_tokens=_optional_tokens(raw, "rewardTokens"),
        underlying_tokens=_optional_tokens(raw, "underlyingTokens"),
        il7d=_optional_float(raw, "il7d"),
        exposure=Exposure.SINGLE if raw.get("exposure") == "single" else Exposure.MULTI,
        stablecoin=raw.get("stablecoin") is True,
        no_il_flag=raw.get("ilRisk") == "no",
        volume_usd_7d=_optional_float(raw, "volumeUsd7d"),
        apy_pct_1d=_optional_float(raw, "apyPct1D"),
        apy_pct_7d=_optional_float(raw, "apyPct7D"),
        apy_pct_30d=_optional_float(raw, "apyPct30D"),
        pool_meta=_optional_str(raw, "poolMeta"),
        url=_optional_str(raw, "url"),
    )


def normalize_pools(raws: Iterable[Any]) -> list[Pool]:
    """Normalise a whole feed, dropping rejected and malformed records."""

    pools: list[Pool] = []
    malformed = 0
    for raw in raws:
        try:
            pool = normalize_pool(raw)
        except MalformedUpstreamRecord as exc:
            malformed += 1
            logger.debug("Dropping malformed record: %s", exc)
            continue
        if pool is not None:
            pools.append(pool)
    if malformed:
        logger.info("Dropped %d malformed pool records", malformed)
    return pools


__all__ = ["normalize_pool", "normalize_pools"]
