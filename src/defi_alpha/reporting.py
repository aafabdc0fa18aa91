"""File-first CSV reports for an enriched pool snapshot."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from .core import PoolRepository, PoolSnapshot, SortState


def _ensure_outdir(outdir: str | Path) -> Path:
    p = Path(outdir)
    p.mkdir(parents=True, exist_ok=True)
    return p


def _tvl_weighted_apy(group: pd.DataFrame) -> float:
    total = group["tvlUsd"].sum()
    if not total:
        return float("nan")
    return float((group["apy"] * group["tvlUsd"]).sum() / total)


def summarise_by(df: pd.DataFrame, column: str) -> pd.DataFrame:
    """Pool count, TVL, mean and TVL-weighted APY per value of ``column``."""

    if df.empty:
        return pd.DataFrame(columns=[column, "pools", "tvl", "apy_avg", "apy_wavg"])
    grouped = df.groupby(column, sort=False)
    out = grouped.agg(pools=("pool", "count"), tvl=("tvlUsd", "sum"), apy_avg=("apy", "mean"))
    out["apy_wavg"] = grouped[["apy", "tvlUsd"]].apply(_tvl_weighted_apy)
    return out.sort_values("tvl", ascending=False).reset_index()


def cross_section_report(
    snapshot: PoolSnapshot,
    outdir: str | Path,
    *,
    top_n: int = 20,
) -> dict[str, Path]:
    """Write CSV outputs for ``snapshot`` and return them keyed by label.

    Writes the following CSVs:
      - pools.csv: every enriched pool, ranked by risk-adjusted score
      - by_chain.csv: aggregated by chain with TVL-weighted APY
      - by_il_risk.csv: aggregated by impermanent-loss tier
      - topN.csv: top-N pools by risk-adjusted score
    """

    out = _ensure_outdir(outdir)
    ranked = PoolRepository(snapshot.pools).sort(SortState())
    df = ranked.to_dataframe()

    paths = {
        "pools": out / "pools.csv",
        "by_chain": out / "by_chain.csv",
        "by_il_risk": out / "by_il_risk.csv",
        "top_n": out / "topN.csv",
    }
    df.to_csv(paths["pools"], index=False)
    summarise_by(df, "chain").to_csv(paths["by_chain"], index=False)
    summarise_by(df, "ilRisk").to_csv(paths["by_il_risk"], index=False)
    df.head(top_n).to_csv(paths["top_n"], index=False)
    return paths


__all__ = ["cross_section_report", "summarise_by"]
