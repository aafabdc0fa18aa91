"""Matplotlib-based chart helpers for DefiAlpha snapshots."""

from __future__ import annotations

import pandas as pd


class Visualizer:
    """Collection of static helpers that turn snapshot tables into charts."""

    @staticmethod
    def _plt():
        try:
            import matplotlib.pyplot as plt
        except Exception as exc:  # pragma: no cover
            raise RuntimeError(
                "matplotlib is required for visualization. Install via pip."
            ) from exc
        return plt

    @staticmethod
    def bar_chain_tvl(
        distribution: pd.DataFrame,
        title: str = "TVL by Chain",
        top_n: int = 10,
        *,
        save_path: str | None = None,
        show: bool = True,
    ) -> None:
        """Bar chart of summed TVL for the ``top_n`` largest chains.

        ``distribution`` needs ``chain`` and ``tvl`` columns, as produced from
        :attr:`PoolSnapshot.chain_distribution`.
        """
        if distribution.empty:
            return
        df = distribution.sort_values("tvl", ascending=False).head(top_n)
        plt = Visualizer._plt()
        plt.figure(figsize=(10, 6))
        plt.bar(df["chain"], df["tvl"] / 1e9)  # billions
        plt.title(title)
        plt.ylabel("TVL (USD bn)")
        plt.xticks(rotation=45, ha="right")
        plt.tight_layout()
        if save_path:
            plt.savefig(save_path, bbox_inches="tight")
        if show:
            plt.show()

    @staticmethod
    def scatter_tvl_apy(
        df: pd.DataFrame,
        title: str = "TVL vs. APY",
        x_col: str = "tvlUsd",
        y_col: str = "apy",
        size_col: str | None = "riskAdjustedScore",
        annotate: bool = True,
        *,
        save_path: str | None = None,
        show: bool = True,
    ) -> None:
        if df.empty:
            return
        sizes = None
        if size_col and size_col in df.columns:
            max_val = float(df[size_col].max())
            if max_val > 0:
                sizes = (df[size_col] / max_val * 300).tolist()
        plt = Visualizer._plt()
        plt.figure(figsize=(10, 6))
        plt.scatter(df[x_col], df[y_col], s=sizes)  # apy already in percent
        if annotate and "symbol" in df.columns:
            for _, row in df.iterrows():
                plt.annotate(
                    str(row.get("symbol", "")),
                    (row[x_col], row[y_col]),
                    textcoords="offset points",
                    xytext=(5, 5),
                )
        plt.xscale("log")
        plt.xlabel("TVL (USD, log-scale)")
        plt.ylabel("APY (%)")
        plt.title(title)
        plt.tight_layout()
        if save_path:
            plt.savefig(save_path, bbox_inches="tight")
        if show:
            plt.show()


__all__ = ["Visualizer"]
