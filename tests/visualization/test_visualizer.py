"""Tests for visualization helpers capturing Matplotlib interactions."""

from __future__ import annotations

from typing import Any

import pandas as pd
import pytest

from defi_alpha.visualization import Visualizer


class PyplotRecorder:
    """Records every pyplot call made by Visualizer as (name, args, kwargs)."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []

    def __getattr__(self, name: str):
        def _record(*args: Any, **kwargs: Any) -> None:
            # materialise Series arguments so assertions compare plain lists
            plain = tuple(list(a) if isinstance(a, pd.Series) else a for a in args)
            self.calls.append((name, plain, kwargs))

        return _record

    def named(self, name: str) -> list[tuple[str, tuple[Any, ...], dict[str, Any]]]:
        return [call for call in self.calls if call[0] == name]

    def get_call(self, name: str) -> tuple[str, tuple[Any, ...], dict[str, Any]]:
        matches = self.named(name)
        if not matches:
            raise AssertionError(f"no call named {name!r} recorded")
        return matches[0]


@pytest.fixture()
def spy(monkeypatch: pytest.MonkeyPatch) -> PyplotRecorder:
    recorder = PyplotRecorder()
    monkeypatch.setattr(Visualizer, "_plt", staticmethod(lambda: recorder))
    return recorder


def test_bar_chain_tvl_plots_top_chains_in_billions(spy: PyplotRecorder) -> None:
    df = pd.DataFrame(
        {
            "chain": ["Base", "Ethereum", "Arbitrum"],
            "tvl": [2e9, 8e9, 4e9],
            "count": [1, 3, 2],
        }
    )

    Visualizer.bar_chain_tvl(df, title="Chains", top_n=2, show=False)

    bar_call = spy.get_call("bar")
    assert bar_call[1][0] == ["Ethereum", "Arbitrum"]
    assert bar_call[1][1] == [8.0, 4.0]
    assert spy.get_call("title")[1][0] == "Chains"
    assert spy.get_call("xticks")[2]["rotation"] == 45
    assert not spy.named("show")
    assert not spy.named("savefig")


def test_bar_chain_tvl_saves_and_shows(spy: PyplotRecorder) -> None:
    df = pd.DataFrame({"chain": ["Ethereum"], "tvl": [1e9]})

    Visualizer.bar_chain_tvl(df, save_path="chart.png", show=True)

    assert spy.get_call("savefig")[1][0] == "chart.png"
    assert spy.named("show")


def test_empty_frames_draw_nothing(spy: PyplotRecorder) -> None:
    Visualizer.bar_chain_tvl(pd.DataFrame(columns=["chain", "tvl"]), show=False)
    Visualizer.scatter_tvl_apy(pd.DataFrame(), show=False)

    assert spy.calls == []


def test_scatter_tvl_apy_scales_bubbles_and_annotations(spy: PyplotRecorder) -> None:
    df = pd.DataFrame(
        {
            "tvlUsd": [1_000_000.0, 2_500_000.0],
            "apy": [4.0, 6.0],
            "riskAdjustedScore": [2.0, 1.0],
            "symbol": ["USDC", "WETH-USDC"],
        }
    )

    Visualizer.scatter_tvl_apy(df, title="TVL vs APY", show=False)

    scatter_call = spy.get_call("scatter")
    assert scatter_call[1][0] == [1_000_000.0, 2_500_000.0]
    assert scatter_call[1][1] == [4.0, 6.0]
    assert scatter_call[2]["s"] == [300.0, 150.0]
    assert spy.get_call("xscale")[1][0] == "log"
    assert [call[1][0] for call in spy.named("annotate")] == ["USDC", "WETH-USDC"]


def test_scatter_without_score_column_uses_default_size(spy: PyplotRecorder) -> None:
    df = pd.DataFrame({"tvlUsd": [1e6], "apy": [3.0]})

    Visualizer.scatter_tvl_apy(df, show=False, annotate=False)

    assert spy.get_call("scatter")[2]["s"] is None
    assert not spy.named("annotate")
