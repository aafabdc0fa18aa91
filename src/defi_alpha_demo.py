from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

import pandas as pd

from defi_alpha import (
    DefiLlamaSource,
    FilterState,
    PoolCache,
    QueryEngine,
    SortState,
    UpstreamUnavailable,
    filter_and_sort,
    load_config,
)
from defi_alpha.chat_context import build_snapshot_context
from defi_alpha.reporting import cross_section_report
from defi_alpha.visualization import Visualizer

logger = logging.getLogger(__name__)


def build_cache(cfg: dict[str, Any]) -> PoolCache:
    """Wire the feed source and cache from a loaded configuration."""

    feed = cfg.get("feed", {})
    source = DefiLlamaSource(
        feed.get("url") or None,
        timeout=float(feed.get("timeout", 30.0)),
        cache_path=feed.get("cache_path") or None,
    )
    ttl = float(cfg.get("cache", {}).get("ttl_seconds", 120.0))
    # followers never wait longer than the leader's own request can take
    return PoolCache(source, ttl_seconds=ttl, wait_timeout=source.timeout + 5.0)


def build_engine(cfg: dict[str, Any], cache: PoolCache) -> QueryEngine:
    q = cfg.get("query", {})
    return QueryEngine(
        cache,
        max_results=int(q.get("max_results", 200)),
        default_min_tvl=float(q.get("default_min_tvl", 5_000_000.0)),
        default_min_apy=float(q.get("default_min_apy", 0.0)),
    )


def report(cfg: dict[str, Any]) -> int:
    """Fetch once, print the leaderboard and write optional CSV/chart outputs."""

    cache = build_cache(cfg)
    try:
        snapshot = cache.get_snapshot()
    except UpstreamUnavailable as exc:
        logger.error("Cannot build report: %s", exc)
        return 1

    rep = cfg.get("reporting", {})
    top_n = int(rep.get("top_n", 20))
    q = cfg.get("query", {})
    filters = FilterState(
        min_tvl=float(q.get("default_min_tvl", 5_000_000.0)),
        min_apy=float(q.get("default_min_apy", 0.0)),
    )
    top = filter_and_sort(snapshot.pools, filters, SortState(), limit=top_n)
    print(f"Pools in snapshot: {snapshot.stats.total_pools} (lastUpdated {snapshot.last_updated})")
    if top:
        df = pd.DataFrame([p.to_dict() for p in top])
        cols = ["project", "symbol", "chain", "apy", "tvlUsd", "ilRisk", "riskAdjustedScore"]
        print(df[cols].round(2).to_string(index=False))
    print()
    print(build_snapshot_context(snapshot))

    outdir = Path(rep["outdir"]) if rep.get("outdir") else None
    show = bool(rep.get("show", False)) if not outdir else False
    charts = rep.get("charts", [])
    if outdir:
        paths = cross_section_report(snapshot, outdir, top_n=top_n)
        logger.info("Wrote %s", ", ".join(str(p) for p in paths.values()))
    if "chain" in charts:
        Visualizer.bar_chain_tvl(
            pd.DataFrame([c.to_dict() for c in snapshot.chain_distribution]),
            save_path=str(outdir / "bar_chain_tvl.png") if outdir else None,
            show=show,
        )
    if "scatter" in charts and top:
        Visualizer.scatter_tvl_apy(
            pd.DataFrame([p.to_dict() for p in top]),
            title="TVL vs APY (bubble=risk-adjusted score)",
            save_path=str(outdir / "scatter_tvl_apy.png") if outdir else None,
            show=show,
        )
    return 0


def serve(cfg: dict[str, Any]) -> int:
    import uvicorn

    from defi_alpha.api import create_app

    cache = build_cache(cfg)
    app = create_app(cache, engine=build_engine(cfg, cache))
    server = cfg.get("server", {})
    uvicorn.run(app, host=str(server.get("host", "0.0.0.0")), port=int(server.get("port", 5000)))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run a one-off report or the HTTP API using file/env configuration."""

    parser = argparse.ArgumentParser(description="DefiAlpha yield pool discovery")
    parser.add_argument("command", nargs="?", choices=["report", "serve"], default="report")
    parser.add_argument("--config", default=None, help="path to a TOML config file")
    args = parser.parse_args(argv)

    cfg = load_config(args.config)
    logging.basicConfig(
        level=str(cfg.get("logging", {}).get("level", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.command == "serve":
        return serve(cfg)
    return report(cfg)


if __name__ == "__main__":
    sys.exit(main())
