"""
DefiAlpha HTTP API
Thin FastAPI surface over the pool cache and query engine.

Endpoints:
- GET  /api/pools                 -> filtered/sorted pools + snapshot aggregates
- POST /api/refresh               -> force a refetch, returns lastUpdated
- GET  /api/chains                -> pool count per chain and chain aliases
- GET  /api/recommend             -> risk-profiled top picks
- GET  /api/alpha-brain/context   -> top-20 text summary for the advisor chat
"""

from __future__ import annotations

import logging
import math
import threading
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .cache import PoolCache
from .chat_context import build_snapshot_context
from .core.constants import CHAIN_ALIASES
from .errors import InvalidQuery, UpstreamUnavailable
from .pipeline import isoformat_z
from .query import QueryEngine
from .recommend import RiskTolerance, recommend

logger = logging.getLogger(__name__)


def _invalid(details: list[dict[str, Any]], **extra: Any) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={**extra, "error": "Invalid query parameters", "details": details},
    )


def _unavailable(**extra: Any) -> JSONResponse:
    return JSONResponse(status_code=503, content={**extra, "error": "Data not available"})


def _float_param(value: str | None, default: float) -> float:
    try:
        number = float(value) if value not in (None, "") else default
    except ValueError:
        return default
    return default if math.isnan(number) else max(0.0, number)


def create_app(
    cache: PoolCache,
    *,
    engine: QueryEngine | None = None,
    warm_on_startup: bool = True,
) -> FastAPI:
    """Build the API around an existing cache.

    With ``warm_on_startup`` the first upstream fetch starts in the background
    when the app starts, so boot never waits on the feed.
    """

    engine = engine or QueryEngine(cache)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        if warm_on_startup:
            threading.Thread(target=cache.init, name="pool-cache-warmup", daemon=True).start()
        yield
        cache.shutdown()

    app = FastAPI(
        title="DefiAlpha API",
        description="Risk-adjusted DeFi yield pool discovery",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-API-Key"],
    )

    @app.get("/api/pools")
    def get_pools(request: Request):
        try:
            return engine.query_params(request.query_params)
        except InvalidQuery as exc:
            return _invalid(exc.details)
        except UpstreamUnavailable:
            logger.exception("Error fetching pools")
            return _unavailable()

    @app.post("/api/refresh")
    def refresh():
        try:
            snapshot = cache.force_refresh()
        except UpstreamUnavailable:
            logger.exception("Error refreshing data")
            return JSONResponse(status_code=500, content={"error": "Failed to refresh data"})
        return {"success": True, "lastUpdated": snapshot.last_updated}

    @app.get("/api/chains")
    def get_chains():
        try:
            snapshot = cache.get_snapshot()
        except UpstreamUnavailable:
            logger.exception("Error in /api/chains")
            return _unavailable(success=False)

        counts: dict[str, int] = {}
        for pool in snapshot.pools:
            counts[pool.chain] = counts.get(pool.chain, 0) + 1
        chains = sorted(
            ({"name": name, "poolCount": count} for name, count in counts.items()),
            key=lambda c: c["poolCount"],
            reverse=True,
        )
        return {
            "success": True,
            "total": len(chains),
            "chains": chains,
            "aliases": {k: list(v) for k, v in CHAIN_ALIASES.items()},
            "timestamp": isoformat_z(datetime.now(tz=UTC)),
        }

    @app.get("/api/recommend")
    def get_recommendation(request: Request):
        params = request.query_params
        raw_risk = params.get("riskTolerance") or RiskTolerance.MEDIUM.value
        try:
            risk = RiskTolerance(raw_risk)
        except ValueError:
            return _invalid(
                [
                    {
                        "field": "riskTolerance",
                        "message": "Invalid enum value. Expected 'low', 'medium', 'high'",
                        "received": raw_risk,
                    }
                ],
                success=False,
            )
        if api_key := request.headers.get("x-api-key"):
            logger.info("/api/recommend called with an API key (%s...)", api_key[:4])
        try:
            snapshot = cache.get_snapshot()
        except UpstreamUnavailable:
            logger.exception("Error in /api/recommend")
            return _unavailable(success=False)
        result = recommend(
            snapshot,
            chains=params.get("chains") or "all",
            min_apy=_float_param(params.get("minApy"), 5.0),
            risk_tolerance=risk,
            user_query=params.get("userQuery") or "",
        )
        return result.to_dict()

    @app.get("/api/alpha-brain/context")
    def get_chat_context():
        try:
            snapshot = cache.get_snapshot()
        except UpstreamUnavailable:
            logger.exception("Error building chat context")
            return _unavailable()
        return {"context": build_snapshot_context(snapshot)}

    return app


__all__ = ["create_app"]
