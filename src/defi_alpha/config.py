"""TOML configuration with environment overrides."""

from __future__ import annotations

import copy
import logging
import os
import tomllib
from pathlib import Path
from typing import Any, cast

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "feed": {
        "url": "https://yields.llama.fi/pools",
        "timeout": 30.0,
        "cache_path": "",
    },
    "cache": {"ttl_seconds": 120.0},
    "query": {
        "default_min_tvl": 5_000_000.0,
        "default_min_apy": 0.0,
        "max_results": 200,
    },
    "server": {"host": "0.0.0.0", "port": 5000},
    "reporting": {
        "top_n": 20,
        "outdir": "",
        "charts": ["chain", "scatter"],
        "show": False,
    },
    "logging": {"level": "INFO"},
}


def load_config(path: str | Path | None = None) -> dict[str, Any]:
    """Load configuration from a TOML file and merge with defaults.

    Parameters
    ----------
    path:
        Optional path to a configuration file. Falls back to the
        ``DEFI_ALPHA_CONFIG`` environment variable, then to the built-in
        defaults.

    Returns
    -------
    dict[str, Any]
        Configuration dictionary with file and environment overrides applied.
    """

    cfg = copy.deepcopy(DEFAULT_CONFIG)

    raw_path = path or os.getenv("DEFI_ALPHA_CONFIG")
    cfg_path = Path(raw_path) if raw_path else None
    if cfg_path and cfg_path.is_file():
        with open(cfg_path, "rb") as f:
            file_cfg = tomllib.load(f)
        for k, v in file_cfg.items():
            if isinstance(v, dict) and isinstance(cfg.get(k), dict):
                cast(dict, cfg[k]).update(v)
            else:
                cfg[k] = v
    elif cfg_path:
        logger.warning("Config file not found at %s. Using defaults.", cfg_path)

    _apply_env(cfg)
    return cfg


def _apply_env(cfg: dict[str, Any]) -> None:
    if url := os.getenv("DEFI_ALPHA_FEED_URL"):
        cfg["feed"]["url"] = url
    if ttl := os.getenv("DEFI_ALPHA_CACHE_TTL"):
        try:
            cfg["cache"]["ttl_seconds"] = float(ttl)
        except ValueError:
            logger.warning("Ignoring non-numeric DEFI_ALPHA_CACHE_TTL=%r", ttl)
    if outdir := os.getenv("DEFI_ALPHA_OUTDIR"):
        cfg["reporting"]["outdir"] = outdir
    if level := os.getenv("DEFI_ALPHA_LOG_LEVEL"):
        cfg["logging"]["level"] = level.upper()


__all__ = ["DEFAULT_CONFIG", "load_config"]
