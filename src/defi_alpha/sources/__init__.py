"""Upstream feed adapters used by :mod:`defi_alpha`."""

from __future__ import annotations

from typing import Any, Protocol

from .defillama import DefiLlamaSource


class RawPoolSource(Protocol):
    """Adapter protocol returning the raw, untyped pool records of one fetch."""

    def fetch_raw(self) -> list[Any]: ...


__all__ = ["RawPoolSource", "DefiLlamaSource"]
