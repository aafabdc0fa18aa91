"""DefiLlama yields feed adapter."""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from pathlib import Path
from typing import Any

from ..errors import UpstreamUnavailable

logger = logging.getLogger(__name__)


class DefiLlamaSource:
    """HTTP client for https://yields.llama.fi/pools.

    The whole pool universe arrives in a single unauthenticated GET. When
    ``cache_path`` points at an existing JSON file it is read instead of the
    network on every call, which keeps offline runs and tests deterministic.
    The file is never written; a missing file means live fetches.
    """

    URL = "https://yields.llama.fi/pools"

    def __init__(
        self,
        url: str | None = None,
        *,
        timeout: float = 30.0,
        cache_path: str | None = None,
    ) -> None:
        self.url = url or self.URL
        self.timeout = timeout
        self.cache_path = Path(cache_path) if cache_path else None

    def _get_json(self) -> Any:
        with urllib.request.urlopen(self.url, timeout=self.timeout) as resp:
            status = getattr(resp, "status", 200)
            if not 200 <= status < 300:
                raise UpstreamUnavailable(f"API error: {status}")
            return json.load(resp)

    def _load(self) -> Any:
        if self.cache_path and self.cache_path.exists():
            with self.cache_path.open() as f:
                return json.load(f)
        return self._get_json()

    def fetch_raw(self) -> list[Any]:
        """Return the raw ``data`` records, raising :class:`UpstreamUnavailable`."""

        logger.info("Fetching pools from DefiLlama: %s", self.url)
        try:
            payload = self._load()
        except UpstreamUnavailable:
            raise
        except (urllib.error.URLError, TimeoutError, OSError, ValueError) as exc:
            raise UpstreamUnavailable(f"DefiLlama request failed: {exc}") from exc

        if not isinstance(payload, dict):
            raise UpstreamUnavailable("DefiLlama response is not a JSON object")
        records = payload.get("data") or []
        if not isinstance(records, list):
            raise UpstreamUnavailable("DefiLlama response 'data' is not a list")
        return records


__all__ = ["DefiLlamaSource"]
