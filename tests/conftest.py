import json
import sys
from pathlib import Path
from typing import Any

import pytest

# Ensure the package is importable without installation when running tests locally
pkg_src = Path(__file__).resolve().parents[1] / "src"
if str(pkg_src) not in sys.path:
    sys.path.insert(0, str(pkg_src))

from defi_alpha.core import ILRisk, PoolWithScore  # noqa: E402

FIXTURES = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture(scope="session")
def raw_records() -> list[dict[str, Any]]:
    """Raw DefiLlama ``data`` records: five valid pools and three rejects."""

    payload = json.loads((FIXTURES / "defillama_pools.json").read_text())
    return payload["data"]


class StaticSource:
    """Raw source returning canned records, or raising once ``error`` is set."""

    def __init__(self, records: list[dict[str, Any]]) -> None:
        self.records = records
        self.error: Exception | None = None
        self.calls = 0

    def fetch_raw(self) -> list[Any]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.records)


@pytest.fixture()
def static_source(raw_records: list[dict[str, Any]]) -> StaticSource:
    return StaticSource(raw_records)


def make_pool(pool_id: str = "p", **overrides: Any) -> PoolWithScore:
    """Enriched pool with neutral defaults for filter/sort tests."""

    fields: dict[str, Any] = {
        "pool_id": pool_id,
        "chain": "Ethereum",
        "project": "uniswap-v3",
        "symbol": "WETH-USDC",
        "tvl_usd": 10_000_000.0,
        "apy": 10.0,
        "il_risk": ILRisk.MEDIUM,
    }
    fields.update(overrides)
    return PoolWithScore(**fields)


@pytest.fixture()
def pool_factory():
    return make_pool


@pytest.fixture()
def source_factory():
    return StaticSource
