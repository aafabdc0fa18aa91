from typing import Any

import pytest

from defi_alpha.core import Exposure, ILRisk, Pool
from defi_alpha.risk_scoring import (
    beefy_chain_slug,
    classify_il_risk,
    classify_pool,
    detect_auto_compound,
    is_beefy_eligible,
)


def _pool(**overrides: Any) -> Pool:
    fields: dict[str, Any] = {
        "pool_id": "p",
        "chain": "Ethereum",
        "project": "uniswap-v3",
        "symbol": "WETH-USDC",
        "tvl_usd": 1e7,
        "apy": 10.0,
    }
    fields.update(overrides)
    return Pool(**fields)


@pytest.mark.parametrize(
    ("overrides", "expected"),
    [
        ({"exposure": Exposure.SINGLE, "il7d": 5.0}, ILRisk.NONE),
        ({"no_il_flag": True, "il7d": 5.0}, ILRisk.NONE),
        ({"il7d": 0.05}, ILRisk.LOW),
        ({"il7d": -0.09}, ILRisk.LOW),
        ({"il7d": 0.1}, ILRisk.MEDIUM),
        ({"il7d": 0.99}, ILRisk.MEDIUM),
        ({"il7d": 1.0}, ILRisk.HIGH),
        ({"il7d": -3.0}, ILRisk.HIGH),
        # a known IL reading outranks the stablecoin shortcut
        ({"il7d": 2.0, "stablecoin": True}, ILRisk.HIGH),
        ({"stablecoin": True}, ILRisk.LOW),
        ({}, ILRisk.MEDIUM),
    ],
)
def test_classify_il_risk_rules(overrides: dict[str, Any], expected: ILRisk) -> None:
    assert classify_il_risk(_pool(**overrides)) == expected


def test_classify_pool_returns_copy() -> None:
    pool = _pool(exposure=Exposure.SINGLE)
    classified = classify_pool(pool)

    assert classified.il_risk == ILRisk.NONE
    assert pool.il_risk == ILRisk.MEDIUM
    assert classified is not pool


def test_beefy_slug_lookup() -> None:
    assert beefy_chain_slug("Avalanche") == "avax"
    assert beefy_chain_slug("zkSync Era") == "zksync"
    assert beefy_chain_slug("Solana") is None


def test_beefy_eligibility_needs_protocol_and_chain() -> None:
    assert is_beefy_eligible(_pool(project="curve-dex"))
    assert not is_beefy_eligible(_pool(project="curve-dex", chain="Solana"))
    assert not is_beefy_eligible(_pool(project="aave-v3"))


def test_beefy_pool_is_auto_compounding() -> None:
    info = detect_auto_compound(_pool(project="beefy", chain="Solana"))

    assert info.auto_compound and info.is_beefy and info.beefy_available
    assert info.auto_compound_project == "Beefy"


def test_known_aggregator_gets_display_name() -> None:
    info = detect_auto_compound(_pool(project="yearn-finance"))

    assert info.auto_compound
    assert not info.is_beefy
    assert info.auto_compound_project == "Yearn Finance"
    assert not info.beefy_available


@pytest.mark.parametrize(
    "overrides",
    [{"pool_meta": "Auto-Compounding Vault"}, {"symbol": "VAULT-USDC"}],
)
def test_keyword_match_uses_raw_project_name(overrides: dict[str, Any]) -> None:
    info = detect_auto_compound(_pool(project="some-protocol", **overrides))

    assert info.auto_compound
    assert info.auto_compound_project == "some-protocol"


def test_plain_pool_may_have_beefy_vault() -> None:
    info = detect_auto_compound(_pool(project="uniswap-v3", chain="Base"))

    assert not info.auto_compound
    assert info.auto_compound_project is None
    assert info.beefy_available


def test_unknown_project_falls_through() -> None:
    info = detect_auto_compound(_pool(project="obscure-dex", chain="Unknownchain"))

    assert not info.auto_compound and not info.is_beefy and not info.beefy_available
