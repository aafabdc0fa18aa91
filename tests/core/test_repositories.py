import pytest

from defi_alpha.core import (
    Exposure,
    FilterState,
    ILRisk,
    PoolRepository,
    PoolWithScore,
    ProjectType,
    SortDirection,
    SortField,
    SortState,
)
from defi_alpha.core.repositories import is_lending, matches_filters


@pytest.fixture
def sample_pools(pool_factory) -> list[PoolWithScore]:
    """Synthetic pool universe covering assorted filter attributes."""

    return [
        pool_factory(
            "aave-usdc",
            project="aave-v3",
            symbol="USDC",
            tvl_usd=300_000_000.0,
            apy=4.0,
            exposure=Exposure.SINGLE,
            stablecoin=True,
            il_risk=ILRisk.NONE,
            risk_adjusted_score=4.0,
        ),
        pool_factory(
            "uni-eth",
            tvl_usd=50_000_000.0,
            apy=20.0,
            il_risk=ILRisk.MEDIUM,
            risk_adjusted_score=15.0,
            apy_pct_7d=3.0,
        ),
        pool_factory(
            "quick-matic",
            chain="Polygon",
            project="quickswap-dex",
            symbol="WMATIC-USDC",
            tvl_usd=2_000_000.0,
            apy=40.0,
            il_risk=ILRisk.HIGH,
            risk_adjusted_score=4.0,
            apy_pct_7d=None,
        ),
        pool_factory(
            "curve-3pool",
            project="curve-dex",
            symbol="DAI-USDC-USDT",
            tvl_usd=100_000_000.0,
            apy=3.0,
            stablecoin=True,
            il_risk=ILRisk.LOW,
            risk_adjusted_score=2.7,
            apy_pct_7d=-1.0,
        ),
    ]


@pytest.fixture
def repository(sample_pools: list[PoolWithScore]) -> PoolRepository:
    return PoolRepository(sample_pools)


@pytest.mark.parametrize(
    ("filters", "expected"),
    [
        (FilterState(min_tvl=60_000_000.0), ["aave-usdc", "curve-3pool"]),
        (FilterState(min_apy=10.0), ["uni-eth", "quick-matic"]),
        (FilterState(chains=frozenset({"Polygon"})), ["quick-matic"]),
        (FilterState(low_il_only=True), ["aave-usdc", "curve-3pool"]),
        (FilterState(search_query="USDC-usdt"), ["curve-3pool"]),
        (FilterState(search_query="POLY"), ["quick-matic"]),
        (FilterState(project_types=frozenset({ProjectType.STABLE})), ["aave-usdc", "curve-3pool"]),
        (FilterState(project_types=frozenset({ProjectType.VOLATILE})), ["uni-eth", "quick-matic"]),
        (FilterState(project_types=frozenset({ProjectType.LENDING})), ["aave-usdc"]),
        (
            FilterState(project_types=frozenset({ProjectType.LP})),
            ["uni-eth", "quick-matic", "curve-3pool"],
        ),
        (
            FilterState(project_types=frozenset({ProjectType.LENDING, ProjectType.VOLATILE})),
            ["aave-usdc", "uni-eth", "quick-matic"],
        ),
    ],
)
def test_filter_respects_criteria(
    repository: PoolRepository,
    sample_pools: list[PoolWithScore],
    filters: FilterState,
    expected: list[str],
) -> None:
    filtered = repository.filter(filters)

    assert isinstance(filtered, PoolRepository)
    assert [pool.pool_id for pool in filtered] == expected

    # Source repository order remains unchanged.
    assert [pool.pool_id for pool in repository] == [pool.pool_id for pool in sample_pools]


def test_filters_combine_with_and(pool_factory) -> None:
    pool = pool_factory(tvl_usd=6_000_000.0, chain="Ethereum", apy=12.0, il_risk=ILRisk.LOW)
    filters = FilterState(min_tvl=5_000_000.0, chains=frozenset({"Ethereum"}), low_il_only=True)

    assert matches_filters(pool, filters)
    elsewhere = FilterState(min_tvl=5_000_000.0, chains=frozenset({"Polygon"}), low_il_only=True)
    assert not matches_filters(pool, elsewhere)


def test_empty_filter_state_matches_everything(repository: PoolRepository) -> None:
    assert len(repository.filter(FilterState())) == len(repository)


def test_is_lending_matches_project_fragments(pool_factory) -> None:
    assert is_lending(pool_factory(project="aave-v2"))
    assert is_lending(pool_factory(project="compound-v3"))
    assert is_lending(pool_factory(project="spark-lend"))
    assert not is_lending(pool_factory(project="curve-dex"))


def test_sort_is_stable_for_equal_scores(repository: PoolRepository) -> None:
    ranked = repository.sort(SortState())

    # aave-usdc and quick-matic tie on 4.0 and keep their input order
    assert [p.pool_id for p in ranked] == ["uni-eth", "aave-usdc", "quick-matic", "curve-3pool"]


def test_sort_ascending_by_tvl(repository: PoolRepository) -> None:
    ranked = repository.sort(SortState(SortField.TVL_USD, SortDirection.ASC))

    assert [p.tvl_usd for p in ranked] == sorted(p.tvl_usd for p in repository)


def test_sort_apy_pct_7d_treats_missing_as_zero(repository: PoolRepository) -> None:
    ranked = repository.sort(SortState(SortField.APY_PCT_7D, SortDirection.DESC))

    # aave-usdc and quick-matic both lack a 7d change and rank as 0 in input order
    assert [p.pool_id for p in ranked] == ["uni-eth", "aave-usdc", "quick-matic", "curve-3pool"]
    assert ranked.to_list()[2].apy_pct_7d is None


def test_head_truncates_without_mutating(repository: PoolRepository) -> None:
    top = repository.head(2)

    assert len(top) == 2
    assert len(repository) == 4
    assert len(repository.head(-1)) == 0


def test_filter_returns_new_repository_instance(repository: PoolRepository) -> None:
    filtered = repository.filter(FilterState())

    assert filtered is not repository
    assert list(filtered) == list(repository)

    filtered.to_list().clear()

    assert len(filtered) == len(repository) == 4


def test_to_dataframe_uses_api_columns(repository: PoolRepository) -> None:
    df = repository.to_dataframe()

    assert list(df["pool"]) == ["aave-usdc", "uni-eth", "quick-matic", "curve-3pool"]
    assert {"tvlUsd", "ilRisk", "riskAdjustedScore", "apyPct7D"} <= set(df.columns)
    assert df.loc[0, "ilRisk"] == "none"
