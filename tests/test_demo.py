from __future__ import annotations

from pathlib import Path

import pytest

import defi_alpha_demo

FIXTURE = Path(__file__).resolve().parent / "fixtures" / "defillama_pools.json"


def _write_config(tmp_path: Path, outdir: Path | None, feed: Path = FIXTURE) -> Path:
    cfg = tmp_path / "demo.toml"
    lines = [
        "[feed]",
        f'cache_path = "{feed.as_posix()}"',
        "[reporting]",
        "top_n = 3",
        "charts = []",
        f'outdir = "{outdir.as_posix() if outdir else ""}"',
    ]
    cfg.write_text("\n".join(lines) + "\n")
    return cfg


@pytest.fixture(autouse=True)
def _no_network(monkeypatch: pytest.MonkeyPatch) -> None:
    def _unexpected(*_args: object, **_kwargs: object) -> None:
        raise AssertionError("demo should read the cached feed")

    monkeypatch.setattr("defi_alpha.sources.defillama.urllib.request.urlopen", _unexpected)
    monkeypatch.delenv("DEFI_ALPHA_OUTDIR", raising=False)


def test_report_prints_leaderboard_and_writes_csvs(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    outdir = tmp_path / "out"

    assert defi_alpha_demo.main(["report", "--config", str(_write_config(tmp_path, outdir))]) == 0

    out = capsys.readouterr().out
    assert "Pools in snapshot: 5" in out
    assert "uniswap-v3" in out
    assert "## Current Market Data" in out
    assert (outdir / "pools.csv").exists()
    assert (outdir / "topN.csv").exists()


def test_report_fails_cleanly_without_data(tmp_path: Path) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("not json")

    cfg = _write_config(tmp_path, None, feed=broken)

    assert defi_alpha_demo.main(["--config", str(cfg)]) == 1
