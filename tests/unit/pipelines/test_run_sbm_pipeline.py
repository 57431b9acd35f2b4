from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest

from fpg.detect.base import FixedCommunityCounts
from fpg.pipelines import build_bipartite, run_sbm


def _cfg(tmp_path: Path, **kw) -> run_sbm.RunSBMConfig:
    return run_sbm.RunSBMConfig(
        build=build_bipartite.BuildBipartiteConfig(out_dir=tmp_path / "graph"),
        out_dir=tmp_path,
        **kw,
    )


@pytest.fixture()
def records_csv(tmp_path: Path, example_records_df: pd.DataFrame) -> Path:
    p = tmp_path / "contracts.csv"
    example_records_df.to_csv(p, index=False)
    return p


def _with_source(cfg: run_sbm.RunSBMConfig, path: Path) -> run_sbm.RunSBMConfig:
    from dataclasses import replace

    return replace(cfg, build=replace(cfg.build, source=replace(cfg.build.source, path=path)))


def test_end_to_end_with_stub_detector(tmp_path: Path, records_csv: Path, fixed_detector_cls):
    det = fixed_detector_cls([5, 7, 2, 2])
    cfg = _with_source(_cfg(tmp_path, ka=2, kb=1), records_csv)

    out = run_sbm.run(cfg, detector=det)

    assert det.calls == [(2, 1, True)]
    assert (tmp_path / "assignment.txt").read_text(encoding="utf-8") == "5\n7\n2\n2\n"
    v = out["vendor_clusters"]
    assert dict(zip(v["vendor_key"], v["cluster_id"])) == {"V1": 5, "V2": 7}

    meta = json.loads((tmp_path / "clusters" / "clusters_meta.json").read_text(encoding="utf-8"))
    assert meta["ka"] == 2 and meta["kb"] == 1
    assert meta["deg_corr"] is True


def test_selector_is_injected(tmp_path: Path, records_csv: Path, block_detector):
    cfg = _with_source(_cfg(tmp_path, deg_corr=False), records_csv)

    out = run_sbm.run(cfg, detector=block_detector, selector=FixedCommunityCounts(2, 2))

    assert (out["ka"], out["kb"]) == (2, 2)
    assert out["product_clusters"]["cluster_id"].tolist() == [2, 3]


def test_requires_counts_or_mdl(tmp_path: Path, block_detector):
    with pytest.raises(ValueError, match="MDL"):
        run_sbm.run(_cfg(tmp_path), detector=block_detector)


def test_requires_detector_or_command(tmp_path: Path):
    with pytest.raises(ValueError, match="biSBM"):
        run_sbm.run(_cfg(tmp_path, ka=1, kb=1))


def test_wrong_length_assignment_not_persisted(tmp_path: Path, records_csv: Path, fixed_detector_cls):
    from fpg.graph.errors import LengthMismatchError

    cfg = _with_source(_cfg(tmp_path, ka=2, kb=1), records_csv)

    with pytest.raises(LengthMismatchError):
        run_sbm.run(cfg, detector=fixed_detector_cls([5, 7, 2]))
    assert not cfg.assignment_path.exists()
    assert not cfg.clusters_dir.exists()


@pytest.mark.parametrize("ka,kb", [(3, None), (None, 2)])
def test_half_set_counts_rejected(tmp_path: Path, ka, kb):
    with pytest.raises(ValueError, match="both ka and kb"):
        _cfg(tmp_path, ka=ka, kb=kb, mdl_command=("mdl", "{output}"))
