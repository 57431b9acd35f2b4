from __future__ import annotations

import shlex
from pathlib import Path

import pandas as pd
import pytest


@pytest.mark.integration
def test_external_bisbm_smoke(tmp_path: Path, small_records_df: pd.DataFrame, bisbm_cmd: str):
    if not bisbm_cmd:
        pytest.skip("BISBM_CMD not set")

    from fpg.data.ingestion import RecordsSourceConfig
    from fpg.pipelines import build_bipartite, run_sbm

    small_records_df.to_csv(tmp_path / "contracts.csv", index=False)
    cfg = run_sbm.RunSBMConfig(
        build=build_bipartite.BuildBipartiteConfig(
            source=RecordsSourceConfig(path=tmp_path / "contracts.csv"),
            out_dir=tmp_path / "graph",
        ),
        out_dir=tmp_path,
        ka=2,
        kb=2,
        bisbm_command=tuple(shlex.split(bisbm_cmd)),
    )

    out = run_sbm.run(cfg)

    assert set(out["vendor_clusters"]["vendor_key"]) == {"0107", "0311", "0999"}
    assert set(out["product_clusters"]["product_key"]) == {"7030", "D302", "R425"}
    assert len(out["vendor_clusters"]) + len(out["product_clusters"]) == 6
