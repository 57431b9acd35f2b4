from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest

from fpg.data.ingestion import RecordsSourceConfig
from fpg.data.validation import DataValidationError
from fpg.graph.errors import EmptyInputError
from fpg.pipelines import build_bipartite


def test_build_writes_graph_files(chdir_sandbox, small_records_df: pd.DataFrame):
    Path("data/raw").mkdir(parents=True)
    small_records_df.to_csv("data/raw/contracts.csv", index=False)

    out = build_bipartite.run(build_bipartite.BuildBipartiteConfig())

    base = Path("outputs/sbm/graph")
    assert (base / "edgelist.txt").read_text(encoding="utf-8").splitlines() == [
        "1\t6", "1\t5", "3\t6", "2\t6", "3\t4", "1\t6",
    ]
    assert (base / "types.txt").read_text(encoding="utf-8").splitlines() == ["1", "1", "1", "2", "2", "2"]

    vendors = pd.read_parquet(base / "vendor_nodes.parquet")
    assert vendors["key"].tolist() == ["0107", "0311", "0999"]
    assert vendors["node_id"].tolist() == [1, 2, 3]

    meta = json.loads((base / "graph_meta.json").read_text(encoding="utf-8"))
    assert meta["n_records"] == 8
    assert meta["n_filtered_records"] == 6
    assert meta["n_edges"] == 6
    assert meta["n_distinct_edges"] == 5
    assert meta["product_id_range"] == [4, 6]
    assert out["meta"] == meta


def test_build_is_deterministic(tmp_path: Path, small_records_df: pd.DataFrame):
    a = build_bipartite.run(build_bipartite.BuildBipartiteConfig(out_dir=tmp_path / "a"), records=small_records_df)
    shuffled = small_records_df.sample(frac=1.0, random_state=11).reset_index(drop=True)
    b = build_bipartite.run(build_bipartite.BuildBipartiteConfig(out_dir=tmp_path / "b"), records=shuffled)

    assert a["vendor_index"] == b["vendor_index"]
    assert a["product_index"] == b["product_index"]
    assert (tmp_path / "a" / "types.txt").read_bytes() == (tmp_path / "b" / "types.txt").read_bytes()


def test_empty_graph_writes_nothing(tmp_path: Path, small_records_df: pd.DataFrame):
    cfg = build_bipartite.BuildBipartiteConfig(out_dir=tmp_path / "graph", min_purchases=10_000)

    with pytest.raises(EmptyInputError):
        build_bipartite.run(cfg, records=small_records_df)
    assert not cfg.out_dir.exists()


def test_missing_input_raises(tmp_path: Path):
    cfg = build_bipartite.BuildBipartiteConfig(
        source=RecordsSourceConfig(path=tmp_path / "missing.csv"),
        out_dir=tmp_path / "graph",
    )
    with pytest.raises(FileNotFoundError):
        build_bipartite.run(cfg)


def test_mixed_key_types_write_nothing(tmp_path: Path):
    records = pd.DataFrame(
        {
            "vendor_key": pd.Series(["V1", 7], dtype=object),
            "product_key": ["P1", "P2"],
            "purchase_count": [25, 30],
            "amount": [1.0, 2.0],
        }
    )
    cfg = build_bipartite.BuildBipartiteConfig(out_dir=tmp_path / "graph")

    with pytest.raises(DataValidationError):
        build_bipartite.run(cfg, records=records)
    assert not cfg.out_dir.exists()
