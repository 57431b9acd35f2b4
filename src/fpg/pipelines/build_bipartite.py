# src/fpg/pipelines/build_bipartite.py
from __future__ import annotations

import argparse
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from fpg.common.io import write_json
from fpg.common.time import utc_now_iso
from fpg.data.ingestion import RecordsSourceConfig, load_records
from fpg.data.schemas import FPDS_COLUMNS
from fpg.data.validation import validate_records_df
from fpg.graph.edge_list import build_edge_list
from fpg.graph.formats import write_edgelist, write_types
from fpg.graph.node_index import build_node_indices
from fpg.graph.record_filter import DEFAULT_MIN_PURCHASES, filter_records


def _log(msg: str) -> None:
    print(f"[{datetime.now().strftime('%H:%M:%S')}] {msg}", flush=True)


# ============================================================
# Config
# ============================================================
@dataclass(frozen=True)
class BuildBipartiteConfig:
    source: RecordsSourceConfig = field(default_factory=RecordsSourceConfig)

    out_dir: Path = Path("outputs/sbm/graph")

    # vendor/product pairs with fewer purchases are dropped
    min_purchases: int = DEFAULT_MIN_PURCHASES

    @property
    def edgelist_path(self) -> Path:
        return self.out_dir / "edgelist.txt"

    @property
    def types_path(self) -> Path:
        return self.out_dir / "types.txt"

    @property
    def vendor_nodes_path(self) -> Path:
        return self.out_dir / "vendor_nodes.parquet"

    @property
    def product_nodes_path(self) -> Path:
        return self.out_dir / "product_nodes.parquet"

    @property
    def records_path(self) -> Path:
        return self.out_dir / "filtered_records.parquet"

    @property
    def meta_path(self) -> Path:
        return self.out_dir / "graph_meta.json"


# ============================================================
# Core build
# ============================================================
def run(cfg: BuildBipartiteConfig, records: Optional[pd.DataFrame] = None) -> Dict[str, Any]:
    """
    records -> filtered records -> node indices -> edgelist + types.

    Nothing is written until every in-memory stage has succeeded, so an
    empty graph or unconvertible keys leave out_dir untouched.
    """
    if records is None:
        _log(f"Loading records: {cfg.source.path}")
        records = load_records(cfg.source)
    validate_records_df(records)
    n_raw = len(records)

    _log(f"Step 1/3: Filtering records (purchase_count >= {cfg.min_purchases})")
    filtered = filter_records(records, cfg.min_purchases)
    _log(f"filtered: {len(filtered):,} of {n_raw:,} records kept")

    _log("Step 2/3: Indexing vendors + products")
    vendor_index, product_index = build_node_indices(filtered)
    _log(f"nodes: {len(vendor_index):,} vendors, {len(product_index):,} products")

    _log("Step 3/3: Building edge list + type vector")
    edges, types = build_edge_list(filtered, vendor_index, product_index)

    # arrow conversion can still fail; do it before the first file lands
    tables = {
        cfg.vendor_nodes_path: pa.Table.from_pandas(vendor_index.to_frame(), preserve_index=False),
        cfg.product_nodes_path: pa.Table.from_pandas(product_index.to_frame(), preserve_index=False),
        cfg.records_path: pa.Table.from_pandas(filtered, preserve_index=False),
    }

    cfg.out_dir.mkdir(parents=True, exist_ok=True)
    write_edgelist(cfg.edgelist_path, edges)
    write_types(cfg.types_path, types)
    for path, table in tables.items():
        pq.write_table(table, path)

    meta = {
        "source": str(cfg.source.path),
        "created_at": utc_now_iso(),
        "min_purchases": int(cfg.min_purchases),
        "n_records": int(n_raw),
        "n_filtered_records": int(len(filtered)),
        "n_edges": int(len(edges)),
        "n_distinct_edges": int(len(edges.drop_duplicates())),
        "n_vendors": int(len(vendor_index)),
        "n_products": int(len(product_index)),
        "vendor_id_range": [1, len(vendor_index)],
        "product_id_range": [len(vendor_index) + 1, len(vendor_index) + len(product_index)],
        "id_order": "numeric if every key is numeric-valued, else lexicographic on str(key)",
    }
    write_json(cfg.meta_path, meta)

    _log(f"✅ Wrote: {cfg.edgelist_path}")
    _log(f"✅ Wrote: {cfg.types_path}")
    _log(f"✅ Meta : {cfg.meta_path}")

    return {
        "edgelist_path": str(cfg.edgelist_path),
        "types_path": str(cfg.types_path),
        "meta": meta,
        "records": filtered,
        "edges": edges,
        "types": types,
        "vendor_index": vendor_index,
        "product_index": product_index,
    }


def add_source_args(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("--input", type=Path, default=RecordsSourceConfig().path)
    ap.add_argument("--min-purchases", type=int, default=DEFAULT_MIN_PURCHASES)
    ap.add_argument("--aggregate", action="store_true", help="input is one row per transaction")
    ap.add_argument("--fpds-columns", action="store_true", help="rename FPDS export headers")


def source_from_args(args: argparse.Namespace) -> RecordsSourceConfig:
    return replace(
        RecordsSourceConfig(),
        path=args.input,
        aggregate=args.aggregate,
        rename=dict(FPDS_COLUMNS) if args.fpds_columns else {},
    )


def main() -> None:
    ap = argparse.ArgumentParser(description="Build biSBM edgelist/types from contracting records")
    add_source_args(ap)
    ap.add_argument("--out", type=Path, default=BuildBipartiteConfig().out_dir)
    args = ap.parse_args()

    cfg = BuildBipartiteConfig(
        source=source_from_args(args),
        out_dir=args.out,
        min_purchases=args.min_purchases,
    )
    out = run(cfg)
    print("✅ Bipartite graph ready.")
    print(f" - {out['edgelist_path']}")
    print(f" - {out['types_path']}")


if __name__ == "__main__":
    main()
