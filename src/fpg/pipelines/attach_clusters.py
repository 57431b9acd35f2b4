# src/fpg/pipelines/attach_clusters.py
from __future__ import annotations

import argparse
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from fpg.common.io import write_json
from fpg.common.time import utc_now_iso
from fpg.data.schemas import GRAPH
from fpg.graph.cluster_attach import attach_clusters
from fpg.graph.formats import read_assignment
from fpg.graph.node_index import PRODUCT, VENDOR, NodeIndex
from fpg.reporting.cluster_summary import summarize_clusters


def _log(msg: str) -> None:
    print(f"[{datetime.now().strftime('%H:%M:%S')}] {msg}", flush=True)


@dataclass(frozen=True)
class AttachClustersConfig:
    # Output dir of build_bipartite
    graph_dir: Path = Path("outputs/sbm/graph")
    assignment_path: Path = Path("outputs/sbm/assignment.txt")

    out_dir: Path = Path("outputs/sbm/clusters")

    @property
    def vendor_clusters_path(self) -> Path:
        return self.out_dir / "vendor_clusters.parquet"

    @property
    def product_clusters_path(self) -> Path:
        return self.out_dir / "product_clusters.parquet"

    @property
    def vendor_summary_path(self) -> Path:
        return self.out_dir / "vendor_cluster_summary.parquet"

    @property
    def product_summary_path(self) -> Path:
        return self.out_dir / "product_cluster_summary.parquet"

    @property
    def meta_path(self) -> Path:
        return self.out_dir / "clusters_meta.json"


def _require(path: Path) -> None:
    if not path.exists():
        raise FileNotFoundError(f"Missing {path}. Run build_bipartite first.")


def load_node_indices(graph_dir: Path) -> tuple[NodeIndex, NodeIndex]:
    vendor_path = graph_dir / "vendor_nodes.parquet"
    product_path = graph_dir / "product_nodes.parquet"
    _require(vendor_path)
    _require(product_path)
    vendors = NodeIndex.from_frame(pd.read_parquet(vendor_path), VENDOR)
    products = NodeIndex.from_frame(pd.read_parquet(product_path), PRODUCT)
    return vendors, products


def write_cluster_outputs(
    cfg: AttachClustersConfig,
    assignment: np.ndarray,
    vendor_index: NodeIndex,
    product_index: NodeIndex,
    records: Optional[pd.DataFrame] = None,
    extra_meta: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    vendor_clusters, product_clusters = attach_clusters(assignment, vendor_index, product_index)

    cfg.out_dir.mkdir(parents=True, exist_ok=True)
    vendor_clusters.to_parquet(cfg.vendor_clusters_path, index=False)
    product_clusters.to_parquet(cfg.product_clusters_path, index=False)

    out: Dict[str, Any] = {
        "vendor_clusters_path": str(cfg.vendor_clusters_path),
        "product_clusters_path": str(cfg.product_clusters_path),
        "vendor_clusters": vendor_clusters,
        "product_clusters": product_clusters,
    }

    if records is not None:
        summary = summarize_clusters(records, vendor_clusters, product_clusters)
        summary["vendor"].to_parquet(cfg.vendor_summary_path, index=False)
        summary["product"].to_parquet(cfg.product_summary_path, index=False)
        out["summary"] = summary

    meta = {
        "created_at": utc_now_iso(),
        "n_vendors": int(len(vendor_index)),
        "n_products": int(len(product_index)),
        "n_vendor_clusters": int(vendor_clusters[GRAPH.CLUSTER_ID].nunique()),
        "n_product_clusters": int(product_clusters[GRAPH.CLUSTER_ID].nunique()),
        "summary_written": records is not None,
        **(extra_meta or {}),
    }
    write_json(cfg.meta_path, meta)
    out["meta"] = meta

    _log(f"✅ Wrote: {cfg.vendor_clusters_path}")
    _log(f"✅ Wrote: {cfg.product_clusters_path}")
    _log(f"✅ Meta : {cfg.meta_path}")
    return out


def run(cfg: AttachClustersConfig) -> Dict[str, Any]:
    _require(cfg.assignment_path)

    _log(f"Loading node indices from {cfg.graph_dir}")
    vendor_index, product_index = load_node_indices(cfg.graph_dir)

    _log(f"Reading community assignment: {cfg.assignment_path}")
    assignment = read_assignment(cfg.assignment_path)

    records_path = cfg.graph_dir / "filtered_records.parquet"
    records = pd.read_parquet(records_path) if records_path.exists() else None

    return write_cluster_outputs(
        cfg,
        assignment,
        vendor_index,
        product_index,
        records=records,
        extra_meta={"assignment_path": str(cfg.assignment_path)},
    )


def main() -> None:
    ap = argparse.ArgumentParser(description="Attach biSBM community labels to vendors/products")
    ap.add_argument("--graph-dir", type=Path, default=AttachClustersConfig().graph_dir)
    ap.add_argument("--assignment", type=Path, default=AttachClustersConfig().assignment_path)
    ap.add_argument("--out", type=Path, default=AttachClustersConfig().out_dir)
    args = ap.parse_args()

    out = run(AttachClustersConfig(graph_dir=args.graph_dir, assignment_path=args.assignment, out_dir=args.out))
    print("✅ Clusters attached.")
    print(f" - {out['vendor_clusters_path']}")
    print(f" - {out['product_clusters_path']}")


if __name__ == "__main__":
    main()
