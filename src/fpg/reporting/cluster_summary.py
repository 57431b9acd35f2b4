# src/fpg/reporting/cluster_summary.py
from __future__ import annotations

from typing import Dict

import pandas as pd

from fpg.data.schemas import GRAPH, SCHEMA


# ============================================================
# Cluster summary
# - one row per inferred cluster, per node class
# - n_members: distinct vendors/products in the cluster
# - n_edges / purchase_count / amount: totals over records touching it
# ============================================================

SUMMARY_COLUMNS = [GRAPH.CLUSTER_ID, "n_members", "n_edges", SCHEMA.PURCHASE_COUNT, SCHEMA.AMOUNT]


def _summarize(records: pd.DataFrame, clusters: pd.DataFrame, key_col: str) -> pd.DataFrame:
    members = clusters.groupby(GRAPH.CLUSTER_ID, sort=True).size().rename("n_members")

    joined = records[[key_col, SCHEMA.PURCHASE_COUNT, SCHEMA.AMOUNT]].merge(
        clusters[[key_col, GRAPH.CLUSTER_ID]], on=key_col, how="inner"
    )
    totals = joined.groupby(GRAPH.CLUSTER_ID, sort=True).agg(
        n_edges=(key_col, "size"),
        purchase_count=(SCHEMA.PURCHASE_COUNT, "sum"),
        amount=(SCHEMA.AMOUNT, "sum"),
    )

    out = members.to_frame().join(totals, how="left")
    out = out.fillna({"n_edges": 0, SCHEMA.PURCHASE_COUNT: 0, SCHEMA.AMOUNT: 0.0})
    out = out.astype({"n_members": "int64", "n_edges": "int64", SCHEMA.PURCHASE_COUNT: "int64"})
    return out.reset_index()[SUMMARY_COLUMNS]


def summarize_clusters(
    records: pd.DataFrame,
    vendor_clusters: pd.DataFrame,
    product_clusters: pd.DataFrame,
) -> Dict[str, pd.DataFrame]:
    return {
        "vendor": _summarize(records, vendor_clusters, SCHEMA.VENDOR_KEY),
        "product": _summarize(records, product_clusters, SCHEMA.PRODUCT_KEY),
    }
