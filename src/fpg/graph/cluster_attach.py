# src/fpg/graph/cluster_attach.py
from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np
import pandas as pd

from fpg.data.schemas import GRAPH, SCHEMA
from fpg.graph.errors import GraphPipelineError, LengthMismatchError
from fpg.graph.node_index import NodeIndex


def _table(assignment: np.ndarray, index: NodeIndex, key_col: str) -> pd.DataFrame:
    return pd.DataFrame(
        {
            key_col: list(index.keys),
            GRAPH.CLUSTER_ID: assignment.astype("int64"),
        }
    )


def attach_clusters(
    assignment: Sequence[int] | np.ndarray,
    vendor_index: NodeIndex,
    product_index: NodeIndex,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Maps a community assignment (position i <-> NodeId i+1) back to the
    original keys. Both tables come out in NodeId order.
    """
    n_vendors = len(vendor_index)
    n_products = len(product_index)
    if vendor_index.offset != 0 or product_index.offset != n_vendors:
        raise GraphPipelineError(
            f"Node indices do not share one id space: vendor offset {vendor_index.offset}, "
            f"product offset {product_index.offset}, expected 0 and {n_vendors}"
        )

    arr = np.asarray(assignment)
    if arr.ndim != 1:
        arr = arr.reshape(-1)
    if len(arr) != n_vendors + n_products:
        raise LengthMismatchError(expected=n_vendors + n_products, actual=len(arr))

    vendors = _table(arr[:n_vendors], vendor_index, SCHEMA.VENDOR_KEY)
    products = _table(arr[n_vendors:], product_index, SCHEMA.PRODUCT_KEY)
    return vendors, products
