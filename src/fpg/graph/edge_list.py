# src/fpg/graph/edge_list.py
from __future__ import annotations

from typing import List, Tuple

import numpy as np
import pandas as pd

from fpg.data.schemas import GRAPH, SCHEMA
from fpg.data.validation import validate_no_null_keys, validate_required_columns
from fpg.graph.errors import UnknownKeyError
from fpg.graph.node_index import NodeIndex

VENDOR_TYPE = 1
PRODUCT_TYPE = 2


def build_type_vector(n_vendors: int, n_products: int) -> np.ndarray:
    """N_vendors ones followed by N_products twos, in NodeId order."""
    if n_vendors < 0 or n_products < 0:
        raise ValueError("node counts must be >= 0")
    return np.concatenate(
        [
            np.full(n_vendors, VENDOR_TYPE, dtype="int64"),
            np.full(n_products, PRODUCT_TYPE, dtype="int64"),
        ]
    )


def _lookup(values: pd.Series, index: NodeIndex) -> List[int]:
    out: List[int] = []
    fwd = index.forward_map
    for key in values.tolist():
        try:
            out.append(fwd[key])
        except (KeyError, TypeError):
            raise UnknownKeyError(key, index.node_class) from None
    return out


def build_edge_list(
    records: pd.DataFrame,
    vendor_index: NodeIndex,
    product_index: NodeIndex,
) -> Tuple[pd.DataFrame, np.ndarray]:
    """
    One (vendor_id, product_id) row per record, in record order.
    Repeated pairs are kept; multiplicity is signal for the detector.
    """
    validate_required_columns(records, SCHEMA.key_columns)
    validate_no_null_keys(records)

    edges = pd.DataFrame(
        {
            GRAPH.VENDOR_ID: np.asarray(_lookup(records[SCHEMA.VENDOR_KEY], vendor_index), dtype="int64"),
            GRAPH.PRODUCT_ID: np.asarray(_lookup(records[SCHEMA.PRODUCT_KEY], product_index), dtype="int64"),
        }
    )
    types = build_type_vector(len(vendor_index), len(product_index))
    return edges, types
