# src/fpg/graph/node_index.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from types import MappingProxyType
from typing import Any, Hashable, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from fpg.data.schemas import GRAPH, SCHEMA
from fpg.data.validation import validate_key_types, validate_no_null_keys, validate_required_columns
from fpg.graph.errors import EmptyInputError, GraphPipelineError

VENDOR = "vendor"
PRODUCT = "product"


def _as_decimal(key: Any) -> Optional[Decimal]:
    if isinstance(key, (bool, np.bool_)):
        return None
    if isinstance(key, (int, np.integer)):
        return Decimal(int(key))
    if isinstance(key, (float, np.floating, str)):
        try:
            d = Decimal(str(key).strip())
        except InvalidOperation:
            return None
        return d if d.is_finite() else None
    return None


def sort_keys(keys: Iterable[Hashable]) -> List[Hashable]:
    """
    Deterministic ascending order for one node class.

    All keys numeric-valued (numbers or numeric strings): numeric order, string
    form breaks ties ("7" vs "007"). Anything else: lexicographic on str(key).
    """
    keys = list(keys)
    numeric = [_as_decimal(k) for k in keys]
    if keys and all(d is not None for d in numeric):
        order = sorted(range(len(keys)), key=lambda i: (numeric[i], str(keys[i]), type(keys[i]).__name__))
        return [keys[i] for i in order]
    return sorted(keys, key=lambda k: (str(k), type(k).__name__))


@dataclass(frozen=True)
class NodeIndex:
    """
    Bijective key <-> NodeId map for one node class.

    Ids are contiguous: offset+1 .. offset+len. Both directions are built
    together and never mutated.
    """

    node_class: str
    offset: int
    forward_map: Mapping[Hashable, int]
    inverse_map: Mapping[int, Hashable]

    @classmethod
    def from_sorted_keys(cls, node_class: str, keys: Sequence[Hashable], offset: int = 0) -> "NodeIndex":
        forward = {}
        inverse = {}
        for pos, key in enumerate(keys, start=offset + 1):
            if key in forward:
                raise GraphPipelineError(f"Duplicate {node_class} key {key!r} in node index")
            forward[key] = pos
            inverse[pos] = key
        return cls(
            node_class=node_class,
            offset=offset,
            forward_map=MappingProxyType(forward),
            inverse_map=MappingProxyType(inverse),
        )

    @classmethod
    def from_frame(cls, df: pd.DataFrame, node_class: str) -> "NodeIndex":
        """Rebuilds an index from a persisted (key, node_id) table."""
        validate_required_columns(df, [GRAPH.NODE_KEY, GRAPH.NODE_ID])
        if df.empty:
            raise GraphPipelineError(f"Empty {node_class} node table")
        ordered = df.sort_values(GRAPH.NODE_ID, kind="mergesort")
        ids = ordered[GRAPH.NODE_ID].astype("int64").to_numpy()
        offset = int(ids[0]) - 1
        expected = np.arange(offset + 1, offset + 1 + len(ids), dtype="int64")
        if not np.array_equal(ids, expected):
            raise GraphPipelineError(
                f"{node_class} node ids are not contiguous starting at {offset + 1}"
            )
        return cls.from_sorted_keys(node_class, ordered[GRAPH.NODE_KEY].tolist(), offset=offset)

    def __len__(self) -> int:
        return len(self.forward_map)

    def __contains__(self, key: object) -> bool:
        return key in self.forward_map

    def forward(self, key: Hashable) -> int:
        return self.forward_map[key]

    def inverse(self, node_id: int) -> Hashable:
        return self.inverse_map[int(node_id)]

    @property
    def keys(self) -> Tuple[Hashable, ...]:
        return tuple(self.inverse_map[i] for i in self.ids)

    @property
    def ids(self) -> range:
        return range(self.offset + 1, self.offset + 1 + len(self))

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {GRAPH.NODE_KEY: list(self.keys), GRAPH.NODE_ID: list(self.ids)}
        ).astype({GRAPH.NODE_ID: "int64"})


def _distinct(values: pd.Series) -> List[Hashable]:
    return pd.unique(values.to_numpy()).tolist()


def build_node_indices(records: pd.DataFrame) -> Tuple[NodeIndex, NodeIndex]:
    """
    Vendors get ids 1..N_vendors, products N_vendors+1..N_vendors+N_products,
    each class numbered in sort_keys order. Row order of `records` is irrelevant.
    """
    validate_required_columns(records, SCHEMA.key_columns)
    validate_no_null_keys(records)
    validate_key_types(records)

    vendor_keys = sort_keys(_distinct(records[SCHEMA.VENDOR_KEY]))
    product_keys = sort_keys(_distinct(records[SCHEMA.PRODUCT_KEY]))
    if not vendor_keys or not product_keys:
        raise EmptyInputError(n_vendors=len(vendor_keys), n_products=len(product_keys))

    vendors = NodeIndex.from_sorted_keys(VENDOR, vendor_keys, offset=0)
    products = NodeIndex.from_sorted_keys(PRODUCT, product_keys, offset=len(vendors))
    return vendors, products
