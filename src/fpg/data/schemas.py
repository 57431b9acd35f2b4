# src/fpg/data/schemas.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Iterable


@dataclass(frozen=True)
class RecordsSchema:
    """
    Canonical vendor/product purchase record schema.
    Every pipeline stage after ingestion speaks these column names.
    """
    VENDOR_KEY: Final[str] = "vendor_key"
    PRODUCT_KEY: Final[str] = "product_key"
    PURCHASE_COUNT: Final[str] = "purchase_count"
    AMOUNT: Final[str] = "amount"

    @property
    def required_columns(self) -> Iterable[str]:
        return (self.VENDOR_KEY, self.PRODUCT_KEY, self.PURCHASE_COUNT, self.AMOUNT)

    @property
    def key_columns(self) -> Iterable[str]:
        return (self.VENDOR_KEY, self.PRODUCT_KEY)


@dataclass(frozen=True)
class GraphSchema:
    VENDOR_ID: Final[str] = "vendor_id"
    PRODUCT_ID: Final[str] = "product_id"
    NODE_KEY: Final[str] = "key"
    NODE_ID: Final[str] = "node_id"
    CLUSTER_ID: Final[str] = "cluster_id"


SCHEMA = RecordsSchema()
GRAPH = GraphSchema()

# Federal procurement (FPDS-style) export headers -> canonical names.
FPDS_COLUMNS: Final[dict] = {
    "vendor_duns_number": SCHEMA.VENDOR_KEY,
    "product_or_service_code": SCHEMA.PRODUCT_KEY,
    "number_of_actions": SCHEMA.PURCHASE_COUNT,
    "dollars_obligated": SCHEMA.AMOUNT,
}
