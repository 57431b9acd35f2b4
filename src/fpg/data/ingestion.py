# src/fpg/data/ingestion.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

import duckdb
import pandas as pd

from fpg.data.schemas import SCHEMA


@dataclass(frozen=True)
class RecordsSourceConfig:
    path: Path = Path("data/raw/contracts.csv")

    # source column -> canonical column; empty means the file already uses canonical names
    rename: Dict[str, str] = field(default_factory=dict)

    # Transaction-level input: one row per purchase, grouped into
    # (vendor_key, product_key) with purchase_count = rows, amount = sum.
    aggregate: bool = False

    threads: int = 4


class RecordsIngestionError(RuntimeError):
    pass


def _quote_ident(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _source_relation(path: Path) -> str:
    p = path.as_posix().replace("'", "''")
    suffix = path.suffix.lower()
    if suffix == ".csv":
        # all_varchar keeps identifiers such as DUNS numbers intact (leading zeros)
        return f"read_csv_auto('{p}', header=true, all_varchar=true)"
    if suffix in (".parquet", ".pq"):
        return f"read_parquet('{p}')"
    raise RecordsIngestionError(f"Unsupported records format '{suffix}' for {path}")


def _source_name(cfg: RecordsSourceConfig, canonical: str) -> str:
    for src, dst in cfg.rename.items():
        if dst == canonical:
            return src
    return canonical


def load_records(cfg: Optional[RecordsSourceConfig] = None) -> pd.DataFrame:
    """
    Reads raw contracting records into the canonical schema:
      vendor_key (str), product_key (str), purchase_count (int64), amount (float64)

    Row order follows the file unless aggregate=True, in which case rows are
    ordered by (vendor_key, product_key).
    """
    cfg = cfg or RecordsSourceConfig()
    if not cfg.path.exists():
        raise FileNotFoundError(f"Records file not found: {cfg.path}")

    rel = _source_relation(cfg.path)
    vendor = _quote_ident(_source_name(cfg, SCHEMA.VENDOR_KEY))
    product = _quote_ident(_source_name(cfg, SCHEMA.PRODUCT_KEY))
    amount = _quote_ident(_source_name(cfg, SCHEMA.AMOUNT))

    if cfg.aggregate:
        sql = f"""
            SELECT
                CAST({vendor} AS VARCHAR)              AS {SCHEMA.VENDOR_KEY},
                CAST({product} AS VARCHAR)             AS {SCHEMA.PRODUCT_KEY},
                CAST(COUNT(*) AS BIGINT)               AS {SCHEMA.PURCHASE_COUNT},
                CAST(COALESCE(SUM(CAST({amount} AS DOUBLE)), 0) AS DOUBLE) AS {SCHEMA.AMOUNT}
            FROM {rel}
            WHERE {vendor} IS NOT NULL AND {product} IS NOT NULL
            GROUP BY 1, 2
            ORDER BY 1, 2
        """
    else:
        count = _quote_ident(_source_name(cfg, SCHEMA.PURCHASE_COUNT))
        sql = f"""
            SELECT
                CAST({vendor} AS VARCHAR)  AS {SCHEMA.VENDOR_KEY},
                CAST({product} AS VARCHAR) AS {SCHEMA.PRODUCT_KEY},
                CAST({count} AS BIGINT)    AS {SCHEMA.PURCHASE_COUNT},
                CAST({amount} AS DOUBLE)   AS {SCHEMA.AMOUNT}
            FROM {rel}
        """

    con = duckdb.connect(database=":memory:")
    try:
        con.execute(f"PRAGMA threads={cfg.threads};")
        # row order of the source must survive for the edge list
        con.execute("PRAGMA preserve_insertion_order=true;")
        try:
            df = con.execute(sql).df()
        except duckdb.Error as e:
            raise RecordsIngestionError(f"Failed reading {cfg.path}: {e}") from e
    finally:
        con.close()

    # nullable counts come back as float; validation reports them
    if not df[SCHEMA.PURCHASE_COUNT].isna().any():
        df[SCHEMA.PURCHASE_COUNT] = df[SCHEMA.PURCHASE_COUNT].astype("int64")
    df[SCHEMA.AMOUNT] = df[SCHEMA.AMOUNT].astype("float64")
    return df[list(SCHEMA.required_columns)]
