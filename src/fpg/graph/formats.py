# src/fpg/graph/formats.py
"""
Plain-text graph files exchanged with the biSBM tooling.

  edgelist : "<vendor_id>\t<product_id>" per line, no header, multiplicities kept
  types    : one 1/2 per line, NodeId order
  assignment: one community id per line (first column), NodeId order
"""
from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

from fpg.common.io import read_int_column, write_int_lines
from fpg.data.schemas import GRAPH


def write_edgelist(path: str | Path, edges: pd.DataFrame) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    edges[[GRAPH.VENDOR_ID, GRAPH.PRODUCT_ID]].astype("int64").to_csv(
        p, sep="\t", header=False, index=False, lineterminator="\n"
    )
    return p


def read_edgelist(path: str | Path) -> pd.DataFrame:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Edge list not found: {p}")
    if p.stat().st_size == 0:
        return pd.DataFrame({GRAPH.VENDOR_ID: [], GRAPH.PRODUCT_ID: []}, dtype="int64")
    return pd.read_csv(
        p,
        sep=r"\s+",
        header=None,
        names=[GRAPH.VENDOR_ID, GRAPH.PRODUCT_ID],
        dtype="int64",
        engine="python",
    )


def write_types(path: str | Path, types: np.ndarray) -> Path:
    write_int_lines(path, types)
    return Path(path)


def read_types(path: str | Path) -> np.ndarray:
    return read_int_column(path)


def read_assignment(path: str | Path) -> np.ndarray:
    return read_int_column(path)


def write_assignment(path: str | Path, assignment: np.ndarray) -> Path:
    write_int_lines(path, assignment)
    return Path(path)
