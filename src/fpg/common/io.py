from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable

import numpy as np
import pandas as pd


def read_json(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    return json.loads(p.read_text(encoding="utf-8"))


def write_json(path: str | Path, obj: Dict[str, Any], *, indent: int = 2) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(obj, indent=indent, sort_keys=True, default=str), encoding="utf-8")


def write_int_lines(path: str | Path, values: Iterable[int]) -> None:
    """One integer per line, trailing newline, no header."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text("".join(f"{int(v)}\n" for v in values), encoding="utf-8")


def read_int_column(path: str | Path) -> np.ndarray:
    """
    Reads the first whitespace-separated column of a headerless text file.
    Blank files give an empty array.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"File not found: {p}")
    if p.stat().st_size == 0:
        return np.empty(0, dtype="int64")
    df = pd.read_csv(p, sep=r"\s+", header=None, usecols=[0], dtype="int64", engine="python")
    return df[0].to_numpy()
