# tests/conftest.py
from __future__ import annotations

import os
from pathlib import Path
from typing import List, Tuple

import numpy as np
import pandas as pd
import pytest


@pytest.fixture()
def sandbox(tmp_path: Path) -> Path:
    """Per-test filesystem sandbox."""
    return tmp_path


@pytest.fixture()
def chdir_sandbox(monkeypatch, sandbox: Path):
    """
    Run code as-if repo root is sandbox so all relative paths
    like data/... outputs/... resolve inside sandbox.
    """
    monkeypatch.chdir(sandbox)
    return sandbox


@pytest.fixture()
def example_records_df() -> pd.DataFrame:
    """Three vendor/product pairs, all at or above the default threshold."""
    return pd.DataFrame(
        {
            "vendor_key": ["V1", "V1", "V2"],
            "product_key": ["P1", "P2", "P1"],
            "purchase_count": [25, 30, 20],
            "amount": [1000.0, 2500.5, 400.0],
        }
    )


@pytest.fixture()
def small_records_df() -> pd.DataFrame:
    """
    Tiny contracting dataset: 4 vendors, 3 product codes.
    Rows with purchase_count < 20 drop out under the default threshold
    (vendor 0042 disappears entirely).
    """
    return pd.DataFrame(
        {
            "vendor_key": ["0107", "0042", "0107", "0999", "0311", "0311", "0999", "0107"],
            "product_key": ["R425", "D302", "D302", "R425", "7030", "R425", "7030", "R425"],
            "purchase_count": [40, 5, 22, 20, 19, 31, 64, 25],
            "amount": [12000.0, 300.0, 8800.0, 5100.0, 950.0, 7400.0, 21000.0, 9000.0],
        }
    )


class FixedDetector:
    """Returns a canned assignment and records every call."""

    def __init__(self, assignment):
        self.assignment = np.asarray(assignment, dtype="int64")
        self.calls: List[Tuple[int, int, bool]] = []

    def detect(self, edges, types, ka, kb, deg_corr=True):
        self.calls.append((ka, kb, deg_corr))
        return self.assignment.copy()


class BlockByTypeDetector:
    """Deterministic stand-in: vendor i -> i % ka, product j -> ka + j % kb."""

    def detect(self, edges, types, ka, kb, deg_corr=True):
        types = np.asarray(types)
        pos = np.arange(len(types))
        n_vendors = int((types == 1).sum())
        return np.where(types == 1, pos % ka, ka + (pos - n_vendors) % kb).astype("int64")


@pytest.fixture()
def fixed_detector_cls():
    return FixedDetector


@pytest.fixture()
def block_detector() -> BlockByTypeDetector:
    return BlockByTypeDetector()


@pytest.fixture()
def bisbm_cmd() -> str:
    """External biSBM command template for integration runs (empty by default)."""
    return os.getenv("BISBM_CMD", "")
