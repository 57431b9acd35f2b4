# src/fpg/graph/record_filter.py
from __future__ import annotations

import numpy as np
import pandas as pd

from fpg.data.schemas import SCHEMA
from fpg.data.validation import validate_required_columns

DEFAULT_MIN_PURCHASES = 20


def filter_records(records: pd.DataFrame, threshold: int = DEFAULT_MIN_PURCHASES) -> pd.DataFrame:
    """
    Keeps rows with purchase_count >= threshold, in input order.
    An empty result is valid output.
    """
    if isinstance(threshold, bool) or not isinstance(threshold, (int, np.integer)):
        raise TypeError(f"threshold must be an integer, got {type(threshold).__name__}")
    validate_required_columns(records, [SCHEMA.PURCHASE_COUNT])

    keep = records[SCHEMA.PURCHASE_COUNT] >= int(threshold)
    return records.loc[keep].reset_index(drop=True)
