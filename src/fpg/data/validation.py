# src/fpg/data/validation.py
from __future__ import annotations

from typing import Iterable

import pandas as pd

from fpg.data.schemas import SCHEMA


class DataValidationError(ValueError):
    pass


def validate_required_columns(df: pd.DataFrame, required: Iterable[str]) -> None:
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise DataValidationError(f"Missing required columns: {missing}")


def validate_dtypes(df: pd.DataFrame) -> None:
    # Keys may be strings or numbers; only the measures have a required kind.
    if not pd.api.types.is_integer_dtype(df[SCHEMA.PURCHASE_COUNT]):
        raise DataValidationError(f"{SCHEMA.PURCHASE_COUNT} must be integer-like")
    if not pd.api.types.is_numeric_dtype(df[SCHEMA.AMOUNT]):
        raise DataValidationError(f"{SCHEMA.AMOUNT} must be numeric")


def validate_no_nulls(df: pd.DataFrame) -> None:
    cols = list(SCHEMA.key_columns) + [SCHEMA.PURCHASE_COUNT]
    null_counts = df[cols].isna().sum()
    bad = null_counts[null_counts > 0]
    if len(bad) > 0:
        raise DataValidationError(f"Nulls found in required columns: {bad.to_dict()}")


def validate_no_null_keys(df: pd.DataFrame) -> None:
    null_counts = df[list(SCHEMA.key_columns)].isna().sum()
    bad = null_counts[null_counts > 0]
    if len(bad) > 0:
        raise DataValidationError(f"Null keys found: {bad.to_dict()}")


def validate_key_types(df: pd.DataFrame) -> None:
    # one scalar type per key column; parquet node tables cannot hold mixed keys
    for col in SCHEMA.key_columns:
        kinds = sorted({type(v).__name__ for v in df[col].tolist()})
        if len(kinds) > 1:
            raise DataValidationError(f"{col} mixes key types {kinds}; cast keys to one type first")


def validate_records_df(df: pd.DataFrame) -> None:
    validate_required_columns(df, SCHEMA.required_columns)
    validate_dtypes(df)
    validate_no_nulls(df)
    validate_key_types(df)

    if (df[SCHEMA.PURCHASE_COUNT] < 0).any():
        raise DataValidationError("Negative purchase counts found (unexpected).")
