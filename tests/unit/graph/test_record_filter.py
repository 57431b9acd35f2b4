from __future__ import annotations

import pandas as pd
import pytest

from fpg.graph.record_filter import DEFAULT_MIN_PURCHASES, filter_records


def test_default_threshold_is_twenty():
    assert DEFAULT_MIN_PURCHASES == 20


def test_filter_keeps_threshold_inclusive_in_input_order(small_records_df: pd.DataFrame):
    out = filter_records(small_records_df)

    assert (out["purchase_count"] >= 20).all()
    assert out["purchase_count"].tolist() == [40, 22, 20, 31, 64, 25]
    assert list(out.index) == list(range(len(out)))


def test_filter_does_not_mutate_input(small_records_df: pd.DataFrame):
    before = small_records_df.copy()
    filter_records(small_records_df, 30)
    pd.testing.assert_frame_equal(small_records_df, before)


def test_filter_empty_result_is_valid(small_records_df: pd.DataFrame):
    out = filter_records(small_records_df, 1_000)
    assert out.empty
    assert list(out.columns) == list(small_records_df.columns)


def test_filter_rejects_non_integer_threshold(small_records_df: pd.DataFrame):
    with pytest.raises(TypeError):
        filter_records(small_records_df, 20.5)


def test_filter_requires_purchase_count(small_records_df: pd.DataFrame):
    from fpg.data.validation import DataValidationError

    with pytest.raises(DataValidationError):
        filter_records(small_records_df.drop(columns=["purchase_count"]), 20)
