"""
Tests for per-entry classification and array validity.
"""

import numpy as np
import pytest

from residual_guard import (
    IMPOSSIBLE_VALUE,
    EntryStatus,
    classify_array,
    classify_value,
    find_invalid_value,
    is_array_valid,
)
from residual_guard.core.array_utils import status_commentary, value_commentary


class TestClassifyValue:
    @pytest.mark.parametrize("value", [0.0, -1.5, 1e300, -1e302])
    def test_ok(self, value):
        assert classify_value(value) == EntryStatus.OK

    def test_sentinel_is_unwritten(self):
        assert classify_value(IMPOSSIBLE_VALUE) == EntryStatus.UNWRITTEN

    @pytest.mark.parametrize("value", [np.nan, np.inf, -np.inf])
    def test_non_finite(self, value):
        assert classify_value(value) == EntryStatus.NON_FINITE


class TestIsArrayValid:
    def test_finite_array_is_valid(self):
        assert is_array_valid(3, np.array([1.0, 2.0, 3.0]))

    def test_sentinel_invalid(self):
        assert not is_array_valid(3, np.array([1.0, IMPOSSIBLE_VALUE, 3.0]))

    @pytest.mark.parametrize("bad", [np.nan, np.inf, -np.inf])
    def test_non_finite_invalid(self, bad):
        assert not is_array_valid(3, np.array([1.0, 2.0, bad]))

    def test_none_with_zero_length_valid(self):
        assert is_array_valid(0, None)

    def test_none_with_required_length_invalid(self):
        assert not is_array_valid(2, None)

    def test_short_buffer_invalid(self):
        assert not is_array_valid(4, np.array([1.0, 2.0]))

    def test_entries_past_length_ignored(self):
        assert is_array_valid(2, np.array([1.0, 2.0, np.nan]))

    def test_list_input(self):
        assert is_array_valid(2, [1.0, 2.0])
        assert not is_array_valid(2, [1.0, float("nan")])

    def test_two_dimensional_input_read_flat(self):
        jac = np.array([[1.0, 2.0], [3.0, IMPOSSIBLE_VALUE]])
        assert is_array_valid(3, jac)
        assert not is_array_valid(4, jac)


class TestClassifyArray:
    def test_codes_per_entry(self):
        values = np.array([1.0, IMPOSSIBLE_VALUE, np.nan, np.inf, 0.0])
        status = classify_array(5, values)
        assert status.tolist() == [
            EntryStatus.OK,
            EntryStatus.UNWRITTEN,
            EntryStatus.NON_FINITE,
            EntryStatus.NON_FINITE,
            EntryStatus.OK,
        ]

    def test_agrees_with_is_array_valid(self):
        values = np.array([1.0, 2.0, IMPOSSIBLE_VALUE])
        status = classify_array(3, values)
        assert bool((status == EntryStatus.OK).all()) == is_array_valid(3, values)

    def test_none_gives_empty(self):
        assert classify_array(3, None).shape == (0,)

    def test_short_buffer_only_classifies_present_entries(self):
        assert classify_array(5, np.array([1.0, 2.0])).shape == (2,)


class TestFindInvalidValue:
    def test_index_of_first_invalid(self):
        values = np.array([1.0, 2.0, np.nan, IMPOSSIBLE_VALUE])
        assert find_invalid_value(4, values) == 2

    def test_size_when_all_valid(self):
        assert find_invalid_value(3, np.array([1.0, 2.0, 3.0])) == 3

    def test_absent_array(self):
        assert find_invalid_value(3, None) == 0
        assert find_invalid_value(0, None) == 0

    def test_short_buffer_reports_first_missing(self):
        assert find_invalid_value(4, np.array([1.0, 2.0])) == 2


class TestCommentary:
    def test_value_commentary(self):
        assert value_commentary(1.0) == "OK"
        assert "not finite" in value_commentary(np.nan)
        assert "not set by cost function" in value_commentary(IMPOSSIBLE_VALUE)

    def test_status_commentary_matches_value_commentary(self):
        for value in (1.0, np.inf, IMPOSSIBLE_VALUE):
            assert status_commentary(classify_value(value)) == value_commentary(value)
