"""
Tests for the error report built after an invalid evaluation.
"""

import numpy as np
import pytest

from residual_guard import (
    IMPOSSIBLE_VALUE,
    ResidualBlock,
    evaluation_error_report_string,
    render_error_report,
)
from residual_guard.diagnostics.error_report import (
    FULL_LISTING_THRESHOLD,
    JACOBIAN_HEADER,
    RESIDUAL_HEADER,
)


def _report(block, ev, **overrides):
    merged = {**ev, **overrides}
    return render_error_report(
        block,
        merged["parameters"],
        merged["cost"],
        merged["residuals"],
        merged["jacobians"],
    )


def _line(report, prefix):
    return next(line for line in report.splitlines() if line.startswith(prefix))


class TestPreambleAndShape:
    def test_preamble_lists_obligations(self, single_block, valid_evaluation):
        report = _report(
            single_block, valid_evaluation, residuals=np.array([1.0, np.nan])
        )
        assert "(1) Fill in all residual values" in report
        assert "(2) Fill in jacobian values for each non-constant parameter" in report
        assert "(3) Fill data in with finite (non-inf, non-NaN) values" in report
        assert "sentinel" in report

    def test_shape_summary(self, two_blocks, two_block_evaluation):
        report = _report(
            two_blocks, two_block_evaluation, residuals=np.array([0.0, np.nan, 0.0])
        )
        assert "  2 parameter blocks; sizes: (2, 1)" in report
        assert "  3 residuals" in report


class TestResidualSection:
    def test_unwritten_residual(self, single_block, valid_evaluation):
        report = _report(
            single_block,
            valid_evaluation,
            residuals=np.array([1.0, IMPOSSIBLE_VALUE]),
        )
        assert RESIDUAL_HEADER in report
        assert JACOBIAN_HEADER not in report
        assert "not set by cost function" in _line(report, "  r[01]")
        assert _line(report, "  r[00]").endswith("OK")

    def test_non_finite_residual(self, single_block, valid_evaluation):
        report = _report(
            single_block, valid_evaluation, residuals=np.array([1.0, np.nan])
        )
        line = _line(report, "  r[01]")
        assert "nan" in line
        assert "not finite" in line

    def test_long_vector_lists_only_offenders(self, valid_evaluation):
        n = FULL_LISTING_THRESHOLD + 10
        block = ResidualBlock.from_sizes(num_residuals=n, sizes=[1])
        residuals = np.ones(n)
        residuals[57] = np.inf
        report = _report(
            block, valid_evaluation, residuals=residuals, jacobians=None
        )
        listed = [line for line in report.splitlines() if line.startswith("  r[")]
        assert len(listed) == 1
        assert listed[0].startswith("  r[57]")

    def test_short_vector_lists_every_entry(self, valid_evaluation):
        block = ResidualBlock.from_sizes(num_residuals=5, sizes=[1])
        residuals = np.array([1.0, 2.0, np.nan, 4.0, 5.0])
        report = _report(block, valid_evaluation, residuals=residuals, jacobians=None)
        listed = [line for line in report.splitlines() if line.startswith("  r[")]
        assert len(listed) == 5

    def test_vector_at_threshold_lists_only_offenders(self, valid_evaluation):
        n = FULL_LISTING_THRESHOLD
        block = ResidualBlock.from_sizes(num_residuals=n, sizes=[1])
        residuals = np.ones(n)
        residuals[3] = IMPOSSIBLE_VALUE
        report = _report(block, valid_evaluation, residuals=residuals, jacobians=None)
        listed = [line for line in report.splitlines() if line.startswith("  r[")]
        assert len(listed) == 1
        assert listed[0].startswith("  r[03]")

    def test_threshold_override(self, valid_evaluation):
        block = ResidualBlock.from_sizes(num_residuals=5, sizes=[1])
        residuals = np.array([1.0, 2.0, np.nan, 4.0, 5.0])
        report = render_error_report(
            block, None, np.zeros(1), residuals, None, full_listing_threshold=0
        )
        listed = [line for line in report.splitlines() if line.startswith("  r[")]
        assert len(listed) == 1

    def test_short_residual_buffer(self, single_block, valid_evaluation):
        report = _report(single_block, valid_evaluation, residuals=np.array([1.0]))
        assert "<array too short: 1 of 2 values present>" in report


class TestJacobianSection:
    def test_reports_failing_block_with_locations(self, two_blocks, two_block_evaluation):
        ev = two_block_evaluation
        ev["jacobians"][1][2] = IMPOSSIBLE_VALUE
        report = _report(two_blocks, ev)

        assert RESIDUAL_HEADER not in report
        assert JACOBIAN_HEADER in report
        assert "Jacobian values for parameter block 1 (p[1][...]), size: 1" in report
        assert "parameter block 0" not in report
        line = _line(report, "  d r[02] / d p[1][00]")
        assert "not set by cost function" in line

    def test_entry_label_maps_flat_offset(self, two_blocks, two_block_evaluation):
        ev = two_block_evaluation
        # block 0 has size 2: flat offset 3 is residual 1, parameter 1
        ev["jacobians"][0][3] = -np.inf
        report = _report(two_blocks, ev)
        line = _line(report, "  d r[01] / d p[0][01]")
        assert "-inf" in line
        assert "not finite" in line

    def test_every_failing_block_is_reported(self, two_blocks, two_block_evaluation):
        ev = two_block_evaluation
        ev["jacobians"][0][0] = np.nan
        ev["jacobians"][1][0] = np.nan
        report = _report(two_blocks, ev)
        assert "parameter block 0 (p[0][...])" in report
        assert "parameter block 1 (p[1][...])" in report

    def test_constant_block_never_reported(self, two_blocks, two_block_evaluation):
        ev = two_block_evaluation
        ev["jacobians"][0][0] = np.nan
        report = _report(two_blocks, ev, jacobians=[ev["jacobians"][0], None])
        assert "parameter block 1 (p[1]" not in report

    def test_residual_and_jacobian_sections_together(self, single_block, valid_evaluation):
        jacobian = np.array([0.1, 0.2, np.nan, 0.4, 0.5, 0.6])
        report = _report(
            single_block,
            valid_evaluation,
            residuals=np.array([IMPOSSIBLE_VALUE, 2.0]),
            jacobians=[jacobian],
        )
        assert report.index(RESIDUAL_HEADER) < report.index(JACOBIAN_HEADER)

    def test_large_jacobian_block_lists_only_offenders(self, valid_evaluation):
        num_residuals = FULL_LISTING_THRESHOLD // 2
        block = ResidualBlock.from_sizes(num_residuals=num_residuals, sizes=[2])
        jacobian = np.ones(num_residuals * 2)
        jacobian[7] = np.nan
        report = _report(
            block,
            valid_evaluation,
            residuals=np.ones(num_residuals),
            jacobians=[jacobian],
        )
        listed = [line for line in report.splitlines() if line.startswith("  d r[")]
        assert jacobian.size >= FULL_LISTING_THRESHOLD
        assert len(listed) == 1
        assert listed[0].startswith("  d r[03] / d p[0][01]")
        assert "not finite" in listed[0]

    def test_missing_jacobian_entry(self, two_blocks, two_block_evaluation):
        ev = two_block_evaluation
        report = _report(two_blocks, ev, jacobians=[ev["jacobians"][0]])
        assert "<array absent: 3 values required>" in report


class TestContract:
    def test_requires_cost_and_residuals(self, single_block, valid_evaluation):
        ev = valid_evaluation
        with pytest.raises(ValueError):
            render_error_report(single_block, ev["parameters"], None, ev["residuals"])
        with pytest.raises(ValueError):
            render_error_report(single_block, ev["parameters"], ev["cost"], None)

    def test_valid_evaluation_says_so(self, single_block, valid_evaluation):
        report = _report(single_block, valid_evaluation)
        assert "No invalid values were found" in report

    def test_alias(self):
        assert evaluation_error_report_string is render_error_report
