"""Human-readable rendering of residual block evaluations."""

from residual_guard.diagnostics.error_report import (
    FULL_LISTING_THRESHOLD,
    evaluation_error_report_string,
    render_error_report,
)
from residual_guard.diagnostics.evaluation_dump import (
    evaluation_to_string,
    render_full_dump,
)
from residual_guard.diagnostics.formatting import format_array, format_cell

__all__ = [
    "FULL_LISTING_THRESHOLD",
    "evaluation_error_report_string",
    "evaluation_to_string",
    "format_array",
    "format_cell",
    "render_error_report",
    "render_full_dump",
]
