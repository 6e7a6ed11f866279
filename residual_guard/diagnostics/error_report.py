"""Explanatory report for an invalid residual block evaluation.

Only called after ``is_evaluation_valid`` has returned False. The report
names the failing array category (residuals and/or specific Jacobian blocks)
and annotates each offending entry as non-finite or never written, so a user
unfamiliar with the sentinel mechanism can act on it directly.
"""

from __future__ import annotations

from typing import Any

from residual_guard.core.array_utils import (
    EntryStatus,
    classify_array,
    flat_values,
    is_array_valid,
    status_commentary,
)
from residual_guard.core.residual_block import ResidualBlock, required_arrays
from residual_guard.utils.logging import get_logger, log_calls

logger = get_logger(__name__)

# Arrays shorter than this are listed in full, not just their bad entries.
FULL_LISTING_THRESHOLD = 50

PREAMBLE = (
    "A problem was found in the result returned from a user-supplied residual evaluation.\n"
    "\n"
    "User-supplied residual evaluations must do the following:\n"
    "\n"
    "  (1) Fill in all residual values\n"
    "  (2) Fill in jacobian values for each non-constant parameter for each residual\n"
    "  (3) Fill data in with finite (non-inf, non-NaN) values\n"
    "\n"
    "If you are seeing this error, your residual evaluation is either producing\n"
    "non-finite values (infs or NaNs) or is not filling in all the values. Output\n"
    "arrays are pre-filled with a sentinel value (IMPOSSIBLE_VALUE) before every\n"
    "evaluation, which is how values that were never filled in are detected in either\n"
    "the residuals or the jacobians.\n"
    "\n"
    "If the derivatives come from automatic differentiation, it is likely that either\n"
    "(a) the residual values are causing the problems or (b) some part of the\n"
    "evaluation has bad numeric behaviour near this point (for example sqrt, log or\n"
    "division at or near zero).\n"
    "\n"
    "Which residual block is this? At this point the block cannot be identified\n"
    "directly, but here is its size information:\n"
    "\n"
)

RESIDUAL_HEADER = "Problem exists in: User-returned residual values (r[N])"
JACOBIAN_HEADER = (
    "Problem exists in: User-returned jacobian values (d r[N] / d p[M][Q])"
)


def _shape_summary(block: ResidualBlock) -> list[str]:
    sizes = ", ".join(str(size) for size in block.parameter_sizes)
    return [
        f"  {block.num_parameter_blocks} parameter blocks; sizes: ({sizes})",
        f"  {block.num_residuals} residuals",
        "",
    ]


def _entry_lines(
    size: int,
    array: Any,
    label,
    threshold: int,
) -> list[str]:
    """Enumerate entries of one array; ``label(index)`` names an entry."""
    if array is None:
        return [f"  <array absent: {size} values required>"]

    values = flat_values(array)
    status = classify_array(size, array)
    list_all = size < threshold
    lines = []
    for index in range(status.shape[0]):
        if list_all or status[index] != EntryStatus.OK:
            lines.append(
                f"  {label(index)} = {float(values[index]):<15.4e}     "
                f"{status_commentary(status[index])}"
            )
    if status.shape[0] < size:
        lines.append(
            f"  <array too short: {status.shape[0]} of {size} values present>"
        )
    return lines


@log_calls()
def render_error_report(
    block: ResidualBlock,
    parameters: Any,
    cost: Any,
    residuals: Any,
    jacobians: Any = None,
    full_listing_threshold: int | None = None,
) -> str:
    """Render the report explaining why an evaluation is invalid.

    Parameters
    ----------
    block : ResidualBlock
        Shape of the evaluated block
    parameters : sequence or None
        Evaluation point; not inspected, accepted so all renderers share a
        signature
    cost, residuals : array-like
        Output buffers; both required
    jacobians : sequence or None
        Per-block Jacobian buffers, None entries for constant blocks
    full_listing_threshold : int, optional
        Arrays with fewer entries than this are listed in full.
        Defaults to ``FULL_LISTING_THRESHOLD``.

    Returns
    -------
    str
        The report text
    """
    if cost is None:
        raise ValueError("cost buffer is required to render an error report")
    if residuals is None:
        raise ValueError("residual buffer is required to render an error report")

    threshold = (
        FULL_LISTING_THRESHOLD if full_listing_threshold is None else full_listing_threshold
    )
    num_residuals = block.num_residuals

    lines = [PREAMBLE.rstrip("\n"), ""]
    lines.extend(_shape_summary(block))

    residuals_ok = is_array_valid(num_residuals, residuals)
    if not residuals_ok:
        lines.append(RESIDUAL_HEADER)
        lines.append("")
        lines.extend(
            _entry_lines(num_residuals, residuals, lambda k: f"r[{k:02d}]", threshold)
        )
        lines.append("")

    failing_jacobians = [
        array
        for array in required_arrays(block, residuals, jacobians)
        if array.parameter_index is not None
        and not is_array_valid(array.size, array.values)
    ]
    if failing_jacobians:
        lines.append(JACOBIAN_HEADER)
        lines.append("")
        for array in failing_jacobians:
            i = array.parameter_index
            size = block.parameter_blocks[i].size
            lines.append(
                f"  Jacobian values for parameter block {i} (p[{i}][...]), size: {size}"
            )
            lines.extend(
                _entry_lines(
                    array.size,
                    array.values,
                    lambda n, i=i, size=size: f"d r[{n // size:02d}] / d p[{i}][{n % size:02d}]",
                    threshold,
                )
            )
            lines.append("")

    if residuals_ok and not failing_jacobians:
        lines.append("No invalid values were found in this evaluation.")
        logger.warning(
            "Error report requested for an evaluation with no invalid entries "
            f"({block.describe()})"
        )

    return "\n".join(lines) + "\n"


evaluation_error_report_string = render_error_report
