"""Full text dump of a residual block evaluation.

A debugging aid: it renders every parameter, residual and Jacobian entry
whether or not the evaluation was valid.

Layout::

    Residual Block size: 1 parameter blocks x 2 residuals

    <legend>

    Residuals:                  1             2

    Parameter Block 0, size: 3

                1 |           0.1           0.4
                2 |           0.2           0.5
                3 |           0.3           0.6

Each parameter row holds the parameter value followed, for every residual
``k``, by the derivative of residual ``k`` with respect to that parameter.
"""

from __future__ import annotations

from typing import Any

from residual_guard.core.array_utils import flat_values
from residual_guard.core.residual_block import ResidualBlock
from residual_guard.diagnostics.formatting import (
    CELL_WIDTH,
    MISSING,
    entry_at,
    format_array,
    format_cell,
)
from residual_guard.utils.logging import log_calls

LEGEND = (
    "For each parameter block, the value of the parameters is printed in the first column\n"
    "and the value of the jacobian under the corresponding residual. If a parameter block\n"
    "was held constant then the corresponding jacobian is printed as 'Not Computed'. If an\n"
    "entry of the jacobian/residual array was requested but was not written to by user\n"
    "code, it is shown as 'Uninitialized'. This is an error. Residual or jacobian values\n"
    "evaluating to Inf or NaN are also an error. A jacobian block that was required but\n"
    "not supplied at all is printed as 'Missing'.\n"
)

# Parameter column plus the "| " separator, so residual columns line up
# with the jacobian columns below them.
ROW_LABEL_WIDTH = CELL_WIDTH + 3


def _jacobian_cell(jacobian: Any, offset: int) -> str:
    if jacobian is None:
        return format_cell(None)
    values = flat_values(jacobian)
    if offset >= values.shape[0]:
        return f"{MISSING:>{CELL_WIDTH}}"
    return format_cell(values[offset])


@log_calls()
def render_full_dump(
    block: ResidualBlock,
    parameters: Any,
    cost: Any,
    residuals: Any,
    jacobians: Any = None,
) -> str:
    """Render parameters, residuals and Jacobians of one evaluation as text.

    Parameters
    ----------
    block : ResidualBlock
        Shape of the evaluated block
    parameters : sequence or None
        One array per parameter block (the evaluation point)
    cost, residuals : array-like
        Output buffers; both required
    jacobians : sequence or None
        Per-block Jacobian buffers, None entries for constant blocks

    Returns
    -------
    str
        Multi-line, fixed-width text
    """
    if cost is None:
        raise ValueError("cost buffer is required to render an evaluation")
    if residuals is None:
        raise ValueError("residual buffer is required to render an evaluation")

    num_residuals = block.num_residuals
    lines = [
        f"Residual Block size: {block.num_parameter_blocks} parameter blocks "
        f"x {num_residuals} residuals",
        "",
        LEGEND,
        "Residuals:".ljust(ROW_LABEL_WIDTH) + format_array(num_residuals, residuals),
        "",
    ]

    for i, parameter_block in enumerate(block.parameter_blocks):
        size = parameter_block.size
        lines.append(f"Parameter Block {i}, size: {size}")
        lines.append("")

        point = None
        if parameters is not None and i < len(parameters):
            point = parameters[i]
        jacobian = None
        absent = jacobians is not None and i >= len(jacobians)
        if jacobians is not None and not absent:
            jacobian = jacobians[i]

        for j in range(size):
            value = None if point is None else entry_at(point, j)
            if absent:
                cells = " ".join(f"{MISSING:>{CELL_WIDTH}}" for _ in range(num_residuals))
            else:
                cells = " ".join(
                    _jacobian_cell(jacobian, k * size + j) for k in range(num_residuals)
                )
            lines.append(f"{format_cell(value)} | {cells}")
        lines.append("")

    return "\n".join(lines) + "\n"


evaluation_to_string = render_full_dump
