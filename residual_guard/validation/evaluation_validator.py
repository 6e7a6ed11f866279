"""Validity verdict for one evaluation of a residual block.

``is_evaluation_valid`` runs after every user evaluation, before the solver
consumes the output. It only answers yes or no; the detail needed to explain
a "no" is recomputed on demand by :mod:`residual_guard.diagnostics`, so the
common valid case pays nothing for formatting.
"""

from __future__ import annotations

from typing import Any

from residual_guard.core.array_utils import (
    EntryStatus,
    classify_array,
    is_array_valid,
)
from residual_guard.core.residual_block import (
    ResidualBlock,
    required_arrays,
)


def is_evaluation_valid(
    block: ResidualBlock,
    cost: Any,
    residuals: Any,
    jacobians: Any = None,
) -> bool:
    """Return True iff residuals and every requested Jacobian block are valid.

    Parameters
    ----------
    block : ResidualBlock
        Shape of the evaluated block
    cost : array-like
        Cost slot. Must not be None; its content is not inspected here.
    residuals : array-like
        Residual vector, ``block.num_residuals`` entries
    jacobians : sequence or None
        None when derivatives were not requested. Otherwise one entry per
        parameter block, where a None entry marks a block held constant.

    Returns
    -------
    bool
        False if any required entry is unwritten, non-finite or missing.

    Raises
    ------
    ValueError
        If ``cost`` is None (caller contract violation, not a data error)
    """
    if cost is None:
        raise ValueError("cost buffer is required for evaluation validation")

    num_residuals = block.num_residuals

    if not is_array_valid(num_residuals, residuals):
        return False

    if jacobians is not None:
        if len(jacobians) < block.num_parameter_blocks:
            return False
        for i, parameter_block in enumerate(block.parameter_blocks):
            jacobian = jacobians[i]
            if jacobian is None:
                continue
            if not is_array_valid(num_residuals * parameter_block.size, jacobian):
                return False

    return True


def find_invalid_entries(
    block: ResidualBlock,
    residuals: Any,
    jacobians: Any = None,
) -> list[tuple[str, int, str]]:
    """List ``(label, flat_index, status)`` for every offending entry.

    Absent arrays are reported once with index -1, and short arrays once at
    the first missing index, both with status ``"ABSENT"``.
    """
    entries: list[tuple[str, int, str]] = []
    for array in required_arrays(block, residuals, jacobians):
        if array.values is None:
            entries.append((array.label, -1, "ABSENT"))
            continue
        status = classify_array(array.size, array.values)
        for index in (status != EntryStatus.OK).nonzero()[0]:
            entries.append(
                (array.label, int(index), EntryStatus(status[index]).name)
            )
        if status.shape[0] < array.size:
            entries.append((array.label, int(status.shape[0]), "ABSENT"))
    return entries
