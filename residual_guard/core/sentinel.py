"""Sentinel poisoning of evaluation buffers.

Before a user evaluation routine runs, every output slot it is expected to
write is filled with ``IMPOSSIBLE_VALUE``. Any slot still holding that value
afterwards was never written. The value is finite, so a routine that produces
NaN or Inf is still told apart from one that forgot to write.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from residual_guard.core.residual_block import ResidualBlock

# Reserved marker for "not yet written". Compared by exact equality only.
IMPOSSIBLE_VALUE: float = 1e302


def poison_array(size: int, array: Any) -> None:
    """Fill the first ``size`` flat elements of ``array`` with the sentinel.

    A ``None`` array is skipped and a short buffer is never extended. Numpy
    buffers must be float64; narrower floats cannot represent the sentinel.
    """
    if array is None or size <= 0:
        return
    if isinstance(array, np.ndarray):
        if array.dtype != np.float64:
            raise TypeError(
                f"Evaluation buffers must be float64 to hold the sentinel, got {array.dtype}"
            )
        array.flat[:size] = IMPOSSIBLE_VALUE
    else:
        # Slice assignment would grow a short list
        count = min(size, len(array))
        array[:count] = [IMPOSSIBLE_VALUE] * count


def poison(
    block: ResidualBlock,
    cost: Any,
    residuals: Any,
    jacobians: Any = None,
) -> None:
    """Poison cost, residuals and every requested Jacobian block in place.

    Parameters
    ----------
    block : ResidualBlock
        Shape of the block about to be evaluated
    cost : array-like
        One-element cost slot
    residuals : array-like
        Residual vector of ``block.num_residuals`` entries
    jacobians : sequence or None
        One entry per parameter block; None (whole array or a single entry)
        means "not requested" and is left untouched. Entries missing from a
        short sequence are skipped; the validator reports them as absent.
    """
    num_residuals = block.num_residuals

    poison_array(1, cost)
    poison_array(num_residuals, residuals)
    if jacobians is not None:
        for parameter_block, jacobian in zip(block.parameter_blocks, jacobians):
            poison_array(num_residuals * parameter_block.size, jacobian)
