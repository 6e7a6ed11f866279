"""Bridge a guarded residual block to ``scipy.optimize.least_squares``.

SciPy works on one flat parameter vector and expects ``fun(x)`` and
``jac(x)`` callables. The bridge splits ``x`` into the block's non-constant
parameter blocks, runs the guarded evaluation, and assembles the dense
Jacobian from the per-block buffers. SciPy has no way to receive a failed
evaluation, so an invalid one is raised with its report attached.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import numpy as np

from residual_guard.evaluation import EvaluationOutcome, GuardedResidualBlock
from residual_guard.exceptions import InvalidEvaluationError, UserEvaluationFailure
from residual_guard.utils.logging import get_logger
from residual_guard.validation.evaluation_validator import find_invalid_entries

logger = get_logger(__name__)


class LeastSquaresBridge:
    """Expose a guarded residual block as SciPy least-squares callables.

    Parameters
    ----------
    guarded : GuardedResidualBlock
        The block and its user evaluation routine
    parameters : sequence of array-like
        Initial value of every parameter block. Constant blocks keep these
        values for the whole fit.
    """

    def __init__(self, guarded: GuardedResidualBlock, parameters: Sequence[Any]):
        self.guarded = guarded
        block = guarded.block
        if len(parameters) != block.num_parameter_blocks:
            raise ValueError(
                f"Expected {block.num_parameter_blocks} parameter blocks, "
                f"got {len(parameters)}"
            )
        self._parameters = [
            np.array(values, dtype=np.float64).reshape(-1) for values in parameters
        ]
        self.variable_blocks = [
            i for i, pb in enumerate(block.parameter_blocks) if not pb.constant
        ]
        self._cached_x: np.ndarray | None = None
        self._cached_outcome: EvaluationOutcome | None = None

    @property
    def x0(self) -> np.ndarray:
        """Initial flat vector of the non-constant parameter blocks."""
        if not self.variable_blocks:
            return np.zeros(0, dtype=np.float64)
        return np.concatenate([self._parameters[i] for i in self.variable_blocks])

    def unpack(self, x: Any) -> list[np.ndarray]:
        """Split flat ``x`` back into one array per parameter block."""
        x = np.asarray(x, dtype=np.float64)
        expected = sum(self._parameters[i].size for i in self.variable_blocks)
        if x.shape != (expected,):
            raise ValueError(f"Expected parameter vector of shape ({expected},), got {x.shape}")
        blocks = [values.copy() for values in self._parameters]
        offset = 0
        for i in self.variable_blocks:
            size = blocks[i].size
            blocks[i] = x[offset : offset + size].copy()
            offset += size
        return blocks

    def _evaluate(self, x: Any) -> EvaluationOutcome:
        x = np.asarray(x, dtype=np.float64)
        if self._cached_x is not None and np.array_equal(x, self._cached_x):
            return self._cached_outcome

        parameters = self.unpack(x)
        outcome = self.guarded.evaluate(parameters, compute_jacobians=True)
        if outcome.user_failure:
            raise UserEvaluationFailure(
                "User evaluation routine reported failure",
                error_context={"x": x.tolist()},
            )
        if not outcome.success:
            buffers = outcome.buffers
            raise InvalidEvaluationError(
                f"Invalid evaluation of residual block ({self.guarded.block.describe()})",
                report=outcome.report or "",
                invalid_locations=find_invalid_entries(
                    self.guarded.block, buffers.residuals, buffers.jacobians
                ),
            )

        self._cached_x = x.copy()
        self._cached_outcome = outcome
        return outcome

    def residuals(self, x: Any) -> np.ndarray:
        """``fun`` for least_squares: the residual vector at ``x``."""
        return np.array(self._evaluate(x).buffers.residuals, dtype=np.float64)

    def jacobian(self, x: Any) -> np.ndarray:
        """``jac`` for least_squares: dense (num_residuals, len(x)) Jacobian."""
        outcome = self._evaluate(x)
        block = self.guarded.block
        columns = [
            outcome.buffers.jacobian_matrix(block, i) for i in self.variable_blocks
        ]
        if not columns:
            return np.zeros((block.num_residuals, 0), dtype=np.float64)
        return np.hstack(columns)

    def run_least_squares(self, x0: Any = None, **kwargs):
        """Run ``scipy.optimize.least_squares`` with the guarded callables.

        Parameters
        ----------
        x0 : array-like, optional
            Starting vector; defaults to :attr:`x0`
        **kwargs
            Passed through to ``least_squares``

        Returns
        -------
        scipy.optimize.OptimizeResult
        """
        from scipy.optimize import least_squares

        start = self.x0 if x0 is None else np.asarray(x0, dtype=np.float64)
        result = least_squares(self.residuals, start, jac=self.jacobian, **kwargs)
        logger.info(
            f"least_squares finished: status={result.status}, cost={result.cost:.6g}, "
            f"evaluations={self.guarded.n_evaluations}"
        )
        return result
