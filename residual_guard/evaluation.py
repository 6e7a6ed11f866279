"""Guarded evaluation of a residual block.

This is the sequence a solver runs around every call into user code:

1. poison the output buffers with the sentinel
2. call the user evaluation routine
3. if the routine reported failure, stop; its output is not inspected
4. validate residuals and requested Jacobians
5. on success, set the cost to ``0.5 * ||r||^2``

An invalid evaluation is logged with the error report (and the full dump,
unless disabled) or, in strict mode, raised as ``InvalidEvaluationError``.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np

from residual_guard.config.settings import GuardConfig
from residual_guard.core.residual_block import EvaluationBuffers, ResidualBlock
from residual_guard.core.sentinel import poison
from residual_guard.utils.logging import get_logger
from residual_guard.validation.validator import EvaluationValidator

logger = get_logger(__name__)

# cost_function(parameters, residuals, jacobians) -> bool
CostFunction = Callable[[Sequence[np.ndarray], np.ndarray, Any], bool]


@dataclass
class EvaluationOutcome:
    """Result of one guarded evaluation.

    Attributes
    ----------
    success : bool
        True iff the user routine succeeded and its output is valid
    cost : float
        ``0.5 * ||r||^2`` on success, NaN otherwise
    buffers : EvaluationBuffers
        The buffers the routine wrote into
    user_failure : bool
        The routine itself returned False
    report : str or None
        Error report for an invalid evaluation
    """

    success: bool
    cost: float
    buffers: EvaluationBuffers
    user_failure: bool = False
    report: str | None = None


class GuardedResidualBlock:
    """A residual block whose user evaluation routine is checked on every call."""

    def __init__(
        self,
        block: ResidualBlock,
        cost_function: CostFunction,
        config: GuardConfig | None = None,
    ):
        self.block = block
        self.cost_function = cost_function
        self.config = config or GuardConfig()
        self.validator = EvaluationValidator(self.config)

        self.n_evaluations = 0
        self.n_invalid = 0
        self.n_user_failures = 0

    def _check_parameters(self, parameters: Sequence[Any]) -> None:
        if len(parameters) != self.block.num_parameter_blocks:
            raise ValueError(
                f"Expected {self.block.num_parameter_blocks} parameter blocks, "
                f"got {len(parameters)}"
            )
        for i, (values, parameter_block) in enumerate(
            zip(parameters, self.block.parameter_blocks)
        ):
            if np.size(values) != parameter_block.size:
                raise ValueError(
                    f"Parameter block {i} has {np.size(values)} values, "
                    f"expected {parameter_block.size}"
                )

    def evaluate(
        self,
        parameters: Sequence[Any],
        buffers: EvaluationBuffers | None = None,
        compute_jacobians: bool = True,
    ) -> EvaluationOutcome:
        """Evaluate the block at ``parameters`` and check the output.

        Parameters
        ----------
        parameters : sequence of array-like
            One array per parameter block
        buffers : EvaluationBuffers, optional
            Buffers to reuse; allocated when omitted
        compute_jacobians : bool
            Whether Jacobians are requested from the routine

        Returns
        -------
        EvaluationOutcome

        Raises
        ------
        InvalidEvaluationError
            In strict mode, when the output is invalid
        """
        self._check_parameters(parameters)
        block = self.block
        if buffers is None:
            buffers = EvaluationBuffers.allocate(block, compute_jacobians)
        jacobians = buffers.jacobians if compute_jacobians else None

        poison(block, buffers.cost, buffers.residuals, jacobians)
        self.n_evaluations += 1

        if not self.cost_function(parameters, buffers.residuals, jacobians):
            self.n_user_failures += 1
            logger.debug(f"User evaluation reported failure ({block.describe()})")
            return EvaluationOutcome(
                success=False, cost=float("nan"), buffers=buffers, user_failure=True
            )

        if not self.validator.is_valid(block, buffers.cost, buffers.residuals, jacobians):
            self.n_invalid += 1
            if self.config.strict:
                self.validator.validate(
                    block, parameters, buffers.cost, buffers.residuals, jacobians
                )
            report = self.validator.build_report(
                block, parameters, buffers.cost, buffers.residuals, jacobians
            )
            logger.warning(
                f"Error in evaluating the residual block ({block.describe()}).\n\n{report}"
            )
            return EvaluationOutcome(
                success=False, cost=float("nan"), buffers=buffers, report=report
            )

        residuals = np.asarray(buffers.residuals)
        cost = 0.5 * float(np.dot(residuals, residuals))
        buffers.cost[0] = cost
        return EvaluationOutcome(success=True, cost=cost, buffers=buffers)

    def statistics(self) -> dict[str, int]:
        return {
            "n_evaluations": self.n_evaluations,
            "n_invalid": self.n_invalid,
            "n_user_failures": self.n_user_failures,
        }
