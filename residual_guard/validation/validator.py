"""Stateful wrapper around the evaluation verdict.

``EvaluationValidator`` turns the boolean from ``is_evaluation_valid`` into
one of two behaviours: log the error report and return False (``check``), or
raise ``InvalidEvaluationError`` carrying the report (``validate``).

Examples
--------
>>> validator = EvaluationValidator()
>>> if not validator.check(block, parameters, cost, residuals, jacobians):
...     reject_step()
"""

from __future__ import annotations

from typing import Any

import numpy as np

from residual_guard.config.settings import GuardConfig
from residual_guard.core.array_utils import is_array_valid
from residual_guard.core.residual_block import ResidualBlock
from residual_guard.diagnostics.error_report import render_error_report
from residual_guard.diagnostics.evaluation_dump import render_full_dump
from residual_guard.exceptions import InvalidEvaluationError
from residual_guard.utils.logging import get_logger
from residual_guard.validation.evaluation_validator import (
    find_invalid_entries,
    is_evaluation_valid,
)

logger = get_logger(__name__)


class EvaluationValidator:
    """Validator for the output of user residual evaluations.

    Attributes
    ----------
    config : GuardConfig
        Reporting settings (listing threshold, full dump)
    enable_validation : bool
        Whether to perform validation; a disabled validator accepts everything
    """

    def __init__(self, config: GuardConfig | None = None):
        self.config = config or GuardConfig()
        self.enable_validation = self.config.enabled

    def is_valid(
        self,
        block: ResidualBlock,
        cost: Any,
        residuals: Any,
        jacobians: Any = None,
    ) -> bool:
        if not self.enable_validation:
            return True
        return is_evaluation_valid(block, cost, residuals, jacobians)

    def build_report(
        self,
        block: ResidualBlock,
        parameters: Any,
        cost: Any,
        residuals: Any,
        jacobians: Any = None,
    ) -> str:
        """Error report, followed by the full dump when configured."""
        report = render_error_report(
            block,
            parameters,
            cost,
            residuals,
            jacobians,
            full_listing_threshold=self.config.full_listing_threshold,
        )
        if self.config.include_full_dump:
            report += "\n" + render_full_dump(block, parameters, cost, residuals, jacobians)
        return report

    def check(
        self,
        block: ResidualBlock,
        parameters: Any,
        cost: Any,
        residuals: Any,
        jacobians: Any = None,
    ) -> bool:
        """Return the verdict, logging the report as a warning when invalid."""
        if self.is_valid(block, cost, residuals, jacobians):
            return True
        report = self.build_report(block, parameters, cost, residuals, jacobians)
        logger.warning(
            f"Error in evaluating the residual block ({block.describe()}).\n\n{report}"
        )
        return False

    def validate(
        self,
        block: ResidualBlock,
        parameters: Any,
        cost: Any,
        residuals: Any,
        jacobians: Any = None,
    ) -> None:
        """Raise InvalidEvaluationError if the evaluation is invalid.

        Raises
        ------
        InvalidEvaluationError
            With the rendered report and the offending locations attached
        """
        if self.is_valid(block, cost, residuals, jacobians):
            return

        locations = find_invalid_entries(block, residuals, jacobians)
        arrays = sorted({label for label, _, _ in locations})
        raise InvalidEvaluationError(
            f"Invalid evaluation of residual block ({block.describe()}): "
            f"{len(locations)} bad entries in {', '.join(arrays)}",
            report=self.build_report(block, parameters, cost, residuals, jacobians),
            invalid_locations=locations,
            error_context={"n_invalid": len(locations)},
        )

    def validate_cost(self, cost: Any) -> bool:
        """Check the cost scalar separately; True iff it is finite and written.

        The cost is not part of the evaluation verdict since the solver
        usually computes it from the residuals after validation.
        """
        if not self.enable_validation:
            return True
        if cost is None:
            return False
        valid = is_array_valid(1, cost)
        if not valid:
            logger.warning(f"Invalid cost value: {np.ravel(np.asarray(cost))[:1]}")
        return valid

    def disable(self) -> None:
        """Disable validation for performance-critical sections."""
        self.enable_validation = False

    def enable(self) -> None:
        """Re-enable validation after disabling."""
        self.enable_validation = True
