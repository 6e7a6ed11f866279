#!/usr/bin/env python3
"""
Residual Evaluation Validation Demonstration
============================================

Shows what a solver sees when a user residual evaluation misbehaves:

1. A correct evaluation passes silently
2. A routine that forgets to write a residual is caught as "not set"
3. A routine that produces NaN is caught as "not finite"
4. A block held constant prints "Not Computed" in the full dump
5. A guarded fit through scipy.optimize.least_squares

Run this script to see the reports.
"""

import numpy as np

from residual_guard import (
    IMPOSSIBLE_VALUE,
    GuardConfig,
    GuardedResidualBlock,
    LeastSquaresBridge,
    ResidualBlock,
    is_evaluation_valid,
    render_error_report,
    render_full_dump,
)
from residual_guard.utils.logging import get_logger

logger = get_logger(__name__)

T = np.linspace(0.0, 1.0, 5)
Y = 3.0 * np.exp(-2.0 * T)


def decay_model(parameters, residuals, jacobians):
    """r_k = a * exp(-b t_k) - y_k for one parameter block [a, b]."""
    a, b = parameters[0]
    model = a * np.exp(-b * T)
    residuals[:] = model - Y
    if jacobians is not None and jacobians[0] is not None:
        jac = jacobians[0].reshape(len(T), 2)
        jac[:, 0] = model / a
        jac[:, 1] = -T * model
    return True


def section(title):
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


def demonstrate_manual_checks():
    block = ResidualBlock.from_sizes(num_residuals=2, sizes=[3])
    parameters = [np.array([1.0, 2.0, 3.0])]
    cost = np.zeros(1)
    jacobians = [np.array([0.1, 0.2, 0.3, 0.4, 0.5, 0.6])]

    section("1. VALID EVALUATION")
    residuals = np.array([1.0, 2.0])
    print(f"valid: {is_evaluation_valid(block, cost, residuals, jacobians)}")

    section("2. RESIDUAL NEVER WRITTEN")
    residuals = np.array([1.0, IMPOSSIBLE_VALUE])
    print(f"valid: {is_evaluation_valid(block, cost, residuals, jacobians)}")
    print(render_error_report(block, parameters, cost, residuals, jacobians))

    section("3. NON-FINITE RESIDUAL")
    residuals = np.array([1.0, np.nan])
    print(render_error_report(block, parameters, cost, residuals, jacobians))

    section("4. CONSTANT PARAMETER BLOCK")
    residuals = np.array([1.0, 2.0])
    print(f"valid: {is_evaluation_valid(block, cost, residuals, [None])}")
    print(render_full_dump(block, parameters, cost, residuals, [None]))


def demonstrate_guarded_fit():
    section("5. GUARDED LEAST-SQUARES FIT")
    block = ResidualBlock.from_sizes(num_residuals=len(T), sizes=[2])
    guarded = GuardedResidualBlock(block, decay_model, GuardConfig(strict=True))
    bridge = LeastSquaresBridge(guarded, [np.array([1.0, 1.0])])
    result = bridge.run_least_squares()
    print(f"fitted a, b = {result.x}")
    print(f"evaluation statistics: {guarded.statistics()}")


if __name__ == "__main__":
    demonstrate_manual_checks()
    demonstrate_guarded_fit()
