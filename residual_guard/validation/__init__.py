"""Validation of residual block evaluations.

``evaluation_validator`` holds the pure verdict used on every evaluation;
``validator`` wraps it with logging and exception raising.
"""

from residual_guard.core.residual_block import RequiredArray, required_arrays
from residual_guard.validation.evaluation_validator import (
    find_invalid_entries,
    is_evaluation_valid,
)
from residual_guard.validation.validator import EvaluationValidator

__all__ = [
    "EvaluationValidator",
    "RequiredArray",
    "find_invalid_entries",
    "is_evaluation_valid",
    "required_arrays",
]
