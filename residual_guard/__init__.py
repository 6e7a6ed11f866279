"""residual_guard: checks for user-supplied residual evaluations
================================================================

Validates the output a user residual-evaluation routine writes during an
iterative least-squares solve, and explains what went wrong when it is
malformed.

Before every evaluation the output buffers are filled with a sentinel
(``IMPOSSIBLE_VALUE``). Afterwards each required entry is classified as
written and finite, never written (still the sentinel), or non-finite
(NaN/Inf). Jacobian blocks of parameter blocks held constant are None and
are never checked.

Quick Start:
    >>> import numpy as np
    >>> from residual_guard import ResidualBlock, is_evaluation_valid, poison
    >>> from residual_guard import render_error_report
    >>> block = ResidualBlock.from_sizes(num_residuals=2, sizes=[3])
    >>> cost, residuals = np.zeros(1), np.zeros(2)
    >>> jacobians = [np.zeros(6)]
    >>> poison(block, cost, residuals, jacobians)
    >>> user_routine(parameters, residuals, jacobians)
    >>> if not is_evaluation_valid(block, cost, residuals, jacobians):
    ...     print(render_error_report(block, parameters, cost, residuals, jacobians))
"""

__version__ = "0.3.0"

from residual_guard.core import (
    IMPOSSIBLE_VALUE,
    EntryStatus,
    EvaluationBuffers,
    ParameterBlock,
    ResidualBlock,
    classify_array,
    classify_value,
    find_invalid_value,
    is_array_valid,
    poison,
    poison_array,
)
from residual_guard.validation import (
    EvaluationValidator,
    find_invalid_entries,
    is_evaluation_valid,
)
from residual_guard.diagnostics import (
    evaluation_error_report_string,
    evaluation_to_string,
    render_error_report,
    render_full_dump,
)
from residual_guard.config import GuardConfig, load_config
from residual_guard.evaluation import EvaluationOutcome, GuardedResidualBlock
from residual_guard.adapters import LeastSquaresBridge
from residual_guard.exceptions import (
    ConfigurationError,
    InvalidEvaluationError,
    ResidualGuardError,
    UserEvaluationFailure,
)
from residual_guard.utils.logging import configure_logging, get_logger

__all__ = [
    "__version__",
    # Core
    "IMPOSSIBLE_VALUE",
    "EntryStatus",
    "EvaluationBuffers",
    "ParameterBlock",
    "ResidualBlock",
    "classify_array",
    "classify_value",
    "find_invalid_value",
    "is_array_valid",
    "poison",
    "poison_array",
    # Validation
    "EvaluationValidator",
    "find_invalid_entries",
    "is_evaluation_valid",
    # Diagnostics
    "evaluation_error_report_string",
    "evaluation_to_string",
    "render_error_report",
    "render_full_dump",
    # Configuration
    "GuardConfig",
    "load_config",
    # Guarded evaluation
    "EvaluationOutcome",
    "GuardedResidualBlock",
    "LeastSquaresBridge",
    # Exceptions
    "ConfigurationError",
    "InvalidEvaluationError",
    "ResidualGuardError",
    "UserEvaluationFailure",
    # Logging
    "configure_logging",
    "get_logger",
]
