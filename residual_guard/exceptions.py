"""Custom exceptions for residual evaluation checking.

Exception Hierarchy:
    ResidualGuardError (base)
    ├── InvalidEvaluationError (unwritten or non-finite output)
    ├── UserEvaluationFailure (user routine reported failure)
    └── ConfigurationError (bad settings)

The validators themselves never raise on bad data; they return a verdict.
These exceptions are used by the layers that turn a verdict into control
flow (strict-mode validation, the SciPy bridge) and by configuration loading.

Examples
--------
>>> try:
...     bridge.residuals(x)
... except InvalidEvaluationError as e:
...     logger.error(e.report)
"""

from __future__ import annotations


class ResidualGuardError(Exception):
    """Base exception for all residual_guard errors.

    Attributes
    ----------
    error_context : dict
        Additional context about the error (block shape, counts, ...)
    """

    def __init__(self, message: str, error_context: dict | None = None):
        super().__init__(message)
        self.error_context = error_context or {}

    def __str__(self) -> str:
        """Return formatted error message with context."""
        base_msg = super().__str__()
        if self.error_context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.error_context.items())
            return f"{base_msg} (context: {context_str})"
        return base_msg


class InvalidEvaluationError(ResidualGuardError):
    """Raised when a user evaluation left unwritten or non-finite values.

    Attributes
    ----------
    report : str
        Full error report explaining which entries are bad and why
    invalid_locations : list of tuple
        ``(array_label, flat_index, status_name)`` for every offending entry,
        e.g. ``("residuals", 1, "UNWRITTEN")`` or ``("jacobian[0]", 4, "NON_FINITE")``.
        A structurally absent array is listed with index ``-1`` and status
        ``"ABSENT"``.
    """

    def __init__(
        self,
        message: str,
        report: str = "",
        invalid_locations: list[tuple[str, int, str]] | None = None,
        error_context: dict | None = None,
    ):
        super().__init__(message, error_context)
        self.report = report
        self.invalid_locations = invalid_locations or []


class UserEvaluationFailure(ResidualGuardError):
    """Raised when the user evaluation routine itself returned failure.

    This is distinct from :class:`InvalidEvaluationError`: the routine
    declared it could not evaluate at this point, so its buffers are not
    inspected.
    """


class ConfigurationError(ResidualGuardError):
    """Raised for invalid residual_guard configuration values."""
