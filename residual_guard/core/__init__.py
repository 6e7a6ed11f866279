"""Core buffer model: residual block shapes, sentinel poisoning, entry checks."""

from residual_guard.core.array_utils import (
    EntryStatus,
    classify_array,
    classify_value,
    find_invalid_value,
    flat_values,
    is_array_valid,
    status_commentary,
    value_commentary,
)
from residual_guard.core.residual_block import (
    EvaluationBuffers,
    ParameterBlock,
    RequiredArray,
    ResidualBlock,
    required_arrays,
)
from residual_guard.core.sentinel import IMPOSSIBLE_VALUE, poison, poison_array

__all__ = [
    "IMPOSSIBLE_VALUE",
    "EntryStatus",
    "EvaluationBuffers",
    "ParameterBlock",
    "RequiredArray",
    "ResidualBlock",
    "classify_array",
    "classify_value",
    "find_invalid_value",
    "flat_values",
    "is_array_valid",
    "poison",
    "poison_array",
    "required_arrays",
    "status_commentary",
    "value_commentary",
]
