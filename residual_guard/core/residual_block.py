"""Residual block shape model.

The solver owns residual blocks and their buffers. This module only models
the read-only shape information the checks need (residual count and the size
of every parameter block), plus a small buffer container used by the guarded
evaluation loop and by tests.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any, NamedTuple

import numpy as np


@dataclass(frozen=True)
class ParameterBlock:
    """A parameter block as seen by a residual block.

    Attributes
    ----------
    size : int
        Number of scalar parameters in the block (>= 1).
    name : str or None
        Optional label shown by :meth:`ResidualBlock.describe` in log messages.
    constant : bool
        Whether the block is held constant. No Jacobian is requested for a
        constant block.
    """

    size: int
    name: str | None = None
    constant: bool = False

    def __post_init__(self):
        if int(self.size) < 1:
            raise ValueError(f"Parameter block size must be >= 1, got {self.size}")


@dataclass(frozen=True)
class ResidualBlock:
    """Shape of one residual block: its residual count and parameter blocks."""

    num_residuals: int
    parameter_blocks: tuple[ParameterBlock, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if int(self.num_residuals) < 1:
            raise ValueError(
                f"Residual block needs at least one residual, got {self.num_residuals}"
            )
        # Accept any sequence but store a tuple so the shape stays immutable
        object.__setattr__(self, "parameter_blocks", tuple(self.parameter_blocks))

    @classmethod
    def from_sizes(
        cls,
        num_residuals: int,
        sizes: Sequence[int],
        constant: Sequence[int] = (),
    ) -> ResidualBlock:
        """Build a block from plain sizes; ``constant`` lists held block indices."""
        held = set(constant)
        return cls(
            num_residuals=num_residuals,
            parameter_blocks=tuple(
                ParameterBlock(size=size, constant=i in held)
                for i, size in enumerate(sizes)
            ),
        )

    @property
    def num_parameter_blocks(self) -> int:
        return len(self.parameter_blocks)

    @property
    def parameter_sizes(self) -> tuple[int, ...]:
        return tuple(pb.size for pb in self.parameter_blocks)

    def jacobian_size(self, index: int) -> int:
        """Number of entries in the Jacobian block of parameter block ``index``."""
        return self.num_residuals * self.parameter_blocks[index].size

    def describe(self) -> str:
        """Short shape summary for log messages; named blocks show as ``name=size``."""
        sizes = ", ".join(
            str(pb.size) if pb.name is None else f"{pb.name}={pb.size}"
            for pb in self.parameter_blocks
        )
        return (
            f"{self.num_parameter_blocks} parameter blocks "
            f"[{sizes}] x {self.num_residuals} residuals"
        )


@dataclass
class EvaluationBuffers:
    """Output buffers for a single evaluation of a residual block.

    ``cost`` is a one-element array so it can be written in place.
    ``jacobians`` is None when no derivatives are requested; otherwise it has
    one entry per parameter block, None for blocks held constant.
    """

    cost: np.ndarray
    residuals: np.ndarray
    jacobians: list[np.ndarray | None] | None = None

    @classmethod
    def allocate(
        cls, block: ResidualBlock, compute_jacobians: bool = True
    ) -> EvaluationBuffers:
        """Allocate float64 buffers sized for ``block``."""
        jacobians = None
        if compute_jacobians:
            jacobians = [
                None
                if pb.constant
                else np.zeros(block.num_residuals * pb.size, dtype=np.float64)
                for pb in block.parameter_blocks
            ]
        return cls(
            cost=np.zeros(1, dtype=np.float64),
            residuals=np.zeros(block.num_residuals, dtype=np.float64),
            jacobians=jacobians,
        )

    def jacobian_matrix(self, block: ResidualBlock, index: int) -> np.ndarray | None:
        """Return block ``index``'s Jacobian as a (num_residuals, size) view."""
        if self.jacobians is None or self.jacobians[index] is None:
            return None
        size = block.parameter_blocks[index].size
        return np.asarray(self.jacobians[index]).reshape(block.num_residuals, size)


class RequiredArray(NamedTuple):
    """An output array the user routine was obliged to fill."""

    label: str
    parameter_index: int | None
    size: int
    values: Any


def required_arrays(
    block: ResidualBlock,
    residuals: Any,
    jacobians: Any = None,
) -> Iterator[RequiredArray]:
    """Yield every array the evaluation had to fill, residuals first.

    Jacobian entries that are None are held constant and are not yielded.
    Entries missing from a too-short Jacobian sequence are yielded with
    ``values=None`` since the solver did request them.
    """
    num_residuals = block.num_residuals
    yield RequiredArray("residuals", None, num_residuals, residuals)

    if jacobians is None:
        return
    n_supplied = len(jacobians)
    for i, parameter_block in enumerate(block.parameter_blocks):
        size = num_residuals * parameter_block.size
        if i >= n_supplied:
            yield RequiredArray(f"jacobian[{i}]", i, size, None)
        elif jacobians[i] is not None:
            yield RequiredArray(f"jacobian[{i}]", i, size, jacobians[i])
