"""Adapters connecting guarded residual blocks to external solvers."""

from residual_guard.adapters.scipy_bridge import LeastSquaresBridge

__all__ = ["LeastSquaresBridge"]
