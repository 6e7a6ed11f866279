"""
Pytest Configuration and Fixtures for residual_guard
====================================================

Shared fixtures for residual block shapes and evaluation buffers.
"""

import numpy as np
import pytest

from residual_guard import IMPOSSIBLE_VALUE, GuardConfig, ResidualBlock

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "property: Property-based tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "property" in str(item.fspath):
            item.add_marker(pytest.mark.property)


# ============================================================================
# Block and Buffer Fixtures
# ============================================================================


@pytest.fixture
def sentinel():
    return IMPOSSIBLE_VALUE


@pytest.fixture
def single_block():
    """One parameter block of size 3 feeding 2 residuals."""
    return ResidualBlock.from_sizes(num_residuals=2, sizes=[3])


@pytest.fixture
def two_blocks():
    """Two parameter blocks (sizes 2 and 1) feeding 3 residuals."""
    return ResidualBlock.from_sizes(num_residuals=3, sizes=[2, 1])


@pytest.fixture
def valid_evaluation():
    """Fully written, finite buffers for ``single_block``."""
    return {
        "parameters": [np.array([10.0, 20.0, 30.0])],
        "cost": np.array([0.0]),
        "residuals": np.array([1.0, 2.0]),
        "jacobians": [np.array([0.1, 0.2, 0.3, 0.4, 0.5, 0.6])],
    }


@pytest.fixture
def two_block_evaluation():
    """Fully written, finite buffers for ``two_blocks``."""
    return {
        "parameters": [np.array([1.0, 2.0]), np.array([3.0])],
        "cost": np.array([0.0]),
        "residuals": np.array([0.5, -0.5, 1.5]),
        "jacobians": [
            np.array([1.0, 2.0, 3.0, 4.0, 5.0, 6.0]),
            np.array([7.0, 8.0, 9.0]),
        ],
    }


@pytest.fixture
def quiet_config():
    """Config without the full dump appended to reports."""
    return GuardConfig(include_full_dump=False)


# ============================================================================
# Line Model Helpers
# ============================================================================


LINE_T = np.array([0.0, 1.0, 2.0, 3.0])
LINE_Y = 2.0 * LINE_T + 1.0


def line_cost_function(parameters, residuals, jacobians):
    """r_k = slope * t_k + intercept - y_k with one block [slope, intercept]."""
    slope, intercept = parameters[0]
    residuals[:] = slope * LINE_T + intercept - LINE_Y
    if jacobians is not None and jacobians[0] is not None:
        jac = jacobians[0].reshape(len(LINE_T), 2)
        jac[:, 0] = LINE_T
        jac[:, 1] = 1.0
    return True


@pytest.fixture
def line_block():
    return ResidualBlock.from_sizes(num_residuals=len(LINE_T), sizes=[2])


@pytest.fixture
def line_model():
    return line_cost_function
