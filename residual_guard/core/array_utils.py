"""Per-entry validity checks for evaluation buffers.

Every entry of a residual or Jacobian buffer falls in one of three classes:

* ``OK`` - finite and not the sentinel
* ``UNWRITTEN`` - still holds ``IMPOSSIBLE_VALUE`` after evaluation
* ``NON_FINITE`` - NaN or +/-Inf

The boolean check used after every evaluation and the classifier used by the
error report apply the same two tests (``np.isfinite`` and exact equality
with the sentinel), so a cell is never judged differently by the two paths.
The boolean check allocates no per-entry status array.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any

import numpy as np

from residual_guard.core.sentinel import IMPOSSIBLE_VALUE


class EntryStatus(IntEnum):
    """Classification of a single buffer entry."""

    OK = 0
    UNWRITTEN = 1
    NON_FINITE = 2


_COMMENTARY = {
    EntryStatus.OK: "OK",
    EntryStatus.UNWRITTEN: "ERROR: Value was not set by cost function",
    EntryStatus.NON_FINITE: "ERROR: Value is not finite",
}


def flat_values(array: Any) -> np.ndarray:
    """Return ``array`` as a flat float array (a view for contiguous numpy input)."""
    return np.ravel(np.asarray(array))


def _non_finite_mask(values: np.ndarray) -> np.ndarray:
    return ~np.isfinite(values)


def _unwritten_mask(values: np.ndarray) -> np.ndarray:
    return values == IMPOSSIBLE_VALUE


def classify_value(x: float) -> EntryStatus:
    """Classify one scalar. Non-finite takes precedence over unwritten."""
    if not np.isfinite(x):
        return EntryStatus.NON_FINITE
    if x == IMPOSSIBLE_VALUE:
        return EntryStatus.UNWRITTEN
    return EntryStatus.OK


def classify_array(size: int, array: Any) -> np.ndarray:
    """Classify the first ``size`` entries of ``array``.

    Returns
    -------
    np.ndarray
        int8 array of :class:`EntryStatus` codes, one per entry that exists.
        Shorter than ``size`` when the buffer is short; empty for ``None``.
    """
    if array is None or size <= 0:
        return np.zeros(0, dtype=np.int8)
    values = flat_values(array)[:size]
    status = np.full(values.shape, EntryStatus.OK, dtype=np.int8)
    status[_unwritten_mask(values)] = EntryStatus.UNWRITTEN
    status[_non_finite_mask(values)] = EntryStatus.NON_FINITE
    return status


def is_array_valid(size: int, array: Any) -> bool:
    """Return True iff the first ``size`` entries are all finite and written.

    An absent array is valid only when nothing was required of it. A buffer
    holding fewer than ``size`` entries is invalid.
    """
    if array is None:
        return size == 0
    if size <= 0:
        return True
    values = flat_values(array)
    if values.shape[0] < size:
        return False
    values = values[:size]
    if not np.isfinite(values).all():
        return False
    return not (values == IMPOSSIBLE_VALUE).any()


def find_invalid_value(size: int, array: Any) -> int:
    """Return the index of the first invalid entry, or ``size`` if there is none.

    An absent array with ``size > 0`` reports index 0. For a short buffer the
    first missing position is reported when all present entries are valid.
    """
    if array is None:
        return 0 if size > 0 else size
    status = classify_array(size, array)
    bad = np.flatnonzero(status != EntryStatus.OK)
    if bad.size:
        return int(bad[0])
    return int(status.shape[0])


def value_commentary(x: float) -> str:
    """Human-readable verdict for one user-supplied number."""
    return _COMMENTARY[classify_value(x)]


def status_commentary(status: int) -> str:
    return _COMMENTARY[EntryStatus(status)]
