"""Fixed-width cell rendering shared by the evaluation dumps."""

from __future__ import annotations

from typing import Any

from residual_guard.core.array_utils import EntryStatus, classify_value, flat_values

CELL_WIDTH = 13

NOT_COMPUTED = "Not Computed"
UNINITIALIZED = "Uninitialized"
MISSING = "Missing"


def format_cell(value: Any) -> str:
    """Render one value right-aligned in ``CELL_WIDTH`` columns.

    None renders as ``Not Computed`` and the sentinel as ``Uninitialized``.
    NaN and Inf are printed as they are so the bad number stays visible.
    """
    if value is None:
        text = NOT_COMPUTED
    elif classify_value(value) == EntryStatus.UNWRITTEN:
        text = UNINITIALIZED
    else:
        text = f"{float(value):g}"
    return f"{text:>{CELL_WIDTH}}"


def format_array(size: int, array: Any) -> str:
    """Render ``size`` cells of ``array`` separated by single spaces.

    An absent array yields ``size`` ``Not Computed`` cells; positions past
    the end of a short buffer yield ``Missing``.
    """
    if array is None:
        return " ".join(format_cell(None) for _ in range(size))
    values = flat_values(array)
    cells = []
    for i in range(size):
        if i < values.shape[0]:
            cells.append(format_cell(values[i]))
        else:
            cells.append(f"{MISSING:>{CELL_WIDTH}}")
    return " ".join(cells)


def entry_at(array: Any, index: int) -> Any:
    """Flat entry ``index`` of ``array``, or None when it does not exist."""
    if array is None:
        return None
    values = flat_values(array)
    if index >= values.shape[0]:
        return None
    return values[index]
