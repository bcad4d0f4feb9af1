from __future__ import annotations

import numpy as np

from securebox.box import BoxState
from securebox.evaluation.metrics import locked_cells, opened, solver_miss, toggles_used


def test_metrics() -> None:
    grid = np.array([[True, False], [True, True]])
    assert locked_cells(grid) == 3
    assert locked_cells(BoxState(2, 2, grid)) == 3
    assert toggles_used([(0, 0), (1, 1)]) == 2
    assert opened(False) == 1
    assert opened(True) == 0
    assert solver_miss(True, True) == 1
    assert solver_miss(False, True) == 0
    assert solver_miss(True, False) == 0
