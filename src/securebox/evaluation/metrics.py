from __future__ import annotations


def toggles_used(plan) -> int:
    return len(plan)


def locked_cells(state) -> int:
    # accepts a BoxState or a raw (y, x) bool array
    grid = getattr(state, "state", state)
    return int(grid.sum())


def opened(locked: bool) -> int:
    return int(not locked)


def solver_miss(is_solvable: bool, locked: bool) -> int:
    # solvable on paper but still locked after applying the plan
    return int(is_solvable and locked)
