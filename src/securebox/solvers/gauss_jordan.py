from __future__ import annotations

from typing import Optional

import numpy as np

from ..algebra import build_system, decision_to_toggles, gf2_solve
from ..box import BoxState
from .base import Box, Solver, UnsolvableBoxError


class GaussJordanSolver(Solver):
    """
    Model the box as A x = b over GF(2) and solve it upfront.
    Free variables are left at 0, so every cell is toggled at most once.
    """

    def __init__(self, packed: bool = False):
        self.packed = packed

        self.y: Optional[int] = None
        self.x: Optional[int] = None
        self.last_decision: Optional[np.ndarray] = None
        self.last_rank: Optional[int] = None

    def reset(self, y: int, x: int, params: dict | None = None) -> None:
        self.y = int(y)
        self.x = int(x)
        self.last_decision = None
        self.last_rank = None

        if params is not None:
            packed = params.get("packed", None)
            if packed is not None:
                self.packed = bool(packed)

    def _solve_state(self, state: BoxState) -> np.ndarray:
        assert (
            self.y is not None and self.x is not None
        ), "GaussJordanSolver: size unknown, call reset() first"

        system = build_system(state, self.y, self.x)
        decision, rank, is_valid = gf2_solve(system, packed=self.packed)
        self.last_rank = rank
        if not is_valid or decision is None:
            self.last_decision = None
            raise UnsolvableBoxError(
                f"GaussJordanSolver: no toggle set opens this {self.y}x{self.x} "
                f"box (rank {rank} of {self.y * self.x})."
            )
        self.last_decision = decision
        return decision

    def plan(self, state: BoxState) -> list[tuple[int, int]]:
        return decision_to_toggles(self._solve_state(state), self.x)


def open_box(
    box: Box, y: int, x: int, solver: Solver | None = None
) -> bool:
    """Toggle `box` open using only its public toggle/is_locked/get_state.

    Returns True if the box is still locked afterwards, False once it is open.
    """
    solver = solver or GaussJordanSolver()
    solver.reset(y, x)
    if y == 0 or x == 0:
        return False

    state = BoxState(y, x, box.get_state())
    try:
        toggles = solver.plan(state)
    except UnsolvableBoxError:
        return True

    # each toggle goes to the live box
    for row, col in toggles:
        box.toggle(row, col)
    return box.is_locked()
