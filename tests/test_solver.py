from __future__ import annotations

import itertools

import numpy as np
import pytest

from securebox.box import BoxState, SecureBox
from securebox.solvers import GaussJordanSolver, UnsolvableBoxError, open_box

SIZES = (1, 2, 3, 4, 7)


@pytest.mark.parametrize(("y", "x"), list(itertools.product(SIZES, SIZES)))
@pytest.mark.parametrize("packed", [False, True])
def test_opens_shuffled_box(make_box, y: int, x: int, packed: bool) -> None:
    box = make_box(y, x)
    assert open_box(box, y, x, solver=GaussJordanSolver(packed=packed)) is False
    assert not box.is_locked()


def test_default_solver_opens_box(make_box) -> None:
    box = make_box(10, 10)
    assert open_box(box, 10, 10) is False
    assert not box.is_locked()


def test_scenario_single_cell(fixed_box) -> None:
    box = fixed_box([[True]])
    solver = GaussJordanSolver()
    assert open_box(box, 1, 1, solver=solver) is False
    assert solver.last_decision.tolist() == [1]
    assert box.toggles == [(0, 0)]
    assert box.grid.tolist() == [[False]]


def test_scenario_open_box_needs_no_toggles(fixed_box) -> None:
    box = fixed_box(np.zeros((2, 2), dtype=bool))
    solver = GaussJordanSolver()
    assert open_box(box, 2, 2, solver=solver) is False
    assert solver.last_decision.tolist() == [0, 0, 0, 0]
    assert box.toggles == []


def test_scenario_corner_on_2x2(fixed_box) -> None:
    box = fixed_box([[True, False], [False, False]])
    assert open_box(box, 2, 2) is False
    assert not box.grid.any()
    # each cell is toggled at most once
    assert len(set(box.toggles)) == len(box.toggles)


def test_any_state_opens_on_even_box(fixed_box, fx_rng) -> None:
    grid = fx_rng.uniform(size=(4, 6)) < 0.5
    box = fixed_box(grid)
    assert open_box(box, 4, 6) is False
    assert not box.grid.any()


@pytest.mark.parametrize(
    ("grid", "y", "x"),
    [
        ([[True, False]], 1, 2),
        ([[True, False, False], [False, False, False], [False, False, False]], 3, 3),
    ],
)
def test_unsolvable_box_stays_locked(fixed_box, grid, y: int, x: int) -> None:
    box = fixed_box(grid)
    solver = GaussJordanSolver()
    assert open_box(box, y, x, solver=solver) is True
    assert box.toggles == []
    assert solver.last_decision is None
    assert solver.last_rank < y * x


def test_plan_raises_when_unsolvable() -> None:
    solver = GaussJordanSolver()
    solver.reset(1, 2)
    with pytest.raises(UnsolvableBoxError):
        solver.plan(BoxState(1, 2, np.array([[False, True]])))


def test_plan_requires_reset() -> None:
    with pytest.raises(AssertionError):
        GaussJordanSolver().plan(BoxState(1, 1))


def test_reset_params() -> None:
    solver = GaussJordanSolver()
    solver.reset(2, 2, params={"packed": True})
    assert solver.packed
    solver.reset(2, 2, params={})
    assert solver.packed


def test_plan_does_not_touch_state(make_box) -> None:
    box = make_box(3, 4)
    state = box.snapshot()
    solver = GaussJordanSolver()
    solver.reset(3, 4)
    solver.plan(state)
    assert state == box.snapshot()


@pytest.mark.parametrize(("y", "x"), [(0, 0), (0, 3), (3, 0)])
def test_empty_box_is_open(y: int, x: int) -> None:
    box = SecureBox(y, x)
    assert open_box(box, y, x) is False


def test_plan_order_does_not_matter(make_box, fx_rng) -> None:
    box = make_box(5, 5)
    solver = GaussJordanSolver()
    solver.reset(5, 5)
    plan = solver.plan(box.snapshot())
    for i in fx_rng.permutation(len(plan)):
        box.toggle(*plan[i])
    assert not box.is_locked()


def test_empty_box_clears_previous_solve() -> None:
    solver = GaussJordanSolver()
    assert open_box(SecureBox(2, 2, rng=np.random.default_rng(3)), 2, 2, solver=solver) is False
    assert solver.last_decision is not None
    assert open_box(SecureBox(0, 3), 0, 3, solver=solver) is False
    assert solver.last_decision is None
    assert solver.last_rank is None
