from __future__ import annotations

import numpy as np
import pytest
from numpy.random import PCG64, Generator

from securebox.algebra import toggle_effect
from securebox.box import SecureBox

SEED = 25


@pytest.fixture()
def fx_rng() -> Generator:
    return Generator(PCG64(SEED))


class FixedBox:
    """Box with an arbitrary starting state, recording every toggle issued."""

    def __init__(self, grid) -> None:
        self.grid = np.array(grid, dtype=bool)
        self.toggles: list[tuple[int, int]] = []

    def toggle(self, row: int, col: int) -> None:
        y, x = self.grid.shape
        self.grid ^= toggle_effect(y, x, row, col)
        self.toggles.append((row, col))

    def is_locked(self) -> bool:
        return bool(self.grid.any())

    def get_state(self) -> np.ndarray:
        return self.grid.copy()


@pytest.fixture()
def fixed_box():
    return FixedBox


@pytest.fixture()
def make_box(fx_rng: Generator):
    def _make(y: int, x: int, **kwargs) -> SecureBox:
        return SecureBox(y, x, rng=fx_rng, **kwargs)

    return _make
