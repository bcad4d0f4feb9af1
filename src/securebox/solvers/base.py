from __future__ import annotations
from typing import Protocol

import numpy as np

from ..box import BoxState


class UnsolvableBoxError(Exception):
    """Raised by a solver when no set of toggles can open the given state."""

    pass


class Box(Protocol):
    def toggle(self, row: int, col: int) -> None: ...
    def is_locked(self) -> bool: ...
    def get_state(self) -> np.ndarray: ...


class Solver(Protocol):
    def reset(self, y: int, x: int, params: dict | None = None): ...
    def plan(self, state: BoxState) -> list[tuple[int, int]]: ...
