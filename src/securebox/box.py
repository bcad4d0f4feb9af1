from __future__ import annotations

import numpy as np


class BoxState:
    def __init__(self, y: int, x: int, state: np.ndarray | None = None):
        self.y = y
        self.x = x
        if state is None:
            self.state = np.zeros((y, x), dtype=bool)
        else:
            state = np.asarray(state)
            if state.shape != (y, x):
                raise ValueError(
                    f"BoxState: expected shape {(y, x)}, got {state.shape}"
                )
            self.state = state.astype(bool, copy=True)
        self.state.setflags(write=False)

    def to_flat(self) -> np.ndarray:
        return self.state.reshape(-1)

    @staticmethod
    def from_flat(y: int, x: int, flat: np.ndarray) -> "BoxState":
        return BoxState(y, x, np.asarray(flat).reshape(y, x))

    def count_locked(self) -> int:
        return int(self.state.sum())

    def __eq__(self, other) -> bool:
        if not isinstance(other, BoxState):
            return NotImplemented
        return self.state.shape == other.state.shape and bool(
            np.array_equal(self.state, other.state)
        )

    def __repr__(self):
        return f"BoxState(y={self.y}, x={self.x}, locked={self.count_locked()})"

    def __str__(self) -> str:
        return "\n".join(
            " ".join("1" if cell else "0" for cell in row) for row in self.state
        )


class SecureBox:
    """
    A Y x X grid of locks. Toggling a cell flips every cell in its row and
    its column, the target itself exactly once.
    The initial state is shuffled with random toggles, so it is always
    reachable from the open (all False) state.
    """

    def __init__(
        self,
        y: int,
        x: int,
        rng: np.random.Generator | None = None,
        max_shuffle: int = 1000,
        shuffle: bool = True,
    ):
        if y < 0 or x < 0:
            raise ValueError(f"SecureBox: negative size ({y}, {x})")
        self.y = int(y)
        self.x = int(x)
        self.rng = rng or np.random.default_rng()
        self._box = np.zeros((self.y, self.x), dtype=bool)
        if shuffle:
            self.shuffle(max_shuffle)

    def toggle(self, row: int, col: int) -> None:
        if not (0 <= row < self.y and 0 <= col < self.x):
            raise IndexError(
                f"SecureBox: toggle ({row}, {col}) outside {self.y}x{self.x} box"
            )
        self._box[row, :] ^= True
        self._box[:, col] ^= True
        # the target was flipped twice above
        self._box[row, col] ^= True

    def is_locked(self) -> bool:
        return bool(self._box.any())

    def get_state(self) -> np.ndarray:
        return self._box.copy()

    def snapshot(self) -> BoxState:
        return BoxState(self.y, self.x, self._box)

    def shuffle(self, max_shuffle: int = 1000) -> int:
        """Apply a random number (< max_shuffle) of random toggles; return how many."""
        if self.y == 0 or self.x == 0 or max_shuffle <= 0:
            return 0
        t = int(self.rng.integers(max_shuffle))
        for _ in range(t):
            self.toggle(
                int(self.rng.integers(self.y)), int(self.rng.integers(self.x))
            )
        return t

    def __repr__(self):
        return f"SecureBox(y={self.y}, x={self.x}, locked={self.is_locked()})"

    def __str__(self) -> str:
        return str(self.snapshot())
