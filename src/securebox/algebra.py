from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np

from .box import BoxState


def _check_size(y: int, x: int) -> None:
    if y < 0 or x < 0:
        raise ValueError(f"negative box size ({y}, {x})")


def build_toggle_matrix(y: int, x: int) -> np.ndarray:
    """Return the NxN effect matrix A over GF(2) for the secure box.
    A[p, q] = 1 iff toggling cell q flips cell p, i.e. q shares p's row or column.
    """
    _check_size(y, x)
    N = y * x
    A = np.zeros((N, N), dtype=np.uint8)

    for i in range(y):
        for j in range(x):
            p = i * x + j
            # set-membership, so the overlap at q == p stays 1
            A[p, i * x : (i + 1) * x] = 1
            A[p, j::x] = 1
    return A


def toggle_effect(y: int, x: int, row: int, col: int) -> np.ndarray:
    """Return the (y, x) mask of cells flipped by a single toggle at (row, col)."""
    mask = np.zeros((y, x), dtype=bool)
    mask[row, :] = True
    mask[:, col] = True
    return mask


def build_system(state, y: int, x: int) -> np.ndarray:
    """Return the augmented N x (N+1) system [A | b] for a box snapshot.

    `state` may be a BoxState or anything array-like of shape (y, x).
    """
    _check_size(y, x)
    grid = state.state if isinstance(state, BoxState) else np.asarray(state)
    if grid.shape != (y, x):
        raise ValueError(f"snapshot shape {grid.shape} does not match ({y}, {x})")

    N = y * x
    M = np.zeros((N, N + 1), dtype=np.uint8)
    M[:, :N] = build_toggle_matrix(y, x)
    M[:, N] = grid.reshape(-1).astype(np.uint8)
    return M


def gf2_eliminate(M: np.ndarray) -> Tuple[np.ndarray, np.ndarray, int]:
    """Gauss-Jordan elimination of an augmented matrix [A | b] over GF(2).

    Returns the reduced copy of M, pivot_row_of (row index pivoting each
    column of A, or -1), and the rank.
    """
    M = (np.asarray(M) % 2).astype(np.uint8)
    n_rows, width = M.shape
    n_cols = width - 1
    pivot_row_of = np.full(n_cols, -1, dtype=np.int64)

    row = 0
    for col in range(n_cols):
        if row >= n_rows:
            break
        # any 1 is as good a pivot as another
        hits = np.flatnonzero(M[row:, col])
        if hits.size == 0:
            continue
        pivot = row + int(hits[0])
        if pivot != row:
            M[[row, pivot]] = M[[pivot, row]]
        pivot_row_of[col] = row
        others = M[:, col].astype(bool)
        others[row] = False
        M[others, col:] ^= M[row, col:]
        row += 1
    return M, pivot_row_of, row


def gf2_eliminate_packed(M: np.ndarray) -> Tuple[np.ndarray, np.ndarray, int]:
    """Same as gf2_eliminate, with rows packed eight columns per byte.

    Pivots, rank and the augmented column match the dense version; entries
    of free columns left of the current pivot may differ (they are never read).
    """
    M = (np.asarray(M) % 2).astype(np.uint8)
    n_rows, width = M.shape
    n_cols = width - 1
    pivot_row_of = np.full(n_cols, -1, dtype=np.int64)
    P = np.packbits(M, axis=1)

    row = 0
    for col in range(n_cols):
        if row >= n_rows:
            break
        byte, shift = col >> 3, 7 - (col & 7)
        hits = np.flatnonzero((P[row:, byte] >> shift) & 1)
        if hits.size == 0:
            continue
        pivot = row + int(hits[0])
        if pivot != row:
            P[[row, pivot]] = P[[pivot, row]]
        pivot_row_of[col] = row
        others = ((P[:, byte] >> shift) & 1).astype(bool)
        others[row] = False
        P[others, byte:] ^= P[row, byte:]
        row += 1
    return np.unpackbits(P, axis=1, count=width), pivot_row_of, row


def is_consistent(M: np.ndarray, rank: int) -> bool:
    """A reduced system is inconsistent iff a row without pivot reads 0 = 1."""
    return not bool(np.any(M[rank:, -1]))


def extract_decision(M: np.ndarray, pivot_row_of: np.ndarray) -> np.ndarray:
    """Read the decision vector off a reduced system, free variables set to 0."""
    decision = np.zeros(pivot_row_of.shape[0], dtype=np.uint8)
    pivoted = pivot_row_of >= 0
    decision[pivoted] = M[pivot_row_of[pivoted], -1]
    return decision


def gf2_solve(
    M: np.ndarray, packed: bool = False
) -> Tuple[Optional[np.ndarray], int, bool]:
    """Solve an augmented system [A | b] over GF(2).

    Returns:
        decision: one solution (free variables = 0), or None if inconsistent
        rank: rank of A
        solvable: bool
    """
    eliminate = gf2_eliminate_packed if packed else gf2_eliminate
    R, pivot_row_of, rank = eliminate(M)
    if not is_consistent(R, rank):
        return None, rank, False
    return extract_decision(R, pivot_row_of), rank, True


def gf2_rank(A: np.ndarray) -> int:
    """Rank of A over GF(2)."""
    A = np.asarray(A)
    M = np.zeros((A.shape[0], A.shape[1] + 1), dtype=np.uint8)
    M[:, :-1] = A % 2
    _, _, rank = gf2_eliminate(M)
    return rank


def decision_to_toggles(decision: np.ndarray, x: int) -> List[Tuple[int, int]]:
    """Map each set decision index q back to its cell (q // x, q % x)."""
    return [divmod(int(q), x) for q in np.flatnonzero(decision)]


def predict_state(state: BoxState, decision: np.ndarray) -> BoxState:
    """State the linear model predicts after applying `decision` to `state`."""
    A = build_toggle_matrix(state.y, state.x).astype(np.int64)
    b = state.to_flat().astype(np.int64)
    flat = (b + A @ np.asarray(decision, dtype=np.int64)) % 2
    return BoxState.from_flat(state.y, state.x, flat.astype(bool))
