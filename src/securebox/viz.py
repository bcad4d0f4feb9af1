import matplotlib.pyplot as plt
import numpy as np
from matplotlib.patches import Rectangle


def _grid(state):
    return np.asarray(getattr(state, "state", state), dtype=bool)


def _mark_toggles(ax, toggles, color):
    for r, c in toggles:
        ax.add_patch(
            Rectangle(
                (c - 0.5, r - 0.5),
                1,
                1,
                edgecolor=color,
                facecolor="none",
                linewidth=2,
            )
        )


def show_box(
    state,
    ax=None,
    toggles=None,
    title=None,
    toggle_color="red",
    cmap="Greys",
):
    """
    Draw a box state: locked cells dark, open cells light.

    Parameters
    ----------
    state : BoxState or np.ndarray
        Box snapshot of shape (y, x).
    toggles : iterable[(int, int)], optional
        Cells to outline, e.g. the solver's plan.
    """
    grid = _grid(state)
    y, x = grid.shape
    if ax is None:
        _, ax = plt.subplots(figsize=(3.5, 3.5))
    ax.imshow(grid.astype(float), cmap=cmap, vmin=0.0, vmax=1.0)
    if toggles:
        _mark_toggles(ax, toggles, toggle_color)
    ax.set_xticks(range(x))
    ax.set_yticks(range(y))
    ax.set_xlabel("col")
    ax.set_ylabel("row")
    if title is not None:
        ax.set_title(title)
    return ax


def show_solution(
    before,
    toggles,
    after,
    titles=("Shuffled", "Opened"),
    toggle_color="red",
):
    """
    Side-by-side rendering of a solve: the initial box with the planned toggles
    outlined, and the box after they were applied.
    """
    _, axes = plt.subplots(1, 2, figsize=(7.2, 3.5), constrained_layout=True)
    show_box(before, ax=axes[0], toggles=toggles, title=titles[0], toggle_color=toggle_color)
    show_box(after, ax=axes[1], title=titles[1])
    return list(axes)
