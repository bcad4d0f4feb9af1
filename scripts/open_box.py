import argparse
import sys
from pathlib import Path

import numpy as np

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from securebox.algebra import decision_to_toggles  # noqa: E402
from securebox.box import SecureBox  # noqa: E402
from securebox.config import load_config  # noqa: E402
from securebox.solvers import GaussJordanSolver, open_box  # noqa: E402


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(
        description="Shuffle a secure box and toggle it open."
    )
    ap.add_argument(
        "--config",
        default=str(ROOT / "configs" / "open_box.yaml"),
    )
    ap.add_argument("--y", type=int, default=None, help="Number of rows")
    ap.add_argument("--x", type=int, default=None, help="Number of columns")
    ap.add_argument("--seed", type=int, default=None, help="Shuffle seed")
    ap.add_argument(
        "--packed",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Use packed-bit elimination (overrides solver.packed)",
    )
    ap.add_argument(
        "--plot", default=None, help="Save a before/after figure to this path"
    )
    args = ap.parse_args(argv)

    try:
        cfg = load_config(args.config)
    except (OSError, ValueError) as e:
        print(f"[error] {e}")
        return 2

    y = args.y if args.y is not None else cfg["box"]["y"]
    x = args.x if args.x is not None else cfg["box"]["x"]
    seed = args.seed if args.seed is not None else cfg["shuffle"]["seed"]
    packed = (
        args.packed if args.packed is not None else bool(cfg["solver"]["packed"])
    )
    if y < 0 or x < 0:
        print(f"[error] box size must be non-negative, got {y}x{x}")
        return 2

    print(f"[config] {y}x{x} box, seed={seed}, packed={packed}")

    rng = np.random.default_rng(seed)
    box = SecureBox(y, x, rng=rng, max_shuffle=cfg["shuffle"]["max_toggles"])
    before = box.snapshot()
    print(box)

    solver = GaussJordanSolver(packed=packed)
    locked = open_box(box, y, x, solver=solver)

    if solver.last_decision is None and locked:
        print("No solution for SecureBox")
    else:
        print("Solved SecureBox:")
    print(box)

    if args.plot:
        from securebox.viz import show_solution

        toggles = (
            decision_to_toggles(solver.last_decision, x)
            if solver.last_decision is not None
            else []
        )
        axes = show_solution(before, toggles, box.snapshot())
        axes[0].figure.savefig(args.plot)
        print(f"[plot] {args.plot}")

    if locked:
        print("BOX: LOCKED!")
    else:
        print("BOX: OPENED!")
    return int(locked)


if __name__ == "__main__":
    sys.exit(main())
