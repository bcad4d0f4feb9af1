import argparse
import csv
import multiprocessing as mp
import os
import sys
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path

import numpy as np

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from securebox.algebra import build_toggle_matrix, gf2_rank  # noqa: E402
from securebox.box import SecureBox  # noqa: E402
from securebox.config import load_config  # noqa: E402
from securebox.evaluation.metrics import (  # noqa: E402
    locked_cells,
    opened,
    solver_miss,
    toggles_used,
)
from securebox.solvers import GaussJordanSolver, open_box  # noqa: E402

# Limit threads per worker
os.environ["OMP_NUM_THREADS"] = "1"
os.environ["OPENBLAS_NUM_THREADS"] = "1"
os.environ["MKL_NUM_THREADS"] = "1"

FIELDNAMES = [
    "y",
    "x",
    "rank",
    "seed",
    "box_id",
    "shuffle_toggles",
    "initial_locked",
    "det_solvable",
    "opened",
    "toggles_used",
    "time_ms",
    "solver_miss",
]


def _task_seed(base_seed: int, *coords: int) -> int:
    """Generate deterministic seed for each task."""
    ss = np.random.SeedSequence([int(base_seed)] + [int(c) for c in coords])

    return int(
        ss.generate_state(1, dtype=np.uint64)[0] & np.uint64((1 << 63) - 1)
    )


def make_batches(sizes, n_samples, batch_size):
    """Split every box size into batches of sample ids."""
    for y, x in sizes:
        for lo in range(0, n_samples, batch_size):
            yield {
                "y": int(y),
                "x": int(x),
                "idx_lo": lo,
                "idx_hi": min(lo + batch_size, n_samples),
            }


def _run_batch(job):
    """Shuffle and open one batch of boxes of the same size."""
    y, x = job["y"], job["x"]
    base_seed = job["base_seed"]
    rank = gf2_rank(build_toggle_matrix(y, x))
    solver = GaussJordanSolver(packed=job["packed"])

    rows = []
    for box_id in range(job["idx_lo"], job["idx_hi"]):
        rng = np.random.default_rng(_task_seed(base_seed, y, x, box_id))
        box = SecureBox(y, x, rng=rng, shuffle=False)
        shuffled = box.shuffle(job["max_toggles"])
        initial = box.snapshot()

        start_time = time.perf_counter()
        locked = open_box(box, y, x, solver=solver)
        time_ms = (time.perf_counter() - start_time) * 1000

        is_solvable = solver.last_decision is not None
        plan = (
            np.flatnonzero(solver.last_decision) if is_solvable else []
        )
        rows.append(
            {
                "y": y,
                "x": x,
                "rank": rank,
                "seed": base_seed,
                "box_id": box_id,
                "shuffle_toggles": shuffled,
                "initial_locked": locked_cells(initial),
                "det_solvable": int(is_solvable),
                "opened": opened(locked),
                "toggles_used": toggles_used(plan),
                "time_ms": time_ms,
                "solver_miss": solver_miss(is_solvable, locked),
            }
        )
    return rows


def run_pool(jobs, writer, workers, total_jobs):
    """Run jobs in parallel and write results as they complete."""
    ctx = mp.get_context("spawn")
    done = 0
    total_rows = 0
    misses = 0
    start_time = time.time()

    with ProcessPoolExecutor(max_workers=workers, mp_context=ctx) as ex:
        futures = [ex.submit(_run_batch, j) for j in jobs]
        for fut in as_completed(futures):
            try:
                rows = fut.result()
            except Exception:
                import traceback

                print("\n[ERROR] Worker failed:")
                traceback.print_exc()
                raise
            writer.writerows(rows)
            done += 1
            total_rows += len(rows)
            misses += sum(r["solver_miss"] for r in rows)

            elapsed = time.time() - start_time
            pct = done / max(total_jobs, 1)
            print(
                f"\r[progress] {done}/{total_jobs} batches ({pct:>6.1%}) | "
                f"{total_rows:>7,} boxes | "
                f"elapsed: {int(elapsed // 60)}m {int(elapsed % 60)}s",
                end="",
                flush=True,
            )
    print()
    return total_rows, misses


def resolve_output(output_dir, out=None) -> str:
    """Return the CSV path, creating only the directory it is written to."""
    out_csv = Path(out) if out else Path(output_dir) / "sweep.csv"
    out_csv.parent.mkdir(parents=True, exist_ok=True)
    return str(out_csv)


def main(argv=None):
    n_cpus = os.cpu_count() or 1
    default_workers = max(n_cpus - 1, 1)

    ap = argparse.ArgumentParser()
    ap.add_argument(
        "--config",
        default=str(ROOT / "configs" / "sweep.yaml"),
    )
    ap.add_argument("--out", default=None, help="Output CSV path")
    ap.add_argument(
        "--workers", type=int, default=default_workers, help="Number of workers"
    )
    ap.add_argument(
        "--batch-size", type=int, default=50, help="Boxes per batch"
    )
    args = ap.parse_args(argv)

    cfg = load_config(args.config)
    sweep = cfg["sweep"]
    sizes = [tuple(s) for s in sweep["sizes"]]
    n_samples = int(sweep["n_samples"])
    base_seed = int(sweep["seed"])
    out_csv = resolve_output(sweep["output_dir"], args.out)

    jobs = []
    for j in make_batches(sizes, n_samples, args.batch_size):
        j.update(
            {
                "base_seed": base_seed,
                "max_toggles": int(cfg["shuffle"]["max_toggles"]),
                "packed": bool(cfg["solver"]["packed"]),
            }
        )
        jobs.append(j)

    print(
        f"\nStarting {len(jobs):,} batches ({len(sizes)} sizes x {n_samples:,} boxes) "
        f"with {args.workers} workers...\n"
    )

    start_time = time.time()
    with open(out_csv, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
        writer.writeheader()
        total_rows, misses = run_pool(
            jobs, writer, workers=args.workers, total_jobs=len(jobs)
        )

    elapsed = time.time() - start_time
    print(f"\nDone in {int(elapsed/60)}m {int(elapsed%60)}s")
    print(f"Boxes: {total_rows:,}, solver misses: {misses}")
    print(f"Output: {out_csv}\n")
    return int(misses > 0)


if __name__ == "__main__":
    mp.freeze_support()
    sys.exit(main())
