from __future__ import annotations

import copy
from pathlib import Path

import yaml

DEFAULT_CONFIG = {
    "box": {"y": 10, "x": 10},
    "shuffle": {"seed": None, "max_toggles": 1000},
    "solver": {"packed": False},
    "sweep": {
        "sizes": [[2, 2], [3, 3], [4, 4], [10, 10]],
        "n_samples": 100,
        "seed": 0,
        "output_dir": "results/runs",
    },
}


def _merge(base: dict, override: dict) -> dict:
    out = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def _non_negative_int(cfg: dict, section: str, key: str) -> int:
    value = cfg[section][key]
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(
            f"config: {section}.{key} must be a non-negative integer, got {value!r}"
        )
    return value


def validate_config(cfg: dict) -> dict:
    _non_negative_int(cfg, "box", "y")
    _non_negative_int(cfg, "box", "x")
    _non_negative_int(cfg, "shuffle", "max_toggles")
    _non_negative_int(cfg, "sweep", "n_samples")

    seed = cfg["shuffle"]["seed"]
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        raise ValueError(f"config: shuffle.seed must be an integer or null, got {seed!r}")

    sizes = cfg["sweep"]["sizes"]
    for size in sizes:
        if (
            not isinstance(size, (list, tuple))
            or len(size) != 2
            or any(isinstance(v, bool) or not isinstance(v, int) or v < 1 for v in size)
        ):
            raise ValueError(f"config: sweep.sizes entries must be [y, x] >= 1, got {size!r}")
    return cfg


def load_config(path: str | Path | None = None) -> dict:
    """Read the `experiment` section of a YAML config, merged over the defaults."""
    if path is None:
        return validate_config(copy.deepcopy(DEFAULT_CONFIG))

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    cfg = raw.get("experiment", {}) or {}
    if not isinstance(cfg, dict):
        raise ValueError(f"config: 'experiment' must be a mapping in {path}")
    return validate_config(_merge(DEFAULT_CONFIG, cfg))
