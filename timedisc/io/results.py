# -*- coding: utf-8 -*-
"""
Results IO helpers.

Write:
  * metrics.json  (run-level numbers: steps, iterations, final norms)
  * fields.npz    (time axis and state history)

This keeps on-disk layout stable for post-processing and plots.
"""
from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Dict

import numpy as np

def write_metrics(run_dir: Path, metrics: Dict[str, Any]) -> Path:
    run_dir.mkdir(parents=True, exist_ok=True)
    out = run_dir / "metrics.json"
    with open(out, "w") as f:
        json.dump(metrics, f, indent=2, sort_keys=True)
    return out

def save_fields_npz(run_dir: Path, **arrays) -> Path:
    """
    Save arrays for viz (e.g., t, x_history, z).
    """
    run_dir.mkdir(parents=True, exist_ok=True)
    out = run_dir / "fields.npz"
    np.savez_compressed(out, **arrays)
    return out

def load_fields_npz(run_dir: Path) -> Dict[str, np.ndarray]:
    with np.load(run_dir / "fields.npz") as data:
        return {k: data[k] for k in data.files}
