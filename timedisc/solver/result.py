# timedisc/solver/result.py
from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass
class SolveResult:
    x: np.ndarray           # final state
    residual: np.ndarray    # final residual (Newton) or increment (Picard)
    iters: int
    converged: bool


def inf_norm(x: np.ndarray) -> float:
    return float(np.linalg.norm(x, ord=np.inf)) if np.size(x) else 0.0
