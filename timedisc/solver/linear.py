# -*- coding: utf-8 -*-
"""
Dense linear solve used by the Newton and Picard drivers.
Keep the API tiny so a sparse backend can be swapped in later.
"""
from __future__ import annotations

import numpy as np


def solve_linear(A: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Solve A x = b; raises numpy.linalg.LinAlgError if A is singular."""
    A = np.asarray(A, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if A.ndim != 2 or A.shape[0] != A.shape[1] or A.shape[0] != b.shape[0]:
        raise ValueError(f"Incompatible linear system: A {A.shape}, b {b.shape}")
    return np.linalg.solve(A, b)
