from __future__ import annotations

import numpy as np

from .config import BLOCK_SIZE
from .errors import InvalidBlockSize


def _basis(n: int = BLOCK_SIZE) -> np.ndarray:
    """Row u holds 0.5 * c(u) * cos((2x + 1) * u * pi / 16) for x in 0..7."""
    u = np.arange(n, dtype=np.float64)[:, None]
    x = np.arange(n, dtype=np.float64)[None, :]
    basis = 0.5 * np.cos((2 * x + 1) * u * np.pi / (2 * n))
    basis[0, :] *= 1.0 / np.sqrt(2.0)
    return basis


_C = _basis()
_C.setflags(write=False)


def _check_block(block: np.ndarray) -> np.ndarray:
    arr = np.asarray(block, dtype=np.float64)
    if arr.shape != (BLOCK_SIZE, BLOCK_SIZE):
        raise InvalidBlockSize(
            f"Expected an {BLOCK_SIZE}x{BLOCK_SIZE} block, got shape {arr.shape}",
            details={"shape": tuple(arr.shape)},
        )
    return arr


def forward(block: np.ndarray) -> np.ndarray:
    """2-D DCT-II of an 8x8 block.

    F(u, v) = 0.25 c(u) c(v) sum_x sum_y f(x, y) cos((2x+1)u pi/16) cos((2y+1)v pi/16)
    with c(0) = 1/sqrt(2), else 1. Evaluated as C @ f @ C.T.
    """
    f = _check_block(block)
    return _C @ f @ _C.T


def inverse(coeffs: np.ndarray) -> np.ndarray:
    """2-D DCT-III, the inverse of `forward`."""
    F = _check_block(coeffs)
    return _C.T @ F @ _C
