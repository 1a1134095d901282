from __future__ import annotations

import os
from typing import Iterator, Tuple

import numpy as np
from PIL import Image

from .config import BLOCK_SIZE, EmbeddingPolicy
from .errors import InvalidInput


Block = Tuple[int, int, int]  # (channel, row_block_index, col_block_index)

LOSSLESS_EXTENSIONS = (".png", ".bmp", ".tif", ".tiff")


def load_carrier(path: str) -> np.ndarray:
    """Load an image as an RGB uint8 array of shape (height, width, 3)."""
    img = Image.open(path).convert("RGB")
    return np.array(img, dtype=np.uint8)


def save_carrier(path: str, carrier: np.ndarray) -> None:
    """Save a carrier losslessly. The format follows the file extension."""
    ext = os.path.splitext(path)[1].lower()
    if ext not in LOSSLESS_EXTENSIONS:
        raise ValueError(f"Refusing lossy or unknown format '{ext}'; use one of {', '.join(LOSSLESS_EXTENSIONS)}")
    arr = np.clip(carrier, 0, 255).astype(np.uint8)
    img = Image.fromarray(arr[:, :, 0] if arr.shape[2] == 1 else arr)
    img.save(path)


def carrier_from_buffer(buffer: bytes, width: int, height: int, channels: int = 3) -> np.ndarray:
    """View a flat interleaved sample buffer as a (height, width, channels) carrier."""
    expected = width * height * channels
    if width <= 0 or height <= 0 or channels <= 0:
        raise InvalidInput("Width, height and channels must be positive")
    if len(buffer) != expected:
        raise InvalidInput(
            f"Buffer holds {len(buffer)} samples, expected {width}x{height}x{channels} = {expected}",
            details={"size": len(buffer), "expected": expected},
        )
    return np.frombuffer(bytes(buffer), dtype=np.uint8).reshape(height, width, channels).copy()


def validate_carrier(carrier: np.ndarray, policy: EmbeddingPolicy) -> None:
    if carrier is None:
        raise InvalidInput("Carrier is missing")
    if not isinstance(carrier, np.ndarray) or carrier.dtype != np.uint8:
        raise InvalidInput("Carrier must be a uint8 numpy array")
    if carrier.ndim != 3 or carrier.size == 0:
        raise InvalidInput(f"Carrier must be a non-empty (height, width, channels) array, got shape {carrier.shape}")
    if carrier.shape[2] != policy.channels:
        raise InvalidInput(
            f"Carrier has {carrier.shape[2]} channels, policy expects {policy.channels}",
            details={"channels": carrier.shape[2]},
        )


def full_blocks(height: int, width: int, block_size: int = BLOCK_SIZE) -> Tuple[int, int]:
    """Number of complete blocks per plane along each axis; partial edges are excluded."""
    return height // block_size, width // block_size


def iter_blocks(shape: Tuple[int, int, int], block_size: int = BLOCK_SIZE) -> Iterator[Block]:
    """Yield block coordinates in embedding order: channel, then row, then column."""
    height, width, channels = shape
    rows, cols = full_blocks(height, width, block_size)
    for ch in range(channels):
        for bi in range(rows):
            for bj in range(cols):
                yield ch, bi, bj


def read_block(carrier: np.ndarray, pos: Block, block_size: int = BLOCK_SIZE) -> np.ndarray:
    ch, bi, bj = pos
    i = bi * block_size
    j = bj * block_size
    return carrier[i:i+block_size, j:j+block_size, ch].astype(np.float64)


def write_block(carrier: np.ndarray, pos: Block, blk: np.ndarray, block_size: int = BLOCK_SIZE) -> None:
    ch, bi, bj = pos
    i = bi * block_size
    j = bj * block_size
    carrier[i:i+block_size, j:j+block_size, ch] = np.clip(np.rint(blk), 0, 255).astype(np.uint8)
