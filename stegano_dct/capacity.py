from __future__ import annotations

import math
from typing import Tuple

import numpy as np

from .config import DEFAULT_POLICY, EmbeddingPolicy
from .image_utils import full_blocks


def max_capacity(sample_count: int, policy: EmbeddingPolicy = DEFAULT_POLICY) -> int:
    """Payload bits a carrier of `sample_count` samples may hold.

    `ratio` of the pixels may carry payload and each carrying pixel is worth
    `bit_density` bits: 30 000 RGB samples give 10 000 pixels, 3 000 carrying
    pixels and 900 bits at the defaults. Carriers below `policy.min_samples`
    are unusable and yield 0.
    """
    if sample_count < policy.min_samples:
        return 0
    pixels = sample_count // policy.channels
    # epsilon keeps 10000 * 0.3 * 0.3 from flooring to 899
    return int(math.floor(pixels * policy.ratio * policy.bit_density + 1e-9))


def block_slots(shape: Tuple[int, ...], policy: EmbeddingPolicy = DEFAULT_POLICY) -> int:
    """Coefficient slots physically available in the complete 8x8 blocks."""
    height, width = shape[0], shape[1]
    rows, cols = full_blocks(height, width)
    return rows * cols * policy.channels * len(policy.positions)


def shape_capacity(shape: Tuple[int, ...], policy: EmbeddingPolicy = DEFAULT_POLICY) -> int:
    """Usable bits in a carrier of `shape`: the ratio cap, bounded by the available block slots."""
    return min(max_capacity(int(np.prod(shape)), policy), block_slots(shape, policy))


def carrier_capacity(carrier: np.ndarray, policy: EmbeddingPolicy = DEFAULT_POLICY) -> int:
    return shape_capacity(carrier.shape, policy)


def payload_capacity(carrier: np.ndarray, policy: EmbeddingPolicy = DEFAULT_POLICY) -> int:
    """Largest payload in bytes that fits alongside the frame header."""
    return max(0, carrier_capacity(carrier, policy) // 8 - policy.frame_bytes)


def cover_side_for(payload_bytes: int, policy: EmbeddingPolicy = DEFAULT_POLICY) -> int:
    """Smallest square side, a multiple of 8, whose carrier holds `payload_bytes`."""
    if payload_bytes < 1:
        raise ValueError(f"payload_bytes must be >= 1, got {payload_bytes}")
    required = (policy.frame_bytes + payload_bytes) * 8
    side = 8
    while shape_capacity((side, side, policy.channels), policy) < required:
        side += 8
    return side
