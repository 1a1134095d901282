from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Tuple

BLOCK_SIZE = 8
SAMPLE_MAX = 255
# Rounding samples to integers can shift a selected coefficient by up to ~3.3,
# so half a step must stay above that.
MIN_STEP = 7.0

# Mid-frequency (row, col) positions that carry one bit each, in embedding
# order. Embed and extract must use the same version.
COEFFICIENT_TABLES: Dict[int, Tuple[Tuple[int, int], ...]] = {
    1: ((1, 2), (2, 1), (2, 2), (3, 1)),
}

# Frame layout: MAGIC | check tag | big-endian length | ciphered payload
MAGIC = b"STEG"
TAG_BYTES = 4


@dataclass(frozen=True)
class EmbeddingPolicy:
    """Embedding parameters shared by the capacity model, embed and extract.

    ratio:         fraction of pixels allowed to carry payload (0 < ratio <= 1)
    bit_density:   payload bits per carrying pixel (0 < bit_density <= 1)
    channels:      samples per pixel
    min_samples:   carriers smaller than this have zero capacity
    header_bytes:  width of the big-endian length prefix
    step:          quantization step for the selected coefficients
    table_version: key into COEFFICIENT_TABLES
    """

    ratio: float = 0.3
    bit_density: float = 0.3
    channels: int = 3
    min_samples: int = 100
    header_bytes: int = 4
    step: float = 8.0
    table_version: int = 1

    def __post_init__(self) -> None:
        if not 0 < self.ratio <= 1:
            raise ValueError(f"ratio must be in (0, 1], got {self.ratio}")
        if not 0 < self.bit_density <= 1:
            raise ValueError(f"bit_density must be in (0, 1], got {self.bit_density}")
        if self.channels < 1:
            raise ValueError(f"channels must be >= 1, got {self.channels}")
        if self.min_samples < 0:
            raise ValueError(f"min_samples must be >= 0, got {self.min_samples}")
        if not 1 <= self.header_bytes <= 8:
            raise ValueError(f"header_bytes must be in 1..8, got {self.header_bytes}")
        if self.step < MIN_STEP:
            raise ValueError(f"step must be >= {MIN_STEP}, got {self.step}")
        if self.table_version not in COEFFICIENT_TABLES:
            raise ValueError(f"Unknown coefficient table version: {self.table_version}")
        if 2 * self.margin >= SAMPLE_MAX:
            raise ValueError(f"step {self.step} leaves no usable sample range")

    @property
    def positions(self) -> Tuple[Tuple[int, int], ...]:
        return COEFFICIENT_TABLES[self.table_version]

    @property
    def margin(self) -> int:
        """Sample headroom kept at both ends of the range in carrying blocks.

        Each selected coefficient moves by at most one step and every AC basis
        value is bounded by 1/4, so no sample can leave 0..255 after the
        inverse transform.
        """
        return int(math.ceil(len(self.positions) * self.step / 4))

    @property
    def frame_bytes(self) -> int:
        """Bytes of framing ahead of the ciphered payload."""
        return len(MAGIC) + TAG_BYTES + self.header_bytes

    @property
    def frame_bits(self) -> int:
        return self.frame_bytes * 8


@dataclass(frozen=True)
class Argon2Params:
    time_cost: int = 3
    memory_cost: int = 65536  # KiB
    parallelism: int = 4
    hash_len: int = 32
    salt_len: int = 16


DEFAULT_POLICY = EmbeddingPolicy()
DEFAULT_ARGON2 = Argon2Params()
