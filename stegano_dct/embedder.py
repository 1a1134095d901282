from __future__ import annotations

import hmac
import logging
from typing import List, Tuple

import numpy as np

from .capacity import carrier_capacity
from .config import DEFAULT_POLICY, MAGIC, SAMPLE_MAX, TAG_BYTES, EmbeddingPolicy
from .crypto import BytesLike, add_length_header, check_tag, read_length_header, sha3_512, xor_apply, zeroize
from .errors import HeaderCorrupt, InvalidInput, PayloadTooLarge
from .image_utils import iter_blocks, read_block, validate_carrier, write_block
from .transform import forward, inverse

logger = logging.getLogger(__name__)


def bytes_to_bits(data: BytesLike) -> List[int]:
    bits: List[int] = []
    for b in data:
        for i in range(8)[::-1]:
            bits.append((b >> i) & 1)
    return bits


def bits_to_bytes(bits: List[int]) -> bytearray:
    if len(bits) % 8 != 0:
        raise ValueError("Bit length not divisible by 8")
    out = bytearray()
    for i in range(0, len(bits), 8):
        val = 0
        for j in range(8):
            val = (val << 1) | (bits[i + j] & 1)
        out.append(val)
    return out


def _embed_bits_in_coeffs(coeffs: np.ndarray, positions: Tuple[Tuple[int, int], ...], bits: List[int], start: int, step: float) -> int:
    """Write bits[start:] into the quantized LSBs of `coeffs` at `positions`.

    Returns the index of the next unwritten bit.
    """
    idx = start
    for (i, j) in positions:
        if idx >= len(bits):
            break
        ratio = coeffs[i, j] / step
        k = int(round(ratio))
        if (k & 1) != bits[idx]:
            k = k + 1 if ratio >= k else k - 1
        coeffs[i, j] = k * step
        idx += 1
    return idx


def _decode_bits_from_coeffs(coeffs: np.ndarray, positions: Tuple[Tuple[int, int], ...], count: int, step: float) -> List[int]:
    bits: List[int] = []
    for (i, j) in positions:
        if len(bits) >= count:
            break
        bits.append(int(round(coeffs[i, j] / step)) & 1)
    return bits


def embed_bits(carrier: np.ndarray, bits: List[int], policy: EmbeddingPolicy = DEFAULT_POLICY) -> np.ndarray:
    """Embed bits into the full 8x8 blocks of a copy of `carrier`.

    Blocks are visited channel by channel, row-major. A block that carries
    bits is first clipped to [margin, 255 - margin] so the inverse transform
    never has to clamp. Blocks after the last bit are left untouched.
    """
    out = carrier.copy()
    if not bits:
        return out

    lo, hi = policy.margin, SAMPLE_MAX - policy.margin
    idx = 0
    for pos in iter_blocks(out.shape):
        if idx >= len(bits):
            break
        blk = np.clip(read_block(out, pos), lo, hi)
        coeffs = forward(blk)
        idx = _embed_bits_in_coeffs(coeffs, policy.positions, bits, idx, policy.step)
        write_block(out, pos, inverse(coeffs))

    if idx < len(bits):
        raise PayloadTooLarge(
            f"Carrier ran out of blocks after {idx} of {len(bits)} bits",
            details={"written": idx, "required": len(bits)},
        )
    return out


def extract_bits(carrier: np.ndarray, bit_count: int, policy: EmbeddingPolicy = DEFAULT_POLICY, skip: int = 0) -> List[int]:
    """Read `bit_count` bits, starting after the first `skip` slots, in embedding order."""
    if bit_count <= 0:
        return []

    per_block = len(policy.positions)
    first_block, offset = divmod(skip, per_block)
    bits: List[int] = []
    for n, pos in enumerate(iter_blocks(carrier.shape)):
        if len(bits) >= bit_count:
            break
        if n < first_block:
            continue
        coeffs = forward(read_block(carrier, pos))
        positions = policy.positions[offset:] if n == first_block else policy.positions
        bits.extend(_decode_bits_from_coeffs(coeffs, positions, bit_count - len(bits), policy.step))

    if len(bits) < bit_count:
        raise HeaderCorrupt(
            f"Carrier holds only {len(bits)} of {bit_count} requested bits",
            details={"read": len(bits), "required": bit_count},
        )
    return bits


def validate_payload(payload: BytesLike) -> None:
    if not isinstance(payload, (bytes, bytearray, memoryview)):
        raise InvalidInput(f"Payload must be bytes-like, got {type(payload).__name__}")
    if not payload:
        raise InvalidInput("Payload is empty")


def embed_payload(
    carrier: np.ndarray,
    payload: BytesLike,
    key: BytesLike,
    policy: EmbeddingPolicy = DEFAULT_POLICY,
    digest=sha3_512,
) -> np.ndarray:
    """Cipher `payload`, frame it and hide it in a copy of `carrier`.

    The frame is MAGIC, a check tag over key and plaintext, the big-endian
    byte count, then the ciphered payload. Raises InvalidInput or
    PayloadTooLarge before any transform work.
    """
    validate_carrier(carrier, policy)
    validate_payload(payload)

    capacity = carrier_capacity(carrier, policy)
    required = (policy.frame_bytes + len(payload)) * 8
    logger.debug("embed: carrier=%s payload=%d bytes required=%d bits capacity=%d bits",
                 carrier.shape, len(payload), required, capacity)
    if required > capacity:
        raise PayloadTooLarge(
            f"Payload needs {required} bits but the carrier holds {capacity}",
            details={"required_bits": required, "capacity_bits": capacity},
        )

    tag = check_tag(key, payload, digest)
    ciphered = xor_apply(bytearray(payload), key)
    framed = bytearray(MAGIC) + tag + add_length_header(ciphered, policy.header_bytes)
    try:
        bits = bytes_to_bits(framed)
    finally:
        zeroize(ciphered)
        zeroize(framed)
    try:
        return embed_bits(carrier, bits, policy)
    finally:
        bits[:] = [0] * len(bits)


def extract_payload(
    carrier: np.ndarray,
    key: BytesLike,
    policy: EmbeddingPolicy = DEFAULT_POLICY,
    digest=sha3_512,
) -> bytes:
    """Recover and decipher a payload hidden by `embed_payload`.

    Raises HeaderCorrupt when the magic is missing, when the declared length
    is zero or larger than the carrier could ever hold (without reading the
    body), or when the check tag does not match the deciphered payload.
    """
    validate_carrier(carrier, policy)

    capacity = carrier_capacity(carrier, policy)
    if capacity < policy.frame_bits:
        raise HeaderCorrupt(
            f"Carrier capacity of {capacity} bits cannot hold a frame header",
            details={"capacity_bits": capacity},
        )

    header = bits_to_bytes(extract_bits(carrier, policy.frame_bits, policy))
    if bytes(header[:len(MAGIC)]) != MAGIC:
        raise HeaderCorrupt("No embedded payload found (magic mismatch)")
    tag_end = len(MAGIC) + TAG_BYTES
    tag = bytes(header[len(MAGIC):tag_end])
    length = read_length_header(header[tag_end:], policy.header_bytes)
    logger.debug("extract: carrier=%s declared length=%d bytes capacity=%d bits",
                 carrier.shape, length, capacity)
    if length == 0 or (policy.frame_bytes + length) * 8 > capacity:
        raise HeaderCorrupt(
            f"Declared payload length {length} is implausible for a capacity of {capacity} bits",
            details={"length": length, "capacity_bits": capacity},
        )

    bits = extract_bits(carrier, length * 8, policy, skip=policy.frame_bits)
    ciphered = bytearray()
    try:
        ciphered = bits_to_bytes(bits)
        plaintext = bytes(xor_apply(ciphered, key))
    finally:
        bits[:] = [0] * len(bits)
        zeroize(ciphered)
    if not hmac.compare_digest(tag, check_tag(key, plaintext, digest)):
        raise HeaderCorrupt("Check tag mismatch: wrong password or corrupted payload")
    return plaintext
