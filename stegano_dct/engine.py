"""Call-level interface: embed and extract with result values.

Both calls are synchronous and stateless. Key material is derived once per
call and zeroed before returning. Failures are reported in the result, with
no partial carrier or payload attached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .capacity import payload_capacity
from .config import DEFAULT_POLICY, EmbeddingPolicy
from .crypto import Argon2KeySource, BytesLike, KeySource, Password, zeroize
from .embedder import embed_payload, extract_payload, validate_payload
from .errors import AllocationFailure, ErrorKind, StegoError
from .image_utils import validate_carrier

logger = logging.getLogger(__name__)


@dataclass
class EmbedResult:
    carrier: Optional[np.ndarray]
    success: bool
    error_kind: Optional[ErrorKind] = None
    detail: str = ""
    byte_length: int = 0


@dataclass
class ExtractResult:
    payload: Optional[bytes]
    success: bool
    error_kind: Optional[ErrorKind] = None
    detail: str = ""


def embeddable_bytes(carrier: np.ndarray, policy: EmbeddingPolicy = DEFAULT_POLICY) -> int:
    """Largest payload in bytes `embed` accepts for this carrier."""
    return payload_capacity(carrier, policy)


def embed(
    carrier: np.ndarray,
    payload: BytesLike,
    password: Password,
    policy: EmbeddingPolicy = DEFAULT_POLICY,
    key_source: Optional[KeySource] = None,
) -> EmbedResult:
    """Hide `payload` in a copy of `carrier`, keyed by `password`.

    Inputs are validated before the key is derived.
    """
    key_source = key_source or Argon2KeySource()
    key = bytearray()
    try:
        try:
            validate_carrier(carrier, policy)
            validate_payload(payload)
            key = key_source(password)
            stego = embed_payload(carrier, payload, key, policy)
        except MemoryError as e:
            raise AllocationFailure("Out of memory while embedding") from e
    except StegoError as e:
        logger.warning("embed failed: %s", e)
        return EmbedResult(carrier=None, success=False, error_kind=e.kind, detail=e.message)
    finally:
        zeroize(key)
    return EmbedResult(carrier=stego, success=True, byte_length=len(payload))


def extract(
    carrier: np.ndarray,
    password: Password,
    policy: EmbeddingPolicy = DEFAULT_POLICY,
    key_source: Optional[KeySource] = None,
) -> ExtractResult:
    """Recover the payload hidden in `carrier` with `password`."""
    key_source = key_source or Argon2KeySource()
    key = bytearray()
    try:
        try:
            validate_carrier(carrier, policy)
            key = key_source(password)
            payload = extract_payload(carrier, key, policy)
        except MemoryError as e:
            raise AllocationFailure("Out of memory while extracting") from e
    except StegoError as e:
        logger.warning("extract failed: %s", e)
        return ExtractResult(payload=None, success=False, error_kind=e.kind, detail=e.message)
    finally:
        zeroize(key)
    return ExtractResult(payload=payload, success=True)
