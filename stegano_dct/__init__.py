"""Stegano-DCT package: password-keyed LSB embedding in 8x8 block DCT coefficients.

Modules:
- config: embedding policy, versioned coefficient table, Argon2 parameters
- transform: forward/inverse 8x8 DCT
- capacity: payload capacity of a carrier and cover sizing
- crypto: XOR payload cipher, Argon2id key sources, SHA3-512 digest and check tag
- image_utils: carrier validation, block partitioning, Pillow load/save
- embedder: bit embedding and extraction in mid-frequency coefficients
- engine: embed/extract returning result values
- cli: command-line interface (hide/extract/capacity)
"""

from .config import DEFAULT_POLICY, EmbeddingPolicy
from .engine import EmbedResult, ExtractResult, embed, embeddable_bytes, extract
from .errors import ErrorKind, StegoError

__all__ = [
    "DEFAULT_POLICY",
    "EmbeddingPolicy",
    "EmbedResult",
    "ExtractResult",
    "ErrorKind",
    "StegoError",
    "embeddable_bytes",
    "embed",
    "extract",
]
