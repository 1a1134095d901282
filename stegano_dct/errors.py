from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(Enum):
    """Failure categories reported by embed/extract."""

    INVALID_INPUT = "invalid_input"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    INVALID_BLOCK_SIZE = "invalid_block_size"
    HEADER_CORRUPT = "header_corrupt"
    ALLOCATION_FAILURE = "allocation_failure"
    KEY_DERIVATION_FAILED = "key_derivation_failed"


class StegoError(Exception):
    """Base error for the embedding pipeline.

    Lower layers raise these; `engine.embed` and `engine.extract` turn them
    into failed results carrying the same kind and message.
    """

    kind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class InvalidInput(StegoError):
    kind = ErrorKind.INVALID_INPUT


class PayloadTooLarge(StegoError):
    kind = ErrorKind.PAYLOAD_TOO_LARGE


class InvalidBlockSize(StegoError):
    kind = ErrorKind.INVALID_BLOCK_SIZE


class HeaderCorrupt(StegoError):
    kind = ErrorKind.HEADER_CORRUPT


class AllocationFailure(StegoError):
    kind = ErrorKind.ALLOCATION_FAILURE


class KeyDerivationFailed(StegoError):
    kind = ErrorKind.KEY_DERIVATION_FAILED
