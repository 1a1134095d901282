from __future__ import annotations

from typing import Callable, Union

from argon2.exceptions import HashingError
from argon2.low_level import Type, hash_secret_raw
from cryptography.hazmat.primitives import hashes

from .config import DEFAULT_ARGON2, TAG_BYTES, Argon2Params
from .errors import HeaderCorrupt, InvalidInput, KeyDerivationFailed

BytesLike = Union[bytes, bytearray, memoryview]
Password = Union[str, bytes, bytearray, memoryview]

SALT_CONTEXT = b"stegano-dct/salt/v1"
TAG_CONTEXT = b"stegano-dct/tag/v1"


def xor_apply(data: bytearray, key: BytesLike) -> bytearray:
    """XOR `data` in place with `key` repeated cyclically and return it.

    Applying it twice with the same key restores the input. An empty key
    leaves the data unchanged. This is obfuscation, not confidentiality.
    """
    n = len(key)
    if n == 0:
        return data
    for i in range(len(data)):
        data[i] ^= key[i % n]
    return data


def zeroize(buf: bytearray) -> None:
    buf[:] = bytes(len(buf))


def sha3_512(data: BytesLike) -> bytes:
    digest = hashes.Hash(hashes.SHA3_512())
    digest.update(bytes(data))
    return digest.finalize()


def derive_key(password: bytes, salt: bytes, params: Argon2Params = DEFAULT_ARGON2) -> bytes:
    return hash_secret_raw(
        secret=password,
        salt=salt,
        time_cost=params.time_cost,
        memory_cost=params.memory_cost,
        parallelism=params.parallelism,
        hash_len=params.hash_len,
        type=Type.ID,
    )


KeySource = Callable[[Password], bytearray]


def password_bytes(password: Password) -> bytearray:
    """UTF-8 encode `str` passwords; byte passwords are taken as they are."""
    if password is None:
        return bytearray()
    if isinstance(password, str):
        return bytearray(password.encode("utf-8"))
    if isinstance(password, (bytes, bytearray, memoryview)):
        return bytearray(password)
    raise InvalidInput(f"Password must be str or bytes, got {type(password).__name__}")


def check_tag(key: BytesLike, plaintext: BytesLike, digest: Callable[[BytesLike], bytes] = sha3_512) -> bytes:
    """Truncated digest binding the key to the plaintext.

    A wrong key or a damaged payload fails to reproduce it on extraction.
    """
    return digest(TAG_CONTEXT + bytes(key) + b"\x00" + bytes(plaintext))[:TAG_BYTES]


class RawPasswordKey:
    """Simplified scheme: the password bytes are the keystream."""

    def __call__(self, password: Password) -> bytearray:
        return password_bytes(password)


class Argon2KeySource:
    """Argon2id keystream with a salt taken from a SHA3-512 digest of the password.

    The salt is deterministic so extraction can rebuild the same key from the
    password alone. `kdf` and `digest` can be swapped for stand-ins in tests.
    """

    def __init__(
        self,
        params: Argon2Params = DEFAULT_ARGON2,
        kdf: Callable[[bytes, bytes, Argon2Params], bytes] = derive_key,
        digest: Callable[[BytesLike], bytes] = sha3_512,
    ):
        self.params = params
        self.kdf = kdf
        self.digest = digest

    def __call__(self, password: Password) -> bytearray:
        secret = password_bytes(password)
        if not secret:
            return secret
        try:
            salt = self.digest(SALT_CONTEXT + bytes(secret))[: self.params.salt_len]
            return bytearray(self.kdf(bytes(secret), salt, self.params))
        except (HashingError, ValueError) as e:
            raise KeyDerivationFailed(f"Key derivation failed: {e}") from e
        finally:
            zeroize(secret)


def add_length_header(data: BytesLike, width: int = 4) -> bytearray:
    """Prefix data with a `width`-byte big-endian length for extraction."""
    return bytearray(len(data).to_bytes(width, "big")) + data


def read_length_header(header: BytesLike, width: int = 4) -> int:
    if len(header) < width:
        raise HeaderCorrupt("No length header present")
    return int.from_bytes(bytes(header[:width]), "big")
