# Shared fixtures for the stegano_dct test suite

import numpy as np
import pytest

from stegano_dct.config import Argon2Params
from stegano_dct.crypto import Argon2KeySource, RawPasswordKey, sha3_512


def _stand_in_kdf(password, salt, params):
    """Deterministic, fast replacement for Argon2id."""
    return sha3_512(salt + password)[: params.hash_len]


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def carrier(rng):
    """100x100 RGB noise carrier: 30 000 samples, 900 bits at ratio 0.3."""
    return rng.integers(0, 256, size=(100, 100, 3), dtype=np.uint8)


@pytest.fixture
def flat_carrier():
    """Uniform grey carrier; every AC coefficient is zero."""
    return np.full((64, 64, 3), 128, dtype=np.uint8)


@pytest.fixture
def raw_key():
    return RawPasswordKey()


@pytest.fixture
def stand_in_key():
    return Argon2KeySource(kdf=_stand_in_kdf)


@pytest.fixture
def small_argon2():
    """Real Argon2id with parameters small enough for unit tests."""
    return Argon2KeySource(Argon2Params(time_cost=1, memory_cost=64, parallelism=1, hash_len=16))
