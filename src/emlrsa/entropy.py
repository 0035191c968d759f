"""Random sources used for candidate draws and primality witnesses.

Every consumer takes its random source as an argument instead of reaching for a process-wide generator, so tests can
substitute a reproducible source.

Typical usage example:

    rng = SeededRandom(1234)
    rng.randrange(1 << 255, 1 << 256)
    SecureRandom().randbits(128)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import abc
import hashlib
import secrets

import gmpy2


class RandomSource(abc.ABC):
    """Minimal interface of a random source: uniform bits and uniform values below a bound."""

    @abc.abstractmethod
    def randbits(self, k: int) -> int:
        """Return a uniform non-negative integer with at most `k` bits."""

    @abc.abstractmethod
    def randbelow(self, n: int) -> int:
        """Return a uniform integer in `[0, n)`. `n` must be positive."""

    def randrange(self, low: int, high: int) -> int:
        """Return a uniform integer in `[low, high)`.

        Raises:
            ValueError: If the range is empty.
        """
        if high <= low:
            raise ValueError(f"Empty range [{low}, {high})")
        return low + self.randbelow(high - low)


class SecureRandom(RandomSource):
    """Cryptographically strong source backed by the operating system via `secrets`."""

    def randbits(self, k: int) -> int:
        return secrets.randbits(k)

    def randbelow(self, n: int) -> int:
        return secrets.randbelow(n)


class SeededRandom(RandomSource):
    """Reproducible source seeded exactly once, at construction, from an explicit seed.

    Backed by the GMP random state. Not suitable for production keys: anybody knowing the seed can regenerate them.

    Attributes:
        seed: The normalized integer seed.
    """

    def __init__(self, seed: int | str | bytes) -> None:
        self.seed = normalize_seed(seed)
        self._state = gmpy2.random_state(self.seed)

    def randbits(self, k: int) -> int:
        if k < 0:
            raise ValueError("number of bits must be non-negative")
        if k == 0:
            return 0
        return int(gmpy2.mpz_urandomb(self._state, k))

    def randbelow(self, n: int) -> int:
        if n <= 0:
            raise ValueError("Upper bound must be positive")
        return int(gmpy2.mpz_random(self._state, n))


def normalize_seed(seed: int | str | bytes) -> int:
    """Turn a seed of any accepted shape into a non-negative integer.

    Decimal strings map to their value, other strings and bytes to their SHA-256 digest.

    Args:
        seed: The seed as given by the user.

    Returns:
        A non-negative integer seed.
    """
    if isinstance(seed, int):
        return abs(seed)
    if isinstance(seed, str):
        if seed.strip().isdecimal():
            return int(seed)
        seed = seed.encode("utf-8")
    return int.from_bytes(hashlib.sha256(seed).digest(), byteorder="big", signed=False)
