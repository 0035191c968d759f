"""Arbitrary-precision arithmetic for EML RSA, mainly focusing on primality.

Python integers carry the arbitrary precision; GMP (through `gmpy2`) supplies the fast and the constant-time modular
exponentiation, inversion and prime stepping. The probabilistic primality test stays local: a trial division by a
cached table of small primes, followed by a Miller-Rabin test whose witnesses come from an injected random source.

Typical usage example:

    is_probable_prime(2**127 - 1)
    mod_pow(65, e, n, secure=True)
    d = mod_inverse(e, totient)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging

import gmpy2

from emlrsa.entropy import RandomSource
from emlrsa.entropy import SecureRandom
from emlrsa.errors import NoInverseExists

logger = logging.getLogger(__name__)

PRIMALITY_ROUNDS: int = 50
_SMALL_PRIMES: list[int] = []
_SMALL_PRIMES_CAP: int = 0


def _sieve(n: int = 10000) -> list[int]:
    """Implements the Sieve of Eratosthenes.

    Uses the textbook Sieve of Eratosthenes to generate a set of primes up to `n`.
    Includes memory space optimization and sieving until root.

    Args:
        n: The number up to which to generate primes. Defaults to 10000. Must be >= 0.

    Returns:
        A list of primes up to `n`.
    """
    if n < 2:
        return []
    i_size = (n - 1) // 2
    candidate: list[bool] = [True] * i_size
    for i in range(int(n**0.5) // 2):
        if candidate[i]:
            r = 2 * i + 3
            for j in range((r * r - 3) // 2, i_size, r):
                candidate[j] = False
    return [2] + [(no * 2 + 3) for no, ele in enumerate(candidate) if ele]


def get_pre_primes(n: int = 10000, change: bool = False) -> list[int]:
    """Get the small primes, automatically generating if necessary.

    Uses the module-level table as a cache. Regeneration occurs if the requested range is greater, forced by `change`
    or the cache is empty.

    Args:
        n: The number up to which to generate primes. Defaults to 10000. Must be >= 0.
        change: Whether to force a recomputation of primes. Defaults to False.

    Returns:
        List of primes in ascending order. All primes at least to `n` or more unless `change` is True.

    Raises:
        ValueError: If `n` is negative.
    """
    if n < 0:
        raise ValueError("n must be >= 0")
    global _SMALL_PRIMES
    global _SMALL_PRIMES_CAP
    if n > _SMALL_PRIMES_CAP or change or not _SMALL_PRIMES:
        logger.debug("Sieving small primes up to %d", n)
        _SMALL_PRIMES = _sieve(n)
        _SMALL_PRIMES_CAP = n
    return _SMALL_PRIMES


def _trial_division(no: int, n: int = 10000) -> bool:
    """Check the provided `no` against the known small primes.

    Args:
         no: The number to check.
         n: The number up to which to generate primes. Defaults to 10000.

    Returns:
        False if `no` cannot be prime, True otherwise.
    """
    if no < 2:
        return False
    for prime in get_pre_primes(n):
        if prime * prime > no:
            return True
        if no % prime == 0:
            return False
    return True


def _miller_rabin(w: int, rounds: int, rng: RandomSource) -> bool:
    """Perform the Miller-Rabin primality test.

    Args:
        w: Odd integer to be tested.
        rounds: Number of witnesses to try. Each passed round divides the false-positive odds by at least 4.
        rng: Source of the witnesses.

    Returns:
        True if `w` is probably prime, False otherwise.
    """
    if w <= 3:
        return w in (2, 3)
    tw = w - 1
    a = (tw & -tw).bit_length() - 1
    m = tw >> a
    for _ in range(rounds):
        b = rng.randbelow(w - 3) + 2
        z = pow(b, m, w)
        if z == 1 or z == tw:
            continue
        for _ in range(1, a):
            z = pow(z, 2, w)
            if z == tw:
                break
            if z == 1:
                return False
        else:
            return False
    return True


def is_probable_prime(candidate: int, rounds: int = PRIMALITY_ROUNDS, rng: RandomSource | None = None) -> bool:
    """Composite primality test: trial division by small primes, then Miller-Rabin.

    Args:
        candidate: The candidate prime to test.
        rounds: Number of Miller-Rabin rounds. Defaults to the key-generation grade `PRIMALITY_ROUNDS`.
        rng: Source of Miller-Rabin witnesses. Defaults to a fresh `SecureRandom`.

    Returns:
        True if `candidate` is probably prime, False otherwise.
    """
    if candidate < 2:
        return False
    if not _trial_division(candidate):
        return False
    return _miller_rabin(candidate, rounds, rng or SecureRandom())


def next_prime(x: int, rounds: int = PRIMALITY_ROUNDS, rng: RandomSource | None = None) -> int:
    """Smallest probable prime greater than or equal to `x`.

    GMP steps to the next prime, every step is then confirmed with `is_probable_prime` at `rounds`.

    Args:
        x: The lower bound (inclusive).
        rounds: Number of Miller-Rabin rounds for the confirmation.
        rng: Source of Miller-Rabin witnesses.

    Returns:
        The promoted prime.
    """
    if x <= 2:
        return 2
    rng = rng or SecureRandom()
    candidate = x
    while not is_probable_prime(candidate, rounds, rng):
        candidate = int(gmpy2.next_prime(candidate))
    return candidate


def random_in_range(low: int, high: int, rng: RandomSource | None = None) -> int:
    """Uniform integer in `[low, high)`.

    Raises:
        ValueError: If the range is empty.
    """
    return (rng or SecureRandom()).randrange(low, high)


def gcd(a: int, b: int) -> int:
    return int(gmpy2.gcd(a, b))


def lcm(a: int, b: int) -> int:
    """Least common multiple, computed as `a * b / gcd(a, b)`."""
    if a == 0 or b == 0:
        return 0
    return abs(a * b) // gcd(a, b)


def mod_pow(base: int, exponent: int, modulus: int, secure: bool = False) -> int:
    """Modular exponentiation `base**exponent mod modulus`.

    Args:
        base: The base. Reduced modulo `modulus` first.
        exponent: Non-negative exponent.
        modulus: Positive modulus.
        secure: Use the constant-time GMP algorithm. Mandatory whenever the exponent is a private value.
            Requires an odd modulus.

    Returns:
        The result, in `[0, modulus)`.

    Raises:
        ValueError: If the modulus or exponent are out of range.
    """
    if modulus <= 0:
        raise ValueError("Modulus must be positive")
    if exponent < 0:
        raise ValueError("Exponent must be non-negative")
    if modulus == 1:
        return 0
    if exponent == 0:
        return 1
    base %= modulus
    if secure:
        if modulus % 2 == 0:
            raise ValueError("Constant-time exponentiation requires an odd modulus")
        return int(gmpy2.powmod_sec(base, exponent, modulus))
    return int(gmpy2.powmod(base, exponent, modulus))


def mod_inverse(a: int, m: int) -> int:
    """Modular multiplicative inverse `d` such that `a*d ≡ 1 (mod m)`.

    Args:
        a: The value to invert.
        m: Positive modulus.

    Returns:
        The inverse, in `[0, m)`.

    Raises:
        ValueError: If `m` is not positive.
        NoInverseExists: If `gcd(a, m) != 1`.
    """
    if m <= 0:
        raise ValueError("Modulus must be positive")
    if m == 1:
        return 0
    if gcd(a, m) != 1:
        raise NoInverseExists(f"{a} has no inverse modulo {m}")
    return int(gmpy2.invert(a, m))
