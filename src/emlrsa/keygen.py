"""Key Generation Utility, mainly focusing on the generation of random primes and the derived key material.

A keypair is built in a fixed sequence of stages: draw the two primes, multiply them into the modulus, compute the
Carmichael totient, select a public exponent coprime with it, invert it into the private exponent, draw the
independent mask prime, and finally persist both halves. Secret intermediates live in a `Scratch` scope and are
wiped whatever way the generation ends.

Typical usage example:

    pair = generate_key_pair(256, seed=1234)
    gen = KeyGenerator(512, SecureRandom())
    gen.run()
    gen.persist("alice.pub", "alice")
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import enum
import logging
import pathlib

from emlrsa import bigint
from emlrsa.entropy import RandomSource
from emlrsa.entropy import SecureRandom
from emlrsa.entropy import SeededRandom
from emlrsa.errors import ExponentSelectionExhausted
from emlrsa.keys import KeyMaterial
from emlrsa.keys import KeyPair
from emlrsa.scrub import Scratch

logger = logging.getLogger(__name__)

DEFAULT_BITS: int = 256
MINIMUM_BITS: int = 16
EXPONENT_RETRY_CEILING: int = 100_000


class Stage(enum.IntEnum):
    SEEDED = 0
    PRIMES_DRAWN = 1
    MODULUS_COMPUTED = 2
    TOTIENT_COMPUTED = 3
    EXPONENT_SELECTED = 4
    INVERSE_COMPUTED = 5
    MASK_DRAWN = 6
    PERSISTED = 7


def generate_prime(size: int, rng: RandomSource | None = None, rounds: int = bigint.PRIMALITY_ROUNDS) -> int:
    """Generate a probable prime of the specified bit size.

    A candidate is drawn uniformly in `[2**(size-1), 2**size)`. If it is not a probable prime it is promoted to the
    next one. A promotion running past `size` bits discards the candidate and draws again.

    Args:
        size: The size of the prime in bits. Must be >= 2.
        rng: The random source. Defaults to a fresh `SecureRandom`.
        rounds: Number of Miller-Rabin rounds.

    Returns:
        A probable prime.

    Raises:
        ValueError: If `size` is below 2.
    """
    if size < 2:
        raise ValueError("Prime size must be at least 2 bits.")
    rng = rng or SecureRandom()
    with Scratch() as sc:
        while True:
            sc["candidate"] = bigint.random_in_range(1 << (size - 1), 1 << size, rng)
            if bigint.is_probable_prime(sc["candidate"], rounds, rng):
                return sc["candidate"]
            sc["candidate"] = bigint.next_prime(sc["candidate"], rounds, rng)
            if sc["candidate"].bit_length() == size:
                return sc["candidate"]
            logger.debug("Promoted candidate outgrew %d bits, drawing again", size)


class KeyGenerator:
    """Drives the generation of one keypair through its stages.

    Each step may only run directly after the previous one. `run()` performs every step up to the mask draw,
    `persist()` writes the result.

    Attributes:
        bits: Bit width of each of the two primes. The mask prime has half of it.
        rng: The random source, seeded once at its construction.
        rounds: Miller-Rabin rounds for every prime.
        retry_ceiling: Maximal number of public exponent draws.
        stage: The last completed stage.
    """

    def __init__(self,
                 bits: int = DEFAULT_BITS,
                 rng: RandomSource | None = None,
                 rounds: int = bigint.PRIMALITY_ROUNDS,
                 retry_ceiling: int = EXPONENT_RETRY_CEILING) -> None:
        if bits < MINIMUM_BITS:
            raise ValueError(f"Bit width must be at least {MINIMUM_BITS}.")
        if retry_ceiling < 1:
            raise ValueError("Retry ceiling must be positive.")
        self.bits = bits
        self.rng = rng or SecureRandom()
        self.rounds = rounds
        self.retry_ceiling = retry_ceiling
        self.stage = Stage.SEEDED
        self._secrets = Scratch()
        self._n: int | None = None
        self._e: int | None = None
        self._d: int | None = None
        self._mask: int | None = None
        self._pair: KeyPair | None = None

    def _require(self, required: Stage) -> None:
        if self.stage != required:
            raise RuntimeError(f"Generation step requires stage {required.name}, current stage is {self.stage.name}")

    def _complete(self) -> None:
        self.stage = Stage(self.stage + 1)
        logger.debug("Key generation reached stage %s", self.stage.name)

    def draw_primes(self) -> None:
        """Draw the secret primes p and q."""
        self._require(Stage.SEEDED)
        self._secrets["p"] = generate_prime(self.bits, self.rng, self.rounds)
        self._secrets["q"] = generate_prime(self.bits, self.rng, self.rounds)
        if self._secrets["p"] == self._secrets["q"]:
            logger.warning("Drawn primes p and q coincide; the resulting modulus is a perfect square.")
        self._complete()

    def compute_modulus(self) -> None:
        self._require(Stage.PRIMES_DRAWN)
        self._n = self._secrets["p"] * self._secrets["q"]
        self._complete()

    def compute_totient(self) -> None:
        """Carmichael totient, `lcm(p-1, q-1)`. The primes are no longer needed afterward."""
        self._require(Stage.MODULUS_COMPUTED)
        self._secrets["totient"] = bigint.lcm(self._secrets["p"] - 1, self._secrets["q"] - 1)
        self._secrets.discard("p")
        self._secrets.discard("q")
        self._complete()

    def select_exponent(self) -> None:
        """Draw public exponents in `[2**(bits-2), 2**(bits-1))` until one is coprime with the totient.

        Every draw is independent of the previous one.

        Raises:
            ExponentSelectionExhausted: If `retry_ceiling` draws were all rejected.
        """
        self._require(Stage.TOTIENT_COMPUTED)
        low, high = 1 << (self.bits - 2), 1 << (self.bits - 1)
        for attempt in range(1, self.retry_ceiling + 1):
            candidate = bigint.random_in_range(low, high, self.rng)
            if bigint.gcd(candidate, self._secrets["totient"]) == 1:
                logger.debug("Public exponent accepted after %d draw(s)", attempt)
                self._e = candidate
                self._complete()
                return
        raise ExponentSelectionExhausted(
            f"No public exponent coprime with the totient in {self.retry_ceiling} draws. Check the random source.")

    def compute_inverse(self) -> None:
        """Private exponent, the inverse of the public one modulo the totient.

        Raises:
            NoInverseExists: If the public exponent is not coprime with the totient.
        """
        self._require(Stage.EXPONENT_SELECTED)
        self._d = bigint.mod_inverse(self._e, self._secrets["totient"])
        self._secrets.discard("totient")
        self._complete()

    def draw_mask(self) -> None:
        self._require(Stage.INVERSE_COMPUTED)
        self._mask = generate_prime(self.bits // 2, self.rng, self.rounds)
        self._complete()

    def run(self) -> KeyPair:
        """Run every generation step up to the mask draw.

        Returns:
            The generated keypair.
        """
        try:
            self.draw_primes()
            self.compute_modulus()
            self.compute_totient()
            self.select_exponent()
            self.compute_inverse()
            self.draw_mask()
        finally:
            self._secrets.wipe()
        return self.key_pair

    @property
    def key_pair(self) -> KeyPair:
        """The generated pair, the same instances on every access."""
        if self.stage < Stage.MASK_DRAWN:
            raise RuntimeError("Key material is not generated yet.")
        if self._pair is None:
            self._pair = KeyPair(KeyMaterial(self._n, self._e, self._mask),
                                 KeyMaterial(self._n, self._d, self._mask, True))
        return self._pair

    def persist(self, public_dest: pathlib.Path | str, private_dest: pathlib.Path | str, fmt: str = "text") -> None:
        """Write the public `(n, e, n1)` and private `(n, d, n1)` records, then forget the private exponent.

        The private record wiped here is the one `run()` returned, so the caller holds no live copy of it afterward.

        Args:
            public_dest: Destination of the public key.
            private_dest: Destination of the private key.
            fmt: Key file format, `text` or `pem`.

        Raises:
            RuntimeError: If the private record was already wiped, by the caller or a failed earlier attempt.
        """
        self._require(Stage.MASK_DRAWN)
        pair = self.key_pair
        if pair.private.wiped:
            raise RuntimeError("Private key material was wiped before it could be persisted.")
        try:
            pair.public.export(public_dest, fmt)
            pair.private.export(private_dest, fmt)
        finally:
            pair.private.wipe()
            self._d = 0
        self._complete()
        logger.debug("Key pair persisted to %s and %s", public_dest, private_dest)


def generate_key_pair(size: int = DEFAULT_BITS,
                      seed: int | str | bytes | None = None,
                      rng: RandomSource | None = None) -> KeyPair:
    """Generates a masked RSA key pair.

    Args:
        size: Bit width of each of the two primes. Defaults to 256.
        seed: Optional explicit seed for a reproducible pair. Ignored when `rng` is given.
        rng: Optional random source. Defaults to `SecureRandom`, or `SeededRandom(seed)` when a seed is given.

    Returns:
        A `KeyPair` of (public, private) `KeyMaterial`.
    """
    if rng is None:
        rng = SeededRandom(seed) if seed is not None else SecureRandom()
    return KeyGenerator(size, rng).run()
