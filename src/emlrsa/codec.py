"""Per-byte masked RSA transform.

Every plaintext byte becomes one ciphertext unit `(b**e mod n) + n1`, where the mask `n1` is added as a plain integer,
not modulo `n`. Decryption strips the mask and exponentiates with the private exponent. Both directions use
constant-time exponentiation.

Typical usage example:

    units = encrypt(bytearray(b"Hi there!"), pair.public)
    text = format_ciphertext(units)
    clear = decrypt(parse_ciphertext(text), pair.private)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from concurrent import futures
import logging
import typing

from emlrsa import bigint
from emlrsa.errors import InvalidKeyMaterial
from emlrsa.errors import MalformedCiphertext
from emlrsa.keys import KeyMaterial
from emlrsa.scrub import overwrite

logger = logging.getLogger(__name__)

SENTINEL: int = ord("0")


def _ordered_map(fun: typing.Callable[[int], int], count: int, workers: int) -> list[int]:
    """Apply `fun` to every index in `range(count)`, results in index order."""
    if workers <= 1 or count <= 1:
        return [fun(i) for i in range(count)]
    with futures.ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(fun, range(count)))


def _checked_key(key: KeyMaterial) -> tuple[int, int, int]:
    try:
        key.validate()
    except AttributeError as exc:
        raise InvalidKeyMaterial("Expected a KeyMaterial instance") from exc
    return key.to_tuple()


def encrypt(plaintext: bytes | bytearray | memoryview, key: KeyMaterial, workers: int = 1) -> list[int]:
    """Encrypt a message byte by byte with a public key.

    Each plaintext byte is overwritten with `SENTINEL` right after it has been encoded. For an immutable `bytes`
    input this happens on a private copy.

    Args:
        plaintext: The message. Any 8-bit content.
        key: The public key `(n, e, n1)`.
        workers: Number of threads for the per-byte transform. Output order always matches input order.

    Returns:
        The ciphertext units, one per plaintext byte.

    Raises:
        InvalidKeyMaterial: If the modulus or exponent is zero.
    """
    n, e, n1 = _checked_key(key)
    if isinstance(plaintext, bytearray):
        buffer = plaintext
    elif isinstance(plaintext, memoryview) and not plaintext.readonly:
        buffer = plaintext.cast("B")
    else:
        buffer = bytearray(plaintext)

    def encode(i: int) -> int:
        unit = bigint.mod_pow(buffer[i], e, n, secure=True) + n1
        buffer[i] = SENTINEL
        return unit

    units = _ordered_map(encode, len(buffer), workers)
    logger.debug("Encrypted %d byte(s)", len(units))
    return units


def _to_unit(token: int | str) -> int:
    if isinstance(token, str):
        if not (token.isascii() and token.isdecimal()):
            raise MalformedCiphertext(f"Ciphertext unit {token[:32]!r} is not a decimal integer")
        return int(token)
    if isinstance(token, bool) or not isinstance(token, int):
        raise MalformedCiphertext(f"Ciphertext unit of type {type(token).__name__} is not an integer")
    if token < 0:
        raise MalformedCiphertext("Ciphertext units must be non-negative")
    return token


def decrypt(ciphertext: typing.Iterable[int | str], key: KeyMaterial, workers: int = 1) -> bytes:
    """Decrypt ciphertext units with a private key.

    The whole ciphertext is decoded before anything is returned; a single bad unit fails the call.

    Args:
        ciphertext: The units, as integers or decimal strings.
        key: The private key `(n, d, n1)`.
        workers: Number of threads for the per-unit transform.

    Returns:
        The plaintext bytes.

    Raises:
        InvalidKeyMaterial: If the modulus or exponent is zero.
        MalformedCiphertext: If a unit is unparseable, lies outside `[n1, n1 + n)`, or decrypts to a value above
            255. Signals corruption or a ciphertext/key mismatch.
    """
    n, d, n1 = _checked_key(key)
    units = [_to_unit(token) for token in ciphertext]

    def decode(i: int) -> int:
        c = units[i] - n1
        if not 0 <= c < n:
            raise MalformedCiphertext(f"Ciphertext unit {i} is out of range for the key")
        m = bigint.mod_pow(c, d, n, secure=True)
        if m > 0xFF:
            raise MalformedCiphertext(f"Ciphertext unit {i} does not decrypt to a byte")
        return m

    plain = bytearray(_ordered_map(decode, len(units), workers))
    try:
        return bytes(plain)
    finally:
        overwrite(plain)
        logger.debug("Decrypted %d unit(s)", len(units))


def format_ciphertext(units: typing.Iterable[int]) -> str:
    """Decimal units separated by single spaces, without a trailing separator."""
    return " ".join(str(unit) for unit in units)


def parse_ciphertext(text: str | bytes) -> list[int]:
    """Parse whitespace-delimited decimal units.

    Raises:
        MalformedCiphertext: If a token is not a non-negative decimal integer.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("ascii")
        except UnicodeDecodeError as exc:
            raise MalformedCiphertext("Ciphertext is not ASCII text") from exc
    return [_to_unit(token) for token in text.split()]
