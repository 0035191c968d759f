"""EML RSA: textbook RSA over single bytes, with an additive secret mask.

Provides key generation (two random primes, a random public exponent coprime with the Carmichael totient and an
independent mask prime), byte-wise encryption into decimal ciphertext units and the matching decryption. Arithmetic
is backed by GMP through gmpy2.

Typical usage example:

    pair = generate_key_pair(256)
    units = encrypt(bytearray(b"Hi there!"), pair.public)
    clear = decrypt(units, pair.private)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from emlrsa.bigint import is_probable_prime
from emlrsa.bigint import mod_inverse
from emlrsa.bigint import mod_pow
from emlrsa.bigint import next_prime
from emlrsa.codec import decrypt
from emlrsa.codec import encrypt
from emlrsa.codec import format_ciphertext
from emlrsa.codec import parse_ciphertext
from emlrsa.entropy import SecureRandom
from emlrsa.entropy import SeededRandom
from emlrsa.errors import EMLRSAError
from emlrsa.errors import ExponentSelectionExhausted
from emlrsa.errors import InvalidKeyMaterial
from emlrsa.errors import IoFailure
from emlrsa.errors import MalformedCiphertext
from emlrsa.errors import NoInverseExists
from emlrsa.keygen import generate_key_pair
from emlrsa.keygen import generate_prime
from emlrsa.keygen import KeyGenerator
from emlrsa.keys import KeyMaterial
from emlrsa.keys import KeyPair
from emlrsa.keys import load_key

__version__ = "0.1.0"
__all__ = [
    "EMLRSAError",
    "ExponentSelectionExhausted",
    "InvalidKeyMaterial",
    "IoFailure",
    "KeyGenerator",
    "KeyMaterial",
    "KeyPair",
    "MalformedCiphertext",
    "NoInverseExists",
    "SecureRandom",
    "SeededRandom",
    "decrypt",
    "encrypt",
    "format_ciphertext",
    "generate_key_pair",
    "generate_prime",
    "is_probable_prime",
    "load_key",
    "mod_inverse",
    "mod_pow",
    "next_prime",
    "parse_ciphertext",
]
