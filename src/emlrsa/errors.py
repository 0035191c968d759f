"""Typed failures raised by the EML RSA core.

Each error kind also subclasses the built-in exception the prime-generation toolkit has always raised for the same
situation, so callers catching `ValueError` or `RuntimeError` keep working.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0


class EMLRSAError(Exception):
    """Base class of every EML RSA failure."""


class NoInverseExists(EMLRSAError, ArithmeticError):
    """A modular inverse was requested for non-coprime operands. Aborts key generation."""


class InvalidKeyMaterial(EMLRSAError, ValueError):
    """Key fields are zero, missing or cannot be parsed."""


class MalformedCiphertext(EMLRSAError, ValueError):
    """A ciphertext unit is unparseable, or decrypts outside of the byte range.

    Indicates either corruption or a ciphertext/key mismatch.
    """


class ExponentSelectionExhausted(EMLRSAError, RuntimeError):
    """No public exponent coprime with the totient was found within the retry ceiling."""


# I/O failures are delegated to the operating system layer and surface unchanged.
IoFailure = OSError
