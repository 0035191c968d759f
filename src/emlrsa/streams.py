"""File-level collaborators: whole byte streams and whitespace-delimited integer streams.

Errors of the operating system propagate unchanged.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import pathlib
import typing

from emlrsa.codec import format_ciphertext
from emlrsa.codec import parse_ciphertext


def read_bytes(file: pathlib.Path | str) -> bytearray:
    """Read an entire file as a mutable buffer, so it can be scrubbed after use."""
    with open(file, "rb") as f:
        return bytearray(f.read())


def write_bytes(file: pathlib.Path | str, data: bytes) -> None:
    with open(file, "wb") as f:
        f.write(data)


def read_integers(file: pathlib.Path | str) -> list[int]:
    """Read whitespace-delimited decimal integers until the end of the file.

    Raises:
        MalformedCiphertext: If a token is not a non-negative decimal integer.
    """
    with open(file, "rb") as f:
        return parse_ciphertext(f.read())


def write_integers(file: pathlib.Path | str, values: typing.Iterable[int]) -> None:
    """Write integers on one line, separated by single spaces."""
    with open(file, "w", encoding="ascii") as f:
        f.write(format_ciphertext(values))
