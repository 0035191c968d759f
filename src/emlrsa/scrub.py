"""Scoped holding of secret intermediates.

Python integers are immutable, so a secret number cannot be overwritten where it lives. What can be bounded is the
time a reference to it stays reachable: values parked in a `Scratch` are replaced by zero and dropped when the scope
exits, whether it exits normally or through an exception. Mutable buffers (`bytearray`) are overwritten in place.

Typical usage example:

    with Scratch() as sc:
        sc["p"] = generate_prime(256)
        n = sc["p"] * sc["q"]
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from typing import Any


def overwrite(buffer: bytearray, fill: int = 0) -> None:
    """Overwrite a mutable buffer in place."""
    for i in range(len(buffer)):
        buffer[i] = fill


class Scratch:
    """A named slot store that wipes every slot on exit."""

    def __init__(self) -> None:
        self._slots: dict[str, Any] = {}

    def __setitem__(self, name: str, value: Any) -> None:
        old = self._slots.get(name)
        if isinstance(old, bytearray) and old is not value:
            overwrite(old)
        self._slots[name] = value

    def __getitem__(self, name: str) -> Any:
        return self._slots[name]

    def __contains__(self, name: str) -> bool:
        return name in self._slots

    def __len__(self) -> int:
        return len(self._slots)

    def discard(self, name: str) -> None:
        """Wipe a single slot before the scope ends."""
        value = self._slots.pop(name, None)
        if isinstance(value, bytearray):
            overwrite(value)

    def wipe(self) -> None:
        for name in list(self._slots):
            value = self._slots[name]
            if isinstance(value, bytearray):
                overwrite(value)
            self._slots[name] = 0
        self._slots.clear()

    def __enter__(self) -> "Scratch":
        return self

    def __exit__(self, *exc_info) -> None:
        self.wipe()
