# SPDX-License-Identifier: Apache-2.0
"""Request identifier generation (xid layout, uppercase base32hex)."""

import hashlib
import os
import secrets
import socket
import threading
import time

# base32hex keeps the lexical order of the encoded bytes
_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUV"
_COUNTER_MASK = 0xFFFFFF
ID_LENGTH = 20


def _encode(raw: bytes) -> str:
    value = int.from_bytes(raw, "big") << 4  # 96 bits padded to 100 = 20 * 5
    chars = []
    for _ in range(ID_LENGTH):
        chars.append(_ALPHABET[value & 0x1F])
        value >>= 5
    return "".join(reversed(chars))


def _process_nonce() -> bytes:
    seed = f"{time.time_ns()}-{os.getpid()}-{id(object())}".encode()
    return hashlib.md5(seed).digest()


def _random_bytes(n: int) -> bytes:
    try:
        return secrets.token_bytes(n)
    except NotImplementedError:
        return _process_nonce()[:n]


def _machine_id() -> bytes:
    try:
        hostname = socket.gethostname()
    except OSError:
        hostname = ""
    if not hostname:
        return _random_bytes(3)
    return hashlib.md5(hostname.encode("utf-8")).digest()[:3]


class IdGenerator:
    """Produces 20-character, time-sortable, process-unique identifiers.

    Layout of the 12 raw bytes:
        4 bytes unix seconds | 3 bytes machine id | 2 bytes pid | 3 bytes counter
    """

    def __init__(self) -> None:
        self._machine = _machine_id()
        self._pid = (os.getpid() & 0xFFFF).to_bytes(2, "big")
        self._counter = int.from_bytes(_random_bytes(3), "big")
        self._lock = threading.Lock()

    def _next_counter(self) -> int:
        with self._lock:
            self._counter = (self._counter + 1) & _COUNTER_MASK
            return self._counter

    def generate(self) -> str:
        seconds = int(time.time()) & 0xFFFFFFFF
        raw = (
            seconds.to_bytes(4, "big")
            + self._machine
            + self._pid
            + self._next_counter().to_bytes(3, "big")
        )
        return _encode(raw)


_default_generator = IdGenerator()


def generate_id() -> str:
    """Generate a request id from the process-wide generator."""
    return _default_generator.generate()
