"""Bit position generation using double hashing.

A single MurmurHash3 x64 128-bit digest (seed 0) is split into two 64-bit
halves, ``h1`` (low) and ``h2`` (high), and combined with the
Kirsch-Mitzenmacher optimization to derive ``k`` positions:

    hash_i = ((h1 + i * h2) mod 2^64) mod m

This scheme is part of wire format version 1. Any other implementation reading
or writing the same bytes must use the same digest, seed and split.
"""
from __future__ import annotations

from typing import Iterator, Tuple, Union

import mmh3

Key = Union[bytes, bytearray, memoryview, str]

HASH_SEED = 0

_MASK64 = (1 << 64) - 1


def _as_bytes(key: Key) -> bytes:
    if isinstance(key, str):
        return key.encode("utf-8")
    return bytes(key)


def base_hashes(key: Key) -> Tuple[int, int]:
    """Return the ``(h1, h2)`` base hashes of ``key`` as unsigned 64-bit ints."""
    digest = mmh3.hash128(_as_bytes(key), HASH_SEED, x64arch=True, signed=False)
    return digest & _MASK64, digest >> 64


def bit_positions(key: Key, num_hashes: int, num_bits: int) -> Iterator[int]:
    """Yield the ``num_hashes`` bit indexes for ``key`` in a ``num_bits`` bitmap."""
    h1, h2 = base_hashes(key)
    for i in range(num_hashes):
        yield ((h1 + i * h2) & _MASK64) % num_bits
