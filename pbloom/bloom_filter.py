"""Portable Bloom filter backed by a bytearray bitset.

Positions come from MurmurHash3 x64 128-bit double hashing (see
``pbloom.hashing``) and the filter serializes to a two-field msgpack payload
(see ``pbloom.codec``), so filters built here can be queried by the Go and
Rust ``pbloom`` implementations and vice versa.

Mutation is not synchronized: populate a filter from a single writer, then
share it read-only.
"""
from __future__ import annotations

import logging
from typing import Iterable

from pbloom import codec
from pbloom.errors import EmptyBitsError, InvalidHashCountError, InvalidSizeError
from pbloom.hashing import Key, bit_positions
from pbloom.sizing import (
    estimate_false_positive_rate,
    params_from_entries_and_fp,
    params_from_entries_and_size,
)

logger = logging.getLogger(__name__)


class BloomFilter:
    """Append-only Bloom filter with a fixed bitmap size and hash count."""

    def __init__(self, size: int, num_hashes: int) -> None:
        """Initialize an empty Bloom filter.

        Args:
            size: Bitmap length in bytes.
            num_hashes: Number of hash rounds per key. No upper bound is
                enforced; query cost grows linearly with it.

        Raises:
            InvalidSizeError: If ``size`` is not positive.
            InvalidHashCountError: If ``num_hashes`` is not positive.
        """
        if size <= 0:
            raise InvalidSizeError("size must be positive")
        if num_hashes <= 0:
            raise InvalidHashCountError("number of hash functions must be positive")

        self.num_hashes = num_hashes
        self._bit_array = bytearray(size)

    @classmethod
    def from_entries_and_size(cls, entries: int, size: int) -> BloomFilter:
        """Create a filter of ``size`` bytes with ``k`` chosen for ``entries`` keys."""
        params = params_from_entries_and_size(entries, size)
        logger.debug(f"Sized bloom filter from entries={entries}, size={size}: k={params.num_hashes}")
        return cls(params.size, params.num_hashes)

    @classmethod
    def from_entries_and_fp(cls, entries: int, fp_rate: float) -> BloomFilter:
        """Create a filter sized for ``entries`` keys at false positive rate ``fp_rate``."""
        params = params_from_entries_and_fp(entries, fp_rate)
        logger.debug(
            f"Sized bloom filter from entries={entries}, fp_rate={fp_rate}: "
            f"size={params.size}, k={params.num_hashes}"
        )
        return cls(params.size, params.num_hashes)

    @classmethod
    def from_bits(cls, bits: bytes, num_hashes: int) -> BloomFilter:
        """Rebuild a filter from an existing bitmap and hash count.

        The bitmap is copied. Unlike the sizing constructors, any positive
        ``num_hashes`` is accepted, although values far above
        ``(m / n) * ln(2)`` only make queries slower.

        Raises:
            EmptyBitsError: If ``bits`` is empty.
            InvalidHashCountError: If ``num_hashes`` is not positive.
        """
        if len(bits) == 0:
            raise EmptyBitsError("bits cannot be empty")
        if num_hashes <= 0:
            raise InvalidHashCountError("number of hash functions must be positive")

        bloom = cls(len(bits), num_hashes)
        bloom._bit_array[:] = bits
        return bloom

    @classmethod
    def deserialize(cls, data: bytes) -> BloomFilter:
        """Rebuild a filter from bytes produced by :meth:`serialize`.

        Raises:
            EmptyInputError: If ``data`` is empty.
            MalformedEncodingError: If ``data`` is not a valid payload.
            EmptyBitsError, InvalidHashCountError: If the payload decodes to
                an invalid filter.
        """
        bits, num_hashes = codec.decode(data)
        return cls.from_bits(bits, num_hashes)

    def serialize(self) -> bytes:
        """Serialize the filter to its portable msgpack form."""
        return codec.encode(self._bit_array, self.num_hashes)

    def add(self, key: Key) -> None:
        """Insert ``key`` into the filter."""
        for bit_index in bit_positions(key, self.num_hashes, self.num_bits):
            self._bit_array[bit_index >> 3] |= 1 << (bit_index & 7)

    def update(self, keys: Iterable[Key]) -> None:
        """Insert all ``keys`` into the filter."""
        for key in keys:
            self.add(key)

    def might_contain(self, key: Key) -> bool:
        """Return True if ``key`` may be present; False if definitely absent."""
        for bit_index in bit_positions(key, self.num_hashes, self.num_bits):
            if not (self._bit_array[bit_index >> 3] & (1 << (bit_index & 7))):
                return False
        return True

    __contains__ = might_contain

    def count_set_bits(self) -> int:
        return sum(bin(byte).count("1") for byte in self._bit_array)

    def estimated_false_positive_rate(self, entries: int) -> float:
        """Theoretical false positive rate once ``entries`` keys are inserted."""
        return estimate_false_positive_rate(self.num_bits, self.num_hashes, entries)

    @property
    def size(self) -> int:
        """Bitmap length in bytes."""
        return len(self._bit_array)

    @property
    def num_bits(self) -> int:
        return len(self._bit_array) * 8

    @property
    def bit_array(self) -> bytearray:
        """Expose the underlying bit array (primarily for inspection)."""
        return self._bit_array

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BloomFilter):
            return NotImplemented
        return self.num_hashes == other.num_hashes and self._bit_array == other._bit_array

    def __repr__(self) -> str:
        return f"{type(self).__name__}(size={self.size}, num_hashes={self.num_hashes})"
