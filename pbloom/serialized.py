"""Operations on serialized filters.

These are the byte-in/byte-out helpers a database predicate or UDF needs: the
filter lives in a column as its msgpack payload and is only materialized for
the duration of one call.

The hash count is read from the payload and has no upper bound, and each
query runs one hash round per count. Callers evaluating untrusted column
data should check ``BloomFilter.deserialize(data).num_hashes`` against a
limit first: a payload claiming ``k = 2**64 - 1`` effectively never returns.
"""
from __future__ import annotations

import logging

from pbloom.bloom_filter import BloomFilter
from pbloom.errors import BloomFilterError
from pbloom.hashing import Key

logger = logging.getLogger(__name__)


def contains(data: bytes, key: Key) -> bool:
    """Return True if ``key`` may be in the serialized filter ``data``.

    A payload that does not decode to a valid filter contains nothing.
    """
    try:
        bloom = BloomFilter.deserialize(data)
    except BloomFilterError as exc:
        logger.debug(f"Treating undecodable filter as empty: {exc}")
        return False
    return bloom.might_contain(key)


def add(data: bytes, key: Key) -> bytes:
    """Return ``data`` re-serialized with ``key`` inserted.

    Returns ``b""`` if ``data`` does not decode to a valid filter.
    """
    try:
        bloom = BloomFilter.deserialize(data)
    except BloomFilterError as exc:
        logger.debug(f"Cannot add to undecodable filter: {exc}")
        return b""
    bloom.add(key)
    return bloom.serialize()


def create(entries: int, fp_rate: float) -> bytes:
    """Return an empty serialized filter sized for ``entries`` at ``fp_rate``."""
    return BloomFilter.from_entries_and_fp(entries, fp_rate).serialize()
