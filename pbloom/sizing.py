"""Bloom filter sizing.

Derives the bitmap size and hash round count from the expected number of
entries and either a byte budget or a target false positive rate:

    m = -n * ln(p) / (ln(2)^2)      bits, rounded up to whole bytes
    k = (m / n) * ln(2)             hash rounds

Rounding must match the Go and Rust implementations exactly, otherwise two
runtimes disagree on filter dimensions for the same inputs.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from pbloom.errors import InvalidEntriesError, InvalidFPRateError, InvalidSizeError

_LN2 = math.log(2)

# Derived hash counts fit the uint8 field the Go and Rust readers expect.
MAX_DERIVED_HASHES = 0xFF


@dataclass(frozen=True)
class FilterParams:
    """Dimensions of a Bloom filter.

    Attributes:
        size: Bitmap length in bytes.
        num_hashes: Number of hash rounds applied per key.
    """

    size: int
    num_hashes: int

    @property
    def num_bits(self) -> int:
        return self.size * 8


def _round_half_up(value: float) -> int:
    # Matches Go's math.Round for non-negative values; round() is banker's rounding.
    return int(math.floor(value + 0.5))


def _check_entries(entries: int) -> None:
    if entries <= 0:
        raise InvalidEntriesError("number of entries must be positive")


def params_from_entries_and_size(entries: int, size: int) -> FilterParams:
    """Size a filter from an entry count and a fixed byte budget.

    Args:
        entries: Expected number of distinct keys.
        size: Bitmap length in bytes.

    ``k`` is capped at ``MAX_DERIVED_HASHES`` so the filter serializes in the
    uint8 form every implementation reads.

    Raises:
        InvalidEntriesError: If ``entries`` is not positive.
        InvalidSizeError: If ``size`` is not positive.
    """
    _check_entries(entries)
    if size <= 0:
        raise InvalidSizeError("size must be positive")

    num_bits = size * 8
    num_hashes = min(math.ceil((num_bits / entries) * _LN2), MAX_DERIVED_HASHES)
    return FilterParams(size=size, num_hashes=num_hashes)


def params_from_entries_and_fp(entries: int, fp_rate: float) -> FilterParams:
    """Size a filter from an entry count and a target false positive rate.

    ``m`` is rounded up to a multiple of 8 before ``k`` is derived from it, so
    ``k`` reflects the bits actually allocated. Like
    :func:`params_from_entries_and_size`, ``k`` is capped at
    ``MAX_DERIVED_HASHES``.

    Raises:
        InvalidEntriesError: If ``entries`` is not positive.
        InvalidFPRateError: If ``fp_rate`` is not strictly between 0 and 1.
    """
    _check_entries(entries)
    if not 0 < fp_rate < 1:
        raise InvalidFPRateError("false positive rate must be between 0 and 1")

    raw_bits = -entries * math.log(fp_rate) / (_LN2 ** 2)
    num_bits = math.ceil(raw_bits / 8.0) * 8
    num_hashes = _round_half_up((num_bits / entries) * _LN2)
    # k rounds to 0 for rates close to 1.
    num_hashes = min(max(1, num_hashes), MAX_DERIVED_HASHES)
    return FilterParams(size=num_bits // 8, num_hashes=num_hashes)


def estimate_false_positive_rate(num_bits: int, num_hashes: int, entries: int) -> float:
    """Return the theoretical false positive rate ``(1 - e^(-k*n/m))^k``."""
    if entries <= 0:
        return 0.0
    return (1.0 - math.exp(-num_hashes * entries / num_bits)) ** num_hashes
