"""Exception hierarchy for pbloom.

Validation failures also derive from ``ValueError`` so callers that guard
construction with ``except ValueError`` keep working.
"""

from __future__ import annotations


class BloomFilterError(Exception):
    """Base exception for all Bloom filter errors."""
    pass


class InvalidEntriesError(BloomFilterError, ValueError):
    """Raised when the expected number of entries is not positive."""
    pass


class InvalidSizeError(BloomFilterError, ValueError):
    """Raised when the requested filter size in bytes is not positive."""
    pass


class InvalidFPRateError(BloomFilterError, ValueError):
    """Raised when the false positive rate is outside the open interval (0, 1)."""
    pass


class EmptyBitsError(BloomFilterError, ValueError):
    """Raised when a filter is built from a zero-length bitmap."""
    pass


class InvalidHashCountError(BloomFilterError, ValueError):
    """Raised when the number of hash rounds is less than one."""
    pass


class EmptyInputError(BloomFilterError, ValueError):
    """Raised when deserializing zero-length input."""
    pass


class MalformedEncodingError(BloomFilterError, ValueError):
    """Raised when serialized data cannot be parsed into bitmap and hash count."""
    pass


class EncodingError(BloomFilterError):
    """Raised when a filter cannot be serialized."""
    pass
