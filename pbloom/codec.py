"""MessagePack wire format for Bloom filters.

Version 1 layout, two msgpack objects back to back:

    [bin  bitmap][uint hash_count]

The bitmap uses the smallest ``bin`` family that fits. The hash count is
written as ``uint 8`` (``0xcc <k>``) whenever it fits in a byte, which is what
the Go ``EncodeUint8`` and Rust ``rmp::encode::write_u8`` writers produce.
Decoding accepts any msgpack unsigned integer for the hash count and rejects
trailing bytes.
"""
from __future__ import annotations

import logging
import struct
from typing import Tuple

import msgpack

from pbloom.errors import (
    EmptyBitsError,
    EmptyInputError,
    EncodingError,
    InvalidHashCountError,
    MalformedEncodingError,
)

logger = logging.getLogger(__name__)

WIRE_FORMAT_VERSION = 1
UINT8_MARKER = 0xCC


def _malformed(reason: str) -> MalformedEncodingError:
    return MalformedEncodingError(f"invalid wire format v{WIRE_FORMAT_VERSION} payload: {reason}")


def encode(bits: bytes, num_hashes: int) -> bytes:
    """Encode a bitmap and hash count.

    Raises:
        EncodingError: If msgpack cannot pack either field.
    """
    try:
        payload = msgpack.packb(bytes(bits), use_bin_type=True)
        if 0 <= num_hashes <= 0xFF:
            payload += struct.pack(">BB", UINT8_MARKER, num_hashes)
        else:
            payload += msgpack.packb(num_hashes)
    except (ValueError, OverflowError, TypeError) as exc:
        raise EncodingError(f"failed to encode bloom filter: {exc}") from exc
    return payload


def decode(data: bytes) -> Tuple[bytes, int]:
    """Decode ``data`` into ``(bits, num_hashes)``.

    Raises:
        EmptyInputError: If ``data`` is empty.
        MalformedEncodingError: If the two fields cannot be read, have the
            wrong msgpack types, or are followed by extra bytes.
        EmptyBitsError: If the decoded bitmap is empty.
        InvalidHashCountError: If the decoded hash count is zero.
    """
    if len(data) == 0:
        raise EmptyInputError("serialized data is empty")

    # The default 100 MiB buffer cap would reject large but valid filters.
    unpacker = msgpack.Unpacker(raw=False, max_buffer_size=len(data))
    unpacker.feed(data)
    try:
        bits = unpacker.unpack()
        num_hashes = unpacker.unpack()
    except msgpack.OutOfData as exc:
        logger.debug(f"Truncated bloom filter payload ({len(data)} bytes)")
        raise _malformed("serialized data is truncated") from exc
    except (msgpack.UnpackException, ValueError) as exc:
        logger.debug(f"Unparseable bloom filter payload: {exc}")
        raise _malformed(f"serialized data is not valid msgpack: {exc}") from exc

    if not isinstance(bits, bytes):
        raise _malformed(f"expected bin for bitmap, got {type(bits).__name__}")
    if isinstance(num_hashes, bool) or not isinstance(num_hashes, int) or num_hashes < 0:
        raise _malformed(f"expected unsigned integer for hash count, got {num_hashes!r}")
    trailing = len(data) - unpacker.tell()
    if trailing:
        raise _malformed(f"{trailing} trailing bytes after hash count")

    if len(bits) == 0:
        raise EmptyBitsError("bits cannot be empty")
    if num_hashes == 0:
        raise InvalidHashCountError("number of hash functions must be positive")
    return bits, num_hashes
