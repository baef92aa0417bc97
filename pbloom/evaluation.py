"""Empirical evaluation of Bloom filter behavior.

Helpers that split a key set into training and held-out parts, populate a
filter from the training part, and measure what the filter reports back. Each
measurement returns a dataclass (``FalsePositiveReport``, ``FilterProperties``)
and ``run_evaluation`` bundles them into an ``EvaluationReport``, logging a
short summary at INFO level.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from pbloom.bloom_filter import BloomFilter

logger = logging.getLogger(__name__)

DEFAULT_TRAIN_FRACTION = 0.8
DEFAULT_FP_RATE = 0.01
COLLISION_SAMPLE = 500


@dataclass
class FalsePositiveReport:
    probes: int
    false_positives: int

    @property
    def rate(self) -> float:
        if self.probes == 0:
            return 0.0
        return self.false_positives / self.probes


@dataclass
class FilterProperties:
    """Memory and configuration summary of a populated filter."""

    num_bits: int
    size: int
    num_hashes: int
    entries: int
    fill_ratio: float
    bytes_per_key: float
    expected_fp_rate: float


@dataclass
class EvaluationReport:
    train_size: int
    held_out_size: int
    missing: List[str]
    held_out: FalsePositiveReport
    collisions: FalsePositiveReport
    properties: FilterProperties


def split_keys(
    keys: Iterable[str], train_fraction: float = DEFAULT_TRAIN_FRACTION
) -> Tuple[List[str], List[str]]:
    """Split sorted unique ``keys`` into ``(train, held_out)``."""
    if not 0 < train_fraction <= 1:
        raise ValueError("train_fraction must be in (0, 1]")

    words = sorted(set(keys))
    split = int(len(words) * train_fraction)
    return words[:split], words[split:]


def build_filter(train: Sequence[str], fp_rate: float = DEFAULT_FP_RATE) -> BloomFilter:
    """Build a filter sized for ``train`` and insert every key."""
    bloom = BloomFilter.from_entries_and_fp(max(1, len(train)), fp_rate)
    bloom.update(train)
    return bloom


def check_membership(bloom: BloomFilter, keys: Iterable[str]) -> List[str]:
    """Return the inserted keys the filter reports as absent (expected none)."""
    return [key for key in keys if key not in bloom]


def measure_false_positive_rate(bloom: BloomFilter, probes: Iterable[str]) -> FalsePositiveReport:
    """Count how many of ``probes`` (none of them inserted) the filter reports."""
    probes = list(probes)
    false_positives = sum(1 for key in probes if key in bloom)
    return FalsePositiveReport(probes=len(probes), false_positives=false_positives)


def collision_variants(
    keys: Sequence[str], exclude: Iterable[str] = (), sample: int = COLLISION_SAMPLE
) -> List[str]:
    """Generate near-miss variants of the first ``sample`` keys.

    Each key yields ``key + "x"``, ``key[:-1] + "z"`` (for keys longer than
    one character) and ``"x" + key``. Variants colliding with ``keys`` or
    ``exclude`` are dropped.
    """
    variants = []
    for key in keys[:sample]:
        variants.append(key + "x")
        if len(key) > 1:
            variants.append(key[:-1] + "z")
        variants.append("x" + key)

    known = set(keys)
    known.update(exclude)
    return [variant for variant in variants if variant not in known]


def describe(bloom: BloomFilter, entries: int) -> FilterProperties:
    """Summarize memory use and expected accuracy of ``bloom`` holding ``entries`` keys."""
    return FilterProperties(
        num_bits=bloom.num_bits,
        size=bloom.size,
        num_hashes=bloom.num_hashes,
        entries=entries,
        fill_ratio=bloom.count_set_bits() / bloom.num_bits,
        bytes_per_key=bloom.size / entries if entries else 0.0,
        expected_fp_rate=bloom.estimated_false_positive_rate(entries),
    )


def run_evaluation(
    keys: Iterable[str],
    fp_rate: float = DEFAULT_FP_RATE,
    train_fraction: float = DEFAULT_TRAIN_FRACTION,
    bloom: Optional[BloomFilter] = None,
) -> EvaluationReport:
    """Run all checks and log a summary.

    If ``bloom`` is given it is populated with the training keys instead of
    building a new filter sized from ``fp_rate``.
    """
    train, held_out = split_keys(keys, train_fraction)
    if bloom is None:
        bloom = build_filter(train, fp_rate)
    else:
        bloom.update(train)

    missing = check_membership(bloom, train)
    held_out_report = measure_false_positive_rate(bloom, held_out)
    collisions = measure_false_positive_rate(bloom, collision_variants(held_out, exclude=train))
    properties = describe(bloom, len(train))

    logger.info(f"Training keys: {len(train)}, missing after insertion: {len(missing)} (expected 0)")
    logger.info(
        f"Held-out keys: {held_out_report.probes}, false positives: {held_out_report.false_positives}, "
        f"empirical FPR: {held_out_report.rate:.6f}"
    )
    logger.info(
        f"Variants tested: {collisions.probes}, false positives: {collisions.false_positives}, "
        f"collision rate: {collisions.rate:.6f}"
    )
    logger.info(
        f"Filter: {properties.num_bits} bits ({properties.size} bytes), k={properties.num_hashes}, "
        f"fill ratio {properties.fill_ratio:.4f}, {properties.bytes_per_key:.4f} bytes/key, "
        f"expected FPR {properties.expected_fp_rate:.6f}"
    )

    return EvaluationReport(
        train_size=len(train),
        held_out_size=len(held_out),
        missing=missing,
        held_out=held_out_report,
        collisions=collisions,
        properties=properties,
    )
