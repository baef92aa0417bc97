"""Tests for the empirical evaluation helpers."""

import logging

import pytest

from pbloom.bloom_filter import BloomFilter
from pbloom.evaluation import (
    build_filter,
    check_membership,
    collision_variants,
    describe,
    measure_false_positive_rate,
    run_evaluation,
    split_keys,
)


def make_words(n: int) -> list:
    return [f"word{i:05d}" for i in range(n)]


def test_split_keys_is_deterministic():
    words = make_words(10)
    train, held_out = split_keys(reversed(words + words))
    assert train == words[:8]
    assert held_out == words[8:]


@pytest.mark.parametrize("fraction", [0.0, -0.5, 1.5])
def test_split_keys_rejects_fraction(fraction):
    with pytest.raises(ValueError):
        split_keys(["a"], fraction)


def test_collision_variants():
    variants = collision_variants(["ab", "c"], exclude=["xc"])
    assert variants == ["abx", "az", "xab", "cx"]


def test_collision_variants_drop_known_keys():
    assert collision_variants(["a", "ax"]) == ["xa", "axx", "az", "xax"]


def test_build_filter_and_membership():
    train = make_words(200)
    bloom = build_filter(train, 0.01)
    assert check_membership(bloom, train) == []
    assert bloom.size == BloomFilter.from_entries_and_fp(200, 0.01).size


def test_measure_false_positive_rate_on_empty_filter():
    report = measure_false_positive_rate(BloomFilter(128, 3), make_words(50))
    assert report.probes == 50
    assert report.false_positives == 0
    assert report.rate == 0.0


def test_describe():
    bloom = BloomFilter(100, 4)
    bloom.add(b"one")
    properties = describe(bloom, 10)
    assert properties.num_bits == 800
    assert properties.size == 100
    assert properties.num_hashes == 4
    assert properties.bytes_per_key == 10.0
    assert 0 < properties.fill_ratio <= 4 / 800
    assert properties.expected_fp_rate == pytest.approx(bloom.estimated_false_positive_rate(10))


def test_run_evaluation(caplog):
    caplog.set_level(logging.INFO, logger="pbloom.evaluation")
    report = run_evaluation(make_words(5000), fp_rate=0.01)

    assert report.train_size == 4000
    assert report.held_out_size == 1000
    assert report.missing == []
    assert report.held_out.probes == 1000
    assert report.held_out.rate <= 0.03
    assert report.collisions.probes > 0
    assert report.properties.entries == 4000
    assert report.properties.expected_fp_rate == pytest.approx(0.01, abs=0.002)
    assert "missing after insertion: 0" in caplog.text


def test_run_evaluation_with_given_filter():
    bloom = BloomFilter(2048, 7)
    report = run_evaluation(make_words(500), bloom=bloom)
    assert report.missing == []
    assert report.properties.size == 2048
    assert bloom.count_set_bits() > 0
