"""Tests for the alias-method weighted sampler."""

import random
from collections import Counter

import pytest

from lordsboard.raffle.sampler import AliasSampler, weighted_choice

DRAWS = 100_000


def frequencies(sampler, draws=DRAWS):
    counts = Counter(sampler.sample() for _ in range(draws))
    return [counts[i] / draws for i in range(len(sampler))]


class TestConvergence:
    def test_uniform_weights(self, rng):
        freqs = frequencies(AliasSampler([1, 1, 1, 1], rng))
        for f in freqs:
            assert f == pytest.approx(0.25, abs=0.02)

    def test_skewed_weights(self, rng):
        freqs = frequencies(AliasSampler([1, 9], rng))
        assert freqs[0] == pytest.approx(0.1, abs=0.02)
        assert freqs[1] == pytest.approx(0.9, abs=0.02)

    def test_zero_weight_never_drawn(self, rng):
        sampler = AliasSampler([0, 3, 0, 1], rng)
        drawn = {sampler.sample() for _ in range(10_000)}
        assert drawn <= {1, 3}

    def test_single_entry(self, rng):
        sampler = AliasSampler([5], rng)
        assert all(sampler.sample() == 0 for _ in range(100))


class TestTables:
    def test_probabilities_bounded(self, rng):
        sampler = AliasSampler([3, 1, 7, 0.5, 2], rng)
        assert len(sampler.prob) == len(sampler.alias) == 5
        assert all(0 <= p <= 1 for p in sampler.prob)
        assert all(0 <= a < 5 for a in sampler.alias)

    def test_input_not_mutated(self, rng):
        weights = [4, 2, 1]
        AliasSampler(weights, rng).sample()
        assert weights == [4, 2, 1]

    def test_seeded_samplers_agree(self):
        a = AliasSampler([1, 2, 3, 4], random.Random(7))
        b = AliasSampler([1, 2, 3, 4], random.Random(7))
        assert [a.sample() for _ in range(50)] == [b.sample() for _ in range(50)]


class TestInvalidInput:
    @pytest.mark.parametrize("weights", [[], [0, 0], [1, -1]])
    def test_rejected(self, weights):
        with pytest.raises(ValueError):
            AliasSampler(weights)


def test_weighted_choice(rng):
    assert weighted_choice([0, 0, 1], rng) == 2
