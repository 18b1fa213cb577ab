"""Tests for bubble map circle packing."""

import random

import pytest

from lordsboard.bubblemap.models import Size
from lordsboard.bubblemap.packer import (
    DEFAULT_CONTAINER,
    MIN_RADIUS_FLOOR,
    CirclePacker,
    canvas_size,
    collides,
    overlap_violations,
    radius_bounds,
)
from lordsboard.staking.models import OwnerRecord

CONTAINER = Size(1000, 800)


def weights(count, seed=3):
    gen = random.Random(seed)
    return [gen.randint(1, 100) for _ in range(count)]


class TestCanvas:
    def test_small_maps_use_base_factor(self):
        canvas = canvas_size(10, CONTAINER)
        assert canvas.width == pytest.approx(1150)
        assert canvas.height == pytest.approx(920)

    def test_canvas_grows_with_count(self):
        assert canvas_size(500, CONTAINER).width > canvas_size(100, CONTAINER).width

    def test_canvas_is_capped(self):
        canvas = canvas_size(100_000, CONTAINER)
        assert canvas.width <= CONTAINER.width * 8
        assert canvas.height <= CONTAINER.height * 8

    def test_empty_container_falls_back(self):
        assert canvas_size(5, Size(0, 0)) == canvas_size(5, DEFAULT_CONTAINER)

    def test_radius_bands_shrink(self):
        small = radius_bounds(10, canvas_size(10, CONTAINER), CONTAINER)
        large = radius_bounds(900, canvas_size(900, CONTAINER), CONTAINER)
        assert large[1] < small[1]
        assert large[0] >= MIN_RADIUS_FLOOR


class TestPack:
    def test_empty_input(self, rng):
        result = CirclePacker(rng).pack([], CONTAINER)
        assert result.bubbles == []

    @pytest.mark.parametrize("count", [1, 2, 21, 150, 2000])
    def test_every_entity_is_placed(self, rng, count):
        entities = weights(count)
        result = CirclePacker(rng).pack(entities, CONTAINER)
        assert len(result.bubbles) == count

    def test_bubbles_stay_inside_canvas(self, rng):
        result = CirclePacker(rng).pack(weights(150), CONTAINER)
        for b in result.bubbles:
            assert b.radius > 0
            assert result.padding + b.radius - 1e-9 <= b.x <= result.canvas.width - result.padding - b.radius + 1e-9
            assert result.padding + b.radius - 1e-9 <= b.y <= result.canvas.height - result.padding - b.radius + 1e-9

    def test_fifty_entities_rarely_overlap(self, rng):
        result = CirclePacker(rng).pack(weights(50), CONTAINER)
        pairs = 50 * 49 / 2
        assert overlap_violations(result.bubbles) / pairs < 0.05

    def test_heavier_entities_get_larger_bubbles(self, rng):
        result = CirclePacker(rng).pack([1, 100, 10], CONTAINER)
        by_weight = {b.weight: b.radius for b in result.bubbles}
        assert by_weight[100] > by_weight[10] > by_weight[1]
        # Largest first
        assert result.bubbles[0].weight == 100

    def test_radii_within_bounds(self, rng):
        result = CirclePacker(rng).pack(weights(80), CONTAINER)
        for b in result.bubbles:
            assert result.min_radius - 1e-9 <= b.radius <= result.max_radius + 1e-9

    def test_owner_records_are_weighted_by_staked_count(self, rng):
        owners = [OwnerRecord(address="0xa", staked=5), OwnerRecord(address="0xb", staked=1)]
        result = CirclePacker(rng).pack(owners, CONTAINER)
        assert result.bubbles[0].owner.address == "0xa"
        assert result.to_dict()["bubbles"][1]["address"] == "0xb"

    def test_zero_area_container(self, rng):
        result = CirclePacker(rng).pack([1, 2, 3], Size(0, 0))
        assert len(result.bubbles) == 3
        assert not result.canvas.is_empty

    def test_seeded_layouts_are_reproducible(self):
        entities = weights(40)
        first = CirclePacker(random.Random(5)).pack(entities, CONTAINER)
        second = CirclePacker(random.Random(5)).pack(entities, CONTAINER)
        assert [(b.x, b.y) for b in first.bubbles] == [(b.x, b.y) for b in second.bubbles]


def test_collision_uses_spacing_factor():
    assert collides(0, 0, 10, 20.5, 0, 10)
    assert not collides(0, 0, 10, 21.5, 0, 10)
