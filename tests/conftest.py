"""
Shared pytest fixtures for the lords staking dashboard test suite.

This module provides reusable fixtures for:
- Seeded random generators
- Sample lords and owners
- Fake marketplace and staking contract clients
- A staking service wired to an in-memory cache
"""

import random

import pytest

from lordsboard.staking.cache import CacheStore
from lordsboard.staking.models import Lord
from lordsboard.staking.service import StakingDataService

ALICE = "0x" + "a" * 40
BOB = "0x" + "b" * 40
CAROL = "0x" + "c" * 40
DAVE = "0x" + "d" * 40


# =============================================================================
# RNG Fixtures
# =============================================================================


@pytest.fixture
def rng():
    """Random generator with a fixed seed for deterministic tests."""
    return random.Random(12345)


@pytest.fixture
def rng_seed_42():
    return random.Random(42)


# =============================================================================
# Data Fixtures
# =============================================================================


def make_lord(token_id, owner, rarity="Rare", specie="Wolf", duration=None):
    return Lord(
        token_id=str(token_id),
        name=f"Lord #{token_id}",
        owner=owner,
        is_staked=duration is not None,
        staking_duration=duration,
        rank=[rarity],
        specie=[specie],
    )


@pytest.fixture
def sample_lords():
    """Small collection: ALICE is the biggest staker, DAVE stakes nothing."""
    return [
        make_lord(1, ALICE, "Mystic", "Wolf", 10),
        make_lord(2, ALICE, "Rare", "Owl", 5),
        make_lord(3, "0x" + "B" * 40, "Epic", "Raven", 3),
        make_lord(4, BOB, "Legendary", "Boar", None),
        make_lord(5, CAROL, "Rare", "Fox", 1),
        make_lord(6, DAVE, "Epic", "Wolf", None),
    ]


class FakeMarketplace:
    """Serves tokens from a list, recording every page request."""

    def __init__(self, tokens):
        self.tokens = tokens
        self.calls = []

    def fetch_tokens(self, size=50, start=0):
        self.calls.append((start, size))
        return self.tokens[start:start + size]

    def close(self):
        pass


class FakeStakingContract:
    def __init__(self, durations):
        self.durations = durations
        self.calls = []

    def get_staking_duration(self, token_id):
        self.calls.append(token_id)
        return self.durations.get(token_id)


def lord_to_token(lord):
    return {
        "tokenId": lord.token_id,
        "name": lord.name,
        "owner": lord.owner,
        "attributes": {"rank": lord.rank, "specie": lord.specie},
    }


@pytest.fixture
def cache():
    return CacheStore()


@pytest.fixture
def marketplace(sample_lords):
    return FakeMarketplace([lord_to_token(lord) for lord in sample_lords])


@pytest.fixture
def staking_contract(sample_lords):
    return FakeStakingContract({
        lord.token_id: lord.staking_duration for lord in sample_lords if lord.is_staked
    })


@pytest.fixture
def service(cache, marketplace, staking_contract):
    config = {"cache": {"page_size": 4, "max_tokens": 100}}
    return StakingDataService(config, cache, marketplace, staking_contract)
