"""Shared fixtures for Focus Flow tests."""

import datetime

import pytest

from focus_flow.storage import MemoryStore


class FixedRandom:
    """rng stand-in: random() always returns ``value``, choice() the first item."""

    def __init__(self, value=0.0):
        self.value = value

    def random(self):
        return self.value

    def choice(self, seq):
        return seq[0]


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def zero_rng():
    return FixedRandom(0.0)


@pytest.fixture
def wednesday():
    # 2024-01-03 is a Wednesday
    return datetime.date(2024, 1, 3)
