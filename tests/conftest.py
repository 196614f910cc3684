"""Shared fixtures for fraction tests."""

from __future__ import annotations

import pytest

from fraction import Fraction


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def zero() -> Fraction:
    return Fraction.zero()


@pytest.fixture
def one() -> Fraction:
    return Fraction.one()


@pytest.fixture
def half() -> Fraction:
    return Fraction.from_ratio(1, 2)


@pytest.fixture
def third() -> Fraction:
    return Fraction.from_ratio(1, 3)


@pytest.fixture
def big_residual() -> Fraction:
    """23**13: the largest power of 23 that fits the int64 numerator."""
    return Fraction.from_int(23**13)
