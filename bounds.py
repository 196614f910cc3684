"""
Fixed-width integer domains for the fraction engine.

Python integers never overflow, so the storage widths of a Fraction are
enforced explicitly: every stored field lives in a named domain, and
every wide intermediate is checked against the 128-bit domain before it
is used.  Leaving a domain is always an error - there is no clamping
and no wrap-around.
"""

from __future__ import annotations

from dataclasses import dataclass


class FractionOverflowError(OverflowError):
    """Raised when a value does not fit the domain it must be stored in."""

    def __init__(self, value: int | None, bounds: Bounds, what: str = "value"):
        self.value = value
        self.bounds = bounds
        self.what = what
        shown = what if value is None else f"{what} {value}"
        super().__init__(
            f"{shown} does not fit {bounds.name} [{bounds.lo}, {bounds.hi}]"
        )


@dataclass(frozen=True)
class Bounds:
    """
    An integer domain [lo, hi] named after the machine type it models.

    `narrow` is the only way values cross from a wider domain into a
    narrower one.
    """

    name: str
    lo: int
    hi: int

    def __post_init__(self):
        if self.lo > self.hi:
            raise ValueError(f"lo ({self.lo}) must be <= hi ({self.hi})")

    @property
    def width(self) -> int:
        """Total number of representable values."""
        return self.hi - self.lo + 1

    def contains(self, value: int) -> bool:
        return self.lo <= value <= self.hi

    def narrow(self, value: int, what: str = "value") -> int:
        """Return `value` unchanged if it fits, else raise."""
        if self.lo <= value <= self.hi:
            return value
        raise FractionOverflowError(value, self, what)


def signed(bits: int) -> Bounds:
    return Bounds(name=f"int{bits}", lo=-(2 ** (bits - 1)), hi=2 ** (bits - 1) - 1)


def unsigned(bits: int) -> Bounds:
    return Bounds(name=f"uint{bits}", lo=0, hi=2**bits - 1)


# ---------------------------------------------------------------------------
# Storage and scratch domains
# ---------------------------------------------------------------------------

INT32 = signed(32)     # prime exponents
INT64 = signed(64)     # residual numerator, scalar operands
UINT64 = unsigned(64)  # residual denominator
INT128 = signed(128)   # widened numerators
UINT128 = unsigned(128)  # widened denominators and prime powers
