"""Exact rational numbers in factored form.

A Fraction keeps the powers of eight small primes as plain exponents
and only the leftover cofactors as a numerator/denominator pair::

    value = (residual_numerator / residual_denominator) * prod(p ** e)

Repeated multiplication by numbers made of small primes (time units,
powers of ten, percentages) then only moves exponents around instead of
growing the residual pair, which keeps the 64-bit storage fields from
overflowing.

Every operation computes in a widened domain (see ``bounds``), reduces
the residual pair to lowest terms, and narrows back into storage.  Values
are assigned only once every field fits, so a failing operation leaves
the instance as it was.  Callers should still treat an instance whose
operation raised FractionOverflowError as finished.

Decision branches are annotated with the branch-IDs listed in
``contract.BRANCHES`` so white-box tests can trace coverage.
"""
from __future__ import annotations

import fractions
import math
from dataclasses import dataclass, field
from typing import TypeVar

from bounds import INT32, INT64, INT128, UINT64, UINT128, FractionOverflowError

PRIMES: tuple[int, ...] = (2, 3, 5, 7, 11, 13, 17, 19)

# Residuals are below 2**64, so neither side of a residual pair can hide
# more than 64 factors of any prime.
_MAX_HIDDEN_GAP = 2 * 64

# Values whose expansion takes more bits than this are shown in factored
# form; float conversion falls back to logarithms past the second limit.
_DISPLAY_BITS = 1024
_FLOAT_EXACT_BITS = 1 << 16

T = TypeVar("T")


def gcd(a: T, b: T) -> T:
    """Greatest common divisor by Euclid's algorithm.

    Works for any integer-like type with ``%``, ``!=`` and a zero value
    (``type(b)()``).  Pass non-negative values, not both zero.  When
    ``b`` is zero on entry, ``a`` is returned as is.
    """
    zero = type(b)()
    while b != zero:
        a, b = b, a % b
    return a


# ---------------------------------------------------------------------------
# Residual-pair helpers
# ---------------------------------------------------------------------------

def _zero_exponents() -> list[int]:
    return [0] * len(PRIMES)


def _reduce(numerator: int, denominator: int) -> tuple[int, int]:
    """Divide a residual pair by its GCD.  `denominator` must be positive."""
    divisor = gcd(abs(numerator), denominator)
    return numerator // divisor, denominator // divisor


def _rest_mul(n1: int, d1: int, n2: int, d2: int) -> tuple[int, int]:
    """Multiply (n1/d1) by (n2/d2), both denominators positive.

    Each numerator is first cancelled against the *other* denominator so
    the products below stay as small as the reduced result allows.
    """
    n1, d2 = _reduce(n1, d2)
    n2, d1 = _reduce(n2, d1)
    numerator = INT128.narrow(n1 * n2, "numerator")
    denominator = UINT128.narrow(d1 * d2, "denominator")
    return _reduce(numerator, denominator)


def _extract(magnitude: int) -> tuple[list[int], int]:
    """Split a positive integer into fixed-prime exponents and a cofactor
    coprime to every fixed prime."""
    counts = _zero_exponents()
    for i, p in enumerate(PRIMES):
        while magnitude % p == 0:
            magnitude //= p
            counts[i] += 1
    return counts, magnitude


def _prime_power_product(exponents: list[int]) -> int:
    """prod(p ** e) over the fixed primes, for non-negative exponents."""
    product = 1
    for p, e in zip(PRIMES, exponents):
        if e == 0:
            continue
        # every p >= 2, so p ** 128 is already past the widened domain
        if e >= UINT128.hi.bit_length():
            raise FractionOverflowError(None, UINT128, f"prime power {p}**{e}")
        product = UINT128.narrow(product * p**e, "prime power product")
    return product


def _check_operand(value: int) -> int:
    """Branches: OPERAND-VALID, OPERAND-INVALID"""
    if not INT64.contains(value):                                 # OPERAND-INVALID
        raise ValueError(
            f"{value} is outside {INT64.name} [{INT64.lo}, {INT64.hi}]"
        )
    return value                                                  # OPERAND-VALID


def _from_rational(value: int | fractions.Fraction) -> Fraction | None:
    """The Fraction holding `value` exactly, or None when no Fraction can.

    Fixed-prime factors are pulled out first, so integers far beyond
    int64 still compare equal to their factored form.
    """
    value = fractions.Fraction(value)
    if value == 0:
        return Fraction()
    num_counts, numerator = _extract(abs(value.numerator))
    den_counts, denominator = _extract(value.denominator)
    exponents = [a - b for a, b in zip(num_counts, den_counts)]
    if value < 0:
        numerator = -numerator
    if not (INT64.contains(numerator) and UINT64.contains(denominator)
            and all(INT32.contains(e) for e in exponents)):
        return None
    return Fraction(exponents, numerator, denominator)


# ---------------------------------------------------------------------------
# Fraction
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class Fraction:
    """A signed rational number stored as fixed-prime exponents plus a
    residual pair in lowest terms.

    ``Fraction()`` is canonical zero.  Direct construction validates the
    storage widths and normalizes the residual pair; it does not move
    fixed-prime factors out of the residuals.
    """

    prime_exponents: list[int] = field(default_factory=_zero_exponents)
    residual_numerator: int = 0
    residual_denominator: int = 1

    def __post_init__(self) -> None:
        self.prime_exponents = list(self.prime_exponents)
        if len(self.prime_exponents) != len(PRIMES):
            raise ValueError(
                f"expected {len(PRIMES)} prime exponents, "
                f"got {len(self.prime_exponents)}"
            )
        if self.residual_denominator <= 0:
            raise ValueError(
                f"residual_denominator must be positive, "
                f"got {self.residual_denominator}"
            )
        INT64.narrow(self.residual_numerator, "numerator")
        UINT64.narrow(self.residual_denominator, "denominator")
        for p, e in zip(PRIMES, self.prime_exponents):
            INT32.narrow(e, f"exponent of {p}")
        self.normalize()

    # -- constructors -------------------------------------------------------

    @classmethod
    def zero(cls) -> Fraction:
        return cls()

    @classmethod
    def one(cls) -> Fraction:
        return cls(residual_numerator=1)

    @classmethod
    def from_int(cls, value: int) -> Fraction:
        return cls.one().mul_int(value)

    @classmethod
    def from_ratio(cls, numerator: int, denominator: int) -> Fraction:
        """Build numerator/denominator through the scalar operations, so
        fixed primes land in the exponents."""
        _check_operand(denominator)
        if denominator == 0:
            raise ZeroDivisionError("zero denominator")
        return cls.from_int(numerator).div_int(denominator)

    def copy(self) -> Fraction:
        return Fraction(
            list(self.prime_exponents),
            self.residual_numerator,
            self.residual_denominator,
        )

    # -- normalization ------------------------------------------------------

    def _commit(
        self, exponents: list[int], numerator: int, denominator: int
    ) -> Fraction:
        """Normalize a widened result and store it.

        Nothing is assigned unless every field fits its storage domain.

        Branches: NORM-ZERO, NORM-REDUCE, NORM-OVERFLOW
        """
        if numerator == 0:                                        # NORM-ZERO
            exponents, denominator = _zero_exponents(), 1
        else:                                                     # NORM-REDUCE
            numerator, denominator = _reduce(
                INT128.narrow(numerator, "numerator"),
                UINT128.narrow(denominator, "denominator"),
            )
        # NORM-OVERFLOW is raised by any of the narrowing calls below
        exponents = [
            INT32.narrow(e, f"exponent of {p}") for p, e in zip(PRIMES, exponents)
        ]
        numerator = INT64.narrow(numerator, "numerator")
        denominator = UINT64.narrow(denominator, "denominator")

        self.prime_exponents = exponents
        self.residual_numerator = numerator
        self.residual_denominator = denominator
        return self

    def normalize(self) -> Fraction:
        """Reduce the residual pair to lowest terms; reset zero to canonical form."""
        return self._commit(
            self.prime_exponents, self.residual_numerator, self.residual_denominator
        )

    # -- in-place arithmetic ------------------------------------------------

    def mul_int(self, rhs: int) -> Fraction:
        """Multiply in place by a signed 64-bit integer and return self.

        Branches: MUL-INT-ZERO, MUL-INT-NEG, MUL-INT-POS
        """
        _check_operand(rhs)
        if rhs == 0:                                              # MUL-INT-ZERO
            return self._commit(_zero_exponents(), 0, 1)

        numerator = self.residual_numerator
        if rhs < 0:                                               # MUL-INT-NEG
            numerator, rhs = -numerator, -rhs
        # MUL-INT-POS
        counts, cofactor = _extract(rhs)
        exponents = [e + c for e, c in zip(self.prime_exponents, counts)]
        return self._commit(
            exponents,
            INT128.narrow(numerator * cofactor, "numerator"),
            self.residual_denominator,
        )

    def div_int(self, rhs: int) -> Fraction:
        """Divide in place by a nonzero signed 64-bit integer and return self.

        Branches: DIV-INT-ZERO, DIV-INT-NEG, DIV-INT-POS
        """
        _check_operand(rhs)
        if rhs == 0:                                              # DIV-INT-ZERO
            raise ZeroDivisionError("division by zero")

        numerator = self.residual_numerator
        if rhs < 0:                                               # DIV-INT-NEG
            numerator, rhs = -numerator, -rhs
        # DIV-INT-POS
        counts, cofactor = _extract(rhs)
        exponents = [e - c for e, c in zip(self.prime_exponents, counts)]
        return self._commit(
            exponents,
            numerator,
            UINT128.narrow(self.residual_denominator * cofactor, "denominator"),
        )

    def mul(self, other: Fraction) -> Fraction:
        """Multiply in place by another Fraction and return self."""
        exponents = [a + b for a, b in zip(self.prime_exponents, other.prime_exponents)]
        numerator, denominator = _rest_mul(
            self.residual_numerator,
            self.residual_denominator,
            other.residual_numerator,
            other.residual_denominator,
        )
        return self._commit(exponents, numerator, denominator)

    def div(self, other: Fraction) -> Fraction:
        """Divide in place by a nonzero Fraction and return self.

        The residual part is multiplied by the reciprocal of other's
        residual pair, with the sign kept on the numerator.

        Branches: DIV-FRAC-ZERO, DIV-FRAC-NEG
        """
        if other.residual_numerator == 0:                         # DIV-FRAC-ZERO
            raise ZeroDivisionError("division by zero fraction")

        n2, d2 = other.residual_denominator, other.residual_numerator
        if d2 < 0:                                                # DIV-FRAC-NEG
            n2, d2 = -n2, -d2
        exponents = [a - b for a, b in zip(self.prime_exponents, other.prime_exponents)]
        numerator, denominator = _rest_mul(
            self.residual_numerator, self.residual_denominator, n2, d2
        )
        return self._commit(exponents, numerator, denominator)

    # -- non-mutating arithmetic --------------------------------------------

    def add(self, other: Fraction) -> Fraction:
        """Return self + other as a new Fraction.

        The smaller exponent of each prime stays factored out as the
        shared part; whatever either side has beyond it is folded into
        that side's numerator before the residuals are summed over their
        least common denominator.

        Branches: ADD-ZERO, ADD-GENERAL
        """
        if other.is_zero:                                         # ADD-ZERO
            return self.copy()
        if self.is_zero:
            return other.copy()

        # ADD-GENERAL
        a, b = self, other
        rft = gcd(a.residual_denominator, b.residual_denominator)

        shared: list[int] = []
        excess_a: list[int] = []
        excess_b: list[int] = []
        for ea, eb in zip(a.prime_exponents, b.prime_exponents):
            low = min(ea, eb)
            shared.append(low)
            excess_a.append(ea - low)
            excess_b.append(eb - low)

        scaled_a = INT128.narrow(
            a.residual_numerator * (b.residual_denominator // rft), "numerator"
        )
        scaled_a = INT128.narrow(scaled_a * _prime_power_product(excess_a), "numerator")
        scaled_b = INT128.narrow(
            b.residual_numerator * (a.residual_denominator // rft), "numerator"
        )
        scaled_b = INT128.narrow(scaled_b * _prime_power_product(excess_b), "numerator")

        numerator = INT128.narrow(scaled_a + scaled_b, "numerator")
        denominator = UINT128.narrow(
            a.residual_denominator * b.residual_denominator // rft, "denominator"
        )
        return Fraction()._commit(shared, numerator, denominator)

    def neg(self) -> Fraction:
        return Fraction(
            list(self.prime_exponents),
            INT64.narrow(-self.residual_numerator, "numerator"),
            self.residual_denominator,
        )

    def sub(self, other: Fraction) -> Fraction:
        """Return self - other, computed as self + (-other)."""
        return self.add(other.neg())

    # -- inspection ---------------------------------------------------------

    @property
    def is_zero(self) -> bool:
        return self.residual_numerator == 0

    def identical(self, other: Fraction) -> bool:
        """Representation equality: same exponents and the same residual pair."""
        return (
            self.prime_exponents == other.prime_exponents
            and self.residual_numerator == other.residual_numerator
            and self.residual_denominator == other.residual_denominator
        )

    def expanded_bits(self) -> int:
        """Upper bound on the bits needed to write the value as a plain ratio."""
        return (
            abs(self.residual_numerator).bit_length()
            + self.residual_denominator.bit_length()
            + sum(abs(e) * p.bit_length() for p, e in zip(PRIMES, self.prime_exponents))
        )

    def to_fraction(self) -> fractions.Fraction:
        """Exact value as a standard-library Fraction.

        The result is fully expanded, so its size grows with the
        exponents (see `expanded_bits`).
        """
        value = fractions.Fraction(self.residual_numerator, self.residual_denominator)
        for p, e in zip(PRIMES, self.prime_exponents):
            if e:
                value *= fractions.Fraction(p) ** e
        return value

    def __float__(self) -> float:
        if self.expanded_bits() <= _FLOAT_EXACT_BITS:
            return float(self.to_fraction())
        log2 = (
            math.log2(abs(self.residual_numerator))
            - math.log2(self.residual_denominator)
            + sum(e * math.log2(p) for p, e in zip(PRIMES, self.prime_exponents))
        )
        if log2 >= 1024:
            raise OverflowError("fraction too large to convert to float")
        return math.copysign(2.0 ** log2, self.residual_numerator)

    def __str__(self) -> str:
        """Plain ``n/d`` for modest values, ``n/d * p^e ...`` past that."""
        if self.expanded_bits() <= _DISPLAY_BITS:
            return str(self.to_fraction())
        head = str(fractions.Fraction(self.residual_numerator, self.residual_denominator))
        powers = [f"{p}^{e}" for p, e in zip(PRIMES, self.prime_exponents) if e]
        return " * ".join([head, *powers])

    # -- comparison ---------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        """Value equality by cross-multiplication over the shared prime powers."""
        if isinstance(other, (int, fractions.Fraction)):
            other = _from_rational(other)
            if other is None:
                return False
        if not isinstance(other, Fraction):
            return NotImplemented

        left = self.residual_numerator * other.residual_denominator
        right = other.residual_numerator * self.residual_denominator
        if left == 0 or right == 0:
            return left == right
        for p, ea, eb in zip(PRIMES, self.prime_exponents, other.prime_exponents):
            if abs(ea - eb) > _MAX_HIDDEN_GAP:
                return False
            low = min(ea, eb)
            left *= p ** (ea - low)
            right *= p ** (eb - low)
        return left == right

    __hash__ = None  # mutable

    # -- operator protocol --------------------------------------------------

    def __imul__(self, rhs: Fraction | int) -> Fraction:
        if isinstance(rhs, Fraction):
            return self.mul(rhs)
        if isinstance(rhs, int):
            return self.mul_int(rhs)
        return NotImplemented

    def __itruediv__(self, rhs: Fraction | int) -> Fraction:
        if isinstance(rhs, Fraction):
            return self.div(rhs)
        if isinstance(rhs, int):
            return self.div_int(rhs)
        return NotImplemented

    def __mul__(self, rhs: Fraction | int) -> Fraction:
        if not isinstance(rhs, (Fraction, int)):
            return NotImplemented
        result = self.copy()
        result *= rhs
        return result

    __rmul__ = __mul__

    def __truediv__(self, rhs: Fraction | int) -> Fraction:
        if not isinstance(rhs, (Fraction, int)):
            return NotImplemented
        result = self.copy()
        result /= rhs
        return result

    def __rtruediv__(self, lhs: int) -> Fraction:
        if not isinstance(lhs, int):
            return NotImplemented
        return Fraction.from_int(lhs).div(self)

    def __add__(self, rhs: Fraction | int) -> Fraction:
        if isinstance(rhs, int):
            rhs = Fraction.from_int(rhs)
        if not isinstance(rhs, Fraction):
            return NotImplemented
        return self.add(rhs)

    __radd__ = __add__

    def __sub__(self, rhs: Fraction | int) -> Fraction:
        if isinstance(rhs, int):
            rhs = Fraction.from_int(rhs)
        if not isinstance(rhs, Fraction):
            return NotImplemented
        return self.sub(rhs)

    def __rsub__(self, lhs: int) -> Fraction:
        if not isinstance(lhs, int):
            return NotImplemented
        return Fraction.from_int(lhs).sub(self)

    def __neg__(self) -> Fraction:
        return self.neg()
