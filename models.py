"""Wire models for fractions and evaluation requests.

A FractionModel is the JSON snapshot of a Fraction: one exponent per
fixed prime (keyed by the prime) plus the residual pair.  Steps are
already-parsed calculator instructions; turning command text into steps
happens elsewhere.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from bounds import INT32, INT64, UINT64
from fraction import PRIMES, Fraction, gcd


# ---------------------------------------------------------------------------
# FractionModel: JSON snapshot of a Fraction
# ---------------------------------------------------------------------------

class FractionModel(BaseModel):
    """A Fraction as it travels over the wire.

    Missing primes default to exponent 0.  The residual pair must already
    be in lowest terms and zero must be canonical, so every valid model
    maps onto exactly one Fraction.
    """

    prime_exponents: dict[int, int] = Field(default_factory=dict, validate_default=True)
    numerator: int = Field(default=0, ge=INT64.lo, le=INT64.hi)
    denominator: int = Field(default=1, ge=1, le=UINT64.hi)

    @field_validator("prime_exponents")
    @classmethod
    def known_primes_only(cls, v: dict[int, int]) -> dict[int, int]:
        unknown = sorted(set(v) - set(PRIMES))
        if unknown:
            raise ValueError(f"Unknown primes {unknown}; expected a subset of {list(PRIMES)}")
        for p, e in v.items():
            if not INT32.contains(e):
                raise ValueError(f"Exponent of {p} is outside {INT32.name}: {e}")
        return {p: v.get(p, 0) for p in PRIMES}

    @model_validator(mode="after")
    def canonical(self) -> FractionModel:
        if self.numerator == 0:
            if self.denominator != 1 or any(self.prime_exponents.values()):
                raise ValueError("Zero must be canonical: denominator 1, all exponents 0")
        elif gcd(abs(self.numerator), self.denominator) != 1:
            raise ValueError(
                f"Residual pair {self.numerator}/{self.denominator} is not in lowest terms"
            )
        return self

    @classmethod
    def from_fraction(cls, f: Fraction) -> FractionModel:
        return cls(
            prime_exponents=dict(zip(PRIMES, f.prime_exponents)),
            numerator=f.residual_numerator,
            denominator=f.residual_denominator,
        )

    def to_fraction(self) -> Fraction:
        return Fraction(
            [self.prime_exponents.get(p, 0) for p in PRIMES],
            self.numerator,
            self.denominator,
        )


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------

class StepOp(str, Enum):
    MUL = "*"
    DIV = "/"
    ADD = "+"
    SUB = "-"


class Step(BaseModel):
    """One accumulator instruction: ``acc = acc <op> operand``."""

    op: StepOp
    operand: int | FractionModel

    @field_validator("operand")
    @classmethod
    def int_operand_in_range(cls, v: int | FractionModel) -> int | FractionModel:
        if isinstance(v, int) and not INT64.contains(v):
            raise ValueError(f"Integer operand is outside {INT64.name}: {v}")
        return v


# ---------------------------------------------------------------------------
# Request / response
# ---------------------------------------------------------------------------

class EvaluateRequest(BaseModel):
    """Payload for running a sequence of steps from a starting value."""

    start: FractionModel = Field(default_factory=FractionModel)
    steps: list[Step] = Field(..., min_length=1)


class EvaluateResponse(BaseModel):
    result: FractionModel
    display: str
    steps_applied: int


class PrimesResponse(BaseModel):
    primes: list[int]
