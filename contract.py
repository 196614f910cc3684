"""Executable contract for the fraction engine.

Each operation is described as a collection of:
- preconditions: what inputs must satisfy before the operation
- postconditions: what the result must satisfy given valid inputs
- error conditions: what inputs must raise, and which exception
- algebraic properties: relationships that must hold between operations

The standard library's ``fractions.Fraction`` is the value oracle:
postconditions compare against it, never against the engine itself.

Layers
------
Operand kinds     FRACTION / INTEGER, what a property's free inputs are
OperationContract per-operation pre/post/error/properties
Branch            every decision point white-box tests must cover
FractionContract  the full contract
build_contract()  constructs the FractionContract
"""
from __future__ import annotations

import fractions
from dataclasses import dataclass
from typing import Callable

from bounds import INT32, INT64, UINT64
from fraction import PRIMES, Fraction, gcd


# ---------------------------------------------------------------------------
# Operand kinds for algebraic properties
# ---------------------------------------------------------------------------

FRACTION = "fraction"
INTEGER = "int"


# ---------------------------------------------------------------------------
# Contract building blocks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Precondition:
    name: str
    description: str
    check: Callable[..., bool]


@dataclass(frozen=True)
class Postcondition:
    name: str
    description: str
    check: Callable[..., bool]


@dataclass(frozen=True)
class ErrorCondition:
    name: str
    description: str
    trigger: Callable[..., bool]
    exception: type


@dataclass(frozen=True)
class AlgebraicProperty:
    name: str
    description: str
    operands: tuple[str, ...]   # kind of each free input, in order
    check: Callable[..., bool]

    @property
    def arity(self) -> int:
        return len(self.operands)


@dataclass(frozen=True)
class OperationContract:
    name: str
    preconditions: list[Precondition]
    postconditions: list[Postcondition]
    error_conditions: list[ErrorCondition]
    properties: list[AlgebraicProperty]


@dataclass(frozen=True)
class Branch:
    """A decision point in the implementation that must be exercised."""

    id: str
    description: str
    condition: str      # human-readable boolean expression
    operation: str      # which operation / helper this belongs to


@dataclass(frozen=True)
class FractionContract:
    """Complete contract for the engine."""

    operations: dict[str, OperationContract]
    branches: list[Branch]

    @property
    def all_properties(self) -> list[tuple[str, AlgebraicProperty]]:
        out: list[tuple[str, AlgebraicProperty]] = []
        for name, op in self.operations.items():
            for prop in op.properties:
                out.append((name, prop))
        return out

    @property
    def all_postconditions(self) -> list[tuple[str, Postcondition]]:
        out: list[tuple[str, Postcondition]] = []
        for name, op in self.operations.items():
            for post in op.postconditions:
                out.append((name, post))
        return out

    def branch(self, branch_id: str) -> Branch:
        for b in self.branches:
            if b.id == branch_id:
                return b
        raise KeyError(branch_id)


# ---------------------------------------------------------------------------
# Helpers used inside the predicates
# ---------------------------------------------------------------------------

def is_canonical_zero(f: Fraction) -> bool:
    return (
        f.residual_numerator == 0
        and f.residual_denominator == 1
        and all(e == 0 for e in f.prime_exponents)
    )


def in_lowest_terms(f: Fraction) -> bool:
    return gcd(abs(f.residual_numerator), f.residual_denominator) == 1


def well_formed(f: Fraction) -> bool:
    """Every structural invariant a finished operation must leave behind."""
    return (
        len(f.prime_exponents) == len(PRIMES)
        and all(INT32.contains(e) for e in f.prime_exponents)
        and INT64.contains(f.residual_numerator)
        and UINT64.contains(f.residual_denominator)
        and f.residual_denominator > 0
        and in_lowest_terms(f)
        and (f.residual_numerator != 0 or is_canonical_zero(f))
    )


def value_of(f: Fraction) -> fractions.Fraction:
    return f.to_fraction()


# ---------------------------------------------------------------------------
# Branches
# ---------------------------------------------------------------------------

BRANCHES: list[Branch] = [
    # Operand validation (_check_operand)
    Branch(
        "OPERAND-VALID",
        "Integer operand within int64",
        "INT64.lo <= rhs <= INT64.hi",
        "validation",
    ),
    Branch(
        "OPERAND-INVALID",
        "Integer operand outside int64 rejected with ValueError",
        "not INT64.contains(rhs)",
        "validation",
    ),
    # Normalization (_commit)
    Branch(
        "NORM-ZERO",
        "Zero numerator resets to canonical zero",
        "numerator == 0",
        "normalize",
    ),
    Branch(
        "NORM-REDUCE",
        "Nonzero residual pair divided by its GCD",
        "numerator != 0",
        "normalize",
    ),
    Branch(
        "NORM-OVERFLOW",
        "Reduced field does not fit storage, FractionOverflowError",
        "not INT64.contains(n) or not UINT64.contains(d) or exponent outside INT32",
        "normalize",
    ),
    # Scalar multiply
    Branch(
        "MUL-INT-ZERO",
        "Multiply by 0 yields canonical zero",
        "rhs == 0",
        "mul_int",
    ),
    Branch(
        "MUL-INT-NEG",
        "Negative operand flips the numerator sign",
        "rhs < 0",
        "mul_int",
    ),
    Branch(
        "MUL-INT-POS",
        "Magnitude split into exponents and a cofactor",
        "rhs != 0",
        "mul_int",
    ),
    # Scalar divide
    Branch(
        "DIV-INT-ZERO",
        "ZeroDivisionError before any mutation",
        "rhs == 0",
        "div_int",
    ),
    Branch(
        "DIV-INT-NEG",
        "Negative divisor flips the numerator sign",
        "rhs < 0",
        "div_int",
    ),
    Branch(
        "DIV-INT-POS",
        "Divisor split into negative exponents and a denominator cofactor",
        "rhs != 0",
        "div_int",
    ),
    # Fraction divide
    Branch(
        "DIV-FRAC-ZERO",
        "ZeroDivisionError on a zero divisor fraction",
        "other.residual_numerator == 0",
        "div",
    ),
    Branch(
        "DIV-FRAC-NEG",
        "Negative divisor: sign moves to the numerator",
        "other.residual_numerator < 0",
        "div",
    ),
    # Addition
    Branch(
        "ADD-ZERO",
        "Either operand zero, copy of the other",
        "a.is_zero or b.is_zero",
        "add",
    ),
    Branch(
        "ADD-GENERAL",
        "Shared minimum exponents, excess folded into numerators",
        "not a.is_zero and not b.is_zero",
        "add",
    ),
]


# ---------------------------------------------------------------------------
# Contract builder
# ---------------------------------------------------------------------------

def build_contract() -> FractionContract:
    """Construct the full engine contract."""

    int_operand = Precondition(
        "operand_in_int64",
        "Integer operand within int64",
        lambda f, n: INT64.contains(n),
    )
    int_operand_error = ErrorCondition(
        "operand_out_of_range",
        "ValueError when the integer operand is outside int64",
        lambda f, n: not INT64.contains(n),
        ValueError,
    )
    result_well_formed = Postcondition(
        "result_well_formed",
        "Result satisfies every structural invariant",
        lambda x, y, result: well_formed(result),
    )

    # -------------------------------------------------------------- mul_int
    mul_int_contract = OperationContract(
        name="mul_int",
        preconditions=[int_operand],
        postconditions=[
            result_well_formed,
            Postcondition(
                "result_correct",
                "Result equals f * n exactly",
                lambda f, n, result: value_of(result) == value_of(f) * n,
            ),
        ],
        error_conditions=[int_operand_error],
        properties=[
            AlgebraicProperty(
                "zero_absorbs", "zero * n is canonical zero", (INTEGER,),
                lambda n: is_canonical_zero(Fraction.zero().mul_int(n)),
            ),
            AlgebraicProperty(
                "annihilator", "f * 0 is canonical zero", (FRACTION,),
                lambda f: is_canonical_zero(f.copy().mul_int(0)),
            ),
            AlgebraicProperty(
                "round_trip", "(f * n) / n == f for n != 0", (FRACTION, INTEGER),
                lambda f, n: n == 0 or f.copy().mul_int(n).div_int(n) == f,
            ),
            AlgebraicProperty(
                "identity", "f * 1 is identical to f", (FRACTION,),
                lambda f: f.copy().mul_int(1).identical(f),
            ),
        ],
    )

    # -------------------------------------------------------------- div_int
    div_int_contract = OperationContract(
        name="div_int",
        preconditions=[
            int_operand,
            Precondition("nonzero_divisor", "Divisor is not zero", lambda f, n: n != 0),
        ],
        postconditions=[
            result_well_formed,
            Postcondition(
                "result_correct",
                "Result equals f / n exactly",
                lambda f, n, result: value_of(result) == value_of(f) / n,
            ),
        ],
        error_conditions=[
            ErrorCondition(
                "div_by_zero",
                "ZeroDivisionError when the divisor is zero",
                lambda f, n: n == 0,
                ZeroDivisionError,
            ),
            int_operand_error,
        ],
        properties=[
            AlgebraicProperty(
                "zero_stays_zero", "zero / n is canonical zero for n != 0", (INTEGER,),
                lambda n: n == 0 or is_canonical_zero(Fraction.zero().div_int(n)),
            ),
            AlgebraicProperty(
                "identity", "f / 1 is identical to f", (FRACTION,),
                lambda f: f.copy().div_int(1).identical(f),
            ),
            AlgebraicProperty(
                "sign", "f / -1 == -f", (FRACTION,),
                lambda f: f.copy().div_int(-1) == f.neg(),
            ),
        ],
    )

    # ------------------------------------------------------------------ mul
    mul_contract = OperationContract(
        name="mul",
        preconditions=[],
        postconditions=[
            result_well_formed,
            Postcondition(
                "result_correct",
                "Result equals a * b exactly",
                lambda a, b, result: value_of(result) == value_of(a) * value_of(b),
            ),
        ],
        error_conditions=[],
        properties=[
            AlgebraicProperty(
                "commutativity", "a * b == b * a", (FRACTION, FRACTION),
                lambda a, b: a.copy().mul(b) == b.copy().mul(a),
            ),
            AlgebraicProperty(
                "identity", "a * one is identical to a", (FRACTION,),
                lambda a: a.copy().mul(Fraction.one()).identical(a),
            ),
            AlgebraicProperty(
                "inverse", "(a * b) / b == a for b != 0", (FRACTION, FRACTION),
                lambda a, b: b.is_zero or a.copy().mul(b).div(b) == a,
            ),
            AlgebraicProperty(
                "zero", "a * zero is canonical zero", (FRACTION,),
                lambda a: is_canonical_zero(a.copy().mul(Fraction.zero())),
            ),
        ],
    )

    # ------------------------------------------------------------------ div
    div_contract = OperationContract(
        name="div",
        preconditions=[
            Precondition("nonzero_divisor", "Divisor is not zero", lambda a, b: not b.is_zero),
        ],
        postconditions=[
            result_well_formed,
            Postcondition(
                "result_correct",
                "Result equals a / b exactly",
                lambda a, b, result: value_of(result) == value_of(a) / value_of(b),
            ),
        ],
        error_conditions=[
            ErrorCondition(
                "div_by_zero",
                "ZeroDivisionError when the divisor is zero",
                lambda a, b: b.is_zero,
                ZeroDivisionError,
            ),
        ],
        properties=[
            AlgebraicProperty(
                "self", "a / a == one for a != 0", (FRACTION,),
                lambda a: a.is_zero or a.copy().div(a).identical(Fraction.one()),
            ),
            AlgebraicProperty(
                "identity", "a / one is identical to a", (FRACTION,),
                lambda a: a.copy().div(Fraction.one()).identical(a),
            ),
        ],
    )

    # ------------------------------------------------------------------ add
    add_contract = OperationContract(
        name="add",
        preconditions=[],
        postconditions=[
            result_well_formed,
            Postcondition(
                "result_correct",
                "Result equals a + b exactly",
                lambda a, b, result: value_of(result) == value_of(a) + value_of(b),
            ),
        ],
        error_conditions=[],
        properties=[
            AlgebraicProperty(
                "commutativity", "a + b is identical to b + a", (FRACTION, FRACTION),
                lambda a, b: a.add(b).identical(b.add(a)),
            ),
            AlgebraicProperty(
                "identity", "a + zero is identical to a", (FRACTION,),
                lambda a: a.add(Fraction.zero()).identical(a),
            ),
            AlgebraicProperty(
                "non_mutating", "a + b leaves both operands unchanged", (FRACTION, FRACTION),
                lambda a, b: _unchanged_by_add(a, b),
            ),
        ],
    )

    # ------------------------------------------------------------------ sub
    sub_contract = OperationContract(
        name="sub",
        preconditions=[],
        postconditions=[
            result_well_formed,
            Postcondition(
                "result_correct",
                "Result equals a - b exactly",
                lambda a, b, result: value_of(result) == value_of(a) - value_of(b),
            ),
        ],
        error_conditions=[],
        properties=[
            AlgebraicProperty(
                "self_inverse", "a - a is canonical zero", (FRACTION,),
                lambda a: is_canonical_zero(a.sub(a)),
            ),
            AlgebraicProperty(
                "add_inverse", "(a + b) - b == a", (FRACTION, FRACTION),
                lambda a, b: a.add(b).sub(b) == a,
            ),
        ],
    )

    return FractionContract(
        operations={
            "mul_int": mul_int_contract,
            "div_int": div_int_contract,
            "mul": mul_contract,
            "div": div_contract,
            "add": add_contract,
            "sub": sub_contract,
        },
        branches=BRANCHES,
    )


def _unchanged_by_add(a: Fraction, b: Fraction) -> bool:
    before_a, before_b = a.copy(), b.copy()
    a.add(b)
    return a.identical(before_a) and b.identical(before_b)
