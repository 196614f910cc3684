"""Contract conformance tests.

These tests are *driven by* the contract: they iterate over every
postcondition, error condition, and algebraic property defined in
``contract.build_contract`` and verify the engine satisfies them.

If the contract changes (e.g. a new postcondition is added), these tests
automatically cover it - no manual test authoring required for the
new predicate.
"""
from __future__ import annotations

import pytest
from hypothesis import given, settings, assume
from hypothesis import strategies as st

from bounds import FractionOverflowError
from contract import FRACTION, INTEGER, build_contract, well_formed
from fraction import Fraction
from strategies import fractions_st, int64_operands, nonzero_ints, small_ints

CONTRACT = build_contract()

SCALAR_OPS = {"mul_int": Fraction.mul_int, "div_int": Fraction.div_int}
FRACTION_OPS = {
    "mul": Fraction.mul,
    "div": Fraction.div,
    "add": Fraction.add,
    "sub": Fraction.sub,
}


def _run(op_name: str, a: Fraction, b):
    """Apply an operation to a copy of `a`; returns the result Fraction."""
    if op_name in SCALAR_OPS:
        return SCALAR_OPS[op_name](a.copy(), b)
    return FRACTION_OPS[op_name](a.copy(), b)


# ===================================================================
# POSTCONDITIONS - property-based
# ===================================================================

class TestPostconditions:
    """Every postcondition in the contract holds for random inputs."""

    @pytest.mark.parametrize("op_name", sorted(SCALAR_OPS))
    @given(f=fractions_st(), n=small_ints)
    @settings(max_examples=200)
    def test_scalar_postconditions(self, op_name, f, n):
        assume(op_name != "div_int" or n != 0)
        result = _run(op_name, f, n)
        for post in CONTRACT.operations[op_name].postconditions:
            assert post.check(f, n, result), (
                f"Postcondition '{post.name}' failed: {op_name}({f!r}, {n}) = {result!r}"
            )

    @pytest.mark.parametrize("op_name", sorted(FRACTION_OPS))
    @given(a=fractions_st(), b=fractions_st())
    @settings(max_examples=200)
    def test_fraction_postconditions(self, op_name, a, b):
        assume(op_name != "div" or not b.is_zero)
        result = _run(op_name, a, b)
        for post in CONTRACT.operations[op_name].postconditions:
            assert post.check(a, b, result), (
                f"Postcondition '{post.name}' failed: {op_name}({a!r}, {b!r}) = {result!r}"
            )

    @given(n=int64_operands)
    def test_scalar_mul_full_operand_range(self, n):
        one = Fraction.one()
        result = _run("mul_int", one, n)
        for post in CONTRACT.operations["mul_int"].postconditions:
            assert post.check(one, n, result)


# ===================================================================
# ERROR CONDITIONS
# ===================================================================

class TestErrorConditions:
    """Every error condition in the contract triggers correctly."""

    @pytest.mark.parametrize("n", [0, 2**63, -(2**63) - 1, 2**100])
    @pytest.mark.parametrize("op_name", sorted(SCALAR_OPS))
    def test_scalar_error_conditions(self, op_name, n):
        f = Fraction.from_ratio(-23, 12)
        triggered = [
            ec for ec in CONTRACT.operations[op_name].error_conditions
            if ec.trigger(f, n)
        ]
        if not triggered:
            # mul_int by 0 is valid
            assert n == 0 and op_name == "mul_int"
            return
        before = f.copy()
        with pytest.raises(tuple(ec.exception for ec in triggered)):
            _run(op_name, f, n)
        assert f.identical(before)

    def test_div_by_zero_fraction(self):
        a = Fraction.from_ratio(5, 7)
        zero = Fraction.zero()
        for ec in CONTRACT.operations["div"].error_conditions:
            assert ec.trigger(a, zero)
            with pytest.raises(ec.exception):
                a.copy().div(zero)

    def test_untriggered_conditions_do_not_raise(self):
        a = Fraction.from_ratio(5, 7)
        b = Fraction.from_ratio(-2, 3)
        for ec in CONTRACT.operations["div"].error_conditions:
            assert not ec.trigger(a, b)
        a.copy().div(b)


# ===================================================================
# ALGEBRAIC PROPERTIES - property-based
# ===================================================================

def _draw_operand(data, kind: str):
    if kind == FRACTION:
        return data.draw(fractions_st())
    if kind == INTEGER:
        return data.draw(nonzero_ints)
    raise ValueError(kind)


class TestAlgebraicProperties:
    """Every algebraic property in the contract holds for random inputs."""

    @pytest.mark.parametrize(
        "op_name,prop",
        CONTRACT.all_properties,
        ids=[f"{op}:{p.name}" for op, p in CONTRACT.all_properties],
    )
    @given(data=st.data())
    @settings(max_examples=150)
    def test_property(self, op_name, prop, data):
        args = [_draw_operand(data, kind) for kind in prop.operands]
        try:
            ok = prop.check(*args)
        except FractionOverflowError as e:
            pytest.fail(f"Property '{prop.name}' overflowed for {op_name}{tuple(args)!r}: {e}")
        assert ok, f"Property '{prop.name}' failed for {op_name}{tuple(args)!r}"


# ===================================================================
# CONTRACT SHAPE
# ===================================================================

class TestContractShape:

    def test_every_operation_described(self):
        assert set(CONTRACT.operations) == set(SCALAR_OPS) | set(FRACTION_OPS)

    def test_every_operation_has_postconditions(self):
        for name, op in CONTRACT.operations.items():
            assert op.postconditions, name

    def test_branch_ids_unique(self):
        ids = [b.id for b in CONTRACT.branches]
        assert len(ids) == len(set(ids))

    def test_branch_lookup(self):
        assert CONTRACT.branch("ADD-ZERO").operation == "add"
        with pytest.raises(KeyError):
            CONTRACT.branch("NO-SUCH-BRANCH")

    def test_well_formed_rejects_non_canonical_zero(self):
        f = Fraction.zero()
        f.prime_exponents[0] = 3     # bypasses normalization
        assert not well_formed(f)
