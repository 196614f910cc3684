"""Hypothesis strategies shared by the property and conformance tests."""

from __future__ import annotations

from hypothesis import strategies as st

from fraction import Fraction


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

# Small enough that sums and products of two generated fractions stay far
# inside the 64-bit storage fields.
small_ints = st.integers(min_value=-200, max_value=200)
nonzero_ints = small_ints.filter(lambda n: n != 0)

# Full int64 operand range for scalar operations on canonical zero / one.
int64_operands = st.integers(min_value=-(2**63), max_value=2**63 - 1)


@st.composite
def nonzero_fractions(draw) -> Fraction:
    """A nonzero Fraction built the way callers build them: by chaining
    scalar multiplies and divides."""
    f = Fraction.from_int(draw(nonzero_ints))
    for n in draw(st.lists(nonzero_ints, max_size=2)):
        f.mul_int(n)
    for n in draw(st.lists(nonzero_ints, max_size=2)):
        f.div_int(n)
    return f


def fractions_st() -> st.SearchStrategy[Fraction]:
    return st.one_of(st.builds(Fraction.zero), nonzero_fractions())

