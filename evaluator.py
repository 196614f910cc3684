"""Accumulator that drives a Fraction through a sequence of steps.

This is the consuming side of the engine: a calculator keeps one running
value and folds each parsed instruction into it.  A step that fails
leaves the accumulator unusable - the running value is discarded rather
than reused.
"""

from __future__ import annotations

import logging
from typing import Iterable

from bounds import FractionOverflowError
from fraction import Fraction
from models import EvaluateRequest, EvaluateResponse, FractionModel, Step, StepOp

logger = logging.getLogger(__name__)


class EvaluationError(Exception):
    """Raised when a step cannot be applied."""

    def __init__(self, index: int, step: Step, cause: Exception) -> None:
        self.index = index
        self.step = step
        self.cause = cause
        super().__init__(
            f"Step {index} ({step.op.value} {_describe(step.operand)}) failed: {cause}"
        )


class AccumulatorDiscardedError(Exception):
    """Raised when an accumulator is used after one of its steps failed."""


def _describe(operand: int | FractionModel) -> str:
    if isinstance(operand, FractionModel):
        return str(operand.to_fraction())
    return str(operand)


def _operand(operand: int | FractionModel) -> int | Fraction:
    if isinstance(operand, FractionModel):
        return operand.to_fraction()
    return operand


class Accumulator:
    """Running value of a calculation."""

    def __init__(self, start: Fraction | None = None) -> None:
        self._value = start.copy() if start is not None else Fraction.zero()
        self._steps_applied = 0
        self._discarded = False

    @property
    def value(self) -> Fraction:
        return self._value.copy()

    @property
    def steps_applied(self) -> int:
        return self._steps_applied

    def apply(self, step: Step) -> Fraction:
        """Fold one step into the running value and return a copy of it."""
        if self._discarded:
            raise AccumulatorDiscardedError(
                f"Accumulator discarded after a failed step ({self._steps_applied} applied)"
            )

        index = self._steps_applied
        try:
            operand = _operand(step.operand)
            if step.op == StepOp.MUL:
                self._value *= operand
            elif step.op == StepOp.DIV:
                self._value /= operand
            elif step.op == StepOp.ADD:
                self._value = self._value + operand
            else:
                self._value = self._value - operand
        except (ZeroDivisionError, FractionOverflowError, ValueError) as e:
            self._discarded = True
            logger.warning("Step %d (%s) failed: %s", index, step.op.value, e)
            raise EvaluationError(index, step, e) from e

        self._steps_applied += 1
        logger.debug("Step %d: %s %s -> %s", index, step.op.value,
                     _describe(step.operand), self._value)
        return self.value

    def run(self, steps: Iterable[Step]) -> Fraction:
        for step in steps:
            self.apply(step)
        return self.value


def evaluate(request: EvaluateRequest) -> EvaluateResponse:
    """Run every step of a request from its starting value."""
    acc = Accumulator(request.start.to_fraction())
    result = acc.run(request.steps)
    logger.info("Evaluated %d steps -> %s", acc.steps_applied, result)
    return EvaluateResponse(
        result=FractionModel.from_fraction(result),
        display=str(result),
        steps_applied=acc.steps_applied,
    )
