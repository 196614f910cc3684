"""FastAPI endpoints for the fraction engine.

Routes
------
POST   /fractions/evaluate   Run a sequence of steps from a starting value
GET    /fractions/primes     List the primes kept as exponents
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from evaluator import EvaluationError, evaluate
from fraction import PRIMES
from models import EvaluateRequest, EvaluateResponse, PrimesResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/fractions", tags=["fractions"])

DEFAULT_MAX_STEPS = 256

# The step limit is injected by the app factory (see app.py).
_max_steps: int = DEFAULT_MAX_STEPS


def set_max_steps(max_steps: int) -> None:
    """Configure the per-request step limit. Called once at app startup."""
    global _max_steps
    if max_steps < 1:
        raise ValueError(f"max_steps must be >= 1, got {max_steps}")
    _max_steps = max_steps


def get_max_steps() -> int:
    return _max_steps


# ---------------------------------------------------------------------------
# Error helpers
# ---------------------------------------------------------------------------

def _evaluation_error(e: EvaluationError) -> HTTPException:
    return HTTPException(status_code=422, detail=str(e))


def _too_many_steps(count: int) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail=f"Too many steps: {count} (limit {get_max_steps()})",
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/evaluate", response_model=EvaluateResponse)
def evaluate_steps(payload: EvaluateRequest) -> EvaluateResponse:
    """Apply the steps in order and return the final value."""
    if len(payload.steps) > get_max_steps():
        raise _too_many_steps(len(payload.steps))
    try:
        return evaluate(payload)
    except EvaluationError as e:
        logger.info("Rejected evaluation: %s", e)
        raise _evaluation_error(e) from e


@router.get("/primes", response_model=PrimesResponse)
def list_primes() -> PrimesResponse:
    """The fixed primes, in exponent order."""
    return PrimesResponse(primes=list(PRIMES))
