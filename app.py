"""Application factory and entry point.

Run with:
    uvicorn app:app --reload
"""

from __future__ import annotations

from fastapi import FastAPI

from api import DEFAULT_MAX_STEPS, router, set_max_steps


def create_app(max_steps: int = DEFAULT_MAX_STEPS) -> FastAPI:
    """Build and return the FastAPI application.

    `max_steps` caps how many steps a single evaluation may carry.
    """
    set_max_steps(max_steps)

    app = FastAPI(
        title="Factored Fraction API",
        description=(
            "Exact rational arithmetic for calculators. A value is kept as "
            "exponents of the primes 2..19 plus a residual fraction in lowest "
            "terms; evaluations fold a sequence of multiply, divide, add and "
            "subtract steps into a running value."
        ),
        version="0.1.0",
    )
    app.include_router(router)
    return app


# Default app instance for `uvicorn app:app`
app = create_app()
