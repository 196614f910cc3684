"""Tests for the FastAPI endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from api import DEFAULT_MAX_STEPS, get_max_steps, set_max_steps
from app import create_app


@pytest.fixture
def client():
    yield TestClient(create_app())
    set_max_steps(DEFAULT_MAX_STEPS)


def _half() -> dict:
    return {"prime_exponents": {"2": -1}, "numerator": 1, "denominator": 1}


def _third() -> dict:
    return {"prime_exponents": {"3": -1}, "numerator": 1, "denominator": 1}


# ---------------------------------------------------------------------------
# POST /fractions/evaluate
# ---------------------------------------------------------------------------

class TestEvaluateEndpoint:

    def test_half_plus_third(self, client):
        resp = client.post("/fractions/evaluate", json={
            "start": _half(),
            "steps": [{"op": "+", "operand": _third()}],
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["display"] == "5/6"
        assert data["steps_applied"] == 1
        assert data["result"]["numerator"] == 5
        assert data["result"]["denominator"] == 1
        assert data["result"]["prime_exponents"]["2"] == -1
        assert data["result"]["prime_exponents"]["3"] == -1

    def test_start_defaults_to_zero(self, client):
        resp = client.post("/fractions/evaluate", json={
            "steps": [{"op": "+", "operand": 1}, {"op": "*", "operand": 12},
                      {"op": "/", "operand": 4}],
        })
        assert resp.status_code == 200
        assert resp.json()["display"] == "3"

    def test_result_feeds_back_as_start(self, client):
        first = client.post("/fractions/evaluate", json={
            "steps": [{"op": "-", "operand": 7}, {"op": "/", "operand": 46}],
        }).json()
        second = client.post("/fractions/evaluate", json={
            "start": first["result"],
            "steps": [{"op": "*", "operand": 46}],
        })
        assert second.status_code == 200
        assert second.json()["display"] == "-7"

    def test_division_by_zero_422(self, client):
        resp = client.post("/fractions/evaluate", json={
            "start": _half(),
            "steps": [{"op": "*", "operand": 3}, {"op": "/", "operand": 0}],
        })
        assert resp.status_code == 422
        assert "Step 1" in resp.json()["detail"]

    def test_overflow_422(self, client):
        resp = client.post("/fractions/evaluate", json={
            "steps": [{"op": "+", "operand": 23**13}, {"op": "*", "operand": 23}],
        })
        assert resp.status_code == 422
        assert "does not fit int64" in resp.json()["detail"]

    def test_large_exponent_displayed_factored(self, client):
        resp = client.post("/fractions/evaluate", json={
            "start": {"prime_exponents": {"19": 4000}, "numerator": 1},
            "steps": [{"op": "*", "operand": 1}],
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["display"] == "1 * 19^4000"
        assert data["result"]["prime_exponents"]["19"] == 4000

    def test_exponent_overflow_with_large_operand_422(self, client):
        resp = client.post("/fractions/evaluate", json={
            "start": {"prime_exponents": {"19": 2147483000}, "numerator": 1},
            "steps": [{"op": "*", "operand": {"prime_exponents": {"19": 4000}, "numerator": 1}}],
        })
        assert resp.status_code == 422
        assert "exponent of 19" in resp.json()["detail"]

    def test_invalid_start_422(self, client):
        resp = client.post("/fractions/evaluate", json={
            "start": {"numerator": 6, "denominator": 4},
            "steps": [{"op": "+", "operand": 1}],
        })
        assert resp.status_code == 422

    def test_empty_steps_422(self, client):
        resp = client.post("/fractions/evaluate", json={"steps": []})
        assert resp.status_code == 422

    def test_unknown_op_422(self, client):
        resp = client.post("/fractions/evaluate", json={
            "steps": [{"op": "^", "operand": 2}],
        })
        assert resp.status_code == 422

    def test_step_limit(self):
        client = TestClient(create_app(max_steps=2))
        try:
            resp = client.post("/fractions/evaluate", json={
                "steps": [{"op": "+", "operand": 1}] * 3,
            })
            assert resp.status_code == 422
            assert "Too many steps" in resp.json()["detail"]
        finally:
            set_max_steps(DEFAULT_MAX_STEPS)


# ---------------------------------------------------------------------------
# GET /fractions/primes
# ---------------------------------------------------------------------------

class TestPrimesEndpoint:

    def test_list_primes(self, client):
        resp = client.get("/fractions/primes")
        assert resp.status_code == 200
        assert resp.json() == {"primes": [2, 3, 5, 7, 11, 13, 17, 19]}


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

class TestCreateApp:

    def test_max_steps_configured(self):
        create_app(max_steps=10)
        try:
            assert get_max_steps() == 10
        finally:
            set_max_steps(DEFAULT_MAX_STEPS)

    def test_invalid_max_steps(self):
        with pytest.raises(ValueError):
            create_app(max_steps=0)
