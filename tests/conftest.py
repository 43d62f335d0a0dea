"""
conftest.py
-----------
Shared fixtures: the reference one-year quarterly bond and an engine
configuration using the bracketed (brent) yield search.
"""

import os
import sys
from dataclasses import replace
from datetime import date

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from bondflow.config import CONFIG
from bondflow.terms import BondTerms, GraceKind, PaymentFrequency, RateType


@pytest.fixture
def quarterly_bond():
    """1000 at 12 % effective, quarterly, 2024-01-01 → 2025-01-01, no fees."""
    return BondTerms(
        nominal_value=1000.0,
        issue_date=date(2024, 1, 1),
        maturity_date=date(2025, 1, 1),
        annual_rate=12.0,
        rate_type=RateType.EFFECTIVE,
        frequency=PaymentFrequency.QUARTERLY,
        bond_id="BOND-Q",
    )


@pytest.fixture
def full_grace_bond(quarterly_bond):
    return replace(quarterly_bond, grace_kind=GraceKind.FULL, grace_periods=2)


@pytest.fixture
def partial_grace_bond(quarterly_bond):
    return replace(quarterly_bond, grace_kind=GraceKind.PARTIAL, grace_periods=2)


@pytest.fixture
def brent_config():
    return replace(CONFIG, solver=replace(CONFIG.solver, method="brent"))


@pytest.fixture
def step_config():
    return replace(CONFIG, solver=replace(CONFIG.solver, method="step",
                                          initial_guess=0.10, step=1e-4,
                                          tolerance=1e-4, max_iter=100))
