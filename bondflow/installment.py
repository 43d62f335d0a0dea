"""
installment.py — French-Method Installment Solver
=================================================
Constant installment of an annuity-style (French) amortization:

    C = P · r / (1 − (1 + r)^−k)

  • No grace      : P = V,              k = n
  • Full grace    : P = V · (1 + r)^g,  k = n − g   (interest capitalized)
  • Partial grace : P = V,              k = n − g   (interest paid, principal intact)
"""

import math

from bondflow.terms import GraceKind, InvalidTermsError


def annuity_payment(principal: float, rate: float, n_periods: int) -> float:
    """Level payment that amortizes `principal` over `n_periods` at `rate`."""
    return principal * rate / (1.0 - (1.0 + rate) ** (-n_periods))


def constant_installment(nominal_value: float, rate: float, n_periods: int,
                         grace_kind: GraceKind = GraceKind.NONE,
                         grace_periods: int = 0,
                         min_rate: float = 1e-12) -> float:
    """
    Installment paid in every amortizing (post-grace) period.

    Parameters
    ----------
    nominal_value : Principal at issuance
    rate          : Effective rate per period
    n_periods     : Total number of installment periods
    grace_kind    : Grace treatment of the first grace_periods periods
    grace_periods : Number of grace periods
    min_rate      : Rates at or below this are rejected (no zero-rate formula)

    Returns
    -------
    Positive installment amount
    """
    grace_kind = GraceKind(grace_kind)
    g = grace_periods if grace_kind is not GraceKind.NONE else 0

    if rate <= min_rate:
        raise InvalidTermsError(f"Per-period rate {rate!r} is zero or too small to amortize")
    if n_periods < 1:
        raise InvalidTermsError(f"Need at least one installment period, got {n_periods}")
    if g >= n_periods:
        raise InvalidTermsError(
            f"Grace periods ({g}) must be fewer than installment periods ({n_periods})")

    if grace_kind is GraceKind.FULL:
        principal = nominal_value * (1.0 + rate) ** g
    else:
        principal = nominal_value

    payment = annuity_payment(principal, rate, n_periods - g)
    if not math.isfinite(payment) or payment <= 0:
        raise InvalidTermsError(f"Installment is not a positive finite amount: {payment}")
    return payment
