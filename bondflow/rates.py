"""
rates.py — Rate Normalization
=============================
Converts a stated annual rate (percent) into the effective rate per
installment period.

  nominal   : r = (j / m) / 100            (simple division by m)
  effective : r = (1 + i/100)^(1/m) − 1    (geometric de-compounding)
"""

from typing import Union

from bondflow.terms import InvalidTermsError, PaymentFrequency, RateType


def periods_per_year(frequency: Union[PaymentFrequency, str, int]) -> int:
    """Installments per year: monthly=12, bimonthly=6, quarterly=4, semiannual=2, annual=1."""
    try:
        return PaymentFrequency(frequency).periods_per_year
    except ValueError as exc:
        raise InvalidTermsError(f"Unknown payment frequency: {frequency!r}") from exc


def normalize_rate(annual_rate: float, rate_type: Union[RateType, str],
                   n_per_year: int) -> float:
    """
    Effective rate per period.

    Parameters
    ----------
    annual_rate : Stated annual rate in percent (must be > 0)
    rate_type   : RateType.NOMINAL or RateType.EFFECTIVE
    n_per_year  : Periods per year

    Returns
    -------
    Per-period effective rate as decimal
    """
    if annual_rate <= 0:
        raise InvalidTermsError(f"Annual rate must be positive, got {annual_rate}")
    if n_per_year <= 0:
        raise InvalidTermsError(f"Periods per year must be positive, got {n_per_year}")

    if RateType(rate_type) is RateType.NOMINAL:
        return (annual_rate / n_per_year) / 100.0
    return (1.0 + annual_rate / 100.0) ** (1.0 / n_per_year) - 1.0
