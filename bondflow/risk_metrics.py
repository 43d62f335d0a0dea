"""
risk_metrics.py — Duration, Convexity & Maximum Price
=====================================================
Weighted sums over the post-issuance installments of a schedule, using
absolute installment amounts |CF_k| and the per-period effective rate r:

    w_k        = |CF_k| / Σ|CF|
    D          = Σ k · w_k · (1 + r)^−k
    D_mod      = D / (1 + r)
    C          = Σ k(k + 1) · w_k · (1 + r)^−k  /  (1 + r)^2
    P_max      = Σ |CF_k| · (1 + s·r)^−k          (s = 0.5 stress factor)

All measures are expressed in periods (not years).
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from bondflow.schedule import ScheduleRow
from bondflow.terms import InvalidTermsError


@dataclass(frozen=True)
class RiskMetrics:
    duration          : float
    modified_duration : float
    convexity         : float
    max_price         : float


def compute_risk_metrics(rows: Sequence[ScheduleRow], rate: float,
                         stress_factor: float = 0.5) -> RiskMetrics:
    """
    Duration family and theoretical maximum price of a schedule.

    Parameters
    ----------
    rows          : Full schedule (period 0 is skipped)
    rate          : Effective rate per period
    stress_factor : Fraction of `rate` used to discount the maximum price

    Returns
    -------
    RiskMetrics
    """
    flows = np.array([abs(r.installment) for r in rows if r.period > 0], dtype=float)
    total_flow = float(flows.sum())
    if total_flow <= 0:
        raise InvalidTermsError("Schedule has no post-issuance cash flow")

    k = np.arange(1, len(flows) + 1, dtype=float)
    weights  = flows / total_flow
    discount = (1.0 + rate) ** (-k)

    duration  = float(np.sum(k * weights * discount))
    modified  = duration / (1.0 + rate)
    convexity = float(np.sum(k * (k + 1.0) * weights * discount)) / (1.0 + rate) ** 2
    max_price = float(np.sum(flows * (1.0 + stress_factor * rate) ** (-k)))

    return RiskMetrics(duration=duration, modified_duration=modified,
                       convexity=convexity, max_price=max_price)
