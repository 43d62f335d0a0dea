"""
engine.py — Bond Cash-Flow Engine
=================================
Single entry point chaining the pipeline stages:

  BondTerms → per-period rate → constant installment → schedule
            → TCEA / TREA (yield solver) + duration family (risk metrics)
            → CashFlowResult

Every call is a pure function of its inputs: identical terms give
identical results, and a failure anywhere raises before any result is
built.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import pandas as pd

from bondflow.config import CONFIG, EngineConfig
from bondflow.installment import constant_installment
from bondflow.rates import normalize_rate
from bondflow.risk_metrics import compute_risk_metrics
from bondflow.schedule import ScheduleRow, generate_schedule, schedule_to_frame
from bondflow.terms import BondTerms, InvalidTermsError
from bondflow.utils import get_logger, timeit
from bondflow.yield_solver import YieldEstimate, tcea, trea

logger = get_logger(__name__, log_dir=CONFIG.log_dir or None, level=CONFIG.log_level)


# ==============================================================================
# Result Record
# ==============================================================================
@dataclass(frozen=True)
class CashFlowResult:
    """
    Complete cash-flow analysis of one bond.

    Rates (tcea, trea, period_rate) are decimals; duration and convexity
    are in periods; max_price is in the bond's currency.
    """
    bond              : BondTerms
    rows              : Tuple[ScheduleRow, ...]
    tcea              : float
    trea              : float
    duration          : float
    modified_duration : float
    convexity         : float
    max_price         : float

    period_rate       : float = 0.0
    periods_per_year  : int   = 0
    n_installments    : int   = 0
    installment       : float = 0.0
    tcea_estimate     : Optional[YieldEstimate] = None
    trea_estimate     : Optional[YieldEstimate] = None

    @property
    def bond_id(self) -> str:
        return self.bond.bond_id

    @property
    def converged(self) -> bool:
        """True when both yield searches met their NPV tolerance."""
        return all(e is None or e.converged
                   for e in (self.tcea_estimate, self.trea_estimate))

    def to_frame(self) -> pd.DataFrame:
        """Schedule as a DataFrame indexed by period."""
        return schedule_to_frame(self.rows)

    def summary(self) -> dict:
        """Headline metrics for dashboards and detail views."""
        return {
            "bond_id"           : self.bond.bond_id or "N/A",
            "issuer"            : self.bond.issuer or "N/A",
            "nominal_value"     : self.bond.nominal_value,
            "net_proceeds"      : self.bond.net_proceeds,
            "periods_per_year"  : self.periods_per_year,
            "n_installments"    : self.n_installments,
            "period_rate_pct"   : round(self.period_rate * 100, 6),
            "installment"       : round(self.installment, 6),
            "tcea_pct"          : round(self.tcea * 100, 6),
            "trea_pct"          : round(self.trea * 100, 6),
            "duration"          : round(self.duration, 6),
            "modified_duration" : round(self.modified_duration, 6),
            "convexity"         : round(self.convexity, 6),
            "max_price"         : round(self.max_price, 6),
            "converged"         : self.converged,
        }


# ==============================================================================
# Entry Point
# ==============================================================================
@timeit
def compute_cash_flow(bond: BondTerms,
                      config: Optional[EngineConfig] = None) -> CashFlowResult:
    """
    Generate the French-method schedule and analytics of a bond.

    Parameters
    ----------
    bond   : Validated BondTerms
    config : EngineConfig (defaults to the global CONFIG)

    Returns
    -------
    CashFlowResult

    Raises
    ------
    InvalidTermsError if the terms cannot be amortized (zero rate,
    term shorter than one period, grace covering the whole term).
    """
    cfg = config or CONFIG
    if not isinstance(bond, BondTerms):
        raise InvalidTermsError(f"Expected BondTerms, got {type(bond).__name__}")

    m = bond.periods_per_year
    n = bond.installment_count(cfg.schedule.days_per_month)
    if n < 1:
        raise InvalidTermsError(
            f"Term {bond.issue_date}→{bond.maturity_date} is shorter than one "
            f"{bond.frequency.name.lower()} period")

    rate = normalize_rate(bond.annual_rate, bond.rate_type, m)
    payment = constant_installment(bond.nominal_value, rate, n,
                                   bond.grace_kind, bond.effective_grace_periods,
                                   min_rate=cfg.schedule.min_period_rate)
    rows = generate_schedule(bond, rate, payment, n_periods=n,
                             balance_floor=cfg.schedule.balance_floor)

    cost = tcea(rows, bond.nominal_value, m, cfg.solver)
    ret  = trea(rows, bond.nominal_value, bond.fee, bond.expense, m, cfg.solver)
    risk = compute_risk_metrics(rows, rate, cfg.schedule.stress_factor)

    logger.debug("%r: n=%d r=%.6f C=%.4f TCEA=%.6f TREA=%.6f D=%.4f",
                 bond, n, rate, payment, cost.annual_rate, ret.annual_rate,
                 risk.duration)

    return CashFlowResult(
        bond=bond,
        rows=rows,
        tcea=cost.annual_rate,
        trea=ret.annual_rate,
        duration=risk.duration,
        modified_duration=risk.modified_duration,
        convexity=risk.convexity,
        max_price=risk.max_price,
        period_rate=rate,
        periods_per_year=m,
        n_installments=n,
        installment=payment,
        tcea_estimate=cost,
        trea_estimate=ret,
    )
