"""
yield_solver.py — TCEA / TREA Internal-Rate-of-Return Solver
============================================================
Finds the rate `tir` that zeroes

    NPV(tir) = −B + Σ_k |CF_k| / (1 + tir)^(k / m)        k = 1 … n

where B is the base amount (nominal value for TCEA, net proceeds for
TREA) and m the number of periods per year. The estimate is then
annualized as (1 + tir)^m − 1.

Two search methods:
  • step  : fixed-step hill climb from the initial guess, moving tir by
            ±step until |NPV| < tolerance or the iteration cap is hit.
            With a 1e-4 step and 100 iterations the estimate stays within
            ±0.01 of the guess, so the result is an approximation;
            it is the default method.
  • brent : bracketed root (scipy.optimize.brentq) under the same
            iteration cap; falls back to the step estimate when the
            bracket holds no sign change.

The solver never raises on non-convergence: it returns its last estimate
flagged `converged=False` and issues a NonConvergenceWarning.
"""

import warnings
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
from scipy.optimize import brentq

from bondflow.config import CONFIG, SolverConfig
from bondflow.schedule import ScheduleRow
from bondflow.utils import get_logger

logger = get_logger(__name__, log_dir=CONFIG.log_dir or None, level=CONFIG.log_level)


class NonConvergenceWarning(RuntimeWarning):
    """The yield search exhausted its iteration budget above tolerance."""


@dataclass(frozen=True)
class YieldEstimate:
    """Outcome of one IRR search."""
    rate        : float     # tir found by the search
    annual_rate : float     # (1 + tir)^m − 1
    npv         : float     # NPV at `rate`
    iterations  : int
    converged   : bool
    method      : str


def _flows_and_exponents(rows: Sequence[ScheduleRow], n_per_year: int):
    """Absolute post-issuance installments and their year-fraction exponents."""
    flows = np.array([abs(r.installment) for r in rows if r.period > 0], dtype=float)
    periods = np.array([r.period for r in rows if r.period > 0], dtype=float)
    return flows, periods / n_per_year


def net_present_value(rate: float, base_amount: float, flows: np.ndarray,
                      exponents: np.ndarray) -> float:
    """NPV = −base + Σ flows / (1 + rate)^exponents."""
    return float(-base_amount + np.sum(flows / (1.0 + rate) ** exponents))


def _step_search(base_amount, flows, exponents, cfg: SolverConfig):
    tir = cfg.initial_guess
    npv = net_present_value(tir, base_amount, flows, exponents)
    iterations = 0
    converged = abs(npv) < cfg.tolerance

    while not converged and iterations < cfg.max_iter:
        tir += cfg.step if npv > 0 else -cfg.step
        iterations += 1
        npv = net_present_value(tir, base_amount, flows, exponents)
        converged = abs(npv) < cfg.tolerance

    return tir, npv, iterations, converged


def _brent_search(base_amount, flows, exponents, cfg: SolverConfig):
    def f(r):
        return net_present_value(r, base_amount, flows, exponents)

    try:
        root, info = brentq(f, cfg.lower_bound, cfg.upper_bound,
                            xtol=cfg.xtol, maxiter=cfg.max_iter,
                            full_output=True, disp=False)
    except ValueError:
        logger.debug("No sign change on [%.2f, %.2f]; using step search",
                     cfg.lower_bound, cfg.upper_bound)
        return None

    npv = f(root)
    return root, npv, info.iterations, bool(info.converged) and abs(npv) < cfg.tolerance


def solve_irr(rows: Sequence[ScheduleRow], base_amount: float, n_per_year: int,
              config: Optional[SolverConfig] = None, label: str = "IRR") -> YieldEstimate:
    """
    Solve the IRR of a schedule against `base_amount`.

    Parameters
    ----------
    rows        : Full schedule (period 0 is skipped)
    base_amount : Amount the discounted installments must match
    n_per_year  : Periods per year
    config      : SolverConfig (defaults to the global CONFIG.solver)
    label       : Name used in log and warning messages

    Returns
    -------
    YieldEstimate: always a usable number; check `converged` for quality
    """
    cfg = config or CONFIG.solver
    flows, exponents = _flows_and_exponents(rows, n_per_year)

    result = None
    method = cfg.method.lower()
    if method == "brent":
        result = _brent_search(base_amount, flows, exponents, cfg)
    elif method != "step":
        raise ValueError(f"Unknown IRR method: {cfg.method!r}")

    if result is None:
        method = "step"
        result = _step_search(base_amount, flows, exponents, cfg)

    tir, npv, iterations, converged = result
    annual = (1.0 + tir) ** n_per_year - 1.0

    if not converged:
        msg = (f"{label} search stopped after {iterations} iterations "
               f"with |NPV|={abs(npv):.6g} (tir={tir:.6f})")
        logger.warning(msg)
        warnings.warn(msg, NonConvergenceWarning, stacklevel=2)

    return YieldEstimate(rate=float(tir), annual_rate=float(annual), npv=npv,
                         iterations=int(iterations), converged=converged,
                         method=method)


def tcea(rows: Sequence[ScheduleRow], nominal_value: float, n_per_year: int,
         config: Optional[SolverConfig] = None) -> YieldEstimate:
    """Annual effective cost rate: IRR against the gross nominal value."""
    return solve_irr(rows, nominal_value, n_per_year, config, label="TCEA")


def trea(rows: Sequence[ScheduleRow], nominal_value: float, fee: float,
         expense: float, n_per_year: int,
         config: Optional[SolverConfig] = None) -> YieldEstimate:
    """Annual effective return rate: IRR against net proceeds (nominal − fee − expense)."""
    return solve_irr(rows, nominal_value - fee - expense, n_per_year, config,
                     label="TREA")
