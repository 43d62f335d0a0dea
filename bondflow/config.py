"""
config.py
---------
Centralised configuration for the bond cash-flow engine.
All parameters are read from environment variables with defaults that
reproduce the reference French-method calculator.
"""

import os
from dataclasses import dataclass, field


@dataclass(frozen=True)
class SolverConfig:
    """Yield solver (TCEA / TREA) parameters."""
    initial_guess: float = float(os.getenv("BONDFLOW_IRR_GUESS",    "0.10"))
    step:          float = float(os.getenv("BONDFLOW_IRR_STEP",     "0.0001"))
    tolerance:     float = float(os.getenv("BONDFLOW_IRR_TOL",      "0.0001"))
    max_iter:      int   = int(os.getenv("BONDFLOW_IRR_MAX_ITER",   "100"))
    method:        str   = os.getenv("BONDFLOW_IRR_METHOD",         "step")   # step | brent

    # Bracket for the brent method (rate per compounding unit)
    lower_bound:   float = -0.50
    upper_bound:   float = 10.0
    xtol:          float = 1e-12   # absolute bracket width; NPV scales with the nominal


@dataclass(frozen=True)
class ScheduleConfig:
    """Schedule generation and risk-metric parameters."""
    balance_floor:   float = 0.01     # balances below this are clamped to zero
    days_per_month:  float = 30.0     # term length in months = round(days / 30)
    stress_factor:   float = 0.5      # max price discounts at 50 % of the period rate
    min_period_rate: float = 1e-12    # smaller per-period rates are rejected


@dataclass(frozen=True)
class EngineConfig:
    """Master configuration aggregating all sub-configs."""
    solver:    SolverConfig   = field(default_factory=SolverConfig)
    schedule:  ScheduleConfig = field(default_factory=ScheduleConfig)

    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_dir:   str = os.getenv("BONDFLOW_LOG_DIR", "")


# Singleton instance used throughout the project
CONFIG = EngineConfig()
