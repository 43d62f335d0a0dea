"""
Bond Cash-Flow & Yield Analytics
================================

French-method (constant installment) amortization engine with grace
periods, TCEA/TREA yield search and duration-family risk measures.

Modules:
    terms         - BondTerms record, enumerations, validation errors
    rates         - Annual → per-period effective rate conversion
    installment   - Constant installment (annuity) solver
    schedule      - Period-by-period ledger generation
    yield_solver  - IRR search for TCEA and TREA
    risk_metrics  - Duration, modified duration, convexity, max price
    engine        - compute_cash_flow entry point and CashFlowResult
    config        - Environment-driven engine configuration
    utils         - Logging and formatting helpers
"""

from bondflow.config import CONFIG, EngineConfig, ScheduleConfig, SolverConfig
from bondflow.engine import CashFlowResult, compute_cash_flow
from bondflow.installment import constant_installment
from bondflow.rates import normalize_rate, periods_per_year
from bondflow.risk_metrics import RiskMetrics, compute_risk_metrics
from bondflow.schedule import (
    CashFlowDirection,
    ScheduleRow,
    generate_schedule,
    schedule_to_frame,
)
from bondflow.terms import (
    BondTerms,
    GraceKind,
    InvalidTermsError,
    PaymentFrequency,
    RateType,
)
from bondflow.yield_solver import (
    NonConvergenceWarning,
    YieldEstimate,
    solve_irr,
    tcea,
    trea,
)

__version__ = "1.0.0"
