"""
schedule.py — Amortization Schedule Generator
=============================================
Builds the period-by-period ledger of a French-method bond:

  period 0   : net proceeds received at issuance (inflow)
  periods 1… : installments paid by the issuer (outflows, stored negative)

The running balance is carried as the accumulator of a fold over the
periods, so every row is a pure function of the previous balance.

Row arithmetic for period k with balance B and rate r:

    interest      = B · r
    full grace    : paid 0,          B ← B + interest
    partial grace : paid interest,   B unchanged
    amortizing    : paid C,          B ← B − (C − interest)
"""

from dataclasses import dataclass, asdict
from datetime import date
from enum import Enum
from functools import reduce
from typing import List, Optional, Sequence, Tuple

import pandas as pd

from bondflow.terms import BondTerms, GraceKind


class CashFlowDirection(Enum):
    """Sign convention of a ledger row, seen from the issuer."""
    INFLOW  = "inflow"
    OUTFLOW = "outflow"


@dataclass(frozen=True)
class ScheduleRow:
    """
    One ledger row.

    installment, interest and amortization carry their sign: positive for
    the period-0 inflow, negative (or zero) for every later outflow.
    """
    period       : int
    date         : date
    installment  : float
    interest     : float
    amortization : float
    balance      : float
    direction    : CashFlowDirection
    grace        : bool = False


SCHEDULE_COLUMNS = ["period", "date", "installment", "interest",
                    "amortization", "balance", "direction", "grace"]


def _outflow(amount: float) -> float:
    # avoid -0.0 for periods with nothing paid
    return -amount if amount else 0.0


def payment_date(issue_date: date, period: int, months_per_period: int) -> date:
    """Calendar date of `period`, anchored on the issue date (month-end clamped)."""
    ts = pd.Timestamp(issue_date) + pd.DateOffset(months=period * months_per_period)
    return ts.date()


def issuance_row(terms: BondTerms) -> ScheduleRow:
    """Period-0 row: net proceeds inflow, full nominal outstanding."""
    return ScheduleRow(
        period=0,
        date=terms.issue_date,
        installment=terms.net_proceeds,
        interest=0.0,
        amortization=0.0,
        balance=terms.nominal_value,
        direction=CashFlowDirection.INFLOW,
    )


def generate_schedule(terms: BondTerms, rate: float, installment: float,
                      n_periods: Optional[int] = None,
                      balance_floor: float = 0.01) -> Tuple[ScheduleRow, ...]:
    """
    Generate the full schedule (n + 1 rows).

    Parameters
    ----------
    terms         : Bond terms
    rate          : Effective rate per period
    installment   : Constant installment of the amortizing periods
    n_periods     : Installment count (derived from the terms when None)
    balance_floor : Balances below this are clamped to zero

    Returns
    -------
    Tuple of ScheduleRow ordered by period
    """
    if n_periods is None:
        n_periods = terms.installment_count()

    grace_kind = terms.grace_kind
    g = terms.effective_grace_periods
    step_months = terms.frequency.months_per_period

    def advance(state, period):
        rows, balance = state
        interest = balance * rate
        in_grace = period <= g

        if in_grace and grace_kind is GraceKind.FULL:
            paid, amortization = 0.0, 0.0
            balance = balance + interest
        elif in_grace and grace_kind is GraceKind.PARTIAL:
            paid, amortization = interest, 0.0
        else:
            paid = installment
            amortization = installment - interest
            balance = balance - amortization

        if balance < balance_floor:
            balance = 0.0

        row = ScheduleRow(
            period=period,
            date=payment_date(terms.issue_date, period, step_months),
            installment=_outflow(paid),
            interest=_outflow(interest),
            amortization=_outflow(amortization),
            balance=balance,
            direction=CashFlowDirection.OUTFLOW,
            grace=in_grace,
        )
        return rows + (row,), balance

    rows, _ = reduce(advance, range(1, n_periods + 1),
                     ((issuance_row(terms),), terms.nominal_value))
    return rows


def schedule_to_frame(rows: Sequence[ScheduleRow]) -> pd.DataFrame:
    """Schedule as a DataFrame indexed by period (direction as its string value)."""
    records: List[dict] = []
    for row in rows:
        rec = asdict(row)
        rec["direction"] = row.direction.value
        records.append(rec)
    df = pd.DataFrame.from_records(records, columns=SCHEDULE_COLUMNS)
    return df.set_index("period")
