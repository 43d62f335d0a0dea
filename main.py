"""
main.py
-------
Command-line demo of the bond cash-flow engine: builds a bond from the
arguments, prints the French-method schedule and its analytics.

Usage
-----
# Example bond (1000 at 12 % effective, quarterly, one year):
    python main.py

# Two periods of full grace, brent yield search:
    BONDFLOW_IRR_METHOD=brent python main.py --grace full --grace-periods 2

# JSON summary only:
    python main.py --json

Environment variables
---------------------
See bondflow/config.py for the full list of supported env vars.
"""

import argparse
import json
import warnings
from dataclasses import replace

from bondflow.config import CONFIG
from bondflow.engine import compute_cash_flow
from bondflow.terms import BondTerms, InvalidTermsError
from bondflow.utils import format_currency, format_pct, get_logger
from bondflow.yield_solver import NonConvergenceWarning

log = get_logger("main", log_dir=CONFIG.log_dir or None, level=CONFIG.log_level)


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="French-method bond cash flow, TCEA/TREA and duration analytics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --nominal 5000 --rate 9 --rate-type nominal --frequency monthly
  python main.py --grace partial --grace-periods 3 --fee 25 --expense 10
""",
    )
    p.add_argument("--nominal",       type=float, default=1000.0, help="Nominal value")
    p.add_argument("--issue",         default="2024-01-01",       help="Issue date (YYYY-MM-DD)")
    p.add_argument("--maturity",      default="2025-01-01",       help="Maturity date (YYYY-MM-DD)")
    p.add_argument("--rate",          type=float, default=12.0,   help="Annual rate in percent")
    p.add_argument("--rate-type",     default="effective", choices=["nominal", "effective"])
    p.add_argument("--frequency",     default="quarterly",
                   choices=["monthly", "bimonthly", "quarterly", "semiannual", "annual"])
    p.add_argument("--fee",           type=float, default=0.0,    help="Issuance fee")
    p.add_argument("--expense",       type=float, default=0.0,    help="Issuance expenses")
    p.add_argument("--grace",         default="none", choices=["none", "full", "partial"])
    p.add_argument("--grace-periods", type=int,   default=0)
    p.add_argument("--method",        default=None, choices=["step", "brent"],
                   help="Yield search method (overrides BONDFLOW_IRR_METHOD)")
    p.add_argument("--json",          action="store_true", help="Print the summary as JSON only")
    return p.parse_args(argv)


def print_report(result) -> None:
    s = result.summary()
    print("\n" + "=" * 78)
    print(f"  BOND CASH FLOW  |  {result.bond!r}")
    print("=" * 78)

    print(f"\n  {'#':>3} {'Date':>10} {'Installment':>14} {'Interest':>12} "
          f"{'Amortization':>14} {'Balance':>12}")
    print("  " + "-" * 72)
    for row in result.rows:
        print(f"  {row.period:>3} {row.date.isoformat():>10} "
              f"{format_currency(row.installment):>14} {format_currency(row.interest):>12} "
              f"{format_currency(row.amortization):>14} {format_currency(row.balance):>12}")

    print(f"\n  Period rate       : {format_pct(result.period_rate)}")
    print(f"  Installment       : {format_currency(result.installment)}")
    print(f"  TCEA              : {format_pct(result.tcea)}")
    print(f"  TREA              : {format_pct(result.trea)}")
    print(f"  Duration          : {s['duration']:>10.4f} periods")
    print(f"  Modified duration : {s['modified_duration']:>10.4f}")
    print(f"  Convexity         : {s['convexity']:>10.4f}")
    print(f"  Max price         : {format_currency(result.max_price)}")
    print(f"  Yield converged   : {'YES' if s['converged'] else 'NO (best estimate)'}")


def main(argv=None) -> int:
    args = parse_args(argv)
    cfg = CONFIG
    if args.method:
        cfg = replace(CONFIG, solver=replace(CONFIG.solver, method=args.method))

    try:
        terms = BondTerms(
            nominal_value=args.nominal,
            issue_date=args.issue,
            maturity_date=args.maturity,
            annual_rate=args.rate,
            rate_type=args.rate_type,
            frequency=args.frequency,
            fee=args.fee,
            expense=args.expense,
            grace_kind=args.grace,
            grace_periods=args.grace_periods,
        )
        with warnings.catch_warnings():
            # already reported through the logger
            warnings.simplefilter("ignore", NonConvergenceWarning)
            result = compute_cash_flow(terms, cfg)
    except InvalidTermsError as exc:
        log.error("Invalid bond terms: %s", exc)
        return 2

    if args.json:
        print(json.dumps(result.summary(), indent=2))
    else:
        print_report(result)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
