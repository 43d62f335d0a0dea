"""
test_engine.py — Integration Tests for compute_cash_flow
========================================================
Tests cover:
  • Reference scenario (1000, 12 % effective, quarterly, one year)
  • Full-grace scenario ("total" grace, two periods)
  • Cross-checked invariants over a grid of realistic bonds
  • Idempotence, all-or-nothing failure, summary and DataFrame export
  • Command-line demo
"""

import json
import warnings
import pytest
import sys
import os
from dataclasses import replace
from datetime import date
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bondflow.engine import CashFlowResult, compute_cash_flow
from bondflow.terms import BondTerms, GraceKind, InvalidTermsError
from bondflow.yield_solver import NonConvergenceWarning

import main as cli


class TestReferenceScenario:

    def test_schedule_and_rate(self, quarterly_bond, brent_config):
        res = compute_cash_flow(quarterly_bond, brent_config)
        assert res.periods_per_year == 4
        assert res.n_installments == 4
        assert len(res.rows) == 5
        assert res.period_rate == pytest.approx(0.0287373, abs=1e-7)
        assert res.installment == pytest.approx(268.215, abs=0.01)
        assert res.rows[-1].balance == pytest.approx(0.0, abs=0.01)
        assert res.rows[0].installment == pytest.approx(1000.0)

    def test_brent_yields(self, quarterly_bond, brent_config):
        res = compute_cash_flow(quarterly_bond, brent_config)
        assert res.converged
        assert res.tcea_estimate.rate == pytest.approx(0.12, abs=1e-6)
        assert res.tcea == pytest.approx(1.12 ** 4 - 1, abs=1e-5)
        assert res.trea == res.tcea          # no fees

    def test_step_yields_are_best_effort(self, quarterly_bond, step_config):
        with pytest.warns(NonConvergenceWarning):
            res = compute_cash_flow(quarterly_bond, step_config)
        assert not res.converged
        assert res.tcea == pytest.approx(1.11 ** 4 - 1, abs=1e-8)
        assert res.summary()["converged"] is False

    def test_risk_metrics(self, quarterly_bond, brent_config):
        res = compute_cash_flow(quarterly_bond, brent_config)
        assert 0 < res.modified_duration < res.duration < 4
        assert res.modified_duration == pytest.approx(res.duration / (1 + res.period_rate))
        assert res.convexity > 0
        # level annuity PV at r equals the nominal; half the rate prices higher
        assert res.max_price > quarterly_bond.nominal_value

    def test_bond_reference(self, quarterly_bond, brent_config):
        res = compute_cash_flow(quarterly_bond, brent_config)
        assert res.bond is quarterly_bond
        assert res.bond_id == "BOND-Q"


class TestGraceScenario:

    def test_full_grace_from_record_vocabulary(self, quarterly_bond, brent_config):
        bond = replace(quarterly_bond, grace_kind="total", grace_periods=2)
        plain = compute_cash_flow(quarterly_bond, brent_config)
        res = compute_cash_flow(bond, brent_config)

        assert res.rows[1].installment == 0.0
        assert res.rows[2].installment == 0.0
        assert res.rows[1].balance > res.rows[0].balance
        assert res.rows[2].balance > res.rows[1].balance
        assert abs(res.rows[3].installment) > abs(plain.rows[3].installment)
        assert abs(res.rows[4].installment) > abs(plain.rows[4].installment)
        assert res.rows[-1].balance == pytest.approx(0.0, abs=0.01)

    def test_full_grace_pushes_duration_out(self, quarterly_bond, full_grace_bond, brent_config):
        plain = compute_cash_flow(quarterly_bond, brent_config)
        graced = compute_cash_flow(full_grace_bond, brent_config)
        assert graced.duration > plain.duration

    def test_grace_covering_term_rejected(self, quarterly_bond, brent_config):
        bond = replace(quarterly_bond, grace_kind=GraceKind.FULL, grace_periods=4)
        with pytest.raises(InvalidTermsError):
            compute_cash_flow(bond, brent_config)


BOND_GRID = [
    dict(annual_rate=8.0,  rate_type="nominal",   frequency="monthly",
         maturity_date=date(2029, 1, 1)),
    dict(annual_rate=6.5,  rate_type="effective", frequency="bimonthly",
         maturity_date=date(2027, 1, 1), fee=10.0, expense=5.0),
    dict(annual_rate=9.0,  rate_type="effective", frequency="semiannual",
         maturity_date=date(2034, 1, 1), grace_kind="partial", grace_periods=2),
    dict(annual_rate=11.0, rate_type="nominal",   frequency="annual",
         maturity_date=date(2030, 1, 1), grace_kind="full", grace_periods=1,
         fee=25.0),
    dict(annual_rate=4.0,  rate_type="effective", frequency="quarterly",
         maturity_date=date(2026, 7, 1), grace_kind="full", grace_periods=3,
         expense=3.0),
]


@pytest.mark.parametrize("overrides", BOND_GRID)
class TestInvariants:

    def _result(self, brent_config, overrides):
        base = dict(nominal_value=5000.0, issue_date=date(2024, 1, 1))
        base.update(overrides)
        return compute_cash_flow(BondTerms(**base), brent_config)

    def test_length_and_conservation(self, brent_config, overrides):
        res = self._result(brent_config, overrides)
        assert len(res.rows) == res.bond.installment_count() + 1
        assert res.rows[-1].balance == pytest.approx(0.0, abs=0.01)
        assert res.rows[0].installment == pytest.approx(res.bond.net_proceeds)

    def test_amortization_identity(self, brent_config, overrides):
        res = self._result(brent_config, overrides)
        g = res.bond.effective_grace_periods
        for row in res.rows[g + 1:]:
            assert abs(row.amortization) + abs(row.interest) == pytest.approx(res.installment)

    def test_balance_non_increasing_after_grace(self, brent_config, overrides):
        res = self._result(brent_config, overrides)
        g = res.bond.effective_grace_periods
        balances = [row.balance for row in res.rows[g:]]
        assert all(b1 <= b0 for b0, b1 in zip(balances, balances[1:]))

    def test_trea_not_below_tcea(self, brent_config, overrides):
        res = self._result(brent_config, overrides)
        assert res.trea >= res.tcea

    def test_idempotent(self, brent_config, overrides):
        assert self._result(brent_config, overrides) == self._result(brent_config, overrides)


class TestFailureModes:

    def test_term_shorter_than_period(self, quarterly_bond, brent_config):
        bond = replace(quarterly_bond, maturity_date=date(2024, 1, 10))
        with pytest.raises(InvalidTermsError):
            compute_cash_flow(bond, brent_config)

    def test_non_terms_input_rejected(self, brent_config):
        with pytest.raises(InvalidTermsError):
            compute_cash_flow({"valorNominal": 1000}, brent_config)

    def test_default_config_runs(self, quarterly_bond):
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", NonConvergenceWarning)
            res = compute_cash_flow(quarterly_bond)
        assert isinstance(res, CashFlowResult)


class TestExports:

    def test_summary_keys(self, quarterly_bond, brent_config):
        s = compute_cash_flow(quarterly_bond, brent_config).summary()
        for key in ("bond_id", "tcea_pct", "trea_pct", "duration",
                    "modified_duration", "convexity", "max_price", "n_installments"):
            assert key in s
        assert s["n_installments"] == 4
        json.dumps(s)

    def test_to_frame(self, quarterly_bond, brent_config):
        df = compute_cash_flow(quarterly_bond, brent_config).to_frame()
        assert len(df) == 5
        assert df.loc[0, "installment"] == pytest.approx(1000.0)
        assert (df.loc[1:, "installment"] < 0).all()


class TestCommandLine:

    def test_json_summary(self, capsys):
        assert cli.main(["--json", "--method", "brent"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out["n_installments"] == 4
        assert out["converged"] is True

    def test_table_report(self, capsys):
        assert cli.main(["--grace", "full", "--grace-periods", "2"]) == 0
        out = capsys.readouterr().out
        assert "TCEA" in out
        assert "2025-01-01" in out

    def test_invalid_terms_exit_code(self):
        assert cli.main(["--rate", "0"]) == 2
