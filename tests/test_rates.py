"""
test_rates.py — Unit Tests for Rate Normalization & Installment Solver
======================================================================
Tests cover:
  • Nominal vs effective per-period conversion
  • Frequency → periods-per-year mapping
  • French-method installment with and without grace
  • Degenerate inputs (zero rate, grace covering the term)
"""

import pytest
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bondflow.installment import annuity_payment, constant_installment
from bondflow.rates import normalize_rate, periods_per_year
from bondflow.terms import GraceKind, InvalidTermsError, PaymentFrequency, RateType


class TestRateNormalizer:

    @pytest.mark.parametrize("freq,expected", [
        ("monthly", 12), ("bimonthly", 6), ("quarterly", 4),
        ("semiannual", 2), ("annual", 1), (PaymentFrequency.QUARTERLY, 4),
        ("mensual", 12), ("semestral", 2),
    ])
    def test_periods_per_year(self, freq, expected):
        assert periods_per_year(freq) == expected

    def test_unknown_frequency(self):
        with pytest.raises(InvalidTermsError):
            periods_per_year("fortnightly")

    def test_nominal_divides_by_periods(self):
        """12 % nominal monthly → 1 % per month."""
        assert normalize_rate(12.0, RateType.NOMINAL, 12) == pytest.approx(0.01)

    def test_effective_quarterly(self):
        """12 % effective annual → 1.12^(1/4) − 1 per quarter."""
        r = normalize_rate(12.0, RateType.EFFECTIVE, 4)
        assert r == pytest.approx(0.0287373, abs=1e-7)
        assert (1 + r) ** 4 == pytest.approx(1.12)

    def test_effective_annual_is_identity(self):
        assert normalize_rate(7.5, "effective", 1) == pytest.approx(0.075)

    def test_effective_below_nominal_split(self):
        """De-compounding an effective rate yields less than a simple split."""
        assert normalize_rate(10.0, "effective", 12) < normalize_rate(10.0, "nominal", 12)

    @pytest.mark.parametrize("rate", [0.0, -3.0])
    def test_non_positive_rate_rejected(self, rate):
        with pytest.raises(InvalidTermsError):
            normalize_rate(rate, RateType.EFFECTIVE, 4)


class TestInstallmentSolver:

    def setup_method(self):
        self.r = 1.12 ** 0.25 - 1.0

    def test_no_grace_annuity(self):
        c = constant_installment(1000.0, self.r, 4)
        assert c == pytest.approx(268.215, abs=0.01)

    def test_annuity_present_value_matches_principal(self):
        c = constant_installment(1000.0, self.r, 4)
        pv = sum(c / (1 + self.r) ** k for k in range(1, 5))
        assert pv == pytest.approx(1000.0)

    def test_full_grace_capitalizes(self):
        c_full = constant_installment(1000.0, self.r, 4, GraceKind.FULL, 2)
        expected = annuity_payment(1000.0 * (1 + self.r) ** 2, self.r, 2)
        assert c_full == pytest.approx(expected)
        assert c_full > constant_installment(1000.0, self.r, 4)

    def test_partial_grace_amortizes_remaining_periods(self):
        c_partial = constant_installment(1000.0, self.r, 4, GraceKind.PARTIAL, 2)
        assert c_partial == pytest.approx(annuity_payment(1000.0, self.r, 2))
        assert c_partial < constant_installment(1000.0, self.r, 4, GraceKind.FULL, 2)

    def test_grace_duration_ignored_without_kind(self):
        assert constant_installment(1000.0, self.r, 4, GraceKind.NONE, 3) == \
            pytest.approx(constant_installment(1000.0, self.r, 4))

    def test_zero_rate_rejected(self):
        with pytest.raises(InvalidTermsError):
            constant_installment(1000.0, 0.0, 12)

    def test_near_zero_rate_rejected(self):
        with pytest.raises(InvalidTermsError):
            constant_installment(1000.0, 1e-15, 12)

    @pytest.mark.parametrize("kind", [GraceKind.FULL, GraceKind.PARTIAL])
    def test_grace_covering_term_rejected(self, kind):
        with pytest.raises(InvalidTermsError):
            constant_installment(1000.0, self.r, 4, kind, 4)

    def test_zero_periods_rejected(self):
        with pytest.raises(InvalidTermsError):
            constant_installment(1000.0, self.r, 0)
