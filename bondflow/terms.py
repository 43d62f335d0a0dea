"""
terms.py — Bond Contract Terms
==============================
Implements:
  • Rate type, payment frequency and grace-period enumerations
  • Immutable BondTerms record with invariant validation
  • Adapter from stored bond records (snake_case or camelCase keys)
  • Term length → installment count conversion
"""

import math
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping, Optional

import pandas as pd


class InvalidTermsError(ValueError):
    """Raised when bond terms violate an invariant or cannot be amortized."""


# ==============================================================================
# Enumerations
# ==============================================================================
class RateType(Enum):
    """How the stated annual rate compounds."""
    NOMINAL   = "nominal"
    EFFECTIVE = "effective"

    @classmethod
    def _missing_(cls, value):
        return _lookup_alias(cls, value, {"efectiva": cls.EFFECTIVE})


class PaymentFrequency(Enum):
    """Installment frequency; the value is the number of periods per year."""
    MONTHLY    = 12
    BIMONTHLY  = 6
    QUARTERLY  = 4
    SEMIANNUAL = 2
    ANNUAL     = 1

    @property
    def periods_per_year(self) -> int:
        return self.value

    @property
    def months_per_period(self) -> int:
        return 12 // self.value

    @classmethod
    def _missing_(cls, value):
        return _lookup_alias(cls, value, {
            "monthly":    cls.MONTHLY,    "mensual":    cls.MONTHLY,
            "bimonthly":  cls.BIMONTHLY,  "bimestral":  cls.BIMONTHLY,
            "quarterly":  cls.QUARTERLY,  "trimestral": cls.QUARTERLY,
            "semiannual": cls.SEMIANNUAL, "semestral":  cls.SEMIANNUAL,
            "annual":     cls.ANNUAL,     "anual":      cls.ANNUAL,
        })


class GraceKind(Enum):
    """Grace-period treatment of the first periods."""
    NONE    = "none"
    FULL    = "full"        # nothing paid, interest capitalizes
    PARTIAL = "partial"     # interest-only payments

    @classmethod
    def _missing_(cls, value):
        return _lookup_alias(cls, value, {
            "ninguno": cls.NONE,
            "total":   cls.FULL,
            "parcial": cls.PARTIAL,
        })


def _lookup_alias(enum_cls, value, aliases):
    if not isinstance(value, str):
        return None
    key = value.strip().lower()
    for member in enum_cls:
        if member.value == key:
            return member
    return aliases.get(key)


def _to_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return pd.Timestamp(value).date()
    except (TypeError, ValueError) as exc:
        raise InvalidTermsError(f"Unparseable date: {value!r}") from exc


# ==============================================================================
# Bond Terms
# ==============================================================================
@dataclass(frozen=True)
class BondTerms:
    """
    Contractual terms of a French-method amortizing bond.

    Parameters
    ----------
    nominal_value  : Face amount raised at issuance (> 0)
    issue_date     : Issuance date (period 0)
    maturity_date  : Final date, strictly after issue_date
    annual_rate    : Stated annual rate in percent (5 means 5 %)
    rate_type      : RateType.NOMINAL or RateType.EFFECTIVE
    frequency      : PaymentFrequency of the installments
    fee            : Issuance fee deducted from proceeds (≥ 0)
    expense        : Issuance expenses deducted from proceeds (≥ 0)
    grace_kind     : GraceKind of the first grace_periods periods
    grace_periods  : Number of grace periods (> 0 when grace_kind ≠ NONE)
    bond_id        : Optional identifier of the stored bond
    issuer         : Optional issuer label
    """
    nominal_value : float
    issue_date    : date
    maturity_date : date
    annual_rate   : float
    rate_type     : RateType         = RateType.EFFECTIVE
    frequency     : PaymentFrequency = PaymentFrequency.MONTHLY
    fee           : float            = 0.0
    expense       : float            = 0.0
    grace_kind    : GraceKind        = GraceKind.NONE
    grace_periods : int              = 0
    bond_id       : str              = ""
    issuer        : str              = ""

    def __post_init__(self):
        """Coerce loosely-typed fields, then validate invariants."""
        # Frozen dataclass: coercions go through object.__setattr__
        try:
            object.__setattr__(self, "rate_type", RateType(self.rate_type))
            object.__setattr__(self, "frequency", PaymentFrequency(self.frequency))
            object.__setattr__(self, "grace_kind", GraceKind(self.grace_kind))
            for name in ("nominal_value", "annual_rate", "fee", "expense"):
                object.__setattr__(self, name, float(getattr(self, name)))
            grace = float(self.grace_periods)
        except (TypeError, ValueError) as exc:
            raise InvalidTermsError(str(exc)) from exc
        object.__setattr__(self, "issue_date", _to_date(self.issue_date))
        object.__setattr__(self, "maturity_date", _to_date(self.maturity_date))

        if not (self.nominal_value > 0 and math.isfinite(self.nominal_value)):
            raise InvalidTermsError(
                f"Nominal value must be positive, got {self.nominal_value}")
        if not (self.annual_rate > 0 and math.isfinite(self.annual_rate)):
            raise InvalidTermsError(
                f"Annual rate must be positive, got {self.annual_rate}")
        if self.maturity_date <= self.issue_date:
            raise InvalidTermsError(
                f"Maturity {self.maturity_date} must be after issue {self.issue_date}")
        if not (math.isfinite(self.fee) and math.isfinite(self.expense)):
            raise InvalidTermsError(
                f"Fee and expense must be finite, got {self.fee}, {self.expense}")
        if self.fee < 0 or self.expense < 0:
            raise InvalidTermsError(
                f"Fee and expense must be non-negative, got {self.fee}, {self.expense}")
        if self.fee + self.expense >= self.nominal_value:
            raise InvalidTermsError(
                "Fee plus expense must leave positive net proceeds")
        if not grace.is_integer() or grace < 0:
            raise InvalidTermsError(
                f"Grace periods must be a non-negative integer, got {self.grace_periods}")
        object.__setattr__(self, "grace_periods", int(grace))
        if self.grace_kind is not GraceKind.NONE and self.grace_periods == 0:
            raise InvalidTermsError(
                f"Grace kind '{self.grace_kind.value}' requires at least one grace period")

    # ── Derived ──────────────────────────────────────────────────────────────
    @property
    def periods_per_year(self) -> int:
        return self.frequency.periods_per_year

    @property
    def net_proceeds(self) -> float:
        """Cash actually raised at issuance: nominal − fee − expense."""
        return self.nominal_value - self.fee - self.expense

    @property
    def effective_grace_periods(self) -> int:
        """Grace periods that apply; a duration without a grace kind is ignored."""
        return 0 if self.grace_kind is GraceKind.NONE else self.grace_periods

    def total_months(self, days_per_month: float = 30.0) -> int:
        """Term length in whole months (days / 30, rounded half up)."""
        days = (self.maturity_date - self.issue_date).days
        return int(math.floor(days / days_per_month + 0.5))

    def installment_count(self, days_per_month: float = 30.0) -> int:
        """Number of installments: ceil(total months / months per period)."""
        return math.ceil(self.total_months(days_per_month)
                         / self.frequency.months_per_period)

    # ── Construction from stored records ─────────────────────────────────────
    _RECORD_KEYS = {
        "nominal_value": ("nominal_value", "valorNominal", "nominalValue"),
        "issue_date":    ("issue_date", "fechaEmision", "issueDate"),
        "maturity_date": ("maturity_date", "fechaVencimiento", "maturityDate"),
        "annual_rate":   ("annual_rate", "tasaInteres", "interestRate"),
        "rate_type":     ("rate_type", "tipoTasa", "rateType"),
        "frequency":     ("frequency", "frecuenciaPago", "paymentFrequency"),
        "fee":           ("fee", "comisiones", "fees"),
        "expense":       ("expense", "gastos", "expenses"),
        "grace_kind":    ("grace_kind", "periodoGracia", "graceKind"),
        "grace_periods": ("grace_periods", "duracionPeriodoGracia", "gracePeriods"),
        "bond_id":       ("bond_id", "id", "bondId"),
        "issuer":        ("issuer", "userRuc"),
    }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "BondTerms":
        """
        Build terms from a stored bond record.

        Accepts the engine's own snake_case keys or the storage layer's
        camelCase keys; unknown keys (timestamps, owner ids) are ignored.
        """
        kwargs = {}
        for field_name, aliases in cls._RECORD_KEYS.items():
            value = _first_present(record, aliases)
            if value is not None:
                kwargs[field_name] = value

        missing = [k for k in ("nominal_value", "issue_date", "maturity_date", "annual_rate")
                   if k not in kwargs]
        if missing:
            raise InvalidTermsError(f"Bond record missing fields: {', '.join(missing)}")

        try:
            for key in ("nominal_value", "annual_rate", "fee", "expense"):
                if key in kwargs:
                    kwargs[key] = float(kwargs[key])
            if "grace_periods" in kwargs:
                grace = float(kwargs["grace_periods"])
                if not grace.is_integer():
                    raise InvalidTermsError(
                        f"Grace periods must be a whole number, got {kwargs['grace_periods']}")
                kwargs["grace_periods"] = int(grace)
        except InvalidTermsError:
            raise
        except (TypeError, ValueError) as exc:
            raise InvalidTermsError(f"Non-numeric bond field: {exc}") from exc
        for key in ("bond_id", "issuer"):
            if key in kwargs:
                kwargs[key] = str(kwargs[key])
        return cls(**kwargs)

    def __repr__(self) -> str:
        return (f"BondTerms(id={self.bond_id or 'N/A'}, V={self.nominal_value}, "
                f"{self.annual_rate}% {self.rate_type.value}, "
                f"{self.frequency.name.lower()}, "
                f"{self.issue_date}→{self.maturity_date}, "
                f"grace={self.grace_kind.value}/{self.grace_periods})")


def _first_present(record: Mapping[str, Any], keys) -> Optional[Any]:
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return None
