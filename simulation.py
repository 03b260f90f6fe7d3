"""
Amortization engine for a fixed-principal home loan.

Builds the month-by-month schedule under either amortization system
(equal amortization or equal installment), applying recurring,
one-time and FGTS extra payments, insurance and admin fees, and
tracks the appreciating property value alongside the debt.

Every call is a pure function of one immutable ``SimulationParameters``
record; the month loop (<= term months) is a plain Python loop.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

import numpy as np

import config as cfg
import rates

logger = logging.getLogger(__name__)


# ─── Data Classes ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class FGTSConfig:
    """Severance-fund wallet that can be drawn every 24 months."""

    initial_balance: float = 0.0        # wallet balance at month 0
    monthly_gross_income: float = 0.0   # deposits are 8% of this
    use_every_two_years: bool = False   # apply the whole wallet at months 24, 48, ...

    def __post_init__(self) -> None:
        for name in ("initial_balance", "monthly_gross_income"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"FGTS {name} must be a finite, non-negative number")

    @property
    def monthly_deposit(self) -> float:
        return self.monthly_gross_income * cfg.FGTS_DEPOSIT_RATE


@dataclass(frozen=True)
class SimulationParameters:
    """Complete input record for one simulation run.

    Rates are annual percentages. ``interest_rate`` is the nominal
    contract rate; the three growth rates are effective annual rates.
    Insurance rates are monthly fractions of the balance and of the
    purchase price respectively.
    """

    property_value: float                # purchase price
    down_payment: float                  # paid upfront; loan = price - down payment
    term_months: int                     # original term
    interest_rate: float                 # nominal annual %
    amortization_system: str = cfg.EQUAL_AMORTIZATION
    appreciation_rate: float = 0.0       # property, effective annual %
    inflation_rate: float = 0.0          # drives rent growth, effective annual %
    investment_rate: float = 0.0         # benchmark for the invested pot, effective annual %
    rent: float = 0.0                    # monthly rent estimate at month 1
    monthly_extra: float = 0.0           # recurring extra amortization
    one_time_extras: Mapping[int, float] = field(default_factory=dict)  # month -> amount
    strategy: str = cfg.REDUCE_TERM
    insurance_balance_rate: float = 0.0  # monthly, share of outstanding balance
    insurance_property_rate: float = 0.0 # monthly, share of purchase price
    admin_fee: float = 0.0               # fixed monthly fee
    fgts: Optional[FGTSConfig] = None

    def __post_init__(self) -> None:
        numeric = {
            "property_value": self.property_value,
            "down_payment": self.down_payment,
            "interest_rate": self.interest_rate,
            "appreciation_rate": self.appreciation_rate,
            "inflation_rate": self.inflation_rate,
            "investment_rate": self.investment_rate,
            "rent": self.rent,
            "monthly_extra": self.monthly_extra,
            "insurance_balance_rate": self.insurance_balance_rate,
            "insurance_property_rate": self.insurance_property_rate,
            "admin_fee": self.admin_fee,
        }
        for name, value in numeric.items():
            if isinstance(value, bool) or not np.isfinite(value):
                raise ValueError(f"{name} must be a finite number, got {value!r}")

        if (isinstance(self.term_months, bool)
                or not np.isfinite(self.term_months)
                or int(self.term_months) != self.term_months):
            raise ValueError(f"term_months must be a whole number, got {self.term_months!r}")
        if self.term_months < 1:
            raise ValueError("term_months must be at least 1")
        if self.property_value <= 0:
            raise ValueError("property_value must be positive")
        if self.down_payment < 0:
            raise ValueError("down_payment cannot be negative")
        if self.down_payment >= self.property_value:
            raise ValueError("down_payment must be less than property_value")
        if self.interest_rate < 0:
            raise ValueError("interest_rate cannot be negative")
        for name in ("appreciation_rate", "inflation_rate", "investment_rate"):
            if numeric[name] <= -100:
                raise ValueError(f"{name} must be greater than -100%")
        for name in ("rent", "monthly_extra", "insurance_balance_rate",
                     "insurance_property_rate", "admin_fee"):
            if numeric[name] < 0:
                raise ValueError(f"{name} cannot be negative")
        if self.amortization_system not in cfg.AMORTIZATION_SYSTEMS:
            raise ValueError(
                f"amortization_system must be one of {cfg.AMORTIZATION_SYSTEMS}, "
                f"got {self.amortization_system!r}"
            )
        if self.strategy not in cfg.PAYOFF_STRATEGIES:
            raise ValueError(
                f"strategy must be one of {cfg.PAYOFF_STRATEGIES}, got {self.strategy!r}"
            )

        extras: Dict[int, float] = {}
        for month, amount in dict(self.one_time_extras).items():
            if isinstance(month, bool) or not isinstance(month, (int, np.integer)) or month < 1:
                raise ValueError(f"one-time extra months must be positive integers, got {month!r}")
            if not np.isfinite(amount) or amount < 0:
                raise ValueError(f"one-time extra for month {month} must be finite and non-negative")
            extras[int(month)] = float(amount)

        object.__setattr__(self, "term_months", int(self.term_months))
        object.__setattr__(self, "one_time_extras", MappingProxyType(extras))

    @property
    def principal(self) -> float:
        return self.property_value - self.down_payment

    @property
    def monthly_interest_rate(self) -> float:
        return rates.monthly_nominal_rate(self.interest_rate)

    @property
    def monthly_appreciation_rate(self) -> float:
        return rates.monthly_effective_rate(self.appreciation_rate)

    @property
    def monthly_inflation_rate(self) -> float:
        return rates.monthly_effective_rate(self.inflation_rate)

    @property
    def monthly_investment_rate(self) -> float:
        return rates.monthly_effective_rate(self.investment_rate)


@dataclass(frozen=True)
class MonthlyInstallment:
    """One month of the schedule. Never modified once produced."""

    month: int                   # 1-based
    year: int                    # 1-based loan year
    initial_balance: float
    interest: float
    amortization: float          # scheduled principal
    extra_amortization: float    # cash extras + FGTS, after capping
    fgts_applied: float          # part of extra_amortization drawn from FGTS
    insurance_balance: float
    insurance_property: float
    admin_fee: float
    regular_payment: float       # interest + amortization
    total_payment: float         # regular payment + fees
    total_cash_flow: float       # total payment + extra amortization
    final_balance: float
    property_value: float        # appreciated value at month end
    net_equity: float            # property value - final balance


@dataclass(frozen=True)
class ScheduleResult:
    """A schedule plus the aggregates measured against the baseline."""

    params: SimulationParameters = field(repr=False)
    installments: Tuple[MonthlyInstallment, ...] = field(repr=False)
    total_paid: float            # sum of monthly cash flows
    total_interest: float
    total_extra: float
    total_fees: float
    baseline_interest: float     # interest with every extra removed
    interest_saved: float        # baseline interest - actual interest
    months_reduced: int
    final_property_value: float
    efficiency: float            # interest saved per unit of extra, %

    @property
    def months(self) -> int:
        return len(self.installments)

    @property
    def total_saved(self) -> float:
        return self.interest_saved

    @property
    def final_balance(self) -> float:
        return self.installments[-1].final_balance

    @property
    def payoff_month(self) -> Optional[int]:
        """Month the balance reached zero, None if the term ran out first."""
        last = self.installments[-1]
        if last.final_balance <= cfg.PAYOFF_TOLERANCE:
            return last.month
        return None

    def column(self, name: str) -> np.ndarray:
        """One installment field across the schedule as a numpy array."""
        return np.array([getattr(inst, name) for inst in self.installments], dtype=float)

    def yearly_snapshots(self) -> Dict[str, np.ndarray]:
        """End-of-year balance, property value and net equity.

        Index 0 is the starting state. Years after payoff carry a zero
        balance while the property keeps appreciating.
        """
        n_years = math.ceil(self.params.term_months / cfg.MONTHS_PER_YEAR)
        years = np.arange(n_years + 1)
        balances = self.column("final_balance")

        balance = np.empty(n_years + 1)
        balance[0] = self.params.principal
        for y in range(1, n_years + 1):
            idx = min(y * cfg.MONTHS_PER_YEAR, len(balances)) - 1
            balance[y] = balances[idx]

        appreciation = self.params.monthly_appreciation_rate
        property_value = self.params.property_value * (1 + appreciation) ** (years * cfg.MONTHS_PER_YEAR)

        return {
            "year": years,
            "balance": balance,
            "property_value": property_value,
            "net_equity": property_value - balance,
        }


# ─── Schedule Generator ──────────────────────────────────────────────

def generate_schedule(params: SimulationParameters) -> Tuple[MonthlyInstallment, ...]:
    """Run the amortization recurrence for one parameter set.

    Parameters
    ----------
    params : SimulationParameters
        Loan, fees and extra-payment configuration.

    Returns
    -------
    tuple of MonthlyInstallment
        One entry per elapsed month, ending at payoff (balance within
        ``cfg.PAYOFF_TOLERANCE`` of zero) or at the original term.
    """
    n = params.term_months
    principal = params.principal
    rate = params.monthly_interest_rate
    appreciation = params.monthly_appreciation_rate
    equal_installment = params.amortization_system == cfg.EQUAL_INSTALLMENT
    reduce_installment = params.strategy == cfg.REDUCE_INSTALLMENT

    fixed_amortization = principal / n
    fixed_payment = rates.annuity_payment(principal, rate, n)
    # Purchase price, not the appreciated value
    property_insurance = params.property_value * params.insurance_property_rate

    fgts = params.fgts
    wallet = fgts.initial_balance if fgts is not None else 0.0

    balance = principal
    property_value = params.property_value
    installments = []

    for month in range(1, n + 1):
        initial_balance = balance
        interest = initial_balance * rate

        if equal_installment:
            if reduce_installment:
                payment = rates.annuity_payment(initial_balance, rate, n - month + 1)
            else:
                payment = fixed_payment
            amortization = payment - interest
            if amortization < 0:
                amortization = 0.0
                payment = interest
        else:
            amortization = fixed_amortization
            payment = amortization + interest

        if amortization > initial_balance:
            amortization = initial_balance
            payment = amortization + interest

        balance_insurance = initial_balance * params.insurance_balance_rate
        total_payment = payment + balance_insurance + property_insurance + params.admin_fee

        # Extras fill whatever principal the scheduled amortization leaves
        room = initial_balance - amortization
        cash_extra = min(params.monthly_extra + params.one_time_extras.get(month, 0.0), room)

        fgts_applied = 0.0
        if fgts is not None:
            wallet += fgts.monthly_deposit
            if fgts.use_every_two_years and month % cfg.FGTS_USE_INTERVAL == 0:
                fgts_applied = min(wallet, room - cash_extra)
                wallet -= fgts_applied

        extra = cash_extra + fgts_applied
        balance = max(initial_balance - amortization - extra, 0.0)
        property_value *= 1 + appreciation

        installments.append(MonthlyInstallment(
            month=month,
            year=(month - 1) // cfg.MONTHS_PER_YEAR + 1,
            initial_balance=initial_balance,
            interest=interest,
            amortization=amortization,
            extra_amortization=extra,
            fgts_applied=fgts_applied,
            insurance_balance=balance_insurance,
            insurance_property=property_insurance,
            admin_fee=params.admin_fee,
            regular_payment=payment,
            total_payment=total_payment,
            total_cash_flow=total_payment + extra,
            final_balance=balance,
            property_value=property_value,
            net_equity=property_value - balance,
        ))

        if balance <= cfg.PAYOFF_TOLERANCE:
            logger.debug("Loan paid off in month %d of %d", month, n)
            break

    return tuple(installments)


# ─── Baseline Comparator ─────────────────────────────────────────────

def without_extras(params: SimulationParameters) -> SimulationParameters:
    """Same loan with every extra-payment source removed."""
    return dataclasses.replace(params, monthly_extra=0.0, one_time_extras={}, fgts=None)


def baseline_schedule(params: SimulationParameters) -> Tuple[MonthlyInstallment, ...]:
    """Reference schedule used to measure interest saved and months reduced."""
    return generate_schedule(without_extras(params))


def simulate(params: SimulationParameters) -> ScheduleResult:
    """Generate the schedule and its aggregates against the baseline."""
    installments = generate_schedule(params)
    baseline = baseline_schedule(params)

    total_interest = sum(inst.interest for inst in installments)
    total_extra = sum(inst.extra_amortization for inst in installments)
    baseline_interest = sum(inst.interest for inst in baseline)
    interest_saved = baseline_interest - total_interest
    efficiency = interest_saved / total_extra * 100 if total_extra > 0 else 0.0

    result = ScheduleResult(
        params=params,
        installments=installments,
        total_paid=sum(inst.total_cash_flow for inst in installments),
        total_interest=total_interest,
        total_extra=total_extra,
        total_fees=sum(
            inst.insurance_balance + inst.insurance_property + inst.admin_fee
            for inst in installments
        ),
        baseline_interest=baseline_interest,
        interest_saved=interest_saved,
        months_reduced=params.term_months - len(installments),
        final_property_value=installments[-1].property_value,
        efficiency=efficiency,
    )
    logger.debug(
        "Simulated %d months (%d reduced), interest saved %.2f",
        result.months, result.months_reduced, result.interest_saved,
    )
    return result


# ─── Smoke Test ──────────────────────────────────────────────────────

if __name__ == "__main__":
    print("=" * 60)
    print("Amortization Engine: Smoke Test")
    print("=" * 60)

    sac = simulate(SimulationParameters(
        property_value=200_000, down_payment=100_000,
        term_months=120, interest_rate=10.0,
    ))
    first = sac.installments[0]
    print(f"\nEqual amortization, 100k @ 10% over 120 months")
    print(f"  Month 1 amortization: {first.amortization:,.2f}")
    print(f"  Month 1 interest:     {first.interest:,.2f}")
    print(f"  Months:               {sac.months}")
    print(f"  Total interest:       {sac.total_interest:,.2f}")

    price = simulate(SimulationParameters(
        property_value=206_817.28, down_payment=50_000,
        term_months=420, interest_rate=4.5,
        amortization_system=cfg.EQUAL_INSTALLMENT,
    ))
    first = price.installments[0]
    print(f"\nEqual installment, 156,817.28 @ 4.5% over 420 months")
    print(f"  Month 1 payment:      {first.regular_payment:,.2f}")
    print(f"  Month 1 interest:     {first.interest:,.2f}")
    print(f"  Month 1 amortization: {first.amortization:,.2f}")
    print(f"  Balance after:        {first.final_balance:,.2f}")
