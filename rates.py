"""
Rate conversion and payment formulas for the amortization simulator.

Two conventions live side by side:

* the loan's contract rate is *nominal*, so the monthly rate is the
  annual rate divided by twelve;
* growth rates (appreciation, inflation, investment return) are
  *effective* annual rates, converted by compounding.
"""

from __future__ import annotations

import config as cfg


# ─── Rate Conversion ─────────────────────────────────────────────────

def monthly_nominal_rate(annual_pct: float) -> float:
    """Monthly rate of a nominal annual percentage (9.6 -> 0.008)."""
    return annual_pct / 100 / cfg.MONTHS_PER_YEAR


def monthly_effective_rate(annual_pct: float) -> float:
    """Monthly rate that compounds to *annual_pct* over a year."""
    return (1 + annual_pct / 100) ** (1 / cfg.MONTHS_PER_YEAR) - 1


def compound(value: float, monthly_rate: float, months: int) -> float:
    """Grow *value* by *monthly_rate* compounded for *months*."""
    if months <= 0:
        return value
    return value * (1 + monthly_rate) ** months


# ─── Payments ────────────────────────────────────────────────────────

def annuity_payment(principal: float, monthly_rate: float, months: int) -> float:
    """Constant payment that retires *principal* in *months* payments.

    ``PMT = P * i * (1+i)^n / ((1+i)^n - 1)``. A zero rate falls back
    to straight-line repayment.

    Parameters
    ----------
    principal : float
        Outstanding balance to repay.
    monthly_rate : float
        Interest per month as a fraction.
    months : int
        Number of remaining payments.

    Returns
    -------
    float
        The payment, or 0.0 when there are no payments left.
    """
    if months <= 0:
        return 0.0
    if monthly_rate == 0:
        return principal / months
    growth = (1 + monthly_rate) ** months
    return principal * monthly_rate * growth / (growth - 1)


def first_payment(
    principal: float,
    annual_pct: float,
    months: int,
    system: str = cfg.EQUAL_INSTALLMENT,
) -> float:
    """Regular payment (interest + amortization, no fees) of month 1."""
    if months <= 0:
        return 0.0
    rate = monthly_nominal_rate(annual_pct)
    if system == cfg.EQUAL_INSTALLMENT:
        return annuity_payment(principal, rate, months)
    return principal / months + principal * rate
