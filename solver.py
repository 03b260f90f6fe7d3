"""
Target-term solver: the monthly extra payment that retires the loan
within a chosen number of months.
"""

from __future__ import annotations

import dataclasses
import logging

import config as cfg
import rates
from simulation import SimulationParameters, generate_schedule

logger = logging.getLogger(__name__)


def schedule_length(params: SimulationParameters, monthly_extra: float) -> int:
    """Months to payoff when paying *monthly_extra* on top of the schedule."""
    return len(generate_schedule(dataclasses.replace(params, monthly_extra=monthly_extra)))


def solve_extra_for_target(params: SimulationParameters, target_months: int) -> float:
    """Minimum recurring extra payment that pays the loan off by *target_months*.

    Bisection over ``[0, principal]`` with a fixed number of steps; each
    step runs an independent schedule. Schedule length never increases
    with the extra amount, so the upper bound always meets the target.

    Parameters
    ----------
    params : SimulationParameters
        Loan configuration. Only ``monthly_extra`` is varied; one-time
        extras and FGTS are kept as given.
    target_months : int
        Desired payoff horizon.

    Returns
    -------
    float
        The final upper bound, or 0.0 when the target is not shorter
        than the original term.
    """
    if target_months < 1:
        raise ValueError("target_months must be at least 1")
    if target_months >= params.term_months:
        return 0.0

    low = 0.0
    high = params.principal
    for _ in range(cfg.SOLVER_ITERATIONS):
        mid = (low + high) / 2
        if schedule_length(params, mid) > target_months:
            low = mid
        else:
            high = mid

    logger.debug("Extra for %d-month payoff: %.2f (bracket %.4f)", target_months, high, high - low)
    return high


def estimate_extra_for_target(params: SimulationParameters, target_months: int) -> float:
    """Closed-form shortcut: first payment over the target term minus the
    first payment over the full term, floored at zero.

    Ignores fees and extras, so it is only a ballpark next to
    ``solve_extra_for_target``.
    """
    if target_months < 1:
        raise ValueError("target_months must be at least 1")
    if target_months >= params.term_months:
        return 0.0
    required = rates.first_payment(
        params.principal, params.interest_rate, target_months, params.amortization_system,
    )
    base = rates.first_payment(
        params.principal, params.interest_rate, params.term_months, params.amortization_system,
    )
    return max(0.0, required - base)
