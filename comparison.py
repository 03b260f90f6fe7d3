"""
Rent-vs-buy opportunity-cost comparison.

The household is assumed to spend exactly the buy scenario's monthly
cash flow either way. Buying sends it to the bank; renting pays rent
out of it and invests the remainder, starting from the down payment
kept invested. Once the mortgage is retired the budget drops to zero
and rent is drawn from the invested pot.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

import config as cfg
import rates
from simulation import MonthlyInstallment, SimulationParameters, generate_schedule, simulate

logger = logging.getLogger(__name__)


# ─── Data Classes ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class BuyScenario:
    total_paid: float                  # every cash flow over the loan's life
    final_net_equity: float            # property value at the horizon, debt retired
    installments: Tuple[MonthlyInstallment, ...] = field(repr=False)


@dataclass(frozen=True)
class InvestScenario:
    total_rent_paid: float
    final_invested_amount: float

    @property
    def net_equity(self) -> float:
        return self.final_invested_amount


@dataclass(frozen=True)
class Decision:
    winner: str                        # cfg.BUY or cfg.RENT_INVEST
    difference: float                  # absolute gap between the two outcomes
    break_even_month: Optional[int] = None  # not computed


@dataclass(frozen=True, eq=False)
class ComparisonResult:
    """Outcome of both paths over the original term."""

    buy: BuyScenario
    invest: InvestScenario
    decision: Decision

    # ── Monthly trajectories: shape (term_months,), index m-1 = month m ──
    invested_pot: np.ndarray = field(repr=False)
    rent_paid: np.ndarray = field(repr=False)


# ─── Opportunity-Cost Comparator ─────────────────────────────────────

def compare_scenarios(
    params: SimulationParameters,
    schedule: Optional[Sequence[MonthlyInstallment]] = None,
) -> ComparisonResult:
    """Compare buying against renting and investing the difference.

    Parameters
    ----------
    params : SimulationParameters
        The same record that produced *schedule*.
    schedule : sequence of MonthlyInstallment, optional
        The buy scenario. Generated from *params* when omitted.

    Returns
    -------
    ComparisonResult
        Both scenarios and the decision. BUY wins only when the final
        property value strictly exceeds the final invested pot.
    """
    if schedule is None:
        schedule = generate_schedule(params)
    schedule = tuple(schedule)
    if not schedule:
        raise ValueError("buy schedule is empty")

    horizon = params.term_months
    investment_rate = params.monthly_investment_rate
    rent_growth = params.monthly_inflation_rate

    pot = params.down_payment
    rent = params.rent
    invested_pot = np.empty(horizon)
    rent_paid = np.empty(horizon)

    for m in range(1, horizon + 1):
        pot *= 1 + investment_rate
        budget = schedule[m - 1].total_cash_flow if m <= len(schedule) else 0.0
        # Negative when rent exceeds the budget: drawn from the pot
        pot += budget - rent
        invested_pot[m - 1] = pot
        rent_paid[m - 1] = rent
        rent *= 1 + rent_growth

    # The property keeps appreciating after payoff
    last = schedule[-1]
    final_property = rates.compound(
        last.property_value, params.monthly_appreciation_rate, horizon - last.month,
    )

    if final_property > pot:
        winner = cfg.BUY
    else:
        winner = cfg.RENT_INVEST
    difference = abs(final_property - pot)
    logger.debug(
        "Rent vs buy over %d months: property %.2f, pot %.2f -> %s",
        horizon, final_property, pot, winner,
    )

    return ComparisonResult(
        buy=BuyScenario(
            total_paid=sum(inst.total_cash_flow for inst in schedule),
            final_net_equity=final_property,
            installments=schedule,
        ),
        invest=InvestScenario(
            total_rent_paid=float(rent_paid.sum()),
            final_invested_amount=pot,
        ),
        decision=Decision(winner=winner, difference=difference),
        invested_pot=invested_pot,
        rent_paid=rent_paid,
    )


# ─── Strategy Table ──────────────────────────────────────────────────

@dataclass
class StrategyRow:
    """One row of the extra-payment strategy table."""

    monthly_extra: float
    months: int
    months_reduced: int
    interest_saved: float
    efficiency: float          # interest saved per unit of extra, %
    winner: str                # cfg.BUY or cfg.RENT_INVEST
    difference: float          # winner's margin


@dataclass
class StrategyTable:
    rows: list[StrategyRow]
    buy_wins_from: Optional[float]   # lowest level where buying wins, None if never


def strategy_table(
    params: SimulationParameters,
    levels: Optional[Iterable[float]] = None,
) -> StrategyTable:
    """Simulate and compare each monthly extra-payment level.

    ``params.monthly_extra`` is overridden per level; everything else,
    one-time extras and FGTS included, is kept.
    """
    if levels is None:
        levels = cfg.EXTRA_PAYMENT_LEVELS

    rows: list[StrategyRow] = []
    buy_wins_from: Optional[float] = None

    for level in levels:
        p = dataclasses.replace(params, monthly_extra=float(level))
        res = simulate(p)
        cmp = compare_scenarios(p, res.installments)

        rows.append(StrategyRow(
            monthly_extra=float(level),
            months=res.months,
            months_reduced=res.months_reduced,
            interest_saved=res.interest_saved,
            efficiency=res.efficiency,
            winner=cmp.decision.winner,
            difference=cmp.decision.difference,
        ))

        if buy_wins_from is None and cmp.decision.winner == cfg.BUY:
            buy_wins_from = float(level)

    return StrategyTable(rows=rows, buy_wins_from=buy_wins_from)
