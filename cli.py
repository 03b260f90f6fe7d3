"""
Terminal interface and shared display-data computation for the
mortgage amortization and rent-vs-buy simulator.
"""

from __future__ import annotations

import sys
from typing import Any, Dict, List, Optional

import config as cfg
from comparison import ComparisonResult, StrategyTable, compare_scenarios, strategy_table
from simulation import FGTSConfig, ScheduleResult, SimulationParameters, simulate
from solver import estimate_extra_for_target, solve_extra_for_target


# ═══════════════════════════════════════════════════════════════════
# Formatting helpers
# ═══════════════════════════════════════════════════════════════════

def fmt(val: float, decimals: int = 2) -> str:
    """Format an amount as X,XXX.XX (no currency symbol)."""
    return f"{val:,.{decimals}f}"


def pct(val: float, decimals: int = 1) -> str:
    return f"{val:.{decimals}f}%"


def months_text(months: int) -> str:
    years, rest = divmod(months, cfg.MONTHS_PER_YEAR)
    if rest == 0:
        return f"{months} months ({years} yrs)"
    return f"{months} months ({years} yrs {rest} mo)"


SYSTEM_LABELS = {
    cfg.EQUAL_AMORTIZATION: "Equal amortization (SAC)",
    cfg.EQUAL_INSTALLMENT: "Equal installment (Price)",
}
STRATEGY_LABELS = {
    cfg.REDUCE_TERM: "Reduce term",
    cfg.REDUCE_INSTALLMENT: "Reduce installment",
}
WINNER_LABELS = {
    cfg.BUY: "BUYING WINS",
    cfg.RENT_INVEST: "RENTING + INVESTING WINS",
}


# ═══════════════════════════════════════════════════════════════════
# Input collection (interactive)
# ═══════════════════════════════════════════════════════════════════

def _strip_number(s: str) -> str:
    """Remove grouping commas, spaces and percent signs."""
    return s.replace(",", "").replace(" ", "").replace("%", "")


def _prompt_float(
    label: str,
    default: float,
    min_val: float | None = None,
    max_val: float | None = None,
) -> float:
    while True:
        raw = input(f"  {label} [{default}]: ").strip()
        if not raw:
            return float(default)
        try:
            val = float(_strip_number(raw))
            if min_val is not None and val < min_val:
                print(f"    Must be at least {min_val}")
                continue
            if max_val is not None and val > max_val:
                print(f"    Must be at most {max_val}")
                continue
            return val
        except ValueError:
            print("    Invalid number, try again.")


def _prompt_int(
    label: str,
    default: int,
    min_val: int | None = None,
    max_val: int | None = None,
) -> int:
    while True:
        raw = input(f"  {label} [{default}]: ").strip()
        if not raw:
            return default
        try:
            val = int(float(_strip_number(raw)))
            if min_val is not None and val < min_val:
                print(f"    Must be at least {min_val}")
                continue
            if max_val is not None and val > max_val:
                print(f"    Must be at most {max_val}")
                continue
            return val
        except ValueError:
            print("    Invalid number, try again.")


def _prompt_choice(label: str, options: list[str], default: str) -> str:
    opts = "/".join(options)
    while True:
        raw = input(f"  {label} ({opts}) [{default}]: ").strip().lower()
        if not raw:
            return default
        if raw in options:
            return raw
        print(f"    Choose from: {opts}")


def collect_inputs() -> SimulationParameters:
    """Prompt the user for all simulation parameters."""
    print("\n  Enter your details (press Enter for defaults):\n")

    price = _prompt_float("Property value", cfg.DEFAULT_PROPERTY_VALUE, 1)
    down = _prompt_float("Down payment", cfg.DEFAULT_DOWN_PAYMENT, 0, price)
    term = _prompt_int("Term (months)", cfg.DEFAULT_TERM_MONTHS, 1, 600)
    rate = _prompt_float("Interest rate %/yr (nominal)", cfg.DEFAULT_INTEREST_RATE, 0, 100)
    system = _prompt_choice("Amortization system", ["sac", "price"], "sac")
    strategy = _prompt_choice("Extra payments reduce", ["term", "installment"], "term")
    extra = _prompt_float("Monthly extra payment", 0, 0)
    appreciation = _prompt_float("Property appreciation %/yr", cfg.DEFAULT_APPRECIATION_RATE, -50, 100)
    inflation = _prompt_float("Inflation %/yr", cfg.DEFAULT_INFLATION_RATE, -50, 100)
    investment = _prompt_float("Investment return %/yr", cfg.DEFAULT_INVESTMENT_RATE, -50, 100)
    rent = _prompt_float("Monthly rent for a similar home", cfg.DEFAULT_RENT, 0)
    use_fgts = _prompt_choice("Use FGTS every two years?", ["yes", "no"], "no")

    fgts = None
    if use_fgts == "yes":
        fgts = FGTSConfig(
            initial_balance=_prompt_float("FGTS balance today", 0, 0),
            monthly_gross_income=_prompt_float("Monthly gross income", 0, 0),
            use_every_two_years=True,
        )

    return SimulationParameters(
        property_value=price,
        down_payment=down,
        term_months=term,
        interest_rate=rate,
        amortization_system=cfg.EQUAL_AMORTIZATION if system == "sac" else cfg.EQUAL_INSTALLMENT,
        appreciation_rate=appreciation,
        inflation_rate=inflation,
        investment_rate=investment,
        rent=rent,
        monthly_extra=extra,
        strategy=cfg.REDUCE_TERM if strategy == "term" else cfg.REDUCE_INSTALLMENT,
        insurance_balance_rate=cfg.DEFAULT_INSURANCE_BALANCE_RATE,
        insurance_property_rate=cfg.DEFAULT_INSURANCE_PROPERTY_RATE,
        admin_fee=cfg.DEFAULT_ADMIN_FEE,
        fgts=fgts,
    )


# ═══════════════════════════════════════════════════════════════════
# Shared display-data computation
# ═══════════════════════════════════════════════════════════════════

def compute_display_data(
    params: SimulationParameters,
    result: ScheduleResult,
    comparison: ComparisonResult,
    table: StrategyTable,
    target_months: Optional[int] = None,
) -> Dict[str, Any]:
    """Extract every metric needed for the output sections."""
    first = result.installments[0]
    last = result.installments[-1]
    snapshots = result.yearly_snapshots()

    d: Dict[str, Any] = {
        # Inputs echo
        "property_value": params.property_value,
        "down_payment": params.down_payment,
        "principal": params.principal,
        "term_months": params.term_months,
        "interest_rate": params.interest_rate,
        "system": params.amortization_system,
        "strategy": params.strategy,
        "monthly_extra": params.monthly_extra,
        "rent": params.rent,
        # Loan
        "first_payment": first.total_payment,
        "first_regular_payment": first.regular_payment,
        "first_interest": first.interest,
        "first_amortization": first.amortization,
        "last_payment": last.total_payment,
        "months": result.months,
        "payoff_month": result.payoff_month,
        "total_paid": result.total_paid,
        "total_interest": result.total_interest,
        "total_fees": result.total_fees,
        # Savings
        "total_extra": result.total_extra,
        "fgts_used": sum(inst.fgts_applied for inst in result.installments),
        "baseline_interest": result.baseline_interest,
        "interest_saved": result.interest_saved,
        "months_reduced": result.months_reduced,
        "efficiency": result.efficiency,
        "final_property_value": result.final_property_value,
        # Rent vs buy
        "winner": comparison.decision.winner,
        "difference": comparison.decision.difference,
        "break_even_month": comparison.decision.break_even_month,
        "buy_equity": comparison.buy.final_net_equity,
        "invest_pot": comparison.invest.final_invested_amount,
        "total_rent": comparison.invest.total_rent_paid,
        "lowest_pot": float(comparison.invested_pot.min()),
        # Strategy table
        "table": table,
        # Year by year
        "snapshots": snapshots,
        # Target term
        "target_months": target_months,
        "solved_extra": None,
        "estimated_extra": None,
    }

    if target_months is not None:
        d["solved_extra"] = solve_extra_for_target(params, target_months)
        d["estimated_extra"] = estimate_extra_for_target(params, target_months)

    return d


def generate_verdict_text(d: Dict[str, Any]) -> str:
    """Build a 2-3 sentence plain-English verdict."""
    years = d["term_months"] / cfg.MONTHS_PER_YEAR
    diff = fmt(d["difference"], 0)

    if d["winner"] == cfg.BUY:
        text = (
            f"Buying comes out {diff} ahead after {years:.0f} years: the home "
            f"is worth {fmt(d['buy_equity'], 0)} debt-free, against an invested "
            f"pot of {fmt(d['invest_pot'], 0)} for the renter."
        )
    else:
        text = (
            f"Renting and investing the difference comes out {diff} ahead "
            f"after {years:.0f} years: the pot reaches {fmt(d['invest_pot'], 0)} "
            f"while the home would be worth {fmt(d['buy_equity'], 0)}."
        )

    if d["lowest_pot"] < 0:
        text += (
            " The renter's pot goes negative at some point, so the rent "
            "path assumes borrowing to cover rent."
        )
    elif d["months_reduced"] > 0:
        text += (
            f" Paying the loan off {d['months_reduced']} months early leaves "
            f"the renter drawing rent from the pot for those months."
        )
    return text


# ═══════════════════════════════════════════════════════════════════
# Box-drawing CLI output
# ═══════════════════════════════════════════════════════════════════

W = 78  # box width (characters)
H = "═"


def _box_top(title: str) -> str:
    inner = W - 2
    return (
        f"╔{H * inner}╗\n"
        f"║  {title:<{inner - 2}}║\n"
        f"╠{H * inner}╣"
    )


def _box_line(text: str = "") -> str:
    inner = W - 4
    if len(text) > inner:
        text = text[:inner]
    return f"║  {text:<{inner}}║"


def _box_row(label: str, value: str, lw: int = 38) -> str:
    return _box_line(f"{label:<{lw}}{value}")


def _box_bottom() -> str:
    return f"╚{H * (W - 2)}╝"


def _wrap(text: str) -> List[str]:
    line_len = W - 6
    rows = []
    line = ""
    for word in text.split():
        if len(line) + len(word) + 1 <= line_len:
            line = f"{line} {word}" if line else word
        else:
            rows.append(_box_line(line))
            line = word
    if line:
        rows.append(_box_line(line))
    return rows


def _print_section(title: str, rows: List[str]) -> None:
    """Print a titled box with content rows."""
    print(_box_top(title))
    for r in rows:
        print(r)
    print(_box_bottom())
    print()


# ═══════════════════════════════════════════════════════════════════
# CLI Section Printers
# ═══════════════════════════════════════════════════════════════════

def _print_loan(d: Dict[str, Any]) -> None:
    payoff = months_text(d["payoff_month"]) if d["payoff_month"] else "End of term"
    rows = [
        _box_row("Property value", fmt(d["property_value"])),
        _box_row("Down payment", fmt(d["down_payment"])),
        _box_row("Loan amount", fmt(d["principal"])),
        _box_row("Term", months_text(d["term_months"])),
        _box_row("Interest rate (nominal)", pct(d["interest_rate"], 2)),
        _box_row("System", SYSTEM_LABELS[d["system"]]),
        _box_row("Extra payments", STRATEGY_LABELS[d["strategy"]]),
        _box_line(),
        _box_row("First payment (with fees)", fmt(d["first_payment"])),
        _box_row("  Interest", fmt(d["first_interest"])),
        _box_row("  Amortization", fmt(d["first_amortization"])),
        _box_row("Last payment (with fees)", fmt(d["last_payment"])),
        _box_line(),
        _box_row("Paid off in", payoff),
        _box_row("Total paid", fmt(d["total_paid"])),
        _box_row("Total interest", fmt(d["total_interest"])),
        _box_row("Total insurance and fees", fmt(d["total_fees"])),
    ]
    _print_section("THE LOAN", rows)


def _print_savings(d: Dict[str, Any]) -> None:
    rows = [
        _box_row("Monthly extra payment", fmt(d["monthly_extra"])),
        _box_row("Total extra amortization", fmt(d["total_extra"])),
    ]
    if d["fgts_used"] > 0:
        rows.append(_box_row("  of which FGTS", fmt(d["fgts_used"])))
    rows += [
        _box_line(),
        _box_row("Interest without extras", fmt(d["baseline_interest"])),
        _box_row("Interest saved", fmt(d["interest_saved"])),
        _box_row("Months reduced", str(d["months_reduced"])),
        _box_row("Saved per 100 paid extra", fmt(d["efficiency"])),
    ]
    if d["target_months"] is not None:
        rows += [
            _box_line(),
            _box_row("Target payoff", months_text(d["target_months"])),
            _box_row("Monthly extra needed", fmt(d["solved_extra"])),
            _box_row("  Quick estimate", fmt(d["estimated_extra"])),
        ]
    _print_section("SAVINGS FROM EXTRA PAYMENTS", rows)


def _print_verdict(d: Dict[str, Any]) -> None:
    rows = [
        _box_row("Winner", WINNER_LABELS[d["winner"]]),
        _box_row("Advantage", fmt(d["difference"])),
        _box_line(),
        _box_row("Home value at horizon", fmt(d["buy_equity"])),
        _box_row("Invested pot at horizon", fmt(d["invest_pot"])),
        _box_row("Total rent paid", fmt(d["total_rent"])),
        _box_row("Break-even month", "not computed"),
        _box_line(),
    ]
    rows += _wrap(generate_verdict_text(d))
    _print_section("RENT VS BUY", rows)


def _print_table(d: Dict[str, Any]) -> None:
    table: StrategyTable = d["table"]

    h1 = f"{'Extra':>9}  {'Months':>6}  {'Saved':>12}  {'Eff.':>7}  {'Winner':>11}  {'By':>12}"
    rows = [_box_line(h1), _box_line("─" * (W - 6))]

    for r in table.rows:
        marker = " <<" if r.monthly_extra == table.buy_wins_from else ""
        line = (
            f"{fmt(r.monthly_extra, 0):>9}  "
            f"{r.months:>6}  "
            f"{fmt(r.interest_saved, 0):>12}  "
            f"{pct(r.efficiency, 0):>7}  "
            f"{r.winner:>11}  "
            f"{fmt(r.difference, 0):>12}"
            f"{marker}"
        )
        rows.append(_box_line(line))

    rows.append(_box_line())
    if table.buy_wins_from is not None:
        rows.append(_box_line(
            f"Buying wins from {fmt(table.buy_wins_from, 0)}/mo extra upwards."
        ))
    else:
        rows.append(_box_line("Renting and investing wins at every level tested."))

    _print_section("WHAT EXTRA PAYMENT IS WORTHWHILE?", rows)


def _print_years(d: Dict[str, Any]) -> None:
    snap = d["snapshots"]
    h1 = f"{'Year':>4}  {'Balance':>16}  {'Property':>16}  {'Net equity':>16}"
    rows = [_box_line(h1), _box_line("─" * (W - 6))]
    for i in range(len(snap["year"])):
        rows.append(_box_line(
            f"{int(snap['year'][i]):>4}  "
            f"{fmt(snap['balance'][i]):>16}  "
            f"{fmt(snap['property_value'][i]):>16}  "
            f"{fmt(snap['net_equity'][i]):>16}"
        ))
    _print_section("YEAR BY YEAR", rows)


# ═══════════════════════════════════════════════════════════════════
# Main CLI entry point
# ═══════════════════════════════════════════════════════════════════

def run_cli(
    params: Optional[SimulationParameters] = None,
    target_months: Optional[int] = None,
    show_years: bool = True,
) -> Dict[str, Any]:
    """Run the full CLI workflow. Prompts for inputs when *params* is None."""
    # Ensure box-drawing characters render on Windows
    try:
        sys.stdout.reconfigure(encoding="utf-8")
    except (AttributeError, OSError):
        pass
    print()
    print("=" * W)
    print("  Mortgage Amortization: Extra Payments and Rent vs Buy")
    print("=" * W)

    if params is None:
        params = collect_inputs()

    result = simulate(params)
    comparison = compare_scenarios(params, result.installments)
    table = strategy_table(params)

    d = compute_display_data(params, result, comparison, table, target_months)

    print()
    _print_loan(d)
    _print_savings(d)
    _print_verdict(d)
    _print_table(d)
    if show_years:
        _print_years(d)
    return d
