"""
Entry point for the mortgage amortization and rent-vs-buy simulator.

Usage:
    python main.py                          # default scenario
    python main.py --price 600000 --down 150000 --system price
    python main.py --target-years 15        # extra payment for a 15-year payoff
    python main.py --interactive            # prompt for every input
"""

import argparse
import logging
import sys

import config as cfg
from simulation import FGTSConfig, SimulationParameters


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Mortgage amortization with extra payments, compared with renting and investing",
    )
    parser.add_argument("--interactive", action="store_true",
                        help="Prompt for every input instead of reading flags")
    parser.add_argument("--price", type=float, default=cfg.DEFAULT_PROPERTY_VALUE,
                        help="Property value")
    parser.add_argument("--down", type=float, default=cfg.DEFAULT_DOWN_PAYMENT,
                        help="Down payment")
    parser.add_argument("--term", type=int, default=cfg.DEFAULT_TERM_MONTHS,
                        help="Original term in months")
    parser.add_argument("--rate", type=float, default=cfg.DEFAULT_INTEREST_RATE,
                        help="Nominal annual interest rate, %%")
    parser.add_argument("--system", choices=["sac", "price"], default="sac",
                        help="Equal amortization (sac) or equal installment (price)")
    parser.add_argument("--strategy", choices=["term", "installment"], default="term",
                        help="Whether extra payments shorten the term or lower the installment")
    parser.add_argument("--extra", type=float, default=0.0,
                        help="Recurring monthly extra payment")
    parser.add_argument("--lump", action="append", default=[], metavar="MONTH:AMOUNT",
                        help="One-time extra payment, repeatable (e.g. --lump 12:20000)")
    parser.add_argument("--appreciation", type=float, default=cfg.DEFAULT_APPRECIATION_RATE,
                        help="Property appreciation, %% per year")
    parser.add_argument("--inflation", type=float, default=cfg.DEFAULT_INFLATION_RATE,
                        help="Inflation applied to rent, %% per year")
    parser.add_argument("--investment", type=float, default=cfg.DEFAULT_INVESTMENT_RATE,
                        help="Investment benchmark return, %% per year")
    parser.add_argument("--rent", type=float, default=cfg.DEFAULT_RENT,
                        help="Monthly rent for a comparable home")
    parser.add_argument("--insurance-balance", type=float, default=cfg.DEFAULT_INSURANCE_BALANCE_RATE,
                        help="Monthly insurance as a share of the balance")
    parser.add_argument("--insurance-property", type=float, default=cfg.DEFAULT_INSURANCE_PROPERTY_RATE,
                        help="Monthly insurance as a share of the purchase price")
    parser.add_argument("--admin-fee", type=float, default=cfg.DEFAULT_ADMIN_FEE,
                        help="Fixed monthly admin fee")
    parser.add_argument("--fgts-balance", type=float, default=None,
                        help="FGTS balance today; enables drawing FGTS every 24 months")
    parser.add_argument("--fgts-income", type=float, default=0.0,
                        help="Monthly gross income feeding FGTS deposits")
    parser.add_argument("--target-years", type=int, default=None,
                        help="Solve for the monthly extra that pays off within this many years")
    parser.add_argument("--no-years", action="store_true",
                        help="Skip the year-by-year table")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Show debug logging")
    return parser


def parse_lumps(values: list) -> dict:
    """Turn ``MONTH:AMOUNT`` strings into a month -> amount mapping."""
    lumps = {}
    for raw in values:
        month, sep, amount = raw.partition(":")
        if not sep:
            raise ValueError(f"One-time extra must look like MONTH:AMOUNT, got {raw!r}")
        lumps[int(month)] = lumps.get(int(month), 0.0) + float(amount)
    return lumps


def params_from_args(args: argparse.Namespace) -> SimulationParameters:
    fgts = None
    if args.fgts_balance is not None:
        fgts = FGTSConfig(
            initial_balance=args.fgts_balance,
            monthly_gross_income=args.fgts_income,
            use_every_two_years=True,
        )

    return SimulationParameters(
        property_value=args.price,
        down_payment=args.down,
        term_months=args.term,
        interest_rate=args.rate,
        amortization_system=cfg.EQUAL_AMORTIZATION if args.system == "sac" else cfg.EQUAL_INSTALLMENT,
        appreciation_rate=args.appreciation,
        inflation_rate=args.inflation,
        investment_rate=args.investment,
        rent=args.rent,
        monthly_extra=args.extra,
        one_time_extras=parse_lumps(args.lump),
        strategy=cfg.REDUCE_TERM if args.strategy == "term" else cfg.REDUCE_INSTALLMENT,
        insurance_balance_rate=args.insurance_balance,
        insurance_property_rate=args.insurance_property,
        admin_fee=args.admin_fee,
        fgts=fgts,
    )


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    from cli import run_cli

    target = args.target_years * cfg.MONTHS_PER_YEAR if args.target_years else None
    try:
        params = None if args.interactive else params_from_args(args)
        run_cli(params, target_months=target, show_years=not args.no_years)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
