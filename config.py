"""
Constants for the mortgage amortization and rent-vs-buy simulator.

All monetary values are in the loan's currency. Rates given to the
engine are annual percentages (9.5 means 9.5%) unless stated otherwise.
"""

# ── Amortization systems ─────────────────────────────────────────────
EQUAL_AMORTIZATION = "EQUAL_AMORTIZATION"   # constant principal (SAC)
EQUAL_INSTALLMENT = "EQUAL_INSTALLMENT"     # constant payment (Price / annuity)
AMORTIZATION_SYSTEMS = (EQUAL_AMORTIZATION, EQUAL_INSTALLMENT)

# ── Payoff strategies ───────────────────────────────────────────────
REDUCE_TERM = "REDUCE_TERM"                 # payment unchanged, loan ends early
REDUCE_INSTALLMENT = "REDUCE_INSTALLMENT"   # payment recomputed, term unchanged
PAYOFF_STRATEGIES = (REDUCE_TERM, REDUCE_INSTALLMENT)

# ── Rent vs buy decision ────────────────────────────────────────────
BUY = "BUY"
RENT_INVEST = "RENT_INVEST"

# ── Schedule ────────────────────────────────────────────────────────
PAYOFF_TOLERANCE = 0.01      # balance at or below this counts as paid off
MONTHS_PER_YEAR = 12

# ── FGTS wallet ─────────────────────────────────────────────────────
FGTS_DEPOSIT_RATE = 0.08     # employer deposit, share of gross income
FGTS_USE_INTERVAL = 24       # wallet may be drawn every 24 months

# ── Target-term solver ──────────────────────────────────────────────
SOLVER_ITERATIONS = 20       # fixed bisection steps, no early exit

# ── Strategy table ──────────────────────────────────────────────────
EXTRA_PAYMENT_LEVELS = [0, 250, 500, 750, 1_000, 1_500, 2_000, 3_000, 5_000]

# ── Terminal defaults ───────────────────────────────────────────────
DEFAULT_PROPERTY_VALUE = 500_000
DEFAULT_DOWN_PAYMENT = 100_000
DEFAULT_TERM_MONTHS = 420
DEFAULT_INTEREST_RATE = 9.5          # % per year, nominal
DEFAULT_APPRECIATION_RATE = 5.0      # % per year
DEFAULT_INFLATION_RATE = 4.5         # % per year
DEFAULT_INVESTMENT_RATE = 10.5       # % per year
DEFAULT_RENT = 2_000
DEFAULT_INSURANCE_BALANCE_RATE = 0.00025   # monthly, share of balance
DEFAULT_INSURANCE_PROPERTY_RATE = 0.00008  # monthly, share of purchase price
DEFAULT_ADMIN_FEE = 25.0
