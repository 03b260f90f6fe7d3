import math

import pytest

import config as cfg
from simulation import (
    FGTSConfig,
    SimulationParameters,
    baseline_schedule,
    generate_schedule,
    simulate,
    without_extras,
)


def make_params(**overrides):
    base = dict(
        property_value=200_000,
        down_payment=100_000,
        term_months=120,
        interest_rate=10.0,
    )
    base.update(overrides)
    return SimulationParameters(**base)


VARIANTS = [
    (cfg.EQUAL_AMORTIZATION, cfg.REDUCE_TERM),
    (cfg.EQUAL_AMORTIZATION, cfg.REDUCE_INSTALLMENT),
    (cfg.EQUAL_INSTALLMENT, cfg.REDUCE_TERM),
    (cfg.EQUAL_INSTALLMENT, cfg.REDUCE_INSTALLMENT),
]


# ─── Known scenarios ─────────────────────────────────────────────────

def test_equal_amortization_without_extras():
    schedule = generate_schedule(make_params())

    assert len(schedule) == 120
    assert schedule[0].interest == pytest.approx(833.33, abs=0.01)
    for inst in schedule:
        assert inst.amortization == pytest.approx(833.33, abs=0.01)
    assert schedule[-1].final_balance == pytest.approx(0.0, abs=0.01)
    # Payment falls as interest falls
    assert schedule[-1].regular_payment < schedule[0].regular_payment


def test_equal_installment_first_month():
    params = make_params(
        property_value=206_817.28,
        down_payment=50_000,
        term_months=420,
        interest_rate=4.5,
        amortization_system=cfg.EQUAL_INSTALLMENT,
    )
    first = generate_schedule(params)[0]

    assert params.principal == pytest.approx(156_817.28)
    assert first.regular_payment == pytest.approx(742.14, abs=0.02)
    assert first.interest == pytest.approx(588.06, abs=0.02)
    assert first.amortization == pytest.approx(154.08, abs=0.02)
    assert first.final_balance == pytest.approx(156_663.20, abs=0.02)


def test_equal_installment_payment_is_constant():
    schedule = generate_schedule(make_params(amortization_system=cfg.EQUAL_INSTALLMENT))
    payments = [inst.regular_payment for inst in schedule[:-1]]
    assert max(payments) == pytest.approx(min(payments))
    assert len(schedule) == 120


def test_large_one_time_extra_is_capped():
    params = make_params(
        property_value=20_000,
        down_payment=10_000,
        one_time_extras={1: 50_000},
    )
    schedule = generate_schedule(params)

    assert len(schedule) == 1
    first = schedule[0]
    assert first.amortization + first.extra_amortization == pytest.approx(10_000.0)
    assert first.extra_amortization < 50_000
    assert first.final_balance == 0.0


def test_zero_interest_rate():
    params = make_params(
        property_value=24_000,
        down_payment=12_000,
        term_months=12,
        interest_rate=0.0,
        amortization_system=cfg.EQUAL_INSTALLMENT,
    )
    result = simulate(params)

    assert result.months == 12
    assert result.total_interest == 0.0
    for inst in result.installments:
        assert inst.regular_payment == pytest.approx(1_000.0)


# ─── Properties ──────────────────────────────────────────────────────

@pytest.mark.parametrize("system,strategy", VARIANTS)
@pytest.mark.parametrize("extra", [0.0, 300.0, 2_500.0])
def test_ends_paid_off_or_at_term(system, strategy, extra):
    params = make_params(amortization_system=system, strategy=strategy, monthly_extra=extra)
    schedule = generate_schedule(params)

    assert len(schedule) <= params.term_months
    assert schedule[-1].final_balance <= cfg.PAYOFF_TOLERANCE or len(schedule) == params.term_months


@pytest.mark.parametrize("system,strategy", VARIANTS)
def test_more_extra_never_lengthens_schedule(system, strategy):
    lengths = [
        len(generate_schedule(make_params(
            amortization_system=system, strategy=strategy, monthly_extra=extra,
        )))
        for extra in [0, 100, 500, 1_000, 5_000, 50_000]
    ]
    assert lengths == sorted(lengths, reverse=True)
    assert lengths[-1] < lengths[0]


def test_identical_inputs_give_identical_output():
    params = make_params(
        amortization_system=cfg.EQUAL_INSTALLMENT,
        monthly_extra=250.0,
        one_time_extras={6: 10_000, 30: 5_000},
        appreciation_rate=6.0,
        insurance_balance_rate=0.0003,
        fgts=FGTSConfig(5_000, 8_000, True),
    )
    assert generate_schedule(params) == generate_schedule(params)


@pytest.mark.parametrize("system,strategy", VARIANTS)
def test_balance_conservation(system, strategy):
    params = make_params(
        amortization_system=system,
        strategy=strategy,
        monthly_extra=400.0,
        one_time_extras={12: 20_000},
    )
    schedule = generate_schedule(params)

    for inst in schedule:
        expected = inst.initial_balance - inst.amortization - inst.extra_amortization
        assert inst.final_balance == pytest.approx(expected, abs=1e-6)
        assert inst.final_balance >= 0.0
    for prev, nxt in zip(schedule, schedule[1:]):
        assert nxt.initial_balance == prev.final_balance
        assert nxt.month == prev.month + 1


@pytest.mark.parametrize("system,strategy", VARIANTS)
def test_interest_saved_is_non_negative(system, strategy):
    result = simulate(make_params(
        amortization_system=system, strategy=strategy, monthly_extra=500.0,
    ))
    assert result.interest_saved == result.baseline_interest - result.total_interest
    assert result.interest_saved >= 0
    assert result.total_saved == result.interest_saved


def test_reduce_installment_lowers_payment():
    params = make_params(
        amortization_system=cfg.EQUAL_INSTALLMENT,
        strategy=cfg.REDUCE_INSTALLMENT,
        monthly_extra=500.0,
    )
    schedule = generate_schedule(params)
    payments = [inst.regular_payment for inst in schedule]

    assert all(later < earlier for earlier, later in zip(payments, payments[1:]))


def test_reduce_term_keeps_payment_and_shortens_loan():
    params = make_params(amortization_system=cfg.EQUAL_INSTALLMENT, monthly_extra=500.0)
    schedule = generate_schedule(params)

    assert len(schedule) < 120
    assert schedule[1].regular_payment == pytest.approx(schedule[0].regular_payment)


# ─── Fees, appreciation and calendar ─────────────────────────────────

def test_fees_and_cash_flow():
    params = make_params(
        insurance_balance_rate=0.001,
        insurance_property_rate=0.0001,
        admin_fee=25.0,
        appreciation_rate=10.0,
        monthly_extra=100.0,
    )
    schedule = generate_schedule(params)
    first, later = schedule[0], schedule[50]

    assert first.insurance_balance == pytest.approx(100.0)
    assert later.insurance_balance == pytest.approx(later.initial_balance * 0.001)
    # Based on the purchase price, not the appreciated value
    assert first.insurance_property == pytest.approx(20.0)
    assert later.insurance_property == pytest.approx(20.0)
    assert first.total_payment == pytest.approx(first.regular_payment + 100.0 + 20.0 + 25.0)
    assert first.total_cash_flow == pytest.approx(first.total_payment + 100.0)


def test_property_appreciates_and_equity():
    schedule = generate_schedule(make_params(appreciation_rate=12.0))
    month_12 = schedule[11]

    assert month_12.property_value == pytest.approx(200_000 * 1.12)
    assert month_12.net_equity == pytest.approx(month_12.property_value - month_12.final_balance)


def test_year_index():
    schedule = generate_schedule(make_params())
    assert [schedule[i].year for i in (0, 11, 12, 23, 24)] == [1, 1, 2, 2, 3]


# ─── FGTS wallet ─────────────────────────────────────────────────────

def test_fgts_applied_every_24_months():
    params = make_params(
        property_value=300_000,
        down_payment=100_000,
        term_months=360,
        fgts=FGTSConfig(initial_balance=10_000, monthly_gross_income=10_000, use_every_two_years=True),
    )
    schedule = generate_schedule(params)

    assert params.fgts.monthly_deposit == pytest.approx(800.0)
    assert all(inst.fgts_applied == 0.0 for inst in schedule[:23])
    assert schedule[23].fgts_applied == pytest.approx(10_000 + 24 * 800)
    assert schedule[23].extra_amortization == pytest.approx(29_200)
    assert schedule[47].fgts_applied == pytest.approx(24 * 800)


def test_fgts_disabled_never_applies():
    params = make_params(fgts=FGTSConfig(10_000, 10_000, use_every_two_years=False))
    assert all(inst.fgts_applied == 0.0 for inst in generate_schedule(params))


def test_fgts_caps_against_remaining_balance():
    params = make_params(
        property_value=110_000,
        down_payment=100_000,
        fgts=FGTSConfig(initial_balance=50_000, use_every_two_years=True),
    )
    result = simulate(params)
    last = result.installments[-1]

    assert result.months == 24
    assert last.fgts_applied == pytest.approx(last.initial_balance - last.amortization)
    assert last.final_balance == pytest.approx(0.0, abs=1e-6)
    assert result.months_reduced == 96


def test_cash_extras_fill_before_fgts():
    params = make_params(
        property_value=110_000,
        down_payment=100_000,
        one_time_extras={24: 3_000},
        fgts=FGTSConfig(initial_balance=50_000, use_every_two_years=True),
    )
    last = generate_schedule(params)[-1]

    assert last.month == 24
    assert last.extra_amortization - last.fgts_applied == pytest.approx(3_000)


# ─── Baseline and aggregates ─────────────────────────────────────────

def test_baseline_drops_every_extra():
    params = make_params(
        monthly_extra=300.0,
        one_time_extras={5: 1_000},
        fgts=FGTSConfig(1_000, 5_000, True),
    )
    stripped = without_extras(params)

    assert stripped.monthly_extra == 0.0
    assert dict(stripped.one_time_extras) == {}
    assert stripped.fgts is None
    assert stripped.interest_rate == params.interest_rate
    assert len(baseline_schedule(params)) == 120


def test_simulate_aggregates():
    params = make_params(monthly_extra=500.0, admin_fee=10.0)
    result = simulate(params)

    assert result.months_reduced == 120 - result.months
    assert result.months_reduced > 0
    assert result.total_paid == pytest.approx(result.column("total_cash_flow").sum())
    assert result.total_extra == pytest.approx(result.column("extra_amortization").sum())
    assert result.total_fees == pytest.approx(10.0 * result.months)
    assert result.efficiency == pytest.approx(result.interest_saved / result.total_extra * 100)
    assert result.payoff_month == result.months
    assert result.final_property_value == result.installments[-1].property_value


def test_efficiency_zero_without_extras():
    result = simulate(make_params())
    assert result.total_extra == 0.0
    assert result.efficiency == 0.0
    assert result.interest_saved == 0.0


def test_yearly_snapshots():
    result = simulate(make_params(appreciation_rate=5.0, one_time_extras={30: 60_000}))
    snap = result.yearly_snapshots()

    assert list(snap["year"]) == list(range(11))
    assert snap["balance"][0] == 100_000
    assert snap["balance"][1] == pytest.approx(result.installments[11].final_balance)
    assert snap["property_value"][1] == pytest.approx(200_000 * 1.05)
    # Paid off early: later years show no debt but a growing property
    assert snap["balance"][-1] == pytest.approx(0.0, abs=0.01)
    assert snap["property_value"][-1] == pytest.approx(200_000 * 1.05 ** 10)
    assert snap["net_equity"][-1] == pytest.approx(snap["property_value"][-1], abs=0.01)


# ─── Validation ──────────────────────────────────────────────────────

@pytest.mark.parametrize("overrides", [
    {"term_months": 0},
    {"term_months": 12.5},
    {"term_months": math.inf},
    {"down_payment": 200_000},
    {"down_payment": -1},
    {"property_value": -5},
    {"interest_rate": math.nan},
    {"interest_rate": -1.0},
    {"appreciation_rate": math.inf},
    {"investment_rate": -100.0},
    {"monthly_extra": -10.0},
    {"rent": -1.0},
    {"amortization_system": "BALLOON"},
    {"strategy": "SKIP"},
    {"one_time_extras": {0: 1_000}},
    {"one_time_extras": {"3": 1_000}},
    {"one_time_extras": {3: -1_000}},
])
def test_invalid_parameters_rejected(overrides):
    with pytest.raises(ValueError):
        make_params(**overrides)


def test_invalid_fgts_rejected():
    with pytest.raises(ValueError):
        FGTSConfig(initial_balance=-1)


def test_one_time_extras_are_frozen():
    extras = {3: 1_000.0}
    params = make_params(one_time_extras=extras)
    extras[4] = 2_000.0

    assert dict(params.one_time_extras) == {3: 1_000.0}
    with pytest.raises(TypeError):
        params.one_time_extras[5] = 1.0
