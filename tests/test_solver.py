import pytest

import config as cfg
from simulation import FGTSConfig, SimulationParameters
from solver import estimate_extra_for_target, schedule_length, solve_extra_for_target


def make_params(**overrides):
    base = dict(
        property_value=200_000,
        down_payment=100_000,
        term_months=120,
        interest_rate=10.0,
    )
    base.update(overrides)
    return SimulationParameters(**base)


@pytest.mark.parametrize("system,strategy", [
    (cfg.EQUAL_AMORTIZATION, cfg.REDUCE_TERM),
    (cfg.EQUAL_INSTALLMENT, cfg.REDUCE_TERM),
    (cfg.EQUAL_INSTALLMENT, cfg.REDUCE_INSTALLMENT),
])
def test_solver_hits_half_term(system, strategy):
    params = make_params(amortization_system=system, strategy=strategy)
    target = params.term_months // 2
    extra = solve_extra_for_target(params, target)

    # Final bracket width after the fixed bisection steps
    step = params.principal / 2 ** (cfg.SOLVER_ITERATIONS - 1)
    assert target - 1 <= schedule_length(params, extra) <= target
    assert schedule_length(params, extra - step) > target
    assert 0 < extra < params.principal


def test_solver_result_shrinks_as_target_grows():
    params = make_params()
    extras = [solve_extra_for_target(params, t) for t in (24, 60, 100)]
    assert extras == sorted(extras, reverse=True)


def test_solver_keeps_other_extras():
    plain = make_params()
    with_lump = make_params(
        one_time_extras={1: 30_000},
        fgts=FGTSConfig(initial_balance=5_000, monthly_gross_income=5_000, use_every_two_years=True),
    )
    assert solve_extra_for_target(with_lump, 60) < solve_extra_for_target(plain, 60)


def test_solver_target_not_shorter_than_term():
    params = make_params()
    assert solve_extra_for_target(params, 120) == 0.0
    assert solve_extra_for_target(params, 200) == 0.0


def test_solver_rejects_bad_target():
    with pytest.raises(ValueError):
        solve_extra_for_target(make_params(), 0)
    with pytest.raises(ValueError):
        estimate_extra_for_target(make_params(), 0)


def test_estimate_equal_amortization():
    # Difference of the straight-line principal share: 100k/60 - 100k/120
    assert estimate_extra_for_target(make_params(), 60) == pytest.approx(833.33, abs=0.01)
    assert estimate_extra_for_target(make_params(), 120) == 0.0


def test_estimate_close_to_solver_for_equal_installment():
    params = make_params(amortization_system=cfg.EQUAL_INSTALLMENT)
    estimate = estimate_extra_for_target(params, 60)
    solved = solve_extra_for_target(params, 60)

    assert estimate > 0
    assert solved == pytest.approx(estimate, rel=0.05)
