import pytest

from hfp.rmd import apply_rmds, compute_rmd_amount, divisor_for_age, is_rmd_required, rmd_start_age
from hfp.schema import Person, PlanSettings
from tests.helpers import make_summary


@pytest.mark.parametrize(
    ("birth_year", "expected"),
    [(1945, 72), (1950, 72), (1951, 73), (1959, 73), (1960, 75), (1975, 75)],
)
def test_rmd_start_age_by_birth_year(birth_year, expected):
    assert rmd_start_age(birth_year) == expected


def test_is_rmd_required_thresholds():
    assert not is_rmd_required(74, 1960)
    assert is_rmd_required(75, 1960)
    assert is_rmd_required(73, 1955)
    assert not is_rmd_required(71, 1950)


def test_compute_rmd_amount_for_age_73():
    assert round(compute_rmd_amount(73, 265_000), 2) == 10_000.00


def test_compute_rmd_amount_edges():
    assert compute_rmd_amount(70, 100_000) == 0.0
    assert compute_rmd_amount(80, 0) == 0.0
    assert divisor_for_age(72) == 27.4
    assert divisor_for_age(125) == 2.0
    assert compute_rmd_amount(130, 10_000) == 5_000.0


def _year(qualified: float, birth_year: int = 1950, year: int = 2025):
    persons = {"A": Person(name="A", birth_year=birth_year)}
    return make_summary(year, {"A": {"qualified_assets": qualified}}, persons=persons)


def test_apply_rmds_uses_prior_balance():
    previous = _year(246_000.0, year=2024)
    current = _year(250_000.0)

    result = apply_rmds(previous, current, PlanSettings())

    assert round(result.rmd_withdrawals, 2) == 10_000.00
    assert round(result.individuals["A"].qualified_assets, 2) == 240_000.00
    assert round(result.qualified_assets, 2) == 240_000.00
    assert current.rmd_withdrawals == 0.0
    assert current.individuals["A"].qualified_assets == 250_000.0


def test_apply_rmds_is_capped_at_current_balance():
    previous = _year(246_000.0, year=2024)
    current = _year(5_000.0)

    result = apply_rmds(previous, current, PlanSettings())

    assert result.rmd_withdrawals == 5_000.0
    assert result.individuals["A"].qualified_assets == 0.0


def test_apply_rmds_skips_people_below_start_age_or_without_records():
    persons = {"Young": Person(name="Young", birth_year=1960)}
    previous = make_summary(2030, {"Young": {"qualified_assets": 100_000.0}, "Nobody": {"qualified_assets": 100_000.0}}, persons)
    current = make_summary(2031, {"Young": {"qualified_assets": 100_000.0}, "Nobody": {"qualified_assets": 100_000.0}}, persons)

    result = apply_rmds(previous, current, PlanSettings())

    assert result.rmd_withdrawals == 0.0
    assert result.individuals["Young"].rmd_withdrawals == 0.0
    assert result.individuals["Nobody"].rmd_withdrawals == 0.0
    assert result.qualified_assets == 200_000.0


def test_apply_rmds_first_year_has_no_prior_balance():
    result = apply_rmds(None, _year(100_000.0), PlanSettings())
    assert result.rmd_withdrawals == 0.0
