import pytest

from hfp.schema import Person, PlanSettings
from hfp.tax import (
    apply_taxes,
    bracket_room,
    compute_additional_medicare_tax,
    compute_capital_gains_tax,
    compute_federal_income_tax,
    compute_medicare_tax,
    compute_social_security_tax,
    compute_state_tax,
    compute_total_tax,
    ordinary_taxable_income,
)
from tests.helpers import make_summary


@pytest.mark.parametrize(
    ("income", "status", "expected"),
    [
        (0, "single", 0.0),
        (10_000, "single", 1_000.0),
        (100_000, "single", 16_914.0),
        (96_950, "married_filing_jointly", 11_157.0),
        (96_950, "MFJ", 11_157.0),
    ],
)
def test_federal_income_tax_is_progressive(income, status, expected):
    assert round(compute_federal_income_tax(income, status), 2) == expected


@pytest.mark.parametrize(
    ("income", "state", "status", "expected"),
    [
        (50_000, "NJ", "single", 1_270.0),
        (100_000, "NJ", "married_filing_jointly", 2_750.0),
        (10_000, "NY", "single", 407.5),
        (250_000, "FL", "single", 0.0),
        (50_000, "nj", "single", 1_270.0),
    ],
)
def test_state_tax_tables(income, state, status, expected):
    assert round(compute_state_tax(income, state, status), 2) == expected


def test_unsupported_state_raises():
    with pytest.raises(ValueError, match="Unsupported state"):
        compute_state_tax(10_000, "TX", "single")


def test_social_security_tax_respects_wage_base_and_self_employment():
    assert round(compute_social_security_tax(100_000), 2) == 6_200.0
    assert round(compute_social_security_tax(200_000), 2) == 11_439.0
    assert round(compute_social_security_tax(100_000, self_employed=True), 2) == 12_400.0
    assert compute_social_security_tax(-5) == 0.0


def test_medicare_tax_and_additional_medicare():
    assert round(compute_medicare_tax(100_000), 2) == 1_450.0
    assert round(compute_medicare_tax(100_000, self_employed=True), 2) == 2_900.0
    assert round(compute_additional_medicare_tax(300_000, "married_filing_jointly"), 2) == 450.0
    assert compute_additional_medicare_tax(150_000, "single") == 0.0


def test_capital_gains_tax_applies_to_gain_portion():
    # 200k proceeds at a 25% basis is a 150k gain; 101,600 sits in the 0% bracket.
    assert round(compute_capital_gains_tax(200_000, "married_filing_jointly"), 2) == 7_260.0
    assert round(compute_capital_gains_tax(100_000, "single", 0.25), 2) == 3_630.0
    assert compute_capital_gains_tax(100_000, "single", 1.0) == 0.0


def test_bracket_room():
    assert bracket_room(100_000, "married_filing_jointly") == 106_700.0
    assert bracket_room(96_950, "married_filing_jointly") == 206_700.0 - 96_950.0
    assert bracket_room(800_000, "married_filing_jointly") == 0.0
    assert bracket_room(10_000_000, "single") == 0.0


def test_ordinary_income_includes_taxable_social_security():
    summary = make_summary(
        2030,
        {"A": {"income": 100_000.0, "social_security_benefits": 20_000.0, "rmd_withdrawals": 5_000.0}},
    )
    assert ordinary_taxable_income(summary) == pytest.approx(122_000.0)


def test_total_tax_computes_fica_per_person():
    settings = PlanSettings(filing_status="married_filing_jointly", state="FL")
    summary = make_summary(2030, {"A": {"income": 180_000.0}, "B": {"income": 120_000.0}})
    result = compute_total_tax(summary, settings)

    # Each earner is under the wage base on their own.
    assert round(result.social_security_tax, 2) == 18_600.0
    assert round(result.medicare_tax, 2) == round(300_000 * 0.0145 + 50_000 * 0.009, 2)
    assert result.individual_social_security_tax["A"] == pytest.approx(11_160.0)
    assert result.capital_gains_tax == 0.0
    assert result.total_tax == pytest.approx(
        result.federal_income_tax + result.social_security_tax + result.medicare_tax
    )


def test_apply_taxes_records_totals_without_touching_input(flat_settings):
    summary = make_summary(
        2030,
        {"A": {"income": 100_000.0, "non_qualified_withdrawals": 100_000.0}},
        persons={"A": Person(name="A", birth_year=1970)},
    )
    taxed = apply_taxes(None, summary, flat_settings)

    assert round(taxed.federal_income_tax, 2) == 16_914.0
    assert taxed.state_income_tax == 0.0
    assert round(taxed.capital_gains_tax, 2) == 3_630.0
    assert round(taxed.individuals["A"].social_security_tax, 2) == 6_200.0
    assert summary.federal_income_tax == 0.0
    assert summary.individuals["A"].social_security_tax == 0.0
    assert taxed.non_qualified_withdrawals == summary.non_qualified_withdrawals
