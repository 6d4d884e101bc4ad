import pytest

from hfp.roth import convert_to_roth
from hfp.schema import Person, PlanSettings
from hfp.tax import apply_taxes, compute_total_tax
from hfp.validate import validate_cash_flow
from tests.helpers import make_summary


@pytest.fixture
def roth_settings() -> PlanSettings:
    return PlanSettings(filing_status="single", state="FL", roth_conversions=True)


def _settled_year(birth_year: int = 1965, *, qualified: float = 200_000.0, invested: float = 20_000.0, deficit: float = 0.0):
    return make_summary(
        2030,
        {
            "A": {
                "income": 50_000.0,
                "qualified_assets": qualified,
                "non_qualified_contributions": invested,
                "non_qualified_assets": invested,
                "deficit": deficit,
            }
        },
        persons={"A": Person(name="A", birth_year=birth_year)},
    )


def test_conversion_fills_current_bracket_and_funds_tax_from_surplus(roth_settings):
    result = convert_to_roth(None, _settled_year(), roth_settings)

    # 50,000 sits in the 22% bracket, which tops out at 103,350.
    assert result.roth_conversions == pytest.approx(53_350.0)
    assert result.qualified_withdrawals == pytest.approx(53_350.0)
    assert result.qualified_assets == pytest.approx(146_650.0)
    assert result.roth_assets == pytest.approx(53_350.0)
    assert result.non_qualified_contributions == pytest.approx(20_000.0 - 11_737.0)
    assert result.non_qualified_assets == pytest.approx(20_000.0 - 11_737.0)


def test_conversion_tax_beyond_surplus_is_withheld(roth_settings):
    result = convert_to_roth(None, _settled_year(invested=5_000.0), roth_settings)

    assert result.roth_conversions == pytest.approx(53_350.0)
    assert result.non_qualified_contributions == pytest.approx(0.0)
    assert result.roth_contributions == pytest.approx(53_350.0 - 6_737.0)
    assert result.roth_assets == pytest.approx(53_350.0 - 6_737.0)


def test_conversion_is_capped_at_qualified_balance(roth_settings):
    result = convert_to_roth(None, _settled_year(qualified=10_000.0), roth_settings)

    assert result.roth_conversions == pytest.approx(10_000.0)
    assert result.qualified_assets == 0.0
    assert result.non_qualified_contributions == pytest.approx(20_000.0 - 2_200.0)


def test_conversion_keeps_year_balanced(roth_settings):
    settled = _settled_year()
    # Make the pre-conversion year balanced: the surplus is what is left after tax.
    taxes = compute_total_tax(settled, roth_settings).total_tax
    settled.individuals["A"].expenses = 50_000.0 - taxes - 20_000.0
    settled.resync("expenses")
    assert validate_cash_flow(apply_taxes(None, settled, roth_settings))

    converted = convert_to_roth(None, settled, roth_settings)

    assert validate_cash_flow(apply_taxes(None, converted, roth_settings))


@pytest.mark.parametrize(
    ("summary_kwargs", "settings_kwargs"),
    [
        ({}, {"roth_conversions": False}),
        ({"deficit": 100.0}, {}),
        ({"birth_year": 1980}, {}),
    ],
)
def test_conversion_skipped(roth_settings, summary_kwargs, settings_kwargs):
    settings = PlanSettings(
        filing_status=roth_settings.filing_status,
        state=roth_settings.state,
        roth_conversions=settings_kwargs.get("roth_conversions", True),
    )
    result = convert_to_roth(None, _settled_year(**summary_kwargs), settings)
    assert result.roth_conversions == 0.0
    assert result.qualified_assets == 200_000.0


def test_no_conversion_in_top_bracket(roth_settings):
    summary = _settled_year()
    summary.individuals["A"].income = 1_000_000.0
    summary.resync("income")

    result = convert_to_roth(None, summary, roth_settings)

    assert result.roth_conversions == 0.0
