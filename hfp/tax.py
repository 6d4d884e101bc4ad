"""Tax computation helpers and the year-end tax rule."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging

from .schema import FilingStatus, PlanSettings
from .summary import YearlySummary
from .tax_data import (
    ADDITIONAL_MEDICARE_THRESHOLDS,
    CAPITAL_GAINS_BRACKETS,
    DEFAULT_COST_BASIS_FRACTION,
    FEDERAL_BRACKETS,
    FICA_RATES,
    STATE_BRACKETS,
    TAXABLE_SOCIAL_SECURITY_FRACTION,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TaxResult:
    federal_income_tax: float
    state_income_tax: float
    capital_gains_tax: float
    social_security_tax: float
    medicare_tax: float
    ordinary_income: float
    capital_gains: float
    individual_social_security_tax: dict[str, float] = field(default_factory=dict)
    individual_medicare_tax: dict[str, float] = field(default_factory=dict)

    @property
    def income_tax(self) -> float:
        return self.federal_income_tax + self.state_income_tax

    @property
    def total_tax(self) -> float:
        return (
            self.federal_income_tax
            + self.state_income_tax
            + self.capital_gains_tax
            + self.social_security_tax
            + self.medicare_tax
        )


def _status_key(filing_status: FilingStatus | str) -> str:
    return FilingStatus.parse(filing_status).value


def _progressive_tax(amount: float, brackets: list[tuple[float | None, float]]) -> float:
    if amount <= 0:
        return 0.0

    remaining = amount
    lower = 0.0
    tax = 0.0
    for upper, rate in brackets:
        if remaining <= 0:
            break
        if upper is None:
            taxable_at_rate = remaining
        else:
            span = max(0.0, upper - lower)
            taxable_at_rate = min(remaining, span)
        tax += taxable_at_rate * rate
        remaining -= taxable_at_rate
        if upper is None:
            break
        lower = upper
    return max(0.0, tax)


def compute_federal_income_tax(taxable_income: float, filing_status: FilingStatus | str) -> float:
    return _progressive_tax(taxable_income, FEDERAL_BRACKETS[_status_key(filing_status)])


def compute_state_tax(taxable_income: float, state: str, filing_status: FilingStatus | str) -> float:
    table = STATE_BRACKETS.get(state.strip().upper())
    if table is None:
        raise ValueError(f"Unsupported state: {state!r}")
    return _progressive_tax(taxable_income, table[_status_key(filing_status)])


def compute_social_security_tax(wages: float, self_employed: bool = False) -> float:
    """Social Security payroll tax for one earner, capped at the wage base."""
    if wages <= 0:
        return 0.0
    rate = FICA_RATES["social_security_rate"] * (2.0 if self_employed else 1.0)
    return min(wages, FICA_RATES["social_security_wage_base"]) * rate


def compute_medicare_tax(wages: float, self_employed: bool = False) -> float:
    if wages <= 0:
        return 0.0
    return wages * FICA_RATES["medicare_rate"] * (2.0 if self_employed else 1.0)


def compute_additional_medicare_tax(household_wages: float, filing_status: FilingStatus | str) -> float:
    threshold = ADDITIONAL_MEDICARE_THRESHOLDS[_status_key(filing_status)]
    return max(0.0, household_wages - threshold) * FICA_RATES["additional_medicare_rate"]


def compute_capital_gains_tax(
    proceeds: float,
    filing_status: FilingStatus | str,
    cost_basis_fraction: float = DEFAULT_COST_BASIS_FRACTION,
) -> float:
    """Long-term capital gains tax on the gain portion of a non-qualified sale."""
    if proceeds <= 0:
        return 0.0
    gain = proceeds * (1.0 - cost_basis_fraction)
    return _progressive_tax(gain, CAPITAL_GAINS_BRACKETS[_status_key(filing_status)])


def bracket_room(taxable_income: float, filing_status: FilingStatus | str) -> float:
    """Income that can be added before leaving the current federal bracket; 0 in the top bracket."""
    for upper, _rate in FEDERAL_BRACKETS[_status_key(filing_status)]:
        if upper is None:
            return 0.0
        if taxable_income < upper:
            return upper - max(0.0, taxable_income)
    return 0.0


def ordinary_taxable_income(summary: YearlySummary) -> float:
    return (
        summary.income
        + summary.rmd_withdrawals
        + summary.qualified_withdrawals
        + summary.social_security_benefits * TAXABLE_SOCIAL_SECURITY_FRACTION
    )


def compute_income_tax(ordinary_income: float, settings: PlanSettings) -> float:
    """Federal plus state tax on ordinary income."""
    return compute_federal_income_tax(ordinary_income, settings.filing_status) + compute_state_tax(
        ordinary_income, settings.state, settings.filing_status
    )


def compute_total_tax(summary: YearlySummary, settings: PlanSettings) -> TaxResult:
    ordinary = max(0.0, ordinary_taxable_income(summary))
    proceeds = max(0.0, summary.non_qualified_withdrawals)

    ss_by_person: dict[str, float] = {}
    medicare_by_person: dict[str, float] = {}
    earners = {name: person.income for name, person in summary.individuals.items()}
    if not earners:
        earners = {"": summary.income}
    for name, wages in earners.items():
        ss_by_person[name] = compute_social_security_tax(wages, settings.self_employed)
        medicare_by_person[name] = compute_medicare_tax(wages, settings.self_employed)

    household_wages = sum(max(0.0, wages) for wages in earners.values())
    additional = compute_additional_medicare_tax(household_wages, settings.filing_status)
    if additional > 0:
        for name, wages in earners.items():
            medicare_by_person[name] += additional * max(0.0, wages) / household_wages

    return TaxResult(
        federal_income_tax=compute_federal_income_tax(ordinary, settings.filing_status),
        state_income_tax=compute_state_tax(ordinary, settings.state, settings.filing_status),
        capital_gains_tax=compute_capital_gains_tax(proceeds, settings.filing_status, settings.cost_basis_fraction),
        social_security_tax=sum(ss_by_person.values()),
        medicare_tax=sum(medicare_by_person.values()),
        ordinary_income=ordinary,
        capital_gains=proceeds * (1.0 - settings.cost_basis_fraction),
        individual_social_security_tax=ss_by_person,
        individual_medicare_tax=medicare_by_person,
    )


def apply_taxes(
    previous: YearlySummary | None,
    current: YearlySummary,
    settings: PlanSettings,
) -> YearlySummary:
    """Record the year's five tax totals; withdrawals are left as settled."""
    summary = current.copy()
    result = compute_total_tax(summary, settings)
    summary.federal_income_tax = result.federal_income_tax
    summary.state_income_tax = result.state_income_tax
    summary.capital_gains_tax = result.capital_gains_tax
    summary.social_security_tax = result.social_security_tax
    summary.medicare_tax = result.medicare_tax
    for name, person in summary.individuals.items():
        person.social_security_tax = result.individual_social_security_tax.get(name, 0.0)
        person.medicare_tax = result.individual_medicare_tax.get(name, 0.0)
    logger.debug(
        "%d: ordinary income %.2f, total tax %.2f",
        summary.year,
        result.ordinary_income,
        result.total_tax,
    )
    return summary
