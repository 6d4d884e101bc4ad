"""Yearly and per-person summaries produced by the projection."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping

from .schema import Person

BALANCE_FIELDS: tuple[str, ...] = ("non_qualified_assets", "qualified_assets", "roth_assets", "cash")
ASSET_FIELDS: tuple[str, ...] = BALANCE_FIELDS + ("real_estate", "life_insurance_benefits")
MORTGAGE_FIELDS: tuple[str, ...] = ("mortgage_balance", "mortgage_payment", "mortgage_repayment")
WITHDRAWAL_FIELDS: tuple[str, ...] = (
    "rmd_withdrawals",
    "qualified_withdrawals",
    "non_qualified_withdrawals",
    "roth_withdrawals",
    "cash_withdrawals",
)
CONTRIBUTION_FIELDS: tuple[str, ...] = (
    "roth_contributions",
    "qualified_contributions",
    "non_qualified_contributions",
    "life_insurance_contributions",
)


@dataclass(slots=True, kw_only=True)
class SummaryFields:
    year: int

    # Ledger-owned: flows recomputed each year, stocks carried forward.
    income: float = 0.0
    expenses: float = 0.0
    social_security_benefits: float = 0.0
    qualified_assets: float = 0.0
    non_qualified_assets: float = 0.0
    roth_assets: float = 0.0
    cash: float = 0.0
    real_estate: float = 0.0
    life_insurance_benefits: float = 0.0
    mortgage_balance: float = 0.0
    mortgage_payment: float = 0.0
    mortgage_repayment: float = 0.0
    scheduled_roth_contributions: float = 0.0
    scheduled_qualified_contributions: float = 0.0
    scheduled_life_insurance_contributions: float = 0.0

    # Pipeline-owned.
    rmd_withdrawals: float = 0.0
    qualified_withdrawals: float = 0.0
    non_qualified_withdrawals: float = 0.0
    roth_withdrawals: float = 0.0
    cash_withdrawals: float = 0.0
    roth_contributions: float = 0.0
    qualified_contributions: float = 0.0
    non_qualified_contributions: float = 0.0
    life_insurance_contributions: float = 0.0
    roth_conversions: float = 0.0
    deficit: float = 0.0
    social_security_tax: float = 0.0
    medicare_tax: float = 0.0

    @property
    def total_withdrawals(self) -> float:
        return sum(getattr(self, name) for name in WITHDRAWAL_FIELDS)

    @property
    def total_contributions(self) -> float:
        return sum(getattr(self, name) for name in CONTRIBUTION_FIELDS)

    @property
    def total_taxes(self) -> float:
        return self.social_security_tax + self.medicare_tax

    @property
    def total_cash_inflows(self) -> float:
        return self.income + self.social_security_benefits + self.total_withdrawals

    @property
    def total_cash_outflows(self) -> float:
        return (
            self.expenses
            + self.total_taxes
            + self.total_contributions
            + self.mortgage_payment
            + self.mortgage_repayment
        )

    @property
    def total_assets(self) -> float:
        return sum(getattr(self, name) for name in ASSET_FIELDS)

    @property
    def net_worth(self) -> float:
        return self.total_assets - self.mortgage_balance


@dataclass(slots=True, kw_only=True)
class IndividualYearlySummary(SummaryFields):
    name: str
    person: Person | None = None

    @property
    def age(self) -> int | None:
        if self.person is None:
            return None
        return self.person.age_in_year(self.year)


@dataclass(slots=True, kw_only=True)
class YearlySummary(SummaryFields):
    federal_income_tax: float = 0.0
    state_income_tax: float = 0.0
    capital_gains_tax: float = 0.0
    individuals: Mapping[str, IndividualYearlySummary] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.individuals = MappingProxyType(dict(self.individuals))

    @property
    def total_taxes(self) -> float:
        return (
            self.federal_income_tax
            + self.state_income_tax
            + self.capital_gains_tax
            + self.social_security_tax
            + self.medicare_tax
        )

    def copy(self) -> "YearlySummary":
        """Return a copy whose per-person summaries can be changed independently."""
        return replace(self, individuals={name: replace(person) for name, person in self.individuals.items()})

    def resync(self, *field_names: str) -> None:
        """Set aggregate fields to the sum of the matching per-person fields."""
        for name in field_names:
            setattr(self, name, sum(getattr(person, name) for person in self.individuals.values()))
