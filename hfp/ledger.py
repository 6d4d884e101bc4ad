"""Build each year's raw summary from entries and the prior year's balances."""

from __future__ import annotations

from collections import defaultdict
from typing import Final, Iterable, Mapping

from .mortgage import amortize_year, annual_payment
from .schema import Entry, ItemType, Person
from .summary import MORTGAGE_FIELDS, IndividualYearlySummary, YearlySummary, SummaryFields

# Recomputed every year from the entries active that year.
FLOW_FIELDS: Final[dict[ItemType, str]] = {
    ItemType.INCOME: "income",
    ItemType.EXPENSE: "expenses",
    ItemType.ROTH_CONTRIBUTION: "scheduled_roth_contributions",
    ItemType.QUALIFIED_CONTRIBUTION: "scheduled_qualified_contributions",
    ItemType.LIFE_INSURANCE_CONTRIBUTION: "scheduled_life_insurance_contributions",
}

# Carried from the prior year's ending balance, plus entries starting this year.
STOCK_FIELDS: Final[dict[ItemType, str]] = {
    ItemType.QUALIFIED: "qualified_assets",
    ItemType.NON_QUALIFIED: "non_qualified_assets",
    ItemType.ROTH: "roth_assets",
    ItemType.CASH: "cash",
    ItemType.REAL_ESTATE: "real_estate",
    ItemType.LIFE_INSURANCE_BENEFIT: "life_insurance_benefits",
    ItemType.SOCIAL_SECURITY_BENEFITS: "social_security_benefits",
}


def owner_names(entries: Iterable[Entry]) -> list[str]:
    return sorted({entry.owner for entry in entries})


def _rate(rates: Mapping[ItemType, float], item_type: ItemType) -> float:
    return float(rates.get(item_type, 0.0))


def _accumulate(
    bucket: SummaryFields,
    prior: SummaryFields | None,
    entries: Iterable[Entry],
    rates: Mapping[ItemType, float],
) -> None:
    year = bucket.year
    for item_type, name in STOCK_FIELDS.items():
        carried = 0.0 if prior is None else getattr(prior, name) * (1.0 + _rate(rates, item_type) / 100.0)
        setattr(bucket, name, carried)

    for entry in entries:
        name = FLOW_FIELDS.get(entry.item_type)
        if name is not None:
            setattr(bucket, name, getattr(bucket, name) + entry.value_for_year(year, _rate(rates, entry.item_type)))
            continue
        name = STOCK_FIELDS.get(entry.item_type)
        if name is not None and entry.start_year == year:
            setattr(bucket, name, getattr(bucket, name) + entry.value)


def _amortize(
    bucket: SummaryFields,
    prior: SummaryFields | None,
    entries: Iterable[Entry],
    rates: Mapping[ItemType, float],
) -> None:
    year = bucket.year
    mortgage_rate = _rate(rates, ItemType.MORTGAGE)
    balance = 0.0 if prior is None else prior.mortgage_balance
    scheduled = 0.0
    extra = 0.0
    for entry in entries:
        if entry.item_type is ItemType.MORTGAGE:
            if entry.start_year == year:
                balance += entry.value
            if entry.is_active(year):
                scheduled += annual_payment(entry.value, mortgage_rate, entry.end_year - entry.start_year + 1)
        elif entry.item_type is ItemType.MORTGAGE_REPAYMENT:
            extra += entry.value_for_year(year, _rate(rates, ItemType.MORTGAGE_REPAYMENT))

    result = amortize_year(
        balance=balance,
        rate_percent=mortgage_rate,
        scheduled_payment=scheduled,
        extra_principal=extra,
    )
    bucket.mortgage_payment = result.payment
    bucket.mortgage_repayment = result.extra_principal
    bucket.mortgage_balance = result.closing_balance


def build_year(
    year: int,
    entries: list[Entry],
    rates: Mapping[ItemType, float],
    persons: Mapping[str, Person],
    previous: YearlySummary | None,
    owners: list[str] | None = None,
) -> YearlySummary:
    """Raw summary for `year`: ledger fields filled, pipeline fields at zero."""
    by_owner: dict[str, list[Entry]] = defaultdict(list)
    for entry in entries:
        by_owner[entry.owner].append(entry)

    individuals: dict[str, IndividualYearlySummary] = {}
    for name in owners if owners is not None else owner_names(entries):
        prior = previous.individuals.get(name) if previous is not None else None
        individual = IndividualYearlySummary(year=year, name=name, person=persons.get(name))
        _accumulate(individual, prior, by_owner.get(name, []), rates)
        _amortize(individual, prior, by_owner.get(name, []), rates)
        individuals[name] = individual

    summary = YearlySummary(year=year, individuals=individuals)
    _accumulate(summary, previous, entries, rates)
    # Loans amortize per owner, so the household figures are their sum.
    summary.resync(*MORTGAGE_FIELDS)
    return summary
