"""Plan validation and audit checks over projected summaries."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Final, Sequence

from .schema import FilingStatus, Plan, UNKNOWN_OWNER
from .summary import BALANCE_FIELDS, YearlySummary
from .tax_data import SUPPORTED_STATES

TOLERANCE: Final[float] = 0.01

# Aggregate fields that must equal the sum over people.
INDIVIDUAL_TOTAL_FIELDS: Final[tuple[str, ...]] = (
    "income",
    "rmd_withdrawals",
    "roth_withdrawals",
    "qualified_withdrawals",
    "non_qualified_withdrawals",
    "social_security_benefits",
)

UNUSUAL_RATE_PERCENT: Final[float] = 15.0


@dataclass(slots=True)
class ValidationResult:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def individual_total_mismatches(summary: YearlySummary) -> list[str]:
    problems: list[str] = []
    for name in INDIVIDUAL_TOTAL_FIELDS:
        total = getattr(summary, name)
        combined = sum(getattr(person, name) for person in summary.individuals.values())
        if abs(total - combined) > TOLERANCE:
            problems.append(f"{summary.year}.{name}: total {total:.2f} != sum of individuals {combined:.2f}")
    return problems


def validate_individual_totals(summary: YearlySummary) -> bool:
    return not individual_total_mismatches(summary)


def cash_flow_mismatch(summary: YearlySummary) -> str | None:
    inflows = summary.total_cash_inflows
    outflows = summary.total_cash_outflows
    if abs(inflows + summary.deficit - outflows) > TOLERANCE:
        return (
            f"{summary.year}: inflows {inflows:.2f} + deficit {summary.deficit:.2f} "
            f"!= outflows {outflows:.2f}"
        )
    return None


def validate_cash_flow(summary: YearlySummary) -> bool:
    return cash_flow_mismatch(summary) is None


def validate_projection(summaries: Sequence[YearlySummary]) -> ValidationResult:
    result = ValidationResult()
    for idx, summary in enumerate(summaries):
        if idx > 0 and summary.year != summaries[idx - 1].year + 1:
            result.errors.append(f"{summary.year}: expected year {summaries[idx - 1].year + 1}")

        result.errors.extend(individual_total_mismatches(summary))
        mismatch = cash_flow_mismatch(summary)
        if mismatch is not None:
            result.errors.append(mismatch)

        for name, person in summary.individuals.items():
            for balance in BALANCE_FIELDS:
                if getattr(person, balance) < -TOLERANCE:
                    result.errors.append(f"{summary.year}.{name}.{balance}: negative balance {getattr(person, balance):.2f}")

        if summary.deficit > TOLERANCE:
            result.warnings.append(f"{summary.year}: unfunded deficit of {summary.deficit:,.2f}")
    return result


def validate_plan(plan: Plan) -> ValidationResult:
    result = ValidationResult()

    for name, count in Counter(person.name for person in plan.persons).items():
        if count > 1:
            result.errors.append(f"persons: duplicate name '{name}'")

    if plan.settings.state not in SUPPORTED_STATES:
        result.errors.append(
            f"settings.state: '{plan.settings.state}' is not supported (expected one of {', '.join(SUPPORTED_STATES)})"
        )
    if not 0.0 <= plan.settings.cost_basis_fraction <= 1.0:
        result.errors.append("settings.cost_basis_fraction: must be between 0 and 1")
    min_age = plan.settings.qualified_withdrawal_min_age
    if min_age is not None and min_age < 0:
        result.errors.append("settings.qualified_withdrawal_min_age: must be >= 0")

    known = {person.name for person in plan.persons}
    for idx, entry in enumerate(plan.entries):
        if entry.owner not in known:
            label = "has no owner" if entry.owner == UNKNOWN_OWNER else f"owner '{entry.owner}' has no person record"
            result.warnings.append(f"entries[{idx}]: {label}; no RMDs or qualified withdrawals for it")

    if plan.settings.filing_status is FilingStatus.MARRIED_FILING_JOINTLY and len(plan.persons) < 2:
        result.warnings.append("settings.filing_status: married_filing_jointly with fewer than two persons")
    if plan.settings.filing_status is FilingStatus.SINGLE and len(plan.persons) > 1:
        result.warnings.append("settings.filing_status: single with more than one person")

    for item_type, rate in plan.rates.items():
        if rate <= -100.0:
            result.errors.append(f"rates.{item_type.value}: must be greater than -100")
        elif abs(rate) > UNUSUAL_RATE_PERCENT:
            result.warnings.append(f"rates.{item_type.value}: {rate}% is unusually large")

    if not plan.entries:
        result.warnings.append("entries: plan has no entries; nothing to project")

    return result
