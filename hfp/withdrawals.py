"""Expense management: cover shortfalls by withdrawal, invest surpluses."""

from __future__ import annotations

import logging
from typing import Final

from .schema import PlanSettings
from .summary import IndividualYearlySummary, YearlySummary
from .tax import compute_total_tax

logger = logging.getLogger(__name__)

MAX_ITERATIONS: Final[int] = 100
CONVERGENCE_THRESHOLD: Final[float] = 1e-7

# (balance field, withdrawal field), drawn in this order.
WITHDRAWAL_ORDER: Final[tuple[tuple[str, str], ...]] = (
    ("non_qualified_assets", "non_qualified_withdrawals"),
    ("qualified_assets", "qualified_withdrawals"),
    ("roth_assets", "roth_withdrawals"),
    ("cash", "cash_withdrawals"),
)


def can_withdraw_qualified(individual: IndividualYearlySummary, settings: PlanSettings) -> bool:
    """Whether this person may draw on qualified money this year.

    A person without a birth record is never eligible while a minimum age is set.
    """
    min_age = settings.qualified_withdrawal_min_age
    if min_age is None:
        return True
    age = individual.age
    return age is not None and age >= min_age


def _apply_scheduled_contributions(summary: YearlySummary) -> None:
    for individual in summary.individuals.values():
        individual.roth_assets += individual.scheduled_roth_contributions
        individual.roth_contributions += individual.scheduled_roth_contributions
        individual.qualified_assets += individual.scheduled_qualified_contributions
        individual.qualified_contributions += individual.scheduled_qualified_contributions
        individual.life_insurance_contributions += individual.scheduled_life_insurance_contributions
    summary.resync(
        "roth_assets",
        "roth_contributions",
        "qualified_assets",
        "qualified_contributions",
        "life_insurance_contributions",
    )


def _cash_gap(summary: YearlySummary, estimated_tax: float) -> float:
    """Outflows not yet met by inflows or the recorded deficit; negative is a surplus."""
    outflows = summary.total_cash_outflows - summary.total_taxes + estimated_tax
    return outflows - summary.total_cash_inflows - summary.deficit


def withdraw(summary: YearlySummary, amount: float, settings: PlanSettings) -> float:
    """Draw `amount` through the withdrawal order, person by person.

    Returns the part that could not be covered.
    """
    remaining = amount
    for balance_field, withdrawal_field in WITHDRAWAL_ORDER:
        for name in sorted(summary.individuals):
            if remaining <= 0:
                break
            individual = summary.individuals[name]
            if balance_field == "qualified_assets" and not can_withdraw_qualified(individual, settings):
                continue
            available = max(0.0, getattr(individual, balance_field))
            take = min(available, remaining)
            if take <= 0:
                continue
            setattr(individual, balance_field, available - take)
            setattr(individual, withdrawal_field, getattr(individual, withdrawal_field) + take)
            remaining -= take

    summary.resync(*(name for pair in WITHDRAWAL_ORDER for name in pair))
    return max(0.0, remaining)


def _split_evenly(summary: YearlySummary, field_name: str, amount: float, balance_field: str | None = None) -> None:
    share = amount / len(summary.individuals)
    for individual in summary.individuals.values():
        setattr(individual, field_name, max(0.0, getattr(individual, field_name) + share))
        if balance_field is not None:
            setattr(individual, balance_field, getattr(individual, balance_field) + share)
    summary.resync(field_name, *((balance_field,) if balance_field else ()))


def manage_expenses(
    previous: YearlySummary | None,
    current: YearlySummary,
    settings: PlanSettings,
) -> YearlySummary:
    """Balance the year's cash flow, including the taxes the balancing itself causes.

    Shortfalls are withdrawn non-qualified, then qualified, then Roth, then
    cash; whatever is still unmet is recorded as a deficit. Surpluses first
    pay down a recorded deficit and are otherwise invested as non-qualified
    contributions split evenly across people.
    """
    summary = current.copy()
    if not summary.individuals:
        return summary

    _apply_scheduled_contributions(summary)

    gap = 0.0
    for _ in range(MAX_ITERATIONS):
        gap = _cash_gap(summary, compute_total_tax(summary, settings).total_tax)
        if abs(gap) < CONVERGENCE_THRESHOLD:
            break
        if gap > 0:
            unmet = withdraw(summary, gap, settings)
            if unmet > 0:
                _split_evenly(summary, "deficit", unmet)
            continue

        surplus = -gap
        if summary.deficit > 0:
            paid_down = min(surplus, summary.deficit)
            _split_evenly(summary, "deficit", -paid_down)
            surplus -= paid_down
        if surplus > 0:
            _split_evenly(summary, "non_qualified_contributions", surplus, balance_field="non_qualified_assets")
    else:
        logger.warning("%d: cash flow did not settle after %d passes (gap %.6f)", summary.year, MAX_ITERATIONS, gap)

    logger.debug(
        "%d: withdrawals %.2f, non-qualified contributions %.2f, deficit %.2f",
        summary.year,
        summary.total_withdrawals - summary.rmd_withdrawals,
        summary.non_qualified_contributions,
        summary.deficit,
    )
    return summary
